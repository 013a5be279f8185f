from __future__ import annotations

import math
from collections.abc import Callable

import pytest

from mileage_pricing.models import Dataset, Theta
from mileage_pricing.normalizer import denormalize_theta, normalize
from mileage_pricing.trainer import train


def test_perfect_line_recovers_slope_and_intercept(linear_dataset: Dataset) -> None:
    result = train(normalize(linear_dataset), 0.5, max_iterations=200_000)
    theta = denormalize_theta(linear_dataset, result.theta)

    assert theta.slope == pytest.approx(2.0, abs=1e-6)
    assert theta.intercept == pytest.approx(3.0, abs=1e-6)
    assert result.iterations > 1


def test_noisy_data_matches_least_squares(make_dataset: Callable[..., Dataset]) -> None:
    points = [(0.0, 1.1), (1.0, 2.9), (2.0, 5.2), (3.0, 6.8), (4.0, 9.1)]
    raw = make_dataset(points)
    result = train(normalize(raw), 0.5, tolerance=1e-14, max_iterations=500_000)
    theta = denormalize_theta(raw, result.theta)

    n = len(points)
    mean_x = sum(x for x, _ in points) / n
    mean_y = sum(y for _, y in points) / n
    slope = sum((x - mean_x) * (y - mean_y) for x, y in points) / sum(
        (x - mean_x) ** 2 for x, _ in points
    )
    intercept = mean_y - slope * mean_x
    assert theta.slope == pytest.approx(slope, abs=1e-8)
    assert theta.intercept == pytest.approx(intercept, abs=1e-8)


def test_empty_dataset_stops_after_one_iteration() -> None:
    result = train(Dataset(), 0.5)
    assert result.theta == Theta(0.0, 0.0)
    assert result.iterations == 1
    assert result.converged is True


def test_tolerance_stops_earlier_than_exact_rule(linear_dataset: Dataset) -> None:
    normalized = normalize(linear_dataset)
    loose = train(normalized, 0.5, tolerance=1e-3, max_iterations=200_000)
    tight = train(normalized, 0.5, tolerance=1e-12, max_iterations=200_000)
    assert loose.converged
    assert loose.iterations < tight.iterations


def test_iteration_cap_ends_divergent_run(linear_dataset: Dataset) -> None:
    result = train(normalize(linear_dataset), 5.0, max_iterations=50)
    assert result.converged is False
    assert result.iterations == 50
    assert not math.isfinite(result.theta.slope) or abs(result.theta.slope) > 1e3


def test_progress_callback_fires_every_n_iterations(linear_dataset: Dataset) -> None:
    seen: list[int] = []

    def _progress(iteration: int, elapsed_s: float, theta: Theta) -> None:
        assert elapsed_s >= 0.0
        assert isinstance(theta, Theta)
        seen.append(iteration)

    result = train(
        normalize(linear_dataset),
        1e-4,
        max_iterations=35,
        progress_every=10,
        progress_callback=_progress,
    )
    assert seen == [10, 20, 30]
    assert result.iterations == 35


def test_default_exact_rule_reaches_fixed_point_without_cap(linear_dataset: Dataset) -> None:
    result = train(normalize(linear_dataset), 0.5)
    theta = denormalize_theta(linear_dataset, result.theta)

    assert result.converged is True
    assert theta.slope == pytest.approx(2.0, abs=1e-6)
    assert theta.intercept == pytest.approx(3.0, abs=1e-6)
