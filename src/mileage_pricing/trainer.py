"""Batch gradient descent for the single-feature linear model."""

from __future__ import annotations

import time
from collections.abc import Callable

from mileage_pricing.estimator import estimate_price
from mileage_pricing.models import Dataset, Theta, TrainingResult

ProgressCallback = Callable[[int, float, Theta], None]

DEFAULT_PROGRESS_EVERY = 1 << 25


def train(
    normalized: Dataset,
    learning_rate: float,
    *,
    tolerance: float = 0.0,
    max_iterations: int | None = None,
    progress_every: int = DEFAULT_PROGRESS_EVERY,
    progress_callback: ProgressCallback | None = None,
) -> TrainingResult:
    """Fit theta on an already normalized dataset.

    The run stops once an update moves neither coefficient by more than
    ``tolerance``. With the default of ``0.0`` that means floating-point
    arithmetic has reached a fixed point. A diverging learning rate never
    satisfies the check, so only ``max_iterations`` can end such a run.
    """
    entries = normalized.entries
    step = learning_rate / len(entries) if entries else 0.0
    intercept = 0.0
    slope = 0.0
    iterations = 0
    start = time.perf_counter()

    while True:
        last_intercept, last_slope = intercept, slope
        theta = Theta(intercept=intercept, slope=slope)
        sum_r = 0.0
        sum_r_km = 0.0
        for entry in entries:
            residual = estimate_price(entry.km, theta) - entry.price
            sum_r += residual
            sum_r_km += residual * entry.km
        intercept -= step * sum_r
        slope -= step * sum_r_km
        iterations += 1

        if (
            abs(last_intercept - intercept) <= tolerance
            and abs(last_slope - slope) <= tolerance
        ):
            converged = True
            break
        if max_iterations is not None and iterations >= max_iterations:
            converged = False
            break
        if progress_callback is not None and iterations % progress_every == 0:
            progress_callback(
                iterations,
                time.perf_counter() - start,
                Theta(intercept=intercept, slope=slope),
            )

    return TrainingResult(
        theta=Theta(intercept=intercept, slope=slope),
        iterations=iterations,
        elapsed_s=time.perf_counter() - start,
        converged=converged,
    )
