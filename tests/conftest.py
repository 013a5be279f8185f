from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from mileage_pricing.models import Dataset, DatasetEntry

DatasetFactory = Callable[[list[tuple[float, float]]], Dataset]
CsvWriter = Callable[[str, list[str]], Path]

MILEAGE_ENV_KEYS = (
    "MILEAGE_DATASET",
    "MILEAGE_THETA_FILE",
    "MILEAGE_SEPARATOR",
    "MILEAGE_LEARNING_RATE",
    "MILEAGE_TOLERANCE",
    "MILEAGE_MAX_ITERATIONS",
    "MILEAGE_PROGRESS_EVERY",
    "MILEAGE_TRACE_DIR",
)


def _build_dataset(points: list[tuple[float, float]]) -> Dataset:
    return Dataset(entries=tuple(DatasetEntry(km=km, price=price) for km, price in points))


@pytest.fixture(autouse=True)
def clean_mileage_env(monkeypatch: pytest.MonkeyPatch) -> None:
    # setenv + delenv so monkeypatch also removes values a .env load adds later.
    for key in MILEAGE_ENV_KEYS:
        monkeypatch.setenv(key, "unset")
        monkeypatch.delenv(key)


@pytest.fixture
def make_dataset() -> DatasetFactory:
    return _build_dataset


@pytest.fixture
def write_csv(tmp_path: Path) -> CsvWriter:
    def _write(name: str, lines: list[str]) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path

    return _write


@pytest.fixture
def linear_points() -> list[tuple[float, float]]:
    return [(km, 2.0 * km + 3.0) for km in (10.0, 20.0, 30.0, 40.0, 55.0)]


@pytest.fixture
def linear_dataset(linear_points: list[tuple[float, float]]) -> Dataset:
    return _build_dataset(linear_points)


@pytest.fixture
def linear_csv(write_csv: CsvWriter, linear_points: list[tuple[float, float]]) -> Path:
    lines = ["km,price"] + [f"{km},{price}" for km, price in linear_points]
    return write_csv("data.csv", lines)
