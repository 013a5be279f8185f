"""Core typed models."""

from __future__ import annotations

import sys
from dataclasses import dataclass, field

from pydantic import BaseModel, Field


@dataclass(frozen=True, slots=True)
class DatasetEntry:
    """One observed (distance, price) pair."""

    km: float
    price: float


@dataclass(slots=True)
class Dataset:
    """Parsed dataset rows plus the diagnostics collected while loading them."""

    entries: tuple[DatasetEntry, ...] = ()
    parser_errors: list[str] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.entries)


@dataclass(frozen=True, slots=True)
class BoundingBox:
    """Per-axis min/max of a dataset."""

    km_min: float = sys.float_info.max
    km_max: float = -sys.float_info.max
    price_min: float = sys.float_info.max
    price_max: float = -sys.float_info.max

    @property
    def km_span(self) -> float:
        return self.km_max - self.km_min

    @property
    def price_span(self) -> float:
        return self.price_max - self.price_min


@dataclass(frozen=True, slots=True)
class Theta:
    """Linear model coefficients: price = intercept + slope * km."""

    intercept: float = 0.0
    slope: float = 0.0


@dataclass(frozen=True, slots=True)
class TrainingResult:
    """Outcome of one gradient-descent run, theta still in normalized space."""

    theta: Theta
    iterations: int
    elapsed_s: float
    converged: bool = True


class FitReport(BaseModel):
    """Fit quality of a theta against a raw dataset."""

    mae: float
    rmse: float
    r2: float


class AppConfig(BaseModel):
    """Runtime configuration."""

    dataset_path: str = "./data.csv"
    theta_path: str = "./theta"
    separator: str = Field(default=",", min_length=1, max_length=1)
    learning_rate: float = 0.5
    tolerance: float = Field(default=0.0, ge=0.0)
    max_iterations: int | None = Field(default=None, ge=1)
    progress_every: int = Field(default=1 << 25, ge=1)
    trace_dir: str | None = None
    verbose: bool = True
