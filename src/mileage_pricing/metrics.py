"""Fit-quality metrics for fitted coefficients."""

from __future__ import annotations

import math

from mileage_pricing.estimator import estimate_price
from mileage_pricing.exceptions import DatasetLoadError
from mileage_pricing.models import Dataset, FitReport, Theta


def evaluate_fit(dataset: Dataset, theta: Theta) -> FitReport:
    """Compute MAE, RMSE and R^2 of ``theta`` over the raw dataset."""
    if not dataset.entries:
        raise DatasetLoadError("Cannot evaluate a fit on an empty dataset.")
    targets = [entry.price for entry in dataset.entries]
    errors = [
        estimate_price(entry.km, theta) - entry.price for entry in dataset.entries
    ]
    mae = sum(abs(err) for err in errors) / len(errors)
    rmse = math.sqrt(sum(err * err for err in errors) / len(errors))

    target_mean = sum(targets) / len(targets)
    ss_tot = sum((target - target_mean) * (target - target_mean) for target in targets)
    ss_res = sum(err * err for err in errors)
    # R^2 is undefined when every price is identical.
    r2 = 1 - (ss_res / ss_tot) if ss_tot else math.nan

    return FitReport(mae=round(mae, 4), rmse=round(rmse, 4), r2=round(r2, 4))
