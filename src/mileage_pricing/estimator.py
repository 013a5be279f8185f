"""Price estimation from fitted coefficients."""

from __future__ import annotations

from mileage_pricing.models import Theta


def estimate_price(km: float, theta: Theta) -> float:
    """Return ``theta.intercept + theta.slope * km``."""
    return theta.intercept + theta.slope * km
