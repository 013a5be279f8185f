"""Min/max rescaling of datasets and the inverse mapping for coefficients."""

from __future__ import annotations

from mileage_pricing.exceptions import DegenerateDatasetError
from mileage_pricing.models import BoundingBox, Dataset, DatasetEntry, Theta


def bounding_box(dataset: Dataset) -> BoundingBox:
    """Compute per-axis min/max; an empty dataset yields the neutral box."""
    if not dataset.entries:
        return BoundingBox()
    kms = [entry.km for entry in dataset.entries]
    prices = [entry.price for entry in dataset.entries]
    return BoundingBox(
        km_min=min(kms),
        km_max=max(kms),
        price_min=min(prices),
        price_max=max(prices),
    )


def normalize(dataset: Dataset) -> Dataset:
    """Return a new dataset with both axes rescaled into [0, 1]."""
    if not dataset.entries:
        return Dataset(entries=(), parser_errors=list(dataset.parser_errors))
    box = bounding_box(dataset)
    _ensure_spread(box)
    entries = tuple(
        DatasetEntry(
            km=(entry.km - box.km_min) / box.km_span,
            price=(entry.price - box.price_min) / box.price_span,
        )
        for entry in dataset.entries
    )
    return Dataset(entries=entries, parser_errors=list(dataset.parser_errors))


def denormalize_theta(original: Dataset, theta: Theta) -> Theta:
    """Map coefficients fitted on ``normalize(original)`` back to raw units.

    The result predicts, for a raw distance, the same price that ``theta``
    predicts for the normalized distance once rescaled back to raw price.
    """
    if not original.entries:
        return theta
    box = bounding_box(original)
    _ensure_spread(box)
    slope = theta.slope / box.km_span * box.price_span
    intercept = theta.intercept * box.price_span + box.price_min - box.km_min * slope
    return Theta(intercept=intercept, slope=slope)


def _ensure_spread(box: BoundingBox) -> None:
    if box.km_span == 0.0:
        raise DegenerateDatasetError(
            f"Every km value equals {box.km_min}; cannot normalize a zero-width axis."
        )
    if box.price_span == 0.0:
        raise DegenerateDatasetError(
            f"Every price value equals {box.price_min}; cannot normalize a zero-width axis."
        )
