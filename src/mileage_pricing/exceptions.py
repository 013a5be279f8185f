"""Project-specific exceptions."""


class MileagePricingError(Exception):
    """Base exception for the project."""


class InvalidConfigError(MileagePricingError):
    """Raised when runtime configuration cannot be loaded or validated."""


class DatasetLoadError(MileagePricingError):
    """Raised when a dataset file cannot be used at all."""


class DegenerateDatasetError(MileagePricingError):
    """Raised when an axis of the dataset has no spread to normalize against."""


class ThetaFileError(MileagePricingError):
    """Raised when the coefficient file cannot be read or written."""
