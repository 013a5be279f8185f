"""Dataset file parsing."""

from __future__ import annotations

import csv
import io
from pathlib import Path

from mileage_pricing.exceptions import DatasetLoadError
from mileage_pricing.models import Dataset, DatasetEntry

DEFAULT_DATASET_PATH = Path("./data.csv")

_KM = "km"
_PRICE = "price"


def load_dataset(path: Path | None = None, separator: str = ",") -> Dataset:
    """Read and parse a dataset file."""
    target = path if path is not None else DEFAULT_DATASET_PATH
    try:
        text = target.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise DatasetLoadError(f"Could not read dataset file {target}: {exc}") from exc
    return parse_dataset_text(text, separator=separator, source=str(target))


def parse_dataset_text(text: str, separator: str = ",", source: str = "<memory>") -> Dataset:
    """Parse delimited text whose header names a ``km`` and a ``price`` column.

    Header problems fail the whole dataset. Row problems only drop the row and
    are recorded in ``Dataset.parser_errors``.
    """
    reader = csv.reader(io.StringIO(text), delimiter=separator)
    header = next(reader, None)
    if header is None:
        raise DatasetLoadError(f"Dataset file {source} is empty.")

    warnings: list[str] = []
    km_col, price_col = _locate_columns(header, source, warnings)

    entries: list[DatasetEntry] = []
    for row in reader:
        if not row or (len(row) == 1 and not row[0].strip()):
            continue
        line = reader.line_num
        km = _read_cell(row, km_col, _KM, line, source, warnings)
        price = _read_cell(row, price_col, _PRICE, line, source, warnings)
        if km is None or price is None:
            continue
        entries.append(DatasetEntry(km=km, price=price))
    return Dataset(entries=tuple(entries), parser_errors=warnings)


def _locate_columns(header: list[str], source: str, warnings: list[str]) -> tuple[int, int]:
    found: dict[str, int] = {}
    errors: list[str] = []
    for idx, raw_name in enumerate(header):
        name = raw_name.strip().lower()
        if name not in (_KM, _PRICE):
            warnings.append(f"Unknown column \"{raw_name}\" #{idx} in dataset {source}")
            continue
        if name in found:
            errors.append(
                f"Duplicate column #{idx} in dataset {source}: "
                f"\"{name}\" column is already defined at index {found[name]}"
            )
            continue
        found[name] = idx

    missing = [name for name in (_KM, _PRICE) if name not in found]
    if missing:
        quoted = " and ".join(f"\"{name}\"" for name in missing)
        noun = "Column" if len(missing) == 1 else "Columns"
        verb = "is" if len(missing) == 1 else "are"
        errors.append(f"{noun} {quoted} {verb} missing in dataset {source}")
    if errors:
        raise DatasetLoadError("; ".join(errors))
    return found[_KM], found[_PRICE]


def _read_cell(
    row: list[str],
    column: int,
    name: str,
    line: int,
    source: str,
    warnings: list[str],
) -> float | None:
    if column >= len(row) or not row[column].strip():
        warnings.append(
            f"Row {line} in dataset {source} is missing {name} value in column {column}"
        )
        return None
    raw = row[column].strip()
    try:
        return float(raw)
    except ValueError:
        warnings.append(
            f"Row {line} in dataset {source} had bad {name} value in column {column}: {raw!r}"
        )
        return None
