from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from mileage_pricing.dataset import load_dataset, parse_dataset_text
from mileage_pricing.exceptions import DatasetLoadError
from mileage_pricing.models import DatasetEntry


def test_bad_row_is_skipped_and_others_kept() -> None:
    dataset = parse_dataset_text("km,price\n1,10\nbad,20\n3,30\n")

    assert dataset.entries == (DatasetEntry(1.0, 10.0), DatasetEntry(3.0, 30.0))
    assert len(dataset.parser_errors) == 1
    assert "Row 3" in dataset.parser_errors[0]
    assert "bad km value" in dataset.parser_errors[0]


def test_non_numeric_price_is_skipped() -> None:
    dataset = parse_dataset_text("km,price\n1,10\n2,abc\n3,30\n")
    assert len(dataset) == 2
    assert "bad price value" in dataset.parser_errors[0]


def test_columns_located_case_insensitively_among_others() -> None:
    text = "Model;PRICE;year;Km\nzoe;6200;2015;48000\nclio; 7400 ;2017; 21000 \n"
    dataset = parse_dataset_text(text, separator=";")

    assert dataset.entries == (DatasetEntry(48000.0, 6200.0), DatasetEntry(21000.0, 7400.0))
    assert sum("Unknown column" in message for message in dataset.parser_errors) == 2


def test_blank_lines_are_ignored_silently() -> None:
    dataset = parse_dataset_text("km,price\n\n1,2\n\n   \n3,4\n")
    assert len(dataset) == 2
    assert dataset.parser_errors == []


def test_short_row_reports_missing_value() -> None:
    dataset = parse_dataset_text("km,price\n5\n6,7\n")
    assert dataset.entries == (DatasetEntry(6.0, 7.0),)
    assert "missing price value" in dataset.parser_errors[0]


def test_duplicate_column_fails_whole_dataset() -> None:
    with pytest.raises(DatasetLoadError, match="Duplicate column"):
        parse_dataset_text("km,price,KM\n1,2,3\n")


@pytest.mark.parametrize(
    ("header", "expected"),
    [
        ("km,cost", 'Column "price" is missing'),
        ("miles,price", 'Column "km" is missing'),
        ("a,b", 'Columns "km" and "price" are missing'),
    ],
)
def test_missing_columns_fail_whole_dataset(header: str, expected: str) -> None:
    with pytest.raises(DatasetLoadError, match=expected):
        parse_dataset_text(f"{header}\n1,2\n")


def test_empty_text_fails() -> None:
    with pytest.raises(DatasetLoadError, match="empty"):
        parse_dataset_text("")


def test_load_dataset_from_file(write_csv: Callable[..., Path]) -> None:
    path = write_csv("cars.csv", ["km,price", "240000,3650", "139800,3800"])
    dataset = load_dataset(path)
    assert dataset.entries[0] == DatasetEntry(240000.0, 3650.0)


def test_load_dataset_default_path(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, write_csv: Callable[..., Path]
) -> None:
    write_csv("data.csv", ["km,price", "1,2"])
    monkeypatch.chdir(tmp_path)
    assert len(load_dataset()) == 1


def test_load_dataset_missing_file(tmp_path: Path) -> None:
    with pytest.raises(DatasetLoadError, match="Could not read"):
        load_dataset(tmp_path / "nope.csv")
