"""Shared parsing helpers for source adapters."""

from __future__ import annotations

import csv
from datetime import timedelta, timezone
from pathlib import Path
from typing import Iterator, Optional, Union


def parse_number(raw: Optional[str]) -> Optional[Union[int, float]]:
    """Parse an int or float; blank cells are absent values."""

    if raw is None:
        return None
    text = str(raw).strip()
    if not text:
        return None
    try:
        return int(text)
    except ValueError:
        return float(text)


def fixed_offset(hours: float) -> timezone:
    return timezone(timedelta(hours=hours))


def read_rows(file_path: Union[str, Path]) -> Iterator[tuple[int, dict]]:
    """Yield `(row_number, row)` for each data row of a CSV file with a header."""

    with open(file_path, newline="", encoding="utf-8") as handle:
        reader = csv.DictReader(handle)
        if not reader.fieldnames:
            return
        for row_number, row in enumerate(reader, start=2):
            yield row_number, row


def csv_paths(directory: Union[str, Path], exclude_substrings: tuple[str, ...] = ()) -> list[Path]:
    """Sorted `*.csv` files in `directory` whose names contain none of `exclude_substrings`."""

    return sorted(
        path
        for path in Path(directory).rglob("*.csv")
        if path.is_file() and not any(part in path.name for part in exclude_substrings)
    )
