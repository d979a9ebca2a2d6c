"""CSV adapter for Google Fit "Daily Aggregations" takeout files.

Each file covers one day (`YYYY-MM-DD.csv`) in fixed-length intervals whose
start and end columns only hold a time of day. Only step counts are kept.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Union

from correlate_engine.adapters.common import csv_paths, fixed_offset, parse_number, read_rows
from correlate_engine.schema import Category, EventRecord

END_TIME_COLUMN = "End time"
STEP_COUNT_COLUMN = "Step count"
SUMMARY_FILE_NAME = "Daily Summaries.csv"


def _parse_end_time(date_str: str, time_str: str, time_zone_offset_hours: float) -> datetime:
    timestamp = datetime.fromisoformat(f"{date_str}T{time_str.strip()}")
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=fixed_offset(time_zone_offset_hours))
    return timestamp.astimezone(timezone.utc)


def parse(file_path: Union[str, Path], time_zone_offset_hours: float = 1.0) -> list[EventRecord]:
    """Parse one daily aggregation file into `google-fit/steps` records."""

    date_str = Path(file_path).stem
    try:
        datetime.strptime(date_str, "%Y-%m-%d")
    except ValueError as exc:
        raise ValueError(f"{file_path}: file name must be a YYYY-MM-DD date") from exc

    records = []
    for row_number, row in read_rows(file_path):
        try:
            step_count = parse_number(row.get(STEP_COUNT_COLUMN))
        except Exception as exc:  # noqa: BLE001
            raise ValueError(f"Row {row_number}: invalid step count") from exc
        if step_count is None:
            continue

        try:
            ended_at = _parse_end_time(date_str, row.get(END_TIME_COLUMN) or "", time_zone_offset_hours)
        except Exception as exc:  # noqa: BLE001
            raise ValueError(f"Row {row_number}: malformed end time") from exc

        records.append(EventRecord(ended_at, Category.GOOGLE_FIT, "steps", step_count))
    return records


def read_directory(directory: Union[str, Path], time_zone_offset_hours: float = 1.0) -> list[EventRecord]:
    """Parse every daily file below `directory`, skipping the summary file."""

    records: list[EventRecord] = []
    for path in csv_paths(directory):
        if path.name == SUMMARY_FILE_NAME:
            continue
        records.extend(parse(path, time_zone_offset_hours))
    return records
