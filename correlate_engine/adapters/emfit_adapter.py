"""CSV adapter for Emfit QS sleep-tracker exports.

Every night in an export becomes several records, one per tracked metric,
all stamped with the time the sleep period ended.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Union

from correlate_engine.adapters.common import csv_paths, parse_number, read_rows
from correlate_engine.schema import Category, EventRecord

# Columns stored in seconds, reported in hours.
_DURATION_COLUMNS = {
    "duration_in_bed",
    "duration_awake",
    "duration_in_sleep",
    "duration_in_rem",
    "duration_in_light",
    "duration_in_deep",
    "duration_sleep_onset",
    "bedexit_duration",
    "duration",
}

METRIC_COLUMNS = (
    "duration_in_bed",
    "avg_hr",
    "avg_rr",
    "avg_act",
    "tossnturn_count",
    "sleep_score",
    "duration_awake",
    "duration_in_sleep",
    "duration_in_rem",
    "duration_in_light",
    "duration_in_deep",
    "duration_sleep_onset",
    "bedexit_count",
    "awakenings",
    "bedexit_duration",
    "duration",
    "hr_min",
    "hr_max",
    "rr_min",
    "rr_max",
    "hrv_rmssd_evening",
    "resting_hr",
    "hrv_score",
    "hrv_lf",
    "hrv_hf",
)

# Per-night detail exports that do not share the summary schema.
EXCLUDED_FILE_PARTS = ("bedexits", "hrv", "sleepclasses", "vitals", "tossnturns")


def _event_name(column: str) -> str:
    return column.replace("_", "-")


def _parse_row(row: dict, row_number: int) -> list[EventRecord]:
    try:
        ended_at = datetime.fromtimestamp(int(float(row["to"])), tz=timezone.utc)
    except Exception as exc:  # noqa: BLE001
        raise ValueError(f"Row {row_number}: malformed 'to' timestamp") from exc

    records = []
    for column in METRIC_COLUMNS:
        if column not in row:
            continue
        try:
            value = parse_number(row[column])
        except Exception as exc:  # noqa: BLE001
            raise ValueError(f"Row {row_number}: invalid {column} '{row[column]}'") from exc
        if value is None:
            continue
        if column in _DURATION_COLUMNS:
            value = value / 3600
        records.append(EventRecord(ended_at, Category.EMFIT_QS, _event_name(column), value))
    return records


def parse(file_path: Union[str, Path]) -> list[EventRecord]:
    """Parse one Emfit QS summary CSV into event records."""

    records: list[EventRecord] = []
    for row_number, row in read_rows(file_path):
        records.extend(_parse_row(row, row_number))
    return records


def read_directory(directory: Union[str, Path]) -> list[EventRecord]:
    """Parse every summary CSV below `directory`."""

    records: list[EventRecord] = []
    for path in csv_paths(directory, EXCLUDED_FILE_PARTS):
        records.extend(parse(path))
    return records
