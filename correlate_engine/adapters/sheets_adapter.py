"""CSV adapter for the Google Sheets event log export."""

from __future__ import annotations

from datetime import datetime, timezone

from correlate_engine.adapters.common import fixed_offset, parse_number, read_rows
from correlate_engine.schema import EventRecord, canonicalize_token

_REQUIRED_FIELDS = ("datetime", "category", "event")
DATETIME_FORMAT = "%m/%d/%Y %H:%M:%S"


def _parse_row(row: dict, row_number: int, time_zone_offset_hours: float) -> EventRecord:
    missing = [field for field in _REQUIRED_FIELDS if not (row.get(field) or "").strip()]
    if missing:
        raise ValueError(f"Row {row_number}: missing required fields {missing}")

    try:
        local = datetime.strptime(row["datetime"].strip(), DATETIME_FORMAT)
    except Exception as exc:  # noqa: BLE001
        raise ValueError(f"Row {row_number}: malformed datetime") from exc
    # Sheet times are wall-clock at a fixed offset; records are kept in UTC.
    timestamp = local.replace(tzinfo=fixed_offset(time_zone_offset_hours)).astimezone(timezone.utc)

    try:
        value = parse_number(row.get("value"))
    except Exception as exc:  # noqa: BLE001
        raise ValueError(f"Row {row_number}: invalid value '{row.get('value')}'") from exc

    return EventRecord(
        datetime=timestamp,
        category=canonicalize_token(row["category"]),
        event=canonicalize_token(row["event"]),
        value=value,
    )


def parse(file_path: str, time_zone_offset_hours: float = 1.0) -> list[EventRecord]:
    """Parse a sheet export with columns datetime, category, event, value."""

    return [_parse_row(row, row_number, time_zone_offset_hours) for row_number, row in read_rows(file_path)]
