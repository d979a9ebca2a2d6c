"""JSON adapter for normalized event records."""

from __future__ import annotations

import json
from datetime import datetime, timezone

from correlate_engine.schema import EventRecord, canonicalize_token

_REQUIRED_FIELDS = ("datetime", "category", "event")


def _parse_item(item: dict, index: int) -> EventRecord:
    if not isinstance(item, dict):
        raise ValueError(f"Item {index}: expected an object")

    missing = [field for field in _REQUIRED_FIELDS if not item.get(field)]
    if missing:
        raise ValueError(f"Item {index}: missing required fields {missing}")

    try:
        timestamp = datetime.fromisoformat(str(item["datetime"]))
    except Exception as exc:  # noqa: BLE001
        raise ValueError(f"Item {index}: malformed datetime") from exc
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)

    value_raw = item.get("value")
    value = None
    if value_raw is not None:
        if isinstance(value_raw, bool) or not isinstance(value_raw, (int, float)):
            raise ValueError(f"Item {index}: invalid value {value_raw!r}")
        value = value_raw

    return EventRecord(
        datetime=timestamp,
        category=canonicalize_token(item["category"]),
        event=canonicalize_token(item["event"]),
        value=value,
    )


def parse(file_path: str) -> list[EventRecord]:
    """Parse JSON file into event records. Naive datetimes are taken as UTC."""

    with open(file_path, encoding="utf-8") as handle:
        payload = json.load(handle)

    if not isinstance(payload, list):
        raise ValueError("JSON payload must be a list of objects")

    return [_parse_item(item, i) for i, item in enumerate(payload, start=1)]
