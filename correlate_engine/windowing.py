"""Time-window aggregation of activities preceding a measurement."""

from __future__ import annotations

from bisect import bisect_left
from datetime import datetime, timedelta
from types import MappingProxyType
from typing import AbstractSet, Iterable, Sequence

from correlate_engine.classifier import is_measurement
from correlate_engine.schema import MEASUREMENT_CATEGORIES, AggregatedWindow, EventRecord


class WindowBuilder:
    """Two-level `category -> event -> number` accumulator.

    Insertion order of categories and events is kept so the trainer input is
    reproducible. `build` hands out a read-only copy.
    """

    def __init__(self):
        self._categories: dict[str, dict[str, float]] = {}

    def accumulate(self, category: str, event: str, delta: float) -> None:
        events = self._categories.setdefault(category, {})
        if event in events:
            events[event] += delta
        else:
            events[event] = delta

    def add_record(self, record: EventRecord) -> None:
        # A record without a value counts as one occurrence.
        self.accumulate(record.category, record.event, 1 if record.value is None else record.value)

    def build(self) -> AggregatedWindow:
        return MappingProxyType(
            {category: MappingProxyType(dict(events)) for category, events in self._categories.items()}
        )


def window_bounds(anchor: datetime, lookback_hours: float) -> tuple[datetime, datetime]:
    """Return `(start, end)` of the half-open window `[anchor - lookback, anchor)`."""

    if lookback_hours < 0:
        raise ValueError(f"lookback_hours must be non-negative, got {lookback_hours}")
    return anchor - timedelta(hours=lookback_hours), anchor


def _within(record: EventRecord, start: datetime, end: datetime) -> bool:
    return start <= record.datetime < end


def fold_records(
    records: Iterable[EventRecord], measurement_categories: AbstractSet[str] = MEASUREMENT_CATEGORIES
) -> AggregatedWindow:
    builder = WindowBuilder()
    for record in records:
        if not is_measurement(record, measurement_categories):
            builder.add_record(record)
    return builder.build()


def aggregate_preceding(
    all_records: Iterable[EventRecord],
    anchor_datetime: datetime,
    lookback_hours: float,
    measurement_categories: AbstractSet[str] = MEASUREMENT_CATEGORIES,
) -> AggregatedWindow:
    """Count or sum the activities within `lookback_hours` before `anchor_datetime`.

    The left boundary is inclusive and the anchor itself is excluded.
    Measurements are never part of a window.
    """

    start, end = window_bounds(anchor_datetime, lookback_hours)
    return fold_records((r for r in all_records if _within(r, start, end)), measurement_categories)


class TimeIndex:
    """Records sorted by time for window lookups without rescanning the pool.

    Records sharing a timestamp keep their input order, so windows come out
    identical to `aggregate_preceding` over the same pool sorted by time.
    """

    def __init__(self, records: Iterable[EventRecord]):
        self._records: Sequence[EventRecord] = sorted(records, key=lambda r: r.datetime)
        self._times = [record.datetime for record in self._records]

    def __len__(self) -> int:
        return len(self._records)

    def between(self, start: datetime, end: datetime) -> Sequence[EventRecord]:
        lo = bisect_left(self._times, start)
        hi = bisect_left(self._times, end)
        return self._records[lo:hi]

    def aggregate_preceding(
        self,
        anchor_datetime: datetime,
        lookback_hours: float,
        measurement_categories: AbstractSet[str] = MEASUREMENT_CATEGORIES,
    ) -> AggregatedWindow:
        start, end = window_bounds(anchor_datetime, lookback_hours)
        return fold_records(self.between(start, end), measurement_categories)
