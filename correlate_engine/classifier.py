"""Measurement vs. activity classification."""

from __future__ import annotations

from typing import AbstractSet, Iterable

from correlate_engine.schema import MEASUREMENT_CATEGORIES, EventRecord


def is_measurement(record: EventRecord, measurement_categories: AbstractSet[str] = MEASUREMENT_CATEGORIES) -> bool:
    """Whether a record is a tracked outcome rather than an activity."""

    return record.category in measurement_categories


def remove_measurements(
    records: Iterable[EventRecord], measurement_categories: AbstractSet[str] = MEASUREMENT_CATEGORIES
) -> list[EventRecord]:
    return [record for record in records if not is_measurement(record, measurement_categories)]


def filter_measurements(
    records: Iterable[EventRecord],
    category: str,
    event: str,
    measurement_categories: AbstractSet[str] = MEASUREMENT_CATEGORIES,
) -> list[EventRecord]:
    """Select measurements of `category`/`event` that carry a value."""

    return [
        record
        for record in records
        if is_measurement(record, measurement_categories)
        and record.category == category
        and record.event == event
        and record.value is not None
    ]


class MeasurementClassifier:
    """Classifier bound to a configured measurement-category set."""

    def __init__(self, measurement_categories: Iterable[str] = MEASUREMENT_CATEGORIES):
        self.measurement_categories = frozenset(str(category) for category in measurement_categories)

    def __call__(self, record: EventRecord) -> bool:
        return is_measurement(record, self.measurement_categories)

    def remove_measurements(self, records: Iterable[EventRecord]) -> list[EventRecord]:
        return remove_measurements(records, self.measurement_categories)

    def filter_measurements(self, records: Iterable[EventRecord], category: str, event: str) -> list[EventRecord]:
        return filter_measurements(records, category, event, self.measurement_categories)
