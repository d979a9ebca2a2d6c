"""Supervised-learning examples: building, splitting and relabeling."""

from __future__ import annotations

import random
from collections import Counter
from dataclasses import replace
from typing import AbstractSet, Hashable, Iterable, Mapping, Optional, Sequence, TypeVar

from loguru import logger

from correlate_engine.classifier import filter_measurements, is_measurement
from correlate_engine.errors import UnmappedValue
from correlate_engine.metrics import round_half_away_from_zero
from correlate_engine.schema import MEASUREMENT_CATEGORIES, EventRecord, Example
from correlate_engine.windowing import TimeIndex, aggregate_preceding

T = TypeVar("T")

# Low subjective scores (0-3) become -1, high ones (4-5) become 1.
BIPOLAR_MAPPING: Mapping[float, int] = {0: -1, 1: -1, 2: -1, 3: -1, 4: 1, 5: 1}


def counts(items: Iterable[Hashable]) -> Counter:
    """Occurrence count per distinct item."""

    return Counter(items)


def remove_rare_events(
    records: Sequence[EventRecord],
    max_count: int,
    measurement_categories: AbstractSet[str] = MEASUREMENT_CATEGORIES,
) -> list[EventRecord]:
    """Drop activities whose event name occurs at most `max_count` times. Measurements are kept."""

    event_counts = counts(r.event for r in records if not is_measurement(r, measurement_categories))
    keep = {event for event, count in event_counts.items() if count > max_count}
    kept = [r for r in records if is_measurement(r, measurement_categories) or r.event in keep]
    logger.debug(f"Removed {len(records) - len(kept)} rare event records (max_count={max_count})")
    return kept


def build_examples(
    all_records: Sequence[EventRecord],
    target_category: str,
    target_event: str,
    lookback_hours: float,
    measurement_categories: AbstractSet[str] = MEASUREMENT_CATEGORIES,
    indexed: bool = False,
) -> list[Example]:
    """Pair every qualifying measurement with the activities preceding it.

    Measurements are taken in input order. `all_records` is treated as an
    unordered pool; the window filter does the time selection. With
    `indexed=True` the pool is sorted once and searched by bisection, which
    gives the same counts on large pools.
    """

    target_category = str(target_category)
    measurements = filter_measurements(all_records, target_category, target_event, measurement_categories)

    if indexed:
        index = TimeIndex(all_records)
        examples = [
            Example(m, index.aggregate_preceding(m.datetime, lookback_hours, measurement_categories))
            for m in measurements
        ]
    else:
        examples = [
            Example(m, aggregate_preceding(all_records, m.datetime, lookback_hours, measurement_categories))
            for m in measurements
        ]

    logger.debug(
        f"Built {len(examples)} examples for {target_category}/{target_event} "
        f"from {len(all_records)} records (lookback={lookback_hours}h)"
    )
    return examples


def split(
    fractions: Mapping[str, float],
    dataset: Sequence[T],
    seed: Optional[int] = None,
    rng: Optional[random.Random] = None,
) -> dict[str, list[T]]:
    """Randomly split `dataset` into named subsets.

    Each name takes `fraction * len(dataset)` items, rounded half away from
    zero, from the shuffled pool in the mapping's order. Items are never
    shared between subsets; if the pool runs out later names get fewer items,
    and leftovers are dropped.

    split({"train": 0.8, "test": 0.2}, examples) gives 80% / 20% random subsets.
    """

    for name, fraction in fractions.items():
        if fraction < 0:
            raise ValueError(f"Fraction for {name!r} must be non-negative, got {fraction}")

    rng = rng or random.Random(seed)
    pool = list(dataset)
    rng.shuffle(pool)

    total = len(pool)
    result: dict[str, list[T]] = {}
    offset = 0
    for name, fraction in fractions.items():
        count = round_half_away_from_zero(fraction * total)
        result[name] = pool[offset : offset + count]
        offset = min(total, offset + count)
    return result


def rescale_to_bipolar(
    examples: Iterable[Example], threshold_map: Mapping[float, int] = BIPOLAR_MAPPING
) -> list[Example]:
    """Relabel each example through `threshold_map`, e.g. for a logistic loss."""

    rescaled = []
    for example in examples:
        value = example.measurement.value
        if value not in threshold_map:
            raise UnmappedValue(value)
        measurement = replace(example.measurement, value=threshold_map[value])
        rescaled.append(Example(measurement, example.window))
    return rescaled


def label_counts(examples: Iterable[Example]) -> Counter:
    return counts(example.measurement.value for example in examples)
