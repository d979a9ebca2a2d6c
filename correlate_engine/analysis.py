"""Exploratory helpers relating single window features to measurement labels."""

from __future__ import annotations

import math
from typing import Iterable, Optional, Sequence

from scipy import stats as sp_stats

from correlate_engine.schema import Category, EventRecord, Example

Pair = tuple[float, float]

MIN_SAMPLES = 3


def time_of_day(records: Iterable[EventRecord], category: str, event: Optional[str] = None) -> list[Pair]:
    """`(hour + minute / 60, value)` for every valued record of a category."""

    category = str(category)
    return [
        (r.datetime.hour + r.datetime.minute / 60, r.value)
        for r in records
        if r.category == category and (event is None or r.event == event) and r.value is not None
    ]


def feature_pairs(examples: Iterable[Example], category: str, event: str, default: float = 0) -> list[Pair]:
    """`(window value, label)` per example; missing features count as `default`."""

    category = str(category)
    return [(example.window.get(category, {}).get(event, default), example.measurement.value) for example in examples]


def steps(examples: Iterable[Example]) -> list[Pair]:
    return feature_pairs(examples, Category.GOOGLE_FIT, "steps")


def sleep_feature_pairs(examples: Iterable[Example], key: str) -> list[Pair]:
    return feature_pairs(examples, Category.EMFIT_QS, key)


def available_event_keys(examples: Iterable[Example], category: str) -> list[str]:
    """Event names of `category` found in the first example that has it."""

    category = str(category)
    for example in examples:
        if category in example.window:
            return list(example.window[category])
    return []


def only_category(examples: Iterable[Example], category: str) -> list[Example]:
    """Examples that have `category` in their window, with every other category removed."""

    category = str(category)
    return [
        Example(example.measurement, {category: example.window[category]})
        for example in examples
        if category in example.window
    ]


def correlate(pairs: Sequence[Pair]) -> dict[str, Optional[float]]:
    """Pearson and Spearman coefficients of `(x, y)` pairs.

    Returns None for a coefficient when there are too few samples or one side
    is constant.
    """

    if len(pairs) < MIN_SAMPLES:
        return {"pearson": None, "spearman": None, "n": len(pairs)}

    xs = [float(x) for x, _ in pairs]
    ys = [float(y) for _, y in pairs]
    if len(set(xs)) < 2 or len(set(ys)) < 2:
        return {"pearson": None, "spearman": None, "n": len(pairs)}

    pearson = sp_stats.pearsonr(xs, ys)[0]
    spearman = sp_stats.spearmanr(xs, ys)[0]
    return {
        "pearson": None if math.isnan(pearson) else float(pearson),
        "spearman": None if math.isnan(spearman) else float(spearman),
        "n": len(pairs),
    }


def correlate_category(examples: Sequence[Example], category: str) -> dict[str, dict]:
    """`correlate` for every event key of `category`."""

    return {
        key: correlate(feature_pairs(examples, category, key))
        for key in available_event_keys(examples, category)
    }


def paired_measurements(
    records: Sequence[EventRecord], category: str, other_category: str, other_event: str
) -> list[tuple[float, Optional[float]]]:
    """Pair each `category` value with an `other_category`/`other_event` value taken at the same instant."""

    category, other_category = str(category), str(other_category)
    others = [r for r in records if r.category == other_category and r.event == other_event]
    pairs = []
    for record in records:
        if record.category != category:
            continue
        match = next((o.value for o in others if o.datetime == record.datetime), None)
        pairs.append((record.value, match))
    return pairs
