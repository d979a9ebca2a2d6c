from datetime import datetime, timedelta

import pytest

from correlate_engine.classifier import MeasurementClassifier, filter_measurements, is_measurement
from correlate_engine.schema import Category, EventRecord
from correlate_engine.windowing import TimeIndex, WindowBuilder, aggregate_preceding, window_bounds

ANCHOR = datetime.fromisoformat("2018-06-02T21:00:00+00:00")


def at(hours_before: float) -> datetime:
    return ANCHOR - timedelta(hours=hours_before)


def sample_records():
    return [
        EventRecord(at(30), "food", "pizza"),
        EventRecord(at(24), "food", "cheese"),
        EventRecord(at(10), "food", "cheese"),
        EventRecord(at(5), "sport", "gym"),
        EventRecord(at(3), "google-fit", "steps", 1200),
        EventRecord(at(1), "google-fit", "steps", 800),
        EventRecord(at(2), "brain-fog", "brain-fog", 4),
        EventRecord(at(0), "food", "chocolate"),
    ]


def test_is_measurement_by_category():
    assert is_measurement(EventRecord(ANCHOR, "brain-fog", "brain-fog", 3))
    assert is_measurement(EventRecord(ANCHOR, Category.WEIGHT, "kg", 70))
    assert not is_measurement(EventRecord(ANCHOR, "food", "cheese"))
    assert not is_measurement(EventRecord(ANCHOR, "my-own-category", "thing"))


def test_classifier_uses_configured_set():
    classifier = MeasurementClassifier({"mood"})
    assert classifier(EventRecord(ANCHOR, "mood", "mood", 2))
    assert not classifier(EventRecord(ANCHOR, "brain-fog", "brain-fog", 2))


def test_filter_measurements_requires_value_and_event():
    records = [
        EventRecord(ANCHOR, "brain-fog", "brain-fog", 3),
        EventRecord(ANCHOR, "brain-fog", "brain-fog", None),
        EventRecord(ANCHOR, "brain-fog", "other", 3),
        EventRecord(ANCHOR, "food", "brain-fog", 3),
    ]
    assert filter_measurements(records, "brain-fog", "brain-fog") == records[:1]


def test_window_is_half_open():
    window = aggregate_preceding(sample_records(), ANCHOR, 24)

    assert window["food"]["cheese"] == 2
    assert "pizza" not in window["food"]
    assert "chocolate" not in window["food"]


def test_counts_and_sums():
    window = aggregate_preceding(sample_records(), ANCHOR, 24)

    assert window["sport"] == {"gym": 1}
    assert window["google-fit"] == {"steps": 2000}


def test_measurements_never_in_window():
    window = aggregate_preceding(sample_records(), ANCHOR, 48)
    assert "brain-fog" not in window


def test_window_is_read_only():
    window = aggregate_preceding(sample_records(), ANCHOR, 24)
    with pytest.raises(TypeError):
        window["food"]["cheese"] = 10
    with pytest.raises(TypeError):
        window["new"] = {}


def test_empty_window():
    assert dict(aggregate_preceding(sample_records(), ANCHOR, 0)) == {}


def test_negative_lookback_rejected():
    with pytest.raises(ValueError):
        window_bounds(ANCHOR, -1)


def test_builder_keeps_insertion_order():
    builder = WindowBuilder()
    builder.accumulate("food", "salad", 1)
    builder.accumulate("drug", "coffee", 2)
    builder.accumulate("food", "cheese", 1)
    builder.accumulate("food", "salad", 1)

    window = builder.build()
    assert list(window) == ["food", "drug"]
    assert list(window["food"].items()) == [("salad", 2), ("cheese", 1)]


def test_time_index_matches_linear_scan():
    records = list(reversed(sample_records()))
    index = TimeIndex(records)

    for lookback in (0, 1, 2.5, 24, 30, 48):
        assert index.aggregate_preceding(ANCHOR, lookback) == aggregate_preceding(records, ANCHOR, lookback)


def test_time_index_boundaries():
    index = TimeIndex(sample_records())
    selected = index.between(at(24), ANCHOR)
    assert EventRecord(at(24), "food", "cheese") in selected
    assert EventRecord(at(0), "food", "chocolate") not in selected
