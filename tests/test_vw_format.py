from datetime import datetime

from correlate_engine.schema import EventRecord, Example
from correlate_engine.vw_format import format_number, to_vw, to_vw_line
from correlate_engine.windowing import WindowBuilder


def sample_example(label=3):
    builder = WindowBuilder()
    builder.accumulate("food", "tortilla-chips", 1)
    builder.accumulate("food", "cheese", 2)
    builder.accumulate("google-fit", "steps", 1520.5)
    return Example(EventRecord(datetime(2018, 6, 2, 21), "brain-fog", "brain-fog", label), builder.build())


def test_line_with_counts():
    assert to_vw_line(sample_example()) == "3 |food tortilla-chips:1 cheese:2 |google-fit steps:1520.5"


def test_line_without_counts():
    assert to_vw_line(sample_example(), counts=False) == "3 |food tortilla-chips cheese |google-fit steps"


def test_empty_window():
    example = Example(EventRecord(datetime(2018, 6, 2, 21), "brain-fog", "brain-fog", -1), {})
    assert to_vw_line(example) == "-1 |"


def test_format_number():
    assert format_number(3.0) == "3"
    assert format_number(2) == "2"
    assert format_number(0.25) == "0.25"


def test_to_vw_joins_lines():
    text = to_vw([sample_example(1), sample_example(5)])
    lines = text.split("\n")
    assert len(lines) == 2
    assert lines[0].startswith("1 |food")
    assert lines[1].startswith("5 |food")
