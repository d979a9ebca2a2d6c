"""Vowpal Wabbit input format for examples."""

from __future__ import annotations

from typing import Iterable

from correlate_engine.schema import Example


def format_number(value: float) -> str:
    """Write integral numbers without a fractional part."""

    if isinstance(value, bool):
        return str(int(value))
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def to_vw_line(example: Example, counts: bool = True) -> str:
    """One line: ``<label> |<category> <event>:<count> ... |<category> ...``.

    With `counts` disabled events are written as bare names.
    """

    namespaces = []
    for category, events in example.window.items():
        features = [f"{event}:{format_number(value)}" if counts else event for event, value in events.items()]
        namespaces.append(" ".join([f"|{category}", *features]))

    label = format_number(example.measurement.value)
    if not namespaces:
        return f"{label} |"
    return f"{label} {' '.join(namespaces)}"


def to_vw(examples: Iterable[Example], counts: bool = True) -> str:
    return "\n".join(to_vw_line(example, counts=counts) for example in examples)
