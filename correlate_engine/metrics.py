"""Classification metrics over examples and (rounded) predictions."""

from __future__ import annotations

import math
from enum import Enum
from types import MappingProxyType
from typing import Hashable, Iterable, Mapping, Sequence

from correlate_engine.errors import DimensionMismatch, EmptyInput
from correlate_engine.schema import Example

ConfusionMatrix = Mapping[Hashable, Mapping[Hashable, int]]


class RoundingMode(str, Enum):
    NEAREST = "nearest"
    SIGN = "sign"


def round_half_away_from_zero(value: float) -> int:
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def _sign(value: float) -> int:
    return 1 if value >= 0 else -1


def round_predictions(predictions: Iterable[float], mode: RoundingMode = RoundingMode.NEAREST) -> list[int]:
    """Turn raw predictions into labels.

    NEAREST rounds half away from zero (0.5 -> 1, 2.5 -> 3, -0.5 -> -1).
    SIGN maps values >= 0 to 1 and everything else to -1, for labels that
    were rescaled to {-1, 1}.
    """

    round_fn = _sign if RoundingMode(mode) is RoundingMode.SIGN else round_half_away_from_zero
    return [round_fn(prediction) for prediction in predictions]


def confusion_matrix(examples: Sequence[Example], predictions: Sequence[Hashable]) -> ConfusionMatrix:
    """Counts keyed by ground truth, then by prediction.

    ``{1: {2: 100}, 2: {2: 50}}`` means every ground-truth 1 (100 of them) was
    predicted as 2, and all fifty 2s were predicted correctly.
    """

    if len(examples) != len(predictions):
        raise DimensionMismatch(len(examples), len(predictions))

    matrix: dict[Hashable, dict[Hashable, int]] = {}
    for example, prediction in zip(examples, predictions):
        row = matrix.setdefault(example.measurement.value, {})
        row[prediction] = row.get(prediction, 0) + 1
    return MappingProxyType({truth: MappingProxyType(row) for truth, row in matrix.items()})


def _per_class(matrix: ConfusionMatrix) -> dict[Hashable, tuple[int, int]]:
    return {truth: (row.get(truth, 0), sum(row.values())) for truth, row in matrix.items()}


def accuracy(examples: Sequence[Example], predictions: Sequence[Hashable]) -> float:
    """Correct predictions divided by all predictions."""

    matrix = confusion_matrix(examples, predictions)
    if not matrix:
        raise EmptyInput("accuracy is undefined for zero examples")

    stats = _per_class(matrix).values()
    correct = sum(c for c, _ in stats)
    total = sum(t for _, t in stats)
    return correct / total


def balanced_accuracy(examples: Sequence[Example], predictions: Sequence[Hashable]) -> float:
    """Unweighted mean of the per-ground-truth-class accuracies."""

    matrix = confusion_matrix(examples, predictions)
    if not matrix:
        raise EmptyInput("balanced accuracy is undefined for zero examples")

    accuracies = [correct / total for correct, total in _per_class(matrix).values()]
    return sum(accuracies) / len(accuracies)


def to_plain(matrix: ConfusionMatrix) -> dict:
    """Nested plain dicts with string keys, for JSON reports."""

    return {str(truth): {str(pred): count for pred, count in row.items()} for truth, row in matrix.items()}
