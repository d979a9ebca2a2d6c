"""Train/test evaluation of a trainer on an example dataset."""

from __future__ import annotations

from typing import Callable, Mapping, Optional, Sequence

from loguru import logger

from correlate_engine.dataset import label_counts, split
from correlate_engine.metrics import (
    RoundingMode,
    accuracy,
    balanced_accuracy,
    confusion_matrix,
    round_predictions,
    to_plain,
)
from correlate_engine.schema import Example
from correlate_engine.trainers import LossKind, Trainer

EvalFn = Callable[[Sequence[Example], Sequence[int]], float]

DEFAULT_FRACTIONS: Mapping[str, float] = {"train": 0.8, "test": 0.2}


def rounding_for(loss: LossKind) -> RoundingMode:
    return RoundingMode.SIGN if LossKind(loss).is_margin_based else RoundingMode.NEAREST


def _fit_and_predict(
    examples: Sequence[Example],
    trainer: Trainer,
    loss: LossKind,
    fractions: Mapping[str, float],
    seed: Optional[int],
) -> dict[str, tuple[list[Example], list[int]]]:
    subsets = split(fractions, examples, seed=seed)
    train_name = next(iter(fractions))
    if not subsets[train_name]:
        raise ValueError(f"Subset {train_name!r} is empty, cannot train")

    trainer.train(subsets[train_name], loss=loss)
    mode = rounding_for(loss)
    predicted = {}
    for name, subset in subsets.items():
        predicted[name] = (subset, round_predictions(trainer.predict(subset), mode))
        logger.debug(f"Predicted {len(subset)} examples of subset {name!r}")
    return predicted


def train_and_evaluate(
    examples: Sequence[Example],
    trainer: Trainer,
    loss: LossKind = LossKind.SQUARED,
    eval_fn: EvalFn = accuracy,
    fractions: Mapping[str, float] = DEFAULT_FRACTIONS,
    seed: Optional[int] = None,
) -> dict[str, float]:
    """Split, train on the first subset, and score every subset with `eval_fn`.

    Predictions are rounded by sign for margin-based losses and to the
    nearest integer otherwise.
    """

    predicted = _fit_and_predict(examples, trainer, loss, fractions, seed)
    return {name: eval_fn(subset, predictions) for name, (subset, predictions) in predicted.items()}


def evaluate_report(
    examples: Sequence[Example],
    trainer: Trainer,
    loss: LossKind = LossKind.SQUARED,
    fractions: Mapping[str, float] = DEFAULT_FRACTIONS,
    seed: Optional[int] = None,
) -> dict:
    """JSON-serialisable accuracy, balanced accuracy and confusion matrix per subset."""

    predicted = _fit_and_predict(examples, trainer, loss, fractions, seed)
    report: dict = {
        "n_examples": len(examples),
        "loss": LossKind(loss).value,
        "label_counts": {str(label): count for label, count in label_counts(examples).items()},
        "subsets": {},
    }
    for name, (subset, predictions) in predicted.items():
        if not subset:
            report["subsets"][name] = {"n_examples": 0}
            continue
        report["subsets"][name] = {
            "n_examples": len(subset),
            "accuracy": accuracy(subset, predictions),
            "balanced_accuracy": balanced_accuracy(subset, predictions),
            "confusion_matrix": to_plain(confusion_matrix(subset, predictions)),
        }
    return report


def compare(baseline_scores: Mapping[str, float], model_scores: Mapping[str, float]) -> dict[str, float]:
    """Percentage change of each model score over the baseline score."""

    def pct_change(old: float, new: float) -> float:
        if old == 0:
            return 0.0
        return ((new - old) / old) * 100.0

    return {
        f"{name}_improvement_pct": pct_change(baseline_scores[name], model_scores[name])
        for name in model_scores
        if name in baseline_scores
    }
