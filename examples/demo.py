"""Demo script for correlate-engine."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from correlate_engine.adapters.sheets_adapter import parse
from correlate_engine.dataset import build_examples, label_counts, rescale_to_bipolar
from correlate_engine.evaluator import compare, train_and_evaluate
from correlate_engine.metrics import balanced_accuracy
from correlate_engine.trainers import LossKind, MeanLabelTrainer, SklearnLinearTrainer


def main() -> None:
    records = parse(str(Path(__file__).with_name("sample_dataset.csv")))
    examples = build_examples(records, "brain-fog", "brain-fog", lookback_hours=24)
    print("Labels:", dict(label_counts(examples)))

    bipolar = rescale_to_bipolar(examples)
    baseline = train_and_evaluate(bipolar, MeanLabelTrainer(), LossKind.LOGISTIC, balanced_accuracy, seed=7)
    model = train_and_evaluate(bipolar, SklearnLinearTrainer(), LossKind.LOGISTIC, balanced_accuracy, seed=7)
    print("Baseline:", baseline)
    print("Model:", model)
    print("Comparison:", compare(baseline, model))


if __name__ == "__main__":
    main()
