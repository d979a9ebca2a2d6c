"""Build examples from tracking data, train a linear model and report metrics."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from loguru import logger

from correlate_engine.adapters import emfit_adapter, google_fit_adapter, json_adapter, sheets_adapter
from correlate_engine.config import CorrelateSettings
from correlate_engine.dataset import build_examples, remove_rare_events, rescale_to_bipolar
from correlate_engine.evaluator import compare, evaluate_report
from correlate_engine.explain import explain_model
from correlate_engine.logging_setup import setup_logger
from correlate_engine.trainers import LossKind, MeanLabelTrainer, SklearnLinearTrainer, VowpalWabbitTrainer


def _load_records(path: Path, settings: CorrelateSettings):
    suffix = path.suffix.lower()
    if suffix == ".csv":
        return sheets_adapter.parse(str(path), settings.time_zone_offset_hours)
    if suffix == ".json":
        return json_adapter.parse(str(path))
    raise ValueError("Unsupported input format, expected .csv or .json")


def _make_trainer(name: str, settings: CorrelateSettings):
    if name == "vw":
        return VowpalWabbitTrainer(
            settings.work_dir, binary=settings.vw.binary, passes=settings.vw.passes, timeout_s=settings.vw.timeout_s
        )
    if name == "sklearn":
        return SklearnLinearTrainer()
    return MeanLabelTrainer()


def _scores(report: dict) -> dict:
    test = report["subsets"].get("test", {})
    return {metric: test[metric] for metric in ("accuracy", "balanced_accuracy") if metric in test}


def main() -> None:
    settings = CorrelateSettings()

    parser = argparse.ArgumentParser(description="Relate measurements to the activities preceding them")
    parser.add_argument("--data", nargs="+", default=[], help="Sheet export (.csv) or normalized records (.json)")
    parser.add_argument("--emfit-dir", help="Directory with Emfit QS CSV exports")
    parser.add_argument("--google-fit-dir", help="Directory with Google Fit daily aggregation CSVs")
    parser.add_argument("--category", required=True, help="Measurement category, e.g. brain-fog")
    parser.add_argument("--event", required=True, help="Measurement event name")
    parser.add_argument("--lookback-hours", type=float, default=settings.lookback_hours)
    parser.add_argument("--trainer", choices=("vw", "sklearn", "mean"), default="sklearn")
    parser.add_argument("--loss", choices=[loss.value for loss in LossKind], default=LossKind.SQUARED.value)
    parser.add_argument("--bipolar", action="store_true", help="Rescale labels to -1/1 before training")
    parser.add_argument("--min-count", type=int, default=0, help="Drop events occurring at most this often")
    parser.add_argument("--seed", type=int, default=settings.split_seed)
    args = parser.parse_args()

    setup_logger(settings.out_dir)

    records = []
    for data_path in args.data:
        records.extend(_load_records(Path(data_path), settings))
    if args.emfit_dir:
        records.extend(emfit_adapter.read_directory(args.emfit_dir))
    if args.google_fit_dir:
        records.extend(google_fit_adapter.read_directory(args.google_fit_dir, settings.time_zone_offset_hours))
    logger.info(f"Loaded {len(records)} records")

    if args.min_count:
        records = remove_rare_events(records, args.min_count, settings.measurement_categories)

    examples = build_examples(
        records,
        args.category,
        args.event,
        args.lookback_hours,
        settings.measurement_categories,
        indexed=True,
    )
    if args.bipolar:
        examples = rescale_to_bipolar(examples)

    loss = LossKind(args.loss)
    trainer = _make_trainer(args.trainer, settings)
    report = evaluate_report(examples, trainer, loss=loss, seed=args.seed)
    if isinstance(trainer, SklearnLinearTrainer):
        report["explanation"] = explain_model(trainer)
    if not isinstance(trainer, MeanLabelTrainer):
        baseline = evaluate_report(examples, MeanLabelTrainer(), loss=loss, seed=args.seed)
        report["baseline"] = _scores(baseline)
        report["improvement_over_baseline"] = compare(_scores(baseline), _scores(report))

    print(json.dumps(report, indent=2))

    settings.out_dir.mkdir(parents=True, exist_ok=True)
    out_path = settings.out_dir / "correlation_report.json"
    out_path.write_text(json.dumps(report, indent=2), encoding="utf-8")
    print(f"Saved correlation report to {out_path}")


if __name__ == "__main__":
    main()
