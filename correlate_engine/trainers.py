"""Linear model trainers behind a common train/predict interface."""

from __future__ import annotations

import subprocess
from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Sequence

import numpy as np
from loguru import logger
from sklearn.feature_extraction import DictVectorizer
from sklearn.linear_model import LogisticRegression, QuantileRegressor, Ridge, SGDClassifier
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import StandardScaler

from correlate_engine.errors import TrainerProcessFailure
from correlate_engine.schema import Example
from correlate_engine.vw_format import to_vw

MODEL_FILE = "model"
CACHE_FILE = "cache"


class LossKind(str, Enum):
    SQUARED = "squared"
    LOGISTIC = "logistic"
    HINGE = "hinge"
    QUANTILE = "quantile"

    @property
    def is_margin_based(self) -> bool:
        return self in (LossKind.LOGISTIC, LossKind.HINGE)


class Trainer(ABC):
    """Trains on examples and predicts one float per example, in input order."""

    @abstractmethod
    def train(self, examples: Sequence[Example], loss: LossKind = LossKind.SQUARED) -> Any:
        ...

    @abstractmethod
    def predict(self, examples: Sequence[Example]) -> list[float]:
        ...


class VowpalWabbitTrainer(Trainer):
    """Runs the `vw` binary with the model and cache files in `work_dir`."""

    def __init__(self, work_dir: Path, binary: str = "vw", passes: int = 20, timeout_s: Optional[float] = None):
        self.work_dir = Path(work_dir)
        self.binary = binary
        self.passes = passes
        self.timeout_s = timeout_s

    @property
    def model_path(self) -> Path:
        return self.work_dir / MODEL_FILE

    def _run(self, args: list[str], examples: Sequence[Example]) -> subprocess.CompletedProcess:
        command = [self.binary, *args]
        logger.debug(f"Running {' '.join(command)} on {len(examples)} examples in {self.work_dir}")
        try:
            result = subprocess.run(
                command,
                input=to_vw(examples) + "\n",
                capture_output=True,
                text=True,
                cwd=self.work_dir,
                timeout=self.timeout_s,
            )
        except subprocess.TimeoutExpired as exc:
            stderr = exc.stderr.decode() if isinstance(exc.stderr, bytes) else (exc.stderr or "")
            logger.error(f"{' '.join(command)} timed out after {self.timeout_s}s")
            raise TrainerProcessFailure(command, None, stderr or f"timed out after {self.timeout_s}s") from exc

        if result.returncode != 0:
            logger.error(f"{' '.join(command)} exited with {result.returncode}: {result.stderr}")
            raise TrainerProcessFailure(command, result.returncode, result.stderr)
        return result

    def train(self, examples: Sequence[Example], loss: LossKind = LossKind.SQUARED) -> list[str]:
        """Train a model file, replacing any previous cache. Returns the trainer's stderr lines."""

        self.work_dir.mkdir(parents=True, exist_ok=True)
        args = [
            "--passes",
            str(self.passes),
            "--loss_function",
            LossKind(loss).value,
            "-f",
            MODEL_FILE,
            "--cache_file",
            CACHE_FILE,
            "--kill_cache",
        ]
        result = self._run(args, examples)
        return result.stderr.splitlines()

    def predict(self, examples: Sequence[Example]) -> list[float]:
        if not self.model_path.exists():
            raise FileNotFoundError(f"No trained model at {self.model_path}")

        result = self._run(["-i", MODEL_FILE, "-t", "-p", "/dev/stdout"], examples)
        predictions = [float(line.split()[0]) for line in result.stdout.splitlines() if line.strip()]
        if len(predictions) != len(examples):
            raise TrainerProcessFailure(
                [self.binary, "-i", MODEL_FILE],
                result.returncode,
                f"expected {len(examples)} predictions, got {len(predictions)}",
            )
        return predictions


def example_features(example: Example) -> dict[str, float]:
    """Flatten a window into `category=event` features plus a constant."""

    features = {"constant": 1.0}
    for category, events in example.window.items():
        for event, value in events.items():
            features[f"{category}={event}"] = float(value)
    return features


def _make_estimator(loss: LossKind, seed: int) -> Any:
    if loss is LossKind.LOGISTIC:
        return LogisticRegression(max_iter=1000, random_state=seed)
    if loss is LossKind.HINGE:
        return SGDClassifier(loss="hinge", max_iter=1000, random_state=seed)
    if loss is LossKind.QUANTILE:
        return QuantileRegressor(quantile=0.5, alpha=0.0, solver="highs")
    return Ridge(alpha=1.0)


class SklearnLinearTrainer(Trainer):
    """In-process linear model on the same features the `vw` input carries."""

    def __init__(self, seed: int = 42):
        self.seed = seed
        self.model: Optional[Pipeline] = None
        self.loss: Optional[LossKind] = None
        self._constant: Optional[float] = None

    def train(self, examples: Sequence[Example], loss: LossKind = LossKind.SQUARED) -> Optional[Pipeline]:
        if not examples:
            raise ValueError("Cannot train on empty dataset")

        self.loss = LossKind(loss)
        X = [example_features(example) for example in examples]
        y = np.asarray([example.measurement.value for example in examples], dtype=float)

        # Classifiers need two classes; a single-class training set predicts that class.
        if self.loss.is_margin_based and len(np.unique(y)) < 2:
            logger.warning(f"Only one label ({y[0]}) in training data, predicting it constantly")
            self._constant = float(y[0])
            self.model = None
            return None
        if self.loss.is_margin_based and len(np.unique(y)) > 2:
            raise ValueError(f"{self.loss.value} loss needs two labels, got {sorted(set(y.tolist()))}")

        self._constant = None
        self.model = Pipeline(
            [
                ("vectorizer", DictVectorizer()),
                ("scaler", StandardScaler(with_mean=False)),
                ("model", _make_estimator(self.loss, self.seed)),
            ]
        )
        self.model.fit(X, y)
        logger.debug(f"Trained {type(self.model[-1]).__name__} on {len(examples)} examples")
        return self.model

    def predict(self, examples: Sequence[Example]) -> list[float]:
        if self._constant is not None:
            return [self._constant] * len(examples)
        if self.model is None:
            raise ValueError("Trainer has not been trained")
        if not examples:
            return []

        X = [example_features(example) for example in examples]
        if self.loss.is_margin_based:
            # Signed margin, positive for the larger label.
            return [float(v) for v in self.model.decision_function(X)]
        return [float(v) for v in self.model.predict(X)]


class MeanLabelTrainer(Trainer):
    """Predicts the mean training label; a baseline to compare models against."""

    def __init__(self):
        self.mean: Optional[float] = None

    def train(self, examples: Sequence[Example], loss: LossKind = LossKind.SQUARED) -> float:
        if not examples:
            raise ValueError("Cannot train on empty dataset")
        self.mean = float(np.mean([example.measurement.value for example in examples]))
        return self.mean

    def predict(self, examples: Sequence[Example]) -> list[float]:
        if self.mean is None:
            raise ValueError("Trainer has not been trained")
        return [self.mean] * len(examples)
