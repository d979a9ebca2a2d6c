import subprocess
from datetime import datetime

import pytest

from correlate_engine.errors import TrainerProcessFailure
from correlate_engine.explain import explain_model
from correlate_engine.schema import EventRecord, Example
from correlate_engine.trainers import (
    LossKind,
    MeanLabelTrainer,
    SklearnLinearTrainer,
    VowpalWabbitTrainer,
    example_features,
)


def make_example(label, **features):
    window = {}
    for key, value in features.items():
        category, event = key.split("__")
        window.setdefault(category, {})[event] = value
    return Example(EventRecord(datetime(2018, 6, 1, 21), "brain-fog", "brain-fog", label), window)


def sample_examples():
    return [
        make_example(1, food__cheese=1),
        make_example(1, food__cheese=2, sport__gym=1),
        make_example(-1, food__salad=1),
        make_example(-1, food__salad=1, sport__gym=1),
        make_example(1, food__cheese=1, food__salad=1),
        make_example(-1, sport__gym=2),
    ]


class FakeRun:
    def __init__(self, returncode=0, stdout="", stderr=""):
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        self.calls = []

    def __call__(self, command, **kwargs):
        self.calls.append((command, kwargs))
        return subprocess.CompletedProcess(command, self.returncode, self.stdout, self.stderr)


def test_vw_train_invokes_binary(tmp_path, monkeypatch):
    fake = FakeRun(stderr="average loss = 0.1\nfinished run")
    monkeypatch.setattr(subprocess, "run", fake)

    trainer = VowpalWabbitTrainer(tmp_path, passes=5)
    output = trainer.train(sample_examples()[:2], loss=LossKind.LOGISTIC)

    command, kwargs = fake.calls[0]
    assert command == [
        "vw", "--passes", "5", "--loss_function", "logistic", "-f", "model", "--cache_file", "cache", "--kill_cache"
    ]
    assert kwargs["cwd"] == tmp_path
    assert kwargs["input"].startswith("1 |food cheese:1\n1 |food cheese:2 |sport gym:1")
    assert output == ["average loss = 0.1", "finished run"]


def test_vw_predict_parses_floats(tmp_path, monkeypatch):
    (tmp_path / "model").write_bytes(b"")
    monkeypatch.setattr(subprocess, "run", FakeRun(stdout="0.75\n-1.5\n"))

    predictions = VowpalWabbitTrainer(tmp_path).predict(sample_examples()[:2])
    assert predictions == [0.75, -1.5]


def test_vw_predict_requires_model(tmp_path):
    with pytest.raises(FileNotFoundError):
        VowpalWabbitTrainer(tmp_path).predict(sample_examples())


def test_vw_non_zero_exit(tmp_path, monkeypatch):
    monkeypatch.setattr(subprocess, "run", FakeRun(returncode=1, stderr="bad input"))

    with pytest.raises(TrainerProcessFailure) as excinfo:
        VowpalWabbitTrainer(tmp_path).train(sample_examples())
    assert excinfo.value.returncode == 1
    assert "bad input" in excinfo.value.stderr


def test_vw_timeout(tmp_path, monkeypatch):
    def timeout(command, **kwargs):
        raise subprocess.TimeoutExpired(command, kwargs["timeout"])

    monkeypatch.setattr(subprocess, "run", timeout)
    with pytest.raises(TrainerProcessFailure):
        VowpalWabbitTrainer(tmp_path, timeout_s=1).train(sample_examples())


def test_example_features():
    features = example_features(make_example(1, food__cheese=2, sport__gym=1))
    assert features == {"constant": 1.0, "food=cheese": 2.0, "sport=gym": 1.0}


def test_mean_label_trainer():
    trainer = MeanLabelTrainer()
    trainer.train([make_example(1), make_example(2), make_example(6)])
    assert trainer.predict([make_example(0)] * 2) == [3.0, 3.0]


def test_mean_label_trainer_needs_training():
    with pytest.raises(ValueError):
        MeanLabelTrainer().predict([make_example(0)])


def test_sklearn_logistic_separates_labels():
    trainer = SklearnLinearTrainer()
    trainer.train(sample_examples(), loss=LossKind.LOGISTIC)

    predictions = trainer.predict([make_example(0, food__cheese=3), make_example(0, food__salad=3)])
    assert predictions[0] > 0
    assert predictions[1] < 0


def test_sklearn_squared_predicts_per_example():
    trainer = SklearnLinearTrainer()
    trainer.train(sample_examples(), loss=LossKind.SQUARED)
    predictions = trainer.predict(sample_examples())
    assert len(predictions) == len(sample_examples())
    assert all(isinstance(p, float) for p in predictions)


def test_sklearn_single_class_predicts_constant():
    trainer = SklearnLinearTrainer()
    trainer.train([make_example(-1, food__salad=1), make_example(-1)], loss=LossKind.HINGE)
    assert trainer.predict([make_example(0, food__cheese=1)]) == [-1.0]


def test_sklearn_margin_loss_rejects_multiclass():
    examples = [make_example(label, food__cheese=label) for label in (1, 2, 3)]
    with pytest.raises(ValueError):
        SklearnLinearTrainer().train(examples, loss=LossKind.LOGISTIC)


def test_sklearn_empty_dataset():
    with pytest.raises(ValueError):
        SklearnLinearTrainer().train([])


def test_explain_model_top_features():
    trainer = SklearnLinearTrainer()
    trainer.train(sample_examples(), loss=LossKind.LOGISTIC)

    explanation = explain_model(trainer, top_n=2)
    assert explanation["type"] == "coefficients"
    assert len(explanation["top_features"]) == 2
    assert "constant" not in {item["feature"] for item in explanation["top_features"]}

    weights = {item["feature"]: item["weight"] for item in explain_model(trainer)["top_features"]}
    assert weights["food=cheese"] > 0
    assert weights["food=salad"] < 0


def test_explain_untrained_model():
    assert explain_model(SklearnLinearTrainer())["type"] == "unsupported"
