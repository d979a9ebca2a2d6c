"""Model explainability helpers."""

from __future__ import annotations

import numpy as np

from correlate_engine.trainers import SklearnLinearTrainer


def explain_model(trainer: SklearnLinearTrainer, top_n: int = 10) -> dict:
    """Return the `category=event` features with the largest linear weights."""

    if trainer.model is None:
        return {"type": "unsupported", "top_features": []}

    vectorizer = trainer.model.named_steps["vectorizer"]
    estimator = trainer.model.named_steps["model"]
    if not hasattr(estimator, "coef_"):
        return {"type": "unsupported", "top_features": []}

    values = np.asarray(estimator.coef_).ravel()
    feature_names = list(vectorizer.get_feature_names_out())
    pairs = [(feature, weight) for feature, weight in zip(feature_names, values) if feature != "constant"]
    pairs = sorted(pairs, key=lambda item: abs(item[1]), reverse=True)[:top_n]
    return {
        "type": "coefficients",
        "loss": trainer.loss.value,
        "top_features": [{"feature": feature, "weight": float(weight)} for feature, weight in pairs],
    }
