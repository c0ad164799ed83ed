"""
Prediction and evaluation.

- predict_single / predict_ensemble: Decision values of one model / an ensemble
- predict_batch, classify, is_novel: Convenience wrappers
- require_trained: Reject models without support vectors
- compute_*_metrics: Classification and regression metrics
- evaluate_model / evaluate_ensemble: Metrics over a held-out stream
"""

from .metrics import compute_classification_metrics, compute_regression_metrics
from .prediction import (
    ENSEMBLE_AVERAGE_KEY,
    classify,
    is_novel,
    predict_batch,
    predict_ensemble,
    predict_single,
    require_trained,
)
from .streaming import evaluate_ensemble, evaluate_model

__all__ = [
    "ENSEMBLE_AVERAGE_KEY",
    "classify",
    "compute_classification_metrics",
    "compute_regression_metrics",
    "evaluate_ensemble",
    "evaluate_model",
    "is_novel",
    "predict_batch",
    "predict_ensemble",
    "predict_single",
    "require_trained",
]
