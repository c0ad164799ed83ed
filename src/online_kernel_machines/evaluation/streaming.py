"""Evaluation of trained models over a held-out example stream."""

from __future__ import annotations

from typing import Dict, Iterable, List, Sequence

import torch

from ..core.items import ExampleLike, iter_examples
from ..kernels import DTYPE
from ..models import Model
from .metrics import compute_classification_metrics, compute_regression_metrics
from .prediction import ENSEMBLE_AVERAGE_KEY, predict_ensemble, predict_single


def _metrics_for_task(
    task: str,
    scores: List[float],
    targets: List[float],
    rho: float,
) -> Dict[str, float]:
    if task == "novelty":
        n = len(scores)
        flagged = sum(1 for s in scores if s < rho)
        return {
            "num_items": n,
            "novelty_rate": flagged / max(n, 1),
            "mean_score": sum(scores) / max(n, 1),
        }

    preds = torch.tensor(scores, dtype=DTYPE)
    labels = torch.tensor(targets, dtype=DTYPE)
    if task == "classification":
        metrics = compute_classification_metrics(preds, labels)
    else:
        metrics = compute_regression_metrics(preds, labels)
    metrics["num_items"] = len(scores)
    return metrics


def evaluate_model(model: Model, stream: Iterable[ExampleLike]) -> Dict[str, float]:
    """
    Evaluate one model on a stream (without updating it).

    Returns:
        Classification: accuracy, precision, recall, f1 and confusion counts.
        Regression: mse, rmse, mae.
        Novelty: fraction of examples scoring below rho and the mean score.
    """
    labelled = model.task != "novelty"
    scores: List[float] = []
    targets: List[float] = []
    for example in iter_examples(stream, labelled=labelled):
        scores.append(predict_single(model, example.vector))
        if labelled:
            targets.append(example.label)
    return _metrics_for_task(model.task, scores, targets, model.rho)


def evaluate_ensemble(
    models: Sequence[Model],
    stream: Iterable[ExampleLike],
) -> Dict[str, float]:
    """
    Evaluate the averaged prediction of an ensemble on a stream.

    The ensemble's margin for novelty detection is the mean of the members'
    rho values.
    """
    task = models[0].task if models else "regression"
    labelled = task != "novelty"
    scores: List[float] = []
    targets: List[float] = []
    for example in iter_examples(stream, labelled=labelled):
        predictions = dict(predict_ensemble(models, example.vector))
        scores.append(predictions[ENSEMBLE_AVERAGE_KEY])
        if labelled:
            targets.append(example.label)
    rho = sum(m.rho for m in models) / max(len(models), 1)
    return _metrics_for_task(task, scores, targets, rho)
