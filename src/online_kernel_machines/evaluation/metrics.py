"""Metric computation functions for classification and regression."""

from __future__ import annotations

from typing import Dict

import torch


def compute_classification_metrics(
    scores: torch.Tensor, targets: torch.Tensor, threshold: float = 0.0
) -> Dict[str, float]:
    """
    Compute binary classification metrics for +1 / -1 labels.

    Args:
        scores: Decision values f(x), shape (N,).
        targets: Ground truth labels (+1 or -1), shape (N,).
        threshold: Decision values >= threshold are predicted +1.

    Returns:
        Dict with accuracy, precision, recall, f1, tp, fp, fn, tn.
    """
    pred_pos = scores >= threshold
    true_pos = targets > 0

    tp = (pred_pos & true_pos).sum().item()
    fp = (pred_pos & ~true_pos).sum().item()
    fn = (~pred_pos & true_pos).sum().item()
    tn = (~pred_pos & ~true_pos).sum().item()

    accuracy = (tp + tn) / (tp + tn + fp + fn + 1e-8)
    precision = tp / (tp + fp + 1e-8)
    recall = tp / (tp + fn + 1e-8)
    f1 = 2 * precision * recall / (precision + recall + 1e-8)

    return {
        "accuracy": accuracy,
        "precision": precision,
        "recall": recall,
        "f1": f1,
        "tp": tp,
        "fp": fp,
        "fn": fn,
        "tn": tn,
    }


def compute_regression_metrics(
    preds: torch.Tensor, targets: torch.Tensor
) -> Dict[str, float]:
    """
    Compute regression metrics.

    Returns:
        Dict with mse, rmse, mae.
    """
    diff = preds.double() - targets.double()
    if diff.numel() == 0:
        return {"mse": 0.0, "rmse": 0.0, "mae": 0.0}
    mse = (diff ** 2).mean().item()
    return {
        "mse": mse,
        "rmse": mse ** 0.5,
        "mae": diff.abs().mean().item(),
    }
