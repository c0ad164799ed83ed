"""
Prediction with trained kernel machines.

Prediction is read-only: models are never modified, so the functions here
can be called concurrently across queries and ensemble members.
"""

from __future__ import annotations

from typing import Any, List, Mapping, Optional, Sequence, Tuple, Union

import torch

from ..errors import DimensionMismatch, EmptyEnsemble, EmptyModel, SingleModelEnsemble
from ..kernels import DTYPE, KernelFunction, VectorLike, as_vector, resolve_kernel
from ..models import Model


KernelSpec = Union[KernelFunction, str, Mapping[str, Any]]

ENSEMBLE_AVERAGE_KEY = "avg"


def require_trained(model: Model) -> Model:
    """
    Return ``model`` if it has support vectors.

    The evaluator itself answers ``offset`` for empty models; callers that
    treat an untrained model as a usage error check it with this helper.

    Raises:
        EmptyModel: If the model has no support vectors.
    """
    if model.num_support_vectors == 0:
        raise EmptyModel(f"{model.name or 'model'} has no support vectors")
    return model


def predict_single(
    model: Model,
    x: VectorLike,
    kernel: Optional[KernelSpec] = None,
) -> float:
    """
    Decision value ``f(x)`` of one model.

    Args:
        model: Trained model.
        x: Query vector.
        kernel: Kernel override; defaults to the model's own kernel.

    Raises:
        DimensionMismatch: If ``len(x)`` differs from the model's dimension.
    """
    x = as_vector(x)
    dim = model.vector_dimension
    if dim is not None and x.numel() != dim:
        raise DimensionMismatch(
            f"query of length {x.numel()} does not match model dimension {dim}"
        )
    resolved = resolve_kernel(kernel) if kernel is not None else None
    return model.predict(x, resolved)


def predict_ensemble(
    models: Sequence[Model],
    x: VectorLike,
    kernel: Optional[KernelSpec] = None,
) -> List[Tuple[str, float]]:
    """
    Evaluate every ensemble member at ``x`` and append their average.

    Args:
        models: Two or more independently trained models.
        x: Query vector.
        kernel: Kernel override applied to every member.

    Returns:
        ``[(name_0, f_0(x)), ..., (name_k, f_k(x)), ("avg", mean)]`` where a
        member's name is ``model.name`` or ``model_<i>``.

    Raises:
        EmptyEnsemble: If ``models`` is empty.
        SingleModelEnsemble: If ``models`` holds a single model.
        DimensionMismatch: If ``x`` does not fit some member.
    """
    models = list(models)
    if not models:
        raise EmptyEnsemble("ensemble prediction needs at least two models, got none")
    if len(models) == 1:
        raise SingleModelEnsemble(
            "ensemble prediction needs at least two models; use predict_single"
        )

    x = as_vector(x)
    resolved = resolve_kernel(kernel) if kernel is not None else None

    predictions = [
        (model.name or f"model_{i}", predict_single(model, x, resolved))
        for i, model in enumerate(models)
    ]
    average = sum(value for _, value in predictions) / len(predictions)
    predictions.append((ENSEMBLE_AVERAGE_KEY, average))
    return predictions


def predict_batch(
    model: Model,
    xs: Union[torch.Tensor, Sequence[VectorLike]],
    kernel: Optional[KernelSpec] = None,
) -> torch.Tensor:
    """Decision values for many queries, as a float64 tensor of shape (m,)."""
    resolved = resolve_kernel(kernel) if kernel is not None else None
    values = [predict_single(model, x, resolved) for x in xs]
    return torch.tensor(values, dtype=DTYPE)


def classify(model: Model, x: VectorLike, kernel: Optional[KernelSpec] = None) -> int:
    """Predicted class (+1 / -1) of a classification model; ties go to +1."""
    return 1 if predict_single(model, x, kernel) >= 0.0 else -1


def is_novel(model: Model, x: VectorLike, kernel: Optional[KernelSpec] = None) -> bool:
    """Whether a novelty-detection model scores ``x`` below its margin rho."""
    return predict_single(model, x, kernel) < model.rho
