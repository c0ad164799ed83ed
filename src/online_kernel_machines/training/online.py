"""
Online training loops for kernel machines.

Training is a left fold of an update rule over an ordered stream of
examples: ``model = rule.update(model, example)`` once per example, with no
other state carried between steps. A stream consumed twice in the same order
with the same parameters yields bit-identical models.

Key functions:
    train_on_stream            Fold any UpdateRule over a stream (with logging)
    train_regression           Adaptive epsilon-tube regression
    train_classification       Soft-margin binary classification
    train_novelty_detection    One-class novelty detection
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Union

from tqdm import tqdm

from ..core.items import ExampleLike, to_example
from ..errors import InvalidParameter
from ..kernels import KernelFunction, resolve_kernel
from ..logging import TrainingMetricsLogger
from ..models import Model
from ..policies import (
    DEFAULT_ETA,
    DEFAULT_NU,
    DEFAULT_SLAMBDA,
    ClassificationRule,
    NoveltyRule,
    RegressionRule,
    UpdateRule,
)


KernelSpec = Union[KernelFunction, str, Mapping[str, Any]]


# =============================================================================
# Training result
# =============================================================================


@dataclass
class OnlineTrainResult:
    """Summary returned after an online training run.

    ``items_admitted`` equals the number of support vectors the run added.
    """

    model: Model
    items_processed: int
    items_admitted: int


# =============================================================================
# Generic loop
# =============================================================================


def train_on_stream(
    rule: UpdateRule,
    stream: Iterable[ExampleLike],
    kernel: Optional[KernelSpec] = None,
    *,
    model: Optional[Model] = None,
    name: Optional[str] = None,
    max_items: Optional[int] = None,
    metrics_logger: Optional[TrainingMetricsLogger] = None,
    eval_fn: Optional[Callable[[Model], Dict[str, Any]]] = None,
    eval_every_n_checkpoints: int = 1,
    progress_bar: bool = False,
    total_items: Optional[int] = None,
) -> OnlineTrainResult:
    """
    Train a kernel machine on a stream of examples in order.

    Each example passes through ``rule`` exactly once. Any error raised by
    the rule aborts the run; no partially trained model is returned.

    Args:
        rule: Update rule for the task (regression, classification, novelty).
        stream: Iterable of :class:`Example` objects, ``(vector, label)``
            pairs, or (for novelty detection) bare vectors.
        kernel: Kernel, kernel name or identifier dict. Resolved once here.
            Required unless ``model`` is given.
        model: Optional starting state to continue training from.
        name: Name given to a freshly created model.
        max_items: Stop after this many examples (``None`` = exhaust the
            stream). Resumable streams continue from the next example.
        metrics_logger: Optional logger for admissions and checkpoints.
        eval_fn: Optional evaluation callback ``(model) -> metrics_dict``,
            called at checkpoint intervals.
        eval_every_n_checkpoints: Evaluate every N checkpoints (default 1).
        progress_bar: Show a tqdm progress bar.
        total_items: Total expected items (for progress bar). Automatically
            taken from ``stream`` if it has ``__len__``.

    Returns:
        :class:`OnlineTrainResult` with the trained model and counts.
    """
    if model is None:
        if kernel is None:
            raise InvalidParameter("either a kernel or a starting model is required")
        model = Model.empty(resolve_kernel(kernel), task=rule.task, name=name)
    elif kernel is not None:
        model = model.replace(kernel=resolve_kernel(kernel))

    if total_items is None and hasattr(stream, "__len__"):
        total_items = len(stream)
    if max_items is not None:
        stream = itertools.islice(stream, max_items)
        total_items = min(total_items, max_items) if total_items is not None else max_items

    checkpoint_idx = 0
    items_processed = 0
    items_admitted = 0

    pbar = tqdm(stream, desc=f"Training {rule.task}", total=total_items) if progress_bar else stream

    for item in pbar:
        example = to_example(item, labelled=rule.requires_label)
        step = rule.step(model, example.vector, example.label)
        model = step.model

        items_processed += 1
        if step.action == "admit":
            items_admitted += 1

        if metrics_logger is not None:
            metrics_logger.log_example(step.action, step.loss)

            if metrics_logger.should_checkpoint():
                checkpoint_idx += 1
                metrics_logger.log_checkpoint(checkpoint_idx, model)

                if eval_fn is not None and checkpoint_idx % eval_every_n_checkpoints == 0:
                    eval_metrics = eval_fn(model)
                    metrics_logger.log_evaluation(checkpoint_idx, eval_metrics)

                    if progress_bar and hasattr(pbar, "set_postfix"):
                        pbar.set_postfix({
                            "svs": model.num_support_vectors,
                            "admit_rate": f"{metrics_logger.admission_rate:.3f}",
                        })

    return OnlineTrainResult(
        model=model,
        items_processed=items_processed,
        items_admitted=items_admitted,
    )


# =============================================================================
# Task entry points
# =============================================================================


def train_regression(
    examples: Iterable[ExampleLike],
    kernel: KernelSpec,
    eta: float = DEFAULT_ETA,
    nu: float = DEFAULT_NU,
    slambda: float = DEFAULT_SLAMBDA,
    **kwargs: Any,
) -> Model:
    """
    Train a regression model on ``(vector, label)`` examples.

    Parameters are validated before the first example is read.

    Raises:
        InvalidParameter: If ``eta``, ``nu`` or ``slambda`` is outside (0, 1].
    """
    rule = RegressionRule(eta=eta, nu=nu, slambda=slambda)
    return train_on_stream(rule, examples, kernel, **kwargs).model


def train_classification(
    examples: Iterable[ExampleLike],
    kernel: KernelSpec,
    eta: float = DEFAULT_ETA,
    nu: float = DEFAULT_NU,
    **kwargs: Any,
) -> Model:
    """Train a binary classifier on ``(vector, label)`` examples, labels +1 / -1."""
    rule = ClassificationRule(eta=eta, nu=nu)
    return train_on_stream(rule, examples, kernel, **kwargs).model


def train_novelty_detection(
    examples: Iterable[ExampleLike],
    kernel: KernelSpec,
    eta: float = DEFAULT_ETA,
    nu: float = DEFAULT_NU,
    **kwargs: Any,
) -> Model:
    """Train a novelty detector on unlabelled vectors."""
    rule = NoveltyRule(eta=eta, nu=nu)
    return train_on_stream(rule, examples, kernel, **kwargs).model
