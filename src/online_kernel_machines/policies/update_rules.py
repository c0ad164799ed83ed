"""
Online update rules for kernel machines.

Each rule is a pure transition ``(Model, example) -> Model`` following the
online-with-kernels scheme of Kivinen, Smola and Williamson (2004), with one
departure: an example only becomes a support vector when its error is
significant (the rule "admits" it), instead of at every step.

Shared skeleton of every rule:

1. Predict ``f(x)`` with the previous state.
2. Compute the task's loss signal and the admission decision.
3. On admission, append ``(weight, x)`` to the support vectors.
4. Adapt the scalar statistics (epsilon / rho / offset / cumulative error).
5. Increment the observation count.

Available rules:
- RegressionRule: epsilon-insensitive regression with an adaptive tube
- ClassificationRule: soft-margin binary classification (labels +1 / -1)
- NoveltyRule: one-class novelty detection (no labels)
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Literal, Optional

import torch

from ..errors import DimensionMismatch, InvalidParameter, NumericInstability
from ..kernels import VectorLike, as_vector
from ..models import Model, Task


Action = Literal["admit", "skip"]

# Lower bound for the novelty-detection margin.
NOVELTY_RHO_FLOOR = 1e-6

DEFAULT_ETA = 0.1
DEFAULT_NU = 0.005
DEFAULT_SLAMBDA = 0.2


def _check_unit_interval(name: str, value: Any) -> float:
    try:
        value = float(value)
    except (TypeError, ValueError):
        raise InvalidParameter(f"{name} must be a number in (0, 1], got {value!r}") from None
    if not (0.0 < value <= 1.0):
        raise InvalidParameter(f"{name} must lie in (0, 1], got {value!r}")
    return value


def _require_finite(value: float, what: str) -> float:
    if not math.isfinite(value):
        raise NumericInstability(f"{what} is not finite ({value!r})")
    return value


@dataclass(frozen=True)
class UpdateStep:
    """Outcome of processing one example.

    Carries the new model plus what the trainer needs for logging.
    """

    model: Model
    action: Action
    prediction: float
    loss: float


class UpdateRule(ABC):
    """
    Base class for online update rules.

    Subclasses implement ``_transition``; input validation and the
    numeric-stability checks on the prediction live here so that a failing
    example never produces a new model.

    Args:
        eta: Learning rate, in (0, 1].
        nu: Fraction controlling the margin / tube adaptation, in (0, 1].
    """

    task: Task
    requires_label: bool = True

    def __init__(self, eta: float = DEFAULT_ETA, nu: float = DEFAULT_NU):
        self.eta = _check_unit_interval("eta", eta)
        self.nu = _check_unit_interval("nu", nu)

    def step(
        self,
        model: Model,
        x: VectorLike,
        label: Optional[float] = None,
    ) -> UpdateStep:
        """
        Process one example and return the new state.

        Raises:
            InvalidParameter: If the model was built for another task, or a
                required label is missing.
            DimensionMismatch: If ``x`` does not match the model's dimension.
            NumericInstability: If the input, prediction or loss is not finite.
        """
        if model.task != self.task:
            raise InvalidParameter(
                f"{type(self).__name__} cannot update a {model.task} model"
            )
        x = as_vector(x)
        dim = model.vector_dimension
        if dim is not None and x.numel() != dim:
            raise DimensionMismatch(
                f"example of length {x.numel()} does not match model dimension {dim}"
            )
        if not bool(torch.isfinite(x).all()):
            raise NumericInstability("example vector contains NaN or infinite values")

        if self.requires_label:
            if label is None:
                raise InvalidParameter(f"{self.task} examples need a label")
            label = _require_finite(float(label), "label")

        prediction = _require_finite(model.predict(x), "prediction")
        return self._transition(model, x, label, prediction)

    def update(
        self,
        model: Model,
        x: VectorLike,
        label: Optional[float] = None,
    ) -> Model:
        """Pure transition ``(model, example) -> model``."""
        return self.step(model, x, label).model

    @abstractmethod
    def _transition(
        self,
        model: Model,
        x: torch.Tensor,
        label: Optional[float],
        prediction: float,
    ) -> UpdateStep:
        pass

    @property
    def params(self) -> Dict[str, float]:
        return {"eta": self.eta, "nu": self.nu}

    def __repr__(self) -> str:
        args = ", ".join(f"{k}={v}" for k, v in self.params.items())
        return f"{type(self).__name__}({args})"


# =============================================================================
# Regression
# =============================================================================


class RegressionRule(UpdateRule):
    """
    Epsilon-insensitive regression with an adaptive tube.

    An example is admitted when its absolute error exceeds the current tube
    half-width epsilon. Admissions widen the tube by ``eta * (1 - nu)``,
    skips narrow it by ``eta * nu`` (never below zero), so in the long run
    roughly a fraction ``nu`` of examples fall outside the tube.

    The offset follows admitted weights scaled by ``slambda``; on skipped
    examples it is pulled toward zero by ``slambda`` times the mean signed
    weight of the current expansion.

    Args:
        eta: Learning rate, in (0, 1].
        nu: Target fraction of examples outside the tube, in (0, 1].
        slambda: Offset step fraction, in (0, 1].
    """

    task = "regression"

    def __init__(
        self,
        eta: float = DEFAULT_ETA,
        nu: float = DEFAULT_NU,
        slambda: float = DEFAULT_SLAMBDA,
    ):
        super().__init__(eta=eta, nu=nu)
        self.slambda = _check_unit_interval("slambda", slambda)

    @property
    def params(self) -> Dict[str, float]:
        return {"eta": self.eta, "nu": self.nu, "slambda": self.slambda}

    def _shrink_offset(self, model: Model) -> float:
        n = model.num_support_vectors
        if n == 0 or model.offset == 0.0:
            return model.offset
        pressure = abs(model.support_vectors.weight_sum) / n
        step = min(abs(model.offset), self.slambda * pressure)
        return model.offset - math.copysign(step, model.offset)

    def _transition(self, model, x, label, prediction):
        error = _require_finite(label - prediction, "regression error")
        magnitude = abs(error)

        # An empty expansion always admits, so a zero-error first example
        # still fixes the dimension.
        if magnitude > model.epsilon or model.num_support_vectors == 0:
            weight = self.eta if error >= 0.0 else -self.eta
            action: Action = "admit"
            support_vectors = model.support_vectors.append(weight, x)
            epsilon = model.epsilon + self.eta * (1.0 - self.nu)
            offset = model.offset + self.slambda * weight
        else:
            action = "skip"
            support_vectors = model.support_vectors
            epsilon = max(0.0, model.epsilon - self.eta * self.nu)
            offset = self._shrink_offset(model)

        cumulative_error = _require_finite(
            model.cumulative_error + magnitude, "cumulative error"
        )
        new_model = model.replace(
            support_vectors=support_vectors,
            epsilon=epsilon,
            offset=offset,
            cumulative_error=cumulative_error,
            observation_count=model.observation_count + 1,
        )
        return UpdateStep(new_model, action, prediction, magnitude)


# =============================================================================
# Classification
# =============================================================================


class ClassificationRule(UpdateRule):
    """
    Soft-margin binary classification.

    Labels must be +1 or -1 (anything else raises InvalidParameter). An
    example is admitted when its margin
    ``label * f(x)`` is below rho; the new support vector gets weight
    ``eta * label``. Admissions shrink rho by ``eta * (1 - nu)`` (never below
    zero), correctly classified examples outside the margin grow it by
    ``eta * nu``. The cumulative error counts margin violations.
    """

    task = "classification"

    def _transition(self, model, x, label, prediction):
        if label not in (1.0, -1.0):
            raise InvalidParameter(f"classification labels must be +1 or -1, got {label!r}")
        margin = _require_finite(label * prediction, "classification margin")

        # A fresh model predicts 0 against rho = 1, so the first example is
        # admitted by the threshold alone.
        if margin < model.rho:
            action: Action = "admit"
            support_vectors = model.support_vectors.append(self.eta * label, x)
            rho = max(0.0, model.rho - self.eta * (1.0 - self.nu))
            cumulative_error = model.cumulative_error + 1.0
        else:
            action = "skip"
            support_vectors = model.support_vectors
            rho = model.rho + self.eta * self.nu
            cumulative_error = model.cumulative_error

        new_model = model.replace(
            support_vectors=support_vectors,
            rho=rho,
            cumulative_error=cumulative_error,
            observation_count=model.observation_count + 1,
        )
        return UpdateStep(new_model, action, prediction, max(0.0, model.rho - margin))


# =============================================================================
# Novelty detection
# =============================================================================


class NoveltyRule(UpdateRule):
    """
    One-class novelty detection.

    Unlabelled examples scoring below rho are admitted with weight ``eta``
    and counted in the cumulative error; rho stays put on admission and is
    lowered by ``eta * nu`` otherwise, bounded below by NOVELTY_RHO_FLOOR.
    """

    task = "novelty"
    requires_label = False

    def _transition(self, model, x, label, prediction):
        if prediction < model.rho:
            action: Action = "admit"
            support_vectors = model.support_vectors.append(self.eta, x)
            rho = model.rho
            cumulative_error = model.cumulative_error + 1.0
        else:
            action = "skip"
            support_vectors = model.support_vectors
            rho = max(NOVELTY_RHO_FLOOR, model.rho - self.eta * self.nu)
            cumulative_error = model.cumulative_error

        new_model = model.replace(
            support_vectors=support_vectors,
            rho=rho,
            cumulative_error=cumulative_error,
            observation_count=model.observation_count + 1,
        )
        return UpdateStep(new_model, action, prediction, max(0.0, model.rho - prediction))
