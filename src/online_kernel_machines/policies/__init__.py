"""
Update rules deciding which examples become support vectors.

Each rule looks at an example and the current model, decides whether to
admit the example as a support vector, and adapts the model's scalar
statistics.

Available rules:
    RegressionRule          Adaptive epsilon-tube regression
    ClassificationRule      Soft-margin binary classification
    NoveltyRule             One-class novelty detection

Factory:
    create_update_rule      Build an UpdateRule from an experiment config
"""

from __future__ import annotations

from typing import Any

from .update_rules import (
    DEFAULT_ETA,
    DEFAULT_NU,
    DEFAULT_SLAMBDA,
    NOVELTY_RHO_FLOOR,
    Action,
    ClassificationRule,
    NoveltyRule,
    RegressionRule,
    UpdateRule,
    UpdateStep,
)
from ..errors import InvalidParameter


def create_update_rule(config: Any) -> UpdateRule:
    """
    Create an update rule from an experiment config dataclass.

    Args:
        config: Any config object exposing ``task``, ``eta``, ``nu`` and,
            for regression, ``slambda``.

    Returns:
        Configured UpdateRule instance.
    """
    if config.task == "regression":
        return RegressionRule(eta=config.eta, nu=config.nu, slambda=config.slambda)
    elif config.task == "classification":
        return ClassificationRule(eta=config.eta, nu=config.nu)
    elif config.task == "novelty":
        return NoveltyRule(eta=config.eta, nu=config.nu)
    raise InvalidParameter(f"Unknown task: {config.task!r}")


__all__ = [
    "DEFAULT_ETA",
    "DEFAULT_NU",
    "DEFAULT_SLAMBDA",
    "NOVELTY_RHO_FLOOR",
    "Action",
    "ClassificationRule",
    "NoveltyRule",
    "RegressionRule",
    "UpdateRule",
    "UpdateStep",
    "create_update_rule",
]
