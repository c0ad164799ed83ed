"""
The model accumulation state threaded through an online training run.

A Model is an immutable value. Training folds examples into it one at a
time, producing a new Model per example; the final value is the trained
model handed to prediction.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Mapping, Optional, Union

from ..errors import DimensionMismatch, InvalidParameter
from ..kernels import KernelFunction, VectorLike, resolve_kernel
from .support_vectors import SupportVectorSet


Task = Literal["regression", "classification", "novelty"]

TASKS = ("regression", "classification", "novelty")


@dataclass(frozen=True)
class FlatModel:
    """
    Storage-boundary layout of a model's kernel expansion.

    ``flattened_vectors`` is the row-major concatenation of all support
    vectors, so it holds ``count * vector_dimension`` values.
    """

    vector_dimension: Optional[int]
    count: int
    weights: List[float]
    flattened_vectors: List[float]


@dataclass(frozen=True)
class Model:
    """
    Online kernel machine state.

    Attributes:
        kernel: Resolved kernel; ``kernel.identifier`` is the stored handle.
        task: "regression", "classification" or "novelty".
        observation_count: Number of training examples processed.
        cumulative_error: Running sum of the task's error term.
        epsilon: Half-width of the regression insensitivity tube (>= 0).
        rho: Classification / novelty margin threshold.
        offset: Bias term added to the kernel expansion.
        support_vectors: Admitted (weight, vector) pairs, append-only.
        name: Optional label used when the model is part of an ensemble.
    """

    kernel: KernelFunction
    task: Task = "regression"
    observation_count: int = 0
    cumulative_error: float = 0.0
    epsilon: float = 0.0
    rho: float = 1.0
    offset: float = 0.0
    support_vectors: SupportVectorSet = field(default_factory=SupportVectorSet)
    name: Optional[str] = None

    @classmethod
    def empty(
        cls,
        kernel: Union[KernelFunction, str, Mapping[str, Any]],
        task: Task = "regression",
        name: Optional[str] = None,
    ) -> "Model":
        """Fresh model at the start of a training run."""
        if task not in TASKS:
            raise InvalidParameter(f"Unknown task: {task!r}")
        return cls(kernel=resolve_kernel(kernel), task=task, name=name)

    @property
    def vector_dimension(self) -> Optional[int]:
        """Dimension fixed by the first admitted example (None before that)."""
        return self.support_vectors.dimension

    @property
    def num_support_vectors(self) -> int:
        return len(self.support_vectors)

    def predict(self, x: VectorLike, kernel: Optional[KernelFunction] = None) -> float:
        """Decision value ``f(x) = offset + sum_i w_i k(sv_i, x)``."""
        return self.support_vectors.evaluate(
            x, kernel if kernel is not None else self.kernel, self.offset
        )

    def replace(self, **changes: Any) -> "Model":
        return dataclasses.replace(self, **changes)

    # ------------------------------------------------------------------
    # Storage boundary
    # ------------------------------------------------------------------

    def export(self) -> FlatModel:
        """Export the kernel expansion in the flattened row-major layout."""
        weights, flat = self.support_vectors.to_flat()
        return FlatModel(
            vector_dimension=self.vector_dimension,
            count=len(weights),
            weights=weights,
            flattened_vectors=flat,
        )

    @classmethod
    def from_export(
        cls,
        flat: FlatModel,
        kernel: Union[KernelFunction, str, Mapping[str, Any]],
        task: Task = "regression",
        **stats: Any,
    ) -> "Model":
        """
        Rebuild a model from its flattened layout.

        Args:
            flat: Exported expansion.
            kernel: Kernel or kernel handle to attach.
            task: Task the model was trained for.
            **stats: Scalar statistics (observation_count, epsilon, rho,
                offset, cumulative_error, name).

        Raises:
            DimensionMismatch: If the flattened data is inconsistent with
                ``count`` and ``vector_dimension``.
        """
        if len(flat.weights) != flat.count:
            raise DimensionMismatch(
                f"export declares {flat.count} support vectors but has {len(flat.weights)} weights"
            )
        dim = flat.vector_dimension or 0
        if flat.count > 0 and dim <= 0:
            raise DimensionMismatch("non-empty export without a vector dimension")
        if len(flat.flattened_vectors) != flat.count * dim:
            raise DimensionMismatch(
                f"expected {flat.count * dim} flattened values, got {len(flat.flattened_vectors)}"
            )
        vectors = [
            flat.flattened_vectors[i * dim : (i + 1) * dim] for i in range(flat.count)
        ]
        svs = SupportVectorSet.from_arrays(flat.weights, vectors)
        model = cls.empty(kernel, task)
        return dataclasses.replace(model, support_vectors=svs, **stats)

    def state_dict(self) -> Dict[str, Any]:
        """Plain-Python snapshot including scalars and the kernel identifier."""
        flat = self.export()
        return {
            "task": self.task,
            "name": self.name,
            "kernel": self.kernel.identifier,
            "observation_count": self.observation_count,
            "cumulative_error": self.cumulative_error,
            "epsilon": self.epsilon,
            "rho": self.rho,
            "offset": self.offset,
            "vector_dimension": flat.vector_dimension,
            "count": flat.count,
            "weights": flat.weights,
            "flattened_vectors": flat.flattened_vectors,
        }

    @classmethod
    def from_state_dict(
        cls,
        state: Mapping[str, Any],
        kernel: Optional[KernelFunction] = None,
    ) -> "Model":
        """Inverse of :meth:`state_dict`. ``kernel`` overrides the stored handle."""
        flat = FlatModel(
            vector_dimension=state["vector_dimension"],
            count=state["count"],
            weights=list(state["weights"]),
            flattened_vectors=list(state["flattened_vectors"]),
        )
        return cls.from_export(
            flat,
            kernel if kernel is not None else state["kernel"],
            task=state["task"],
            name=state.get("name"),
            observation_count=state["observation_count"],
            cumulative_error=state["cumulative_error"],
            epsilon=state["epsilon"],
            rho=state["rho"],
            offset=state["offset"],
        )

    def summary(self) -> Dict[str, Any]:
        """Scalar statistics for logging."""
        return {
            "task": self.task,
            "observation_count": self.observation_count,
            "num_support_vectors": self.num_support_vectors,
            "vector_dimension": self.vector_dimension,
            "cumulative_error": self.cumulative_error,
            "epsilon": self.epsilon,
            "rho": self.rho,
            "offset": self.offset,
        }

    def __repr__(self) -> str:
        label = f"name={self.name!r}, " if self.name is not None else ""
        return (
            f"Model({label}task={self.task}, kernel={self.kernel!r}, "
            f"observations={self.observation_count}, "
            f"support_vectors={self.num_support_vectors}, "
            f"epsilon={self.epsilon:.4f}, rho={self.rho:.4f}, offset={self.offset:.4f})"
        )
