"""
Kernel functions for online kernel machines.

A kernel is a symmetric similarity between two vectors standing in for an
inner product in feature space. Each kernel can be evaluated on a single
pair of vectors, or between every row of a support vector matrix and one
query vector (the hot path during training and prediction).

All arithmetic is carried out in float64 on CPU so that a given stream of
examples always produces bit-identical models.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional, Sequence, Union

import torch

from ..errors import DimensionMismatch, InvalidParameter


DTYPE = torch.float64

VectorLike = Union[torch.Tensor, Sequence[float]]


def as_vector(x: VectorLike) -> torch.Tensor:
    """
    Convert a vector-like value into a 1-D float64 tensor.

    Raises:
        DimensionMismatch: If ``x`` is not one-dimensional or is empty.
    """
    vec = torch.as_tensor(x, dtype=DTYPE)
    if vec.dim() != 1:
        raise DimensionMismatch(f"expected a 1-D vector, got shape {tuple(vec.shape)}")
    if vec.numel() == 0:
        raise DimensionMismatch("vectors must have at least one component")
    return vec


class KernelFunction(ABC):
    """
    Base class for kernel functions.

    Subclasses implement ``_pairwise`` (two vectors of equal length) and
    ``_rows`` (each row of a matrix against one vector). Length checks and
    tensor conversion happen here so subclasses only deal with the math.
    """

    name: str = "kernel"

    @abstractmethod
    def _pairwise(self, u: torch.Tensor, v: torch.Tensor) -> torch.Tensor:
        pass

    @abstractmethod
    def _rows(self, matrix: torch.Tensor, x: torch.Tensor) -> torch.Tensor:
        pass

    @property
    def params(self) -> Dict[str, Any]:
        """Constructor parameters, as stored in the kernel identifier."""
        return {}

    @property
    def identifier(self) -> Dict[str, Any]:
        """Opaque handle that ``resolve_kernel`` turns back into this kernel."""
        return {"name": self.name, "params": dict(self.params)}

    def evaluate(self, u: VectorLike, v: VectorLike) -> float:
        """
        Kernel value between two vectors.

        Raises:
            DimensionMismatch: If ``u`` and ``v`` have different lengths.
        """
        u = as_vector(u)
        v = as_vector(v)
        if u.numel() != v.numel():
            raise DimensionMismatch(
                f"kernel arguments differ in length: {u.numel()} vs {v.numel()}"
            )
        return float(self._pairwise(u, v))

    def evaluate_rows(self, matrix: torch.Tensor, x: torch.Tensor) -> torch.Tensor:
        """
        Kernel values between every row of ``matrix`` (n, d) and ``x`` (d,).

        Returns:
            Tensor of shape (n,).
        """
        if matrix.dim() != 2 or matrix.shape[1] != x.shape[0]:
            raise DimensionMismatch(
                f"cannot evaluate kernel between rows of shape {tuple(matrix.shape)} "
                f"and a vector of length {x.shape[0]}"
            )
        if matrix.shape[0] == 0:
            return torch.zeros(0, dtype=DTYPE)
        return self._rows(matrix, x)

    def __call__(self, u: VectorLike, v: VectorLike) -> float:
        return self.evaluate(u, v)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, KernelFunction):
            return NotImplemented
        return self.identifier == other.identifier

    def __hash__(self) -> int:
        return hash((self.name, repr(sorted(self.params.items()))))

    def __repr__(self) -> str:
        args = ", ".join(f"{k}={v!r}" for k, v in self.params.items())
        return f"{type(self).__name__}({args})"


# =============================================================================
# Reference kernels
# =============================================================================


class DotKernel(KernelFunction):
    """Plain inner product ``sum(u_i * v_i)``."""

    name = "dot"

    def _pairwise(self, u: torch.Tensor, v: torch.Tensor) -> torch.Tensor:
        return (u * v).sum()

    def _rows(self, matrix: torch.Tensor, x: torch.Tensor) -> torch.Tensor:
        return (matrix * x).sum(dim=1)


class PolynomialKernel(KernelFunction):
    """
    Homogeneous polynomial kernel ``(sum(u_i * v_i)) ** degree``.

    Args:
        degree: Positive integer exponent.
    """

    name = "polynomial"

    def __init__(self, degree: int = 2):
        if isinstance(degree, bool) or not isinstance(degree, int) or degree < 1:
            raise InvalidParameter(f"polynomial degree must be a positive int, got {degree!r}")
        self.degree = degree

    @property
    def params(self) -> Dict[str, Any]:
        return {"degree": self.degree}

    def _pairwise(self, u: torch.Tensor, v: torch.Tensor) -> torch.Tensor:
        return torch.pow((u * v).sum(), self.degree)

    def _rows(self, matrix: torch.Tensor, x: torch.Tensor) -> torch.Tensor:
        return torch.pow((matrix * x).sum(dim=1), self.degree)


class GaussianKernel(KernelFunction):
    """
    Gaussian (RBF) kernel ``exp(-gamma * sum((u_i - v_i) ** 2))``.

    Args:
        gamma: Positive, finite bandwidth parameter.
    """

    name = "gaussian"

    def __init__(self, gamma: float = 1.0):
        gamma = float(gamma)
        if not math.isfinite(gamma) or gamma <= 0.0:
            raise InvalidParameter(f"gaussian gamma must be positive and finite, got {gamma!r}")
        self.gamma = gamma

    @property
    def params(self) -> Dict[str, Any]:
        return {"gamma": self.gamma}

    def _pairwise(self, u: torch.Tensor, v: torch.Tensor) -> torch.Tensor:
        return torch.exp(-self.gamma * ((u - v) ** 2).sum())

    def _rows(self, matrix: torch.Tensor, x: torch.Tensor) -> torch.Tensor:
        return torch.exp(-self.gamma * ((matrix - x) ** 2).sum(dim=1))


# =============================================================================
# User-supplied kernels
# =============================================================================


class CustomKernel(KernelFunction):
    """
    Wraps an arbitrary pairwise callable as a kernel.

    The callable receives two float64 tensors of equal length and must return
    a scalar. Row evaluation falls back to one call per row, so custom
    kernels are slower than the built-in ones. The caller is responsible for
    the callable being symmetric and deterministic.

    Args:
        fn: Pairwise similarity ``fn(u, v) -> float``.
        name: Name recorded in the kernel identifier. Register the same
            name with ``register_kernel`` to make saved models resolvable.
        params: Optional parameters recorded in the identifier.
    """

    def __init__(
        self,
        fn: Callable[[torch.Tensor, torch.Tensor], Any],
        name: str = "custom",
        params: Optional[Dict[str, Any]] = None,
    ):
        if not callable(fn):
            raise InvalidParameter(f"custom kernel needs a callable, got {fn!r}")
        self.fn = fn
        self.name = name
        self._params = dict(params or {})

    @property
    def params(self) -> Dict[str, Any]:
        return self._params

    def _pairwise(self, u: torch.Tensor, v: torch.Tensor) -> torch.Tensor:
        return torch.as_tensor(self.fn(u, v), dtype=DTYPE)

    def _rows(self, matrix: torch.Tensor, x: torch.Tensor) -> torch.Tensor:
        return torch.stack([self._pairwise(row, x) for row in matrix])

    def __repr__(self) -> str:
        return f"CustomKernel(name={self.name!r}, fn={getattr(self.fn, '__name__', self.fn)!r})"
