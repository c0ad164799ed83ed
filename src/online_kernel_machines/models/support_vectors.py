"""
Append-only support vector storage.

A SupportVectorSet is an immutable view of the first ``count`` rows of a
shared, growable buffer. Appending writes the next row of the buffer and
returns a new view, so every intermediate model of a training run stays
valid while appends remain O(1) amortized. A view that is no longer the
tail of its buffer (an older state being appended to again) copies its
prefix into a fresh buffer before writing.
"""

from __future__ import annotations

from typing import Iterator, List, Optional, Sequence, Tuple

import torch

from ..errors import DimensionMismatch
from ..kernels import DTYPE, KernelFunction, VectorLike, as_vector


_INITIAL_CAPACITY = 16


class _Buffer:
    """Growable (capacity, dim) matrix plus weight column; ``size`` rows are in use."""

    __slots__ = ("dim", "data", "weights", "size")

    def __init__(self, dim: int, capacity: int = _INITIAL_CAPACITY):
        self.dim = dim
        self.data = torch.zeros((capacity, dim), dtype=DTYPE)
        self.weights = torch.zeros(capacity, dtype=DTYPE)
        self.size = 0

    @property
    def capacity(self) -> int:
        return self.data.shape[0]

    def grow(self) -> None:
        new_capacity = self.capacity * 2
        data = torch.zeros((new_capacity, self.dim), dtype=DTYPE)
        weights = torch.zeros(new_capacity, dtype=DTYPE)
        data[: self.size] = self.data[: self.size]
        weights[: self.size] = self.weights[: self.size]
        self.data = data
        self.weights = weights

    def copy_prefix(self, count: int) -> "_Buffer":
        capacity = max(_INITIAL_CAPACITY, self.capacity)
        other = _Buffer(self.dim, capacity)
        other.data[:count] = self.data[:count]
        other.weights[:count] = self.weights[:count]
        other.size = count
        return other


class SupportVectorSet:
    """
    Ordered collection of (weight, vector) pairs forming a kernel expansion.

    The only mutator is :meth:`append`, which returns a new set. There is no
    removal and no way to change an admitted weight.
    """

    __slots__ = ("_buffer", "_count")

    def __init__(self, _buffer: Optional[_Buffer] = None, _count: int = 0):
        self._buffer = _buffer
        self._count = _count

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_arrays(
        cls,
        weights: Sequence[float],
        vectors: Sequence[VectorLike],
    ) -> "SupportVectorSet":
        """Build a set from parallel sequences of weights and vectors."""
        if len(weights) != len(vectors):
            raise DimensionMismatch(
                f"{len(weights)} weights given for {len(vectors)} vectors"
            )
        svs = cls()
        for weight, vector in zip(weights, vectors):
            svs = svs.append(weight, vector)
        return svs

    def append(self, weight: float, vector: VectorLike) -> "SupportVectorSet":
        """
        Return a new set with ``(weight, vector)`` appended.

        The first vector fixes the dimension of the set.

        Raises:
            DimensionMismatch: If ``vector`` does not match the set's dimension.
        """
        vector = as_vector(vector)
        buffer = self._buffer
        if buffer is None:
            buffer = _Buffer(vector.numel())
        elif vector.numel() != buffer.dim:
            raise DimensionMismatch(
                f"vector of length {vector.numel()} does not match "
                f"support vector dimension {buffer.dim}"
            )
        elif buffer.size != self._count:
            buffer = buffer.copy_prefix(self._count)

        if buffer.size == buffer.capacity:
            buffer.grow()

        buffer.data[self._count] = vector
        buffer.weights[self._count] = float(weight)
        buffer.size = self._count + 1
        return SupportVectorSet(buffer, self._count + 1)

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def dimension(self) -> Optional[int]:
        """Vector dimension, or None while the set is empty."""
        if self._buffer is None or self._count == 0:
            return None
        return self._buffer.dim

    @property
    def weights(self) -> torch.Tensor:
        if self._count == 0:
            return torch.zeros(0, dtype=DTYPE)
        return self._buffer.weights[: self._count].clone()

    @property
    def vectors(self) -> torch.Tensor:
        if self._count == 0:
            return torch.zeros((0, 0), dtype=DTYPE)
        return self._buffer.data[: self._count].clone()

    @property
    def weight_sum(self) -> float:
        if self._count == 0:
            return 0.0
        return float(self._buffer.weights[: self._count].sum())

    def evaluate(
        self,
        x: VectorLike,
        kernel: KernelFunction,
        offset: float = 0.0,
    ) -> float:
        """
        Compute ``offset + sum_i weight_i * kernel(sv_i, x)``.

        An empty set returns ``offset`` for any input.

        Raises:
            DimensionMismatch: If ``x`` does not match the set's dimension.
        """
        x = as_vector(x)
        if self._count == 0:
            return float(offset)
        if x.numel() != self._buffer.dim:
            raise DimensionMismatch(
                f"query of length {x.numel()} does not match "
                f"support vector dimension {self._buffer.dim}"
            )
        k = kernel.evaluate_rows(self._buffer.data[: self._count], x)
        return float(offset) + float(torch.dot(self._buffer.weights[: self._count], k))

    def to_flat(self) -> Tuple[List[float], List[float]]:
        """Weights and the row-major concatenation of all vectors, as plain floats."""
        if self._count == 0:
            return [], []
        weights = self._buffer.weights[: self._count].tolist()
        flat = self._buffer.data[: self._count].reshape(-1).tolist()
        return weights, flat

    def __len__(self) -> int:
        return self._count

    def __iter__(self) -> Iterator[Tuple[float, torch.Tensor]]:
        for i in range(self._count):
            yield float(self._buffer.weights[i]), self._buffer.data[i].clone()

    def __repr__(self) -> str:
        return f"SupportVectorSet(count={self._count}, dimension={self.dimension})"
