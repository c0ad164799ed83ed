"""
Core data structures for online training streams.

Defines the Example class, the unit of data flowing through an online
training run: one feature vector, an optional label, and provenance
metadata.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Iterator, Optional, Sequence, Tuple, Union

import torch

from ..errors import DimensionMismatch
from ..kernels import as_vector


class Example:
    """
    A single training or evaluation example.

    - **Regression**: ``label`` is the real-valued target.
    - **Classification**: ``label`` is +1 or -1.
    - **Novelty detection**: ``label`` is None.

    Attributes:
        vector: Feature vector as a 1-D float64 tensor.
        label: Target value, or None for unlabelled examples.
        metadata: Dict with provenance info (source, row index, etc.).
    """

    __slots__ = ("vector", "label", "metadata")

    def __init__(
        self,
        vector: Union[torch.Tensor, Sequence[float]],
        label: Optional[float] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ):
        self.vector = as_vector(vector)
        self.label = None if label is None else float(label)
        self.metadata = metadata if metadata is not None else {}

    @property
    def dimension(self) -> int:
        return self.vector.numel()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "vector": self.vector.tolist(),
            "label": self.label,
            "metadata": self.metadata,
        }

    def __repr__(self) -> str:
        parts = [f"dim={self.dimension}"]
        if self.label is not None:
            parts.append(f"label={self.label:g}")
        row = self.metadata.get("row")
        if row is not None:
            parts.append(f"row={row}")
        return f"Example({', '.join(parts)})"


ExampleLike = Union[Example, Tuple[Any, Any], Sequence[float], torch.Tensor]


def to_example(item: ExampleLike, labelled: bool = True) -> Example:
    """
    Normalize a stream element into an Example.

    Labelled streams accept ``Example`` objects or ``(vector, label)`` pairs;
    unlabelled streams accept ``Example`` objects or bare vectors.
    """
    if isinstance(item, Example):
        return item
    if labelled:
        try:
            vector, label = item
        except (TypeError, ValueError):
            raise DimensionMismatch(
                f"labelled stream items must be (vector, label) pairs, got {item!r}"
            ) from None
        return Example(vector, label)
    return Example(item)


def iter_examples(items: Iterable[ExampleLike], labelled: bool = True) -> Iterator[Example]:
    for item in items:
        yield to_example(item, labelled=labelled)
