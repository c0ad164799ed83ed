"""
Disjoint partitioning of an example stream for ensemble training.

Splits an ExampleStream's indices into disjoint subsets, one per ensemble
member, and provides a resumable ordered stream per partition.
"""

from __future__ import annotations

import random
from typing import Any, Dict, Iterator, List, Optional

from .datasets import ExampleStream
from .items import Example


# =============================================================================
# Partitioning
# =============================================================================


def partition_examples(
    num_examples: int,
    num_partitions: int,
    strategy: str = "uniform",
    seed: int = 42,
) -> List[List[int]]:
    """
    Partition example indices into disjoint subsets.

    Args:
        num_examples: Total number of examples in the stream.
        num_partitions: Number of ensemble members.
        strategy: "uniform" shuffles and splits evenly (indices inside each
            partition are then sorted, so each member still sees its
            examples in stream order); "contiguous" assigns contiguous
            blocks.
        seed: Random seed for shuffling (only used with "uniform").

    Returns:
        List of num_partitions lists of indices. Subsets are disjoint and
        their union covers all examples.

    Raises:
        ValueError: If num_partitions is not positive or exceeds num_examples.
    """
    if num_partitions < 1:
        raise ValueError(f"num_partitions must be >= 1, got {num_partitions}")
    if num_partitions > num_examples:
        raise ValueError(
            f"num_partitions ({num_partitions}) exceeds num_examples ({num_examples})"
        )

    indices = list(range(num_examples))

    if strategy == "uniform":
        rng = random.Random(seed)
        rng.shuffle(indices)
    elif strategy == "contiguous":
        pass
    else:
        raise ValueError(f"Unknown partition strategy: {strategy!r}")

    # First (num_examples % num_partitions) partitions get one extra example.
    partitions: List[List[int]] = []
    base_size = num_examples // num_partitions
    remainder = num_examples % num_partitions
    offset = 0
    for i in range(num_partitions):
        size = base_size + (1 if i < remainder else 0)
        part = indices[offset : offset + size]
        if strategy == "uniform":
            part.sort()
        partitions.append(part)
        offset += size

    return partitions


# =============================================================================
# Partition stream
# =============================================================================


class PartitionStream:
    """
    A resumable stream over one partition's examples.

    Partially consuming the stream (e.g. with ``max_items`` in the training
    loop) and iterating again continues from where it left off.

    Args:
        stream: The underlying ExampleStream (shared, read-only).
        indices: Example indices assigned to this partition.
    """

    def __init__(self, stream: ExampleStream, indices: List[int]):
        self.stream = stream
        self.indices = indices
        self._iterator: Optional[Iterator[Example]] = None
        self._exhausted = False
        self.items_yielded = 0

    @property
    def total_items(self) -> int:
        return len(self.indices)

    @property
    def remaining_items(self) -> int:
        return len(self.indices) - self.items_yielded

    @property
    def exhausted(self) -> bool:
        return self._exhausted

    def __len__(self) -> int:
        return len(self.indices)

    def _generate(self) -> Iterator[Example]:
        for example in self.stream.get_subset_iterator(self.indices):
            self.items_yielded += 1
            yield example
        self._exhausted = True

    def __iter__(self) -> Iterator[Example]:
        if self._iterator is None:
            self._iterator = self._generate()
        return self._iterator

    def __next__(self) -> Example:
        if self._iterator is None:
            self._iterator = self._generate()
        return next(self._iterator)

    def get_label_stats(self) -> Dict[str, Any]:
        """Label distribution of this partition (for diagnosing non-IID splits)."""
        labels = [
            self.stream[i].label for i in self.indices if self.stream[i].label is not None
        ]
        n = len(labels)
        n_positive = sum(1 for y in labels if y > 0)
        return {
            "num_examples": len(self.indices),
            "num_labelled": n,
            "num_positive": n_positive,
            "positive_rate": n_positive / max(n, 1),
            "label_mean": sum(labels) / n if n else 0.0,
        }

    def __repr__(self) -> str:
        return (
            f"PartitionStream(items={len(self.indices)}, "
            f"yielded={self.items_yielded}, "
            f"exhausted={self._exhausted})"
        )
