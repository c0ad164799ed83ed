"""
Ensemble training over disjoint partitions.

Each partition trains its own model with the same update rule and kernel;
models never share state and are only combined at prediction time (see
``evaluation.predict_ensemble``). Partitions may run on a thread pool since
each fold is independent; results always come back in partition order.
"""

from __future__ import annotations

import os
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from ..core.items import ExampleLike
from ..errors import EmptyEnsemble, InvalidParameter
from ..kernels import resolve_kernel
from ..logging import EnsembleMetricsLogger
from ..models import Model
from ..policies import UpdateRule
from .online import KernelSpec, OnlineTrainResult, train_on_stream


@dataclass
class PartitionTrainResult:
    """Training outcome for one ensemble member."""

    partition_idx: int
    result: OnlineTrainResult
    elapsed_seconds: float

    @property
    def model(self) -> Model:
        return self.result.model


def _resolve_workers(num_partitions: int, max_workers: Optional[int]) -> int:
    cpu = os.cpu_count() or 1
    if max_workers is None:
        return min(cpu, num_partitions)
    return max(1, min(max_workers, num_partitions))


def train_ensemble(
    rule: UpdateRule,
    partitions: Sequence[Iterable[ExampleLike]],
    kernel: KernelSpec,
    *,
    names: Optional[Sequence[str]] = None,
    max_workers: Optional[int] = 1,
    metrics_logger: Optional[EnsembleMetricsLogger] = None,
    verbose: bool = False,
) -> List[PartitionTrainResult]:
    """
    Train one independent model per partition.

    Args:
        rule: Update rule shared by all members (rules hold no mutable state).
        partitions: One example stream per member; streams must not overlap.
        kernel: Kernel, name or identifier dict, resolved once for all members.
        names: Optional member names (defaults to ``model_<i>``).
        max_workers: Thread pool size. 1 trains sequentially, None uses up to
            one thread per CPU.
        metrics_logger: Optional per-partition CSV logger.
        verbose: Print one line per finished partition.

    Returns:
        One :class:`PartitionTrainResult` per partition, in partition order.

    Raises:
        EmptyEnsemble: If no partitions are given.
        InvalidParameter: If ``names`` does not match the partition count.
    """
    if len(partitions) == 0:
        raise EmptyEnsemble("cannot train an ensemble over zero partitions")
    if names is not None and len(names) != len(partitions):
        raise InvalidParameter(f"{len(names)} names given for {len(partitions)} partitions")

    kernel = resolve_kernel(kernel)

    def _train_one(idx: int) -> PartitionTrainResult:
        start = time.time()
        name = names[idx] if names is not None else f"model_{idx}"
        result = train_on_stream(rule, partitions[idx], kernel, name=name)
        return PartitionTrainResult(idx, result, time.time() - start)

    workers = _resolve_workers(len(partitions), max_workers)
    if workers == 1:
        results = [_train_one(i) for i in range(len(partitions))]
    else:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = [pool.submit(_train_one, i) for i in range(len(partitions))]
            results = [future.result() for future in futures]

    for pr in results:
        if metrics_logger is not None:
            metrics_logger.log_partition(
                pr.partition_idx,
                pr.model,
                items_processed=pr.result.items_processed,
                items_admitted=pr.result.items_admitted,
                elapsed=pr.elapsed_seconds,
            )
        if verbose:
            print(
                f"  Partition {pr.partition_idx}: {pr.result.items_processed} items, "
                f"{pr.model.num_support_vectors} support vectors "
                f"({pr.elapsed_seconds:.1f}s)"
            )

    return results
