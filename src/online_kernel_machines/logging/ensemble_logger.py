"""
Metrics tracking for partitioned ensemble training.

Logs one row per ensemble member (partition) to partitions.csv.
"""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Optional

from ..models import Model


class EnsembleMetricsLogger:
    """CSV logger for per-partition ensemble results.

    Writes partitions.csv with one row per trained member, containing the
    partition size, training counts, the final model statistics and optional
    held-out evaluation metrics.

    Args:
        log_dir: Directory to write partitions.csv into.
        eval_keys: Evaluation metric names to reserve columns for.
    """

    def __init__(self, log_dir: str | Path, eval_keys: Optional[list[str]] = None):
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.eval_keys = list(eval_keys or [])

        self.partitions_file = self.log_dir / "partitions.csv"
        with open(self.partitions_file, "w", newline="") as f:
            writer = csv.writer(f)
            header = [
                "partition",
                "name",
                "items_processed",
                "items_admitted",
                "num_support_vectors",
                "epsilon",
                "rho",
                "offset",
                "cumulative_error",
                "elapsed_seconds",
            ]
            header += [f"eval_{k}" for k in self.eval_keys]
            writer.writerow(header)

    def log_partition(
        self,
        partition_idx: int,
        model: Model,
        items_processed: int,
        items_admitted: int,
        elapsed: float,
        eval_metrics: Optional[dict] = None,
    ) -> None:
        """Append one row to partitions.csv."""
        row: list = [
            partition_idx,
            model.name or "",
            items_processed,
            items_admitted,
            model.num_support_vectors,
            f"{model.epsilon:.6f}",
            f"{model.rho:.6f}",
            f"{model.offset:.6f}",
            f"{model.cumulative_error:.6f}",
            f"{elapsed:.2f}",
        ]
        if eval_metrics is not None:
            row += [f"{eval_metrics.get(k, 0.0):.4f}" for k in self.eval_keys]
        else:
            row += [""] * len(self.eval_keys)

        with open(self.partitions_file, "a", newline="") as f:
            csv.writer(f).writerow(row)
