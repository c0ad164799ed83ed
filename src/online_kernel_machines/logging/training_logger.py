"""
Metrics tracking for online kernel machine training.

Tracks admissions (support vectors added) versus skipped examples, the
evolution of the model's scalar statistics, and throughput.
"""

from __future__ import annotations

import csv
import time
from pathlib import Path
from typing import Any, Dict, Optional

from ..models import Model


class TrainingMetricsLogger:
    """
    Logger for online training metrics.

    Tracks:
    - Stream: examples processed, admitted, skipped, wall-clock time
    - Model: support vector count, epsilon, rho, offset, cumulative error
    - Performance: periodic evaluation on held-out data

    Args:
        log_dir: Directory to save CSV logs.
        checkpoint_interval: How often to log checkpoints (in examples processed).
        prefix: Optional file name prefix (one logger per ensemble member).
    """

    def __init__(
        self,
        log_dir: str | Path,
        checkpoint_interval: int = 1000,
        prefix: str = "",
    ):
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)

        self.checkpoint_interval = max(1, checkpoint_interval)

        self.metrics_file = self.log_dir / f"{prefix}training_metrics.csv"
        self.evaluations_file = self.log_dir / f"{prefix}evaluations.csv"

        self.num_items_processed = 0
        self.num_admitted = 0
        self.num_skipped = 0
        self.total_loss = 0.0
        self.start_time = time.time()

        self._init_metrics_csv()
        self._init_evaluations_csv()

    def _init_metrics_csv(self) -> None:
        with open(self.metrics_file, "w", newline="") as f:
            writer = csv.writer(f)
            writer.writerow([
                "checkpoint_idx",
                "items_processed",
                "admitted",
                "skipped",
                "admission_rate",
                "num_support_vectors",
                "epsilon",
                "rho",
                "offset",
                "cumulative_error",
                "avg_loss",
                "elapsed_seconds",
                "items_per_second",
            ])

    def _init_evaluations_csv(self) -> None:
        with open(self.evaluations_file, "w", newline="") as f:
            writer = csv.writer(f)
            writer.writerow([
                "checkpoint_idx",
                "items_processed",
                "metric",
                "value",
                "elapsed_seconds",
            ])

    def log_example(self, action: str, loss: float = 0.0) -> None:
        """
        Log processing of a single example.

        Args:
            action: "admit" or "skip".
            loss: The rule's loss signal for this example.
        """
        self.num_items_processed += 1
        self.total_loss += loss
        if action == "admit":
            self.num_admitted += 1
        else:
            self.num_skipped += 1

    def log_checkpoint(self, checkpoint_idx: int, model: Model) -> None:
        """Append a snapshot of counters and model statistics."""
        elapsed = time.time() - self.start_time
        items_per_sec = self.num_items_processed / max(elapsed, 1e-6)

        with open(self.metrics_file, "a", newline="") as f:
            writer = csv.writer(f)
            writer.writerow([
                checkpoint_idx,
                self.num_items_processed,
                self.num_admitted,
                self.num_skipped,
                f"{self.admission_rate:.4f}",
                model.num_support_vectors,
                f"{model.epsilon:.6f}",
                f"{model.rho:.6f}",
                f"{model.offset:.6f}",
                f"{model.cumulative_error:.6f}",
                f"{self.total_loss / max(self.num_items_processed, 1):.6f}",
                f"{elapsed:.2f}",
                f"{items_per_sec:.2f}",
            ])

    def log_evaluation(self, checkpoint_idx: int, eval_metrics: Dict[str, float]) -> None:
        """Append one row per evaluation metric."""
        elapsed = time.time() - self.start_time
        with open(self.evaluations_file, "a", newline="") as f:
            writer = csv.writer(f)
            for key, value in eval_metrics.items():
                writer.writerow([
                    checkpoint_idx,
                    self.num_items_processed,
                    key,
                    f"{float(value):.6f}",
                    f"{elapsed:.2f}",
                ])

    @property
    def admission_rate(self) -> float:
        return self.num_admitted / max(self.num_items_processed, 1)

    def should_checkpoint(self) -> bool:
        return self.num_items_processed % self.checkpoint_interval == 0

    def get_summary(self) -> Dict[str, Any]:
        elapsed = time.time() - self.start_time
        return {
            "items_processed": self.num_items_processed,
            "admitted": self.num_admitted,
            "skipped": self.num_skipped,
            "admission_rate": self.admission_rate,
            "avg_loss": self.total_loss / max(self.num_items_processed, 1),
            "elapsed_seconds": elapsed,
            "items_per_second": self.num_items_processed / max(elapsed, 1e-6),
        }

    def print_summary(self, model: Optional[Model] = None) -> None:
        stats = self.get_summary()

        print()
        print("=" * 60)
        print("Online Training Summary")
        print("=" * 60)
        print(f"  Items processed      : {stats['items_processed']}")
        print(f"  Admitted (SVs added) : {stats['admitted']}")
        print(f"  Skipped              : {stats['skipped']}")
        print(f"  Admission rate       : {stats['admission_rate']:.4f}")
        print(f"  Average loss         : {stats['avg_loss']:.4f}")
        print(f"  Elapsed time         : {stats['elapsed_seconds']:.1f}s")
        print(f"  Items per second     : {stats['items_per_second']:.2f}")
        if model is not None:
            print(f"  Epsilon              : {model.epsilon:.4f}")
            print(f"  Rho                  : {model.rho:.4f}")
            print(f"  Offset               : {model.offset:.4f}")
            print(f"  Cumulative error     : {model.cumulative_error:.4f}")
        print("=" * 60)
        print()
