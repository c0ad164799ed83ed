"""
Training loops.

- Online: Sequential fold of an update rule over one example stream
- Ensemble: Independent models trained on disjoint partitions
"""

from .ensemble import PartitionTrainResult, train_ensemble
from .online import (
    OnlineTrainResult,
    train_classification,
    train_novelty_detection,
    train_on_stream,
    train_regression,
)

__all__ = [
    "OnlineTrainResult",
    "PartitionTrainResult",
    "train_classification",
    "train_ensemble",
    "train_novelty_detection",
    "train_on_stream",
    "train_regression",
]
