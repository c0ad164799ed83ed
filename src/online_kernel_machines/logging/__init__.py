"""
Logging and experiment tracking utilities.

- Experiment tracking: Git info, run directories, environment info
- TrainingMetricsLogger: Example-based CSV logging for online training
- EnsembleMetricsLogger: Partition-based CSV logging for ensemble training
"""

from .ensemble_logger import EnsembleMetricsLogger
from .experiment import (
    create_run_dir,
    get_environment_info,
    get_git_info,
    save_run_info,
)
from .training_logger import TrainingMetricsLogger

__all__ = [
    "get_git_info",
    "get_environment_info",
    "create_run_dir",
    "save_run_info",
    "EnsembleMetricsLogger",
    "TrainingMetricsLogger",
]
