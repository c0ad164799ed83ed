"""
Experiment configuration dataclasses.

Configs are loaded from YAML; keys that do not correspond to a field are
ignored so that one YAML file can carry settings for several scripts.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Literal, Optional, Union

import yaml

from .kernels import KernelFunction, create_kernel


@dataclass
class OnlineSVMConfig:
    """Single-model online training configuration."""

    # Paths
    train_path: str = "data/train.csv"
    eval_path: Optional[str] = None
    output_dir: str = "outputs/online_svm"

    # Data
    label_column: Optional[Union[str, int]] = -1
    has_header: bool = True

    # Task
    task: Literal["regression", "classification", "novelty"] = "classification"

    # Kernel
    kernel: str = "gaussian"
    kernel_params: Dict[str, Any] = field(default_factory=lambda: {"gamma": 1.0})

    # Update rule
    eta: float = 0.1
    nu: float = 0.005
    slambda: float = 0.2

    # Logging / evaluation
    checkpoint_interval: int = 1000
    eval_every_n_checkpoints: int = 1
    progress_bar: bool = True

    # Reproducibility
    seed: int = 42

    def build_kernel(self) -> KernelFunction:
        return create_kernel(self.kernel, **(self.kernel_params or {}))

    @classmethod
    def from_yaml(cls, path: str | Path) -> "OnlineSVMConfig":
        """Load config from YAML file."""
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
        return cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})


@dataclass
class EnsembleSVMConfig(OnlineSVMConfig):
    """Partitioned ensemble training configuration."""

    output_dir: str = "outputs/ensemble_svm"

    # --- Ensemble settings ---
    num_partitions: int = 4
    partition_strategy: Literal["uniform", "contiguous"] = "uniform"
    max_workers: Optional[int] = 1

    @classmethod
    def from_yaml(cls, path: str | Path) -> "EnsembleSVMConfig":
        """Load config from YAML file."""
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
        return cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})
