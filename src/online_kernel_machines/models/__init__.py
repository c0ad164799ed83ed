"""
Model state for online kernel machines.

- SupportVectorSet: Append-only (weight, vector) storage with kernel evaluation
- Model: Immutable accumulation state folded over a training stream
- FlatModel: Row-major export layout used at the storage boundary
"""

from .model import TASKS, FlatModel, Model, Task
from .support_vectors import SupportVectorSet

__all__ = ["TASKS", "FlatModel", "Model", "SupportVectorSet", "Task"]
