"""Utility modules for experiments."""

from online_kernel_machines.utils.reproducibility import set_seed

__all__ = ["set_seed"]
