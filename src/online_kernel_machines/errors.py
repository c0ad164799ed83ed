"""
Exception taxonomy for online kernel machines.

Every error is raised at the point of detection and propagated unchanged.
Nothing in the package retries or recovers from malformed input; skipping
bad partitions is the caller's job.
"""

from __future__ import annotations


class KernelMachineError(Exception):
    """Base class for all errors raised by this package."""


class InvalidParameter(KernelMachineError, ValueError):
    """A learning-rate, margin or kernel parameter is out of range."""


class DimensionMismatch(KernelMachineError, ValueError):
    """A vector's length disagrees with the model or the other kernel argument."""


class EmptyEnsemble(KernelMachineError, ValueError):
    """Ensemble prediction was requested over zero models."""


class SingleModelEnsemble(KernelMachineError, ValueError):
    """Ensemble prediction was requested over exactly one model."""


class EmptyModel(KernelMachineError, ValueError):
    """A model without support vectors was used where a trained one is required."""


class NumericInstability(KernelMachineError, ArithmeticError):
    """A prediction or loss signal became NaN or infinite."""
