"""
Kernel functions and kernel resolution.

Available kernels:
    DotKernel           Inner product
    PolynomialKernel    Homogeneous polynomial of the inner product
    GaussianKernel      RBF kernel exp(-gamma * ||u - v||^2)
    CustomKernel        Wrapper around any pairwise callable

Factory:
    create_kernel       Build a kernel from its registered name
    register_kernel     Make a new kernel name resolvable
    resolve_kernel      Turn a kernel, name or identifier dict into a kernel
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Mapping, Union

from ..errors import InvalidParameter
from .functions import (
    DTYPE,
    CustomKernel,
    DotKernel,
    GaussianKernel,
    KernelFunction,
    PolynomialKernel,
    VectorLike,
    as_vector,
)


KernelFactory = Callable[..., KernelFunction]

_KERNEL_REGISTRY: Dict[str, KernelFactory] = {
    "dot": DotKernel,
    "polynomial": PolynomialKernel,
    "gaussian": GaussianKernel,
}


def register_kernel(name: str, factory: KernelFactory, overwrite: bool = False) -> None:
    """
    Register a kernel factory under ``name``.

    Args:
        name: Name used in configs and kernel identifiers.
        factory: Callable taking the kernel params as keyword arguments.
        overwrite: Allow replacing an existing registration.

    Raises:
        InvalidParameter: If the name is taken and ``overwrite`` is False.
    """
    if name in _KERNEL_REGISTRY and not overwrite:
        raise InvalidParameter(f"kernel {name!r} is already registered")
    _KERNEL_REGISTRY[name] = factory


def available_kernels() -> list[str]:
    return sorted(_KERNEL_REGISTRY)


def create_kernel(name: str, **params: Any) -> KernelFunction:
    """
    Create a kernel from its registered name.

    Args:
        name: Registered kernel name ("dot", "polynomial", "gaussian", ...).
        **params: Kernel parameters, e.g. ``degree`` or ``gamma``.

    Returns:
        Configured KernelFunction instance.

    Raises:
        InvalidParameter: For unknown names or invalid parameters.
    """
    try:
        factory = _KERNEL_REGISTRY[name]
    except KeyError:
        raise InvalidParameter(
            f"Unknown kernel: {name!r} (available: {', '.join(available_kernels())})"
        ) from None
    try:
        return factory(**params)
    except TypeError as exc:
        raise InvalidParameter(f"bad parameters for kernel {name!r}: {exc}") from exc


def resolve_kernel(
    kernel: Union[KernelFunction, str, Mapping[str, Any]],
) -> KernelFunction:
    """
    Resolve a kernel handle once, before training or prediction starts.

    Accepts a ready KernelFunction, a registered name, or an identifier dict
    of the form ``{"name": ..., "params": {...}}`` as produced by
    ``KernelFunction.identifier``.
    """
    if isinstance(kernel, KernelFunction):
        return kernel
    if isinstance(kernel, str):
        return create_kernel(kernel)
    if isinstance(kernel, Mapping) and "name" in kernel:
        return create_kernel(kernel["name"], **dict(kernel.get("params") or {}))
    raise InvalidParameter(f"cannot resolve kernel from {kernel!r}")


__all__ = [
    "DTYPE",
    "CustomKernel",
    "DotKernel",
    "GaussianKernel",
    "KernelFunction",
    "PolynomialKernel",
    "VectorLike",
    "as_vector",
    "available_kernels",
    "create_kernel",
    "register_kernel",
    "resolve_kernel",
]
