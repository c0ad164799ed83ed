from __future__ import annotations

import math

import pytest

from online_kernel_machines.kernels import DotKernel, GaussianKernel


@pytest.fixture
def dot_kernel() -> DotKernel:
    return DotKernel()


@pytest.fixture
def gaussian_kernel() -> GaussianKernel:
    return GaussianKernel(gamma=0.5)


@pytest.fixture
def classification_examples() -> list:
    """Two concentric rings: inner ring labelled +1, outer ring -1."""
    examples = []
    for i in range(60):
        radius = 1.0 if i % 2 == 0 else 3.0
        angle = 0.7 * i
        x = [radius * math.cos(angle), radius * math.sin(angle)]
        examples.append((x, 1.0 if radius == 1.0 else -1.0))
    return examples


@pytest.fixture
def regression_examples() -> list:
    return [([i / 10.0], math.sin(i / 10.0)) for i in range(60)]


@pytest.fixture
def novelty_vectors() -> list:
    return [[0.1 * math.cos(i), 0.1 * math.sin(i)] for i in range(40)]
