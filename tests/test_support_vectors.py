import pytest

from online_kernel_machines.errors import DimensionMismatch
from online_kernel_machines.kernels import DotKernel, GaussianKernel
from online_kernel_machines.models import SupportVectorSet


def test_empty_set_evaluates_to_offset():
    svs = SupportVectorSet()
    assert len(svs) == 0
    assert svs.dimension is None
    assert svs.evaluate([1.0, 2.0], DotKernel(), offset=0.5) == 0.5


def test_append_returns_new_set():
    empty = SupportVectorSet()
    one = empty.append(0.5, [1.0, 2.0])
    assert len(empty) == 0
    assert len(one) == 1
    assert one.dimension == 2


def test_evaluate_weighted_sum():
    svs = SupportVectorSet().append(2.0, [1.0, 0.0]).append(-1.0, [0.0, 1.0])
    # 0.25 + 2 * 3 - 1 * 4
    assert svs.evaluate([3.0, 4.0], DotKernel(), offset=0.25) == pytest.approx(2.25)


def test_append_dimension_mismatch():
    svs = SupportVectorSet().append(1.0, [1.0, 2.0])
    with pytest.raises(DimensionMismatch):
        svs.append(1.0, [1.0, 2.0, 3.0])


def test_evaluate_dimension_mismatch():
    svs = SupportVectorSet().append(1.0, [1.0, 2.0])
    with pytest.raises(DimensionMismatch):
        svs.evaluate([1.0], GaussianKernel())


def test_branching_appends_do_not_interfere():
    base = SupportVectorSet().append(1.0, [1.0, 0.0])
    left = base.append(2.0, [0.0, 1.0])
    right = base.append(3.0, [1.0, 1.0])

    assert len(base) == 1
    assert left.weights.tolist() == [1.0, 2.0]
    assert left.vectors.tolist() == [[1.0, 0.0], [0.0, 1.0]]
    assert right.weights.tolist() == [1.0, 3.0]
    assert right.vectors.tolist() == [[1.0, 0.0], [1.0, 1.0]]


def test_growth_preserves_rows():
    svs = SupportVectorSet()
    for i in range(50):
        svs = svs.append(float(i), [float(i), -float(i)])
    assert len(svs) == 50
    assert svs.weights.tolist() == [float(i) for i in range(50)]
    assert svs.vectors[37].tolist() == [37.0, -37.0]


def test_accessors_return_copies():
    svs = SupportVectorSet().append(1.0, [1.0, 2.0])
    svs.weights[0] = 99.0
    svs.vectors[0, 0] = 99.0
    assert svs.weights.tolist() == [1.0]
    assert svs.vectors.tolist() == [[1.0, 2.0]]


def test_to_flat_is_row_major():
    svs = (
        SupportVectorSet()
        .append(0.1, [1.0, 2.0, 3.0])
        .append(-0.1, [4.0, 5.0, 6.0])
    )
    weights, flat = svs.to_flat()
    assert weights == [0.1, -0.1]
    assert flat == [1.0, 2.0, 3.0, 4.0, 5.0, 6.0]


def test_from_arrays_and_iteration():
    svs = SupportVectorSet.from_arrays([0.5, -0.5], [[1.0], [2.0]])
    pairs = [(w, v.tolist()) for w, v in svs]
    assert pairs == [(0.5, [1.0]), (-0.5, [2.0])]
    assert svs.weight_sum == 0.0


def test_from_arrays_length_mismatch():
    with pytest.raises(DimensionMismatch):
        SupportVectorSet.from_arrays([1.0], [[1.0], [2.0]])
