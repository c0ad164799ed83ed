import pytest
import torch

from online_kernel_machines.errors import DimensionMismatch, InvalidParameter
from online_kernel_machines.kernels import DotKernel, GaussianKernel, PolynomialKernel
from online_kernel_machines.models import FlatModel, Model
from online_kernel_machines.training import train_classification, train_regression


def test_export_layout():
    model = train_classification(
        [([1.0, 2.0, 3.0], 1.0), ([4.0, 5.0, 6.0], -1.0)],
        DotKernel(),
        eta=0.5,
    )
    flat = model.export()
    assert flat.vector_dimension == 3
    assert flat.count == 2
    assert flat.weights == [0.5, -0.5]
    assert flat.flattened_vectors == [1.0, 2.0, 3.0, 4.0, 5.0, 6.0]
    assert len(flat.flattened_vectors) == flat.count * flat.vector_dimension


def test_export_of_empty_model():
    flat = Model.empty(DotKernel()).export()
    assert flat == FlatModel(vector_dimension=None, count=0, weights=[], flattened_vectors=[])


def test_from_export_predicts_identically(classification_examples, gaussian_kernel):
    model = train_classification(classification_examples, gaussian_kernel, eta=0.2, nu=0.05)
    rebuilt = Model.from_export(
        model.export(),
        gaussian_kernel.identifier,
        task="classification",
        rho=model.rho,
        offset=model.offset,
    )
    for x, _ in classification_examples[:10]:
        assert rebuilt.predict(x) == model.predict(x)


def test_from_export_rejects_inconsistent_data():
    with pytest.raises(DimensionMismatch):
        Model.from_export(FlatModel(2, 2, [0.1, 0.2], [1.0, 2.0, 3.0]), DotKernel())
    with pytest.raises(DimensionMismatch):
        Model.from_export(FlatModel(2, 2, [0.1], [1.0, 2.0, 3.0, 4.0]), DotKernel())
    with pytest.raises(DimensionMismatch):
        Model.from_export(FlatModel(None, 1, [0.1], [1.0]), DotKernel())


def test_state_dict_round_trip(regression_examples):
    model = train_regression(
        regression_examples, PolynomialKernel(degree=3), eta=0.05, nu=0.3
    ).replace(name="poly")
    state = model.state_dict()
    assert state["kernel"] == {"name": "polynomial", "params": {"degree": 3}}

    restored = Model.from_state_dict(state)
    assert restored.name == "poly"
    assert restored.task == "regression"
    assert restored.kernel == model.kernel
    assert restored.summary() == model.summary()
    assert restored.export() == model.export()


def test_state_dict_survives_torch_save(tmp_path, classification_examples):
    model = train_classification(classification_examples, GaussianKernel(gamma=0.5))
    path = tmp_path / "model.pt"
    torch.save(model.state_dict(), path)
    restored = Model.from_state_dict(torch.load(path))
    assert restored.predict([0.5, 0.5]) == model.predict([0.5, 0.5])


def test_kernel_override_on_load(classification_examples):
    model = train_classification(classification_examples, GaussianKernel(gamma=0.5))
    restored = Model.from_state_dict(model.state_dict(), kernel=GaussianKernel(gamma=2.0))
    assert restored.kernel.gamma == 2.0


def test_unknown_task_rejected():
    with pytest.raises(InvalidParameter):
        Model.empty(DotKernel(), task="ranking")
