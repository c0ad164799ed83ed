import csv

import pytest

from online_kernel_machines.core import Example, ExampleStream, PartitionStream
from online_kernel_machines.errors import DimensionMismatch, InvalidParameter
from online_kernel_machines.kernels import DotKernel, GaussianKernel
from online_kernel_machines.logging import TrainingMetricsLogger
from online_kernel_machines.models import Model
from online_kernel_machines.policies import ClassificationRule, RegressionRule
from online_kernel_machines.training import (
    train_classification,
    train_novelty_detection,
    train_on_stream,
    train_regression,
)


def test_single_example_classification():
    model = train_classification([([1.0, -1.0], 1.0)], DotKernel())
    assert model.num_support_vectors == 1
    assert model.support_vectors.weights.tolist() == [0.1]
    assert model.observation_count == 1


def test_empty_stream_gives_empty_model():
    model = train_regression([], GaussianKernel())
    assert model.num_support_vectors == 0
    assert model.observation_count == 0
    assert model.vector_dimension is None


def test_invalid_parameters_checked_before_reading():
    consumed = []

    def examples():
        consumed.append(True)
        yield ([1.0], 1.0)

    with pytest.raises(InvalidParameter):
        train_classification(examples(), DotKernel(), eta=0.0)
    with pytest.raises(InvalidParameter):
        train_regression(examples(), DotKernel(), slambda=1.5)
    assert consumed == []


@pytest.mark.parametrize(
    "trainer, data_fixture, params",
    [
        (train_regression, "regression_examples", {"eta": 0.3, "nu": 0.2, "slambda": 0.4}),
        (train_classification, "classification_examples", {"eta": 0.2, "nu": 0.05}),
        (train_novelty_detection, "novelty_vectors", {"eta": 0.5, "nu": 0.1}),
    ],
)
def test_training_is_deterministic(request, gaussian_kernel, trainer, data_fixture, params):
    examples = request.getfixturevalue(data_fixture)
    first = trainer(examples, gaussian_kernel, **params)
    second = trainer(examples, gaussian_kernel, **params)
    # every scalar (epsilon, rho, offset, counts) plus the expansion
    assert first.state_dict() == second.state_dict()
    assert first.observation_count == len(examples)


def test_support_vectors_only_grow(regression_examples, gaussian_kernel):
    rule = RegressionRule(eta=0.3, nu=0.2, slambda=0.2)
    model = Model.empty(gaussian_kernel, task="regression")
    previous = 0
    for i, (x, y) in enumerate(regression_examples, start=1):
        before = model.export()
        model = rule.update(model, x, y)
        assert model.observation_count == i
        assert previous <= model.num_support_vectors <= previous + 1
        # earlier support vectors are never changed
        after = model.export()
        assert after.weights[: before.count] == before.weights
        assert after.flattened_vectors[: len(before.flattened_vectors)] == before.flattened_vectors
        previous = model.num_support_vectors
    assert previous <= len(regression_examples)


def test_regression_cumulative_error_nondecreasing(regression_examples, gaussian_kernel):
    rule = RegressionRule(eta=0.3, nu=0.2, slambda=0.2)
    model = Model.empty(gaussian_kernel, task="regression")
    for x, y in regression_examples:
        updated = rule.update(model, x, y)
        assert updated.cumulative_error >= model.cumulative_error
        model = updated


def test_stream_dimension_mismatch_aborts():
    examples = [([1.0, 2.0], 1.0), ([1.0, 2.0, 3.0], -1.0)]
    with pytest.raises(DimensionMismatch):
        train_classification(examples, DotKernel())


def test_novelty_detection_on_bare_vectors(novelty_vectors, gaussian_kernel):
    model = train_novelty_detection(novelty_vectors, gaussian_kernel, eta=0.5, nu=0.1)
    assert model.task == "novelty"
    assert model.observation_count == len(novelty_vectors)
    assert 1 <= model.num_support_vectors <= len(novelty_vectors)
    assert model.cumulative_error == model.num_support_vectors


def test_train_on_stream_counts(classification_examples, gaussian_kernel):
    result = train_on_stream(
        ClassificationRule(eta=0.2, nu=0.05),
        classification_examples,
        gaussian_kernel,
        name="rings",
    )
    assert result.items_processed == len(classification_examples)
    assert result.items_admitted == result.model.num_support_vectors
    assert result.model.name == "rings"


def test_train_on_stream_requires_kernel_or_model():
    with pytest.raises(InvalidParameter):
        train_on_stream(ClassificationRule(), [([1.0], 1.0)])


def test_continue_from_model_matches_single_run(classification_examples, gaussian_kernel):
    rule = ClassificationRule(eta=0.2, nu=0.05)
    full = train_on_stream(rule, classification_examples, gaussian_kernel).model

    half = train_on_stream(rule, classification_examples[:30], gaussian_kernel).model
    resumed = train_on_stream(rule, classification_examples[30:], model=half).model

    assert resumed.export() == full.export()
    assert resumed.observation_count == full.observation_count


def test_max_items_resumes_partition_stream():
    stream = ExampleStream([Example([float(i)], 1.0 if i % 2 else -1.0) for i in range(10)])
    partition = PartitionStream(stream, list(range(10)))
    rule = ClassificationRule()

    first = train_on_stream(rule, partition, DotKernel(), max_items=4)
    assert first.items_processed == 4
    assert partition.items_yielded == 4
    assert partition.remaining_items == 6

    second = train_on_stream(rule, partition, model=first.model)
    assert second.items_processed == 6
    assert second.model.observation_count == 10
    assert partition.exhausted


def test_metrics_logger_checkpoints(tmp_path, classification_examples, gaussian_kernel):
    logger = TrainingMetricsLogger(tmp_path, checkpoint_interval=20)
    eval_calls = []

    def eval_fn(model):
        eval_calls.append(model.observation_count)
        return {"num_support_vectors": model.num_support_vectors}

    result = train_on_stream(
        ClassificationRule(eta=0.2, nu=0.05),
        classification_examples,
        gaussian_kernel,
        metrics_logger=logger,
        eval_fn=eval_fn,
        eval_every_n_checkpoints=2,
    )

    with open(tmp_path / "training_metrics.csv", newline="") as f:
        rows = list(csv.DictReader(f))
    assert [int(r["items_processed"]) for r in rows] == [20, 40, 60]
    assert int(rows[-1]["num_support_vectors"]) == result.model.num_support_vectors
    assert int(rows[-1]["admitted"]) == result.items_admitted

    assert eval_calls == [40]
    with open(tmp_path / "evaluations.csv", newline="") as f:
        evaluations = list(csv.DictReader(f))
    assert len(evaluations) == 1
    assert evaluations[0]["metric"] == "num_support_vectors"

    summary = logger.get_summary()
    assert summary["items_processed"] == 60
    assert summary["admitted"] + summary["skipped"] == 60
