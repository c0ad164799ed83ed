import csv

import pytest

from online_kernel_machines.core import (
    Example,
    ExampleStream,
    PartitionStream,
    partition_examples,
)
from online_kernel_machines.errors import EmptyEnsemble, InvalidParameter
from online_kernel_machines.evaluation import evaluate_ensemble, predict_ensemble
from online_kernel_machines.kernels import GaussianKernel
from online_kernel_machines.logging import EnsembleMetricsLogger
from online_kernel_machines.policies import ClassificationRule, NoveltyRule
from online_kernel_machines.training import train_ensemble


@pytest.fixture
def ring_stream(classification_examples):
    return ExampleStream([Example(x, y) for x, y in classification_examples], name="rings")


def _partitions(stream, k, seed=0):
    return [
        PartitionStream(stream, idx)
        for idx in partition_examples(len(stream), k, seed=seed)
    ]


def test_one_model_per_partition(ring_stream):
    results = train_ensemble(
        ClassificationRule(eta=0.2, nu=0.05),
        _partitions(ring_stream, 3),
        GaussianKernel(gamma=0.5),
    )
    assert [r.partition_idx for r in results] == [0, 1, 2]
    assert [r.model.name for r in results] == ["model_0", "model_1", "model_2"]
    assert sum(r.result.items_processed for r in results) == len(ring_stream)
    for r in results:
        assert r.result.items_admitted == r.model.num_support_vectors


def test_threaded_matches_sequential(ring_stream):
    rule = ClassificationRule(eta=0.2, nu=0.05)
    sequential = train_ensemble(rule, _partitions(ring_stream, 4), "gaussian", max_workers=1)
    threaded = train_ensemble(rule, _partitions(ring_stream, 4), "gaussian", max_workers=4)
    for a, b in zip(sequential, threaded):
        assert a.model.export() == b.model.export()
        assert a.model.rho == b.model.rho


def test_custom_names_flow_into_predictions(ring_stream):
    results = train_ensemble(
        ClassificationRule(),
        _partitions(ring_stream, 2),
        GaussianKernel(),
        names=["north", "south"],
    )
    keys = [key for key, _ in predict_ensemble([r.model for r in results], [0.0, 0.0])]
    assert keys == ["north", "south", "avg"]


def test_names_length_must_match(ring_stream):
    with pytest.raises(InvalidParameter):
        train_ensemble(ClassificationRule(), _partitions(ring_stream, 2), "dot", names=["only"])


def test_zero_partitions():
    with pytest.raises(EmptyEnsemble):
        train_ensemble(ClassificationRule(), [], "dot")


def test_ensemble_logger_rows(tmp_path, ring_stream):
    logger = EnsembleMetricsLogger(tmp_path, eval_keys=["accuracy"])
    results = train_ensemble(
        ClassificationRule(eta=0.2, nu=0.05),
        _partitions(ring_stream, 3),
        GaussianKernel(gamma=0.5),
        metrics_logger=logger,
    )
    with open(tmp_path / "partitions.csv", newline="") as f:
        rows = list(csv.DictReader(f))
    assert [int(r["partition"]) for r in rows] == [0, 1, 2]
    assert [int(r["num_support_vectors"]) for r in rows] == [
        r.model.num_support_vectors for r in results
    ]
    assert rows[0]["eval_accuracy"] == ""


def test_evaluate_ensemble_classification(ring_stream):
    results = train_ensemble(
        ClassificationRule(eta=0.2, nu=0.05),
        _partitions(ring_stream, 2),
        GaussianKernel(gamma=0.5),
    )
    metrics = evaluate_ensemble([r.model for r in results], ring_stream)
    assert metrics["num_items"] == len(ring_stream)
    assert metrics["tp"] + metrics["fp"] + metrics["fn"] + metrics["tn"] == len(ring_stream)
    assert 0.0 <= metrics["accuracy"] <= 1.0


def test_novelty_ensemble(novelty_vectors):
    halves = [novelty_vectors[::2], novelty_vectors[1::2]]
    results = train_ensemble(NoveltyRule(eta=0.5, nu=0.1), halves, GaussianKernel(gamma=0.5))
    assert all(r.model.task == "novelty" for r in results)

    metrics = evaluate_ensemble([r.model for r in results], [[10.0, 10.0], [-10.0, 10.0]])
    assert metrics["num_items"] == 2
    assert metrics["novelty_rate"] == 1.0
