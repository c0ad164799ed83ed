from pathlib import Path

import pytest

from online_kernel_machines.config import EnsembleSVMConfig, OnlineSVMConfig
from online_kernel_machines.core import Example, iter_examples, load_examples_csv, to_example
from online_kernel_machines.errors import DimensionMismatch
from online_kernel_machines.kernels import GaussianKernel, PolynomialKernel
from online_kernel_machines.policies import NoveltyRule, RegressionRule, create_update_rule
from online_kernel_machines.training import train_on_stream

CONFIG_DIR = Path(__file__).resolve().parents[1] / "configs"


@pytest.fixture
def csv_file(tmp_path):
    path = tmp_path / "train.csv"
    path.write_text("x1,x2,y\n1.0,2.0,1\n-1.0,0.5,-1\n\n3.0,3.0,1\n")
    return path


def test_load_labelled_csv(csv_file):
    stream = load_examples_csv(csv_file)
    assert len(stream) == 3
    assert stream.dimension == 2
    assert stream[1].vector.tolist() == [-1.0, 0.5]
    assert stream[1].label == -1.0
    assert stream[2].metadata == {"source": "train.csv", "row": 2}


def test_load_named_columns(csv_file):
    stream = load_examples_csv(csv_file, label_column="x1", feature_columns=["y", "x2"])
    assert stream[0].vector.tolist() == [1.0, 2.0]
    assert stream[0].label == 1.0


def test_load_unlabelled_csv(csv_file):
    stream = load_examples_csv(csv_file, label_column=None)
    assert stream.dimension == 3
    assert all(example.label is None for example in stream)


def test_load_without_header(tmp_path):
    path = tmp_path / "raw.csv"
    path.write_text("0.5,1.5\n2.5,3.5\n")
    stream = load_examples_csv(path, label_column=0, has_header=False)
    assert [ex.label for ex in stream] == [0.5, 2.5]
    assert [ex.vector.tolist() for ex in stream] == [[1.5], [3.5]]


def test_bad_cell_raises(tmp_path):
    path = tmp_path / "bad.csv"
    path.write_text("a,b\n1.0,oops\n")
    with pytest.raises(ValueError):
        load_examples_csv(path)


def test_missing_column_raises(csv_file):
    with pytest.raises(ValueError):
        load_examples_csv(csv_file, label_column="target")
    with pytest.raises(ValueError):
        load_examples_csv(csv_file, label_column=5)


def test_csv_stream_trains(csv_file):
    stream = load_examples_csv(csv_file)
    rule = create_update_rule(OnlineSVMConfig(task="classification"))
    result = train_on_stream(rule, stream, GaussianKernel())
    assert result.items_processed == 3
    assert result.model.vector_dimension == 2


def test_to_example_forms():
    example = Example([1.0, 2.0], 1.0)
    assert to_example(example) is example
    assert to_example(([1.0, 2.0], -1.0)).label == -1.0
    assert to_example([1.0, 2.0, 3.0], labelled=False).dimension == 3
    with pytest.raises(DimensionMismatch):
        to_example([1.0, 2.0, 3.0])


def test_online_config_from_yaml():
    config = OnlineSVMConfig.from_yaml(CONFIG_DIR / "online_regression.yaml")
    assert config.task == "regression"
    assert config.checkpoint_interval == 500
    assert config.build_kernel() == GaussianKernel(gamma=1.0)
    assert isinstance(create_update_rule(config), RegressionRule)


def test_novelty_config_from_yaml():
    config = OnlineSVMConfig.from_yaml(CONFIG_DIR / "online_novelty.yaml")
    assert config.label_column is None
    assert config.build_kernel() == PolynomialKernel(degree=2)
    assert isinstance(create_update_rule(config), NoveltyRule)


def test_ensemble_config_ignores_unknown_keys(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("task: classification\nnum_partitions: 3\nnot_a_field: 1\n")
    config = EnsembleSVMConfig.from_yaml(path)
    assert config.num_partitions == 3
    assert config.output_dir == "outputs/ensemble_svm"
    assert not hasattr(config, "not_a_field")


def test_shipped_ensemble_config():
    config = EnsembleSVMConfig.from_yaml(CONFIG_DIR / "ensemble_classification.yaml")
    assert config.num_partitions == 4
    assert config.max_workers == 4
    assert config.kernel_params == {"gamma": 0.5}


def test_iter_examples_is_lazy():
    items = iter([([1.0], 1.0), ([2.0], -1.0), "not a pair"])
    examples = iter_examples(items)
    assert next(examples).label == 1.0
    assert next(examples).vector.tolist() == [2.0]
    with pytest.raises(DimensionMismatch):
        next(examples)
