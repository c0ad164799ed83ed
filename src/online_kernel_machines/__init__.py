"""Online kernel machines: streaming SVM regression, classification and novelty detection."""

__version__ = "0.1.0"

from online_kernel_machines import (
    core,
    errors,
    evaluation,
    kernels,
    logging,
    models,
    policies,
    training,
    utils,
)
from online_kernel_machines.errors import (
    DimensionMismatch,
    EmptyEnsemble,
    EmptyModel,
    InvalidParameter,
    KernelMachineError,
    NumericInstability,
    SingleModelEnsemble,
)
from online_kernel_machines.evaluation import predict_ensemble, predict_single
from online_kernel_machines.kernels import (
    CustomKernel,
    DotKernel,
    GaussianKernel,
    KernelFunction,
    PolynomialKernel,
    create_kernel,
)
from online_kernel_machines.models import FlatModel, Model, SupportVectorSet
from online_kernel_machines.training import (
    train_classification,
    train_novelty_detection,
    train_regression,
)

__all__ = [
    "core",
    "errors",
    "evaluation",
    "kernels",
    "logging",
    "models",
    "policies",
    "training",
    "utils",
    "CustomKernel",
    "DimensionMismatch",
    "DotKernel",
    "EmptyEnsemble",
    "EmptyModel",
    "FlatModel",
    "GaussianKernel",
    "InvalidParameter",
    "KernelFunction",
    "KernelMachineError",
    "Model",
    "NumericInstability",
    "PolynomialKernel",
    "SingleModelEnsemble",
    "SupportVectorSet",
    "create_kernel",
    "predict_ensemble",
    "predict_single",
    "train_classification",
    "train_novelty_detection",
    "train_regression",
]
