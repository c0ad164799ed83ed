"""
Online kernel machine training experiment.

Trains a single regression, classification or novelty-detection model in
one pass over a CSV example stream, logging admissions and model statistics
at checkpoints and evaluating on an optional held-out CSV.

Usage:
    python experiments/online_svm.py --config configs/online_classification.yaml
    python experiments/online_svm.py --config configs/online_regression.yaml
"""

from __future__ import annotations

import argparse
import shutil
import sys
from datetime import datetime
from pathlib import Path

import torch

PROJECT_ROOT = Path(__file__).resolve().parents[1]

from online_kernel_machines.config import OnlineSVMConfig
from online_kernel_machines.core import load_examples_csv
from online_kernel_machines.evaluation import evaluate_model, require_trained
from online_kernel_machines.logging import TrainingMetricsLogger, create_run_dir, save_run_info
from online_kernel_machines.models import Model
from online_kernel_machines.policies import create_update_rule
from online_kernel_machines.training import train_on_stream
from online_kernel_machines.utils import set_seed


def main(config: OnlineSVMConfig, config_path: Path, command: str) -> None:
    """Run online kernel machine training."""

    start_time = datetime.now()

    print("=" * 60)
    print(f"Online Kernel Machine Training ({config.task})")
    print("=" * 60)

    set_seed(config.seed)

    run_dir = create_run_dir(PROJECT_ROOT / config.output_dir)
    print(f"Run directory: {run_dir}")
    shutil.copy(config_path, run_dir / "config.yaml")

    # Resolve kernel and rule up front so bad parameters fail before any data is read
    kernel = config.build_kernel()
    rule = create_update_rule(config)
    print(f"Kernel: {kernel!r}")
    print(f"Update rule: {rule!r}")

    label_column = None if config.task == "novelty" else config.label_column

    print("\nLoading example streams...")
    train_stream = load_examples_csv(
        PROJECT_ROOT / config.train_path,
        label_column=label_column,
        has_header=config.has_header,
    )
    print(f"  Train: {train_stream}")

    eval_stream = None
    if config.eval_path:
        eval_stream = load_examples_csv(
            PROJECT_ROOT / config.eval_path,
            label_column=label_column,
            has_header=config.has_header,
        )
        print(f"  Eval:  {eval_stream}")

    metrics_logger = TrainingMetricsLogger(
        log_dir=run_dir,
        checkpoint_interval=config.checkpoint_interval,
    )

    dataset_info = {
        "train_total": len(train_stream),
        "eval_total": len(eval_stream) if eval_stream is not None else None,
        "vector_dimension": train_stream.dimension,
    }
    save_run_info(
        run_dir=run_dir,
        config=config,
        command=command,
        start_time=start_time,
        dataset_info=dataset_info,
        repo_path=PROJECT_ROOT,
    )

    eval_fn = None
    if eval_stream is not None:
        def eval_fn(m: Model) -> dict:
            return evaluate_model(m, eval_stream)

    print("\n" + "=" * 60)
    print("Starting online training...")
    print("=" * 60)

    result = train_on_stream(
        rule,
        train_stream,
        kernel,
        metrics_logger=metrics_logger,
        eval_fn=eval_fn,
        eval_every_n_checkpoints=config.eval_every_n_checkpoints,
        progress_bar=config.progress_bar,
    )
    model = require_trained(result.model)

    print("\n" + "=" * 60)
    print("Online training complete!")
    print(f"  Items processed:  {result.items_processed}")
    print(f"  Items admitted:   {result.items_admitted}")
    print(f"  Support vectors:  {model.num_support_vectors}")
    print("=" * 60)

    final_metrics = None
    if eval_stream is not None:
        print("\nFinal evaluation...")
        final_metrics = evaluate_model(model, eval_stream)
        for key, value in final_metrics.items():
            print(f"  {key}: {value:.4f}" if isinstance(value, float) else f"  {key}: {value}")
        metrics_logger.log_evaluation(-1, final_metrics)

    metrics_logger.print_summary(model)

    torch.save(
        {
            "model_state": model.state_dict(),
            "config": config.__dict__,
            "final_metrics": final_metrics,
        },
        run_dir / "final_model.pt",
    )

    save_run_info(
        run_dir=run_dir,
        config=config,
        command=command,
        start_time=start_time,
        end_time=datetime.now(),
        final_metrics=final_metrics,
        dataset_info=dataset_info,
        extra_info={"model_summary": model.summary()},
        repo_path=PROJECT_ROOT,
    )

    print(f"\nRun directory: {run_dir}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Online kernel machine training")
    parser.add_argument(
        "--config",
        type=str,
        required=True,
        help="Path to config YAML file",
    )
    args = parser.parse_args()

    config_path = PROJECT_ROOT / args.config
    if not config_path.exists():
        print(f"Config file not found: {config_path}")
        sys.exit(1)

    command = " ".join(sys.argv)

    config = OnlineSVMConfig.from_yaml(config_path)
    main(config, config_path, command)
