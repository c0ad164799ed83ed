"""
Partitioned ensemble experiment.

Splits a CSV example stream into disjoint partitions, trains one online
kernel machine per partition (optionally on a thread pool), and evaluates
the averaged ensemble prediction on a held-out CSV.

Usage:
    python experiments/ensemble_svm.py --config configs/ensemble_classification.yaml
"""

from __future__ import annotations

import argparse
import shutil
import sys
from datetime import datetime
from pathlib import Path

import torch

PROJECT_ROOT = Path(__file__).resolve().parents[1]

from online_kernel_machines.config import EnsembleSVMConfig
from online_kernel_machines.core import PartitionStream, load_examples_csv, partition_examples
from online_kernel_machines.evaluation import evaluate_ensemble, evaluate_model, require_trained
from online_kernel_machines.logging import EnsembleMetricsLogger, create_run_dir, save_run_info
from online_kernel_machines.policies import create_update_rule
from online_kernel_machines.training import train_ensemble
from online_kernel_machines.utils import set_seed


def main(config: EnsembleSVMConfig, config_path: Path, command: str) -> None:
    """Run partitioned ensemble training."""

    start_time = datetime.now()

    print("=" * 60)
    print(f"Ensemble Online Kernel Machines ({config.task})")
    print("=" * 60)

    set_seed(config.seed)

    run_dir = create_run_dir(PROJECT_ROOT / config.output_dir)
    print(f"Run directory: {run_dir}")
    shutil.copy(config_path, run_dir / "config.yaml")

    kernel = config.build_kernel()
    rule = create_update_rule(config)
    print(f"Kernel: {kernel!r}")
    print(f"Update rule: {rule!r}")

    label_column = None if config.task == "novelty" else config.label_column

    # -------------------------------------------------------------------------
    # Data
    # -------------------------------------------------------------------------
    print("\nLoading example streams...")
    train_stream = load_examples_csv(
        PROJECT_ROOT / config.train_path,
        label_column=label_column,
        has_header=config.has_header,
    )
    eval_stream = None
    if config.eval_path:
        eval_stream = load_examples_csv(
            PROJECT_ROOT / config.eval_path,
            label_column=label_column,
            has_header=config.has_header,
        )

    # -------------------------------------------------------------------------
    # Partition examples across ensemble members
    # -------------------------------------------------------------------------
    partitions = partition_examples(
        num_examples=len(train_stream),
        num_partitions=config.num_partitions,
        strategy=config.partition_strategy,
        seed=config.seed,
    )
    streams = [PartitionStream(train_stream, part) for part in partitions]

    print(f"\nPartitioned {len(train_stream)} examples into {config.num_partitions} partitions:")
    partition_stats = []
    for i, stream in enumerate(streams):
        stats = stream.get_label_stats()
        partition_stats.append(stats)
        print(f"  Partition {i}: {stats['num_examples']} examples, "
              f"positive_rate={stats['positive_rate']:.4f}")

    # -------------------------------------------------------------------------
    # Training
    # -------------------------------------------------------------------------
    eval_keys = {
        "classification": ["accuracy", "f1"],
        "regression": ["mse", "mae"],
        "novelty": ["novelty_rate"],
    }[config.task]
    ens_logger = EnsembleMetricsLogger(run_dir, eval_keys=eval_keys)

    dataset_info = {
        "train_total": len(train_stream),
        "eval_total": len(eval_stream) if eval_stream is not None else None,
        "num_partitions": config.num_partitions,
        "partition_sizes": [len(p) for p in partitions],
        "partition_stats": partition_stats,
    }
    save_run_info(
        run_dir=run_dir,
        config=config,
        command=command,
        start_time=start_time,
        dataset_info=dataset_info,
        repo_path=PROJECT_ROOT,
    )

    print("\nTraining ensemble members...")
    results = train_ensemble(
        rule,
        streams,
        kernel,
        max_workers=config.max_workers,
        verbose=True,
    )
    models = [require_trained(pr.model) for pr in results]

    for pr in results:
        member_metrics = evaluate_model(pr.model, eval_stream) if eval_stream is not None else None
        ens_logger.log_partition(
            pr.partition_idx,
            pr.model,
            items_processed=pr.result.items_processed,
            items_admitted=pr.result.items_admitted,
            elapsed=pr.elapsed_seconds,
            eval_metrics=member_metrics,
        )

    # -------------------------------------------------------------------------
    # Ensemble evaluation
    # -------------------------------------------------------------------------
    final_metrics = None
    if eval_stream is not None and len(models) >= 2:
        print("\nEnsemble evaluation (averaged prediction)...")
        final_metrics = evaluate_ensemble(models, eval_stream)
        for key in eval_keys:
            print(f"  {key}: {final_metrics[key]:.4f}")

    torch.save(
        {
            "model_states": [m.state_dict() for m in models],
            "config": config.__dict__,
            "final_metrics": final_metrics,
        },
        run_dir / "ensemble.pt",
    )

    save_run_info(
        run_dir=run_dir,
        config=config,
        command=command,
        start_time=start_time,
        end_time=datetime.now(),
        final_metrics=final_metrics,
        dataset_info=dataset_info,
        extra_info={"model_summaries": [m.summary() for m in models]},
        repo_path=PROJECT_ROOT,
    )

    print(f"\nRun directory: {run_dir}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Partitioned ensemble training")
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

    config = EnsembleSVMConfig.from_yaml(config_path)
    main(config, config_path, command)
