"""Experiment tracking and reproducibility utilities."""

from __future__ import annotations

import dataclasses
import json
import platform
import socket
import subprocess
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

import numpy as np
import torch


def get_git_info(repo_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Get git commit hash and dirty status.

    Args:
        repo_path: Path to the git repository. If None, uses current directory.

    Returns:
        Dict with 'commit' (str or None) and 'dirty' (bool or None). Both are
        None when git is unavailable or the path is not a repository.
    """
    kwargs: Dict[str, Any] = {"capture_output": True, "text": True}
    if repo_path is not None:
        kwargs["cwd"] = repo_path

    try:
        commit = subprocess.run(["git", "rev-parse", "HEAD"], **kwargs)
        status = subprocess.run(["git", "status", "--porcelain"], **kwargs)
    except OSError:
        return {"commit": None, "dirty": None}

    commit_hash = commit.stdout.strip() if commit.returncode == 0 else None
    is_dirty = bool(status.stdout.strip()) if status.returncode == 0 else None
    return {"commit": commit_hash, "dirty": is_dirty}


def get_environment_info() -> Dict[str, Any]:
    """
    Gather environment information for reproducibility.

    Returns:
        Dict with hostname, platform, Python, PyTorch and NumPy versions, and
        the number of CPU threads torch uses.
    """
    return {
        "hostname": socket.gethostname(),
        "platform": platform.platform(),
        "python_version": platform.python_version(),
        "torch_version": torch.__version__,
        "numpy_version": np.__version__,
        "torch_num_threads": torch.get_num_threads(),
    }


def create_run_dir(base_output_dir: Path) -> Path:
    """
    Create a timestamped run directory.

    Args:
        base_output_dir: Parent directory for experiment outputs.

    Returns:
        Path to the created run directory.
    """
    timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
    run_dir = Path(base_output_dir) / timestamp
    run_dir.mkdir(parents=True, exist_ok=True)
    return run_dir


def save_run_info(
    run_dir: Path,
    config: Any,
    command: str,
    start_time: datetime,
    end_time: Optional[datetime] = None,
    final_metrics: Optional[Dict[str, Any]] = None,
    dataset_info: Optional[Dict[str, Any]] = None,
    extra_info: Optional[Dict[str, Any]] = None,
    repo_path: Optional[Path] = None,
) -> None:
    """
    Save run metadata to run_info.json.

    Args:
        run_dir: Directory to save run_info.json.
        config: Configuration dataclass (or a plain dict).
        command: Command used to run the experiment.
        start_time: Experiment start time.
        end_time: Experiment end time (None if still running).
        final_metrics: Final evaluation metrics, if any.
        dataset_info: Optional dataset statistics.
        extra_info: Optional additional info to include.
        repo_path: Path to git repository for commit info.
    """
    git_info = get_git_info(repo_path)

    if dataclasses.is_dataclass(config):
        config_dict = dataclasses.asdict(config)
    else:
        config_dict = config.__dict__ if hasattr(config, "__dict__") else config

    run_info = {
        "git_commit": git_info["commit"],
        "git_dirty": git_info["dirty"],
        "start_time": start_time.isoformat(),
        "end_time": end_time.isoformat() if end_time else None,
        "duration_seconds": (end_time - start_time).total_seconds() if end_time else None,
        "command": command,
        "config": config_dict,
        "environment": get_environment_info(),
        "dataset_info": dataset_info,
        "final_metrics": final_metrics,
    }

    if extra_info:
        run_info.update(extra_info)

    with open(Path(run_dir) / "run_info.json", "w") as f:
        json.dump(run_info, f, indent=2, default=str)
