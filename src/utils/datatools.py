"""Path helpers for experiment scripts.

Data and figures mirror the ``Experiments/`` layout: a script in
``Experiments/01-validation/`` writes to ``data/01-validation/`` and
``figures/01-validation/``.
"""

from __future__ import annotations

import inspect
from pathlib import Path


def get_repo_root() -> Path:
    """Repository root (the directory holding pyproject.toml)."""
    current = Path(__file__).resolve().parent
    for parent in [current] + list(current.parents):
        if (parent / "pyproject.toml").exists():
            return parent

    # Fallback: src/utils layout
    return current.parent.parent


def get_experiment_name(caller_file: Path | str | None = None) -> str:
    """Experiment name from the calling script's path relative to Experiments/.

    Raises
    ------
    ValueError
        If the calling file is not in an Experiments/ subdirectory
    """
    if caller_file is None:
        # this function -> get_data_dir/get_figures_dir -> actual caller
        frame = inspect.currentframe()
        if frame is None or frame.f_back is None or frame.f_back.f_back is None:
            raise RuntimeError("Cannot detect caller file")
        caller_file = frame.f_back.f_back.f_globals["__file__"]

    parts = Path(caller_file).resolve().parts
    if "Experiments" not in parts:
        raise ValueError(f"File {caller_file} is not in an Experiments/ subdirectory")

    experiment_parts = parts[parts.index("Experiments") + 1 : -1]
    if not experiment_parts:
        raise ValueError(
            f"File {caller_file} is directly in Experiments/; use a subdirectory"
        )
    return "/".join(experiment_parts)


def get_data_dir(caller_file: Path | str | None = None, create: bool = True) -> Path:
    """Data directory for the calling experiment (repo_root/data/<experiment>)."""
    data_dir = get_repo_root() / "data" / get_experiment_name(caller_file)
    if create:
        data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir


def get_figures_dir(caller_file: Path | str | None = None, create: bool = True) -> Path:
    """Figures directory for the calling experiment (repo_root/figures/<experiment>)."""
    figures_dir = get_repo_root() / "figures" / get_experiment_name(caller_file)
    if create:
        figures_dir.mkdir(parents=True, exist_ok=True)
    return figures_dir
