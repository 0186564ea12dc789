"""Tests for experiment path helpers and tracking setup."""

from pathlib import Path

import pytest
from utils import datatools
from utils.mlflow import TRACKING_MODES, setup_mlflow_tracking


def test_repo_root_has_pyproject():
    assert (datatools.get_repo_root() / "pyproject.toml").exists()


def test_experiment_name_from_path(tmp_path):
    script = tmp_path / "Experiments" / "01-validation" / "compute_validation.py"
    assert datatools.get_experiment_name(script) == "01-validation"


def test_experiment_name_nested():
    script = Path("/repo/Experiments/02-scaling/threads/run.py")
    assert datatools.get_experiment_name(script) == "02-scaling/threads"


def test_experiment_name_outside_experiments():
    with pytest.raises(ValueError):
        datatools.get_experiment_name(Path("/repo/scripts/run.py"))


def test_data_dir_without_create():
    script = Path("/repo/Experiments/01-validation/plot.py")
    data_dir = datatools.get_data_dir(script, create=False)
    assert data_dir == datatools.get_repo_root() / "data" / "01-validation"


def test_tracking_off():
    assert "off" in TRACKING_MODES
    assert setup_mlflow_tracking(mode="off") is False
