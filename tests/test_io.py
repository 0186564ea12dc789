"""Tests for HDF5 result files."""

import numpy as np
import pytest
from Wave1D import NumPyBackend, SimulationParams, Simulator
from Wave1D.io import load_hdf5, save_hdf5


class BrokenBackend(NumPyBackend):
    name = "broken"

    def _dispatch(self, stage, p, extent):
        raise RuntimeError("dispatch failed")


@pytest.fixture(scope="module")
def result():
    params = SimulationParams(n=32, p=0.2, num_steps=10, backend="numpy", experiment_name="io")
    return Simulator(params).run()


def test_round_trip(tmp_path, result):
    path = tmp_path / "nested" / "run.h5"
    comparison = result.compare()
    save_hdf5(path, result, comparison)

    data = load_hdf5(path)

    assert data["n"] == 32
    assert data["p"] == pytest.approx(0.2)
    assert data["num_steps"] == 10
    assert data["experiment_name"] == "io"
    assert data["backend_name"] == "numpy"
    np.testing.assert_array_equal(data["sequential_curr"], result.sequential.curr)
    np.testing.assert_array_equal(data["parallel_prev"], result.parallel.prev)
    assert data["sequential_kernel_evaluations"] == 320
    assert len(data["parallel_compute_times"]) == 10
    assert data["passed"] == 1
    assert data["tolerance"] == pytest.approx(1e-9)


def test_without_comparison(tmp_path, result):
    path = tmp_path / "run.h5"
    save_hdf5(path, result)
    data = load_hdf5(path)

    assert "passed" not in data
    assert "parallel_curr" in data


def test_failed_backend_recorded(tmp_path):
    params = SimulationParams(n=16, p=0.1, num_steps=2)
    result = Simulator(params, backend=BrokenBackend()).run()
    path = tmp_path / "failed.h5"
    save_hdf5(path, result, result.compare())

    data = load_hdf5(path)

    assert "parallel_curr" not in data
    assert "dispatch failed" in data["backend_error"]
    assert data["passed"] == 0
    assert data["backend_name"] == "broken"
