"""Tests for problem setup and run configuration."""

import logging

import numpy as np
import pytest
from Wave1D import (
    CFL_LIMIT,
    ConfigurationError,
    LatticeState,
    SimulationParams,
    courant_parameter,
    create_lattice,
    peak_initial_condition,
    zero_initial_condition,
)


class TestInitialConditions:
    """Tests for initial condition generators."""

    def test_lattice_shape_and_dtype(self):
        u = create_lattice(10, value=2.5)
        assert u.shape == (10,)
        assert u.dtype == np.float64
        assert np.all(u == 2.5)

    def test_lattice_rejects_empty(self):
        with pytest.raises(ConfigurationError):
            create_lattice(0)

    @pytest.mark.parametrize("n", [1, 8, 9, 1024])
    def test_peak_at_midpoint(self, n):
        u0, u1 = peak_initial_condition(n)

        assert u0[n // 2] == 1.0 and u1[n // 2] == 1.0
        assert np.sum(u0) == 1.0 and np.sum(u1) == 1.0
        assert u0 is not u1

    def test_peak_amplitude(self):
        u0, _ = peak_initial_condition(8, amplitude=-3.0)
        assert u0[4] == -3.0

    def test_zero(self):
        u0, u1 = zero_initial_condition(5)
        assert np.all(u0 == 0.0) and np.all(u1 == 0.0)


class TestCourantParameter:
    """Tests for p = (c dt / dx)^2."""

    def test_value(self):
        assert courant_parameter(c=2.0, dt=0.1, dx=0.5) == pytest.approx(0.16)

    def test_cfl_limit_reached(self):
        assert courant_parameter(c=1.0, dt=0.01, dx=0.01) == pytest.approx(CFL_LIMIT)

    def test_invalid_dx(self):
        with pytest.raises(ConfigurationError):
            courant_parameter(c=1.0, dt=0.1, dx=0.0)


class TestLatticeState:
    """Tests for the two-level state container."""

    def test_coerces_to_float64(self):
        s = LatticeState(curr=[1, 2, 3], prev=[0, 0, 0])
        assert s.curr.dtype == np.float64
        assert s.n == 3

    def test_mismatched_lengths(self):
        with pytest.raises(ConfigurationError):
            LatticeState(curr=np.zeros(3), prev=np.zeros(4))

    def test_empty(self):
        with pytest.raises(ConfigurationError):
            LatticeState(curr=np.zeros(0), prev=np.zeros(0))

    def test_two_dimensional(self):
        with pytest.raises(ConfigurationError):
            LatticeState(curr=np.zeros((2, 2)), prev=np.zeros((2, 2)))

    def test_levels_never_share_memory(self):
        """Passing one array for both levels, or keeping a reference to it, is safe."""
        u = np.arange(4, dtype=np.float64)
        s = LatticeState(curr=u, prev=u)

        s.curr[0] = 10.0
        assert s.prev[0] == 0.0
        assert u[0] == 0.0
        assert not np.shares_memory(s.curr, s.prev)

    def test_copy_is_independent(self):
        s = LatticeState.from_initial_condition(8, peak_initial_condition)
        c = s.copy()
        c.curr[0] = 5.0
        assert s.curr[0] == 0.0

    def test_initial_condition_wrong_size(self):
        with pytest.raises(ConfigurationError):
            LatticeState.from_initial_condition(8, lambda n: zero_initial_condition(n + 1))

    def test_max_amplitude(self):
        s = LatticeState(curr=[0.0, -4.0], prev=[3.0, 0.0])
        assert s.max_amplitude() == 4.0


class TestSimulationParams:
    """Tests for parameter validation."""

    def test_valid(self):
        SimulationParams(n=8, p=0.5, num_steps=4).validate()

    def test_odd_steps(self):
        with pytest.raises(ConfigurationError, match="even"):
            SimulationParams(n=8, p=0.5, num_steps=5).validate()

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"n": True, "p": 0.5, "num_steps": 2},
            {"n": 8.0, "p": 0.5, "num_steps": 2},
            {"n": 8, "p": 0.5, "num_steps": False},
            {"n": 8, "p": "fast", "num_steps": 2},
            {"n": 8, "p": None, "num_steps": 2},
            {"n": 8, "p": True, "num_steps": 2},
            {"n": 8, "p": 0.5, "num_steps": 2, "numba_threads": 0},
            {"n": 8, "p": 0.5, "num_steps": 2, "numba_threads": -1},
            {"n": 8, "p": 0.5, "num_steps": 2, "numba_threads": 2.5},
        ],
    )
    def test_rejects_wrong_types(self, kwargs):
        """Bools, non-numeric p and non-positive thread counts are configuration errors."""
        with pytest.raises(ConfigurationError):
            SimulationParams(**kwargs).validate()

    def test_numpy_integers_accepted(self):
        SimulationParams(n=np.int64(8), p=np.float32(0.5), num_steps=np.int32(2), numba_threads=np.int64(2)).validate()

    def test_cfl_warning_not_error(self, caplog):
        params = SimulationParams(n=8, p=1.2, num_steps=2)
        with caplog.at_level(logging.WARNING, logger="Wave1D.datastructures"):
            params.validate()

        assert not params.cfl_stable
        assert "CFL" in caplog.text

    def test_no_warning_at_limit(self, caplog):
        params = SimulationParams(n=8, p=CFL_LIMIT, num_steps=2)
        with caplog.at_level(logging.WARNING, logger="Wave1D.datastructures"):
            params.validate()

        assert params.cfl_stable
        assert caplog.text == ""

    def test_to_mlflow(self):
        params = SimulationParams(n=8, p=0.5, num_steps=4, use_numba=False)
        record = params.to_mlflow()

        assert record["use_numba"] == 0
        assert "numba_threads" not in record
        assert record["environment"] in ("local", "hpc")
