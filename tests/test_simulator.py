"""End-to-end tests: both execution paths from one scenario."""

import logging

import numpy as np
import pytest
from Wave1D import (
    ConfigurationError,
    NumPyBackend,
    SimulationParams,
    Simulator,
    peak_initial_condition,
    zero_initial_condition,
)


class FailingBackend(NumPyBackend):
    """Backend that fails on its second dispatch."""

    name = "failing"

    def __init__(self):
        super().__init__()
        self.calls = 0

    def _dispatch(self, stage, p, extent):
        self.calls += 1
        if self.calls == 2:
            raise RuntimeError("lost device")
        super()._dispatch(stage, p, extent)


class TestEquivalence:
    """The parallel path reproduces the sequential path."""

    @pytest.mark.parametrize("backend", ["numpy", "numba"])
    def test_small_ring(self, backend):
        params = SimulationParams(n=8, p=0.1, num_steps=4, backend=backend)
        result = Simulator(params).run()
        comparison = result.compare()

        assert result.backend_error is None
        assert comparison.passed
        assert comparison.max_abs_diff <= 1e-9
        assert not comparison.diverged

    @pytest.mark.parametrize("backend", ["numpy", "numba"])
    @pytest.mark.parametrize("n,p,num_steps", [(1000, 0.05, 200), (257, 0.8, 500)])
    def test_larger_rings(self, backend, n, p, num_steps):
        params = SimulationParams(n=n, p=p, num_steps=num_steps, backend=backend)
        result = Simulator(params).run()

        assert result.compare().passed
        np.testing.assert_allclose(result.parallel.curr, result.sequential.curr, rtol=0, atol=1e-9)

    def test_zero_steps_returns_initial_state(self):
        params = SimulationParams(n=16, p=0.5, num_steps=0)
        result = Simulator(params).run()

        expected = np.zeros(16)
        expected[8] = 1.0
        np.testing.assert_array_equal(result.sequential.curr, expected)
        np.testing.assert_array_equal(result.parallel.curr, expected)

    def test_custom_initial_condition(self):
        params = SimulationParams(n=32, p=0.3, num_steps=10)
        result = Simulator(params, initial_condition=zero_initial_condition).run()

        assert np.all(result.sequential.curr == 0.0)
        assert np.all(result.parallel.curr == 0.0)

    def test_metrics_populated(self):
        params = SimulationParams(n=64, p=0.1, num_steps=20, backend="numpy")
        result = Simulator(params).run()

        for metrics in (result.sequential_metrics, result.parallel_metrics):
            assert metrics.num_steps == 20
            assert metrics.kernel_evaluations == 20 * 64
            assert metrics.wall_time > 0
        assert len(result.parallel_timeseries.compute_times) == 20
        assert result.backend_name == "numpy"


class TestConfigurationErrors:
    """Invalid inputs are rejected before any solver runs."""

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"n": 0, "p": 0.1, "num_steps": 2},
            {"n": -4, "p": 0.1, "num_steps": 2},
            {"n": 8, "p": 0.1, "num_steps": 3},
            {"n": 8, "p": 0.1, "num_steps": -2},
            {"n": 8, "p": -0.1, "num_steps": 2},
            {"n": 8, "p": float("nan"), "num_steps": 2},
            {"n": True, "p": 0.1, "num_steps": 2},
            {"n": 8, "p": "0.1", "num_steps": 2},
            {"n": 8, "p": 0.1, "num_steps": 2, "numba_threads": 0},
            {"n": 8, "p": 0.1, "num_steps": 2, "numba_threads": -3},
        ],
    )
    def test_invalid_params(self, kwargs):
        simulator = Simulator(SimulationParams(**kwargs))
        with pytest.raises(ConfigurationError):
            simulator.run()
        assert simulator.sequential_solver.metrics.kernel_evaluations == 0

    def test_unknown_backend(self):
        params = SimulationParams(n=8, p=0.1, num_steps=2, backend="opencl")
        with pytest.raises(ConfigurationError, match="Unknown backend"):
            Simulator(params).run()

    def test_configuration_error_is_value_error(self):
        with pytest.raises(ValueError):
            Simulator(SimulationParams(n=8, p=0.1, num_steps=1)).run()


class TestBackendFailure:
    """A failing backend does not lose the sequential result."""

    def test_sequential_result_survives(self):
        params = SimulationParams(n=16, p=0.1, num_steps=4)
        result = Simulator(params, backend=FailingBackend()).run()

        assert result.parallel is None
        assert "lost device" in result.backend_error
        assert result.sequential_metrics.kernel_evaluations == 4 * 16
        assert not np.array_equal(result.sequential.curr, np.zeros(16))

        comparison = result.compare()
        assert not comparison.passed
        assert comparison.max_abs_diff == np.inf

    def test_backend_error_logged(self, caplog):
        params = SimulationParams(n=16, p=0.1, num_steps=4)
        with caplog.at_level(logging.ERROR, logger="Wave1D.simulator"):
            Simulator(params, backend=FailingBackend()).run()
        assert "Parallel path failed" in caplog.text

    def test_released_backend_reported(self):
        backend = NumPyBackend()
        backend.acquire()
        backend.release()

        params = SimulationParams(n=8, p=0.1, num_steps=2)
        result = Simulator(params, backend=backend).run()
        assert "released" in result.backend_error

    def test_owned_backend_left_active(self):
        """A backend passed in by the caller stays acquired after the run."""
        params = SimulationParams(n=8, p=0.1, num_steps=2)
        with NumPyBackend() as backend:
            Simulator(params, backend=backend).run()
            assert backend.is_active

    def test_missing_mpi4py_reported(self, monkeypatch):
        """Without mpi4py the mpi backend fails as a backend error."""
        import builtins

        real_import = builtins.__import__

        def fake_import(name, *args, **kwargs):
            if name.startswith("mpi4py") or name.endswith("mpi_backend"):
                raise ImportError("No module named 'mpi4py'")
            return real_import(name, *args, **kwargs)

        monkeypatch.setattr(builtins, "__import__", fake_import)
        params = SimulationParams(n=8, p=0.1, num_steps=2, backend="mpi")
        result = Simulator(params).run()

        assert result.parallel is None
        assert "mpi4py" in result.backend_error


class TestStability:
    """Behaviour at and beyond the CFL limit (warned about, not enforced)."""

    def test_at_cfl_limit_bounded(self):
        params = SimulationParams(n=256, p=1.0, num_steps=100)
        result = Simulator(params).run()
        comparison = result.compare()

        assert result.sequential.max_amplitude() <= 2.0
        assert not comparison.diverged
        assert comparison.passed

    def test_above_cfl_limit_diverges(self, caplog):
        params = SimulationParams(n=256, p=1.5, num_steps=100, backend="numpy")
        with caplog.at_level(logging.WARNING):
            result = Simulator(params).run()
        comparison = result.compare()

        assert "CFL" in caplog.text
        assert result.sequential.max_amplitude() > 1e6
        assert comparison.diverged
        assert not comparison.passed


class TestSeeding:
    """Both paths start from independent copies of the initial condition."""

    def test_aliased_initial_condition(self):
        """A generator returning one array for both levels still yields independent states."""
        u = np.zeros(16)
        u[8] = 1.0

        params = SimulationParams(n=16, p=0.1, num_steps=4, backend="numpy")
        result = Simulator(params, initial_condition=lambda n: (u, u)).run()
        comparison = result.compare()

        assert result.sequential.curr is not result.sequential.prev
        assert not np.array_equal(result.sequential.curr, result.sequential.prev)
        assert comparison.passed
        assert comparison.max_abs_diff <= 1e-12

    def test_caller_arrays_not_modified(self):
        u0 = np.zeros(16)
        u0[8] = 1.0
        u1 = u0.copy()

        params = SimulationParams(n=16, p=0.1, num_steps=4)
        Simulator(params, initial_condition=lambda n: (u0, u1)).run()

        assert u0[8] == 1.0 and u1[8] == 1.0
        assert np.count_nonzero(u0) == 1

    def test_large_amplitude_stable_run(self):
        """Divergence is judged relative to the seeded amplitude, not in absolute terms."""
        params = SimulationParams(n=64, p=0.05, num_steps=10, tolerance=1e-3, backend="numpy")
        result = Simulator(
            params, initial_condition=lambda n: peak_initial_condition(n, amplitude=1e7)
        ).run()
        comparison = result.compare()

        assert result.initial_amplitude == 1e7
        assert not comparison.diverged
        assert comparison.passed
