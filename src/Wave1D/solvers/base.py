"""Base class for solvers."""

import time
from abc import ABC, abstractmethod

import numpy as np

from ..datastructures import LatticeState, LocalMetrics, SolverMetrics
from ..errors import ConfigurationError


class BaseSolver(ABC):
    """Abstract base for both wave solvers.

    Subclasses implement ``advance(u0, u1, p, n, num_steps)``, which mutates
    the two arrays in place to the state after ``num_steps`` kernel sweeps.
    """

    # Bytes per lattice update: 3 reads of v0 + read/write of v1 = 5 mem-ops × 8 bytes
    BYTES_PER_POINT = 40

    def __init__(self):
        # Metrics containers (match datastructures.py naming)
        self.metrics = SolverMetrics()
        self.timeseries = LocalMetrics()

        # Timing accumulators
        self._time_compute = 0.0

    @abstractmethod
    def advance(self, u0: np.ndarray, u1: np.ndarray, p: float, n: int, num_steps: int):
        """Advance (u0, u1) by num_steps in place."""
        pass

    def solve(self, state: LatticeState, p: float, num_steps: int) -> LatticeState:
        """Return a new state advanced by num_steps. The input is not modified."""
        result = state.copy()
        u0, u1 = result.as_pair()
        self.advance(u0, u1, p, result.n, num_steps)
        return result

    def warmup(self, warmup_size: int = 16):
        """Warmup kernel (trigger Numba JIT if used)."""
        self.kernel.warmup(warmup_size=warmup_size)

    def _validate(self, u0: np.ndarray, u1: np.ndarray, n: int, num_steps: int):
        if n <= 0:
            raise ConfigurationError(f"Lattice size must be positive, got n={n}")
        if num_steps < 0:
            raise ConfigurationError(f"num_steps must be non-negative, got {num_steps}")
        if u0.shape != (n,) or u1.shape != (n,):
            raise ConfigurationError(
                f"Expected two arrays of length {n}, got shapes {u0.shape} and {u1.shape}"
            )

    def _get_time(self) -> float:
        """Get current time. Override for MPI timing."""
        return time.perf_counter()

    def _reset(self, num_steps: int):
        """Reset timers, metrics and timeseries."""
        self._time_compute = 0.0
        self.metrics = SolverMetrics(num_steps=num_steps)
        self.timeseries.clear()

    def _finalize(self, wall_time: float, n: int):
        """Finalize metrics after a run."""
        self.metrics.total_compute_time = self._time_compute
        self._compute_metrics(wall_time, n)

    def _compute_metrics(self, wall_time: float, n: int):
        """Compute performance metrics."""
        self.metrics.wall_time = wall_time

        updates = self.metrics.kernel_evaluations
        if updates > 0 and wall_time > 0:
            self.metrics.mlups = updates / (wall_time * 1e6)
            total_bytes = updates * self.BYTES_PER_POINT
            self.metrics.bandwidth_gb_s = total_bytes / (wall_time * 1e9)
