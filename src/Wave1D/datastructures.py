"""Data structures for simulation configuration, lattice state and results.

Architecture: Params (input) vs State (evolving field) vs Metrics/Results (output)

                 Input                     Output
                 ─────                     ──────
Global           SimulationParams          SolverMetrics, SimulationResult,
                 n, p, num_steps,          ComparisonResult
                 backend, tolerance...     wall_time, mlups, max_abs_diff...

Per-run          LatticeState              LocalMetrics
                 curr (u0), prev (u1)      compute_times[]

Distributed      RankGeometry (per-rank slice of the periodic ring)
"""

from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import numpy as np

from .errors import ConfigurationError

log = logging.getLogger(__name__)

# Stability bound of the explicit scheme: p = (c*dt/dx)^2 <= 1
CFL_LIMIT = 1.0


def _is_integer(value) -> bool:
    """True for Python/NumPy integers, excluding bool."""
    return isinstance(value, (int, np.integer)) and not isinstance(value, (bool, np.bool_))


def _is_real(value) -> bool:
    """True for Python/NumPy real numbers, excluding bool."""
    return isinstance(value, (int, float, np.integer, np.floating)) and not isinstance(
        value, (bool, np.bool_)
    )


# ============================================================================
# Configuration
# ============================================================================


@dataclass
class SimulationParams:
    """Run configuration - validated before any solver runs, logged to MLflow as params.

    ``num_steps`` counts half-step dispatches of the parallel path, which is
    the same number of full sweeps on the sequential path. It must be even so
    both stored time levels are synchronized at the end of the run.
    """

    # Required
    n: int
    p: float
    num_steps: int

    # Verification
    tolerance: float = 1e-9

    # Execution
    backend: str = "numpy"  # "numpy" | "numba" | "mpi"
    use_numba: bool = True  # sequential reference kernel
    numba_threads: Optional[int] = None
    n_ranks: int = 1

    # Experiment tracking
    experiment_name: str = "default"

    # Auto-detected at runtime (not from config)
    environment: str = field(init=False)

    def __post_init__(self):
        self.environment = (
            "hpc"
            if os.environ.get("LSB_JOBID") or os.environ.get("SLURM_JOB_ID")
            else "local"
        )

    @property
    def cfl_stable(self) -> bool:
        """True if p satisfies the CFL condition. Not enforced."""
        return self.p <= CFL_LIMIT

    def validate(self):
        """Raise ConfigurationError for parameters no solver can run with."""
        if not _is_integer(self.n) or self.n <= 0:
            raise ConfigurationError(f"Lattice size must be a positive integer, got n={self.n!r}")
        if not _is_integer(self.num_steps) or self.num_steps < 0:
            raise ConfigurationError(f"num_steps must be a non-negative integer, got {self.num_steps!r}")
        if self.num_steps % 2 != 0:
            raise ConfigurationError(
                f"num_steps={self.num_steps} is odd; the parallel path runs "
                "paired half-steps (stage A + stage B) and needs an even count"
            )
        if not _is_real(self.p) or not math.isfinite(self.p) or self.p < 0:
            raise ConfigurationError(f"p must be a finite non-negative number, got p={self.p!r}")
        if self.numba_threads is not None and (
            not _is_integer(self.numba_threads) or self.numba_threads < 1
        ):
            raise ConfigurationError(
                f"numba_threads must be a positive integer or None, got {self.numba_threads!r}"
            )
        if not self.cfl_stable:
            log.warning(
                f"p={self.p} exceeds the CFL limit {CFL_LIMIT}; the solution is expected to diverge"
            )

    def to_mlflow(self) -> dict:
        """Convert to MLflow-compatible params dict (bools as int, no None)."""
        return {
            k: (int(v) if isinstance(v, bool) else v)
            for k, v in self.__dict__.items()
            if v is not None
        }


# ============================================================================
# Lattice state
# ============================================================================


@dataclass
class LatticeState:
    """Wave field at two adjacent time levels on a periodic ring.

    ``curr`` is the solver array ``u0`` (latest level) and ``prev`` is ``u1``
    (the level one step earlier). Both arrays always have length ``n``.
    """

    curr: np.ndarray
    prev: np.ndarray

    def __post_init__(self):
        # Always copy: the two levels must never share memory with each other or the caller
        self.curr = np.array(self.curr, dtype=np.float64, order="C", copy=True)
        self.prev = np.array(self.prev, dtype=np.float64, order="C", copy=True)
        if self.curr.ndim != 1 or self.prev.ndim != 1:
            raise ConfigurationError("Lattice levels must be one-dimensional arrays")
        if self.curr.shape != self.prev.shape:
            raise ConfigurationError(
                f"Time levels differ in length: {self.curr.size} != {self.prev.size}"
            )
        if self.curr.size == 0:
            raise ConfigurationError("Lattice must contain at least one site")

    @classmethod
    def from_initial_condition(cls, n: int, initial_condition) -> "LatticeState":
        """Seed a state from a generator ``n -> (u0, u1)``."""
        u0, u1 = initial_condition(n)
        state = cls(curr=u0, prev=u1)
        if state.n != n:
            raise ConfigurationError(
                f"Initial condition produced {state.n} sites, expected {n}"
            )
        return state

    @property
    def n(self) -> int:
        return self.curr.size

    def as_pair(self) -> Tuple[np.ndarray, np.ndarray]:
        """Return ``(u0, u1)`` in solver argument order."""
        return self.curr, self.prev

    def copy(self) -> "LatticeState":
        return LatticeState(curr=self.curr.copy(), prev=self.prev.copy())

    def max_amplitude(self) -> float:
        return float(max(np.max(np.abs(self.curr)), np.max(np.abs(self.prev))))


# ============================================================================
# Metrics
# ============================================================================


@dataclass
class SolverMetrics:
    """Aggregated results of one solver run - logged to MLflow as metrics."""

    num_steps: int = 0
    kernel_evaluations: int = 0  # StepKernel evaluations summed over all indices
    dispatches: int = 0  # Lattice sweeps (sequential) or stage dispatches (parallel)
    wall_time: Optional[float] = None

    total_compute_time: Optional[float] = None

    # Performance metrics
    mlups: Optional[float] = None  # Million Lattice Updates per Second
    bandwidth_gb_s: Optional[float] = None  # Memory bandwidth in GB/s

    # Numba runtime info (what was actually available)
    observed_numba_threads: Optional[int] = None

    def to_mlflow(self, prefix: str = "") -> dict:
        """Convert to MLflow-compatible dict (no None, bools as int)."""
        return {
            f"{prefix}{k}": (int(v) if isinstance(v, bool) else v)
            for k, v in self.__dict__.items()
            if v is not None
        }


@dataclass
class LocalMetrics:
    """Per-run timeseries. Accumulated during the run, logged post-run."""

    compute_times: List[float] = field(default_factory=list)

    def clear(self):
        """Clear all timeseries data."""
        self.compute_times.clear()


# ============================================================================
# Verification
# ============================================================================


@dataclass
class ComparisonResult:
    """Outcome of comparing two lattice states.

    ``abs_diff`` and ``rel_diff`` have shape ``(2, n)``: row 0 is ``curr``,
    row 1 is ``prev``.
    """

    passed: bool
    max_abs_diff: float
    max_rel_diff: float
    tolerance: float
    diverged: bool = False
    peak_amplitude: float = 0.0
    abs_diff: Optional[np.ndarray] = field(default=None, repr=False)
    rel_diff: Optional[np.ndarray] = field(default=None, repr=False)

    def to_mlflow(self) -> dict:
        return {
            "passed": int(self.passed),
            "diverged": int(self.diverged),
            "max_abs_diff": self.max_abs_diff,
            "max_rel_diff": self.max_rel_diff,
            "peak_amplitude": self.peak_amplitude,
        }


@dataclass
class SimulationResult:
    """Final states of both execution paths for one parameter set."""

    params: SimulationParams
    sequential: LatticeState
    sequential_metrics: SolverMetrics
    parallel: Optional[LatticeState] = None
    parallel_metrics: Optional[SolverMetrics] = None
    parallel_timeseries: Optional[LocalMetrics] = None
    backend_name: Optional[str] = None
    backend_error: Optional[str] = None
    initial_amplitude: float = 1.0  # peak of the seeded state, scales the divergence check

    def compare(self, tolerance: Optional[float] = None) -> ComparisonResult:
        """Verify the parallel result against the sequential reference."""
        from .verifier import Verifier

        tol = self.params.tolerance if tolerance is None else tolerance
        if self.parallel is None:
            return ComparisonResult(
                passed=False,
                max_abs_diff=math.inf,
                max_rel_diff=math.inf,
                tolerance=tol,
                peak_amplitude=self.sequential.max_amplitude(),
            )
        return Verifier(tolerance=tol).compare(
            self.sequential, self.parallel, initial_amplitude=self.initial_amplitude
        )


# ============================================================================
# MPI ring geometry
# ============================================================================


@dataclass
class RankGeometry:
    """Per-rank slice of the periodic lattice.

    Used by RingDecomposition to describe the local portion of the ring.
    """

    rank: int
    local_n: int
    halo_n: int
    global_start: int
    global_end: int
    neighbors: Dict[str, int]
