"""1D wave-equation solver package.

Evolves the scalar wave equation on a periodic lattice with the explicit
two-level recurrence and cross-validates a data-parallel execution path
against a sequential reference.

Solvers
-------
- SequentialSolver: Single sweep per advance with an explicit two-slot swap
- ParallelSolver: Two alternating stages (A: u0 -> u1, B: u1 -> u0)
  dispatched to a compute backend, no buffer swap

Backends
--------
- NumPyBackend: Vectorised dispatch
- NumbaBackend: ``prange`` per-index dispatch
- MPIBackend: Periodic ring decomposition (requires mpi4py)
"""

from pathlib import Path

from .datastructures import (
    CFL_LIMIT,
    ComparisonResult,
    LatticeState,
    LocalMetrics,
    RankGeometry,
    SimulationParams,
    SimulationResult,
    SolverMetrics,
)
from .errors import BackendError, ConfigurationError
from .kernels import NumbaKernel, NumPyKernel, periodic_neighbors, step_at
from .backends import ComputeBackend, NumbaBackend, NumPyBackend, create_backend
from .solvers import ParallelSolver, SequentialSolver, Stage, StageName
from .problems import (
    courant_parameter,
    create_lattice,
    peak_initial_condition,
    zero_initial_condition,
)
from .simulator import Simulator
from .verifier import Verifier, compare
from .runner import run_simulation

__all__ = [
    # Data structures
    "CFL_LIMIT",
    "ComparisonResult",
    "LatticeState",
    "LocalMetrics",
    "RankGeometry",
    "SimulationParams",
    "SimulationResult",
    "SolverMetrics",
    # Errors
    "BackendError",
    "ConfigurationError",
    # Kernels
    "NumPyKernel",
    "NumbaKernel",
    "periodic_neighbors",
    "step_at",
    # Backends
    "ComputeBackend",
    "NumPyBackend",
    "NumbaBackend",
    "create_backend",
    # Solvers
    "SequentialSolver",
    "ParallelSolver",
    "Stage",
    "StageName",
    # Problem setup
    "courant_parameter",
    "create_lattice",
    "peak_initial_condition",
    "zero_initial_condition",
    # Simulation and verification
    "Simulator",
    "Verifier",
    "compare",
    "run_simulation",
    # Utilities
    "get_project_root",
]


def get_project_root() -> Path:
    """Get project root directory.

    Returns
    -------
    Path
        Project root directory (contains pyproject.toml).
    """
    current = Path(__file__).resolve().parent
    while current != current.parent:
        if (current / "pyproject.toml").exists():
            return current
        current = current.parent

    # Fallback: assume standard src layout
    return Path(__file__).resolve().parent.parent.parent
