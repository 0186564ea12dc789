"""Wave solvers.

- SequentialSolver: Reference sweep with an explicit two-slot swap
- ParallelSolver: Two alternating backend stages, no buffer swap
"""

from .base import BaseSolver
from .sequential import SequentialSolver
from .parallel import ParallelSolver, Stage, StageName, build_stages

__all__ = [
    "BaseSolver",
    "SequentialSolver",
    "ParallelSolver",
    "Stage",
    "StageName",
    "build_stages",
]
