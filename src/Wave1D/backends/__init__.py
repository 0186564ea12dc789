"""Compute backends for the parallel solver.

Shared memory:
- NumPyBackend: Vectorised whole-array dispatch
- NumbaBackend: Per-index ``prange`` dispatch

Distributed (requires mpi4py, imported lazily):
- MPIBackend: Periodic ring decomposition with halo exchange
"""

from ..errors import BackendError, ConfigurationError
from .base import ComputeBackend
from .host import NumbaBackend, NumPyBackend

BACKENDS = ("numpy", "numba", "mpi")


def create_backend(name: str, **kwargs) -> ComputeBackend:
    """Factory: 'numpy', 'numba' or 'mpi'."""
    if name == "numpy":
        return NumPyBackend()
    elif name == "numba":
        return NumbaBackend(numba_threads=kwargs.get("numba_threads"))
    elif name == "mpi":
        try:
            from .mpi_backend import MPIBackend
        except ImportError as e:
            raise BackendError("The mpi backend requires mpi4py (pip install '.[mpi]')") from e

        return MPIBackend(
            comm=kwargs.get("comm"),
            use_numba=kwargs.get("use_numba", False),
            numba_threads=kwargs.get("numba_threads"),
        )
    else:
        raise ConfigurationError(f"Unknown backend: {name}. Use one of {', '.join(BACKENDS)}.")


__all__ = [
    "BACKENDS",
    "ComputeBackend",
    "NumPyBackend",
    "NumbaBackend",
    "create_backend",
]
