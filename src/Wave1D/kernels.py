"""Wave-equation stencil kernels.

The update rule for one lattice site, with ``v0`` holding time level ``t``
and ``v1`` holding level ``t-1`` on input and ``t+1`` on output::

    v1[j] = p * (v0[jL] + v0[jR] - 2 * v0[j]) + 2 * v0[j] - v1[j]

All sweeps evaluate the expression with the same operand order so that the
NumPy, serial Numba and parallel Numba paths agree bit for bit.
Tracking is handled by the solver.
"""

import numpy as np
import numba
from numba import njit, prange


@njit(inline="always")
def periodic_neighbors(j: int, n: int):
    """Left and right neighbour of site j on a ring of n sites."""
    return (j - 1 + n) % n, (j + 1) % n


@njit(inline="always")
def step_at(v0: np.ndarray, v1: np.ndarray, j: int, p: float, n: int) -> float:
    """Update site j of v1 in place and return the new value."""
    jL, jR = periodic_neighbors(j, n)
    v1[j] = p * (v0[jL] + v0[jR] - 2.0 * v0[j]) + 2.0 * v0[j] - v1[j]
    return v1[j]


@njit
def _sweep_serial(v0: np.ndarray, v1: np.ndarray, p: float):
    """Single-threaded sweep over the whole ring."""
    n = v0.shape[0]
    for j in range(n):
        step_at(v0, v1, j, p, n)


@njit(parallel=True)
def _sweep_parallel(v0: np.ndarray, v1: np.ndarray, p: float):
    """Per-index parallel sweep. Sites are independent within one sweep."""
    n = v0.shape[0]
    for j in prange(n):
        step_at(v0, v1, j, p, n)


@njit
def _sweep_interior_serial(v0: np.ndarray, v1: np.ndarray, p: float):
    """Sweep over the interior of a halo array (one ghost cell each side)."""
    for j in range(1, v0.shape[0] - 1):
        v1[j] = p * (v0[j - 1] + v0[j + 1] - 2.0 * v0[j]) + 2.0 * v0[j] - v1[j]


@njit(parallel=True)
def _sweep_interior_parallel(v0: np.ndarray, v1: np.ndarray, p: float):
    for j in prange(1, v0.shape[0] - 1):
        v1[j] = p * (v0[j - 1] + v0[j + 1] - 2.0 * v0[j]) + 2.0 * v0[j] - v1[j]


class NumPyKernel:
    """NumPy-based wave kernel (vectorised over all sites)."""

    name = "numpy"

    def __init__(self, numba_threads: int = None):
        self.observed_numba_threads = None  # Not applicable for NumPy

    def step(self, v0: np.ndarray, v1: np.ndarray, p: float):
        """Advance v1 by one time level using v0 (periodic ring)."""
        left = np.roll(v0, 1)
        right = np.roll(v0, -1)
        v1[:] = p * (left + right - 2.0 * v0) + 2.0 * v0 - v1

    def step_interior(self, v0: np.ndarray, v1: np.ndarray, p: float):
        """Advance the interior of a halo array. Ghost cells are read only."""
        c = v0[1:-1]
        v1[1:-1] = p * (v0[:-2] + v0[2:] - 2.0 * c) + 2.0 * c - v1[1:-1]

    def warmup(self, warmup_size: int = 16):
        """No-op for NumPy kernel."""
        pass


class NumbaKernel:
    """Numba JIT-compiled wave kernel.

    Parameters
    ----------
    parallel : bool
        Use the ``prange`` sweep (default: False, single-threaded loop).
    numba_threads : int, optional
        Number of Numba threads for the parallel sweep.
    """

    name = "numba"

    def __init__(self, parallel: bool = False, numba_threads: int = None):
        self.parallel = parallel

        # Set requested threads (may be clamped by NUMBA_NUM_THREADS env var)
        if parallel and numba_threads is not None:
            numba.set_num_threads(min(numba_threads, numba.config.NUMBA_NUM_THREADS))

        # Record what Numba actually reports
        self.observed_numba_threads = numba.get_num_threads() if parallel else 1

        self._sweep = _sweep_parallel if parallel else _sweep_serial
        self._sweep_interior = (
            _sweep_interior_parallel if parallel else _sweep_interior_serial
        )

    def step(self, v0: np.ndarray, v1: np.ndarray, p: float):
        """Advance v1 by one time level using v0 (periodic ring)."""
        self._sweep(v0, v1, p)

    def step_interior(self, v0: np.ndarray, v1: np.ndarray, p: float):
        """Advance the interior of a halo array. Ghost cells are read only."""
        self._sweep_interior(v0, v1, p)

    def warmup(self, warmup_size: int = 16):
        """Trigger JIT compilation with a small problem."""
        v0 = np.random.randn(warmup_size)
        v1 = np.zeros_like(v0)
        for _ in range(2):
            self._sweep(v0, v1, 0.1)
            self._sweep_interior(v0, v1, 0.1)
            v0, v1 = v1, v0


def create_kernel(use_numba: bool, parallel: bool = False, numba_threads: int = None):
    """Factory: NumbaKernel if use_numba else NumPyKernel."""
    if use_numba:
        return NumbaKernel(parallel=parallel, numba_threads=numba_threads)
    return NumPyKernel()
