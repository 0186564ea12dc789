"""Sequential reference solver."""

import numpy as np

from .base import BaseSolver
from ..kernels import NumbaKernel, NumPyKernel


class SequentialSolver(BaseSolver):
    """Single-threaded reference solver with an explicit two-slot swap.

    Each advance sweeps the kernel over the whole ring, writing the new
    level into the ``previous`` slot, then rotates the slots so that the
    freshly written buffer becomes ``current``. Buffers change roles; no
    element is copied between them.

    Parameters
    ----------
    use_numba : bool
        Use the serial Numba sweep (default: True). Otherwise NumPy.
    kernel : object, optional
        Kernel instance with ``step(v0, v1, p)``; overrides ``use_numba``.
    """

    def __init__(self, use_numba: bool = True, kernel=None):
        super().__init__()
        self.use_numba = use_numba

        # Select kernel
        if kernel is not None:
            self.kernel = kernel
        elif use_numba:
            self.kernel = NumbaKernel(parallel=False)
        else:
            self.kernel = NumPyKernel()

    def advance(self, u0: np.ndarray, u1: np.ndarray, p: float, n: int, num_steps: int):
        """Advance (u0, u1) by num_steps full sweeps, in place.

        On return ``u0`` holds the latest level and ``u1`` the one before.
        """
        self._validate(u0, u1, n, num_steps)
        self._reset(num_steps)

        # Working pair
        current = u0.copy()
        previous = u1.copy()

        t_start = self._get_time()

        for _ in range(num_steps):
            t0 = self._get_time()
            self.kernel.step(current, previous, p)
            compute_time = self._get_time() - t0

            self._time_compute += compute_time
            self.timeseries.compute_times.append(compute_time)
            self.metrics.kernel_evaluations += n
            self.metrics.dispatches += 1

            # Swap buffers
            current, previous = previous, current

        wall_time = self._get_time() - t_start

        u0[:] = current
        u1[:] = previous

        self.metrics.observed_numba_threads = getattr(self.kernel, "observed_numba_threads", None)
        self._finalize(wall_time, n)
