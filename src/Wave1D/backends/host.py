"""Shared-memory backends: NumPy (vectorised) and Numba (prange threads)."""

import numpy as np

from ..errors import BackendError
from ..kernels import NumbaKernel, NumPyKernel
from .base import ComputeBackend


class _HostBackend(ComputeBackend):
    """Backend whose buffers are private NumPy arrays in host memory."""

    def _make_kernel(self):
        raise NotImplementedError

    def _acquire(self):
        self.kernel = self._make_kernel()
        self.kernel.warmup()
        self.observed_numba_threads = self.kernel.observed_numba_threads

    def _upload(self, host: np.ndarray) -> np.ndarray:
        return host.copy()

    def _dispatch(self, stage, p: float, extent: int):
        if stage.read.shape[0] != extent or stage.write.shape[0] != extent:
            raise BackendError(
                f"Stage {stage.name} bound to buffers of length "
                f"{stage.read.shape[0]}/{stage.write.shape[0]}, extent is {extent}"
            )
        self.kernel.step(stage.read, stage.write, p)

    def _readback(self, buffer: np.ndarray) -> np.ndarray:
        return buffer.copy()


class NumPyBackend(_HostBackend):
    """Vectorised whole-array dispatch with NumPy."""

    name = "numpy"

    def _make_kernel(self):
        return NumPyKernel()


class NumbaBackend(_HostBackend):
    """Per-index parallel dispatch with a Numba ``prange`` kernel.

    Parameters
    ----------
    numba_threads : int, optional
        Number of Numba threads (default: Numba's configured maximum).
    """

    name = "numba"

    def __init__(self, numba_threads: int = None):
        super().__init__()
        self.numba_threads = numba_threads

    def _make_kernel(self):
        return NumbaKernel(parallel=True, numba_threads=self.numba_threads)
