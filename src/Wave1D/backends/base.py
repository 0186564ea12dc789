"""Base class for compute backends.

A backend owns "device" memory for the lattice buffers and executes one
stage of the parallel solver as an independent-per-index dispatch. Every
failure inside a backend implementation surfaces as BackendError.
"""

import logging
from abc import ABC, abstractmethod

import numpy as np

from ..errors import BackendError, ConfigurationError

log = logging.getLogger(__name__)


class ComputeBackend(ABC):
    """Abstract base for all compute backends.

    Backends are acquired explicitly (or with ``with backend:``) and must be
    released on every exit path. A released backend cannot be reused.
    """

    name = "base"

    def __init__(self):
        self._acquired = False
        self._released = False
        self.observed_numba_threads = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def acquire(self) -> "ComputeBackend":
        """Acquire backend resources (idempotent)."""
        if self._released:
            raise BackendError(f"{self.name} backend has been released")
        if not self._acquired:
            self._guarded("acquire", self._acquire)
            self._acquired = True
            log.debug(f"Acquired {self.name} backend")
        return self

    def release(self):
        """Release backend resources. Safe to call more than once."""
        if self._acquired and not self._released:
            try:
                self._release()
            finally:
                log.debug(f"Released {self.name} backend")
        self._released = True

    def __enter__(self) -> "ComputeBackend":
        return self.acquire()

    def __exit__(self, exc_type, exc, tb):
        self.release()
        return False

    @property
    def is_active(self) -> bool:
        return self._acquired and not self._released

    # ------------------------------------------------------------------
    # Data movement and dispatch
    # ------------------------------------------------------------------

    def upload(self, host: np.ndarray):
        """Copy a host array into backend memory and return the buffer."""
        self._ensure_active()
        return self._guarded("upload", self._upload, np.ascontiguousarray(host, dtype=np.float64))

    def dispatch(self, stage, p: float, extent: int):
        """Run the step kernel over ``extent`` sites for one stage.

        Blocking: the stage has completed when this returns.
        """
        self._ensure_active()
        self._guarded("dispatch", self._dispatch, stage, p, extent)

    def readback(self, buffer, out: np.ndarray = None) -> np.ndarray:
        """Copy a backend buffer into host memory."""
        self._ensure_active()
        host = self._guarded("readback", self._readback, buffer)
        if out is not None:
            out[:] = host
            return out
        return host

    def synchronize(self):
        """Wait for all issued work. Dispatches are blocking by default."""
        pass

    def validate(self, params):
        """Raise ConfigurationError if this backend cannot run ``params``.

        Called before any solver runs. Accepts everything by default.
        """
        pass

    # ------------------------------------------------------------------
    # Hooks for implementations
    # ------------------------------------------------------------------

    def _acquire(self):
        """Allocate contexts, compile kernels. No-op by default."""
        pass

    def _release(self):
        """Free backend resources. No-op by default."""
        pass

    @abstractmethod
    def _upload(self, host: np.ndarray):
        pass

    @abstractmethod
    def _dispatch(self, stage, p: float, extent: int):
        pass

    @abstractmethod
    def _readback(self, buffer) -> np.ndarray:
        pass

    # ------------------------------------------------------------------

    def _ensure_active(self):
        if self._released:
            raise BackendError(f"{self.name} backend has been released")
        if not self._acquired:
            self.acquire()

    def _guarded(self, operation: str, fn, *args):
        """Call fn, converting any implementation error into BackendError."""
        try:
            return fn(*args)
        except (BackendError, ConfigurationError):
            raise
        except Exception as e:
            raise BackendError(f"{self.name} backend {operation} failed: {e}") from e
