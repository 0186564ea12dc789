"""Distributed backend: the lattice is split across MPI ranks on a ring."""

import logging

import numpy as np
from mpi4py import MPI

from ..errors import BackendError, ConfigurationError
from ..kernels import create_kernel
from ..mpi import RingDecomposition, RingHaloExchanger
from .base import ComputeBackend

log = logging.getLogger(__name__)


class MPIBackend(ComputeBackend):
    """Distributed dispatch with periodic halo exchange.

    Every rank holds its slice of each buffer plus one ghost cell on each
    side. A dispatch exchanges the ghost cells of the read buffer and then
    updates the local interior of the write buffer. Readback gathers the
    full lattice on every rank.

    Parameters
    ----------
    comm : MPI.Comm
        MPI communicator (default: COMM_WORLD).
    use_numba : bool
        Use the Numba interior kernel (default: False, NumPy).
    numba_threads : int, optional
        Numba threads per rank.
    """

    name = "mpi"

    def __init__(self, comm: MPI.Comm = None, use_numba: bool = False, numba_threads: int = None):
        super().__init__()
        self.comm = comm if comm is not None else MPI.COMM_WORLD
        self.use_numba = use_numba
        self.numba_threads = numba_threads
        self.decomposition = None
        self._exchanger = None
        self.halo_times = []

    @property
    def rank(self) -> int:
        return self.comm.Get_rank()

    @property
    def size(self) -> int:
        return self.comm.Get_size()

    def validate(self, params):
        """Every rank needs at least one lattice site."""
        if params.n < self.size:
            raise ConfigurationError(
                f"Lattice of {params.n} sites cannot be split across {self.size} ranks"
            )

    def _acquire(self):
        self.kernel = create_kernel(
            self.use_numba, parallel=self.numba_threads is not None, numba_threads=self.numba_threads
        )
        self.kernel.warmup()
        self.observed_numba_threads = self.kernel.observed_numba_threads

    def _release(self):
        if self.decomposition is not None:
            self.decomposition.free()
            self.decomposition = None

    def _decompose(self, n: int):
        if self.decomposition is None:
            self.decomposition = RingDecomposition(n, self.comm)
            self._exchanger = RingHaloExchanger(self.decomposition.neighbors)
            if self.rank == 0:
                log.info(f"Ring decomposition: n={n} over {self.size} ranks")
        elif self.decomposition.n != n:
            raise BackendError(
                f"Backend already decomposed for n={self.decomposition.n}, got n={n}"
            )
        return self.decomposition

    def _upload(self, host: np.ndarray) -> np.ndarray:
        decomp = self._decompose(host.size)
        local = np.zeros(decomp.halo_n, dtype=np.float64)
        local[1:-1] = host[decomp.global_start:decomp.global_end]
        return local

    def _dispatch(self, stage, p: float, extent: int):
        if self.decomposition is None or self.decomposition.n != extent:
            raise BackendError(f"No buffers uploaded for extent {extent}")
        t0 = MPI.Wtime()
        self._exchanger.exchange(stage.read, self.decomposition.cart_comm)
        self.halo_times.append(MPI.Wtime() - t0)
        self.kernel.step_interior(stage.read, stage.write, p)

    def _readback(self, buffer: np.ndarray) -> np.ndarray:
        decomp = self.decomposition
        host = np.empty(decomp.n, dtype=np.float64)
        send = np.ascontiguousarray(buffer[1:-1])
        decomp.cart_comm.Allgatherv(send, [host, decomp.counts, decomp.starts, MPI.DOUBLE])
        return host

    def synchronize(self):
        self.comm.Barrier()
