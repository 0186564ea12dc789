"""Periodic 1D domain decomposition with an MPI Cartesian ring."""

from __future__ import annotations

from mpi4py import MPI

from ..datastructures import RankGeometry
from ..errors import ConfigurationError


class RingDecomposition:
    """Splits a periodic lattice of n sites into contiguous slices.

    Creates a periodic Cartesian communicator so that the first and last
    rank are neighbours. With a single rank both neighbours are the rank
    itself and the halo exchange wraps the lattice onto itself.

    Parameters
    ----------
    n : int
        Global lattice size.
    comm : MPI.Comm
        MPI communicator.
    """

    def __init__(self, n: int, comm: MPI.Comm = MPI.COMM_WORLD):
        self.n = n
        self.comm = comm
        self.rank = comm.Get_rank()
        self.size = comm.Get_size()

        if n < self.size:
            raise ConfigurationError(
                f"Lattice of {n} sites cannot be split across {self.size} ranks"
            )

        self.cart_comm = comm.Create_cart(dims=[self.size], periods=[True], reorder=False)
        self.neighbors = self._find_neighbors()

        self.counts, self.starts = self._split(n, self.size)
        self.local_n = self.counts[self.rank]
        self.halo_n = self.local_n + 2
        self.global_start = self.starts[self.rank]
        self.global_end = self.global_start + self.local_n

    @staticmethod
    def _split(n: int, n_parts: int):
        """Split n sites among n_parts ranks, remainder to the lowest ranks."""
        base = n // n_parts
        rem = n % n_parts
        counts = [base + (1 if i < rem else 0) for i in range(n_parts)]
        starts = [sum(counts[:i]) for i in range(n_parts)]
        return counts, starts

    def _find_neighbors(self) -> dict[str, int]:
        """Use Cart_shift to find neighbour ranks (always defined on a ring)."""
        lower, upper = self.cart_comm.Shift(0, 1)
        return {"lower": lower, "upper": upper}

    def geometry(self) -> RankGeometry:
        return RankGeometry(
            rank=self.rank,
            local_n=self.local_n,
            halo_n=self.halo_n,
            global_start=self.global_start,
            global_end=self.global_end,
            neighbors=dict(self.neighbors),
        )

    def free(self):
        """Free the Cartesian communicator."""
        if self.cart_comm != MPI.COMM_NULL:
            self.cart_comm.Free()
