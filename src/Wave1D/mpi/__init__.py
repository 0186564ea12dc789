"""MPI domain decomposition and communication for the periodic lattice.

This package provides:
- RingDecomposition: Contiguous slices on a periodic Cartesian ring
- RingHaloExchanger: Ghost-cell exchange with both ring neighbours
- RankGeometry: Exported from datastructures for convenience
"""

from .decomposition import RingDecomposition
from .halo import RingHaloExchanger
from ..datastructures import RankGeometry

__all__ = [
    "RingDecomposition",
    "RingHaloExchanger",
    "RankGeometry",
]
