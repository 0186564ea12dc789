"""Initial conditions and discretisation parameters for the 1D wave problem."""

import numpy as np

from .datastructures import CFL_LIMIT
from .errors import ConfigurationError

__all__ = [
    "CFL_LIMIT",
    "courant_parameter",
    "create_lattice",
    "peak_initial_condition",
    "zero_initial_condition",
]


def courant_parameter(c: float, dt: float, dx: float) -> float:
    """Squared Courant number p = (c * dt / dx)^2.

    The explicit scheme stays bounded for p <= CFL_LIMIT. This is a
    documented assumption and is not enforced by the solvers.
    """
    if dx <= 0:
        raise ConfigurationError(f"Grid spacing must be positive, got dx={dx}")
    return (c * dt / dx) ** 2


def create_lattice(n: int, value: float = 0.0) -> np.ndarray:
    """Create a float64 lattice of n sites filled with value."""
    if n <= 0:
        raise ConfigurationError(f"Lattice size must be positive, got n={n}")
    return np.full(n, value, dtype=np.float64)


def peak_initial_condition(n: int, amplitude: float = 1.0):
    """Point disturbance at the ring midpoint in both time levels.

    Equal levels correspond to zero initial velocity.

    Returns
    -------
    tuple
        (u0, u1) with ``amplitude`` at index ``n // 2`` and zeros elsewhere.
    """
    u0 = create_lattice(n)
    u1 = create_lattice(n)
    u0[n // 2] = amplitude
    u1[n // 2] = amplitude
    return u0, u1


def zero_initial_condition(n: int):
    """Both levels identically zero (fixed point of the recurrence)."""
    return create_lattice(n), create_lattice(n)
