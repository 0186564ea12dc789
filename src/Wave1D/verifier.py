"""Cross-validation of two final lattice states."""

import logging

import numpy as np

from .datastructures import ComparisonResult, LatticeState
from .errors import ConfigurationError

log = logging.getLogger(__name__)


class Verifier:
    """Compare two lattice states site by site under an absolute tolerance.

    Divergence (non-finite values, or a peak amplitude more than
    ``divergence_threshold`` times the initial amplitude) is reported on
    the result and fails the comparison; it is never raised.

    Parameters
    ----------
    tolerance : float
        Maximum allowed absolute difference (default: 1e-9).
    divergence_threshold : float
        Growth factor over the initial amplitude above which a state is
        considered divergent (default: 1e6).
    """

    def __init__(self, tolerance: float = 1e-9, divergence_threshold: float = 1e6):
        if tolerance < 0:
            raise ConfigurationError(f"Tolerance must be non-negative, got {tolerance}")
        self.tolerance = tolerance
        self.divergence_threshold = divergence_threshold

    def compare(
        self,
        result_a: LatticeState,
        result_b: LatticeState,
        initial_amplitude: float = 1.0,
    ) -> ComparisonResult:
        """Compare both time levels of two states.

        ``initial_amplitude`` is the peak of the seeded state; a zero
        amplitude falls back to 1.0 so any growth from rest is measured in
        absolute terms.
        """
        if result_a.n != result_b.n:
            raise ConfigurationError(
                f"Cannot compare lattices of different size: {result_a.n} != {result_b.n}"
            )

        a = np.vstack([result_a.curr, result_a.prev])
        b = np.vstack([result_b.curr, result_b.prev])

        with np.errstate(invalid="ignore", divide="ignore", over="ignore"):
            abs_diff = np.abs(a - b)
            scale = np.maximum(np.abs(a), np.abs(b))
            rel_diff = np.where(scale > 0, abs_diff / scale, 0.0)

        finite = bool(np.all(np.isfinite(a)) and np.all(np.isfinite(b)))
        if finite:
            peak = float(max(np.max(np.abs(a)), np.max(np.abs(b))))
            max_abs = float(np.max(abs_diff))
            max_rel = float(np.max(rel_diff))
        else:
            peak = np.inf
            max_abs = np.inf
            max_rel = np.inf

        reference = initial_amplitude if initial_amplitude > 0 else 1.0
        diverged = not finite or peak > self.divergence_threshold * reference
        passed = not diverged and max_abs <= self.tolerance

        if diverged:
            log.warning(
                f"Numeric divergence detected (peak amplitude {peak:.3e}, initial {reference:.3e})"
            )
        elif not passed:
            log.warning(
                f"Results differ: max |diff| = {max_abs:.3e} > tolerance {self.tolerance:.1e}"
            )

        return ComparisonResult(
            passed=passed,
            max_abs_diff=max_abs,
            max_rel_diff=max_rel,
            tolerance=self.tolerance,
            diverged=diverged,
            peak_amplitude=peak,
            abs_diff=abs_diff,
            rel_diff=rel_diff,
        )


def compare(
    result_a: LatticeState,
    result_b: LatticeState,
    tolerance: float = 1e-9,
    initial_amplitude: float = 1.0,
) -> ComparisonResult:
    """Compare two states with a default Verifier."""
    return Verifier(tolerance=tolerance).compare(result_a, result_b, initial_amplitude)
