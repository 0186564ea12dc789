"""Tests for cross-validation of lattice states."""

import numpy as np
import pytest
from Wave1D import ConfigurationError, LatticeState, Verifier, compare


def state(curr, prev=None):
    curr = np.asarray(curr, dtype=np.float64)
    return LatticeState(curr=curr, prev=curr.copy() if prev is None else prev)


class TestComparison:
    """Tests for the tolerance comparison."""

    def test_identical_states_pass(self):
        a = state([0.0, 1.0, -0.5, 0.25])
        result = compare(a, a.copy())

        assert result.passed
        assert result.max_abs_diff == 0.0
        assert result.max_rel_diff == 0.0
        assert not result.diverged

    def test_within_tolerance(self):
        a = state([0.0, 1.0, 0.0])
        b = state([0.0, 1.0 + 5e-10, 0.0])
        result = compare(a, b, tolerance=1e-9)

        assert result.passed
        assert result.max_abs_diff == pytest.approx(5e-10, rel=1e-3)

    def test_outside_tolerance(self):
        a = state([0.0, 1.0, 0.0])
        b = state([0.0, 1.0, 1e-6])
        result = compare(a, b, tolerance=1e-9)

        assert not result.passed
        assert not result.diverged
        assert result.max_abs_diff == pytest.approx(1e-6)

    def test_tolerance_boundary_inclusive(self):
        a = state([0.0, 0.0])
        b = state([0.0, 0.5])
        assert compare(a, b, tolerance=0.5).passed

    def test_compares_both_levels(self):
        """A difference only in the previous level still fails."""
        a = state([1.0, 2.0], prev=np.array([0.0, 0.0]))
        b = state([1.0, 2.0], prev=np.array([0.0, 1.0]))
        result = compare(a, b)

        assert not result.passed
        assert result.abs_diff.shape == (2, 2)
        assert result.abs_diff[1, 1] == 1.0

    def test_relative_difference(self):
        a = state([2.0, 0.0])
        b = state([1.0, 0.0])
        result = compare(a, b)

        assert result.max_rel_diff == pytest.approx(0.5)
        assert result.rel_diff[0, 1] == 0.0

    def test_size_mismatch(self):
        with pytest.raises(ConfigurationError):
            compare(state([0.0, 1.0]), state([0.0, 1.0, 2.0]))

    def test_negative_tolerance(self):
        with pytest.raises(ConfigurationError):
            Verifier(tolerance=-1.0)


class TestDivergence:
    """Divergence is reported on the result, never raised."""

    @pytest.mark.parametrize("bad", [np.nan, np.inf, -np.inf])
    def test_non_finite(self, bad):
        a = state([0.0, bad, 0.0])
        b = state([0.0, 1.0, 0.0])
        result = compare(a, b)

        assert result.diverged
        assert not result.passed
        assert result.max_abs_diff == np.inf

    def test_large_amplitude(self):
        a = state([0.0, 1e7])
        result = compare(a, a.copy())

        assert result.diverged
        assert not result.passed
        assert result.peak_amplitude == 1e7

    def test_threshold_relative_to_initial_amplitude(self):
        """Growth is measured against the seeded peak."""
        a = state([0.0, 5e7])
        assert not compare(a, a.copy(), initial_amplitude=1e2).diverged
        assert compare(a, a.copy(), initial_amplitude=10.0).diverged

    def test_zero_initial_amplitude_falls_back_to_absolute(self):
        a = state([0.0, 2e6])
        assert compare(a, a.copy(), initial_amplitude=0.0).diverged

    def test_custom_threshold(self):
        a = state([0.0, 50.0])
        assert Verifier(divergence_threshold=10.0).compare(a, a.copy()).diverged
        assert not Verifier(divergence_threshold=100.0).compare(a, a.copy()).diverged

    def test_to_mlflow(self):
        a = state([0.0, 1.0])
        record = compare(a, a.copy()).to_mlflow()

        assert record["passed"] == 1
        assert record["diverged"] == 0
        assert set(record) == {"passed", "diverged", "max_abs_diff", "max_rel_diff", "peak_amplitude"}
