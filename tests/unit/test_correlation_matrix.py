"""Tests for the pairwise correlation matrix."""

import numpy as np
import pytest

from signal_lib.correlation_matrix import CorrelationMatrix
from signal_lib.rolling_window import RollingWindow, WindowCapacityError


def to_window(values):
    window = RollingWindow(len(values))
    for value in values:
        window.push(value)
    return window


@pytest.fixture
def windows():
    base = [1.0, 4.0, 2.0, 8.0, 5.0]
    return [
        to_window(base),
        to_window([-v for v in base]),
        to_window([2.0 * v + 1.0 for v in base]),
    ]


class TestCorrelationMatrix:
    """Test fills, lookups and bounds."""

    def test_invalid_size(self):
        """A matrix needs at least one series."""
        with pytest.raises(WindowCapacityError):
            CorrelationMatrix(0)

    def test_starts_empty(self):
        """A new matrix is all zeros."""
        matrix = CorrelationMatrix(3)
        assert np.all(matrix.as_array() == 0.0)

    def test_update(self, windows):
        """The diagonal is 1 and off-diagonals hold pairwise correlations."""
        matrix = CorrelationMatrix(3)
        matrix.update(windows)

        for i in range(3):
            assert matrix.get(i, i) == 1.0
        assert matrix.get(0, 1) == pytest.approx(-1.0)
        assert matrix.get(0, 2) == pytest.approx(1.0)
        assert matrix.get(1, 2) == pytest.approx(-1.0)

    def test_symmetric(self, windows):
        """Entry (i, j) equals entry (j, i)."""
        matrix = CorrelationMatrix(3)
        matrix.update(windows)
        array = matrix.as_array()
        assert np.allclose(array, array.T)

    def test_partial_update(self, windows):
        """Fewer windows than the matrix size fill only the leading block."""
        matrix = CorrelationMatrix(4)
        matrix.update(windows[:2])
        assert matrix.get(0, 1) == pytest.approx(-1.0)
        assert matrix.get(2, 2) == 0.0
        assert matrix.get(3, 0) == 0.0

    def test_too_many_windows_ignored(self, windows):
        """More windows than the matrix size leave it untouched."""
        matrix = CorrelationMatrix(2)
        matrix.update(windows)
        assert np.all(matrix.as_array() == 0.0)

    def test_out_of_range(self, windows):
        """Out-of-range indices read as 0.0."""
        matrix = CorrelationMatrix(3)
        matrix.update(windows)
        assert matrix.get(3, 0) == 0.0
        assert matrix.get(-1, 0) == 0.0

    def test_as_array_is_a_copy(self, windows):
        """Mutating the returned array leaves the matrix unchanged."""
        matrix = CorrelationMatrix(3)
        matrix.update(windows)
        array = matrix.as_array()
        array[0, 1] = 42.0
        assert matrix.get(0, 1) == pytest.approx(-1.0)
        assert array.shape == (3, 3)
