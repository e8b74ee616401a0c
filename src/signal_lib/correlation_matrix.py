"""
Pairwise correlation matrix across N rolling windows.

Stored as one contiguous row-major buffer indexed ``row * size + col``.
"""

from typing import Sequence

import numpy as np

from .rolling_window import RollingWindow, WindowCapacityError
from .statistics import correlation


class CorrelationMatrix:
    """Symmetric Pearson correlation matrix over up to ``size`` series."""

    def __init__(self, size: int):
        if size < 1:
            raise WindowCapacityError(f"Correlation matrix size must be at least 1, got {size}")
        self.size = int(size)
        self._buffer = np.zeros(self.size * self.size, dtype=float)

    def update(self, windows: Sequence[RollingWindow]) -> None:
        """
        Recompute correlations for the given windows.

        Fills the leading ``len(windows)`` rows and columns; a call with more
        windows than the matrix holds is ignored.
        """
        n = len(windows)
        if n > self.size:
            return

        for i in range(n):
            self._buffer[i * self.size + i] = 1.0
            for j in range(i + 1, n):
                value = correlation(windows[i], windows[j])
                self._buffer[i * self.size + j] = value
                self._buffer[j * self.size + i] = value

    def get(self, row: int, col: int) -> float:
        if not (0 <= row < self.size and 0 <= col < self.size):
            return 0.0
        return float(self._buffer[row * self.size + col])

    def as_array(self) -> np.ndarray:
        """Copy of the matrix as a ``(size, size)`` array."""
        return self._buffer.reshape(self.size, self.size).copy()
