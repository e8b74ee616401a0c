"""
Fixed-capacity rolling window of floats.

Every other component of the signal engine reads its history through this
type. Index 0 is the oldest retained value and ``size() - 1`` the newest;
once the window is full each push evicts exactly the oldest value.
"""

from collections import deque
from typing import Iterator

import numpy as np


class WindowCapacityError(ValueError):
    """Raised when a window is constructed with a capacity below 1."""


class RollingWindow:
    """FIFO ring of at most ``capacity`` floats."""

    def __init__(self, capacity: int):
        if capacity < 1:
            raise WindowCapacityError(f"Window capacity must be at least 1, got {capacity}")
        self.capacity = int(capacity)
        self._data: deque = deque(maxlen=self.capacity)

    def push(self, value: float) -> None:
        self._data.append(float(value))

    def get(self, index: int) -> float:
        """Return the value at ``index``; 0.0 when the index is out of range."""
        if index < 0 or index >= len(self._data):
            return 0.0
        return self._data[index]

    def size(self) -> int:
        return len(self._data)

    def last(self) -> float:
        """Newest value, 0.0 for an empty window."""
        return self._data[-1] if self._data else 0.0

    @property
    def is_full(self) -> bool:
        return len(self._data) == self.capacity

    def values(self) -> np.ndarray:
        """Copy of the window contents, oldest first."""
        return np.fromiter(self._data, dtype=float, count=len(self._data))

    def clear(self) -> None:
        self._data.clear()

    def __len__(self) -> int:
        return len(self._data)

    def __iter__(self) -> Iterator[float]:
        return iter(self._data)

    def __repr__(self) -> str:
        return f"RollingWindow(capacity={self.capacity}, size={len(self._data)})"
