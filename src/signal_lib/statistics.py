"""
Rolling statistics over windows.

Pure functions over a RollingWindow or any 1-D sequence of floats. Degenerate
inputs resolve to 0.0 instead of raising: an empty window has mean 0, a
window of one value has standard deviation 0, and zero variance gives a
correlation and z-score of 0.
"""

import math
from typing import Sequence, Union

import numpy as np

from .rolling_window import RollingWindow

WindowLike = Union[RollingWindow, Sequence[float], np.ndarray]

# Denominators below this magnitude make the OLS slope undefined
OLS_EPSILON = 1e-10


def as_array(window: WindowLike) -> np.ndarray:
    """Return window contents as a float array, oldest first."""
    if isinstance(window, RollingWindow):
        return window.values()
    return np.asarray(window, dtype=float)


def mean(window: WindowLike) -> float:
    data = as_array(window)
    if data.size == 0:
        return 0.0
    return float(np.mean(data))


def std_dev(window: WindowLike) -> float:
    """Sample standard deviation (n - 1 denominator); exactly 0.0 for a constant window."""
    data = as_array(window)
    if data.size <= 1 or np.ptp(data) == 0.0:
        return 0.0
    return float(np.std(data, ddof=1))


def correlation(a: WindowLike, b: WindowLike) -> float:
    """
    Pearson correlation of two equal-length windows.

    Returns 0.0 when the lengths differ, fewer than two samples exist, or
    either series has zero variance.
    """
    x = as_array(a)
    y = as_array(b)
    if x.size != y.size or x.size < 2:
        return 0.0
    if np.ptp(x) == 0.0 or np.ptp(y) == 0.0:
        return 0.0

    dx = x - np.mean(x)
    dy = y - np.mean(y)
    numerator = float(np.sum(dx * dy))
    denominator = math.sqrt(float(np.sum(dx * dx)) * float(np.sum(dy * dy)))
    if denominator == 0.0:
        return 0.0
    return numerator / denominator


def z_score(value: float, mean_value: float, std: float) -> float:
    if std == 0.0:
        return 0.0
    return (value - mean_value) / std


def ols_slope(y: WindowLike, x: WindowLike) -> float:
    """Least-squares slope of ``y`` on ``x`` (with intercept)."""
    ys = as_array(y)
    xs = as_array(x)
    n = xs.size
    if n != ys.size or n < 2:
        return 0.0

    sum_x = float(np.sum(xs))
    sum_y = float(np.sum(ys))
    sum_xy = float(np.sum(xs * ys))
    sum_x2 = float(np.sum(xs * xs))

    denominator = n * sum_x2 - sum_x * sum_x
    if abs(denominator) < OLS_EPSILON:
        return 0.0
    return (n * sum_xy - sum_x * sum_y) / denominator


def log_returns(prices: WindowLike) -> np.ndarray:
    """Consecutive log returns, ``len(prices) - 1`` values."""
    data = as_array(prices)
    if data.size < 2:
        return np.empty(0, dtype=float)
    return np.log(data[1:] / data[:-1])
