"""
Simplified cointegration and mean-reversion statistics.

Five independent estimators over rolling windows. None of them looks up a
p-value: callers compare the statistic against a critical value with
``is_cointegrated``. Every estimator returns 0.0 below its minimum sample
count (or when its input windows differ in size); 0.0 means "untested", not
"not cointegrated".

These are lightweight approximations of the textbook tests:

- Engle-Granger: mean/std of the OLS residuals scaled by sqrt(n), not an ADF
  regression.
- Johansen: closed-form largest eigenvalue of the 2x2 return covariance,
  only defined for two series.
"""

import math
from dataclasses import dataclass, asdict
from typing import Dict

import numpy as np

from .rolling_window import RollingWindow
from .statistics import WindowLike, as_array, log_returns, mean, ols_slope, std_dev

ENGLE_GRANGER_MIN_SAMPLES = 10
THRESHOLD_MIN_SAMPLES = 10
THRESHOLD_MIN_QUALIFYING = 5
FRACTIONAL_MIN_SAMPLES = 30
ERROR_CORRECTION_MIN_SAMPLES = 15
JOHANSEN_MIN_SAMPLES = 20


@dataclass(frozen=True)
class CointegrationReport:
    """All five statistics computed over the same windows."""
    engle_granger: float
    johansen: float
    threshold: float
    fractional: float
    error_correction: float

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


def engle_granger_test(y: WindowLike, x: WindowLike) -> float:
    """Residual-based stationarity proxy: mean(res) / std(res) * sqrt(n)."""
    ys = as_array(y)
    xs = as_array(x)
    n = xs.size
    if n != ys.size or n < ENGLE_GRANGER_MIN_SAMPLES:
        return 0.0

    beta = ols_slope(ys, xs)
    alpha = mean(ys) - beta * mean(xs)
    residuals = ys - (alpha + beta * xs)

    std_residual = std_dev(residuals)
    if std_residual <= 0:
        return 0.0
    return mean(residuals) / std_residual * math.sqrt(n)


def threshold_cointegration_test(spread: WindowLike, threshold: float) -> float:
    """
    Threshold autoregression on the spread.

    Regress spread[t] on spread[t-1] using only lags with ``|lag| > threshold``
    and report ``|beta - 1| * sqrt(count)``.
    """
    data = as_array(spread)
    if data.size < THRESHOLD_MIN_SAMPLES:
        return 0.0

    lagged = data[:-1]
    current = data[1:]
    mask = np.abs(lagged) > threshold
    count = int(np.count_nonzero(mask))
    if count < THRESHOLD_MIN_QUALIFYING:
        return 0.0

    beta = ols_slope(current[mask], lagged[mask])
    return abs(beta - 1.0) * math.sqrt(count)


def fractional_cointegration_test(price1: WindowLike, price2: WindowLike) -> float:
    """Rescaled-range (Hurst) estimate of the fractional integration order d = H - 0.5."""
    p1 = as_array(price1)
    p2 = as_array(price2)
    n = p1.size
    if n != p2.size or n < FRACTIONAL_MIN_SAMPLES:
        return 0.0

    spread = np.log(p1) - np.log(p2)
    deviations = spread - np.mean(spread)
    cumulative = np.cumsum(deviations)
    value_range = float(np.max(cumulative) - np.min(cumulative))

    std = std_dev(spread)
    rs_stat = value_range / std if std > 0 else 0.0
    hurst = math.log(rs_stat) / math.log(n) if rs_stat > 0 else 0.5

    d_param = hurst - 0.5
    return abs(d_param) * math.sqrt(n)


def error_correction_test(price1: WindowLike, price2: WindowLike, spread: WindowLike) -> float:
    """Speed of adjustment of price1 to the lagged spread, ``|gamma| * sqrt(n - 1)``."""
    p1 = as_array(price1)
    p2 = as_array(price2)
    s = as_array(spread)
    n = s.size
    if n < ERROR_CORRECTION_MIN_SAMPLES or p1.size != n or p2.size != n:
        return 0.0

    diff1 = np.diff(p1)
    spread_lag = s[:-1]
    gamma = ols_slope(diff1, spread_lag)
    return abs(gamma) * math.sqrt(n - 1)


def johansen_test(price1: WindowLike, price2: WindowLike) -> float:
    """
    Two-series trace statistic from the log-return covariance matrix.

    ``-n * ln(1 - (trace - sqrt(trace^2 - 4 det)) / 2)`` where trace and det
    belong to the 2x2 sample covariance of the two return series.
    """
    p1 = as_array(price1)
    p2 = as_array(price2)
    n = p1.size
    if n != p2.size or n < JOHANSEN_MIN_SAMPLES:
        return 0.0

    cov = np.cov(np.vstack([log_returns(p1), log_returns(p2)]), ddof=1)
    c11, c12, c22 = float(cov[0, 0]), float(cov[0, 1]), float(cov[1, 1])

    trace = c11 + c22
    det = c11 * c22 - c12 * c12
    # rounding can push the discriminant of a symmetric matrix just below zero
    discriminant = max(trace * trace - 4.0 * det, 0.0)
    argument = 1.0 - (trace - math.sqrt(discriminant)) / 2.0
    if argument <= 0:
        return 0.0

    lambda_trace = -n * math.log(argument)
    return lambda_trace if math.isfinite(lambda_trace) else 0.0


def is_cointegrated(test_stat: float, critical_value: float) -> bool:
    """Reject the no-cointegration null iff the statistic is below the critical value."""
    return test_stat < critical_value


def run_suite(
    price1: RollingWindow,
    price2: RollingWindow,
    spread: RollingWindow,
    threshold: float,
) -> CointegrationReport:
    """Run every estimator over the same windows."""
    return CointegrationReport(
        engle_granger=engle_granger_test(price1, price2),
        johansen=johansen_test(price1, price2),
        threshold=threshold_cointegration_test(spread, threshold),
        fractional=fractional_cointegration_test(price1, price2),
        error_correction=error_correction_test(price1, price2, spread),
    )
