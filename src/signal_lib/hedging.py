"""
Dynamic hedge ratio, spread half-life and the adaptive entry/exit thresholds
derived from them.
"""

import math
from typing import Tuple

import numpy as np

from .rolling_window import RollingWindow
from .schemas import Regime
from .statistics import WindowLike, as_array, ols_slope

DEFAULT_HEDGE_RATIO = 1.0
MIN_HEDGE_RATIO = 0.1
MAX_HEDGE_RATIO = 5.0
MIN_HEDGE_LOOKBACK = 5
HEDGE_VARIANCE_EPSILON = 1e-8

DEFAULT_HALF_LIFE = 20.0
MIN_HALF_LIFE = 1.0
MAX_HALF_LIFE = 100.0
HALF_LIFE_MIN_SAMPLES = 10

BASE_ENTRY_THRESHOLD = 2.0
BASE_EXIT_THRESHOLD = 0.5
MIN_ENTRY_THRESHOLD = 0.5
MIN_EXIT_THRESHOLD = 0.1
HALF_LIFE_ADJUST_MIN_SAMPLES = 10  # adjustment applies once the spread holds more than this

# (entry multiplier, exit multiplier) per regime
REGIME_THRESHOLD_MULTIPLIERS = {
    Regime.NORMAL: (1.0, 1.0),
    Regime.STRESS: (1.5, 1.2),
    Regime.CRISIS: (2.5, 2.0),
}


def hedge_ratio(price1: WindowLike, price2: WindowLike, lookback: int = 20) -> float:
    """
    OLS beta of asset 1 log returns on asset 2 log returns.

    Uses the most recent ``lookback`` prices. Falls back to 1.0 when the
    windows differ in size, hold fewer than ``lookback`` prices, the lookback
    is below 5, or asset 2 returns have no variance. Always clamped to
    [0.1, 5.0].
    """
    p1 = as_array(price1)
    p2 = as_array(price2)
    if p1.size != p2.size or p1.size < lookback or lookback < MIN_HEDGE_LOOKBACK:
        return DEFAULT_HEDGE_RATIO

    recent1 = p1[-lookback:]
    recent2 = p2[-lookback:]
    ret1 = np.log(recent1[1:] / recent1[:-1])
    ret2 = np.log(recent2[1:] / recent2[:-1])

    dev1 = ret1 - np.mean(ret1)
    dev2 = ret2 - np.mean(ret2)
    covariance = float(np.sum(dev1 * dev2))
    variance2 = float(np.sum(dev2 * dev2))

    ratio = DEFAULT_HEDGE_RATIO
    if variance2 > HEDGE_VARIANCE_EPSILON:
        ratio = covariance / variance2

    return float(np.clip(ratio, MIN_HEDGE_RATIO, MAX_HEDGE_RATIO))


def half_life(spread: WindowLike) -> float:
    """
    Half-life of mean reversion from an AR(1) fit of the spread.

    ``-ln(2) / ln(beta)`` clamped to [1, 100]. Returns 20.0 when fewer than
    10 samples exist or beta falls outside (0, 1), i.e. the spread is not
    mean-reverting.
    """
    data = as_array(spread)
    if data.size < HALF_LIFE_MIN_SAMPLES:
        return DEFAULT_HALF_LIFE

    beta = ols_slope(data[1:], data[:-1])
    if not 0.0 < beta < 1.0:
        return DEFAULT_HALF_LIFE

    value = -math.log(2.0) / math.log(beta)
    return float(np.clip(value, MIN_HALF_LIFE, MAX_HALF_LIFE))


def dynamic_thresholds(
    regime: Regime,
    volatility_factor: float,
    spread: RollingWindow,
) -> Tuple[float, float]:
    """
    Entry/exit z-score thresholds scaled by regime, realized volatility and half-life.

    Faster mean reversion (shorter half-life) tightens both thresholds.
    """
    entry_mult, exit_mult = REGIME_THRESHOLD_MULTIPLIERS[regime]
    entry = BASE_ENTRY_THRESHOLD * entry_mult * volatility_factor
    exit_ = BASE_EXIT_THRESHOLD * exit_mult * volatility_factor

    if spread.size() > HALF_LIFE_ADJUST_MIN_SAMPLES:
        hl_factor = DEFAULT_HALF_LIFE / half_life(spread)
        entry *= hl_factor
        exit_ *= hl_factor

    return max(entry, MIN_ENTRY_THRESHOLD), max(exit_, MIN_EXIT_THRESHOLD)
