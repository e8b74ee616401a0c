"""
Volatility-targeted position sizing and running portfolio risk metrics.
"""

import logging
import math
from typing import Optional

import numpy as np

from .correlation_matrix import CorrelationMatrix
from .rolling_window import RollingWindow
from .schemas import Regime
from .statistics import mean, std_dev

logger = logging.getLogger(__name__)

TRADING_DAYS = 252
EWMA_DECAY = 0.94
MIN_VOLATILITY_SAMPLES = 5
MIN_RISK_SAMPLES = 10

STRENGTH_NORMALIZER = 3.0  # |z| of 3 sigma is full strength
MIN_STRENGTH = 0.1
MAX_STRENGTH = 1.0
HEAT_DERATE_LEVEL = 0.5
MIN_VOL_SCALAR = 0.1
MAX_VOL_SCALAR = 5.0
HEAT_SCALE = 10.0

REGIME_TARGET_MULTIPLIERS = {
    Regime.NORMAL: 1.0,
    Regime.STRESS: 0.75,
    Regime.CRISIS: 0.5,
}


class RiskManager:
    """
    Sizes positions so realized volatility tracks a target.

    ``base_target_volatility`` is the configured annualized target;
    ``target_volatility`` is the one currently applied, which the tracker
    lowers in stressed regimes. Both volatility figures are annualized.
    """

    def __init__(
        self,
        returns_window: int,
        target_volatility: float = 0.15,
        risk_per_trade: float = 0.02,
        max_position_limit: float = 1_000_000.0,
    ):
        self.returns_window = RollingWindow(returns_window)
        self.squared_returns_window = RollingWindow(returns_window)

        self.base_target_volatility = target_volatility
        self.target_volatility = target_volatility
        self.current_volatility = target_volatility
        self.volatility_scalar = 1.0
        self.position_size = 0.0
        self.max_position_limit = max_position_limit
        self.risk_per_trade = risk_per_trade

        self.sharpe_ratio = 0.0
        self.max_drawdown = 0.0
        self.portfolio_heat = 0.0

        # EWMA state; 0.0 means no smoothed estimate yet
        self.smoothed_volatility = 0.0

    def size_position(self, signal_strength: float, account_size: float) -> float:
        """
        Volatility-targeted notional for a signal of the given z-score strength.

        The scalar clamp runs last: when target/current falls outside
        [0.1, 5.0] the size is rebuilt from the clamped scalar, replacing any
        position-limit cap or heat derating applied before it.
        """
        if account_size <= 0:
            return 0.0

        base_position = account_size * self.risk_per_trade

        if self.current_volatility > 0:
            self.volatility_scalar = self.target_volatility / self.current_volatility
        else:
            self.volatility_scalar = 1.0

        strength_factor = abs(signal_strength) / STRENGTH_NORMALIZER
        strength_factor = float(np.clip(strength_factor, MIN_STRENGTH, MAX_STRENGTH))

        sized_position = base_position * self.volatility_scalar * strength_factor

        if sized_position > self.max_position_limit:
            sized_position = self.max_position_limit

        if self.portfolio_heat > HEAT_DERATE_LEVEL:
            sized_position *= (1.0 - self.portfolio_heat)

        if self.volatility_scalar > MAX_VOL_SCALAR:
            sized_position = base_position * MAX_VOL_SCALAR * strength_factor
        elif self.volatility_scalar < MIN_VOL_SCALAR:
            sized_position = base_position * MIN_VOL_SCALAR * strength_factor

        self.position_size = sized_position
        return sized_position

    def update_volatility_estimate(self, trade_return: float) -> None:
        """Realized volatility from squared returns, EWMA-smoothed against the previous estimate."""
        self.returns_window.push(trade_return)
        self.squared_returns_window.push(trade_return * trade_return)

        if self.squared_returns_window.size() < MIN_VOLATILITY_SAMPLES:
            return

        variance = mean(self.squared_returns_window)
        self.current_volatility = math.sqrt(variance * TRADING_DAYS)

        if self.smoothed_volatility > 0:
            self.current_volatility = (
                EWMA_DECAY * self.smoothed_volatility
                + (1 - EWMA_DECAY) * self.current_volatility
            )
        self.smoothed_volatility = self.current_volatility

    def update_portfolio_risk(self, trade_return: float) -> None:
        """Refresh Sharpe ratio, max drawdown and portfolio heat from the returns window."""
        self.returns_window.push(trade_return)
        if self.returns_window.size() < MIN_RISK_SAMPLES:
            return

        returns = self.returns_window.values()
        std_return = std_dev(returns)
        if std_return > 0:
            self.sharpe_ratio = mean(returns) / std_return * math.sqrt(TRADING_DAYS)

        cumulative = np.cumsum(returns)
        running_max = np.maximum.accumulate(cumulative)
        self.max_drawdown = max(float(np.max(running_max - cumulative)), 0.0)

        self.portfolio_heat = float(np.clip(std_return * HEAT_SCALE, 0.0, 1.0))

    def regime_adjusted_target_vol(self, regime: Regime) -> float:
        """Configured target volatility scaled down for STRESS and CRISIS regimes."""
        return self.base_target_volatility * REGIME_TARGET_MULTIPLIERS[regime]

    def apply_regime(self, regime: Regime) -> None:
        adjusted = self.regime_adjusted_target_vol(regime)
        if adjusted != self.target_volatility:
            logger.debug(f"Target volatility {self.target_volatility:.4f} -> {adjusted:.4f} ({regime.name})")
        self.target_volatility = adjusted


def volatility_adjusted_size(
    base_size: float,
    current_vol: float,
    target_vol: float,
) -> float:
    """Scale ``base_size`` by target/current volatility, clamping the ratio to [0.3, 3.0]."""
    if current_vol <= 0 or target_vol <= 0:
        return base_size

    vol_ratio = target_vol / current_vol
    vol_ratio = float(np.clip(vol_ratio, 0.3, 3.0))
    return base_size * vol_ratio


def correlation_heat(matrix: Optional[CorrelationMatrix], n_active_pairs: int) -> float:
    """Average absolute off-diagonal correlation among the first ``n_active_pairs`` series."""
    if matrix is None or n_active_pairs <= 1:
        return 0.0

    n = min(n_active_pairs, matrix.size)
    block = np.abs(matrix.as_array()[:n, :n])
    upper = block[np.triu_indices(n, k=1)]
    if upper.size == 0:
        return 0.0
    return float(np.mean(upper))
