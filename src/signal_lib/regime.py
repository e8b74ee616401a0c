"""
Three-state market regime filter.

A simplified HMM over {NORMAL, STRESS, CRISIS}. Each tick a candidate regime
is read off two indicators (where the mean combined volatility sits inside
the volatility window, and how unstable the rolling correlation is), the
candidate sets the evidence weight, and the posterior is the transition row
of the current regime scaled by that weight and renormalized.
"""

import logging
import math

import numpy as np

from .rolling_window import RollingWindow
from .schemas import Regime
from .statistics import mean, std_dev

logger = logging.getLogger(__name__)

INITIAL_PROBABILITIES = (0.8, 0.15, 0.05)

# Row = from-state, column = to-state
TRANSITION_MATRIX = (
    (0.95, 0.04, 0.01),  # from NORMAL
    (0.60, 0.30, 0.10),  # from STRESS
    (0.20, 0.50, 0.30),  # from CRISIS
)

MIN_VOLATILITY_SAMPLES = 10
RECENT_CHANGE_TICKS = 5

CRISIS_VOL_PERCENTILE = 0.95
CRISIS_CORR_STD = 0.3
STRESS_VOL_PERCENTILE = 0.80
STRESS_CORR_STD = 0.15


class RegimeDetector:
    """
    Bayesian regime filter over combined volatility and correlation stability.

    Attributes:
        current_regime: Regime after the last update
        probabilities: posterior over the three regimes (sums to 1)
        confidence: maximum posterior probability
        ticks_since_change: updates since the regime last changed
        last_candidate: regime suggested by the indicators on the last update
    """

    def __init__(self, window: int):
        self.volatility_window = RollingWindow(window)
        self.correlation_window = RollingWindow(window)
        self.transition_matrix = np.array(TRANSITION_MATRIX, dtype=float)
        self.probabilities = np.array(INITIAL_PROBABILITIES, dtype=float)

        self.current_regime = Regime.NORMAL
        self.last_candidate = Regime.NORMAL
        self.confidence = 1.0
        self.ticks_since_change = 0

        # Previous prices for log returns; 0.0 until the first update
        self.last_price1 = 0.0
        self.last_price2 = 0.0

    def update(self, price1: float, price2: float, correlation: float) -> Regime:
        """Feed one tick and return the (possibly new) current regime."""
        if self.last_price1 > 0 and self.last_price2 > 0:
            ret1 = math.log(price1 / self.last_price1)
            ret2 = math.log(price2 / self.last_price2)
            self.volatility_window.push(math.sqrt(ret1 * ret1 + ret2 * ret2))

        self.correlation_window.push(correlation)
        self.last_price1 = price1
        self.last_price2 = price2

        if self.volatility_window.size() < MIN_VOLATILITY_SAMPLES:
            return self.current_regime

        vol_percentile = self.volatility_percentile()
        corr_std = std_dev(self.correlation_window)
        candidate = self.classify(vol_percentile, corr_std)
        self.last_candidate = candidate

        if candidate is Regime.CRISIS:
            evidence = vol_percentile * 2.0
        elif candidate is Regime.STRESS:
            evidence = vol_percentile * 1.5
        else:
            evidence = 1.0

        posterior = self.transition_matrix[int(self.current_regime)] * evidence
        total = float(np.sum(posterior))
        if total > 0:
            self.probabilities = posterior / total

        # np.argmax keeps the lowest index on ties
        new_regime = Regime(int(np.argmax(self.probabilities)))
        if new_regime is not self.current_regime:
            logger.debug(
                f"Regime change {self.current_regime.name} -> {new_regime.name} "
                f"(vol_percentile={vol_percentile:.2f}, corr_std={corr_std:.3f})"
            )
            self.ticks_since_change = 0
            self.current_regime = new_regime
        else:
            self.ticks_since_change += 1

        self.confidence = float(np.max(self.probabilities))
        return self.current_regime

    def volatility_percentile(self) -> float:
        """Fraction of buffered volatilities strictly below their mean."""
        values = self.volatility_window.values()
        if values.size == 0:
            return 0.0
        current_vol = mean(values)
        return float(np.count_nonzero(values < current_vol)) / values.size

    @staticmethod
    def classify(vol_percentile: float, corr_std: float) -> Regime:
        if vol_percentile > CRISIS_VOL_PERCENTILE or corr_std > CRISIS_CORR_STD:
            return Regime.CRISIS
        if vol_percentile > STRESS_VOL_PERCENTILE or corr_std > STRESS_CORR_STD:
            return Regime.STRESS
        return Regime.NORMAL

    def detect_regime_change(self, threshold: float) -> bool:
        """True when the regime changed within the last few ticks with confidence above ``threshold``."""
        return self.ticks_since_change < RECENT_CHANGE_TICKS and self.confidence > threshold
