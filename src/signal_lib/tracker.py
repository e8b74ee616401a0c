"""
Pair Tracker

Streaming signal engine for one pair of co-moving instruments. Each call to
``update`` consumes one pair of prices and:

1. Pushes the prices into their rolling windows
2. Forms the spread (hedge-ratio adjusted once enough history exists,
   otherwise the static log spread)
3. Updates the spread statistics, price correlation and regime filter
4. Rescales the entry/exit thresholds for regime, volatility and half-life
5. Computes the (optionally scorer-blended) z-score
6. Advances the position state machine
7. Sizes the position under volatility targeting
8. Vetoes the signal when it is not profitable after transaction costs

Each tracker owns all of its windows and sub-components, including the held
position and every smoothing state, so independent trackers never share
mutable data.
"""

import logging
import math
import time
from typing import Optional

from common.config import StatArbSettings, get_settings
from common.logging import log_signal_event

from . import cointegration, hedging
from .cointegration import CointegrationReport
from .costs import TransactionCostModel
from .regime import RegimeDetector
from .risk import RiskManager
from .rolling_window import RollingWindow, WindowCapacityError
from .schemas import PairSignal, PnLAnalysis, Quotes, Regime, SignalDirection
from .scoring import FeatureScorer, TemporalAttentionScorer
from .statistics import correlation, mean, std_dev, z_score

logger = logging.getLogger(__name__)

MIN_HEDGE_SAMPLES = 20
MIN_VOLATILITY_SAMPLES = 5  # volatility factor applies once the windows hold more than this
REFERENCE_VOLATILITY = 0.02
MIN_SCORER_SAMPLES = 10
SCORER_BLEND = 0.7
EXPECTED_REVERSION = 0.3
MIN_COINTEGRATION_SAMPLES = 30


class TrackerConstructionError(Exception):
    """Raised when a tracker cannot build its windows or sub-components."""


class PositionStateMachine:
    """
    Flat/Long/Short position driven by the z-score.

    Flat enters SHORT above ``entry`` and LONG below ``-entry``. LONG exits
    once z rises above ``-exit``; SHORT exits once z falls below ``exit``.
    """

    def __init__(self):
        self.position = SignalDirection.FLAT

    def update(self, z: float, entry: float, exit_: float) -> SignalDirection:
        if self.position is SignalDirection.FLAT:
            if z > entry:
                self.position = SignalDirection.SHORT
            elif z < -entry:
                self.position = SignalDirection.LONG
        elif self.position is SignalDirection.LONG:
            if z > -exit_:
                self.position = SignalDirection.FLAT
        elif self.position is SignalDirection.SHORT:
            if z < exit_:
                self.position = SignalDirection.FLAT
        return self.position

    def reset(self) -> None:
        self.position = SignalDirection.FLAT


class PairTracker:
    """
    Owns the full per-pair state and emits one PairSignal per tick.

    Args:
        settings: Engine settings; defaults to the global settings
        scorer: Optional feature scorer blended into the z-score. When omitted
            and ``settings.tracker.use_scorer`` is set, a TemporalAttentionScorer
            is used.
        symbol1, symbol2: Instrument names; default to ``settings.symbols``
    """

    def __init__(
        self,
        settings: Optional[StatArbSettings] = None,
        scorer: Optional[FeatureScorer] = None,
        symbol1: Optional[str] = None,
        symbol2: Optional[str] = None,
    ):
        self.settings = settings or get_settings()
        tracker_cfg = self.settings.tracker
        risk_cfg = self.settings.risk

        default_symbols = self.settings.symbols_list
        self.symbol1 = symbol1 or default_symbols[0]
        self.symbol2 = symbol2 or default_symbols[1]

        self.window_size = tracker_cfg.window_size
        self.hedge_lookback = tracker_cfg.hedge_lookback
        self.account_size = tracker_cfg.account_size
        self.use_dynamic_hedging = tracker_cfg.dynamic_hedging
        self.use_regime_detection = tracker_cfg.regime_detection
        self.use_transaction_costs = tracker_cfg.transaction_costs

        if scorer is None and tracker_cfg.use_scorer:
            scorer = TemporalAttentionScorer()
        self.scorer = scorer

        try:
            self.price_window1 = RollingWindow(self.window_size)
            self.price_window2 = RollingWindow(self.window_size)
            self.spread_window = RollingWindow(self.window_size)
            self.hedge_ratio_window = RollingWindow(self.window_size)
            self.volatility_window1 = RollingWindow(self.window_size)
            self.volatility_window2 = RollingWindow(self.window_size)
            self.regime_detector = RegimeDetector(tracker_cfg.regime_window)
            self.risk_manager = RiskManager(
                returns_window=self.window_size,
                target_volatility=risk_cfg.target_volatility,
                risk_per_trade=risk_cfg.risk_per_trade,
                max_position_limit=risk_cfg.max_position_limit,
            )
            self.cost_model = TransactionCostModel.from_settings(self.settings.costs)
        except (WindowCapacityError, MemoryError) as exc:
            raise TrackerConstructionError(
                f"Failed to build tracker for {self.symbol1}/{self.symbol2}: {exc}"
            ) from exc

        self.state_machine = PositionStateMachine()

        self.mean_spread = 0.0
        self.std_spread = 0.0
        self.correlation = 0.0
        self.current_hedge_ratio = 1.0
        self.scorer_zscore = 0.0
        self.dynamic_entry_threshold = hedging.BASE_ENTRY_THRESHOLD
        self.dynamic_exit_threshold = hedging.BASE_EXIT_THRESHOLD
        self.last_update_micro = 0
        self.last_signal: Optional[PairSignal] = None

        logger.debug(
            f"Created tracker {self.pair_key} (window={self.window_size}, "
            f"hedging={self.use_dynamic_hedging}, regime={self.use_regime_detection}, "
            f"costs={self.use_transaction_costs}, scorer={type(self.scorer).__name__ if self.scorer else None})"
        )

    @property
    def pair_key(self) -> str:
        return f"{self.symbol1}/{self.symbol2}"

    @property
    def position(self) -> SignalDirection:
        return self.state_machine.position

    @property
    def regime(self) -> Regime:
        if self.use_regime_detection:
            return self.regime_detector.current_regime
        return Regime.NORMAL

    def update(
        self,
        price1: float,
        price2: float,
        timestamp_micro: Optional[int] = None,
        quotes: Optional[Quotes] = None,
    ) -> PairSignal:
        """Process one tick and return its signal."""
        for name, price in (("price1", price1), ("price2", price2)):
            if not math.isfinite(price) or price <= 0:
                raise ValueError(f"{name} must be a positive finite number, got {price}")
        if timestamp_micro is None:
            timestamp_micro = time.time_ns() // 1000

        self.price_window1.push(price1)
        self.price_window2.push(price2)
        samples = self.price_window1.size()

        # Spread
        if self.use_dynamic_hedging and samples >= max(MIN_HEDGE_SAMPLES, self.hedge_lookback):
            self.current_hedge_ratio = hedging.hedge_ratio(
                self.price_window1, self.price_window2, self.hedge_lookback
            )
            self.hedge_ratio_window.push(self.current_hedge_ratio)
            spread = price1 - self.current_hedge_ratio * price2
        else:
            self.current_hedge_ratio = 1.0
            spread = math.log(price1) - math.log(price2)

        # Realized volatility inputs
        if samples >= 2:
            ret1 = math.log(price1 / self.price_window1.get(samples - 2))
            ret2 = math.log(price2 / self.price_window2.get(samples - 2))
            self.volatility_window1.push(ret1 * ret1)
            self.volatility_window2.push(ret2 * ret2)

        self.spread_window.push(spread)
        self.mean_spread = mean(self.spread_window)
        self.std_spread = std_dev(self.spread_window)
        self.correlation = correlation(self.price_window1, self.price_window2)

        previous_regime = self.regime
        if self.use_regime_detection:
            self.regime_detector.update(price1, price2, self.correlation)
            if self.regime is not previous_regime:
                log_signal_event(
                    logger, "regime_change", self.pair_key,
                    previous=previous_regime.name, current=self.regime.name,
                    confidence=round(self.regime_detector.confidence, 4),
                )

        self._update_thresholds()

        z = z_score(spread, self.mean_spread, self.std_spread)
        if self.scorer is not None and self.spread_window.size() >= MIN_SCORER_SAMPLES:
            self.scorer_zscore = self.scorer.score(self.spread_window)
            z = SCORER_BLEND * self.scorer_zscore + (1 - SCORER_BLEND) * z
        else:
            self.scorer_zscore = z

        previous_position = self.state_machine.position
        signal = self.state_machine.update(z, self.dynamic_entry_threshold, self.dynamic_exit_threshold)
        if signal is not previous_position:
            log_signal_event(
                logger, "exit" if signal is SignalDirection.FLAT else "entry", self.pair_key,
                position=signal.name, z_score=round(z, 4),
                entry_threshold=round(self.dynamic_entry_threshold, 4),
                exit_threshold=round(self.dynamic_exit_threshold, 4),
            )

        position_size = self._size_position(z, spread)

        pnl = PnLAnalysis()
        if self.use_transaction_costs:
            if quotes is not None:
                self.cost_model.update_quotes(quotes)
            theoretical_pnl = abs(z) * EXPECTED_REVERSION * position_size
            pnl = self.cost_model.pnl_with_costs(theoretical_pnl, position_size)
            if not pnl.is_profitable and signal is not SignalDirection.FLAT:
                logger.debug(
                    f"{self.pair_key}: {signal.name} vetoed by costs "
                    f"(net={pnl.net_pnl_after_costs:.2f}, cost={pnl.total_cost:.2f})"
                )
            if not pnl.is_profitable:
                signal = SignalDirection.FLAT

        cointegration_stat = 0.0
        if samples >= MIN_COINTEGRATION_SAMPLES:
            cointegration_stat = cointegration.johansen_test(self.price_window1, self.price_window2)

        result = PairSignal(
            symbol1=self.symbol1,
            symbol2=self.symbol2,
            spread=spread,
            z_score=z,
            correlation=self.correlation,
            cointegration_stat=cointegration_stat,
            hedge_ratio=self.current_hedge_ratio,
            entry_threshold=self.dynamic_entry_threshold,
            exit_threshold=self.dynamic_exit_threshold,
            signal=signal,
            regime=self.regime,
            position_size=position_size,
            pnl=pnl,
            timestamp_micro=timestamp_micro,
        )
        self.last_update_micro = timestamp_micro
        self.last_signal = result
        return result

    def _update_thresholds(self) -> None:
        volatility_factor = 1.0
        if self.volatility_window1.size() > MIN_VOLATILITY_SAMPLES:
            vol1 = math.sqrt(mean(self.volatility_window1))
            vol2 = math.sqrt(mean(self.volatility_window2))
            volatility_factor = (vol1 + vol2) / REFERENCE_VOLATILITY

        self.dynamic_entry_threshold, self.dynamic_exit_threshold = hedging.dynamic_thresholds(
            self.regime, volatility_factor, self.spread_window
        )

    def _size_position(self, z: float, spread: float) -> float:
        if self.use_regime_detection:
            self.risk_manager.apply_regime(self.regime)

        position_size = self.risk_manager.size_position(abs(z), self.account_size)

        spread_samples = self.spread_window.size()
        if spread_samples > 1 and position_size > 0:
            previous_spread = self.spread_window.get(spread_samples - 2)
            self.risk_manager.update_volatility_estimate((spread - previous_spread) / position_size)
        return position_size

    def cointegration_report(self, threshold: Optional[float] = None) -> CointegrationReport:
        """
        Run every cointegration estimator over the current windows.

        ``threshold`` for the threshold-AR test defaults to the current
        spread standard deviation.
        """
        if threshold is None:
            threshold = self.std_spread
        return cointegration.run_suite(
            self.price_window1, self.price_window2, self.spread_window, threshold
        )

    def detect_regime_change(self, threshold: float = 0.7) -> bool:
        if not self.use_regime_detection:
            return False
        return self.regime_detector.detect_regime_change(threshold)

    def reset_position(self) -> None:
        """Force the held position back to flat."""
        if self.state_machine.position is not SignalDirection.FLAT:
            log_signal_event(logger, "reset", self.pair_key, position=self.state_machine.position.name)
        self.state_machine.reset()
