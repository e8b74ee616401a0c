"""
Signal Library

Streaming statistical-arbitrage signal engine for pairs of co-moving
instruments. It includes rolling windows and statistics, simplified
cointegration tests, dynamic hedging, regime detection, volatility-targeted
sizing, transaction cost analysis and the PairTracker that ties them together.
"""

from .rolling_window import RollingWindow, WindowCapacityError

from .schemas import (
    Regime,
    SignalDirection,
    Quotes,
    PnLAnalysis,
    PairSignal,
)

from .cointegration import (
    CointegrationReport,
    engle_granger_test,
    johansen_test,
    threshold_cointegration_test,
    fractional_cointegration_test,
    error_correction_test,
    is_cointegrated,
    run_suite,
)

from .hedging import hedge_ratio, half_life, dynamic_thresholds
from .regime import RegimeDetector
from .risk import RiskManager, volatility_adjusted_size, correlation_heat
from .costs import (
    TransactionCostModel,
    effective_spread,
    is_liquidity_sufficient,
    execution_shortfall,
)
from .correlation_matrix import CorrelationMatrix
from .scoring import FeatureScorer, TemporalAttentionScorer

from .tracker import PairTracker, PositionStateMachine, TrackerConstructionError

__all__ = [
    # Windows
    'RollingWindow',
    'WindowCapacityError',

    # Schemas
    'Regime',
    'SignalDirection',
    'Quotes',
    'PnLAnalysis',
    'PairSignal',

    # Cointegration
    'CointegrationReport',
    'engle_granger_test',
    'johansen_test',
    'threshold_cointegration_test',
    'fractional_cointegration_test',
    'error_correction_test',
    'is_cointegrated',
    'run_suite',

    # Hedging and thresholds
    'hedge_ratio',
    'half_life',
    'dynamic_thresholds',

    # Regime, risk and costs
    'RegimeDetector',
    'RiskManager',
    'volatility_adjusted_size',
    'correlation_heat',
    'TransactionCostModel',
    'effective_spread',
    'is_liquidity_sufficient',
    'execution_shortfall',
    'CorrelationMatrix',

    # Scoring
    'FeatureScorer',
    'TemporalAttentionScorer',

    # Tracker
    'PairTracker',
    'PositionStateMachine',
    'TrackerConstructionError',
]
