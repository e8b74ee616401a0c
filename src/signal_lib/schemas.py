"""
Pydantic schemas for the values the signal engine produces and consumes.

Output records are frozen: a PairSignal is built once per tick and never
mutated after it is returned.
"""

from enum import IntEnum

from pydantic import BaseModel, ConfigDict, Field, model_validator


# =============================================================================
# Enums
# =============================================================================

class Regime(IntEnum):
    """Market regime classification."""
    NORMAL = 0
    STRESS = 1
    CRISIS = 2


class SignalDirection(IntEnum):
    """Discrete pair signal; also the position state of a tracker."""
    SHORT = -1  # short asset 1, long asset 2
    FLAT = 0
    LONG = 1    # long asset 1, short asset 2


# =============================================================================
# Base Schemas
# =============================================================================

class BaseSchema(BaseModel):
    """Base schema with common configuration."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)


class Quotes(BaseSchema):
    """Top-of-book quotes for both legs."""

    bid1: float = Field(..., ge=0)
    ask1: float = Field(..., ge=0)
    bid2: float = Field(..., ge=0)
    ask2: float = Field(..., ge=0)

    @model_validator(mode="after")
    def validate_not_crossed(self):
        if self.ask1 < self.bid1 or self.ask2 < self.bid2:
            raise ValueError("Ask must not be below bid")
        return self

    @property
    def spread1(self) -> float:
        return self.ask1 - self.bid1

    @property
    def spread2(self) -> float:
        return self.ask2 - self.bid2


class PnLAnalysis(BaseSchema):
    """Decomposition of an expected trade PnL into its cost components."""

    theoretical_pnl: float = 0.0
    net_pnl_after_costs: float = 0.0
    total_cost: float = 0.0
    market_impact_cost: float = 0.0
    spread_cost: float = 0.0
    financing_cost: float = 0.0
    commission_cost: float = 0.0
    slippage_cost: float = 0.0
    is_profitable: bool = False


class PairSignal(BaseSchema):
    """One tick of output from a PairTracker."""

    symbol1: str = ""
    symbol2: str = ""
    spread: float = 0.0
    z_score: float = 0.0
    correlation: float = 0.0
    cointegration_stat: float = 0.0
    hedge_ratio: float = 1.0
    entry_threshold: float = 0.0
    exit_threshold: float = 0.0
    signal: SignalDirection = SignalDirection.FLAT
    regime: Regime = Regime.NORMAL
    position_size: float = 0.0
    pnl: PnLAnalysis = Field(default_factory=PnLAnalysis)
    timestamp_micro: int = 0

    @property
    def pair(self) -> str:
        return f"{self.symbol1}/{self.symbol2}"
