"""
Transaction cost model.

Decomposes the expected PnL of a pair trade into bid-ask spread, square-root
market impact, financing, and round-trip commission and slippage, and decides
whether the trade is still profitable after costs.
"""

import math
from typing import Optional

from .schemas import PairSignal, PnLAnalysis, Quotes

# Share of |z| assumed to revert when judging a finished signal
CONSERVATIVE_REVERSION = 0.5
SIZE_IMPACT_FACTOR = 0.0001
LIQUIDITY_MULTIPLE = 2.0


class TransactionCostModel:
    """Cost parameters for both legs plus the last PnL decomposition."""

    def __init__(
        self,
        bid_ask_spread_asset1: float = 0.001,
        bid_ask_spread_asset2: float = 0.001,
        market_impact_asset1: float = 0.0005,
        market_impact_asset2: float = 0.0005,
        financing_rate: float = 0.001,
        commission_rate: float = 0.0005,
        slippage_factor: float = 0.0002,
    ):
        self.bid_ask_spread_asset1 = bid_ask_spread_asset1
        self.bid_ask_spread_asset2 = bid_ask_spread_asset2
        self.market_impact_asset1 = market_impact_asset1
        self.market_impact_asset2 = market_impact_asset2
        self.financing_rate = financing_rate
        self.commission_rate = commission_rate
        self.slippage_factor = slippage_factor
        self.last_analysis: Optional[PnLAnalysis] = None

    @classmethod
    def from_settings(cls, settings) -> "TransactionCostModel":
        """Build from a ``common.config.CostSettings``."""
        return cls(**settings.model_dump())

    def update_quotes(self, quotes: Quotes) -> None:
        """Use the quoted bid-ask widths as the spread costs."""
        self.bid_ask_spread_asset1 = quotes.spread1
        self.bid_ask_spread_asset2 = quotes.spread2

    def pnl_with_costs(self, theoretical_pnl: float, position_size: float) -> PnLAnalysis:
        spread_cost = (self.bid_ask_spread_asset1 + self.bid_ask_spread_asset2) * position_size
        impact_cost = (self.market_impact_asset1 + self.market_impact_asset2) * math.sqrt(max(position_size, 0.0))
        financing_cost = self.financing_rate * position_size
        # round trip
        commission = self.commission_rate * position_size * 2
        slippage = self.slippage_factor * position_size * 2

        total_cost = spread_cost + impact_cost + financing_cost + commission + slippage
        net_pnl = theoretical_pnl - total_cost

        analysis = PnLAnalysis(
            theoretical_pnl=theoretical_pnl,
            net_pnl_after_costs=net_pnl,
            total_cost=total_cost,
            market_impact_cost=impact_cost,
            spread_cost=spread_cost,
            financing_cost=financing_cost,
            commission_cost=commission,
            slippage_cost=slippage,
            is_profitable=net_pnl > 0,
        )
        self.last_analysis = analysis
        return analysis

    def is_trade_profitable(self, signal: PairSignal) -> bool:
        """Judge a finished signal assuming half of its |z| reverts."""
        expected_reversion = abs(signal.z_score) * CONSERVATIVE_REVERSION
        theoretical_pnl = expected_reversion * signal.position_size
        return self.pnl_with_costs(theoretical_pnl, signal.position_size).is_profitable


def effective_spread(bid: float, ask: float, size: float) -> float:
    """Quoted spread widened for order size."""
    return (ask - bid) + math.sqrt(size) * SIZE_IMPACT_FACTOR


def is_liquidity_sufficient(bid_size: float, ask_size: float, required_size: float) -> bool:
    """Top of book must show at least twice the required size on both sides."""
    return (bid_size >= required_size * LIQUIDITY_MULTIPLE
            and ask_size >= required_size * LIQUIDITY_MULTIPLE)


def execution_shortfall(arrival_price: float, execution_price: float, size: float) -> float:
    return abs(execution_price - arrival_price) * size
