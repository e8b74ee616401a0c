"""Tests for the transaction cost model."""

import math

import pytest
from pydantic import ValidationError

from common.config import CostSettings
from signal_lib.costs import (
    TransactionCostModel,
    effective_spread,
    execution_shortfall,
    is_liquidity_sufficient,
)
from signal_lib.schemas import PairSignal, Quotes


@pytest.fixture
def model():
    return TransactionCostModel()


class TestPnlWithCosts:
    """Test the cost decomposition."""

    def test_decomposition(self, model):
        """Each cost component follows its rate on a 10,000 position."""
        analysis = model.pnl_with_costs(100.0, 10_000.0)

        assert analysis.spread_cost == pytest.approx(20.0)
        assert analysis.market_impact_cost == pytest.approx(0.1)
        assert analysis.financing_cost == pytest.approx(10.0)
        assert analysis.commission_cost == pytest.approx(10.0)
        assert analysis.slippage_cost == pytest.approx(4.0)
        assert analysis.total_cost == pytest.approx(44.1)
        assert analysis.net_pnl_after_costs == pytest.approx(55.9)
        assert analysis.is_profitable is True
        assert model.last_analysis == analysis

    def test_unprofitable(self, model):
        """Costs above the theoretical PnL make the trade unprofitable."""
        analysis = model.pnl_with_costs(10.0, 10_000.0)
        assert analysis.net_pnl_after_costs < 0
        assert analysis.is_profitable is False

    def test_zero_size(self, model):
        """A zero position costs nothing and earns nothing."""
        analysis = model.pnl_with_costs(0.0, 0.0)
        assert analysis.total_cost == 0.0
        assert analysis.is_profitable is False

    @pytest.mark.parametrize("size", [0.0, 1.0, 250.0, 1e6])
    @pytest.mark.parametrize("theoretical", [-50.0, 0.0, 1_000.0])
    def test_net_never_exceeds_theoretical(self, model, size, theoretical):
        """Costs never add to the PnL."""
        analysis = model.pnl_with_costs(theoretical, size)
        assert analysis.net_pnl_after_costs <= analysis.theoretical_pnl

    def test_negative_size_does_not_raise(self, model):
        """A negative size gives no market impact instead of a math error."""
        analysis = model.pnl_with_costs(1.0, -10.0)
        assert math.isfinite(analysis.total_cost)
        assert analysis.market_impact_cost == 0.0


class TestConfiguration:
    """Test construction from settings and quotes."""

    def test_defaults(self, model):
        """Default rates match the cost settings defaults."""
        assert model.bid_ask_spread_asset1 == 0.001
        assert model.bid_ask_spread_asset2 == 0.001
        assert model.market_impact_asset1 == 0.0005
        assert model.financing_rate == 0.001
        assert model.commission_rate == 0.0005
        assert model.slippage_factor == 0.0002
        assert model.last_analysis is None

    def test_from_settings(self):
        """Rates are copied from CostSettings."""
        model = TransactionCostModel.from_settings(CostSettings(commission_rate=0.002))
        assert model.commission_rate == 0.002
        assert model.bid_ask_spread_asset1 == 0.001

    def test_update_quotes(self, model):
        """Spreads are refreshed as ask minus bid."""
        model.update_quotes(Quotes(bid1=99.9, ask1=100.1, bid2=49.95, ask2=50.05))
        assert model.bid_ask_spread_asset1 == pytest.approx(0.2)
        assert model.bid_ask_spread_asset2 == pytest.approx(0.1)

    def test_crossed_quotes_rejected(self):
        """A bid above its ask fails validation."""
        with pytest.raises(ValidationError):
            Quotes(bid1=100.1, ask1=99.9, bid2=50.0, ask2=50.1)


class TestTradeChecks:
    """Test the signal-level and order-level helpers."""

    def test_is_trade_profitable(self, model):
        """Profitability is judged on |z| times the expected reversion."""
        assert model.is_trade_profitable(PairSignal(z_score=3.0, position_size=10_000.0)) is True
        assert model.is_trade_profitable(PairSignal(z_score=0.0, position_size=10_000.0)) is False

    def test_effective_spread(self):
        """Effective spread is twice the distance to the mid over the mid."""
        assert effective_spread(99.0, 100.0, 100.0) == pytest.approx(1.001)

    def test_liquidity(self):
        """Both sides need at least twice the trade size."""
        assert is_liquidity_sufficient(200.0, 200.0, 100.0) is True
        assert is_liquidity_sufficient(199.0, 500.0, 100.0) is False
        assert is_liquidity_sufficient(500.0, 150.0, 100.0) is False

    def test_execution_shortfall(self):
        """Shortfall is the absolute slippage times the quantity."""
        assert execution_shortfall(100.0, 100.5, 200.0) == pytest.approx(100.0)
        assert execution_shortfall(100.0, 99.5, 200.0) == pytest.approx(100.0)
