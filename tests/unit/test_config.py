"""Tests for configuration management."""

import pytest
from pydantic import ValidationError
from common.config import (
    StatArbSettings,
    TrackerSettings,
    RiskSettings,
    CostSettings,
    LoggingSettings,
    get_settings,
    reload_settings
)


class TestTrackerSettings:
    """Test tracker configuration."""

    def test_default_values(self):
        """Test default tracker configuration values."""
        tracker_config = TrackerSettings()
        assert tracker_config.window_size == 50
        assert tracker_config.hedge_lookback == 20
        assert tracker_config.account_size == 1_000_000.0
        assert tracker_config.dynamic_hedging is True
        assert tracker_config.regime_detection is True
        assert tracker_config.transaction_costs is True
        assert tracker_config.use_scorer is False

    def test_regime_window(self):
        """Regime window is half the tracker window with a floor of 10."""
        assert TrackerSettings(window_size=50).regime_window == 25
        assert TrackerSettings(window_size=12).regime_window == 10
        assert TrackerSettings(window_size=2).regime_window == 10

    def test_window_size_validation(self):
        """Test window size validation."""
        # Valid values
        TrackerSettings(window_size=2)
        TrackerSettings(window_size=100_000)

        # Invalid values
        with pytest.raises(ValidationError):
            TrackerSettings(window_size=0)
        with pytest.raises(ValidationError):
            TrackerSettings(window_size=100_001)

    def test_hedge_lookback_validation(self):
        """Test hedge lookback validation."""
        TrackerSettings(hedge_lookback=5)
        with pytest.raises(ValidationError):
            TrackerSettings(hedge_lookback=4)

    def test_account_size_validation(self):
        """Test account size validation."""
        with pytest.raises(ValidationError):
            TrackerSettings(account_size=0)

    def test_environment_override(self, monkeypatch):
        """Test that environment variables override defaults."""
        monkeypatch.setenv("STATARB_WINDOW_SIZE", "80")
        monkeypatch.setenv("STATARB_DYNAMIC_HEDGING", "false")

        tracker_config = TrackerSettings()
        assert tracker_config.window_size == 80
        assert tracker_config.dynamic_hedging is False


class TestRiskSettings:
    """Test risk configuration."""

    def test_default_values(self):
        """Test default risk configuration values."""
        risk_config = RiskSettings()
        assert risk_config.target_volatility == 0.15
        assert risk_config.risk_per_trade == 0.02
        assert risk_config.max_position_limit == 1_000_000.0

    def test_target_volatility_validation(self):
        """Test target volatility validation."""
        RiskSettings(target_volatility=5.0)
        with pytest.raises(ValidationError):
            RiskSettings(target_volatility=0.0)
        with pytest.raises(ValidationError):
            RiskSettings(target_volatility=5.1)

    def test_risk_per_trade_validation(self):
        """Test risk per trade validation."""
        RiskSettings(risk_per_trade=1.0)
        with pytest.raises(ValidationError):
            RiskSettings(risk_per_trade=0.0)
        with pytest.raises(ValidationError):
            RiskSettings(risk_per_trade=1.5)

    def test_position_limit_validation(self):
        """Test position limit validation."""
        with pytest.raises(ValidationError):
            RiskSettings(max_position_limit=-1.0)


class TestCostSettings:
    """Test transaction cost configuration."""

    def test_default_values(self):
        """Test default cost configuration values."""
        cost_config = CostSettings()
        assert cost_config.bid_ask_spread_asset1 == 0.001
        assert cost_config.bid_ask_spread_asset2 == 0.001
        assert cost_config.market_impact_asset1 == 0.0005
        assert cost_config.market_impact_asset2 == 0.0005
        assert cost_config.financing_rate == 0.001
        assert cost_config.commission_rate == 0.0005
        assert cost_config.slippage_factor == 0.0002

    def test_cost_validation(self):
        """Test that negative costs are rejected."""
        CostSettings(commission_rate=0.0, slippage_factor=0.0)

        with pytest.raises(ValidationError):
            CostSettings(commission_rate=-0.001)
        with pytest.raises(ValidationError):
            CostSettings(bid_ask_spread_asset2=-0.5)


class TestLoggingSettings:
    """Test logging configuration."""

    def test_default_values(self):
        """Test default logging configuration."""
        log_config = LoggingSettings()
        assert log_config.level == "INFO"
        assert log_config.format == "json"

    def test_normalization(self):
        """Test level and format normalization."""
        log_config = LoggingSettings(level="debug", format="TEXT")
        assert log_config.level == "DEBUG"
        assert log_config.format == "text"

    def test_invalid_values(self):
        """Test log level and format validation."""
        with pytest.raises(ValidationError):
            LoggingSettings(level="VERBOSE")
        with pytest.raises(ValidationError):
            LoggingSettings(format="xml")


class TestStatArbSettings:
    """Test main configuration class."""

    def test_default_configuration(self):
        """Test that default configuration loads without errors."""
        config = StatArbSettings()
        assert config.tracker is not None
        assert config.risk is not None
        assert config.costs is not None
        assert config.logging is not None
        assert config.symbols_list == ["ASSET1", "ASSET2"]

    def test_symbols_list(self):
        """Test symbols list parsing."""
        config = StatArbSettings(symbols=" ko, pep ")
        assert config.symbols_list == ["KO", "PEP"]

    def test_symbols_validation(self):
        """A pair needs exactly two symbols."""
        with pytest.raises(ValidationError):
            StatArbSettings(symbols="AAPL")
        with pytest.raises(ValidationError):
            StatArbSettings(symbols="AAPL,MSFT,SPY")

    def test_nested_override(self):
        """Sub-configurations can be passed explicitly."""
        config = StatArbSettings(tracker=TrackerSettings(window_size=30, use_scorer=True))
        assert config.tracker.window_size == 30
        assert config.tracker.use_scorer is True


def test_get_settings_singleton():
    """Test that get_settings returns the same instance."""
    settings1 = get_settings()
    settings2 = get_settings()
    assert settings1 is settings2


def test_reload_settings(monkeypatch):
    """Test settings reload functionality."""
    monkeypatch.setenv("STATARB_SYMBOLS", "XOM,CVX")
    monkeypatch.setenv("LOG_LEVEL", "warning")
    try:
        reloaded = reload_settings()
        assert reloaded is get_settings()
        assert reloaded.symbols_list == ["XOM", "CVX"]
        assert reloaded.logging.level == "WARNING"
    finally:
        monkeypatch.delenv("STATARB_SYMBOLS")
        monkeypatch.delenv("LOG_LEVEL")
        reload_settings()
