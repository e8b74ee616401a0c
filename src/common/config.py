"""
Configuration management using Pydantic settings.

This module provides typed configuration classes that load from environment variables
with validation, defaults, and feature flags for the pair signal engine.
"""

from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class TrackerSettings(BaseSettings):
    """Pair tracker configuration."""

    model_config = SettingsConfigDict(env_file=None, extra='ignore', populate_by_name=True)

    window_size: int = Field(default=50, validation_alias="STATARB_WINDOW_SIZE")
    hedge_lookback: int = Field(default=20, validation_alias="STATARB_HEDGE_LOOKBACK")
    account_size: float = Field(default=1_000_000.0, validation_alias="STATARB_ACCOUNT_SIZE")

    # Feature flags
    dynamic_hedging: bool = Field(default=True, validation_alias="STATARB_DYNAMIC_HEDGING")
    regime_detection: bool = Field(default=True, validation_alias="STATARB_REGIME_DETECTION")
    transaction_costs: bool = Field(default=True, validation_alias="STATARB_TRANSACTION_COSTS")
    use_scorer: bool = Field(default=False, validation_alias="STATARB_USE_SCORER")

    @field_validator("window_size")
    @classmethod
    def validate_window_size(cls, v):
        """Validate rolling window capacity."""
        if v < 2 or v > 100_000:
            raise ValueError("STATARB_WINDOW_SIZE must be between 2 and 100000")
        return v

    @field_validator("hedge_lookback")
    @classmethod
    def validate_hedge_lookback(cls, v):
        """The hedge regression needs at least 5 prices."""
        if v < 5:
            raise ValueError("STATARB_HEDGE_LOOKBACK must be at least 5")
        return v

    @field_validator("account_size")
    @classmethod
    def validate_account_size(cls, v):
        if v <= 0:
            raise ValueError("STATARB_ACCOUNT_SIZE must be positive")
        return v

    @property
    def regime_window(self) -> int:
        """Regime detector buffers hold half the tracker window (never fewer than 10)."""
        return max(self.window_size // 2, 10)


class RiskSettings(BaseSettings):
    """Volatility targeting and position limit configuration."""

    model_config = SettingsConfigDict(env_file=None, extra='ignore', populate_by_name=True)

    target_volatility: float = Field(default=0.15, validation_alias="STATARB_TARGET_VOL")
    risk_per_trade: float = Field(default=0.02, validation_alias="STATARB_RISK_PER_TRADE")
    max_position_limit: float = Field(default=1_000_000.0, validation_alias="STATARB_MAX_POSITION")

    @field_validator("target_volatility")
    @classmethod
    def validate_target_volatility(cls, v):
        if v <= 0 or v > 5.0:
            raise ValueError("STATARB_TARGET_VOL must be in (0, 5]")
        return v

    @field_validator("risk_per_trade")
    @classmethod
    def validate_risk_per_trade(cls, v):
        if not 0 < v <= 1.0:
            raise ValueError("STATARB_RISK_PER_TRADE must be in (0, 1]")
        return v

    @field_validator("max_position_limit")
    @classmethod
    def validate_position_limit(cls, v):
        if v <= 0:
            raise ValueError("STATARB_MAX_POSITION must be positive")
        return v


class CostSettings(BaseSettings):
    """Transaction cost model configuration."""

    model_config = SettingsConfigDict(env_file=None, extra='ignore', populate_by_name=True)

    bid_ask_spread_asset1: float = Field(default=0.001, validation_alias="STATARB_SPREAD_1")
    bid_ask_spread_asset2: float = Field(default=0.001, validation_alias="STATARB_SPREAD_2")
    market_impact_asset1: float = Field(default=0.0005, validation_alias="STATARB_IMPACT_1")
    market_impact_asset2: float = Field(default=0.0005, validation_alias="STATARB_IMPACT_2")
    financing_rate: float = Field(default=0.001, validation_alias="STATARB_FINANCING_RATE")
    commission_rate: float = Field(default=0.0005, validation_alias="STATARB_COMMISSION_RATE")
    slippage_factor: float = Field(default=0.0002, validation_alias="STATARB_SLIPPAGE")

    @field_validator(
        "bid_ask_spread_asset1", "bid_ask_spread_asset2",
        "market_impact_asset1", "market_impact_asset2",
        "financing_rate", "commission_rate", "slippage_factor",
    )
    @classmethod
    def validate_non_negative(cls, v):
        """Validate cost values are non-negative."""
        if v < 0:
            raise ValueError("Cost values must be non-negative")
        return v


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(env_file=None, extra='ignore', populate_by_name=True)

    level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    format: str = Field(default="json", validation_alias="LOG_FORMAT")

    @field_validator("level")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of: {valid_levels}")
        return v.upper()

    @field_validator("format")
    @classmethod
    def validate_log_format(cls, v):
        valid_formats = ["json", "text"]
        if v.lower() not in valid_formats:
            raise ValueError(f"LOG_FORMAT must be one of: {valid_formats}")
        return v.lower()


class StatArbSettings(BaseSettings):
    """Main configuration class that combines all settings."""

    model_config = SettingsConfigDict(env_file=None, extra='ignore', populate_by_name=True, case_sensitive=False)

    symbols: str = Field(default="ASSET1,ASSET2", validation_alias="STATARB_SYMBOLS")

    # Sub-configurations
    tracker: TrackerSettings = Field(default_factory=TrackerSettings)
    risk: RiskSettings = Field(default_factory=RiskSettings)
    costs: CostSettings = Field(default_factory=CostSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @property
    def symbols_list(self) -> List[str]:
        """Get the (symbol1, symbol2) pair as a list."""
        return [s.strip().upper() for s in self.symbols.split(",") if s.strip()]

    @field_validator("symbols")
    @classmethod
    def validate_symbols(cls, v):
        if len([s for s in v.split(",") if s.strip()]) != 2:
            raise ValueError("STATARB_SYMBOLS must name exactly two instruments")
        return v


# Global settings instance
settings = StatArbSettings()


def get_settings() -> StatArbSettings:
    """Get the global settings instance."""
    return settings


def reload_settings() -> StatArbSettings:
    """Reload settings from environment (useful for testing)."""
    global settings
    settings = StatArbSettings()
    return settings
