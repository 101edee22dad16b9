"""Configuration management for the technical signals engine."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Config(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="TA_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Price Source windows
    short_timeframe: str = Field(default="5m", description="Bar size for short-term signals")
    short_limit: int = Field(default=100, description="Bars fetched for short-term signals")
    medium_timeframe: str = Field(default="1h", description="Bar size for medium-term signals")
    medium_limit: int = Field(default=48, description="Bars fetched for medium-term signals")
    long_timeframe: str = Field(default="1h", description="Bar size for long-term levels")
    long_limit: int = Field(default=30, description="Bars fetched for long-term levels")
    price_kind: str = Field(default="mark", description="Price kind requested from the source")

    # Change lookbacks (in bars of the respective window)
    change_30min_bars: int = 6
    change_1h_bars: int = 1
    change_4h_bars: int = 1

    # Batch processing
    batch_concurrency: int = Field(
        default=5,
        description="Maximum analyses in flight at once",
    )

    # Momentum parameters
    rsi_period: int = 14
    rsi_oversold: float = 30.0
    rsi_overbought: float = 70.0
    macd_fast: int = 12
    macd_slow: int = 26
    macd_signal: int = 9
    stochastic_period: int = 14
    stochastic_oversold: float = 20.0
    stochastic_overbought: float = 80.0
    roc_period: int = 14
    roc_sustain_threshold: float = Field(
        default=0.5,
        description="Normalized ROC level the trend momentum must hold to count as sustained",
    )

    # Trend / volatility parameters
    adx_period: int = 14
    atr_period: int = 14
    keltner_ema_period: int = 20
    keltner_atr_period: int = 10
    keltner_multiplier: float = 2.0
    bollinger_period: int = 20
    bollinger_std_dev: float = 2.0
    volatility_periods: int = Field(
        default=12,
        description="Leading bars used for the return volatility",
    )

    # Composition heuristics
    short_term_min_bars: int = Field(
        default=26,
        description="Below this many bars short-term signals report neutral defaults",
    )
    pattern_count: int = 2
    medium_fallback_lookback: int = 5
    medium_fallback_threshold: float = Field(
        default=1.0,
        description="Percent change separating bullish/bearish from neutral",
    )
    support_resistance_band: float = Field(
        default=0.05,
        description="Fractional band around the last price for long-term levels",
    )
    volume_price_step: float = Field(
        default=10.0,
        description="Width of the price buckets used by the volume profile",
    )

    # Logging
    log_level: str = Field(default="INFO")
    log_format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


@lru_cache
def get_config() -> Config:
    """Get cached configuration instance."""
    return Config()
