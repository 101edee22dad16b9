"""Tests for configuration loading."""

from technical_signals.config import Config, get_config


class TestConfig:
    """Tests for Config defaults and environment overrides."""

    def test_defaults(self, config):
        """Should carry the standard analysis windows."""
        assert (config.short_timeframe, config.short_limit) == ("5m", 100)
        assert (config.medium_timeframe, config.medium_limit) == ("1h", 48)
        assert (config.long_timeframe, config.long_limit) == ("1h", 30)
        assert config.batch_concurrency == 5
        assert config.volatility_periods == 12
        assert config.support_resistance_band == 0.05
        assert config.price_kind == "mark"

    def test_env_override(self, monkeypatch):
        """Should read TA_-prefixed environment variables."""
        monkeypatch.setenv("TA_BATCH_CONCURRENCY", "2")
        monkeypatch.setenv("TA_MEDIUM_LIMIT", "60")

        config = Config(_env_file=None)

        assert config.batch_concurrency == 2
        assert config.medium_limit == 60

    def test_get_config_is_cached(self):
        get_config.cache_clear()
        assert get_config() is get_config()
