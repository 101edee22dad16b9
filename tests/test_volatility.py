"""Tests for ATR and Keltner Channels."""

import numpy as np
import pytest

from technical_signals.errors import InvalidPeriodError
from technical_signals.models import Condition, VolatilityLevel
from technical_signals.technicals.common import true_range
from technical_signals.technicals.volatility import (
    channel_signal,
    compute_atr,
    compute_keltner,
    compute_normalized_atr,
    volatility_signal,
)

from conftest import series_of, trending_series


class TestTrueRange:
    def test_gap_uses_previous_close(self):
        series = series_of((10, 11, 9, 10), (15, 16, 14, 15))
        # |16 - 10| dominates the 2-point bar range
        np.testing.assert_allclose(true_range(series), [6.0])


class TestATR:
    """Tests for Average True Range."""

    def test_constant_true_range(self, uptrend):
        atr = compute_atr(uptrend, period=14)
        assert len(atr) == len(uptrend) - 1
        np.testing.assert_allclose(atr, 1.5)

    def test_seeded_with_first_true_range(self):
        series = series_of((10, 11, 9, 10), (10, 12, 8, 10), (10, 11, 9, 10))
        atr = compute_atr(series, period=2)
        # TR = [4, 2]; ATR[1] = (4 * 1 + 2) / 2
        np.testing.assert_allclose(atr, [4.0, 3.0])

    def test_single_bar(self):
        assert compute_atr(series_of((10, 11, 9, 10))).size == 0

    def test_normalized(self, uptrend):
        natr = compute_normalized_atr(uptrend)
        assert natr[-1] == pytest.approx(1.5 / uptrend.closes[-1] * 100)

    def test_volatility_signal(self):
        assert volatility_signal(2.0, 1.0) == VolatilityLevel.HIGH
        assert volatility_signal(0.4, 1.0) == VolatilityLevel.LOW
        assert volatility_signal(1.0, 1.0) == VolatilityLevel.NORMAL


class TestKeltner:
    """Tests for Keltner Channels."""

    def test_bands_truncated_to_atr(self, uptrend):
        channels = compute_keltner(uptrend, ema_period=20, atr_period=10, multiplier=2.0)

        assert len(channels.middle) == len(uptrend)
        assert len(channels.upper) == len(uptrend) - 1
        np.testing.assert_allclose(channels.upper - channels.middle[:-1], 3.0)
        np.testing.assert_allclose(channels.middle[:-1] - channels.lower, 3.0)

    def test_short_series(self):
        with pytest.raises(InvalidPeriodError):
            compute_keltner(trending_series(10), ema_period=20)

    def test_channel_signal(self):
        assert channel_signal(110, 105, 95) == Condition.OVERBOUGHT
        assert channel_signal(90, 105, 95) == Condition.OVERSOLD
        assert channel_signal(100, 105, 95) == Condition.NEUTRAL
