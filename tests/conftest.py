"""Pytest configuration and fixtures."""

from datetime import datetime, timedelta, timezone
from typing import Optional

import numpy as np
import pytest

from technical_signals.config import Config
from technical_signals.models import Bar, Series

START = datetime(2024, 1, 1, tzinfo=timezone.utc)


def candle(
    open: float,
    high: float,
    low: float,
    close: float,
    volume: Optional[float] = 1000.0,
    index: int = 0,
) -> Bar:
    return Bar(
        timestamp=START + timedelta(minutes=5 * index),
        open=open,
        high=high,
        low=low,
        close=close,
        volume=volume,
    )


def series_of(*ohlc: tuple, timeframe: str = "5m") -> Series:
    """Series from (open, high, low, close[, volume]) tuples."""
    return Series.from_bars(
        [candle(*values, index=i) for i, values in enumerate(ohlc)],
        asset="TEST",
        timeframe=timeframe,
    )


def trending_series(
    n: int,
    start: float = 100.0,
    step: float = 1.0,
    spread: float = 0.5,
    timeframe: str = "1h",
) -> Series:
    """Evenly stepping candles with a constant high/low spread around the close."""
    bars = []
    for i in range(n):
        close = start + step * i
        open_ = close - step / 2
        bars.append(
            Bar(
                timestamp=START + timedelta(hours=i),
                open=open_,
                high=max(open_, close) + spread,
                low=min(open_, close) - spread,
                close=close,
                volume=1000.0 + 10 * i,
            )
        )
    return Series.from_bars(bars, asset="TEST", timeframe=timeframe)


def noisy_series(n: int, seed: int = 42, timeframe: str = "5m", start: float = 100.0) -> Series:
    rng = np.random.default_rng(seed)
    closes = start + np.cumsum(rng.normal(0, 0.5, n))
    bars = []
    for i, close in enumerate(closes):
        open_ = close + rng.normal(0, 0.3)
        bars.append(
            Bar(
                timestamp=START + timedelta(minutes=5 * i),
                open=float(open_),
                high=float(max(open_, close) + abs(rng.normal(0, 0.2))),
                low=float(min(open_, close) - abs(rng.normal(0, 0.2))),
                close=float(close),
                volume=float(rng.integers(500, 1500)),
            )
        )
    return Series.from_bars(bars, asset="TEST", timeframe=timeframe)


@pytest.fixture
def uptrend() -> Series:
    """40 hourly bars rising by 1 each bar."""
    return trending_series(40, step=1.0)


@pytest.fixture
def downtrend() -> Series:
    """40 hourly bars falling by 1 each bar."""
    return trending_series(40, start=140.0, step=-1.0)


@pytest.fixture
def noisy() -> Series:
    """100 five-minute bars of a seeded random walk."""
    return noisy_series(100)


@pytest.fixture
def config() -> Config:
    """Default configuration, isolated from the environment."""
    return Config(_env_file=None)
