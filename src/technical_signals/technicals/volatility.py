"""
Volatility measures: Average True Range and Keltner-style channels.
"""

from dataclasses import dataclass

import numpy as np
import pandas as pd

from technical_signals.models.bar import Series
from technical_signals.models.signals import Condition, VolatilityLevel
from technical_signals.technicals.common import safe_ratio, true_range
from technical_signals.technicals.moving_averages import compute_ema


# -----------------------------------------------------------------------------
# ATR - Average True Range
# -----------------------------------------------------------------------------


def compute_atr(series: Series, period: int = 14) -> np.ndarray:
    """
    Compute ATR seeded with the first True Range.

    ``ATR[i] = (ATR[i-1] * (period - 1) + TR[i]) / period``

    Returns:
        Array of length ``len(series) - 1`` (element ``i`` describes bar ``i + 1``)
    """
    tr = true_range(series)
    if tr.size == 0:
        return tr
    return pd.Series(tr).ewm(alpha=1 / period, adjust=False).mean().to_numpy()


def compute_normalized_atr(series: Series, period: int = 14) -> np.ndarray:
    """ATR as a percentage of the close of the bar it describes."""
    atr = compute_atr(series, period)
    return safe_ratio(atr, series.closes[1:]) * 100


def volatility_signal(atr: float, avg_atr: float) -> VolatilityLevel:
    if atr > avg_atr * 1.5:
        return VolatilityLevel.HIGH
    if atr < avg_atr * 0.5:
        return VolatilityLevel.LOW
    return VolatilityLevel.NORMAL


# -----------------------------------------------------------------------------
# Keltner Channels
# -----------------------------------------------------------------------------


@dataclass
class KeltnerChannels:
    middle: np.ndarray
    upper: np.ndarray
    lower: np.ndarray


def compute_keltner(
    series: Series,
    ema_period: int = 20,
    atr_period: int = 10,
    multiplier: float = 2.0,
) -> KeltnerChannels:
    """
    Compute Keltner Channels around an EMA of closes.

    The bands pair EMA index ``i`` with ATR index ``i``, so they are one
    element shorter than the middle line.

    Raises:
        InvalidPeriodError: if the series is shorter than ``ema_period``
    """
    middle = compute_ema(series, ema_period)
    atr = compute_atr(series, atr_period)

    n = len(atr)
    return KeltnerChannels(
        middle=middle,
        upper=middle[:n] + multiplier * atr,
        lower=middle[:n] - multiplier * atr,
    )


def channel_signal(price: float, upper: float, lower: float) -> Condition:
    if price > upper:
        return Condition.OVERBOUGHT
    if price < lower:
        return Condition.OVERSOLD
    return Condition.NEUTRAL
