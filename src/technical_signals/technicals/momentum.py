"""
Momentum oscillators: RSI, MACD, Stochastic and Rate of Change.

Insufficient data degrades to empty results rather than raising, so callers
can substitute neutral readings.
"""

from dataclasses import dataclass
from typing import Literal, Sequence

import numpy as np
import pandas as pd

from technical_signals.models.bar import Series
from technical_signals.models.signals import Condition, TradeSignal
from technical_signals.technicals.common import PriceInput, as_values, safe_ratio
from technical_signals.technicals.moving_averages import compute_ema


# -----------------------------------------------------------------------------
# RSI - Relative Strength Index
# -----------------------------------------------------------------------------


def compute_rsi(data: PriceInput, period: int = 14) -> np.ndarray:
    """
    Compute RSI with Wilder smoothing.

    The first average gain/loss is the simple mean of the first ``period``
    close-to-close deltas. A zero average loss saturates RSI at 100.

    Args:
        data: Series or numeric sequence of closes
        period: RSI period (default 14)

    Returns:
        Array of length ``len(data) - period``, or an empty array if
        fewer than ``period + 1`` values are supplied
    """
    values = as_values(data)
    if len(values) < period + 1:
        return np.array([], dtype=float)

    deltas = np.diff(values)
    gains = np.where(deltas > 0, deltas, 0.0)
    losses = np.where(deltas < 0, -deltas, 0.0)

    avg_gain = gains[:period].mean()
    avg_loss = losses[:period].mean()

    rsi = np.empty(len(deltas) - period + 1, dtype=float)
    rsi[0] = _rsi_value(avg_gain, avg_loss)

    for i in range(period, len(deltas)):
        avg_gain = (avg_gain * (period - 1) + gains[i]) / period
        avg_loss = (avg_loss * (period - 1) + losses[i]) / period
        rsi[i - period + 1] = _rsi_value(avg_gain, avg_loss)

    return rsi


def _rsi_value(avg_gain: float, avg_loss: float) -> float:
    if avg_loss == 0:
        return 100.0
    rs = avg_gain / avg_loss
    return 100.0 - 100.0 / (1.0 + rs)


def rsi_condition(
    value: float,
    oversold: float = 30.0,
    overbought: float = 70.0,
) -> Condition:
    """Classify an RSI reading."""
    if value < oversold:
        return Condition.OVERSOLD
    if value > overbought:
        return Condition.OVERBOUGHT
    return Condition.NEUTRAL


# -----------------------------------------------------------------------------
# MACD - Moving Average Convergence Divergence
# -----------------------------------------------------------------------------


@dataclass
class MACDResult:
    """MACD line, signal line and histogram, each as long as the input."""

    macd: np.ndarray
    signal: np.ndarray
    histogram: np.ndarray


def compute_macd(
    data: PriceInput,
    fast: int = 12,
    slow: int = 26,
    signal: int = 9,
) -> MACDResult:
    """
    Compute MACD.

    Args:
        data: Series or numeric sequence of closes
        fast: Fast EMA period (default 12)
        slow: Slow EMA period (default 26)
        signal: Signal line period (default 9)

    Raises:
        InvalidPeriodError: if the series is shorter than ``slow``
    """
    values = as_values(data)
    macd_line = compute_ema(values, fast) - compute_ema(values, slow)
    signal_line = compute_ema(macd_line, signal)

    return MACDResult(
        macd=macd_line,
        signal=signal_line,
        histogram=macd_line - signal_line,
    )


def macd_signal(histogram: float, price: float) -> TradeSignal:
    """Direction of the latest MACD histogram bar."""
    if histogram > 0:
        return TradeSignal.BUY
    if histogram < 0:
        return TradeSignal.SELL
    return TradeSignal.NEUTRAL


def macd_strength(histogram: float, price: float) -> float:
    """Histogram as a percentage of price, capped at 1."""
    if price == 0:
        return 0.0
    return min(abs(histogram) / abs(price) * 100, 1.0)


# -----------------------------------------------------------------------------
# Stochastic Oscillator
# -----------------------------------------------------------------------------


@dataclass
class StochasticResult:
    """%K and its 3-point average %D."""

    k: np.ndarray
    d: np.ndarray


def compute_stochastic(series: Series, period: int = 14) -> StochasticResult:
    """
    Compute the Stochastic Oscillator.

    ``%K`` covers the trailing ``period``-bar window ending at each bar from
    index ``period - 1``; a flat window reports 50. ``%D`` needs at least
    three ``%K`` points and is empty otherwise.
    """
    empty = np.array([], dtype=float)
    if len(series) < period or period <= 0:
        return StochasticResult(k=empty, d=empty)

    df = series.to_dataframe()
    highest = df["high"].rolling(window=period).max().to_numpy()[period - 1:]
    lowest = df["low"].rolling(window=period).min().to_numpy()[period - 1:]
    closes = series.closes[period - 1:]

    k = safe_ratio(closes - lowest, highest - lowest, default=0.5) * 100

    if len(k) < 3:
        return StochasticResult(k=k, d=empty)

    d = pd.Series(k).rolling(window=3).mean().to_numpy()[2:]
    return StochasticResult(k=k, d=d)


def stochastic_condition(
    k: float,
    d: float,
    oversold: float = 20.0,
    overbought: float = 80.0,
) -> Condition:
    """Classify a %K/%D pair; both lines must agree."""
    if k > overbought and d > overbought:
        return Condition.OVERBOUGHT
    if k < oversold and d < oversold:
        return Condition.OVERSOLD
    return Condition.NEUTRAL


# -----------------------------------------------------------------------------
# ROC - Rate of Change
# -----------------------------------------------------------------------------


@dataclass
class ROCResult:
    """Rate of change in percent and its value clamped to [-1, 1]."""

    values: np.ndarray
    normalized: np.ndarray


@dataclass
class ROCSignal:
    condition: Condition
    strength: float


def compute_roc(data: PriceInput, period: int = 14) -> ROCResult:
    """
    Compute percent change against the close ``period`` bars back.

    Returns:
        Arrays of length ``len(data) - period`` (empty when too short)
    """
    values = as_values(data)
    if period <= 0 or len(values) <= period:
        empty = np.array([], dtype=float)
        return ROCResult(values=empty, normalized=empty)

    previous = values[:-period]
    roc = safe_ratio(values[period:] - previous, previous) * 100
    return ROCResult(values=roc, normalized=np.clip(roc / 100, -1.0, 1.0))


def roc_signal(roc: float) -> ROCSignal:
    """
    Classify a rate of change given in percent.

    Moves of 10% or more either way are treated as stretched.
    """
    strength = min(abs(roc) / 10, 1.0)
    if roc >= 10:
        return ROCSignal(condition=Condition.OVERBOUGHT, strength=strength)
    if roc <= -10:
        return ROCSignal(condition=Condition.OVERSOLD, strength=strength)
    return ROCSignal(condition=Condition.NEUTRAL, strength=strength)


# -----------------------------------------------------------------------------
# Persistence
# -----------------------------------------------------------------------------


def sustained_periods(
    values: Sequence[float],
    threshold: float,
    direction: Literal["up", "down"] = "up",
) -> int:
    """
    Count trailing values beyond a threshold.

    Scans backward from the last element and stops at the first value that
    is not strictly above (``up``) or below (``down``) the threshold.
    """
    count = 0
    for value in reversed(list(values)):
        if direction == "up" and value > threshold:
            count += 1
        elif direction == "down" and value < threshold:
            count += 1
        else:
            break
    return count
