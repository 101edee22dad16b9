"""
Moving average calculations.

All functions are pure and stateless. SMA output is aligned to the end of
each window (value ``i`` covers closes ``[i, i + period)``); EMA output has
the same length as its input.
"""

from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np
import pandas as pd

from technical_signals.errors import InsufficientDataError
from technical_signals.models.signals import BandWidthState, TrendDirection
from technical_signals.technicals.common import PriceInput, as_values, check_period, safe_ratio


# -----------------------------------------------------------------------------
# SMA / EMA
# -----------------------------------------------------------------------------


def compute_sma(data: PriceInput, period: int) -> np.ndarray:
    """
    Compute a Simple Moving Average with a running sum.

    Args:
        data: Series (closes are used) or numeric sequence
        period: Window size, ``2 <= period <= len(data)``

    Returns:
        Array of length ``len(data) - period + 1``

    Raises:
        InvalidSeriesError: empty or non-numeric input
        InvalidPeriodError: period out of range
    """
    values = as_values(data)
    check_period(period, len(values))

    running = np.concatenate(([0.0], np.cumsum(values)))
    return (running[period:] - running[:-period]) / period


def compute_ema(data: PriceInput, period: int) -> np.ndarray:
    """
    Compute an Exponential Moving Average seeded with the first value.

    ``EMA[0] = x[0]`` and ``EMA[i] = x[i] * k + EMA[i-1] * (1 - k)`` with
    ``k = 2 / (period + 1)``.

    Returns:
        Array of the same length as the input
    """
    values = as_values(data)
    check_period(period, len(values))

    return pd.Series(values).ewm(span=period, adjust=False).mean().to_numpy()


# -----------------------------------------------------------------------------
# Crossover
# -----------------------------------------------------------------------------


@dataclass
class CrossoverResult:
    """Outcome of comparing the last two points of two moving averages."""

    type: Optional[TrendDirection]
    index: int
    short_ma: float
    long_ma: float


def detect_crossover(short_ma: Sequence[float], long_ma: Sequence[float]) -> CrossoverResult:
    """
    Detect a crossover between two moving averages.

    Both arrays are compared at the same trailing index positions
    (``n - 1`` and ``n - 2`` with ``n = min(len(short), len(long))``),
    whatever their offsets relative to the underlying bars.

    Raises:
        InsufficientDataError: if either array has fewer than 2 points
    """
    short_arr = np.asarray(short_ma, dtype=float)
    long_arr = np.asarray(long_ma, dtype=float)
    if len(short_arr) < 2 or len(long_arr) < 2:
        raise InsufficientDataError("Need at least 2 points to detect crossover")

    last = min(len(short_arr), len(long_arr)) - 1
    prev = last - 1

    crossover: Optional[TrendDirection] = None
    if short_arr[prev] <= long_arr[prev] and short_arr[last] > long_arr[last]:
        crossover = TrendDirection.BULLISH
    elif short_arr[prev] >= long_arr[prev] and short_arr[last] < long_arr[last]:
        crossover = TrendDirection.BEARISH

    return CrossoverResult(
        type=crossover,
        index=last,
        short_ma=float(short_arr[last]),
        long_ma=float(long_arr[last]),
    )


# -----------------------------------------------------------------------------
# Bollinger Bands
# -----------------------------------------------------------------------------


@dataclass
class BollingerBands:
    """Bollinger Band arrays, aligned like the SMA."""

    upper: np.ndarray
    middle: np.ndarray
    lower: np.ndarray
    width: np.ndarray  # (upper - lower) / middle


def compute_bollinger(
    data: PriceInput,
    period: int = 20,
    std_dev: float = 2.0,
) -> BollingerBands:
    """
    Compute Bollinger Bands using the population standard deviation.

    Args:
        data: Series or numeric sequence
        period: SMA period (default 20)
        std_dev: Standard deviation multiplier (default 2.0)
    """
    values = as_values(data)
    middle = compute_sma(values, period)

    rolling_std = pd.Series(values).rolling(window=period).std(ddof=0).to_numpy()[period - 1:]
    upper = middle + std_dev * rolling_std
    lower = middle - std_dev * rolling_std

    return BollingerBands(
        upper=upper,
        middle=middle,
        lower=lower,
        width=safe_ratio(upper - lower, middle),
    )


def band_width_state(width: float, previous: float) -> BandWidthState:
    """Expanding or contracting when the band width moved more than 5% since the prior bar."""
    if width > previous * 1.05:
        return BandWidthState.EXPANDING
    if width < previous * 0.95:
        return BandWidthState.CONTRACTING
    return BandWidthState.STABLE
