"""Helpers shared by the indicator modules."""

from typing import Sequence, Union

import numpy as np

from technical_signals.errors import InvalidPeriodError, InvalidSeriesError
from technical_signals.models.bar import Series

PriceInput = Union[Series, Sequence[float], np.ndarray]


def as_values(data: PriceInput) -> np.ndarray:
    """
    Coerce a Series (its closes) or a numeric sequence to a float array.

    Raises:
        InvalidSeriesError: if the input is empty or not numeric.
    """
    if isinstance(data, Series):
        values = data.closes
    else:
        try:
            values = np.asarray(data, dtype=float)
        except (TypeError, ValueError) as e:
            raise InvalidSeriesError("Invalid prices array") from e

    if values.ndim != 1 or values.size == 0 or np.isnan(values).any():
        raise InvalidSeriesError("Invalid prices array")
    return values


def check_period(period: int, length: int, minimum: int = 2) -> None:
    """Validate ``minimum <= period <= length``."""
    if isinstance(period, bool) or not isinstance(period, (int, np.integer)):
        raise InvalidPeriodError(f"Invalid period: {period!r}")
    if period < minimum or period > length:
        raise InvalidPeriodError(
            f"Invalid period {period} for series of length {length}"
        )


def true_range(series: Series) -> np.ndarray:
    """
    True Range for each consecutive bar pair.

    Returns:
        Array of length ``len(series) - 1``; element ``i`` describes bar ``i + 1``.
    """
    if len(series) < 2:
        return np.array([], dtype=float)

    highs = series.highs[1:]
    lows = series.lows[1:]
    prev_close = series.closes[:-1]

    return np.maximum.reduce(
        [highs - lows, np.abs(highs - prev_close), np.abs(lows - prev_close)]
    )


def wilder_smooth(values: np.ndarray, period: int) -> np.ndarray:
    """
    Wilder smoothing seeded with the simple mean of the first ``period`` values.

    Returns:
        Array of length ``len(values) - period + 1`` (empty when too short).
    """
    if period <= 0 or len(values) < period:
        return np.array([], dtype=float)

    smoothed = np.empty(len(values) - period + 1, dtype=float)
    smoothed[0] = values[:period].mean()
    for i, x in enumerate(values[period:], start=1):
        smoothed[i] = (smoothed[i - 1] * (period - 1) + x) / period
    return smoothed


def safe_ratio(numerator: np.ndarray, denominator: np.ndarray, default: float = 0.0) -> np.ndarray:
    """Element-wise division resolving zero denominators to ``default``."""
    numerator = np.asarray(numerator, dtype=float)
    denominator = np.asarray(denominator, dtype=float)
    out = np.full(numerator.shape, default, dtype=float)
    np.divide(numerator, denominator, out=out, where=denominator != 0)
    return out
