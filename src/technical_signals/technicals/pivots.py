"""Classic floor-trader pivot levels from the most recent bar."""

import math
from dataclasses import dataclass

from technical_signals.errors import InvalidInputError, InvalidSeriesError
from technical_signals.models.bar import Series
from technical_signals.models.signals import Breakout

BREAKOUT_EPSILON = 1e-5


@dataclass
class PivotLevels:
    pivot: float
    r1: float
    s1: float
    breakout: Breakout
    r1_distance: float  # percent from close up to R1


def breakout_state(close: float, r1: float, s1: float) -> Breakout:
    if close >= r1 - BREAKOUT_EPSILON:
        return Breakout.ABOVE_R1
    if close <= s1 + BREAKOUT_EPSILON:
        return Breakout.BELOW_S1
    return Breakout.BETWEEN


def compute_pivots(series: Series) -> PivotLevels:
    """
    Compute PP, R1 and S1 from the last bar's high, low and close.

    Raises:
        InvalidSeriesError: empty series
        InvalidInputError: last bar lacks a usable high, low or close
    """
    last = series.last()
    if last is None:
        raise InvalidSeriesError("Price data is required")

    high, low, close = last.high, last.low, last.close
    if any(v is None or math.isnan(v) for v in (high, low, close)):
        raise InvalidInputError(
            "Invalid price data: high, low, and close values are required"
        )

    pp = (high + low + close) / 3
    r1 = 2 * pp - low
    s1 = 2 * pp - high

    return PivotLevels(
        pivot=pp,
        r1=r1,
        s1=s1,
        breakout=breakout_state(close, r1, s1),
        r1_distance=(r1 - close) / close * 100 if close else 0.0,
    )
