"""
Volume analysis: trend, significance of the latest bar and price-level profile.
"""

import math
from dataclasses import dataclass
from typing import Sequence

import numpy as np

from technical_signals.errors import InvalidSeriesError
from technical_signals.models.bar import Series
from technical_signals.models.signals import VolumeTrend

# Bars inspected by the trend comparison, per timeframe
TREND_PERIODS = {
    "1m": 30,
    "5m": 24,
    "15m": 16,
    "1h": 24,
    "4h": 30,
    "1d": 20,
}
DEFAULT_TREND_PERIOD = 20
STABLE_THRESHOLD = 0.1


@dataclass
class VolumeTrendResult:
    direction: VolumeTrend
    strength: float  # 0-1


@dataclass
class VolumeProfile:
    dominant_level: float
    concentration: float  # share of total volume at the dominant level


@dataclass
class VolumeAnalysis:
    trend: VolumeTrendResult
    significance: float
    profile: VolumeProfile


def trend_period(timeframe: str) -> int:
    return TREND_PERIODS.get(timeframe, DEFAULT_TREND_PERIOD)


def volume_trend(volumes: Sequence[float], period: int = DEFAULT_TREND_PERIOD) -> VolumeTrendResult:
    """
    Compare the later half of the trailing window against the earlier half.

    The normalised difference ``(later - earlier) / earlier`` is clamped to
    [-1, 1]; its magnitude is the strength and anything within 0.1 of zero
    is stable.
    """
    recent = np.asarray(volumes, dtype=float)[-period:]
    if len(recent) < 2:
        return VolumeTrendResult(direction=VolumeTrend.STABLE, strength=0.0)

    half = len(recent) // 2
    earlier = recent[:half].mean()
    later = recent[half:].mean()

    change = 0.0 if earlier == 0 else (later - earlier) / earlier
    change = max(min(change, 1.0), -1.0)

    if change > STABLE_THRESHOLD:
        direction = VolumeTrend.INCREASING
    elif change < -STABLE_THRESHOLD:
        direction = VolumeTrend.DECREASING
    else:
        direction = VolumeTrend.STABLE

    return VolumeTrendResult(direction=direction, strength=abs(change))


def volume_significance(volumes: Sequence[float]) -> float:
    """
    Latest volume relative to the average of all earlier bars, capped at 1.

    A single bar is fully significant. A zero trailing average reports 1 when
    the latest bar traded and 0 otherwise.
    """
    values = np.asarray(volumes, dtype=float)
    if len(values) == 1:
        return 1.0

    current = values[-1]
    trailing = values[:-1].mean()
    if trailing == 0:
        return 1.0 if current > 0 else 0.0
    return float(min(current / trailing, 1.0))


def price_level(price: float, step: float) -> float:
    """Round a price to the nearest multiple of ``step`` (halves round up)."""
    if step <= 0:
        return price
    return math.floor(price / step + 0.5) * step


def volume_profile(
    volumes: Sequence[float],
    closes: Sequence[float],
    price_step: float = 10.0,
) -> VolumeProfile:
    """Aggregate volume by close-price bucket and find the dominant bucket."""
    totals: dict[float, float] = {}
    for close, volume in zip(closes, volumes):
        level = price_level(float(close), price_step)
        totals[level] = totals.get(level, 0.0) + float(volume)

    total_volume = sum(totals.values())
    dominant_level = price_level(float(closes[-1]), price_step)
    dominant_volume = 0.0
    for level, volume in totals.items():
        if volume > dominant_volume:
            dominant_level, dominant_volume = level, volume

    if len(closes) == 1:
        concentration = 1.0
    else:
        concentration = dominant_volume / total_volume if total_volume > 0 else 0.0

    return VolumeProfile(dominant_level=dominant_level, concentration=concentration)


def analyze_volume(
    series: Series,
    timeframe: str = "1h",
    price_step: float = 10.0,
) -> VolumeAnalysis:
    """
    Analyse the volume of a series.

    Raises:
        InvalidSeriesError: empty series
    """
    if series.is_empty:
        raise InvalidSeriesError("Volume and price data required")

    volumes = series.volumes
    return VolumeAnalysis(
        trend=volume_trend(volumes, trend_period(timeframe)),
        significance=volume_significance(volumes),
        profile=volume_profile(volumes, series.closes, price_step),
    )
