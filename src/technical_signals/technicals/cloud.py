"""
Simplified Ichimoku cloud.

Only the most recent Tenkan, Kijun and Senkou spans are computed; there is
no forward displacement of the cloud.
"""

from dataclasses import dataclass

from technical_signals.errors import InsufficientDataError
from technical_signals.models.bar import Series
from technical_signals.models.signals import CloudSignal, CloudState


@dataclass
class CloudResult:
    signal: CloudSignal
    cloud_state: CloudState
    tenkan: float
    kijun: float
    span_a: float
    span_b: float
    cloud_top: float
    cloud_bottom: float
    price_distance: float  # (price - cloud_top) / price * 100


def period_midpoint(series: Series, period: int) -> float:
    """(highest high + lowest low) / 2 over the trailing ``period`` bars."""
    if len(series) < period:
        raise InsufficientDataError(
            f"Not enough data: {period} bars required, got {len(series)}"
        )
    window = series[-period:]
    return (float(window.highs.max()) + float(window.lows.min())) / 2


def cloud_state(price: float, cloud_top: float, cloud_bottom: float) -> CloudState:
    if price > cloud_top:
        return CloudState.ABOVE
    if price < cloud_bottom:
        return CloudState.BELOW
    return CloudState.INSIDE


def cloud_signal(
    price: float,
    tenkan: float,
    kijun: float,
    cloud_top: float,
    cloud_bottom: float,
) -> CloudSignal:
    if price > cloud_top and tenkan > kijun:
        return CloudSignal.STRONG_BUY
    if price > cloud_top:
        return CloudSignal.BUY
    if price < cloud_bottom and tenkan < kijun:
        return CloudSignal.STRONG_SELL
    if price < cloud_bottom:
        return CloudSignal.SELL
    return CloudSignal.NEUTRAL


def compute_cloud(
    series: Series,
    tenkan_period: int = 9,
    kijun_period: int = 26,
    span_b_period: int = 52,
) -> CloudResult:
    """
    Compute the latest cloud lines and classify price against them.

    Raises:
        InsufficientDataError: if any line lacks its full window
    """
    tenkan = period_midpoint(series, tenkan_period)
    kijun = period_midpoint(series, kijun_period)
    span_b = period_midpoint(series, span_b_period)
    span_a = (tenkan + kijun) / 2

    top = max(span_a, span_b)
    bottom = min(span_a, span_b)
    price = series.last().close

    return CloudResult(
        signal=cloud_signal(price, tenkan, kijun, top, bottom),
        cloud_state=cloud_state(price, top, bottom),
        tenkan=tenkan,
        kijun=kijun,
        span_a=span_a,
        span_b=span_b,
        cloud_top=top,
        cloud_bottom=bottom,
        price_distance=(price - top) / price * 100 if price else 0.0,
    )
