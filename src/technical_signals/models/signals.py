"""Categorical signal values shared by the engines and the analysis output."""

from enum import Enum


class PatternType(str, Enum):
    """Recognised candlestick shapes."""

    DOJI = "DOJI"
    HAMMER = "HAMMER"
    SHOOTING_STAR = "SHOOTING_STAR"
    MARUBOZU_BULLISH = "MARUBOZU_BULLISH"
    MARUBOZU_BEARISH = "MARUBOZU_BEARISH"
    ENGULFING_BULLISH = "ENGULFING_BULLISH"
    ENGULFING_BEARISH = "ENGULFING_BEARISH"
    HARAMI_BULLISH = "HARAMI_BULLISH"
    HARAMI_BEARISH = "HARAMI_BEARISH"
    DARK_CLOUD_COVER = "DARK_CLOUD_COVER"
    PIERCING_LINE = "PIERCING_LINE"
    MORNING_STAR = "MORNING_STAR"
    EVENING_STAR = "EVENING_STAR"
    THREE_WHITE_SOLDIERS = "THREE_WHITE_SOLDIERS"
    THREE_BLACK_CROWS = "THREE_BLACK_CROWS"


class Condition(str, Enum):
    """Oscillator reading relative to its extremes."""

    OVERSOLD = "oversold"
    OVERBOUGHT = "overbought"
    NEUTRAL = "neutral"


class TradeSignal(str, Enum):
    BUY = "buy"
    SELL = "sell"
    NEUTRAL = "neutral"


class TrendDirection(str, Enum):
    BULLISH = "bullish"
    BEARISH = "bearish"
    NEUTRAL = "neutral"


class PriceAction(str, Enum):
    """Side of the slow EMA the fast EMA sits on."""

    UPTREND = "uptrend"
    DOWNTREND = "downtrend"
    SIDEWAYS = "sideways"


class CloudSignal(str, Enum):
    STRONG_BUY = "strong_buy"
    BUY = "buy"
    NEUTRAL = "neutral"
    SELL = "sell"
    STRONG_SELL = "strong_sell"


class CloudState(str, Enum):
    ABOVE = "above"
    BELOW = "below"
    INSIDE = "inside"


class Breakout(str, Enum):
    ABOVE_R1 = "above_r1"
    BELOW_S1 = "below_s1"
    BETWEEN = "between"


class VolumeTrend(str, Enum):
    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"


class VolumeDistribution(str, Enum):
    HIGH = "high"
    LOW = "low"
    NEUTRAL = "neutral"


class VolatilityLevel(str, Enum):
    HIGH = "high"
    NORMAL = "normal"
    LOW = "low"


class BandWidthState(str, Enum):
    EXPANDING = "expanding"
    CONTRACTING = "contracting"
    STABLE = "stable"
