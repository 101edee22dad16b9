"""
Candlestick pattern recognition.

The scanner walks a series from the most recent bar backward and, at each
position, evaluates every rule whose bars are available: three-candle
formations first, then two-candle, then single-candle. Each match carries a
strength in [0, 1] derived from the body/shadow proportions that define it.

Terminology: body = |close - open|, range = high - low.
"""

from dataclasses import dataclass
from typing import Callable, NamedTuple, Optional, Sequence

from technical_signals.models.bar import Bar, Series
from technical_signals.models.signals import PatternType


@dataclass
class Pattern:
    """A detected pattern ending at ``position``."""

    type: PatternType
    position: int
    strength: float
    bars: tuple[Bar, ...]


class Match(NamedTuple):
    type: PatternType
    strength: float
    span: int  # trailing bars that make up the pattern


Rule = Callable[[Sequence[Bar]], Optional[Match]]


def _clamp(value: float) -> float:
    return max(0.0, min(value, 1.0))


def _midpoint(bar: Bar) -> float:
    return (bar.open + bar.close) / 2


def _body_low(bar: Bar) -> float:
    return min(bar.open, bar.close)


def _body_high(bar: Bar) -> float:
    return max(bar.open, bar.close)


def _opposite_colors(a: Bar, b: Bar) -> bool:
    return (a.is_bullish and b.is_bearish) or (a.is_bearish and b.is_bullish)


# -----------------------------------------------------------------------------
# Single-candle rules
# -----------------------------------------------------------------------------


def check_doji(bars: Sequence[Bar]) -> Optional[Match]:
    """Body under 10% of the range."""
    bar = bars[-1]
    if bar.range <= 0:
        return None
    ratio = bar.body / bar.range
    if ratio >= 0.1:
        return None
    return Match(PatternType.DOJI, _clamp(1 - ratio), 1)


def check_marubozu(bars: Sequence[Bar]) -> Optional[Match]:
    """Body of at least 80% of the range with shadows of at most 10% of the body."""
    bar = bars[-1]
    body = bar.body
    if bar.range <= 0 or body == 0:
        return None
    if body < 0.8 * bar.range:
        return None
    if bar.upper_shadow > 0.1 * body or bar.lower_shadow > 0.1 * body:
        return None

    kind = PatternType.MARUBOZU_BULLISH if bar.is_bullish else PatternType.MARUBOZU_BEARISH
    return Match(kind, _clamp(body / bar.range), 1)


def check_hammer(bars: Sequence[Bar]) -> Optional[Match]:
    """Long lower shadow, almost no upper shadow, after a bearish bar."""
    previous, bar = bars[-2], bars[-1]
    body = bar.body
    if bar.range <= 0 or not previous.is_bearish:
        return None
    if bar.lower_shadow < 2 * body or bar.upper_shadow > 0.1 * bar.range:
        return None

    strength = 1.0 if body == 0 else bar.lower_shadow / (2 * body)
    return Match(PatternType.HAMMER, _clamp(strength), 1)


def check_shooting_star(bars: Sequence[Bar]) -> Optional[Match]:
    """Long upper shadow on a small bearish body after a bullish bar."""
    previous, bar = bars[-2], bars[-1]
    body = bar.body
    if bar.range <= 0 or not (previous.is_bullish and bar.is_bearish):
        return None
    if bar.upper_shadow < 2 * body:
        return None
    if bar.lower_shadow > 0.3 * body or body >= 0.3 * bar.range:
        return None

    return Match(PatternType.SHOOTING_STAR, _clamp(bar.upper_shadow / (2 * body)), 1)


# -----------------------------------------------------------------------------
# Two-candle rules
# -----------------------------------------------------------------------------


def check_engulfing(bars: Sequence[Bar]) -> Optional[Match]:
    """Current body of opposite color wraps and exceeds the previous body."""
    previous, bar = bars[-2], bars[-1]
    if not _opposite_colors(previous, bar):
        return None
    if _body_low(bar) > _body_low(previous) or _body_high(bar) < _body_high(previous):
        return None
    if bar.body <= previous.body:
        return None

    kind = PatternType.ENGULFING_BULLISH if bar.is_bullish else PatternType.ENGULFING_BEARISH
    return Match(kind, _clamp(bar.body / (2 * previous.body)), 2)


def check_harami(bars: Sequence[Bar]) -> Optional[Match]:
    """Small opposite-color body contained in the previous body."""
    previous, bar = bars[-2], bars[-1]
    if not _opposite_colors(previous, bar):
        return None
    if _body_low(bar) < _body_low(previous) or _body_high(bar) > _body_high(previous):
        return None
    if bar.body > 0.6 * previous.body:
        return None

    kind = PatternType.HARAMI_BULLISH if bar.is_bullish else PatternType.HARAMI_BEARISH
    return Match(kind, _clamp(1 - bar.body / previous.body), 2)


def check_dark_cloud_cover(bars: Sequence[Bar]) -> Optional[Match]:
    """Bearish bar gapping above a bullish bar's high and closing deep into it."""
    previous, bar = bars[-2], bars[-1]
    if not (previous.is_bullish and bar.is_bearish):
        return None
    if bar.open <= previous.high:
        return None
    if bar.close >= _midpoint(previous) or bar.close > previous.open:
        return None

    penetration = (previous.close - bar.close) / (2 * previous.body)
    return Match(PatternType.DARK_CLOUD_COVER, _clamp(penetration), 2)


def check_piercing_line(bars: Sequence[Bar]) -> Optional[Match]:
    """Bullish bar gapping below a bearish bar's low and closing deep into it."""
    previous, bar = bars[-2], bars[-1]
    if not (previous.is_bearish and bar.is_bullish):
        return None
    if bar.open >= previous.low:
        return None
    if bar.close <= _midpoint(previous) or bar.close < previous.open:
        return None

    penetration = (bar.close - previous.close) / (2 * previous.body)
    return Match(PatternType.PIERCING_LINE, _clamp(penetration), 2)


# -----------------------------------------------------------------------------
# Three-candle rules
# -----------------------------------------------------------------------------


def _star_strength(first: Bar, middle: Bar, last: Bar) -> float:
    """Outer bodies against twice the middle body, 1.0 for a bodiless middle bar."""
    if middle.body == 0:
        return 1.0
    return _clamp((first.body + last.body) / (2 * middle.body))


def check_star(bars: Sequence[Bar]) -> Optional[Match]:
    """
    Morning Star: bearish bar, small middle body, bullish bar closing above
    the first bar's midpoint. Evening Star is the mirror image.
    """
    first, middle, last = bars[-3], bars[-2], bars[-1]
    if first.body == 0 or middle.body >= 0.3 * first.body:
        return None

    if first.is_bearish and last.is_bullish and last.close > _midpoint(first):
        return Match(PatternType.MORNING_STAR, _star_strength(first, middle, last), 3)
    if first.is_bullish and last.is_bearish and last.close < _midpoint(first):
        return Match(PatternType.EVENING_STAR, _star_strength(first, middle, last), 3)
    return None


def _is_clean_candle(bar: Bar) -> bool:
    return bar.upper_shadow <= 0.1 * bar.body and bar.lower_shadow <= 0.1 * bar.body


def _opens_near_close(bar: Bar, previous: Bar) -> bool:
    return abs(bar.open - previous.close) <= 0.01 * abs(previous.close)


def check_three_candles(bars: Sequence[Bar]) -> Optional[Match]:
    """
    Three White Soldiers / Three Black Crows: three same-color candles with
    small shadows, each opening within 1% of the prior close and closing
    progressively further in the same direction.
    """
    a, b, c = bars[-3], bars[-2], bars[-1]
    if not all(_is_clean_candle(bar) for bar in (a, b, c)):
        return None
    if not (_opens_near_close(b, a) and _opens_near_close(c, b)):
        return None

    if all(bar.is_bullish for bar in (a, b, c)) and a.close < b.close < c.close:
        kind = PatternType.THREE_WHITE_SOLDIERS
    elif all(bar.is_bearish for bar in (a, b, c)) and a.close > b.close > c.close:
        kind = PatternType.THREE_BLACK_CROWS
    else:
        return None

    # Same-color bars with shadows capped by the body, so b.body > 0
    return Match(kind, _clamp(c.body / b.body), 3)


# Rules grouped by the number of bars they inspect, single-candle shapes first
RULES: tuple[tuple[int, tuple[Rule, ...]], ...] = (
    (1, (check_doji, check_marubozu)),
    (
        2,
        (
            check_engulfing,
            check_harami,
            check_dark_cloud_cover,
            check_piercing_line,
            check_hammer,
            check_shooting_star,
        ),
    ),
    (3, (check_star, check_three_candles)),
)


# -----------------------------------------------------------------------------
# Scanner
# -----------------------------------------------------------------------------


def patterns_at(series: Series, position: int) -> list[Pattern]:
    """Evaluate every applicable rule for the window ending at ``position``."""
    found: list[Pattern] = []
    for size, rules in RULES:
        if position + 1 < size:
            continue
        window = series.bars[position + 1 - size: position + 1]
        for rule in rules:
            match = rule(window)
            if match is None:
                continue
            found.append(
                Pattern(
                    type=match.type,
                    position=position,
                    strength=match.strength,
                    bars=tuple(window[-match.span:]),
                )
            )
    return found


def detect_patterns(series: Series, limit: Optional[int] = None) -> list[Pattern]:
    """
    Detect candlestick patterns, most recent first.

    Args:
        series: Bars to scan
        limit: Stop after this many patterns (all when None)
    """
    patterns: list[Pattern] = []
    for position in range(len(series) - 1, -1, -1):
        patterns.extend(patterns_at(series, position))
        if limit is not None and len(patterns) >= limit:
            return patterns[:limit]
    return patterns
