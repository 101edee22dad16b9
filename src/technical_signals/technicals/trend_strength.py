"""Directional Movement Index and Average Directional Index."""

from dataclasses import dataclass

import numpy as np

from technical_signals.errors import InsufficientDataError
from technical_signals.models.bar import Series
from technical_signals.technicals.common import safe_ratio, true_range, wilder_smooth
from technical_signals.technicals.momentum import sustained_periods

TRENDING_THRESHOLD = 25.0


@dataclass
class DMIResult:
    """+DI and -DI, aligned to the Wilder-smoothed True Range."""

    plus_di: np.ndarray
    minus_di: np.ndarray


@dataclass
class ADXResult:
    """Latest ADX/DI readings plus the full ADX series."""

    adx: float
    plus_di: float
    minus_di: float
    trending: bool
    sustained_periods: int
    series: np.ndarray


def directional_movement(series: Series) -> tuple[np.ndarray, np.ndarray]:
    """
    +DM and -DM for each consecutive bar pair.

    The larger of the up-move and down-move is kept when positive; the
    other side is 0.
    """
    highs = series.highs
    lows = series.lows
    up_move = highs[1:] - highs[:-1]
    down_move = lows[:-1] - lows[1:]

    plus_dm = np.where((up_move > down_move) & (up_move > 0), up_move, 0.0)
    minus_dm = np.where((down_move > up_move) & (down_move > 0), down_move, 0.0)
    return plus_dm, minus_dm


def compute_dmi(series: Series, period: int = 14) -> DMIResult:
    """
    Compute +DI and -DI.

    Raises:
        InsufficientDataError: fewer than ``period + 1`` bars
    """
    if len(series) < period + 1:
        raise InsufficientDataError(
            f"DMI needs {period + 1} bars, got {len(series)}"
        )

    tr = true_range(series)
    plus_dm, minus_dm = directional_movement(series)

    smoothed_tr = wilder_smooth(tr, period)
    plus_di = safe_ratio(wilder_smooth(plus_dm, period), smoothed_tr) * 100
    minus_di = safe_ratio(wilder_smooth(minus_dm, period), smoothed_tr) * 100

    return DMIResult(plus_di=plus_di, minus_di=minus_di)


def compute_adx(series: Series, period: int = 14) -> ADXResult:
    """
    Compute ADX as the Wilder-smoothed DX.

    ``DX = 100 * |+DI - -DI| / (+DI + -DI)`` resolves to 0 when both DIs are 0.

    Raises:
        InsufficientDataError: fewer than ``2 * period`` bars
    """
    if len(series) < 2 * period:
        raise InsufficientDataError(
            f"ADX needs {2 * period} bars, got {len(series)}"
        )

    dmi = compute_dmi(series, period)
    dx = safe_ratio(np.abs(dmi.plus_di - dmi.minus_di), dmi.plus_di + dmi.minus_di) * 100
    adx = wilder_smooth(dx, period)

    last_adx = float(adx[-1])
    return ADXResult(
        adx=last_adx,
        plus_di=float(dmi.plus_di[-1]),
        minus_di=float(dmi.minus_di[-1]),
        trending=last_adx > TRENDING_THRESHOLD,
        sustained_periods=sustained_periods(adx, TRENDING_THRESHOLD, "up"),
        series=adx,
    )
