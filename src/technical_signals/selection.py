"""
Preference-weighted signal selection.

Trims a full ``KeySignals`` block down to the handful of indicators most
relevant to a consumer's horizon. ``analysis_period`` runs from 0 (short-term
only) to 5 (medium-term only).
"""

from dataclasses import dataclass
from typing import Any

from technical_signals.models.analysis import KeySignals

MAX_SIGNALS = 5
MAX_PERIOD = 5

SHORT_TERM_WEIGHTS = {
    "rsi": 1.0,
    "macd": 0.9,
    "stochastic": 0.8,
    "patterns": 0.7,
}
MEDIUM_TERM_WEIGHTS = {
    "trend": 1.0,
    "ichimoku": 0.9,
    "adx": 0.8,
    "keltnerChannel": 0.7,
    "atr": 0.6,
}


@dataclass
class SignalCandidate:
    horizon: str  # "shortTerm" or "mediumTerm"
    category: str
    weight: float
    data: Any


def rank_signals(key_signals: KeySignals, analysis_period: float) -> list[SignalCandidate]:
    """Weight every available signal and return the top ones, heaviest first."""
    period = min(max(analysis_period, 0), MAX_PERIOD)
    short_weight = (MAX_PERIOD - period) / MAX_PERIOD
    medium_weight = period / MAX_PERIOD

    short = key_signals.short_term.to_json_dict()
    medium = key_signals.medium_term.to_json_dict()

    short_data = {
        "rsi": short["momentum"]["rsi"],
        "macd": short["momentum"]["macd"],
        "stochastic": short["momentum"]["stochastic"],
        "patterns": short["patterns"]["recent"],
    }
    medium_data = {
        "trend": medium["trend"],
        "ichimoku": medium["technicals"]["ichimoku"],
        "adx": medium["technicals"]["adx"],
        "keltnerChannel": medium["technicals"]["keltnerChannel"],
        "atr": medium["technicals"]["atr"],
    }

    candidates = [
        SignalCandidate("shortTerm", name, short_weight * w, short_data[name])
        for name, w in SHORT_TERM_WEIGHTS.items()
        if name != "patterns" or short_data["patterns"]
    ]
    candidates += [
        SignalCandidate("mediumTerm", name, medium_weight * w, medium_data[name])
        for name, w in MEDIUM_TERM_WEIGHTS.items()
    ]

    candidates.sort(key=lambda c: c.weight, reverse=True)
    return candidates[:MAX_SIGNALS]


def select_signals(key_signals: KeySignals, analysis_period: float = 2) -> dict[str, Any]:
    """
    Build the reduced key-signals payload.

    Long-term levels are always dropped. The result mirrors the camelCase
    layout of ``KeySignals`` with only the selected indicators filled in.
    """
    result: dict[str, Any] = {
        "shortTerm": {"momentum": {}, "patterns": {"recent": []}},
        "mediumTerm": {"trend": {}, "technicals": {}},
    }

    for signal in rank_signals(key_signals, analysis_period):
        if signal.horizon == "shortTerm":
            if signal.category == "patterns":
                result["shortTerm"]["patterns"]["recent"] = signal.data
            else:
                result["shortTerm"]["momentum"][signal.category] = signal.data
        elif signal.category == "trend":
            result["mediumTerm"]["trend"] = signal.data
        else:
            result["mediumTerm"]["technicals"][signal.category] = signal.data

    return result
