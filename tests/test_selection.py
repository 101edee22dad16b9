"""Tests for preference-weighted signal selection."""

import pytest

from technical_signals.models import (
    KeySignals,
    LongTermAnalysis,
    MediumTermAnalysis,
    PatternSummary,
    PatternType,
    RecentPatterns,
    ShortTermAnalysis,
)
from technical_signals.selection import rank_signals, select_signals


@pytest.fixture
def key_signals() -> KeySignals:
    return KeySignals(
        short_term=ShortTermAnalysis(
            patterns=RecentPatterns(
                recent=[PatternSummary(type=PatternType.DOJI, strength=0.9)]
            )
        ),
        medium_term=MediumTermAnalysis(),
        long_term=LongTermAnalysis(support=95.0, resistance=105.0),
    )


class TestRankSignals:
    """Tests for candidate weighting."""

    def test_short_term_preference(self, key_signals):
        """Period 0 should keep the four short-term signals first."""
        ranked = rank_signals(key_signals, 0)

        assert len(ranked) == 5
        assert [c.category for c in ranked[:4]] == ["rsi", "macd", "stochastic", "patterns"]
        assert ranked[0].weight == pytest.approx(1.0)
        assert ranked[4].weight == 0.0

    def test_medium_term_preference(self, key_signals):
        """Period 5 should keep exactly the medium-term signals."""
        ranked = rank_signals(key_signals, 5)

        assert [c.category for c in ranked] == ["trend", "ichimoku", "adx", "keltnerChannel", "atr"]
        assert all(c.horizon == "mediumTerm" for c in ranked)

    def test_balanced_weights(self, key_signals):
        """Period 2 weights short-term by 0.6 and medium-term by 0.4."""
        ranked = rank_signals(key_signals, 2)
        weights = {(c.horizon, c.category): c.weight for c in ranked}

        assert weights[("shortTerm", "rsi")] == pytest.approx(0.6)
        assert weights[("shortTerm", "macd")] == pytest.approx(0.54)
        assert weights[("shortTerm", "stochastic")] == pytest.approx(0.48)
        assert weights[("shortTerm", "patterns")] == pytest.approx(0.42)
        assert weights[("mediumTerm", "trend")] == pytest.approx(0.4)

    def test_period_is_clamped(self, key_signals):
        assert [c.category for c in rank_signals(key_signals, 12)] == [
            c.category for c in rank_signals(key_signals, 5)
        ]
        assert [c.category for c in rank_signals(key_signals, -3)] == [
            c.category for c in rank_signals(key_signals, 0)
        ]

    def test_empty_patterns_are_not_candidates(self, key_signals):
        key_signals.short_term.patterns.recent = []
        assert "patterns" not in [c.category for c in rank_signals(key_signals, 0)]


class TestSelectSignals:
    """Tests for the reduced payload."""

    def test_layout(self, key_signals):
        selected = select_signals(key_signals, 0)

        assert "longTerm" not in selected
        assert set(selected["shortTerm"]["momentum"]) == {"rsi", "macd", "stochastic"}
        assert selected["shortTerm"]["patterns"]["recent"] == [{"type": "DOJI", "strength": 0.9}]
        assert selected["mediumTerm"]["trend"]["direction"] == "neutral"
        assert selected["mediumTerm"]["technicals"] == {}

    def test_medium_only(self, key_signals):
        selected = select_signals(key_signals, 5)

        assert selected["shortTerm"]["momentum"] == {}
        assert selected["shortTerm"]["patterns"]["recent"] == []
        assert set(selected["mediumTerm"]["technicals"]) == {"ichimoku", "adx", "keltnerChannel", "atr"}
