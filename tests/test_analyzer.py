"""Tests for the multi-timeframe analyzer and batch processing."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from technical_signals.analyzer import (
    TechnicalAnalyzer,
    compute_volatility,
    format_change,
    format_symbol,
    percent_change,
)
from technical_signals.errors import InsufficientDataError, InvalidInputError, PriceSourceError
from technical_signals.models import (
    BandWidthState,
    CloudSignal,
    Condition,
    PriceAction,
    Series,
    TradeSignal,
    TrendDirection,
)
from technical_signals.sources.base import PriceSource

from conftest import noisy_series, trending_series


def make_source(windows: dict[str, Series], failing: set[str] = frozenset()) -> AsyncMock:
    """AsyncMock Price Source returning ``windows[timeframe]`` (trimmed to the limit)."""
    source = AsyncMock(spec=PriceSource)

    def get_historical_prices(identifier, timeframe, options=None):
        if identifier in failing:
            raise PriceSourceError(f"upstream failure for {identifier}")
        bars = list(windows[timeframe].bars)
        if options is not None and options.limit:
            bars = bars[-options.limit:]
        return bars

    source.get_historical_prices.side_effect = get_historical_prices
    return source


@pytest.fixture
def windows() -> dict[str, Series]:
    return {
        "5m": noisy_series(100),
        "1h": trending_series(48),
    }


class TestHelpers:
    """Tests for module-level helpers."""

    def test_format_symbol(self):
        assert format_symbol("btc") == "BTC-USD-PERP"
        assert format_symbol("ETH-USD-PERP") == "ETH-USD-PERP"
        assert format_symbol("eth-usd") == "eth-usd"

    def test_percent_change(self):
        series = Series.from_closes([100, 102, 104, 110])
        assert percent_change(series, 1) == pytest.approx(110 / 104 * 100 - 100)
        assert percent_change(series, 3) == pytest.approx(10.0)

    def test_percent_change_falls_back_to_first_bar(self):
        series = Series.from_closes([100, 105])
        assert percent_change(series, 6) == pytest.approx(5.0)

    def test_percent_change_zero_reference(self):
        assert percent_change(Series.from_closes([0.0, 5.0]), 1) == 0.0

    def test_percent_change_empty(self):
        with pytest.raises(InsufficientDataError):
            percent_change(Series(), 1)

    def test_format_change(self):
        assert format_change(1.234) == "+1.23%"
        assert format_change(0.0) == "+0.00%"
        assert format_change(-2.5) == "-2.50%"

    def test_volatility(self):
        assert compute_volatility(Series.from_closes([100.0] * 20)) == 0.0
        assert compute_volatility(Series.from_closes([100.0])) == 0.0
        # Returns alternate +10% / -9.0909%
        value = compute_volatility(Series.from_closes([100, 110, 100, 110, 100]), periods=12)
        assert value == pytest.approx(9.56, abs=0.01)

    def test_volatility_uses_leading_window(self):
        """Should measure the first bars, ignoring a flat tail."""
        closes = [100.0, 110.0] * 6 + [100.0] * 20
        # Eleven returns: six of +10%, five of -9.0909%
        assert compute_volatility(Series.from_closes(closes), periods=12) == pytest.approx(9.6, abs=0.01)

    def test_volatility_is_not_mean_centred(self):
        """A steady 1% climb has zero spread but an RMS of 1."""
        closes = [100.0 * 1.01 ** i for i in range(12)]
        assert compute_volatility(Series.from_closes(closes)) == pytest.approx(1.0)


class TestAnalyzeAsset:
    """Tests for a single asset analysis."""

    def test_full_analysis(self, windows, config):
        source = make_source(windows)
        analyzer = TechnicalAnalyzer(source, config=config)

        analysis = asyncio.run(analyzer.analyze_asset("btc"))

        assert analysis.asset_id == "btc"
        assert analysis.last_price == pytest.approx(windows["5m"].closes[-1])
        assert analysis.volatility >= 0
        assert analysis.changes.change_1h == format_change(147 / 146 * 100 - 100)

        long_term = analysis.key_signals.long_term
        assert long_term.support == pytest.approx(analysis.last_price * 0.95)
        assert long_term.resistance == pytest.approx(analysis.last_price * 1.05)

    def test_requests_formatted_symbol_and_windows(self, windows, config):
        source = make_source(windows)
        asyncio.run(TechnicalAnalyzer(source, config=config).analyze_asset("btc"))

        calls = source.get_historical_prices.call_args_list
        assert len(calls) == 3
        assert {c.args[0] for c in calls} == {"BTC-USD-PERP"}
        limits = sorted((c.args[1], c.args[2].limit) for c in calls)
        assert limits == [("1h", 30), ("1h", 48), ("5m", 100)]
        assert all(c.args[2].price_kind == "mark" for c in calls)

    def test_json_contract(self, windows, config):
        source = make_source(windows)
        analysis = asyncio.run(TechnicalAnalyzer(source, config=config).analyze_asset("btc"))

        payload = analysis.to_json_dict()
        assert set(payload) == {"assetId", "timestamp", "lastPrice", "changes", "keySignals", "volatility"}
        assert set(payload["changes"]) == {"30min", "1h", "4h"}
        assert set(payload["keySignals"]) == {"shortTerm", "mediumTerm", "longTerm"}
        assert payload["keySignals"]["shortTerm"]["timeframe"] == "5m"
        assert "keltnerChannel" in payload["keySignals"]["mediumTerm"]["technicals"]

    def test_empty_window_raises(self, windows, config):
        windows["5m"] = Series()
        source = make_source(windows)

        with pytest.raises(InsufficientDataError):
            asyncio.run(TechnicalAnalyzer(source, config=config).analyze_asset("btc"))


class TestShortTerm:
    """Tests for short-term signals."""

    def test_momentum_readings(self, noisy, config):
        analyzer = TechnicalAnalyzer(AsyncMock(spec=PriceSource), config=config)
        short = analyzer.analyze_short_term(noisy)

        assert 0 <= short.momentum.rsi.value <= 100
        assert 0 <= short.momentum.macd.strength <= 1
        assert 0 <= short.momentum.stochastic.k <= 100
        assert len(short.patterns.recent) <= 2

    def test_short_window_uses_defaults(self, config):
        analyzer = TechnicalAnalyzer(AsyncMock(spec=PriceSource), config=config)
        short = analyzer.analyze_short_term(noisy_series(20))

        assert short.patterns.recent == []
        assert short.momentum.rsi.value == 50
        assert short.momentum.rsi.condition == Condition.NEUTRAL
        assert short.momentum.macd.signal == TradeSignal.NEUTRAL
        assert short.momentum.macd.strength == 0
        assert (short.momentum.stochastic.k, short.momentum.stochastic.d) == (50, 50)

    def test_uptrend_is_overbought(self, config):
        analyzer = TechnicalAnalyzer(AsyncMock(spec=PriceSource), config=config)
        short = analyzer.analyze_short_term(trending_series(40, timeframe="5m"))

        assert short.momentum.rsi.value == 100
        assert short.momentum.rsi.condition == Condition.OVERBOUGHT
        assert short.momentum.macd.signal == TradeSignal.BUY


class TestMediumTerm:
    """Tests for medium-term trend and technicals."""

    def test_uptrend(self, config):
        analyzer = TechnicalAnalyzer(AsyncMock(spec=PriceSource), config=config)
        medium = analyzer.analyze_medium_term(trending_series(48))

        assert medium.trend.direction == TrendDirection.BULLISH
        assert medium.trend.crossover is False
        assert 0 < medium.trend.strength <= 1
        assert medium.technicals.adx.trending is True
        assert medium.technicals.adx.value == pytest.approx(1.0)

    def test_cloud_falls_back_on_48_bars(self, config):
        """Senkou Span B needs 52 bars, so a 48-bar window reports a neutral cloud."""
        analyzer = TechnicalAnalyzer(AsyncMock(spec=PriceSource), config=config)
        medium = analyzer.analyze_medium_term(trending_series(48))

        assert medium.technicals.ichimoku.signal == CloudSignal.NEUTRAL
        assert medium.technicals.ichimoku.conversion == 0.0
        # Other technicals are still computed
        assert medium.technicals.pivots.pivot != 0.0

    def test_cloud_computed_on_52_bars(self, config):
        analyzer = TechnicalAnalyzer(AsyncMock(spec=PriceSource), config=config)
        medium = analyzer.analyze_medium_term(trending_series(60))
        assert medium.technicals.ichimoku.signal == CloudSignal.STRONG_BUY

    def test_crossover_sets_direction(self, config):
        closes = [100.0 - i for i in range(40)] + [70.0, 90.0, 130.0]
        analyzer = TechnicalAnalyzer(AsyncMock(spec=PriceSource), config=config)

        trend = analyzer.medium_trend(Series.from_closes(closes, timeframe="1h"))
        assert trend.direction == TrendDirection.BULLISH
        assert trend.crossover is True

    def test_flat_series_is_neutral(self, config):
        analyzer = TechnicalAnalyzer(AsyncMock(spec=PriceSource), config=config)
        trend = analyzer.medium_trend(Series.from_closes([100.0] * 48, timeframe="1h"))

        assert trend.direction == TrendDirection.NEUTRAL
        assert trend.strength == 0.0

    def test_short_series_uses_fallback_heuristic(self, config):
        analyzer = TechnicalAnalyzer(AsyncMock(spec=PriceSource), config=config)
        trend = analyzer.medium_trend(Series.from_closes([100, 99, 98, 97, 96, 95], timeframe="1h"))
        assert trend.direction == TrendDirection.BEARISH

    def test_trend_momentum(self, config):
        analyzer = TechnicalAnalyzer(AsyncMock(spec=PriceSource), config=config)
        momentum = analyzer.analyze_medium_term(trending_series(48)).trend.momentum

        assert momentum.value == pytest.approx(14 / 133)
        assert momentum.period == 14
        # A 10% ROC never reaches the 0.5 sustain threshold
        assert momentum.sustained_periods == 0

    def test_trend_momentum_sustained(self, config):
        """Should count every trailing ROC clipped at 1 as sustained."""
        closes = [100.0 * 1.1 ** i for i in range(40)]
        analyzer = TechnicalAnalyzer(AsyncMock(spec=PriceSource), config=config)

        momentum = analyzer.analyze_medium_term(Series.from_closes(closes, timeframe="1h")).trend.momentum

        assert momentum.value == 1.0
        assert momentum.sustained_periods == 40 - 14

    def test_price_action_uptrend(self, config):
        analyzer = TechnicalAnalyzer(AsyncMock(spec=PriceSource), config=config)
        action = analyzer.analyze_medium_term(trending_series(48)).trend.price.action

        assert action.direction == PriceAction.UPTREND
        assert 0 < action.strength < 1
        assert action.tested_levels.recent == 147.0
        assert action.tested_levels.count == 1

    def test_price_action_flat(self, config):
        """Should report a sideways market whose every close tests the last price."""
        analyzer = TechnicalAnalyzer(AsyncMock(spec=PriceSource), config=config)
        action = analyzer.analyze_medium_term(
            Series.from_closes([100.0] * 48, timeframe="1h")
        ).trend.price.action

        assert action.direction == PriceAction.SIDEWAYS
        assert action.strength == 0.0
        assert action.tested_levels.count == 48

    def test_band_width_expanding(self, config):
        closes = [100.0] * 30 + [120.0]
        analyzer = TechnicalAnalyzer(AsyncMock(spec=PriceSource), config=config)

        volatility = analyzer.analyze_medium_term(
            Series.from_closes(closes, timeframe="1h")
        ).trend.price.volatility

        assert volatility.state == BandWidthState.EXPANDING
        assert volatility.bb_width > 0

    def test_band_width_stable_on_steady_trend(self, config):
        analyzer = TechnicalAnalyzer(AsyncMock(spec=PriceSource), config=config)
        volatility = analyzer.analyze_medium_term(trending_series(48)).trend.price.volatility
        assert volatility.state == BandWidthState.STABLE

    def test_short_window_price_readings_fall_back(self, config):
        """Should keep neutral price readings when EMA26 and Bollinger cannot be computed."""
        analyzer = TechnicalAnalyzer(AsyncMock(spec=PriceSource), config=config)
        trend = analyzer.analyze_medium_term(trending_series(15)).trend

        assert trend.price.action.direction == PriceAction.SIDEWAYS
        assert trend.price.action.tested_levels.count == 0
        assert trend.price.volatility.bb_width == 0.0
        assert trend.momentum.period == 14

    def test_trend_json_layout(self, config):
        analyzer = TechnicalAnalyzer(AsyncMock(spec=PriceSource), config=config)
        trend = analyzer.analyze_medium_term(trending_series(48)).trend.to_json_dict()

        assert set(trend["momentum"]) == {"value", "period", "sustainedPeriods"}
        assert set(trend["price"]["action"]["testedLevels"]) == {"recent", "count"}
        assert set(trend["price"]["volatility"]) == {"bbWidth", "state"}


class TestBatch:
    """Tests for batch processing with failure isolation."""

    def test_one_failure_is_isolated(self, windows, config):
        assets = ["btc", "eth", "bad", "sol", "doge", "avax", "link"]
        source = make_source(windows, failing={"BAD-USD-PERP"})
        analyzer = TechnicalAnalyzer(source, config=config)

        result = asyncio.run(analyzer.analyze_batch(assets))

        assert len(result.successful) == len(assets) - 1
        assert len(result.failed) == 1
        assert result.failed[0].asset_id == "bad"
        assert "upstream failure" in result.failed[0].error
        assert result.metadata.total_processed == len(assets)
        assert result.metadata.success_count == len(assets) - 1
        assert result.metadata.failure_count == 1
        assert result.has_failures
        assert result.get("eth") is not None
        assert result.get("bad") is None

    def test_concurrency_cap(self, windows, config):
        in_flight = 0
        peak = 0

        async def slow_fetch(identifier, timeframe, options=None):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0)
            in_flight -= 1
            return list(windows[timeframe].bars[-options.limit:])

        source = AsyncMock(spec=PriceSource)
        source.get_historical_prices.side_effect = slow_fetch
        analyzer = TechnicalAnalyzer(source, config=config)

        result = asyncio.run(analyzer.analyze_batch([f"a{i}" for i in range(12)]))

        assert result.metadata.success_count == 12
        # Three windows per asset, five assets at a time
        assert peak <= 3 * config.batch_concurrency

    def test_empty_batch(self, config):
        analyzer = TechnicalAnalyzer(AsyncMock(spec=PriceSource), config=config)
        with pytest.raises(InvalidInputError):
            asyncio.run(analyzer.analyze_batch([]))

    def test_metadata_serialises_camel_case(self, windows, config):
        analyzer = TechnicalAnalyzer(make_source(windows), config=config)
        payload = asyncio.run(analyzer.analyze_batch(["btc"])).to_json_dict()

        assert set(payload["metadata"]) == {
            "totalProcessed",
            "successCount",
            "failureCount",
            "processingTimeMs",
        }
