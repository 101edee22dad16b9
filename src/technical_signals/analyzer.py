"""
Multi-timeframe technical analysis.

Pulls short, medium and long bar windows from a Price Source, runs the
indicator engines over them and assembles an ``AssetAnalysis``. Batch runs
isolate per-asset failures into ``AnalysisError`` records.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Callable, Optional, Sequence, TypeVar, Union

import numpy as np

from technical_signals.config import Config, get_config
from technical_signals.errors import (
    InsufficientDataError,
    InvalidInputError,
    TechnicalAnalysisError,
)
from technical_signals.models import (
    ADXReading,
    AnalysisError,
    AssetAnalysis,
    ATRReading,
    BandWidthReading,
    BatchAnalysisResult,
    BatchMetadata,
    CloudReading,
    KeltnerReading,
    KeySignals,
    LevelTouches,
    LongTermAnalysis,
    MACDReading,
    MediumTermAnalysis,
    MediumTermTechnicals,
    MomentumReadings,
    PatternSummary,
    PivotReading,
    PriceAction,
    PriceActionReading,
    PriceChanges,
    PriceReading,
    RecentPatterns,
    ROCReading,
    RSIReading,
    Series,
    ShortTermAnalysis,
    StochasticReading,
    TrendDirection,
    TrendMomentum,
    TrendReading,
    VolumeDistribution,
    VolumeReading,
    VolumeTrend,
)
from technical_signals.sources.base import PriceOptions, PriceSource
from technical_signals.technicals.common import safe_ratio
from technical_signals.technicals.interfaces import Engines
from technical_signals.technicals.momentum import sustained_periods

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Concentration bounds for the volume distribution label
HIGH_CONCENTRATION = 0.7
LOW_CONCENTRATION = 0.3


def format_symbol(asset: str) -> str:
    """Map a bare asset name to its perpetual market symbol (``btc`` -> ``BTC-USD-PERP``)."""
    return asset if "-" in asset else f"{asset.upper()}-USD-PERP"


def percent_change(series: Series, periods: int) -> float:
    """
    Percent change of the last close against the close ``periods`` bars back.

    Falls back to the first bar when the series is too short and to 0 when
    the reference close is 0.
    """
    if series.is_empty:
        raise InsufficientDataError("Price data is required")

    closes = series.closes
    current = closes[-1]
    reference = closes[-1 - periods] if len(closes) > periods else closes[0]
    if reference == 0:
        return 0.0
    return float((current - reference) / reference * 100)


def format_change(change: float) -> str:
    sign = "+" if change >= 0 else ""
    return f"{sign}{change:.2f}%"


def compute_volatility(series: Series, periods: int = 12) -> float:
    """
    Root mean square of the percent returns within the leading ``periods`` bars.

    Returns are not mean-centred. Fewer than two bars give 0.
    """
    closes = series.closes[:periods]
    if len(closes) < 2:
        return 0.0
    returns = safe_ratio(np.diff(closes), closes[:-1]) * 100
    return round(float(np.sqrt(np.mean(returns ** 2))), 2)


def _now_ms() -> int:
    return int(datetime.now(timezone.utc).timestamp() * 1000)


class TechnicalAnalyzer:
    """
    Assemble multi-timeframe analyses for assets.

    Usage:
        async with CsvPriceSource("./data") as source:
            analyzer = TechnicalAnalyzer(source)
            result = await analyzer.analyze_batch(["BTC", "ETH"])
    """

    def __init__(
        self,
        price_source: PriceSource,
        config: Optional[Config] = None,
        engines: Optional[Engines] = None,
        symbol_formatter: Callable[[str], str] = format_symbol,
    ):
        self.price_source = price_source
        self.config = config or get_config()
        self.engines = engines or Engines()
        self.symbol_formatter = symbol_formatter

    # -------------------------------------------------------------------------
    # Data retrieval
    # -------------------------------------------------------------------------

    async def _fetch(self, symbol: str, timeframe: str, limit: int) -> Series:
        bars = await self.price_source.get_historical_prices(
            symbol,
            timeframe,
            PriceOptions(limit=limit, price_kind=self.config.price_kind),
        )
        return Series.from_bars(bars, asset=symbol, timeframe=timeframe)

    def _fallback(self, label: str, compute: Callable[[], T], default: T) -> T:
        """Run one sub-signal, substituting its neutral default on engine errors."""
        try:
            return compute()
        except TechnicalAnalysisError as e:
            logger.warning(f"{label} unavailable, using neutral default: {e}")
            return default

    # -------------------------------------------------------------------------
    # Single asset
    # -------------------------------------------------------------------------

    async def analyze_asset(self, asset: str) -> AssetAnalysis:
        """
        Analyse one asset across the short, medium and long windows.

        Raises:
            InsufficientDataError: if any window comes back empty
            PriceSourceError: if the Price Source fails
        """
        cfg = self.config
        symbol = self.symbol_formatter(asset)
        logger.info(f"Analyzing {asset} ({symbol})")
        start_time = datetime.now(timezone.utc)

        short, medium, long_ = await asyncio.gather(
            self._fetch(symbol, cfg.short_timeframe, cfg.short_limit),
            self._fetch(symbol, cfg.medium_timeframe, cfg.medium_limit),
            self._fetch(symbol, cfg.long_timeframe, cfg.long_limit),
        )
        for window in (short, medium, long_):
            if window.is_empty:
                raise InsufficientDataError(
                    f"No {window.timeframe} price data for {symbol}"
                )

        last_price = float(short.last().close)

        analysis = AssetAnalysis(
            asset_id=asset,
            timestamp=_now_ms(),
            last_price=last_price,
            changes=PriceChanges(
                change_30min=format_change(percent_change(short, cfg.change_30min_bars)),
                change_1h=format_change(percent_change(medium, cfg.change_1h_bars)),
                change_4h=format_change(percent_change(long_, cfg.change_4h_bars)),
            ),
            key_signals=KeySignals(
                short_term=self.analyze_short_term(short),
                medium_term=self.analyze_medium_term(medium),
                long_term=self.analyze_long_term(last_price),
            ),
            volatility=compute_volatility(short, cfg.volatility_periods),
        )

        elapsed_ms = int((datetime.now(timezone.utc) - start_time).total_seconds() * 1000)
        logger.info(f"Analysis of {asset} complete: price={last_price}, time={elapsed_ms}ms")
        return analysis

    # -------------------------------------------------------------------------
    # Short term
    # -------------------------------------------------------------------------

    def analyze_short_term(self, series: Series) -> ShortTermAnalysis:
        """Recent patterns and momentum on the short window."""
        cfg = self.config
        if len(series) < cfg.short_term_min_bars:
            logger.warning(
                f"Short-term window has {len(series)} bars "
                f"(< {cfg.short_term_min_bars}), using neutral defaults"
            )
            return ShortTermAnalysis(timeframe=series.timeframe or cfg.short_timeframe)

        patterns = self.engines.patterns.detect_patterns(series, limit=cfg.pattern_count)

        return ShortTermAnalysis(
            timeframe=series.timeframe or cfg.short_timeframe,
            patterns=RecentPatterns(
                recent=[PatternSummary(type=p.type, strength=p.strength) for p in patterns]
            ),
            momentum=MomentumReadings(
                rsi=self._fallback("RSI", lambda: self._rsi_reading(series), RSIReading()),
                macd=self._fallback("MACD", lambda: self._macd_reading(series), MACDReading()),
                stochastic=self._fallback(
                    "Stochastic", lambda: self._stochastic_reading(series), StochasticReading()
                ),
            ),
        )

    def _rsi_reading(self, series: Series) -> RSIReading:
        cfg = self.config
        momentum = self.engines.momentum
        rsi = momentum.compute_rsi(series, cfg.rsi_period)
        if rsi.size == 0:
            raise InsufficientDataError(f"RSI needs {cfg.rsi_period + 1} bars")

        value = float(rsi[-1])
        return RSIReading(
            value=value,
            condition=momentum.rsi_condition(value, cfg.rsi_oversold, cfg.rsi_overbought),
        )

    def _macd_reading(self, series: Series) -> MACDReading:
        cfg = self.config
        momentum = self.engines.momentum
        macd = momentum.compute_macd(series, cfg.macd_fast, cfg.macd_slow, cfg.macd_signal)

        histogram = float(macd.histogram[-1])
        price = float(series.last().close)
        return MACDReading(
            signal=momentum.macd_signal(histogram, price),
            strength=momentum.macd_strength(histogram, price),
        )

    def _stochastic_reading(self, series: Series) -> StochasticReading:
        cfg = self.config
        momentum = self.engines.momentum
        stoch = momentum.compute_stochastic(series, cfg.stochastic_period)
        if stoch.d.size == 0:
            raise InsufficientDataError(
                f"Stochastic %D needs {cfg.stochastic_period + 2} bars"
            )

        k, d = float(stoch.k[-1]), float(stoch.d[-1])
        return StochasticReading(
            k=k,
            d=d,
            condition=momentum.stochastic_condition(
                k, d, cfg.stochastic_oversold, cfg.stochastic_overbought
            ),
        )

    # -------------------------------------------------------------------------
    # Medium term
    # -------------------------------------------------------------------------

    def analyze_medium_term(self, series: Series) -> MediumTermAnalysis:
        """Trend plus supporting technicals on the medium window."""
        defaults = MediumTermTechnicals()
        technicals = MediumTermTechnicals(
            adx=self._fallback("ADX", lambda: self._adx_reading(series), defaults.adx),
            roc=self._fallback("ROC", lambda: self._roc_reading(series), defaults.roc),
            ichimoku=self._fallback(
                "Ichimoku", lambda: self._cloud_reading(series), defaults.ichimoku
            ),
            pivots=self._fallback("Pivots", lambda: self._pivot_reading(series), defaults.pivots),
            volume=self._fallback("Volume", lambda: self._volume_reading(series), defaults.volume),
            keltner_channel=self._fallback(
                "Keltner", lambda: self._keltner_reading(series), defaults.keltner_channel
            ),
            atr=self._fallback("ATR", lambda: self._atr_reading(series), defaults.atr),
        )

        trend = self.medium_trend(series).model_copy(
            update={
                "momentum": self._fallback(
                    "Trend momentum", lambda: self._trend_momentum(series), TrendMomentum()
                ),
                "price": PriceReading(
                    action=self._fallback(
                        "Price action", lambda: self._price_action(series), PriceActionReading()
                    ),
                    volatility=self._fallback(
                        "Bollinger width", lambda: self._band_width(series), BandWidthReading()
                    ),
                ),
            }
        )

        return MediumTermAnalysis(
            timeframe=series.timeframe or self.config.medium_timeframe,
            trend=trend,
            technicals=technicals,
        )

    def medium_trend(self, series: Series) -> TrendReading:
        """
        Direction from an EMA12/EMA26 crossover on the latest bar, otherwise
        from the percent change over the fallback lookback.

        Strength is the mean absolute bar-over-bar percent change, capped at 1.
        """
        cfg = self.config
        if len(series) < 2:
            return TrendReading()

        closes = series.closes
        bar_changes = safe_ratio(np.diff(closes), closes[:-1]) * 100
        strength = min(float(np.mean(np.abs(bar_changes))), 1.0)

        ma = self.engines.moving_averages
        try:
            crossover = ma.detect_crossover(
                ma.compute_ema(series, 12), ma.compute_ema(series, 26)
            )
        except TechnicalAnalysisError as e:
            logger.debug(f"EMA crossover unavailable: {e}")
            crossover = None

        if crossover is not None and crossover.type is not None:
            return TrendReading(direction=crossover.type, strength=strength, crossover=True)

        change = percent_change(series, cfg.medium_fallback_lookback)
        if change > cfg.medium_fallback_threshold:
            direction = TrendDirection.BULLISH
        elif change < -cfg.medium_fallback_threshold:
            direction = TrendDirection.BEARISH
        else:
            direction = TrendDirection.NEUTRAL
        return TrendReading(direction=direction, strength=strength)

    def _trend_momentum(self, series: Series) -> TrendMomentum:
        cfg = self.config
        roc = self.engines.momentum.compute_roc(series, cfg.roc_period)
        if roc.normalized.size == 0:
            raise InsufficientDataError(f"ROC needs {cfg.roc_period + 1} bars")

        value = float(roc.normalized[-1])
        return TrendMomentum(
            value=value,
            period=cfg.roc_period,
            sustained_periods=sustained_periods(
                roc.normalized, cfg.roc_sustain_threshold, "up" if value > 0 else "down"
            ),
        )

    def _price_action(self, series: Series) -> PriceActionReading:
        """EMA12/EMA26 side and gap, plus how often closes revisited the latest price."""
        ma = self.engines.moving_averages
        fast = float(ma.compute_ema(series, 12)[-1])
        slow = float(ma.compute_ema(series, 26)[-1])
        if fast > slow:
            direction = PriceAction.UPTREND
        elif fast < slow:
            direction = PriceAction.DOWNTREND
        else:
            direction = PriceAction.SIDEWAYS

        level = round(float(series.last().close), 2)
        touches = 0
        if level != 0:
            touches = int(np.count_nonzero(np.abs(series.closes - level) < 0.001 * abs(level)))

        return PriceActionReading(
            direction=direction,
            strength=min(abs(fast - slow) / abs(slow), 1.0) if slow else 0.0,
            tested_levels=LevelTouches(recent=level, count=touches),
        )

    def _band_width(self, series: Series) -> BandWidthReading:
        cfg = self.config
        ma = self.engines.moving_averages
        bands = ma.compute_bollinger(series, cfg.bollinger_period, cfg.bollinger_std_dev)
        if bands.width.size < 2:
            raise InsufficientDataError(
                f"Bollinger width change needs {cfg.bollinger_period + 1} bars"
            )

        width, previous = float(bands.width[-1]), float(bands.width[-2])
        return BandWidthReading(bb_width=width, state=ma.band_width_state(width, previous))

    def _adx_reading(self, series: Series) -> ADXReading:
        result = self.engines.trend_strength.compute_adx(series, self.config.adx_period)
        return ADXReading(
            value=result.adx / 100,
            trending=result.trending,
            sustained_periods=result.sustained_periods,
        )

    def _roc_reading(self, series: Series) -> ROCReading:
        period = self.config.roc_period
        momentum = self.engines.momentum
        roc = momentum.compute_roc(series, period)
        if roc.values.size == 0:
            raise InsufficientDataError(f"ROC needs {period + 1} bars")

        normalized = float(roc.normalized[-1])
        return ROCReading(
            value=normalized,
            state=momentum.roc_signal(float(roc.values[-1])).condition,
            period=period,
        )

    def _cloud_reading(self, series: Series) -> CloudReading:
        result = self.engines.cloud.compute_cloud(series)
        return CloudReading(
            signal=result.signal,
            cloud_state=result.cloud_state,
            conversion=result.tenkan,
            base=result.kijun,
            price_distance=result.price_distance,
        )

    def _pivot_reading(self, series: Series) -> PivotReading:
        levels = self.engines.pivots.compute_pivots(series)
        return PivotReading(
            pivot=levels.pivot,
            r1=levels.r1,
            s1=levels.s1,
            breakout=levels.breakout,
            r1_distance=levels.r1_distance,
        )

    def _volume_reading(self, series: Series) -> VolumeReading:
        analysis = self.engines.volume.analyze_volume(
            series, series.timeframe or self.config.medium_timeframe,
            self.config.volume_price_step,
        )

        concentration = analysis.profile.concentration
        if concentration > HIGH_CONCENTRATION:
            distribution = VolumeDistribution.HIGH
        elif concentration < LOW_CONCENTRATION:
            distribution = VolumeDistribution.LOW
        else:
            distribution = VolumeDistribution.NEUTRAL

        volumes = series.volumes
        direction = "up" if analysis.trend.direction == VolumeTrend.INCREASING else "down"
        return VolumeReading(
            trend=analysis.trend.direction,
            significance=analysis.significance,
            distribution=distribution,
            activity=analysis.trend.strength,
            sustained_periods=sustained_periods(volumes, float(volumes.mean()), direction),
        )

    def _keltner_reading(self, series: Series) -> KeltnerReading:
        cfg = self.config
        volatility = self.engines.volatility
        channels = volatility.compute_keltner(
            series, cfg.keltner_ema_period, cfg.keltner_atr_period, cfg.keltner_multiplier
        )
        if channels.upper.size == 0:
            raise InsufficientDataError("Keltner channels need at least 2 bars")

        n = channels.upper.size
        upper, lower = float(channels.upper[-1]), float(channels.lower[-1])
        return KeltnerReading(
            upper=upper,
            middle=float(channels.middle[n - 1]),
            lower=lower,
            signal=volatility.channel_signal(float(series.last().close), upper, lower),
        )

    def _atr_reading(self, series: Series) -> ATRReading:
        volatility = self.engines.volatility
        period = self.config.atr_period
        atr = volatility.compute_atr(series, period)
        if atr.size == 0:
            raise InsufficientDataError("ATR needs at least 2 bars")

        return ATRReading(
            value=float(atr[-1]),
            normalized=float(volatility.compute_normalized_atr(series, period)[-1]),
            state=volatility.volatility_signal(float(atr[-1]), float(atr.mean())),
        )

    # -------------------------------------------------------------------------
    # Long term
    # -------------------------------------------------------------------------

    def analyze_long_term(self, last_price: float) -> LongTermAnalysis:
        """Fixed band around the last price."""
        band = self.config.support_resistance_band
        return LongTermAnalysis(
            support=last_price * (1 - band),
            resistance=last_price * (1 + band),
        )

    # -------------------------------------------------------------------------
    # Batch
    # -------------------------------------------------------------------------

    async def _analyze_isolated(self, asset: str) -> Union[AssetAnalysis, AnalysisError]:
        try:
            return await self.analyze_asset(asset)
        except Exception as e:
            logger.error(f"Failed to analyze {asset}: {e}")
            return AnalysisError(asset_id=asset, error=str(e) or type(e).__name__, timestamp=_now_ms())

    async def analyze_batch(self, assets: Sequence[str]) -> BatchAnalysisResult:
        """
        Analyse many assets, ``batch_concurrency`` at a time.

        A failing asset is recorded in ``failed`` and never aborts the others.

        Raises:
            InvalidInputError: if no assets are given
        """
        if not assets:
            raise InvalidInputError("No assets provided for analysis")

        chunk_size = max(1, self.config.batch_concurrency)
        logger.info(
            f"Starting batch analysis of {len(assets)} assets "
            f"(concurrency={chunk_size})"
        )
        start_time = datetime.now(timezone.utc)

        successful: list[AssetAnalysis] = []
        failed: list[AnalysisError] = []

        for i in range(0, len(assets), chunk_size):
            chunk = assets[i:i + chunk_size]
            results = await asyncio.gather(*(self._analyze_isolated(a) for a in chunk))
            for result in results:
                if isinstance(result, AnalysisError):
                    failed.append(result)
                else:
                    successful.append(result)

        elapsed_ms = int((datetime.now(timezone.utc) - start_time).total_seconds() * 1000)
        metadata = BatchMetadata(
            total_processed=len(assets),
            success_count=len(successful),
            failure_count=len(failed),
            processing_time_ms=elapsed_ms,
        )

        logger.info(
            f"Batch analysis complete: "
            f"{metadata.success_count} succeeded, "
            f"{metadata.failure_count} failed, "
            f"time={elapsed_ms}ms"
        )

        return BatchAnalysisResult(successful=successful, failed=failed, metadata=metadata)
