"""
Capability interfaces for the indicator engines.

Each engine is a module of pure functions. The protocols below describe the
functions the composition layer calls, so an alternative implementation
(any object or module exposing the same callables) can be swapped in via
``Engines``.
"""

from dataclasses import dataclass, field
from types import ModuleType
from typing import Optional, Protocol, Sequence

import numpy as np

from technical_signals.models.bar import Series
from technical_signals.models.signals import (
    BandWidthState,
    Condition,
    TradeSignal,
    VolatilityLevel,
)
from technical_signals.technicals import (
    cloud,
    momentum,
    moving_averages,
    patterns,
    pivots,
    trend_strength,
    volatility,
    volume,
)
from technical_signals.technicals.common import PriceInput


class MovingAverageEngine(Protocol):
    def compute_sma(self, data: PriceInput, period: int) -> np.ndarray: ...

    def compute_ema(self, data: PriceInput, period: int) -> np.ndarray: ...

    def detect_crossover(
        self, short_ma: Sequence[float], long_ma: Sequence[float]
    ) -> "moving_averages.CrossoverResult": ...

    def compute_bollinger(
        self, data: PriceInput, period: int = 20, std_dev: float = 2.0
    ) -> "moving_averages.BollingerBands": ...

    def band_width_state(self, width: float, previous: float) -> BandWidthState: ...


class MomentumEngine(Protocol):
    def compute_rsi(self, data: PriceInput, period: int = 14) -> np.ndarray: ...

    def rsi_condition(
        self, value: float, oversold: float = 30.0, overbought: float = 70.0
    ) -> Condition: ...

    def compute_macd(
        self, data: PriceInput, fast: int = 12, slow: int = 26, signal: int = 9
    ) -> "momentum.MACDResult": ...

    def macd_signal(self, histogram: float, price: float) -> TradeSignal: ...

    def macd_strength(self, histogram: float, price: float) -> float: ...

    def compute_stochastic(
        self, series: Series, period: int = 14
    ) -> "momentum.StochasticResult": ...

    def stochastic_condition(
        self, k: float, d: float, oversold: float = 20.0, overbought: float = 80.0
    ) -> Condition: ...

    def compute_roc(self, data: PriceInput, period: int = 14) -> "momentum.ROCResult": ...

    def roc_signal(self, roc: float) -> "momentum.ROCSignal": ...


class TrendStrengthEngine(Protocol):
    def compute_adx(self, series: Series, period: int = 14) -> "trend_strength.ADXResult": ...


class CloudTrendEngine(Protocol):
    def compute_cloud(
        self,
        series: Series,
        tenkan_period: int = 9,
        kijun_period: int = 26,
        span_b_period: int = 52,
    ) -> "cloud.CloudResult": ...


class PivotEngine(Protocol):
    def compute_pivots(self, series: Series) -> "pivots.PivotLevels": ...


class VolumeEngine(Protocol):
    def analyze_volume(
        self, series: Series, timeframe: str = "1h", price_step: float = 10.0
    ) -> "volume.VolumeAnalysis": ...


class VolatilityEngine(Protocol):
    def compute_atr(self, series: Series, period: int = 14) -> np.ndarray: ...

    def compute_normalized_atr(self, series: Series, period: int = 14) -> np.ndarray: ...

    def volatility_signal(self, atr: float, avg_atr: float) -> VolatilityLevel: ...

    def compute_keltner(
        self,
        series: Series,
        ema_period: int = 20,
        atr_period: int = 10,
        multiplier: float = 2.0,
    ) -> "volatility.KeltnerChannels": ...

    def channel_signal(self, price: float, upper: float, lower: float) -> Condition: ...


class PatternEngine(Protocol):
    def detect_patterns(
        self, series: Series, limit: Optional[int] = None
    ) -> list["patterns.Pattern"]: ...


def _module(default: ModuleType):
    return field(default_factory=lambda: default)


@dataclass
class Engines:
    """The engine implementations used by the composition layer."""

    moving_averages: MovingAverageEngine = _module(moving_averages)
    momentum: MomentumEngine = _module(momentum)
    trend_strength: TrendStrengthEngine = _module(trend_strength)
    cloud: CloudTrendEngine = _module(cloud)
    pivots: PivotEngine = _module(pivots)
    volume: VolumeEngine = _module(volume)
    volatility: VolatilityEngine = _module(volatility)
    patterns: PatternEngine = _module(patterns)
