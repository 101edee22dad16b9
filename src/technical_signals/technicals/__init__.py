"""
Technical indicator engines.

Every engine is a set of pure, synchronous functions over a ``Series`` or a
numeric array of closes.
"""

from technical_signals.technicals.cloud import CloudResult, compute_cloud
from technical_signals.technicals.momentum import (
    MACDResult,
    ROCResult,
    ROCSignal,
    StochasticResult,
    compute_macd,
    compute_roc,
    compute_rsi,
    compute_stochastic,
    macd_signal,
    macd_strength,
    roc_signal,
    rsi_condition,
    stochastic_condition,
    sustained_periods,
)
from technical_signals.technicals.moving_averages import (
    BollingerBands,
    CrossoverResult,
    band_width_state,
    compute_bollinger,
    compute_ema,
    compute_sma,
    detect_crossover,
)
from technical_signals.technicals.patterns import Pattern, detect_patterns
from technical_signals.technicals.pivots import PivotLevels, compute_pivots
from technical_signals.technicals.trend_strength import (
    ADXResult,
    DMIResult,
    compute_adx,
    compute_dmi,
)
from technical_signals.technicals.volatility import (
    KeltnerChannels,
    channel_signal,
    compute_atr,
    compute_keltner,
    compute_normalized_atr,
    volatility_signal,
)
from technical_signals.technicals.volume import VolumeAnalysis, analyze_volume
from technical_signals.technicals.interfaces import Engines

__all__ = [
    # Result dataclasses
    "ADXResult",
    "BollingerBands",
    "CloudResult",
    "CrossoverResult",
    "DMIResult",
    "KeltnerChannels",
    "MACDResult",
    "Pattern",
    "PivotLevels",
    "ROCResult",
    "ROCSignal",
    "StochasticResult",
    "VolumeAnalysis",
    # Moving averages
    "band_width_state",
    "compute_bollinger",
    "compute_ema",
    "compute_sma",
    "detect_crossover",
    # Momentum
    "compute_macd",
    "compute_roc",
    "compute_rsi",
    "compute_stochastic",
    "macd_signal",
    "macd_strength",
    "roc_signal",
    "rsi_condition",
    "stochastic_condition",
    "sustained_periods",
    # Trend strength, cloud, pivots
    "compute_adx",
    "compute_cloud",
    "compute_dmi",
    "compute_pivots",
    # Volume and volatility
    "analyze_volume",
    "channel_signal",
    "compute_atr",
    "compute_keltner",
    "compute_normalized_atr",
    "volatility_signal",
    # Patterns
    "detect_patterns",
    # Engine wiring
    "Engines",
]
