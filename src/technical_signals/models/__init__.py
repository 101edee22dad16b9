"""Data models for the technical signals engine."""

from technical_signals.models.bar import Bar, Series
from technical_signals.models.signals import (
    BandWidthState,
    Breakout,
    CloudSignal,
    CloudState,
    Condition,
    PatternType,
    PriceAction,
    TradeSignal,
    TrendDirection,
    VolatilityLevel,
    VolumeDistribution,
    VolumeTrend,
)
from technical_signals.models.analysis import (
    ADXReading,
    AnalysisError,
    AssetAnalysis,
    ATRReading,
    BatchAnalysisResult,
    BatchMetadata,
    BandWidthReading,
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
    PriceActionReading,
    PriceChanges,
    PriceReading,
    RecentPatterns,
    ROCReading,
    RSIReading,
    ShortTermAnalysis,
    StochasticReading,
    TrendMomentum,
    TrendReading,
    VolumeReading,
)

__all__ = [
    # Bar models
    "Bar",
    "Series",
    # Signal values
    "BandWidthState",
    "Breakout",
    "CloudSignal",
    "CloudState",
    "Condition",
    "PatternType",
    "PriceAction",
    "TradeSignal",
    "TrendDirection",
    "VolatilityLevel",
    "VolumeDistribution",
    "VolumeTrend",
    # Analysis output
    "ADXReading",
    "AnalysisError",
    "AssetAnalysis",
    "ATRReading",
    "BatchAnalysisResult",
    "BandWidthReading",
    "BatchMetadata",
    "CloudReading",
    "KeltnerReading",
    "KeySignals",
    "LevelTouches",
    "LongTermAnalysis",
    "MACDReading",
    "MediumTermAnalysis",
    "MediumTermTechnicals",
    "MomentumReadings",
    "PatternSummary",
    "PivotReading",
    "PriceActionReading",
    "PriceChanges",
    "PriceReading",
    "RecentPatterns",
    "ROCReading",
    "RSIReading",
    "ShortTermAnalysis",
    "StochasticReading",
    "TrendMomentum",
    "TrendReading",
    "VolumeReading",
]
