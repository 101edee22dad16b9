"""
Models for the assembled multi-timeframe analysis.

These models are the JSON-serialisable output consumed by persistence and
request-handling layers. ``to_json_dict()`` emits the camelCase contract.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

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


class CamelModel(BaseModel):
    """Base model serialising field names as camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


# -----------------------------------------------------------------------------
# Short term (5m)
# -----------------------------------------------------------------------------


class PatternSummary(CamelModel):
    type: PatternType
    strength: float


class RecentPatterns(CamelModel):
    recent: list[PatternSummary] = Field(default_factory=list)


class RSIReading(CamelModel):
    value: float = 50.0
    condition: Condition = Condition.NEUTRAL


class MACDReading(CamelModel):
    signal: TradeSignal = TradeSignal.NEUTRAL
    strength: float = 0.0


class StochasticReading(CamelModel):
    k: float = 50.0
    d: float = 50.0
    condition: Condition = Condition.NEUTRAL


class MomentumReadings(CamelModel):
    rsi: RSIReading = Field(default_factory=RSIReading)
    macd: MACDReading = Field(default_factory=MACDReading)
    stochastic: StochasticReading = Field(default_factory=StochasticReading)


class ShortTermAnalysis(CamelModel):
    """Short-term (5m) patterns and momentum."""

    timeframe: str = "5m"
    patterns: RecentPatterns = Field(default_factory=RecentPatterns)
    momentum: MomentumReadings = Field(default_factory=MomentumReadings)


# -----------------------------------------------------------------------------
# Medium term (1h)
# -----------------------------------------------------------------------------


class TrendMomentum(CamelModel):
    """Latest normalized ROC and how long it has held beyond the sustain threshold."""

    value: float = 0.0
    period: int = 14
    sustained_periods: int = 0


class LevelTouches(CamelModel):
    """Recent close rounded to cents and how many closes sit within 0.1% of it."""

    recent: float = 0.0
    count: int = 0


class PriceActionReading(CamelModel):
    direction: PriceAction = PriceAction.SIDEWAYS
    strength: float = Field(default=0.0, description="EMA12/EMA26 gap relative to EMA26")
    tested_levels: LevelTouches = Field(default_factory=LevelTouches)


class BandWidthReading(CamelModel):
    bb_width: float = 0.0
    state: BandWidthState = BandWidthState.STABLE


class PriceReading(CamelModel):
    action: PriceActionReading = Field(default_factory=PriceActionReading)
    volatility: BandWidthReading = Field(default_factory=BandWidthReading)


class TrendReading(CamelModel):
    direction: TrendDirection = TrendDirection.NEUTRAL
    strength: float = 0.0
    crossover: bool = Field(
        default=False, description="True when the direction came from an EMA crossover"
    )
    momentum: TrendMomentum = Field(default_factory=TrendMomentum)
    price: PriceReading = Field(default_factory=PriceReading)


class ADXReading(CamelModel):
    value: float = 0.0
    trending: bool = False
    sustained_periods: int = 0


class ROCReading(CamelModel):
    value: float = 0.0
    state: Condition = Condition.NEUTRAL
    period: int = 14


class CloudReading(CamelModel):
    signal: CloudSignal = CloudSignal.NEUTRAL
    cloud_state: CloudState = CloudState.INSIDE
    conversion: float = 0.0
    base: float = 0.0
    price_distance: float = 0.0


class PivotReading(CamelModel):
    pivot: float = 0.0
    r1: float = 0.0
    s1: float = 0.0
    breakout: Breakout = Breakout.BETWEEN
    r1_distance: float = 0.0


class VolumeReading(CamelModel):
    trend: VolumeTrend = VolumeTrend.STABLE
    significance: float = 0.0
    distribution: VolumeDistribution = VolumeDistribution.NEUTRAL
    activity: float = 0.0
    sustained_periods: int = 0


class KeltnerReading(CamelModel):
    upper: float = 0.0
    middle: float = 0.0
    lower: float = 0.0
    signal: Condition = Condition.NEUTRAL


class ATRReading(CamelModel):
    value: float = 0.0
    normalized: float = Field(default=0.0, description="ATR as percentage of price")
    state: VolatilityLevel = VolatilityLevel.NORMAL


class MediumTermTechnicals(CamelModel):
    adx: ADXReading = Field(default_factory=ADXReading)
    roc: ROCReading = Field(default_factory=ROCReading)
    ichimoku: CloudReading = Field(default_factory=CloudReading)
    pivots: PivotReading = Field(default_factory=PivotReading)
    volume: VolumeReading = Field(default_factory=VolumeReading)
    keltner_channel: KeltnerReading = Field(default_factory=KeltnerReading)
    atr: ATRReading = Field(default_factory=ATRReading)


class MediumTermAnalysis(CamelModel):
    """Medium-term (1h) trend and supporting technicals."""

    timeframe: str = "1h"
    trend: TrendReading = Field(default_factory=TrendReading)
    technicals: MediumTermTechnicals = Field(default_factory=MediumTermTechnicals)


# -----------------------------------------------------------------------------
# Long term and asset level
# -----------------------------------------------------------------------------


class LongTermAnalysis(CamelModel):
    """Fixed band around the last price standing in for support/resistance."""

    timeframe: str = "4h"
    support: float
    resistance: float


class KeySignals(CamelModel):
    short_term: ShortTermAnalysis
    medium_term: MediumTermAnalysis
    long_term: LongTermAnalysis


class PriceChanges(CamelModel):
    """Signed percentage changes formatted like ``+1.25%``."""

    change_30min: str = Field(alias="30min")
    change_1h: str = Field(alias="1h")
    change_4h: str = Field(alias="4h")


class AssetAnalysis(CamelModel):
    """Complete analysis for a single asset."""

    asset_id: str
    timestamp: int = Field(description="Generation time, epoch milliseconds")
    last_price: float
    changes: PriceChanges
    key_signals: KeySignals
    volatility: float


# -----------------------------------------------------------------------------
# Batch
# -----------------------------------------------------------------------------


class AnalysisError(CamelModel):
    """Captured failure for one asset of a batch."""

    asset_id: str
    error: str
    timestamp: int


class BatchMetadata(CamelModel):
    total_processed: int = 0
    success_count: int = 0
    failure_count: int = 0
    processing_time_ms: int = 0


class BatchAnalysisResult(CamelModel):
    """Partitioned outcome of a multi-asset analysis run."""

    successful: list[AssetAnalysis] = Field(default_factory=list)
    failed: list[AnalysisError] = Field(default_factory=list)
    metadata: BatchMetadata = Field(default_factory=BatchMetadata)

    @property
    def has_failures(self) -> bool:
        return len(self.failed) > 0

    def get(self, asset_id: str) -> Optional[AssetAnalysis]:
        """Return the successful analysis for an asset, if any."""
        for analysis in self.successful:
            if analysis.asset_id == asset_id:
                return analysis
        return None
