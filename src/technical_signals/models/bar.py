"""
Price bar models.

These models carry the raw candles handed to the indicator engines.
"""

from datetime import datetime, timedelta, timezone
from typing import Iterator, Optional, Sequence, overload

import numpy as np
import pandas as pd
from pydantic import BaseModel, ConfigDict


class Bar(BaseModel):
    """Single OHLCV bar."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    open: float
    high: float
    low: float
    close: float
    volume: Optional[float] = None

    @property
    def price(self) -> float:
        """Alias for the closing price."""
        return self.close

    @property
    def body(self) -> float:
        return abs(self.close - self.open)

    @property
    def range(self) -> float:
        return self.high - self.low

    @property
    def upper_shadow(self) -> float:
        return self.high - max(self.open, self.close)

    @property
    def lower_shadow(self) -> float:
        return min(self.open, self.close) - self.low

    @property
    def is_bullish(self) -> bool:
        return self.close > self.open

    @property
    def is_bearish(self) -> bool:
        return self.close < self.open


class Series(BaseModel):
    """
    Ascending, immutable sequence of bars for one (asset, timeframe) pair.

    Bar ``i`` is assumed to immediately precede bar ``i + 1``; gaps are not
    detected.
    """

    model_config = ConfigDict(frozen=True)

    asset: str = ""
    timeframe: str = ""
    bars: tuple[Bar, ...] = ()

    @classmethod
    def from_bars(
        cls,
        bars: Sequence[Bar],
        asset: str = "",
        timeframe: str = "",
    ) -> "Series":
        """Build a series from bars, sorting them oldest first."""
        ordered = sorted(bars, key=lambda b: b.timestamp)
        return cls(asset=asset, timeframe=timeframe, bars=tuple(ordered))

    @classmethod
    def from_closes(
        cls,
        closes: Sequence[float],
        asset: str = "",
        timeframe: str = "5m",
        start: Optional[datetime] = None,
        step: timedelta = timedelta(minutes=5),
    ) -> "Series":
        """Build a flat-candle series (open = high = low = close) from closes."""
        start = start or datetime(2024, 1, 1, tzinfo=timezone.utc)
        bars = tuple(
            Bar(
                timestamp=start + i * step,
                open=float(c),
                high=float(c),
                low=float(c),
                close=float(c),
            )
            for i, c in enumerate(closes)
        )
        return cls(asset=asset, timeframe=timeframe, bars=bars)

    def __len__(self) -> int:
        return len(self.bars)

    @overload
    def __getitem__(self, index: int) -> Bar: ...

    @overload
    def __getitem__(self, index: slice) -> "Series": ...

    def __getitem__(self, index):
        if isinstance(index, slice):
            return Series(asset=self.asset, timeframe=self.timeframe, bars=self.bars[index])
        return self.bars[index]

    def iter_bars(self) -> Iterator[Bar]:
        return iter(self.bars)

    @property
    def is_empty(self) -> bool:
        return len(self.bars) == 0

    def last(self) -> Optional[Bar]:
        """Return most recent bar or None if empty."""
        return self.bars[-1] if self.bars else None

    @property
    def opens(self) -> np.ndarray:
        return np.array([b.open for b in self.bars], dtype=float)

    @property
    def highs(self) -> np.ndarray:
        return np.array([b.high for b in self.bars], dtype=float)

    @property
    def lows(self) -> np.ndarray:
        return np.array([b.low for b in self.bars], dtype=float)

    @property
    def closes(self) -> np.ndarray:
        return np.array([b.close for b in self.bars], dtype=float)

    @property
    def volumes(self) -> np.ndarray:
        """Volumes with missing values reported as 0."""
        return np.array(
            [b.volume if b.volume is not None else 0.0 for b in self.bars],
            dtype=float,
        )

    def to_dataframe(self) -> pd.DataFrame:
        """
        Convert to a pandas DataFrame.

        Returns:
            DataFrame with columns: open, high, low, close, volume.
            Index is timestamp, sorted ascending (oldest first).
        """
        if self.is_empty:
            return pd.DataFrame(columns=["open", "high", "low", "close", "volume"])

        df = pd.DataFrame(
            {
                "timestamp": [b.timestamp for b in self.bars],
                "open": self.opens,
                "high": self.highs,
                "low": self.lows,
                "close": self.closes,
                "volume": self.volumes,
            }
        )
        df.set_index("timestamp", inplace=True)
        return df
