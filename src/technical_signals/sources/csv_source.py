"""
File-backed Price Source.

Bars are read from ``<data_dir>/<IDENTIFIER>_<timeframe>.csv`` with columns
timestamp, open, high, low, close and an optional volume. Timestamps may be
ISO-8601 strings or epoch milliseconds.
"""

import logging
from pathlib import Path
from typing import Optional, Union

import pandas as pd

from technical_signals.errors import PriceSourceError
from technical_signals.models.bar import Bar
from technical_signals.sources.base import PriceOptions, PriceSource

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("timestamp", "open", "high", "low", "close")


def load_bars_csv(path: Union[str, Path]) -> list[Bar]:
    """
    Load bars from a CSV file, sorted oldest first.

    Raises:
        PriceSourceError: if the file is missing or lacks required columns
    """
    path = Path(path)
    if not path.exists():
        raise PriceSourceError(f"Price file not found: {path}")

    try:
        df = pd.read_csv(path)
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        raise PriceSourceError(f"Could not parse {path}: {e}") from e

    df.columns = [str(col).strip().lower() for col in df.columns]
    missing = [col for col in REQUIRED_COLUMNS if col not in df.columns]
    if missing:
        raise PriceSourceError(f"{path.name} is missing columns: {', '.join(missing)}")

    if pd.api.types.is_numeric_dtype(df["timestamp"]):
        df["timestamp"] = pd.to_datetime(df["timestamp"], unit="ms", utc=True)
    else:
        df["timestamp"] = pd.to_datetime(df["timestamp"], utc=True)
    df = df.sort_values("timestamp")

    has_volume = "volume" in df.columns
    bars = []
    for row in df.itertuples(index=False):
        volume = getattr(row, "volume") if has_volume else None
        bars.append(
            Bar(
                timestamp=row.timestamp.to_pydatetime(),
                open=float(row.open),
                high=float(row.high),
                low=float(row.low),
                close=float(row.close),
                volume=None if volume is None or pd.isna(volume) else float(volume),
            )
        )
    return bars


class CsvPriceSource(PriceSource):
    """
    Price Source over a directory of per-asset CSV files.

    When no file matches the full identifier (``BTC-USD-PERP``), the base
    asset (``BTC``) is tried.
    """

    def __init__(self, data_dir: Union[str, Path]):
        self.data_dir = Path(data_dir)
        self._cache: dict[Path, list[Bar]] = {}

    def _resolve(self, identifier: str, timeframe: str) -> Path:
        candidates = [identifier]
        base = identifier.split("-")[0]
        if base != identifier:
            candidates.append(base)

        for name in candidates:
            path = self.data_dir / f"{name}_{timeframe}.csv"
            if path.exists():
                return path
        raise PriceSourceError(
            f"No price data for {identifier} ({timeframe}) in {self.data_dir}"
        )

    def _load(self, identifier: str, timeframe: str) -> list[Bar]:
        path = self._resolve(identifier, timeframe)
        if path not in self._cache:
            logger.debug(f"Loading bars from {path}")
            self._cache[path] = load_bars_csv(path)
        return self._cache[path]

    async def get_historical_prices(
        self,
        identifier: str,
        timeframe: str,
        options: Optional[PriceOptions] = None,
    ) -> list[Bar]:
        options = options or PriceOptions()
        bars = self._load(identifier, timeframe)

        if options.start_time is not None:
            bars = [b for b in bars if b.timestamp >= options.start_time]
        if options.end_time is not None:
            bars = [b for b in bars if b.timestamp <= options.end_time]
        if options.limit is not None:
            bars = bars[-options.limit:]
        return list(bars)

    async def get_current_price(
        self,
        identifier: str,
        price_kind: Optional[str] = None,
    ) -> float:
        for timeframe in ("1m", "5m", "15m", "1h", "4h", "1d"):
            try:
                bars = self._load(identifier, timeframe)
            except PriceSourceError:
                continue
            if bars:
                return bars[-1].close
        raise PriceSourceError(f"No price data for {identifier} in {self.data_dir}")
