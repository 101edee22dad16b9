"""Price Source contract and implementations."""

from technical_signals.sources.base import PriceOptions, PriceSource
from technical_signals.sources.csv_source import CsvPriceSource, load_bars_csv

__all__ = [
    "CsvPriceSource",
    "PriceOptions",
    "PriceSource",
    "load_bars_csv",
]
