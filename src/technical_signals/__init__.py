"""Technical signals engine: indicators, candlestick patterns and multi-timeframe analysis."""

from technical_signals.analyzer import TechnicalAnalyzer, format_symbol
from technical_signals.config import Config, get_config
from technical_signals.errors import (
    InsufficientDataError,
    InvalidInputError,
    InvalidPeriodError,
    InvalidSeriesError,
    PriceSourceError,
    TechnicalAnalysisError,
)
from technical_signals.models import AssetAnalysis, Bar, BatchAnalysisResult, Series
from technical_signals.selection import select_signals
from technical_signals.sources import CsvPriceSource, PriceOptions, PriceSource

__version__ = "0.1.0"

__all__ = [
    "AssetAnalysis",
    "Bar",
    "BatchAnalysisResult",
    "Config",
    "CsvPriceSource",
    "InsufficientDataError",
    "InvalidInputError",
    "InvalidPeriodError",
    "InvalidSeriesError",
    "PriceOptions",
    "PriceSource",
    "PriceSourceError",
    "Series",
    "TechnicalAnalysisError",
    "TechnicalAnalyzer",
    "format_symbol",
    "get_config",
    "select_signals",
]
