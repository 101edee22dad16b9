"""Exceptions raised by the technical analysis engines."""


class TechnicalAnalysisError(Exception):
    """Base exception for all engine errors."""

    pass


class InvalidInputError(TechnicalAnalysisError, ValueError):
    """Raised when the caller supplies unusable input."""

    pass


class InvalidSeriesError(InvalidInputError):
    """Raised for empty or non-numeric price series."""

    pass


class InvalidPeriodError(InvalidInputError):
    """Raised when a lookback period is out of range for the series."""

    pass


class InsufficientDataError(TechnicalAnalysisError):
    """Raised when a series is too short for an indicator that cannot degrade."""

    pass


class PriceSourceError(TechnicalAnalysisError):
    """Raised when a Price Source cannot deliver bars."""

    pass
