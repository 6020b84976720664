"""
Reference data and configuration error classifications.

These exceptions describe inconsistent static data: securities that cannot be
built, tickers that collide, and positions that cannot be priced.
"""

from typing import Any, Dict, Optional


class ConfigurationError(Exception):
    """Base class for fatal configuration and reference data errors."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = False


class DuplicateTickerError(ConfigurationError):
    """The same ticker is defined more than once across stocks and options."""

    def __init__(self, ticker: str, **kwargs):
        super().__init__(f"Duplicate ticker in reference data: {ticker}", **kwargs)
        self.ticker = ticker


class UnknownUnderlyingError(ConfigurationError):
    """An option references an underlying stock that is not defined."""

    def __init__(self, ticker: str, underlying_ticker: str, **kwargs):
        super().__init__(
            f"Option {ticker} references unknown underlying {underlying_ticker}",
            **kwargs
        )
        self.ticker = ticker
        self.underlying_ticker = underlying_ticker


class InvalidSecurityError(ConfigurationError):
    """A reference record could not be turned into a valid security."""

    def __init__(self, message: str, record: Optional[Dict[str, Any]] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.record = record or {}


class UnpriceablePositionError(ConfigurationError):
    """A held option's underlying is absent from the market snapshot."""

    def __init__(self, ticker: str, underlying_ticker: str,
                 sequence: Optional[int] = None, **kwargs):
        super().__init__(
            f"Cannot price {ticker}: underlying {underlying_ticker} "
            f"missing from snapshot {sequence}",
            **kwargs
        )
        self.ticker = ticker
        self.underlying_ticker = underlying_ticker
        self.sequence = sequence


class DataGapError(Exception):
    """A position references a ticker absent from reference data. Recoverable."""

    def __init__(self, ticker: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(f"No reference data for position ticker {ticker}")
        self.ticker = ticker
        self.context = context or {}
        self.recoverable = True
