"""
Error classification for the portfolio valuation system.

Configuration errors are fatal at startup, data gaps are logged and skipped,
consumer faults are isolated by the market bus, and environment faults stop
the producing loop.
"""

from .reference_data import (
    ConfigurationError,
    DuplicateTickerError,
    UnknownUnderlyingError,
    InvalidSecurityError,
    UnpriceablePositionError,
    DataGapError,
)
from .system_failures import (
    SystemFailureError,
    EnvironmentFaultError,
    ConsumerFaultError,
    DeliveryError,
)

__all__ = [
    # Reference data / configuration
    "ConfigurationError",
    "DuplicateTickerError",
    "UnknownUnderlyingError",
    "InvalidSecurityError",
    "UnpriceablePositionError",
    "DataGapError",
    # System failures
    "SystemFailureError",
    "EnvironmentFaultError",
    "ConsumerFaultError",
    "DeliveryError",
]
