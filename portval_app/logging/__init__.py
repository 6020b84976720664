"""
Logging configuration and utilities for the portfolio valuation system.
"""
from .config import configure_logging, get_logger, get_market_logger

__all__ = ["configure_logging", "get_logger", "get_market_logger"]
