"""Portfolio valuation against published market snapshots."""

from .valuator import PortfolioValuator

__all__ = ["PortfolioValuator"]
