"""
Market snapshot and valuation report models.

Snapshots are published by the market bus and shared with every consumer, so
their quote mapping is wrapped in a read-only proxy over a private copy. A new
tick always produces a new snapshot object.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date
from types import MappingProxyType
from typing import Any, Optional

from .securities import StockQuote


@dataclass(frozen=True, eq=False)
class MarketSnapshot:
    """Immutable ticker -> StockQuote mapping tagged with a sequence number."""

    sequence: int
    quotes: Mapping[str, StockQuote]

    def __post_init__(self) -> None:
        if self.sequence < 0:
            raise ValueError("Snapshot sequence cannot be negative")
        # Freeze a private copy so later changes to the caller's dict are invisible
        object.__setattr__(self, "quotes", MappingProxyType(dict(self.quotes)))

    @classmethod
    def from_quotes(cls, sequence: int, quotes: Iterable[StockQuote]) -> "MarketSnapshot":
        """Build a snapshot from quotes, preserving iteration order."""
        return cls(sequence=sequence, quotes={quote.ticker: quote for quote in quotes})

    def get(self, ticker: str) -> Optional[StockQuote]:
        return self.quotes.get(ticker)

    def price_of(self, ticker: str) -> float:
        """Return the current price for ticker. Raises KeyError if untracked."""
        return self.quotes[ticker].price

    def __contains__(self, ticker: object) -> bool:
        return ticker in self.quotes

    def __len__(self) -> int:
        return len(self.quotes)

    def tickers(self) -> tuple[str, ...]:
        return tuple(self.quotes)


@dataclass(frozen=True)
class PositionValuation:
    """Valuation line for a single position."""
    ticker: str
    unit_price: float
    effective_quantity: int
    value: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "ticker": self.ticker,
            "unit_price": self.unit_price,
            "effective_quantity": self.effective_quantity,
            "value": self.value,
        }


@dataclass(frozen=True)
class ValuationReport:
    """Portfolio valuation produced for one market snapshot."""

    sequence_number: int
    positions: tuple[PositionValuation, ...]
    total_nav: float
    valuation_date: date
    market_prices: Mapping[str, float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "positions", tuple(self.positions))
        object.__setattr__(self, "market_prices", MappingProxyType(dict(self.market_prices)))

    def to_dict(self) -> dict[str, Any]:
        """Plain-dict form used by JSON sinks."""
        return {
            "sequence_number": self.sequence_number,
            "valuation_date": self.valuation_date.isoformat(),
            "market_prices": dict(self.market_prices),
            "positions": [p.to_dict() for p in self.positions],
            "total_nav": self.total_nav,
        }
