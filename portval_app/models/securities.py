"""
Security reference models.

A security is either a stock quote or a European option definition. Both are
frozen dataclasses sharing a ``ticker`` accessor and a ``kind`` discriminator,
so consumers can dispatch exhaustively on ``SecurityKind``.
"""

from dataclasses import dataclass, replace
from datetime import date
from enum import Enum
from typing import Union


class SecurityKind(str, Enum):
    """Discriminator for the Security union."""
    STOCK = "stock"
    OPTION = "option"


class OptionKind(str, Enum):
    """European option right."""
    CALL = "CALL"
    PUT = "PUT"

    @classmethod
    def parse(cls, value: Union[str, "OptionKind"]) -> "OptionKind":
        """Parse a case-insensitive option kind ('CALL'/'C', 'PUT'/'P')."""
        if isinstance(value, OptionKind):
            return value
        normalized = str(value).strip().upper()
        aliases = {"C": "CALL", "P": "PUT"}
        return cls(aliases.get(normalized, normalized))


@dataclass(frozen=True)
class StockQuote:
    """Point-in-time quote for a single stock plus its growth-model parameters."""

    ticker: str
    company_name: str
    price: float
    mu: float                               # Drift (expected return)
    sigma: float                            # Volatility

    kind = SecurityKind.STOCK

    def __post_init__(self) -> None:
        if not self.ticker:
            raise ValueError("Stock ticker must not be empty")
        if self.price < 0:
            raise ValueError("Stock price cannot be negative")
        if self.sigma < 0:
            raise ValueError("Volatility cannot be negative")

    def with_price(self, price: float) -> "StockQuote":
        """Return a new quote with an updated price."""
        return replace(self, price=price)


@dataclass(frozen=True)
class OptionSpec:
    """Static definition of a European option on a listed stock."""

    ticker: str
    underlying_ticker: str
    option_kind: OptionKind
    strike: float
    expiry: date

    kind = SecurityKind.OPTION

    def __post_init__(self) -> None:
        if not self.ticker:
            raise ValueError("Option ticker must not be empty")
        if not self.underlying_ticker:
            raise ValueError("Option underlying ticker must not be empty")
        if self.strike <= 0:
            raise ValueError("Strike price must be positive")
        if not isinstance(self.option_kind, OptionKind):
            object.__setattr__(self, "option_kind", OptionKind.parse(self.option_kind))

    @property
    def is_call(self) -> bool:
        return self.option_kind == OptionKind.CALL


Security = Union[StockQuote, OptionSpec]


@dataclass(frozen=True)
class Position:
    """A held quantity of a security. Quantity is fixed once loaded."""

    security: Security
    quantity: int

    @property
    def ticker(self) -> str:
        return self.security.ticker
