"""
Security reference data.

Stocks and options are read from a SQLite database (``STOCKS`` and ``OPTIONS``
tables), a SQL seed script, or a YAML file, then validated together: tickers
must be unique across both kinds and every option must reference a defined
stock.
"""

import sqlite3
from collections.abc import Iterable, Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from types import MappingProxyType
from typing import Any, Optional, Protocol, Union

import structlog
import yaml

from ..errors import (
    ConfigurationError,
    DuplicateTickerError,
    InvalidSecurityError,
    UnknownUnderlyingError,
)
from ..models.market import MarketSnapshot
from ..models.securities import OptionKind, OptionSpec, Security, StockQuote

logger = structlog.get_logger(__name__)

PathLike = Union[str, Path]


class ReferenceProvider(Protocol):
    """Source of static security definitions."""

    def load(self) -> tuple[list[StockQuote], list[OptionSpec]]: ...


def _parse_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value).strip())


def stock_from_record(record: Mapping[str, Any]) -> StockQuote:
    """Build a StockQuote from a STOCKS row or YAML mapping."""
    try:
        return StockQuote(
            ticker=str(record["ticker"]).strip(),
            company_name=str(record.get("company_name") or ""),
            price=float(record["initial_price"]),
            mu=float(record["mu"]),
            sigma=float(record["sigma"]),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise InvalidSecurityError(f"Invalid stock record: {e}", record=dict(record)) from e


def option_from_record(record: Mapping[str, Any]) -> OptionSpec:
    """Build an OptionSpec from an OPTIONS row or YAML mapping."""
    try:
        return OptionSpec(
            ticker=str(record["ticker"]).strip(),
            underlying_ticker=str(record["underlying_ticker"]).strip(),
            option_kind=OptionKind.parse(record["option_type"]),
            strike=float(record["strike_price"]),
            expiry=_parse_date(record["expiry_date"]),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise InvalidSecurityError(f"Invalid option record: {e}", record=dict(record)) from e


@dataclass(frozen=True)
class SecurityReference:
    """Validated, immutable set of securities keyed by ticker."""

    stocks: Mapping[str, StockQuote]
    options: Mapping[str, OptionSpec]

    @classmethod
    def build(
        cls,
        stocks: Iterable[StockQuote],
        options: Iterable[OptionSpec] = (),
    ) -> "SecurityReference":
        """
        Validate and index securities.

        Raises:
            DuplicateTickerError: a ticker appears twice across stocks and options
            UnknownUnderlyingError: an option's underlying is not a defined stock
        """
        stock_map: dict[str, StockQuote] = {}
        option_map: dict[str, OptionSpec] = {}

        for stock in stocks:
            if stock.ticker in stock_map:
                raise DuplicateTickerError(stock.ticker)
            stock_map[stock.ticker] = stock

        for option in options:
            if option.ticker in stock_map or option.ticker in option_map:
                raise DuplicateTickerError(option.ticker)
            if option.underlying_ticker not in stock_map:
                raise UnknownUnderlyingError(option.ticker, option.underlying_ticker)
            option_map[option.ticker] = option

        return cls(stocks=MappingProxyType(stock_map), options=MappingProxyType(option_map))

    @classmethod
    def from_provider(cls, provider: ReferenceProvider) -> "SecurityReference":
        stocks, options = provider.load()
        reference = cls.build(stocks, options)
        logger.info(
            "Security reference loaded",
            provider=type(provider).__name__,
            stocks=len(reference.stocks),
            options=len(reference.options)
        )
        return reference

    def get(self, ticker: str) -> Optional[Security]:
        return self.stocks.get(ticker) or self.options.get(ticker)

    def __contains__(self, ticker: object) -> bool:
        return ticker in self.stocks or ticker in self.options

    def __len__(self) -> int:
        return len(self.stocks) + len(self.options)

    def initial_snapshot(self, sequence: int = 0) -> MarketSnapshot:
        """Snapshot of the stocks at their initial prices."""
        return MarketSnapshot.from_quotes(sequence, self.stocks.values())


class SQLiteReferenceProvider:
    """Reads STOCKS and OPTIONS tables from a SQLite database."""

    def __init__(self, db_path: PathLike = "reference.db", seed_script: Optional[PathLike] = None):
        """
        Args:
            db_path: Database file, or ":memory:"
            seed_script: SQL script executed on the connection before reading
        """
        self.db_path = str(db_path)
        self.seed_script = Path(seed_script) if seed_script is not None else None

    @contextmanager
    def _get_connection(self) -> Iterator[sqlite3.Connection]:
        """Get a database connection that is always closed."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
        finally:
            conn.close()

    def load(self) -> tuple[list[StockQuote], list[OptionSpec]]:
        try:
            with self._get_connection() as conn:
                if self.seed_script is not None:
                    conn.executescript(self.seed_script.read_text())

                stock_rows = conn.execute(
                    "SELECT ticker, company_name, initial_price, mu, sigma "
                    "FROM STOCKS ORDER BY rowid"
                ).fetchall()
                option_rows = conn.execute(
                    "SELECT ticker, underlying_ticker, option_type, strike_price, expiry_date "
                    "FROM OPTIONS ORDER BY rowid"
                ).fetchall()
        except (sqlite3.Error, OSError) as e:
            raise ConfigurationError(
                f"Failed to read reference database: {e}",
                context={"db_path": self.db_path}
            ) from e

        stocks = [stock_from_record(dict(row)) for row in stock_rows]
        options = [option_from_record(dict(row)) for row in option_rows]
        return stocks, options


class YamlReferenceProvider:
    """Reads ``stocks`` and ``options`` lists from a YAML file."""

    def __init__(self, path: PathLike):
        self.path = Path(path)

    def load(self) -> tuple[list[StockQuote], list[OptionSpec]]:
        try:
            with open(self.path) as f:
                document = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(
                f"Failed to read reference file: {e}",
                context={"path": str(self.path)}
            ) from e

        stocks = [stock_from_record(record) for record in document.get("stocks") or []]
        options = [option_from_record(record) for record in document.get("options") or []]
        return stocks, options


def initialize_reference_db(db_path: PathLike, schema_path: PathLike) -> None:
    """Create and seed a reference database from a SQL script."""
    script = Path(schema_path).read_text()
    conn = sqlite3.connect(str(db_path))
    try:
        conn.executescript(script)
        conn.commit()
    finally:
        conn.close()

    logger.info("Reference database initialized", db_path=str(db_path), schema=str(schema_path))


def provider_for_path(path: PathLike) -> ReferenceProvider:
    """Pick a provider from the file extension (.sql, .db/.sqlite, .yaml/.yml)."""
    path = Path(path)
    suffix = path.suffix.lower()

    if suffix == ".sql":
        return SQLiteReferenceProvider(":memory:", seed_script=path)
    if suffix in (".db", ".sqlite", ".sqlite3"):
        return SQLiteReferenceProvider(path)
    if suffix in (".yaml", ".yml"):
        return YamlReferenceProvider(path)

    raise ConfigurationError(
        f"Unsupported reference data format: {path.name}",
        context={"path": str(path)}
    )
