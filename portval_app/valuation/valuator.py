"""
Portfolio valuator.

Subscribes to the market bus and values every held position against each new
snapshot: stocks at their snapshot price, options through Black-Scholes on the
underlying's current price and volatility, scaled by the contract multiplier.
"""

from collections.abc import Sequence
from datetime import date
from typing import Any, Callable, Optional

import structlog

from ..config.defaults import PricingParams
from ..errors import UnpriceablePositionError
from ..models.market import MarketSnapshot, PositionValuation, ValuationReport
from ..models.securities import OptionSpec, Position, StockQuote
from ..pricing.black_scholes import price_option

logger = structlog.get_logger(__name__)

ReportSink = Callable[[ValuationReport], Any]


class PortfolioValuator:
    """Values a fixed set of positions on every snapshot and emits a report."""

    def __init__(
        self,
        positions: Sequence[Position],
        sink: Optional[Any] = None,
        params: Optional[PricingParams] = None,
        clock: Callable[[], date] = date.today,
        name: str = "portfolio-valuator",
    ) -> None:
        """
        Args:
            positions: Positions in report order
            sink: Callable, or object with ``deliver(report)``, receiving each report
            params: Risk-free rate, contract multiplier and day count
            clock: Returns the valuation date used for time to expiry
            name: Identifies this consumer in bus logs
        """
        self.positions = tuple(positions)
        self.sink = sink
        self.params = params or PricingParams()
        self.clock = clock
        self.name = name
        self.logger = logger.bind(consumer=name)
        self.last_report: Optional[ValuationReport] = None

    def on_snapshot(self, snapshot: MarketSnapshot) -> ValuationReport:
        """Value the portfolio against snapshot and hand the report to the sink."""
        report = self.value(snapshot)
        self.last_report = report

        if self.sink is not None:
            deliver = getattr(self.sink, "deliver", self.sink)
            deliver(report)

        return report

    def value(self, snapshot: MarketSnapshot) -> ValuationReport:
        """Build a valuation report without delivering it."""
        valuation_date = self.clock()
        lines = [self._value_position(position, snapshot, valuation_date)
                 for position in self.positions]
        total_nav = sum(line.value for line in lines)

        self.logger.debug(
            "Portfolio valued",
            sequence=snapshot.sequence,
            positions=len(lines),
            total_nav=round(total_nav, 2)
        )

        return ValuationReport(
            sequence_number=snapshot.sequence,
            positions=tuple(lines),
            total_nav=total_nav,
            valuation_date=valuation_date,
            market_prices={ticker: quote.price for ticker, quote in snapshot.quotes.items()},
        )

    def _value_position(
        self,
        position: Position,
        snapshot: MarketSnapshot,
        valuation_date: date,
    ) -> PositionValuation:
        security = position.security

        if isinstance(security, StockQuote):
            quote = self._resolve(snapshot, security.ticker, security.ticker)
            unit_price = quote.price
            effective_quantity = position.quantity

        elif isinstance(security, OptionSpec):
            underlying = self._resolve(snapshot, security.ticker, security.underlying_ticker)
            unit_price = price_option(
                security,
                underlying.price,
                underlying.sigma,
                self.params.risk_free_rate,
                valuation_date,
                self.params.days_per_year,
            )
            effective_quantity = position.quantity * self.params.contract_multiplier

        else:
            raise TypeError(f"Unsupported security type: {type(security).__name__}")

        return PositionValuation(
            ticker=security.ticker,
            unit_price=unit_price,
            effective_quantity=effective_quantity,
            value=unit_price * effective_quantity,
        )

    def _resolve(self, snapshot: MarketSnapshot, ticker: str, stock_ticker: str) -> StockQuote:
        quote = snapshot.get(stock_ticker)
        if quote is None:
            self.logger.error(
                "Position cannot be priced from snapshot",
                ticker=ticker,
                underlying_ticker=stock_ticker,
                sequence=snapshot.sequence
            )
            raise UnpriceablePositionError(ticker, stock_ticker, sequence=snapshot.sequence)
        return quote
