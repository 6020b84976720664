"""Tests for the immutable data models."""

import dataclasses
from datetime import date

import pytest

from portval_app.models.market import MarketSnapshot, PositionValuation, ValuationReport
from portval_app.models.securities import (
    OptionKind,
    OptionSpec,
    Position,
    SecurityKind,
    StockQuote,
)


class TestStockQuote:
    """Stock quote validation and updates."""

    def test_with_price_returns_new_quote(self, aapl):
        moved = aapl.with_price(151.0)
        assert moved.price == 151.0
        assert aapl.price == 150.0
        assert moved.kind == SecurityKind.STOCK

    def test_frozen(self, aapl):
        with pytest.raises(dataclasses.FrozenInstanceError):
            aapl.price = 1.0

    def test_negative_price_rejected(self):
        with pytest.raises(ValueError, match="cannot be negative"):
            StockQuote("X", "X", -1.0, 0.1, 0.2)

    def test_negative_volatility_rejected(self):
        with pytest.raises(ValueError, match="Volatility cannot be negative"):
            StockQuote("X", "X", 1.0, 0.1, -0.2)

    def test_zero_volatility_allowed(self):
        assert StockQuote("X", "X", 1.0, 0.1, 0.0).sigma == 0.0


class TestOptionSpec:
    """Option definition validation."""

    def test_kind_parsed_from_string(self):
        spec = OptionSpec("X-C", "X", "c", 10.0, date(2026, 1, 1))
        assert spec.option_kind == OptionKind.CALL
        assert spec.is_call
        assert spec.kind == SecurityKind.OPTION

    def test_non_positive_strike_rejected(self):
        with pytest.raises(ValueError, match="Strike price must be positive"):
            OptionSpec("X-C", "X", OptionKind.CALL, 0.0, date(2026, 1, 1))

    def test_unknown_kind_rejected(self):
        with pytest.raises(ValueError):
            OptionSpec("X-C", "X", "swaption", 10.0, date(2026, 1, 1))

    def test_position_ticker(self, tsla_put):
        assert Position(tsla_put, -10).ticker == "TSLA-DEC-2025-450-P"


class TestMarketSnapshot:
    """Snapshot immutability."""

    def test_quotes_are_read_only(self, aapl):
        snapshot = MarketSnapshot.from_quotes(1, [aapl])
        with pytest.raises(TypeError):
            snapshot.quotes["AAPL"] = aapl.with_price(1.0)
        with pytest.raises(dataclasses.FrozenInstanceError):
            snapshot.sequence = 2

    def test_source_dict_changes_are_invisible(self, aapl, tsla):
        quotes = {"AAPL": aapl}
        snapshot = MarketSnapshot(sequence=1, quotes=quotes)
        quotes["TSLA"] = tsla
        assert "TSLA" not in snapshot
        assert len(snapshot) == 1

    def test_lookup(self, aapl):
        snapshot = MarketSnapshot.from_quotes(1, [aapl])
        assert snapshot.get("AAPL") is aapl
        assert snapshot.get("MSFT") is None
        assert snapshot.price_of("AAPL") == 150.0
        with pytest.raises(KeyError):
            snapshot.price_of("MSFT")

    def test_negative_sequence_rejected(self):
        with pytest.raises(ValueError):
            MarketSnapshot(sequence=-1, quotes={})


class TestValuationReport:
    """Report serialization."""

    def test_to_dict(self):
        report = ValuationReport(
            sequence_number=2,
            positions=[PositionValuation("AAPL", 150.0, 10, 1500.0)],
            total_nav=1500.0,
            valuation_date=date(2025, 7, 25),
            market_prices={"AAPL": 150.0},
        )
        assert isinstance(report.positions, tuple)
        assert report.to_dict() == {
            "sequence_number": 2,
            "valuation_date": "2025-07-25",
            "market_prices": {"AAPL": 150.0},
            "positions": [{"ticker": "AAPL", "unit_price": 150.0,
                           "effective_quantity": 10, "value": 1500.0}],
            "total_nav": 1500.0,
        }
