"""Tests for position file loading and resolution."""

import pytest

from portval_app.data.positions import load_positions_csv, resolve_positions
from portval_app.errors import ConfigurationError


class TestLoadPositionsCsv:
    """CSV parsing."""

    def test_reads_rows_in_order(self, tmp_path):
        path = tmp_path / "portfolio.csv"
        path.write_text("ticker,quantity\nTSLA,-500\nAAPL,1000\n\nAAPL-C,20\n")
        assert load_positions_csv(path) == [("TSLA", -500), ("AAPL", 1000), ("AAPL-C", 20)]

    def test_header_only(self, tmp_path):
        path = tmp_path / "portfolio.csv"
        path.write_text("ticker,quantity\n")
        assert load_positions_csv(path) == []

    def test_invalid_quantity(self, tmp_path):
        path = tmp_path / "portfolio.csv"
        path.write_text("ticker,quantity\nAAPL,ten\n")
        with pytest.raises(ConfigurationError, match="portfolio.csv:2"):
            load_positions_csv(path)

    def test_missing_column(self, tmp_path):
        path = tmp_path / "portfolio.csv"
        path.write_text("ticker,quantity\nAAPL\n")
        with pytest.raises(ConfigurationError):
            load_positions_csv(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_positions_csv(tmp_path / "nope.csv")


class TestResolvePositions:
    """Matching rows to reference data."""

    def test_resolves_known_tickers(self, reference, aapl, tsla_put):
        positions = resolve_positions([("AAPL", 10), ("TSLA-DEC-2025-450-P", -3)], reference)
        assert [(p.security, p.quantity) for p in positions] == [(aapl, 10), (tsla_put, -3)]

    def test_unknown_ticker_is_skipped(self, reference):
        positions = resolve_positions([("MSFT", 5), ("AAPL", 10), ("GOOG", 1)], reference)
        assert [p.ticker for p in positions] == ["AAPL"]
