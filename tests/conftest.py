"""Pytest configuration and shared fixtures."""

from datetime import date

import numpy as np
import pytest
import structlog

from portval_app.config.defaults import PricingParams, SimulationParams
from portval_app.data.reference import SecurityReference
from portval_app.models.securities import OptionKind, OptionSpec, Position, StockQuote

VALUATION_DATE = date(2025, 7, 25)


class FixedNormalSource:
    """Random source returning scripted draws, then zeros."""

    def __init__(self, draws=()):
        self.draws = list(draws)
        self.calls = 0

    def standard_normal(self):
        self.calls += 1
        return self.draws.pop(0) if self.draws else 0.0

    def uniform(self, low, high):
        return low


@pytest.fixture
def valuation_date() -> date:
    return VALUATION_DATE


@pytest.fixture
def aapl() -> StockQuote:
    return StockQuote(ticker="AAPL", company_name="Apple Inc.", price=150.0, mu=0.15, sigma=0.30)


@pytest.fixture
def tsla() -> StockQuote:
    return StockQuote(ticker="TSLA", company_name="Tesla Inc.", price=400.0, mu=0.35, sigma=0.60)


@pytest.fixture
def aapl_call() -> OptionSpec:
    return OptionSpec(
        ticker="AAPL-OCT-2025-110-C",
        underlying_ticker="AAPL",
        option_kind=OptionKind.CALL,
        strike=110.0,
        expiry=date(2025, 10, 17),
    )


@pytest.fixture
def tsla_put() -> OptionSpec:
    return OptionSpec(
        ticker="TSLA-DEC-2025-450-P",
        underlying_ticker="TSLA",
        option_kind=OptionKind.PUT,
        strike=450.0,
        expiry=date(2025, 12, 19),
    )


@pytest.fixture
def reference(aapl, tsla, aapl_call, tsla_put) -> SecurityReference:
    return SecurityReference.build([aapl, tsla], [aapl_call, tsla_put])


@pytest.fixture
def positions(aapl, tsla, aapl_call, tsla_put) -> list[Position]:
    return [
        Position(security=aapl, quantity=1000),
        Position(security=aapl_call, quantity=-20),
        Position(security=tsla, quantity=-500),
        Position(security=tsla_put, quantity=-10),
    ]


@pytest.fixture
def fast_params() -> SimulationParams:
    """Simulation params with a near-zero tick interval."""
    return SimulationParams(tick_interval_seconds=0.001, seed=1234)


@pytest.fixture
def pricing_params() -> PricingParams:
    return PricingParams()


@pytest.fixture
def zero_source() -> FixedNormalSource:
    return FixedNormalSource()


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(42)


@pytest.fixture(autouse=True)
def reset_structlog():
    """Keep structlog configuration from leaking between tests."""
    yield
    structlog.reset_defaults()
