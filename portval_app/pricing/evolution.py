"""
Discrete geometric Brownian motion step for stock prices.

Each tick moves a price by

    dS = S * (mu * dt/T + sigma * eps * sqrt(dt/T))

where dt is the tick length, T the total horizon used to normalize it, and
eps a standard normal draw. The result is clamped to [floor, ceiling]: prices
outside that band are silently truncated rather than treated as errors.
"""

import math
from typing import Protocol

from ..config.defaults import SimulationParams
from ..models.securities import StockQuote


class RandomSource(Protocol):
    """Anything that yields standard normal draws (e.g. numpy.random.Generator)."""

    def standard_normal(self) -> float: ...


def evolve_price(
    price: float,
    mu: float,
    sigma: float,
    epsilon: float,
    time_step: float = 1.0,
    horizon: float = 7257600.0,
    floor: float = 0.5,
    ceiling: float = 1000.0,
) -> float:
    """
    Advance a price by one step.

    Args:
        price: Current price S
        mu: Drift
        sigma: Volatility (sigma=0 gives pure drift)
        epsilon: Standard normal draw
        time_step: Step length dt in seconds
        horizon: Normalizing horizon T in seconds
        floor: Lowest price returned
        ceiling: Highest price returned

    Returns:
        The clamped next price
    """
    fraction = time_step / horizon
    delta = price * (mu * fraction + sigma * epsilon * math.sqrt(fraction))
    return max(floor, min(price + delta, ceiling))


class PriceEvolver:
    """Applies one growth-model step to stock quotes using fixed simulation params."""

    def __init__(self, params: SimulationParams):
        self.params = params

    def evolve(self, quote: StockQuote, epsilon: float) -> StockQuote:
        """Return a new quote moved by the given draw. Deterministic."""
        new_price = evolve_price(
            quote.price,
            quote.mu,
            quote.sigma,
            epsilon,
            time_step=self.params.time_step_seconds,
            horizon=self.params.horizon_seconds,
            floor=self.params.price_floor,
            ceiling=self.params.price_ceiling,
        )
        return quote.with_price(new_price)

    def step(self, quote: StockQuote, rng: RandomSource) -> StockQuote:
        """Consume exactly one draw from rng and return the evolved quote."""
        return self.evolve(quote, float(rng.standard_normal()))
