"""
Pricing module.

Discrete-time price evolution for stocks and closed-form Black-Scholes
valuation for European options.
"""

from .black_scholes import intrinsic_value, norm_cdf, price_option, year_fraction
from .evolution import PriceEvolver, evolve_price

__all__ = [
    "PriceEvolver",
    "evolve_price",
    "intrinsic_value",
    "norm_cdf",
    "price_option",
    "year_fraction",
]
