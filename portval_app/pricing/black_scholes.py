"""
Black-Scholes valuation for European options.

The standard normal CDF uses the Abramowitz-Stegun rational approximation
(formula 26.2.17), clipped to exactly 0 or 1 beyond eight standard deviations.
Expired options are valued at intrinsic value with no rate or volatility term.
"""

import math
from datetime import date

from ..models.securities import OptionKind, OptionSpec

# Abramowitz-Stegun 26.2.17 coefficients
_P = 0.2316419
_B1 = 0.319381530
_B2 = -0.356563782
_B3 = 1.781477937
_B4 = -1.821255978
_B5 = 1.330274429
_INV_SQRT_2PI = 0.39894228

_CDF_CUTOFF = 8.0

DEFAULT_RISK_FREE_RATE = 0.02


def norm_cdf(z: float) -> float:
    """Standard normal cumulative distribution function."""
    if z < -_CDF_CUTOFF:
        return 0.0
    if z > _CDF_CUTOFF:
        return 1.0

    t = 1.0 / (1.0 + _P * abs(z))
    poly = t * (_B1 + t * (_B2 + t * (_B3 + t * (_B4 + t * _B5))))
    density = _INV_SQRT_2PI * math.exp(-z * z / 2.0)
    result = 1.0 - density * poly

    return 1.0 - result if z < 0 else result


def year_fraction(valuation_date: date, expiry: date, days_per_year: float = 365.0) -> float:
    """Time to expiry in years, floored at zero."""
    return max(0.0, (expiry - valuation_date).days / days_per_year)


def intrinsic_value(kind: OptionKind, underlying_price: float, strike: float) -> float:
    """Exercise value of an option right now."""
    if kind == OptionKind.CALL:
        return max(0.0, underlying_price - strike)
    return max(0.0, strike - underlying_price)


def black_scholes(
    kind: OptionKind,
    underlying_price: float,
    strike: float,
    time_to_expiry: float,
    volatility: float,
    risk_free_rate: float = DEFAULT_RISK_FREE_RATE,
) -> float:
    """
    Closed-form European option value.

    Args:
        kind: CALL or PUT
        underlying_price: Spot price S
        strike: Strike K
        time_to_expiry: T in years
        volatility: Annualized sigma
        risk_free_rate: Continuously compounded r

    Returns:
        Theoretical option value
    """
    if time_to_expiry <= 0:
        return intrinsic_value(kind, underlying_price, strike)

    discount = strike * math.exp(-risk_free_rate * time_to_expiry)

    # Degenerate inputs collapse to the discounted forward payoff
    if volatility <= 0 or underlying_price <= 0:
        forward_payoff = underlying_price - discount
        if kind == OptionKind.CALL:
            return max(0.0, forward_payoff)
        return max(0.0, -forward_payoff)

    vol_sqrt_t = volatility * math.sqrt(time_to_expiry)
    d1 = (
        math.log(underlying_price / strike)
        + (risk_free_rate + 0.5 * volatility ** 2) * time_to_expiry
    ) / vol_sqrt_t
    d2 = d1 - vol_sqrt_t

    if kind == OptionKind.CALL:
        return underlying_price * norm_cdf(d1) - discount * norm_cdf(d2)
    return discount * norm_cdf(-d2) - underlying_price * norm_cdf(-d1)


def price_option(
    spec: OptionSpec,
    underlying_price: float,
    underlying_volatility: float,
    risk_free_rate: float,
    valuation_date: date,
    days_per_year: float = 365.0,
) -> float:
    """Value an option definition as of valuation_date."""
    time_to_expiry = year_fraction(valuation_date, spec.expiry, days_per_year)
    return black_scholes(
        spec.option_kind,
        underlying_price,
        spec.strike,
        time_to_expiry,
        underlying_volatility,
        risk_free_rate,
    )
