"""Discounting helpers used by the sizing objective and the ROI analysis.

All monetary values are in the caller's currency.  Rates are fractions
(0.05 = 5 %).
"""

from __future__ import annotations

from typing import Optional, Sequence

from engine.errors import ConfigurationError


# ======================================================================
# Discounting
# ======================================================================

def _discount_factor(rate: float, year: int) -> float:
    """Return ``1 / (1 + rate) ** year``."""
    return 1.0 / (1.0 + rate) ** year


def _annuity_factor(rate: float, years: int) -> float:
    """Present-value annuity factor: sum of discount factors for years 1..N."""
    if rate == 0:
        return float(years)
    return sum(_discount_factor(rate, y) for y in range(1, years + 1))


def capital_recovery_factor(rate: float, years: int) -> float:
    """Share of an investment to charge per year over *years* at *rate*.

    This is the ``annuity`` factor of :class:`~engine.sizing.config.SizingConfig`:
    ``rate * (1 + rate)**N / ((1 + rate)**N - 1)``, or ``1 / N`` at zero rate.
    """
    if years < 1:
        raise ConfigurationError(f"years must be >= 1, got {years}")
    if rate <= -1:
        raise ConfigurationError(f"rate must be > -1, got {rate}")
    return 1.0 / _annuity_factor(rate, years)


# ======================================================================
# Cash-flow metrics
# ======================================================================

def net_present_value(rate: float, investment: float, cash_flows: Sequence[float]) -> float:
    """``-investment + sum(cf[i] / (1 + rate)**i)`` with the first flow at i = 0."""
    return -investment + sum(cf * _discount_factor(rate, i) for i, cf in enumerate(cash_flows))


def payback_period(investment: float, cash_flows: Sequence[float]) -> Optional[float]:
    """Years until undiscounted cumulative flows reach *investment*.

    Interpolated linearly inside the year in which the investment is
    recovered: ``i + (investment - cumulative_before) / cf[i]``.  ``None`` if
    the investment is never recovered.
    """
    cumulative = 0.0
    for i, cf in enumerate(cash_flows):
        if cf > 0 and cumulative + cf >= investment:
            return i + (investment - cumulative) / cf
        cumulative += cf
    return None
