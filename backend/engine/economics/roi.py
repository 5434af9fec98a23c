"""Return on investment of a sized system.

The ROI is the constant annual rate ``r`` whose compounding reproduces the
growth of the reinvested savings stream:

    f(r) = ((sum_{i=0}^{N-1} (1 + r)**i * s[i]) / I) ** (1 / N) - 1 - r

The root is searched by bisection on ``[-0.3, 2.0]``.  If the bracket holds no
sign change, or bisection does not settle, Newton's method with a central
difference derivative starts from 0.1.  Newton always returns its best
iterate; ``ROIResult.converged`` tells callers whether the residual met the
tolerance or the value is a best-effort estimate.
"""

from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass
from typing import Any, Callable, Optional, Sequence

import numpy as np

from engine.economics.metrics import net_present_value, payback_period
from engine.errors import ConfigurationError

logger = logging.getLogger(__name__)

ROI_LOWER = -0.3
ROI_UPPER = 2.0
TOLERANCE = 1e-6
MAX_ITERATIONS = 100
NEWTON_START = 0.1
NEWTON_STEP = 1e-8
MIN_DERIVATIVE = 1e-12


@dataclass(frozen=True)
class ROIResult:
    roi: float
    npv: float
    payback_years: Optional[float]
    converged: bool
    method: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


# ======================================================================
# Root finding
# ======================================================================

def roi_equation(initial_investment: float, savings: Sequence[float]) -> Callable[[float], float]:
    """Build ``f(r)``; it returns NaN where the normalised sum is not positive."""
    s = np.asarray(savings, dtype=np.float64)
    n = s.shape[0]
    exponents = np.arange(n, dtype=np.float64)

    def f(r: float) -> float:
        if r <= -1.0:
            return math.nan
        normalised = float(np.sum((1.0 + r) ** exponents * s)) / initial_investment
        if not normalised > 0:
            return math.nan
        return normalised ** (1.0 / n) - 1.0 - r

    return f


def _bisect(f: Callable[[float], float], low: float, high: float) -> Optional[float]:
    """Bisection root of *f*, or ``None`` if the bracket is unusable."""
    f_low = f(low)
    f_high = f(high)
    if not (math.isfinite(f_low) and math.isfinite(f_high)) or f_low * f_high > 0:
        return None

    for _ in range(MAX_ITERATIONS):
        mid = (low + high) / 2.0
        f_mid = f(mid)
        if not math.isfinite(f_mid):
            return None
        if abs(f_mid) < TOLERANCE:
            return mid
        if f_low * f_mid < 0:
            high = mid
        else:
            low, f_low = mid, f_mid
        if high - low < TOLERANCE:
            return (low + high) / 2.0
    return None


def _newton(f: Callable[[float], float], x0: float) -> tuple[float, bool]:
    """Newton iteration; returns ``(best_x, converged)``."""
    x = x0
    best_x = x0
    best_residual = math.inf

    for _ in range(MAX_ITERATIONS):
        fx = f(x)
        if not math.isfinite(fx):
            break
        if abs(fx) < best_residual:
            best_x, best_residual = x, abs(fx)
        if abs(fx) < TOLERANCE:
            return x, True

        derivative = (f(x + NEWTON_STEP) - f(x - NEWTON_STEP)) / (2.0 * NEWTON_STEP)
        if not math.isfinite(derivative) or abs(derivative) < MIN_DERIVATIVE:
            break
        x -= fx / derivative

    return best_x, False


def solve_roi(initial_investment: float, annual_savings: Sequence[float]) -> ROIResult:
    """Solve for the ROI of *annual_savings* against *initial_investment*.

    Parameters
    ----------
    initial_investment : float
        Up-front cost.  ``<= 0`` yields ``roi = npv = 0`` and no payback
        without running any root finder.
    annual_savings : sequence of float
        Savings for years 0 .. N-1.

    Returns
    -------
    ROIResult
        ``npv`` is evaluated at the solved rate; ``payback_years`` is
        ``None`` if undiscounted savings never recover the investment.

    Raises
    ------
    ConfigurationError
        If *annual_savings* is empty while the investment is positive.
    """
    if initial_investment <= 0:
        return ROIResult(roi=0.0, npv=0.0, payback_years=None, converged=True, method="degenerate")

    savings = [float(s) for s in annual_savings]
    if not savings:
        raise ConfigurationError("annual_savings must contain at least one year")

    f = roi_equation(initial_investment, savings)
    roi = _bisect(f, ROI_LOWER, ROI_UPPER)
    if roi is not None:
        converged, method = True, "bisection"
    else:
        roi, converged = _newton(f, NEWTON_START)
        method = "newton"
        if not converged:
            logger.warning(
                "ROI root finder did not converge; returning best estimate %.6f", roi
            )

    return ROIResult(
        roi=roi,
        npv=net_present_value(roi, initial_investment, savings),
        payback_years=payback_period(initial_investment, savings),
        converged=converged,
        method=method,
    )


# ======================================================================
# Savings from a sized system
# ======================================================================

def savings_stream(
    grid_price: float,
    usage_kwh: float,
    grid_energy_kwh: float,
    years: int,
    price_increase: float = 0.0,
    other_yearly_cost: float = 0.0,
) -> list[float]:
    """Yearly savings versus buying all electricity from the grid.

    ``s[i] = price * usage * (1 + g)**i - (price * grid * (1 + g)**i + other)``
    """
    if years < 1:
        raise ConfigurationError(f"years must be >= 1, got {years}")
    return [
        grid_price * usage_kwh * (1.0 + price_increase) ** i
        - (grid_price * grid_energy_kwh * (1.0 + price_increase) ** i + other_yearly_cost)
        for i in range(years)
    ]


def initial_investment(result: Any) -> float:
    """Capital cost of the capacities in a :class:`~engine.sizing.results.SizingResult`."""
    config = result.config
    if config is None:
        raise ConfigurationError("SizingResult carries no configuration")
    return (
        result.pv_capacity_kw * config.inv_pv
        + result.grid_capacity_kw * config.inv_grid
        + result.battery_capacity_kwh * config.inv_battery
        + result.hot_water_capacity_kwh * config.inv_hot_water
        + result.heat_pump_capacity_kw * config.inv_heat_pump
    )


def roi_from_sizing(result: Any, years: int = 25, other_yearly_cost: float = 0.0) -> ROIResult:
    """ROI of a solved sizing result over *years*.

    The first-year saving is the grid bill for the total electricity demand
    minus the bill for the remaining grid draw, both priced hour by hour.
    Feed-in revenue is not counted.  Savings escalate with the configured
    ``electricity_price_increase``.
    """
    config = result.config
    if config is None:
        raise ConfigurationError("SizingResult carries no configuration")

    hourly = result.hourly
    if "price" in hourly and "total_electricity_demand" in hourly:
        baseline = float(np.dot(hourly["price"], hourly["total_electricity_demand"]))
        with_system = float(np.dot(hourly["price"], hourly["grid"]))
    else:
        usage = (
            result.annual_electricity_demand_kwh
            + result.annual_ev_charging_kwh
            + result.annual_heat_pump_energy_kwh
            + result.annual_hot_water_heating_kwh
        )
        baseline = config.grid_price * usage
        with_system = config.grid_price * result.annual_grid_energy_kwh

    savings = savings_stream(
        grid_price=1.0,
        usage_kwh=baseline,
        grid_energy_kwh=with_system,
        years=years,
        price_increase=config.electricity_price_increase,
        other_yearly_cost=other_yearly_cost,
    )
    return solve_roi(initial_investment(result), savings)
