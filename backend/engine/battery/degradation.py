"""
Multi-year behaviour of an already-sized PV + battery system.

Unlike the sizing LP this is a greedy, non-optimising heuristic.  Each year
the (degraded) PV output is compared with demand hour by hour:

* surplus charges the battery, limited by free capacity and the charge rate;
* deficit discharges it, limited by stored energy and the discharge rate;
* the stored energy decays by the hourly self-discharge rate every hour.

The battery starts every year empty.  At the end of each year the battery
capacity and the PV output both shrink by their annual degradation rates,
compounding across years.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping

import numpy as np
from numpy.typing import ArrayLike, NDArray

from engine.errors import ConfigurationError

logger = logging.getLogger(__name__)

HOURS_PER_YEAR = 8760


# ======================================================================
# Parameters and results
# ======================================================================

@dataclass(frozen=True)
class DegradationParams:
    """Ageing and power limits for :func:`simulate_degradation`.

    Parameters
    ----------
    years : int
        Number of simulated years (>= 1).
    battery_hourly_loss : float
        Fraction of stored energy lost per hour.
    battery_annual_degradation : float
        Fraction of battery capacity lost per year.
    pv_annual_degradation : float
        Fraction of PV output lost per year.
    max_charge_rate : float
        Maximum charge per hour (kW).
    max_discharge_rate : float
        Maximum discharge per hour (kW).
    """

    years: int = 20
    battery_hourly_loss: float = 0.001
    battery_annual_degradation: float = 0.02
    pv_annual_degradation: float = 0.005
    max_charge_rate: float = 5.0
    max_discharge_rate: float = 5.0

    def __post_init__(self) -> None:
        if self.years < 1:
            raise ConfigurationError(f"years must be >= 1, got {self.years}")
        for name in ("battery_hourly_loss", "battery_annual_degradation", "pv_annual_degradation"):
            value = getattr(self, name)
            if not 0 <= value < 1:
                raise ConfigurationError(f"{name} must be in [0, 1), got {value}")
        for name in ("max_charge_rate", "max_discharge_rate"):
            if getattr(self, name) < 0:
                raise ConfigurationError(f"{name} must be >= 0, got {getattr(self, name)}")


@dataclass(frozen=True)
class YearSummary:
    year: int
    battery_capacity_kwh: float
    production_kwh: float
    direct_consumption_kwh: float
    battery_in_kwh: float
    battery_out_kwh: float
    raw_overproduction_kwh: float

    def to_dict(self) -> dict[str, float]:
        return {
            "year": self.year,
            "battery_capacity_kwh": self.battery_capacity_kwh,
            "production_kwh": self.production_kwh,
            "direct_consumption_kwh": self.direct_consumption_kwh,
            "battery_in_kwh": self.battery_in_kwh,
            "battery_out_kwh": self.battery_out_kwh,
            "raw_overproduction_kwh": self.raw_overproduction_kwh,
        }


@dataclass(frozen=True)
class SimulationResult:
    """Totals over all simulated years.  ``autarky`` is a fraction (0 -- 1)."""

    years: int
    pv_capacity_kw: float
    battery_capacity_kwh: float
    total_production_kwh: float
    direct_consumption_kwh: float
    battery_in_kwh: float
    battery_out_kwh: float
    overproduction_kwh: float
    overproduction_without_battery_kwh: float
    total_demand_kwh: float
    autarky: float
    final_battery_capacity_kwh: float
    yearly: tuple[YearSummary, ...] = field(default=(), compare=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "years": self.years,
            "pv_capacity_kw": self.pv_capacity_kw,
            "battery_capacity_kwh": self.battery_capacity_kwh,
            "total_production_kwh": self.total_production_kwh,
            "direct_consumption_kwh": self.direct_consumption_kwh,
            "battery_in_kwh": self.battery_in_kwh,
            "battery_out_kwh": self.battery_out_kwh,
            "overproduction_kwh": self.overproduction_kwh,
            "overproduction_without_battery_kwh": self.overproduction_without_battery_kwh,
            "total_demand_kwh": self.total_demand_kwh,
            "autarky": self.autarky,
            "final_battery_capacity_kwh": self.final_battery_capacity_kwh,
            "yearly": [y.to_dict() for y in self.yearly],
        }


# ======================================================================
# Simulation
# ======================================================================

def _simulate_year(
    production: NDArray[np.float64],
    demand: NDArray[np.float64],
    capacity: float,
    params: DegradationParams,
) -> tuple[float, float]:
    """Greedy battery dispatch for one year; returns (energy in, energy out)."""
    keep = 1.0 - params.battery_hourly_loss
    level = 0.0
    total_in = 0.0
    total_out = 0.0
    surplus = (production - demand).tolist()

    for over in surplus:
        level *= keep
        if over > 0:
            charge = min(over, capacity - level, params.max_charge_rate)
            if charge > 0:
                level += charge
                total_in += charge
        elif over < 0 and level > 0:
            discharge = min(level, -over, params.max_discharge_rate)
            level -= discharge
            total_out += discharge

    return total_in, total_out


def simulate_degradation(
    pv_capacity: float,
    battery_capacity: float,
    solar: ArrayLike,
    demand: ArrayLike,
    params: DegradationParams | None = None,
) -> SimulationResult:
    """Run the greedy dispatch over ``params.years`` ageing years.

    Parameters
    ----------
    pv_capacity : float
        Installed PV (kW).
    battery_capacity : float
        Initial usable battery capacity (kWh).
    solar : array-like
        Normalised PV yield per kW for one year.
    demand : array-like
        Electricity demand per hour (kWh), same length as *solar*.
    params : DegradationParams, optional
        Ageing parameters; defaults apply when omitted.

    Raises
    ------
    ConfigurationError
        On negative capacities, empty or mismatched series.
    """
    params = params or DegradationParams()
    solar_arr = np.asarray(solar, dtype=np.float64)
    demand_arr = np.asarray(demand, dtype=np.float64)

    if pv_capacity < 0 or battery_capacity < 0:
        raise ConfigurationError("Capacities must be >= 0")
    if solar_arr.ndim != 1 or solar_arr.size == 0:
        raise ConfigurationError("solar must be a non-empty 1-D series")
    if demand_arr.shape != solar_arr.shape:
        raise ConfigurationError(
            f"demand shape {demand_arr.shape} does not match solar shape {solar_arr.shape}"
        )

    production = pv_capacity * solar_arr
    capacity = float(battery_capacity)
    yearly: list[YearSummary] = []

    for year in range(params.years):
        total_in, total_out = _simulate_year(production, demand_arr, capacity, params)
        yearly.append(
            YearSummary(
                year=year + 1,
                battery_capacity_kwh=capacity,
                production_kwh=float(production.sum()),
                direct_consumption_kwh=float(np.minimum(production, demand_arr).sum()),
                battery_in_kwh=total_in,
                battery_out_kwh=total_out,
                raw_overproduction_kwh=float(np.maximum(production - demand_arr, 0.0).sum()),
            )
        )
        capacity *= 1.0 - params.battery_annual_degradation
        production = production * (1.0 - params.pv_annual_degradation)

    total_direct = sum(y.direct_consumption_kwh for y in yearly)
    total_in = sum(y.battery_in_kwh for y in yearly)
    total_out = sum(y.battery_out_kwh for y in yearly)
    raw_over = sum(y.raw_overproduction_kwh for y in yearly)
    total_demand = float(demand_arr.sum()) * params.years
    autarky = (total_direct + total_out) / total_demand if total_demand > 0 else 0.0

    logger.debug(
        "Degradation run: PV %.2f kW, battery %.2f kWh, %d years, autarky %.3f",
        pv_capacity, battery_capacity, params.years, autarky,
    )
    return SimulationResult(
        years=params.years,
        pv_capacity_kw=float(pv_capacity),
        battery_capacity_kwh=float(battery_capacity),
        total_production_kwh=sum(y.production_kwh for y in yearly),
        direct_consumption_kwh=total_direct,
        battery_in_kwh=total_in,
        battery_out_kwh=total_out,
        overproduction_kwh=raw_over - total_in,
        overproduction_without_battery_kwh=raw_over,
        total_demand_kwh=total_demand,
        autarky=autarky,
        final_battery_capacity_kwh=capacity,
        yearly=tuple(yearly),
    )


def simulate_scenarios(
    scenarios: Mapping[str, tuple[float, float]],
    solar: ArrayLike,
    demand: ArrayLike,
    params: DegradationParams | None = None,
) -> dict[str, SimulationResult]:
    """Run :func:`simulate_degradation` for each ``label -> (pv_kw, battery_kwh)``."""
    return {
        label: simulate_degradation(pv, battery, solar, demand, params)
        for label, (pv, battery) in scenarios.items()
    }


def scenario_from_sizing(result: Any) -> tuple[float, float]:
    """``(pv_kw, battery_kwh)`` of a solved :class:`~engine.sizing.results.SizingResult`."""
    return result.pv_capacity_kw, result.battery_capacity_kwh
