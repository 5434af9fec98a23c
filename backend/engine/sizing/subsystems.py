"""Optional subsystems resolved once per sizing problem.

Each family is either present (carrying the constants the LP needs) or
absent.  The model builder branches on ``present`` once per family instead
of threading enable flags through every constraint.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional, Union

import numpy as np
from numpy.typing import ArrayLike, NDArray

from engine.building.heat import heat_pump_electricity
from engine.errors import ConfigurationError
from engine.sizing.config import SizingConfig

logger = logging.getLogger(__name__)

HOURS_PER_YEAR = 8760
DAY_START_HOUR = 6
DAY_END_HOUR = 18


# ======================================================================
# Storage (battery, hot water)
# ======================================================================

@dataclass(frozen=True)
class Storage:
    """A lossy store with a sizable capacity.

    ``capacity_lower == capacity_upper`` pins the capacity.  ``math.inf``
    as upper bound leaves it free.
    """

    name: str
    eta_in: float
    eta_out: float
    loss: float
    c_rate: float
    capacity_lower: float
    capacity_upper: float
    unit_cost: float

    present = True


@dataclass(frozen=True)
class NoStorage:
    name: str

    present = False


# ======================================================================
# Heat pump
# ======================================================================

@dataclass(frozen=True, eq=False)
class HeatPump:
    """Heat pump with its hourly electricity draw fixed in advance."""

    consumption: NDArray[np.float64]
    heat_demand: NDArray[np.float64]
    capacity_upper: float
    unit_cost: float

    present = True


@dataclass(frozen=True)
class NoHeatPump:
    present = False


# ======================================================================
# EV charging
# ======================================================================

@dataclass(frozen=True, eq=False)
class EVCharging:
    """Charging allowed where ``window`` is true; yearly total is fixed."""

    window: NDArray[np.bool_]
    daily_energy_kwh: float

    present = True

    @property
    def annual_energy_kwh(self) -> float:
        return self.daily_energy_kwh * 365


@dataclass(frozen=True)
class NoEV:
    present = False


@dataclass(frozen=True)
class Subsystems:
    battery: Union[Storage, NoStorage]
    hot_water: Union[Storage, NoStorage]
    heat_pump: Union[HeatPump, NoHeatPump]
    ev: Union[EVCharging, NoEV]

    def summary(self) -> dict[str, bool]:
        return {
            "battery": self.battery.present,
            "hot_water": self.hot_water.present,
            "heat_pump": self.heat_pump.present,
            "ev": self.ev.present,
        }


def charging_window(charge_during_day: bool) -> NDArray[np.bool_]:
    """Hourly mask of allowed EV charging hours (day = 06:00 -- 17:59)."""
    hour_of_day = np.arange(HOURS_PER_YEAR) % 24
    daytime = (hour_of_day >= DAY_START_HOUR) & (hour_of_day < DAY_END_HOUR)
    return daytime if charge_during_day else ~daytime


# ======================================================================
# Resolver
# ======================================================================

def _resolve_battery(config: SizingConfig) -> Union[Storage, NoStorage]:
    if config.battery_capacity <= 0:
        return NoStorage("battery")
    lower = config.battery_capacity if config.battery_fixed else 0.0
    return Storage(
        name="battery",
        eta_in=config.battery_eta_in,
        eta_out=config.battery_eta_out,
        loss=config.battery_loss,
        c_rate=config.c_rate,
        capacity_lower=lower,
        capacity_upper=config.battery_capacity,
        unit_cost=config.inv_battery,
    )


def _resolve_hot_water(config: SizingConfig) -> Union[Storage, NoStorage]:
    if not config.hot_water_enabled or config.hot_water_max == 0:
        return NoStorage("hot_water")
    return Storage(
        name="hot_water",
        eta_in=config.hot_water_eta_in,
        eta_out=config.hot_water_eta_out,
        loss=config.hot_water_loss,
        c_rate=config.hot_water_c_rate,
        capacity_lower=0.0,
        capacity_upper=math.inf if config.hot_water_max is None else config.hot_water_max,
        unit_cost=config.inv_hot_water,
    )


def _resolve_heat_pump(
    config: SizingConfig,
    heat_demand: Optional[ArrayLike],
    cop: Optional[ArrayLike],
) -> Union[HeatPump, NoHeatPump]:
    if not config.heat_pump.enabled:
        return NoHeatPump()
    if heat_demand is None:
        raise ConfigurationError("Heat pump is enabled but no heat demand series was given")

    heat = np.asarray(heat_demand, dtype=np.float64)
    if cop is None:
        logger.warning(
            "No COP series supplied; using constant COP %.1f", config.heat_pump.default_cop
        )
        cop = np.full(HOURS_PER_YEAR, config.heat_pump.default_cop, dtype=np.float64)

    consumption = heat_pump_electricity(heat, cop)
    upper = config.heat_pump_capacity_max
    return HeatPump(
        consumption=consumption,
        heat_demand=heat,
        capacity_upper=math.inf if upper is None else upper,
        unit_cost=config.inv_heat_pump,
    )


def _resolve_ev(config: SizingConfig) -> Union[EVCharging, NoEV]:
    if not config.ev.enabled:
        return NoEV()
    return EVCharging(
        window=charging_window(config.ev.charge_during_day),
        daily_energy_kwh=config.ev.daily_energy_kwh,
    )


def resolve_subsystems(
    config: SizingConfig,
    heat_demand: Optional[ArrayLike] = None,
    cop: Optional[ArrayLike] = None,
) -> Subsystems:
    """Decide which optional families exist and precompute their constants.

    Raises
    ------
    ConfigurationError
        If the heat pump is enabled without a heat-demand series, or a
        supplied series has the wrong length.
    """
    return Subsystems(
        battery=_resolve_battery(config),
        hot_water=_resolve_hot_water(config),
        heat_pump=_resolve_heat_pump(config, heat_demand, cop),
        ev=_resolve_ev(config),
    )
