"""Hourly space-heat demand and the heat-pump electricity needed to cover it."""

from __future__ import annotations

import logging
from typing import Sequence

import numpy as np
from numpy.typing import ArrayLike, NDArray

from engine.building.insulation import (
    BuildingType,
    ConstructionPeriod,
    InsulationLevel,
    annual_heating_demand_per_m2,
)
from engine.errors import ConfigurationError
from engine.load.demand import HOURS_PER_YEAR, month_slices

logger = logging.getLogger(__name__)

DEFAULT_COP = 3.0

# Envelope heat-loss coefficient in W per m² of floor per K.
LOSS_COEFFICIENT_W_M2K = {
    InsulationLevel.POOR: 2.5,
    InsulationLevel.MODERATE: 1.8,
    InsulationLevel.GOOD: 1.2,
}

# Typical monthly mean outdoor temperature (°C), January first.
MONTHLY_OUTDOOR_TEMPERATURE_C = (8.0, 9.0, 12.0, 14.0, 18.0, 22.0, 25.0, 25.0, 22.0, 17.0, 12.0, 9.0)


def _hourly(values: ArrayLike, name: str) -> NDArray[np.float64]:
    arr = np.asarray(values, dtype=np.float64)
    if arr.shape != (HOURS_PER_YEAR,):
        raise ConfigurationError(
            f"{name} must have shape ({HOURS_PER_YEAR},), got {arr.shape}"
        )
    return arr


def heat_demand_from_profile(
    floor_area_m2: float,
    building_type: BuildingType | str,
    construction_period: ConstructionPeriod | str,
    insulation: InsulationLevel | str,
    profile: ArrayLike,
) -> NDArray[np.float64]:
    """Distribute the building's annual heating need over an hourly profile.

    Parameters
    ----------
    floor_area_m2 : float
        Heated floor area.
    building_type, construction_period, insulation
        Keys into :data:`~engine.building.insulation.HEATING_NEED`.
    profile : array-like, shape (8760,)
        Relative hourly heat-demand shape; only its proportions matter.

    Returns
    -------
    ndarray, shape (8760,)
        Hourly heat demand in kWh summing to ``area * kWh/m²``.
    """
    if floor_area_m2 < 0:
        raise ConfigurationError(f"floor_area_m2 must be >= 0, got {floor_area_m2}")
    shape = _hourly(profile, "heat profile")
    annual_kwh = annual_heating_demand_per_m2(building_type, construction_period, insulation) * floor_area_m2

    total = float(shape.sum())
    if total <= 0:
        return np.zeros(HOURS_PER_YEAR, dtype=np.float64)
    return shape / total * annual_kwh


def heat_demand_from_temperatures(
    floor_area_m2: float,
    insulation: InsulationLevel | str,
    monthly_setpoints_c: Sequence[float],
    outdoor_c: Sequence[float] = MONTHLY_OUTDOOR_TEMPERATURE_C,
) -> NDArray[np.float64]:
    """Steady-state heat loss against monthly mean outdoor temperatures.

    Used when no measured heat profile is available.
    """
    if len(monthly_setpoints_c) != 12 or len(outdoor_c) != 12:
        raise ConfigurationError("Monthly temperatures need exactly 12 values")
    coefficient = LOSS_COEFFICIENT_W_M2K[InsulationLevel(insulation)]

    demand = np.zeros(HOURS_PER_YEAR, dtype=np.float64)
    for month, hours in enumerate(month_slices()):
        delta_t = float(monthly_setpoints_c[month]) - float(outdoor_c[month])
        if delta_t > 0:
            demand[hours] = coefficient * floor_area_m2 * delta_t / 1000.0
    return demand


def heat_pump_electricity(
    heat_demand: ArrayLike, cop: ArrayLike
) -> NDArray[np.float64]:
    """Electricity (kWh) drawn by the heat pump; zero wherever COP <= 0."""
    heat = _hourly(heat_demand, "heat demand")
    cop_arr = _hourly(cop, "COP")
    electricity = np.zeros(HOURS_PER_YEAR, dtype=np.float64)
    positive = cop_arr > 0
    electricity[positive] = heat[positive] / cop_arr[positive]
    if not positive.all():
        logger.debug("COP <= 0 in %d hours; heat pump consumption set to zero", int((~positive).sum()))
    return electricity
