"""Configuration for a single sizing run.

Units: energy in kWh, power and PV/grid/heat-pump capacity in kW, battery and
hot-water capacity in kWh, money in currency units.  Investment costs are per
unit of capacity and are annuitised with :attr:`SizingConfig.annuity`.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Optional, Tuple

from engine.building.insulation import (
    BuildingType,
    ConstructionPeriod,
    HeatingMedium,
    InsulationLevel,
)
from engine.errors import ConfigurationError
from engine.grid.tariff import ElectricityRate
from engine.load.demand import MonthlyDemand


def _check_fraction(name: str, value: float, allow_zero: bool) -> None:
    low_ok = value >= 0 if allow_zero else value > 0
    if not (low_ok and value <= 1):
        bound = "[0, 1]" if allow_zero else "(0, 1]"
        raise ConfigurationError(f"{name} must be in {bound}, got {value}")


def _check_non_negative(name: str, value: Optional[float]) -> None:
    if value is not None and value < 0:
        raise ConfigurationError(f"{name} must be >= 0, got {value}")


@dataclass(frozen=True)
class EVConfig:
    """Electric vehicle charged at home.

    The car needs ``min(daily_km * kwh_per_km, battery_kwh)`` every day, and
    may only charge during the day (06:00 -- 17:59) or only outside it.
    """

    enabled: bool = False
    daily_km: float = 50.0
    kwh_per_km: float = 0.2
    battery_kwh: float = 50.0
    charge_during_day: bool = True

    def __post_init__(self) -> None:
        _check_non_negative("daily_km", self.daily_km)
        _check_non_negative("kwh_per_km", self.kwh_per_km)
        _check_non_negative("battery_kwh", self.battery_kwh)

    @property
    def daily_energy_kwh(self) -> float:
        return min(self.daily_km * self.kwh_per_km, self.battery_kwh)

    @property
    def annual_energy_kwh(self) -> float:
        return self.daily_energy_kwh * 365


@dataclass(frozen=True)
class HeatPumpConfig:
    """Air-source heat pump covering the building's space heating."""

    enabled: bool = False
    floor_area_m2: float = 100.0
    building_type: BuildingType = BuildingType.SINGLE_FAMILY
    construction_period: ConstructionPeriod = ConstructionPeriod.BEFORE_1900
    insulation: InsulationLevel = InsulationLevel.MODERATE
    heating_medium: HeatingMedium = HeatingMedium.FLOOR
    monthly_setpoints_c: Tuple[float, ...] = (20.0,) * 12
    default_cop: float = 3.0

    def __post_init__(self) -> None:
        _check_non_negative("floor_area_m2", self.floor_area_m2)
        if self.default_cop <= 0:
            raise ConfigurationError(f"default_cop must be > 0, got {self.default_cop}")
        if len(self.monthly_setpoints_c) != 12:
            raise ConfigurationError("monthly_setpoints_c needs 12 values")
        object.__setattr__(self, "building_type", BuildingType(self.building_type))
        object.__setattr__(self, "construction_period", ConstructionPeriod(self.construction_period))
        object.__setattr__(self, "insulation", InsulationLevel(self.insulation))
        object.__setattr__(self, "heating_medium", HeatingMedium(self.heating_medium))
        object.__setattr__(self, "monthly_setpoints_c", tuple(float(t) for t in self.monthly_setpoints_c))


@dataclass(frozen=True)
class SizingConfig:
    """All parameters of one sizing problem.

    Capacity bounds
    ---------------
    ``pv_fixed`` pins PV capacity to ``pv_capacity_max``; otherwise PV is free
    in ``[0, pv_capacity_max]``.  The battery follows the same rule with
    ``battery_fixed`` / ``battery_capacity``; a bound of zero removes the
    battery from the model.  ``None`` for the grid, hot-water and heat-pump
    maxima means unbounded.
    """

    # Investment per unit of capacity
    inv_pv: float = 465.0
    inv_grid: float = 0.0
    inv_battery: float = 200.0
    inv_hot_water: float = 60.0
    inv_heat_pump: float = 0.0
    annuity: float = 0.1

    # Energy prices
    grid_price: float = 0.30
    feed_in_tariff: float = 0.079
    rate: Optional[ElectricityRate] = None
    electricity_price_increase: float = 0.0

    # Battery
    battery_eta_in: float = 0.95
    battery_eta_out: float = 0.95
    battery_loss: float = 0.001
    c_rate: float = 0.3

    # Hot-water store
    hot_water_enabled: bool = True
    hot_water_eta_in: float = 0.90
    hot_water_eta_out: float = 0.90
    hot_water_loss: float = 0.01
    hot_water_c_rate: float = 0.3
    hot_water_max: Optional[float] = None

    # Capacity bounds
    pv_fixed: bool = False
    pv_capacity_max: float = 2.0
    battery_fixed: bool = False
    battery_capacity: float = 20.0
    grid_capacity_max: Optional[float] = None
    heat_pump_capacity_max: Optional[float] = None

    # Demand shaping
    electricity_usage_kwh: Optional[float] = None
    monthly_demand: Optional[MonthlyDemand] = None

    ev: EVConfig = field(default_factory=EVConfig)
    heat_pump: HeatPumpConfig = field(default_factory=HeatPumpConfig)

    optimize_for_autonomy: bool = False

    def __post_init__(self) -> None:
        for name in (
            "inv_pv", "inv_grid", "inv_battery", "inv_hot_water", "inv_heat_pump",
            "annuity", "grid_price", "feed_in_tariff", "c_rate", "hot_water_c_rate",
            "hot_water_max", "pv_capacity_max", "battery_capacity",
            "grid_capacity_max", "heat_pump_capacity_max", "electricity_usage_kwh",
        ):
            _check_non_negative(name, getattr(self, name))
        for name in ("battery_eta_in", "battery_eta_out", "hot_water_eta_in", "hot_water_eta_out"):
            _check_fraction(name, getattr(self, name), allow_zero=False)
        for name in ("battery_loss", "hot_water_loss"):
            value = getattr(self, name)
            if not 0 <= value < 1:
                raise ConfigurationError(f"{name} must be in [0, 1), got {value}")
        if self.electricity_price_increase <= -1:
            raise ConfigurationError("electricity_price_increase must be > -1")

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["rate"] = self.rate.to_dict() if self.rate is not None else None
        data["monthly_demand"] = (
            self.monthly_demand.as_array().tolist() if self.monthly_demand is not None else None
        )
        hp = data["heat_pump"]
        for key in ("building_type", "construction_period", "insulation", "heating_medium"):
            hp[key] = getattr(self.heat_pump, key).value
        hp["monthly_setpoints_c"] = list(self.heat_pump.monthly_setpoints_c)
        return data
