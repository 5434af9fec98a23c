"""Result container for one sizing solve."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

import numpy as np
from numpy.typing import NDArray

from engine.sizing.config import SizingConfig


@dataclass(frozen=True)
class SizingResult:
    """Solved capacities, annual aggregates and hourly series.

    Percentages (``pv_coverage_percent``, ``autarky``,
    ``autarky_without_battery``) are in 0 -- 100.
    """

    pv_capacity_kw: float
    grid_capacity_kw: float
    battery_capacity_kwh: float
    hot_water_capacity_kwh: float
    heat_pump_capacity_kw: float

    annual_pv_production_kwh: float
    annual_pv_used_kwh: float
    annual_grid_energy_kwh: float
    annual_battery_in_kwh: float
    annual_battery_out_kwh: float
    annual_overproduction_kwh: float
    annual_electricity_demand_kwh: float
    annual_ev_charging_kwh: float
    required_ev_energy_kwh: float
    annual_heat_pump_energy_kwh: float
    annual_heat_demand_kwh: float
    annual_hot_water_demand_kwh: float
    annual_hot_water_heating_kwh: float
    annual_hot_water_in_kwh: float
    annual_hot_water_out_kwh: float

    pv_coverage_percent: float
    autarky: float
    autarky_without_battery: float
    objective_value: float

    hourly: dict[str, NDArray[np.float64]] = field(default_factory=dict, compare=False)
    config: Optional[SizingConfig] = field(default=None, compare=False)

    def summary(self) -> dict[str, float]:
        """Scalar fields only."""
        return {
            key: value
            for key, value in self.to_dict(include_hourly=False).items()
            if isinstance(value, float)
        }

    def to_dict(self, include_hourly: bool = True) -> dict[str, Any]:
        data: dict[str, Any] = {
            "pv_capacity_kw": self.pv_capacity_kw,
            "grid_capacity_kw": self.grid_capacity_kw,
            "battery_capacity_kwh": self.battery_capacity_kwh,
            "hot_water_capacity_kwh": self.hot_water_capacity_kwh,
            "heat_pump_capacity_kw": self.heat_pump_capacity_kw,
            "annual_pv_production_kwh": self.annual_pv_production_kwh,
            "annual_pv_used_kwh": self.annual_pv_used_kwh,
            "annual_grid_energy_kwh": self.annual_grid_energy_kwh,
            "annual_battery_in_kwh": self.annual_battery_in_kwh,
            "annual_battery_out_kwh": self.annual_battery_out_kwh,
            "annual_overproduction_kwh": self.annual_overproduction_kwh,
            "annual_electricity_demand_kwh": self.annual_electricity_demand_kwh,
            "annual_ev_charging_kwh": self.annual_ev_charging_kwh,
            "required_ev_energy_kwh": self.required_ev_energy_kwh,
            "annual_heat_pump_energy_kwh": self.annual_heat_pump_energy_kwh,
            "annual_heat_demand_kwh": self.annual_heat_demand_kwh,
            "annual_hot_water_demand_kwh": self.annual_hot_water_demand_kwh,
            "annual_hot_water_heating_kwh": self.annual_hot_water_heating_kwh,
            "annual_hot_water_in_kwh": self.annual_hot_water_in_kwh,
            "annual_hot_water_out_kwh": self.annual_hot_water_out_kwh,
            "pv_coverage_percent": self.pv_coverage_percent,
            "autarky": self.autarky,
            "autarky_without_battery": self.autarky_without_battery,
            "objective_value": self.objective_value,
        }
        if include_hourly:
            data["hourly"] = {key: arr.tolist() for key, arr in self.hourly.items()}
        if self.config is not None:
            data["config"] = self.config.to_dict()
        return data
