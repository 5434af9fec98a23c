"""Pydantic schemas for sizing runs and PV sweeps."""
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

from app.schemas.rates import RateSchema
from engine.load.demand import MonthlyDemand
from engine.sizing.config import EVConfig, HeatPumpConfig, SizingConfig


class EVParams(BaseModel):
    enabled: bool = False
    daily_km: float = Field(default=50.0, ge=0.0)
    kwh_per_km: float = Field(default=0.2, ge=0.0)
    battery_kwh: float = Field(default=50.0, ge=0.0)
    charge_during_day: bool = True


class HeatPumpParams(BaseModel):
    enabled: bool = False
    floor_area_m2: float = Field(default=100.0, ge=0.0)
    building_type: Literal["single_family", "terraced", "multi_family", "apartment"] = "single_family"
    construction_period: Literal[
        "before_1900", "1901_1936", "1937_1959", "1960_1979", "1980_2006", "after_2007"
    ] = "before_1900"
    insulation: Literal["poor", "moderate", "good"] = "moderate"
    heating_medium: Literal["floor", "radiator"] = "floor"
    monthly_setpoints_c: list[float] = Field(default_factory=lambda: [20.0] * 12, min_length=12, max_length=12)
    default_cop: float = Field(default=3.0, gt=0.0)


class SizingParams(BaseModel):
    inv_pv: float = Field(default=465.0, ge=0.0, description="Investment per kW of PV")
    inv_grid: float = Field(default=0.0, ge=0.0, description="Investment per kW of grid connection")
    inv_battery: float = Field(default=200.0, ge=0.0, description="Investment per kWh of battery")
    inv_hot_water: float = Field(default=60.0, ge=0.0, description="Investment per kWh of hot-water store")
    inv_heat_pump: float = Field(default=0.0, ge=0.0, description="Investment per kW of heat pump")
    annuity: float = Field(default=0.1, ge=0.0, le=1.0, description="Annuity factor applied to investments")

    grid_price: float = Field(default=0.30, ge=0.0, description="Flat grid price when no rate table is given")
    feed_in_tariff: float = Field(default=0.079, ge=0.0)
    rate: Optional[RateSchema] = None
    electricity_price_increase: float = Field(default=0.0, gt=-1.0, le=1.0)

    battery_eta_in: float = Field(default=0.95, gt=0.0, le=1.0)
    battery_eta_out: float = Field(default=0.95, gt=0.0, le=1.0)
    battery_loss: float = Field(default=0.001, ge=0.0, lt=1.0)
    c_rate: float = Field(default=0.3, ge=0.0)

    hot_water_enabled: bool = True
    hot_water_eta_in: float = Field(default=0.90, gt=0.0, le=1.0)
    hot_water_eta_out: float = Field(default=0.90, gt=0.0, le=1.0)
    hot_water_loss: float = Field(default=0.01, ge=0.0, lt=1.0)
    hot_water_c_rate: float = Field(default=0.3, ge=0.0)
    hot_water_max: Optional[float] = Field(default=None, ge=0.0)

    pv_fixed: bool = False
    pv_capacity_max: float = Field(default=2.0, ge=0.0)
    battery_fixed: bool = False
    battery_capacity: float = Field(default=20.0, ge=0.0)
    grid_capacity_max: Optional[float] = Field(default=None, ge=0.0)
    heat_pump_capacity_max: Optional[float] = Field(default=None, ge=0.0)

    electricity_usage_kwh: Optional[float] = Field(default=None, ge=0.0)
    monthly_demand: Optional[list[float]] = Field(default=None, min_length=12, max_length=12)

    ev: EVParams = Field(default_factory=EVParams)
    heat_pump: HeatPumpParams = Field(default_factory=HeatPumpParams)

    optimize_for_autonomy: bool = False

    def to_config(self) -> SizingConfig:
        data = self.model_dump(exclude={"rate", "monthly_demand", "ev", "heat_pump"})
        heat_pump = self.heat_pump.model_dump()
        heat_pump["monthly_setpoints_c"] = tuple(heat_pump["monthly_setpoints_c"])
        return SizingConfig(
            **data,
            rate=self.rate.to_rate(self.grid_price) if self.rate is not None else None,
            monthly_demand=(
                MonthlyDemand.from_sequence(self.monthly_demand)
                if self.monthly_demand is not None
                else None
            ),
            ev=EVConfig(**self.ev.model_dump()),
            heat_pump=HeatPumpConfig(**heat_pump),
        )


class SizingRequest(BaseModel):
    config: SizingParams = Field(default_factory=SizingParams)
    pv_cap_max: Optional[float] = Field(default=None, ge=0.0, description="Overrides config.pv_capacity_max")
    include_hourly: bool = False


class SizingResponse(BaseModel):
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
    hourly: Optional[dict[str, list[float]]] = None
    config: Optional[dict[str, Any]] = None


class SweepRequest(BaseModel):
    config: SizingParams = Field(default_factory=SizingParams)
    pv_capacity_min: float = Field(default=0.0, ge=0.0)
    pv_capacity_max: float = Field(default=2.0, ge=0.0)
    pv_capacity_step: float = Field(default=0.5, gt=0.0)


class SweepPointResponse(BaseModel):
    pv_capacity_max_kw: float
    succeeded: bool
    pv_used_kwh: float
    grid_kwh: float
    overproduction_kwh: float
    battery_capacity_kwh: float
    autarky: float
    objective_value: float
    error: Optional[str] = None
