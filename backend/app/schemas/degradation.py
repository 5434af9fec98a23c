"""Pydantic schemas for multi-year degradation runs."""
from typing import Optional

from pydantic import BaseModel, Field

from engine.battery.degradation import DegradationParams


class ScenarioSchema(BaseModel):
    label: str = Field(min_length=1, max_length=50)
    pv_capacity_kw: float = Field(ge=0.0)
    battery_capacity_kwh: float = Field(ge=0.0)


class DegradationParamsSchema(BaseModel):
    years: int = Field(default=20, ge=1, le=50, description="Simulated years")
    battery_hourly_loss: float = Field(default=0.001, ge=0.0, lt=1.0, description="Self-discharge per hour")
    battery_annual_degradation: float = Field(default=0.02, ge=0.0, lt=1.0, description="Capacity fade per year")
    pv_annual_degradation: float = Field(default=0.005, ge=0.0, lt=1.0, description="PV output loss per year")
    max_charge_rate: float = Field(default=5.0, ge=0.0, description="kW")
    max_discharge_rate: float = Field(default=5.0, ge=0.0, description="kW")

    def to_params(self) -> DegradationParams:
        return DegradationParams(**self.model_dump())


class DegradationRequest(BaseModel):
    scenarios: list[ScenarioSchema] = Field(min_length=1, max_length=10)
    params: DegradationParamsSchema = Field(default_factory=DegradationParamsSchema)
    electricity_usage_kwh: Optional[float] = Field(
        default=None, ge=0.0, description="Rescale the demand file to this annual total"
    )


class YearSummarySchema(BaseModel):
    year: int
    battery_capacity_kwh: float
    production_kwh: float
    direct_consumption_kwh: float
    battery_in_kwh: float
    battery_out_kwh: float
    raw_overproduction_kwh: float


class ScenarioResult(BaseModel):
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
    yearly: list[YearSummarySchema] = Field(default_factory=list)
