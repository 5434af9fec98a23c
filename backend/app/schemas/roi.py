"""Pydantic schemas for return-on-investment analysis."""
from typing import Optional

from pydantic import BaseModel, Field, model_validator


class SavingsParams(BaseModel):
    grid_price: float = Field(ge=0.0, description="Grid price per kWh in year 0")
    usage_kwh: float = Field(ge=0.0, description="Annual electricity use without the system")
    grid_energy_kwh: float = Field(ge=0.0, description="Annual grid draw with the system")
    years: int = Field(default=25, ge=1, le=60)
    price_increase: float = Field(default=0.0, gt=-1.0, le=1.0, description="Yearly price escalation")
    other_yearly_cost: float = Field(default=0.0, ge=0.0, description="Maintenance, insurance, ...")


class ROIRequest(BaseModel):
    initial_investment: float = Field(description="Up-front cost")
    annual_savings: Optional[list[float]] = Field(default=None, min_length=1, max_length=100)
    savings: Optional[SavingsParams] = None

    @model_validator(mode="after")
    def _one_savings_source(self) -> "ROIRequest":
        if (self.annual_savings is None) == (self.savings is None):
            raise ValueError("Provide exactly one of 'annual_savings' or 'savings'")
        return self


class ROIResponse(BaseModel):
    roi: float
    npv: float
    payback_years: Optional[float] = None
    converged: bool
    method: str
    annual_savings: list[float]
