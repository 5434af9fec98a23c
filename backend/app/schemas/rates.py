"""Pydantic schemas for electricity rate tables."""
from typing import Literal, Optional

from pydantic import BaseModel, Field

from engine.grid.tariff import ElectricityRate, rate_from_dict


class HourRangeSchema(BaseModel):
    start: int = Field(ge=0, le=23, description="First hour of the range")
    end: int = Field(ge=0, le=24, description="Hour the range stops before; wraps when < start")
    day_type: Literal["weekday", "weekend"] = "weekday"


class RateTierSchema(BaseModel):
    name: str = Field(min_length=1, max_length=50)
    rate: float = Field(ge=0.0, description="Energy price per kWh")
    hour_ranges: list[HourRangeSchema] = Field(default_factory=list)


class RateSchema(BaseModel):
    type: Literal["flat", "tiered"] = "flat"
    rate: Optional[float] = Field(default=None, ge=0.0, description="Flat price per kWh")
    tiers: list[RateTierSchema] = Field(default_factory=list)

    def to_rate(self, default_price: float = 0.30) -> ElectricityRate:
        data = self.model_dump()
        if data["rate"] is None:
            data["rate"] = default_price
        return rate_from_dict(data)


class RateValidationResponse(BaseModel):
    valid: bool
    hourly_preview: list[float] = Field(description="168 hourly prices, Monday 00:00 first")
