"""Electricity rate tables."""

from .tariff import (
    DayType,
    ElectricityRate,
    FlatRate,
    HourRange,
    RateTier,
    TieredRate,
    hourly_price_vector,
    rate_from_dict,
)

__all__ = [
    "DayType",
    "ElectricityRate",
    "FlatRate",
    "HourRange",
    "RateTier",
    "TieredRate",
    "hourly_price_vector",
    "rate_from_dict",
]
