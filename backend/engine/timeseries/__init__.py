"""Hourly input series: CSV parsers and the cached provider."""

from .parsers import (
    DemandSeries,
    parse_decimal,
    parse_demand_csv,
    parse_hourly_demand,
    parse_profile_csv,
    parse_solar_csv,
)
from .provider import TimeSeriesProvider, cop_column, heat_profile_column

__all__ = [
    "DemandSeries",
    "TimeSeriesProvider",
    "cop_column",
    "heat_profile_column",
    "parse_decimal",
    "parse_demand_csv",
    "parse_hourly_demand",
    "parse_profile_csv",
    "parse_solar_csv",
]
