"""FastAPI dependencies."""

from __future__ import annotations

from fastapi import Request

from app.config import Settings, settings
from engine.timeseries.provider import TimeSeriesProvider


def build_provider(config: Settings = settings) -> TimeSeriesProvider:
    return TimeSeriesProvider(
        data_dir=config.data_dir,
        solar_file=config.solar_file,
        demand_file=config.demand_file,
        profile_file=config.profile_file,
        country=config.profile_country,
    )


def get_provider(request: Request) -> TimeSeriesProvider:
    """The process-wide time-series provider created in ``create_app``."""
    return request.app.state.provider
