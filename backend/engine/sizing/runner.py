"""End-to-end sizing: load series, shape demand, build, solve, extract.

``SizingRunner`` wires the time-series provider, demand scaling, rate
expansion and building heat model into the LP builder and solver.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

import numpy as np
from numpy.typing import NDArray

from engine.building.heat import (
    heat_demand_from_profile,
    heat_demand_from_temperatures,
)
from engine.grid.tariff import FlatRate, hourly_price_vector
from engine.load.demand import shape_demand
from engine.sizing.config import SizingConfig
from engine.sizing.model import build_model
from engine.sizing.results import SizingResult
from engine.sizing.solver import extract_result, solve_model
from engine.timeseries.provider import TimeSeriesProvider

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, float], None]


@dataclass(frozen=True, eq=False)
class SizingInputs:
    """Hourly series ready for :func:`~engine.sizing.model.build_model`."""

    solar: NDArray[np.float64]
    demand: NDArray[np.float64]
    price: NDArray[np.float64]
    heat_demand: Optional[NDArray[np.float64]] = None
    cop: Optional[NDArray[np.float64]] = None
    hot_water_demand: Optional[NDArray[np.float64]] = None


def prepare_inputs(config: SizingConfig, provider: TimeSeriesProvider) -> SizingInputs:
    """Load and derive every series the LP needs for *config*.

    Raises
    ------
    DataLoadError
        If a required file is missing or malformed.
    ConfigurationError
        If the rate table is invalid or a series has the wrong length.
    """
    solar = provider.solar()
    demand = shape_demand(
        provider.electricity_demand(),
        monthly=config.monthly_demand,
        annual_kwh=config.electricity_usage_kwh,
    )
    price = hourly_price_vector(config.rate if config.rate is not None else FlatRate(config.grid_price))
    hot_water = provider.hot_water_demand() if config.hot_water_enabled else None

    heat_demand = None
    cop = None
    hp = config.heat_pump
    if hp.enabled:
        if provider.profile_file:
            profile = provider.heat_profile(hp.building_type.dwelling)
            heat_demand = heat_demand_from_profile(
                hp.floor_area_m2, hp.building_type, hp.construction_period, hp.insulation, profile
            )
            cop = provider.cop(hp.heating_medium.value)
        else:
            logger.info("No heat profile configured; using temperature-based heat demand")
            heat_demand = heat_demand_from_temperatures(
                hp.floor_area_m2, hp.insulation, hp.monthly_setpoints_c
            )
        logger.info("Annual heat demand: %.0f kWh", float(np.sum(heat_demand)))

    return SizingInputs(
        solar=solar,
        demand=demand,
        price=price,
        heat_demand=heat_demand,
        cop=cop,
        hot_water_demand=hot_water,
    )


class SizingRunner:
    """Run one sizing problem against a data provider.

    Parameters
    ----------
    config : SizingConfig
        Problem definition.
    provider : TimeSeriesProvider
        Source of solar, demand and heat-pump series.
    progress : callable, optional
        ``progress(step, fraction)`` called as the run advances.
    """

    def __init__(
        self,
        config: SizingConfig,
        provider: TimeSeriesProvider,
        progress: Optional[ProgressCallback] = None,
    ) -> None:
        self.config = config
        self.provider = provider
        self._progress = progress

    def _report(self, step: str, fraction: float) -> None:
        if self._progress is not None:
            try:
                self._progress(step, fraction)
            except Exception:
                logger.warning("Progress callback failed at step %r", step, exc_info=True)
        logger.debug("Sizing step: %s (%.0f %%)", step, fraction * 100)

    def run(
        self,
        pv_cap_max: Optional[float] = None,
        inputs: Optional[SizingInputs] = None,
    ) -> SizingResult:
        """Solve the sizing LP and return the extracted result.

        *inputs* may be passed to reuse series prepared for an earlier run.
        """
        if inputs is None:
            self._report("Loading time series", 0.05)
            inputs = prepare_inputs(self.config, self.provider)

        self._report("Building LP", 0.20)
        model = build_model(
            self.config,
            inputs.solar,
            inputs.demand,
            inputs.price,
            pv_cap_max=pv_cap_max,
            heat_demand=inputs.heat_demand,
            cop=inputs.cop,
            hot_water_demand=inputs.hot_water_demand,
        )

        self._report("Solving LP", 0.40)
        solution = solve_model(model)

        self._report("Extracting results", 0.90)
        result = extract_result(model, solution)
        logger.info(
            "Sizing complete: PV %.2f kW, battery %.2f kWh, autarky %.1f %%",
            result.pv_capacity_kw,
            result.battery_capacity_kwh,
            result.autarky,
        )
        self._report("Done", 1.0)
        return result


def run_sizing(
    config: SizingConfig,
    provider: TimeSeriesProvider,
    pv_cap_max: Optional[float] = None,
) -> SizingResult:
    """Convenience wrapper around :class:`SizingRunner`."""
    return SizingRunner(config, provider).run(pv_cap_max=pv_cap_max)
