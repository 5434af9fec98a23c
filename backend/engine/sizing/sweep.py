"""PV-capacity sweep: one independent sizing solve per capacity point.

Series are prepared once and shared read-only across points.  A point whose
solve fails with :class:`~engine.errors.SolverError` is recorded with zero
values and the sweep carries on; any other error aborts the sweep.
"""

from __future__ import annotations

import dataclasses
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Optional, Sequence

import numpy as np

from engine.errors import ConfigurationError, SolverError
from engine.sizing.config import SizingConfig
from engine.sizing.results import SizingResult
from engine.sizing.runner import SizingInputs, SizingRunner, prepare_inputs
from engine.timeseries.provider import TimeSeriesProvider

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SweepPoint:
    """Outcome of one capacity point; failed points carry zeros."""

    pv_capacity_max_kw: float
    succeeded: bool
    pv_used_kwh: float = 0.0
    grid_kwh: float = 0.0
    overproduction_kwh: float = 0.0
    battery_capacity_kwh: float = 0.0
    autarky: float = 0.0
    objective_value: float = 0.0
    error: Optional[str] = None

    @classmethod
    def from_result(cls, capacity: float, result: SizingResult) -> "SweepPoint":
        return cls(
            pv_capacity_max_kw=capacity,
            succeeded=True,
            pv_used_kwh=result.annual_pv_used_kwh,
            grid_kwh=result.annual_grid_energy_kwh,
            overproduction_kwh=result.annual_overproduction_kwh,
            battery_capacity_kwh=result.battery_capacity_kwh,
            autarky=result.autarky,
            objective_value=result.objective_value,
        )

    @classmethod
    def failed(cls, capacity: float, error: str) -> "SweepPoint":
        return cls(pv_capacity_max_kw=capacity, succeeded=False, error=error)

    def to_dict(self) -> dict[str, Any]:
        return dataclasses.asdict(self)


def pv_capacity_range(minimum: float, maximum: float, step: float) -> list[float]:
    """Capacities from *minimum* to *maximum* inclusive in *step* increments."""
    if step <= 0:
        raise ConfigurationError(f"step must be > 0, got {step}")
    if maximum < minimum:
        raise ConfigurationError(f"maximum ({maximum}) must be >= minimum ({minimum})")
    count = int(np.floor((maximum - minimum) / step + 1e-9)) + 1
    return [round(minimum + i * step, 10) for i in range(count)]


def _run_point(
    config: SizingConfig,
    provider: TimeSeriesProvider,
    inputs: SizingInputs,
    capacity: float,
) -> SweepPoint:
    point_config = dataclasses.replace(config, pv_fixed=True, pv_capacity_max=capacity)
    try:
        result = SizingRunner(point_config, provider).run(inputs=inputs)
    except SolverError as exc:
        logger.warning("Sweep point PV=%.2f kW failed: %s", capacity, exc)
        return SweepPoint.failed(capacity, str(exc))
    return SweepPoint.from_result(capacity, result)


def sweep_pv_capacity(
    config: SizingConfig,
    provider: TimeSeriesProvider,
    capacities: Sequence[float],
    max_workers: int = 1,
) -> list[SweepPoint]:
    """Solve the sizing LP with PV fixed at each capacity in turn.

    Parameters
    ----------
    config : SizingConfig
        Base configuration; ``pv_fixed`` and ``pv_capacity_max`` are
        overridden per point.
    provider : TimeSeriesProvider
        Data source, read once for the whole sweep.
    capacities : sequence of float
        PV capacities (kW).
    max_workers : int
        Worker threads; 1 runs the points sequentially.

    Returns
    -------
    list[SweepPoint]
        One entry per capacity, in input order.
    """
    inputs = prepare_inputs(config, provider)
    logger.info("Starting PV sweep over %d points (workers=%d)", len(capacities), max_workers)

    if max_workers <= 1:
        points = [_run_point(config, provider, inputs, float(c)) for c in capacities]
    else:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            points = list(
                pool.map(lambda c: _run_point(config, provider, inputs, float(c)), capacities)
            )

    failed = sum(1 for p in points if not p.succeeded)
    logger.info("PV sweep finished: %d ok, %d failed", len(points) - failed, failed)
    return points
