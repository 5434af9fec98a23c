"""Solve a :class:`DispatchModel` with HiGHS and extract a :class:`SizingResult`.

This module requires the ``highspy`` package (``pip install highspy``).
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from engine.errors import SolverError
from engine.sizing.model import DispatchModel
from engine.sizing.results import SizingResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class ModelSolution:
    col_value: NDArray[np.float64]
    objective_value: float
    status: str
    solve_seconds: float


def solve_model(model: DispatchModel) -> ModelSolution:
    """Hand *model* to HiGHS and return the optimal column values.

    Raises
    ------
    ImportError
        If ``highspy`` is not installed.
    SolverError
        If HiGHS does not report an optimal solution; the HiGHS model status
        string is kept on the exception.
    """
    try:
        import highspy  # type: ignore[import-untyped]
    except ImportError as exc:
        raise ImportError(
            "The 'highspy' package is required for system sizing. "
            "Install it with: pip install highspy"
        ) from exc

    inf = highspy.kHighsInf
    col_lower = np.where(np.isinf(model.col_lower), -inf, model.col_lower)
    col_upper = np.where(np.isinf(model.col_upper), inf, model.col_upper)
    row_lower = np.where(np.isinf(model.row_lower), -inf, model.row_lower)
    row_upper = np.where(np.isinf(model.row_upper), inf, model.row_upper)

    h = highspy.Highs()
    h.silent()

    n_cols = model.num_cols
    h.addVars(n_cols, col_lower, col_upper)
    h.changeObjectiveSense(highspy.ObjSense.kMinimize)
    nonzero = np.flatnonzero(model.col_cost).astype(np.int32)
    h.changeColsCost(len(nonzero), nonzero, model.col_cost[nonzero])

    csr = model.matrix
    h.addRows(
        model.num_rows,
        row_lower,
        row_upper,
        int(csr.nnz),
        csr.indptr.astype(np.int32),
        csr.indices.astype(np.int32),
        csr.data.astype(np.float64),
    )

    start = time.perf_counter()
    h.run()
    elapsed = time.perf_counter() - start

    model_status = h.getModelStatus()
    status_text = h.modelStatusToString(model_status)
    if model_status != highspy.HighsModelStatus.kOptimal:
        logger.warning("HiGHS finished without an optimal solution: %s", status_text)
        raise SolverError(
            f"HiGHS did not find an optimal solution. Model status: {status_text}",
            status=status_text,
        )

    col_value = np.array(h.getSolution().col_value, dtype=np.float64)
    objective = float(h.getInfoValue("objective_function_value")[1])
    logger.info("Sizing LP solved in %.2fs, objective %.2f", elapsed, objective)
    return ModelSolution(
        col_value=col_value,
        objective_value=objective,
        status=status_text,
        solve_seconds=elapsed,
    )


def _percent(numerator: float, denominator: float) -> float:
    if denominator <= 0:
        return 0.0
    return float(np.clip(numerator / denominator * 100.0, 0.0, 100.0))


def extract_result(model: DispatchModel, solution: ModelSolution) -> SizingResult:
    """Turn solved column values into a :class:`SizingResult`.

    Tiny negative values from solver tolerance are clipped to zero.
    """
    x = solution.col_value

    def series(family: str) -> NDArray[np.float64]:
        return np.maximum(model.values(x, family), 0.0)

    hourly = {
        family: series(family)
        for family in (
            "pv_used", "grid", "overproduction",
            "battery_in", "battery_out", "battery_level",
            "ev_charge", "heat_pump",
            "hot_water_heating", "hot_water_in", "hot_water_out", "hot_water_level",
        )
    }
    hp = model.subsystems.heat_pump
    hourly["heat_demand"] = hp.heat_demand.copy() if hp.present else np.zeros_like(model.demand)
    hourly["demand"] = model.demand.copy()
    hourly["hot_water_demand"] = model.hot_water_demand.copy()
    hourly["price"] = model.price.copy()
    hourly["total_pv_production"] = hourly["pv_used"] + hourly["overproduction"]
    hourly["total_electricity_demand"] = (
        model.demand + hourly["ev_charge"] + hourly["heat_pump"] + hourly["hot_water_heating"]
    )

    total_demand = float(hourly["total_electricity_demand"].sum())
    pv_used = float(hourly["pv_used"].sum())
    grid = float(hourly["grid"].sum())
    direct = float(
        np.minimum(hourly["total_pv_production"], hourly["total_electricity_demand"]).sum()
    )

    ev = model.subsystems.ev
    return SizingResult(
        pv_capacity_kw=max(model.scalar(x, "cap_pv"), 0.0),
        grid_capacity_kw=max(model.scalar(x, "cap_grid"), 0.0),
        battery_capacity_kwh=max(model.scalar(x, "cap_battery"), 0.0),
        hot_water_capacity_kwh=max(model.scalar(x, "cap_hot_water"), 0.0),
        heat_pump_capacity_kw=max(model.scalar(x, "cap_heat_pump"), 0.0),
        annual_pv_production_kwh=float(hourly["total_pv_production"].sum()),
        annual_pv_used_kwh=pv_used,
        annual_grid_energy_kwh=grid,
        annual_battery_in_kwh=float(hourly["battery_in"].sum()),
        annual_battery_out_kwh=float(hourly["battery_out"].sum()),
        annual_overproduction_kwh=float(hourly["overproduction"].sum()),
        annual_electricity_demand_kwh=float(model.demand.sum()),
        annual_ev_charging_kwh=float(hourly["ev_charge"].sum()),
        required_ev_energy_kwh=ev.annual_energy_kwh if ev.present else 0.0,
        annual_heat_pump_energy_kwh=float(hourly["heat_pump"].sum()),
        annual_heat_demand_kwh=float(hourly["heat_demand"].sum()),
        annual_hot_water_demand_kwh=float(model.hot_water_demand.sum()),
        annual_hot_water_heating_kwh=float(hourly["hot_water_heating"].sum()),
        annual_hot_water_in_kwh=float(hourly["hot_water_in"].sum()),
        annual_hot_water_out_kwh=float(hourly["hot_water_out"].sum()),
        pv_coverage_percent=_percent(pv_used, total_demand),
        autarky=_percent(total_demand - grid, total_demand),
        autarky_without_battery=_percent(direct, total_demand),
        objective_value=solution.objective_value,
        hourly=hourly,
        config=model.config,
    )


def solve_and_extract(model: DispatchModel) -> SizingResult:
    return extract_result(model, solve_model(model))
