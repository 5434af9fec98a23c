"""Tests for engine.economics.roi — ROI root finding and savings streams."""

from __future__ import annotations

import math
from types import SimpleNamespace

import numpy as np
import pytest

from engine.economics import roi as roi_module
from engine.economics.metrics import net_present_value
from engine.economics.roi import (
    ROI_UPPER,
    initial_investment,
    roi_equation,
    roi_from_sizing,
    savings_stream,
    solve_roi,
)
from engine.errors import ConfigurationError
from engine.sizing.config import SizingConfig


def _reference_savings(other_cost: float = 0.0, increase: float = 0.01) -> list[float]:
    """900 kWh/yr offset at 0.688/kWh, 25 years."""
    return savings_stream(
        grid_price=0.688,
        usage_kwh=900.0,
        grid_energy_kwh=0.0,
        years=25,
        price_increase=increase,
        other_yearly_cost=other_cost,
    )


# ======================================================================
# Equation
# ======================================================================


class TestRoiEquation:
    def test_zero_at_constructed_rate(self):
        """Savings built so that 10 % is the exact root."""
        s = [100.0] * 10
        investment = sum(100.0 * 1.1 ** i for i in range(10)) / 1.1 ** 10
        f = roi_equation(investment, s)
        assert abs(f(0.1)) < 1e-12

    def test_nan_below_minus_one(self):
        f = roi_equation(100.0, [10.0, 10.0])
        assert math.isnan(f(-1.0))

    def test_nan_for_negative_sum(self):
        f = roi_equation(100.0, [-10.0, -10.0])
        assert math.isnan(f(0.1))


# ======================================================================
# Solver
# ======================================================================


class TestSolveRoi:
    """Reference cases and root-finder fallbacks."""

    def test_reference_case_with_price_increase(self):
        result = solve_roi(900 * 2.45, _reference_savings())
        assert result.method == "bisection"
        assert result.converged
        assert result.roi == pytest.approx(0.3465, abs=2e-3)
        assert result.payback_years == pytest.approx(3.5153, abs=1e-3)

    def test_reference_case_with_running_cost(self):
        savings = _reference_savings(other_cost=120.0, increase=0.0)
        result = solve_roi(900 * 2.45, savings)
        assert result.roi == pytest.approx(0.225, abs=2e-3)
        assert result.payback_years == pytest.approx(2205 / (619.2 - 120.0), abs=1e-3)

    def test_npv_at_solved_rate(self):
        savings = _reference_savings()
        result = solve_roi(2205.0, savings)
        assert result.npv == pytest.approx(net_present_value(result.roi, 2205.0, savings))

    def test_round_trip(self):
        s = [100.0] * 10
        investment = sum(100.0 * 1.1 ** i for i in range(10)) / 1.1 ** 10
        assert solve_roi(investment, s).roi == pytest.approx(0.1, abs=1e-4)

    def test_zero_investment_skips_root_finders(self, monkeypatch):
        def fail(*args, **kwargs):
            raise AssertionError("root finder must not run")

        monkeypatch.setattr(roi_module, "_bisect", fail)
        monkeypatch.setattr(roi_module, "_newton", fail)
        result = solve_roi(0.0, [100.0] * 5)
        assert result.roi == 0.0
        assert result.npv == 0.0
        assert result.payback_years is None
        assert result.method == "degenerate"

    def test_newton_beyond_bracket(self):
        """A return above the bisection bracket is found by Newton."""
        result = solve_roi(100.0, [1000.0] * 5)
        assert result.method == "newton"
        assert result.converged
        assert result.roi > ROI_UPPER
        assert abs(roi_equation(100.0, [1000.0] * 5)(result.roi)) < 1e-6

    def test_losses_never_converge(self):
        result = solve_roi(1000.0, [-10.0] * 5)
        assert result.method == "newton"
        assert not result.converged
        assert math.isfinite(result.roi)
        assert result.payback_years is None

    def test_empty_savings_raises(self):
        with pytest.raises(ConfigurationError):
            solve_roi(100.0, [])


# ======================================================================
# Savings streams
# ======================================================================


class TestSavingsStream:
    def test_escalation(self):
        s = savings_stream(0.3, 1000.0, 400.0, years=3, price_increase=0.1)
        assert s[0] == pytest.approx(180.0)
        assert s[2] == pytest.approx(180.0 * 1.21)

    def test_running_cost(self):
        s = savings_stream(0.3, 1000.0, 400.0, years=2, other_yearly_cost=50.0)
        assert s == pytest.approx([130.0, 130.0])

    def test_years_must_be_positive(self):
        with pytest.raises(ConfigurationError):
            savings_stream(0.3, 1.0, 0.0, years=0)


# ======================================================================
# From a sizing result
# ======================================================================


def _sized(config: SizingConfig, grid: np.ndarray, demand: np.ndarray):
    return SimpleNamespace(
        config=config,
        pv_capacity_kw=4.0,
        grid_capacity_kw=0.0,
        battery_capacity_kwh=5.0,
        hot_water_capacity_kwh=0.0,
        heat_pump_capacity_kw=0.0,
        annual_electricity_demand_kwh=float(demand.sum()),
        annual_ev_charging_kwh=0.0,
        annual_heat_pump_energy_kwh=0.0,
        annual_grid_energy_kwh=float(grid.sum()),
        hourly={
            "price": np.full(8760, config.grid_price),
            "grid": grid,
            "total_electricity_demand": demand,
        },
    )


class TestRoiFromSizing:
    def test_initial_investment(self):
        config = SizingConfig(inv_pv=1000.0, inv_battery=300.0)
        result = _sized(config, np.zeros(8760), np.ones(8760))
        assert initial_investment(result) == pytest.approx(4 * 1000.0 + 5 * 300.0)

    def test_initial_investment_counts_hot_water_and_heat_pump(self):
        config = SizingConfig(inv_pv=1000.0, inv_battery=300.0, inv_hot_water=60.0, inv_heat_pump=500.0)
        result = _sized(config, np.zeros(8760), np.ones(8760))
        result.hot_water_capacity_kwh = 2.0
        result.heat_pump_capacity_kw = 3.0
        assert initial_investment(result) == pytest.approx(4 * 1000.0 + 5 * 300.0 + 2 * 60.0 + 3 * 500.0)

    def test_savings_priced_hourly(self):
        config = SizingConfig(inv_pv=1000.0, inv_battery=300.0, grid_price=0.30)
        demand = np.full(8760, 0.5)
        grid = np.full(8760, 0.2)
        result = roi_from_sizing(_sized(config, grid, demand), years=20)
        expected = solve_roi(5500.0, [0.30 * 0.3 * 8760] * 20)
        assert result.roi == pytest.approx(expected.roi)
        assert result.payback_years == pytest.approx(5500.0 / (0.09 * 8760))

    def test_missing_config_raises(self):
        result = _sized(SizingConfig(), np.zeros(8760), np.ones(8760))
        result.config = None
        with pytest.raises(ConfigurationError):
            roi_from_sizing(result)
