"""Tests for engine.sizing.model — LP structure without solving."""

from __future__ import annotations

import dataclasses
import math

import numpy as np
import pytest

from engine.errors import ConfigurationError
from engine.sizing.config import EVConfig, HeatPumpConfig, SizingConfig
from engine.sizing.model import build_model
from engine.sizing.subsystems import charging_window, resolve_subsystems


def _build(config, solar, demand, price, **kwargs):
    return build_model(config, solar, demand, price, **kwargs)


# ======================================================================
# Column families
# ======================================================================


class TestFamilies:
    """Only present subsystems get columns and rows."""

    def test_base_families(self, base_config, solar, demand, flat_price):
        model = _build(base_config, solar, demand, flat_price)
        for family in ("pv_used", "grid", "overproduction", "cap_pv", "cap_grid",
                       "battery_in", "battery_out", "battery_level", "cap_battery"):
            assert model.has(family), family
        for family in ("ev_charge", "heat_pump", "cap_heat_pump", "hot_water_in", "cap_hot_water"):
            assert not model.has(family), family
        assert "battery_balance" in model.row_blocks
        assert "ev_total" not in model.row_blocks

    def test_zero_battery_removes_family(self, base_config, solar, demand, flat_price):
        config = dataclasses.replace(base_config, battery_capacity=0.0)
        model = _build(config, solar, demand, flat_price)
        assert not model.has("battery_level")
        assert not any(name.startswith("battery") for name in model.row_blocks)

    def test_hot_water_unbounded_by_default(self, solar, demand, flat_price):
        model = _build(SizingConfig(pv_capacity_max=5.0), solar, demand, flat_price)
        assert model.has("hot_water_level")
        cap = model.columns["cap_hot_water"].start
        assert math.isinf(model.col_upper[cap])

    def test_absent_family_values_are_zero(self, base_config, solar, demand, flat_price):
        model = _build(base_config, solar, demand, flat_price)
        x = np.ones(model.num_cols)
        assert not model.values(x, "ev_charge").any()
        assert model.scalar(x, "cap_heat_pump") == 0.0

    def test_matrix_shape(self, base_config, solar, demand, flat_price):
        model = _build(base_config, solar, demand, flat_price)
        assert model.matrix.shape == (model.num_rows, model.num_cols)
        assert model.row_lower.shape == model.row_upper.shape == (model.num_rows,)
        # 3 hourly core + 3 hourly battery + 3 capacities
        assert model.num_cols == 6 * 8760 + 3


# ======================================================================
# Bounds and costs
# ======================================================================


class TestBoundsAndCosts:
    def test_storage_starts_empty(self, base_config, solar, demand, flat_price):
        model = _build(base_config, solar, demand, flat_price)
        for family in ("battery_in", "battery_out", "battery_level"):
            block = model.columns[family]
            assert model.col_upper[block][0] == 0.0
            assert math.isinf(model.col_upper[block][1])

    def test_capacity_costs_annuitised(self, base_config, solar, demand, flat_price):
        model = _build(base_config, solar, demand, flat_price)
        assert model.col_cost[model.columns["cap_pv"]][0] == pytest.approx(465.0 * 0.1)
        assert model.col_cost[model.columns["cap_battery"]][0] == pytest.approx(200.0 * 0.1)

    def test_grid_and_feed_in_costs(self, base_config, solar, demand, flat_price):
        model = _build(base_config, solar, demand, flat_price)
        assert np.allclose(model.col_cost[model.columns["grid"]], 0.30)
        assert np.allclose(model.col_cost[model.columns["overproduction"]], -0.079)

    def test_autonomy_adds_grid_penalty(self, base_config, solar, demand, flat_price):
        config = dataclasses.replace(base_config, optimize_for_autonomy=True)
        model = _build(config, solar, demand, flat_price)
        assert np.allclose(model.col_cost[model.columns["grid"]], 1.30)

    def test_pv_bounds_free(self, base_config, solar, demand, flat_price):
        model = _build(base_config, solar, demand, flat_price, pv_cap_max=3.0)
        cap = model.columns["cap_pv"].start
        assert model.col_lower[cap] == 0.0
        assert model.col_upper[cap] == 3.0

    def test_pv_bounds_fixed(self, base_config, solar, demand, flat_price):
        config = dataclasses.replace(base_config, pv_fixed=True)
        model = _build(config, solar, demand, flat_price)
        cap = model.columns["cap_pv"].start
        assert model.col_lower[cap] == model.col_upper[cap] == 5.0

    def test_fixed_battery(self, base_config, solar, demand, flat_price):
        config = dataclasses.replace(base_config, battery_fixed=True)
        model = _build(config, solar, demand, flat_price)
        cap = model.columns["cap_battery"].start
        assert model.col_lower[cap] == model.col_upper[cap] == 10.0

    def test_balance_rows_equal_demand(self, base_config, solar, demand, flat_price):
        model = _build(base_config, solar, demand, flat_price)
        rows = model.row_blocks["balance"]
        assert np.array_equal(model.row_lower[rows], demand)
        assert np.array_equal(model.row_upper[rows], demand)


# ======================================================================
# Optional subsystems
# ======================================================================


class TestOptionalSubsystems:
    def test_ev_window_and_total(self, base_config, solar, demand, flat_price):
        config = dataclasses.replace(base_config, ev=EVConfig(enabled=True, daily_km=40, kwh_per_km=0.2))
        model = _build(config, solar, demand, flat_price)
        upper = model.col_upper[model.columns["ev_charge"]]
        window = charging_window(True)
        assert np.all(upper[~window] == 0.0)
        assert np.all(np.isinf(upper[window]))
        total = model.row_blocks["ev_total"]
        assert model.row_lower[total][0] == pytest.approx(8.0 * 365)

    def test_ev_daily_energy_capped_by_battery(self):
        ev = EVConfig(enabled=True, daily_km=500, kwh_per_km=0.2, battery_kwh=60)
        assert ev.daily_energy_kwh == 60

    def test_night_window_is_complement(self):
        day = charging_window(True)
        night = charging_window(False)
        assert not np.any(day & night)
        assert int(day[:24].sum()) == 12

    def test_hot_water_store_outside_electricity_balance(self, solar, demand, flat_price):
        config = SizingConfig(pv_capacity_max=5.0, hot_water_max=4.0)
        hot_water = np.full(8760, 0.2)
        model = _build(config, solar, demand, flat_price, hot_water_demand=hot_water)
        balance = model.matrix[model.row_blocks["balance"]]
        for family in ("hot_water_in", "hot_water_out"):
            assert balance[:, model.columns[family]].nnz == 0, family
        assert balance[:, model.columns["hot_water_heating"]].sum() == pytest.approx(-8760.0)
        supply = model.row_blocks["hot_water_supply"]
        assert np.array_equal(model.row_lower[supply], hot_water)
        assert np.array_equal(model.row_upper[supply], hot_water)

    def test_hot_water_demand_defaults_to_zero(self, solar, demand, flat_price):
        model = _build(SizingConfig(pv_capacity_max=5.0), solar, demand, flat_price)
        assert not model.row_lower[model.row_blocks["hot_water_supply"]].any()
        assert not model.hot_water_demand.any()

    def test_hot_water_demand_ignored_without_store(self, base_config, solar, demand, flat_price):
        model = _build(base_config, solar, demand, flat_price, hot_water_demand=np.ones(8760))
        assert "hot_water_supply" not in model.row_blocks
        assert not model.has("hot_water_heating")
        assert not model.hot_water_demand.any()

    def test_heat_pump_consumption_fixed(self, base_config, solar, demand, flat_price):
        config = dataclasses.replace(base_config, heat_pump=HeatPumpConfig(enabled=True))
        heat = np.full(8760, 1.5)
        cop = np.full(8760, 3.0)
        model = _build(config, solar, demand, flat_price, heat_demand=heat, cop=cop)
        block = model.columns["heat_pump"]
        assert np.allclose(model.col_lower[block], 0.5)
        assert np.allclose(model.col_upper[block], 0.5)
        assert "heat_pump_limit" in model.row_blocks

    def test_heat_pump_defaults_to_constant_cop(self, base_config):
        config = dataclasses.replace(base_config, heat_pump=HeatPumpConfig(enabled=True, default_cop=2.5))
        subsystems = resolve_subsystems(config, heat_demand=np.full(8760, 5.0))
        assert np.allclose(subsystems.heat_pump.consumption, 2.0)

    def test_heat_pump_without_heat_demand_raises(self, base_config, solar, demand, flat_price):
        config = dataclasses.replace(base_config, heat_pump=HeatPumpConfig(enabled=True))
        with pytest.raises(ConfigurationError, match="heat demand"):
            _build(config, solar, demand, flat_price)


# ======================================================================
# Errors
# ======================================================================


class TestBuildErrors:
    def test_zero_pv_bound_when_free(self, base_config, solar, demand, flat_price):
        with pytest.raises(ConfigurationError, match="pv_cap_max"):
            _build(base_config, solar, demand, flat_price, pv_cap_max=0.0)

    def test_zero_pv_allowed_when_fixed(self, base_config, solar, demand, flat_price):
        config = dataclasses.replace(base_config, pv_fixed=True, pv_capacity_max=0.0)
        model = _build(config, solar, demand, flat_price)
        assert model.col_upper[model.columns["cap_pv"]][0] == 0.0

    def test_short_series_raises(self, base_config, demand, flat_price):
        with pytest.raises(ConfigurationError, match="solar"):
            _build(base_config, np.zeros(100), demand, flat_price)

    @pytest.mark.parametrize(
        "field,value",
        [("battery_eta_in", 0.0), ("battery_eta_out", 1.5), ("battery_loss", 1.0), ("inv_pv", -1.0)],
    )
    def test_invalid_config(self, field, value):
        with pytest.raises(ConfigurationError):
            SizingConfig(**{field: value})
