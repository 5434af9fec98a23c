"""Hourly PV / grid / storage sizing LP.

Builds a solver-neutral linear program that sizes PV, grid connection,
battery, hot-water store and heat pump while dispatching every hour of a
non-leap year.  The objective minimises annuitised investment plus the yearly
grid bill minus feed-in revenue:

    min  sum_k cap_k * inv_k * annuity
       + sum_t (grid[t] * price[t] - overproduction[t] * feed_in)
       [+ sum_t grid[t]]                      (optimise for autonomy)

Hourly constraints (t = 0 .. 8759):

* balance:   pv_used + grid - batt_in + batt_out - ev - hp - hw_heat = demand
* hot water: hw_heat - hw_in + hw_out = hot_water_demand
* PV split:  overproduction + pv_used - solar * cap_pv = 0
* PV limit:  solar * cap_pv - pv_used >= 0
* grid:      cap_grid - grid >= 0
* storage:   level[t] = (1 - loss) level[t-1] + eta_in in[t] - out[t] / eta_out   (t >= 1)
             level[t] <= cap,  in[t] <= c_rate cap,  out[t] <= c_rate cap
             level[0] = in[0] = out[0] = 0
* EV:        ev[t] = 0 outside the charging window,  sum_t ev = annual energy
* heat pump: hp[t] = consumption[t],  cap_hp - hp[t] >= 0

Variable families for absent subsystems are not created at all.  The
constraint matrix is assembled block-wise in COO form and stored as CSR.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Optional

import numpy as np
import scipy.sparse as sp
from numpy.typing import ArrayLike, NDArray

from engine.errors import ConfigurationError
from engine.sizing.config import SizingConfig
from engine.sizing.subsystems import Storage, Subsystems, resolve_subsystems

logger = logging.getLogger(__name__)

HOURS_PER_YEAR = 8760

# Hourly families (one column per hour) and scalar capacity columns.
HOURLY_FAMILIES = (
    "pv_used", "grid", "overproduction",
    "battery_in", "battery_out", "battery_level",
    "ev_charge", "heat_pump",
    "hot_water_heating", "hot_water_in", "hot_water_out", "hot_water_level",
)
CAPACITY_COLUMNS = (
    "cap_pv", "cap_grid", "cap_battery", "cap_hot_water", "cap_heat_pump",
)


@dataclass
class DispatchModel:
    """A linear program ``min c'x  s.t.  row_lower <= A x <= row_upper``.

    ``columns`` maps a family name to the slice of ``x`` it occupies;
    ``row_blocks`` does the same for constraint rows.
    """

    col_cost: NDArray[np.float64]
    col_lower: NDArray[np.float64]
    col_upper: NDArray[np.float64]
    matrix: sp.csr_matrix
    row_lower: NDArray[np.float64]
    row_upper: NDArray[np.float64]
    columns: dict[str, slice]
    row_blocks: dict[str, slice]
    subsystems: Subsystems
    config: SizingConfig
    solar: NDArray[np.float64]
    demand: NDArray[np.float64]
    price: NDArray[np.float64]
    hot_water_demand: NDArray[np.float64]

    @property
    def num_cols(self) -> int:
        return int(self.col_cost.shape[0])

    @property
    def num_rows(self) -> int:
        return int(self.row_lower.shape[0])

    def has(self, family: str) -> bool:
        return family in self.columns

    def values(self, x: NDArray[np.float64], family: str) -> NDArray[np.float64]:
        """Slice of solution vector *x* for *family* (zeros if absent)."""
        if family not in self.columns:
            return np.zeros(HOURS_PER_YEAR, dtype=np.float64)
        return x[self.columns[family]]

    def scalar(self, x: NDArray[np.float64], name: str) -> float:
        if name not in self.columns:
            return 0.0
        return float(x[self.columns[name]][0])


# ======================================================================
# Assembly helpers
# ======================================================================

@dataclass
class _ColumnLayout:
    cost: list[NDArray[np.float64]] = field(default_factory=list)
    lower: list[NDArray[np.float64]] = field(default_factory=list)
    upper: list[NDArray[np.float64]] = field(default_factory=list)
    columns: dict[str, slice] = field(default_factory=dict)
    n: int = 0

    def add(self, name: str, size: int, lower=0.0, upper=math.inf, cost=0.0) -> slice:
        """Allocate *size* consecutive columns; bounds and cost broadcast."""
        block = slice(self.n, self.n + size)
        self.columns[name] = block
        self.cost.append(np.broadcast_to(np.asarray(cost, dtype=np.float64), (size,)))
        self.lower.append(np.broadcast_to(np.asarray(lower, dtype=np.float64), (size,)))
        self.upper.append(np.broadcast_to(np.asarray(upper, dtype=np.float64), (size,)))
        self.n += size
        return block

    def index(self, name: str) -> NDArray[np.int64]:
        block = self.columns[name]
        return np.arange(block.start, block.stop, dtype=np.int64)


@dataclass
class _RowBuilder:
    rows: list[NDArray[np.int64]] = field(default_factory=list)
    cols: list[NDArray[np.int64]] = field(default_factory=list)
    vals: list[NDArray[np.float64]] = field(default_factory=list)
    lower: list[NDArray[np.float64]] = field(default_factory=list)
    upper: list[NDArray[np.float64]] = field(default_factory=list)
    blocks: dict[str, slice] = field(default_factory=dict)
    n: int = 0

    def add_block(self, name: str, size: int, lower, upper) -> NDArray[np.int64]:
        """Register *size* rows and return their indices."""
        self.blocks[name] = slice(self.n, self.n + size)
        self.lower.append(np.broadcast_to(np.asarray(lower, dtype=np.float64), (size,)))
        self.upper.append(np.broadcast_to(np.asarray(upper, dtype=np.float64), (size,)))
        idx = np.arange(self.n, self.n + size, dtype=np.int64)
        self.n += size
        return idx

    def entries(self, rows, cols, vals) -> None:
        rows = np.asarray(rows, dtype=np.int64)
        cols = np.broadcast_to(np.asarray(cols, dtype=np.int64), rows.shape)
        vals = np.broadcast_to(np.asarray(vals, dtype=np.float64), rows.shape)
        self.rows.append(rows)
        self.cols.append(cols)
        self.vals.append(vals)

    def matrix(self, n_cols: int) -> sp.csr_matrix:
        coo = sp.coo_matrix(
            (np.concatenate(self.vals), (np.concatenate(self.rows), np.concatenate(self.cols))),
            shape=(self.n, n_cols),
        )
        csr = coo.tocsr()
        csr.eliminate_zeros()
        return csr


def _hourly(values: ArrayLike, name: str) -> NDArray[np.float64]:
    arr = np.asarray(values, dtype=np.float64)
    if arr.shape != (HOURS_PER_YEAR,):
        raise ConfigurationError(
            f"{name} must have shape ({HOURS_PER_YEAR},), got {arr.shape}"
        )
    return arr


def _add_storage(
    layout: _ColumnLayout,
    rows: _RowBuilder,
    store: Storage,
    annuity: float,
) -> None:
    """Columns and constraints for one storage family."""
    T = HOURS_PER_YEAR
    name = store.name

    # Nothing enters, leaves or sits in the store at hour 0.
    first_hour_zero = np.full(T, math.inf)
    first_hour_zero[0] = 0.0
    layout.add(f"{name}_in", T, upper=first_hour_zero)
    layout.add(f"{name}_out", T, upper=first_hour_zero)
    layout.add(f"{name}_level", T, upper=first_hour_zero)
    layout.add(
        f"cap_{name}", 1,
        lower=store.capacity_lower, upper=store.capacity_upper,
        cost=store.unit_cost * annuity,
    )

    level = layout.index(f"{name}_level")
    charge = layout.index(f"{name}_in")
    discharge = layout.index(f"{name}_out")
    cap = layout.columns[f"cap_{name}"].start

    # level[t] - (1 - loss) level[t-1] - eta_in in[t] + out[t] / eta_out = 0
    r = rows.add_block(f"{name}_balance", T - 1, 0.0, 0.0)
    rows.entries(r, level[1:], 1.0)
    rows.entries(r, level[:-1], -(1.0 - store.loss))
    rows.entries(r, charge[1:], -store.eta_in)
    rows.entries(r, discharge[1:], 1.0 / store.eta_out)

    # level[t] - cap <= 0
    r = rows.add_block(f"{name}_level_limit", T, -math.inf, 0.0)
    rows.entries(r, level, 1.0)
    rows.entries(r, cap, -1.0)

    # in[t] - c_rate cap <= 0, out[t] - c_rate cap <= 0
    for flow, idx in (("in", charge), ("out", discharge)):
        r = rows.add_block(f"{name}_{flow}_rate", T, -math.inf, 0.0)
        rows.entries(r, idx, 1.0)
        rows.entries(r, cap, -store.c_rate)


# ======================================================================
# Builder
# ======================================================================

def build_model(
    config: SizingConfig,
    solar: ArrayLike,
    demand: ArrayLike,
    rate: ArrayLike,
    pv_cap_max: Optional[float] = None,
    heat_demand: Optional[ArrayLike] = None,
    cop: Optional[ArrayLike] = None,
    hot_water_demand: Optional[ArrayLike] = None,
) -> DispatchModel:
    """Assemble the sizing LP.

    Parameters
    ----------
    config : SizingConfig
        Costs, efficiencies, bounds and subsystem switches.
    solar : array-like, shape (8760,)
        PV yield per kW of installed capacity (0 -- 1).
    demand : array-like, shape (8760,)
        Baseline electricity demand (kWh).
    rate : array-like, shape (8760,)
        Grid energy price per hour.
    pv_cap_max : float, optional
        PV capacity bound (kW); defaults to ``config.pv_capacity_max``.  With
        ``config.pv_fixed`` the PV capacity equals this value.
    heat_demand : array-like, shape (8760,), optional
        Space-heat demand (kWh); required when the heat pump is enabled.
    cop : array-like, shape (8760,), optional
        Heat-pump COP series; constant ``default_cop`` if omitted.
    hot_water_demand : array-like, shape (8760,), optional
        Hot-water demand (kWh) served by the electric heater and the
        hot-water store; zero if omitted.  Ignored without a hot-water store.

    Returns
    -------
    DispatchModel

    Raises
    ------
    ConfigurationError
        On a series of the wrong length, a non-positive PV bound for a free
        PV capacity, or a heat pump without heat demand.
    """
    solar = _hourly(solar, "solar")
    demand = _hourly(demand, "demand")
    price = _hourly(rate, "rate")
    if heat_demand is not None:
        heat_demand = _hourly(heat_demand, "heat_demand")
    if cop is not None:
        cop = _hourly(cop, "cop")
    if hot_water_demand is not None:
        hot_water_demand = _hourly(hot_water_demand, "hot_water_demand")

    pv_bound = config.pv_capacity_max if pv_cap_max is None else float(pv_cap_max)
    if config.pv_fixed:
        if pv_bound < 0:
            raise ConfigurationError(f"Fixed PV capacity must be >= 0, got {pv_bound}")
    elif pv_bound <= 0:
        raise ConfigurationError(f"pv_cap_max must be > 0 when PV is not fixed, got {pv_bound}")

    subsystems = resolve_subsystems(config, heat_demand=heat_demand, cop=cop)
    T = HOURS_PER_YEAR
    annuity = config.annuity

    layout = _ColumnLayout()
    rows = _RowBuilder()

    # ----- Core columns ------------------------------------------------------
    grid_cost = price + (1.0 if config.optimize_for_autonomy else 0.0)
    layout.add("pv_used", T)
    layout.add("grid", T, cost=grid_cost)
    layout.add("overproduction", T, cost=-config.feed_in_tariff)
    layout.add(
        "cap_pv", 1,
        lower=pv_bound if config.pv_fixed else 0.0,
        upper=pv_bound,
        cost=config.inv_pv * annuity,
    )
    layout.add(
        "cap_grid", 1,
        upper=math.inf if config.grid_capacity_max is None else config.grid_capacity_max,
        cost=config.inv_grid * annuity,
    )

    # ----- Optional columns --------------------------------------------------
    if subsystems.ev.present:
        layout.add("ev_charge", T, upper=np.where(subsystems.ev.window, math.inf, 0.0))
    if subsystems.heat_pump.present:
        hp = subsystems.heat_pump
        layout.add("heat_pump", T, lower=hp.consumption, upper=hp.consumption)
        layout.add(
            "cap_heat_pump", 1, upper=hp.capacity_upper, cost=hp.unit_cost * annuity
        )
    if subsystems.hot_water.present:
        layout.add("hot_water_heating", T)

    # ----- Storage (columns + their own rows) ---------------------------------
    for store in (subsystems.battery, subsystems.hot_water):
        if store.present:
            _add_storage(layout, rows, store, annuity)

    pv_used = layout.index("pv_used")
    grid = layout.index("grid")
    over = layout.index("overproduction")
    cap_pv = layout.columns["cap_pv"].start
    cap_grid = layout.columns["cap_grid"].start

    # ----- Energy balance ----------------------------------------------------
    r = rows.add_block("balance", T, demand, demand)
    rows.entries(r, pv_used, 1.0)
    rows.entries(r, grid, 1.0)
    signed_terms = (
        ("battery_in", -1.0), ("battery_out", 1.0),
        ("ev_charge", -1.0), ("heat_pump", -1.0),
        ("hot_water_heating", -1.0),
    )
    for family, sign in signed_terms:
        if family in layout.columns:
            rows.entries(r, layout.index(family), sign)

    # ----- PV split and limit -------------------------------------------------
    r = rows.add_block("pv_split", T, 0.0, 0.0)
    rows.entries(r, over, 1.0)
    rows.entries(r, pv_used, 1.0)
    rows.entries(r, cap_pv, -solar)

    r = rows.add_block("pv_limit", T, 0.0, math.inf)
    rows.entries(r, cap_pv, solar)
    rows.entries(r, pv_used, -1.0)

    # ----- Grid capacity -----------------------------------------------------
    r = rows.add_block("grid_limit", T, 0.0, math.inf)
    rows.entries(r, cap_grid, 1.0)
    rows.entries(r, grid, -1.0)

    # ----- EV yearly energy --------------------------------------------------
    if subsystems.ev.present:
        annual = subsystems.ev.annual_energy_kwh
        r = rows.add_block("ev_total", 1, annual, annual)
        ev = layout.index("ev_charge")
        rows.entries(np.repeat(r, T), ev, 1.0)

    # ----- Hot-water demand ---------------------------------------------------
    # The store only exchanges heat; it never feeds the electricity balance.
    if not subsystems.hot_water.present or hot_water_demand is None:
        hot_water_demand = np.zeros(T, dtype=np.float64)
    if subsystems.hot_water.present:
        r = rows.add_block("hot_water_supply", T, hot_water_demand, hot_water_demand)
        rows.entries(r, layout.index("hot_water_heating"), 1.0)
        rows.entries(r, layout.index("hot_water_in"), -1.0)
        rows.entries(r, layout.index("hot_water_out"), 1.0)

    # ----- Heat-pump capacity ------------------------------------------------
    if subsystems.heat_pump.present:
        r = rows.add_block("heat_pump_limit", T, 0.0, math.inf)
        rows.entries(r, layout.columns["cap_heat_pump"].start, 1.0)
        rows.entries(r, layout.index("heat_pump"), -1.0)

    model = DispatchModel(
        col_cost=np.concatenate(layout.cost).astype(np.float64),
        col_lower=np.concatenate(layout.lower).astype(np.float64),
        col_upper=np.concatenate(layout.upper).astype(np.float64),
        matrix=rows.matrix(layout.n),
        row_lower=np.concatenate(rows.lower).astype(np.float64),
        row_upper=np.concatenate(rows.upper).astype(np.float64),
        columns=layout.columns,
        row_blocks=rows.blocks,
        subsystems=subsystems,
        config=config,
        solar=solar,
        demand=demand,
        price=price,
        hot_water_demand=hot_water_demand,
    )
    logger.debug(
        "Built sizing LP: %d columns, %d rows, %d non-zeros, subsystems=%s",
        model.num_cols, model.num_rows, model.matrix.nnz, subsystems.summary(),
    )
    return model
