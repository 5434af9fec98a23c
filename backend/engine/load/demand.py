"""Scaling of hourly electricity demand to annual or monthly targets.

The base demand curve (8760 hourly kWh values) carries the daily and
seasonal shape; the helpers here stretch it so that either the annual
total or each calendar month's total matches a household's bills.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np
from numpy.typing import ArrayLike, NDArray

from engine.errors import ConfigurationError

HOURS_PER_YEAR = 8760

# Hours per month in a non-leap year.
MONTH_HOURS = np.array(
    [744, 672, 744, 720, 744, 720, 744, 744, 720, 744, 720, 744],
    dtype=np.int64,
)
_MONTH_BOUNDS = np.concatenate(([0], np.cumsum(MONTH_HOURS)))

MONTH_NAMES = (
    "january", "february", "march", "april", "may", "june",
    "july", "august", "september", "october", "november", "december",
)


def month_slices() -> list[slice]:
    """Hour-of-year slices for January .. December."""
    return [slice(int(_MONTH_BOUNDS[m]), int(_MONTH_BOUNDS[m + 1])) for m in range(12)]


def _as_hourly(values: ArrayLike, name: str) -> NDArray[np.float64]:
    arr = np.asarray(values, dtype=np.float64)
    if arr.shape != (HOURS_PER_YEAR,):
        raise ConfigurationError(
            f"{name} must have shape ({HOURS_PER_YEAR},), got {arr.shape}"
        )
    return arr


# ======================================================================
# Monthly targets
# ======================================================================

@dataclass(frozen=True)
class MonthlyDemand:
    """Target electricity consumption per calendar month (kWh)."""

    january: float
    february: float
    march: float
    april: float
    may: float
    june: float
    july: float
    august: float
    september: float
    october: float
    november: float
    december: float

    def __post_init__(self) -> None:
        for name in MONTH_NAMES:
            if getattr(self, name) < 0:
                raise ConfigurationError(f"Monthly demand for {name} must be >= 0")

    @classmethod
    def from_sequence(cls, values: Sequence[float]) -> "MonthlyDemand":
        if len(values) != 12:
            raise ConfigurationError(f"Expected 12 monthly values, got {len(values)}")
        return cls(*(float(v) for v in values))

    def for_month(self, month: int) -> float:
        """Target for *month* (1 = January)."""
        if not 1 <= month <= 12:
            raise ConfigurationError(f"month must be in 1..12, got {month}")
        return getattr(self, MONTH_NAMES[month - 1])

    def as_array(self) -> NDArray[np.float64]:
        return np.array([getattr(self, name) for name in MONTH_NAMES], dtype=np.float64)

    @property
    def total(self) -> float:
        return float(self.as_array().sum())


# ======================================================================
# Scaling
# ======================================================================

def scale_to_monthly_demand(
    monthly: MonthlyDemand, base: ArrayLike
) -> NDArray[np.float64]:
    """Rescale *base* so each month sums to its target.

    Every hour in month m is multiplied by ``target[m] / sum(base[m])``.  A
    month whose base sums to zero gets a factor of zero.

    Raises
    ------
    ConfigurationError
        If *base* does not hold exactly 8760 values.
    """
    base_arr = _as_hourly(base, "base demand")
    targets = monthly.as_array()
    scaled = np.empty_like(base_arr)
    for month, hours in enumerate(month_slices()):
        month_sum = float(base_arr[hours].sum())
        factor = targets[month] / month_sum if month_sum > 0 else 0.0
        scaled[hours] = base_arr[hours] * factor
    return scaled


def scale_to_annual_usage(base: ArrayLike, annual_kwh: float) -> NDArray[np.float64]:
    """Rescale *base* so that it sums to *annual_kwh*."""
    base_arr = _as_hourly(base, "base demand")
    if annual_kwh < 0:
        raise ConfigurationError(f"annual_kwh must be >= 0, got {annual_kwh}")
    total = float(base_arr.sum())
    if total <= 0:
        return np.zeros(HOURS_PER_YEAR, dtype=np.float64)
    return base_arr * (annual_kwh / total)


def shape_demand(
    base: ArrayLike,
    monthly: Optional[MonthlyDemand] = None,
    annual_kwh: Optional[float] = None,
) -> NDArray[np.float64]:
    """Apply monthly targets if given, else the annual target, else nothing."""
    if monthly is not None:
        return scale_to_monthly_demand(monthly, base)
    if annual_kwh is not None:
        return scale_to_annual_usage(base, annual_kwh)
    return _as_hourly(base, "base demand").copy()
