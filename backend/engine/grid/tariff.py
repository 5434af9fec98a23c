"""Electricity rate tables for household sizing.

A rate is either flat or a set of named tiers, each of which applies to
half-open hour ranges on weekdays or weekends.  Rates are expanded to an
hourly price vector aligned with a non-leap year whose first day (hour 0)
is a Monday.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List

import numpy as np
from numpy.typing import NDArray

from engine.errors import ConfigurationError

HOURS_PER_DAY = 24
HOURS_PER_WEEK = 168
HOURS_PER_YEAR = 8760


class DayType(str, Enum):
    WEEKDAY = "weekday"
    WEEKEND = "weekend"


def day_type_for(day_index: int) -> DayType:
    """Day 0 is a Monday; days 5 and 6 of each week are the weekend."""
    return DayType.WEEKEND if day_index % 7 >= 5 else DayType.WEEKDAY


# ======================================================================
# Hour ranges and tiers
# ======================================================================

@dataclass(frozen=True)
class HourRange:
    """Hours ``[start, end)`` on one kind of day.

    A range with ``start > end`` wraps past midnight, so ``HourRange(22, 6)``
    covers 22:00 -- 05:59.  ``end`` may be 24.
    """

    start: int
    end: int
    day_type: DayType = DayType.WEEKDAY

    def __post_init__(self) -> None:
        if not 0 <= self.start <= 23:
            raise ConfigurationError(f"start must be in 0..23, got {self.start}")
        if not 0 <= self.end <= HOURS_PER_DAY:
            raise ConfigurationError(f"end must be in 0..24, got {self.end}")
        object.__setattr__(self, "day_type", DayType(self.day_type))

    @property
    def wraps(self) -> bool:
        return self.start > self.end

    def hours(self) -> list[int]:
        """Hours of the day covered by this range."""
        if self.wraps:
            return list(range(self.start, HOURS_PER_DAY)) + list(range(0, self.end))
        return list(range(self.start, self.end))

    def contains(self, hour: int, day_type: DayType) -> bool:
        if day_type != self.day_type:
            return False
        if self.wraps:
            return hour >= self.start or hour < self.end
        return self.start <= hour < self.end


@dataclass
class RateTier:
    """A named price that applies during a set of hour ranges.

    Parameters
    ----------
    name : str
        Label such as ``"peak"`` or ``"valle"``.
    rate : float
        Energy price in currency/kWh.
    hour_ranges : List[HourRange]
        When the tier applies.
    """

    name: str
    rate: float
    hour_ranges: List[HourRange] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.rate < 0:
            raise ConfigurationError(f"Tier {self.name!r}: rate must be >= 0, got {self.rate}")

    def applies(self, hour: int, day_type: DayType) -> bool:
        return any(r.contains(hour, day_type) for r in self.hour_ranges)


# ======================================================================
# Rates
# ======================================================================

class ElectricityRate(ABC):
    """Interface shared by flat and tiered rates."""

    @abstractmethod
    def price(self, hour: int, day_type: DayType) -> float:
        """Return the energy price for *hour* (0 -- 23) on a *day_type* day."""

    @abstractmethod
    def is_valid(self) -> bool:
        """Whether every hour of every day type maps to exactly one price."""

    def to_weekly_hourly_rates(self) -> NDArray[np.float64]:
        """168 hourly prices, Monday 00:00 first."""
        rates = np.empty(HOURS_PER_WEEK, dtype=np.float64)
        for t in range(HOURS_PER_WEEK):
            rates[t] = self.price(t % HOURS_PER_DAY, day_type_for(t // HOURS_PER_DAY))
        return rates

    def to_yearly_hourly_rates(self) -> NDArray[np.float64]:
        """8760 hourly prices for a non-leap year starting on a Monday."""
        weekly = self.to_weekly_hourly_rates()
        return np.resize(weekly, HOURS_PER_YEAR)

    @abstractmethod
    def to_dict(self) -> dict[str, Any]:
        ...


@dataclass
class FlatRate(ElectricityRate):
    """Single price for all hours."""

    rate: float = 0.30

    def __post_init__(self) -> None:
        if self.rate < 0:
            raise ConfigurationError(f"rate must be >= 0, got {self.rate}")

    def price(self, hour: int, day_type: DayType) -> float:  # noqa: D401
        return self.rate

    def is_valid(self) -> bool:
        return True

    def to_yearly_hourly_rates(self) -> NDArray[np.float64]:
        return np.full(HOURS_PER_YEAR, self.rate, dtype=np.float64)

    def to_dict(self) -> dict[str, Any]:
        return {"type": "flat", "rate": self.rate}


@dataclass
class TieredRate(ElectricityRate):
    """Prices that vary by hour of day and weekday/weekend.

    Hours not covered by any tier price at 0.0; :meth:`is_valid` reports
    such gaps (and overlaps) so callers can reject the table first.
    """

    tiers: List[RateTier] = field(default_factory=list)

    def price(self, hour: int, day_type: DayType) -> float:
        for tier in self.tiers:
            if tier.applies(hour, day_type):
                return tier.rate
        return 0.0

    def coverage(self, day_type: DayType) -> NDArray[np.int64]:
        """Number of tiers covering each hour of a *day_type* day."""
        counts = np.zeros(HOURS_PER_DAY, dtype=np.int64)
        for tier in self.tiers:
            for hour_range in tier.hour_ranges:
                if hour_range.day_type == day_type:
                    counts[hour_range.hours()] += 1
        return counts

    def is_valid(self) -> bool:
        return all(
            bool(np.all(self.coverage(day_type) == 1)) for day_type in DayType
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "tiered",
            "tiers": [
                {
                    "name": tier.name,
                    "rate": tier.rate,
                    "hour_ranges": [
                        {"start": r.start, "end": r.end, "day_type": r.day_type.value}
                        for r in tier.hour_ranges
                    ],
                }
                for tier in self.tiers
            ],
        }


# ======================================================================
# Helpers
# ======================================================================

def hourly_price_vector(rate: ElectricityRate) -> NDArray[np.float64]:
    """Expand *rate* to 8760 prices, rejecting tables with gaps or overlaps.

    Raises
    ------
    ConfigurationError
        If the rate is a tiered table that does not cover every hour of
        weekdays and weekends exactly once.
    """
    if not rate.is_valid():
        raise ConfigurationError(
            "Tiered rate must cover each weekday and weekend hour exactly once"
        )
    return rate.to_yearly_hourly_rates()


def rate_from_dict(data: dict[str, Any]) -> ElectricityRate:
    """Build a rate from a JSON-like mapping (the inverse of ``to_dict``)."""
    kind = data.get("type", "flat")
    if kind == "flat":
        return FlatRate(rate=float(data.get("rate", 0.30)))
    if kind == "tiered":
        tiers = []
        for tier in data.get("tiers", []):
            ranges = [
                HourRange(
                    start=int(r["start"]),
                    end=int(r["end"]),
                    day_type=DayType(r.get("day_type", "weekday")),
                )
                for r in tier.get("hour_ranges", [])
            ]
            tiers.append(RateTier(name=str(tier.get("name", "")), rate=float(tier["rate"]), hour_ranges=ranges))
        return TieredRate(tiers=tiers)
    raise ConfigurationError(f"Unknown rate type: {kind!r}")
