"""Cached access to the hourly input series.

A :class:`TimeSeriesProvider` is created once per process (or per test) and
passed explicitly to whatever needs data.  Parsed arrays are cached per file
identity (resolved path, modification time and size), so editing a file on
disk invalidates its entry while repeated solves reuse the parsed data.
Returned arrays are read-only and may be shared between threads.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any, Callable, Hashable

import numpy as np
from numpy.typing import NDArray

from engine.errors import DataLoadError
from engine.timeseries.parsers import (
    DemandSeries,
    parse_demand_csv,
    parse_hourly_demand,
    parse_profile_csv,
    parse_solar_csv,
)

logger = logging.getLogger(__name__)


def cop_column(country: str, heating_medium: str) -> str:
    """Profile column holding air-source heat-pump COP for *heating_medium*."""
    return f"{country}_COP_ASHP_{heating_medium}"


def heat_profile_column(country: str, dwelling: str) -> str:
    """Profile column holding the space-heat demand shape for ``SFH`` or ``MFH``."""
    return f"{country}_heat_demand_space_{dwelling}"


def _read_only(arr: NDArray[np.float64]) -> NDArray[np.float64]:
    arr.setflags(write=False)
    return arr


class TimeSeriesProvider:
    """Loads and caches solar, demand and heat-pump profile series.

    Parameters
    ----------
    data_dir : str or Path
        Directory that relative file names are resolved against.
    solar_file, demand_file, profile_file : str
        File names (or absolute paths) of the three standard inputs.
    country : str
        Prefix selecting the profile columns (e.g. ``"ES"``).
    """

    def __init__(
        self,
        data_dir: str | Path = "data",
        solar_file: str = "ts_res.csv",
        demand_file: str = "demand.csv",
        profile_file: str = "when2heat_processed_2022.csv",
        country: str = "ES",
    ) -> None:
        self.data_dir = Path(data_dir)
        self.solar_file = solar_file
        self.demand_file = demand_file
        self.profile_file = profile_file
        self.country = country

        self._cache: dict[Hashable, Any] = {}
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    # ------------------------------------------------------------------
    # Cache plumbing
    # ------------------------------------------------------------------

    def _path(self, name: str | Path) -> Path:
        path = Path(name)
        if not path.is_absolute():
            path = self.data_dir / path
        return path

    def _load(self, name: str | Path, kind: Hashable, parser: Callable[[str, str], Any]) -> Any:
        path = self._path(name)
        try:
            resolved = path.resolve(strict=True)
            stat = resolved.stat()
        except OSError as exc:
            raise DataLoadError(f"Data file not found: {path}") from exc

        key = (str(resolved), stat.st_mtime_ns, stat.st_size, kind)
        with self._lock:
            if key in self._cache:
                self._hits += 1
                return self._cache[key]
            self._misses += 1

            logger.info("Loading %s from %s", kind, resolved)
            try:
                text = resolved.read_text(encoding="utf-8-sig")
            except (OSError, UnicodeDecodeError) as exc:
                raise DataLoadError(f"Could not read {resolved}: {exc}") from exc

            value = parser(text, resolved.name)
            self._cache[key] = value
            return value

    def clear_cache(self) -> None:
        with self._lock:
            self._cache.clear()
            self._hits = 0
            self._misses = 0

    def cache_info(self) -> dict[str, int]:
        with self._lock:
            return {"entries": len(self._cache), "hits": self._hits, "misses": self._misses}

    # ------------------------------------------------------------------
    # Series accessors
    # ------------------------------------------------------------------

    def solar(self) -> NDArray[np.float64]:
        """Normalised hourly PV yield (kWh per kWp)."""
        return self._load(
            self.solar_file, "solar", lambda text, src: _read_only(parse_solar_csv(text, src))
        )

    def demand(self) -> DemandSeries:
        """Baseline electricity and hot-water demand (kWh)."""

        def _parse(text: str, src: str) -> DemandSeries:
            series = parse_demand_csv(text, src)
            _read_only(series.electricity)
            _read_only(series.hot_water)
            return series

        return self._load(self.demand_file, "demand", _parse)

    def electricity_demand(self) -> NDArray[np.float64]:
        return self.demand().electricity

    def hot_water_demand(self) -> NDArray[np.float64]:
        return self.demand().hot_water

    def hourly_demand(self, name: str | Path) -> NDArray[np.float64]:
        """Single-column Wh file converted to kWh."""
        return self._load(
            name, "hourly_demand", lambda text, src: _read_only(parse_hourly_demand(text, src))
        )

    def profile_columns(self, *columns: str) -> dict[str, NDArray[np.float64]]:
        def _parse(text: str, src: str) -> dict[str, NDArray[np.float64]]:
            parsed = parse_profile_csv(text, columns, src)
            return {name: _read_only(arr) for name, arr in parsed.items()}

        return self._load(self.profile_file, ("profile", columns), _parse)

    def cop(self, heating_medium: str) -> NDArray[np.float64]:
        """Hourly heat-pump COP for ``"floor"`` or ``"radiator"`` heating."""
        column = cop_column(self.country, heating_medium)
        return self.profile_columns(column)[column]

    def heat_profile(self, dwelling: str) -> NDArray[np.float64]:
        """Hourly space-heat shape for ``"SFH"`` or ``"MFH"`` dwellings."""
        column = heat_profile_column(self.country, dwelling)
        return self.profile_columns(column)[column]

    def missing_files(self) -> list[str]:
        """Configured input files that do not exist."""
        names = (self.solar_file, self.demand_file, self.profile_file)
        return [str(self._path(name)) for name in names if name and not self._path(name).exists()]

    def describe(self) -> dict[str, str]:
        return {
            "data_dir": str(self.data_dir),
            "solar_file": self.solar_file,
            "demand_file": self.demand_file,
            "profile_file": self.profile_file,
            "country": self.country,
        }
