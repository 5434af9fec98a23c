"""Shared test fixtures for SolarSizer engine and API tests."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest
from numpy.typing import NDArray

HOURS_PER_YEAR = 8760

# Residential shape: low overnight, morning bump, strong evening peak (kWh/h).
_RESIDENTIAL_HOURLY = np.array(
    [
        0.30, 0.25, 0.22, 0.20, 0.20, 0.22,  # 00-05
        0.35, 0.50, 0.55, 0.45, 0.40, 0.38,  # 06-11
        0.40, 0.42, 0.45, 0.55, 0.70, 0.85,  # 12-17
        1.00, 0.95, 0.85, 0.70, 0.55, 0.40,  # 18-23
    ],
    dtype=np.float64,
)


def make_solar(seed: int = 42) -> NDArray[np.float64]:
    """Normalised PV yield: bell curve 06-18 with seasonal swing and noise."""
    rng = np.random.default_rng(seed)
    hours = np.arange(HOURS_PER_YEAR, dtype=np.float64)
    hour_of_day = hours % 24
    day = hours // 24

    daylight = (hour_of_day >= 6) & (hour_of_day <= 18)
    shape = np.where(daylight, np.sin(np.pi * (hour_of_day - 6) / 12), 0.0)
    season = 0.75 + 0.25 * np.cos(2 * np.pi * (day - 172) / 365)
    solar = shape * season * 0.85 + np.where(daylight, rng.normal(0, 0.02, HOURS_PER_YEAR), 0.0)
    return np.clip(solar, 0.0, 1.0).astype(np.float64)


def make_demand() -> NDArray[np.float64]:
    """Deterministic residential demand, about 4,400 kWh/yr."""
    return np.tile(_RESIDENTIAL_HOURLY, 365).astype(np.float64)


def write_data_files(
    directory: Path,
    solar: NDArray[np.float64],
    demand_kwh: NDArray[np.float64],
) -> dict[str, Path]:
    """Write solar, demand and when2heat-style profile CSVs into *directory*.

    The demand file is in Wh; the profile file uses ``;`` and decimal commas.
    """
    directory.mkdir(parents=True, exist_ok=True)

    solar_path = directory / "ts_res.csv"
    lines = ["Time,Solar"] + [f"{t},{v:.6f}" for t, v in enumerate(solar)]
    solar_path.write_text("\n".join(lines) + "\n")

    demand_path = directory / "demand.csv"
    hot_water_wh = np.full(HOURS_PER_YEAR, 150.0)
    lines = ["Time,HotWater,SpaceHeat,Electricity,Charge"] + [
        f"{t},{hot_water_wh[t]:.3f},0,{demand_kwh[t] * 1000:.3f},0" for t in range(HOURS_PER_YEAR)
    ]
    demand_path.write_text("\n".join(lines) + "\n")

    profile_path = directory / "when2heat_processed_2022.csv"
    hours = np.arange(HOURS_PER_YEAR)
    winter = 1.0 + np.cos(2 * np.pi * hours / HOURS_PER_YEAR)
    cop_floor = 3.0 + 0.5 * (1 - winter / 2)

    def _dec(value: float) -> str:
        return f'"{value:.4f}"'.replace(".", ",")

    header = "utc_timestamp;ES_COP_ASHP_floor;ES_COP_ASHP_radiator;ES_heat_demand_space_SFH;ES_heat_demand_space_MFH"
    lines = [header] + [
        ";".join(
            [
                str(t),
                _dec(cop_floor[t]),
                _dec(cop_floor[t] - 0.4),
                _dec(winter[t] * 100.0),
                _dec(winter[t] * 60.0),
            ]
        )
        for t in range(HOURS_PER_YEAR)
    ]
    profile_path.write_text("\n".join(lines) + "\n")

    return {"solar": solar_path, "demand": demand_path, "profile": profile_path}


# ======================================================================
# Series fixtures
# ======================================================================

@pytest.fixture(scope="session")
def solar() -> NDArray[np.float64]:
    """Synthetic normalised PV yield for one year."""
    return make_solar()


@pytest.fixture(scope="session")
def demand() -> NDArray[np.float64]:
    """Synthetic residential electricity demand (kWh) for one year."""
    return make_demand()


@pytest.fixture(scope="session")
def flat_price() -> NDArray[np.float64]:
    return np.full(HOURS_PER_YEAR, 0.30, dtype=np.float64)


# ======================================================================
# Data-file fixtures
# ======================================================================

@pytest.fixture(scope="session")
def data_dir(tmp_path_factory, solar, demand) -> Path:
    """Directory holding the three standard CSV inputs."""
    directory = tmp_path_factory.mktemp("data")
    write_data_files(directory, solar, demand)
    return directory


@pytest.fixture
def provider(data_dir):
    from engine.timeseries.provider import TimeSeriesProvider

    return TimeSeriesProvider(data_dir=data_dir)


# ======================================================================
# Config fixtures
# ======================================================================

@pytest.fixture
def base_config():
    """PV up to 5 kW, battery up to 10 kWh, no hot-water store."""
    from engine.sizing.config import SizingConfig

    return SizingConfig(
        pv_capacity_max=5.0,
        battery_capacity=10.0,
        hot_water_enabled=False,
    )
