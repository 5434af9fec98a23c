"""API test infrastructure — async httpx client over a temporary data directory."""

from __future__ import annotations

from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from engine.timeseries.provider import TimeSeriesProvider


# ---------------------------------------------------------------------------
# FastAPI app bound to the synthetic data files
# ---------------------------------------------------------------------------

@pytest.fixture
def app(data_dir):
    from app.main import create_app

    application = create_app()
    application.state.provider = TimeSeriesProvider(data_dir=data_dir)
    yield application
    application.state.provider.clear_cache()


@pytest.fixture
def empty_app(tmp_path):
    """App whose data directory holds no files."""
    from app.main import create_app

    application = create_app()
    application.state.provider = TimeSeriesProvider(data_dir=tmp_path)
    return application


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def empty_client(empty_app) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=empty_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


# ---------------------------------------------------------------------------
# Request helpers
# ---------------------------------------------------------------------------

@pytest.fixture
def sizing_config() -> dict:
    """Small PV/battery problem without hot water."""
    return {
        "pv_capacity_max": 5.0,
        "battery_capacity": 10.0,
        "hot_water_enabled": False,
    }
