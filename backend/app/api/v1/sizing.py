import logging

from fastapi import APIRouter, Depends, HTTPException, status
from starlette.concurrency import run_in_threadpool

from app.config import settings
from app.core.deps import get_provider
from app.schemas.sizing import (
    SizingRequest,
    SizingResponse,
    SweepPointResponse,
    SweepRequest,
)
from engine.sizing.runner import run_sizing
from engine.sizing.sweep import pv_capacity_range, sweep_pv_capacity
from engine.timeseries.provider import TimeSeriesProvider

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "",
    response_model=SizingResponse,
    summary="Size a PV / battery system",
    description="Solve the hourly sizing LP for one configuration and return capacities and annual aggregates.",
)
async def size_system(
    body: SizingRequest,
    provider: TimeSeriesProvider = Depends(get_provider),
):
    config = body.config.to_config()
    result = await run_in_threadpool(run_sizing, config, provider, body.pv_cap_max)
    return result.to_dict(include_hourly=body.include_hourly)


@router.post(
    "/sweep",
    response_model=list[SweepPointResponse],
    summary="Sweep fixed PV capacities",
    description="Solve once per PV capacity in [min, max] with the given step. Infeasible points are returned with zeros and succeeded=false.",
)
async def sweep_pv(
    body: SweepRequest,
    provider: TimeSeriesProvider = Depends(get_provider),
):
    capacities = pv_capacity_range(body.pv_capacity_min, body.pv_capacity_max, body.pv_capacity_step)
    if len(capacities) > settings.sweep_max_points:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Sweep has {len(capacities)} points; the limit is {settings.sweep_max_points}",
        )

    config = body.config.to_config()
    points = await run_in_threadpool(
        sweep_pv_capacity, config, provider, capacities, settings.sweep_max_workers
    )
    logger.info(
        "Sweep finished",
        extra={"points": len(points), "failed_points": sum(not p.succeeded for p in points)},
    )
    return [p.to_dict() for p in points]
