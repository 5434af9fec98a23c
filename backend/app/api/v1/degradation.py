from fastapi import APIRouter, Depends
from starlette.concurrency import run_in_threadpool

from app.core.deps import get_provider
from app.schemas.degradation import DegradationRequest, ScenarioResult
from engine.battery.degradation import simulate_scenarios
from engine.load.demand import shape_demand
from engine.timeseries.provider import TimeSeriesProvider

router = APIRouter()


@router.post(
    "",
    response_model=dict[str, ScenarioResult],
    summary="Simulate system ageing",
    description="Run the greedy multi-year battery simulation for each PV/battery scenario against the stored solar and demand series.",
)
async def simulate_ageing(
    body: DegradationRequest,
    provider: TimeSeriesProvider = Depends(get_provider),
):
    solar = provider.solar()
    demand = shape_demand(provider.electricity_demand(), annual_kwh=body.electricity_usage_kwh)
    scenarios = {
        s.label: (s.pv_capacity_kw, s.battery_capacity_kwh) for s in body.scenarios
    }

    results = await run_in_threadpool(
        simulate_scenarios, scenarios, solar, demand, body.params.to_params()
    )
    return {label: result.to_dict() for label, result in results.items()}
