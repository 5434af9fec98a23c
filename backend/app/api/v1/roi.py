from fastapi import APIRouter

from app.schemas.roi import ROIRequest, ROIResponse
from engine.economics.roi import savings_stream, solve_roi

router = APIRouter()


@router.post(
    "",
    response_model=ROIResponse,
    summary="Compute return on investment",
    description="Solve for the constant annual return rate of a savings stream, with NPV at that rate and payback period.",
)
async def compute_roi(body: ROIRequest):
    if body.annual_savings is not None:
        savings = body.annual_savings
    else:
        params = body.savings
        savings = savings_stream(
            grid_price=params.grid_price,
            usage_kwh=params.usage_kwh,
            grid_energy_kwh=params.grid_energy_kwh,
            years=params.years,
            price_increase=params.price_increase,
            other_yearly_cost=params.other_yearly_cost,
        )

    result = solve_roi(body.initial_investment, savings)
    return {**result.to_dict(), "annual_savings": list(savings)}
