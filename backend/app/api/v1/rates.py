from fastapi import APIRouter

from app.schemas.rates import RateSchema, RateValidationResponse

router = APIRouter()


@router.post(
    "/validate",
    response_model=RateValidationResponse,
    summary="Validate a rate table",
    description="Check that every weekday and weekend hour is priced exactly once and preview one week of hourly prices.",
)
async def validate_rate(body: RateSchema):
    rate = body.to_rate()
    return {
        "valid": rate.is_valid(),
        "hourly_preview": rate.to_weekly_hourly_rates().tolist(),
    }
