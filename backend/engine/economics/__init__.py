"""Economic analysis module."""

from .metrics import capital_recovery_factor, net_present_value, payback_period
from .roi import ROIResult, initial_investment, roi_from_sizing, savings_stream, solve_roi

__all__ = [
    "ROIResult",
    "capital_recovery_factor",
    "initial_investment",
    "net_present_value",
    "payback_period",
    "roi_from_sizing",
    "savings_stream",
    "solve_roi",
]
