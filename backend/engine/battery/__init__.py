"""Battery ageing -- multi-year greedy dispatch with capacity and PV degradation."""

from .degradation import (
    DegradationParams,
    SimulationResult,
    YearSummary,
    scenario_from_sizing,
    simulate_degradation,
    simulate_scenarios,
)

__all__ = [
    "DegradationParams",
    "SimulationResult",
    "YearSummary",
    "scenario_from_sizing",
    "simulate_degradation",
    "simulate_scenarios",
]
