"""PV / battery / grid sizing LP and the tooling around it."""

from .config import EVConfig, HeatPumpConfig, SizingConfig
from .model import DispatchModel, build_model
from .results import SizingResult
from .runner import SizingInputs, SizingRunner, prepare_inputs, run_sizing
from .solver import ModelSolution, extract_result, solve_and_extract, solve_model
from .subsystems import resolve_subsystems
from .sweep import SweepPoint, pv_capacity_range, sweep_pv_capacity

__all__ = [
    "DispatchModel",
    "EVConfig",
    "HeatPumpConfig",
    "ModelSolution",
    "SizingConfig",
    "SizingInputs",
    "SizingResult",
    "SizingRunner",
    "SweepPoint",
    "build_model",
    "extract_result",
    "prepare_inputs",
    "pv_capacity_range",
    "resolve_subsystems",
    "run_sizing",
    "solve_and_extract",
    "solve_model",
    "sweep_pv_capacity",
]
