"""Building heat demand and heat-pump electricity."""

from .insulation import (
    BuildingType,
    ConstructionPeriod,
    HeatingMedium,
    InsulationLevel,
    annual_heating_demand_per_m2,
)
from .heat import (
    DEFAULT_COP,
    heat_demand_from_profile,
    heat_demand_from_temperatures,
    heat_pump_electricity,
)

__all__ = [
    "BuildingType",
    "ConstructionPeriod",
    "DEFAULT_COP",
    "HeatingMedium",
    "InsulationLevel",
    "annual_heating_demand_per_m2",
    "heat_demand_from_profile",
    "heat_demand_from_temperatures",
    "heat_pump_electricity",
]
