"""Space-heating need by building age, type and insulation standard.

Values are annual heating demand in kWh per m² of floor area for three
refurbishment standards: the national minimum, an improved retrofit and an
ambitious retrofit.  The insulation level chosen by the user selects the
column (poor → national minimum, moderate → improved, good → ambitious).
"""

from __future__ import annotations

from enum import Enum

from engine.errors import ConfigurationError


class BuildingType(str, Enum):
    SINGLE_FAMILY = "single_family"
    TERRACED = "terraced"
    MULTI_FAMILY = "multi_family"
    APARTMENT = "apartment"

    @property
    def dwelling(self) -> str:
        """Heat-profile family: ``"SFH"`` for houses, ``"MFH"`` for flats."""
        if self in (BuildingType.SINGLE_FAMILY, BuildingType.TERRACED):
            return "SFH"
        return "MFH"


class ConstructionPeriod(str, Enum):
    BEFORE_1900 = "before_1900"
    FROM_1901_TO_1936 = "1901_1936"
    FROM_1937_TO_1959 = "1937_1959"
    FROM_1960_TO_1979 = "1960_1979"
    FROM_1980_TO_2006 = "1980_2006"
    AFTER_2007 = "after_2007"


class InsulationLevel(str, Enum):
    POOR = "poor"
    MODERATE = "moderate"
    GOOD = "good"


class HeatingMedium(str, Enum):
    FLOOR = "floor"
    RADIATOR = "radiator"


# (national minimum, improved, ambitious) in kWh/m²/yr.
_BT = BuildingType
_CP = ConstructionPeriod
HEATING_NEED: dict[ConstructionPeriod, dict[BuildingType, tuple[float, float, float]]] = {
    _CP.BEFORE_1900: {
        _BT.SINGLE_FAMILY: (10.6, 10.7, 11.0),
        _BT.TERRACED: (7.1, 4.0, 3.4),
        _BT.MULTI_FAMILY: (11.8, 6.1, 6.1),
        _BT.APARTMENT: (7.8, 5.9, 5.6),
    },
    _CP.FROM_1901_TO_1936: {
        _BT.SINGLE_FAMILY: (14.8, 8.0, 7.1),
        _BT.TERRACED: (17.9, 11.7, 11.5),
        _BT.MULTI_FAMILY: (7.7, 4.9, 5.6),
        _BT.APARTMENT: (8.5, 4.5, 6.1),
    },
    _CP.FROM_1937_TO_1959: {
        _BT.SINGLE_FAMILY: (8.1, 4.1, 3.4),
        _BT.TERRACED: (20.7, 15.2, 15.2),
        _BT.MULTI_FAMILY: (11.3, 5.5, 5.1),
        _BT.APARTMENT: (7.4, 3.6, 3.1),
    },
    _CP.FROM_1960_TO_1979: {
        _BT.SINGLE_FAMILY: (12.4, 10.2, 9.1),
        _BT.TERRACED: (7.6, 5.0, 6.6),
        _BT.MULTI_FAMILY: (9.8, 6.3, 6.0),
        _BT.APARTMENT: (4.3, 2.3, 2.3),
    },
    _CP.FROM_1980_TO_2006: {
        _BT.SINGLE_FAMILY: (5.8, 4.7, 5.7),
        _BT.TERRACED: (5.8, 5.4, 6.7),
        _BT.MULTI_FAMILY: (3.9, 3.3, 2.8),
        _BT.APARTMENT: (2.3, 1.9, 3.5),
    },
    _CP.AFTER_2007: {
        _BT.SINGLE_FAMILY: (6.4, 2.9, 2.4),
        _BT.TERRACED: (2.5, 2.2, 1.9),
        _BT.MULTI_FAMILY: (3.5, 1.9, 1.5),
        _BT.APARTMENT: (2.4, 1.5, 1.2),
    },
}

_LEVEL_COLUMN = {
    InsulationLevel.POOR: 0,
    InsulationLevel.MODERATE: 1,
    InsulationLevel.GOOD: 2,
}


def annual_heating_demand_per_m2(
    building_type: BuildingType | str,
    construction_period: ConstructionPeriod | str,
    insulation: InsulationLevel | str,
) -> float:
    """Annual space-heating need in kWh/m² for the given building."""
    try:
        row = HEATING_NEED[ConstructionPeriod(construction_period)]
        values = row[BuildingType(building_type)]
        return values[_LEVEL_COLUMN[InsulationLevel(insulation)]]
    except ValueError as exc:
        raise ConfigurationError(str(exc)) from exc
