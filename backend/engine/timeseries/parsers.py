"""CSV parsing for hourly input series.

All parsers take the file *text* and return float64 arrays holding the first
8760 data rows.  Fewer rows, missing columns or unparsable fields raise
:class:`~engine.errors.DataLoadError` naming the offending line.

Supported layouts
-----------------
* Solar (``Time,Solar``): normalised PV yield per kWp, 0 -- 1.
* Demand (``Time,HotWater,SpaceHeat,Electricity,Charge``): Wh per hour.
* Single-column hourly demand: Wh per hour, one value per line.
* when2heat-style profile: header-named columns such as
  ``ES_COP_ASHP_floor`` or ``ES_heat_demand_space_SFH``.  Values may be
  quoted and use a decimal comma; the delimiter is ``;`` or ``,``.
"""

from __future__ import annotations

import csv
import io
import re
from dataclasses import dataclass
from typing import Sequence

import numpy as np
from numpy.typing import NDArray

from engine.errors import DataLoadError

HOURS_PER_YEAR = 8760
WH_PER_KWH = 1000.0

_NON_NUMERIC = re.compile(r"[^0-9.,\-eE+]")


def parse_decimal(raw: str) -> float:
    """Parse a number that may be quoted or use a decimal comma.

    >>> parse_decimal('"3,25"')
    3.25
    """
    cleaned = raw.strip().strip('"').strip()
    cleaned = cleaned.replace(",", ".")
    return float(cleaned)


def _require_rows(values: Sequence[float], source: str) -> NDArray[np.float64]:
    if len(values) < HOURS_PER_YEAR:
        raise DataLoadError(
            f"Insufficient data in {source}: got {len(values)} records, need {HOURS_PER_YEAR}"
        )
    return np.array(values[:HOURS_PER_YEAR], dtype=np.float64)


def _data_rows(text: str, delimiter: str = ","):
    """Yield ``(line_number, fields)`` for non-empty rows after the header."""
    reader = csv.reader(io.StringIO(text), delimiter=delimiter)
    for index, row in enumerate(reader):
        if index == 0 or not row or not any(field.strip() for field in row):
            continue
        yield index + 1, row


def _field(row: list[str], column: int, line: int, source: str) -> float:
    try:
        return parse_decimal(row[column])
    except IndexError:
        raise DataLoadError(
            f"{source} line {line}: expected at least {column + 1} columns, got {len(row)}"
        ) from None
    except ValueError:
        raise DataLoadError(
            f"{source} line {line}: could not parse {row[column]!r}"
        ) from None


# ======================================================================
# Fixed-layout files
# ======================================================================

def parse_solar_csv(text: str, source: str = "solar data") -> NDArray[np.float64]:
    """Parse ``Time,Solar`` text into normalised hourly PV yield."""
    values: list[float] = []
    for line, row in _data_rows(text):
        values.append(_field(row, 1, line, source))
        if len(values) == HOURS_PER_YEAR:
            break
    return _require_rows(values, source)


@dataclass(frozen=True)
class DemandSeries:
    """Hourly household demand in kWh."""

    electricity: NDArray[np.float64]
    hot_water: NDArray[np.float64]


def parse_demand_csv(text: str, source: str = "demand data") -> DemandSeries:
    """Parse ``Time,HotWater,SpaceHeat,Electricity,Charge`` text.

    The file holds Wh per hour; the returned series are in kWh.
    """
    electricity: list[float] = []
    hot_water: list[float] = []
    for line, row in _data_rows(text):
        hot_water.append(_field(row, 1, line, source))
        electricity.append(_field(row, 3, line, source))
        if len(electricity) == HOURS_PER_YEAR:
            break
    return DemandSeries(
        electricity=_require_rows(electricity, source) / WH_PER_KWH,
        hot_water=_require_rows(hot_water, source) / WH_PER_KWH,
    )


def parse_hourly_demand(text: str, source: str = "hourly demand") -> NDArray[np.float64]:
    """Parse one Wh value per line (no header) into kWh.

    Stray characters such as units or quotes are dropped before parsing.
    """
    values: list[float] = []
    for line_number, line in enumerate(text.splitlines(), start=1):
        cleaned = _NON_NUMERIC.sub("", line.strip())
        if not cleaned:
            continue
        try:
            values.append(parse_decimal(cleaned))
        except ValueError:
            raise DataLoadError(
                f"{source} line {line_number}: could not parse {line.strip()!r}"
            ) from None
        if len(values) == HOURS_PER_YEAR:
            break
    return _require_rows(values, source) / WH_PER_KWH


# ======================================================================
# Header-named profile files
# ======================================================================

def _sniff_delimiter(header: str) -> str:
    return ";" if header.count(";") > header.count(",") else ","


def parse_profile_csv(
    text: str, columns: Sequence[str], source: str = "profile data"
) -> dict[str, NDArray[np.float64]]:
    """Extract named *columns* from a headed profile file.

    Parameters
    ----------
    text : str
        File content.
    columns : sequence of str
        Header names to extract.
    source : str
        Label used in error messages.

    Returns
    -------
    dict[str, ndarray]
        One 8760-element array per requested column.
    """
    header_line = text.split("\n", 1)[0]
    delimiter = _sniff_delimiter(header_line)
    header = next(csv.reader(io.StringIO(header_line), delimiter=delimiter), [])
    header = [h.strip().strip('"') for h in header]

    positions: dict[str, int] = {}
    for name in columns:
        if name not in header:
            raise DataLoadError(f"Column {name!r} not found in {source}")
        positions[name] = header.index(name)

    collected: dict[str, list[float]] = {name: [] for name in columns}
    count = 0
    for line, row in _data_rows(text, delimiter=delimiter):
        for name, position in positions.items():
            collected[name].append(_field(row, position, line, source))
        count += 1
        if count == HOURS_PER_YEAR:
            break

    return {name: _require_rows(values, source) for name, values in collected.items()}
