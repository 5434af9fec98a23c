"""Exception hierarchy shared by the sizing engine.

Callers distinguish three failure families:

* :class:`ConfigurationError` -- bad parameters or mis-sized series.  Raised
  before any solver is invoked.
* :class:`DataLoadError` -- a data file is missing, short or malformed.
* :class:`SolverError` -- HiGHS returned a status other than optimal.
"""

from __future__ import annotations


class EngineError(Exception):
    """Base class for all engine failures."""


class ConfigurationError(EngineError, ValueError):
    """Invalid configuration or inconsistent input series."""


class DataLoadError(EngineError, OSError):
    """A time-series source could not be read or parsed."""


class SolverError(EngineError, RuntimeError):
    """The LP solver did not reach an optimal solution.

    Parameters
    ----------
    message : str
        Human-readable description.
    status : str
        Solver model-status string (e.g. ``"Infeasible"``).
    """

    def __init__(self, message: str, status: str = "") -> None:
        super().__init__(message)
        self.status = status
