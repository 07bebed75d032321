"""
Exception hierarchy for the panel simulation.

Every failure raised by the package derives from ``SimulationError`` so
callers can catch the whole family at once. The concrete classes also
inherit from the builtin they refine (``ValueError`` for bad settings,
``RuntimeError`` for failures during a run).
"""

from typing import Optional


class SimulationError(Exception):
    """Base class for all simulation errors."""


class ConfigurationError(SimulationError, ValueError):
    """Raised when settings are invalid or inputs do not fit together."""


class GenerationError(SimulationError, RuntimeError):
    """
    Raised when a stochastic series cannot be generated.

    Parameters
    ----------
    message : str
        Description of the failure
    level : str
        Hierarchy level that failed ('national', 'regional' or 'state')
    unit : str, optional
        Unit within the level (region or state label)
    """

    def __init__(self, message: str, level: str, unit: Optional[str] = None):
        self.level = level
        self.unit = unit if unit is not None else level
        super().__init__(f"{level} shock for '{self.unit}': {message}")


class EstimationError(SimulationError, RuntimeError):
    """Raised when the regression cannot be fitted or queried."""
