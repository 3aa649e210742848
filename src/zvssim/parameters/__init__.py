# src/zvssim/parameters/__init__.py
from .parameters import (
    CircuitParameters,
    PARAMETER_UNITS,
    last_points_to_percent,
    parameters_from_raw,
    parameter_summary,
)
from .exceptions import ParameterValidationError

__all__ = [
    "CircuitParameters",
    "PARAMETER_UNITS",
    "last_points_to_percent",
    "parameters_from_raw",
    "parameter_summary",
    "ParameterValidationError",
]
