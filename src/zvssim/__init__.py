# src/zvssim/__init__.py
import logging
from .log_config import setup_logging

setup_logging()
logger = logging.getLogger(__name__)
logger.debug("zvssim package initialized.")

from .units import ureg, pint, Quantity, UnitConversionError
from .parameters import CircuitParameters, ParameterValidationError, parameters_from_raw
from .simulation import (
    SwitchResistanceModel,
    CircuitIntegrator,
    RetryController,
    RetryDecision,
    plan_retry,
    WaveformRecorder,
    SimulationResult,
    run_simulation,
)
from .outputs import DatFileRecorder, write_parameters_file
from .parser import ParameterFileParser, ParsingError, SchemaValidationError
from .errors import ZVSSimError, ConfigurationError, SimulationRunError

__version__ = "1.1.0"

__all__ = [
    # Units
    "ureg", "pint", "Quantity", "UnitConversionError",
    # Parameters
    "CircuitParameters", "ParameterValidationError", "parameters_from_raw",
    # Core
    "SwitchResistanceModel", "CircuitIntegrator", "RetryController", "RetryDecision", "plan_retry",
    # Running and outputs
    "WaveformRecorder", "SimulationResult", "run_simulation",
    "DatFileRecorder", "write_parameters_file",
    # Parser
    "ParameterFileParser", "ParsingError", "SchemaValidationError",
    # Top-Level Errors
    "ZVSSimError", "ConfigurationError", "SimulationRunError",
]
