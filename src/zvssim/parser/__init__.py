# src/zvssim/parser/__init__.py
from .raw_data import ParsedRunConfiguration
from .parser import ParameterFileParser
from .exceptions import ParsingError, SchemaValidationError

__all__ = [
    "ParsedRunConfiguration",
    "ParameterFileParser",
    "ParsingError",
    "SchemaValidationError",
]
