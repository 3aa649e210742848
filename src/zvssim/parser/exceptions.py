# src/zvssim/parser/exceptions.py
"""
Diagnosable exceptions for loading and schema-validating parameter files.

`ParsingError` covers file-level and YAML syntax problems, `SchemaValidationError`
covers documents that load but do not match the cerberus schema. Both derive from
the global `DiagnosableError`, so callers can catch one type for every reportable
parsing failure.
"""
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Any

from ..errors import DiagnosableError, format_diagnostic_report


class BaseParsingError(DiagnosableError):
    """
    A local, concrete base class for all YAML parsing and schema validation errors.
    """
    def get_diagnostic_report(self) -> str:
        return format_diagnostic_report(
            error_type="Generic Parsing Error",
            details=str(self),
            suggestion="Please check the format and content of the parameter file.",
            context={}
        )


@dataclass(frozen=True)
class ParsingError(BaseParsingError):
    """
    Raised when the parameter file is missing, unreadable, or not a YAML mapping.
    """
    details: str
    file_path: Path

    def __str__(self):
        return f"Parsing error in file '{self.file_path}': {self.details}"

    def get_diagnostic_report(self) -> str:
        return format_diagnostic_report(
            error_type="YAML Parsing or File Error",
            details=self.details,
            suggestion="Ensure the file exists, has the correct read permissions, and contains valid YAML syntax.",
            context={'source_file': self.file_path}
        )


@dataclass(frozen=True)
class SchemaValidationError(BaseParsingError):
    """
    Raised when the YAML is syntactically valid but does not conform to the
    parameter-file schema (unknown keys, wrong types, incompatible units, ...).
    """
    errors: Dict[str, Any]
    file_path: Path

    def _error_lines(self, prefix: str):
        lines = []
        for field, messages in sorted(self.errors.items(), key=lambda item: str(item[0])):
            for message in messages:
                if isinstance(message, dict):
                    # Nested documents report a dict of sub-field errors.
                    for sub_field, sub_messages in message.items():
                        lines.append(f"{prefix}'{field}.{sub_field}': {sub_messages[0]}")
                else:
                    lines.append(f"{prefix}'{field}': {message}")
        return lines

    def __str__(self):
        return (
            f"YAML schema validation failed for file '{self.file_path}':\n"
            + "\n".join(self._error_lines("  - In field "))
        )

    def get_diagnostic_report(self) -> str:
        error_list_str = "\n".join(self._error_lines("  - Field "))
        details = (
            "The parameter file does not conform to the required schema.\n"
            f"See details for {len(self.errors)} issue(s) below:\n\n{error_list_str}"
        )
        return format_diagnostic_report(
            error_type="YAML Schema Validation Error",
            details=details,
            suggestion="Correct the specified fields. Every circuit parameter is a number in SI units or a string with units (e.g. '100 uH'); give exactly one of 'last_points' or 'last_perc'.",
            context={'source_file': self.file_path}
        )
