# src/zvssim/errors.py
"""
Exceptions of the simulator.

Two families exist:

- `ZVSSimError` and its subclasses are what the public API raises. Their message
  is a finished, printable report.
- `DiagnosableError` subclasses are raised inside the packages (parameter
  validation, unit conversion, YAML parsing, output files) and know how to
  describe themselves through `get_diagnostic_report()`. The facade and the CLI
  turn them into user-facing errors.

A diverging integration is not an error: it is reported by
`IntegrationOutcome.convergence_error` and handled by the retry policy.
"""
import logging
from abc import ABCMeta, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class ZVSSimError(Exception):
    """Base class for all user-facing errors of zvssim."""


class ConfigurationError(ZVSSimError):
    """The circuit parameters could not be loaded, converted or validated."""


class SimulationRunError(ZVSSimError):
    """A run could not be completed for a reason other than divergence (e.g. unwritable outputs)."""


class DiagnosableError(Exception, metaclass=ABCMeta):
    """Internal error that can render an actionable report of itself."""

    @abstractmethod
    def get_diagnostic_report(self) -> str:
        raise NotImplementedError


@dataclass()
class OutputFileError(DiagnosableError):
    """
    Raised when a waveform file or `parameters.dat` cannot be created or written.

    Attributes:
        path: File or directory that failed.
        details: The operating system's explanation.
        attempt: Simulation attempt that was recording, if any.
        time_step: Time step of that attempt, if any.
    """
    path: Path
    details: str
    attempt: Optional[int] = None
    time_step: Optional[float] = None

    def __str__(self):
        return f"Cannot write '{self.path}': {self.details}"

    def get_diagnostic_report(self) -> str:
        return format_diagnostic_report(
            error_type="Output File Error",
            details=self.details,
            suggestion="Choose an output directory that exists or can be created and is writable (option -o / key 'output_dir').",
            context={'output_file': self.path, 'attempt': self.attempt, 'time_step': self.time_step}
        )


# Context keys shown in the report header, in order.
_CONTEXT_LABELS = (
    ('parameter', "Parameter"),
    ('user_input', "User Input"),
    ('source_file', "Source File"),
    ('output_file', "Output File"),
    ('attempt', "Attempt"),
    ('time_step', "Time Step"),
)


def _format_context_value(key: str, value: Any) -> str:
    if key == 'user_input':
        return f"'{value}'"
    if key == 'time_step':
        return f"{value:g} s"
    return str(value)


def format_diagnostic_report(
    error_type: str,
    details: str,
    suggestion: str,
    context: Dict[str, Any]
) -> str:
    """
    Builds the multi-line report shown to the user.

    Args:
        error_type: Short category, e.g. "Unit Conversion Error".
        details: What went wrong; may span several lines.
        suggestion: How to fix it; may be empty.
        context: Optional header entries (parameter, user_input, source_file,
                 output_file, attempt, time_step); None values are skipped.
    """
    lines = [
        "\n",
        "================ zvssim: Actionable Diagnostic Report ================",
        f"Error Type:     {error_type}",
    ]
    for key, label in _CONTEXT_LABELS:
        value = context.get(key)
        if value is None or value == "":
            continue
        lines.append(f"{label + ':':<16}{_format_context_value(key, value)}")

    lines.append("\nDetails:")
    lines.extend(f"  {line}" for line in details.splitlines())
    if suggestion:
        lines.append("\nSuggestion:")
        lines.extend(f"  {line}" for line in suggestion.splitlines())
    lines.append("======================================================================")
    return "\n".join(lines)
