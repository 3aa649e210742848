# src/zvssim/parameters/exceptions.py
"""
Diagnosable exceptions raised while validating circuit parameters.

All exceptions here derive from the global `DiagnosableError` base class, so the
configuration front ends (YAML parser, interactive prompts, `run_simulation`) can
catch a single type and present its `get_diagnostic_report()` to the user.
"""
from dataclasses import dataclass
from typing import List

from ..errors import DiagnosableError, format_diagnostic_report


@dataclass()
class ParameterValidationError(DiagnosableError):
    """
    Raised when a `CircuitParameters` value violates one or more invariants of the
    data model (non-positive inductance, recording window outside (0, 100] percent, ...).
    Every violated invariant is collected before raising.
    """
    issues: List[str]

    def __str__(self):
        return "Invalid circuit parameters: " + "; ".join(self.issues)

    def get_diagnostic_report(self) -> str:
        issue_list_str = "\n".join(f"  - {issue}" for issue in self.issues)
        return format_diagnostic_report(
            error_type="Invalid Circuit Parameters",
            details=f"{len(self.issues)} parameter issue(s) found:\n\n{issue_list_str}",
            suggestion="Correct the listed values. Inductances, capacitance and resistances must be strictly positive, and the recording window must be a percentage in (0, 100].",
            context={}
        )
