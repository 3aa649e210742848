# src/zvssim/parameters/parameters.py
"""
The immutable description of one simulation attempt of the ZVS Mazzilli driver.

`CircuitParameters` is passed unchanged through configuration, integration and
output. The retry policy never mutates it; it derives a new value with
`with_retry_adjustment()` for every new attempt.
"""
import logging
import math
from dataclasses import dataclass, replace, fields
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ..constants import MIN_STEPS_PER_PERIOD
from ..units import to_si_magnitude
from .exceptions import ParameterValidationError

logger = logging.getLogger(__name__)

#: Canonical SI unit of each parameter; None marks a dimensionless value.
PARAMETER_UNITS: Dict[str, Optional[str]] = {
    "L1": "henry",
    "L2": "henry",
    "L4": "henry",
    "C": "farad",
    "V": "volt",
    "R": "ohm",
    "delta_t": "second",
    "t_total": "second",
    "slope_R": None,
    "R_Sec": "ohm",
    "last_perc": None,
}

#: Unit of the point count that can replace `last_perc` on input.
LAST_POINTS_UNIT: Optional[str] = None


@dataclass(frozen=True)
class CircuitParameters:
    """
    Circuit and run parameters, all in SI units.

    Attributes:
        L1: Damping inductance placed after the voltage source (H).
        L2: Inductance of one half of the primary (H); also used for the other half.
        L4: Secondary inductance (H).
        C: Resonant capacitance (F).
        V: Source voltage (V).
        R: Maximum resistance of the resistors standing in for the MOSFETs (ohm).
        delta_t: Time step (s).
        t_total: Total simulated time (s).
        slope_R: Switch transition slope, as a percentage of the period.
        R_Sec: Secondary load resistance (ohm).
        last_perc: Trailing percentage of `t_total` over which samples are recorded.
    """
    L1: float
    L2: float
    L4: float
    C: float
    V: float
    R: float
    delta_t: float
    t_total: float
    slope_R: float
    R_Sec: float
    last_perc: float

    @property
    def period(self) -> float:
        """Resonant period T = 2*pi*sqrt(4*L2*C) of the primary tank."""
        return 2.0 * math.pi * math.sqrt(4.0 * self.L2 * self.C)

    @property
    def frequency(self) -> float:
        return 1.0 / self.period

    @property
    def mutual_inductance(self) -> float:
        """Coupling between one primary half and the secondary, M24 = sqrt(L2*L4)."""
        return math.sqrt(self.L2 * self.L4)

    @property
    def recording_start(self) -> float:
        """Samples are recorded for t strictly greater than this time."""
        return self.t_total * (1.0 - self.last_perc / 100.0)

    @property
    def step_count(self) -> int:
        """Approximate number of integration steps of one attempt."""
        return int(math.ceil(self.t_total / self.delta_t))

    def with_retry_adjustment(self, L1: float, delta_t: float) -> "CircuitParameters":
        """Returns a copy with a new damping inductance and time step."""
        return replace(self, L1=L1, delta_t=delta_t)

    def validate(self) -> List[str]:
        """
        Checks the invariants of the data model.

        Returns:
            A list of warnings for conditions that are legal but likely to make the
            integration diverge.

        Raises:
            ParameterValidationError: If any invariant is violated.
        """
        issues = []
        for f in fields(self):
            value = getattr(self, f.name)
            if not isinstance(value, (int, float)) or isinstance(value, bool) or not math.isfinite(value):
                issues.append(f"{f.name} must be a finite number, got {value!r}.")
        if issues:
            raise ParameterValidationError(issues)

        for name in ("L1", "L2", "L4", "C", "R", "R_Sec", "delta_t", "t_total", "slope_R"):
            if getattr(self, name) <= 0:
                issues.append(f"{name} must be > 0, got {getattr(self, name)!r}.")
        if not 0 < self.last_perc <= 100:
            issues.append(f"last_perc must be in (0, 100], got {self.last_perc!r}.")
        if issues:
            raise ParameterValidationError(issues)

        warnings = []
        if self.delta_t > self.period / MIN_STEPS_PER_PERIOD:
            warnings.append(
                f"Time step {self.delta_t:g} s resolves the resonant period {self.period:g} s "
                f"with fewer than {MIN_STEPS_PER_PERIOD:g} steps; expect convergence errors."
            )
        if self.delta_t >= self.t_total:
            warnings.append(f"Time step {self.delta_t:g} s is not smaller than the total time {self.t_total:g} s.")
        for warning in warnings:
            logger.warning(warning)
        return warnings


def last_points_to_percent(last_points: float, t_total: float, delta_t: float) -> float:
    """
    Converts a number of trailing points to record into a percentage of the total time:
    last_perc = 100 * last_points / (t_total / delta_t).
    """
    return 100.0 * last_points / (t_total / delta_t)


def parameters_from_raw(raw: Mapping[str, Any]) -> CircuitParameters:
    """
    Builds `CircuitParameters` from raw values (numbers in SI units or strings with
    units), as produced by the YAML parser or the interactive prompts.

    Exactly one of `last_perc` and `last_points` must be present. Values are
    converted and validated; invalid input raises a diagnosable error.

    Raises:
        UnitConversionError: If a value cannot be converted to its SI unit.
        ParameterValidationError: If keys are missing or an invariant is violated.
    """
    missing = [name for name in PARAMETER_UNITS if name != "last_perc" and name not in raw]
    has_perc, has_points = "last_perc" in raw, "last_points" in raw
    if has_perc == has_points:
        missing.append("exactly one of last_perc / last_points")
    if missing:
        raise ParameterValidationError([f"Missing parameter: {name}." for name in missing])

    values = {
        name: to_si_magnitude(name, raw[name], unit)
        for name, unit in PARAMETER_UNITS.items()
        if name != "last_perc"
    }
    if has_perc:
        values["last_perc"] = to_si_magnitude("last_perc", raw["last_perc"], None)
    else:
        last_points = to_si_magnitude("last_points", raw["last_points"], LAST_POINTS_UNIT)
        if values["delta_t"] <= 0 or values["t_total"] <= 0:
            raise ParameterValidationError(["delta_t and t_total must be > 0 to convert last_points."])
        values["last_perc"] = last_points_to_percent(last_points, values["t_total"], values["delta_t"])
        logger.debug(f"Converted last_points={last_points:g} to last_perc={values['last_perc']:g}")

    params = CircuitParameters(**values)
    params.validate()
    return params


def parameter_summary(params: CircuitParameters) -> List[Tuple[str, float]]:
    """Labelled values in the order used by `parameters.dat`."""
    return [
        ("L1", params.L1),
        ("L2", params.L2),
        ("L4", params.L4),
        ("V", params.V),
        ("C", params.C),
        ("Time step", params.delta_t),
        ("Total simulation time", params.t_total),
        ("Resistor slope", params.slope_R),
        ("Max resistance", params.R),
        ("Secondary load", params.R_Sec),
    ]
