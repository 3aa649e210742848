# --- src/zvssim/units.py ---
import logging
import math
from dataclasses import dataclass
from typing import Optional, Union

import pint

from .errors import DiagnosableError, format_diagnostic_report

logger = logging.getLogger(__name__)
ureg = pint.UnitRegistry()
Quantity = ureg.Quantity
logger.debug("Pint Unit Registry initialized.")


@dataclass()
class UnitConversionError(DiagnosableError):
    """
    Raised when a user-supplied value cannot be read as a quantity, or when its
    units are not compatible with the SI unit expected for the parameter.
    """
    name: str
    value: str
    expected_unit: str
    details: str

    def __str__(self):
        return f"Cannot convert '{self.value}' for '{self.name}' to {self.expected_unit}: {self.details}"

    def get_diagnostic_report(self) -> str:
        return format_diagnostic_report(
            error_type="Unit Conversion Error",
            details=self.details,
            suggestion=(
                f"Give '{self.name}' as a plain number in {self.expected_unit} or as a string with "
                f"compatible units (e.g. '100 uH', '1 ns', '100 Mohm')."
            ),
            context={'parameter': self.name, 'user_input': self.value}
        )


def to_si_magnitude(name: str, value: Union[int, float, str], unit: Optional[str]) -> float:
    """
    Converts a raw parameter value to a float in SI units.

    Plain numbers, and strings without units such as "1e-4", are taken to already be
    in SI units. Other strings are parsed by pint and converted to `unit`; a `unit`
    of None means the value must be dimensionless.

    Raises:
        UnitConversionError: If the value cannot be parsed, has incompatible
                             dimensions or is not finite.
    """
    expected = unit or "dimensionless"
    if isinstance(value, bool):
        raise UnitConversionError(name, str(value), expected, "Boolean values are not valid quantities.")
    if isinstance(value, (int, float)):
        magnitude = float(value)
    else:
        text = str(value).strip()
        if not text:
            raise UnitConversionError(name, text, expected, "The value is empty.")
        try:
            quantity = Quantity(text)
            if isinstance(quantity, (int, float)):
                quantity = Quantity(quantity, "dimensionless")
            if quantity.unitless:
                # "1e-4" without units is already in SI, like a plain number
                magnitude = float(quantity.magnitude)
            else:
                magnitude = float(quantity.to(expected).magnitude)
        except pint.DimensionalityError as e:
            raise UnitConversionError(name, text, expected, f"Incompatible dimensions: {e}") from e
        except (pint.UndefinedUnitError, pint.errors.DefinitionSyntaxError) as e:
            raise UnitConversionError(name, text, expected, f"Unknown unit: {e}") from e
        except (pint.errors.PintError, ValueError, TypeError, AttributeError, SyntaxError) as e:
            raise UnitConversionError(name, text, expected, f"Not a valid number or quantity: {e}") from e

    if not math.isfinite(magnitude):
        raise UnitConversionError(name, str(value), expected, "The value must be finite.")
    return magnitude
