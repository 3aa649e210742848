# src/zvssim/parser/parser.py
import logging
from pathlib import Path
from typing import Any, Dict, Union

import cerberus
import yaml

from ..constants import DEFAULT_MAX_ATTEMPTS
from ..parameters import PARAMETER_UNITS, parameters_from_raw
from ..units import UnitConversionError, to_si_magnitude
from .raw_data import ParsedRunConfiguration
from .exceptions import ParsingError, SchemaValidationError

logger = logging.getLogger(__name__)


class EnhancedValidator(cerberus.Validator):
    """Cerberus validator that also checks the units of quantity strings."""
    def __init__(self, *args, **kwargs):
        super(EnhancedValidator, self).__init__(*args, **kwargs)
        self.rules['si_unit'] = {'schema': {'type': 'string'}}

    def _validate_si_unit(self, unit: str, field: str, value: Any):
        """
        Checks that a number or quantity string converts to `unit`.
        The rule's arguments are validated against this schema:
        {'type': 'string'}
        """
        expected = None if unit == "dimensionless" else unit
        try:
            to_si_magnitude(field, value, expected)
        except UnitConversionError as e:
            self._error(field, e.details)


def _quantity_rule(unit, required=True):
    return {"type": ["string", "number"], "required": required, "si_unit": unit or "dimensionless"}


class ParameterFileParser:
    """
    Loads and validates a YAML parameter file and produces a `ParsedRunConfiguration`.

    Example file::

        L1: 0.1
        L2: "100 uH"
        L4: "10 uH"
        V: "12 V"
        C: "10 nF"
        delta_t: "1 ns"
        t_total: "0.1 ms"
        slope_R: 0.0001
        R: "100 Mohm"
        R_Sec: "50 ohm"
        last_points: 1000
        retry: {max_attempts: 50}
        output_dir: results
    """
    _schema = {
        **{name: _quantity_rule(unit) for name, unit in PARAMETER_UNITS.items() if name != "last_perc"},
        "last_perc": {**_quantity_rule(None, required=False), "excludes": "last_points"},
        "last_points": {**_quantity_rule(None, required=False), "excludes": "last_perc"},
        "retry": {
            "type": "dict", "required": False, "schema": {
                "max_attempts": {"type": "integer", "required": False, "min": 1},
            },
        },
        "output_dir": {"type": "string", "required": False, "empty": False},
    }

    def __init__(self):
        self._validator = EnhancedValidator(self._schema)
        self._validator.allow_unknown = False
        logger.debug("ParameterFileParser initialized.")

    def parse(self, yaml_path: Union[str, Path]) -> ParsedRunConfiguration:
        """Parses a parameter file. Relative `output_dir` values are resolved against the file's directory."""
        resolved_path = Path(yaml_path).resolve()
        logger.info(f"Reading parameter file: {resolved_path}")
        content = self._load_yaml(resolved_path)
        return self.parse_mapping(content, source_path=resolved_path)

    def parse_mapping(self, content: Dict[str, Any], source_path: Path = None) -> ParsedRunConfiguration:
        """Validates an already-loaded document."""
        file_path = source_path or Path("<memory>")
        if not self._validator.validate(content):
            raise SchemaValidationError(self._validator.errors, file_path)
        validated_data = self._validator.document

        raw_parameters = {
            key: value for key, value in validated_data.items()
            if key not in ("retry", "output_dir")
        }
        parameters = parameters_from_raw(raw_parameters)

        output_dir = None
        if "output_dir" in validated_data:
            output_dir = Path(validated_data["output_dir"])
            if source_path is not None and not output_dir.is_absolute():
                output_dir = source_path.parent / output_dir

        return ParsedRunConfiguration(
            parameters=parameters,
            max_attempts=validated_data.get("retry", {}).get("max_attempts", DEFAULT_MAX_ATTEMPTS),
            output_dir=output_dir,
            source_yaml_path=source_path,
        )

    def _load_yaml(self, source: Path) -> Dict[str, Any]:
        """Loads and performs basic sanity checks on a YAML file."""
        if not source.is_file():
            raise ParsingError(details=f"Parameter file not found at path: {source}", file_path=source)
        try:
            with source.open("r", encoding="utf-8") as f:
                content = yaml.safe_load(f)
            if content is None:
                raise ParsingError(details="The YAML file is empty or contains no valid content.", file_path=source)
            if not isinstance(content, dict):
                raise ParsingError(details="The root of the YAML file must be a dictionary (mapping).", file_path=source)
            return content
        except PermissionError as e:
            raise ParsingError(details=f"Permission denied when trying to read file: {e}", file_path=source) from e
        except yaml.YAMLError as e:
            raise ParsingError(details=f"Invalid YAML syntax: {e}", file_path=source) from e
