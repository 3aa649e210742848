# src/zvssim/parser/raw_data.py
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..parameters import CircuitParameters


@dataclass(frozen=True)
class ParsedRunConfiguration:
    """Everything a parameter file specifies for one run of the simulator."""
    parameters: CircuitParameters
    max_attempts: int
    output_dir: Optional[Path]
    source_yaml_path: Optional[Path] = None
