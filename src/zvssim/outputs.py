# src/zvssim/outputs.py
"""
Plain-text outputs of a run: the five waveform `.dat` files, one
"time value" pair per line, and the `parameters.dat` summary.
"""
import logging
from pathlib import Path
from typing import Dict, IO, Optional, Union

from .constants import (
    IC_FILE,
    IL2_FILE,
    ISOURCE_FILE,
    OUTPUT_PRECISION,
    PARAMETERS_FILE,
    VC_FILE,
    VSEC_FILE,
)
from .errors import OutputFileError
from .parameters import CircuitParameters, parameter_summary
from .simulation.recorders import SampleRecorder, SAMPLE_NAMES

logger = logging.getLogger(__name__)

#: File written for each tracked quantity.
WAVEFORM_FILES: Dict[str, str] = {
    "vsec": VSEC_FILE,
    "vc": VC_FILE,
    "il2": IL2_FILE,
    "isource": ISOURCE_FILE,
    "ic": IC_FILE,
}

_LABEL_WIDTH = 23


def format_sample(t: float, value: float) -> str:
    return f"{t:.{OUTPUT_PRECISION}g} {value:.{OUTPUT_PRECISION}g}\n"


class DatFileRecorder(SampleRecorder):
    """
    Writes the samples of one attempt to `Vsec.dat`, `VC.dat`, `IL2.dat`,
    `ISource.dat` and `IC.dat` in `output_dir`.

    Files are truncated on `open()`, so a retry overwrites the partial data of a
    failed attempt. `attempt` and `time_step` only label error reports.
    """

    def __init__(
        self,
        output_dir: Union[str, Path],
        attempt: Optional[int] = None,
        time_step: Optional[float] = None,
    ):
        self.output_dir = Path(output_dir)
        self.attempt = attempt
        self.time_step = time_step
        self._files: Dict[str, IO[str]] = {}

    def open(self) -> None:
        self.close()
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            for name in SAMPLE_NAMES:
                self._files[name] = (self.output_dir / WAVEFORM_FILES[name]).open("w", encoding="utf-8")
        except OSError as e:
            self.close()
            raise OutputFileError(self.output_dir, f"Cannot open the waveform files: {e}", self.attempt, self.time_step) from e
        logger.debug(f"Opened waveform files in {self.output_dir}")

    def record(self, t, vsec, vc, il2, isource, ic):
        files = self._files
        files["vsec"].write(format_sample(t, vsec))
        files["vc"].write(format_sample(t, vc))
        files["il2"].write(format_sample(t, il2))
        files["isource"].write(format_sample(t, isource))
        files["ic"].write(format_sample(t, ic))

    def close(self) -> None:
        for handle in self._files.values():
            handle.close()
        self._files = {}


def format_parameters(params: CircuitParameters) -> str:
    lines = [f"{label + ':':<{_LABEL_WIDTH}}{value:g}" for label, value in parameter_summary(params)]
    return "\n".join(lines) + "\n"


def write_parameters_file(params: CircuitParameters, path: Optional[Union[str, Path]] = None) -> Path:
    """
    Writes `parameters.dat` (one labelled line per parameter).

    Args:
        params: The parameters to save.
        path: Target file, or a directory to write `parameters.dat` into.
              Defaults to `parameters.dat` in the working directory.
    """
    target = Path(path) if path is not None else Path(PARAMETERS_FILE)
    if target.is_dir():
        target = target / PARAMETERS_FILE
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(format_parameters(params), encoding="utf-8")
    except OSError as e:
        raise OutputFileError(target, f"Cannot write the parameter summary: {e}") from e
    logger.info(f"Parameters saved to {target}")
    return target
