# src/zvssim/simulation/execution.py
"""
Public entry point for running a complete simulation.

`run_simulation` is a thin facade over the core: it validates the parameters,
wires the per-attempt recorders (in memory, plus `.dat` files when an output
directory is given), lets the `RetryController` run the attempts and finally
writes `parameters.dat`, whether the run converged or gave up.
"""
import logging
from pathlib import Path
from typing import Optional, Union

from ..constants import DEFAULT_MAX_ATTEMPTS
from ..errors import ConfigurationError, DiagnosableError, SimulationRunError
from ..outputs import DatFileRecorder, write_parameters_file
from ..parameters import CircuitParameters, ParameterValidationError
from .recorders import SampleRecorder, TeeRecorder, WaveformRecorder
from .results import SimulationResult
from .retry import RetryController

logger = logging.getLogger(__name__)


def run_simulation(
    params: CircuitParameters,
    output_dir: Optional[Union[str, Path]] = None,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
) -> SimulationResult:
    """
    Simulates the driver, retrying with relaxed parameters on convergence errors.

    Args:
        params: Fully populated parameters of the first attempt.
        output_dir: If given, the five waveform files are written there for every
                    attempt (truncated on retry) and `parameters.dat` is written
                    once at the end.
        max_attempts: Upper bound on the number of attempts.

    Returns:
        A `SimulationResult`. Giving up is reported through `gave_up`, not raised.

    Raises:
        ConfigurationError: If the parameters violate the data-model invariants.
        SimulationRunError: If the output files cannot be written.
    """
    try:
        params.validate()
    except ParameterValidationError as e:
        raise ConfigurationError(e.get_diagnostic_report()) from e

    logger.info(
        f"--- Starting ZVS simulation: T={params.period:.6e} s, {params.step_count} steps per attempt ---"
    )
    latest: Optional[WaveformRecorder] = None

    def recorder_factory(attempt: int, attempt_params: CircuitParameters) -> SampleRecorder:
        nonlocal latest
        # only the last attempt's samples are returned
        latest = WaveformRecorder()
        if output_dir is None:
            return latest
        return TeeRecorder([latest, DatFileRecorder(output_dir, attempt, attempt_params.delta_t)])

    try:
        run = RetryController(max_attempts=max_attempts).run(params, recorder_factory)
        if output_dir is not None:
            write_parameters_file(run.parameters, Path(output_dir))
    except DiagnosableError as e:
        logger.error(f"A diagnosable error occurred during simulation: {e}")
        raise SimulationRunError(e.get_diagnostic_report()) from e

    return SimulationResult(
        parameters=run.parameters,
        converged=run.converged,
        gave_up=run.gave_up,
        attempts=tuple(run.attempts),
        waveforms=latest.waveforms(),
    )
