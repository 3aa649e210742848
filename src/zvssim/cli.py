# src/zvssim/cli.py
"""Command line interface of the ZVS Mazzilli driver simulator."""
import argparse
import logging
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

from .constants import DEFAULT_MAX_ATTEMPTS
from .errors import ConfigurationError, DiagnosableError, ZVSSimError
from .log_config import setup_logging
from .parameters import PARAMETER_UNITS, parameters_from_raw, CircuitParameters
from .parser import ParameterFileParser
from .simulation import SimulationResult, run_simulation
from .units import UnitConversionError, to_si_magnitude

logger = logging.getLogger(__name__)

#: (parameter, prompt) pairs, asked in this order.
PROMPTS: List[Tuple[str, str]] = [
    ("L1", "Set L1 value (recommended value = 0.1): "),
    ("L2", "Set L2 value: "),
    ("L4", "Set L4 value: "),
    ("V", "Set V value: "),
    ("C", "Set C value: "),
    ("delta_t", "Set time step value (recommended value = 1e-9): "),
    ("t_total", "Set total simulation time value (usually 0.1 seconds is enough): "),
    ("slope_R", "Set Mosfet slope value (recommended value = 0.0001): "),
    ("R", "Set Mosfet max resistance value (recommended value = 100e6): "),
    ("R_Sec", "Set Secondary resistance value: "),
    ("last_points", "Set last number of points of data saved (100e3 points to plot is good): "),
]


def prompt_parameters(input_func: Callable[[str], str] = input, max_tries: int = 3) -> CircuitParameters:
    """
    Asks for every parameter on the console. Answers are plain SI numbers or
    quantities with units ("100 uH"); an unreadable answer is asked again.
    """
    raw: Dict[str, float] = {}
    for name, prompt in PROMPTS:
        unit = PARAMETER_UNITS.get(name)
        for attempt in range(1, max_tries + 1):
            answer = input_func(prompt)
            try:
                raw[name] = to_si_magnitude(name, answer, unit)
                break
            except UnitConversionError as e:
                logger.error(str(e))
                if attempt == max_tries:
                    raise ConfigurationError(e.get_diagnostic_report()) from e
    return parameters_from_raw(raw)


def completion_summary(result: SimulationResult) -> str:
    vsec = result.waveforms.vsec
    return (
        f"Secondary voltage over the last {len(vsec)} samples: "
        f"peak {vsec.peak():.6g} V, peak-to-peak {vsec.peak_to_peak():.6g} V"
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="zvssim", description="ZVS Mazzilli driver simulator")
    parser.add_argument("-c", "--config", type=Path, help="YAML parameter file (prompts on the console if omitted)")
    parser.add_argument("-o", "--output-dir", type=Path, default=None,
                        help="Directory for the .dat files (default: the config's output_dir or the working directory)")
    parser.add_argument("--max-attempts", type=int, default=None,
                        help=f"Maximum number of simulation attempts (default: {DEFAULT_MAX_ATTEMPTS})")
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser


def main(argv: Optional[List[str]] = None, input_func: Callable[[str], str] = input) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.max_attempts is not None and args.max_attempts < 1:
        parser.error("--max-attempts must be at least 1")
    setup_logging(getattr(logging, args.log_level))
    logger.info("ZVS Simulator Program.")

    try:
        if args.config is not None:
            config = ParameterFileParser().parse(args.config)
            params, max_attempts, output_dir = config.parameters, config.max_attempts, config.output_dir
        else:
            params, max_attempts, output_dir = prompt_parameters(input_func), DEFAULT_MAX_ATTEMPTS, None

        if args.max_attempts is not None:
            max_attempts = args.max_attempts
        if args.output_dir is not None:
            output_dir = args.output_dir
        if output_dir is None:
            output_dir = Path.cwd()

        result = run_simulation(params, output_dir=output_dir, max_attempts=max_attempts)
    except DiagnosableError as e:
        logger.error(e.get_diagnostic_report())
        return 1
    except ZVSSimError as e:
        logger.error(str(e))
        return 1

    if result.converged:
        logger.info(f"Simulation finished after {len(result.attempts)} attempt(s); results in {output_dir}")
        logger.info(completion_summary(result))
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
