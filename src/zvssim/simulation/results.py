# src/zvssim/simulation/results.py
"""
Formal, immutable result contracts of the simulation.

`IntegrationOutcome` is what one integration attempt reports to the retry
controller, `AttemptRecord` is the history entry the controller keeps for it,
and `SimulationResult` is the user-facing result of a complete run.
"""
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from ..parameters import CircuitParameters


@dataclass(frozen=True)
class Waveform:
    """Time series of one tracked quantity inside the recording window."""
    name: str
    t: np.ndarray
    values: np.ndarray

    def __len__(self) -> int:
        return len(self.t)

    def peak(self) -> float:
        """Largest absolute value; 0.0 for an empty waveform."""
        return float(np.max(np.abs(self.values))) if len(self.values) else 0.0

    def peak_to_peak(self) -> float:
        return float(np.ptp(self.values)) if len(self.values) else 0.0


@dataclass(frozen=True)
class WaveformSet:
    """
    The five tracked quantities of the driver.

    Attributes:
        vsec: Secondary voltage, I4 * R_Sec.
        vc: Capacitor voltage, integral(I3) / C.
        il2: Primary branch current, I3 - I2.
        isource: Source current, I1 - I2.
        ic: Capacitor current, I3.
    """
    vsec: Waveform
    vc: Waveform
    il2: Waveform
    isource: Waveform
    ic: Waveform

    def __iter__(self):
        return iter((self.vsec, self.vc, self.il2, self.isource, self.ic))


@dataclass(frozen=True)
class IntegrationOutcome:
    """
    Result of one `CircuitIntegrator.simulate()` call.

    Attributes:
        convergence_error: True if the first mesh current became non-finite or
                           exceeded the divergence limit.
        steps: Number of time steps executed (including the divergent one).
        samples: Number of samples handed to the recorder.
        diverged_at: Simulated time of the divergent step, if any.
        diverged_current: Value of I1 at that step, if any.
    """
    convergence_error: bool
    steps: int
    samples: int
    diverged_at: Optional[float] = None
    diverged_current: Optional[float] = None


@dataclass(frozen=True)
class AttemptRecord:
    """One attempt of the retry loop and the parameters it ran with."""
    attempt: int
    L1: float
    delta_t: float
    outcome: IntegrationOutcome


@dataclass(frozen=True)
class SimulationResult:
    """
    User-facing result of `run_simulation`.

    Attributes:
        parameters: Final parameters, i.e. the values written to `parameters.dat`.
                    After a give-up these already carry the last adjustment,
                    which was never simulated.
        converged: True if the last attempt finished without a convergence error.
        gave_up: True if the retry policy stopped without convergence.
        attempts: History of all attempts, oldest first.
        waveforms: Samples recorded by the last attempt.
    """
    parameters: CircuitParameters
    converged: bool
    gave_up: bool
    attempts: Tuple[AttemptRecord, ...]
    waveforms: WaveformSet
