# src/zvssim/simulation/integrator.py
"""
Time-domain integrator of the ZVS Mazzilli driver mesh currents.

Mesh currents:
    I1: through the voltage source, the damping inductor L1 and one primary half.
    I2: same loop through the other primary half.
    I3: through the resonant capacitor.
    I4: through the secondary and its load.

Each step solves the four loop equations for the current derivatives in the
fixed order I1', I2', I3', I4'. Every derivative uses the derivatives already
computed in the same step and the previous step's values for the rest, which
makes the system explicitly solvable. The currents are then advanced with a
second-order (Adams-Bashforth-like) correction, see `corrected_step`.

The capacitor voltage is reconstructed as integral(I3)/C, accumulated with
rectangular integration.
"""
import logging
import math
from dataclasses import dataclass
from typing import Optional

from ..constants import DIVERGENCE_CURRENT_LIMIT_A
from ..parameters import CircuitParameters
from .recorders import SampleRecorder
from .results import IntegrationOutcome
from .switch import SwitchResistanceModel

logger = logging.getLogger(__name__)


def corrected_step(value: float, derivative: float, previous_derivative: float, dt: float) -> float:
    """x + x'*dt + 0.5*dt*(x' - x'_previous)."""
    return value + derivative * dt + 0.5 * dt * (derivative - previous_derivative)


def is_divergent(current: float) -> bool:
    return not math.isfinite(current) or abs(current) > DIVERGENCE_CURRENT_LIMIT_A


@dataclass
class SimulationState:
    """
    Mesh currents and their derivatives at the current and previous step.

    A fresh instance is created for every attempt; nothing carries over between
    retries.
    """
    I1: float = 0.0
    I2: float = 0.0
    I3: float = 0.0
    I4: float = 0.0
    I1d: float = 0.0
    I2d: float = 0.0
    I3d: float = 0.0
    I4d: float = 0.0
    I1d_previous: float = 0.0
    I2d_previous: float = 0.0
    I3d_previous: float = 0.0
    I4d_previous: float = 0.0
    int_I3: float = 0.0
    t: float = 0.0


class CircuitIntegrator:
    """
    Integrates one attempt of the driver for a fixed `CircuitParameters` value.

    Usage:
        integrator = CircuitIntegrator()
        integrator.configure(params)
        outcome = integrator.simulate(recorder)
    """

    def __init__(self, params: Optional[CircuitParameters] = None):
        self.params: Optional[CircuitParameters] = None
        self.switch: Optional[SwitchResistanceModel] = None
        self.state = SimulationState()
        if params is not None:
            self.configure(params)

    def configure(self, params: CircuitParameters) -> None:
        """Stores the parameters and derives T, f, M24 and the switch breakpoints."""
        self.params = params
        self.period = params.period
        self.frequency = 1.0 / self.period
        self.m24 = params.mutual_inductance
        self.switch = SwitchResistanceModel.configure(self.period, params.slope_R, params.R)
        logger.debug(
            f"Integrator configured: T={self.period:.6e} s, f={self.frequency:.6e} Hz, "
            f"M24={self.m24:.6e} H, L1={params.L1:g} H, delta_t={params.delta_t:g} s"
        )

    def simulate(self, recorder: Optional[SampleRecorder] = None) -> IntegrationOutcome:
        """
        Runs the main loop from t=0 to t_total in steps of delta_t.

        Samples for t inside the trailing recording window are passed to
        `recorder`. The loop stops immediately when I1 diverges.

        Returns:
            An `IntegrationOutcome` whose `convergence_error` flag tells the retry
            controller whether the attempt diverged.
        """
        if self.params is None:
            raise RuntimeError("CircuitIntegrator.simulate() called before configure().")

        p = self.params
        L1, L2, L4, C, V, R, R_Sec = p.L1, p.L2, p.L4, p.C, p.V, p.R, p.R_Sec
        dt, t_total = p.delta_t, p.t_total
        M24 = self.m24
        switch_value = self.switch.value
        recording_start = p.recording_start

        self.state = state = SimulationState()
        I1 = I2 = I3 = I4 = 0.0
        I1d = I2d = I3d = I4d = 0.0
        I1da = I2da = I3da = I4da = 0.0
        int_I3 = 0.0

        recording = False
        convergence_error = False
        steps = samples = 0
        progress_previous = 0
        t = 0.0

        while t < t_total:
            R1 = switch_value(t)
            R2 = R - R1

            I1d = (V + L1 * I2d - L2 * I2d + 2.0 * L2 * I3d + M24 * I4d - R2 * I1) / (L1 + L2)
            I1 = corrected_step(I1, I1d, I1da, dt)
            I1da = I1d

            I2d = -1.0 * (V + R1 * I2 + L2 * (I1d - 2.0 * I3d) - L1 * I1d - M24 * I4d) / (L2 + L1)
            I2 = corrected_step(I2, I2d, I2da, dt)
            I2da = I2d

            I3d = -1.0 * (int_I3 / C - 2.0 * L2 * (I1d + I2d) + 2.0 * M24 * I4d) / (4.0 * L2)
            I3 = corrected_step(I3, I3d, I3da, dt)
            I3da = I3d

            I4d = -1.0 * (R_Sec * I4 + M24 * (2.0 * I3d - I1d - I2d)) / L4
            I4 = corrected_step(I4, I4d, I4da, dt)
            I4da = I4d

            int_I3 += I3 * dt
            steps += 1

            if t > recording_start:
                if not recording:
                    logger.info("Start recording data.")
                    recording = True
                if recorder is not None:
                    recorder.record(t, I4 * R_Sec, int_I3 / C, I3 - I2, I1 - I2, I3)
                samples += 1

            progress = int(100.0 * t / t_total)
            if progress > progress_previous:
                logger.info(f"{progress}%")

            if is_divergent(I1):
                convergence_error = True
                logger.warning(f"Convergence error at t={t:.6e} s: I1={I1!r} A")
                break
            progress_previous = progress
            t += dt

        state.I1, state.I2, state.I3, state.I4 = I1, I2, I3, I4
        state.I1d, state.I2d, state.I3d, state.I4d = I1d, I2d, I3d, I4d
        state.I1d_previous, state.I2d_previous, state.I3d_previous, state.I4d_previous = I1da, I2da, I3da, I4da
        state.int_I3 = int_I3
        state.t = t

        return IntegrationOutcome(
            convergence_error=convergence_error,
            steps=steps,
            samples=samples,
            diverged_at=t if convergence_error else None,
            diverged_current=I1 if convergence_error else None,
        )
