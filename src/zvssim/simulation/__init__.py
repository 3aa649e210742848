# src/zvssim/simulation/__init__.py
from .switch import SwitchResistanceModel
from .integrator import CircuitIntegrator, SimulationState, corrected_step, is_divergent
from .retry import RetryController, RetryDecision, RetryRun, plan_retry
from .recorders import SampleRecorder, WaveformRecorder, TeeRecorder, SAMPLE_NAMES
from .results import (
    AttemptRecord,
    IntegrationOutcome,
    SimulationResult,
    Waveform,
    WaveformSet,
)
from .execution import run_simulation

__all__ = [
    # Core Classes
    "SwitchResistanceModel",
    "CircuitIntegrator",
    "SimulationState",
    "corrected_step",
    "is_divergent",
    "RetryController",
    "RetryDecision",
    "RetryRun",
    "plan_retry",
    # Recorders
    "SampleRecorder",
    "WaveformRecorder",
    "TeeRecorder",
    "SAMPLE_NAMES",
    # Results
    "AttemptRecord",
    "IntegrationOutcome",
    "SimulationResult",
    "Waveform",
    "WaveformSet",
    "run_simulation",
]
