# src/zvssim/simulation/retry.py
"""
Retry policy for attempts that end with a convergence error.

The policy is a decision table over (L1, delta_t); exactly one adjustment rule
applies per retry, the first one whose guard matches:

    a. L1 < 1.0                       -> L1 *= 2
    b. L1 >= 1.0 and delta_t <= 100 ns -> L1 += 2
    c. L1 >= 1.0 and delta_t > 100 ns  -> delta_t /= 2

After the adjustment, the run is abandoned if L1 > 20.0 and delta_t < 0.01 ns.
A larger L1 slows the approach to steady state, a smaller delta_t slows the
integration itself.
"""
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from ..constants import (
    DEFAULT_MAX_ATTEMPTS,
    L1_DOUBLING_FACTOR,
    L1_DOUBLING_LIMIT_H,
    L1_GIVE_UP_H,
    L1_INCREMENT_H,
    TIME_STEP_GIVE_UP_S,
    TIME_STEP_HALVING_FACTOR,
    TIME_STEP_HALVING_THRESHOLD_S,
)
from ..parameters import CircuitParameters
from .integrator import CircuitIntegrator
from .recorders import SampleRecorder
from .results import AttemptRecord

logger = logging.getLogger(__name__)

RULE_DOUBLE_L1 = "double_l1"
RULE_INCREMENT_L1 = "increment_l1"
RULE_HALVE_TIME_STEP = "halve_time_step"


@dataclass(frozen=True)
class RetryDecision:
    """
    Outcome of `plan_retry`.

    Attributes:
        L1: Damping inductance for the next attempt (or the final value).
        delta_t: Time step for the next attempt (or the final value).
        done: True if no further attempt should be made.
        gave_up: True if the run stops without having converged.
        rule: Name of the adjustment rule that was applied, if any.
    """
    L1: float
    delta_t: float
    done: bool
    gave_up: bool
    rule: Optional[str] = None


def plan_retry(L1: float, delta_t: float, convergence_error: bool) -> RetryDecision:
    """Decides what to do after an attempt ran with (L1, delta_t)."""
    if not convergence_error:
        return RetryDecision(L1, delta_t, done=True, gave_up=False)

    if L1 < L1_DOUBLING_LIMIT_H:
        L1, rule = L1 * L1_DOUBLING_FACTOR, RULE_DOUBLE_L1
    elif delta_t <= TIME_STEP_HALVING_THRESHOLD_S:
        L1, rule = L1 + L1_INCREMENT_H, RULE_INCREMENT_L1
    else:
        delta_t, rule = delta_t / TIME_STEP_HALVING_FACTOR, RULE_HALVE_TIME_STEP

    gave_up = L1 > L1_GIVE_UP_H and delta_t < TIME_STEP_GIVE_UP_S
    return RetryDecision(L1, delta_t, done=gave_up, gave_up=gave_up, rule=rule)


def _describe(decision: RetryDecision) -> str:
    if decision.rule == RULE_HALVE_TIME_STEP:
        return f"Convergence error, readjusting L1 to {decision.L1:g} and time step to {decision.delta_t:g}"
    return f"Convergence error, readjusting L1 to {decision.L1:g}"


@dataclass(frozen=True)
class RetryRun:
    """Final parameters and attempt history of `RetryController.run`."""
    parameters: CircuitParameters
    converged: bool
    gave_up: bool
    attempts: List[AttemptRecord]


class RetryController:
    """
    Runs integration attempts until one converges or the policy gives up.

    Args:
        max_attempts: Hard limit on the number of attempts. Reaching it counts as
                      giving up; without it, a run stuck in rule (b) would never end.
        integrator_factory: Builds the integrator used for every attempt.
    """

    def __init__(
        self,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        integrator_factory: Callable[[], CircuitIntegrator] = CircuitIntegrator,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1.")
        self.max_attempts = max_attempts
        self.integrator_factory = integrator_factory

    def run(
        self,
        params: CircuitParameters,
        recorder_factory: Optional[Callable[[int, CircuitParameters], Optional[SampleRecorder]]] = None,
    ) -> RetryRun:
        """
        Args:
            params: Parameters of the first attempt.
            recorder_factory: Called with the attempt number and its parameters once
                              per attempt; the recorder it returns is opened before
                              and closed after that attempt.
        """
        attempts: List[AttemptRecord] = []
        current = params
        integrator = self.integrator_factory()

        while True:
            attempt_number = len(attempts) + 1
            logger.info(f"Attempt {attempt_number}: L1={current.L1:g} H, delta_t={current.delta_t:g} s")
            integrator.configure(current)

            recorder = recorder_factory(attempt_number, current) if recorder_factory is not None else None
            if recorder is not None:
                with recorder:
                    outcome = integrator.simulate(recorder)
            else:
                outcome = integrator.simulate()
            attempts.append(AttemptRecord(attempt_number, current.L1, current.delta_t, outcome))

            decision = plan_retry(current.L1, current.delta_t, outcome.convergence_error)
            if decision.rule is not None:
                current = current.with_retry_adjustment(decision.L1, decision.delta_t)
                logger.warning(_describe(decision))

            if decision.done and not decision.gave_up:
                logger.info(f"Simulation converged after {attempt_number} attempt(s).")
                return RetryRun(current, converged=True, gave_up=False, attempts=attempts)
            if decision.gave_up or attempt_number >= self.max_attempts:
                if not decision.gave_up:
                    logger.error(f"Giving up after {attempt_number} attempts.")
                logger.error("Convergence error could not be solved.")
                return RetryRun(current, converged=False, gave_up=True, attempts=attempts)
