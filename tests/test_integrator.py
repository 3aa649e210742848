# tests/test_integrator.py
import math

import numpy as np
import pytest

from zvssim.simulation import (
    CircuitIntegrator,
    IntegrationOutcome,
    WaveformRecorder,
    corrected_step,
    is_divergent,
)
from tests.conftest import make_params


# --- Second-order update rule ---

def integrate_square(n_steps: int, t_end: float = 2.0) -> float:
    """Integrates x' = t**2, x(0) = 0 with the corrected step; returns |error| at t_end."""
    dt = t_end / n_steps
    x, previous = 0.0, 0.0
    for n in range(n_steps):
        derivative = (n * dt) ** 2
        x = corrected_step(x, derivative, previous, dt)
        previous = derivative
    return abs(x - t_end ** 3 / 3.0)


def test_corrected_step_formula():
    assert corrected_step(1.0, 2.0, 0.0, 0.1) == pytest.approx(1.0 + 0.2 + 0.1)
    assert corrected_step(1.0, 2.0, 2.0, 0.1) == pytest.approx(1.2)


def test_corrected_step_is_second_order():
    coarse = integrate_square(100)
    fine = integrate_square(200)
    assert fine < coarse
    assert coarse / fine > 3.0


def lc_first_peak_error(steps_per_period: int) -> float:
    """
    Undriven lossless LC: the capacitor starts charged to V0 and discharges into L.
    The current derivative is computed from the running charge integral, the current
    is advanced with the corrected step and the charge is accumulated rectangularly,
    as in the driver loop. Returns the relative error of the current amplitude over
    the first period against V0*sqrt(C/L).
    """
    L, C, V0 = 1e-4, 1e-8, 10.0
    period = 2.0 * math.pi * math.sqrt(L * C)
    dt = period / steps_per_period
    q, i, previous = C * V0, 0.0, 0.0
    peak = 0.0
    for _ in range(steps_per_period):
        derivative = -(q / C) / L
        i = corrected_step(i, derivative, previous, dt)
        previous = derivative
        q += i * dt
        peak = max(peak, abs(i))
    analytic = V0 * math.sqrt(C / L)
    return abs(peak - analytic) / analytic


def test_lc_amplitude_converges_with_time_step():
    coarse = lc_first_peak_error(400)
    fine = lc_first_peak_error(1600)
    assert coarse < 2e-2
    assert fine < coarse
    assert fine < 5e-3


def driver_ic_peak(delta_t: float) -> float:
    """Peak capacitor current of the driver over two resonant periods."""
    base = make_params()
    # smooth switching and a large L1 keep R*delta_t/L1 well below 1 for every step
    params = make_params(L1=1.0, slope_R=10.0, delta_t=delta_t, t_total=2.0 * base.period, last_perc=100.0)
    recorder = WaveformRecorder()
    outcome = CircuitIntegrator(params).simulate(recorder)
    assert outcome.convergence_error is False
    return recorder.waveforms().ic.peak()


def test_driver_capacitor_current_converges_with_time_step():
    reference = driver_ic_peak(0.5e-9)
    coarse = abs(driver_ic_peak(4e-9) - reference)
    fine = abs(driver_ic_peak(2e-9) - reference)
    assert reference > 0.0
    assert fine < coarse
    assert coarse / reference < 0.1


def test_is_divergent():
    assert not is_divergent(0.0)
    assert not is_divergent(-9.9e9)
    assert is_divergent(1.1e10)
    assert is_divergent(-1.1e10)
    assert is_divergent(float("nan"))
    assert is_divergent(float("inf"))


# --- Integrator ---

def test_configure_derives_period_and_coupling(reference_params):
    integrator = CircuitIntegrator()
    integrator.configure(reference_params)
    expected_period = 2.0 * math.pi * math.sqrt(4.0 * 1e-4 * 1e-8)
    assert integrator.period == pytest.approx(expected_period)
    assert integrator.frequency == pytest.approx(1.0 / expected_period)
    assert integrator.m24 == pytest.approx(math.sqrt(1e-4 * 1e-5))
    assert integrator.switch.period == pytest.approx(expected_period)
    assert integrator.switch.max_resistance == 100e6


def test_simulate_requires_configuration():
    with pytest.raises(RuntimeError):
        CircuitIntegrator().simulate()


def test_grossly_under_resolved_time_step_diverges(reference_params):
    period = reference_params.period
    params = make_params(delta_t=2.0 * period, t_total=50.0 * period, last_perc=100.0)
    integrator = CircuitIntegrator(params)
    recorder = WaveformRecorder()
    outcome = integrator.simulate(recorder)

    assert isinstance(outcome, IntegrationOutcome)
    assert outcome.convergence_error is True
    assert outcome.steps < 50
    assert outcome.diverged_at is not None
    assert is_divergent(outcome.diverged_current)
    # no samples after the divergent step
    assert outcome.samples == len(recorder) <= outcome.steps
    assert recorder.waveforms().vsec.t[-1] == pytest.approx(outcome.diverged_at)


def test_time_step_equal_to_period_diverges(reference_params):
    period = reference_params.period
    params = make_params(delta_t=period, t_total=100.0 * period)
    outcome = CircuitIntegrator(params).simulate()
    assert outcome.convergence_error is True


def test_recording_window(short_params):
    recorder = WaveformRecorder()
    outcome = CircuitIntegrator(short_params).simulate(recorder)
    assert outcome.convergence_error is False

    # replay the loop's time accumulation
    start = short_params.recording_start
    expected_times = []
    t, steps = 0.0, 0
    while t < short_params.t_total:
        steps += 1
        if t > start:
            expected_times.append(t)
        t += short_params.delta_t

    waveforms = recorder.waveforms()
    assert outcome.steps == steps
    assert outcome.samples == len(expected_times)
    np.testing.assert_array_equal(waveforms.ic.t, np.array(expected_times))
    assert np.all(waveforms.vsec.t > start)
    for waveform in waveforms:
        assert len(waveform) == len(expected_times)


def test_nothing_recorded_before_window(short_params):
    recorder = WaveformRecorder()
    CircuitIntegrator(short_params).simulate(recorder)
    t = recorder.waveforms().vc.t
    assert t.min() > short_params.t_total * (1.0 - short_params.last_perc / 100.0)


def test_sample_values_are_derived_from_mesh_currents(short_params):
    recorder = WaveformRecorder()
    integrator = CircuitIntegrator(short_params)
    integrator.simulate(recorder)
    state = integrator.state
    waveforms = recorder.waveforms()

    assert waveforms.vsec.values[-1] == pytest.approx(state.I4 * short_params.R_Sec)
    assert waveforms.vc.values[-1] == pytest.approx(state.int_I3 / short_params.C)
    assert waveforms.il2.values[-1] == pytest.approx(state.I3 - state.I2)
    assert waveforms.isource.values[-1] == pytest.approx(state.I1 - state.I2)
    assert waveforms.ic.values[-1] == pytest.approx(state.I3)


def test_each_attempt_starts_from_fresh_state(short_params):
    integrator = CircuitIntegrator(short_params)
    first, second = WaveformRecorder(), WaveformRecorder()
    integrator.simulate(first)
    integrator.simulate(second)
    np.testing.assert_array_equal(first.waveforms().isource.values, second.waveforms().isource.values)


def test_source_starts_charging_primary():
    integrator = CircuitIntegrator(make_params(t_total=1e-8, last_perc=100.0))
    integrator.simulate()
    # with R1 = 0 at t = 0 the source drives I1 - I2 positive
    assert integrator.state.I1 - integrator.state.I2 > 0.0
    assert math.isfinite(integrator.state.int_I3)


def test_progress_is_logged(short_params, caplog):
    caplog.set_level("INFO", logger="zvssim.simulation.integrator")
    CircuitIntegrator(short_params).simulate()
    messages = [r.getMessage() for r in caplog.records]
    assert "Start recording data." in messages
    assert "50%" in messages
    assert "99%" in messages


def test_reference_driver_reaches_steady_state_without_divergence(reference_params):
    recorder = WaveformRecorder()
    outcome = CircuitIntegrator(reference_params).simulate(recorder)

    assert outcome.convergence_error is False
    assert outcome.steps == pytest.approx(100_000, abs=2)
    waveforms = recorder.waveforms()
    for waveform in waveforms:
        assert len(waveform) > 0
        assert np.all(np.diff(waveform.t) > 0)
        assert np.all(np.isfinite(waveform.values))
    assert len(waveforms.vsec) == pytest.approx(1000, abs=2)
