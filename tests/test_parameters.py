# tests/test_parameters.py
import math
from dataclasses import FrozenInstanceError

import pytest

from zvssim import CircuitParameters, ParameterValidationError, UnitConversionError, parameters_from_raw
from zvssim.parameters import last_points_to_percent, parameter_summary
from zvssim.units import to_si_magnitude
from tests.conftest import REFERENCE_VALUES, make_params


# --- Derived values ---

def test_derived_values(reference_params):
    p = reference_params
    assert p.period == pytest.approx(2.0 * math.pi * 2e-6)
    assert p.frequency == pytest.approx(1.0 / p.period)
    assert p.mutual_inductance == pytest.approx(math.sqrt(1e-9))
    assert p.recording_start == pytest.approx(0.99e-4)
    assert p.step_count in (100000, 100001)


def test_full_recording_window_starts_at_zero():
    assert make_params(last_perc=100.0).recording_start == 0.0


def test_parameters_are_immutable(reference_params):
    with pytest.raises(FrozenInstanceError):
        reference_params.L1 = 1.0


def test_retry_adjustment_returns_new_value(reference_params):
    adjusted = reference_params.with_retry_adjustment(0.2, 5e-10)
    assert (adjusted.L1, adjusted.delta_t) == (0.2, 5e-10)
    assert reference_params.L1 == 0.1
    assert adjusted.L2 == reference_params.L2
    assert adjusted.last_perc == reference_params.last_perc


# --- Validation ---

def test_reference_parameters_validate_cleanly(reference_params):
    assert reference_params.validate() == []


@pytest.mark.parametrize("name", ["L1", "L2", "L4", "C", "R", "R_Sec", "delta_t", "t_total", "slope_R"])
def test_non_positive_values_are_rejected(name):
    with pytest.raises(ParameterValidationError) as excinfo:
        make_params(**{name: 0.0}).validate()
    assert name in str(excinfo.value)


@pytest.mark.parametrize("last_perc", [0.0, -5.0, 100.5])
def test_recording_window_outside_range_is_rejected(last_perc):
    with pytest.raises(ParameterValidationError, match="last_perc"):
        make_params(last_perc=last_perc).validate()


def test_non_finite_values_are_rejected():
    with pytest.raises(ParameterValidationError, match="finite"):
        make_params(V=float("nan")).validate()


def test_all_issues_are_collected():
    with pytest.raises(ParameterValidationError) as excinfo:
        make_params(L1=-1.0, C=0.0).validate()
    assert len(excinfo.value.issues) == 2
    report = excinfo.value.get_diagnostic_report()
    assert "Invalid Circuit Parameters" in report
    assert "L1 must be > 0" in report


def test_coarse_time_step_only_warns(caplog):
    params = make_params(delta_t=1e-6)
    warnings = params.validate()
    assert len(warnings) == 1
    assert "fewer than 100 steps" in warnings[0]
    assert "fewer than 100 steps" in caplog.text


def test_time_step_not_below_total_time_warns():
    warnings = make_params(delta_t=1e-4).validate()
    assert any("not smaller than the total time" in w for w in warnings)


# --- Raw input ---

def test_last_points_conversion():
    assert last_points_to_percent(1000, 1e-4, 1e-9) == pytest.approx(1.0)
    assert last_points_to_percent(200, 2e-6, 1e-9) == pytest.approx(10.0)


def test_parameters_from_raw_accepts_units():
    raw = dict(
        L1=0.1, L2="100 uH", L4="10 uH", V="12 V", C="10 nF", delta_t="1 ns",
        t_total="0.1 ms", slope_R="0.0001", R="100 Mohm", R_Sec="50 ohm", last_points=1000,
    )
    params = parameters_from_raw(raw)
    assert params.L2 == pytest.approx(1e-4)
    assert params.C == pytest.approx(1e-8)
    assert params.R == pytest.approx(1e8)
    assert params.delta_t == pytest.approx(1e-9)
    assert params.t_total == pytest.approx(1e-4)
    assert params.slope_R == pytest.approx(1e-4)
    assert params.last_perc == pytest.approx(1.0)


def test_parameters_from_raw_takes_numbers_as_si():
    params = parameters_from_raw(REFERENCE_VALUES)
    assert params == make_params()


def test_parameters_from_raw_requires_one_recording_window():
    both = dict(REFERENCE_VALUES, last_points=1000)
    with pytest.raises(ParameterValidationError, match="last_perc / last_points"):
        parameters_from_raw(both)
    neither = {k: v for k, v in REFERENCE_VALUES.items() if k != "last_perc"}
    with pytest.raises(ParameterValidationError, match="last_perc / last_points"):
        parameters_from_raw(neither)


def test_parameters_from_raw_reports_missing_keys():
    raw = {k: v for k, v in REFERENCE_VALUES.items() if k not in ("L4", "V")}
    with pytest.raises(ParameterValidationError) as excinfo:
        parameters_from_raw(raw)
    assert excinfo.value.issues == ["Missing parameter: L4.", "Missing parameter: V."]


def test_parameters_from_raw_validates():
    with pytest.raises(ParameterValidationError):
        parameters_from_raw(dict(REFERENCE_VALUES, C=-1e-8))


def test_parameter_summary_order(reference_params):
    labels = [label for label, _ in parameter_summary(reference_params)]
    assert labels == [
        "L1", "L2", "L4", "V", "C", "Time step", "Total simulation time",
        "Resistor slope", "Max resistance", "Secondary load",
    ]


# --- Units ---

@pytest.mark.parametrize("value, unit, expected", [
    ("100 uH", "henry", 1e-4),
    ("10 nF", "farad", 1e-8),
    ("1 ns", "second", 1e-9),
    ("100 Mohm", "ohm", 1e8),
    ("2 kV", "volt", 2e3),
    (0.5, "henry", 0.5),
    (3, None, 3.0),
    ("0.0001", None, 1e-4),
])
def test_to_si_magnitude(value, unit, expected):
    assert to_si_magnitude("x", value, unit) == pytest.approx(expected)


@pytest.mark.parametrize("value, unit", [
    ("12 V", "henry"),
    ("10 furlongs_per_glorp", "henry"),
    ("", "second"),
    (True, "volt"),
    (float("inf"), "volt"),
])
def test_to_si_magnitude_rejects_bad_input(value, unit):
    with pytest.raises(UnitConversionError) as excinfo:
        to_si_magnitude("L2", value, unit)
    assert excinfo.value.name == "L2"
    assert "Unit Conversion Error" in excinfo.value.get_diagnostic_report()


def test_unit_error_names_the_parameter():
    with pytest.raises(UnitConversionError) as excinfo:
        parameters_from_raw(dict(REFERENCE_VALUES, C="10 uH"))
    report = excinfo.value.get_diagnostic_report()
    assert "Parameter:      C" in report
    assert "User Input:     '10 uH'" in report


def test_unitless_strings_are_taken_as_si():
    assert to_si_magnitude("L2", "1e-4", "henry") == pytest.approx(1e-4)
    assert to_si_magnitude("R", " 100e6 ", "ohm") == pytest.approx(1e8)
