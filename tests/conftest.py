# tests/conftest.py
import pytest
from dataclasses import replace

from zvssim import CircuitParameters


# Reference driver: 12 V supply, 100 uH + 100 uH primary, 10 uH secondary, 10 nF tank.
REFERENCE_VALUES = dict(
    L1=0.1,
    L2=1e-4,
    L4=1e-5,
    C=1e-8,
    V=12.0,
    R=100e6,
    delta_t=1e-9,
    t_total=1e-4,
    slope_R=0.0001,
    R_Sec=50.0,
    last_perc=1.0,
)


def make_params(**overrides) -> CircuitParameters:
    """Reference parameters with selected fields replaced."""
    return replace(CircuitParameters(**REFERENCE_VALUES), **overrides)


@pytest.fixture
def reference_params():
    return make_params()


@pytest.fixture
def short_params():
    """Reference circuit simulated for 2 us (2000 steps), recording the last 10%."""
    return make_params(t_total=2e-6, last_perc=10.0)


@pytest.fixture
def reference_yaml():
    return """
L1: 0.1
L2: "100 uH"
L4: "10 uH"
V: "12 V"
C: "10 nF"
delta_t: "1 ns"
t_total: "2 us"
slope_R: 0.0001
R: "100 Mohm"
R_Sec: "50 ohm"
last_points: 200
"""
