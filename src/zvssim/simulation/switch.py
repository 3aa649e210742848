# src/zvssim/simulation/switch.py
"""
Periodic, piecewise-linear resistance standing in for a MOSFET of the driver.

Within every resonant period the resistance ramps from 0 to its maximum
("turning off"), stays at the maximum ("off"), ramps back to 0 ("turning on")
and stays at 0 ("on") for the rest of the period.

Time is folded into the period with `math.fmod`; this differs from taking
T*frac(t/T) by rounding only, and keeps the breakpoint values exact.
"""
import math
from dataclasses import dataclass


@dataclass(frozen=True)
class SwitchResistanceModel:
    """
    Breakpoints of one switching period.

    Attributes:
        p1: End of the turn-off ramp.
        p2: End of the "off" plateau.
        p3: End of the turn-on ramp.
        p4: End of the period (equal to `period`).
        period: Resonant period T.
        max_resistance: Resistance of the fully-off switch.
    """
    p1: float
    p2: float
    p3: float
    p4: float
    period: float
    max_resistance: float

    @classmethod
    def configure(cls, period: float, slope_percent: float, max_resistance: float) -> "SwitchResistanceModel":
        """
        Derives the breakpoints from the period, the transition slope (percent of
        the period) and the maximum resistance.
        """
        slope = slope_percent / 100.0
        return cls(
            p1=period * slope,
            p2=period / 2.0 - period * slope / 2.0,
            p3=period / 2.0 + period * slope / 2.0,
            p4=period,
            period=period,
            max_resistance=max_resistance,
        )

    def reduce(self, t: float) -> float:
        """Maps any time onto [0, period)."""
        tau = math.fmod(t, self.period)
        if tau < 0.0:
            tau += self.period
        return tau

    def value(self, t: float) -> float:
        tau = self.reduce(t)
        if tau <= self.p1:
            return self.max_resistance * tau / self.p1
        if tau <= self.p2:
            return self.max_resistance
        if tau <= self.p3:
            return self.max_resistance * (1.0 - (tau - self.p2) / (self.p3 - self.p2))
        return 0.0
