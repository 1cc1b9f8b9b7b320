"""Instantaneous orbital elements from mean elements with secular rates."""

from __future__ import annotations

import math
from dataclasses import dataclass

from ephemeris.bodies import BodyElements


def normalize_degrees(angle: float) -> float:
    """Wrap an angle in degrees into [0, 360), keeping it congruent mod 360."""
    wrapped = ((angle % 360.0) + 360.0) % 360.0
    # -1e-17 % 360 rounds to 360.0
    return 0.0 if wrapped == 360.0 else wrapped


@dataclass(frozen=True, slots=True)
class InstantaneousElements:
    """The six elements evaluated at a given number of centuries T.

    Angles are in degrees, a in AU.
    """

    a: float
    e: float
    I: float
    L: float
    varpi: float
    Omega: float

    @property
    def omega(self) -> float:
        """Argument of perihelion (deg)."""
        return self.varpi - self.Omega

    @property
    def mean_anomaly_deg(self) -> float:
        return normalize_degrees(self.L - self.varpi)

    @property
    def mean_anomaly(self) -> float:
        """Mean anomaly (rad) in [0, 2*pi)."""
        return math.radians(self.mean_anomaly_deg)


def evaluate_elements(elements: BodyElements, T: float) -> InstantaneousElements:
    """Apply the linear secular correction for T Julian centuries from J2000.0."""
    return InstantaneousElements(
        a=elements.a.at(T),
        e=elements.e.at(T),
        I=elements.I.at(T),
        L=elements.L.at(T),
        varpi=elements.varpi.at(T),
        Omega=elements.Omega.at(T),
    )
