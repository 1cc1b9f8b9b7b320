"""Heliocentric ecliptic positions from mean orbital elements.

Pipeline per query:
    JD -> centuries since J2000.0 -> instantaneous elements
       -> eccentric anomaly (Kepler) -> true anomaly, radius
       -> rotation out of the orbital plane into the ecliptic J2000 frame.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterator

import numpy as np
from numba import njit

from ephemeris.bodies import BodyElements
from mechanics.elements import evaluate_elements
from mechanics.kepler import solve_orbit
from mechanics.transforms import centuries_since_j2000


@dataclass(frozen=True, slots=True)
class Position3D:
    """Cartesian position in AU, heliocentric ecliptic J2000."""

    x: float
    y: float
    z: float

    def __iter__(self) -> Iterator[float]:
        yield self.x
        yield self.y
        yield self.z

    @property
    def distance(self) -> float:
        return math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z)

    def scaled(self, factor: float) -> Position3D:
        return Position3D(self.x * factor, self.y * factor, self.z * factor)

    def as_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=np.float64)

    def to_list(self) -> list[float]:
        return [self.x, self.y, self.z]


@njit(cache=True)
def orbital_plane_to_ecliptic(
    r: float, nu: float, argp: float, raan: float, inc: float,
) -> tuple:
    """Rotate a point at radius r and true anomaly nu into the ecliptic frame.

    argp (argument of perihelion), raan (ascending node) and inc in radians.
    """
    u = argp + nu  # argument of latitude
    cos_u = math.cos(u)
    sin_u = math.sin(u)
    cos_raan = math.cos(raan)
    sin_raan = math.sin(raan)
    cos_inc = math.cos(inc)

    x = r * (cos_raan * cos_u - sin_raan * sin_u * cos_inc)
    y = r * (sin_raan * cos_u + cos_raan * sin_u * cos_inc)
    z = r * (sin_u * math.sin(inc))
    return x, y, z


def heliocentric_position(
    elements: BodyElements,
    jd: float,
    tolerance: float = 1e-6,
    max_iterations: int = 50,
) -> Position3D:
    """Position of a body (AU) at Julian Date jd.

    Raises NonConvergenceError from the Kepler solve.
    """
    inst = evaluate_elements(elements, centuries_since_j2000(jd))
    sol = solve_orbit(inst, tolerance, max_iterations)
    x, y, z = orbital_plane_to_ecliptic(
        sol.radius,
        sol.true_anomaly,
        math.radians(inst.omega),
        math.radians(inst.Omega),
        math.radians(inst.I),
    )
    return Position3D(float(x), float(y), float(z))
