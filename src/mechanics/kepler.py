"""Kepler's equation for elliptic orbits.

Angles in radians, distances in AU.
The Newton-Raphson inner loop is JIT-compiled with Numba.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from numba import njit

from mechanics.elements import InstantaneousElements
from mechanics.transforms import InvalidInputError

logger = logging.getLogger("orrery.mechanics")


class NonConvergenceError(ArithmeticError):
    """Raised when Newton-Raphson does not meet tolerance within the iteration cap."""

    def __init__(self, mean_anomaly: float, eccentricity: float, iterations: int, last_step: float):
        self.mean_anomaly = mean_anomaly
        self.eccentricity = eccentricity
        self.iterations = iterations
        self.last_step = last_step
        super().__init__(
            f"Kepler solver did not converge after {iterations} iterations "
            f"(M={mean_anomaly:.9f} rad, e={eccentricity:.9f}, last step={last_step:.3e})"
        )


@dataclass(frozen=True, slots=True)
class KeplerSolution:
    eccentric_anomaly: float  # rad
    true_anomaly: float  # rad
    radius: float  # AU
    iterations: int


# --------------------------------------------------------------------------- #
#  Kernels
# --------------------------------------------------------------------------- #
@njit(cache=True)
def _newton_raphson(M: float, ecc: float, tol: float, max_iter: int) -> tuple:
    """Iterate E <- E - (E - e sin E - M) / (1 - e cos E) from E0 = M.

    Returns (E, iterations, last_step, converged).
    """
    E = M
    dE = math.inf
    for k in range(1, max_iter + 1):
        dE = (E - ecc * math.sin(E) - M) / (1.0 - ecc * math.cos(E))
        E -= dE
        if abs(dE) <= tol:
            return E, k, dE, True
    return E, max_iter, dE, False


@njit(cache=True)
def true_anomaly(E: float, ecc: float) -> float:
    """True anomaly (rad) from eccentric anomaly."""
    return 2.0 * math.atan2(
        math.sqrt(1.0 + ecc) * math.sin(E / 2.0),
        math.sqrt(1.0 - ecc) * math.cos(E / 2.0),
    )


@njit(cache=True)
def orbital_radius(a: float, ecc: float, E: float) -> float:
    """Distance from the focus, a (1 - e cos E)."""
    return a * (1.0 - ecc * math.cos(E))


# --------------------------------------------------------------------------- #
#  Public solver
# --------------------------------------------------------------------------- #
def solve_kepler(
    M: float,
    ecc: float,
    tolerance: float = 1e-6,
    max_iterations: int = 50,
) -> float:
    """Solve M = E - e sin(E) for the eccentric anomaly E (rad).

    Raises NonConvergenceError if |step| > tolerance after max_iterations,
    InvalidInputError if max_iterations < 1.
    """
    E, _, _ = _solve(M, ecc, tolerance, max_iterations)
    return E


def _solve(M: float, ecc: float, tolerance: float, max_iterations: int) -> tuple[float, int, float]:
    if max_iterations < 1:
        raise InvalidInputError(f"max_iterations must be at least 1, got {max_iterations}")
    E, iterations, last_step, converged = _newton_raphson(
        float(M), float(ecc), float(tolerance), int(max_iterations),
    )
    if not converged:
        logger.warning(
            "Kepler iteration cap reached: M=%.9f e=%.9f iterations=%d step=%.3e",
            M, ecc, iterations, last_step,
        )
        raise NonConvergenceError(float(M), float(ecc), int(iterations), float(last_step))
    return E, iterations, last_step


def solve_orbit(
    elements: InstantaneousElements,
    tolerance: float = 1e-6,
    max_iterations: int = 50,
) -> KeplerSolution:
    """Solve for the eccentric anomaly, true anomaly and radius of a set of elements."""
    ecc = elements.e
    E, iterations, _ = _solve(elements.mean_anomaly, ecc, tolerance, max_iterations)
    return KeplerSolution(
        eccentric_anomaly=E,
        true_anomaly=true_anomaly(E, ecc),
        radius=orbital_radius(elements.a, ecc, E),
        iterations=iterations,
    )
