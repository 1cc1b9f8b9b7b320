"""Keplerian ephemeris — planetary positions from mean elements.

Every query runs the same pipeline (mechanics.orbit.heliocentric_position),
so sampled orbit polylines agree exactly with single-point positions at
matching epochs.  Nothing here mutates shared state: trajectories are
memoised in an LRU cache keyed on their inputs and handed out as read-only
arrays, so one instance can serve any number of threads or requests.
"""

from __future__ import annotations

import logging
import operator
from dataclasses import dataclass
from functools import lru_cache
from typing import Iterable, Iterator

import numpy as np

from config import settings
from ephemeris.bodies import ALL_BODIES, ELEMENTS, Body, resolve_body
from mechanics.elements import InstantaneousElements, evaluate_elements
from mechanics.orbit import Position3D, heliocentric_position
from mechanics.transforms import InvalidInputError, centuries_since_j2000, require_finite

logger = logging.getLogger("orrery.ephemeris")


@dataclass(frozen=True, eq=False)
class Trajectory:
    """Positions of one body sampled at start_jd + i * step_days."""

    body: Body
    start_jd: float
    step_days: float
    epochs: np.ndarray  # (N,) JD, read-only
    positions: np.ndarray  # (N, 3) AU, read-only

    def __len__(self) -> int:
        return len(self.epochs)

    def __getitem__(self, index: int) -> Position3D:
        if isinstance(index, slice):
            raise TypeError("Trajectory indices must be integers; slice .positions for ranges")
        x, y, z = self.positions[index]
        return Position3D(float(x), float(y), float(z))

    def __iter__(self) -> Iterator[Position3D]:
        for i in range(len(self)):
            yield self[i]

    @property
    def end_jd(self) -> float | None:
        return float(self.epochs[-1]) if len(self) else None


class KeplerianEphemeris:
    """Position and trajectory queries over the planet element table."""

    def __init__(
        self,
        tolerance: float | None = None,
        max_iterations: int | None = None,
        cache_size: int | None = None,
    ) -> None:
        self.tolerance = require_finite(
            settings.kepler_tolerance if tolerance is None else tolerance, "tolerance",
        )
        if self.tolerance <= 0.0:
            raise InvalidInputError(f"tolerance must be positive, got {self.tolerance}")
        self.max_iterations = _require_count(
            settings.kepler_max_iterations if max_iterations is None else max_iterations,
            "max_iterations",
        )
        if self.max_iterations < 1:
            raise InvalidInputError(f"max_iterations must be at least 1, got {self.max_iterations}")
        if cache_size is None:
            cache_size = settings.trajectory_cache_size
        self._trajectory_cached = lru_cache(maxsize=cache_size)(self._compute_trajectory)

    def __contains__(self, identifier: object) -> bool:
        try:
            resolve_body(identifier)  # type: ignore[arg-type]
        except ValueError:
            return False
        return True

    @property
    def bodies(self) -> tuple[Body, ...]:
        return ALL_BODIES

    # ----- Public query API ----- #

    def elements(self, body: str | Body, jd: float) -> InstantaneousElements:
        """Instantaneous orbital elements of a body at a Julian Date."""
        body = resolve_body(body)
        jd = require_finite(jd)
        return evaluate_elements(ELEMENTS[body], centuries_since_j2000(jd))

    def position(self, body: str | Body, jd: float) -> Position3D:
        """Heliocentric ecliptic position (AU) of a body at a Julian Date."""
        body = resolve_body(body)
        jd = require_finite(jd)
        return self._position(body, jd)

    def positions_batch(self, body: str | Body, epochs_jd: Iterable[float]) -> np.ndarray:
        """Positions for multiple epochs at once. Returns (N, 3) array in AU."""
        body = resolve_body(body)
        epochs = [require_finite(jd) for jd in epochs_jd]
        out = np.empty((len(epochs), 3), dtype=np.float64)
        for i, jd in enumerate(epochs):
            out[i] = tuple(self._position(body, jd))
        return out

    def snapshot(
        self, jd: float, bodies: Iterable[str | Body] | None = None,
    ) -> dict[Body, Position3D]:
        """Positions of several bodies (default: all planets) at one epoch."""
        jd = require_finite(jd)
        targets = ALL_BODIES if bodies is None else [resolve_body(b) for b in bodies]
        return {body: self._position(body, jd) for body in targets}

    def trajectory(
        self,
        body: str | Body,
        start_jd: float,
        count: int,
        step_days: float = 1.0,
    ) -> Trajectory:
        """Sample count positions at start_jd, start_jd + step_days, ...

        count = 0 yields an empty trajectory.
        """
        body = resolve_body(body)
        start_jd = require_finite(start_jd, "start_jd")
        count = _require_count(count, "count")
        step_days = require_finite(step_days, "step_days")
        if step_days <= 0.0:
            raise InvalidInputError(f"step_days must be positive, got {step_days}")
        return self._trajectory_cached(body, start_jd, count, step_days)

    def clear_cache(self) -> None:
        self._trajectory_cached.cache_clear()

    # ----- Internals ----- #

    def _position(self, body: Body, jd: float) -> Position3D:
        return heliocentric_position(ELEMENTS[body], jd, self.tolerance, self.max_iterations)

    def _compute_trajectory(
        self, body: Body, start_jd: float, count: int, step_days: float,
    ) -> Trajectory:
        logger.debug(
            "Sampling %s: %d points from JD %.2f every %g days",
            body.value, count, start_jd, step_days,
        )
        epochs = np.array([start_jd + i * step_days for i in range(count)], dtype=np.float64)
        positions = np.empty((count, 3), dtype=np.float64)
        for i in range(count):
            positions[i] = tuple(self._position(body, float(epochs[i])))
        epochs.flags.writeable = False
        positions.flags.writeable = False
        return Trajectory(
            body=body,
            start_jd=start_jd,
            step_days=step_days,
            epochs=epochs,
            positions=positions,
        )


def _require_count(value: int, name: str) -> int:
    """Return value as a non-negative int, raising InvalidInputError otherwise."""
    if isinstance(value, bool):
        raise InvalidInputError(f"{name} must be an integer, got {value!r}")
    try:
        value = operator.index(value)
    except TypeError as e:
        raise InvalidInputError(f"{name} must be an integer, got {value!r}") from e
    if value < 0:
        raise InvalidInputError(f"{name} must be non-negative, got {value}")
    return value


# --------------------------------------------------------------------------- #
#  Module-level entry points
# --------------------------------------------------------------------------- #
_default: KeplerianEphemeris | None = None


def default_ephemeris() -> KeplerianEphemeris:
    """Shared instance configured from settings."""
    global _default
    if _default is None:
        _default = KeplerianEphemeris()
    return _default


def position(body_name: str | Body, jd: float) -> Position3D:
    return default_ephemeris().position(body_name, jd)


def trajectory(body_name: str | Body, start_jd: float, sample_count: int) -> Trajectory:
    return default_ephemeris().trajectory(body_name, start_jd, sample_count)
