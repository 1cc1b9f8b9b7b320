"""Time conversions and display transforms.

Handles:
- Unix milliseconds / datetime / ISO strings <-> Julian Date
- Julian centuries since J2000.0 for evaluating secular element rates
- Logarithmic radial compression of AU positions into scene units
"""

from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from mechanics.orbit import Position3D


class InvalidInputError(ValueError):
    """Raised when a time or sampling argument is not a usable number."""


# --------------------------------------------------------------------------- #
#  Constants
# --------------------------------------------------------------------------- #
JD_UNIX_EPOCH = 2440587.5  # 1970-01-01T00:00:00Z
JD_J2000 = 2451545.0  # 2000-01-01T12:00:00
MS_PER_DAY = 86_400_000
DAYS_PER_CENTURY = 36525.0

_UNIX_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ONE_MS = timedelta(milliseconds=1)


def require_finite(value: float, name: str = "jd") -> float:
    """Return value as float, raising InvalidInputError for NaN/Inf/non-numbers."""
    try:
        value = float(value)
    except (TypeError, ValueError) as e:
        raise InvalidInputError(f"{name} must be a number, got {value!r}") from e
    if not math.isfinite(value):
        raise InvalidInputError(f"{name} must be finite, got {value}")
    return value


# --------------------------------------------------------------------------- #
#  Epoch conversions
# --------------------------------------------------------------------------- #
def unix_ms_to_jd(ms: float) -> float:
    """Convert milliseconds since the Unix epoch to Julian Date."""
    return ms / MS_PER_DAY + JD_UNIX_EPOCH


def jd_to_unix_ms(jd: float) -> int:
    """Convert Julian Date to whole milliseconds since the Unix epoch."""
    return round((require_finite(jd) - JD_UNIX_EPOCH) * MS_PER_DAY)


def datetime_to_jd(dt: datetime) -> float:
    """Convert a datetime to Julian Date at millisecond resolution.

    Naive datetimes are taken as UTC.
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return unix_ms_to_jd((dt - _UNIX_EPOCH) // _ONE_MS)


def jd_to_datetime(jd: float) -> datetime:
    """Convert Julian Date to an aware UTC datetime, rounded to the millisecond."""
    ms = jd_to_unix_ms(jd)
    try:
        return _UNIX_EPOCH + timedelta(milliseconds=ms)
    except OverflowError as e:
        raise InvalidInputError(f"JD {jd} is outside the representable calendar range") from e


def iso_to_jd(iso_str: str) -> float:
    """Convert an ISO-8601 date or datetime string to Julian Date."""
    try:
        dt = datetime.fromisoformat(iso_str)
    except (TypeError, ValueError) as e:
        raise InvalidInputError(
            f"Invalid ISO date: {iso_str!r}. Expected YYYY-MM-DD or YYYY-MM-DDTHH:MM:SS"
        ) from e
    return datetime_to_jd(dt)


def jd_to_iso(jd: float) -> str:
    """Convert Julian Date to an ISO-8601 UTC string."""
    return jd_to_datetime(jd).isoformat(timespec="milliseconds")


def safe_jd_to_iso(jd: float) -> str | None:
    """Like jd_to_iso, but None when jd has no calendar representation."""
    try:
        return jd_to_iso(jd)
    except InvalidInputError:
        return None


def centuries_since_j2000(jd: float) -> float:
    """Julian centuries elapsed since J2000.0 (negative before the epoch)."""
    return (jd - JD_J2000) / DAYS_PER_CENTURY


# --------------------------------------------------------------------------- #
#  Scene compression
# --------------------------------------------------------------------------- #
def compressed_radius(distance_au: float, padding: float, log_scale: float) -> float:
    return math.log10(distance_au + 1.0) * log_scale + padding


def compress_to_scene(
    position: Position3D,
    padding: float = 10.0,
    log_scale: float = 50.0,
) -> Position3D:
    """Rescale a heliocentric position so inner and outer planets share a scene.

    The direction is kept; the radius r (AU) becomes log10(r + 1) * log_scale + padding.
    The Sun's position (r = 0) is returned unchanged.
    """
    r = position.distance
    if r == 0.0:
        return position
    return position.scaled(compressed_radius(r, padding, log_scale) / r)


def compress_positions(
    positions: np.ndarray,
    padding: float = 10.0,
    log_scale: float = 50.0,
) -> np.ndarray:
    """Batch version of compress_to_scene for an (N, 3) array in AU."""
    positions = np.asarray(positions, dtype=np.float64)
    r = np.linalg.norm(positions, axis=-1, keepdims=True)
    scene_r = np.log10(r + 1.0) * log_scale + padding
    with np.errstate(divide="ignore", invalid="ignore"):
        factor = np.where(r > 0.0, scene_r / r, 1.0)
    return positions * factor
