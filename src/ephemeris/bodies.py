"""Planet catalog with mean Keplerian elements and secular rates.

Elements and rates per Julian century are from JPL Table 1,
"Keplerian Elements for Approximate Positions of the Major Planets"
(E.M. Standish, valid 1800 AD - 2050 AD), referred to the mean ecliptic
and equinox of J2000.0.  Earth's entry is the Earth-Moon barycenter.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping


class UnknownBodyError(ValueError):
    """Raised when a body name is not part of the planet catalog."""

    def __init__(self, name: object):
        self.name = name
        super().__init__(
            f"Unknown body: {name!r}. Expected one of: "
            + ", ".join(b.value for b in Body)
        )


class Body(Enum):
    MERCURY = "mercury"
    VENUS = "venus"
    EARTH = "earth"
    MARS = "mars"
    JUPITER = "jupiter"
    SATURN = "saturn"
    URANUS = "uranus"
    NEPTUNE = "neptune"

    @property
    def title(self) -> str:
        return self.value.capitalize()


@dataclass(frozen=True, slots=True)
class SecularElement:
    """An orbital element as value at J2000.0 plus a linear rate per century."""

    value: float
    rate: float  # per Julian century

    def at(self, T: float) -> float:
        return self.value + self.rate * T


@dataclass(frozen=True, slots=True)
class BodyElements:
    a: SecularElement  # semi-major axis, AU
    e: SecularElement  # eccentricity
    I: SecularElement  # inclination, deg
    L: SecularElement  # mean longitude, deg
    varpi: SecularElement  # longitude of perihelion, deg
    Omega: SecularElement  # longitude of the ascending node, deg


@dataclass(frozen=True, slots=True)
class BodyDisplay:
    color: str  # hint for frontend
    size: float  # relative sphere size


def _elements(a, e, I, L, varpi, Omega) -> BodyElements:
    return BodyElements(
        a=SecularElement(*a),
        e=SecularElement(*e),
        I=SecularElement(*I),
        L=SecularElement(*L),
        varpi=SecularElement(*varpi),
        Omega=SecularElement(*Omega),
    )


# --------------------------------------------------------------------------- #
#  Element table  (value at J2000.0, rate per century)
# --------------------------------------------------------------------------- #
ELEMENTS: Mapping[Body, BodyElements] = MappingProxyType({
    Body.MERCURY: _elements(
        a=(0.38709927, 0.00000037),
        e=(0.20563593, 0.00001906),
        I=(7.00497902, -0.00594749),
        L=(252.25032350, 149472.67411175),
        varpi=(77.45779628, 0.16047689),
        Omega=(48.33076593, -0.12534081),
    ),
    Body.VENUS: _elements(
        a=(0.72333566, 0.00000390),
        e=(0.00677672, -0.00004107),
        I=(3.39467605, -0.00078890),
        L=(181.97909950, 58517.81538729),
        varpi=(131.60246718, 0.00268329),
        Omega=(76.67984255, -0.27769418),
    ),
    Body.EARTH: _elements(
        a=(1.00000261, 0.00000562),
        e=(0.01671123, -0.00004392),
        I=(-0.00001531, -0.01294668),
        L=(100.46457166, 35999.37244981),
        varpi=(102.93768193, 0.32327364),
        Omega=(0.0, 0.0),
    ),
    Body.MARS: _elements(
        a=(1.52371034, 0.00001847),
        e=(0.09339410, 0.00007882),
        I=(1.84969142, -0.00813131),
        L=(-4.55343205, 19140.30268499),
        varpi=(-23.94362959, 0.44441088),
        Omega=(49.55953891, -0.29257343),
    ),
    Body.JUPITER: _elements(
        a=(5.20288700, -0.00011607),
        e=(0.04838624, -0.00013253),
        I=(1.30439695, -0.00183714),
        L=(34.39644051, 3034.74612775),
        varpi=(14.72847983, 0.21252668),
        Omega=(100.47390909, 0.20469106),
    ),
    Body.SATURN: _elements(
        a=(9.53667594, -0.00125060),
        e=(0.05386179, -0.00050991),
        I=(2.48599187, 0.00193609),
        L=(49.95424423, 1222.49362201),
        varpi=(92.59887831, -0.41897216),
        Omega=(113.66242448, -0.28867794),
    ),
    Body.URANUS: _elements(
        a=(19.18916464, -0.00196176),
        e=(0.04725744, -0.00004397),
        I=(0.77263783, -0.00242939),
        L=(313.23810451, 428.48202785),
        varpi=(170.95427630, 0.40805281),
        Omega=(74.01692503, 0.04240589),
    ),
    Body.NEPTUNE: _elements(
        a=(30.06992276, 0.00026291),
        e=(0.00859048, 0.00005105),
        I=(1.77004347, 0.00035372),
        L=(-55.12002969, 218.45945325),
        varpi=(44.96476227, -0.32241464),
        Omega=(131.78422574, -0.00508664),
    ),
})

# --------------------------------------------------------------------------- #
#  Display hints
# --------------------------------------------------------------------------- #
DISPLAY: Mapping[Body, BodyDisplay] = MappingProxyType({
    Body.MERCURY: BodyDisplay(color="white", size=0.5),
    Body.VENUS: BodyDisplay(color="pink", size=0.8),
    Body.EARTH: BodyDisplay(color="blue", size=0.9),
    Body.MARS: BodyDisplay(color="red", size=0.6),
    Body.JUPITER: BodyDisplay(color="purple", size=1.8),
    Body.SATURN: BodyDisplay(color="khaki", size=1.5),
    Body.URANUS: BodyDisplay(color="orange", size=1.2),
    Body.NEPTUNE: BodyDisplay(color="lightblue", size=1.1),
})

# --------------------------------------------------------------------------- #
#  Lookup
# --------------------------------------------------------------------------- #
ALL_BODIES: tuple[Body, ...] = tuple(Body)

BODY_BY_NAME: Mapping[str, Body] = MappingProxyType({b.value: b for b in Body})


def resolve_body(identifier: str | Body) -> Body:
    """Resolve a body from an enum member or a case-insensitive name."""
    if isinstance(identifier, Body):
        return identifier
    if isinstance(identifier, str):
        body = BODY_BY_NAME.get(identifier.strip().lower())
        if body is not None:
            return body
    raise UnknownBodyError(identifier)
