"""
pytest configuration and shared fixtures for Orrery tests.
"""

import pytest
from fastapi.testclient import TestClient

from ephemeris.bodies import ALL_BODIES, BodyElements, SecularElement
from ephemeris.keplerian import KeplerianEphemeris


# ============================================================================
# TEST DATA FIXTURES
# ============================================================================


@pytest.fixture
def j2000_jd():
    """J2000.0 reference epoch."""
    return 2451545.0  # 2000-01-01 12:00:00


@pytest.fixture
def test_epochs():
    """Julian Dates spanning the element table's validity window."""
    return [
        (2378496.5, "1800-01-01"),
        (2433282.5, "1950-01-01"),
        (2451545.0, "J2000"),
        (2460676.5, "2025-01-01"),
        (2469807.5, "2050-01-01"),
    ]


@pytest.fixture
def all_bodies():
    return list(ALL_BODIES)


@pytest.fixture
def ephemeris():
    """Fresh ephemeris with default solver settings."""
    return KeplerianEphemeris(tolerance=1e-6, max_iterations=50, cache_size=8)


@pytest.fixture
def circular_elements():
    """A circular, inclined orbit at 2 AU with no secular drift."""
    return BodyElements(
        a=SecularElement(2.0, 0.0),
        e=SecularElement(0.0, 0.0),
        I=SecularElement(10.0, 0.0),
        L=SecularElement(40.0, 3600.0),
        varpi=SecularElement(70.0, 0.0),
        Omega=SecularElement(30.0, 0.0),
    )


# ============================================================================
# API CLIENT
# ============================================================================


@pytest.fixture(scope="module")
def client():
    """TestClient with the application lifespan running."""
    from main import app

    with TestClient(app) as c:
        yield c
