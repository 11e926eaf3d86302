"""
Shared pytest fixtures for SAILROUTE tests.

Grids here are small and oracles are simple so that exact searches stay
cheap; the reference crossing is exercised in tests/integration.
"""

import os
import sys
from pathlib import Path

import numpy as np
import pytest

# ---------------------------------------------------------------------------
# Section 1: Environment setup (before ANY sailroute / api imports)
# ---------------------------------------------------------------------------
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("LOG_LEVEL", "WARNING")

sys.path.insert(0, str(Path(__file__).parent.parent))

from sailroute.optimization.environment import TimeSlice, uniform_grid  # noqa: E402
from sailroute.optimization.routing_problem import RoutingProblem  # noqa: E402
from sailroute.optimization.sailing_polar import load_polar  # noqa: E402
from sailroute.config import DEFAULT_POLAR_PATH  # noqa: E402


# ---------------------------------------------------------------------------
# Section 2: Grid and problem helpers
# ---------------------------------------------------------------------------


def _make_slice(
    rows,
    cols,
    wind_deg=0.0,
    wind_kts=10.0,
    current_deg=0.0,
    current_kts=0.0,
    lat_origin=20.0,
    lon_origin=-155.0,
    spacing_deg=1.0 / 60.0,
):
    """Uniform sea state over a rows x cols arc-minute grid."""
    lats, lons = uniform_grid(lat_origin, lon_origin, spacing_deg, rows, cols)
    shape = (rows, cols)
    return TimeSlice(
        lats,
        lons,
        np.full(shape, wind_deg),
        np.full(shape, wind_kts),
        np.full(shape, current_deg),
        np.full(shape, current_kts),
    )


def _make_problem(
    timeframe,
    start,
    finish,
    obstacles=(),
    time_interval=10.0,
    allow_repeat_visits=False,
    start_index=0,
):
    if isinstance(timeframe, TimeSlice):
        timeframe = [timeframe]
    return RoutingProblem(
        time_interval=time_interval,
        timeframe=tuple(timeframe),
        obstacles=frozenset(obstacles),
        start_index=start_index,
        start=start,
        finish=finish,
        allow_repeat_visits=allow_repeat_visits,
    )


# ---------------------------------------------------------------------------
# Section 3: Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def polar():
    """The bundled keelboat polar."""
    return load_polar(DEFAULT_POLAR_PATH)


@pytest.fixture
def open_grid():
    """4x4 grid with a steady 12 kt southerly."""
    return _make_slice(4, 4, wind_deg=180.0, wind_kts=12.0)


@pytest.fixture
def client():
    """FastAPI TestClient for the SAILROUTE API."""
    from fastapi.testclient import TestClient

    from api.main import app

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_slice():
    """Factory for uniform TimeSlices (see _make_slice)."""
    return _make_slice


@pytest.fixture
def make_problem():
    """Factory for RoutingProblems; accepts a single TimeSlice or a sequence."""
    return _make_problem
