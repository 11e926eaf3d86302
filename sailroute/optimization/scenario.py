"""
Scenario construction.

Helpers to assemble timeframes and the bundled reference scenario: a 9x9
grid off the Kona coast of Hawaii with a wind shadow to the west, 28 land
and reef cells, and wind that slowly freshens over the crossing.
"""

import logging
from typing import Callable, List, Optional, Sequence, Tuple

import numpy as np

from sailroute.optimization.environment import (
    GridCoordinate,
    Position,
    TimeSlice,
    build_time_slice,
)
from sailroute.optimization.routing_problem import RoutingProblem
from sailroute.optimization.sailing_polar import SurfaceParameters

logger = logging.getLogger(__name__)

# Reference grid: one arc-minute spacing
REFERENCE_SHAPE = (9, 9)
REFERENCE_LAT_ORIGIN = 19.78 - 1.0 / 60.0
REFERENCE_LON_ORIGIN = -155.0 - 5.0 / 60.0
REFERENCE_SPACING_DEG = 1.0 / 60.0
REFERENCE_TIME_INTERVAL_MIN = 10.0
REFERENCE_START = GridCoordinate(0, 3)
REFERENCE_FINISH = GridCoordinate(8, 3)

# Longitude east of which the trade wind is not blocked by land
WIND_SHADOW_LON = -155.03

# Land and reef cells, zero-based (row, col)
REFERENCE_OBSTACLES: Tuple[GridCoordinate, ...] = tuple(
    GridCoordinate(r - 1, c - 1) for r, c in (
        (1, 8), (2, 1), (2, 8), (3, 5), (3, 8), (4, 1), (4, 5), (4, 6), (4, 8),
        (5, 1), (5, 5), (5, 6), (5, 8), (6, 3), (6, 4), (6, 5), (6, 6), (6, 8),
        (6, 9), (7, 1), (7, 4), (7, 5), (7, 6), (8, 8), (8, 9), (9, 1), (9, 7),
        (9, 9),
    )
)


def reference_surface(position: Position) -> SurfaceParameters:
    """Sea state at *position* at the start of the reference crossing."""
    if position.lon < WIND_SHADOW_LON:
        return SurfaceParameters(wind_deg=-5.0, wind_kts=8.0, current_deg=150.0, current_kts=0.5)
    return SurfaceParameters(wind_deg=180.0, wind_kts=25.0, current_deg=150.0, current_kts=0.3)


def reference_wind_factor(k: int) -> float:
    return 1.0 + 0.002 * k


def reference_positions() -> Tuple[np.ndarray, np.ndarray]:
    """Latitude and longitude arrays of the reference grid (row = latitude)."""
    rows, cols = REFERENCE_SHAPE
    lat_1d = REFERENCE_LAT_ORIGIN + REFERENCE_SPACING_DEG * np.arange(rows)
    lon_1d = REFERENCE_LON_ORIGIN + REFERENCE_SPACING_DEG * np.arange(cols)
    return np.meshgrid(lat_1d, lon_1d, indexing="ij")


def build_timeframe(
    base: TimeSlice,
    count: int,
    wind_factor: Callable[[int], float],
) -> List[TimeSlice]:
    """
    *count* snapshots of *base* with wind speed scaled by ``wind_factor(k)``
    for k = 1..count.  *base* itself is left untouched.
    """
    if count < 1:
        raise ValueError(f"Timeframe needs at least one slice, got {count}")
    return [base.with_surface(wind_kts=base.wind_kts * wind_factor(k)) for k in range(1, count + 1)]


def build_problem(
    timeframe: Sequence[TimeSlice],
    start: Tuple[int, int],
    finish: Tuple[int, int],
    obstacles: Sequence[Tuple[int, int]] = (),
    time_interval: float = REFERENCE_TIME_INTERVAL_MIN,
    allow_repeat_visits: bool = False,
    start_index: int = 0,
) -> RoutingProblem:
    """Assemble and validate a RoutingProblem."""
    problem = RoutingProblem(
        time_interval=time_interval,
        timeframe=tuple(timeframe),
        obstacles=frozenset(obstacles),
        start_index=start_index,
        start=start,
        finish=finish,
        allow_repeat_visits=allow_repeat_visits,
    )
    return problem.validate()


def build_reference_problem(slices: int = 200, allow_repeat_visits: bool = False,
                            obstacles: Optional[Sequence[Tuple[int, int]]] = None,
                            time_interval: float = REFERENCE_TIME_INTERVAL_MIN) -> RoutingProblem:
    """
    The reference crossing: start (0, 3) to finish (8, 3) on the 9x9 grid,
    ten-minute slices by default, wind freshening by 0.2% per slice.
    """
    lats, lons = reference_positions()
    base = build_time_slice(lats, lons, reference_surface)
    timeframe = build_timeframe(base, slices, reference_wind_factor)
    logger.debug(f"Reference scenario: {slices} slices of {time_interval:g} min")
    return build_problem(
        timeframe,
        start=REFERENCE_START,
        finish=REFERENCE_FINISH,
        obstacles=REFERENCE_OBSTACLES if obstacles is None else obstacles,
        time_interval=time_interval,
        allow_repeat_visits=allow_repeat_visits,
    )
