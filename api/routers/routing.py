"""
Minimum-time routing API router.

Handles minimum-time searches over caller-supplied grids, the bundled
reference crossing, and vessel polar queries.
"""

import asyncio
import logging
import math
import time as _time
from functools import lru_cache

from fastapi import APIRouter, HTTPException

from api.config import settings as api_settings
from api.schemas import (
    GridCellModel,
    MinimumTimeRequest,
    MinimumTimeResponse,
    PolarSummaryResponse,
    Position,
    ReferenceRouteRequest,
)
from sailroute.config import settings
from sailroute.optimization.environment import TimeSlice, closest_point, uniform_grid
from sailroute.optimization.frontier_router import minimum_time_route
from sailroute.optimization.routing_problem import RoutingProblem, RoutingProblemError, TimedPath
from sailroute.optimization.sailing_polar import PolarDataError, SailingPolar, load_polar
from sailroute.optimization.scenario import build_problem, build_reference_problem

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Routing"])


def _safe_round(value: float, ndigits: int = 4, fallback: float = 0.0) -> float:
    """Round value, replacing NaN/Inf with fallback to prevent JSON serialization errors."""
    if math.isnan(value) or math.isinf(value):
        return fallback
    return round(value, ndigits)


@lru_cache(maxsize=1)
def get_polar() -> SailingPolar:
    """Polar table configured by SAILROUTE_POLAR_PATH, loaded once."""
    return load_polar(settings.polar_path)


def _invalid_problem(e: Exception) -> HTTPException:
    return HTTPException(status_code=422, detail={
        "error": "routing_problem_invalid",
        "message": str(e),
    })


def _build_request_problem(request: MinimumTimeRequest) -> RoutingProblem:
    grid = request.grid
    if grid.rows * grid.cols > api_settings.max_grid_cells:
        raise RoutingProblemError(
            f"Grid of {grid.rows}x{grid.cols} cells exceeds the limit of {api_settings.max_grid_cells}"
        )
    if len(request.slices) > api_settings.max_time_slices:
        raise RoutingProblemError(
            f"{len(request.slices)} time slices exceed the limit of {api_settings.max_time_slices}"
        )

    lats, lons = uniform_grid(grid.lat_origin, grid.lon_origin, grid.spacing_deg, grid.rows, grid.cols)
    timeframe = []
    for i, s in enumerate(request.slices):
        try:
            timeframe.append(TimeSlice(lats, lons, s.wind_deg, s.wind_kts, s.current_deg, s.current_kts))
        except ValueError as e:
            raise RoutingProblemError(f"Slice {i}: {e}") from e

    start = closest_point((request.start.lat, request.start.lon), timeframe[0])
    finish = closest_point((request.finish.lat, request.finish.lon), timeframe[0])
    logger.info(f"Mapped start {request.start.lat:.4f},{request.start.lon:.4f} -> {tuple(start)}, "
                f"finish {request.finish.lat:.4f},{request.finish.lon:.4f} -> {tuple(finish)}")

    return build_problem(
        timeframe,
        start=start,
        finish=finish,
        obstacles=[(o.row, o.col) for o in request.obstacles],
        time_interval=request.time_interval_min,
        allow_repeat_visits=request.allow_repeat_visits,
    )


def _to_response(
    result: TimedPath,
    problem: RoutingProblem,
    pruning: str,
    elapsed_ms: float,
) -> MinimumTimeResponse:
    grid = problem.timeframe[0]
    positions = []
    for coord in result.path:
        pos = grid.position(coord)
        positions.append(Position(lat=round(pos.lat, 6), lon=round(pos.lon, 6)))

    return MinimumTimeResponse(
        found=result.found,
        duration_min=_safe_round(result.duration),
        steps=result.steps,
        start_cell=GridCellModel(row=problem.start.row, col=problem.start.col),
        finish_cell=GridCellModel(row=problem.finish.row, col=problem.finish.col),
        path=[GridCellModel(row=c.row, col=c.col) for c in result.path],
        positions=positions,
        pruning=pruning,
        calculation_time_ms=_safe_round(elapsed_ms, 1),
    )


def _solve(problem: RoutingProblem, pruning: str, max_iterations) -> MinimumTimeResponse:
    t0 = _time.perf_counter()
    result = minimum_time_route(problem, get_polar(), max_iterations=max_iterations, pruning=pruning)
    elapsed_ms = (_time.perf_counter() - t0) * 1000
    if not result.found:
        logger.warning(f"No route from {tuple(problem.start)} to {tuple(problem.finish)} "
                       f"({pruning} pruning, {elapsed_ms:.0f}ms)")
    return _to_response(result, problem, pruning, elapsed_ms)


def _minimum_time_sync(request: MinimumTimeRequest) -> MinimumTimeResponse:
    pruning = request.pruning or api_settings.default_pruning
    try:
        problem = _build_request_problem(request)
        return _solve(problem, pruning, request.max_iterations)
    except RoutingProblemError as e:
        raise _invalid_problem(e)
    except PolarDataError as e:
        logger.error(f"Polar table unavailable: {e}")
        raise HTTPException(status_code=500, detail=f"Polar table unavailable: {str(e)}")
    except Exception as e:
        logger.error(f"Minimum-time routing failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Routing failed: {str(e)}")


def _reference_sync(request: ReferenceRouteRequest) -> MinimumTimeResponse:
    pruning = request.pruning or api_settings.default_pruning
    try:
        problem = build_reference_problem(slices=request.slices)
        return _solve(problem, pruning, request.max_iterations)
    except PolarDataError as e:
        logger.error(f"Polar table unavailable: {e}")
        raise HTTPException(status_code=500, detail=f"Polar table unavailable: {str(e)}")
    except Exception as e:
        logger.error(f"Reference routing failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Routing failed: {str(e)}")


@router.post("/api/routing/minimum-time", response_model=MinimumTimeResponse)
async def route_minimum_time(request: MinimumTimeRequest):
    """
    Find the minimum-time route across a time-varying grid.

    Start and finish positions are snapped to the nearest grid point.
    Each slice holds the wind and current for ``time_interval_min``
    minutes; slices repeat cyclically when the crossing outlasts them.

    Pruning:
    - **exact** (default): every distinct partial path, certified minimum time
    - **dominance**: fastest arrival per cell and slice, scales to larger grids.
      Matches exact on time-invariant grids; when slices differ it can return
      a slower route.
    """
    # Searches can take seconds; keep the event loop responsive.
    return await asyncio.to_thread(_minimum_time_sync, request)


@router.post("/api/routing/reference", response_model=MinimumTimeResponse)
async def route_reference(request: ReferenceRouteRequest = None):
    """Solve the bundled reference crossing (9x9 grid off Kona, Hawaii)."""
    return await asyncio.to_thread(_reference_sync, request or ReferenceRouteRequest())


@router.get("/api/routing/polar", response_model=PolarSummaryResponse)
async def get_polar_summary():
    """Get the vessel polar table used for routing."""
    try:
        polar = get_polar()
    except PolarDataError as e:
        raise HTTPException(status_code=500, detail=f"Polar table unavailable: {str(e)}")

    summary = polar.summary()
    summary["speeds"] = {
        f"{angle:g}": [round(float(v), 3) for v in row]
        for angle, row in zip(polar.angles, polar.speeds)
    }
    return PolarSummaryResponse(**summary)
