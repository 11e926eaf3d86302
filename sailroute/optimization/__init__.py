"""Routing engine, environment model and vessel performance."""

from .environment import (
    GridCoordinate,
    GridPoint,
    Position,
    TimeSlice,
    build_time_slice,
    closest_point,
    surround,
    uniform_grid,
)
from .frontier_router import FrontierRouter, minimum_time_route
from .routing_problem import RoutingProblem, RoutingProblemError, TimedPath
from .sailing_polar import (
    PolarDataError,
    PolarSegmentTimer,
    SailingPolar,
    SurfaceParameters,
    load_polar,
    sail_segment_time,
)

__all__ = [
    "GridCoordinate",
    "GridPoint",
    "Position",
    "TimeSlice",
    "build_time_slice",
    "closest_point",
    "surround",
    "uniform_grid",
    "FrontierRouter",
    "minimum_time_route",
    "RoutingProblem",
    "RoutingProblemError",
    "TimedPath",
    "PolarDataError",
    "PolarSegmentTimer",
    "SailingPolar",
    "SurfaceParameters",
    "load_polar",
    "sail_segment_time",
]
