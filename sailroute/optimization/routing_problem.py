"""
Routing problem definition and search result types.
"""

import logging
from dataclasses import dataclass, field
from typing import FrozenSet, Tuple

from sailroute.optimization.environment import GridCoordinate, TimeSlice

logger = logging.getLogger(__name__)


class RoutingProblemError(ValueError):
    """A RoutingProblem violates the contract the router relies on."""


@dataclass(frozen=True)
class RoutingProblem:
    """
    One fixed routing instance.

    time_interval: minutes each TimeSlice is valid for
    timeframe: sequential TimeSlices for the ocean region, replayed
        cyclically once elapsed time runs past their span
    obstacles: grid coordinates (land, shoals) the vessel may not enter,
        identical in every slice
    start_index: timeframe position at departure.  Stored only; slice
        selection does not offset by it.
    start: departure cell
    finish: destination cell
    allow_repeat_visits: whether a path may re-enter a cell it already
        visited, usually False
    """
    time_interval: float
    timeframe: Tuple[TimeSlice, ...]
    obstacles: FrozenSet[GridCoordinate]
    start_index: int
    start: GridCoordinate
    finish: GridCoordinate
    allow_repeat_visits: bool = False

    def __post_init__(self):
        # Normalise caller-supplied containers into immutable, hashable forms
        object.__setattr__(self, "timeframe", tuple(self.timeframe))
        object.__setattr__(self, "obstacles", frozenset(GridCoordinate(*o) for o in self.obstacles))
        object.__setattr__(self, "start", GridCoordinate(*self.start))
        object.__setattr__(self, "finish", GridCoordinate(*self.finish))

    def slice_index(self, duration: float) -> int:
        """Index of the TimeSlice in force after *duration* minutes."""
        return (int(round(duration)) // int(round(self.time_interval))) % len(self.timeframe)

    def active_slice(self, duration: float) -> TimeSlice:
        return self.timeframe[self.slice_index(duration)]

    @property
    def shape(self) -> Tuple[int, int]:
        return self.timeframe[0].shape

    def validate(self) -> "RoutingProblem":
        """
        Check the invariants the router assumes without checking.

        Raises:
            RoutingProblemError: describing the first violation found.
        """
        if not self.timeframe:
            raise RoutingProblemError("timeframe must contain at least one TimeSlice")
        if int(round(self.time_interval)) <= 0:
            raise RoutingProblemError(
                f"time_interval must round to a positive number of minutes, got {self.time_interval}"
            )

        shape = self.timeframe[0].shape
        for i, ts in enumerate(self.timeframe):
            if ts.shape != shape:
                raise RoutingProblemError(
                    f"TimeSlice {i} has shape {ts.shape}, expected {shape} like slice 0"
                )

        grid = self.timeframe[0]
        for label, coord in (("start", self.start), ("finish", self.finish)):
            if not grid.in_bounds(coord):
                raise RoutingProblemError(f"{label} {tuple(coord)} is outside the {shape[0]}x{shape[1]} grid")
            if coord in self.obstacles:
                raise RoutingProblemError(f"{label} {tuple(coord)} lies on an obstacle")

        if not 0 <= self.start_index < len(self.timeframe):
            raise RoutingProblemError(
                f"start_index {self.start_index} outside timeframe of {len(self.timeframe)} slices"
            )

        outside = [tuple(o) for o in self.obstacles if not grid.in_bounds(o)]
        if outside:
            logger.warning(f"{len(outside)} obstacle(s) outside the grid are ignored: {sorted(outside)[:5]}")
        return self


@dataclass(frozen=True)
class TimedPath:
    """
    duration: minutes total to travel the path
    path: grid coordinates visited, starting at the departure cell
    """
    duration: float
    path: Tuple[GridCoordinate, ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, "path", tuple(GridCoordinate(*p) for p in self.path))

    @classmethod
    def sentinel(cls, duration: float = 1000.0) -> "TimedPath":
        """Result returned when no route was certified within the iteration budget."""
        return cls(duration=duration, path=())

    @property
    def found(self) -> bool:
        return len(self.path) > 0

    @property
    def steps(self) -> int:
        return max(len(self.path) - 1, 0)
