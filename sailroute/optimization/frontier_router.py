"""
Time-dependent minimum-time router.

Breadth-wise frontier expansion over a grid whose wind and current change
every ``time_interval`` minutes.  Each iteration grows every unfinished
path by one cell into each admissible neighbour; the sea state used for a
step is the TimeSlice in force when the step begins.  The search stops as
soon as the fastest finished path is no slower than anything still on the
frontier, so the returned route is optimal over the paths explored.

Partial paths live in an arena of nodes (coordinate, duration, parent
index).  Branching a path appends one node; the coordinate sequence is only
rebuilt for the selected result.

Pruning modes:
    exact      keep every distinct partial path (combinatorial, small grids)
    dominance  keep, per (cell, time slice), only the fastest arrival.
               Optimal on time-invariant grids; when slices differ a slower
               arrival can reach a cheaper slice first, and that path is lost.
"""

import logging
import math
from typing import Callable, Dict, List, Optional, Tuple

from sailroute.config import PRUNING_MODES, settings
from sailroute.metrics import metrics, timed
from sailroute.optimization.environment import GridCoordinate, surround
from sailroute.optimization.routing_problem import RoutingProblem, TimedPath
from sailroute.optimization.sailing_polar import PolarSegmentTimer, SailingPolar, SurfaceParameters

logger = logging.getLogger(__name__)

# (surface at origin, origin (lat, lon), destination (lat, lon)) -> minutes
SegmentTimeFn = Callable[[SurfaceParameters, Tuple[float, float], Tuple[float, float]], float]

_NO_PARENT = -1


class _PathArena:
    """Append-only store of partial-path nodes."""

    def __init__(self):
        self.coords: List[GridCoordinate] = []
        self.durations: List[float] = []
        self.parents: List[int] = []

    def add(self, coord: GridCoordinate, duration: float, parent: int = _NO_PARENT) -> int:
        self.coords.append(coord)
        self.durations.append(duration)
        self.parents.append(parent)
        return len(self.coords) - 1

    def __len__(self):
        return len(self.coords)

    def visits(self, node: int, coord: GridCoordinate) -> bool:
        """True if the path ending at *node* already passes through *coord*."""
        while node != _NO_PARENT:
            if self.coords[node] == coord:
                return True
            node = self.parents[node]
        return False

    def depth(self, node: int) -> int:
        steps = 0
        while self.parents[node] != _NO_PARENT:
            node = self.parents[node]
            steps += 1
        return steps

    def to_timed_path(self, node: int) -> TimedPath:
        duration = self.durations[node]
        coords = []
        while node != _NO_PARENT:
            coords.append(self.coords[node])
            node = self.parents[node]
        coords.reverse()
        return TimedPath(duration=duration, path=tuple(coords))


class FrontierRouter:
    """
    Minimum-time router for a RoutingProblem.

    Args:
        segment_time: oracle giving the minutes to sail between two
            positions under the surface conditions at the origin.  Must be
            pure and return finite non-negative values.
        max_iterations: expansion rounds before giving up
        sentinel_duration: duration reported on the no-route result
        pruning: "exact" or "dominance"
    """

    def __init__(
        self,
        segment_time: SegmentTimeFn,
        max_iterations: int = 1000,
        sentinel_duration: float = 1000.0,
        pruning: str = "exact",
    ):
        if pruning not in PRUNING_MODES:
            raise ValueError(f"Unknown pruning mode '{pruning}', expected one of {PRUNING_MODES}")
        if max_iterations < 1:
            raise ValueError(f"max_iterations must be positive, got {max_iterations}")
        self.segment_time = segment_time
        self.max_iterations = max_iterations
        self.sentinel_duration = sentinel_duration
        self.pruning = pruning

    @timed("minimum_time_route")
    def route(self, problem: RoutingProblem) -> TimedPath:
        """
        Find the minimum-time path from problem.start to problem.finish.

        Returns the sentinel TimedPath (empty path) when no route is
        certified within max_iterations.  Coordinates the problem does not
        cover raise IndexError; call ``problem.validate()`` first for a
        descriptive error.
        """
        arena = _PathArena()
        frontier: List[int] = [arena.add(problem.start, 0.0)]
        finish = problem.finish
        completed = False

        # Oracle results are pure in (slice, origin, destination)
        segment_cache: Dict[Tuple[int, GridCoordinate, GridCoordinate], float] = {}
        best_arrival: Dict[Tuple[GridCoordinate, int], float] = {
            (problem.start, problem.slice_index(0.0)): 0.0,
        }
        peak = 1

        for iteration in range(1, self.max_iterations + 1):
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug(f"Checking {len(frontier)} paths of length {arena.depth(frontier[0])}")

            candidates: List[int] = []
            settled = set()
            expanded = 0
            for node in frontier:
                last = arena.coords[node]
                if last == finish:
                    completed = True
                    settled.add(node)
                    candidates.append(node)
                    continue

                expanded += 1
                duration = arena.durations[node]
                slice_idx = problem.slice_index(duration)
                grid = problem.timeframe[slice_idx]
                for nb in surround(last, grid, problem.obstacles):
                    if not problem.allow_repeat_visits and arena.visits(node, nb):
                        continue
                    key = (slice_idx, last, nb)
                    minutes = segment_cache.get(key)
                    if minutes is None:
                        minutes = self.segment_time(grid.surface(last), grid.position(last), grid.position(nb))
                        segment_cache[key] = minutes
                    candidates.append(arena.add(nb, duration + minutes, node))

            metrics.increment("frontier_paths_expanded", expanded)
            frontier = self._deduplicate(arena, candidates)
            if self.pruning == "dominance":
                frontier = self._prune_dominated(arena, problem, frontier, settled, best_arrival)

            peak = max(peak, len(frontier))
            if not frontier:
                logger.debug(f"Frontier exhausted after {iteration} iterations")
                break

            if completed:
                global_min = min(arena.durations[n] for n in frontier)
                best_finished = self._best_finished(arena, frontier, finish)
                finished_min = arena.durations[best_finished]
                logger.debug(f"Current finished minimum: {finished_min:.4f}, others {global_min:.4f}")
                if global_min == finished_min:
                    result = arena.to_timed_path(best_finished)
                    metrics.increment("routes_found")
                    metrics.max_gauge("frontier_peak_size", peak)
                    logger.info(
                        f"Route found in {iteration} iterations: {result.steps} steps, "
                        f"{result.duration:.2f} min ({len(arena)} nodes, peak frontier {peak})"
                    )
                    return result

        metrics.increment("routes_not_found")
        metrics.max_gauge("frontier_peak_size", peak)
        logger.warning(
            f"No route from {tuple(problem.start)} to {tuple(finish)} within "
            f"{self.max_iterations} iterations ({self.pruning} pruning)"
        )
        return TimedPath.sentinel(self.sentinel_duration)

    @staticmethod
    def _deduplicate(arena: _PathArena, nodes: List[int]) -> List[int]:
        # Parents are unique, so (duration, parent, coord) identifies the whole path
        seen = set()
        unique = []
        for n in nodes:
            key = (arena.durations[n], arena.parents[n], arena.coords[n])
            if key in seen:
                continue
            seen.add(key)
            unique.append(n)
        return unique

    @staticmethod
    def _prune_dominated(
        arena: _PathArena,
        problem: RoutingProblem,
        nodes: List[int],
        settled: set,
        best_arrival: Dict[Tuple[GridCoordinate, int], float],
    ) -> List[int]:
        """
        Keep settled paths, and per (cell, slice) the first candidate with
        the fastest arrival, provided no earlier round arrived sooner.
        """
        round_best: Dict[Tuple[GridCoordinate, int], float] = {}
        keys: Dict[int, Tuple[GridCoordinate, int]] = {}
        for n in nodes:
            if n in settled:
                continue
            d = arena.durations[n]
            key = (arena.coords[n], problem.slice_index(d))
            keys[n] = key
            if d < round_best.get(key, math.inf):
                round_best[key] = d

        kept = []
        claimed = set()
        for n in nodes:
            if n in settled:
                kept.append(n)
                continue
            key = keys[n]
            d = arena.durations[n]
            if d != round_best[key] or key in claimed:
                continue
            if d >= best_arrival.get(key, math.inf):
                continue
            claimed.add(key)
            best_arrival[key] = d
            kept.append(n)
        return kept

    @staticmethod
    def _best_finished(arena: _PathArena, nodes: List[int], finish: GridCoordinate) -> int:
        best = None
        for n in nodes:
            if arena.coords[n] == finish and (best is None or arena.durations[n] < arena.durations[best]):
                best = n
        return best

    def __repr__(self):
        return (f"FrontierRouter(segment_time={self.segment_time!r}, "
                f"max_iterations={self.max_iterations}, pruning='{self.pruning}')")


def minimum_time_route(
    problem: RoutingProblem,
    polar: SailingPolar,
    max_iterations: Optional[int] = None,
    pruning: Optional[str] = None,
) -> TimedPath:
    """
    Route that minimises time from start to finish for *problem* sailed
    with *polar*.  Unset options come from ``sailroute.config.settings``.
    """
    router = FrontierRouter(
        PolarSegmentTimer(polar),
        max_iterations=max_iterations if max_iterations is not None else settings.max_iterations,
        sentinel_duration=settings.sentinel_duration_min,
        pruning=pruning if pruning is not None else settings.pruning,
    )
    return router.route(problem)
