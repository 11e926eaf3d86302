"""
Spatiotemporal environment model for the router.

A ``TimeSlice`` is one snapshot of the sea surface over a fixed
rows x cols grid.  A sequence of slices, each valid for a fixed number of
minutes, describes how wind and current evolve over the crossing.

NB: positions are latitude first, then longitude (ISO 6709).  Grid
coordinates are zero-based (row, col) indices and are distinct from
geodesic positions.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, List, NamedTuple, Optional, Tuple, Union

import numpy as np

from sailroute.optimization.sailing_polar import SurfaceParameters
from sailroute.routes.geodesy import haversine_distance_array

logger = logging.getLogger(__name__)


class Position(NamedTuple):
    """Latitude and longitude in degrees."""
    lat: float
    lon: float


class GridCoordinate(NamedTuple):
    """Zero-based (row, col) index into a TimeSlice."""
    row: int
    col: int


@dataclass(frozen=True)
class GridPoint:
    """A Position with the wind and current at that Position."""
    position: Position
    surface: SurfaceParameters


def _frozen(values, dtype=np.float32) -> np.ndarray:
    arr = np.array(values, dtype=dtype)
    arr.setflags(write=False)
    return arr


class TimeSlice:
    """
    Sea surface over the routing grid at one instant.

    Storage is column-per-field: six read-only float32 arrays of identical
    shape.  Indexing with a GridCoordinate returns the GridPoint at that
    cell; coordinates outside the grid raise IndexError.
    """

    FIELDS = ("lats", "lons", "wind_deg", "wind_kts", "current_deg", "current_kts")

    def __init__(
        self,
        lats,
        lons,
        wind_deg,
        wind_kts,
        current_deg,
        current_kts,
    ):
        self.lats = _frozen(lats)
        self.lons = _frozen(lons)
        self.wind_deg = _frozen(wind_deg)
        self.wind_kts = _frozen(wind_kts)
        self.current_deg = _frozen(current_deg)
        self.current_kts = _frozen(current_kts)

        shape = self.lats.shape
        if len(shape) != 2:
            raise ValueError(f"TimeSlice arrays must be 2-D, got shape {shape}")
        for name in self.FIELDS[1:]:
            if getattr(self, name).shape != shape:
                raise ValueError(
                    f"TimeSlice field '{name}' has shape {getattr(self, name).shape}, expected {shape}"
                )

    @classmethod
    def from_grid_points(cls, points: Iterable[Iterable[GridPoint]]) -> "TimeSlice":
        """Build a slice from a row-major nested iterable of GridPoints."""
        rows: List[List[GridPoint]] = [list(row) for row in points]
        return cls(
            lats=[[gp.position.lat for gp in row] for row in rows],
            lons=[[gp.position.lon for gp in row] for row in rows],
            wind_deg=[[gp.surface.wind_deg for gp in row] for row in rows],
            wind_kts=[[gp.surface.wind_kts for gp in row] for row in rows],
            current_deg=[[gp.surface.current_deg for gp in row] for row in rows],
            current_kts=[[gp.surface.current_kts for gp in row] for row in rows],
        )

    def with_surface(
        self,
        wind_deg=None,
        wind_kts=None,
        current_deg=None,
        current_kts=None,
    ) -> "TimeSlice":
        """Copy of this slice on the same grid with some surface fields replaced."""
        return TimeSlice(
            lats=self.lats,
            lons=self.lons,
            wind_deg=self.wind_deg if wind_deg is None else wind_deg,
            wind_kts=self.wind_kts if wind_kts is None else wind_kts,
            current_deg=self.current_deg if current_deg is None else current_deg,
            current_kts=self.current_kts if current_kts is None else current_kts,
        )

    @property
    def shape(self) -> Tuple[int, int]:
        return self.lats.shape

    @property
    def rows(self) -> int:
        return self.lats.shape[0]

    @property
    def cols(self) -> int:
        return self.lats.shape[1]

    def in_bounds(self, coord: Tuple[int, int]) -> bool:
        return 0 <= coord[0] < self.rows and 0 <= coord[1] < self.cols

    def position(self, coord: Tuple[int, int]) -> Position:
        if not self.in_bounds(coord):
            raise IndexError(f"Grid coordinate {tuple(coord)} outside {self.rows}x{self.cols} slice")
        r, c = coord
        return Position(float(self.lats[r, c]), float(self.lons[r, c]))

    def surface(self, coord: Tuple[int, int]) -> SurfaceParameters:
        if not self.in_bounds(coord):
            raise IndexError(f"Grid coordinate {tuple(coord)} outside {self.rows}x{self.cols} slice")
        r, c = coord
        return SurfaceParameters(
            wind_deg=float(self.wind_deg[r, c]),
            wind_kts=float(self.wind_kts[r, c]),
            current_deg=float(self.current_deg[r, c]),
            current_kts=float(self.current_kts[r, c]),
        )

    def __getitem__(self, coord: Tuple[int, int]) -> GridPoint:
        return GridPoint(position=self.position(coord), surface=self.surface(coord))

    def __repr__(self):
        return f"TimeSlice({self.rows}x{self.cols})"


# Moore neighbourhood, in the order neighbours are expanded
NEIGHBOR_OFFSETS = (
    (-1, -1), (-1, 0), (-1, 1),
    (0, -1), (0, 1),
    (1, -1), (1, 0), (1, 1),
)


def surround(
    coord: Tuple[int, int],
    grid: TimeSlice,
    excluded: Optional[Union[set, frozenset]] = None,
) -> List[GridCoordinate]:
    """
    In-bounds 8-neighbours of *coord* that are not in *excluded*.

    Order is fixed (NEIGHBOR_OFFSETS) so that the search is deterministic.
    """
    excluded = excluded or frozenset()
    row, col = coord
    neighbors = []
    for d_row, d_col in NEIGHBOR_OFFSETS:
        nb = GridCoordinate(row + d_row, col + d_col)
        if grid.in_bounds(nb) and nb not in excluded:
            neighbors.append(nb)
    return neighbors


def closest_point(position: Tuple[float, float], grid: TimeSlice) -> GridCoordinate:
    """
    Grid coordinate whose GridPoint is nearest (great circle) to *position*.

    Exhaustive scan; ties resolve to the first minimum in row-major order.
    """
    lat, lon = position
    distances = haversine_distance_array(lat, lon, grid.lats, grid.lons)
    r, c = np.unravel_index(int(np.argmin(distances)), distances.shape)
    return GridCoordinate(int(r), int(c))


def build_time_slice(
    lats,
    lons,
    surface_fn: Callable[[Position], SurfaceParameters],
) -> TimeSlice:
    """
    Build a TimeSlice from 2-D position arrays and a per-position surface function.

    *surface_fn* receives each Position (as stored, float32 precision).
    """
    lats = np.asarray(lats, dtype=np.float32)
    lons = np.asarray(lons, dtype=np.float32)
    if lats.shape != lons.shape or lats.ndim != 2:
        raise ValueError(f"Latitude/longitude arrays must be 2-D and equal shape, "
                         f"got {lats.shape} and {lons.shape}")

    fields = np.zeros((4,) + lats.shape, dtype=np.float32)
    for r in range(lats.shape[0]):
        for c in range(lats.shape[1]):
            sp = surface_fn(Position(float(lats[r, c]), float(lons[r, c])))
            fields[:, r, c] = (sp.wind_deg, sp.wind_kts, sp.current_deg, sp.current_kts)

    return TimeSlice(lats, lons, fields[0], fields[1], fields[2], fields[3])


def uniform_grid(
    lat_origin: float,
    lon_origin: float,
    spacing_deg: float,
    rows: int,
    cols: int,
) -> Tuple[np.ndarray, np.ndarray]:
    """Row = latitude, col = longitude; both increase with the index."""
    if rows < 1 or cols < 1:
        raise ValueError(f"Grid must have at least one row and column, got {rows}x{cols}")
    lat_1d = lat_origin + spacing_deg * np.arange(rows)
    lon_1d = lon_origin + spacing_deg * np.arange(cols)
    lats, lons = np.meshgrid(lat_1d, lon_1d, indexing="ij")
    logger.debug(f"Uniform grid {rows}x{cols} at ({lat_origin:.4f}, {lon_origin:.4f}), "
                 f"spacing {spacing_deg:.4f} deg")
    return lats.astype(np.float32), lons.astype(np.float32)
