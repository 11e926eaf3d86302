"""
Sailing polar performance model.

A polar table maps (true wind angle, true wind speed) to boat speed through
the water.  On top of it this module answers the one question the router
asks: how many minutes does it take to sail from one grid position to the
next, given the wind and current at the origin?

Polar files are semicolon-delimited::

    TWA\\TWS;6;8;10;12;14;16;20
    52;5.86;6.6;7.12;7.36;7.47;7.52;7.52
    60;6.19;6.84;7.29;7.51;7.65;7.74;7.83
    ...

The header row carries wind speeds (knots); each following row starts with
the true wind angle (degrees off the wind) followed by boat speeds (knots).
"""

import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Tuple, Union

import numpy as np
import pandas as pd
from scipy.interpolate import RegularGridInterpolator

from sailroute.routes.geodesy import haversine

logger = logging.getLogger(__name__)

# Speed made good is floored here so segment times stay finite
MIN_SPEED_KTS = 0.1


class PolarDataError(ValueError):
    """Raised when a polar table is missing or malformed."""


@dataclass(frozen=True)
class SurfaceParameters:
    """Wind and surface current at one grid point and instant.

    wind_deg is the direction the wind blows FROM (meteorological),
    current_deg the direction the current sets TO (oceanographic).
    """
    wind_deg: float
    wind_kts: float
    current_deg: float
    current_kts: float


@dataclass(eq=False)
class SailingPolar:
    """Boat speed table indexed by [true wind angle, true wind speed]."""
    angles: np.ndarray  # degrees off the wind, ascending, within [0, 180]
    winds: np.ndarray  # knots, ascending
    speeds: np.ndarray  # knots, shape (len(angles), len(winds))
    name: str = "polar"
    _interpolator: RegularGridInterpolator = field(init=False, repr=False)

    def __post_init__(self):
        self.angles = np.asarray(self.angles, dtype=float)
        self.winds = np.asarray(self.winds, dtype=float)
        self.speeds = np.asarray(self.speeds, dtype=float)
        _validate_table(self.angles, self.winds, self.speeds)
        self._interpolator = RegularGridInterpolator(
            (self.angles, self.winds), self.speeds, method="linear",
        )

    def speed(self, point_of_sail: float, wind_kts: float) -> float:
        """Bilinear boat speed, inputs clamped to the table bounds."""
        twa = min(max(point_of_sail, self.angles[0]), self.angles[-1])
        tws = min(max(wind_kts, self.winds[0]), self.winds[-1])
        return max(0.0, float(self._interpolator([[twa, tws]])[0]))

    def summary(self) -> Dict[str, object]:
        return {
            "name": self.name,
            "wind_speeds_kts": [float(w) for w in self.winds],
            "wind_angles_deg": [float(a) for a in self.angles],
            "min_speed_kts": float(np.min(self.speeds)),
            "max_speed_kts": float(np.max(self.speeds)),
        }

    def __repr__(self):
        return (f"SailingPolar(name='{self.name}', "
                f"tws_range=[{self.winds[0]}, {self.winds[-1]}] kts, "
                f"twa_range=[{self.angles[0]}, {self.angles[-1]}] deg)")


def _validate_table(angles: np.ndarray, winds: np.ndarray, speeds: np.ndarray):
    if angles.ndim != 1 or winds.ndim != 1 or len(angles) < 2 or len(winds) < 2:
        raise PolarDataError("Polar table needs at least two wind angles and two wind speeds")
    if speeds.shape != (len(angles), len(winds)):
        raise PolarDataError(
            f"Polar data shape mismatch: expected {(len(angles), len(winds))}, got {speeds.shape}"
        )
    if not (np.all(np.isfinite(angles)) and np.all(np.isfinite(winds)) and np.all(np.isfinite(speeds))):
        raise PolarDataError("Polar table contains non-numeric or non-finite values")
    if np.any(np.diff(angles) <= 0) or np.any(np.diff(winds) <= 0):
        raise PolarDataError("Polar wind angles and wind speeds must be strictly increasing")
    if angles[0] < 0 or angles[-1] > 180:
        raise PolarDataError(f"Polar wind angles must lie within [0, 180], got [{angles[0]}, {angles[-1]}]")
    if np.any(speeds < 0):
        raise PolarDataError("Polar boat speeds must be non-negative")


def load_polar(path: Union[str, Path], sep: str = ";") -> SailingPolar:
    """
    Load a polar table from a delimited file.

    Raises:
        PolarDataError: file missing, empty or malformed.
    """
    path = Path(path)
    if not path.exists():
        raise PolarDataError(f"Polar file not found: {path}")

    try:
        frame = pd.read_csv(path, sep=sep, index_col=0)
    except (pd.errors.EmptyDataError, pd.errors.ParserError) as e:
        raise PolarDataError(f"Cannot parse polar file {path}: {e}") from e

    if frame.empty:
        raise PolarDataError(f"Polar file {path} has no data rows")

    try:
        winds = pd.to_numeric(pd.Series(frame.columns)).to_numpy(dtype=float)
        angles = pd.to_numeric(pd.Series(frame.index)).to_numpy(dtype=float)
        speeds = frame.apply(pd.to_numeric).to_numpy(dtype=float)
    except (ValueError, TypeError) as e:
        raise PolarDataError(f"Polar file {path} contains non-numeric cells: {e}") from e

    polar = SailingPolar(angles=angles, winds=winds, speeds=speeds, name=path.stem)
    logger.info(f"Loaded polar table {polar.name}: "
                f"{len(angles)} angles x {len(winds)} wind speeds "
                f"({winds[0]:g}-{winds[-1]:g} kts)")
    return polar


def angle_difference(angle1: float, angle2: float) -> float:
    """Signed shortest rotation from angle1 to angle2, in [-180, 180)."""
    return (angle2 - angle1 + 180.0) % 360.0 - 180.0


def boat_speed(polar: SailingPolar, point_of_sail: float, wind_kts: float) -> float:
    """
    Boat speed through the water for a point of sail and wind speed.

    Port and starboard are symmetric, so the angle is folded into [0, 180].
    """
    twa = abs(point_of_sail) % 360.0
    if twa > 180.0:
        twa = 360.0 - twa
    return polar.speed(twa, wind_kts)


def _to_vector(direction_deg: float, magnitude: float) -> Tuple[float, float]:
    rad = math.radians(direction_deg)
    return magnitude * math.sin(rad), magnitude * math.cos(rad)  # (east, north)


def best_vector_speed(
    polar: SailingPolar,
    heading_deg: float,
    wind_deg: float,
    wind_kts: float,
    current_deg: float,
    current_kts: float,
) -> Tuple[float, float]:
    """
    Over-ground velocity of the boat when trying to make way along *heading_deg*.

    If another polar angle on the same tack gives a better velocity made
    good along the heading (e.g. close-hauled instead of head to wind),
    the boat sails that angle instead.  The surface current is then added.

    Returns:
        (direction_deg, speed_kts) of the over-ground velocity.
    """
    relative = angle_difference(wind_deg, heading_deg)
    side = 1.0 if relative >= 0 else -1.0
    point_of_sail = abs(relative)

    chosen_angle = point_of_sail
    chosen_speed = boat_speed(polar, point_of_sail, wind_kts)
    best_vmg = chosen_speed
    for angle in polar.angles:
        spd = boat_speed(polar, angle, wind_kts)
        vmg = spd * math.cos(math.radians(abs(point_of_sail - angle)))
        if vmg > best_vmg:
            best_vmg = vmg
            chosen_angle = float(angle)
            chosen_speed = spd

    boat_east, boat_north = _to_vector(wind_deg + side * chosen_angle, chosen_speed)
    cur_east, cur_north = _to_vector(current_deg, current_kts)
    east = boat_east + cur_east
    north = boat_north + cur_north

    direction = math.degrees(math.atan2(east, north)) % 360.0
    return direction, math.hypot(east, north)


def sailing_speed(
    polar: SailingPolar,
    azimuth_deg: float,
    wind_deg: float,
    wind_kts: float,
    current_deg: float,
    current_kts: float,
) -> float:
    """Speed made good (knots) along *azimuth_deg*; may be negative."""
    direction, speed = best_vector_speed(
        polar, azimuth_deg, wind_deg, wind_kts, current_deg, current_kts,
    )
    return speed * math.cos(math.radians(direction - azimuth_deg))


def sail_segment_time(
    polar: SailingPolar,
    surface: SurfaceParameters,
    origin: Tuple[float, float],
    destination: Tuple[float, float],
) -> float:
    """
    Minutes needed to sail from *origin* to *destination* (lat, lon).

    Pure function of its inputs.  The result is finite and non-negative:
    speed made good is floored at MIN_SPEED_KTS.
    """
    lat1, lon1 = origin
    lat2, lon2 = destination
    distance_nm, bearing = haversine(lat1, lon1, lat2, lon2)
    if distance_nm <= 0.0:
        return 0.0

    speed = sailing_speed(
        polar, bearing,
        surface.wind_deg, surface.wind_kts,
        surface.current_deg, surface.current_kts,
    )
    return distance_nm / max(speed, MIN_SPEED_KTS) * 60.0


class PolarSegmentTimer:
    """Segment-time oracle bound to one polar for the life of a search."""

    def __init__(self, polar: SailingPolar):
        self.polar = polar

    def __call__(
        self,
        surface: SurfaceParameters,
        origin: Tuple[float, float],
        destination: Tuple[float, float],
    ) -> float:
        return sail_segment_time(self.polar, surface, origin, destination)

    def __repr__(self):
        return f"PolarSegmentTimer({self.polar.name})"
