"""
Great-circle geometry.

Distances are in nautical miles, bearings in degrees true (0 = North,
clockwise). Latitude always comes first (ISO 6709).
"""

import math
from typing import Tuple

import numpy as np

EARTH_RADIUS_NM = 3440.065


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Calculate great circle distance between two points.

    Args:
        lat1, lon1: First point in degrees
        lat2, lon2: Second point in degrees

    Returns:
        Distance in nautical miles
    """
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    dlat = math.radians(lat2 - lat1)
    dlon = math.radians(lon2 - lon1)

    a = (math.sin(dlat / 2) ** 2 +
         math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(dlon / 2) ** 2)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_NM * c


def calculate_bearing(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Calculate initial bearing from point 1 to point 2.

    Args:
        lat1, lon1: First point in degrees
        lat2, lon2: Second point in degrees

    Returns:
        Bearing in degrees (0-360)
    """
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    dlon = math.radians(lon2 - lon1)

    x = math.sin(dlon) * math.cos(lat2_rad)
    y = (math.cos(lat1_rad) * math.sin(lat2_rad) -
         math.sin(lat1_rad) * math.cos(lat2_rad) * math.cos(dlon))

    bearing = math.degrees(math.atan2(x, y))
    return (bearing + 360) % 360


def haversine(lat1: float, lon1: float, lat2: float, lon2: float) -> Tuple[float, float]:
    """Return ``(distance_nm, bearing_deg)`` from point 1 to point 2."""
    return (
        haversine_distance(lat1, lon1, lat2, lon2),
        calculate_bearing(lat1, lon1, lat2, lon2),
    )


def haversine_distance_array(
    lat: float,
    lon: float,
    lats: np.ndarray,
    lons: np.ndarray,
) -> np.ndarray:
    """Vectorized distance (nm) from one point to every point of a grid."""
    lat_rad = np.radians(lat)
    lats_rad = np.radians(lats.astype(np.float64))
    dlat = np.radians(lats.astype(np.float64) - lat)
    dlon = np.radians(lons.astype(np.float64) - lon)

    a = np.clip(np.sin(dlat / 2) ** 2 + np.cos(lat_rad) * np.cos(lats_rad) * np.sin(dlon / 2) ** 2, 0.0, 1.0)
    c = 2 * np.arctan2(np.sqrt(a), np.sqrt(1 - a))

    return EARTH_RADIUS_NM * c
