"""
Unit tests for great-circle helpers.
"""

import numpy as np
import pytest

from sailroute.routes.geodesy import (
    EARTH_RADIUS_NM,
    calculate_bearing,
    haversine,
    haversine_distance,
    haversine_distance_array,
)


class TestHaversine:

    def test_one_arc_minute_of_latitude(self):
        """One minute of latitude is about one nautical mile."""
        assert haversine_distance(20.0, -155.0, 20.0 + 1 / 60, -155.0) == pytest.approx(1.0, abs=1e-3)

    def test_zero_distance(self):
        assert haversine_distance(19.78, -155.0, 19.78, -155.0) == 0.0

    def test_quarter_meridian(self):
        assert haversine_distance(0.0, 0.0, 90.0, 0.0) == pytest.approx(EARTH_RADIUS_NM * np.pi / 2)

    @pytest.mark.parametrize("lat2,lon2,expected", [
        (21.0, -155.0, 0.0),
        (20.0, -154.0, 90.0),
        (19.0, -155.0, 180.0),
        (20.0, -156.0, 270.0),
    ])
    def test_cardinal_bearings(self, lat2, lon2, expected):
        assert calculate_bearing(20.0, -155.0, lat2, lon2) == pytest.approx(expected, abs=0.5)

    def test_haversine_pairs(self):
        distance, bearing = haversine(20.0, -155.0, 20.1, -154.9)
        assert distance == pytest.approx(haversine_distance(20.0, -155.0, 20.1, -154.9))
        assert bearing == pytest.approx(calculate_bearing(20.0, -155.0, 20.1, -154.9))
        assert 0.0 < bearing < 90.0

    def test_array_matches_scalar(self):
        lats = np.array([[20.0, 20.5], [21.0, 19.5]], dtype=np.float32)
        lons = np.array([[-155.0, -154.5], [-156.0, -155.5]], dtype=np.float32)
        distances = haversine_distance_array(20.2, -155.1, lats, lons)
        assert distances.shape == (2, 2)
        for (r, c), d in np.ndenumerate(distances):
            assert d == pytest.approx(haversine_distance(20.2, -155.1, float(lats[r, c]), float(lons[r, c])), rel=1e-12)

    def test_array_and_scalar_agree_near_antipode(self):
        """Coincident and almost antipodal cells rank the same both ways."""
        lats = np.array([[20.0, -19.9]])
        lons = np.array([[-155.0, 24.9]])
        distances = haversine_distance_array(20.0, -155.0, lats, lons)
        assert distances[0, 0] == haversine_distance(20.0, -155.0, 20.0, -155.0) == 0.0
        assert distances[0, 1] == pytest.approx(haversine_distance(20.0, -155.0, -19.9, 24.9), rel=1e-12)
        assert distances[0, 1] == pytest.approx(EARTH_RADIUS_NM * np.pi, rel=1e-3)
