"""
Tests for distance and geometry helpers.
"""
import math

import pytest

from utils.distance import haversine_distance, km_to_degrees
from utils.geo import bearing_radians, is_valid_coordinates, normalize_longitude, point_to_segment_distance_km


class TestHaversine:
    """Tests for great-circle distance"""

    def test_known_distance(self):
        """KL City Centre to Petaling Jaya is roughly 10.8 km"""
        assert haversine_distance(3.139, 101.6869, 3.1073, 101.5951) == pytest.approx(10.8, abs=0.1)

    def test_same_point(self):
        assert haversine_distance(3.139, 101.6869, 3.139, 101.6869) == 0.0

    def test_one_degree_of_latitude(self):
        assert haversine_distance(0, 0, 1, 0) == pytest.approx(111.19, abs=0.01)

    def test_symmetric(self):
        assert haversine_distance(3.0, 101.0, 2.5, 102.0) == pytest.approx(haversine_distance(2.5, 102.0, 3.0, 101.0))

    def test_km_to_degrees(self):
        assert km_to_degrees(111) == pytest.approx(1.0)


class TestSegmentDistance:
    """Tests for point to segment distance"""

    def test_point_on_segment(self):
        assert point_to_segment_distance_km((0.0, 0.0), (0.0, 1.0), (0.0, 0.5)) == pytest.approx(0.0, abs=1e-9)

    def test_perpendicular_distance(self):
        assert point_to_segment_distance_km((0.0, 0.0), (0.0, 1.0), (0.1, 0.5)) == pytest.approx(11.12, abs=0.01)

    def test_beyond_segment_end_measures_to_endpoint(self):
        distance = point_to_segment_distance_km((0.0, 0.0), (0.0, 1.0), (0.0, 1.5))
        assert distance == pytest.approx(haversine_distance(0.0, 1.5, 0.0, 1.0))

    def test_zero_length_segment(self):
        distance = point_to_segment_distance_km((3.0, 101.0), (3.0, 101.0), (3.1, 101.0))
        assert distance == pytest.approx(haversine_distance(3.1, 101.0, 3.0, 101.0))


class TestCoordinateHelpers:
    """Tests for validation, bearings and longitude normalization"""

    def test_valid_coordinates(self):
        assert is_valid_coordinates(0, 0) is True
        assert is_valid_coordinates('3.139', '101.6869') is True
        assert is_valid_coordinates(-90.1, 0) is False
        assert is_valid_coordinates(float('-inf'), 0) is False

    def test_bearing_east_and_north(self):
        assert bearing_radians((0.0, 0.0), (0.0, 1.0)) == pytest.approx(0.0)
        assert bearing_radians((0.0, 0.0), (1.0, 0.0)) == pytest.approx(math.pi / 2)

    @pytest.mark.parametrize('longitude, expected', [
        (181, -179.0),
        (-181, 179.0),
        (540, 180.0),
        (0, 0.0),
        (101.6869, 101.6869),
    ])
    def test_normalize_longitude(self, longitude, expected):
        assert normalize_longitude(longitude) == pytest.approx(expected)
