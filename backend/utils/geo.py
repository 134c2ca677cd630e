"""
Geospatial utilities for the routing engine.
Includes coordinate validation and point/segment distance calculations.
"""
import math
from typing import Tuple

from shapely.geometry import LineString, Point
from shapely.ops import nearest_points

from utils.distance import haversine_distance


def is_valid_coordinates(latitude: float, longitude: float) -> bool:
    """
    Validate geographic coordinates, including edge cases at equator and prime meridian.

    Args:
        latitude: Latitude value (-90 to 90), where 0 is the equator
        longitude: Longitude value (-180 to 180), where 0 is the prime meridian

    Returns:
        True if coordinates are valid, False otherwise

    Examples:
        >>> is_valid_coordinates(0, 0)
        True
        >>> is_valid_coordinates(91, 0)
        False
        >>> is_valid_coordinates(float('nan'), 0)
        False
    """
    try:
        lat = float(latitude)
        lon = float(longitude)

        if math.isnan(lat) or math.isnan(lon) or math.isinf(lat) or math.isinf(lon):
            return False

        return -90 <= lat <= 90 and -180 <= lon <= 180
    except (TypeError, ValueError):
        return False


def point_to_segment_distance_km(
    start: Tuple[float, float],
    end: Tuple[float, float],
    point: Tuple[float, float]
) -> float:
    """
    Distance in km from a point to the straight segment start→end.

    The nearest point on the segment is found by planar projection in
    degree space, then measured with haversine. All tuples are (lat, lon).
    A zero-length segment degrades to plain point-to-point distance.

    Examples:
        >>> point_to_segment_distance_km((0.0, 0.0), (0.0, 0.0), (0.0, 0.0))
        0.0
    """
    if start == end:
        return haversine_distance(point[0], point[1], start[0], start[1])

    # Shapely works in (x, y) = (lon, lat)
    segment = LineString([(start[1], start[0]), (end[1], end[0])])
    nearest, _ = nearest_points(segment, Point(point[1], point[0]))

    return haversine_distance(point[0], point[1], nearest.y, nearest.x)


def bearing_radians(origin: Tuple[float, float], target: Tuple[float, float]) -> float:
    """
    Planar angle from origin to target in degree space, as atan2(dlat, dlon).

    Both tuples are (lat, lon). Returns radians in (-pi, pi].
    """
    return math.atan2(target[0] - origin[0], target[1] - origin[1])


def normalize_longitude(longitude: float) -> float:
    """
    Normalize longitude to the range [-180, 180].

    Synthesized detour points near the antimeridian can drift past ±180.

    Examples:
        >>> normalize_longitude(181)
        -179.0
        >>> normalize_longitude(-181)
        179.0
        >>> normalize_longitude(0)
        0.0
    """
    normalized = longitude % 360
    if normalized > 180:
        normalized -= 360
    elif normalized < -180:
        normalized += 360
    return float(normalized)
