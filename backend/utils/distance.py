"""
Distance calculation utilities with memoization for performance optimization.

All distances are in kilometers, matching the radius units used by risk
assessments.
"""
import math
from functools import lru_cache

# Earth's mean radius in kilometers
EARTH_RADIUS_KM = 6371.0

# Rough conversion used when offsetting points in degree space
KM_PER_DEGREE = 111.0


@lru_cache(maxsize=10000)
def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Calculate the great circle distance between two points on Earth using the Haversine formula.

    This function is memoized using LRU cache. Route geometries are scanned once
    per risk area, so the same vertex/center pairs repeat across candidates.

    Args:
        lat1: Latitude of the first point in decimal degrees (-90 to 90)
        lon1: Longitude of the first point in decimal degrees (-180 to 180)
        lat2: Latitude of the second point in decimal degrees (-90 to 90)
        lon2: Longitude of the second point in decimal degrees (-180 to 180)

    Returns:
        Distance between the two points in kilometers

    Examples:
        >>> # KL City Centre to Petaling Jaya
        >>> round(haversine_distance(3.139, 101.6869, 3.1073, 101.5951), 1)
        10.8

        >>> # Same point (should be 0)
        >>> haversine_distance(3.139, 101.6869, 3.139, 101.6869)
        0.0

    Note:
        - Does NOT validate coordinates - caller is responsible for validation
    """
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    dlat = math.radians(lat2 - lat1)
    dlon = math.radians(lon2 - lon1)

    a = (math.sin(dlat / 2) ** 2 +
         math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(dlon / 2) ** 2)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_KM * c


def km_to_degrees(distance_km: float) -> float:
    """Convert kilometers to an approximate offset in degrees."""
    return distance_km / KM_PER_DEGREE
