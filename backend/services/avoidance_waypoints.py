"""
Avoidance Waypoint Synthesizer

Pure geometry that proposes detour waypoints around high/extreme risk areas.
The waypoints are inserted into a directions request to steer the provider's
path away from a hazard. They are best-effort: the safety analyzer decides
afterwards whether the resulting route actually avoided anything.

Two independent heuristics:
- Perpendicular offset (primary): step sideways from the midpoint of the
  start→destination segment, on the side away from the hazard.
- Bearing reflection (alternative): go to the far side of the hazard as seen
  from the start point.

Distances are in kilometers; degree offsets use the rough 1° ≈ 111 km conversion.
"""

import logging
import math
from typing import List, Optional, Sequence

from services.route_models import RiskArea, RoutePoint
from utils.distance import haversine_distance, km_to_degrees
from utils.geo import bearing_radians, normalize_longitude, point_to_segment_distance_km

logger = logging.getLogger(__name__)

# Primary heuristic: step 1.5x the radius off the direct line
PERPENDICULAR_OFFSET_FACTOR = 1.5
MAX_AVOIDANCE_WAYPOINTS = 3

# Alternative heuristic: place the point 2x the radius beyond the center
REFLECTION_OFFSET_FACTOR = 2.0
MAX_ALTERNATIVE_WAYPOINTS = 2
MAX_ALTERNATIVE_OFFSET_KM = 25.0

# Start closer than this to a center has no meaningful bearing
COINCIDENT_POINT_KM = 0.001


def high_risk_areas(risk_areas: Sequence[RiskArea]) -> List[RiskArea]:
    """Risk areas rated high or extreme, in input order."""
    return [area for area in risk_areas if area.is_high_risk]


def is_point_near_segment(
    start: RoutePoint,
    end: RoutePoint,
    point: RoutePoint,
    radius_km: float
) -> bool:
    """True if `point` lies within `radius_km` of the straight segment start→end."""
    distance = point_to_segment_distance_km(start.as_lat_lon(), end.as_lat_lon(), point.as_lat_lon())
    return distance <= radius_km


def create_avoidance_waypoint(
    start: RoutePoint,
    end: RoutePoint,
    risk_center: RoutePoint,
    radius_km: float
) -> Optional[RoutePoint]:
    """
    Offset the segment midpoint perpendicular to the route, away from the hazard.

    Returns None when start and end coincide (no direction to be perpendicular to).
    """
    d_lat = end.lat - start.lat
    d_lon = end.lon - start.lon

    # Perpendicular to (d_lat, d_lon)
    perp_lat = -d_lon
    perp_lon = d_lat

    length = math.hypot(perp_lat, perp_lon)
    if length == 0:
        return None

    offset_deg = km_to_degrees(radius_km * PERPENDICULAR_OFFSET_FACTOR)
    offset_lat = perp_lat / length * offset_deg
    offset_lon = perp_lon / length * offset_deg

    mid_lat = (start.lat + end.lat) / 2
    mid_lon = (start.lon + end.lon) / 2

    option_1 = (mid_lat + offset_lat, mid_lon + offset_lon)
    option_2 = (mid_lat - offset_lat, mid_lon - offset_lon)

    dist_1 = haversine_distance(option_1[0], option_1[1], risk_center.lat, risk_center.lon)
    dist_2 = haversine_distance(option_2[0], option_2[1], risk_center.lat, risk_center.lon)

    lat, lon = option_1 if dist_1 > dist_2 else option_2
    return RoutePoint(lat=lat, lon=normalize_longitude(lon))


def calculate_avoidance_waypoints(
    start: RoutePoint,
    destination: RoutePoint,
    risk_areas: Sequence[RiskArea]
) -> List[RoutePoint]:
    """
    Primary heuristic: one perpendicular detour per high/extreme area on the direct line.

    Only areas whose distance to the start→destination segment is within their
    radius produce a waypoint. At most 3 waypoints, in risk area order.
    """
    waypoints = []

    for area in high_risk_areas(risk_areas):
        if not is_point_near_segment(start, destination, area.center, area.radius_km):
            continue

        waypoint = create_avoidance_waypoint(start, destination, area.center, area.radius_km)
        if waypoint is None:
            logger.debug(f"No perpendicular detour for {area.name}: start and destination coincide")
            continue

        waypoints.append(RoutePoint(lat=waypoint.lat, lon=waypoint.lon, name=f"Avoidance point for {area.name}"))
        if len(waypoints) == MAX_AVOIDANCE_WAYPOINTS:
            break

    return waypoints


def calculate_alternative_waypoints(
    start: RoutePoint,
    destination: RoutePoint,
    risk_areas: Sequence[RiskArea]
) -> List[RoutePoint]:
    """
    Alternative heuristic: reflect the center→start bearing and go around the far side.

    Each high/extreme area yields a point 2x its radius from the center along
    the reflected bearing, clamped to MAX_ALTERNATIVE_OFFSET_KM. Areas whose
    center coincides with the start are skipped. At most 2 waypoints.

    `destination` is accepted for signature parity with the primary heuristic;
    the reflection depends only on the start point.
    """
    waypoints = []

    for area in high_risk_areas(risk_areas):
        center = area.center
        if haversine_distance(start.lat, start.lon, center.lat, center.lon) < COINCIDENT_POINT_KM:
            logger.debug(f"No reflected detour for {area.name}: start lies on the area center")
            continue

        avoidance_angle = bearing_radians(center.as_lat_lon(), start.as_lat_lon()) + math.pi
        offset_km = min(area.radius_km * REFLECTION_OFFSET_FACTOR, MAX_ALTERNATIVE_OFFSET_KM)
        offset_deg = km_to_degrees(offset_km)

        waypoints.append(RoutePoint(
            lat=max(-90.0, min(90.0, center.lat + math.sin(avoidance_angle) * offset_deg)),
            lon=normalize_longitude(center.lon + math.cos(avoidance_angle) * offset_deg),
            name=f"Alternative avoidance point for {area.name}"
        ))
        if len(waypoints) == MAX_ALTERNATIVE_WAYPOINTS:
            break

    return waypoints
