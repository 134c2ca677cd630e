"""
Route deduplication and selection.

Deduplication is a coarse similarity test on totals (distance, duration,
safety score), not a geometric comparison. Selection is the policy layer
that picks the single route shown to the user.
"""

import logging
from typing import Iterable, List, Optional, Sequence

from services.route_models import SafeRoute

logger = logging.getLogger(__name__)

# Duplicate thresholds (strictly less than)
DUPLICATE_DISTANCE_M = 1000
DUPLICATE_DURATION_MIN = 2
DUPLICATE_SAFETY_POINTS = 5

# Balanced-mode weights
SAFETY_WEIGHT = 0.6
EFFICIENCY_WEIGHT = 0.4


def is_duplicate_route(route: SafeRoute, existing_routes: Iterable[SafeRoute]) -> bool:
    """
    True if `route` is within 1 km, 2 minutes and 5 safety points of any existing route.

    Examples:
        >>> a = SafeRoute(id='a', geometry=[(0, 0), (1, 1)], safety_score=80,
        ...               distance_meters=10000, duration_seconds=1200)
        >>> b = SafeRoute(id='b', geometry=[(0, 0), (1, 1)], safety_score=82,
        ...               distance_meters=10050, duration_seconds=1260)
        >>> is_duplicate_route(b, [a])
        True
    """
    return any(
        abs(existing.distance_meters - route.distance_meters) < DUPLICATE_DISTANCE_M and
        abs(existing.estimated_minutes - route.estimated_minutes) < DUPLICATE_DURATION_MIN and
        abs(existing.safety_score - route.safety_score) < DUPLICATE_SAFETY_POINTS
        for existing in existing_routes
    )


def remove_duplicate_routes(routes: Sequence[SafeRoute]) -> List[SafeRoute]:
    """Keep the first route of each near-identical cluster, preserving input order."""
    unique_routes: List[SafeRoute] = []

    for route in routes:
        if is_duplicate_route(route, unique_routes):
            logger.debug(f"Dropping duplicate route {route.id}")
            continue
        unique_routes.append(route)

    return unique_routes


def efficiency_score(route: SafeRoute, max_duration: float) -> float:
    """0-100 score relative to the slowest route: 0 for the slowest, 100 for an instant route."""
    if max_duration <= 0:
        return 0.0
    return (max_duration - route.duration_seconds) / max_duration * 100


def combined_score(route: SafeRoute, max_duration: float) -> float:
    """Balanced score: 60% safety, 40% efficiency."""
    return SAFETY_WEIGHT * route.safety_score + EFFICIENCY_WEIGHT * efficiency_score(route, max_duration)


def _highest_safety(routes: Sequence[SafeRoute]) -> SafeRoute:
    best = routes[0]
    for route in routes[1:]:
        if route.safety_score > best.safety_score:
            best = route
    return best


def select_best_route(routes: Sequence[SafeRoute], prioritize_safety: bool) -> Optional[SafeRoute]:
    """
    Choose the single best route.

    Safety first: among routes whose risk level is not high/extreme, the highest
    safety score; if every route is high/extreme, the highest safety score overall.

    Balanced: the highest 0.6 * safety + 0.4 * efficiency, where efficiency is
    measured against the slowest route in the set.

    Ties keep the earliest route. Returns None only for an empty input.
    """
    if not routes:
        return None
    if len(routes) == 1:
        return routes[0]

    if prioritize_safety:
        safe_routes = [route for route in routes if not route.is_high_risk]
        if safe_routes:
            best = _highest_safety(safe_routes)
            logger.info(f"Selected safest route {best.route_type} (safety: {best.safety_score:.0f}) "
                        f"from {len(safe_routes)} routes avoiding high-risk areas")
            return best

        best = _highest_safety(routes)
        logger.info(f"No route avoids high-risk areas. Selected least risky: {best.route_type} "
                    f"(safety: {best.safety_score:.0f})")
        return best

    max_duration = max(route.duration_seconds for route in routes)
    best = routes[0]
    best_score = combined_score(best, max_duration)
    for route in routes[1:]:
        score = combined_score(route, max_duration)
        if score > best_score:
            best, best_score = route, score

    logger.info(f"Selected balanced route {best.route_type} (combined score: {best_score:.1f})")
    return best
