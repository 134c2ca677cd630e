"""
Route Safety Analyzer

Scores one raw candidate route against the current set of risk areas and
produces an annotated SafeRoute.

A risk area is "encountered" when any route vertex lies within its radius
(haversine distance from the vertex to the area center). Scoring:
- start at 100
- -15 per encountered area
- fixed penalty keyed by the most severe encountered level
- +10 for routes built as "avoidance" routes
- up to -10 for routes longer than 50 km
- clamped to [0, 100]
"""

import logging
import uuid
from typing import List, Optional, Sequence, Tuple

from services.route_models import (
    CandidateRoute,
    RiskArea,
    RiskDetail,
    SafeRoute,
    clamp_safety_score,
    risk_priority,
)
from utils.distance import haversine_distance

logger = logging.getLogger(__name__)


class RouteSafetyAnalyzer:
    """Annotates candidate routes with hazard exposure and a 0-100 safety score."""

    BASE_SCORE = 100.0
    ENCOUNTER_PENALTY = 15.0

    RISK_LEVEL_PENALTY = {
        'low': 0.0,
        'medium': 5.0,
        'high': 20.0,
        'extreme': 40.0,
    }

    AVOIDANCE_ROUTE_TYPE = 'avoidance'
    AVOIDANCE_ROUTE_BONUS = 10.0

    # Length penalty: 1 point per 10 km beyond 50 km, capped at 10 points
    LONG_ROUTE_THRESHOLD_M = 50000.0
    LONG_ROUTE_PENALTY_STEP_M = 10000.0
    LONG_ROUTE_MAX_PENALTY = 10.0

    DEFAULT_RECOMMENDATION = 'Exercise caution in this area'

    def analyze(
        self,
        candidate: CandidateRoute,
        risk_areas: Sequence[RiskArea],
        route_type: str
    ) -> SafeRoute:
        """
        Score a candidate route against the risk areas.

        Args:
            candidate: Raw route from the directions provider
            risk_areas: Risk areas for this calculation
            route_type: Strategy label ('fastest', 'shortest', 'avoidance', ...)

        Returns:
            SafeRoute with risk_areas_avoided left at 0 (set by the caller for
            avoidance routes)
        """
        warnings: List[str] = []
        risk_details: List[RiskDetail] = []
        max_risk_level = 'low'
        encountered = 0

        for area in risk_areas:
            min_distance = self.minimum_distance_to_route(candidate.geometry, area)
            if min_distance is None or min_distance > area.radius_km:
                continue

            encountered += 1
            if risk_priority(area.overall_risk_level) > risk_priority(max_risk_level):
                max_risk_level = area.overall_risk_level

            warnings.append(f"Route passes through {area.name} ({area.overall_risk_level} risk)")

            risk_details.append(RiskDetail(
                location=area.name,
                risk_level=area.overall_risk_level,
                distance=min_distance,
                recommendation=area.recommendations[0] if area.recommendations else self.DEFAULT_RECOMMENDATION,
            ))

            if area.risk_factors.flooding != 'low':
                warnings.append(f"Potential flooding risk in {area.name}")
            if area.risk_factors.wind_damage != 'low':
                warnings.append(f"High wind risk in {area.name}")

        safety_score = self.calculate_safety_score(
            encountered, max_risk_level, route_type, candidate.distance_meters
        )

        if encountered:
            logger.info(
                f"{route_type} route encounters {encountered} risk area(s), "
                f"max level {max_risk_level}, safety {safety_score:.0f}/100"
            )

        return SafeRoute(
            id=f"{route_type}-{uuid.uuid4().hex[:12]}",
            geometry=list(candidate.geometry),
            risk_level=max_risk_level,
            warnings=warnings,
            risk_areas_encountered=encountered,
            risk_areas_avoided=0,
            safety_score=safety_score,
            route_type=route_type,
            risk_details=risk_details,
            distance_meters=candidate.distance_meters,
            duration_seconds=candidate.duration_seconds,
        )

    def calculate_safety_score(
        self,
        risk_areas_encountered: int,
        max_risk_level: str,
        route_type: str,
        distance_meters: float
    ) -> float:
        """
        Compute the 0-100 safety score from exposure counts and route length.

        Examples:
            >>> RouteSafetyAnalyzer().calculate_safety_score(1, 'high', 'fastest', 10000)
            65.0
            >>> RouteSafetyAnalyzer().calculate_safety_score(0, 'low', 'fastest', 70000)
            98.0
        """
        score = self.BASE_SCORE
        score -= self.ENCOUNTER_PENALTY * risk_areas_encountered
        score -= self.RISK_LEVEL_PENALTY.get(max_risk_level, 0.0)

        if route_type == self.AVOIDANCE_ROUTE_TYPE:
            score += self.AVOIDANCE_ROUTE_BONUS

        if distance_meters > self.LONG_ROUTE_THRESHOLD_M:
            score -= min(
                self.LONG_ROUTE_MAX_PENALTY,
                (distance_meters - self.LONG_ROUTE_THRESHOLD_M) / self.LONG_ROUTE_PENALTY_STEP_M
            )

        return clamp_safety_score(score)

    @staticmethod
    def minimum_distance_to_route(
        geometry: Sequence[Tuple[float, float]],
        area: RiskArea
    ) -> Optional[float]:
        """Smallest haversine distance (km) from any (lon, lat) vertex to the area center."""
        if not geometry:
            return None

        return min(
            haversine_distance(area.center.lat, area.center.lon, lat, lon)
            for lon, lat in geometry
        )
