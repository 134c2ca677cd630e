"""
Route Calculation Service for Risk-Aware Navigation

Produces several candidate routes between two points, scores each against the
current risk areas and returns them ranked by safety. Path-finding is
delegated to the directions provider; this service decides which requests to
make and what to do with the answers.

Strategies:
- fastest / shortest: direct requests, issued concurrently
- avoidance: detours around high/extreme areas on the direct line (+15 bonus)
- alternative-avoidance: detours on the far side of each high/extreme area
  (+10 bonus), only when the caller asks to avoid high-risk areas

Partial failure never aborts the batch: a failed strategy is logged and
skipped, and a calculation may legitimately return no routes.

Author: Disaster Alert System
Date: 2025-10-18
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, wait
from typing import List, Optional, Sequence, Tuple

from config import Config
from services.avoidance_waypoints import (
    calculate_alternative_waypoints,
    calculate_avoidance_waypoints,
    high_risk_areas,
)
from services.mapbox_routing_service import MapboxRoutingService
from services.route_models import CandidateRoute, RiskArea, RouteOptions, RoutePoint, SafeRoute
from services.route_safety_analyzer import RouteSafetyAnalyzer
from services.route_selection import is_duplicate_route, remove_duplicate_routes, select_best_route
from services.routing_errors import InputError, ProviderError
from utils.secure_logging import format_point
from utils.validators import CoordinateValidator

# Configure logging
logger = logging.getLogger(__name__)


class RouteCalculationService:
    """
    Candidate generator for risk-aware routing.

    Provides methods to:
    - Fan out direct and detour requests to the directions provider
    - Score every returned route with the safety analyzer
    - Drop near-duplicate candidates and rank the rest by safety
    """

    FASTEST = 'fastest'
    SHORTEST = 'shortest'
    AVOIDANCE = 'avoidance'
    ALTERNATIVE_AVOIDANCE = 'alternative-avoidance'

    BASE_STRATEGIES = (FASTEST, SHORTEST)

    # Policy bonuses rewarding deliberate hazard-steering
    AVOIDANCE_BONUS = 15.0
    ALTERNATIVE_AVOIDANCE_BONUS = 10.0

    def __init__(
        self,
        routing_service: Optional[MapboxRoutingService] = None,
        analyzer: Optional[RouteSafetyAnalyzer] = None,
        max_workers: Optional[int] = None,
        batch_timeout: Optional[float] = None
    ):
        """
        Initialize the Route Calculation Service.

        Args:
            routing_service: Directions provider client. If None, a MapboxRoutingService
                             is built from the environment
            analyzer: Safety analyzer (default RouteSafetyAnalyzer)
            max_workers: Concurrent provider requests per calculation
            batch_timeout: Ceiling in seconds for one whole calculation

        Raises:
            ConfigError: If the default provider client cannot be configured
        """
        self.routing_service = routing_service or MapboxRoutingService()
        self.analyzer = analyzer or RouteSafetyAnalyzer()
        self.max_workers = max_workers or Config.ROUTING_MAX_WORKERS
        self.batch_timeout = batch_timeout if batch_timeout is not None else Config.ROUTING_BATCH_TIMEOUT_SECONDS

        logger.info(f"RouteCalculationService initialized (workers={self.max_workers}, "
                    f"batch timeout={self.batch_timeout}s)")

    def calculate_safe_routes(
        self,
        options: RouteOptions,
        risk_areas: Sequence[RiskArea],
        cancel_event: Optional[threading.Event] = None
    ) -> List[SafeRoute]:
        """
        Calculate, score and rank candidate routes.

        Args:
            options: Start, destination, vehicle type and avoidance preference
            risk_areas: Externally assessed risk areas (may be empty)
            cancel_event: Set by the caller to abandon outstanding provider requests

        Returns:
            Deduplicated routes sorted by safety score, highest first. Empty when
            no strategy produced a usable route.

        Raises:
            InputError: If start or destination is missing or invalid (before any request)

        Example:
            >>> service = RouteCalculationService(MapboxRoutingService(access_token="pk.test"))
            >>> routes = service.calculate_safe_routes(options, risk_areas)
            >>> print(f"Found {len(routes)} routes, safest scores {routes[0].safety_score:.0f}/100")
        """
        self._validate_endpoints(options)
        risk_areas = list(risk_areas or [])

        logger.info(
            f"Calculating routes from {format_point(options.start)} to {format_point(options.destination)} "
            f"({options.vehicle_type}, {len(risk_areas)} risk areas, avoid_high_risk={options.avoid_high_risk})"
        )

        tasks = self.build_strategy_requests(options, risk_areas)
        candidates = self._run_requests(tasks, options.vehicle_type, cancel_event)

        avoided_count = len(high_risk_areas(risk_areas))
        routes: List[SafeRoute] = []

        for route_type, candidate in candidates:
            try:
                route = self.analyzer.analyze(candidate, risk_areas, route_type)
            except Exception as e:
                logger.error(f"Failed to score {route_type} route: {e}", exc_info=True)
                continue

            if route_type == self.AVOIDANCE:
                route.risk_areas_avoided = avoided_count
                route.apply_bonus(self.AVOIDANCE_BONUS)
            elif route_type == self.ALTERNATIVE_AVOIDANCE:
                route.risk_areas_avoided = avoided_count
                route.apply_bonus(self.ALTERNATIVE_AVOIDANCE_BONUS)
                if is_duplicate_route(route, routes):
                    logger.info("Alternative avoidance route duplicates an existing candidate - discarded")
                    continue

            routes.append(route)

        unique_routes = remove_duplicate_routes(routes)
        ranked = sorted(unique_routes, key=lambda r: r.safety_score, reverse=True)

        if ranked:
            fastest = min(ranked, key=lambda r: r.duration_seconds)
            logger.info(f"Successfully calculated {len(ranked)} routes")
            logger.info(f"Fastest: {fastest.route_type} {fastest.distance_meters / 1000:.1f}km "
                        f"in {fastest.estimated_minutes}min")
            logger.info(f"Safest: {ranked[0].route_type} with safety score {ranked[0].safety_score:.0f}/100")
        else:
            logger.warning("No usable routes returned by any strategy")

        return ranked

    def calculate_and_select(
        self,
        options: RouteOptions,
        risk_areas: Sequence[RiskArea],
        cancel_event: Optional[threading.Event] = None
    ) -> Tuple[List[SafeRoute], Optional[SafeRoute]]:
        """Calculate routes and pick the best one using the caller's avoidance preference."""
        routes = self.calculate_safe_routes(options, risk_areas, cancel_event)
        return routes, select_best_route(routes, options.avoid_high_risk)

    def build_strategy_requests(
        self,
        options: RouteOptions,
        risk_areas: Sequence[RiskArea]
    ) -> List[Tuple[str, List[RoutePoint]]]:
        """
        Decide which provider requests to make, as (route_type, ordered waypoints).

        Detour strategies are only requested when their heuristic produced at least one waypoint.
        """
        start, destination = options.start, options.destination
        tasks = [(strategy, [start, destination]) for strategy in self.BASE_STRATEGIES]

        if not risk_areas:
            return tasks

        avoidance_waypoints = calculate_avoidance_waypoints(start, destination, risk_areas)
        if avoidance_waypoints:
            tasks.append((self.AVOIDANCE, [start, *avoidance_waypoints, destination]))
        else:
            logger.info("No high-risk areas on the direct line - skipping avoidance route")

        if options.avoid_high_risk:
            alternative_waypoints = calculate_alternative_waypoints(start, destination, risk_areas)
            if alternative_waypoints:
                tasks.append((self.ALTERNATIVE_AVOIDANCE, [start, *alternative_waypoints, destination]))

        return tasks

    # ========== Private Helper Methods ==========

    def _run_requests(
        self,
        tasks: List[Tuple[str, List[RoutePoint]]],
        vehicle_type: str,
        cancel_event: Optional[threading.Event]
    ) -> List[Tuple[str, CandidateRoute]]:
        """
        Issue all provider requests concurrently and collect the ones that succeeded.

        All-settled semantics: failures are logged and skipped. Results keep the
        order of `tasks` regardless of completion order.
        """
        executor = ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix='route-request')
        try:
            futures = [
                executor.submit(self.routing_service.request_route, waypoints, vehicle_type, route_type, cancel_event)
                for route_type, waypoints in tasks
            ]
            _, not_done = wait(futures, timeout=self.batch_timeout)

            results = []
            for (route_type, _), future in zip(tasks, futures):
                if future in not_done:
                    future.cancel()
                    logger.warning(f"{route_type} route did not finish within {self.batch_timeout}s - skipped")
                    continue

                try:
                    results.append((route_type, future.result()))
                except ProviderError as e:
                    logger.warning(f"Route calculation failed for {route_type}: {e.code} ({e.message})")
                except InputError as e:
                    logger.warning(f"Route request rejected for {route_type}: {e.message}")
                except Exception as e:
                    logger.error(f"Unexpected error calculating {route_type} route: {e}", exc_info=True)

            return results
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

    @staticmethod
    def _validate_endpoints(options: RouteOptions) -> None:
        """Fail fast before any network call."""
        if options is None or options.start is None or options.destination is None:
            raise InputError(InputError.MISSING_ENDPOINTS, 'Please select both start and end points')

        for label, point in (('start', options.start), ('destination', options.destination)):
            if not CoordinateValidator.validate_coordinates(point.lat, point.lon):
                raise InputError(InputError.INVALID_COORDINATES, f"Invalid {label} coordinates")
