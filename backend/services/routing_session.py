"""
Routing Session

Caller-owned state for one user's routing panel: selected start/end points,
preferences, the last calculated routes and the currently selected route.

The routing engine itself is stateless. This object owns the "current
selection" and applies the invalidation rule: changing the start point, end
point or vehicle type clears the routes and the selection, because they were
calculated for a different request.

One session per UI session; not shared between threads.
"""

import logging
import threading
from typing import Callable, List, Optional, Sequence

from services.route_models import RiskArea, RouteOptions, RoutePoint, SafeRoute
from services.route_selection import select_best_route
from services.routing_errors import ConfigError, InputError
from utils.validators import RiskAreaValidator

logger = logging.getLogger(__name__)


class RoutingSession:
    """Holds routing inputs and results for one user and keeps them consistent."""

    def __init__(self, service_factory: Callable[[], object], avoid_high_risk: bool = True,
                 vehicle_type: str = 'driving'):
        """
        Args:
            service_factory: Zero-argument callable returning a RouteCalculationService.
                             Called per calculation so a missing credential surfaces
                             as a session error rather than at construction.
            avoid_high_risk: Initial avoidance preference
            vehicle_type: Initial vehicle type
        """
        self._service_factory = service_factory
        self.start_point: Optional[RoutePoint] = None
        self.end_point: Optional[RoutePoint] = None
        self.avoid_high_risk = avoid_high_risk
        self.vehicle_type = vehicle_type

        self.routes: List[SafeRoute] = []
        self.selected_route: Optional[SafeRoute] = None
        self.is_calculating = False
        self.error: Optional[str] = None

        self._cancel_event: Optional[threading.Event] = None

    # ========== Inputs ==========

    def set_start_point(self, point: Optional[RoutePoint]) -> None:
        self.start_point = point
        self._invalidate('start point changed')

    def set_end_point(self, point: Optional[RoutePoint]) -> None:
        self.end_point = point
        self._invalidate('end point changed')

    def set_vehicle_type(self, vehicle_type: str) -> None:
        if not RiskAreaValidator.validate_vehicle_type(vehicle_type):
            raise InputError(InputError.INVALID_PAYLOAD, f"Unknown vehicle type: {vehicle_type}")
        self.vehicle_type = vehicle_type.lower()
        self._invalidate('vehicle type changed')

    def set_avoid_high_risk(self, avoid: bool) -> None:
        """
        Change the avoidance preference.

        Existing routes were calculated for the same points, so the selection is
        re-made from them under the new policy. Without routes and both points
        there is nothing to re-select and the results are cleared.
        """
        self.avoid_high_risk = avoid
        if self.start_point and self.end_point and self.routes:
            logger.info(f"Risk avoidance setting changed to {avoid}; re-selecting from existing routes")
            self.selected_route = select_best_route(self.routes, avoid)
        else:
            self.clear_routes()

    # ========== Results ==========

    def calculate(self, risk_areas: Sequence[RiskArea]) -> List[SafeRoute]:
        """
        Calculate routes for the current points and auto-select the best one.

        Errors a user can fix (missing points, missing credential) are recorded in
        `self.error` instead of being raised. Any calculation still in flight for
        this session is cancelled first.
        """
        if not self.start_point or not self.end_point:
            self.error = 'Please select both start and end points'
            return []

        if self._cancel_event is not None:
            self._cancel_event.set()
        cancel_event = threading.Event()
        self._cancel_event = cancel_event

        self.is_calculating = True
        self.error = None
        self.routes = []
        self.selected_route = None

        try:
            service = self._service_factory()
            options = RouteOptions(
                start=self.start_point,
                destination=self.end_point,
                avoid_high_risk=self.avoid_high_risk,
                vehicle_type=self.vehicle_type,
            )
            routes = service.calculate_safe_routes(options, risk_areas, cancel_event)
        except ConfigError as e:
            self.error = 'Mapbox API token not configured' \
                if e.code == ConfigError.MISSING_CREDENTIAL else e.message
            return []
        except InputError as e:
            self.error = e.message
            return []
        finally:
            self.is_calculating = False

        if cancel_event.is_set():
            logger.info("Discarding results of a superseded calculation")
            return []

        self.routes = routes
        self.selected_route = select_best_route(routes, self.avoid_high_risk)
        if not routes:
            self.error = 'No route found between the selected points'
        return routes

    def select_route(self, route: SafeRoute) -> None:
        self.selected_route = route

    def cancel(self) -> None:
        """Abort outstanding provider requests of the current calculation."""
        if self._cancel_event is not None:
            self._cancel_event.set()

    def clear_routes(self) -> None:
        self.routes = []
        self.selected_route = None

    def clear_error(self) -> None:
        self.error = None

    def _invalidate(self, reason: str) -> None:
        if self.routes or self.selected_route:
            logger.debug(f"Clearing routes: {reason}")
        self.cancel()
        self.clear_routes()
