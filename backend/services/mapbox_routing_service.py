"""
Mapbox Routing Service for Risk-Aware Navigation

Thin wrapper around a single Mapbox Directions v5 request. Every call is
independent and stateless; the service only maps ordered waypoints to a
CandidateRoute or a ProviderError.

Features:
- Driving, walking and cycling profiles
- 2-5 ordered waypoints per request (start, up to 3 detours, destination)
- One retry for transient failures (HTTP 429 / 5xx) and a per-request timeout
- Caller-driven cancellation through a threading.Event
- Access token never written to logs

Author: Disaster Alert System
Date: 2025-10-18
"""

import logging
import os
import threading
from typing import Any, Dict, Optional, Sequence

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from config import Config
from services.route_models import CandidateRoute, RoutePoint
from services.routing_errors import ConfigError, InputError, ProviderError
from utils.secure_logging import redact_pii, redact_url
from utils.url_validator import validate_provider_base_url
from utils.validators import RiskAreaValidator

# Configure logging
logger = logging.getLogger(__name__)


class MapboxRoutingService:
    """
    Service for requesting one route through ordered waypoints from Mapbox Directions.

    Path-finding is delegated entirely to Mapbox; this class handles request
    construction, transient-error retry, cancellation and error classification.
    """

    MIN_WAYPOINTS = 2
    MAX_WAYPOINTS = 5

    # Vehicle type -> Mapbox routing profile
    PROFILES = {
        'driving': 'driving',
        'walking': 'walking',
        'cycling': 'cycling',
    }

    # Strategies that ask Mapbox for alternatives and read the first (preferred) route
    BASE_STRATEGIES = ('fastest', 'shortest')

    RETRY_STATUS_CODES = (429, 500, 502, 503, 504)
    RETRY_BACKOFF_SECONDS = 0.5

    # KL City Centre -> Petaling Jaya, used by test_connection
    TEST_ROUTE = (
        RoutePoint(lat=3.139, lon=101.6869, name='KL City Centre'),
        RoutePoint(lat=3.1073, lon=101.5951, name='Petaling Jaya'),
    )

    def __init__(
        self,
        access_token: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
        connect_timeout: Optional[float] = None,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize the Mapbox Routing Service.

        Args:
            access_token: Mapbox access token. If None, reads MAPBOX_ACCESS_TOKEN
                          (or VITE_MAPBOX_TOKEN) from the environment
            base_url: Directions base URL, defaults to Config.MAPBOX_BASE_URL
            timeout: Per-request read timeout in seconds
            max_retries: Retries for transient provider errors (default 1)
            connect_timeout: Connect timeout in seconds, capped at `timeout`
            session: Optional pre-built requests.Session (retry adapter is mounted on it)

        Raises:
            ConfigError: If no access token is configured or the base URL is invalid
        """
        self.access_token = access_token or os.getenv('MAPBOX_ACCESS_TOKEN') or os.getenv('VITE_MAPBOX_TOKEN')
        if not self.access_token:
            raise ConfigError(ConfigError.MISSING_CREDENTIAL, 'Mapbox API token not configured')

        self.base_url = (base_url or Config.MAPBOX_BASE_URL).rstrip('/')
        is_valid, error = validate_provider_base_url(self.base_url)
        if not is_valid:
            raise ConfigError(ConfigError.INVALID_BASE_URL, error)

        self.timeout = timeout if timeout is not None else Config.ROUTING_TIMEOUT_SECONDS
        connect_timeout = connect_timeout if connect_timeout is not None else Config.ROUTING_CONNECT_TIMEOUT_SECONDS
        self.connect_timeout = min(connect_timeout, self.timeout)
        self.max_retries = max_retries if max_retries is not None else Config.ROUTING_MAX_RETRIES

        self.session = session or requests.Session()
        retry = Retry(
            total=self.max_retries,
            status_forcelist=self.RETRY_STATUS_CODES,
            allowed_methods=frozenset(['GET']),
            backoff_factor=self.RETRY_BACKOFF_SECONDS,
            respect_retry_after_header=False,
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry)
        self.session.mount('https://', adapter)
        self.session.mount('http://', adapter)

        logger.info(f"MapboxRoutingService initialized (timeout={self.timeout}s, retries={self.max_retries})")

    def request_route(
        self,
        waypoints: Sequence[RoutePoint],
        vehicle_type: str = 'driving',
        strategy: str = 'fastest',
        cancel_event: Optional[threading.Event] = None
    ) -> CandidateRoute:
        """
        Request one route through the ordered waypoints.

        Args:
            waypoints: 2-5 ordered points (start, optional detours, destination)
            vehicle_type: 'driving', 'walking' or 'cycling'
            strategy: Strategy tag recorded on the candidate ('fastest', 'shortest',
                      'avoidance', 'alternative-avoidance')
            cancel_event: Checked before the request is sent and again when the
                          response arrives. A request already on the wire is not
                          interrupted, so a superseded call still waits up to
                          `connect_timeout` plus `timeout` before raising cancelled.

        Returns:
            CandidateRoute built from the first route in the response

        Raises:
            InputError: Wrong number of waypoints or unknown vehicle type
            ProviderError: network | rate_limited | bad_request | no_route | cancelled
        """
        if len(waypoints) < self.MIN_WAYPOINTS:
            raise InputError(InputError.MISSING_ENDPOINTS, 'At least a start and a destination are required')
        if len(waypoints) > self.MAX_WAYPOINTS:
            raise InputError(
                InputError.TOO_MANY_WAYPOINTS,
                f"At most {self.MAX_WAYPOINTS} waypoints per request, got {len(waypoints)}"
            )
        if not RiskAreaValidator.validate_vehicle_type(vehicle_type):
            raise InputError(InputError.INVALID_PAYLOAD, f"Unknown vehicle type: {vehicle_type}")

        self._raise_if_cancelled(cancel_event, strategy)

        url = self.build_url(waypoints, vehicle_type)
        params = self.build_params(strategy)

        try:
            response = self.session.get(url, params=params, timeout=(self.connect_timeout, self.timeout))
        except requests.exceptions.Timeout:
            logger.warning(f"Mapbox {strategy} request timed out after {self.timeout}s")
            raise ProviderError(ProviderError.NETWORK, f"Request timed out after {self.timeout}s")
        except requests.exceptions.RequestException as e:
            logger.warning(f"Mapbox {strategy} request failed: {redact_pii(str(e))}")
            raise ProviderError(ProviderError.NETWORK, redact_pii(str(e)))

        self._raise_if_cancelled(cancel_event, strategy)

        data = self._parse_json(response)
        if response.status_code != 200:
            raise self._classify_error(response, data, strategy)

        candidate = CandidateRoute.from_directions_payload(data, strategy)
        logger.info(
            f"Mapbox {strategy} route: {candidate.distance_meters / 1000:.1f}km, "
            f"{candidate.duration_seconds / 60:.0f}min, {len(candidate.geometry)} vertices"
        )
        return candidate

    def build_url(self, waypoints: Sequence[RoutePoint], vehicle_type: str) -> str:
        """Build '{base}/{profile}/{lon,lat;lon,lat;...}'."""
        profile = self.PROFILES[vehicle_type.lower()]
        coordinates = ';'.join(f"{point.lon:.6f},{point.lat:.6f}" for point in waypoints)
        return f"{self.base_url}/{profile}/{coordinates}"

    def build_params(self, strategy: str) -> Dict[str, str]:
        """
        Query parameters for a directions request.

        Base strategies ask for alternatives; Mapbox has no "shortest" mode, so
        the shortest strategy excludes ferries, which tends to shorten routes.
        """
        params = {
            'access_token': self.access_token,
            'geometries': 'geojson',
            'overview': 'full',
            'steps': 'true',
            'annotations': 'duration,distance',
        }

        if strategy in self.BASE_STRATEGIES:
            params['alternatives'] = 'true'
        if strategy == 'shortest':
            params['exclude'] = 'ferry'

        return params

    def test_connection(self) -> Dict[str, Any]:
        """
        Check that the configured token and endpoint can produce a route.

        Returns:
            {"success": bool, "message": str}; never raises
        """
        try:
            route = self.request_route(list(self.TEST_ROUTE), 'driving', strategy='connection-test')
        except ProviderError as e:
            return {
                'success': False,
                'message': f"Mapbox API Error: {e.message}"
            }

        return {
            'success': True,
            'message': (
                f"Mapbox Routing API connected successfully. Test route: "
                f"{route.distance_meters / 1000:.1f}km, {round(route.duration_seconds / 60)} minutes"
            )
        }

    # ========== Private Helper Methods ==========

    @staticmethod
    def _raise_if_cancelled(cancel_event: Optional[threading.Event], strategy: str) -> None:
        if cancel_event is not None and cancel_event.is_set():
            logger.info(f"Mapbox {strategy} request cancelled")
            raise ProviderError(ProviderError.CANCELLED, 'Request superseded by a newer calculation')

    @staticmethod
    def _parse_json(response: requests.Response) -> Dict[str, Any]:
        """Decode the response body; an undecodable 200 body is a bad_request."""
        try:
            data = response.json()
        except ValueError:
            if response.status_code == 200:
                raise ProviderError(ProviderError.BAD_REQUEST, 'Directions response is not valid JSON',
                                    status=response.status_code)
            return {}
        return data if isinstance(data, dict) else {}

    @staticmethod
    def _classify_error(response: requests.Response, data: Dict[str, Any], strategy: str) -> ProviderError:
        """Map a non-200 response to a ProviderError."""
        status = response.status_code
        message = str(data.get('message') or response.reason or 'Unknown error')
        logger.warning(f"Mapbox {strategy} request failed with {status}: {redact_pii(message)} "
                       f"({redact_url(response.url)})")

        if status == 429:
            return ProviderError(ProviderError.RATE_LIMITED, message, status=status)
        if status >= 500:
            return ProviderError(ProviderError.NETWORK, message, status=status)
        if status == 404 or data.get('code') in ('NoRoute', 'NoSegment'):
            return ProviderError(ProviderError.NO_ROUTE, message, status=status)
        return ProviderError(ProviderError.BAD_REQUEST, message, status=status)
