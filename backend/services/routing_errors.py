"""
Error taxonomy for the risk-aware routing engine.

- ProviderError: a single directions request failed. Non-fatal; the candidate
  is dropped and the batch continues.
- InputError: caller supplied unusable input. Raised before any network call.
- ConfigError: the provider cannot be configured. Raised before any network call.

All errors subclass ValueError so existing `except ValueError` handlers in the
host application keep working.
"""
from typing import Optional


class RoutingError(ValueError):
    """Base class for routing engine errors. Carries a machine-readable code."""

    CODES = ()

    def __init__(self, code: str, message: Optional[str] = None):
        if self.CODES and code not in self.CODES:
            raise ValueError(f"Unknown {type(self).__name__} code: {code}")
        self.code = code
        self.message = message or code.replace('_', ' ')
        super().__init__(f"{code}: {self.message}")


class ProviderError(RoutingError):
    """Directions provider failure for one request."""

    NETWORK = 'network'
    RATE_LIMITED = 'rate_limited'
    BAD_REQUEST = 'bad_request'
    NO_ROUTE = 'no_route'
    CANCELLED = 'cancelled'

    CODES = (NETWORK, RATE_LIMITED, BAD_REQUEST, NO_ROUTE, CANCELLED)

    def __init__(self, code: str, message: Optional[str] = None, status: Optional[int] = None):
        super().__init__(code, message)
        self.status = status


class InputError(RoutingError):
    """Invalid caller input."""

    MISSING_ENDPOINTS = 'missing_endpoints'
    INVALID_COORDINATES = 'invalid_coordinates'
    INVALID_PAYLOAD = 'invalid_payload'
    TOO_MANY_WAYPOINTS = 'too_many_waypoints'

    CODES = (MISSING_ENDPOINTS, INVALID_COORDINATES, INVALID_PAYLOAD, TOO_MANY_WAYPOINTS)


class ConfigError(RoutingError):
    """Provider configuration problem."""

    MISSING_CREDENTIAL = 'missing_credential'
    INVALID_BASE_URL = 'invalid_base_url'

    CODES = (MISSING_CREDENTIAL, INVALID_BASE_URL)
