"""
Route Models for the Risk-Aware Routing Engine

Explicit records for everything that crosses the engine boundary:
- RoutePoint, RiskFactors, RiskArea, RouteOptions: caller / risk supplier input
- CandidateRoute: one raw route returned by the directions provider
- RiskDetail, SafeRoute: scored, hazard-annotated output

Payloads from the dashboard use camelCase keys; the `from_dict` constructors
map them to these records and raise InputError for partially-shaped data
instead of letting it propagate into the engine.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from services.routing_errors import InputError, ProviderError
from utils.validators import CoordinateValidator, RiskAreaValidator

# Severity ordering: low < medium < high < extreme
RISK_LEVEL_PRIORITY = {'low': 1, 'medium': 2, 'high': 3, 'extreme': 4}

HIGH_RISK_LEVELS = frozenset({'high', 'extreme'})

SAFETY_SCORE_MIN = 0.0
SAFETY_SCORE_MAX = 100.0


def risk_priority(level: Optional[str]) -> int:
    """Numeric priority of a risk level; unknown levels rank as 'low'."""
    return RISK_LEVEL_PRIORITY.get((level or '').lower(), 1)


def clamp_safety_score(score: float) -> float:
    """Clamp a safety score to [0, 100]."""
    return max(SAFETY_SCORE_MIN, min(SAFETY_SCORE_MAX, score))


@dataclass(frozen=True)
class RoutePoint:
    """A geographic point with an optional label."""
    lat: float
    lon: float
    name: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any, field_name: str = 'point') -> 'RoutePoint':
        """
        Build a RoutePoint from {"lat", "lon", "name"?}.

        Raises:
            InputError: If the payload is missing or has invalid coordinates
        """
        if not isinstance(data, dict) or 'lat' not in data or 'lon' not in data:
            raise InputError(InputError.INVALID_PAYLOAD, f"{field_name} with lat and lon is required")

        if not CoordinateValidator.validate_coordinate_dict(data):
            raise InputError(
                InputError.INVALID_COORDINATES,
                f"Invalid {field_name} coordinates: Latitude must be between -90 and 90, "
                f"Longitude must be between -180 and 180"
            )

        name = data.get('name')
        return cls(lat=float(data['lat']), lon=float(data['lon']), name=str(name) if name else None)

    def as_lat_lon(self) -> Tuple[float, float]:
        return (self.lat, self.lon)

    def to_dict(self) -> Dict[str, Any]:
        result = {'lat': self.lat, 'lon': self.lon}
        if self.name:
            result['name'] = self.name
        return result


@dataclass(frozen=True)
class RiskFactors:
    """Per-hazard sub-levels of a risk assessment."""
    flooding: str = 'low'
    wind_damage: str = 'low'
    heat_wave: str = 'low'
    cold_wave: str = 'low'

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'RiskFactors':
        data = data or {}
        return cls(
            flooding=str(data.get('flooding', 'low')).lower(),
            wind_damage=str(data.get('windDamage', data.get('wind_damage', 'low'))).lower(),
            heat_wave=str(data.get('heatWave', data.get('heat_wave', 'low'))).lower(),
            cold_wave=str(data.get('coldWave', data.get('cold_wave', 'low'))).lower(),
        )


@dataclass(frozen=True)
class RiskArea:
    """
    A hazard zone supplied by the risk assessment service.

    Immutable for the duration of one calculation.
    """
    center: RoutePoint
    radius_km: float
    overall_risk_level: str
    risk_factors: RiskFactors = field(default_factory=RiskFactors)
    confidence: float = 0.0
    recommendations: Tuple[str, ...] = ()

    def __post_init__(self):
        if self.radius_km < 0:
            raise InputError(InputError.INVALID_PAYLOAD, 'radius must be zero or positive')
        if not RiskAreaValidator.validate_risk_level(self.overall_risk_level):
            raise InputError(InputError.INVALID_PAYLOAD, f"Unknown risk level: {self.overall_risk_level}")
        object.__setattr__(self, 'overall_risk_level', self.overall_risk_level.lower())

    @property
    def name(self) -> str:
        """Label used in warnings; falls back to the center coordinates."""
        if self.center.name:
            return self.center.name
        return f"area at {self.center.lat:.3f}, {self.center.lon:.3f}"

    @property
    def is_high_risk(self) -> bool:
        return self.overall_risk_level in HIGH_RISK_LEVELS

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RiskArea':
        """
        Build a RiskArea from a risk assessment payload.

        Accepts the supplier shape ({"location", "affectedRadius", "overallRiskLevel",
        "riskFactors", "confidence", "recommendations"}) and the engine shape
        ({"center", "radiusKm", ...}).

        Raises:
            InputError: If the payload is partially shaped
        """
        is_valid, error_msg = RiskAreaValidator.validate_risk_area_data(data)
        if not is_valid:
            raise InputError(InputError.INVALID_PAYLOAD, error_msg)

        center = RoutePoint.from_dict(data.get('location', data.get('center')), 'risk area location')
        radius = data['affectedRadius'] if 'affectedRadius' in data else data['radiusKm']

        try:
            confidence = float(data.get('confidence', 0) or 0)
        except (TypeError, ValueError):
            raise InputError(InputError.INVALID_PAYLOAD, 'confidence must be a number')

        recommendations = data.get('recommendations') or []
        if not isinstance(recommendations, (list, tuple)):
            raise InputError(InputError.INVALID_PAYLOAD, 'recommendations must be a list')

        return cls(
            center=center,
            radius_km=float(radius),
            overall_risk_level=data['overallRiskLevel'].lower(),
            risk_factors=RiskFactors.from_dict(data.get('riskFactors')),
            confidence=confidence,
            recommendations=tuple(str(r) for r in recommendations),
        )


@dataclass(frozen=True)
class RouteOptions:
    """Caller request for one route calculation."""
    start: Optional[RoutePoint]
    destination: Optional[RoutePoint]
    avoid_high_risk: bool = True
    route_type: Optional[str] = None
    vehicle_type: str = 'driving'

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RouteOptions':
        """
        Build RouteOptions from {"start", "destination", "avoidHighRisk", "routeType", "vehicleType"}.

        Raises:
            InputError: missing_endpoints if start or destination is absent,
                        invalid_payload / invalid_coordinates otherwise
        """
        if not isinstance(data, dict):
            raise InputError(InputError.INVALID_PAYLOAD, 'Request body is required')

        if not data.get('start') or not data.get('destination'):
            raise InputError(InputError.MISSING_ENDPOINTS, 'Please select both start and end points')

        vehicle_type = data.get('vehicleType', data.get('vehicle_type', 'driving')) or 'driving'
        if not RiskAreaValidator.validate_vehicle_type(vehicle_type):
            valid_types_str = ', '.join(RiskAreaValidator.VALID_VEHICLE_TYPES)
            raise InputError(InputError.INVALID_PAYLOAD, f"Invalid vehicleType. Must be one of: {valid_types_str}")

        avoid_high_risk = data.get('avoidHighRisk', data.get('avoid_high_risk', True))
        if not isinstance(avoid_high_risk, bool):
            raise InputError(InputError.INVALID_PAYLOAD, 'avoidHighRisk must be a boolean')

        return cls(
            start=RoutePoint.from_dict(data['start'], 'start'),
            destination=RoutePoint.from_dict(data['destination'], 'destination'),
            avoid_high_risk=avoid_high_risk,
            route_type=data.get('routeType', data.get('route_type')),
            vehicle_type=vehicle_type.lower(),
        )


@dataclass(frozen=True)
class CandidateRoute:
    """One unscored route proposal from the directions provider."""
    geometry: List[Tuple[float, float]]  # ordered (lon, lat) vertices
    distance_meters: float
    duration_seconds: float
    strategy: str

    def __post_init__(self):
        if len(self.geometry) < 2:
            raise ProviderError(ProviderError.NO_ROUTE, 'Route geometry has fewer than 2 vertices')
        if self.distance_meters < 0 or self.duration_seconds < 0:
            raise ProviderError(ProviderError.BAD_REQUEST, 'Route distance and duration must be non-negative')

    @classmethod
    def from_directions_payload(cls, payload: Dict[str, Any], strategy: str) -> 'CandidateRoute':
        """
        Map a Directions API response to a CandidateRoute using its first route.

        Raises:
            ProviderError: no_route if the response has no usable route,
                           bad_request if the route is malformed
        """
        if not isinstance(payload, dict):
            raise ProviderError(ProviderError.BAD_REQUEST, 'Directions response is not an object')

        code = payload.get('code', 'Ok')
        routes = payload.get('routes') or []
        if code != 'Ok' or not routes:
            raise ProviderError(ProviderError.NO_ROUTE, payload.get('message') or 'No routes found')

        route = routes[0]
        try:
            coordinates = route['geometry']['coordinates']
            geometry = [(float(coord[0]), float(coord[1])) for coord in coordinates]
            distance = float(route.get('distance', 0) or 0)
            duration = float(route.get('duration', 0) or 0)
        except (KeyError, TypeError, ValueError, IndexError) as e:
            raise ProviderError(ProviderError.BAD_REQUEST, f"Malformed route in directions response: {e}")

        return cls(geometry=geometry, distance_meters=distance, duration_seconds=duration, strategy=strategy)


@dataclass(frozen=True)
class RiskDetail:
    """One encountered risk area, as shown to the user."""
    location: str
    risk_level: str
    distance: float  # km from the closest route vertex
    recommendation: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'location': self.location,
            'riskLevel': self.risk_level,
            'distance': round(self.distance, 3),
            'recommendation': self.recommendation,
        }


@dataclass
class SafeRoute:
    """A scored, hazard-annotated route ready for ranking and selection."""
    id: str
    geometry: List[Tuple[float, float]]
    risk_level: str = 'low'
    warnings: List[str] = field(default_factory=list)
    risk_areas_encountered: int = 0
    risk_areas_avoided: int = 0
    safety_score: float = SAFETY_SCORE_MAX
    route_type: str = 'fastest'
    risk_details: List[RiskDetail] = field(default_factory=list)
    distance_meters: float = 0.0
    duration_seconds: float = 0.0

    @property
    def estimated_minutes(self) -> int:
        """Duration rounded to whole minutes, as displayed to the user."""
        return int(round(self.duration_seconds / 60))

    @property
    def is_high_risk(self) -> bool:
        return self.risk_level in HIGH_RISK_LEVELS

    def apply_bonus(self, points: float) -> None:
        """Add a policy bonus to the safety score, keeping it within [0, 100]."""
        self.safety_score = clamp_safety_score(self.safety_score + points)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'geometry': [[lon, lat] for lon, lat in self.geometry],
            'riskLevel': self.risk_level,
            'warnings': list(self.warnings),
            'riskAreasEncountered': self.risk_areas_encountered,
            'riskAreasAvoided': self.risk_areas_avoided,
            'safetyScore': round(self.safety_score, 1),
            'routeType': self.route_type,
            'riskDetails': [detail.to_dict() for detail in self.risk_details],
            'distance': self.distance_meters,
            'duration': self.duration_seconds,
            'estimatedTime': self.estimated_minutes,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SafeRoute':
        """
        Rebuild a SafeRoute previously serialized with to_dict.

        Raises:
            InputError: If required fields are missing or invalid
        """
        try:
            geometry = [(float(c[0]), float(c[1])) for c in data['geometry']]
            route = cls(
                id=str(data['id']),
                geometry=geometry,
                risk_level=str(data.get('riskLevel', 'low')).lower(),
                warnings=[str(w) for w in data.get('warnings', [])],
                risk_areas_encountered=int(data.get('riskAreasEncountered', 0)),
                risk_areas_avoided=int(data.get('riskAreasAvoided', 0)),
                safety_score=clamp_safety_score(float(data['safetyScore'])),
                route_type=str(data.get('routeType', 'fastest')),
                risk_details=[
                    RiskDetail(
                        location=str(d['location']),
                        risk_level=str(d['riskLevel']),
                        distance=float(d['distance']),
                        recommendation=str(d.get('recommendation', '')),
                    )
                    for d in data.get('riskDetails', [])
                ],
                distance_meters=float(data['distance']),
                duration_seconds=float(data['duration']),
            )
        except (KeyError, TypeError, ValueError, IndexError) as e:
            raise InputError(InputError.INVALID_PAYLOAD, f"Invalid route payload: {e}")

        if len(route.geometry) < 2 or route.distance_meters < 0 or route.duration_seconds < 0:
            raise InputError(InputError.INVALID_PAYLOAD, 'Invalid route payload: geometry or totals out of range')
        if not RiskAreaValidator.validate_risk_level(route.risk_level):
            raise InputError(InputError.INVALID_PAYLOAD, f"Invalid route payload: unknown risk level {route.risk_level}")

        return route
