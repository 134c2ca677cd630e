"""
Validation utilities for routing requests and risk assessment payloads.

Provides centralized validation logic for:
- Coordinate ranges (latitude/longitude)
- Risk levels and vehicle types
- Complete risk area payload validation

The route models call these at the system boundary so that partially-shaped
payloads never reach the routing engine.
"""
from typing import Dict, Tuple, Optional

from utils.geo import is_valid_coordinates


class CoordinateValidator:
    """Validator for geographic coordinates."""

    @staticmethod
    def validate_coordinates(lat: float, lon: float) -> bool:
        """
        Validate latitude and longitude ranges.

        Examples:
            >>> CoordinateValidator.validate_coordinates(3.139, 101.6869)
            True
            >>> CoordinateValidator.validate_coordinates(91, 0)  # Invalid latitude
            False
            >>> CoordinateValidator.validate_coordinates(0, 181)  # Invalid longitude
            False
        """
        if isinstance(lat, bool) or isinstance(lon, bool):
            return False
        return is_valid_coordinates(lat, lon)

    @staticmethod
    def validate_coordinate_dict(coord: Dict[str, float]) -> bool:
        """
        Validate coordinate dictionary with 'lat' and 'lon' keys.

        Examples:
            >>> CoordinateValidator.validate_coordinate_dict({'lat': 3.139, 'lon': 101.6869})
            True
            >>> CoordinateValidator.validate_coordinate_dict({'lat': 91, 'lon': 0})
            False
            >>> CoordinateValidator.validate_coordinate_dict({'invalid': 'keys'})
            False
        """
        try:
            lat = coord['lat']
            lon = coord['lon']
            return CoordinateValidator.validate_coordinates(lat, lon)
        except (KeyError, TypeError):
            return False


class RiskAreaValidator:
    """Validator for risk levels, vehicle types and risk area payloads."""

    # Ordered from least to most severe
    VALID_RISK_LEVELS = ['low', 'medium', 'high', 'extreme']

    VALID_VEHICLE_TYPES = ['driving', 'walking', 'cycling']

    # Risk factor keys as delivered by the risk assessment supplier
    RISK_FACTOR_KEYS = ['flooding', 'windDamage', 'heatWave', 'coldWave']

    @staticmethod
    def validate_risk_level(level: str) -> bool:
        """
        Validate a risk level against allowed values.

        Examples:
            >>> RiskAreaValidator.validate_risk_level('extreme')
            True
            >>> RiskAreaValidator.validate_risk_level('critical')
            False
        """
        if not level or not isinstance(level, str):
            return False

        return level.lower() in RiskAreaValidator.VALID_RISK_LEVELS

    @staticmethod
    def validate_vehicle_type(vehicle_type: str) -> bool:
        """Validate a routing profile ('driving', 'walking', 'cycling')."""
        if not vehicle_type or not isinstance(vehicle_type, str):
            return False

        return vehicle_type.lower() in RiskAreaValidator.VALID_VEHICLE_TYPES

    @staticmethod
    def validate_radius(radius_km) -> Tuple[bool, Optional[str]]:
        """
        Validate an affected radius in kilometers.

        Examples:
            >>> RiskAreaValidator.validate_radius(3)
            (True, None)
            >>> RiskAreaValidator.validate_radius(-1)
            (False, 'radius must be zero or positive')
        """
        if isinstance(radius_km, bool):
            return False, 'radius must be a number'
        try:
            radius = float(radius_km)
        except (ValueError, TypeError):
            return False, 'radius must be a number'
        if radius != radius or radius < 0:
            return False, 'radius must be zero or positive'
        return True, None

    @staticmethod
    def validate_risk_area_data(data: Dict) -> Tuple[bool, Optional[str]]:
        """
        Validate a complete risk area payload.

        Checks:
        - Location (under 'location' or 'center') with valid lat/lon
        - Radius (under 'affectedRadius' or 'radiusKm') is a non-negative number
        - overallRiskLevel is a known level
        - Optional riskFactors entries are known levels

        Returns:
            Tuple of (is_valid, error_message)

        Examples:
            >>> data = {
            ...     'location': {'lat': 3.0631, 'lon': 101.6727, 'name': 'Puchong'},
            ...     'affectedRadius': 3,
            ...     'overallRiskLevel': 'high'
            ... }
            >>> RiskAreaValidator.validate_risk_area_data(data)
            (True, None)
        """
        if not isinstance(data, dict):
            return False, 'Risk area must be an object'

        location = data.get('location', data.get('center'))
        if not isinstance(location, dict):
            return False, 'Missing required field: location'
        if not CoordinateValidator.validate_coordinate_dict(location):
            return False, 'Invalid risk area coordinates'

        if 'affectedRadius' in data:
            radius = data['affectedRadius']
        elif 'radiusKm' in data:
            radius = data['radiusKm']
        else:
            return False, 'Missing required field: affectedRadius'
        is_valid, error_msg = RiskAreaValidator.validate_radius(radius)
        if not is_valid:
            return False, error_msg

        if not RiskAreaValidator.validate_risk_level(data.get('overallRiskLevel')):
            valid_levels_str = ', '.join(RiskAreaValidator.VALID_RISK_LEVELS)
            return False, f'Invalid overallRiskLevel. Must be one of: {valid_levels_str}'

        factors = data.get('riskFactors') or {}
        if not isinstance(factors, dict):
            return False, 'riskFactors must be an object'
        for key in RiskAreaValidator.RISK_FACTOR_KEYS:
            if key in factors and not RiskAreaValidator.validate_risk_level(factors[key]):
                return False, f'Invalid risk factor level for {key}'

        return True, None
