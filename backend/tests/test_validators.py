"""
Tests for validation utilities
"""
import pytest
from utils.validators import CoordinateValidator, RiskAreaValidator


class TestCoordinateValidator:
    """Test suite for CoordinateValidator"""

    def test_valid_coordinates(self):
        """Test valid latitude and longitude ranges"""
        assert CoordinateValidator.validate_coordinates(3.139, 101.6869) is True
        assert CoordinateValidator.validate_coordinates(0, 0) is True
        assert CoordinateValidator.validate_coordinates(90, 180) is True
        assert CoordinateValidator.validate_coordinates(-90, -180) is True

    def test_invalid_latitude(self):
        """Test invalid latitude values"""
        assert CoordinateValidator.validate_coordinates(91, 0) is False
        assert CoordinateValidator.validate_coordinates(-91, 0) is False

    def test_invalid_longitude(self):
        """Test invalid longitude values"""
        assert CoordinateValidator.validate_coordinates(0, 181) is False
        assert CoordinateValidator.validate_coordinates(0, -181) is False

    def test_invalid_types(self):
        """Test non-numeric and non-finite values"""
        assert CoordinateValidator.validate_coordinates('abc', 0) is False
        assert CoordinateValidator.validate_coordinates(None, 0) is False
        assert CoordinateValidator.validate_coordinates(float('nan'), 0) is False
        assert CoordinateValidator.validate_coordinates(0, float('inf')) is False

    def test_booleans_rejected(self):
        """True/False are ints in Python but never coordinates"""
        assert CoordinateValidator.validate_coordinates(True, 0) is False

    def test_coordinate_dict_valid(self):
        """Test coordinate dictionary validation"""
        assert CoordinateValidator.validate_coordinate_dict({'lat': 3.139, 'lon': 101.6869}) is True

    def test_coordinate_dict_invalid(self):
        """Test invalid coordinate dictionaries"""
        assert CoordinateValidator.validate_coordinate_dict({'lat': 91, 'lon': 0}) is False
        assert CoordinateValidator.validate_coordinate_dict({'latitude': 3.1, 'longitude': 101.6}) is False
        assert CoordinateValidator.validate_coordinate_dict(None) is False


class TestRiskAreaValidator:
    """Test suite for RiskAreaValidator"""

    @pytest.fixture
    def valid_area(self):
        return {
            'location': {'lat': 3.0631, 'lon': 101.6727, 'name': 'Puchong'},
            'affectedRadius': 3,
            'overallRiskLevel': 'high',
            'riskFactors': {'flooding': 'high', 'windDamage': 'low', 'heatWave': 'low', 'coldWave': 'low'}
        }

    def test_valid_risk_levels(self):
        """Test all valid risk levels"""
        for level in ['low', 'medium', 'high', 'extreme']:
            assert RiskAreaValidator.validate_risk_level(level) is True

    def test_case_insensitive_risk_levels(self):
        assert RiskAreaValidator.validate_risk_level('EXTREME') is True
        assert RiskAreaValidator.validate_risk_level('Medium') is True

    def test_invalid_risk_levels(self):
        assert RiskAreaValidator.validate_risk_level('critical') is False
        assert RiskAreaValidator.validate_risk_level('') is False
        assert RiskAreaValidator.validate_risk_level(None) is False
        assert RiskAreaValidator.validate_risk_level(3) is False

    def test_vehicle_types(self):
        for vehicle_type in ['driving', 'walking', 'cycling', 'DRIVING']:
            assert RiskAreaValidator.validate_vehicle_type(vehicle_type) is True
        assert RiskAreaValidator.validate_vehicle_type('driving-traffic') is False
        assert RiskAreaValidator.validate_vehicle_type(None) is False

    def test_valid_radius(self):
        assert RiskAreaValidator.validate_radius(3) == (True, None)
        assert RiskAreaValidator.validate_radius(0) == (True, None)
        assert RiskAreaValidator.validate_radius('2.5') == (True, None)

    def test_invalid_radius(self):
        assert RiskAreaValidator.validate_radius(-1) == (False, 'radius must be zero or positive')
        assert RiskAreaValidator.validate_radius(float('nan')) == (False, 'radius must be zero or positive')
        assert RiskAreaValidator.validate_radius('wide') == (False, 'radius must be a number')
        assert RiskAreaValidator.validate_radius(True) == (False, 'radius must be a number')

    def test_valid_risk_area(self, valid_area):
        assert RiskAreaValidator.validate_risk_area_data(valid_area) == (True, None)

    def test_engine_shape_accepted(self):
        data = {'center': {'lat': 3.0, 'lon': 101.0}, 'radiusKm': 1, 'overallRiskLevel': 'low'}
        assert RiskAreaValidator.validate_risk_area_data(data) == (True, None)

    def test_missing_location(self, valid_area):
        del valid_area['location']
        assert RiskAreaValidator.validate_risk_area_data(valid_area) == (False, 'Missing required field: location')

    def test_invalid_location(self, valid_area):
        valid_area['location'] = {'lat': 200, 'lon': 101.6727}
        assert RiskAreaValidator.validate_risk_area_data(valid_area) == (False, 'Invalid risk area coordinates')

    def test_missing_radius(self, valid_area):
        del valid_area['affectedRadius']
        is_valid, error = RiskAreaValidator.validate_risk_area_data(valid_area)
        assert is_valid is False
        assert error == 'Missing required field: affectedRadius'

    def test_invalid_overall_level(self, valid_area):
        valid_area['overallRiskLevel'] = 'severe'
        is_valid, error = RiskAreaValidator.validate_risk_area_data(valid_area)
        assert is_valid is False
        assert error == 'Invalid overallRiskLevel. Must be one of: low, medium, high, extreme'

    def test_invalid_risk_factor(self, valid_area):
        valid_area['riskFactors']['windDamage'] = 'gale'
        is_valid, error = RiskAreaValidator.validate_risk_area_data(valid_area)
        assert is_valid is False
        assert 'windDamage' in error

    def test_not_an_object(self):
        assert RiskAreaValidator.validate_risk_area_data(['high']) == (False, 'Risk area must be an object')
