"""
Tests for secure logging utilities with token and location redaction.
"""

import pytest
from utils.secure_logging import (
    format_point,
    redact_coordinates,
    redact_pii,
    redact_secrets,
    redact_url
)
from services.route_models import RoutePoint


class TestRedactSecrets:
    """Tests for access token redaction"""

    def test_redact_access_token_param(self):
        """access_token query parameter should be redacted"""
        text = "GET /directions?access_token=abcdef123&steps=true"
        result = redact_secrets(text)
        assert result == "GET /directions?access_token=[TOKEN_REDACTED]&steps=true"

    def test_redact_api_key_params(self):
        """api_key and key parameters should be redacted"""
        assert redact_secrets("?api_key=secret1") == "?api_key=[TOKEN_REDACTED]"
        assert redact_secrets("?key=secret2&x=1") == "?key=[TOKEN_REDACTED]&x=1"

    def test_redact_bare_mapbox_token(self):
        """Mapbox tokens should be redacted wherever they appear"""
        text = "Token pk.eyJ1IjoidGVzdCJ9.abc123 was rejected"
        result = redact_secrets(text)
        assert result == "Token [TOKEN_REDACTED] was rejected"

    def test_short_prefix_not_redacted(self):
        """Words like 'pk.test' are too short to be tokens"""
        assert redact_secrets("see pk.short") == "see pk.short"

    def test_empty_string(self):
        assert redact_secrets("") == ""


class TestRedactPII:
    """Tests for coordinate and secret redaction"""

    def test_redact_precise_coordinates(self):
        """Precise coordinates (4+ decimals) should be redacted"""
        text = "Location: 3.1390, 101.6869"
        result = redact_pii(text)
        assert result == "Location: [COORD_REDACTED], [COORD_REDACTED]"

    def test_keep_rough_coordinates(self):
        """Rough coordinates (1-3 decimals) should be preserved for debugging"""
        text = "City location: 3.1, 101.7"
        result = redact_pii(text)
        assert result == "City location: 3.1, 101.7"

    def test_negative_coordinates(self):
        assert redact_pii("at -33.86882, 151.20929") == "at [COORD_REDACTED], [COORD_REDACTED]"

    def test_secrets_also_redacted(self):
        result = redact_pii("access_token=pk.abcdefghijk at 3.13900")
        assert "pk.abcdefghijk" not in result
        assert "3.13900" not in result

    def test_none_value(self):
        """None should pass through unchanged"""
        assert redact_pii(None) is None


class TestRedactURL:
    """Tests for provider URL redaction"""

    def test_directions_url(self):
        url = ("https://api.mapbox.com/directions/v5/mapbox/driving/"
               "101.686900,3.139000;101.595100,3.107300?access_token=pk.abcdefghijkl&steps=true")
        result = redact_url(url)

        assert "pk.abcdefghijkl" not in result
        assert "101.686900" not in result
        assert result.startswith("https://api.mapbox.com/directions/v5/mapbox/driving/")

    def test_none_url(self):
        assert redact_url(None) is None


class TestRedactCoordinates:
    """Tests for coordinate precision reduction"""

    def test_redact_to_neighborhood_level(self):
        """Default precision is 2 decimals (~1.1 km)"""
        assert redact_coordinates(3.139, 101.6869) == ('3.14', '101.69')

    def test_custom_precision(self):
        assert redact_coordinates(3.139, 101.6869, precision=1) == ('3.1', '101.7')

    def test_missing_coordinates(self):
        assert redact_coordinates(None, 101.6869) == ('[REDACTED]', '[REDACTED]')

    def test_format_point(self):
        assert format_point(RoutePoint(lat=3.139, lon=101.6869)) == '(3.14, 101.69)'

    @pytest.mark.parametrize('value', [None, object()])
    def test_format_point_without_coordinates(self, value):
        assert format_point(value) == '([REDACTED], [REDACTED])'
