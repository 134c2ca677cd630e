"""
Tests for provider base URL validation (token leak prevention).
"""

import pytest
from utils.url_validator import validate_provider_base_url


class TestValidateProviderBaseURL:
    """Tests for directions provider base URL validation"""

    def test_default_mapbox_url(self):
        """The public Mapbox Directions endpoint should pass"""
        is_valid, error = validate_provider_base_url('https://api.mapbox.com/directions/v5/mapbox')
        assert is_valid is True
        assert error is None

    def test_http_remote_rejected(self):
        """Tokens must never be sent over plain HTTP to a remote host"""
        is_valid, error = validate_provider_base_url('http://api.mapbox.com/directions/v5/mapbox')
        assert is_valid is False
        assert error == 'Only HTTPS URLs are allowed for remote providers'

    @pytest.mark.parametrize('url', [
        'http://localhost:5000/route/v1',
        'http://127.0.0.1:8080/directions',
        'http://[::1]:8080/directions',
    ])
    def test_http_local_allowed(self, url):
        """A self-hosted provider on the local machine may use HTTP"""
        assert validate_provider_base_url(url) == (True, None)

    def test_empty_url_rejected(self):
        assert validate_provider_base_url('') == (False, 'Base URL is required')
        assert validate_provider_base_url(None) == (False, 'Base URL is required')

    def test_disallowed_scheme_rejected(self):
        is_valid, error = validate_provider_base_url('ftp://api.mapbox.com/directions')
        assert is_valid is False
        assert error == 'Scheme not allowed: ftp'

    def test_missing_hostname(self):
        assert validate_provider_base_url('https:///directions') == (False, 'Invalid hostname')

    def test_query_string_rejected(self):
        """Parameters are appended per request; a baked-in query could carry a second token"""
        is_valid, error = validate_provider_base_url('https://api.mapbox.com/directions?access_token=pk.x')
        assert is_valid is False
        assert error == 'Base URL must not contain a query string or fragment'

    def test_fragment_rejected(self):
        is_valid, _ = validate_provider_base_url('https://api.mapbox.com/directions#v5')
        assert is_valid is False

    def test_url_too_long(self):
        url = 'https://api.mapbox.com/' + 'a' * 2100
        is_valid, error = validate_provider_base_url(url)
        assert is_valid is False
        assert 'too long' in error
