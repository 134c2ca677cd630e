"""
URL validation for the directions provider base URL.

The base URL comes from the host environment and every request embeds the
access token, so the URL is checked once at service construction:
a token must never be sent over plain HTTP to a remote host.

Usage:
    from utils.url_validator import validate_provider_base_url

    is_valid, error = validate_provider_base_url(base_url)
    if not is_valid:
        raise ConfigError(ConfigError.INVALID_BASE_URL, error)
"""

from urllib.parse import urlparse
from typing import Optional, Tuple


# Hosts where plain HTTP is acceptable (self-hosted provider during development)
LOCAL_HOSTS = ['localhost', '127.0.0.1', '::1']

MAX_URL_LENGTH = 2048


def validate_provider_base_url(url: str) -> Tuple[bool, Optional[str]]:
    """
    Validate a directions provider base URL.

    Checks:
    1. URL is present and shorter than 2048 characters
    2. Scheme is HTTPS, or HTTP against a local host
    3. Hostname exists
    4. No query string or fragment (parameters are appended per request)

    Args:
        url: The base URL to validate

    Returns:
        Tuple[bool, str]: (is_valid, error_message)

    Examples:
        >>> validate_provider_base_url('https://api.mapbox.com/directions/v5/mapbox')
        (True, None)

        >>> validate_provider_base_url('http://api.mapbox.com/directions/v5/mapbox')
        (False, 'Only HTTPS URLs are allowed for remote providers')

        >>> validate_provider_base_url('http://localhost:5000/route/v1')
        (True, None)
    """
    if not url:
        return (False, 'Base URL is required')

    if len(url) > MAX_URL_LENGTH:
        return (False, f'URL too long (max {MAX_URL_LENGTH} characters)')

    try:
        parsed = urlparse(url)
    except ValueError:
        return (False, 'Invalid URL format')

    hostname = parsed.hostname
    if parsed.scheme not in ('http', 'https'):
        return (False, f'Scheme not allowed: {parsed.scheme}')

    if not hostname:
        return (False, 'Invalid hostname')

    if parsed.scheme == 'http' and hostname not in LOCAL_HOSTS:
        return (False, 'Only HTTPS URLs are allowed for remote providers')

    if parsed.query or parsed.fragment:
        return (False, 'Base URL must not contain a query string or fragment')

    return (True, None)
