"""
Secure logging utilities for the routing engine.

Directions requests carry the provider access token in the query string and
user start/destination points in the path. Both must be scrubbed before a URL
or error message reaches the logs.

Usage:
    from utils.secure_logging import redact_url, redact_pii

    logger.warning(f"Request failed: {redact_url(response.url)}")
    # Output: "Request failed: https://api.mapbox.com/.../[COORD_REDACTED],...?access_token=[TOKEN_REDACTED]"
"""

import re
from typing import Optional


def redact_secrets(text: str) -> str:
    """
    Redact access tokens and API keys from a string.

    Redacts:
    - access_token / api_key / apiKey / key query parameters → [TOKEN_REDACTED]
    - Mapbox tokens (pk./sk./tk. prefixed) anywhere in the text → [TOKEN_REDACTED]

    Examples:
        >>> redact_secrets("url?access_token=pk.abc123&steps=true")
        'url?access_token=[TOKEN_REDACTED]&steps=true'
    """
    if not text:
        return text

    text = re.sub(
        r'((?:access_token|api_key|apiKey|key)=)[^&\s]+',
        r'\1[TOKEN_REDACTED]',
        text
    )

    text = re.sub(
        r'\b(?:pk|sk|tk)\.[A-Za-z0-9_\-\.]{8,}',
        '[TOKEN_REDACTED]',
        text
    )

    return text


def redact_pii(text: str) -> str:
    """
    Redact precise locations and secrets from log messages.

    Precise coordinates (4+ decimal places, ~11m accuracy) are replaced with
    [COORD_REDACTED]; rough coordinates (1-3 decimals, city level) are kept
    for debugging.

    Examples:
        >>> redact_pii("Location: 3.1390, 101.6869")
        'Location: [COORD_REDACTED], [COORD_REDACTED]'

        >>> redact_pii("City location: 3.1, 101.7")
        'City location: 3.1, 101.7'
    """
    if not text:
        return text

    text = redact_secrets(text)

    text = re.sub(
        r'-?\d{1,3}\.\d{4,}',
        '[COORD_REDACTED]',
        text
    )

    return text


def redact_url(url: Optional[str]) -> Optional[str]:
    """Redact a provider request URL for logging (token and precise coordinates)."""
    if url is None:
        return None
    return redact_pii(str(url))


def redact_coordinates(lat: Optional[float], lon: Optional[float], precision: int = 2) -> tuple[str, str]:
    """
    Redact coordinates to a safe precision level for logging.

    Precision levels:
    - 1 decimal: ~11 km (city level)
    - 2 decimals: ~1.1 km (neighborhood level) **RECOMMENDED**
    - 4+ decimals: ~11 m (building level) **TOO PRECISE FOR LOGS**

    Examples:
        >>> redact_coordinates(3.139, 101.6869, precision=2)
        ('3.14', '101.69')

        >>> redact_coordinates(None, None)
        ('[REDACTED]', '[REDACTED]')
    """
    if lat is None or lon is None:
        return ('[REDACTED]', '[REDACTED]')

    return (
        f"{lat:.{precision}f}",
        f"{lon:.{precision}f}"
    )


def format_point(point, precision: int = 2) -> str:
    """Format anything with .lat/.lon as a rounded '(lat, lon)' string for logs."""
    lat, lon = redact_coordinates(getattr(point, 'lat', None), getattr(point, 'lon', None), precision)
    return f"({lat}, {lon})"
