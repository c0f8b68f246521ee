"""Input validation helpers for sketchctl."""

from __future__ import annotations

import re
from urllib.parse import urlparse

from sketchctl.core.exceptions import InvalidURLError, ValidationError

# Object key prefixes: path-like segments, no leading slash, no parent refs
PREFIX_PATTERN = re.compile(r"^[A-Za-z0-9._\-]+(/[A-Za-z0-9._\-]+)*/?$")
METADATA_KEY_PATTERN = re.compile(r"^[A-Za-z0-9\-_]+$")
MAX_CONCURRENT_LIMIT = 16


def validate_server_url(url: str) -> str:
    """Validate and normalize an API base URL.

    Args:
        url: URL to validate.

    Returns:
        URL without trailing slash.

    Raises:
        InvalidURLError: If the URL is not http(s) or has no host.
    """
    if not url or not url.strip():
        raise InvalidURLError(url, "URL is empty")

    url = url.strip()
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https"):
        raise InvalidURLError(url, "scheme must be http or https")
    if not parsed.netloc:
        raise InvalidURLError(url, "missing host")
    return url.rstrip("/")


def validate_max_concurrent(value: int) -> int:
    """Validate the in-flight upload ceiling."""
    if value < 1 or value > MAX_CONCURRENT_LIMIT:
        raise ValidationError(
            f"max_concurrent must be between 1 and {MAX_CONCURRENT_LIMIT}",
            field="max_concurrent",
            value=value,
        )
    return value


def validate_timeout(value: int) -> int:
    """Validate a timeout in seconds."""
    if value <= 0:
        raise ValidationError("Timeout must be positive", field="timeout", value=value)
    return value


def validate_prefix(prefix: str | None) -> str | None:
    """Validate a destination prefix for object keys.

    Returns:
        The prefix, or None when empty.
    """
    if prefix is None or prefix == "":
        return None
    if ".." in prefix.split("/") or not PREFIX_PATTERN.match(prefix):
        raise ValidationError(
            "Prefix must be slash-separated segments of letters, digits, '.', '_' or '-'",
            field="prefix",
            value=prefix,
        )
    return prefix


def validate_metadata(metadata: dict[str, str] | None) -> dict[str, str] | None:
    """Validate user metadata attached to uploaded objects.

    Keys become storage metadata headers on the backend, so they are
    restricted to header-safe characters.
    """
    if not metadata:
        return None
    for key, value in metadata.items():
        if not METADATA_KEY_PATTERN.match(key):
            raise ValidationError("Invalid metadata key", field="metadata", value=key)
        if not isinstance(value, str):
            raise ValidationError(
                f"Metadata value for '{key}' must be a string", field="metadata", value=value
            )
    return metadata
