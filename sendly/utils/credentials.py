from __future__ import annotations

import re
from urllib.parse import urlsplit

from sendly.errors import configuration_error


_API_KEY_RE = re.compile(r"sk_(test|live)_v1_[A-Za-z0-9_-]+")
_LOOPBACK_HOSTS = frozenset({"localhost", "127.0.0.1"})


def is_test_key(api_key: str) -> bool:
    return api_key.startswith("sk_test_")


def validate_api_key(api_key: str) -> None:
    """Raise a configuration error unless the key looks like sk_(test|live)_v1_<token>."""
    if not isinstance(api_key, str) or not _API_KEY_RE.fullmatch(api_key):
        raise configuration_error(
            "Invalid API key format. Expected sk_test_v1_xxx or sk_live_v1_xxx"
        )


def validate_base_url(base_url: str) -> None:
    """Reject base URLs that would send the API key over plain HTTP.

    HTTPS is required except for loopback hosts used in local development.
    """
    try:
        parts = urlsplit(base_url)
    except (TypeError, ValueError) as exc:
        raise configuration_error(f"Invalid base URL: {base_url!r}") from exc
    if not parts.scheme or not parts.hostname:
        raise configuration_error(f"Invalid base URL: {base_url!r}")
    if parts.scheme.lower() == "https":
        return
    if parts.hostname.lower() in _LOOPBACK_HOSTS:
        return
    raise configuration_error(
        "API key must only be transmitted over HTTPS. Use https:// or localhost for development."
    )
