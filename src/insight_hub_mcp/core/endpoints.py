"""
Base URL selection for the Insight Hub / BugSnag API families.
"""

from __future__ import annotations

from typing import Optional
from urllib.parse import urlsplit

from .errors import InvalidEndpointError

HUB_API_KEY_PREFIX = "00000"
HUB_DOMAIN = "insighthub.smartbear.com"
BUGSNAG_DOMAIN = "bugsnag.com"
KNOWN_DOMAINS = (HUB_DOMAIN, BUGSNAG_DOMAIN)


def is_hub_api_key(project_api_key: Optional[str]) -> bool:
    """Prefix check only; a key containing the prefix elsewhere is a standard key."""
    return bool(project_api_key) and project_api_key.startswith(HUB_API_KEY_PREFIX)


def _matching_domain(hostname: str) -> Optional[str]:
    host = hostname.strip().rstrip(".").lower()
    for domain in KNOWN_DOMAINS:
        if host == domain or host.endswith("." + domain):
            return domain
    return None


def _parse_hostname(endpoint: str) -> str:
    try:
        parts = urlsplit(endpoint)
        # Accessing .port validates it (raises ValueError when out of range).
        parts.port
    except ValueError as exc:
        raise InvalidEndpointError(
            f"Invalid endpoint URL: {endpoint}", endpoint=endpoint
        ) from exc

    if not parts.scheme or not parts.netloc or not parts.hostname:
        raise InvalidEndpointError(
            f"Invalid endpoint URL: {endpoint}", endpoint=endpoint
        )
    return parts.hostname


def get_endpoint(
    subdomain: str,
    project_api_key: Optional[str] = None,
    endpoint: Optional[str] = None,
) -> str:
    """
    Return the base URL for `subdomain` ("api", "app", ...).

    - No explicit endpoint: Hub domain for hub-scoped project keys, BugSnag otherwise.
    - Explicit endpoint on a known domain: normalized to https://<subdomain>.<domain>.
    - Any other explicit endpoint: returned unchanged.

    The subdomain is concatenated as given, even when empty.
    """
    if not endpoint:
        domain = HUB_DOMAIN if is_hub_api_key(project_api_key) else BUGSNAG_DOMAIN
        return f"https://{subdomain}.{domain}"

    domain = _matching_domain(_parse_hostname(endpoint))
    if domain is None:
        return endpoint
    return f"https://{subdomain}.{domain}"


__all__ = [
    "get_endpoint",
    "is_hub_api_key",
    "HUB_API_KEY_PREFIX",
    "HUB_DOMAIN",
    "BUGSNAG_DOMAIN",
]
