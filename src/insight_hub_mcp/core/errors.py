from __future__ import annotations

from typing import Any, Optional


class InsightHubError(Exception):
    """Base error for everything raised by insight_hub_mcp."""


class InsightHubClientError(InsightHubError):
    """Transport-level failure talking to the Insight Hub API."""


class InsightHubHTTPError(InsightHubClientError):
    def __init__(
        self,
        *,
        status_code: int,
        method: str,
        url: str,
        message: str,
        response_json: Optional[Any] = None,
        response_text: Optional[str] = None,
    ):
        super().__init__(f"{status_code} {method} {url}: {message}")
        self.status_code = status_code
        self.method = method
        self.url = url
        self.response_json = response_json
        self.response_text = response_text


class InsightHubParseError(InsightHubClientError):
    pass


# --- Configuration errors ---


class ConfigurationError(InsightHubError, ValueError):
    """The credential/endpoint setup cannot serve the request."""


class InvalidEndpointError(ConfigurationError):
    def __init__(self, message: str, *, endpoint: str):
        super().__init__(message)
        self.endpoint = endpoint


# --- Resolution errors ---


class ResolutionError(InsightHubError, ValueError):
    def __init__(self, message: str, *, query: str):
        super().__init__(message)
        self.query = query


class ProjectNotFoundError(ResolutionError):
    pass


class NoCurrentProjectError(ResolutionError):
    pass


class InvalidFilterError(ResolutionError):
    def __init__(self, message: str, *, field: str):
        super().__init__(message, query=field)
        self.field = field


class InvalidLinkError(ResolutionError):
    pass


__all__ = [
    "InsightHubError",
    "InsightHubClientError",
    "InsightHubHTTPError",
    "InsightHubParseError",
    "ConfigurationError",
    "InvalidEndpointError",
    "ResolutionError",
    "ProjectNotFoundError",
    "NoCurrentProjectError",
    "InvalidFilterError",
    "InvalidLinkError",
]
