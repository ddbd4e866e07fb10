"""insight_hub_mcp package exports."""

from .core.client import ApiResponse, InsightHubClient
from .core.config import create_resolver_from_env
from .core.errors import (
    ConfigurationError,
    InsightHubClientError,
    InsightHubError,
    InsightHubHTTPError,
    InsightHubParseError,
    ResolutionError,
)
from .core.resolver import ProjectResolver
from .server import build_server, register_all

__all__ = [
    # Client
    "InsightHubClient",
    "ApiResponse",
    # Resolution
    "ProjectResolver",
    "create_resolver_from_env",
    # Exceptions
    "InsightHubError",
    "InsightHubClientError",
    "InsightHubHTTPError",
    "InsightHubParseError",
    "ConfigurationError",
    "ResolutionError",
    # Server utilities
    "build_server",
    "register_all",
]
