"""Core domain surface for insight-hub-mcp (transport-agnostic)."""

from .cache import ResolutionCache
from .client import ApiResponse, InsightHubClient
from .config import (
    HubConfig,
    create_client,
    create_resolver_from_env,
    load_env_config,
)
from .context import (
    apply_request_id,
    ensure_request_id,
    get_request_id,
    reset_request_id,
)
from .endpoints import get_endpoint, is_hub_api_key
from .errors import (
    ConfigurationError,
    InsightHubClientError,
    InsightHubError,
    InsightHubHTTPError,
    InsightHubParseError,
    InvalidEndpointError,
    InvalidFilterError,
    InvalidLinkError,
    NoCurrentProjectError,
    ProjectNotFoundError,
    ResolutionError,
)
from .filters import (
    parse_filters,
    to_query_params,
    to_query_string,
    validate_filter_keys,
)
from .models import EventField, FilterValue, Organization, Project
from .registry import (
    discover_tool_modules,
    iter_tool_functions,
    register_discovered_tools,
)
from .resolver import ProjectResolver
from .resources import register_resources

__all__ = [
    # Client
    "InsightHubClient",
    "ApiResponse",
    "get_endpoint",
    "is_hub_api_key",
    # Resolution
    "ProjectResolver",
    "ResolutionCache",
    # Models
    "Organization",
    "Project",
    "EventField",
    "FilterValue",
    # Filters
    "parse_filters",
    "validate_filter_keys",
    "to_query_params",
    "to_query_string",
    # Exceptions
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
    # Config helpers
    "HubConfig",
    "load_env_config",
    "create_client",
    "create_resolver_from_env",
    # Registry helpers
    "discover_tool_modules",
    "iter_tool_functions",
    "register_discovered_tools",
    "register_resources",
    # Context
    "apply_request_id",
    "reset_request_id",
    "get_request_id",
    "ensure_request_id",
]
