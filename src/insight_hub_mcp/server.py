from __future__ import annotations

import logging
from typing import Callable, Optional

from mcp.server.fastmcp import FastMCP

from insight_hub_mcp.core.client import MCP_SERVER_NAME
from insight_hub_mcp.core.context import get_request_id
from insight_hub_mcp.core.registry import RequestIdProvider, register_discovered_tools
from insight_hub_mcp.core.resolver import ProjectResolver
from insight_hub_mcp.core.resources import register_resources

log = logging.getLogger(__name__)

# Listing every project is pointless once a project API key pins the session.
SCOPED_EXCLUDED_TOOLS = frozenset({"list_projects"})


def register_all(
    app: FastMCP,
    resolver_provider: Callable[[], ProjectResolver] | ProjectResolver,
    *,
    scoped: bool,
    request_id_provider: Optional[RequestIdProvider] = None,
) -> None:
    request_id_provider = request_id_provider or get_request_id
    exclude = SCOPED_EXCLUDED_TOOLS if scoped else frozenset()
    names = register_discovered_tools(
        app,
        resolver_provider,
        exclude=exclude,
        request_id_provider=request_id_provider,
    )
    register_resources(app, resolver_provider, request_id_provider)
    log.info("Registered %d tools (scoped=%s)", len(names), scoped)


def build_server(resolver: ProjectResolver, **settings) -> FastMCP:
    """Create a FastMCP instance exposing every tool and resource for `resolver`."""
    app = FastMCP(MCP_SERVER_NAME, **settings)
    register_all(app, resolver, scoped=bool(resolver.project_api_key))
    return app


__all__ = ["build_server", "register_all", "SCOPED_EXCLUDED_TOOLS"]
