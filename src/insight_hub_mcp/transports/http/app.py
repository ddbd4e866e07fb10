from __future__ import annotations

import logging
from typing import Callable, Optional

from mcp.server.fastmcp import FastMCP
from mcp.server.transport_security import TransportSecuritySettings

from insight_hub_mcp.core.client import MCP_SERVER_NAME
from insight_hub_mcp.core.config import create_resolver_from_env, load_env_config
from insight_hub_mcp.core.resolver import ProjectResolver
from insight_hub_mcp.server import register_all
from insight_hub_mcp.transports.http.config import HttpConfig
from insight_hub_mcp.transports.http.ops import (
    build_ops_app,
    compute_readiness_state,
    is_ops_path,
)
from insight_hub_mcp.transports.http.request_id_middleware import (
    RequestIdMiddleware,
    request_id_from_mcp_request,
)

log = logging.getLogger(__name__)


class LazyResolverProvider:
    """
    Build the env-configured resolver on first use, so the app (and its ops
    endpoints) can start before credentials are present.
    """

    def __init__(self) -> None:
        self._resolver: Optional[ProjectResolver] = None

    @property
    def resolver(self) -> Optional[ProjectResolver]:
        return self._resolver

    def __call__(self) -> ProjectResolver:
        if self._resolver is None:
            self._resolver = create_resolver_from_env(use_dotenv=False)
        return self._resolver

    async def aclose(self) -> None:
        if self._resolver is not None:
            await self._resolver.aclose()
            self._resolver = None


def build_fastmcp(
    cfg: HttpConfig | None = None,
    resolver: ProjectResolver | LazyResolverProvider | None = None,
) -> FastMCP:
    """Create and configure a FastMCP instance with registered tools."""
    cfg = cfg or HttpConfig.from_env()
    provider: Callable[[], ProjectResolver] | ProjectResolver
    if isinstance(resolver, ProjectResolver):
        provider = resolver
        scoped = bool(resolver.project_api_key)
    else:
        provider = resolver or LazyResolverProvider()
        scoped = bool(load_env_config(use_dotenv=False).project_api_key)

    transport_security = TransportSecuritySettings(
        enable_dns_rebinding_protection=True,
        allowed_hosts=[cfg.host, f"{cfg.host}:{cfg.port}", "testserver"],
        allowed_origins=[],
    )

    fastmcp = FastMCP(
        MCP_SERVER_NAME,
        json_response=cfg.json_response,
        stateless_http=cfg.stateless_http,
        streamable_http_path=cfg.path,
        host=cfg.host,
        port=cfg.port,
        transport_security=transport_security,
    )

    register_all(
        fastmcp,
        provider,
        scoped=scoped,
        request_id_provider=request_id_from_mcp_request,
    )

    log.info(
        "Built FastMCP (json_response=%s, stateless_http=%s, path=%s, host=%s, port=%s)",  # noqa: E501
        cfg.json_response,
        cfg.stateless_http,
        cfg.path,
        cfg.host,
        cfg.port,
    )
    return fastmcp


class OpsDispatcher:
    """
    ASGI wrapper that routes ops endpoints to a minimal app and everything else to the main app.
    Exposes router/state so callers using lifespan_context keep working, and
    closes the env-built resolver (if one was created) on aclose().
    """  # noqa: E501

    def __init__(
        self,
        ops_app,
        main_app,
        resolver_provider: Optional[LazyResolverProvider] = None,
    ):
        self.ops_app = ops_app
        self.main_app = main_app
        self.resolver_provider = resolver_provider
        self.router = main_app.router
        self.state = main_app.state

    async def aclose(self) -> None:
        if self.resolver_provider is not None:
            await self.resolver_provider.aclose()

    async def __call__(self, scope, receive, send):
        if is_ops_path(scope.get("path", "")):
            await self.ops_app(scope, receive, send)
            return
        await self.main_app(scope, receive, send)


def build_http_app(
    cfg: HttpConfig | None = None, resolver: ProjectResolver | None = None
):
    """Return an ASGI app that dispatches ops endpoints before the main FastMCP app."""
    cfg = cfg or HttpConfig.from_env()
    # Readiness is computed up front so ops endpoints work even without a token.
    readiness_state = compute_readiness_state()
    ops_app = build_ops_app(readiness_state)

    # Without an explicit resolver the app owns one built lazily from env.
    owned = LazyResolverProvider() if resolver is None else None
    fastmcp = build_fastmcp(cfg, resolver if resolver is not None else owned)
    main_app = fastmcp.streamable_http_app()
    main_app.add_middleware(RequestIdMiddleware)
    main_app.state.readiness = readiness_state

    return OpsDispatcher(ops_app, main_app, owned)


__all__ = [
    "HttpConfig",
    "LazyResolverProvider",
    "OpsDispatcher",
    "build_http_app",
    "build_fastmcp",
]
