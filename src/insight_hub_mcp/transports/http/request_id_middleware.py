from __future__ import annotations

import time
from typing import Optional

from mcp.server.lowlevel.server import request_ctx
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from insight_hub_mcp.core.context import (
    apply_request_id,
    ensure_request_id,
    get_request_id,
    reset_request_id,
)
from insight_hub_mcp.core.observability import log_event

REQUEST_ID_HEADER = "X-Request-Id"
CORRELATION_ID_HEADER = "X-Correlation-Id"


class RequestIdMiddleware(BaseHTTPMiddleware):
    """
    Tag every HTTP request with a request id.
    - Accepts X-Request-Id or X-Correlation-Id, generates one when absent.
    - Binds it to the request-id ContextVar and stores it on request.state,
      so tool calls and upstream hub_call logs share it (see
      request_id_from_mcp_request for stateful sessions).
    - Echoes X-Request-Id and logs an http_request event, even on errors.
    """

    async def dispatch(self, request: Request, call_next):
        rid = ensure_request_id(
            (
                request.headers.get(REQUEST_ID_HEADER)
                or request.headers.get(CORRELATION_ID_HEADER)
                or ""
            ).strip()
        )
        request.state.request_id = rid
        token = apply_request_id(rid)

        start = time.perf_counter()
        response: Response | None = None
        try:
            response = await call_next(request)
            return response
        finally:
            reset_request_id(token)
            duration_ms = int((time.perf_counter() - start) * 1000)
            if response is not None:
                response.headers.setdefault(REQUEST_ID_HEADER, rid)

            log_event(
                "http_request",
                request_id=rid,
                method=request.method.upper(),
                url=request.url.path,
                status=response.status_code if response is not None else "exception",
                duration_ms=duration_ms,
            )


def request_id_from_mcp_request() -> Optional[str]:
    """
    Request id for the MCP request being handled.

    Stateful sessions run handlers in the session task group, outside the
    HTTP request's context, so the ContextVar bound by the middleware is not
    visible there. The HTTP request travels with the MCP request context
    instead; read the id from its state (or headers) when present.
    """
    try:
        request = request_ctx.get().request
    except LookupError:
        request = None

    if isinstance(request, Request):
        rid = getattr(request.state, "request_id", None) or (
            request.headers.get(REQUEST_ID_HEADER)
            or request.headers.get(CORRELATION_ID_HEADER)
            or ""
        ).strip()
        if rid:
            return rid
    return get_request_id()


__all__ = [
    "RequestIdMiddleware",
    "request_id_from_mcp_request",
    "REQUEST_ID_HEADER",
    "CORRELATION_ID_HEADER",
]
