from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import httpx

from .context import get_request_id
from .endpoints import get_endpoint
from .errors import (
    InsightHubClientError,
    InsightHubHTTPError,
    InsightHubParseError,
)
from .observability import log_event

MCP_SERVER_NAME = "insight-hub-mcp"
MCP_SERVER_VERSION = "0.1.0"

QueryParams = Union[Dict[str, Any], Sequence[Tuple[str, Any]]]


@dataclass(frozen=True)
class ApiResponse:
    """One logical call: the last page's status/headers and the (concatenated) body."""

    status: int
    headers: Dict[str, str] = field(default_factory=dict)
    body: Any = None


class InsightHubClient:
    """
    Shared HTTP client for the Insight Hub (BugSnag Data Access) API.
    - Handles auth, base URL selection, timeouts and Link-header pagination
    - Returns decoded JSON; no retries, failures surface immediately
    - No business logic; the resolver and tools own domain decisions
    """

    def __init__(
        self,
        *,
        auth_token: str,
        project_api_key: Optional[str] = None,
        endpoint: Optional[str] = None,
        timeout_seconds: float = 30.0,
        headers: Optional[Dict[str, str]] = None,
        logger: Optional[logging.Logger] = None,
        http: Optional[httpx.AsyncClient] = None,
        request_id: Optional[str] = None,
    ):
        auth_token = (auth_token or "").strip()
        if not auth_token:
            raise ValueError("auth_token must be provided.")

        self.project_api_key = project_api_key or None
        self.endpoint = endpoint or None
        self.base_url = get_endpoint("api", self.project_api_key, self.endpoint)
        self.app_url = get_endpoint("app", self.project_api_key, self.endpoint)
        self.timeout_seconds = timeout_seconds
        self.request_id = request_id
        self.log = logger or logging.getLogger("insight_hub_mcp.client")

        default_headers = {
            "Authorization": f"token {auth_token}",
            "Content-Type": "application/json",
            "User-Agent": f"{MCP_SERVER_NAME}/{MCP_SERVER_VERSION}",
            "X-Bugsnag-API": "true",
            "X-Version": "2",
        }
        if headers:
            default_headers.update(headers)

        self._owns_http = http is None
        self.http = http or httpx.AsyncClient(
            base_url=self.base_url,
            headers=default_headers,
            timeout=timeout_seconds,
        )

    async def aclose(self) -> None:
        if self._owns_http:
            await self.http.aclose()

    async def __aenter__(self) -> "InsightHubClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def execute(
        self,
        method: str,
        url: str,
        *,
        params: Optional[QueryParams] = None,
        json: Optional[Any] = None,
        headers: Optional[Dict[str, str]] = None,
        paginate: bool = False,
        tool: Optional[str] = None,
    ) -> ApiResponse:
        """
        Core request method.
        - Raises InsightHubHTTPError on non-2xx HTTP responses (no retries)
        - Raises InsightHubClientError on network/timeout errors
        - Raises InsightHubParseError if a response body isn't valid JSON
        - With paginate=True, follows rel="next" Link headers until none is
          returned and concatenates every page body in fetch order
        """
        method = method.upper()
        results: List[Any] = []
        next_url: Optional[str] = url
        page = 0

        while next_url is not None:
            page += 1
            resp = await self._send(
                method,
                next_url,
                # The next link already carries its own query string.
                params=params if page == 1 else None,
                json=json,
                headers=headers,
                tool=tool,
                page=page,
            )
            data = self._safe_json(resp)

            if not paginate:
                return ApiResponse(
                    status=resp.status_code, headers=dict(resp.headers), body=data
                )

            if isinstance(data, list):
                results.extend(data)
            elif data is not None:
                results.append(data)

            next_url = self._next_link(resp)
            if next_url is not None:
                self.log.debug(
                    "Following next page link (page %d): %s", page + 1, next_url
                )

        return ApiResponse(
            status=resp.status_code, headers=dict(resp.headers), body=results
        )

    async def _send(
        self,
        method: str,
        url: str,
        *,
        params: Optional[QueryParams],
        json: Optional[Any],
        headers: Optional[Dict[str, str]],
        tool: Optional[str],
        page: int,
    ) -> httpx.Response:
        start = time.perf_counter()
        request_id = self.request_id or get_request_id()
        try:
            resp = await self.http.request(
                method, url, params=params, json=json, headers=headers
            )
        except httpx.HTTPError as exc:
            log_event(
                "hub_call",
                request_id=request_id,
                tool=tool,
                method=method,
                url=url,
                page=page,
                status="exception",
                error_type=type(exc).__name__,
                duration_ms=int((time.perf_counter() - start) * 1000),
            )
            raise InsightHubClientError(
                f"HTTP error calling {method} {url}: {exc}"
            ) from exc

        log_event(
            "hub_call",
            request_id=request_id,
            tool=tool,
            method=method,
            url=str(resp.request.url),
            page=page,
            status=resp.status_code,
            duration_ms=int((time.perf_counter() - start) * 1000),
        )

        if resp.status_code < 200 or resp.status_code >= 300:
            raise self._to_http_error(resp, method=method)
        return resp

    @staticmethod
    def _next_link(resp: httpx.Response) -> Optional[str]:
        # httpx parses the Link header into {rel: {"url": ..., "rel": ...}}
        return resp.links.get("next", {}).get("url") or None

    def _safe_json(self, resp: httpx.Response) -> Any:
        # Handle empty responses (204 No Content, etc.)
        if not resp.content:
            return None

        try:
            return resp.json()
        except ValueError as exc:
            snippet = (resp.text or "")[:500]
            raise InsightHubParseError(
                f"Expected JSON from {resp.request.method} "
                f"{resp.request.url}, got non-JSON body snippet: "
                f"{snippet!r}"
            ) from exc

    def _to_http_error(
        self, resp: httpx.Response, *, method: str
    ) -> InsightHubHTTPError:
        url = str(resp.request.url)
        response_text = (resp.text or "")[:500]
        response_json: Optional[Any] = None
        message = response_text or "request failed"

        try:
            parsed = resp.json()
        except ValueError:
            parsed = None
        if isinstance(parsed, dict):
            response_json = parsed
            errors = parsed.get("errors")
            if isinstance(errors, list) and errors:
                message = "; ".join(str(e) for e in errors)
            else:
                message = parsed.get("message") or parsed.get("error") or message

        return InsightHubHTTPError(
            status_code=resp.status_code,
            method=method,
            url=url,
            message=message,
            response_json=response_json,
            response_text=response_text,
        )

    async def get(
        self,
        url: str,
        *,
        params: Optional[QueryParams] = None,
        paginate: bool = False,
        tool: Optional[str] = None,
    ) -> Any:
        response = await self.execute(
            "GET", url, params=params, paginate=paginate, tool=tool
        )
        return response.body

    async def post(
        self, url: str, *, json: Optional[Any] = None, tool: Optional[str] = None
    ) -> Any:
        response = await self.execute("POST", url, json=json, tool=tool)
        return response.body

    async def patch(
        self, url: str, *, json: Optional[Any] = None, tool: Optional[str] = None
    ) -> Any:
        response = await self.execute("PATCH", url, json=json, tool=tool)
        return response.body


__all__ = [
    "InsightHubClient",
    "ApiResponse",
    "MCP_SERVER_NAME",
    "MCP_SERVER_VERSION",
]
