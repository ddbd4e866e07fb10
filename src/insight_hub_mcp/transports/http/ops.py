"""
Liveness/readiness endpoints served ahead of the MCP app.

Readiness reflects static configuration only; it never calls the Insight Hub
API.
"""

from __future__ import annotations

from typing import Dict

from starlette.applications import Starlette
from starlette.responses import JSONResponse

from insight_hub_mcp.core.config import load_env_config
from insight_hub_mcp.core.endpoints import get_endpoint
from insight_hub_mcp.core.errors import ConfigurationError

OPS_PATHS = {"/healthz", "/readyz"}
NO_STORE = {"Cache-Control": "no-store"}


def is_ops_path(path: str | None) -> bool:
    return bool(path) and path in OPS_PATHS


def compute_readiness_state() -> Dict[str, bool]:
    config = load_env_config(use_dotenv=False)
    try:
        get_endpoint("api", config.project_api_key, config.endpoint)
        endpoint_valid = True
    except ConfigurationError:
        endpoint_valid = False

    return {
        "default_auth_token_present": bool(config.auth_token),
        "endpoint_valid": endpoint_valid,
    }


def build_readiness_status(readiness_state: Dict[str, bool]) -> Dict[str, object]:
    failed = [k for k, v in readiness_state.items() if not v]
    return {
        "status": "ok" if not failed else "fail",
        "checks": readiness_state,
        "failed": failed,
    }


def build_ops_app(readiness_state: Dict[str, bool]) -> Starlette:
    async def healthz(_request):
        return JSONResponse({"status": "ok"}, headers=NO_STORE)

    async def readyz(_request):
        payload = build_readiness_status(readiness_state)
        return JSONResponse(
            payload,
            status_code=200 if payload["status"] == "ok" else 503,
            headers=NO_STORE,
        )

    ops_app = Starlette()
    ops_app.add_route("/healthz", healthz, methods=["GET"])
    ops_app.add_route("/readyz", readyz, methods=["GET"])
    return ops_app


__all__ = [
    "is_ops_path",
    "compute_readiness_state",
    "build_readiness_status",
    "build_ops_app",
    "OPS_PATHS",
]
