from __future__ import annotations

import os
from dataclasses import dataclass


def _get_bool_env(name: str, default: bool) -> bool:
    """Parse a boolean environment variable with a safe default."""
    raw = os.getenv(name)
    if raw is None:
        return default
    val = raw.strip().lower()
    if val in {"1", "true", "t", "yes", "y", "on"}:
        return True
    if val in {"0", "false", "f", "no", "n", "off"}:
        return False
    return default


@dataclass(frozen=True)
class HttpConfig:
    """Minimal configuration for the HTTP transport runner."""

    host: str = "127.0.0.1"
    port: int = 8000
    path: str = "/mcp"
    json_response: bool = True
    stateless_http: bool = True

    @classmethod
    def from_env(cls) -> "HttpConfig":
        raw_port = os.getenv("MCP_HTTP_PORT", "").strip()
        port = int(raw_port) if raw_port else cls.port
        if not 0 < port < 65536:
            raise ValueError("MCP_HTTP_PORT must be between 1 and 65535")

        path = os.getenv("MCP_HTTP_PATH", "").strip() or cls.path
        if not path.startswith("/"):
            path = "/" + path

        return cls(
            host=os.getenv("MCP_HTTP_HOST", "").strip() or cls.host,
            port=port,
            path=path,
            json_response=_get_bool_env("MCP_HTTP_JSON_RESPONSE", cls.json_response),
            stateless_http=_get_bool_env("MCP_HTTP_STATELESS", cls.stateless_http),
        )


__all__ = ["HttpConfig"]
