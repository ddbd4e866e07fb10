from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from .client import InsightHubClient
from .resolver import ProjectResolver

DEFAULT_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True)
class HubConfig:
    auth_token: str
    project_api_key: Optional[str] = None
    endpoint: Optional[str] = None
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS


def _get_float_env(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}") from exc


def load_env_config(*, use_dotenv: bool = True) -> HubConfig:
    """Load Insight Hub settings from environment (optional .env)."""
    if use_dotenv:
        load_dotenv()
    return HubConfig(
        auth_token=os.getenv("INSIGHT_HUB_AUTH_TOKEN", "").strip(),
        project_api_key=os.getenv("INSIGHT_HUB_PROJECT_API_KEY", "").strip() or None,
        endpoint=os.getenv("INSIGHT_HUB_ENDPOINT", "").strip() or None,
        timeout_seconds=_get_float_env(
            "INSIGHT_HUB_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS
        ),
    )


def create_client(config: HubConfig, **kwargs) -> InsightHubClient:
    return InsightHubClient(
        auth_token=config.auth_token,
        project_api_key=config.project_api_key,
        endpoint=config.endpoint,
        timeout_seconds=config.timeout_seconds,
        **kwargs,
    )


def create_resolver_from_env(*, use_dotenv: bool = True, **kwargs) -> ProjectResolver:
    """Create a ProjectResolver (and its client) from environment variables."""
    config = load_env_config(use_dotenv=use_dotenv)
    if not config.auth_token:
        raise ValueError("Missing INSIGHT_HUB_AUTH_TOKEN in environment.")
    client = create_client(config, **kwargs)
    return ProjectResolver(client, project_api_key=config.project_api_key)


__all__ = [
    "HubConfig",
    "load_env_config",
    "create_client",
    "create_resolver_from_env",
]
