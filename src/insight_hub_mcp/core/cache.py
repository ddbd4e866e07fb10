"""
Process-lifetime store for resolved organization/project state.

Entries never expire and are never refreshed; a restart is needed to see new
projects. There is no locking: two concurrent misses on the same key may both
fetch and both write, last write wins. The fetched values are the same remote
truth, so the duplicate call is tolerated rather than serialized.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

ORGANIZATION_KEY = "insight_hub_org"
PROJECTS_KEY = "insight_hub_projects"
CURRENT_PROJECT_KEY = "insight_hub_current_project"
CURRENT_PROJECT_EVENT_FILTERS_KEY = "insight_hub_current_project_event_filters"
PROJECT_EVENT_FILTERS_PREFIX = "insight_hub_project_event_filters"


def project_event_filters_key(project_id: str) -> str:
    return f"{PROJECT_EVENT_FILTERS_PREFIX}:{project_id}"


class ResolutionCache:
    """Plain get/set/delete by string key."""

    def __init__(self) -> None:
        self._store: Dict[str, Any] = {}

    def get(self, key: str, default: Optional[Any] = None) -> Any:
        return self._store.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._store[key] = value

    def delete(self, key: str) -> None:
        self._store.pop(key, None)

    def __contains__(self, key: object) -> bool:
        return key in self._store

    def __len__(self) -> int:
        return len(self._store)


__all__ = [
    "ResolutionCache",
    "ORGANIZATION_KEY",
    "PROJECTS_KEY",
    "CURRENT_PROJECT_KEY",
    "CURRENT_PROJECT_EVENT_FILTERS_KEY",
    "project_event_filters_key",
]
