from __future__ import annotations

from typing import Any, Dict, List, Optional

from insight_hub_mcp.core.resolver import ProjectResolver
from insight_hub_mcp.core.tools._collections import envelope

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


def _clamp_page_size(page_size: int) -> int:
    """Clamp page_size into a safe range to avoid huge payloads."""
    return max(1, min(page_size, MAX_PAGE_SIZE))


async def list_projects(
    resolver: ProjectResolver,
    *,
    page_size: int = DEFAULT_PAGE_SIZE,
    page: int = 1,
) -> Dict[str, Any]:
    """
    List projects in the organization, sliced client-side from the cached list.

    Returns:
        {"data": [{"id", "name", "slug"}, ...], "count": int}
    """
    if page < 1:
        raise ValueError("page must be >= 1")

    page_size = _clamp_page_size(page_size)
    projects = await resolver.get_projects()

    start = (page - 1) * page_size
    window = projects[start : start + page_size]
    return envelope([p.model_dump(exclude={"api_key"}) for p in window])


async def get_project_event_filters(
    resolver: ProjectResolver, project_id: Optional[str] = None
) -> List[Dict[str, Any]]:
    """
    Return the event fields usable as filter keys for a project (defaults to
    the project selected by the configured project API key).
    """
    project = await resolver.resolve_input_project(project_id)
    fields = await resolver.get_event_fields(project)
    return [f.model_dump(exclude_none=True) for f in fields]
