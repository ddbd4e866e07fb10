from __future__ import annotations

from typing import Any, Dict, List, Optional
from urllib.parse import parse_qs, urlsplit

from insight_hub_mcp.core.errors import (
    InvalidLinkError,
    ProjectNotFoundError,
    ResolutionError,
)
from insight_hub_mcp.core.filters import parse_filters, to_query_params
from insight_hub_mcp.core.models import FilterValue
from insight_hub_mcp.core.resolver import ProjectResolver
from insight_hub_mcp.core.tools._collections import as_list, envelope

MAX_PER_PAGE = 100


async def get_event(
    resolver: ProjectResolver, event_id: str, project_id: Optional[str] = None
) -> Any:
    """
    Find an event by id. Without project_id every project in the organization
    is searched.
    """
    event = await resolver.find_event_across_projects(event_id, project_id)
    if event is None:
        raise ResolutionError(f"Event with ID {event_id} not found.", query=event_id)
    return event


def _parse_dashboard_link(link: str) -> tuple[str, str]:
    parts = urlsplit(link)
    if not parts.scheme or not parts.netloc:
        raise InvalidLinkError(f"Invalid dashboard link: {link}", query=link)

    # /<org slug>/<project slug>/errors/<error id>?event_id=<event id>
    segments = [s for s in parts.path.split("/") if s]
    project_slug = segments[1] if len(segments) > 1 else None
    event_id = (parse_qs(parts.query).get("event_id") or [None])[0]

    if not project_slug or not event_id:
        raise InvalidLinkError(
            "Both projectSlug and eventId must be present in the link", query=link
        )
    return project_slug, event_id


async def get_event_details(resolver: ProjectResolver, link: str) -> Any:
    """Fetch the event referenced by a dashboard URL."""
    project_slug, event_id = _parse_dashboard_link(link)

    project = await resolver.get_project_by_slug(project_slug)
    if project is None:
        raise ProjectNotFoundError(
            "Project with the specified slug not found.", query=project_slug
        )

    return await resolver.client.get(
        f"/projects/{project.id}/events/{event_id}", tool="get_event_details"
    )


async def list_project_events(
    resolver: ProjectResolver,
    project_id: Optional[str] = None,
    filters: Optional[Dict[str, List[FilterValue]]] = None,
    per_page: Optional[int] = None,
) -> Dict[str, Any]:
    """List events on a project, optionally filtered by event fields."""
    project = await resolver.resolve_input_project(project_id)
    parsed = parse_filters(filters)
    await resolver.validate_filters(project, parsed)

    params = to_query_params(parsed)
    if per_page is not None:
        params.append(("per_page", str(max(1, min(per_page, MAX_PER_PAGE)))))

    payload = await resolver.client.get(
        f"/projects/{project.id}/events", params=params, tool="list_project_events"
    )
    return envelope(as_list(payload))
