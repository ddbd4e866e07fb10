from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Literal, Optional

from insight_hub_mcp.core.filters import parse_filters, to_query_params
from insight_hub_mcp.core.models import (
    ErrorOperation,
    ErrorUpdateRequest,
    FilterValue,
    Severity,
)
from insight_hub_mcp.core.resolver import ProjectResolver
from insight_hub_mcp.core.tools._collections import as_list, envelope

ErrorSort = Literal["last_seen", "first_seen", "users", "events", "unsorted"]
SortDirection = Literal["asc", "desc"]

MAX_PER_PAGE = 100


def _error_url(
    app_url: str, org_slug: Optional[str], project_slug: Optional[str], error_id: str
) -> str:
    return f"{app_url}/{org_slug}/{project_slug}/errors/{error_id}"


async def get_error(
    resolver: ProjectResolver, error_id: str, project_id: Optional[str] = None
) -> Dict[str, Any]:
    """
    Full picture of one error: details, latest event, pivots and a dashboard link.
    """
    project = await resolver.resolve_input_project(project_id)
    org = await resolver.get_organization()
    client = resolver.client

    details, latest_event, pivots = await asyncio.gather(
        client.get(f"/projects/{project.id}/errors/{error_id}", tool="get_error"),
        client.get(f"/errors/{error_id}/latest_event", tool="get_error"),
        client.get(
            f"/projects/{project.id}/errors/{error_id}/pivots", tool="get_error"
        ),
    )

    return {
        "error_details": details,
        "latest_event": latest_event,
        "pivots": as_list(pivots),
        "url": _error_url(client.app_url, org.slug, project.slug, error_id),
    }


async def get_error_latest_event(resolver: ProjectResolver, error_id: str) -> Any:
    """Latest event recorded for an error."""
    return await resolver.client.get(
        f"/errors/{error_id}/latest_event", tool="get_error_latest_event"
    )


async def list_project_errors(
    resolver: ProjectResolver,
    project_id: Optional[str] = None,
    filters: Optional[Dict[str, List[FilterValue]]] = None,
    sort: Optional[ErrorSort] = None,
    direction: Optional[SortDirection] = None,
    per_page: Optional[int] = None,
) -> Dict[str, Any]:
    """
    List errors on a project. Filter keys are checked against the project's
    event fields before the request is sent.
    """
    project = await resolver.resolve_input_project(project_id)
    parsed = parse_filters(filters)
    await resolver.validate_filters(project, parsed)

    params = to_query_params(parsed)
    if sort is not None:
        params.append(("sort", sort))
    if direction is not None:
        params.append(("direction", direction))
    if per_page is not None:
        params.append(("per_page", str(max(1, min(per_page, MAX_PER_PAGE)))))

    payload = await resolver.client.get(
        f"/projects/{project.id}/errors", params=params, tool="list_project_errors"
    )
    return envelope(as_list(payload))


async def update_error(
    resolver: ProjectResolver,
    error_id: str,
    operation: ErrorOperation,
    project_id: Optional[str] = None,
    severity: Optional[Severity] = None,
) -> Dict[str, bool]:
    """
    Apply a workflow operation (fix, open, ignore, snooze, ...) to an error.
    override_severity requires `severity`.
    """
    if operation == "override_severity" and severity is None:
        raise ValueError("severity is required for the override_severity operation")

    project = await resolver.resolve_input_project(project_id)
    body = ErrorUpdateRequest(operation=operation, severity=severity)

    response = await resolver.client.execute(
        "PATCH",
        f"/projects/{project.id}/errors/{error_id}",
        json=body.model_dump(exclude_none=True),
        tool="update_error",
    )
    return {"success": response.status in (200, 204)}
