"""MCP resources backed by the resolver."""

from __future__ import annotations

import json
from typing import Callable, Optional

from .context import apply_request_id, get_request_id, reset_request_id
from .errors import ResolutionError
from .observability import report_error
from .resolver import ProjectResolver

EVENT_RESOURCE_URI = "insighthub://event/{event_id}"


def register_resources(
    app,
    resolver_provider: Callable[[], ProjectResolver] | ProjectResolver,
    request_id_provider: Callable[[], Optional[str]] = get_request_id,
) -> None:
    """Register resources on an app that exposes a .resource decorator."""
    if isinstance(resolver_provider, ProjectResolver):
        _resolver = resolver_provider

        def resolver_provider():
            return _resolver

    if not hasattr(app, "resource"):
        raise TypeError("app must expose a 'resource' decorator")

    @app.resource(
        EVENT_RESOURCE_URI,
        name="insight_hub_event",
        description="An event looked up by id across every project.",
        mime_type="application/json",
    )
    async def insight_hub_event(event_id: str) -> str:
        token = apply_request_id(request_id_provider())
        try:
            event = await resolver_provider().find_event_across_projects(event_id)
            if event is None:
                raise ResolutionError(
                    f"Event with ID {event_id} not found.", query=event_id
                )
            return json.dumps(event)
        except Exception as exc:
            report_error(exc, tool="insight_hub_event")
            raise
        finally:
            reset_request_id(token)


__all__ = ["register_resources", "EVENT_RESOURCE_URI"]
