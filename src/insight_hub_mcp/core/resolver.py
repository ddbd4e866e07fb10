from __future__ import annotations

import asyncio
import logging
from typing import Any, List, Mapping, Optional

from .cache import (
    CURRENT_PROJECT_EVENT_FILTERS_KEY,
    CURRENT_PROJECT_KEY,
    ORGANIZATION_KEY,
    PROJECTS_KEY,
    ResolutionCache,
    project_event_filters_key,
)
from .client import InsightHubClient
from .errors import (
    ConfigurationError,
    InsightHubClientError,
    InsightHubHTTPError,
    NoCurrentProjectError,
    ProjectNotFoundError,
)
from .filters import remove_denylisted_fields, validate_filter_keys
from .models import EventField, Organization, Project

log = logging.getLogger("insight_hub_mcp.core.resolver")


class ProjectResolver:
    """
    Lazily resolves organization -> projects -> current project -> filter schema.

    Every level is fetched on first need and kept in `cache` for the lifetime
    of the resolver; nothing is refreshed. A cache entry is only written once
    the whole fetch for it has succeeded.
    """

    def __init__(
        self,
        client: InsightHubClient,
        *,
        project_api_key: Optional[str] = None,
        cache: Optional[ResolutionCache] = None,
    ):
        self.client = client
        self.project_api_key = (
            project_api_key if project_api_key is not None else client.project_api_key
        )
        self.cache = cache if cache is not None else ResolutionCache()

    async def aclose(self) -> None:
        await self.client.aclose()

    async def initialize(self) -> None:
        """Resolve every level eagerly so configuration errors surface at startup."""
        await self.get_organization()
        await self.get_projects()
        if self.project_api_key:
            await self.get_current_project()

    # --- Organization / projects ---

    async def get_organization(self) -> Organization:
        cached = self.cache.get(ORGANIZATION_KEY)
        if cached is not None:
            return cached

        payload = await self.client.get("/user/organizations", tool="resolver")
        orgs = payload if isinstance(payload, list) else []
        if not orgs:
            raise ConfigurationError("No organizations found for the current user.")

        # Only one organization per credential is supported; the first wins.
        org = Organization.model_validate(orgs[0])
        self.cache.set(ORGANIZATION_KEY, org)
        return org

    async def get_projects(self) -> List[Project]:
        cached = self.cache.get(PROJECTS_KEY)
        if cached is not None:
            return cached

        org = await self.get_organization()
        payload = await self.client.get(
            f"/organizations/{org.id}/projects", paginate=True, tool="resolver"
        )
        projects = [Project.model_validate(p) for p in payload]
        self.cache.set(PROJECTS_KEY, projects)
        return projects

    async def get_project(self, project_id: str) -> Optional[Project]:
        projects = await self.get_projects()
        return next((p for p in projects if p.id == project_id), None)

    async def get_project_by_slug(self, slug: str) -> Optional[Project]:
        projects = await self.get_projects()
        return next((p for p in projects if p.slug == slug), None)

    # --- Current project ---

    async def get_current_project(self) -> Optional[Project]:
        if not self.project_api_key:
            return None

        cached = self.cache.get(CURRENT_PROJECT_KEY)
        if cached is not None:
            return cached

        projects = await self.get_projects()
        project = next((p for p in projects if p.api_key == self.project_api_key), None)
        if project is None:
            org = await self.get_organization()
            raise ConfigurationError(
                f"Unable to find project with API key {self.project_api_key} "
                f"in organization {org.name}."
            )

        # Schema first, so a failure leaves neither entry behind.
        fields = await self._fetch_event_fields(project)
        if not fields:
            raise ConfigurationError(f"No event fields found for project {project.name}.")

        self.cache.set(CURRENT_PROJECT_EVENT_FILTERS_KEY, fields)
        self.cache.set(CURRENT_PROJECT_KEY, project)
        return project

    # --- Filter schema ---

    async def get_event_fields(self, project: Project) -> List[EventField]:
        """Filter schema of `project`, denylisted fields removed."""
        current = self.cache.get(CURRENT_PROJECT_KEY)
        if current is not None and current.id == project.id:
            return self.cache.get(CURRENT_PROJECT_EVENT_FILTERS_KEY)

        key = project_event_filters_key(project.id)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        fields = await self._fetch_event_fields(project)
        self.cache.set(key, fields)
        return fields

    async def _fetch_event_fields(self, project: Project) -> List[EventField]:
        payload = await self.client.get(
            f"/projects/{project.id}/event_fields", tool="resolver"
        )
        fields = [EventField.model_validate(f) for f in payload or []]
        return remove_denylisted_fields(fields)

    async def validate_filters(
        self, project: Project, filters: Mapping[str, Any]
    ) -> None:
        if not filters:
            return
        validate_filter_keys(filters, await self.get_event_fields(project))

    # --- Input resolution ---

    async def resolve_input_project(self, project_id: Optional[str] = None) -> Project:
        """
        Explicit id wins; otherwise fall back to the project selected by the
        configured project API key.
        """
        if project_id:
            project = await self.get_project(project_id)
            if project is None:
                raise ProjectNotFoundError(
                    f"Project with ID {project_id} not found.", query=project_id
                )
            return project

        project = await self.get_current_project()
        if project is None:
            raise NoCurrentProjectError(
                "No current project found. Please provide a projectId or "
                "configure a project API key.",
                query="",
            )
        return project

    # --- Events ---

    async def find_event_across_projects(
        self, event_id: str, project_id: Optional[str] = None
    ) -> Optional[Any]:
        """
        Look an event up by id.

        With `project_id` only that project is queried (404 -> None). Otherwise
        every cached project is queried concurrently; per-project failures
        count as misses. All lookups are awaited, and the first hit in
        completion order is returned, so with duplicates the winner is not
        deterministic.
        """
        if project_id:
            try:
                return await self._get_event(project_id, event_id)
            except InsightHubHTTPError as exc:
                if exc.status_code == 404:
                    return None
                raise

        projects = await self.get_projects()
        lookups = [self._lookup_event(p.id, event_id) for p in projects]

        hits: List[Any] = []
        for next_done in asyncio.as_completed(lookups):
            result = await next_done
            if result is not None:
                hits.append(result)
        return hits[0] if hits else None

    async def _get_event(self, project_id: str, event_id: str) -> Any:
        return await self.client.get(
            f"/projects/{project_id}/events/{event_id}", tool="events"
        )

    async def _lookup_event(self, project_id: str, event_id: str) -> Optional[Any]:
        try:
            return await self._get_event(project_id, event_id)
        except InsightHubClientError as exc:
            log.debug(
                "Event %s not found in project %s: %s", event_id, project_id, exc
            )
            return None


__all__ = ["ProjectResolver"]
