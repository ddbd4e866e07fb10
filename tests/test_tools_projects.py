import pytest
import respx
from httpx import Response
from insight_hub_mcp.core.cache import (
    CURRENT_PROJECT_EVENT_FILTERS_KEY,
    CURRENT_PROJECT_KEY,
    ORGANIZATION_KEY,
    PROJECTS_KEY,
)
from insight_hub_mcp.core.client import InsightHubClient
from insight_hub_mcp.core.errors import ProjectNotFoundError
from insight_hub_mcp.core.models import EventField, Organization, Project
from insight_hub_mcp.core.resolver import ProjectResolver
from insight_hub_mcp.core.tools.projects import (
    get_project_event_filters,
    list_projects,
)

PROJECTS = [
    Project(id="p1", name="Alpha", slug="alpha", api_key="k1"),
    Project(id="p2", name="Beta", slug="beta", api_key="k2"),
    Project(id="p3", name="Gamma", slug="gamma", api_key="k3"),
]


@pytest.fixture
def resolver():
    client = InsightHubClient(auth_token="tok", project_api_key="k1")
    resolver = ProjectResolver(client)
    resolver.cache.set(ORGANIZATION_KEY, Organization(id="org-1", name="Org"))
    resolver.cache.set(PROJECTS_KEY, PROJECTS)
    resolver.cache.set(CURRENT_PROJECT_KEY, PROJECTS[0])
    resolver.cache.set(
        CURRENT_PROJECT_EVENT_FILTERS_KEY,
        [
            EventField(
                display_id="error.status",
                filter_options={"name": "Status", "type": ["eq", "ne"]},
            )
        ],
    )
    return resolver


@pytest.mark.asyncio
async def test_list_projects_first_page_hides_api_keys(resolver):
    result = await list_projects(resolver)

    assert result["count"] == 3
    assert result["data"][0] == {"id": "p1", "name": "Alpha", "slug": "alpha"}
    assert all("api_key" not in item for item in result["data"])


@pytest.mark.asyncio
async def test_list_projects_slices_pages(resolver):
    second = await list_projects(resolver, page_size=2, page=2)
    beyond = await list_projects(resolver, page_size=2, page=3)

    assert [p["id"] for p in second["data"]] == ["p3"]
    assert second["count"] == 1
    assert beyond == {"data": [], "count": 0}


@pytest.mark.asyncio
async def test_list_projects_clamps_page_size(resolver):
    result = await list_projects(resolver, page_size=0)
    assert [p["id"] for p in result["data"]] == ["p1"]


@pytest.mark.asyncio
async def test_list_projects_rejects_page_zero(resolver):
    with pytest.raises(ValueError):
        await list_projects(resolver, page=0)


@pytest.mark.asyncio
async def test_event_filters_default_to_current_project(resolver):
    result = await get_project_event_filters(resolver)

    assert result == [
        {
            "display_id": "error.status",
            "custom": False,
            "filter_options": {"name": "Status", "type": ["eq", "ne"]},
        }
    ]


@pytest.mark.asyncio
@respx.mock
async def test_event_filters_for_other_project_fetched(resolver):
    route = respx.get("https://api.bugsnag.com/projects/p2/event_fields").mock(
        return_value=Response(
            200,
            json=[
                {"display_id": "search", "custom": False},
                {"display_id": "user.email", "custom": False, "unused": 1},
            ],
        )
    )

    async with resolver.client:
        result = await get_project_event_filters(resolver, "p2")

    assert route.called
    assert result == [{"display_id": "user.email", "custom": False}]


@pytest.mark.asyncio
async def test_event_filters_unknown_project(resolver):
    with pytest.raises(ProjectNotFoundError):
        await get_project_event_filters(resolver, "nope")
