from __future__ import annotations

import asyncio
import os
import sys
from typing import Optional

from insight_hub_mcp.core.config import create_resolver_from_env
from insight_hub_mcp.core.errors import InsightHubError
from insight_hub_mcp.core.tools.project_errors import (
    get_error_latest_event,
    list_project_errors,
)
from insight_hub_mcp.core.tools.projects import (
    get_project_event_filters,
    list_projects,
)


def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    val = os.getenv(name)
    return val if val else default


def _print_step(title: str) -> None:
    print(f"\n== {title}")


def _fail(msg: str) -> int:
    print(f"FAILED: {msg}")
    return 1


async def run_smoke_test() -> int:
    """Read-only walk through a live organization; nothing is modified."""
    try:
        resolver = create_resolver_from_env()
    except ValueError as exc:
        return _fail(str(exc))

    cfg_project_id = _env("TEST_PROJECT_ID")

    print("Config:")
    print(f"  api_url: {resolver.client.base_url}")
    print(f"  app_url: {resolver.client.app_url}")
    print(f"  project_api_key set: {bool(resolver.project_api_key)}")
    print(f"  project_id: {cfg_project_id}")

    try:
        # --- Organization / projects ---
        _print_step("Resolve organization")
        org = await resolver.get_organization()
        print(f"Organization: {org.name} (id={org.id})")

        _print_step("List projects")
        listed = await list_projects(resolver, page_size=5)
        for item in listed["data"]:
            print(f"  {item['id']}  {item['name']}")
        if not listed["count"]:
            return _fail("No projects available.")

        project_id = cfg_project_id
        if not project_id and not resolver.project_api_key:
            project_id = listed["data"][0]["id"]

        # --- Filter schema ---
        _print_step("Event filters")
        fields = await get_project_event_filters(resolver, project_id)
        print(f"{len(fields)} filterable fields")
        if not fields:
            return _fail("Project has no event fields.")

        # --- Errors ---
        _print_step("List errors")
        errors = await list_project_errors(resolver, project_id, per_page=5)
        print(f"{errors['count']} errors on the first page")

        if errors["data"]:
            error_id = errors["data"][0]["id"]
            _print_step("Latest event")
            event = await get_error_latest_event(resolver, error_id)
            print(f"Latest event for {error_id}: {(event or {}).get('id')}")
    except InsightHubError as exc:
        return _fail(str(exc))
    finally:
        await resolver.aclose()

    print("\nPASSED smoke test.")
    return 0


def main() -> None:
    exit_code = asyncio.run(run_smoke_test())
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
