from __future__ import annotations

import asyncio
import os

from insight_hub_mcp.core.config import create_resolver_from_env
from insight_hub_mcp.core.logging import setup_logging
from insight_hub_mcp.server import build_server


async def main() -> None:
    setup_logging(os.getenv("LOG_LEVEL", "INFO"))
    resolver = create_resolver_from_env()
    try:
        # Fail fast on a bad token/project key instead of on the first tool call.
        await resolver.initialize()
        app = build_server(resolver)
        await app.run_stdio_async()
    finally:
        await resolver.aclose()


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
