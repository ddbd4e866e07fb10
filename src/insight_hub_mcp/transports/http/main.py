from __future__ import annotations

import asyncio
import os

import uvicorn
from dotenv import load_dotenv

from insight_hub_mcp.core.logging import setup_logging

from .app import OpsDispatcher, build_http_app
from .config import HttpConfig


def create_app(cfg: HttpConfig | None = None) -> OpsDispatcher:
    """
    App served by the insight-hub-mcp-http entry point.
    Credentials are read lazily, so a missing token shows up on /readyz
    instead of stopping the process.
    """
    load_dotenv()
    return build_http_app(cfg or HttpConfig.from_env())


async def main() -> None:
    setup_logging(os.getenv("LOG_LEVEL", "INFO"))
    cfg = HttpConfig.from_env()
    app = create_app(cfg)
    try:
        server = uvicorn.Server(
            uvicorn.Config(app, host=cfg.host, port=cfg.port, log_config=None)
        )
        await server.serve()
    finally:
        await app.aclose()


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
