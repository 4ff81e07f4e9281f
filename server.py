#!/usr/bin/env python3
"""Seat Watch server, repository root entry point.

Usage:
    uv run server.py           # MCP over HTTP (default)
    uv run server.py --stdio   # MCP over stdio for desktop clients
    uv run server.py --track   # poll the subscription described by the environment
"""
from __future__ import annotations

import asyncio
import logging
import sys

import uvicorn
from starlette.middleware.cors import CORSMiddleware

from seat_watch.application.availability_service import AvailabilityService
from seat_watch.application.tracker import Tracker
from seat_watch.infrastructure.config import Settings, load_settings, subscription_from_env
from seat_watch.infrastructure.highway_client import HighwayBusClient, make_http_client
from seat_watch.infrastructure.notifier import DiscordNotifier
from seat_watch.infrastructure.repository import InMemoryRepository
from seat_watch.infrastructure.station_directory import StationDirectory
from seat_watch.mcp import create_mcp_app

SETTINGS = load_settings()

logging.basicConfig(
    level=getattr(logging, SETTINGS.log_level, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)


async def run_tracker(settings: Settings) -> None:
    # Configuration errors surface here, before any worker starts
    repository = InMemoryRepository([subscription_from_env()])
    http_client = make_http_client(settings.request_timeout)
    client = HighwayBusClient(http_client, base_url=settings.base_url)
    tracker = Tracker(
        repository,
        AvailabilityService(client),
        DiscordNotifier(http_client),
        StationDirectory(),
    )
    try:
        await tracker.run_forever()
    finally:
        await tracker.stop()
        await client.close()


if __name__ == "__main__":
    if "--track" in sys.argv:
        asyncio.run(run_tracker(SETTINGS))
        sys.exit(0)

    mcp = create_mcp_app(SETTINGS)
    if "--stdio" in sys.argv:
        mcp.run(transport="stdio")
    else:
        # HTTP mode with CORS
        app = mcp.streamable_http_app()
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_methods=["*"],
            allow_headers=["*"],
        )
        print(f"Seat Watch MCP server listening on http://{SETTINGS.host}:{SETTINGS.port}/mcp")
        uvicorn.run(app, host=SETTINGS.host, port=SETTINGS.port)
