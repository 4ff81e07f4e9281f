from __future__ import annotations

from mcp.server.fastmcp import FastMCP

from seat_watch.application.availability_service import AvailabilityService
from seat_watch.infrastructure.config import Settings, load_settings
from seat_watch.infrastructure.highway_client import HighwayBusClient, make_http_client
from seat_watch.infrastructure.translations import Translator
from seat_watch.mcp.tools import register_tools


def create_mcp_app(settings: Settings | None = None) -> FastMCP:
    """Create and configure the FastMCP application with all services wired."""
    settings = settings or load_settings()
    http_client = make_http_client(settings.request_timeout)
    client = HighwayBusClient(http_client, base_url=settings.base_url)

    service = AvailabilityService(client)

    mcp = FastMCP("Highway Bus Seat Watch", stateless_http=True)
    register_tools(mcp, service, Translator())
    return mcp
