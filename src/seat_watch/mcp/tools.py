from __future__ import annotations

import dataclasses
import json
import logging
from typing import Any

from mcp import types
from mcp.server.fastmcp import FastMCP

from seat_watch.application.availability_service import AvailabilityService
from seat_watch.domain.entities import RouteDescriptor, StationDescriptor
from seat_watch.domain.exceptions import (
    ConfigError,
    HttpError,
    InvalidResponseError,
    ParseError,
    ServiceUnavailableError,
)
from seat_watch.domain.services import filter_with_seats, state_hash
from seat_watch.domain.value_objects import (
    AvailabilityQuery,
    DateWindow,
    DepartureWindow,
    PassengerManifest,
)
from seat_watch.infrastructure.translations import Translator

logger = logging.getLogger(__name__)

_RESULT_URI = "mcp://seat-watch/result"


def _as_resource(json_str: str) -> list[types.EmbeddedResource]:
    """Wrap a JSON string as an embedded resource so the LLM does not narrate it."""
    return [
        types.EmbeddedResource(
            type="resource",
            resource=types.TextResourceContents(
                uri=_RESULT_URI,  # type: ignore[arg-type]
                mimeType="application/json",
                text=json_str,
            ),
        )
    ]


def _error_json(message: str) -> str:
    return json.dumps({"error": message}, ensure_ascii=False)


def _handle_exception(exc: Exception) -> list[types.EmbeddedResource]:
    if isinstance(exc, ConfigError):
        return _as_resource(_error_json(str(exc)))
    if isinstance(exc, ServiceUnavailableError):
        return _as_resource(
            _error_json("Reservation site temporarily unavailable. Please try again later.")
        )
    if isinstance(exc, InvalidResponseError):
        return _as_resource(_error_json(f"Upstream error (HTTP {exc.status_code})."))
    if isinstance(exc, HttpError):
        return _as_resource(_error_json("Could not reach the reservation site. Please try again."))
    if isinstance(exc, ParseError):
        return _as_resource(_error_json("Unexpected response from the reservation site."))
    logger.exception("Unexpected error in MCP tool: %s", exc)
    return _as_resource(_error_json("An unexpected error occurred."))


def _route_json(route: RouteDescriptor, translator: Translator) -> dict[str, Any]:
    return {
        "id": route.id,
        "name": route.name,
        "display_name": translator.route_name(route.name),
        "switch_changeable_flg": route.switch_changeable_flg,
    }


def _station_json(station: StationDescriptor, translator: Translator) -> dict[str, Any]:
    return {
        "id": station.id,
        "name": station.name,
        "display_name": translator.station_name(station.name),
    }


def register_tools(
    mcp: FastMCP, service: AvailabilityService, translator: Translator | None = None
) -> None:
    """Bind all @mcp.tool decorators. Called once during server setup."""
    translator = translator or Translator()

    @mcp.tool()
    async def list_routes(area_id: int) -> list[types.EmbeddedResource]:
        """List the bus routes served in an area.

        Args:
            area_id: Area number (1 = Tokyo/Shinjuku, 2 = Nagoya, 3 = Haneda).
        """
        try:
            routes = await service.list_routes(area_id)
            result = {"routes": [_route_json(r, translator) for r in routes], "count": len(routes)}
            return _as_resource(json.dumps(result, ensure_ascii=False))
        except Exception as exc:
            return _handle_exception(exc)

    @mcp.tool()
    async def list_departure_stations(route_id: str) -> list[types.EmbeddedResource]:
        """List the boarding stations of a route.

        Args:
            route_id: Route id obtained from list_routes.
        """
        try:
            if not route_id.strip():
                return _as_resource(_error_json("route_id cannot be empty"))
            stations = await service.list_departure_stations(route_id.strip())
            result = {
                "stations": [_station_json(s, translator) for s in stations],
                "count": len(stations),
            }
            return _as_resource(json.dumps(result, ensure_ascii=False))
        except Exception as exc:
            return _handle_exception(exc)

    @mcp.tool()
    async def list_arrival_stations(
        route_id: str, departure_station_id: str
    ) -> list[types.EmbeddedResource]:
        """List the stations reachable from a boarding station on a route.

        Args:
            route_id: Route id obtained from list_routes.
            departure_station_id: Boarding station id obtained from list_departure_stations.
        """
        try:
            if not route_id.strip() or not departure_station_id.strip():
                return _as_resource(
                    _error_json("route_id and departure_station_id cannot be empty")
                )
            stations = await service.list_arrival_stations(
                route_id.strip(), departure_station_id.strip()
            )
            result = {
                "stations": [_station_json(s, translator) for s in stations],
                "count": len(stations),
            }
            return _as_resource(json.dumps(result, ensure_ascii=False))
        except Exception as exc:
            return _handle_exception(exc)

    @mcp.tool()
    async def check_availability(
        area_id: int,
        route_id: str,
        departure_station_id: str,
        arrival_station_id: str,
        date_start: str,
        date_end: str,
        adult_men: int = 1,
        adult_women: int = 0,
        child_men: int = 0,
        child_women: int = 0,
        departure_time_min: str | None = None,
        departure_time_max: str | None = None,
    ) -> list[types.EmbeddedResource]:
        """Search seat availability once for every date in a window.

        Args:
            area_id: Area number of the route.
            route_id: Route id obtained from list_routes.
            departure_station_id: Boarding station id.
            arrival_station_id: Alighting station id.
            date_start: First boarding date, YYYY-MM-DD or YYYYMMDD.
            date_end: Last boarding date (inclusive), YYYY-MM-DD or YYYYMMDD.
            adult_men: Number of adult male passengers.
            adult_women: Number of adult female passengers.
            child_men: Number of male child passengers.
            child_women: Number of female child passengers.
            departure_time_min: Optional earliest departure, zero-padded HH:MM.
            departure_time_max: Optional latest departure, zero-padded HH:MM.
        """
        try:
            window = None
            if departure_time_min or departure_time_max:
                window = DepartureWindow(departure_time_min or None, departure_time_max or None)
            query = AvailabilityQuery(
                area_id=area_id,
                route_id=route_id.strip(),
                departure_station=departure_station_id.strip(),
                arrival_station=arrival_station_id.strip(),
                date_window=DateWindow(date_start, date_end),
                passengers=PassengerManifest(
                    adult_men=adult_men,
                    adult_women=adult_women,
                    child_men=child_men,
                    child_women=child_women,
                ),
                departure_window=window,
            )
            query.date_window.bounds()
            schedules = await service.check_availability(query)
            with_seats = filter_with_seats(schedules)
            result = {
                "schedules": [dataclasses.asdict(s) for s in schedules],
                "count": len(schedules),
                "with_seats": len(with_seats),
                "fingerprint": state_hash(with_seats),
            }
            return _as_resource(json.dumps(result, default=str, ensure_ascii=False))
        except Exception as exc:
            return _handle_exception(exc)
