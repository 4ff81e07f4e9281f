from __future__ import annotations

import logging

from seat_watch.domain.entities import RouteDescriptor, ScheduleEntry, StationDescriptor
from seat_watch.domain.exceptions import SeatWatchError
from seat_watch.domain.value_objects import AvailabilityQuery
from seat_watch.infrastructure.highway_client import HighwayBusClient

logger = logging.getLogger(__name__)


class AvailabilityService:
    """Runs schedule searches across a date window and exposes catalog lookups."""

    def __init__(self, client: HighwayBusClient) -> None:
        self._client = client

    async def check_availability(self, query: AvailabilityQuery) -> list[ScheduleEntry]:
        """Fetch and parse every date of the window, in order, one at a time.

        Steps:
        1. Expand the date window (raises ConfigError when start > end)
        2. For each date, fetch and parse the search page; a failing date is
           logged and contributes nothing
        3. Stamp each entry with the queried station ids
        4. Drop entries outside the departure window, if one is set
        5. Return the concatenation in window order
        """
        schedules: list[ScheduleEntry] = []
        for boarding_date in query.date_window.dates():
            logger.debug("Fetching schedules for date: %s", boarding_date)
            try:
                entries = await self._client.fetch_schedules(query, boarding_date)
            except SeatWatchError as exc:
                logger.warning("Failed to fetch schedules for date %s: %s", boarding_date, exc)
                continue

            for entry in entries:
                entry.departure_station = query.departure_station
                entry.arrival_station = query.arrival_station

            if query.departure_window is not None:
                entries = [e for e in entries if query.departure_window.matches(e.departure_time)]

            logger.debug("Found %d schedules for date %s", len(entries), boarding_date)
            schedules.extend(entries)
        return schedules

    async def list_routes(self, area_id: int) -> list[RouteDescriptor]:
        return await self._client.fetch_routes(area_id)

    async def list_departure_stations(self, route_id: str) -> list[StationDescriptor]:
        return await self._client.fetch_departure_stations(route_id)

    async def list_arrival_stations(
        self, route_id: str, departure_station: str
    ) -> list[StationDescriptor]:
        return await self._client.fetch_arrival_stations(route_id, departure_station)
