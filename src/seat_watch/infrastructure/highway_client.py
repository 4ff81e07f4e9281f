from __future__ import annotations

import asyncio
import logging

import httpx

from seat_watch.domain.entities import RouteDescriptor, ScheduleEntry, StationDescriptor
from seat_watch.domain.exceptions import (
    HttpError,
    InvalidResponseError,
    ServiceUnavailableError,
)
from seat_watch.domain.value_objects import AvailabilityQuery, CatalogMode
from seat_watch.infrastructure.catalog_parser import parse_routes, parse_stations
from seat_watch.infrastructure.headers import make_headers
from seat_watch.infrastructure.schedule_parser import parse_schedules

logger = logging.getLogger(__name__)

BASE_URL = "https://www.highwaybus.com/gp"
DEFAULT_TIMEOUT = 30.0  # seconds

# Catalog lookups retry on 503 only: delays are attempt * RETRY_DELAY (1s, 2s)
MAX_ATTEMPTS = 3
RETRY_DELAY = 1.0

CATALOG_LANG = "EN"


def make_http_client(timeout: float = DEFAULT_TIMEOUT) -> httpx.AsyncClient:
    """Create the shared AsyncClient; its cookie jar carries the site session."""
    return httpx.AsyncClient(timeout=timeout, follow_redirects=True)


class HighwayBusClient:
    """HTTP client for the highway bus reservation site.

    A single httpx.AsyncClient instance is used throughout the process lifetime
    so that the upstream session cookies persist across requests.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        base_url: str = BASE_URL,
        retry_delay: float = RETRY_DELAY,
    ) -> None:
        self._http = http_client
        self._base_url = base_url.rstrip("/")
        self._retry_delay = retry_delay

    @property
    def base_url(self) -> str:
        return self._base_url

    async def fetch_routes(self, area_id: int) -> list[RouteDescriptor]:
        """POST /ajaxPulldown mode=line:full: routes served in an area."""
        xml = await self._pulldown(CatalogMode.ROUTES, str(area_id))
        return parse_routes(xml)

    async def fetch_departure_stations(self, route_id: str) -> list[StationDescriptor]:
        """POST /ajaxPulldown mode=station_geton: boarding stations of a route."""
        xml = await self._pulldown(CatalogMode.DEPARTURE_STATIONS, route_id)
        return parse_stations(xml)

    async def fetch_arrival_stations(
        self, route_id: str, departure_station: str
    ) -> list[StationDescriptor]:
        """POST /ajaxPulldown mode=station_getoff: alighting stations reachable from a boarding station."""
        xml = await self._pulldown(
            CatalogMode.ARRIVAL_STATIONS, route_id, stationcd=departure_station
        )
        return parse_stations(xml)

    async def fetch_schedules(
        self, query: AvailabilityQuery, boarding_date: str
    ) -> list[ScheduleEntry]:
        """GET /reservation/rsvPlanList for one boarding date (YYYYMMDD) and parse it."""
        url = f"{self._base_url}/reservation/rsvPlanList"
        html = await self._get(url, query.search_params(boarding_date))
        logger.debug("Fetched schedules HTML for %s, length: %d", boarding_date, len(html))
        return parse_schedules(html, boarding_date)

    async def _pulldown(self, mode: CatalogMode, id_: str, stationcd: str | None = None) -> str:
        url = f"{self._base_url}/ajaxPulldown"
        form = {"mode": mode.value, "id": id_}
        if stationcd is not None:
            form["stationcd"] = stationcd
        form["lang"] = CATALOG_LANG
        return await self._post_with_retry(url, form)

    async def _post_with_retry(self, url: str, form: dict[str, str]) -> str:
        """POST a form, retrying only on ServiceUnavailableError.

        Any other error propagates on the first occurrence.
        """
        attempt = 0
        while True:
            attempt += 1
            try:
                return await self._post(url, form)
            except ServiceUnavailableError:
                if attempt >= MAX_ATTEMPTS:
                    raise
                wait = self._retry_delay * attempt
                logger.warning(
                    "Service unavailable (attempt %d/%d), retrying in %.1fs",
                    attempt,
                    MAX_ATTEMPTS,
                    wait,
                )
                await asyncio.sleep(wait)

    async def _post(self, url: str, form: dict[str, str]) -> str:
        try:
            response = await self._http.post(
                url, data=form, headers=make_headers(self._base_url, form=True)
            )
        except httpx.HTTPError as err:
            raise HttpError(f"HTTP error: {err}") from err
        self._raise_for_status(response, url)
        return response.text

    async def _get(self, url: str, params: dict[str, str]) -> str:
        try:
            response = await self._http.get(
                url, params=params, headers=make_headers(self._base_url)
            )
        except httpx.HTTPError as err:
            raise HttpError(f"HTTP error: {err}") from err
        self._raise_for_status(response, url)
        return response.text

    def _raise_for_status(self, response: httpx.Response, url: str) -> None:
        """503 is the retryable condition; every other non-2xx is an invalid response."""
        if response.status_code == 503:
            raise ServiceUnavailableError(url)
        if not response.is_success:
            raise InvalidResponseError(response.status_code, url)

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._http.aclose()
