"""Tests for HighwayBusClient using respx to mock HTTP calls."""
from __future__ import annotations

from urllib.parse import parse_qs

import httpx
import pytest
import respx

from seat_watch.domain.exceptions import HttpError, InvalidResponseError, ServiceUnavailableError
from seat_watch.domain.value_objects import AvailabilityQuery, DateWindow, PassengerManifest
from seat_watch.infrastructure.highway_client import BASE_URL, MAX_ATTEMPTS, HighwayBusClient
from tests.conftest import make_card, make_page

PULLDOWN_URL = f"{BASE_URL}/ajaxPulldown"
SEARCH_URL = f"{BASE_URL}/reservation/rsvPlanList"

STATIONS_XML = "<r><id>001</id><name>バスタ新宿（南口）</name></r>"


def make_client() -> HighwayBusClient:
    return HighwayBusClient(http_client=httpx.AsyncClient(), retry_delay=0)


def make_query() -> AvailabilityQuery:
    return AvailabilityQuery(
        area_id=1,
        route_id="155",
        departure_station="001",
        arrival_station="498",
        date_window=DateWindow("2025-10-29", "2025-10-29"),
        passengers=PassengerManifest(adult_men=1, adult_women=1),
    )


def form_of(request: httpx.Request) -> dict[str, str]:
    return {k: v[0] for k, v in parse_qs(request.content.decode()).items()}


@respx.mock
async def test_fetch_routes_posts_catalog_form(routes_xml: str) -> None:
    route = respx.post(PULLDOWN_URL).mock(return_value=httpx.Response(200, text=routes_xml))

    client = make_client()
    routes = await client.fetch_routes(1)

    assert [r.id for r in routes] == ["110", "155"]
    request = route.calls[0].request
    assert form_of(request) == {"mode": "line:full", "id": "1", "lang": "EN"}
    assert request.headers["X-Requested-With"] == "XMLHttpRequest"
    assert request.headers["Referer"] == f"{BASE_URL}/index"
    await client.close()


@respx.mock
async def test_fetch_departure_stations_form() -> None:
    route = respx.post(PULLDOWN_URL).mock(return_value=httpx.Response(200, text=STATIONS_XML))

    client = make_client()
    stations = await client.fetch_departure_stations("155")

    assert stations[0].id == "001"
    assert form_of(route.calls[0].request) == {"mode": "station_geton", "id": "155", "lang": "EN"}
    await client.close()


@respx.mock
async def test_fetch_arrival_stations_sends_station_code() -> None:
    route = respx.post(PULLDOWN_URL).mock(return_value=httpx.Response(200, text=STATIONS_XML))

    client = make_client()
    await client.fetch_arrival_stations("155", "001")

    assert form_of(route.calls[0].request) == {
        "mode": "station_getoff",
        "id": "155",
        "stationcd": "001",
        "lang": "EN",
    }
    await client.close()


@respx.mock
async def test_catalog_retries_on_503_then_succeeds() -> None:
    route = respx.post(PULLDOWN_URL).mock(
        side_effect=[
            httpx.Response(503),
            httpx.Response(503),
            httpx.Response(200, text=STATIONS_XML),
        ]
    )

    client = make_client()
    stations = await client.fetch_departure_stations("155")

    assert len(stations) == 1
    assert route.call_count == 3
    await client.close()


@respx.mock
async def test_catalog_gives_up_after_max_attempts() -> None:
    route = respx.post(PULLDOWN_URL).mock(return_value=httpx.Response(503))

    client = make_client()
    with pytest.raises(ServiceUnavailableError):
        await client.fetch_routes(1)

    assert route.call_count == MAX_ATTEMPTS
    await client.close()


@respx.mock
async def test_catalog_does_not_retry_other_statuses() -> None:
    route = respx.post(PULLDOWN_URL).mock(return_value=httpx.Response(500))

    client = make_client()
    with pytest.raises(InvalidResponseError) as exc_info:
        await client.fetch_routes(1)

    assert exc_info.value.status_code == 500
    assert route.call_count == 1
    await client.close()


@respx.mock
async def test_retry_waits_grow_linearly(monkeypatch: pytest.MonkeyPatch) -> None:
    waits: list[float] = []

    async def fake_sleep(delay: float) -> None:
        waits.append(delay)

    monkeypatch.setattr("seat_watch.infrastructure.highway_client.asyncio.sleep", fake_sleep)
    respx.post(PULLDOWN_URL).mock(return_value=httpx.Response(503))

    client = HighwayBusClient(http_client=httpx.AsyncClient(), retry_delay=1.0)
    with pytest.raises(ServiceUnavailableError):
        await client.fetch_routes(1)

    assert waits == [1.0, 2.0]
    await client.close()


@respx.mock
async def test_fetch_schedules_sends_search_params() -> None:
    route = respx.get(SEARCH_URL).mock(
        return_value=httpx.Response(200, text=make_page(make_card()))
    )

    client = make_client()
    schedules = await client.fetch_schedules(make_query(), "20251029")

    assert len(schedules) == 1
    assert schedules[0].departure_date == "20251029"
    params = route.calls[0].request.url.params
    assert params["mode"] == "search"
    assert params["lineId"] == "155"
    assert params["onStationCd"] == "001"
    assert params["offStationCd"] == "498"
    assert params["bordingDate"] == "20251029"
    assert params["danseiNum"] == "1"
    assert params["zyoseiNum"] == "1"
    await client.close()


@respx.mock
async def test_schedule_search_is_not_retried() -> None:
    route = respx.get(SEARCH_URL).mock(return_value=httpx.Response(503))

    client = make_client()
    with pytest.raises(ServiceUnavailableError):
        await client.fetch_schedules(make_query(), "20251029")

    assert route.call_count == 1
    await client.close()


@respx.mock
async def test_transport_error_becomes_http_error() -> None:
    respx.get(SEARCH_URL).mock(side_effect=httpx.ConnectError("boom"))

    client = make_client()
    with pytest.raises(HttpError):
        await client.fetch_schedules(make_query(), "20251029")
    await client.close()


@respx.mock
async def test_custom_base_url_is_trimmed() -> None:
    route = respx.post("https://mirror.example/gp/ajaxPulldown").mock(
        return_value=httpx.Response(200, text=STATIONS_XML)
    )

    client = HighwayBusClient(httpx.AsyncClient(), base_url="https://mirror.example/gp/")
    assert client.base_url == "https://mirror.example/gp"
    await client.fetch_departure_stations("155")
    assert route.called
    await client.close()


@respx.mock
async def test_catalog_body_with_byte_order_mark() -> None:
    body = '\ufeff<?xml version="1.0" encoding="UTF-8"?><data><id>001</id><name>A</name></data>'
    respx.post(PULLDOWN_URL).mock(
        return_value=httpx.Response(
            200, content=body.encode("utf-8"), headers={"Content-Type": "text/xml"}
        )
    )

    client = make_client()
    stations = await client.fetch_departure_stations("155")

    assert [(s.id, s.name) for s in stations] == [("001", "A")]
    await client.close()
