"""Shared pytest fixtures for the Seat Watch test suite."""
from __future__ import annotations

import pytest

from seat_watch.domain.entities import FarePlan, ScheduleEntry, SeatStatus, Subscription
from seat_watch.domain.value_objects import PassengerManifest


def make_card(
    dep: str = "6:45",
    arr: str = "8:30",
    price: str = "12,000円",
    seat_value: str = "1",
    plan_id: str = "12345",
    button: str = "残り3席",
) -> str:
    """One search result card as served by rsvPlanList."""
    return f"""
        <section class="busSvclistItem">
            <ul>
                <li class="dep"><p class="time">{dep} 発</p></li>
                <li class="arr"><p class="time">{arr} 着</p></li>
            </ul>
            <div class="planArea">
                <p class="price">{price}</p>
                <form name="selectPlan">
                    <input type="hidden" class="seat_0" value="{seat_value}" data-index="0">
                    <input type="hidden" name="discntPlanNo" value="{plan_id}">
                    <button>{button}</button>
                </form>
            </div>
        </section>
    """


def make_page(*cards: str) -> str:
    return "<html><body>" + "".join(cards) + "</body></html>"


def make_schedule(
    departure_date: str = "20250115",
    departure_time: str = "08:30",
    plan_id: int = 12345,
    price: int = 2100,
    remaining_seats: int | None = 5,
    with_plan: bool = True,
) -> ScheduleEntry:
    plans = []
    if with_plan:
        plans.append(
            FarePlan(
                plan_id=plan_id,
                plan_index=0,
                price=price,
                display_price=f"{price}円",
                status=SeatStatus(remaining_seats=remaining_seats),
            )
        )
    return ScheduleEntry(
        bus_number="Bus_1",
        departure_date=departure_date,
        departure_time=departure_time,
        arrival_time="10:00",
        available_plans=plans,
    )


def make_subscription(**overrides: object) -> Subscription:
    fields: dict[str, object] = {
        "id": "sub-1",
        "email": "rider@example.com",
        "area_id": 1,
        "route_id": "155",
        "departure_station": "001",
        "arrival_station": "498",
        "date_start": "2025-10-29",
        "date_end": "2025-10-30",
        "passengers": PassengerManifest(adult_men=1, adult_women=1),
        "notify_on_change_only": True,
        "scrape_interval_secs": 300,
        "webhook_url": "https://discord.example/webhook/1",
    }
    fields.update(overrides)
    return Subscription(**fields)  # type: ignore[arg-type]


@pytest.fixture
def single_card_html() -> str:
    """One card: 6:45 -> 8:30, one plan at 12,000円 with 3 seats left."""
    return make_page(make_card())


@pytest.fixture
def mixed_cards_html() -> str:
    """Two cards: the first sold out (seat indicator 2), the second available."""
    return make_page(
        make_card(dep="12:30", arr="14:45", price="9,800円", seat_value="2", plan_id="12347", button="満席"),
        make_card(dep="9:00", arr="11:15", price="10,500円", seat_value="1", plan_id="12346", button="残り8席"),
    )


@pytest.fixture
def routes_xml() -> str:
    return """<?xml version="1.0" encoding="UTF-8"?>
<routes>
    <id>110</id>
    <name>新宿～富士五湖線</name>
    <switchChangeableFlg>1</switchChangeableFlg>
    <id>155</id>
    <name>新宿～上高地線</name>
    <switchChangeableFlg>0</switchChangeableFlg>
</routes>"""


@pytest.fixture
def stations_xml() -> str:
    return """<?xml version="1.0" encoding="UTF-8"?>
<stations>
    <id>001</id>
    <name>バスタ新宿（南口）</name>
    <id>064</id>
    <name>河口湖駅</name>
    <id>498</id>
    <name>上高地バスターミナル</name>
</stations>"""
