from __future__ import annotations

import logging
import re
from datetime import datetime, timedelta

from bs4 import BeautifulSoup, Tag

from seat_watch.domain.entities import FarePlan, ScheduleEntry, SeatStatus
from seat_watch.domain.exceptions import ParseError
from seat_watch.domain.services import format_price
from seat_watch.domain.value_objects import QUERY_DATE_FORMAT

logger = logging.getLogger(__name__)

CARD_SELECTOR = "section.busSvclistItem"
PLAN_FORM_SELECTOR = "form[name='selectPlan']"
SEAT_INDICATOR_SELECTOR = "input[type='hidden'][class*='seat_']"
PLAN_ID_SELECTOR = "input[name='discntPlanNo']"
PRICE_SELECTOR = "p.price"

SEATS_AVAILABLE = 1  # seat indicator value; anything else means sold out

_TIME_RE = re.compile(r"(\d{1,2}:\d{2})")
_REMAINING_RE = re.compile(r"残り(\d+)席")
_PRICE_RE = re.compile(r"(\d+,?\d*)円")


def parse_schedules(html: str, boarding_date: str) -> list[ScheduleEntry]:
    """Parse every schedule card of a rsvPlanList page.

    A card that fails to parse is logged and skipped; the rest of the page is
    still returned. Bus numbers follow the card position on the page.
    """
    soup = BeautifulSoup(html, "html.parser")
    schedules: list[ScheduleEntry] = []
    for index, card in enumerate(soup.select(CARD_SELECTOR), start=1):
        try:
            schedules.append(_parse_card(card, index, boarding_date))
        except ParseError as exc:
            logger.debug("Failed to parse bus %d: %s", index, exc)
    return schedules


def _parse_card(card: Tag, index: int, boarding_date: str) -> ScheduleEntry:
    departure_time = extract_time(card, "dep")
    arrival_time = extract_time(card, "arr")
    return ScheduleEntry(
        bus_number=f"Bus_{index}",
        departure_date=boarding_date,
        departure_time=departure_time,
        arrival_time=arrival_time,
        available_plans=extract_plans(card),
        arrival_date=arrival_date(boarding_date, departure_time, arrival_time),
    )


def arrival_date(boarding_date: str, departure_time: str, arrival_time: str) -> str:
    """Return the arrival date; an arrival clock time earlier than departure rolls over a day."""
    if _minutes(arrival_time) >= _minutes(departure_time):
        return boarding_date
    boarding = datetime.strptime(boarding_date, QUERY_DATE_FORMAT)
    return (boarding + timedelta(days=1)).strftime(QUERY_DATE_FORMAT)


def _minutes(time: str) -> int:
    hours, minutes = time.split(":")
    return int(hours) * 60 + int(minutes)


def extract_time(card: Tag, dep_or_arr: str) -> str:
    """Return the first H:MM / HH:MM found under ``li.<dep_or_arr> p.time``."""
    element = card.select_one(f"li.{dep_or_arr} p.time")
    if element is None:
        raise ParseError(f"Time element not found for {dep_or_arr}")
    return extract_time_from_text(element.get_text())


def extract_time_from_text(text: str) -> str:
    match = _TIME_RE.search(text)
    if match is None:
        raise ParseError(f"Time not found in text: {text!r}")
    return match.group(1)


def extract_plans(card: Tag) -> list[FarePlan]:
    """Return the plans of a card whose seat indicator reads 1.

    Sold-out plans are dropped, not represented. A plan whose price cannot be
    located is logged and dropped on its own.
    """
    plans: list[FarePlan] = []
    for form in card.select(PLAN_FORM_SELECTOR):
        indicator = form.select_one(SEAT_INDICATOR_SELECTOR)
        if indicator is None:
            continue
        if _int_attr(indicator, "value", default=None) != SEATS_AVAILABLE:
            continue
        try:
            plans.append(_parse_plan(form, indicator))
        except ParseError as exc:
            logger.debug("Skipping plan: %s", exc)
    return plans


def _parse_plan(form: Tag, indicator: Tag) -> FarePlan:
    plan_input = form.select_one(PLAN_ID_SELECTOR)
    plan_id = _int_attr(plan_input, "value", default=0) if plan_input is not None else 0

    button = form.find("button")
    button_text = button.get_text(strip=True) if button is not None else ""

    price = extract_price(form)
    return FarePlan(
        plan_id=plan_id,
        plan_index=_int_attr(indicator, "data-index", default=0),
        price=price,
        display_price=format_price(price),
        status=SeatStatus(remaining_seats=parse_remaining_seats(button_text)),
    )


def extract_price(form: Tag) -> int:
    """Walk up from the plan form to the nearest ancestor holding a parsable p.price."""
    for ancestor in form.parents:
        if not isinstance(ancestor, Tag):
            continue
        price_element = ancestor.select_one(PRICE_SELECTOR)
        if price_element is None:
            continue
        match = _PRICE_RE.search(price_element.get_text())
        if match is not None:
            return int(match.group(1).replace(",", ""))
    raise ParseError("Price element not found")


def parse_remaining_seats(button_text: str) -> int | None:
    """Read the count from a label such as 残り3席; other labels (満席, 予約) give None."""
    match = _REMAINING_RE.search(button_text)
    return int(match.group(1)) if match else None


def _int_attr(element: Tag, name: str, default: int | None) -> int | None:
    raw = element.get(name)
    if not isinstance(raw, str):
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default
