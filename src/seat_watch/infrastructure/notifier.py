from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

import httpx

from seat_watch.domain.entities import NotificationContext, ScheduleEntry
from seat_watch.domain.services import format_date, seats_label
from seat_watch.infrastructure.time_utils import now_utc

logger = logging.getLogger(__name__)

ALERT_TITLE = "🚌 Buses available!"
ALERT_COLOR = 3066993  # green
STARTUP_TITLE = "✅ Tracker started"
STARTUP_COLOR = 5763719


class Notifier(ABC):
    """Outbound alert channel. Delivery is best effort."""

    @abstractmethod
    async def send_availability_alert(
        self,
        webhook_url: str,
        schedules: list[ScheduleEntry],
        context: NotificationContext,
    ) -> None: ...

    @abstractmethod
    async def send_startup_notification(
        self, webhook_url: str, user_count: int, route_count: int
    ) -> None: ...


def build_alert_embed(
    schedules: list[ScheduleEntry], context: NotificationContext
) -> dict[str, Any]:
    """Build the alert embed: one field per schedule+plan pair."""
    fields: list[dict[str, Any]] = []
    buses_with_plans = 0
    for schedule in schedules:
        if not schedule.available_plans:
            continue
        buses_with_plans += 1
        for plan in schedule.available_plans:
            value = (
                f"📅 **{format_date(schedule.departure_date)}** at **{schedule.departure_time}**\n"
                f"🕐 Arrival: {schedule.arrival_time}\n"
                f"💺 {seats_label(plan.status.remaining_seats)}\n"
                f"💰 {plan.display_price}"
            )
            fields.append(
                {
                    "name": f"🚌 {schedule.bus_number} - Plan {plan.plan_id}",
                    "value": value,
                    "inline": False,
                }
            )

    start, end = context.date_range
    description = (
        f"**{buses_with_plans}** bus(es) with seats available\n"
        f"📍 {context.departure_station_name} → {context.arrival_station_name}\n"
        f"📆 {format_date(start)} - {format_date(end)}"
    )

    if context.time_filter is not None:
        low, high = context.time_filter
        footer = (
            f"{context.passenger_count} passenger(s) | "
            f"Departures: {low or '00:00'} - {high or '23:59'}"
        )
    else:
        footer = f"{context.passenger_count} passenger(s) | All departures"

    return {
        "title": ALERT_TITLE,
        "description": description,
        "color": ALERT_COLOR,
        "fields": fields,
        "footer": {"text": footer},
        "timestamp": now_utc().isoformat(),
    }


def build_startup_embed(user_count: int, route_count: int) -> dict[str, Any]:
    return {
        "title": STARTUP_TITLE,
        "description": (
            f"Tracking **{user_count}** user(s) and **{route_count}** route(s)"
        ),
        "color": STARTUP_COLOR,
        "timestamp": now_utc().isoformat(),
    }


class DiscordNotifier(Notifier):
    """Posts embeds to a Discord-compatible webhook.

    Failures are logged and swallowed: a lost alert is preferable to
    interrupting a tracking cycle.
    """

    def __init__(self, http_client: httpx.AsyncClient) -> None:
        self._http = http_client

    async def send_availability_alert(
        self,
        webhook_url: str,
        schedules: list[ScheduleEntry],
        context: NotificationContext,
    ) -> None:
        if not schedules:
            return
        await self._post(webhook_url, build_alert_embed(schedules, context), "Availability alert")

    async def send_startup_notification(
        self, webhook_url: str, user_count: int, route_count: int
    ) -> None:
        await self._post(
            webhook_url, build_startup_embed(user_count, route_count), "Startup notification"
        )

    async def _post(self, webhook_url: str, embed: dict[str, Any], label: str) -> None:
        try:
            response = await self._http.post(webhook_url, json={"embeds": [embed]})
        except httpx.HTTPError as exc:
            logger.error("%s failed to send: %s", label, exc)
            return
        if response.is_success:
            logger.info("%s sent successfully", label)
        else:
            logger.error("%s failed with status: %d", label, response.status_code)
