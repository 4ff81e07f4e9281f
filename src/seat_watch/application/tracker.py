from __future__ import annotations

import asyncio
import logging
import math
from enum import Enum

from seat_watch.application.availability_service import AvailabilityService
from seat_watch.domain.entities import NotificationContext, Subscription
from seat_watch.domain.exceptions import ConfigError, SeatWatchError
from seat_watch.domain.services import (
    filter_with_seats,
    has_state_changed,
    should_notify,
    state_hash,
)
from seat_watch.domain.value_objects import AvailabilityQuery
from seat_watch.infrastructure.notifier import Notifier
from seat_watch.infrastructure.repository import SubscriptionRepository
from seat_watch.infrastructure.station_directory import StationDirectory
from seat_watch.infrastructure.time_utils import normalize_query_date

logger = logging.getLogger(__name__)


class CycleOutcome(str, Enum):
    """What a single polling cycle ended up doing."""

    NOTIFIED = "notified"
    SUPPRESSED = "suppressed"  # seats found, policy said no alert; fingerprint stored
    NO_SEATS = "no_seats"  # nothing stored


def next_tick(previous: float, interval: float, now: float) -> float:
    """Return the next tick deadline, skipping ticks missed while a cycle ran.

    Deadlines stay on the ``previous + k * interval`` grid; overdue ticks are
    dropped rather than fired back to back.
    """
    deadline = previous + interval
    if deadline > now:
        return deadline
    missed = math.floor((now - previous) / interval)
    return previous + (missed + 1) * interval


class SubscriptionWorker:
    """Polls one subscription on its own timer.

    Owns no state beyond the subscription itself; the last fingerprint and the
    counters are read from and written to the repository every cycle.
    """

    def __init__(
        self,
        subscription: Subscription,
        service: AvailabilityService,
        repository: SubscriptionRepository,
        notifier: Notifier,
        stations: StationDirectory,
    ) -> None:
        # Fail fast on a subscription that can never produce a valid query
        subscription.date_window.bounds()
        if subscription.scrape_interval_secs <= 0:
            raise ConfigError(f"Subscription {subscription.id}: interval must be positive")
        self._subscription = subscription
        self._service = service
        self._repository = repository
        self._notifier = notifier
        self._stations = stations
        self._task: asyncio.Task[None] | None = None

    @property
    def subscription(self) -> Subscription:
        return self._subscription

    def start(self) -> asyncio.Task[None]:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(
                self.run(), name=f"tracker-{self._subscription.id}"
            )
        return self._task

    async def stop(self) -> None:
        """Cancel the worker; an in-flight cycle is abandoned, not drained."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def run(self) -> None:
        sub = self._subscription
        logger.info("Starting tracker for user %s (route %s)", sub.email, sub.id)
        loop = asyncio.get_running_loop()
        interval = float(sub.scrape_interval_secs)
        deadline = loop.time()
        while True:
            delay = deadline - loop.time()
            if delay > 0:
                await asyncio.sleep(delay)
            await self.run_cycle()
            deadline = next_tick(deadline, interval, loop.time())

    async def run_cycle(self) -> CycleOutcome | None:
        """Run one cycle; errors are logged and never escape."""
        try:
            return await self.check_and_notify()
        except Exception:
            logger.exception(
                "Error checking availability for user %s route %s",
                self._subscription.email,
                self._subscription.id,
            )
            return None

    async def check_and_notify(self) -> CycleOutcome:
        sub = self._subscription
        query = sub.build_query()

        schedules = await self._service.check_availability(query)
        with_seats = filter_with_seats(schedules)
        current_hash = state_hash(with_seats)

        state = await self._repository.get_tracking_state(sub.id)
        changed = has_state_changed(state.last_seen_hash if state else None, current_hash)

        if should_notify(sub.notify_on_change_only, changed, bool(with_seats)) and sub.webhook_url:
            logger.info(
                "Sending notification for user %s - %d buses with seats",
                sub.email,
                len(with_seats),
            )
            context = await self.build_notification_context(query)
            await self._notifier.send_availability_alert(sub.webhook_url, with_seats, context)
            await self._repository.update_tracking_state(sub.id, current_hash, alerted=True)
            return CycleOutcome.NOTIFIED

        if not with_seats:
            if schedules:
                logger.info(
                    "User %s - Found %d buses but no seats available", sub.email, len(schedules)
                )
            return CycleOutcome.NO_SEATS

        await self._repository.update_tracking_state(sub.id, current_hash, alerted=False)
        return CycleOutcome.SUPPRESSED

    async def build_notification_context(self, query: AvailabilityQuery) -> NotificationContext:
        window = query.departure_window
        return NotificationContext(
            departure_station_name=await self._station_name(query.departure_station),
            arrival_station_name=await self._station_name(query.arrival_station),
            date_range=(
                normalize_query_date(query.date_window.start),
                normalize_query_date(query.date_window.end),
            ),
            passenger_count=query.passengers.total(),
            time_filter=(window.departure_min, window.departure_max) if window else None,
        )

    async def _station_name(self, station_id: str) -> str:
        stored = await self._repository.station_display_name(station_id)
        if stored:
            return stored
        return self._stations.display_name(station_id)


class Tracker:
    """Starts one independent worker per active subscription."""

    def __init__(
        self,
        repository: SubscriptionRepository,
        service: AvailabilityService,
        notifier: Notifier,
        stations: StationDirectory | None = None,
    ) -> None:
        self._repository = repository
        self._service = service
        self._notifier = notifier
        self._stations = stations or StationDirectory()
        self._workers: list[SubscriptionWorker] = []

    @property
    def workers(self) -> list[SubscriptionWorker]:
        return list(self._workers)

    async def start(self) -> list[SubscriptionWorker]:
        """Validate subscriptions, then warm stations and announce for the accepted ones."""
        subscriptions = await self._repository.active_subscriptions()
        if not subscriptions:
            logger.warning("No active subscriptions found")
            return []

        workers: list[SubscriptionWorker] = []
        for subscription in subscriptions:
            try:
                workers.append(
                    SubscriptionWorker(
                        subscription, self._service, self._repository, self._notifier, self._stations
                    )
                )
            except ConfigError as exc:
                logger.error("Not tracking subscription %s: %s", subscription.id, exc)
        if not workers:
            logger.warning("No valid subscriptions to track")
            return []

        accepted = [w.subscription for w in workers]
        logger.info("Starting tracking for %d subscription(s)", len(accepted))
        await self.populate_station_directory(accepted)
        await self.send_startup_notifications(accepted)

        for worker in workers:
            worker.start()
            self._workers.append(worker)
        return self.workers

    async def run_forever(self) -> None:
        await self.start()
        tasks = [w.start() for w in self._workers]
        if tasks:
            await asyncio.gather(*tasks)

    async def stop(self) -> None:
        for worker in self._workers:
            await worker.stop()
        self._workers.clear()

    async def populate_station_directory(self, subscriptions: list[Subscription]) -> None:
        """Fetch boarding stations once per distinct route; failures only cost display names."""
        for route_id in dict.fromkeys(s.route_id for s in subscriptions):
            try:
                stations = await self._service.list_departure_stations(route_id)
            except SeatWatchError as exc:
                logger.warning("Failed to cache stations for route %s: %s", route_id, exc)
                continue
            self._stations.add(stations)
        logger.info("Station cache built with %d entries", len(self._stations))

    async def send_startup_notifications(self, subscriptions: list[Subscription]) -> None:
        """Send one startup message per distinct webhook, not per subscription."""
        users = {s.email for s in subscriptions}
        webhooks = dict.fromkeys(s.webhook_url for s in subscriptions if s.webhook_url)
        for webhook_url in webhooks:
            try:
                await self._notifier.send_startup_notification(
                    webhook_url, len(users), len(subscriptions)
                )
            except Exception:
                logger.exception("Failed to send startup notification")
