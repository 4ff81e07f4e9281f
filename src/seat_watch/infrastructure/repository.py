from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import replace

from seat_watch.domain.entities import Subscription, TrackingState
from seat_watch.domain.exceptions import NotFoundError
from seat_watch.infrastructure.time_utils import now_utc


class SubscriptionRepository(ABC):
    """Storage seam for subscriptions and their tracking state.

    Implementations must tolerate concurrent calls from independent workers;
    each subscription's state is an independent row. Backing-store failures
    are raised as DatabaseError.
    """

    @abstractmethod
    async def active_subscriptions(self) -> list[Subscription]:
        """Return every subscription of every enabled user."""

    @abstractmethod
    async def get_tracking_state(self, subscription_id: str) -> TrackingState | None:
        """Return the last stored state, or None before the first write."""

    @abstractmethod
    async def update_tracking_state(
        self, subscription_id: str, fingerprint: str, alerted: bool
    ) -> TrackingState:
        """Insert or update the state row.

        Sets the fingerprint and last check time, increments total_checks and,
        when ``alerted``, total_alerts.
        """

    @abstractmethod
    async def station_display_name(self, station_id: str) -> str | None:
        """Return a stored display name for a station, if known."""


class InMemoryRepository(SubscriptionRepository):
    """Process-local repository used by the single-subscription runner and tests."""

    def __init__(
        self,
        subscriptions: Iterable[Subscription] = (),
        station_names: dict[str, str] | None = None,
    ) -> None:
        self._subscriptions: dict[str, Subscription] = {s.id: s for s in subscriptions}
        self._states: dict[str, TrackingState] = {}
        self._station_names = dict(station_names or {})
        self._lock = asyncio.Lock()

    def add(self, subscription: Subscription) -> None:
        self._subscriptions[subscription.id] = subscription

    async def active_subscriptions(self) -> list[Subscription]:
        return list(self._subscriptions.values())

    async def get_tracking_state(self, subscription_id: str) -> TrackingState | None:
        state = self._states.get(subscription_id)
        return replace(state) if state is not None else None

    async def update_tracking_state(
        self, subscription_id: str, fingerprint: str, alerted: bool
    ) -> TrackingState:
        if subscription_id not in self._subscriptions:
            raise NotFoundError(f"Unknown subscription: {subscription_id}")
        async with self._lock:
            previous = self._states.get(subscription_id)
            checks = previous.total_checks if previous else 0
            alerts = previous.total_alerts if previous else 0
            state = TrackingState(
                last_seen_hash=fingerprint,
                last_check=now_utc(),
                total_checks=checks + 1,
                total_alerts=alerts + 1 if alerted else alerts,
            )
            self._states[subscription_id] = state
        return replace(state)

    async def station_display_name(self, station_id: str) -> str | None:
        return self._station_names.get(station_id)
