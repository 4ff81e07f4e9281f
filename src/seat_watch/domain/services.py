from __future__ import annotations

import hashlib
from collections.abc import Iterable

from seat_watch.domain.entities import ScheduleEntry

_FIELD_SEP = "\x1f"
_RECORD_SEP = "\x1e"


def state_hash(schedules: Iterable[ScheduleEntry]) -> str:
    """Return a deterministic fingerprint of a schedule set.

    Folds, in iteration order, each entry's departure date and time and, for
    every retained plan, plan id, price and remaining seat count. Order is
    significant: the same entries in a different page order hash differently.
    """
    digest = hashlib.sha256()
    for schedule in schedules:
        digest.update(
            f"S{_FIELD_SEP}{schedule.departure_date}{_FIELD_SEP}{schedule.departure_time}".encode()
        )
        digest.update(_RECORD_SEP.encode())
        for plan in schedule.available_plans:
            seats = plan.status.remaining_seats
            seats_token = "-" if seats is None else str(seats)
            digest.update(
                f"P{_FIELD_SEP}{plan.plan_id}{_FIELD_SEP}{plan.price}{_FIELD_SEP}{seats_token}".encode()
            )
            digest.update(_RECORD_SEP.encode())
    return digest.hexdigest()


def filter_with_seats(schedules: Iterable[ScheduleEntry]) -> list[ScheduleEntry]:
    """Keep entries with at least one retained plan (count known or not)."""
    return [s for s in schedules if s.available_plans]


def has_state_changed(last_hash: str | None, current_hash: str) -> bool:
    """A missing previous fingerprint always counts as a change."""
    if last_hash is None:
        return True
    return last_hash != current_hash


def should_notify(notify_on_change_only: bool, state_changed: bool, has_seats: bool) -> bool:
    """Notify decision policy.

    | notify_on_change_only | state_changed | has_seats | notify |
    |-----------------------|---------------|-----------|--------|
    | true                  | true          | true      | yes    |
    | true                  | true          | false     | no     |
    | true                  | false         | any       | no     |
    | false                 | any           | true      | yes    |
    | false                 | any           | false     | no     |
    """
    if notify_on_change_only:
        return state_changed and has_seats
    return has_seats


def format_date(yyyymmdd: str) -> str:
    """Render YYYYMMDD as DD/MM/YYYY; anything else is returned unchanged."""
    if len(yyyymmdd) == 8 and yyyymmdd.isdigit():
        return f"{yyyymmdd[6:8]}/{yyyymmdd[4:6]}/{yyyymmdd[0:4]}"
    return yyyymmdd


def format_price(price: int) -> str:
    """Return the display string for a whole-yen price, empty when unknown (0)."""
    return f"{price}円" if price > 0 else ""


def seats_label(remaining_seats: int | None) -> str:
    if remaining_seats is None:
        return "Seats available"
    return f"{remaining_seats} seats"
