from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from seat_watch.domain.value_objects import QUERY_DATE_FORMAT, parse_window_date

TOKYO_TZ: ZoneInfo = ZoneInfo("Asia/Tokyo")

DEFAULT_WINDOW_DAYS = 7


def now_tokyo() -> datetime:
    """Return the current moment as a timezone-aware datetime in Asia/Tokyo."""
    return datetime.now(tz=TOKYO_TZ)


def now_utc() -> datetime:
    return datetime.now(tz=timezone.utc)


def format_query_date(d: date) -> str:
    """Return date string in YYYYMMDD format (for the bordingDate parameter)."""
    return d.strftime(QUERY_DATE_FORMAT)


def normalize_query_date(value: str) -> str:
    """Normalize YYYY-MM-DD or YYYYMMDD to YYYYMMDD.

    Raises ConfigError on unparseable input.
    """
    return format_query_date(parse_window_date(value))


def default_date_window(days: int = DEFAULT_WINDOW_DAYS) -> tuple[str, str]:
    """Return (today, today + days) in Tokyo local time, both as YYYYMMDD."""
    today = now_tokyo().date()
    return format_query_date(today), format_query_date(today + timedelta(days=days))
