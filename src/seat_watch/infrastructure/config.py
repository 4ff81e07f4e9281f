from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from seat_watch.domain.entities import Subscription
from seat_watch.domain.exceptions import ConfigError
from seat_watch.domain.value_objects import PassengerManifest
from seat_watch.infrastructure.highway_client import BASE_URL, DEFAULT_TIMEOUT
from seat_watch.infrastructure.time_utils import default_date_window

DEFAULT_INTERVAL_SECS = 300

_PASSENGER_VARS = {
    "adult_men": ("ADULT_MEN", 1),
    "adult_women": ("ADULT_WOMEN", 0),
    "child_men": ("CHILD_MEN", 0),
    "child_women": ("CHILD_WOMEN", 0),
    "handicap_adult_men": ("HANDICAP_ADULT_MEN", 0),
    "handicap_adult_women": ("HANDICAP_ADULT_WOMEN", 0),
    "handicap_child_men": ("HANDICAP_CHILD_MEN", 0),
    "handicap_child_women": ("HANDICAP_CHILD_WOMEN", 0),
}


@dataclass(frozen=True)
class Settings:
    """Process-wide settings read once at startup."""

    host: str = "0.0.0.0"
    port: int = 3001
    log_level: str = "INFO"
    base_url: str = BASE_URL
    request_timeout: float = DEFAULT_TIMEOUT


def load_settings(env: Mapping[str, str] | None = None) -> Settings:
    env = os.environ if env is None else env
    return Settings(
        host=env.get("HOST", "0.0.0.0"),
        port=_int(env, "PORT", 3001),
        log_level=env.get("LOG_LEVEL", "INFO").upper(),
        base_url=env.get("BASE_URL", BASE_URL),
        request_timeout=_float(env, "REQUEST_TIMEOUT", DEFAULT_TIMEOUT),
    )


def subscription_from_env(env: Mapping[str, str] | None = None) -> Subscription:
    """Build the single tracked subscription from environment variables.

    ROUTE_ID, DEPARTURE_STATION and ARRIVAL_STATION are required; the date
    window defaults to today .. today+7 (Asia/Tokyo). Raises ConfigError.
    """
    env = os.environ if env is None else env

    default_start, default_end = default_date_window()
    passengers = PassengerManifest(
        **{field: _int(env, var, default) for field, (var, default) in _PASSENGER_VARS.items()}
    )
    subscription = Subscription(
        id=env.get("SUBSCRIPTION_ID", "env"),
        email=env.get("USER_EMAIL", "local"),
        area_id=_int(env, "AREA_ID", 1),
        route_id=_required(env, "ROUTE_ID"),
        departure_station=_required(env, "DEPARTURE_STATION"),
        arrival_station=_required(env, "ARRIVAL_STATION"),
        date_start=_optional(env, "DATE_START") or default_start,
        date_end=_optional(env, "DATE_END") or default_end,
        passengers=passengers,
        notify_on_change_only=_bool(env, "NOTIFY_ON_CHANGE_ONLY", True),
        scrape_interval_secs=_int(env, "SCRAPE_INTERVAL_SECS", DEFAULT_INTERVAL_SECS),
        webhook_url=_optional(env, "DISCORD_WEBHOOK_URL"),
        departure_time_min=_optional(env, "DEPARTURE_TIME_MIN"),
        departure_time_max=_optional(env, "DEPARTURE_TIME_MAX"),
    )
    validate_subscription(subscription)
    return subscription


def validate_subscription(subscription: Subscription) -> None:
    """Reject a subscription the tracker could never poll."""
    if not subscription.route_id.isdigit():
        raise ConfigError(f"Invalid ROUTE_ID: {subscription.route_id!r}")
    if subscription.scrape_interval_secs <= 0:
        raise ConfigError("Scrape interval must be positive")
    # Raises ConfigError for unparseable dates or start > end
    subscription.date_window.bounds()


def _required(env: Mapping[str, str], key: str) -> str:
    value = _optional(env, key)
    if value is None:
        raise ConfigError(f"{key} is required")
    return value


def _optional(env: Mapping[str, str], key: str) -> str | None:
    value = env.get(key, "").strip()
    return value or None


def _int(env: Mapping[str, str], key: str, default: int) -> int:
    raw = env.get(key)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"Invalid {key}: {raw!r}")


def _float(env: Mapping[str, str], key: str, default: float) -> float:
    raw = env.get(key)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigError(f"Invalid {key}: {raw!r}")


def _bool(env: Mapping[str, str], key: str, default: bool) -> bool:
    raw = env.get(key, "").strip().lower()
    if not raw:
        return default
    return raw in ("1", "true", "yes", "on")
