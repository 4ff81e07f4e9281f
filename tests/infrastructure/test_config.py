"""Tests for environment-driven settings and the single-subscription loader."""
from __future__ import annotations

import pytest
from freezegun import freeze_time

from seat_watch.domain.exceptions import ConfigError
from seat_watch.infrastructure.config import load_settings, subscription_from_env
from seat_watch.infrastructure.highway_client import BASE_URL

REQUIRED = {"ROUTE_ID": "155", "DEPARTURE_STATION": "001", "ARRIVAL_STATION": "498"}


def test_settings_defaults() -> None:
    settings = load_settings({})
    assert settings.host == "0.0.0.0"
    assert settings.port == 3001
    assert settings.log_level == "INFO"
    assert settings.base_url == BASE_URL
    assert settings.request_timeout == 30.0


def test_settings_overrides() -> None:
    settings = load_settings(
        {"PORT": "8080", "LOG_LEVEL": "debug", "REQUEST_TIMEOUT": "12.5", "HOST": "127.0.0.1"}
    )
    assert settings.port == 8080
    assert settings.log_level == "DEBUG"
    assert settings.request_timeout == 12.5
    assert settings.host == "127.0.0.1"


def test_settings_invalid_port() -> None:
    with pytest.raises(ConfigError):
        load_settings({"PORT": "eighty"})


@freeze_time("2025-10-28 20:00:00")  # 2025-10-29 05:00 in Tokyo
def test_subscription_defaults() -> None:
    sub = subscription_from_env(REQUIRED)
    assert sub.id == "env"
    assert sub.area_id == 1
    assert sub.date_start == "20251029"
    assert sub.date_end == "20251105"
    assert sub.passengers.total() == 1
    assert sub.passengers.adult_men == 1
    assert sub.notify_on_change_only is True
    assert sub.scrape_interval_secs == 300
    assert sub.webhook_url is None
    assert sub.departure_window is None


def test_subscription_from_full_environment() -> None:
    env = {
        **REQUIRED,
        "AREA_ID": "2",
        "DATE_START": "2025-10-29",
        "DATE_END": "2025-11-02",
        "ADULT_MEN": "1",
        "ADULT_WOMEN": "2",
        "CHILD_MEN": "1",
        "NOTIFY_ON_CHANGE_ONLY": "false",
        "SCRAPE_INTERVAL_SECS": "60",
        "DISCORD_WEBHOOK_URL": "https://discord.example/webhook/9",
        "DEPARTURE_TIME_MIN": "08:00",
        "USER_EMAIL": "rider@example.com",
    }
    sub = subscription_from_env(env)
    assert sub.area_id == 2
    assert sub.date_window.dates()[-1] == "20251102"
    assert sub.passengers.total() == 4
    assert sub.notify_on_change_only is False
    assert sub.scrape_interval_secs == 60
    assert sub.webhook_url == "https://discord.example/webhook/9"
    assert sub.departure_window is not None
    assert sub.departure_window.departure_max is None
    assert sub.email == "rider@example.com"


@pytest.mark.parametrize("missing", sorted(REQUIRED))
def test_required_variables(missing: str) -> None:
    env = {k: v for k, v in REQUIRED.items() if k != missing}
    with pytest.raises(ConfigError, match=missing):
        subscription_from_env(env)


def test_non_numeric_route_rejected() -> None:
    with pytest.raises(ConfigError):
        subscription_from_env({**REQUIRED, "ROUTE_ID": "abc"})


def test_reversed_dates_rejected() -> None:
    with pytest.raises(ConfigError):
        subscription_from_env({**REQUIRED, "DATE_START": "2025-11-02", "DATE_END": "2025-10-29"})


def test_zero_interval_rejected() -> None:
    with pytest.raises(ConfigError):
        subscription_from_env({**REQUIRED, "SCRAPE_INTERVAL_SECS": "0"})


def test_too_many_passengers_rejected() -> None:
    with pytest.raises(ConfigError):
        subscription_from_env({**REQUIRED, "ADULT_MEN": "13"})
