from __future__ import annotations

import re
from dataclasses import dataclass, fields
from datetime import date, datetime, timedelta
from enum import Enum

from seat_watch.domain.exceptions import ConfigError

QUERY_DATE_FORMAT = "%Y%m%d"
_ACCEPTED_DATE_FORMATS = ("%Y-%m-%d", QUERY_DATE_FORMAT)
_DATE_SHAPE = re.compile(r"\d{4}-\d{2}-\d{2}|\d{8}", re.ASCII)

MIN_PASSENGERS = 1
MAX_PASSENGERS = 12


class CatalogMode(str, Enum):
    """Values accepted by the ajaxPulldown ``mode`` form field.

    Using (str, Enum) for Python 3.10 compatibility (StrEnum requires 3.11+).
    """

    ROUTES = "line:full"
    DEPARTURE_STATIONS = "station_geton"
    ARRIVAL_STATIONS = "station_getoff"


def parse_window_date(value: str) -> date:
    """Parse a window bound written as YYYY-MM-DD or YYYYMMDD.

    Raises ConfigError on anything else.
    """
    text = value.strip()
    if _DATE_SHAPE.fullmatch(text) is None:
        raise ConfigError(f"Invalid date: {value!r} (expected YYYY-MM-DD or YYYYMMDD)")
    for fmt in _ACCEPTED_DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    raise ConfigError(f"Invalid date: {value!r} (expected YYYY-MM-DD or YYYYMMDD)")


@dataclass(frozen=True)
class DateWindow:
    """Inclusive calendar window of boarding dates."""

    start: str
    end: str

    def bounds(self) -> tuple[date, date]:
        start = parse_window_date(self.start)
        end = parse_window_date(self.end)
        if start > end:
            raise ConfigError(f"Start date {self.start} must not be after end date {self.end}")
        return start, end

    def dates(self) -> list[str]:
        """Return every date in the window as YYYYMMDD, both ends included."""
        start, end = self.bounds()
        days = (end - start).days
        return [(start + timedelta(days=i)).strftime(QUERY_DATE_FORMAT) for i in range(days + 1)]


@dataclass(frozen=True)
class DepartureWindow:
    """Optional time-of-day bounds on departures, as zero-padded HH:MM strings.

    Comparison is lexicographic, so "6:45" is NOT below "08:00".
    """

    departure_min: str | None = None
    departure_max: str | None = None

    def matches(self, time: str) -> bool:
        if self.departure_min is not None and time < self.departure_min:
            return False
        if self.departure_max is not None and time > self.departure_max:
            return False
        return True


@dataclass(frozen=True)
class PassengerManifest:
    """Passenger counts per fare category; total must be within [1, 12]."""

    adult_men: int = 1
    adult_women: int = 0
    child_men: int = 0
    child_women: int = 0
    handicap_adult_men: int = 0
    handicap_adult_women: int = 0
    handicap_child_men: int = 0
    handicap_child_women: int = 0

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        for f in fields(self):
            if getattr(self, f.name) < 0:
                raise ConfigError(f"Passenger count {f.name} cannot be negative")
        total = self.total()
        if total < MIN_PASSENGERS:
            raise ConfigError("At least 1 passenger required")
        if total > MAX_PASSENGERS:
            raise ConfigError(f"Maximum {MAX_PASSENGERS} passengers allowed")

    def total_male(self) -> int:
        return self.adult_men + self.child_men + self.handicap_adult_men + self.handicap_child_men

    def total_female(self) -> int:
        return (
            self.adult_women
            + self.child_women
            + self.handicap_adult_women
            + self.handicap_child_women
        )

    def total(self) -> int:
        return self.total_male() + self.total_female()


@dataclass(frozen=True)
class AvailabilityQuery:
    """Everything needed to run one schedule search across a date window."""

    area_id: int
    route_id: str
    departure_station: str
    arrival_station: str
    date_window: DateWindow
    passengers: PassengerManifest
    departure_window: DepartureWindow | None = None

    def search_params(self, boarding_date: str) -> dict[str, str]:
        """Query-string parameters for rsvPlanList on one boarding date (YYYYMMDD)."""
        p = self.passengers
        return {
            "mode": "search",
            "route": str(self.area_id),
            "lineId": self.route_id,
            "onStationCd": self.departure_station,
            "offStationCd": self.arrival_station,
            "bordingDate": boarding_date,
            "danseiNum": str(p.total_male()),
            "zyoseiNum": str(p.total_female()),
            "adultMen": str(p.adult_men),
            "adultWomen": str(p.adult_women),
            "childMen": str(p.child_men),
            "childWomen": str(p.child_women),
            "handicapAdultMen": str(p.handicap_adult_men),
            "handicapAdultWomen": str(p.handicap_adult_women),
            "handicapChildMen": str(p.handicap_child_men),
            "handicapChildWomen": str(p.handicap_child_women),
        }
