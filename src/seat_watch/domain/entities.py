from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from seat_watch.domain.value_objects import (
    AvailabilityQuery,
    DateWindow,
    DepartureWindow,
    PassengerManifest,
)


@dataclass(frozen=True)
class RouteDescriptor:
    """A route from the line catalog (``mode=line:full``)."""

    id: str
    name: str  # Japanese display text as served by the site
    switch_changeable_flg: str | None = None


@dataclass(frozen=True)
class StationDescriptor:
    """A boarding or alighting station from the station catalog."""

    id: str
    name: str


@dataclass(frozen=True)
class SeatStatus:
    """Seat availability of a retained fare plan.

    Sold-out plans are dropped by the parser, so the only state left is
    "available"; ``remaining_seats`` is None when the page shows no count.
    """

    remaining_seats: int | None = None


@dataclass
class FarePlan:
    """One purchasable price/seat-class option attached to a departure."""

    plan_id: int  # discntPlanNo hidden field; 0 when absent
    plan_index: int  # data-index of the seat indicator
    price: int  # whole yen
    display_price: str  # e.g. "12000円"; empty when price is unknown
    status: SeatStatus


@dataclass
class ScheduleEntry:
    """A single bus departure parsed from a search result card."""

    bus_number: str  # "Bus_<n>", ordinal position on the page, not a stable id
    departure_date: str  # YYYYMMDD
    departure_time: str  # H:MM or HH:MM as printed
    arrival_time: str
    available_plans: list[FarePlan] = field(default_factory=list)
    arrival_date: str = ""  # YYYYMMDD; the next day when arrival is before departure
    departure_station: str = ""  # station ids, filled from the query
    arrival_station: str = ""


@dataclass
class TrackingState:
    """Per-subscription change-detection record owned by the repository."""

    last_seen_hash: str
    last_check: datetime | None = None
    total_checks: int = 0
    total_alerts: int = 0


@dataclass(frozen=True)
class Subscription:
    """A user's tracked route, passenger manifest and notification preferences."""

    id: str
    email: str
    area_id: int
    route_id: str
    departure_station: str
    arrival_station: str
    date_start: str  # YYYY-MM-DD or YYYYMMDD
    date_end: str
    passengers: PassengerManifest
    notify_on_change_only: bool = True
    scrape_interval_secs: int = 300
    webhook_url: str | None = None
    departure_time_min: str | None = None  # HH:MM
    departure_time_max: str | None = None

    @property
    def date_window(self) -> DateWindow:
        return DateWindow(self.date_start, self.date_end)

    @property
    def departure_window(self) -> DepartureWindow | None:
        if self.departure_time_min is None and self.departure_time_max is None:
            return None
        return DepartureWindow(self.departure_time_min, self.departure_time_max)

    def build_query(self) -> AvailabilityQuery:
        """Rebuild the search query from the stored subscription fields."""
        return AvailabilityQuery(
            area_id=self.area_id,
            route_id=self.route_id,
            departure_station=self.departure_station,
            arrival_station=self.arrival_station,
            date_window=self.date_window,
            passengers=self.passengers,
            departure_window=self.departure_window,
        )


@dataclass
class NotificationContext:
    """Display context attached to an availability alert."""

    departure_station_name: str
    arrival_station_name: str
    date_range: tuple[str, str]
    passenger_count: int
    time_filter: tuple[str | None, str | None] | None = None
