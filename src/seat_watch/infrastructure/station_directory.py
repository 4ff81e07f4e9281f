from __future__ import annotations

import logging
import time

from seat_watch.domain.entities import StationDescriptor
from seat_watch.infrastructure.translations import Translator

logger = logging.getLogger(__name__)

DEFAULT_TTL = 24 * 3600  # Station catalogs change rarely


class StationDirectory:
    """In-process station id -> display name map with per-entry TTL.

    Filled from station catalog lookups; no locking, each write is a single
    dict assignment on the event loop thread.
    """

    def __init__(self, translator: Translator | None = None, ttl: int = DEFAULT_TTL) -> None:
        self._translator = translator or Translator()
        self._ttl = ttl
        self._names: dict[str, tuple[str, float]] = {}
        # Value tuple: (display_name, expires_at_monotonic)

    def add(self, stations: list[StationDescriptor]) -> None:
        """Store translated names for the given stations."""
        expires_at = time.monotonic() + self._ttl
        for station in stations:
            self._names[station.id] = (self._translator.station_name(station.name), expires_at)

    def get(self, station_id: str) -> str | None:
        """Return the display name or None if missing or expired."""
        entry = self._names.get(station_id)
        if entry is None:
            return None
        name, expires_at = entry
        if time.monotonic() > expires_at:
            del self._names[station_id]
            return None
        return name

    def display_name(self, station_id: str) -> str:
        """Return the cached display name, falling back to "Station <id>"."""
        name = self.get(station_id)
        return name if name is not None else f"Station {station_id}"

    def __len__(self) -> int:
        return len(self._names)

    def clear(self) -> None:
        self._names.clear()
