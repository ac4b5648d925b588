"""
Inventory ledger: authoritative seat counts for bookable departures.

Remaining seats are the only state shared between contacts. Every
departure has its own lock, so reservations against one departure never
wait on another, and ``try_reserve`` checks and decrements in a single
critical section.
"""

import logging
import threading
from datetime import datetime
from enum import Enum
from typing import Iterable, Optional, Protocol

from transit_booking.schemas.catalog_schema import Departure, DepartureStatus

logger = logging.getLogger(__name__)


class ReservationOutcome(str, Enum):
    """Result of a conditional seat decrement."""

    SUCCESS = "success"
    INSUFFICIENT_CAPACITY = "insufficient_capacity"
    NOT_FOUND = "not_found"


class InventoryLedger(Protocol):
    def get(self, departure_id: str) -> Optional[Departure]: ...

    def list_available(
        self, route_id: str, day_start: datetime, day_end: datetime
    ) -> list[Departure]: ...

    def try_reserve(self, departure_id: str, count: int) -> ReservationOutcome: ...


class InMemoryInventoryLedger:
    """Departure store with an atomic decrement-if-enough primitive."""

    def __init__(self, departures: Iterable[Departure] = ()) -> None:
        self._departures: dict[str, Departure] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()
        for departure in departures:
            self.add_departure(departure)

    def _lock_for(self, departure_id: str) -> Optional[threading.Lock]:
        with self._registry_lock:
            return self._locks.get(departure_id)

    def add_departure(self, departure: Departure) -> None:
        with self._registry_lock:
            self._departures[departure.departure_id] = departure
            self._locks.setdefault(departure.departure_id, threading.Lock())

    def get(self, departure_id: str) -> Optional[Departure]:
        """Fresh read of a departure, including its current seat count."""
        lock = self._lock_for(departure_id)
        if lock is None:
            return None
        with lock:
            return self._departures.get(departure_id)

    def list_available(
        self, route_id: str, day_start: datetime, day_end: datetime
    ) -> list[Departure]:
        """Scheduled departures in ``[day_start, day_end)`` with seats left, earliest first."""
        with self._registry_lock:
            snapshot = list(self._departures.values())
        matches = [
            d for d in snapshot
            if d.route_id == route_id
            and d.status == DepartureStatus.SCHEDULED
            and d.available_seats > 0
            and day_start <= d.departure_time < day_end
        ]
        return sorted(matches, key=lambda d: d.departure_time)

    def try_reserve(self, departure_id: str, count: int) -> ReservationOutcome:
        """Decrement seats by ``count`` only if at least ``count`` remain.

        Departures that are no longer scheduled are reported as NOT_FOUND:
        they are not bookable inventory any more.
        """
        if count < 1:
            raise ValueError(f"Seat count must be positive, got {count}")
        lock = self._lock_for(departure_id)
        if lock is None:
            return ReservationOutcome.NOT_FOUND
        with lock:
            departure = self._departures.get(departure_id)
            if departure is None or departure.status != DepartureStatus.SCHEDULED:
                return ReservationOutcome.NOT_FOUND
            if departure.available_seats < count:
                logger.warning(
                    "Reservation refused for %s: requested %d, available %d",
                    departure_id, count, departure.available_seats,
                )
                return ReservationOutcome.INSUFFICIENT_CAPACITY
            self._departures[departure_id] = departure.model_copy(
                update={"available_seats": departure.available_seats - count}
            )
        logger.info("Reserved %d seat(s) on %s", count, departure_id)
        return ReservationOutcome.SUCCESS

    def set_status(self, departure_id: str, status: DepartureStatus) -> Optional[Departure]:
        """Move a departure through its lifecycle (scheduled -> departed/cancelled)."""
        lock = self._lock_for(departure_id)
        if lock is None:
            return None
        with lock:
            departure = self._departures[departure_id].model_copy(update={"status": status})
            self._departures[departure_id] = departure
        logger.info("Departure %s is now %s", departure_id, status.value)
        return departure
