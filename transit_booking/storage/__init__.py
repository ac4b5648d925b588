from transit_booking.storage.bookings import InMemoryBookingWriter
from transit_booking.storage.catalog import InMemoryRouteCatalog, RouteCatalog
from transit_booking.storage.inventory import (
    InMemoryInventoryLedger,
    InventoryLedger,
    ReservationOutcome,
)
from transit_booking.storage.session_store import InMemorySessionStore, SessionStore

__all__ = [
    "InMemoryBookingWriter",
    "InMemoryRouteCatalog",
    "RouteCatalog",
    "InMemoryInventoryLedger",
    "InventoryLedger",
    "ReservationOutcome",
    "InMemorySessionStore",
    "SessionStore",
]
