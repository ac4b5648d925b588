"""
Booking record writer.

Records are created only after the seat decrement has succeeded and are
never edited afterwards, except for the payment fields filled in once
the payment provider responds.
"""

import logging
import threading
import uuid
from typing import Optional

from transit_booking.logging_context import mask_contact
from transit_booking.schemas.booking_schema import Booking, BookingStatus, PaymentStatus

logger = logging.getLogger(__name__)

REFERENCE_PREFIX = "BOOK-"
REFERENCE_HEX_LENGTH = 8


def generate_reference() -> str:
    """Short, shareable booking code, e.g. ``BOOK-3F9A1C2B``."""
    return f"{REFERENCE_PREFIX}{uuid.uuid4().hex[:REFERENCE_HEX_LENGTH].upper()}"


class InMemoryBookingWriter:
    """Append-only booking records keyed by booking reference."""

    def __init__(self) -> None:
        self._bookings: dict[str, Booking] = {}
        self._lock = threading.Lock()

    def create(
        self,
        user_id: str,
        session_ref: str,
        departure_id: str,
        passengers: int,
        total_amount: int,
        status: BookingStatus = BookingStatus.CONFIRMED,
    ) -> Booking:
        """Create a booking with a freshly generated, unique reference."""
        missing = [
            field_name
            for field_name, value in [
                ("user_id", user_id),
                ("session_ref", session_ref),
                ("departure_id", departure_id),
            ]
            if not value or not value.strip()
        ]
        if missing:
            raise ValueError(f"Cannot create booking - missing required fields: {', '.join(missing)}.")

        with self._lock:
            reference = generate_reference()
            while reference in self._bookings:
                reference = generate_reference()
            booking = Booking(
                booking_reference=reference,
                user_id=user_id,
                session_ref=session_ref,
                departure_id=departure_id,
                passengers=passengers,
                total_amount=total_amount,
                status=status,
            )
            self._bookings[reference] = booking

        logger.info(
            "Booking created: %s for %s on %s (%d passenger(s), total %d)",
            reference, mask_contact(user_id), departure_id, passengers, total_amount,
        )
        return booking

    def get(self, reference: str) -> Optional[Booking]:
        """Retrieve a booking by reference."""
        with self._lock:
            return self._bookings.get(reference)

    def list_for_user(self, user_id: str, limit: int = 5) -> list[Booking]:
        """Most recent bookings for a contact, newest first."""
        with self._lock:
            owned = [b for b in self._bookings.values() if b.user_id == user_id]
        owned.sort(key=lambda b: b.created_at, reverse=True)
        return owned[:limit]

    def find_by_payment_reference(self, payment_reference: str) -> Optional[Booking]:
        with self._lock:
            for booking in self._bookings.values():
                if booking.payment_reference == payment_reference:
                    return booking
        return None

    def record_payment_link(
        self, reference: str, payment_reference: str, authorization_url: str
    ) -> Booking:
        """Attach the provider's reference and link. Only the first link is kept."""
        with self._lock:
            booking = self._bookings[reference]
            if booking.payment_reference is not None:
                return booking
            booking = booking.model_copy(update={
                "payment_reference": payment_reference,
                "authorization_url": authorization_url,
            })
            self._bookings[reference] = booking
        logger.info("Payment link recorded for %s (%s)", reference, payment_reference)
        return booking

    def mark_payment(self, reference: str, payment_status: PaymentStatus) -> Optional[Booking]:
        with self._lock:
            booking = self._bookings.get(reference)
            if booking is None:
                return None
            booking = booking.model_copy(update={"payment_status": payment_status})
            self._bookings[reference] = booking
        logger.info("Booking %s payment status: %s", reference, payment_status.value)
        return booking
