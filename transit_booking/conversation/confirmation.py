"""
Booking-confirmation transaction.

Seats are reserved and the booking recorded in one synchronous section,
with no suspension point between the fresh seat read and the atomic
decrement. The payment link is requested afterwards; if that fails the
booking stands with payment pending and the seats stay reserved.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from transit_booking.errors import (
    CapacityConflictError,
    DepartureUnavailableError,
    PaymentGatewayError,
    SessionConsistencyError,
)
from transit_booking.payments.gateway import PaymentGateway, PaymentLink
from transit_booking.schemas.booking_schema import Booking
from transit_booking.schemas.catalog_schema import DepartureStatus
from transit_booking.schemas.session_schema import Session
from transit_booking.storage.bookings import InMemoryBookingWriter
from transit_booking.storage.inventory import InventoryLedger, ReservationOutcome

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConfirmationOutcome:
    booking: Booking
    payment_link: Optional[PaymentLink] = None
    payment_error: Optional[PaymentGatewayError] = None


class BookingConfirmation:
    """Reserve seats, record the booking, then request payment."""

    def __init__(
        self,
        ledger: InventoryLedger,
        bookings: InMemoryBookingWriter,
        payments: Optional[PaymentGateway],
        currency: str,
        callback_url: str,
        payment_timeout_seconds: float,
    ) -> None:
        self._ledger = ledger
        self._bookings = bookings
        self._payments = payments
        self._currency = currency
        self._callback_url = callback_url
        self._payment_timeout = payment_timeout_seconds

    @property
    def payments_enabled(self) -> bool:
        return self._payments is not None

    def reserve_and_record(self, session: Session) -> Booking:
        """Steps 1-4: fresh read, conditional decrement, booking record.

        Raises:
            SessionConsistencyError: the draft lacks confirmation data.
            DepartureUnavailableError: the departure vanished or is no longer scheduled.
            CapacityConflictError: not enough seats remain.
        """
        draft = session.draft
        missing = draft.missing("departure_id", "passengers", "total_amount")
        if missing:
            raise SessionConsistencyError(f"Cannot confirm booking, missing: {', '.join(missing)}")

        departure = self._ledger.get(draft.departure_id)
        if departure is None or departure.status != DepartureStatus.SCHEDULED:
            raise DepartureUnavailableError(draft.departure_id)
        if departure.available_seats < draft.passengers:
            raise CapacityConflictError(draft.departure_id, draft.passengers, departure.available_seats)

        outcome = self._ledger.try_reserve(draft.departure_id, draft.passengers)
        if outcome == ReservationOutcome.NOT_FOUND:
            raise DepartureUnavailableError(draft.departure_id)
        if outcome == ReservationOutcome.INSUFFICIENT_CAPACITY:
            current = self._ledger.get(draft.departure_id)
            raise CapacityConflictError(
                draft.departure_id, draft.passengers, current.available_seats if current else 0
            )

        return self._bookings.create(
            user_id=session.user_id,
            session_ref=session.session_ref,
            departure_id=draft.departure_id,
            passengers=draft.passengers,
            total_amount=draft.total_amount,
        )

    async def request_payment(self, booking: Booking) -> Optional[PaymentLink]:
        """Step 5: ask the gateway for a link and record it on the booking.

        Returns None when no gateway is configured. A booking that already
        has a link is returned as-is without calling the gateway again.

        Raises:
            PaymentGatewayError: the gateway failed or did not answer in time.
        """
        if self._payments is None:
            return None
        if booking.payment_reference and booking.authorization_url:
            return PaymentLink(booking.authorization_url, booking.payment_reference)

        metadata = {"contact_id": booking.user_id, "session_id": booking.session_ref}
        try:
            link = await asyncio.wait_for(
                self._payments.initialize(
                    amount=booking.total_amount,
                    currency=self._currency,
                    reference=booking.booking_reference,
                    callback_url=self._callback_url,
                    metadata=metadata,
                ),
                timeout=self._payment_timeout,
            )
        except asyncio.TimeoutError as exc:
            logger.error("Payment request for %s exceeded %.1fs", booking.booking_reference, self._payment_timeout)
            raise PaymentGatewayError("Payment request timed out", retryable=True) from exc

        self._bookings.record_payment_link(
            booking.booking_reference, link.external_reference, link.authorization_url
        )
        return link

    async def confirm(self, session: Session) -> ConfirmationOutcome:
        """Run the full transaction. Payment failures are returned, not raised."""
        booking = self.reserve_and_record(session)
        try:
            link = await self.request_payment(booking)
        except PaymentGatewayError as exc:
            logger.error(
                "Booking %s recorded but payment setup failed: %s",
                booking.booking_reference, exc,
            )
            return ConfirmationOutcome(booking=booking, payment_error=exc)
        return ConfirmationOutcome(booking=booking, payment_link=link)
