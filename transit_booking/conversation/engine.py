"""
Conversation engine: one inbound message in, one reply out.

Messages from the same contact are handled strictly one at a time under
the contact's message lock; messages from different contacts run
concurrently. Every reply is computed from the session as read under
that lock, and every session write goes through the transition table.

No BookingFlowError escapes ``handle_message``: each one is logged,
mapped to a reply and followed by a session reset.
"""

from datetime import datetime
from typing import Callable, Optional

from transit_booking.config import settings
from transit_booking.conversation.confirmation import BookingConfirmation
from transit_booking.conversation.handlers import (
    FlowServices,
    StepHandler,
    StepResult,
    Turn,
    build_handlers,
)
from transit_booking.conversation.state_machine import (
    check_session_consistency,
    validate_transition,
)
from transit_booking.conversation.tone import Tone, ToneDetector
from transit_booking.errors import (
    BookingFlowError,
    CapacityConflictError,
    DepartureUnavailableError,
    SessionConsistencyError,
)
from transit_booking.logging_context import get_contact_logger, mask_contact, set_contact_id
from transit_booking.payments.gateway import PaymentGateway
from transit_booking.replies.formatter import ReplyFormatter
from transit_booking.schemas.booking_schema import PaymentStatus
from transit_booking.schemas.session_schema import ConversationStep, PaymentContext, Session
from transit_booking.storage.bookings import InMemoryBookingWriter
from transit_booking.storage.catalog import RouteCatalog
from transit_booking.storage.inventory import InventoryLedger
from transit_booking.storage.session_store import SessionStore, utc_now
from transit_booking.utils import normalize_contact

logger = get_contact_logger(__name__)

MENU_COMMANDS = frozenset({"menu", "hi", "hello", "start"})
RESET_COMMANDS = frozenset({"reset", "cancel"})
SUPPORT_COMMANDS = frozenset({"support"})


class ConversationEngine:
    """Routes each message to the handler for the contact's current step."""

    def __init__(
        self,
        sessions: SessionStore,
        catalog: RouteCatalog,
        ledger: InventoryLedger,
        bookings: InMemoryBookingWriter,
        payments: Optional[PaymentGateway] = None,
        formatter: Optional[ReplyFormatter] = None,
        clock: Callable[[], datetime] = utc_now,
        tone_detector: Optional[ToneDetector] = None,
        currency: Optional[str] = None,
        callback_url: Optional[str] = None,
        payment_timeout_seconds: Optional[float] = None,
    ) -> None:
        self.sessions = sessions
        self.bookings = bookings
        self.formatter = formatter or ReplyFormatter.from_config(settings.business)
        self._clock = clock
        self._tone = tone_detector or ToneDetector()
        self.confirmation = BookingConfirmation(
            ledger=ledger,
            bookings=bookings,
            payments=payments,
            currency=currency or settings.business.currency,
            callback_url=callback_url or settings.payment.callback_url,
            payment_timeout_seconds=payment_timeout_seconds or settings.payment.timeout_seconds,
        )
        services = FlowServices(
            catalog=catalog,
            ledger=ledger,
            bookings=bookings,
            confirmation=self.confirmation,
            formatter=self.formatter,
        )
        self._handlers: dict[ConversationStep, StepHandler] = build_handlers(services)

    # ------------------------------------------------------------------ #
    # Inbound messages
    # ------------------------------------------------------------------ #

    async def handle_message(self, user_id: str, text: str) -> str:
        """Process one message from ``user_id`` and return the reply text."""
        user_id = normalize_contact(user_id) or user_id.strip()
        set_contact_id(user_id)
        turn = Turn(text=text.strip(), tone=self._tone.detect(text).tone, now=self._clock())

        async with self.sessions.message_lock(user_id):
            session = self.sessions.get_or_reset(user_id)
            logger.info("Message received in step '%s'", session.step.value)
            reply = await self._dispatch(user_id, session, turn)

        if turn.tone == Tone.NEGATIVE:
            reply = self.formatter.apology_prefix() + reply
        return reply

    async def _dispatch(self, user_id: str, session: Session, turn: Turn) -> str:
        command = turn.normalized
        if command in MENU_COMMANDS:
            self.sessions.reset(user_id, ConversationStep.WELCOME)
            return self.formatter.welcome_menu()
        if command in RESET_COMMANDS:
            self.sessions.reset(user_id, ConversationStep.WELCOME)
            return self.formatter.reset_ack()
        if command in SUPPORT_COMMANDS:
            self.sessions.update(user_id)
            return self.formatter.support()

        try:
            check_session_consistency(session)
            handler = self._handlers[session.step]
            result = await handler.handle(turn, session)
            self._apply(user_id, session, result)
            return result.reply
        except CapacityConflictError as exc:
            logger.warning("Capacity conflict: %s", exc)
            self.sessions.reset(user_id, ConversationStep.WELCOME)
            return self.formatter.sold_out(exc.available)
        except DepartureUnavailableError as exc:
            logger.warning("Departure unavailable: %s", exc)
            self.sessions.reset(user_id, ConversationStep.WELCOME)
            return self.formatter.departure_unavailable()
        except SessionConsistencyError as exc:
            logger.error("Inconsistent session in step '%s': %s", session.step.value, exc)
            self.sessions.reset(user_id, ConversationStep.WELCOME)
            return self.formatter.flow_reset()
        except BookingFlowError as exc:
            logger.error("Booking flow failed in step '%s': %s", session.step.value, exc)
            self.sessions.reset(user_id, ConversationStep.WELCOME)
            return self.formatter.booking_failed()

    def _apply(self, user_id: str, session: Session, result: StepResult) -> Session:
        """Validate the handler's patch and write it in one store call."""
        if result.reset_to is not None:
            return self.sessions.reset(user_id, result.reset_to)

        if result.next_step is None:
            return self.sessions.update(
                user_id, draft_updates=result.draft_updates or None, context=result.context
            )

        validate_transition(session.step, result.next_step)
        prospective = session.model_copy(update={
            "step": result.next_step,
            "draft": session.draft.merged(**result.draft_updates),
            "context": result.context if result.context is not None else session.context,
        })
        check_session_consistency(prospective)
        logger.info("Step %s -> %s", session.step.value, result.next_step.value)
        return self.sessions.update(
            user_id,
            step=result.next_step,
            draft_updates=result.draft_updates or None,
            context=result.context,
        )

    # ------------------------------------------------------------------ #
    # Payment notifications
    # ------------------------------------------------------------------ #

    async def handle_payment_event(
        self, reference: str, paid: bool
    ) -> Optional[tuple[str, str]]:
        """Apply a provider notification for ``reference``.

        ``reference`` may be the booking reference or the provider's own
        reference. Returns ``(user_id, reply)`` for the contact to notify,
        or None when the reference matches no booking.
        """
        booking = self.bookings.get(reference) or self.bookings.find_by_payment_reference(reference)
        if booking is None:
            logger.warning("Payment event for unknown reference %s", reference)
            return None

        user_id = booking.user_id
        set_contact_id(user_id)
        async with self.sessions.message_lock(user_id):
            booking = self.bookings.get(booking.booking_reference)
            if not paid:
                if booking.payment_status == PaymentStatus.PAID:
                    logger.info(
                        "Ignoring late failure event for paid booking %s", booking.booking_reference
                    )
                    return user_id, self.formatter.payment_received(booking.booking_reference)
                self.bookings.mark_payment(booking.booking_reference, PaymentStatus.FAILED)
                logger.info("Payment for %s not completed", booking.booking_reference)
                return user_id, self.formatter.payment_not_completed(booking.booking_reference)

            self.bookings.mark_payment(booking.booking_reference, PaymentStatus.PAID)
            session = self.sessions.peek(user_id)
            if (
                session is not None
                and session.step == ConversationStep.AWAITING_PAYMENT
                and isinstance(session.context, PaymentContext)
                and session.context.booking_reference == booking.booking_reference
            ):
                self.sessions.reset(user_id, ConversationStep.MAIN_MENU)
            logger.info(
                "Payment confirmed for %s (contact %s)", booking.booking_reference, mask_contact(user_id)
            )
            return user_id, self.formatter.payment_received(booking.booking_reference)
