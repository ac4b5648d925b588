"""
One handler per dialogue step.

Each handler reads the current session, consults the catalog and ledger,
and returns a StepResult describing the reply and the session patch. The
handler never writes the session itself; the engine validates the patch
against the transition table and applies it in one store write.

Invalid input is answered with a re-prompt and no step change. Missing
or stale data raises a BookingFlowError for the engine to handle.
"""

import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from transit_booking.conversation.choices import (
    is_affirmative,
    is_negative,
    parse_positive_int,
    resolve_choice,
)
from transit_booking.conversation.confirmation import BookingConfirmation
from transit_booking.conversation.dates import day_bounds, parse_travel_date, reference_day
from transit_booking.conversation.tone import Tone
from transit_booking.errors import (
    DepartureUnavailableError,
    PaymentGatewayError,
    SessionConsistencyError,
)
from transit_booking.replies.formatter import (
    BookingLine,
    DepartureRow,
    ReplyFormatter,
    ReviewDetails,
)
from transit_booking.schemas.booking_schema import PaymentStatus
from transit_booking.schemas.catalog_schema import Departure, DepartureStatus
from transit_booking.schemas.session_schema import (
    ConversationStep,
    DepartureOptions,
    DestinationOptions,
    EmptyContext,
    OriginOptions,
    PaymentContext,
    Session,
    StepContext,
)
from transit_booking.storage.bookings import InMemoryBookingWriter
from transit_booking.storage.catalog import RouteCatalog
from transit_booking.storage.inventory import InventoryLedger

logger = logging.getLogger(__name__)

UNKNOWN_VEHICLE = "Vehicle"


@dataclass(frozen=True)
class Turn:
    """One inbound message as seen by a handler."""
    text: str
    tone: Tone
    now: datetime

    @property
    def normalized(self) -> str:
        return self.text.strip().lower()


@dataclass
class StepResult:
    """Reply plus the session patch a handler proposes.

    ``next_step=None`` keeps the current step. ``reset_to`` clears the
    draft and context and moves to the given menu step.
    """
    reply: str
    next_step: Optional[ConversationStep] = None
    draft_updates: dict[str, Any] = field(default_factory=dict)
    context: Optional[StepContext] = None
    reset_to: Optional[ConversationStep] = None


@dataclass
class FlowServices:
    """Collaborators shared by all handlers."""
    catalog: RouteCatalog
    ledger: InventoryLedger
    bookings: InMemoryBookingWriter
    confirmation: BookingConfirmation
    formatter: ReplyFormatter


class StepHandler(ABC):
    step: ConversationStep

    def __init__(self, services: FlowServices) -> None:
        self.services = services
        self.fmt = services.formatter

    @abstractmethod
    async def handle(self, turn: Turn, session: Session) -> StepResult:
        """Interpret ``turn`` in this step."""

    # Shared lookups

    def _vehicle_name(self, departure: Departure) -> str:
        vehicle = self.services.catalog.get_vehicle(departure.vehicle_id)
        return vehicle.name if vehicle else UNKNOWN_VEHICLE

    def _bookable_departure(self, departure_id: str) -> Departure:
        departure = self.services.ledger.get(departure_id)
        if departure is None or departure.status != DepartureStatus.SCHEDULED:
            raise DepartureUnavailableError(departure_id)
        return departure


class MenuHandler(StepHandler):
    """Welcome and main menu: book, check bookings, or help."""

    BOOK_INPUTS = frozenset({"1", "book a new trip"})
    BOOK_WORD = re.compile(r"\bbook\b")
    CHECK_INPUTS = frozenset({"2", "check my booking", "check booking", "my bookings"})
    HELP_INPUTS = frozenset({"3", "help", "help & support"})

    def __init__(self, services: FlowServices, step: ConversationStep) -> None:
        super().__init__(services)
        self.step = step

    async def handle(self, turn: Turn, session: Session) -> StepResult:
        choice = turn.normalized
        if choice in self.BOOK_INPUTS or self.BOOK_WORD.search(choice):
            return self._start_booking(turn)
        if choice in self.CHECK_INPUTS:
            return StepResult(self.fmt.booking_list(self._booking_lines(session.user_id)))
        if choice in self.HELP_INPUTS:
            return StepResult(self.fmt.help())
        return StepResult(self.fmt.menu_not_understood())

    def _start_booking(self, turn: Turn) -> StepResult:
        origins = self.services.catalog.distinct_origins(active_only=True)
        if not origins:
            logger.warning("Booking requested but no active routes exist")
            return StepResult(self.fmt.no_routes())
        reply = self.fmt.origin_prompt(origins)
        if turn.tone == Tone.POSITIVE:
            reply = self.fmt.upbeat_prefix() + reply
        return StepResult(
            reply,
            next_step=ConversationStep.ASK_ORIGIN,
            context=OriginOptions(options=origins),
        )

    def _booking_lines(self, user_id: str) -> list[BookingLine]:
        lines = []
        for booking in self.services.bookings.list_for_user(user_id):
            departure = self.services.ledger.get(booking.departure_id)
            route = self.services.catalog.get_route(departure.route_id) if departure else None
            lines.append(BookingLine(
                reference=booking.booking_reference,
                origin=route.origin if route else "?",
                destination=route.destination if route else "?",
                departure_time=departure.departure_time if departure else None,
                passengers=booking.passengers,
                status=booking.status.value,
                payment_status=booking.payment_status.value,
            ))
        return lines


class AskOriginHandler(StepHandler):
    step = ConversationStep.ASK_ORIGIN

    async def handle(self, turn: Turn, session: Session) -> StepResult:
        options = session.context.options
        chosen = resolve_choice(turn.text, options)
        if chosen is None:
            logger.debug("Origin input %r not in %s", turn.text, options)
            return StepResult(self.fmt.origin_reprompt(options))

        origin = chosen.upper()
        destinations = self.services.catalog.distinct_destinations(origin, active_only=True)
        if not destinations:
            logger.warning("No destinations found for origin %s. Resetting session.", origin)
            return StepResult(self.fmt.no_destinations(origin), reset_to=ConversationStep.WELCOME)

        return StepResult(
            self.fmt.destination_prompt(origin, destinations),
            next_step=ConversationStep.ASK_DESTINATION,
            draft_updates={"origin": origin},
            context=DestinationOptions(options=destinations),
        )


class AskDestinationHandler(StepHandler):
    step = ConversationStep.ASK_DESTINATION

    async def handle(self, turn: Turn, session: Session) -> StepResult:
        origin = session.draft.origin
        options = session.context.options
        chosen = resolve_choice(turn.text, options)
        if chosen is None:
            return StepResult(self.fmt.destination_reprompt(origin, options))

        destination = chosen.upper()
        if self.services.catalog.find_route(origin, destination, active_only=True) is None:
            logger.warning("Route %s -> %s is no longer active. Resetting session.", origin, destination)
            return StepResult(
                self.fmt.route_unavailable(origin, destination),
                reset_to=ConversationStep.WELCOME,
            )

        return StepResult(
            self.fmt.date_prompt(destination),
            next_step=ConversationStep.ASK_DATE,
            draft_updates={"destination": destination},
            context=EmptyContext(),
        )


class AskDateHandler(StepHandler):
    step = ConversationStep.ASK_DATE

    async def handle(self, turn: Turn, session: Session) -> StepResult:
        travel_date = parse_travel_date(turn.text, reference_day(turn.now))
        if travel_date is None:
            return StepResult(self.fmt.invalid_date())

        origin, destination = session.draft.origin, session.draft.destination
        route = self.services.catalog.find_route(origin, destination, active_only=True)
        if route is None:
            raise SessionConsistencyError(f"Route {origin} -> {destination} not found after selection")

        day_start, day_end = day_bounds(travel_date)
        departures = self.services.ledger.list_available(route.route_id, day_start, day_end)
        logger.debug("Found %d departures for %s on %s", len(departures), route.route_id, travel_date)
        if not departures:
            return StepResult(self.fmt.no_departures(origin, destination, travel_date))

        rows = [
            DepartureRow(
                vehicle_name=self._vehicle_name(d),
                departure_time=d.departure_time,
                fare=d.fare,
                available_seats=d.available_seats,
            )
            for d in departures
        ]
        return StepResult(
            self.fmt.departure_list(origin, destination, travel_date, rows),
            next_step=ConversationStep.ASK_DEPARTURE_CHOICE,
            draft_updates={"travel_date": travel_date},
            context=DepartureOptions(departure_ids=[d.departure_id for d in departures]),
        )


class AskDepartureChoiceHandler(StepHandler):
    step = ConversationStep.ASK_DEPARTURE_CHOICE

    async def handle(self, turn: Turn, session: Session) -> StepResult:
        departure_ids = session.context.departure_ids
        index = parse_positive_int(turn.text)
        if index is None or index > len(departure_ids):
            return StepResult(self.fmt.departure_choice_reprompt(len(departure_ids)))

        departure = self._bookable_departure(departure_ids[index - 1])
        if departure.available_seats < 1:
            return StepResult(self.fmt.departure_full())

        return StepResult(
            self.fmt.departure_selected(
                departure.departure_time, self._vehicle_name(departure), departure.available_seats
            ),
            next_step=ConversationStep.ASK_PASSENGERS,
            draft_updates={"departure_id": departure.departure_id, "fare": departure.fare},
            context=EmptyContext(),
        )


class AskPassengersHandler(StepHandler):
    step = ConversationStep.ASK_PASSENGERS

    async def handle(self, turn: Turn, session: Session) -> StepResult:
        draft = session.draft
        departure = self._bookable_departure(draft.departure_id)
        passengers = parse_positive_int(turn.text)
        if passengers is None or passengers > departure.available_seats:
            logger.debug("Invalid passengers input %r (%d seats left)", turn.text, departure.available_seats)
            return StepResult(self.fmt.invalid_passengers(departure.available_seats))

        total = draft.fare * passengers
        details = ReviewDetails(
            origin=draft.origin,
            destination=draft.destination,
            travel_date=draft.travel_date,
            departure_time=departure.departure_time,
            vehicle_name=self._vehicle_name(departure),
            passengers=passengers,
            fare=draft.fare,
            total_amount=total,
        )
        return StepResult(
            self.fmt.review_summary(details),
            next_step=ConversationStep.REVIEW_BOOKING,
            draft_updates={"passengers": passengers, "total_amount": total},
        )


class ReviewBookingHandler(StepHandler):
    step = ConversationStep.REVIEW_BOOKING

    async def handle(self, turn: Turn, session: Session) -> StepResult:
        if is_negative(turn.text):
            logger.info("User cancelled booking at review")
            return StepResult(self.fmt.booking_cancelled(), reset_to=ConversationStep.WELCOME)
        if not is_affirmative(turn.text):
            return StepResult(self.fmt.review_reprompt())

        outcome = await self.services.confirmation.confirm(session)
        booking = outcome.booking

        if not self.services.confirmation.payments_enabled:
            return StepResult(
                self.fmt.booking_confirmed(booking.booking_reference, booking.total_amount),
                reset_to=ConversationStep.MAIN_MENU,
            )

        payment_context = PaymentContext(booking_reference=booking.booking_reference)
        if outcome.payment_error is not None:
            reply = self.fmt.payment_setup_failed(booking.booking_reference)
        else:
            reply = self.fmt.payment_link(
                booking.booking_reference, booking.total_amount, outcome.payment_link.authorization_url
            )
        return StepResult(reply, next_step=ConversationStep.AWAITING_PAYMENT, context=payment_context)


class AwaitingPaymentHandler(StepHandler):
    """Holding step. Never re-runs booking logic."""

    step = ConversationStep.AWAITING_PAYMENT

    RESEND_INPUTS = frozenset({"pay", "retry", "link", "payment"})

    async def handle(self, turn: Turn, session: Session) -> StepResult:
        reference = session.context.booking_reference
        booking = self.services.bookings.get(reference)
        if booking is None:
            raise SessionConsistencyError(f"Awaited booking {reference} does not exist")

        if booking.payment_status == PaymentStatus.PAID:
            return StepResult(self.fmt.payment_received(reference), reset_to=ConversationStep.MAIN_MENU)

        if turn.normalized not in self.RESEND_INPUTS:
            return StepResult(self.fmt.awaiting_payment())

        try:
            link = await self.services.confirmation.request_payment(booking)
        except PaymentGatewayError:
            return StepResult(self.fmt.payment_setup_failed(reference))
        if link is None:
            return StepResult(self.fmt.awaiting_payment())
        return StepResult(self.fmt.payment_link(reference, booking.total_amount, link.authorization_url))


def build_handlers(services: FlowServices) -> dict[ConversationStep, StepHandler]:
    """One handler instance per step."""
    handlers: list[StepHandler] = [
        MenuHandler(services, ConversationStep.WELCOME),
        MenuHandler(services, ConversationStep.MAIN_MENU),
        AskOriginHandler(services),
        AskDestinationHandler(services),
        AskDateHandler(services),
        AskDepartureChoiceHandler(services),
        AskPassengersHandler(services),
        ReviewBookingHandler(services),
        AwaitingPaymentHandler(services),
    ]
    return {handler.step: handler for handler in handlers}
