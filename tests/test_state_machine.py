"""Tests for the dialogue transition table and step preconditions."""

from datetime import date

import pytest

from transit_booking.conversation.state_machine import (
    REQUIREMENTS,
    TRANSITIONS,
    InvalidTransitionError,
    check_session_consistency,
    valid_targets,
    validate_transition,
)
from transit_booking.errors import SessionConsistencyError
from transit_booking.schemas.session_schema import (
    BookingDraft,
    ConversationStep,
    DepartureOptions,
    DestinationOptions,
    EmptyContext,
    OriginOptions,
    PaymentContext,
    Session,
)

FULL_DRAFT = BookingDraft(
    origin="UYO",
    destination="LAGOS",
    travel_date=date(2025, 6, 11),
    departure_id="dep-1",
    fare=10000,
    passengers=2,
    total_amount=20000,
)


class TestTransitionTable:
    def test_every_step_has_requirements(self):
        assert set(REQUIREMENTS) == set(ConversationStep)

    def test_every_transition_target_has_requirements(self):
        for transition in TRANSITIONS:
            assert transition.to_step in REQUIREMENTS

    def test_no_duplicate_transitions(self):
        pairs = [(t.from_step, t.to_step) for t in TRANSITIONS]
        assert len(pairs) == len(set(pairs))

    def test_booking_path_is_linear(self):
        assert valid_targets(ConversationStep.ASK_ORIGIN) == [ConversationStep.ASK_DESTINATION]
        assert valid_targets(ConversationStep.ASK_PASSENGERS) == [ConversationStep.REVIEW_BOOKING]

    def test_awaiting_payment_has_no_forward_moves(self):
        assert valid_targets(ConversationStep.AWAITING_PAYMENT) == []

    @pytest.mark.parametrize("from_step,to_step", [
        (ConversationStep.WELCOME, ConversationStep.ASK_ORIGIN),
        (ConversationStep.MAIN_MENU, ConversationStep.ASK_ORIGIN),
        (ConversationStep.ASK_DATE, ConversationStep.ASK_DEPARTURE_CHOICE),
        (ConversationStep.REVIEW_BOOKING, ConversationStep.AWAITING_PAYMENT),
    ])
    def test_valid_transitions(self, from_step, to_step):
        validate_transition(from_step, to_step)  # should not raise

    @pytest.mark.parametrize("from_step,to_step", [
        (ConversationStep.WELCOME, ConversationStep.REVIEW_BOOKING),
        (ConversationStep.ASK_ORIGIN, ConversationStep.ASK_DATE),
        (ConversationStep.ASK_PASSENGERS, ConversationStep.AWAITING_PAYMENT),
        (ConversationStep.AWAITING_PAYMENT, ConversationStep.REVIEW_BOOKING),
    ])
    def test_invalid_transitions(self, from_step, to_step):
        with pytest.raises(InvalidTransitionError, match="No valid transition"):
            validate_transition(from_step, to_step)

    def test_invalid_transition_is_consistency_error(self):
        assert issubclass(InvalidTransitionError, SessionConsistencyError)


class TestSessionConsistency:
    def test_fresh_session_is_consistent(self):
        check_session_consistency(Session(user_id="+2348000000001"))

    @pytest.mark.parametrize("step,draft,context", [
        (ConversationStep.ASK_ORIGIN, BookingDraft(), OriginOptions(options=["UYO"])),
        (ConversationStep.ASK_DESTINATION, BookingDraft(origin="UYO"), DestinationOptions(options=["LAGOS"])),
        (ConversationStep.ASK_DATE, BookingDraft(origin="UYO", destination="LAGOS"), EmptyContext()),
        (
            ConversationStep.ASK_DEPARTURE_CHOICE,
            BookingDraft(origin="UYO", destination="LAGOS", travel_date=date(2025, 6, 11)),
            DepartureOptions(departure_ids=["dep-1"]),
        ),
        (ConversationStep.REVIEW_BOOKING, FULL_DRAFT, EmptyContext()),
        (ConversationStep.AWAITING_PAYMENT, BookingDraft(), PaymentContext(booking_reference="BOOK-1")),
    ])
    def test_consistent_sessions(self, step, draft, context):
        session = Session(user_id="u", step=step, draft=draft, context=context)
        check_session_consistency(session)  # should not raise

    def test_missing_draft_field(self):
        session = Session(
            user_id="u",
            step=ConversationStep.ASK_PASSENGERS,
            draft=BookingDraft(origin="UYO", destination="LAGOS"),
        )
        with pytest.raises(SessionConsistencyError, match="travel_date, departure_id, fare"):
            check_session_consistency(session)

    def test_wrong_context_kind(self):
        session = Session(
            user_id="u",
            step=ConversationStep.ASK_DEPARTURE_CHOICE,
            draft=BookingDraft(origin="UYO", destination="LAGOS", travel_date=date(2025, 6, 11)),
            context=OriginOptions(options=["UYO"]),
        )
        with pytest.raises(SessionConsistencyError, match="DepartureOptions"):
            check_session_consistency(session)

    def test_awaiting_payment_needs_reference(self):
        session = Session(user_id="u", step=ConversationStep.AWAITING_PAYMENT)
        with pytest.raises(SessionConsistencyError):
            check_session_consistency(session)
