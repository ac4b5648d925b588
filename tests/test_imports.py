"""Tests for import chains and module integrity.

Ensures all public modules can be imported without errors and
that re-exports from __init__.py files work correctly.
"""


class TestSchemaImports:
    def test_import_session_schema(self):
        from transit_booking.schemas import ConversationStep, Session

        session = Session(user_id="+2348000000001")
        assert session.step == ConversationStep.WELCOME
        assert session.context.kind == "none"

    def test_import_booking_schema(self):
        from transit_booking.schemas import BookingStatus, PaymentStatus

        assert BookingStatus.CONFIRMED == "confirmed"
        assert PaymentStatus.PENDING == "pending"


class TestPackageReExports:
    def test_storage(self):
        from transit_booking.storage import (
            InMemoryBookingWriter,
            InMemoryInventoryLedger,
            InMemoryRouteCatalog,
            InMemorySessionStore,
            ReservationOutcome,
        )
        assert ReservationOutcome.SUCCESS == "success"
        assert InMemoryBookingWriter is not None
        assert InMemoryInventoryLedger is not None
        assert InMemoryRouteCatalog is not None
        assert InMemorySessionStore is not None

    def test_conversation(self):
        from transit_booking.conversation import ConversationEngine, TRANSITIONS, Tone

        assert len(TRANSITIONS) > 0
        assert Tone.NEUTRAL == "neutral"
        assert ConversationEngine is not None

    def test_payments(self):
        from transit_booking.payments import PaymentLink, PaystackGateway

        assert PaymentLink("https://x", "ref").external_reference == "ref"
        assert PaystackGateway is not None

    def test_replies(self):
        from transit_booking.replies import ReplyFormatter

        assert ReplyFormatter is not None


class TestConsoleDemo:
    def test_demo_scenarios_reference_valid_choices(self):
        from console_demo import ConsoleSession

        assert "booking" in ConsoleSession.SCENARIOS
        for steps in ConsoleSession.SCENARIOS.values():
            assert all(isinstance(step, str) and step for step in steps)
