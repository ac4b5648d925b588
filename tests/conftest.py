"""Shared test fixtures and helpers."""

from datetime import datetime, timedelta, timezone
from typing import Optional

import pytest

from transit_booking.conversation.engine import ConversationEngine
from transit_booking.errors import PaymentGatewayError
from transit_booking.payments.gateway import PaymentLink
from transit_booking.replies.formatter import ReplyFormatter
from transit_booking.schemas.catalog_schema import Departure, Route, Vehicle, VehicleType
from transit_booking.storage.bookings import InMemoryBookingWriter
from transit_booking.storage.catalog import InMemoryRouteCatalog
from transit_booking.storage.inventory import InMemoryInventoryLedger
from transit_booking.storage.session_store import InMemorySessionStore

# Tuesday
FIXED_NOW = datetime(2025, 6, 10, 12, 0, tzinfo=timezone.utc)

ALICE = "+2348000000001"
BOB = "+2348000000002"

CALLBACK_URL = "https://example.test/paystack-webhook"


class FakeClock:
    """Controllable clock for session expiry and date parsing."""

    def __init__(self, now: datetime = FIXED_NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class FakeGateway:
    """Records initialize calls and returns deterministic links."""

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.calls: list[dict] = []

    async def initialize(
        self,
        amount: int,
        currency: str,
        reference: str,
        callback_url: str,
        metadata: dict[str, str],
        email: Optional[str] = None,
    ) -> PaymentLink:
        self.calls.append({
            "amount": amount,
            "currency": currency,
            "reference": reference,
            "callback_url": callback_url,
            "metadata": metadata,
        })
        if self.fail:
            raise PaymentGatewayError("Payment provider returned 503")
        return PaymentLink(
            authorization_url=f"https://checkout.example.test/{reference}",
            external_reference=f"PSK-{reference}",
        )


def make_departure(
    departure_id: str = "dep-1",
    route_id: str = "uyo-lagos",
    hour: int = 9,
    day: int = 11,
    fare: int = 10000,
    seats: int = 5,
    **kwargs,
) -> Departure:
    return Departure(
        departure_id=departure_id,
        route_id=route_id,
        vehicle_id=kwargs.pop("vehicle_id", "veh-van"),
        departure_time=datetime(2025, 6, day, hour, 0, tzinfo=timezone.utc),
        fare=fare,
        available_seats=seats,
        **kwargs,
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def catalog():
    return InMemoryRouteCatalog(
        routes=[
            Route(route_id="uyo-lagos", origin="Uyo", destination="Lagos", base_price=10000),
            Route(route_id="uyo-abuja", origin="UYO", destination="ABUJA", base_price=20000),
        ],
        vehicles=[
            Vehicle(vehicle_id="veh-van", name="Mini-Van", type=VehicleType.VAN, capacity=10),
            Vehicle(vehicle_id="veh-bus", name="Luxury Bus", type=VehicleType.BUS, capacity=30),
        ],
    )


@pytest.fixture
def ledger():
    return InMemoryInventoryLedger([
        make_departure("dep-1", hour=9, fare=10000, seats=5),
        make_departure("dep-2", hour=15, fare=12000, seats=3, vehicle_id="veh-bus"),
    ])


@pytest.fixture
def bookings():
    return InMemoryBookingWriter()


@pytest.fixture
def sessions(clock):
    return InMemorySessionStore(inactivity_timeout=timedelta(minutes=120), clock=clock)


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def formatter():
    return ReplyFormatter(
        business_name="Test Transit",
        currency="NGN",
        display_timezone="Africa/Lagos",
        support_contact="+234 800 000 0000",
    )


def build_engine(sessions, catalog, ledger, bookings, formatter, clock, payments=None):
    return ConversationEngine(
        sessions=sessions,
        catalog=catalog,
        ledger=ledger,
        bookings=bookings,
        payments=payments,
        formatter=formatter,
        clock=clock,
        currency="NGN",
        callback_url=CALLBACK_URL,
        payment_timeout_seconds=5,
    )


@pytest.fixture
def engine(sessions, catalog, ledger, bookings, formatter, clock, gateway):
    return build_engine(sessions, catalog, ledger, bookings, formatter, clock, payments=gateway)


@pytest.fixture
def engine_without_payments(sessions, catalog, ledger, bookings, formatter, clock):
    return build_engine(sessions, catalog, ledger, bookings, formatter, clock)


async def converse(engine: ConversationEngine, user_id: str, messages: list[str]) -> list[str]:
    """Send ``messages`` in order and return the replies."""
    return [await engine.handle_message(user_id, text) for text in messages]


TO_REVIEW = ["book", "uyo", "lagos", "tomorrow", "1", "2"]
