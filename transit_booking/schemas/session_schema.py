"""Per-contact dialogue session models.

A session carries the current dialogue step, the booking draft collected
so far, and a step-scoped context. Contexts are a tagged union keyed by
``kind`` so each step only ever sees the scratch data it was built for.
"""

import uuid
from datetime import date, datetime, timedelta, timezone
from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ConversationStep(str, Enum):
    """Closed set of dialogue states."""
    WELCOME = "welcome"
    MAIN_MENU = "main_menu"
    ASK_ORIGIN = "ask_origin"
    ASK_DESTINATION = "ask_destination"
    ASK_DATE = "ask_date"
    ASK_DEPARTURE_CHOICE = "ask_departure_choice"
    ASK_PASSENGERS = "ask_passengers"
    REVIEW_BOOKING = "review_booking"
    AWAITING_PAYMENT = "awaiting_payment"


class EmptyContext(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["none"] = "none"


class OriginOptions(BaseModel):
    """Origins offered to the user, in the order they were listed."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["origin_options"] = "origin_options"
    options: list[str]


class DestinationOptions(BaseModel):
    """Destinations reachable from the chosen origin, in listed order."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["destination_options"] = "destination_options"
    options: list[str]


class DepartureOptions(BaseModel):
    """Departure identifiers in the order they were listed."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["departure_options"] = "departure_options"
    departure_ids: list[str]


class PaymentContext(BaseModel):
    """The booking whose payment the session is waiting on."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["payment"] = "payment"
    booking_reference: str


StepContext = Annotated[
    Union[EmptyContext, OriginOptions, DestinationOptions, DepartureOptions, PaymentContext],
    Field(discriminator="kind"),
]


class BookingDraft(BaseModel):
    """Partial booking accumulated across dialogue steps."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    origin: Optional[str] = None
    destination: Optional[str] = None
    travel_date: Optional[date] = None
    departure_id: Optional[str] = None
    fare: Optional[int] = Field(default=None, ge=0)
    passengers: Optional[int] = Field(default=None, ge=1)
    total_amount: Optional[int] = Field(default=None, ge=0)

    def merged(self, **updates) -> "BookingDraft":
        """Return a validated copy with ``updates`` applied."""
        return BookingDraft.model_validate({**self.model_dump(), **updates})

    def missing(self, *field_names: str) -> list[str]:
        """Names from ``field_names`` that are still unset."""
        return [name for name in field_names if getattr(self, name) is None]


class Session(BaseModel):
    """One contact's persisted dialogue state."""
    model_config = ConfigDict(frozen=True)

    user_id: str
    session_ref: str = Field(default_factory=lambda: uuid.uuid4().hex)
    step: ConversationStep = ConversationStep.WELCOME
    draft: BookingDraft = Field(default_factory=BookingDraft)
    context: StepContext = Field(default_factory=EmptyContext)
    last_active_at: datetime = Field(default_factory=_utcnow)
    created_at: datetime = Field(default_factory=_utcnow)

    def is_expired(self, now: datetime, timeout: timedelta) -> bool:
        return now - self.last_active_at > timeout
