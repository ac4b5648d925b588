from transit_booking.schemas.booking_schema import Booking, BookingStatus, PaymentStatus
from transit_booking.schemas.catalog_schema import (
    Departure,
    DepartureStatus,
    Route,
    Vehicle,
    VehicleType,
)
from transit_booking.schemas.session_schema import (
    BookingDraft,
    ConversationStep,
    DepartureOptions,
    DestinationOptions,
    EmptyContext,
    OriginOptions,
    PaymentContext,
    Session,
    StepContext,
)

__all__ = [
    "Booking",
    "BookingStatus",
    "PaymentStatus",
    "Departure",
    "DepartureStatus",
    "Route",
    "Vehicle",
    "VehicleType",
    "BookingDraft",
    "ConversationStep",
    "DepartureOptions",
    "DestinationOptions",
    "EmptyContext",
    "OriginOptions",
    "PaymentContext",
    "Session",
    "StepContext",
]
