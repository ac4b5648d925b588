"""Exception hierarchy for failures that end the current booking flow.

Input validation problems are not represented here: step handlers
recover from those locally by re-prompting in the same state.
"""

from typing import Optional


class BookingFlowError(Exception):
    """Base class for errors the engine maps to a reply and a session reset."""


class SessionConsistencyError(BookingFlowError):
    """Session draft or context is missing data the current step depends on."""


class DepartureUnavailableError(BookingFlowError):
    """The referenced departure no longer exists or is no longer scheduled."""

    def __init__(self, departure_id: str, message: Optional[str] = None) -> None:
        super().__init__(message or f"Departure {departure_id} is unavailable")
        self.departure_id = departure_id


class CapacityConflictError(BookingFlowError):
    """Seats ran out between listing and confirmation."""

    def __init__(self, departure_id: str, requested: int, available: int) -> None:
        super().__init__(
            f"Departure {departure_id}: requested {requested}, available {available}"
        )
        self.departure_id = departure_id
        self.requested = requested
        self.available = available


class PaymentGatewayError(BookingFlowError):
    """The payment provider could not issue an authorization link."""

    def __init__(self, message: str, retryable: bool = True) -> None:
        super().__init__(message)
        self.retryable = retryable
