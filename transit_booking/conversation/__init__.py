from transit_booking.conversation.confirmation import BookingConfirmation, ConfirmationOutcome
from transit_booking.conversation.engine import ConversationEngine
from transit_booking.conversation.state_machine import (
    InvalidTransitionError,
    TRANSITIONS,
    check_session_consistency,
    validate_transition,
)
from transit_booking.conversation.tone import Tone, ToneDetector

__all__ = [
    "BookingConfirmation",
    "ConfirmationOutcome",
    "ConversationEngine",
    "InvalidTransitionError",
    "TRANSITIONS",
    "check_session_consistency",
    "validate_transition",
    "Tone",
    "ToneDetector",
]
