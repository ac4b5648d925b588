"""
Transition table and per-step preconditions for the booking dialogue.

Every forward move a step handler proposes must appear in TRANSITIONS,
and every step declares which draft fields and which context kind it
depends on. The engine checks both before trusting a stored session and
before writing a new one, so a session can never sit in a step whose
prerequisites are missing.

Resets (global commands, cancellations, failures) always go back to
welcome or main_menu and bypass the table.
"""

import logging
from dataclasses import dataclass

from transit_booking.errors import SessionConsistencyError
from transit_booking.schemas.session_schema import (
    ConversationStep,
    DepartureOptions,
    DestinationOptions,
    EmptyContext,
    OriginOptions,
    PaymentContext,
    Session,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Transition:
    """A single valid forward transition."""
    from_step: ConversationStep
    to_step: ConversationStep


@dataclass(frozen=True)
class StepRequirement:
    """Draft fields and context kind a step needs to be entered."""
    draft_fields: tuple[str, ...] = ()
    context_type: type = EmptyContext


class InvalidTransitionError(SessionConsistencyError):
    """Raised when a handler proposes a move not in the transition table."""


TRANSITIONS: list[Transition] = [
    # --- Menus ---
    Transition(ConversationStep.WELCOME, ConversationStep.ASK_ORIGIN),
    Transition(ConversationStep.MAIN_MENU, ConversationStep.ASK_ORIGIN),

    # --- Route selection ---
    Transition(ConversationStep.ASK_ORIGIN, ConversationStep.ASK_DESTINATION),
    Transition(ConversationStep.ASK_DESTINATION, ConversationStep.ASK_DATE),

    # --- Departure selection ---
    Transition(ConversationStep.ASK_DATE, ConversationStep.ASK_DEPARTURE_CHOICE),
    Transition(ConversationStep.ASK_DEPARTURE_CHOICE, ConversationStep.ASK_PASSENGERS),
    Transition(ConversationStep.ASK_PASSENGERS, ConversationStep.REVIEW_BOOKING),

    # --- Confirmation ---
    Transition(ConversationStep.REVIEW_BOOKING, ConversationStep.AWAITING_PAYMENT),
]

_ROUTE = ("origin", "destination")
_DEPARTURE = _ROUTE + ("travel_date", "departure_id", "fare")

REQUIREMENTS: dict[ConversationStep, StepRequirement] = {
    ConversationStep.WELCOME: StepRequirement(),
    ConversationStep.MAIN_MENU: StepRequirement(),
    ConversationStep.ASK_ORIGIN: StepRequirement(context_type=OriginOptions),
    ConversationStep.ASK_DESTINATION: StepRequirement(("origin",), DestinationOptions),
    ConversationStep.ASK_DATE: StepRequirement(_ROUTE),
    ConversationStep.ASK_DEPARTURE_CHOICE: StepRequirement(_ROUTE + ("travel_date",), DepartureOptions),
    ConversationStep.ASK_PASSENGERS: StepRequirement(_DEPARTURE),
    ConversationStep.REVIEW_BOOKING: StepRequirement(_DEPARTURE + ("passengers", "total_amount")),
    ConversationStep.AWAITING_PAYMENT: StepRequirement(context_type=PaymentContext),
}


def valid_targets(step: ConversationStep) -> list[ConversationStep]:
    """Steps reachable from ``step`` without a reset."""
    return [t.to_step for t in TRANSITIONS if t.from_step == step]


def validate_transition(from_step: ConversationStep, to_step: ConversationStep) -> None:
    """Raise InvalidTransitionError unless the move is in the table."""
    if to_step in valid_targets(from_step):
        return
    valid = [s.value for s in valid_targets(from_step)]
    raise InvalidTransitionError(
        f"No valid transition from '{from_step.value}' to '{to_step.value}'. "
        f"Valid targets: {valid}"
    )


def check_session_consistency(session: Session) -> None:
    """Raise SessionConsistencyError if the session's step prerequisites are unmet."""
    requirement = REQUIREMENTS.get(session.step)
    if requirement is None:
        raise SessionConsistencyError(f"Unknown step '{session.step}'")

    missing = session.draft.missing(*requirement.draft_fields)
    if missing:
        raise SessionConsistencyError(
            f"Step '{session.step.value}' is missing draft fields: {', '.join(missing)}"
        )
    if not isinstance(session.context, requirement.context_type):
        raise SessionConsistencyError(
            f"Step '{session.step.value}' expects {requirement.context_type.__name__} context, "
            f"found '{session.context.kind}'"
        )
