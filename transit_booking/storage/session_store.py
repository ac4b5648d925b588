"""
Keyed store for per-contact dialogue sessions.

In production this would sit on a durable document store keyed by the
contact handle. The in-memory implementation keeps the same contract:
every write for a given contact is linearizable, partial updates touch
only the named fields, and every write returns the full updated record.
Sessions are frozen models, so a caller never holds a copy that a later
write could change underneath it.
"""

import asyncio
import logging
import threading
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Optional, Protocol

from transit_booking.config import settings
from transit_booking.logging_context import mask_contact
from transit_booking.schemas.session_schema import (
    BookingDraft,
    ConversationStep,
    EmptyContext,
    Session,
    StepContext,
)

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SessionStore(Protocol):
    """Contract the conversation engine relies on."""

    def get(self, user_id: str) -> Session: ...

    def get_or_reset(self, user_id: str) -> Session: ...

    def peek(self, user_id: str) -> Optional[Session]: ...

    def set_step(self, user_id: str, step: ConversationStep) -> Session: ...

    def merge_booking_draft(self, user_id: str, **updates: Any) -> Session: ...

    def merge_context(self, user_id: str, **updates: Any) -> Session: ...

    def update(
        self,
        user_id: str,
        step: Optional[ConversationStep] = None,
        draft_updates: Optional[dict[str, Any]] = None,
        context: Optional[StepContext] = None,
    ) -> Session: ...

    def reset(self, user_id: str, step: ConversationStep = ConversationStep.WELCOME) -> Session: ...

    def discard(self, user_id: str) -> bool: ...

    def message_lock(self, user_id: str) -> asyncio.Lock: ...


class InMemorySessionStore:
    """Thread-safe session store with one lock per contact handle."""

    def __init__(
        self,
        inactivity_timeout: Optional[timedelta] = None,
        clock: Clock = utc_now,
    ) -> None:
        if inactivity_timeout is None:
            inactivity_timeout = timedelta(minutes=settings.session.inactivity_timeout_minutes)
        self._timeout = inactivity_timeout
        self._clock = clock
        self._sessions: dict[str, Session] = {}
        # lock entries live until discard() drops the session
        self._key_locks: dict[str, threading.Lock] = {}
        self._message_locks: dict[str, asyncio.Lock] = {}
        self._registry_lock = threading.Lock()

    # ------------------------------------------------------------------ #
    # Locking
    # ------------------------------------------------------------------ #

    def _key_lock(self, user_id: str) -> threading.Lock:
        with self._registry_lock:
            lock = self._key_locks.get(user_id)
            if lock is None:
                lock = self._key_locks[user_id] = threading.Lock()
            return lock

    def message_lock(self, user_id: str) -> asyncio.Lock:
        """Lock held for the whole handling of one inbound message."""
        with self._registry_lock:
            lock = self._message_locks.get(user_id)
            if lock is None:
                lock = self._message_locks[user_id] = asyncio.Lock()
            return lock

    # ------------------------------------------------------------------ #
    # Helpers (caller holds the key lock)
    # ------------------------------------------------------------------ #

    def _load_or_create(self, user_id: str, now: datetime) -> Session:
        session = self._sessions.get(user_id)
        if session is None:
            session = Session(user_id=user_id, last_active_at=now, created_at=now)
            self._sessions[user_id] = session
            logger.info("New session created for %s", mask_contact(user_id))
        return session

    @staticmethod
    def _initial_state(session: Session, step: ConversationStep, now: datetime) -> Session:
        # session_ref and created_at survive so bookings keep pointing at the record
        return session.model_copy(update={
            "step": step,
            "draft": BookingDraft(),
            "context": EmptyContext(),
            "last_active_at": now,
        })

    # ------------------------------------------------------------------ #
    # Reads
    # ------------------------------------------------------------------ #

    def get(self, user_id: str) -> Session:
        """Return the contact's session, creating a fresh one if absent."""
        with self._key_lock(user_id):
            return self._load_or_create(user_id, self._clock())

    def get_or_reset(self, user_id: str) -> Session:
        """Like ``get``, but discard dialogue state left idle past the timeout."""
        with self._key_lock(user_id):
            now = self._clock()
            session = self._load_or_create(user_id, now)
            if session.is_expired(now, self._timeout):
                session = self._initial_state(session, ConversationStep.WELCOME, now)
                self._sessions[user_id] = session
                logger.info("Session timed out for %s. Resetting.", mask_contact(user_id))
            return session

    def peek(self, user_id: str) -> Optional[Session]:
        """Return the stored session without creating one."""
        with self._key_lock(user_id):
            return self._sessions.get(user_id)

    # ------------------------------------------------------------------ #
    # Writes
    # ------------------------------------------------------------------ #

    def update(
        self,
        user_id: str,
        step: Optional[ConversationStep] = None,
        draft_updates: Optional[dict[str, Any]] = None,
        context: Optional[StepContext] = None,
    ) -> Session:
        """Apply a step change, draft merge and context swap as one write."""
        with self._key_lock(user_id):
            now = self._clock()
            session = self._load_or_create(user_id, now)
            changes: dict[str, Any] = {"last_active_at": now}
            if step is not None:
                changes["step"] = step
            if draft_updates:
                changes["draft"] = session.draft.merged(**draft_updates)
            if context is not None:
                changes["context"] = context
            session = session.model_copy(update=changes)
            self._sessions[user_id] = session
            logger.debug(
                "Session for %s updated: step=%s draft_fields=%s context=%s",
                mask_contact(user_id),
                session.step.value,
                sorted(draft_updates or {}),
                session.context.kind,
            )
            return session

    def set_step(self, user_id: str, step: ConversationStep) -> Session:
        return self.update(user_id, step=step)

    def merge_booking_draft(self, user_id: str, **updates: Any) -> Session:
        return self.update(user_id, draft_updates=updates)

    def merge_context(self, user_id: str, **updates: Any) -> Session:
        """Merge fields into the current step context, keeping its kind."""
        with self._key_lock(user_id):
            now = self._clock()
            session = self._load_or_create(user_id, now)
            current = session.context
            merged = type(current).model_validate({**current.model_dump(), **updates})
            session = session.model_copy(update={"context": merged, "last_active_at": now})
            self._sessions[user_id] = session
            return session

    def reset(self, user_id: str, step: ConversationStep = ConversationStep.WELCOME) -> Session:
        """Clear draft and context and move to ``step`` (welcome by default)."""
        with self._key_lock(user_id):
            now = self._clock()
            session = self._initial_state(self._load_or_create(user_id, now), step, now)
            self._sessions[user_id] = session
            logger.info("Session for %s reset to %s.", mask_contact(user_id), step.value)
            return session

    def discard(self, user_id: str) -> bool:
        """Forget the contact's session along with its locks.

        The message lock is kept while a message is still being handled.
        Returns False when there was no session to drop.
        """
        with self._key_lock(user_id):
            with self._registry_lock:
                removed = self._sessions.pop(user_id, None)
                self._key_locks.pop(user_id, None)
                message_lock = self._message_locks.get(user_id)
                if message_lock is not None and not message_lock.locked():
                    del self._message_locks[user_id]
        if removed is not None:
            logger.info("Session for %s discarded.", mask_contact(user_id))
        return removed is not None
