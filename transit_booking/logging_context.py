"""Correlation ID logging context for tracing one contact's messages.

Provides a contact-aware logger that attaches the (masked) contact handle
to every log record, making it easy to follow a single user's booking
conversation through the session store, ledger and payment adapter.

Usage:
    from transit_booking.logging_context import get_contact_logger, set_contact_id

    set_contact_id("+2348012345678")
    logger = get_contact_logger(__name__)
    logger.info("Processing message")  # record.contact_id == "***5678"
"""

import logging
from contextvars import ContextVar

_contact_id: ContextVar[str] = ContextVar("contact_id", default="NO_CONTACT")


def mask_contact(contact_id: str) -> str:
    """Hide all but the last four characters of a contact handle."""
    if len(contact_id) <= 4:
        return contact_id
    return "***" + contact_id[-4:]


def set_contact_id(contact_id: str) -> None:
    """Set the correlation ID for the current async context."""
    _contact_id.set(mask_contact(contact_id))


def get_contact_id() -> str:
    """Retrieve the current (masked) correlation ID."""
    return _contact_id.get()


class ContactIdFilter(logging.Filter):
    """Injects contact_id into every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.contact_id = _contact_id.get()  # type: ignore[attr-defined]
        return True


def get_contact_logger(name: str) -> logging.Logger:
    """Return a logger with the ContactIdFilter attached.

    The filter adds ``contact_id`` to each record so formatters can
    include ``%(contact_id)s`` in their format string.
    """
    logger = logging.getLogger(name)
    if not any(isinstance(f, ContactIdFilter) for f in logger.filters):
        logger.addFilter(ContactIdFilter())
    return logger
