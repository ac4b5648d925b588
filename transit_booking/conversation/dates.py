"""
Travel date parsing.

All arithmetic happens on calendar days anchored to the UTC start of
day, so the server's local clock never shifts a result across midnight.
"""

import calendar
import logging
import re
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional

logger = logging.getLogger(__name__)

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
WEEKDAYS: dict[str, int] = {name.lower(): index for index, name in enumerate(calendar.day_name)}


def reference_day(now: datetime) -> date:
    """The UTC calendar day containing ``now``."""
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(timezone.utc).date()


def day_bounds(day: date) -> tuple[datetime, datetime]:
    """Half-open UTC interval ``[start, end)`` covering ``day``."""
    start = datetime.combine(day, time.min, tzinfo=timezone.utc)
    return start, start + timedelta(days=1)


def _next_weekday(today: date, weekday: int) -> date:
    days_ahead = weekday - today.weekday()
    if days_ahead <= 0:
        days_ahead += 7
    return today + timedelta(days=days_ahead)


def _parse_iso(text: str) -> Optional[date]:
    if not _ISO_DATE.match(text):
        return None
    try:
        parsed = datetime.strptime(text, "%Y-%m-%d").date()
    except ValueError:
        return None
    # reject anything that does not survive a round trip, e.g. 2025-02-30
    return parsed if parsed.isoformat() == text else None


def parse_travel_date(text: str, today: date) -> Optional[date]:
    """Parse ``today``, ``tomorrow``, ``next <weekday>`` or ``YYYY-MM-DD``.

    Returns None for unrecognised input and for dates before ``today``.
    ``next <weekday>`` is always strictly after today: naming today's own
    weekday rolls forward a full week.
    """
    normalized = " ".join(text.strip().lower().split())
    parsed: Optional[date] = None

    if normalized == "today":
        parsed = today
    elif normalized == "tomorrow":
        parsed = today + timedelta(days=1)
    elif normalized.startswith("next "):
        weekday = WEEKDAYS.get(normalized[5:])
        if weekday is not None:
            parsed = _next_weekday(today, weekday)
    else:
        parsed = _parse_iso(normalized)

    if parsed is not None and parsed < today:
        logger.debug("Parsed date %s is before %s, rejecting", parsed, today)
        return None
    logger.debug("Date input %r parsed as %s", text, parsed)
    return parsed
