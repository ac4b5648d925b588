"""Mapping free-text replies onto menu options, counts and yes/no answers."""

import re
from typing import Optional, Sequence

_INTEGER = re.compile(r"^\d{1,9}$")

AFFIRMATIVE_TOKENS = frozenset({"yes", "y", "confirm"})
NEGATIVE_TOKENS = frozenset({"no", "n"})


def parse_positive_int(text: str) -> Optional[int]:
    """Parse a whole reply as a positive integer of at most nine digits.

    ``"2 seats"`` is not a number, and neither is an oversized digit run.
    """
    stripped = text.strip()
    if not _INTEGER.match(stripped):
        return None
    value = int(stripped)
    return value if value > 0 else None


def resolve_choice(user_input: str, options: Sequence[str]) -> Optional[str]:
    """Resolve a reply against an ordered option list.

    An exact case-insensitive name match wins first, so an option that
    looks like a number is never shadowed by positional lookup. Otherwise
    the reply is read as a 1-based position.

    Examples:
        >>> resolve_choice("1", ["LAGOS", "ABUJA"])
        'LAGOS'
        >>> resolve_choice("abuja", ["LAGOS", "ABUJA"])
        'ABUJA'
        >>> resolve_choice("3", ["LAGOS", "ABUJA"]) is None
        True
    """
    normalized = user_input.strip().lower()
    if not normalized:
        return None

    for option in options:
        if option.lower() == normalized:
            return option

    index = parse_positive_int(normalized)
    if index is not None and index <= len(options):
        return options[index - 1]
    return None


def is_affirmative(text: str) -> bool:
    return text.strip().lower() in AFFIRMATIVE_TOKENS


def is_negative(text: str) -> bool:
    return text.strip().lower() in NEGATIVE_TOKENS
