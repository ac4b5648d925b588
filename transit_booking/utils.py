"""Shared utilities used across the booking engine."""

import re

WHATSAPP_PREFIX = "whatsapp:"


def normalize_contact(value: str) -> str:
    """Normalize an inbound contact handle to digits with an optional leading +.

    Examples:
        >>> normalize_contact("whatsapp:+234 801 234 5678")
        '+2348012345678'
        >>> normalize_contact("0801-234-5678")
        '08012345678'
    """
    value = value.strip()
    if value.lower().startswith(WHATSAPP_PREFIX):
        value = value[len(WHATSAPP_PREFIX):].strip()
    if value.startswith("+"):
        return "+" + re.sub(r"[^\d]", "", value[1:])
    return re.sub(r"[^\d]", "", value)


def format_amount(amount: int, currency: str) -> str:
    """Render a whole-unit amount with thousands separators.

    Examples:
        >>> format_amount(20000, "NGN")
        'NGN20,000'
    """
    return f"{currency}{amount:,}"
