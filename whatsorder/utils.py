"""Shared utilities used across the ordering assistant."""

import re
from typing import Optional

_CHANNEL_PREFIX_RE = re.compile(r"^\s*whatsapp:", re.IGNORECASE)


def normalize_phone(value: str) -> str:
    """Normalize a phone number by stripping everything except digits and a leading +.

    A ``whatsapp:`` channel prefix, as sent by messaging webhooks, is dropped.

    Examples:
        >>> normalize_phone("whatsapp:+91 94905 02449")
        '+919490502449'
        >>> normalize_phone("094905-02449")
        '09490502449'
    """
    value = _CHANNEL_PREFIX_RE.sub("", value).strip()
    if value.startswith("+"):
        return "+" + re.sub(r"[^\d]", "", value[1:])
    return re.sub(r"[^\d]", "", value)


def is_same_phone(first: str, second: str) -> bool:
    """Compare two phone numbers after normalization. Empty values never match."""
    if not first or not second:
        return False
    return normalize_phone(first) == normalize_phone(second)


MAX_COUNT_DIGITS = 9


def parse_count(value: str, max_digits: int = MAX_COUNT_DIGITS) -> Optional[int]:
    """Parse a non-negative integer typed by a user, or None if it isn't one.

    Runs longer than ``max_digits`` are rejected rather than converted.

    Examples:
        >>> parse_count("12")
        12
        >>> parse_count("1" * 5000) is None
        True
    """
    value = value.strip()
    if not value or len(value) > max_digits:
        return None
    try:
        return int(value)
    except ValueError:
        return None
