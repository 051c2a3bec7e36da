"""
Heuristics deciding whether a free-text reply is a personal name or a location.

Used by the dialogue gate while a customer is onboarding. Both parsers
return None rather than raising, so an unrecognised reply simply makes
the gate ask again.
"""

import logging
import re
from typing import Optional

logger = logging.getLogger(__name__)

MIN_NAME_LENGTH = 2
MAX_NAME_LENGTH = 50
MIN_LOCATION_LENGTH = 3
MAX_LOCATION_LENGTH = 200

# Whole-message replies that are commands, never a name or an address.
RESERVED_KEYWORDS = frozenset({
    "menu", "help", "hi", "hello", "order", "status", "search",
    "yes", "no", "ok", "thanks", "thank you",
    "payment", "pay", "paid",
    "payment help", "payment options", "payment status", "pay cod", "pay upi",
})

_ORDER_LIKE_RE = re.compile(r"(order|want|get me|i want)\s+", re.IGNORECASE)
_PAYMENT_LIKE_RE = re.compile(r"^(pay|payment|paid)\s", re.IGNORECASE)

_NAME_FILLER_RE = re.compile(r"^(my name is|i am|i'm|name is|call me)", re.IGNORECASE)
_NAME_CHARS_RE = re.compile(r"^[a-zA-Z\s\-'.]{2,50}$")

_LOCATION_FILLER_RE = re.compile(
    r"^(my location is|i am at|i'm at|location is|i live at|address is)", re.IGNORECASE
)
_LOCATION_CHARS_RE = re.compile(r"^[a-zA-Z0-9\s\-',.()/#&]+$")

_WORD_START_RE = re.compile(r"\b\w")


def is_reserved_keyword(text: str) -> bool:
    return text.strip().lower() in RESERVED_KEYWORDS


def looks_like_order(text: str) -> bool:
    return _ORDER_LIKE_RE.search(text) is not None


def title_case(text: str) -> str:
    """Upper-case the first letter of every word, leaving the rest untouched.

    Unlike str.title(), "McDonald" stays "McDonald".
    """
    return _WORD_START_RE.sub(lambda m: m.group(0).upper(), text)


def parse_name_response(message: str) -> Optional[str]:
    """Return the title-cased name in this reply, or None if it isn't one.

    Examples:
        >>> parse_name_response("my name is priya sharma")
        'Priya Sharma'
        >>> parse_name_response("menu") is None
        True
    """
    text = message.strip()

    if is_reserved_keyword(text) or looks_like_order(text) or _PAYMENT_LIKE_RE.match(text):
        return None
    if not MIN_NAME_LENGTH <= len(text) <= MAX_NAME_LENGTH:
        return None

    candidate = _NAME_FILLER_RE.sub("", text).strip()
    if not _NAME_CHARS_RE.match(candidate) or is_reserved_keyword(candidate):
        return None

    name = title_case(candidate)
    logger.debug("Name accepted: %r", name)
    return name


def parse_location_response(message: str) -> Optional[str]:
    """Return the address in this reply, or None if it isn't one.

    Examples:
        >>> parse_location_response("I live at 12 MG Road, Bangalore")
        '12 MG Road, Bangalore'
        >>> parse_location_response("help") is None
        True
    """
    text = message.strip()

    if is_reserved_keyword(text) or looks_like_order(text):
        return None
    if not MIN_LOCATION_LENGTH <= len(text) <= MAX_LOCATION_LENGTH:
        return None

    candidate = _LOCATION_FILLER_RE.sub("", text).strip()
    if not _LOCATION_CHARS_RE.match(candidate) or is_reserved_keyword(candidate):
        return None

    logger.debug("Location accepted: %r", candidate)
    return candidate
