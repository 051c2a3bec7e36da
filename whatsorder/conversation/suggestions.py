"""Hints appended to the reply when a message resolves to ``unknown``."""

import re
from typing import Protocol

from whatsorder.schemas.menu_schema import MenuItem

MIN_WORD_LENGTH = 3

DEFAULT_SUGGESTIONS = [
    "Type 'menu' to see all available items",
    "Type 'help' for ordering instructions",
]

_WORD_RE = re.compile(r"[a-z]+")


class AvailableItems(Protocol):
    def list_available(self) -> list[MenuItem]: ...


def _words(text: str) -> set[str]:
    return {w for w in _WORD_RE.findall(text.lower()) if len(w) >= MIN_WORD_LENGTH}


def generate_suggestions(message: str, catalog: AvailableItems, limit: int = 3) -> list[str]:
    """
    Suggest an order line for every available dish the message mentions.

    "chicken?" -> ["Try: 'order 1 Chicken Biryani'", "Try: 'order 1 Chicken Tikka'"]
    """
    mentioned = _words(message)
    suggestions = [
        f"Try: 'order 1 {item.name}'"
        for item in catalog.list_available()
        if mentioned & _words(item.name)
    ]
    return suggestions[:limit] or list(DEFAULT_SUGGESTIONS)
