"""
Message grammars for every intent rule except onboarding.

Each parser takes the trimmed message (original casing preserved) and
returns either a ParsedIntent / data mapping or None. Matching is
case-insensitive. Keyword rules are substring tests over the lower-cased
message; command grammars are anchored to the whole message.
"""

import logging
import math
import re
from dataclasses import dataclass
from typing import Any, Callable, Optional, Protocol

from whatsorder.schemas.intent_schema import IntentTag, OrderLineItem, ParsedIntent
from whatsorder.schemas.menu_schema import MenuItem
from whatsorder.schemas.order_schema import OrderFilter
from whatsorder.utils import parse_count

logger = logging.getLogger(__name__)


class CatalogLookup(Protocol):
    """The two catalog reads the order grammar needs."""

    def find_by_id(self, item_id: int) -> Optional[MenuItem]: ...

    def search_by_name(self, term: str) -> list[MenuItem]: ...


# ---------------------------------------------------------------------- #
# Keyword sets
# ---------------------------------------------------------------------- #

HELP_KEYWORDS = ("help", "how", "commands", "instructions", "guide")
STATUS_KEYWORDS = ("status", "order status", "my orders", "recent orders", "check order")
GREETING_KEYWORDS = (
    "hi", "hello", "hey", "good morning", "good afternoon", "good evening",
)
MENU_KEYWORDS = ("menu", "food", "items", "available", "what do you have", "options")


def contains_any(text: str, keywords: tuple[str, ...]) -> bool:
    lowered = text.lower()
    return any(k in lowered for k in keywords)


# ---------------------------------------------------------------------- #
# Payment commands
# ---------------------------------------------------------------------- #

_PAY_METHOD_RE = re.compile(r"pay (cod|upi)", re.IGNORECASE)
_PAYMENT_QUERY_RE = re.compile(r"payment (options|status|help)", re.IGNORECASE)
_PAID_RE = re.compile(r"(?:paid|confirm payment)\s+(.+)", re.IGNORECASE | re.DOTALL)

_PAYMENT_QUERY_INTENTS = {
    "status": IntentTag.PAYMENT_STATUS,
    "options": IntentTag.PAYMENT_OPTIONS,
    "help": IntentTag.PAYMENT_HELP,
}


def parse_payment_command(text: str, phone: str) -> Optional[ParsedIntent]:
    """Payment grammar. The transaction reference keeps the sender's casing."""
    text = text.strip()

    match = _PAY_METHOD_RE.fullmatch(text)
    if match:
        return ParsedIntent(
            intent=IntentTag.SELECT_PAYMENT_METHOD,
            data={"method": match.group(1).lower(), "customer_phone": phone},
        )

    match = _PAID_RE.fullmatch(text)
    if match:
        return ParsedIntent(
            intent=IntentTag.CONFIRM_PAYMENT,
            data={"transaction_id": match.group(1).strip(), "customer_phone": phone},
        )

    match = _PAYMENT_QUERY_RE.fullmatch(text)
    if match:
        return ParsedIntent(
            intent=_PAYMENT_QUERY_INTENTS[match.group(1).lower()],
            data={"customer_phone": phone},
        )

    return None


# ---------------------------------------------------------------------- #
# Orders
# ---------------------------------------------------------------------- #

_ORDER_VERB = r"(?:order|want|get me|i want)"
_MULTI_ORDER_RE = re.compile(_ORDER_VERB + r"\s+(.+?)(?:\s+for\s+\w+.*)?$", re.IGNORECASE)
_SEGMENT_SPLIT_RE = re.compile(r"\s*(?:,\s*and\s*|,\s*|\s+and\s+|\s*\+\s*)\s*", re.IGNORECASE)

_TRAILING_FOR_RE = re.compile(r"\s+for\s+\w+.*$", re.IGNORECASE)
_TRAILING_SERVICE_RE = re.compile(
    r"\s+(for\s+)?(delivery|pickup|takeaway|dine-in).*$", re.IGNORECASE
)
_TRAILING_URGENCY_RE = re.compile(r"\s+(please|urgent|asap|now).*$", re.IGNORECASE)


@dataclass(frozen=True)
class ItemPattern:
    """One way of naming a dish: by catalog id or by free-form name."""
    pattern: re.Pattern
    by_id: bool


SEGMENT_PATTERNS: list[ItemPattern] = [
    ItemPattern(re.compile(r"(\d+)\s+item\s+(\d+)", re.IGNORECASE), by_id=True),
    ItemPattern(re.compile(r"(\d+)\s+#(\d+)", re.IGNORECASE), by_id=True),
    ItemPattern(re.compile(r"(\d+)\s+(.+)", re.IGNORECASE), by_id=False),
]

SINGLE_ORDER_PATTERNS: list[ItemPattern] = [
    ItemPattern(re.compile(_ORDER_VERB + r"\s+(\d+)\s+item\s+(\d+)", re.IGNORECASE), by_id=True),
    ItemPattern(re.compile(_ORDER_VERB + r"\s+(\d+)\s+#(\d+)", re.IGNORECASE), by_id=True),
    ItemPattern(
        re.compile(_ORDER_VERB + r"\s+(\d+)\s+(.+?)(?:\s+for\s+\w+)?$", re.IGNORECASE),
        by_id=False,
    ),
]


def clean_item_name(name: str) -> str:
    """Strip trailing "for Ahmed", "for delivery", "please" style clauses.

    Examples:
        >>> clean_item_name("chicken biryani for delivery asap")
        'chicken biryani'
    """
    cleaned = _TRAILING_FOR_RE.sub("", name)
    cleaned = _TRAILING_SERVICE_RE.sub("", cleaned)
    cleaned = _TRAILING_URGENCY_RE.sub("", cleaned)
    return cleaned.strip()


@dataclass(frozen=True)
class Selection:
    """A catalog item and the quantity asked for."""
    item: MenuItem
    quantity: int

    @property
    def total(self) -> float:
        return self.quantity * self.item.price

    def to_line_item(self) -> OrderLineItem:
        return OrderLineItem(
            menu_item_id=self.item.id,
            name=self.item.name,
            quantity=self.quantity,
            unit_price=self.item.price,
            line_total=self.total,
        )


class OrderGrammar:
    """Turns "order 2 chicken biryani, 1 naan" into resolved catalog selections."""

    def __init__(self, catalog: CatalogLookup) -> None:
        self._catalog = catalog

    def _resolve(self, quantity: Optional[int], reference: str, by_id: bool) -> Optional[Selection]:
        if quantity is None or quantity < 1:
            return None
        if by_id:
            item_id = parse_count(reference)
            item = self._catalog.find_by_id(item_id) if item_id is not None else None
        else:
            name = clean_item_name(reference.strip())
            results = self._catalog.search_by_name(name) if name else []
            item = results[0] if results else None
        if item is None:
            return None
        return Selection(item=item, quantity=quantity)

    def _match_patterns(self, text: str, patterns: list[ItemPattern]) -> Optional[Selection]:
        for item_pattern in patterns:
            match = item_pattern.pattern.search(text)
            if not match:
                continue
            selection = self._resolve(parse_count(match.group(1)), match.group(2), item_pattern.by_id)
            if selection is not None:
                return selection
        return None

    def parse_segment(self, segment: str) -> Optional[Selection]:
        """Resolve one "<qty> <item>" segment, or None if it names nothing orderable."""
        return self._match_patterns(segment, SEGMENT_PATTERNS)

    def parse_multiple(self, text: str) -> Optional[dict[str, Any]]:
        match = _MULTI_ORDER_RE.search(text)
        if not match:
            return None

        segments = [s.strip() for s in _SEGMENT_SPLIT_RE.split(match.group(1).strip())]
        selections = [s for s in map(self.parse_segment, segments) if s is not None]
        dropped = len(segments) - len(selections)
        if dropped:
            logger.debug("Order parse dropped %d of %d segments", dropped, len(segments))

        if len(selections) > 1:
            lines = [s.to_line_item() for s in selections]
            return {
                "items": lines,
                "total_amount": sum(line.line_total for line in lines),
                "is_multiple_items": True,
                "dropped_segments": dropped,
            }
        if len(selections) == 1:
            return _single_item_data(selections[0], dropped)
        return None

    def parse_single(self, text: str) -> Optional[dict[str, Any]]:
        selection = self._match_patterns(text, SINGLE_ORDER_PATTERNS)
        if selection is None:
            return None
        return _single_item_data(selection, 0)

    def parse(self, text: str) -> Optional[dict[str, Any]]:
        """Multi-item grammar first, then the single-item grammar over the whole text."""
        return self.parse_multiple(text) or self.parse_single(text)


def _single_item_data(selection: Selection, dropped: int) -> dict[str, Any]:
    return {
        "quantity": selection.quantity,
        "menu_item": selection.item,
        "total": selection.total,
        "dropped_segments": dropped,
    }


# ---------------------------------------------------------------------- #
# Owner commands
# ---------------------------------------------------------------------- #

OwnerBuilder = Callable[[re.Match], Optional[ParsedIntent]]


def _positive(number: str) -> Optional[float]:
    value = float(number)
    return value if math.isfinite(value) and value > 0 else None


def _owner_orders(order_filter: OrderFilter) -> OwnerBuilder:
    return lambda m: ParsedIntent(intent=IntentTag.OWNER_ORDERS, data={"filter": order_filter})


def _add_item(m: re.Match) -> Optional[ParsedIntent]:
    price = _positive(m.group(2))
    if price is None:
        return None
    return ParsedIntent(
        intent=IntentTag.OWNER_ADD_ITEM,
        data={
            "name": m.group(1).strip(),
            "price": price,
            "description": (m.group(3) or "").strip(),
        },
    )


def _edit_price(m: re.Match) -> Optional[ParsedIntent]:
    price = _positive(m.group(2))
    if price is None:
        return None
    return ParsedIntent(
        intent=IntentTag.OWNER_EDIT_ITEM,
        data={"identifier": m.group(1).strip(), "updates": {"price": price}},
    )


def _edit_name(m: re.Match) -> ParsedIntent:
    return ParsedIntent(
        intent=IntentTag.OWNER_EDIT_ITEM,
        data={"identifier": m.group(1).strip(), "updates": {"name": m.group(2).strip()}},
    )


def _with_identifier(tag: IntentTag) -> OwnerBuilder:
    return lambda m: ParsedIntent(intent=tag, data={"identifier": m.group(1).strip()})


def _with_order_id(tag: IntentTag, group: int = 1) -> OwnerBuilder:
    return lambda m: ParsedIntent(intent=tag, data={"order_id": m.group(group).strip()})


def _owner(pattern: str) -> re.Pattern:
    return re.compile(pattern, re.IGNORECASE)


# First match wins.
OWNER_GRAMMARS: list[tuple[re.Pattern, OwnerBuilder]] = [
    (_owner(r"(?:all\s+)?orders"), _owner_orders(OrderFilter.PENDING)),
    (_owner(r"orders\s+today"), _owner_orders(OrderFilter.TODAY)),
    (_owner(r"orders\s+pending"), _owner_orders(OrderFilter.PENDING)),
    (_owner(r"orders\s+completed"), _owner_orders(OrderFilter.COMPLETED)),
    (_owner(r"complete\s+order\s+(.+)"), _with_order_id(IntentTag.OWNER_COMPLETE_ORDER)),
    (_owner(r"(complete|done)\s+(\w+)"), _with_order_id(IntentTag.OWNER_COMPLETE_ORDER, 2)),
    (_owner(r"cancel\s+order\s+(.+)"), _with_order_id(IntentTag.OWNER_CANCEL_ORDER)),
    (_owner(r"stats|summary|dashboard"), lambda m: ParsedIntent(intent=IntentTag.OWNER_STATS)),
    (
        _owner(r"menu\s+manage|manage\s+menu|menu\s+admin"),
        lambda m: ParsedIntent(intent=IntentTag.OWNER_MENU_MANAGE),
    ),
    (_owner(r"add\s+item\s+(.+?)\s+(\d+(?:\.\d+)?)(?:\s+(.+))?"), _add_item),
    (_owner(r"edit\s+item\s+(.+?)\s+price\s+(\d+(?:\.\d+)?)"), _edit_price),
    (_owner(r"edit\s+item\s+(.+?)\s+name\s+(.+)"), _edit_name),
    (_owner(r"delete\s+item\s+(.+)"), _with_identifier(IntentTag.OWNER_DELETE_ITEM)),
    (_owner(r"toggle\s+item\s+(.+)"), _with_identifier(IntentTag.OWNER_TOGGLE_ITEM)),
]


def parse_owner_command(text: str) -> Optional[ParsedIntent]:
    text = text.strip()
    for pattern, build in OWNER_GRAMMARS:
        match = pattern.fullmatch(text)
        if match:
            parsed = build(match)
            if parsed is not None:
                return parsed
    return None


# ---------------------------------------------------------------------- #
# Search
# ---------------------------------------------------------------------- #

SEARCH_PATTERNS = [
    re.compile(r"search\s+(.+)", re.IGNORECASE),
    re.compile(r"find\s+(.+)", re.IGNORECASE),
    re.compile(r"show me\s+(.+)", re.IGNORECASE),
    re.compile(r"do you have\s+(.+)", re.IGNORECASE),
]


def parse_search(text: str) -> Optional[dict[str, str]]:
    for pattern in SEARCH_PATTERNS:
        match = pattern.search(text)
        if match:
            return {"search_term": match.group(1).strip()}
    return None
