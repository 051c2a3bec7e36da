"""
Intent resolution for inbound WhatsApp messages.

The resolver is an ordered list of rules; the first rule that returns a
ParsedIntent wins. Precedence:

    1. payment commands (any sender)
    2. onboarding gate (customers only)
    3. place order
    4. help
    5. order status
    6. owner commands (owner only)
    7. greeting / menu
    8. search
    9. unknown

Resolution has no side effects. Catalog and session-store failures are
not swallowed: they propagate so the caller can reply with an apology
instead of mistaking an outage for "no match".
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional, Protocol

from whatsorder.conversation.dialogue_gate import DEFAULT_FRESHNESS_MINUTES, DialogueGate
from whatsorder.conversation.grammars import (
    GREETING_KEYWORDS,
    HELP_KEYWORDS,
    MENU_KEYWORDS,
    STATUS_KEYWORDS,
    CatalogLookup,
    OrderGrammar,
    contains_any,
    parse_owner_command,
    parse_payment_command,
    parse_search,
)
from whatsorder.schemas.customer_schema import CustomerSession
from whatsorder.schemas.intent_schema import IntentTag, ParsedIntent
from whatsorder.utils import is_same_phone

logger = logging.getLogger(__name__)


class SessionLookup(Protocol):
    def get(self, phone: str) -> Optional[CustomerSession]: ...


@dataclass(frozen=True)
class MessageContext:
    """One inbound message as seen by every rule."""
    text: str
    phone: str
    is_owner: bool
    now: datetime


@dataclass(frozen=True)
class IntentRule:
    """A named resolution step. ``apply`` returns None to pass to the next rule."""
    name: str
    apply: Callable[[MessageContext], Optional[ParsedIntent]]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class IntentResolver:
    """
    Maps (message, sender phone) to exactly one ParsedIntent.

    Usage:
        resolver = IntentResolver(catalog, sessions, owner_phone="+919490502449")
        parsed = resolver.resolve("order 2 chicken biryani", "+919812345678")
    """

    def __init__(
        self,
        catalog: CatalogLookup,
        sessions: SessionLookup,
        owner_phone: str = "",
        clock: Callable[[], datetime] = _utc_now,
        freshness_minutes: int = DEFAULT_FRESHNESS_MINUTES,
    ) -> None:
        self._sessions = sessions
        self._orders = OrderGrammar(catalog)
        self._gate = DialogueGate(freshness_minutes)
        self._clock = clock
        self.owner_phone = owner_phone
        self.rules: list[IntentRule] = [
            IntentRule("payment", self._payment),
            IntentRule("onboarding_gate", self._onboarding_gate),
            IntentRule("place_order", self._place_order),
            IntentRule("help", self._help),
            IntentRule("order_status", self._order_status),
            IntentRule("owner_command", self._owner_command),
            IntentRule("greeting_or_menu", self._greeting_or_menu),
            IntentRule("search", self._search),
        ]

    def is_owner(self, phone: str) -> bool:
        return is_same_phone(phone, self.owner_phone)

    def resolve(self, message: str, phone: str) -> ParsedIntent:
        """
        Resolve one message. Never raises for unrecognised text.

        Raises:
            CollaboratorUnavailableError: If the catalog or session store fails.
        """
        ctx = MessageContext(
            text=(message or "").strip(),
            phone=phone,
            is_owner=self.is_owner(phone),
            now=self._clock(),
        )

        for rule in self.rules:
            parsed = rule.apply(ctx)
            if parsed is not None:
                logger.debug("Rule %s matched -> %s", rule.name, parsed.intent.value)
                return parsed

        return ParsedIntent(intent=IntentTag.UNKNOWN, data={"original_message": message})

    # ------------------------------------------------------------------ #
    # Rules
    # ------------------------------------------------------------------ #

    def _payment(self, ctx: MessageContext) -> Optional[ParsedIntent]:
        return parse_payment_command(ctx.text, ctx.phone)

    def _onboarding_gate(self, ctx: MessageContext) -> Optional[ParsedIntent]:
        if ctx.is_owner:
            return None
        session = self._sessions.get(ctx.phone)
        return self._gate.intercept(ctx.text, ctx.phone, session, ctx.now)

    def _place_order(self, ctx: MessageContext) -> Optional[ParsedIntent]:
        data = self._orders.parse(ctx.text)
        if data is None:
            return None
        return ParsedIntent(intent=IntentTag.PLACE_ORDER, data=data)

    def _help(self, ctx: MessageContext) -> Optional[ParsedIntent]:
        if contains_any(ctx.text, HELP_KEYWORDS):
            return ParsedIntent(intent=IntentTag.HELP)
        return None

    def _order_status(self, ctx: MessageContext) -> Optional[ParsedIntent]:
        if contains_any(ctx.text, STATUS_KEYWORDS):
            return ParsedIntent(intent=IntentTag.ORDER_STATUS, data={"customer_phone": ctx.phone})
        return None

    def _owner_command(self, ctx: MessageContext) -> Optional[ParsedIntent]:
        if not ctx.is_owner:
            return None
        return parse_owner_command(ctx.text)

    def _greeting_or_menu(self, ctx: MessageContext) -> Optional[ParsedIntent]:
        if contains_any(ctx.text, GREETING_KEYWORDS) or contains_any(ctx.text, MENU_KEYWORDS):
            return ParsedIntent(intent=IntentTag.SHOW_MENU)
        return None

    def _search(self, ctx: MessageContext) -> Optional[ParsedIntent]:
        data = parse_search(ctx.text)
        if data is None:
            return None
        return ParsedIntent(intent=IntentTag.SEARCH_MENU, data=data)
