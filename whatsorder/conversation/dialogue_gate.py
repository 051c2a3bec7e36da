"""
Onboarding state machine gating which intents a customer can reach.

Four states per phone number, derived from the stored session by a single
function so that the "is new", "needs location" and "needs current
location" checks can never disagree:

    NEW -> NAME_CAPTURED -> ONBOARDED_STALE_SESSION <-> ACTIVE

Transitions are driven by message content (a name, an address) except
ACTIVE -> ONBOARDED_STALE_SESSION, which happens when the freshness window
lapses and is evaluated against the wall clock at resolution time.

Usage:
    gate = DialogueGate(freshness_minutes=30)
    parsed = gate.intercept("Priya", phone, session, now)
    if parsed is None:
        ...  # ACTIVE: hand the message to the full resolver
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Callable, Optional

from whatsorder.conversation.heuristics import parse_location_response, parse_name_response
from whatsorder.schemas.customer_schema import CustomerSession
from whatsorder.schemas.intent_schema import IntentTag, ParsedIntent

logger = logging.getLogger(__name__)

DEFAULT_FRESHNESS_MINUTES = 30


class GateState(str, Enum):
    """Onboarding position of a customer."""
    NEW = "new"
    NAME_CAPTURED = "name_captured"
    ONBOARDED_STALE_SESSION = "onboarded_stale_session"
    ACTIVE = "active"


@dataclass(frozen=True)
class GateStep:
    """What the gate accepts in one state and which intents it emits."""
    state: GateState
    parser: Callable[[str], Optional[str]]
    data_key: str
    save_intent: IntentTag
    request_intent: IntentTag


GATE_STEPS: dict[GateState, GateStep] = {
    GateState.NEW: GateStep(
        GateState.NEW, parse_name_response, "name",
        IntentTag.SAVE_CUSTOMER_NAME, IntentTag.REQUEST_CUSTOMER_NAME,
    ),
    GateState.NAME_CAPTURED: GateStep(
        GateState.NAME_CAPTURED, parse_location_response, "location",
        IntentTag.SAVE_CUSTOMER_LOCATION, IntentTag.REQUEST_CUSTOMER_LOCATION,
    ),
    GateState.ONBOARDED_STALE_SESSION: GateStep(
        GateState.ONBOARDED_STALE_SESSION, parse_location_response, "current_location",
        IntentTag.SAVE_CURRENT_LOCATION, IntentTag.REQUEST_CURRENT_LOCATION,
    ),
}


def is_session_fresh(
    session: CustomerSession,
    now: datetime,
    freshness_minutes: int = DEFAULT_FRESHNESS_MINUTES,
) -> bool:
    """True if the current location was confirmed within the freshness window."""
    if not session.session_active or not session.current_location:
        return False
    if session.last_location_update is None:
        return False
    return now - session.last_location_update <= timedelta(minutes=freshness_minutes)


def resolve_gate_state(
    session: Optional[CustomerSession],
    now: datetime,
    freshness_minutes: int = DEFAULT_FRESHNESS_MINUTES,
) -> GateState:
    """Single source of truth for where a customer is in onboarding."""
    if session is None or not session.has_name():
        return GateState.NEW
    if not session.home_location:
        return GateState.NAME_CAPTURED
    if not is_session_fresh(session, now, freshness_minutes):
        return GateState.ONBOARDED_STALE_SESSION
    return GateState.ACTIVE


class DialogueGate:
    """Intercepts messages from customers who have not finished onboarding."""

    def __init__(self, freshness_minutes: int = DEFAULT_FRESHNESS_MINUTES) -> None:
        if freshness_minutes < 1:
            raise ValueError(f"freshness_minutes must be >= 1, got {freshness_minutes}")
        self.freshness_minutes = freshness_minutes

    def state_for(self, session: Optional[CustomerSession], now: datetime) -> GateState:
        return resolve_gate_state(session, now, self.freshness_minutes)

    def intercept(
        self,
        message: str,
        phone: str,
        session: Optional[CustomerSession],
        now: datetime,
    ) -> Optional[ParsedIntent]:
        """
        Return the onboarding intent for this message, or None when ACTIVE.

        The gate never mutates the session; the caller applies save_* intents.
        """
        state = self.state_for(session, now)
        step = GATE_STEPS.get(state)
        if step is None:
            return None

        value = step.parser(message)
        if value is not None:
            logger.debug("Gate %s accepted %s for %s", state.value, step.data_key, phone)
            return ParsedIntent(
                intent=step.save_intent,
                data={step.data_key: value, "phone": phone},
            )

        logger.debug("Gate %s re-prompting %s", state.value, phone)
        return ParsedIntent(intent=step.request_intent, data={"phone": phone})
