"""Tests for the onboarding dialogue gate."""

from datetime import timedelta

import pytest

from tests.conftest import CUSTOMER_PHONE, FIXED_NOW, make_session
from whatsorder.conversation.dialogue_gate import (
    DialogueGate,
    GateState,
    is_session_fresh,
    resolve_gate_state,
)
from whatsorder.schemas.customer_schema import PLACEHOLDER_NAME
from whatsorder.schemas.intent_schema import IntentTag


@pytest.fixture
def gate():
    return DialogueGate(freshness_minutes=30)


class TestResolveGateState:
    def test_unknown_phone_is_new(self):
        assert resolve_gate_state(None, FIXED_NOW) == GateState.NEW

    def test_placeholder_name_is_new(self):
        session = make_session(name=PLACEHOLDER_NAME)
        assert resolve_gate_state(session, FIXED_NOW) == GateState.NEW

    def test_name_without_home_location(self):
        session = make_session(home_location=None)
        assert resolve_gate_state(session, FIXED_NOW) == GateState.NAME_CAPTURED

    def test_onboarded_without_current_location_is_stale(self):
        session = make_session(current_location=None, minutes_ago=None, session_active=False)
        assert resolve_gate_state(session, FIXED_NOW) == GateState.ONBOARDED_STALE_SESSION

    def test_recent_location_is_active(self):
        assert resolve_gate_state(make_session(minutes_ago=5), FIXED_NOW) == GateState.ACTIVE

    def test_exactly_at_window_is_still_active(self):
        assert resolve_gate_state(make_session(minutes_ago=30), FIXED_NOW) == GateState.ACTIVE

    def test_past_window_regresses_to_stale(self):
        session = make_session(minutes_ago=31)
        assert resolve_gate_state(session, FIXED_NOW) == GateState.ONBOARDED_STALE_SESSION

    def test_inactive_session_is_stale(self):
        session = make_session(session_active=False)
        assert resolve_gate_state(session, FIXED_NOW) == GateState.ONBOARDED_STALE_SESSION

    def test_custom_window(self):
        session = make_session(minutes_ago=10)
        assert resolve_gate_state(session, FIXED_NOW, freshness_minutes=5) == GateState.ONBOARDED_STALE_SESSION


class TestSessionFreshness:
    def test_missing_timestamp_is_not_fresh(self):
        assert not is_session_fresh(make_session(minutes_ago=None), FIXED_NOW)

    def test_fresh_then_stale_as_time_passes(self):
        session = make_session(minutes_ago=0)
        assert is_session_fresh(session, FIXED_NOW)
        assert not is_session_fresh(session, FIXED_NOW + timedelta(minutes=31))


class TestIntercept:
    def test_new_customer_name_is_saved(self, gate):
        parsed = gate.intercept("my name is priya", CUSTOMER_PHONE, None, FIXED_NOW)
        assert parsed.intent == IntentTag.SAVE_CUSTOMER_NAME
        assert parsed.data == {"name": "Priya", "phone": CUSTOMER_PHONE}

    @pytest.mark.parametrize("message", ["hi", "menu", "order 2 naan", "12345", ""])
    def test_new_customer_non_name_requests_name(self, gate, message):
        parsed = gate.intercept(message, CUSTOMER_PHONE, None, FIXED_NOW)
        assert parsed.intent == IntentTag.REQUEST_CUSTOMER_NAME
        assert parsed.data == {"phone": CUSTOMER_PHONE}

    def test_home_location_is_saved(self, gate):
        session = make_session(home_location=None)
        parsed = gate.intercept("12 MG Road", CUSTOMER_PHONE, session, FIXED_NOW)
        assert parsed.intent == IntentTag.SAVE_CUSTOMER_LOCATION
        assert parsed.data["location"] == "12 MG Road"

    def test_reserved_keyword_is_not_a_location(self, gate):
        session = make_session(home_location=None)
        parsed = gate.intercept("help", CUSTOMER_PHONE, session, FIXED_NOW)
        assert parsed.intent == IntentTag.REQUEST_CUSTOMER_LOCATION

    def test_stale_session_saves_current_location(self, gate):
        session = make_session(minutes_ago=45)
        parsed = gate.intercept("Home in Koramangala", CUSTOMER_PHONE, session, FIXED_NOW)
        assert parsed.intent == IntentTag.SAVE_CURRENT_LOCATION
        assert parsed.data["current_location"] == "Home in Koramangala"

    def test_stale_session_requests_current_location(self, gate):
        session = make_session(minutes_ago=45)
        parsed = gate.intercept("menu", CUSTOMER_PHONE, session, FIXED_NOW)
        assert parsed.intent == IntentTag.REQUEST_CURRENT_LOCATION

    def test_active_session_passes_through(self, gate):
        assert gate.intercept("menu", CUSTOMER_PHONE, make_session(), FIXED_NOW) is None

    def test_intercept_does_not_mutate_session(self, gate):
        session = make_session(home_location=None)
        before = session.model_dump()
        gate.intercept("12 MG Road", CUSTOMER_PHONE, session, FIXED_NOW)
        assert session.model_dump() == before


class TestGateConfig:
    def test_window_must_be_positive(self):
        with pytest.raises(ValueError, match="freshness_minutes"):
            DialogueGate(freshness_minutes=0)
