"""Tests for intent resolution: rule precedence, gating and failure handling."""

from typing import Optional

import pytest

from tests.conftest import CUSTOMER_PHONE, OWNER_PHONE, activate
from whatsorder.conversation.intent_resolver import IntentResolver
from whatsorder.errors import CatalogUnavailableError, SessionStoreUnavailableError
from whatsorder.schemas.customer_schema import CustomerSession
from whatsorder.schemas.intent_schema import IntentTag, ParsedIntent
from whatsorder.schemas.menu_schema import MenuItem


class FailingCatalog:
    def find_by_id(self, item_id: int) -> Optional[MenuItem]:
        raise CatalogUnavailableError("menu store offline")

    def search_by_name(self, term: str) -> list[MenuItem]:
        raise CatalogUnavailableError("menu store offline")


class FailingSessions:
    def get(self, phone: str) -> Optional[CustomerSession]:
        raise SessionStoreUnavailableError("customers table offline")


class TestRuleOrder:
    def test_rules_are_evaluated_in_documented_order(self, resolver):
        assert [rule.name for rule in resolver.rules] == [
            "payment",
            "onboarding_gate",
            "place_order",
            "help",
            "order_status",
            "owner_command",
            "greeting_or_menu",
            "search",
        ]

    def test_order_beats_help_keyword(self, active_resolver):
        parsed = active_resolver.resolve("how do I order 2 naan", CUSTOMER_PHONE)
        assert parsed.intent == IntentTag.PLACE_ORDER

    def test_help_beats_status(self, active_resolver):
        assert active_resolver.resolve("help with order status", CUSTOMER_PHONE).intent == IntentTag.HELP


class TestNewCustomer:
    @pytest.mark.parametrize("message", ["menu", "order 2 naan", "status", "what is 2+2?", ""])
    def test_non_names_request_name(self, resolver, sessions, message):
        parsed = resolver.resolve(message, CUSTOMER_PHONE)
        assert parsed.intent == IntentTag.REQUEST_CUSTOMER_NAME
        assert sessions.get(CUSTOMER_PHONE) is None

    def test_name_is_captured(self, resolver):
        parsed = resolver.resolve("I am priya", CUSTOMER_PHONE)
        assert parsed == ParsedIntent(
            intent=IntentTag.SAVE_CUSTOMER_NAME,
            data={"name": "Priya", "phone": CUSTOMER_PHONE},
        )

    def test_reserved_keyword_while_awaiting_location(self, resolver, sessions):
        sessions.update_name(CUSTOMER_PHONE, "Priya")
        parsed = resolver.resolve("help", CUSTOMER_PHONE)
        assert parsed.intent == IntentTag.REQUEST_CUSTOMER_LOCATION


class TestPaymentPrecedence:
    @pytest.mark.parametrize("message", ["pay cod", "pay upi"])
    def test_payment_wins_for_new_customer(self, resolver, message):
        parsed = resolver.resolve(message, CUSTOMER_PHONE)
        assert parsed.intent == IntentTag.SELECT_PAYMENT_METHOD

    def test_payment_wins_while_awaiting_location(self, resolver, sessions):
        sessions.update_name(CUSTOMER_PHONE, "Priya")
        assert resolver.resolve("payment help", CUSTOMER_PHONE).intent == IntentTag.PAYMENT_HELP

    def test_confirm_payment_from_every_state(self, resolver, sessions, clock):
        expected = ParsedIntent(
            intent=IntentTag.CONFIRM_PAYMENT,
            data={"transaction_id": "TXN987654321", "customer_phone": CUSTOMER_PHONE},
        )
        assert resolver.resolve("paid TXN987654321", CUSTOMER_PHONE) == expected
        sessions.update_name(CUSTOMER_PHONE, "Priya")
        assert resolver.resolve("paid TXN987654321", CUSTOMER_PHONE) == expected
        sessions.update_home_location(CUSTOMER_PHONE, "12 MG Road")
        assert resolver.resolve("paid TXN987654321", CUSTOMER_PHONE) == expected
        sessions.update_current_location(CUSTOMER_PHONE, "Office", now=clock())
        assert resolver.resolve("paid TXN987654321", CUSTOMER_PHONE) == expected

    def test_payment_skips_session_lookup(self, catalog):
        resolver = IntentResolver(catalog, FailingSessions(), owner_phone=OWNER_PHONE)
        assert resolver.resolve("pay cod", CUSTOMER_PHONE).intent == IntentTag.SELECT_PAYMENT_METHOD


class TestActiveCustomer:
    def test_multi_item_order(self, active_resolver):
        parsed = active_resolver.resolve("order 2 chicken biryani, 1 naan", CUSTOMER_PHONE)
        assert parsed.intent == IntentTag.PLACE_ORDER
        assert parsed.data["is_multiple_items"] is True
        assert [(i.quantity, i.line_total) for i in parsed.data["items"]] == [(2, 598), (1, 49)]
        assert parsed.data["total_amount"] == 647

    def test_single_item_order(self, active_resolver, catalog):
        parsed = active_resolver.resolve("order 2 chicken biryani", CUSTOMER_PHONE)
        assert parsed.intent == IntentTag.PLACE_ORDER
        assert parsed.data["quantity"] == 2
        assert parsed.data["menu_item"] == catalog.find_by_id(1)
        assert parsed.data["total"] == 598

    def test_help(self, active_resolver):
        assert active_resolver.resolve("help", CUSTOMER_PHONE) == ParsedIntent(intent=IntentTag.HELP)

    @pytest.mark.parametrize("message", [
        "order " + "1" * 5000 + " naan",
        "order 1 item " + "7" * 5000,
    ])
    def test_huge_numbers_fall_through_to_unknown(self, active_resolver, message):
        assert active_resolver.resolve(message, CUSTOMER_PHONE).intent == IntentTag.UNKNOWN

    def test_help_keywords_match_inside_words(self, active_resolver):
        assert active_resolver.resolve("show me desserts", CUSTOMER_PHONE).intent == IntentTag.HELP

    def test_greeting_keywords_match_inside_words(self, active_resolver):
        # "chicken" contains "hi"
        assert active_resolver.resolve("chicken tikka?", CUSTOMER_PHONE).intent == IntentTag.SHOW_MENU

    @pytest.mark.parametrize("message", ["status", "my orders", "Check order"])
    def test_order_status(self, active_resolver, message):
        parsed = active_resolver.resolve(message, CUSTOMER_PHONE)
        assert parsed.intent == IntentTag.ORDER_STATUS
        assert parsed.data == {"customer_phone": CUSTOMER_PHONE}

    @pytest.mark.parametrize("message", ["hi", "Good evening", "menu", "what do you have"])
    def test_greeting_or_menu(self, active_resolver, message):
        assert active_resolver.resolve(message, CUSTOMER_PHONE).intent == IntentTag.SHOW_MENU

    def test_search(self, active_resolver):
        parsed = active_resolver.resolve("search paneer", CUSTOMER_PHONE)
        assert parsed == ParsedIntent(intent=IntentTag.SEARCH_MENU, data={"search_term": "paneer"})

    def test_unknown_keeps_original_message(self, active_resolver):
        parsed = active_resolver.resolve("xyzzy", CUSTOMER_PHONE)
        assert parsed == ParsedIntent(intent=IntentTag.UNKNOWN, data={"original_message": "xyzzy"})

    def test_unparseable_order_falls_through(self, active_resolver):
        assert active_resolver.resolve("order 0 naan", CUSTOMER_PHONE).intent == IntentTag.UNKNOWN

    def test_session_goes_stale_after_window(self, active_resolver, clock):
        assert active_resolver.resolve("menu", CUSTOMER_PHONE).intent == IntentTag.SHOW_MENU
        clock.advance(31)
        assert active_resolver.resolve("menu", CUSTOMER_PHONE).intent == IntentTag.REQUEST_CURRENT_LOCATION

    def test_resolution_is_idempotent(self, active_resolver):
        for message in ["order 2 chicken biryani, 1 naan", "paid TXN1", "menu", "xyzzy"]:
            first = active_resolver.resolve(message, CUSTOMER_PHONE)
            assert active_resolver.resolve(message, CUSTOMER_PHONE) == first


class TestOwnerGating:
    @pytest.mark.parametrize("message", [
        "orders", "stats", "done 1", "add item Samosa 25", "delete item 1", "menu manage",
    ])
    def test_non_owner_never_gets_owner_intents(self, active_resolver, message):
        parsed = active_resolver.resolve(message, CUSTOMER_PHONE)
        assert not parsed.intent.is_owner_only

    def test_owner_add_item(self, resolver):
        parsed = resolver.resolve("add item Samosa 25 Crispy fried pastry", OWNER_PHONE)
        assert parsed.intent == IntentTag.OWNER_ADD_ITEM
        assert parsed.data == {"name": "Samosa", "price": 25, "description": "Crispy fried pastry"}

    def test_owner_add_item_zero_price(self, resolver):
        parsed = resolver.resolve("add item Samosa 0", OWNER_PHONE)
        assert parsed.intent != IntentTag.OWNER_ADD_ITEM

    def test_owner_skips_onboarding(self, resolver, sessions):
        assert resolver.resolve("orders", OWNER_PHONE).intent == IntentTag.OWNER_ORDERS
        assert sessions.get(OWNER_PHONE) is None

    def test_owner_phone_is_normalised(self, resolver):
        assert resolver.resolve("stats", "whatsapp:+91 90000 00001").intent == IntentTag.OWNER_STATS

    def test_owner_greeting_shows_menu(self, resolver):
        assert resolver.resolve("hi", OWNER_PHONE).intent == IntentTag.SHOW_MENU

    def test_owner_status_checked_before_owner_grammar(self, resolver):
        assert resolver.resolve("orders completed", OWNER_PHONE).intent == IntentTag.OWNER_ORDERS
        assert resolver.resolve("my orders", OWNER_PHONE).intent == IntentTag.ORDER_STATUS

    def test_no_owner_configured(self, catalog, sessions):
        resolver = IntentResolver(catalog, sessions, owner_phone="")
        assert not resolver.is_owner("")
        assert resolver.resolve("done 1", OWNER_PHONE).intent == IntentTag.REQUEST_CUSTOMER_NAME


class TestCollaboratorFailure:
    def test_catalog_failure_propagates(self, sessions, clock):
        activate(sessions)
        resolver = IntentResolver(FailingCatalog(), sessions, owner_phone=OWNER_PHONE, clock=clock)
        with pytest.raises(CatalogUnavailableError):
            resolver.resolve("order 2 naan", CUSTOMER_PHONE)

    def test_session_store_failure_propagates(self, catalog):
        resolver = IntentResolver(catalog, FailingSessions(), owner_phone=OWNER_PHONE)
        with pytest.raises(SessionStoreUnavailableError):
            resolver.resolve("menu", CUSTOMER_PHONE)
