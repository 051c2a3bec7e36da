"""Tests for import chains and module integrity.

Ensures all public modules can be imported without errors and
that re-exports from __init__.py files work correctly.
"""


class TestSchemaImports:
    def test_import_intent_schema(self):
        from whatsorder.schemas.intent_schema import IntentTag, ParsedIntent
        assert len(IntentTag) == 26
        assert ParsedIntent(intent=IntentTag.HELP).data == {}

    def test_owner_tags(self):
        from whatsorder.schemas.intent_schema import IntentTag
        owner_tags = [t for t in IntentTag if t.is_owner_only]
        assert len(owner_tags) == 9
        assert IntentTag.HELP.is_owner_only is False

    def test_import_order_schema(self):
        from whatsorder.schemas.order_schema import OrderFilter, OrderStatus
        assert OrderFilter("today") == OrderFilter.TODAY
        assert OrderStatus.PENDING == "pending"


class TestConversationImports:
    def test_import_conversation_package(self):
        from whatsorder.conversation import DialogueGate, GateState, IntentResolver, generate_suggestions
        assert DialogueGate().freshness_minutes == 30
        assert GateState.ACTIVE.value == "active"
        assert IntentResolver is not None
        assert callable(generate_suggestions)


class TestToolImports:
    def test_import_tools(self):
        from whatsorder.tools.menu_catalog import MenuCatalog
        from whatsorder.tools.order_ledger import OrderLedger
        from whatsorder.tools.session_store import SessionStore
        assert MenuCatalog().list_all() == []
        assert OrderLedger().orders_for_owner() == []
        assert SessionStore().get("+911") is None


class TestConfigImport:
    def test_import_config(self):
        from whatsorder.config import settings
        assert settings.restaurant.name
        assert settings.session.freshness_minutes >= 1


class TestConsoleDemo:
    def test_console_session_runs_a_message(self, catalog):
        from console_demo import ConsoleSession
        session = ConsoleSession(catalog, "+919812345678", "+919000000001")
        assert "Welcome to" in session.handler.handle("hi", "+919812345678")
        assert set(ConsoleSession.SCENARIOS) == {"onboarding", "ordering", "owner"}
