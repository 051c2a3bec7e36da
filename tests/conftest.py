"""Shared test fixtures and helpers."""

from datetime import datetime, timedelta, timezone
from typing import Optional

import pytest

from whatsorder.conversation.intent_resolver import IntentResolver
from whatsorder.handlers.message_handler import MessageHandler
from whatsorder.schemas.customer_schema import CustomerSession
from whatsorder.schemas.menu_schema import MenuItem
from whatsorder.tools.menu_catalog import MenuCatalog
from whatsorder.tools.order_ledger import OrderLedger
from whatsorder.tools.session_store import SessionStore

OWNER_PHONE = "+919000000001"
CUSTOMER_PHONE = "+919812345678"
FIXED_NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """Callable clock the tests can move forward."""

    def __init__(self, now: datetime = FIXED_NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, minutes: int) -> None:
        self.now += timedelta(minutes=minutes)


def make_menu_items() -> list[MenuItem]:
    return [
        MenuItem(id=1, name="Chicken Biryani", price=299, category="Main Course"),
        MenuItem(id=2, name="Paneer Butter Masala", price=249, category="Main Course"),
        MenuItem(id=3, name="Chicken Tikka", price=279, category="Appetizers"),
        MenuItem(id=4, name="Naan", price=49, category="Breads"),
        MenuItem(id=5, name="Garlic Naan", price=69, category="Breads"),
        MenuItem(id=6, name="Mango Lassi", price=99, category="Beverages"),
        MenuItem(id=7, name="Gulab Jamun", price=89, category="Desserts", available=False),
    ]


def make_session(
    phone: str = CUSTOMER_PHONE,
    name: Optional[str] = "Priya",
    home_location: Optional[str] = "12 MG Road, Bangalore",
    current_location: Optional[str] = "Office at Cyber City",
    minutes_ago: Optional[int] = 5,
    session_active: bool = True,
) -> CustomerSession:
    """Helper to create a session; defaults describe an ACTIVE customer."""
    return CustomerSession(
        phone=phone,
        name=name,
        home_location=home_location,
        current_location=current_location,
        last_location_update=None if minutes_ago is None else FIXED_NOW - timedelta(minutes=minutes_ago),
        session_active=session_active,
    )


def activate(sessions: SessionStore, phone: str = CUSTOMER_PHONE, now: datetime = FIXED_NOW) -> None:
    """Walk a phone through onboarding directly on the store."""
    sessions.update_name(phone, "Priya")
    sessions.update_home_location(phone, "12 MG Road, Bangalore")
    sessions.update_current_location(phone, "Office at Cyber City", now=now)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def catalog():
    return MenuCatalog(make_menu_items(), restaurant_name="Spice Garden", menu_date="2026-10-18")


@pytest.fixture
def sessions():
    return SessionStore()


@pytest.fixture
def ledger(clock):
    return OrderLedger(clock=clock)


@pytest.fixture
def resolver(catalog, sessions, clock):
    return IntentResolver(catalog, sessions, owner_phone=OWNER_PHONE, clock=clock)


@pytest.fixture
def active_resolver(resolver, sessions):
    """Resolver whose customer phone has already finished onboarding."""
    activate(sessions)
    return resolver


@pytest.fixture
def handler(resolver, catalog, sessions, ledger, clock):
    return MessageHandler(
        resolver,
        catalog,
        sessions,
        ledger,
        restaurant_name="Spice Garden",
        upi_id="spicegarden@upi",
        clock=clock,
    )
