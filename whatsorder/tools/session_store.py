"""
In-memory customer session store keyed by normalized phone number.

In production this would be the customers table of the order database.
Writes are last-write-wins; nothing here locks across a read-modify-write.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from whatsorder.schemas.customer_schema import CustomerSession
from whatsorder.utils import normalize_phone

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SessionStore:
    """Customer onboarding and session records."""

    def __init__(self) -> None:
        self._sessions: dict[str, CustomerSession] = {}

    def get(self, phone: str) -> Optional[CustomerSession]:
        """Look up a session by phone. Returns None if the phone is unseen."""
        return self._sessions.get(normalize_phone(phone))

    def get_or_create(self, phone: str) -> CustomerSession:
        """Return the session for this phone, creating an empty one on first contact."""
        key = normalize_phone(phone)
        session = self._sessions.get(key)
        if session is None:
            session = CustomerSession(phone=key)
            self._sessions[key] = session
            logger.info("New customer session created for %s", key)
        return session

    def _save(self, session: CustomerSession) -> CustomerSession:
        self._sessions[session.phone] = session
        return session

    def update_name(self, phone: str, name: str) -> CustomerSession:
        """Set the display name, creating the record if needed."""
        session = self.get_or_create(phone)
        updated = session.model_copy(update={"name": name.strip()})
        logger.info("Customer name saved for %s", updated.phone)
        return self._save(updated)

    def update_home_location(self, phone: str, location: str) -> CustomerSession:
        """Set the persisted default delivery address.

        Raises:
            ValueError: If no session exists for the phone.
        """
        session = self.get(phone)
        if session is None:
            raise ValueError(f"Customer not found: {phone}")
        updated = session.model_copy(update={"home_location": location.strip()})
        logger.info("Home location saved for %s", updated.phone)
        return self._save(updated)

    def update_current_location(
        self, phone: str, location: str, now: Optional[datetime] = None
    ) -> CustomerSession:
        """Record the location for the active session and mark the session fresh.

        Raises:
            ValueError: If no session exists for the phone.
        """
        session = self.get(phone)
        if session is None:
            raise ValueError(f"Customer not found: {phone}")
        updated = session.model_copy(update={
            "current_location": location.strip(),
            "last_location_update": now or utc_now(),
            "session_active": True,
        })
        logger.info("Current location saved for %s", updated.phone)
        return self._save(updated)

    def end_session(self, phone: str) -> Optional[CustomerSession]:
        """Mark the session inactive so the next message asks for a location again."""
        session = self.get(phone)
        if session is None:
            return None
        logger.info("Session ended for %s", session.phone)
        return self._save(session.model_copy(update={"session_active": False}))

    def record_order(self, phone: str) -> Optional[CustomerSession]:
        """Bump the customer's order counter after a successful order."""
        session = self.get(phone)
        if session is None:
            return None
        return self._save(session.model_copy(update={"total_orders": session.total_orders + 1}))

    def reset(self) -> None:
        """Clear all sessions. Used by test fixtures for isolation."""
        self._sessions.clear()
