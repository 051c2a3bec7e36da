"""Customer data models and per-phone session state."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

# Name stored by the ledger before the customer has introduced themselves.
PLACEHOLDER_NAME = "Customer"


class CustomerSession(BaseModel):
    """
    Per-phone onboarding and session record.

    Created on the first inbound message from an unseen phone and mutated
    only in response to the save_* intents. The dialogue gate derives its
    state from these fields alone.
    """
    phone: str
    name: Optional[str] = None
    home_location: Optional[str] = None
    current_location: Optional[str] = None
    last_location_update: Optional[datetime] = None
    session_active: bool = False
    total_orders: int = 0

    def has_name(self) -> bool:
        return bool(self.name) and self.name != PLACEHOLDER_NAME

    def is_onboarded(self) -> bool:
        return self.has_name() and bool(self.home_location)
