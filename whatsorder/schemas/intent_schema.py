"""Resolver output: intent tags, parsed intents and order line items."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class IntentTag(str, Enum):
    """Every intent the resolver can produce."""
    # Onboarding (dialogue gate)
    REQUEST_CUSTOMER_NAME = "request_customer_name"
    SAVE_CUSTOMER_NAME = "save_customer_name"
    REQUEST_CUSTOMER_LOCATION = "request_customer_location"
    SAVE_CUSTOMER_LOCATION = "save_customer_location"
    REQUEST_CURRENT_LOCATION = "request_current_location"
    SAVE_CURRENT_LOCATION = "save_current_location"

    # Payments
    SELECT_PAYMENT_METHOD = "select_payment_method"
    CONFIRM_PAYMENT = "confirm_payment"
    PAYMENT_STATUS = "payment_status"
    PAYMENT_OPTIONS = "payment_options"
    PAYMENT_HELP = "payment_help"

    # Customer
    PLACE_ORDER = "place_order"
    HELP = "help"
    ORDER_STATUS = "order_status"
    SHOW_MENU = "show_menu"
    SEARCH_MENU = "search_menu"

    # Owner
    OWNER_ORDERS = "owner_orders"
    OWNER_COMPLETE_ORDER = "owner_complete_order"
    OWNER_CANCEL_ORDER = "owner_cancel_order"
    OWNER_STATS = "owner_stats"
    OWNER_MENU_MANAGE = "owner_menu_manage"
    OWNER_ADD_ITEM = "owner_add_item"
    OWNER_EDIT_ITEM = "owner_edit_item"
    OWNER_DELETE_ITEM = "owner_delete_item"
    OWNER_TOGGLE_ITEM = "owner_toggle_item"

    UNKNOWN = "unknown"

    @property
    def is_owner_only(self) -> bool:
        return self.value.startswith("owner_")


class ParsedIntent(BaseModel):
    """Exactly one of these is produced per inbound message."""
    intent: IntentTag
    data: dict[str, Any] = Field(default_factory=dict)


class OrderLineItem(BaseModel):
    """One resolved dish and quantity inside an order."""
    menu_item_id: int
    name: str
    quantity: int = Field(ge=1)
    unit_price: float
    line_total: float
