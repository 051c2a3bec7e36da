"""
Inbound message handling: resolve the intent, apply it, render the reply.

The resolver decides *what* a message means without touching any store.
This module is where the decision takes effect: session fields are
written for the save_* intents, orders and payments go to the ledger,
owner menu commands go to the catalog.

Usage:
    handler = MessageHandler(resolver, catalog, sessions, ledger,
                             restaurant_name="Spice Garden", upi_id="spicegarden@upi")
    reply = handler.handle("order 2 chicken biryani", "whatsapp:+919812345678")
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Optional, Union

from whatsorder.conversation.intent_resolver import IntentResolver
from whatsorder.conversation.suggestions import generate_suggestions
from whatsorder.errors import CollaboratorUnavailableError
from whatsorder.logging_context import get_message_logger, set_message_id
from whatsorder.prompts import reply_templates as replies
from whatsorder.schemas.intent_schema import IntentTag, OrderLineItem
from whatsorder.schemas.order_schema import (
    OrderFilter,
    OrderRecord,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
)
from whatsorder.tools.menu_catalog import MenuCatalog, MenuChangeResult
from whatsorder.tools.order_ledger import OrderLedger
from whatsorder.tools.session_store import SessionStore

logger = get_message_logger(__name__)

IntentHandler = Callable[[dict[str, Any], str], str]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class MessageHandler:
    """Turns one inbound WhatsApp message into one reply string."""

    def __init__(
        self,
        resolver: IntentResolver,
        catalog: MenuCatalog,
        sessions: SessionStore,
        ledger: OrderLedger,
        restaurant_name: str = "Our Restaurant",
        upi_id: str = "",
        currency: str = replies.DEFAULT_CURRENCY,
        recent_orders_limit: int = 5,
        owner_orders_display_limit: int = 8,
        menu_file: Optional[Union[str, Path]] = None,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self.resolver = resolver
        self.catalog = catalog
        self.sessions = sessions
        self.ledger = ledger
        self.restaurant_name = restaurant_name
        self.upi_id = upi_id
        self.currency = currency
        self.recent_orders_limit = recent_orders_limit
        self.owner_orders_display_limit = owner_orders_display_limit
        self.menu_file = menu_file
        self._clock = clock

        self._handlers: dict[IntentTag, IntentHandler] = {
            IntentTag.REQUEST_CUSTOMER_NAME: self._request_name,
            IntentTag.SAVE_CUSTOMER_NAME: self._save_name,
            IntentTag.REQUEST_CUSTOMER_LOCATION: self._request_location,
            IntentTag.SAVE_CUSTOMER_LOCATION: self._save_location,
            IntentTag.REQUEST_CURRENT_LOCATION: self._request_current_location,
            IntentTag.SAVE_CURRENT_LOCATION: self._save_current_location,
            IntentTag.SELECT_PAYMENT_METHOD: self._select_payment_method,
            IntentTag.CONFIRM_PAYMENT: self._confirm_payment,
            IntentTag.PAYMENT_STATUS: self._payment_status,
            IntentTag.PAYMENT_OPTIONS: self._payment_options,
            IntentTag.PAYMENT_HELP: lambda data, phone: replies.payment_help(),
            IntentTag.PLACE_ORDER: self._place_order,
            IntentTag.HELP: self._help,
            IntentTag.ORDER_STATUS: self._order_status,
            IntentTag.SHOW_MENU: self._show_menu,
            IntentTag.SEARCH_MENU: self._search_menu,
            IntentTag.OWNER_ORDERS: self._owner_orders,
            IntentTag.OWNER_COMPLETE_ORDER: self._owner_complete_order,
            IntentTag.OWNER_CANCEL_ORDER: self._owner_cancel_order,
            IntentTag.OWNER_STATS: self._owner_stats,
            IntentTag.OWNER_MENU_MANAGE: self._owner_menu_manage,
            IntentTag.OWNER_ADD_ITEM: self._owner_add_item,
            IntentTag.OWNER_EDIT_ITEM: self._owner_edit_item,
            IntentTag.OWNER_DELETE_ITEM: self._owner_delete_item,
            IntentTag.OWNER_TOGGLE_ITEM: self._owner_toggle_item,
            IntentTag.UNKNOWN: self._unknown,
        }

    def handle(self, message: str, phone: str, message_id: Optional[str] = None) -> str:
        """Process one message and return the reply.

        Collaborator outages become an apology and requests a collaborator
        rejects become a short notice. Neither reaches the transport.
        """
        message_id = set_message_id(message_id)
        try:
            if not self.resolver.is_owner(phone):
                self.sessions.get_or_create(phone)
            parsed = self.resolver.resolve(message, phone)
            logger.info("Message %s from %s resolved to %s", message_id, phone, parsed.intent.value)
            return self._handlers[parsed.intent](parsed.data, phone)
        except CollaboratorUnavailableError:
            logger.exception("Collaborator unavailable while handling message %s", message_id)
            return replies.apology()
        except ValueError as exc:
            logger.warning("Message %s rejected: %s", message_id, exc)
            return replies.request_not_processed()

    # ------------------------------------------------------------------ #
    # Onboarding
    # ------------------------------------------------------------------ #

    def _known_name(self, phone: str) -> Optional[str]:
        session = self.sessions.get(phone)
        return session.name if session is not None and session.has_name() else None

    def _request_name(self, data: dict[str, Any], phone: str) -> str:
        return replies.welcome_message(self.restaurant_name)

    def _save_name(self, data: dict[str, Any], phone: str) -> str:
        session = self.sessions.update_name(phone, data["name"])
        return replies.name_confirmation(session.name)

    def _request_location(self, data: dict[str, Any], phone: str) -> str:
        return replies.location_request(self._known_name(phone))

    def _save_location(self, data: dict[str, Any], phone: str) -> str:
        session = self.sessions.update_home_location(phone, data["location"])
        return replies.location_confirmation(session.name, session.home_location, self.restaurant_name)

    def _request_current_location(self, data: dict[str, Any], phone: str) -> str:
        return replies.current_location_request(self._known_name(phone), self.restaurant_name)

    def _save_current_location(self, data: dict[str, Any], phone: str) -> str:
        session = self.sessions.update_current_location(phone, data["current_location"], now=self._clock())
        return replies.current_location_confirmation(session.name, session.current_location)

    # ------------------------------------------------------------------ #
    # Customer
    # ------------------------------------------------------------------ #

    def _place_order(self, data: dict[str, Any], phone: str) -> str:
        if data.get("is_multiple_items"):
            items: list[OrderLineItem] = data["items"]
        else:
            menu_item = data["menu_item"]
            items = [
                OrderLineItem(
                    menu_item_id=menu_item.id,
                    name=menu_item.name,
                    quantity=data["quantity"],
                    unit_price=menu_item.price,
                    line_total=data["total"],
                )
            ]
        if not items:
            return replies.invalid_order()

        session = self.sessions.get(phone)
        order = self.ledger.create_order(
            phone,
            items,
            customer_name=session.name if session is not None and session.has_name() else None,
            delivery_address=replies.delivery_address(
                session.current_location if session else None,
                session.home_location if session else None,
            ),
        )
        self.sessions.record_order(phone)
        return replies.order_success(order, self.currency, data.get("dropped_segments", 0))

    def _help(self, data: dict[str, Any], phone: str) -> str:
        if self.resolver.is_owner(phone):
            return replies.owner_help()
        session = self.sessions.get(phone)
        if session is not None and session.has_name():
            return replies.returning_customer_help(
                session.name, session.home_location, session.total_orders
            )
        return replies.customer_help()

    def _order_status(self, data: dict[str, Any], phone: str) -> str:
        orders = self.ledger.orders_for_customer(phone, limit=self.recent_orders_limit)
        return replies.recent_orders(orders, self.currency)

    def _show_menu(self, data: dict[str, Any], phone: str) -> str:
        menu = replies.menu_message(
            self.catalog.restaurant_name,
            self.catalog.menu_date,
            self.catalog.grouped_by_category(),
            self.currency,
        )
        session = None if self.resolver.is_owner(phone) else self.sessions.get(phone)
        if session is not None and session.has_name():
            return replies.menu_greeting(session.name, session.current_location, session.home_location) + menu
        return menu

    def _search_menu(self, data: dict[str, Any], phone: str) -> str:
        term = data["search_term"]
        return replies.search_results(self.catalog.search_by_name(term), term, self.currency)

    def _unknown(self, data: dict[str, Any], phone: str) -> str:
        suggestions = generate_suggestions(data.get("original_message", ""), self.catalog)
        return replies.unknown_message(suggestions)

    # ------------------------------------------------------------------ #
    # Payments
    # ------------------------------------------------------------------ #

    def _pending_order(self, phone: str) -> Optional[OrderRecord]:
        order = self.ledger.latest_order_for(phone)
        if order is None or order.status != OrderStatus.PENDING:
            return None
        return order

    def _select_payment_method(self, data: dict[str, Any], phone: str) -> str:
        order = self._pending_order(phone)
        if order is None:
            return replies.no_pending_order()

        if data["method"] == PaymentMethod.COD.value:
            order = self.ledger.update_payment(order.order_id, PaymentStatus.COD, PaymentMethod.COD)
            return replies.cod_confirmation(order, self.currency)

        order = self.ledger.update_payment(order.order_id, PaymentStatus.PENDING, PaymentMethod.UPI)
        return replies.upi_payment(order, self.upi_id, self.restaurant_name, self.currency)

    def _confirm_payment(self, data: dict[str, Any], phone: str) -> str:
        order = self.ledger.latest_unpaid_order_for(phone)
        if order is None:
            return replies.no_unpaid_order()
        transaction_id = data["transaction_id"]
        order = self.ledger.update_payment(
            order.order_id,
            PaymentStatus.PAID,
            order.payment_method or PaymentMethod.UPI,
            payment_id=transaction_id,
        )
        return replies.payment_confirmed(order, transaction_id, self.currency)

    def _payment_status(self, data: dict[str, Any], phone: str) -> str:
        order = self.ledger.latest_order_for(phone)
        if order is None:
            return replies.no_orders_for_payment()
        return replies.payment_status(order, self.currency)

    def _payment_options(self, data: dict[str, Any], phone: str) -> str:
        order = self._pending_order(phone)
        if order is None:
            return replies.no_pending_order()
        return replies.payment_options(order, self.currency)

    # ------------------------------------------------------------------ #
    # Owner
    # ------------------------------------------------------------------ #

    def _owner_orders(self, data: dict[str, Any], phone: str) -> str:
        order_filter = OrderFilter(data["filter"])
        orders = self.ledger.orders_for_owner(order_filter)
        return replies.owner_orders(orders, order_filter, self.owner_orders_display_limit, self.currency)

    def _owner_complete_order(self, data: dict[str, Any], phone: str) -> str:
        order = self.ledger.resolve_owner_reference(data["order_id"])
        if order is None:
            return replies.owner_order_not_found(data["order_id"])
        order = self.ledger.update_status(order.order_id, OrderStatus.COMPLETED)
        return replies.owner_order_completed(order, self.currency)

    def _owner_cancel_order(self, data: dict[str, Any], phone: str) -> str:
        reference = data["order_id"]
        order = self.ledger.get_order(reference) or self.ledger.find_by_short_code(reference)
        if order is None:
            return replies.owner_order_not_found(reference)
        order = self.ledger.update_status(order.order_id, OrderStatus.CANCELLED)
        return replies.owner_order_cancelled(order, self.currency)

    def _owner_stats(self, data: dict[str, Any], phone: str) -> str:
        return replies.owner_stats(self.ledger.daily_stats(), self.currency)

    def _owner_menu_manage(self, data: dict[str, Any], phone: str) -> str:
        return replies.menu_manage(
            self.catalog.restaurant_name,
            self.catalog.menu_date,
            self.catalog.list_all(),
            self.currency,
        )

    def _menu_changed(self, result: MenuChangeResult) -> str:
        if result.get("success") and self.menu_file:
            self.catalog.save(self.menu_file)
        return replies.menu_change(result, self.currency)

    def _owner_add_item(self, data: dict[str, Any], phone: str) -> str:
        return self._menu_changed(
            self.catalog.add_item(data["name"], data["price"], data.get("description", ""))
        )

    def _owner_edit_item(self, data: dict[str, Any], phone: str) -> str:
        return self._menu_changed(self.catalog.edit_item(data["identifier"], **data["updates"]))

    def _owner_delete_item(self, data: dict[str, Any], phone: str) -> str:
        return self._menu_changed(self.catalog.delete_item(data["identifier"]))

    def _owner_toggle_item(self, data: dict[str, Any], phone: str) -> str:
        return self._menu_changed(self.catalog.toggle_item(data["identifier"]))
