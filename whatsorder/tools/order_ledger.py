"""
In-memory order and payment ledger.

In production this would be the orders table. Order ids look like
``ORD-<epoch millis>-<4 chars>`` and the trailing chars are the short code
the owner types in chat ("complete A7H4").
"""

import logging
import random
import string
from collections import Counter
from datetime import date, datetime, timezone
from typing import Callable, Optional

from whatsorder.schemas.customer_schema import PLACEHOLDER_NAME
from whatsorder.schemas.intent_schema import OrderLineItem
from whatsorder.schemas.order_schema import (
    DailyStats,
    OrderFilter,
    OrderRecord,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    TopItem,
)
from whatsorder.utils import normalize_phone, parse_count

logger = logging.getLogger(__name__)

TOP_ITEMS_LIMIT = 5


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _new_order_id(now: datetime) -> str:
    suffix = "".join(random.choices(string.ascii_uppercase + string.digits, k=4))
    return f"ORD-{int(now.timestamp() * 1000)}-{suffix}"


class OrderLedger:
    """Order records with status and payment-status fields."""

    def __init__(self, clock: Callable[[], datetime] = _utc_now) -> None:
        self._orders: dict[str, OrderRecord] = {}
        self._clock = clock

    def create_order(
        self,
        phone: str,
        items: list[OrderLineItem],
        customer_name: Optional[str] = None,
        delivery_address: str = "",
    ) -> OrderRecord:
        """Create a pending order for the given line items.

        Raises:
            ValueError: If the order has no items.
        """
        if not items:
            raise ValueError("Cannot create an order without items")

        now = self._clock()
        order_id = _new_order_id(now)
        while order_id in self._orders:
            order_id = _new_order_id(now)

        order = OrderRecord(
            order_id=order_id,
            customer_phone=normalize_phone(phone),
            customer_name=customer_name or PLACEHOLDER_NAME,
            items=list(items),
            total_amount=sum(i.line_total for i in items),
            delivery_address=delivery_address,
            order_date=now,
        )
        self._orders[order_id] = order
        logger.info(
            "Order created: %s for %s (%d lines, total %.2f)",
            order_id, order.customer_phone, len(items), order.total_amount,
        )
        return order

    def get_order(self, order_id: str) -> Optional[OrderRecord]:
        return self._orders.get(order_id.strip().upper())

    def find_by_short_code(self, short_code: str) -> Optional[OrderRecord]:
        """Most recent order whose id ends with ``-<short_code>`` (case-insensitive)."""
        code = short_code.strip().upper()
        if not code:
            return None
        if code.startswith("ORD-"):
            return self.get_order(code)
        matches = [o for o in self._newest_first() if o.order_id.endswith(f"-{code}")]
        return matches[0] if matches else None

    def _newest_first(self) -> list[OrderRecord]:
        # ties on order_date resolve to the most recently created order first
        return sorted(reversed(list(self._orders.values())), key=lambda o: o.order_date, reverse=True)

    def orders_for_customer(self, phone: str, limit: int = 5) -> list[OrderRecord]:
        key = normalize_phone(phone)
        return [o for o in self._newest_first() if o.customer_phone == key][:limit]

    def orders_for_owner(
        self, order_filter: OrderFilter = OrderFilter.PENDING, limit: int = 500
    ) -> list[OrderRecord]:
        """Orders for the owner view, newest first."""
        orders = self._newest_first()
        if order_filter == OrderFilter.PENDING:
            orders = [o for o in orders if o.status == OrderStatus.PENDING]
        elif order_filter == OrderFilter.COMPLETED:
            orders = [o for o in orders if o.status == OrderStatus.COMPLETED]
        elif order_filter == OrderFilter.TODAY:
            today = self._clock().date()
            orders = [o for o in orders if o.order_date.date() == today]
        return orders[:limit]

    def resolve_owner_reference(self, reference: str) -> Optional[OrderRecord]:
        """Find an order from whatever the owner typed.

        Tried in order: full order id, short code, 1-based position in the
        pending list, then a substring of a pending order id.
        """
        ref = reference.strip()
        order = self.get_order(ref) or self.find_by_short_code(ref)
        if order is not None:
            return order

        pending = self.orders_for_owner(OrderFilter.PENDING, limit=50)
        position = parse_count(ref) if ref.isdecimal() else None
        if position is not None and 1 <= position <= len(pending):
            return pending[position - 1]

        lowered = ref.lower()
        for candidate in pending:
            if lowered and lowered in candidate.order_id.lower():
                return candidate
        return None

    def update_status(self, order_id: str, status: OrderStatus) -> Optional[OrderRecord]:
        order = self.get_order(order_id)
        if order is None:
            return None
        updated = order.model_copy(update={"status": status})
        self._orders[updated.order_id] = updated
        logger.info("Order %s status -> %s", updated.order_id, status.value)
        return updated

    def update_payment(
        self,
        order_id: str,
        payment_status: PaymentStatus,
        method: Optional[PaymentMethod] = None,
        payment_id: Optional[str] = None,
    ) -> Optional[OrderRecord]:
        order = self.get_order(order_id)
        if order is None:
            return None
        changes: dict = {"payment_status": payment_status}
        if method is not None:
            changes["payment_method"] = method
        if payment_id:
            changes["payment_id"] = payment_id
        updated = order.model_copy(update=changes)
        self._orders[updated.order_id] = updated
        logger.info("Order %s payment -> %s", updated.order_id, payment_status.value)
        return updated

    def latest_order_for(self, phone: str) -> Optional[OrderRecord]:
        orders = self.orders_for_customer(phone, limit=1)
        return orders[0] if orders else None

    def latest_unpaid_order_for(self, phone: str) -> Optional[OrderRecord]:
        """Newest non-cancelled order of this customer that is not yet paid."""
        key = normalize_phone(phone)
        for order in self._newest_first():
            if (
                order.customer_phone == key
                and order.status != OrderStatus.CANCELLED
                and order.payment_status in (PaymentStatus.PENDING, PaymentStatus.COD)
            ):
                return order
        return None

    def daily_stats(self, day: Optional[date] = None) -> DailyStats:
        day = day or self._clock().date()
        orders = [o for o in self._orders.values() if o.order_date.date() == day]

        counts: Counter = Counter()
        for order in orders:
            for item in order.items:
                counts[item.name] += item.quantity

        return DailyStats(
            date=day.isoformat(),
            total_orders=len(orders),
            pending_orders=sum(1 for o in orders if o.status == OrderStatus.PENDING),
            completed_orders=sum(1 for o in orders if o.status == OrderStatus.COMPLETED),
            cancelled_orders=sum(1 for o in orders if o.status == OrderStatus.CANCELLED),
            total_revenue=sum(o.total_amount for o in orders),
            top_items=[TopItem(name=n, count=c) for n, c in counts.most_common(TOP_ITEMS_LIMIT)],
        )

    def reset(self) -> None:
        """Clear all orders. Used by test fixtures for isolation."""
        self._orders.clear()
