"""Order and payment data models held by the ledger."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from whatsorder.schemas.intent_schema import OrderLineItem


class OrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    READY = "ready"
    COMPLETED = "completed"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    COD = "cod"
    FAILED = "failed"


class PaymentMethod(str, Enum):
    COD = "cod"
    UPI = "upi"
    CARD = "card"
    BANK_TRANSFER = "bank_transfer"
    WALLET = "wallet"


class OrderFilter(str, Enum):
    """Owner-facing order list filters."""
    PENDING = "pending"
    TODAY = "today"
    COMPLETED = "completed"


class OrderRecord(BaseModel):
    """Full order record stored by the ledger."""
    order_id: str
    customer_phone: str
    customer_name: str
    items: list[OrderLineItem]
    total_amount: float
    status: OrderStatus = OrderStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.PENDING
    payment_method: Optional[PaymentMethod] = None
    payment_id: Optional[str] = None
    delivery_address: str = ""
    order_date: datetime

    @property
    def short_code(self) -> str:
        return self.order_id.split("-")[-1]


class TopItem(BaseModel):
    name: str
    count: int


class DailyStats(BaseModel):
    """Owner dashboard summary for one day."""
    date: str
    total_orders: int = 0
    pending_orders: int = 0
    completed_orders: int = 0
    cancelled_orders: int = 0
    total_revenue: float = 0.0
    top_items: list[TopItem] = Field(default_factory=list)
