"""Shared order schema (v1).

Orders are immutable snapshots: names, prices and the shipping address are copied at
finalization time and never re-read from the live catalogue.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class OrderStatusV1(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class SubscriptionStatusV1(str, Enum):
    ACTIVE = "active"
    PAUSED = "paused"
    CANCELLED = "cancelled"


# Field label used when reporting the first missing address field.
_REQUIRED_ADDRESS_FIELDS = (
    ("name", "name"),
    ("street_1", "street"),
    ("city", "city"),
    ("country", "country"),
    ("postal_code", "postal code"),
)


class ShippingAddressV1(BaseModel):
    name: str = ""
    street_1: str = ""
    street_2: str = ""
    city: str = ""
    state: str = ""
    country: str = ""
    phone: str = ""
    postal_code: str = ""

    def missing_field(self) -> str | None:
        """Return the label of the first required field that is blank, if any."""

        for attr, label in _REQUIRED_ADDRESS_FIELDS:
            if not getattr(self, attr).strip():
                return label
        return None

    def is_complete(self) -> bool:
        return self.missing_field() is None

    def display_line(self) -> str:
        parts = [self.street_1, self.city, self.state, self.country, self.postal_code]
        return ", ".join(p for p in parts if p)


class OrderItemV1(BaseModel):
    id: str
    # None once the product has been deleted; name and price survive.
    product_id: str | None = None
    product_name: str
    product_price_cents: int
    quantity: int = Field(..., ge=1)
    total_cents: int


class OrderV1(BaseModel):
    id: str
    user_id: str | None = None
    region_id: str
    currency: str
    status: OrderStatusV1

    subtotal_cents: int
    shipping_cents: int
    total_cents: int

    shipping_address: ShippingAddressV1
    items: list[OrderItemV1] = Field(default_factory=list)

    created_at: datetime
    updated_at: datetime


class OrderSummaryV1(BaseModel):
    id: str
    status: OrderStatusV1
    total_cents: int
    item_count: int
    products: str
    created_at: datetime


class SubscriptionV1(BaseModel):
    id: str
    user_id: str
    product_id: str
    product_name: str
    status: SubscriptionStatusV1
    next_delivery: datetime | None = None
    created_at: datetime
