from __future__ import annotations

from packages.shared.schemas.order_v1 import ShippingAddressV1
from pydantic import BaseModel


class SubscriptionCreateRequest(BaseModel):
    product_id: str


class SavedAddressOut(BaseModel):
    id: str
    address: ShippingAddressV1
    display_line: str


class SavedAddressCreated(BaseModel):
    id: str
