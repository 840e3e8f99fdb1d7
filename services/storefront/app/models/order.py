from __future__ import annotations

from packages.shared.schemas.order_v1 import OrderStatusV1, ShippingAddressV1
from pydantic import BaseModel


class OrderFinalizeRequest(BaseModel):
    # Either inline address fields or a saved address id; inline wins when both are sent.
    shipping_address: ShippingAddressV1 | None = None
    saved_address_id: str | None = None
    region_id: str | None = None


class OrderStatusUpdateRequest(BaseModel):
    status: OrderStatusV1
