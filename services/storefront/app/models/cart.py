from __future__ import annotations

from pydantic import BaseModel, Field


class CartItemAddRequest(BaseModel):
    product_id: str
    quantity: int = Field(1, ge=1)


class CartItemUpdateRequest(BaseModel):
    # Zero or negative removes the line.
    quantity: int


class CartItemOut(BaseModel):
    product_id: str
    quantity: int


class CartQuoteLine(BaseModel):
    product_id: str
    name: str
    quantity: int
    unit_price_cents: int
    line_total_cents: int
    in_stock: bool


class CartQuoteResponse(BaseModel):
    region_id: str
    currency: str
    items: list[CartQuoteLine]
    dropped_product_ids: list[str] = Field(default_factory=list)
    subtotal_cents: int
    shipping_cents: int
    total_cents: int
    free_shipping_threshold_cents: int
