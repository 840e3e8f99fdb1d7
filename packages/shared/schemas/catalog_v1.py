"""Shared catalogue schema (v1).

Regions and products as clients see them. Prices are always integer cents.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class ProductCategoryV1(str, Enum):
    FEATURED = "featured"
    ORIGINALS = "originals"


class ProductTypeV1(str, Enum):
    SUBSCRIPTION = "subscription"
    ONE_TIME = "one_time"


class RoastLevelV1(str, Enum):
    LIGHT = "light"
    MEDIUM = "medium"
    DARK = "dark"


class RegionV1(BaseModel):
    id: str
    name: str
    code: str
    flag: str
    currency: str
    free_shipping_threshold_cents: int = Field(..., ge=0)


class ProductV1(BaseModel):
    id: str
    name: str
    slug: str
    description: str
    price_cents: int = Field(..., ge=0)
    category: ProductCategoryV1
    roast_level: RoastLevelV1 | None = None
    weight_oz: int
    bean_type: str
    product_type: ProductTypeV1
    highlight_color: str
    region_id: str
    in_stock: bool
