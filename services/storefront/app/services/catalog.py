from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Protocol

import structlog
from packages.shared.schemas.catalog_v1 import ProductV1, RegionV1
from services.storefront.app.db.models import Product, Region
from services.storefront.app.services.errors import NotFoundError
from services.storefront.app.services.money import Money
from sqlalchemy import select
from sqlalchemy.orm import Session

logger = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class ProductSnapshot:
    product_id: str
    name: str
    price: Money
    in_stock: bool
    region_id: str


@dataclass(frozen=True, slots=True)
class CatalogSnapshot:
    """Product prices and stock as of one read, plus the ids that no longer exist."""

    products: Mapping[str, ProductSnapshot] = field(default_factory=dict)
    missing: frozenset[str] = frozenset()

    def require(self, product_id: str) -> ProductSnapshot:
        product = self.products.get(product_id)
        if product is None:
            raise NotFoundError("Product", product_id)
        return product


class CatalogReader(Protocol):
    def snapshot(self, product_ids: Iterable[str]) -> CatalogSnapshot: ...


class SqlCatalogReader:
    def __init__(self, db: Session, *, lock_rows: bool = False) -> None:
        self._db = db
        self._lock_rows = lock_rows

    def snapshot(self, product_ids: Iterable[str]) -> CatalogSnapshot:
        wanted = set(product_ids)
        if not wanted:
            return CatalogSnapshot()

        stmt = select(Product).where(Product.id.in_(wanted))
        if self._lock_rows:
            # Holds the product rows until commit on engines with row locks (ignored by SQLite).
            stmt = stmt.with_for_update()

        products = {
            p.id: ProductSnapshot(
                product_id=p.id,
                name=p.name,
                price=Money(p.price_cents),
                in_stock=p.in_stock,
                region_id=p.region_id,
            )
            for p in self._db.scalars(stmt)
        }
        missing = frozenset(wanted - products.keys())
        if missing:
            logger.warning("Catalog snapshot missing products", product_ids=sorted(missing))

        return CatalogSnapshot(products=products, missing=missing)


def get_region(db: Session, region_id: str) -> Region:
    region = db.get(Region, region_id)
    if region is None:
        raise NotFoundError("Region", region_id)
    return region


def list_regions(db: Session) -> list[RegionV1]:
    rows = db.scalars(select(Region).order_by(Region.name)).all()
    return [region_to_v1(r) for r in rows]


def list_products(db: Session, region_id: str | None = None) -> list[ProductV1]:
    """In-stock products, optionally limited to one region."""

    stmt = select(Product).where(Product.in_stock.is_(True))
    if region_id is not None:
        stmt = stmt.where(Product.region_id == region_id)
    rows = db.scalars(stmt.order_by(Product.category, Product.name)).all()
    return [product_to_v1(p) for p in rows]


def region_to_v1(region: Region) -> RegionV1:
    return RegionV1(
        id=region.id,
        name=region.name,
        code=region.code,
        flag=region.flag,
        currency=region.currency,
        free_shipping_threshold_cents=region.free_shipping_threshold_cents,
    )


def product_to_v1(product: Product) -> ProductV1:
    return ProductV1(
        id=product.id,
        name=product.name,
        slug=product.slug,
        description=product.description,
        price_cents=product.price_cents,
        category=product.category,
        roast_level=product.roast_level,
        weight_oz=product.weight_oz,
        bean_type=product.bean_type,
        product_type=product.product_type,
        highlight_color=product.highlight_color,
        region_id=product.region_id,
        in_stock=product.in_stock,
    )
