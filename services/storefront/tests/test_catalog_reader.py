from __future__ import annotations

from conftest import Catalog
from services.storefront.app.db.models import Product
from services.storefront.app.services.catalog import (
    SqlCatalogReader,
    list_products,
    list_regions,
)
from services.storefront.app.services.money import Money
from sqlalchemy.orm import Session


def test_snapshot_reads_price_stock_and_region(db: Session, catalog: Catalog) -> None:
    snapshot = SqlCatalogReader(db).snapshot([catalog.coffee_a, catalog.sold_out, "missing"])

    a = snapshot.require(catalog.coffee_a)
    assert a.price == Money(2200)
    assert a.in_stock is True
    assert a.region_id == "uz"

    assert snapshot.require(catalog.sold_out).in_stock is False
    assert snapshot.missing == frozenset({"missing"})


def test_snapshot_is_a_point_in_time_copy(db: Session, catalog: Catalog) -> None:
    snapshot = SqlCatalogReader(db, lock_rows=True).snapshot([catalog.coffee_b])

    db.get(Product, catalog.coffee_b).price_cents = 9999
    db.commit()

    assert snapshot.require(catalog.coffee_b).price == Money(3000)


def test_empty_request_reads_nothing(db: Session) -> None:
    snapshot = SqlCatalogReader(db).snapshot([])

    assert not snapshot.products
    assert not snapshot.missing


def test_list_products_hides_out_of_stock_and_filters_region(db: Session, catalog: Catalog) -> None:
    uz_ids = {p.id for p in list_products(db, "uz")}
    assert catalog.coffee_a in uz_ids
    assert catalog.sold_out not in uz_ids
    assert catalog.global_coffee not in uz_ids

    assert {p.id for p in list_products(db)} >= {catalog.coffee_a, catalog.global_coffee}


def test_list_regions(db: Session, catalog: Catalog) -> None:
    regions = {r.id: r for r in list_regions(db)}

    assert regions["uz"].free_shipping_threshold_cents == 4000
    assert regions["global"].currency == "USD"
