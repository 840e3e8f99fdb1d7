from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

import pytest
from packages.shared.schemas.catalog_v1 import ProductTypeV1
from sqlalchemy.orm import Session


@dataclass
class Catalog:
    # Products in region "uz" (threshold 4000) unless noted.
    coffee_a: str  # 2200
    coffee_b: str  # 3000
    sold_out: str  # 2200, out of stock
    membership: str  # 3000, subscription product
    global_coffee: str  # 1500, region "global" (threshold 8000)


@pytest.fixture()
def db(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Session]:
    db_path = tmp_path / "storefront_test.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite+pysqlite:///{db_path}")
    monkeypatch.setenv("STOREFRONT_DB_AUTO_CREATE", "true")
    monkeypatch.setenv("STOREFRONT_SHIPPING_FEE_CENTS", "500")

    from services.storefront.app.db.database import db_session
    from services.storefront.app.db.init_db import init_db

    init_db()
    session = db_session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def catalog(db: Session) -> Catalog:
    from services.storefront.app.db.models import Product, Region

    db.add(Region(id="uz", name="Uzbekistan", code="UZ", free_shipping_threshold_cents=4000))
    db.add(Region(id="global", name="Global", code="GLOBAL", free_shipping_threshold_cents=8000))
    db.flush()

    def product(pid: str, price: int, region_id: str = "uz", **kwargs: object) -> str:
        db.add(
            Product(id=pid, name=pid, slug=pid, price_cents=price, region_id=region_id, **kwargs)
        )
        return pid

    cat = Catalog(
        coffee_a=product("segfault", 2200),
        coffee_b=product("dark-mode", 3000),
        sold_out=product("404", 2200, in_stock=False),
        membership=product("cron", 3000, product_type=ProductTypeV1.SUBSCRIPTION),
        global_coffee=product("global-blend", 1500, region_id="global"),
    )
    db.commit()
    return cat
