from __future__ import annotations

import argparse
from uuid import uuid4

from packages.shared.schemas.catalog_v1 import ProductCategoryV1, ProductTypeV1, RoastLevelV1
from services.storefront.app.db.database import db_session
from services.storefront.app.db.init_db import init_db
from services.storefront.app.db.models import Product, Region
from sqlalchemy import select
from sqlalchemy.orm import Session

DEFAULT_REGIONS = (
    # id, name, code, flag, currency, free shipping threshold (cents)
    ("uz", "Uzbekistan", "UZ", "🇺🇿", "USD", 4000),
    ("global", "Global", "GLOBAL", "🌎", "USD", 4000),
)

DEFAULT_PRODUCTS = (
    {
        "name": "cron",
        "slug": "cron",
        "description": (
            "Subscribe to Cron, the official membership. Each month you'll receive a "
            "scheduled delivery with a special flavor-of-the-month blend."
        ),
        "price_cents": 3000,
        "category": ProductCategoryV1.FEATURED,
        "roast_level": None,
        "product_type": ProductTypeV1.SUBSCRIPTION,
        "highlight_color": "#00a2c2",
    },
    {
        "name": "[object Object]",
        "slug": "object-object",
        "description": (
            "The interpolation of Caturra and Castillo varietals from Las Cochitas creates "
            "this refreshing citrusy and complex coffee."
        ),
        "price_cents": 2200,
        "category": ProductCategoryV1.ORIGINALS,
        "roast_level": RoastLevelV1.LIGHT,
        "product_type": ProductTypeV1.ONE_TIME,
        "highlight_color": "#ffcd29",
    },
    {
        "name": "segfault",
        "slug": "segfault",
        "description": (
            "A bold and intense coffee that will crash your morning routine in the best way "
            "possible. Dark chocolate and smoky undertones."
        ),
        "price_cents": 2200,
        "category": ProductCategoryV1.ORIGINALS,
        "roast_level": RoastLevelV1.MEDIUM,
        "product_type": ProductTypeV1.ONE_TIME,
        "highlight_color": "#0d99ff",
    },
    {
        "name": "dark mode",
        "slug": "dark-mode",
        "description": (
            "For those who prefer their coffee like their IDE theme. Deep, rich, and "
            "satisfying with hints of caramel."
        ),
        "price_cents": 2200,
        "category": ProductCategoryV1.ORIGINALS,
        "roast_level": RoastLevelV1.DARK,
        "product_type": ProductTypeV1.ONE_TIME,
        "highlight_color": "#14ae5c",
    },
    {
        "name": "404",
        "slug": "404",
        "description": (
            "A flavorful decaf coffee processed in the mountain waters of Brazil to create a "
            "dark chocolatey blend."
        ),
        "price_cents": 2200,
        "category": ProductCategoryV1.ORIGINALS,
        "roast_level": RoastLevelV1.DARK,
        "product_type": ProductTypeV1.ONE_TIME,
        "highlight_color": "#ab5998",
    },
)


def seed_catalog(db: Session, region_id: str = "uz") -> int:
    """Insert the default regions and products that are missing. Returns products added."""

    for rid, name, code, flag, currency, threshold in DEFAULT_REGIONS:
        if db.get(Region, rid) is None:
            db.add(
                Region(
                    id=rid,
                    name=name,
                    code=code,
                    flag=flag,
                    currency=currency,
                    free_shipping_threshold_cents=threshold,
                )
            )
    db.flush()

    existing = set(db.scalars(select(Product.slug)).all())
    added = 0
    for product in DEFAULT_PRODUCTS:
        if product["slug"] in existing:
            continue
        db.add(Product(id=uuid4().hex, region_id=region_id, **product))
        added += 1

    db.commit()
    return added


def main() -> int:
    parser = argparse.ArgumentParser(description="Seed the default storefront catalogue")
    parser.add_argument("--region-id", default="uz", choices=[r[0] for r in DEFAULT_REGIONS])
    args = parser.parse_args()

    init_db()

    db = db_session()
    try:
        added = seed_catalog(db, region_id=args.region_id)
    finally:
        db.close()

    print(f"Seeded {added} products into region {args.region_id}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
