from __future__ import annotations

from fastapi import APIRouter, Depends
from packages.shared.schemas.catalog_v1 import ProductV1, RegionV1
from services.storefront.app.db.deps import get_db
from services.storefront.app.services.catalog import list_products, list_regions
from sqlalchemy.orm import Session

router = APIRouter()


@router.get("/v1/regions", response_model=list[RegionV1])
def get_regions(db: Session = Depends(get_db)) -> list[RegionV1]:
    return list_regions(db)


@router.get("/v1/products", response_model=list[ProductV1])
def get_products(region_id: str | None = None, db: Session = Depends(get_db)) -> list[ProductV1]:
    return list_products(db, region_id)
