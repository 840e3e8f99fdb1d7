"""Storefront API service entrypoint."""

from fastapi import FastAPI

from services.storefront.app.db.init_db import init_db
from services.storefront.app.routers.account import router as account_router
from services.storefront.app.routers.cart import router as cart_router
from services.storefront.app.routers.catalog import router as catalog_router
from services.storefront.app.routers.order import router as order_router
from services.storefront.app.utils.logging import configure_logging

app = FastAPI(title="Storefront API")

app.include_router(catalog_router)
app.include_router(cart_router)
app.include_router(order_router)
app.include_router(account_router)


@app.on_event("startup")
def _startup() -> None:
    configure_logging()
    init_db()


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}
