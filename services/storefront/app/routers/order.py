from __future__ import annotations

from fastapi import APIRouter, Depends, Header
from packages.shared.schemas.events import EventV1
from packages.shared.schemas.order_v1 import OrderSummaryV1, OrderV1
from services.storefront.app.db.deps import get_db
from services.storefront.app.models.order import OrderFinalizeRequest, OrderStatusUpdateRequest
from services.storefront.app.routers.deps import get_principal
from services.storefront.app.routers.errors import raise_http_error
from services.storefront.app.services.addresses import resolve_shipping_address
from services.storefront.app.services.authz import Principal
from services.storefront.app.services.factory import get_order_finalizer
from services.storefront.app.services.orders import get_order, list_order_summaries, order_timeline
from sqlalchemy.orm import Session

router = APIRouter()


@router.post("/v1/orders", response_model=OrderV1, status_code=201)
def finalize_order(
    payload: OrderFinalizeRequest,
    idempotency_key: str = Header(..., min_length=1),
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> OrderV1:
    try:
        finalizer = get_order_finalizer(db)
        address = resolve_shipping_address(
            db,
            principal.user_id,
            address=payload.shipping_address,
            saved_address_id=payload.saved_address_id,
        )
        return finalizer.finalize_order(
            principal,
            user_id=principal.user_id,
            shipping_address=address,
            idempotency_key=idempotency_key,
            region_id=payload.region_id,
        )
    except Exception as e:
        raise_http_error(e)


@router.get("/v1/orders", response_model=list[OrderSummaryV1])
def list_orders(
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> list[OrderSummaryV1]:
    try:
        return list_order_summaries(db, principal, principal.user_id)
    except Exception as e:
        raise_http_error(e)


@router.get("/v1/orders/{order_id}", response_model=OrderV1)
def read_order(
    order_id: str,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> OrderV1:
    try:
        return get_order(db, principal, order_id)
    except Exception as e:
        raise_http_error(e)


@router.post("/v1/orders/{order_id}/status", response_model=OrderV1)
def transition_order_status(
    order_id: str,
    payload: OrderStatusUpdateRequest,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> OrderV1:
    try:
        finalizer = get_order_finalizer(db)
        return finalizer.transition_status(principal, order_id, payload.status)
    except Exception as e:
        raise_http_error(e)


@router.get("/v1/orders/{order_id}/events", response_model=list[EventV1])
def read_order_events(
    order_id: str,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> list[EventV1]:
    try:
        return order_timeline(db, principal, order_id)
    except Exception as e:
        raise_http_error(e)
