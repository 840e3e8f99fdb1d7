from __future__ import annotations

from fastapi import APIRouter, Depends, Response
from packages.shared.schemas.order_v1 import ShippingAddressV1, SubscriptionV1
from services.storefront.app.db.deps import get_db
from services.storefront.app.models.account import (
    SavedAddressCreated,
    SavedAddressOut,
    SubscriptionCreateRequest,
)
from services.storefront.app.routers.deps import get_principal
from services.storefront.app.routers.errors import raise_http_error
from services.storefront.app.services import addresses
from services.storefront.app.services.authz import Principal
from services.storefront.app.services.factory import get_subscription_service
from sqlalchemy.orm import Session

router = APIRouter()


@router.get("/v1/subscriptions", response_model=list[SubscriptionV1])
def list_subscriptions(
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> list[SubscriptionV1]:
    try:
        return get_subscription_service(db).list_for_user(principal, principal.user_id)
    except Exception as e:
        raise_http_error(e)


@router.post("/v1/subscriptions", response_model=SubscriptionV1, status_code=201)
def create_subscription(
    payload: SubscriptionCreateRequest,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> SubscriptionV1:
    try:
        service = get_subscription_service(db)
        return service.subscribe(principal, principal.user_id, payload.product_id)
    except Exception as e:
        raise_http_error(e)


@router.post("/v1/subscriptions/{subscription_id}/pause", response_model=SubscriptionV1)
def pause_subscription(
    subscription_id: str,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> SubscriptionV1:
    try:
        return get_subscription_service(db).pause(principal, subscription_id)
    except Exception as e:
        raise_http_error(e)


@router.post("/v1/subscriptions/{subscription_id}/resume", response_model=SubscriptionV1)
def resume_subscription(
    subscription_id: str,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> SubscriptionV1:
    try:
        return get_subscription_service(db).resume(principal, subscription_id)
    except Exception as e:
        raise_http_error(e)


@router.post("/v1/subscriptions/{subscription_id}/cancel", response_model=SubscriptionV1)
def cancel_subscription(
    subscription_id: str,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> SubscriptionV1:
    try:
        return get_subscription_service(db).cancel(principal, subscription_id)
    except Exception as e:
        raise_http_error(e)


@router.get("/v1/addresses", response_model=list[SavedAddressOut])
def list_addresses(
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> list[SavedAddressOut]:
    try:
        rows = addresses.list_addresses(db, principal, principal.user_id)
    except Exception as e:
        raise_http_error(e)

    return [
        SavedAddressOut(id=address_id, address=address, display_line=address.display_line())
        for address_id, address in rows
    ]


@router.post("/v1/addresses", response_model=SavedAddressCreated, status_code=201)
def create_address(
    payload: ShippingAddressV1,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> SavedAddressCreated:
    try:
        address_id = addresses.save_address(db, principal, principal.user_id, payload)
    except Exception as e:
        raise_http_error(e)

    return SavedAddressCreated(id=address_id)


@router.delete("/v1/addresses/{address_id}", status_code=204)
def delete_address(
    address_id: str,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> Response:
    try:
        addresses.delete_address(db, principal, address_id)
    except Exception as e:
        raise_http_error(e)

    return Response(status_code=204)
