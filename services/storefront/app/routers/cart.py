from __future__ import annotations

from fastapi import APIRouter, Depends, Response
from services.storefront.app.db.deps import get_db
from services.storefront.app.models.cart import (
    CartItemAddRequest,
    CartItemOut,
    CartItemUpdateRequest,
    CartQuoteLine,
    CartQuoteResponse,
)
from services.storefront.app.routers.deps import get_principal
from services.storefront.app.routers.errors import raise_http_error
from services.storefront.app.services import cart_items
from services.storefront.app.services.authz import Principal
from services.storefront.app.services.factory import get_order_finalizer
from sqlalchemy.orm import Session

router = APIRouter()


@router.get("/v1/cart", response_model=list[CartItemOut])
def get_cart(
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> list[CartItemOut]:
    try:
        rows = cart_items.list_cart(db, principal, principal.user_id)
    except Exception as e:
        raise_http_error(e)

    return [CartItemOut(product_id=r.product_id, quantity=r.quantity) for r in rows]


@router.post("/v1/cart/items", response_model=CartItemOut)
def add_cart_item(
    payload: CartItemAddRequest,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> CartItemOut:
    try:
        item = cart_items.add_item(
            db, principal, principal.user_id, payload.product_id, payload.quantity
        )
    except Exception as e:
        raise_http_error(e)

    return CartItemOut(product_id=item.product_id, quantity=item.quantity)


@router.patch("/v1/cart/items/{product_id}", response_model=CartItemOut | None)
def update_cart_item(
    product_id: str,
    payload: CartItemUpdateRequest,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> CartItemOut | None:
    try:
        item = cart_items.set_quantity(
            db, principal, principal.user_id, product_id, payload.quantity
        )
    except Exception as e:
        raise_http_error(e)

    if item is None:
        return None
    return CartItemOut(product_id=item.product_id, quantity=item.quantity)


@router.delete("/v1/cart/items/{product_id}", status_code=204)
def delete_cart_item(
    product_id: str,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> Response:
    try:
        cart_items.remove_item(db, principal, principal.user_id, product_id)
    except Exception as e:
        raise_http_error(e)

    return Response(status_code=204)


@router.get("/v1/cart/quote", response_model=CartQuoteResponse)
def quote_cart(
    region_id: str | None = None,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> CartQuoteResponse:
    try:
        quote = get_order_finalizer(db).quote(principal, principal.user_id, region_id=region_id)
    except Exception as e:
        raise_http_error(e)

    return CartQuoteResponse(
        region_id=quote.region.id,
        currency=quote.region.currency,
        items=[
            CartQuoteLine(
                product_id=line.product.product_id,
                name=line.product.name,
                quantity=line.quantity,
                unit_price_cents=line.product.price.cents,
                line_total_cents=line.line_total.cents,
                in_stock=line.product.in_stock,
            )
            for line in quote.cart.lines
        ],
        dropped_product_ids=list(quote.cart.dropped),
        subtotal_cents=quote.totals.subtotal.cents,
        shipping_cents=quote.totals.shipping.cents,
        total_cents=quote.totals.total.cents,
        free_shipping_threshold_cents=quote.region.free_shipping_threshold_cents,
    )
