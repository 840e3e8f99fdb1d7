from __future__ import annotations

from packages.shared.schemas.events import EntityTypeV1, EventV1
from packages.shared.schemas.order_v1 import (
    OrderItemV1,
    OrderSummaryV1,
    OrderV1,
    ShippingAddressV1,
)
from services.storefront.app.db.models import Order
from services.storefront.app.services.audit import list_events
from services.storefront.app.services.authz import Principal, require_owner
from services.storefront.app.services.errors import NotFoundError
from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload


def order_to_v1(order: Order) -> OrderV1:
    return OrderV1(
        id=order.id,
        user_id=order.user_id,
        region_id=order.region_id,
        currency=order.currency,
        status=order.status,
        subtotal_cents=order.subtotal_cents,
        shipping_cents=order.shipping_cents,
        total_cents=order.total_cents,
        shipping_address=ShippingAddressV1(
            name=order.shipping_name,
            street_1=order.shipping_street,
            street_2=order.shipping_street_2,
            city=order.shipping_city,
            state=order.shipping_state,
            country=order.shipping_country,
            phone=order.shipping_phone or "",
            postal_code=order.shipping_postal_code,
        ),
        items=[
            OrderItemV1(
                id=item.id,
                product_id=item.product_id,
                product_name=item.product_name,
                product_price_cents=item.product_price_cents,
                quantity=item.quantity,
                total_cents=item.total_cents,
            )
            for item in order.items
        ],
        created_at=order.created_at,
        updated_at=order.updated_at,
    )


def _load_order(db: Session, principal: Principal, order_id: str) -> Order:
    order = db.get(Order, order_id)
    if order is None:
        raise NotFoundError("Order", order_id)
    require_owner(principal, order.user_id, action="read this order")
    return order


def get_order(db: Session, principal: Principal, order_id: str) -> OrderV1:
    return order_to_v1(_load_order(db, principal, order_id))


def list_order_summaries(db: Session, principal: Principal, user_id: str) -> list[OrderSummaryV1]:
    """Newest-first order summaries with item counts and product names."""

    require_owner(principal, user_id, action="read orders")
    orders = db.scalars(
        select(Order)
        .where(Order.user_id == user_id)
        .options(selectinload(Order.items))
        .order_by(Order.created_at.desc(), Order.id)
        .limit(200)
    ).all()

    return [
        OrderSummaryV1(
            id=o.id,
            status=o.status,
            total_cents=o.total_cents,
            item_count=len(o.items),
            products=", ".join(item.product_name for item in o.items),
            created_at=o.created_at,
        )
        for o in orders
    ]


def order_timeline(db: Session, principal: Principal, order_id: str) -> list[EventV1]:
    order = _load_order(db, principal, order_id)
    return list_events(db, EntityTypeV1.ORDER, order.id)
