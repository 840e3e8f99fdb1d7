from __future__ import annotations

from uuid import uuid4

import structlog
from services.storefront.app.db.models import CartItem, Product
from services.storefront.app.services.audit import ensure_user
from services.storefront.app.services.authz import Principal, require_owner
from services.storefront.app.services.errors import InvalidQuantityError, NotFoundError
from sqlalchemy import select
from sqlalchemy.orm import Session

logger = structlog.get_logger(__name__)


def list_cart(db: Session, principal: Principal, user_id: str) -> list[CartItem]:
    require_owner(principal, user_id, action="view this cart")
    return list(
        db.scalars(
            select(CartItem)
            .where(CartItem.user_id == user_id)
            .order_by(CartItem.created_at, CartItem.id)
        )
    )


def add_item(
    db: Session, principal: Principal, user_id: str, product_id: str, quantity: int = 1
) -> CartItem:
    """Add a product to the cart, increasing the quantity if it is already there."""

    require_owner(principal, user_id, action="modify this cart")
    if quantity < 1:
        raise InvalidQuantityError(quantity)
    if db.get(Product, product_id) is None:
        raise NotFoundError("Product", product_id)

    try:
        ensure_user(db, user_id)
        item = _find(db, user_id, product_id)
        if item is None:
            item = CartItem(
                id=uuid4().hex, user_id=user_id, product_id=product_id, quantity=quantity
            )
            db.add(item)
        else:
            item.quantity += quantity
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info("Cart item added", user_id=user_id, product_id=product_id, quantity=item.quantity)
    return item


def set_quantity(
    db: Session, principal: Principal, user_id: str, product_id: str, quantity: int
) -> CartItem | None:
    """Set a line's quantity; zero or less removes the line and returns None."""

    require_owner(principal, user_id, action="modify this cart")
    item = _find(db, user_id, product_id)
    if item is None:
        raise NotFoundError("CartItem", product_id)

    try:
        if quantity <= 0:
            db.delete(item)
        else:
            item.quantity = quantity
        db.commit()
    except Exception:
        db.rollback()
        raise

    if quantity <= 0:
        logger.info("Cart item removed", user_id=user_id, product_id=product_id)
        return None
    return item


def remove_item(db: Session, principal: Principal, user_id: str, product_id: str) -> None:
    require_owner(principal, user_id, action="modify this cart")
    item = _find(db, user_id, product_id)
    if item is None:
        raise NotFoundError("CartItem", product_id)

    try:
        db.delete(item)
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info("Cart item removed", user_id=user_id, product_id=product_id)


def clear_cart(db: Session, principal: Principal, user_id: str) -> int:
    """Delete every cart row for the user. Safe to call repeatedly."""

    require_owner(principal, user_id, action="modify this cart")
    rows = list_cart(db, principal, user_id)
    try:
        for row in rows:
            db.delete(row)
        db.commit()
    except Exception:
        db.rollback()
        raise
    return len(rows)


def _find(db: Session, user_id: str, product_id: str) -> CartItem | None:
    return db.scalars(
        select(CartItem).where(CartItem.user_id == user_id, CartItem.product_id == product_id)
    ).first()
