from __future__ import annotations

from uuid import uuid4

import structlog
from packages.shared.schemas.order_v1 import ShippingAddressV1
from services.storefront.app.db.models import SavedAddress
from services.storefront.app.services.audit import ensure_user
from services.storefront.app.services.authz import Principal, require_owner
from services.storefront.app.services.errors import (
    AddressLimitError,
    InvalidAddressError,
    MissingShippingAddressError,
    NotFoundError,
)
from sqlalchemy import select
from sqlalchemy.orm import Session

logger = structlog.get_logger(__name__)

MAX_SAVED_ADDRESSES = 3


def require_complete(address: ShippingAddressV1) -> ShippingAddressV1:
    missing = address.missing_field()
    if missing is not None:
        raise InvalidAddressError(missing)
    return address


def to_shipping_address(row: SavedAddress) -> ShippingAddressV1:
    return ShippingAddressV1(
        name=row.name,
        street_1=row.street_1,
        street_2=row.street_2,
        city=row.city,
        state=row.state,
        country=row.country,
        phone=row.phone,
        postal_code=row.postal_code,
    )


def list_addresses(
    db: Session, principal: Principal, user_id: str
) -> list[tuple[str, ShippingAddressV1]]:
    require_owner(principal, user_id, action="read saved addresses")
    rows = db.scalars(
        select(SavedAddress)
        .where(SavedAddress.user_id == user_id)
        .order_by(SavedAddress.created_at, SavedAddress.id)
    ).all()
    return [(row.id, to_shipping_address(row)) for row in rows]


def save_address(
    db: Session, principal: Principal, user_id: str, address: ShippingAddressV1
) -> str:
    """Store an address for later checkouts and return its id.

    An address matching an existing one on street, city and postal code is not stored
    twice; the existing id is returned instead.
    """

    require_owner(principal, user_id, action="save an address")
    require_complete(address)

    existing = db.scalars(select(SavedAddress).where(SavedAddress.user_id == user_id)).all()
    for row in existing:
        if (
            row.street_1 == address.street_1
            and row.city == address.city
            and row.postal_code == address.postal_code
        ):
            return row.id

    if len(existing) >= MAX_SAVED_ADDRESSES:
        raise AddressLimitError(MAX_SAVED_ADDRESSES)

    try:
        ensure_user(db, user_id)
        address_id = uuid4().hex
        db.add(SavedAddress(id=address_id, user_id=user_id, **address.model_dump()))
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info("Address saved", user_id=user_id, address_id=address_id)
    return address_id


def delete_address(db: Session, principal: Principal, address_id: str) -> None:
    row = db.get(SavedAddress, address_id)
    if row is None:
        raise NotFoundError("SavedAddress", address_id)
    require_owner(principal, row.user_id, action="delete an address")

    db.delete(row)
    db.commit()
    logger.info("Address deleted", user_id=row.user_id, address_id=address_id)


def resolve_shipping_address(
    db: Session,
    user_id: str,
    *,
    address: ShippingAddressV1 | None = None,
    saved_address_id: str | None = None,
) -> ShippingAddressV1:
    """Pick the address an order ships to: inline fields win over a saved address."""

    if address is not None:
        return require_complete(address)

    if saved_address_id is not None:
        row = db.get(SavedAddress, saved_address_id)
        if row is None or row.user_id != user_id:
            raise NotFoundError("SavedAddress", saved_address_id)
        return require_complete(to_shipping_address(row))

    raise MissingShippingAddressError()
