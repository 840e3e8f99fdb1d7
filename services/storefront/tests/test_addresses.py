from __future__ import annotations

import pytest
from conftest import Catalog
from packages.shared.schemas.order_v1 import ShippingAddressV1
from services.storefront.app.services import addresses, cart_items
from services.storefront.app.services.authz import Principal
from services.storefront.app.services.errors import (
    AddressLimitError,
    InvalidAddressError,
    MissingShippingAddressError,
    NotAuthorizedError,
    NotFoundError,
)
from services.storefront.app.services.finalizer import OrderFinalizer
from services.storefront.app.services.money import Money
from sqlalchemy.orm import Session

USER = Principal(user_id="u-1")


def _address(street: str = "1 Loop St", **overrides: str) -> ShippingAddressV1:
    fields = {
        "name": "Ada",
        "street_1": street,
        "city": "Tashkent",
        "country": "UZ",
        "postal_code": "100000",
    }
    fields.update(overrides)
    return ShippingAddressV1(**fields)


def test_same_address_is_stored_once(db: Session) -> None:
    first = addresses.save_address(db, USER, "u-1", _address())
    again = addresses.save_address(db, USER, "u-1", _address(name="Ada L."))

    assert again == first
    assert len(addresses.list_addresses(db, USER, "u-1")) == 1


def test_at_most_three_addresses(db: Session) -> None:
    for n in range(addresses.MAX_SAVED_ADDRESSES):
        addresses.save_address(db, USER, "u-1", _address(f"{n} Loop St"))

    with pytest.raises(AddressLimitError):
        addresses.save_address(db, USER, "u-1", _address("99 Loop St"))


def test_incomplete_address_is_rejected(db: Session) -> None:
    with pytest.raises(InvalidAddressError) as exc_info:
        addresses.save_address(db, USER, "u-1", _address(city=" "))

    assert exc_info.value.missing_field == "city"


def test_delete_address(db: Session) -> None:
    address_id = addresses.save_address(db, USER, "u-1", _address())

    with pytest.raises(NotAuthorizedError):
        addresses.delete_address(db, Principal(user_id="u-2"), address_id)

    addresses.delete_address(db, USER, address_id)
    assert addresses.list_addresses(db, USER, "u-1") == []


def test_inline_address_wins_over_saved(db: Session) -> None:
    saved_id = addresses.save_address(db, USER, "u-1", _address())
    inline = _address("2 Other Rd")

    resolved = addresses.resolve_shipping_address(
        db, "u-1", address=inline, saved_address_id=saved_id
    )
    assert resolved.street_1 == "2 Other Rd"


def test_saved_address_of_another_user_is_not_found(db: Session) -> None:
    saved_id = addresses.save_address(db, USER, "u-1", _address())

    with pytest.raises(NotFoundError):
        addresses.resolve_shipping_address(db, "u-2", saved_address_id=saved_id)


def test_no_address_at_all_is_reported_as_missing(db: Session) -> None:
    with pytest.raises(MissingShippingAddressError) as exc_info:
        addresses.resolve_shipping_address(db, "u-1")

    assert "No shipping address was given" in str(exc_info.value)
    assert "name" not in str(exc_info.value)


def test_checkout_with_saved_address(db: Session, catalog: Catalog) -> None:
    saved_id = addresses.save_address(db, USER, "u-1", _address(state="Tashkent Region"))
    cart_items.add_item(db, USER, "u-1", catalog.coffee_a)

    shipping = addresses.resolve_shipping_address(db, "u-1", saved_address_id=saved_id)
    order = OrderFinalizer(db, shipping_fee=Money(500)).finalize_order(
        USER, user_id="u-1", shipping_address=shipping, idempotency_key="saved-1"
    )

    assert order.shipping_address.state == "Tashkent Region"
    assert order.shipping_address.display_line() == (
        "1 Loop St, Tashkent, Tashkent Region, UZ, 100000"
    )
