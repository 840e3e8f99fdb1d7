from __future__ import annotations

import pytest
from conftest import Catalog
from services.storefront.app.services import cart_items
from services.storefront.app.services.authz import Principal, Role
from services.storefront.app.services.errors import (
    InvalidQuantityError,
    NotAuthorizedError,
    NotFoundError,
)
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

USER = Principal(user_id="u-1")
OTHER = Principal(user_id="u-2")
STAFF = Principal(user_id="ops-1", role=Role.STAFF)


def _quantities(db: Session, principal: Principal = USER) -> dict[str, int]:
    rows = cart_items.list_cart(db, principal, "u-1")
    return {r.product_id: r.quantity for r in rows}


def test_adding_same_product_increases_quantity(db: Session, catalog: Catalog) -> None:
    cart_items.add_item(db, USER, "u-1", catalog.coffee_a, 1)
    cart_items.add_item(db, USER, "u-1", catalog.coffee_a, 2)
    cart_items.add_item(db, USER, "u-1", catalog.coffee_b)

    assert _quantities(db) == {catalog.coffee_a: 3, catalog.coffee_b: 1}


def test_add_rejects_unknown_product_and_bad_quantity(db: Session, catalog: Catalog) -> None:
    with pytest.raises(NotFoundError):
        cart_items.add_item(db, USER, "u-1", "no-such-coffee")
    with pytest.raises(InvalidQuantityError):
        cart_items.add_item(db, USER, "u-1", catalog.coffee_a, 0)

    assert _quantities(db) == {}


def test_set_quantity_updates_and_zero_removes(db: Session, catalog: Catalog) -> None:
    cart_items.add_item(db, USER, "u-1", catalog.coffee_a)

    item = cart_items.set_quantity(db, USER, "u-1", catalog.coffee_a, 5)
    assert item is not None
    assert item.quantity == 5

    assert cart_items.set_quantity(db, USER, "u-1", catalog.coffee_a, 0) is None
    assert _quantities(db) == {}


def test_remove_missing_line_is_not_found(db: Session, catalog: Catalog) -> None:
    with pytest.raises(NotFoundError):
        cart_items.remove_item(db, USER, "u-1", catalog.coffee_a)


def test_clear_cart_is_repeatable(db: Session, catalog: Catalog) -> None:
    cart_items.add_item(db, USER, "u-1", catalog.coffee_a)
    cart_items.add_item(db, USER, "u-1", catalog.coffee_b)

    assert cart_items.clear_cart(db, USER, "u-1") == 2
    assert cart_items.clear_cart(db, USER, "u-1") == 0


def test_other_users_cannot_touch_the_cart(db: Session, catalog: Catalog) -> None:
    cart_items.add_item(db, USER, "u-1", catalog.coffee_a)

    with pytest.raises(NotAuthorizedError):
        cart_items.list_cart(db, OTHER, "u-1")
    with pytest.raises(NotAuthorizedError):
        cart_items.add_item(db, OTHER, "u-1", catalog.coffee_b)

    assert _quantities(db, STAFF) == {catalog.coffee_a: 1}


def test_failed_quantity_update_rolls_back(
    db: Session, catalog: Catalog, monkeypatch: pytest.MonkeyPatch
) -> None:
    cart_items.add_item(db, USER, "u-1", catalog.coffee_a, 2)

    def failing_commit() -> None:
        raise OperationalError("COMMIT", {}, Exception("disk I/O error"))

    with monkeypatch.context() as m:
        m.setattr(db, "commit", failing_commit)
        with pytest.raises(OperationalError):
            cart_items.set_quantity(db, USER, "u-1", catalog.coffee_a, 5)
        with pytest.raises(OperationalError):
            cart_items.remove_item(db, USER, "u-1", catalog.coffee_a)

    # Nothing half-applied is left in the session to be flushed later.
    assert _quantities(db) == {catalog.coffee_a: 2}
