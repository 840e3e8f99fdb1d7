from __future__ import annotations

import pytest
from services.storefront.app.config import shipping_fee_cents, subscription_interval_days
from services.storefront.app.services.factory import get_order_finalizer
from sqlalchemy.orm import Session


def test_shipping_fee_has_no_default(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("STOREFRONT_SHIPPING_FEE_CENTS", raising=False)

    with pytest.raises(ValueError, match="STOREFRONT_SHIPPING_FEE_CENTS is required"):
        shipping_fee_cents()


@pytest.mark.parametrize("raw", ["free", "-1", "4.99"])
def test_shipping_fee_must_be_non_negative_integer(
    monkeypatch: pytest.MonkeyPatch, raw: str
) -> None:
    monkeypatch.setenv("STOREFRONT_SHIPPING_FEE_CENTS", raw)

    with pytest.raises(ValueError):
        shipping_fee_cents()


def test_zero_fee_is_allowed(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("STOREFRONT_SHIPPING_FEE_CENTS", " 0 ")
    assert shipping_fee_cents() == 0


def test_subscription_interval_defaults_to_thirty_days(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("STOREFRONT_SUBSCRIPTION_INTERVAL_DAYS", raising=False)
    assert subscription_interval_days() == 30

    monkeypatch.setenv("STOREFRONT_SUBSCRIPTION_INTERVAL_DAYS", "0")
    with pytest.raises(ValueError):
        subscription_interval_days()


def test_factory_reads_fee_at_call_time(db: Session, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("STOREFRONT_SHIPPING_FEE_CENTS", "799")
    assert get_order_finalizer(db) is not None

    monkeypatch.delenv("STOREFRONT_SHIPPING_FEE_CENTS")
    with pytest.raises(ValueError):
        get_order_finalizer(db)
