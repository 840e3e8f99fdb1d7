from __future__ import annotations

from services.storefront.app.config import shipping_fee_cents, subscription_interval_days
from services.storefront.app.services.finalizer import OrderFinalizer
from services.storefront.app.services.money import Money
from services.storefront.app.services.subscriptions import SubscriptionService
from sqlalchemy.orm import Session


def get_order_finalizer(db: Session) -> OrderFinalizer:
    """Build the finalizer from env vars.

    Raises ValueError when STOREFRONT_SHIPPING_FEE_CENTS is missing or malformed.
    """

    return OrderFinalizer(db, shipping_fee=Money(shipping_fee_cents()))


def get_subscription_service(db: Session) -> SubscriptionService:
    return SubscriptionService(db, interval_days=subscription_interval_days())
