from __future__ import annotations

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import structlog
from packages.shared.schemas.catalog_v1 import ProductTypeV1
from packages.shared.schemas.events import EntityTypeV1, EventTypeV1
from packages.shared.schemas.order_v1 import SubscriptionStatusV1, SubscriptionV1
from services.storefront.app.db.models import Product, Subscription
from services.storefront.app.services.audit import ensure_user, log_event
from services.storefront.app.services.authz import Principal, require_owner
from services.storefront.app.services.errors import (
    DuplicateSubscriptionError,
    NotFoundError,
    OutOfStockError,
    ProductTypeError,
)
from services.storefront.app.services.status import validate_subscription_transition
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

logger = structlog.get_logger(__name__)


class SubscriptionService:
    """Subscription lifecycle, independent of orders.

    Each (user, product) pair has at most one subscription. Active subscriptions carry a
    next delivery date one interval out; pausing or cancelling clears it. Subscribing again
    after a cancellation restarts the existing row.
    """

    def __init__(self, db: Session, *, interval_days: int) -> None:
        self._db = db
        self._interval = timedelta(days=interval_days)

    def list_for_user(self, principal: Principal, user_id: str) -> list[SubscriptionV1]:
        require_owner(principal, user_id, action="read subscriptions")
        rows = self._db.scalars(
            select(Subscription)
            .where(Subscription.user_id == user_id)
            .order_by(Subscription.created_at, Subscription.id)
        ).all()
        return [subscription_to_v1(row) for row in rows]

    def subscribe(self, principal: Principal, user_id: str, product_id: str) -> SubscriptionV1:
        require_owner(principal, user_id, action="create a subscription")

        product = self._db.get(Product, product_id)
        if product is None:
            raise NotFoundError("Product", product_id)
        if product.product_type != ProductTypeV1.SUBSCRIPTION:
            raise ProductTypeError(product_id, ProductTypeV1.SUBSCRIPTION.value)
        if not product.in_stock:
            raise OutOfStockError(product.id, product.name)

        existing = self._db.scalars(
            select(Subscription).where(
                Subscription.user_id == user_id, Subscription.product_id == product_id
            )
        ).first()
        if existing is not None:
            if existing.status != SubscriptionStatusV1.CANCELLED:
                raise DuplicateSubscriptionError(user_id, product_id)
            return self._reactivate(principal, existing)

        try:
            ensure_user(self._db, user_id)
            sub = Subscription(
                id=uuid4().hex,
                user_id=user_id,
                product_id=product_id,
                status=SubscriptionStatusV1.ACTIVE,
                next_delivery=self._next_delivery(),
            )
            self._db.add(sub)
            log_event(
                self._db,
                user_id=user_id,
                entity_type=EntityTypeV1.SUBSCRIPTION,
                entity_id=sub.id,
                event_type=EventTypeV1.SUBSCRIPTION_CREATED,
                event_payload={"product_id": product_id},
            )
            self._db.commit()
        except IntegrityError as e:
            self._db.rollback()
            raise DuplicateSubscriptionError(user_id, product_id) from e
        except Exception:
            self._db.rollback()
            raise

        logger.info("Subscription created", user_id=user_id, subscription_id=sub.id)
        return subscription_to_v1(sub)

    def pause(self, principal: Principal, subscription_id: str) -> SubscriptionV1:
        return self._transition(principal, subscription_id, SubscriptionStatusV1.PAUSED)

    def resume(self, principal: Principal, subscription_id: str) -> SubscriptionV1:
        return self._transition(principal, subscription_id, SubscriptionStatusV1.ACTIVE)

    def cancel(self, principal: Principal, subscription_id: str) -> SubscriptionV1:
        return self._transition(principal, subscription_id, SubscriptionStatusV1.CANCELLED)

    def _transition(
        self, principal: Principal, subscription_id: str, requested: SubscriptionStatusV1
    ) -> SubscriptionV1:
        sub = self._db.get(Subscription, subscription_id)
        if sub is None:
            raise NotFoundError("Subscription", subscription_id)
        require_owner(principal, sub.user_id, action="update this subscription")

        previous = sub.status
        sub.status = validate_subscription_transition(previous, requested)
        sub.next_delivery = (
            self._next_delivery() if sub.status == SubscriptionStatusV1.ACTIVE else None
        )
        log_event(
            self._db,
            user_id=sub.user_id,
            entity_type=EntityTypeV1.SUBSCRIPTION,
            entity_id=sub.id,
            event_type=EventTypeV1.SUBSCRIPTION_STATUS_CHANGED,
            event_payload={
                "from": previous.value,
                "to": sub.status.value,
                "actor": principal.user_id,
            },
        )
        self._db.commit()

        logger.info(
            "Subscription status changed",
            subscription_id=sub.id,
            from_status=previous.value,
            to_status=sub.status.value,
        )
        return subscription_to_v1(sub)

    def _reactivate(self, principal: Principal, sub: Subscription) -> SubscriptionV1:
        # Cancellation ends a subscription for good; subscribing again reuses the
        # (user, product) row as a fresh subscription.
        try:
            sub.status = SubscriptionStatusV1.ACTIVE
            sub.next_delivery = self._next_delivery()
            log_event(
                self._db,
                user_id=sub.user_id,
                entity_type=EntityTypeV1.SUBSCRIPTION,
                entity_id=sub.id,
                event_type=EventTypeV1.SUBSCRIPTION_CREATED,
                event_payload={
                    "product_id": sub.product_id,
                    "reactivated": True,
                    "actor": principal.user_id,
                },
            )
            self._db.commit()
        except Exception:
            self._db.rollback()
            raise

        logger.info("Subscription reactivated", user_id=sub.user_id, subscription_id=sub.id)
        return subscription_to_v1(sub)

    def _next_delivery(self) -> datetime:
        return datetime.now(timezone.utc) + self._interval


def subscription_to_v1(sub: Subscription) -> SubscriptionV1:
    return SubscriptionV1(
        id=sub.id,
        user_id=sub.user_id,
        product_id=sub.product_id,
        product_name=sub.product.name,
        status=sub.status,
        next_delivery=sub.next_delivery,
        created_at=sub.created_at,
    )
