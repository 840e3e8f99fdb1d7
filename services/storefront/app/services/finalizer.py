"""Order finalization: turn a user's cart into an immutable, priced order.

Finalization is one database transaction. Everything is read and validated first (cart,
catalogue snapshot, stock, region, totals); only then are the order, its items and the
idempotency ledger row written and the cart rows deleted, all in a single commit. Any
failure rolls the whole transaction back, so a failed attempt leaves the cart untouched
and no order behind.

Resubmitting with an idempotency key that already produced an order returns that order
instead of creating another.
"""

from __future__ import annotations

from dataclasses import dataclass
from uuid import uuid4

import structlog
from packages.shared.schemas.events import EntityTypeV1, EventTypeV1
from packages.shared.schemas.order_v1 import OrderStatusV1, OrderV1, ShippingAddressV1
from services.storefront.app.db.models import (
    CartItem,
    Order,
    OrderItem,
    OrderRequest,
    Region,
    User,
)
from services.storefront.app.services.addresses import require_complete
from services.storefront.app.services.audit import ensure_user, log_event
from services.storefront.app.services.authz import Principal, require_owner, require_staff
from services.storefront.app.services.cart import AggregatedCart, CartLine, aggregate, merge_lines
from services.storefront.app.services.catalog import CatalogReader, SqlCatalogReader, get_region
from services.storefront.app.services.errors import (
    CartChangedError,
    EmptyCartError,
    MissingIdempotencyKeyError,
    MixedRegionCartError,
    NotFoundError,
    OutOfStockError,
)
from services.storefront.app.services.money import Money
from services.storefront.app.services.orders import order_to_v1
from services.storefront.app.services.pricing import OrderTotals, price_order
from services.storefront.app.services.status import validate_transition
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

logger = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class CartQuote:
    cart: AggregatedCart
    region: Region
    totals: OrderTotals


class OrderFinalizer:
    def __init__(
        self,
        db: Session,
        *,
        shipping_fee: Money,
        catalog: CatalogReader | None = None,
    ) -> None:
        self._db = db
        self._shipping_fee = shipping_fee
        self._catalog = catalog or SqlCatalogReader(db, lock_rows=True)
        self._quote_catalog = catalog or SqlCatalogReader(db)

    def quote(
        self, principal: Principal, user_id: str, *, region_id: str | None = None
    ) -> CartQuote:
        """Price the current cart without writing anything.

        Products that disappeared from the catalogue are dropped and reported in
        ``cart.dropped`` rather than failing the quote.
        """

        require_owner(principal, user_id, action="view this cart")

        lines = merge_lines(user_id, [_cart_line(row) for row in self._cart_rows(user_id)])
        cart = aggregate(lines, self._quote_catalog.snapshot(line.product_id for line in lines))
        if not cart.lines:
            raise EmptyCartError(user_id)

        region = self._resolve_region(cart, region_id)
        return CartQuote(cart=cart, region=region, totals=self._price(cart, region))

    def finalize_order(
        self,
        principal: Principal,
        *,
        user_id: str,
        shipping_address: ShippingAddressV1,
        idempotency_key: str,
        region_id: str | None = None,
    ) -> OrderV1:
        require_owner(principal, user_id, action="create an order")
        require_complete(shipping_address)

        key = (idempotency_key or "").strip()
        if not key:
            raise MissingIdempotencyKeyError()

        log = logger.bind(user_id=user_id, idempotency_key=key)

        existing = self._order_for_key(user_id, key)
        if existing is not None:
            log.info("Duplicate order submission", order_id=existing.id)
            return order_to_v1(existing)

        try:
            order = self._create_order(user_id, shipping_address, key, region_id)
            self._db.commit()
        except IntegrityError:
            # A concurrent submission with the same key won the race on the ledger row.
            self._db.rollback()
            existing = self._order_for_key(user_id, key)
            if existing is None:
                raise
            log.info("Duplicate order submission", order_id=existing.id)
            return order_to_v1(existing)
        except Exception as e:
            self._db.rollback()
            log.warning("Order finalization failed", error=str(e), error_type=type(e).__name__)
            raise

        log.info(
            "Order finalized",
            order_id=order.id,
            subtotal_cents=order.subtotal_cents,
            shipping_cents=order.shipping_cents,
            total_cents=order.total_cents,
        )
        return order_to_v1(order)

    def transition_status(
        self, principal: Principal, order_id: str, new_status: OrderStatusV1
    ) -> OrderV1:
        require_staff(principal, action="change order status")

        try:
            order = self._db.scalars(
                select(Order).where(Order.id == order_id).with_for_update()
            ).first()
            if order is None:
                raise NotFoundError("Order", order_id)

            previous = order.status
            order.status = validate_transition(previous, new_status)
            log_event(
                self._db,
                user_id=order.user_id,
                entity_type=EntityTypeV1.ORDER,
                entity_id=order.id,
                event_type=EventTypeV1.ORDER_STATUS_CHANGED,
                event_payload={
                    "from": previous.value,
                    "to": order.status.value,
                    "actor": principal.user_id,
                },
            )
            self._db.commit()
        except Exception:
            self._db.rollback()
            raise

        logger.info(
            "Order status changed",
            order_id=order.id,
            from_status=previous.value,
            to_status=order.status.value,
        )
        return order_to_v1(order)

    def _create_order(
        self,
        user_id: str,
        address: ShippingAddressV1,
        idempotency_key: str,
        region_id: str | None,
    ) -> Order:
        # Serializes checkouts for one user: a second submission waits here until the first
        # commits and then reads the cart the first one left behind.
        self._lock_user(user_id)
        cart_rows = self._cart_rows(user_id)
        lines = merge_lines(user_id, [_cart_line(row) for row in cart_rows])

        # The catalogue read completes before the order is written.
        snapshot = self._catalog.snapshot(line.product_id for line in lines)
        for line in lines:
            snapshot.require(line.product_id)

        cart = aggregate(lines, snapshot)
        out_of_stock = cart.out_of_stock()
        if out_of_stock:
            raise OutOfStockError(out_of_stock[0].product_id, out_of_stock[0].name)

        region = self._resolve_region(cart, region_id)
        totals = self._price(cart, region)

        order = Order(
            id=uuid4().hex,
            user_id=user_id,
            region_id=region.id,
            currency=region.currency,
            subtotal_cents=totals.subtotal.cents,
            shipping_cents=totals.shipping.cents,
            total_cents=totals.total.cents,
            status=OrderStatusV1.PENDING,
            shipping_name=address.name,
            shipping_street=address.street_1,
            shipping_street_2=address.street_2,
            shipping_city=address.city,
            shipping_state=address.state,
            shipping_country=address.country,
            shipping_postal_code=address.postal_code,
            shipping_phone=address.phone or None,
        )
        # Names and prices are copied so the order survives later catalogue changes.
        order.items = [
            OrderItem(
                id=uuid4().hex,
                product_id=line.product.product_id,
                line_number=n,
                product_name=line.product.name,
                product_price_cents=line.product.price.cents,
                quantity=line.quantity,
                total_cents=line.line_total.cents,
            )
            for n, line in enumerate(cart.lines, start=1)
        ]
        self._db.add(order)
        self._db.add(
            OrderRequest(user_id=user_id, idempotency_key=idempotency_key, order_id=order.id)
        )

        # Every priced row must still be there; otherwise another checkout already used it.
        cleared = self._db.execute(
            delete(CartItem).where(
                CartItem.user_id == user_id, CartItem.id.in_([row.id for row in cart_rows])
            )
        ).rowcount
        if cleared != len(cart_rows):
            raise CartChangedError(user_id)

        log_event(
            self._db,
            user_id=user_id,
            entity_type=EntityTypeV1.ORDER,
            entity_id=order.id,
            event_type=EventTypeV1.ORDER_CREATED,
            event_payload={
                "idempotency_key": idempotency_key,
                "item_count": len(order.items),
                "total_cents": order.total_cents,
            },
        )
        log_event(
            self._db,
            user_id=user_id,
            entity_type=EntityTypeV1.CART,
            entity_id=user_id,
            event_type=EventTypeV1.CART_CLEARED,
            event_payload={"order_id": order.id, "removed_rows": len(cart_rows)},
        )

        self._db.flush()
        return order

    def _lock_user(self, user_id: str) -> None:
        ensure_user(self._db, user_id)
        self._db.execute(select(User.id).where(User.id == user_id).with_for_update())

    def _cart_rows(self, user_id: str) -> list[CartItem]:
        return list(
            self._db.scalars(
                select(CartItem)
                .where(CartItem.user_id == user_id)
                .order_by(CartItem.created_at, CartItem.id)
            )
        )

    def _order_for_key(self, user_id: str, idempotency_key: str) -> Order | None:
        request = self._db.get(OrderRequest, (user_id, idempotency_key))
        if request is None:
            return None
        return self._db.get(Order, request.order_id)

    def _resolve_region(self, cart: AggregatedCart, region_id: str | None) -> Region:
        if region_id is None:
            region_ids = cart.region_ids
            if len(region_ids) > 1:
                raise MixedRegionCartError(sorted(region_ids))
            (region_id,) = region_ids
        return get_region(self._db, region_id)

    def _price(self, cart: AggregatedCart, region: Region) -> OrderTotals:
        return price_order(
            cart.subtotal, Money(region.free_shipping_threshold_cents), self._shipping_fee
        )


def _cart_line(row: CartItem) -> CartLine:
    return CartLine(product_id=row.product_id, quantity=row.quantity)
