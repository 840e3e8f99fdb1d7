from __future__ import annotations

from datetime import datetime, timezone

from packages.shared.schemas.catalog_v1 import ProductCategoryV1, ProductTypeV1, RoastLevelV1
from packages.shared.schemas.order_v1 import OrderStatusV1, SubscriptionStatusV1
from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _pg_enum(enum_cls: type, name: str) -> Enum:
    # Store the lowercase values, matching the storefront's Postgres enum types.
    return Enum(enum_cls, name=name, values_callable=lambda e: [m.value for m in e])


class Base(DeclarativeBase):
    pass


class Region(Base):
    __tablename__ = "regions"
    __table_args__ = (
        CheckConstraint("free_shipping_threshold_cents >= 0", name="ck_regions_threshold"),
    )

    id: Mapped[str] = mapped_column(String, primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    code: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    flag: Mapped[str] = mapped_column(String, nullable=False, default="🌎")
    currency: Mapped[str] = mapped_column(String, nullable=False, default="USD")
    free_shipping_threshold_cents: Mapped[int] = mapped_column(
        Integer, nullable=False, default=4000
    )

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow
    )


class Product(Base):
    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint("price_cents >= 0", name="ck_products_price"),
        Index("idx_products_region", "region_id"),
        Index("idx_products_category", "category"),
    )

    id: Mapped[str] = mapped_column(String, primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    slug: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    description: Mapped[str] = mapped_column(String, nullable=False, default="")
    price_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    category: Mapped[ProductCategoryV1] = mapped_column(
        _pg_enum(ProductCategoryV1, "product_category"),
        nullable=False,
        default=ProductCategoryV1.ORIGINALS,
    )
    roast_level: Mapped[RoastLevelV1 | None] = mapped_column(
        _pg_enum(RoastLevelV1, "roast_level"), nullable=True
    )
    weight_oz: Mapped[int] = mapped_column(Integer, nullable=False, default=12)
    bean_type: Mapped[str] = mapped_column(String, nullable=False, default="whole beans")
    product_type: Mapped[ProductTypeV1] = mapped_column(
        _pg_enum(ProductTypeV1, "product_type"),
        nullable=False,
        default=ProductTypeV1.ONE_TIME,
    )
    highlight_color: Mapped[str] = mapped_column(String, nullable=False, default="#ff24bd")
    region_id: Mapped[str] = mapped_column(
        ForeignKey("regions.id", ondelete="CASCADE"), nullable=False
    )
    in_stock: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow
    )


class User(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    # Identities are resolved upstream; rows are provisioned lazily by id.
    email: Mapped[str | None] = mapped_column(String, nullable=True, unique=True)
    name: Mapped[str | None] = mapped_column(String, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow
    )


class CartItem(Base):
    __tablename__ = "cart_items"
    __table_args__ = (
        UniqueConstraint("user_id", "product_id", name="uq_cart_items_user_product"),
        CheckConstraint("quantity >= 1", name="ck_cart_items_quantity"),
        Index("idx_cart_items_user", "user_id"),
    )

    id: Mapped[str] = mapped_column(String, primary_key=True)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    product_id: Mapped[str] = mapped_column(
        ForeignKey("products.id", ondelete="CASCADE"), nullable=False
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow
    )


class Order(Base):
    __tablename__ = "orders"
    __table_args__ = (
        CheckConstraint("subtotal_cents >= 0", name="ck_orders_subtotal"),
        CheckConstraint("shipping_cents >= 0", name="ck_orders_shipping"),
        CheckConstraint("total_cents = subtotal_cents + shipping_cents", name="ck_orders_total"),
        Index("idx_orders_user", "user_id"),
        Index("idx_orders_status", "status"),
    )

    id: Mapped[str] = mapped_column(String, primary_key=True)
    user_id: Mapped[str | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    region_id: Mapped[str] = mapped_column(String, nullable=False)
    currency: Mapped[str] = mapped_column(String, nullable=False)

    subtotal_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    shipping_cents: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[OrderStatusV1] = mapped_column(
        _pg_enum(OrderStatusV1, "order_status"),
        nullable=False,
        default=OrderStatusV1.PENDING,
    )

    # Shipping address, denormalized for historical accuracy.
    shipping_name: Mapped[str] = mapped_column(String, nullable=False)
    shipping_street: Mapped[str] = mapped_column(String, nullable=False)
    shipping_street_2: Mapped[str] = mapped_column(String, nullable=False, default="")
    shipping_city: Mapped[str] = mapped_column(String, nullable=False)
    shipping_state: Mapped[str] = mapped_column(String, nullable=False, default="")
    shipping_country: Mapped[str] = mapped_column(String, nullable=False)
    shipping_postal_code: Mapped[str] = mapped_column(String, nullable=False)
    shipping_phone: Mapped[str | None] = mapped_column(String, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow
    )

    items: Mapped[list[OrderItem]] = relationship(
        back_populates="order",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="OrderItem.line_number",
    )


class OrderItem(Base):
    __tablename__ = "order_items"
    __table_args__ = (
        CheckConstraint("quantity >= 1", name="ck_order_items_quantity"),
        Index("idx_order_items_order", "order_id"),
    )

    id: Mapped[str] = mapped_column(String, primary_key=True)
    order_id: Mapped[str] = mapped_column(
        ForeignKey("orders.id", ondelete="CASCADE"), nullable=False
    )
    product_id: Mapped[str | None] = mapped_column(
        ForeignKey("products.id", ondelete="SET NULL"), nullable=True
    )
    line_number: Mapped[int] = mapped_column(Integer, nullable=False)

    # Denormalized for historical accuracy.
    product_name: Mapped[str] = mapped_column(String, nullable=False)
    product_price_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    total_cents: Mapped[int] = mapped_column(Integer, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    order: Mapped[Order] = relationship(back_populates="items")


class OrderRequest(Base):
    """Idempotency ledger: one row per (user, client token) that produced an order."""

    __tablename__ = "order_requests"

    user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    idempotency_key: Mapped[str] = mapped_column(String, primary_key=True)
    order_id: Mapped[str] = mapped_column(
        ForeignKey("orders.id", ondelete="CASCADE"), nullable=False
    )

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)


class Subscription(Base):
    __tablename__ = "subscriptions"
    __table_args__ = (
        UniqueConstraint("user_id", "product_id", name="uq_subscriptions_user_product"),
        Index("idx_subscriptions_user", "user_id"),
        Index("idx_subscriptions_status", "status"),
    )

    id: Mapped[str] = mapped_column(String, primary_key=True)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    product_id: Mapped[str] = mapped_column(
        ForeignKey("products.id", ondelete="CASCADE"), nullable=False
    )
    status: Mapped[SubscriptionStatusV1] = mapped_column(
        _pg_enum(SubscriptionStatusV1, "subscription_status"),
        nullable=False,
        default=SubscriptionStatusV1.ACTIVE,
    )
    next_delivery: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow
    )

    product: Mapped[Product] = relationship()


class SavedAddress(Base):
    __tablename__ = "saved_addresses"
    __table_args__ = (Index("idx_saved_addresses_user", "user_id"),)

    id: Mapped[str] = mapped_column(String, primary_key=True)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    name: Mapped[str] = mapped_column(String, nullable=False)
    street_1: Mapped[str] = mapped_column(String, nullable=False)
    street_2: Mapped[str] = mapped_column(String, nullable=False, default="")
    city: Mapped[str] = mapped_column(String, nullable=False)
    state: Mapped[str] = mapped_column(String, nullable=False, default="")
    country: Mapped[str] = mapped_column(String, nullable=False)
    phone: Mapped[str] = mapped_column(String, nullable=False, default="")
    postal_code: Mapped[str] = mapped_column(String, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)


class EventLog(Base):
    __tablename__ = "event_log"
    __table_args__ = (Index("idx_event_log_entity", "entity_type", "entity_id"),)

    id: Mapped[str] = mapped_column(String, primary_key=True)
    user_id: Mapped[str | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    entity_type: Mapped[str] = mapped_column(String, nullable=False)
    entity_id: Mapped[str] = mapped_column(String, nullable=False)
    event_type: Mapped[str] = mapped_column(String, nullable=False)
    event_payload_json: Mapped[dict] = mapped_column(JSON, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
