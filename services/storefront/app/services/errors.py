from __future__ import annotations


class StorefrontError(Exception):
    """Base class for recoverable storefront errors reported back to the caller."""


class MoneyError(StorefrontError, ArithmeticError):
    """Raised when a cent amount would go negative, overflow, or is not an integer."""


class EmptyCartError(StorefrontError):
    def __init__(self, user_id: str) -> None:
        super().__init__(f"Cart is empty for user {user_id}")
        self.user_id = user_id


class OutOfStockError(StorefrontError):
    def __init__(self, product_id: str, product_name: str | None = None) -> None:
        label = f"{product_name!r} ({product_id})" if product_name else product_id
        super().__init__(f"Product {label} is out of stock")
        self.product_id = product_id
        self.product_name = product_name


class NotFoundError(StorefrontError):
    def __init__(self, entity_type: str, entity_id: str) -> None:
        super().__init__(f"{entity_type} not found: {entity_id}")
        self.entity_type = entity_type
        self.entity_id = entity_id


class InvalidTransitionError(StorefrontError):
    def __init__(self, current: str, requested: str) -> None:
        super().__init__(f"Cannot transition from {current} to {requested}")
        self.current = current
        self.requested = requested


class NotAuthorizedError(StorefrontError):
    def __init__(self, user_id: str, action: str) -> None:
        super().__init__(f"User {user_id} is not allowed to {action}")
        self.user_id = user_id
        self.action = action


class InvalidAddressError(StorefrontError):
    def __init__(self, missing_field: str) -> None:
        super().__init__(f"Shipping address {missing_field} can't be empty")
        self.missing_field = missing_field


class AddressLimitError(StorefrontError):
    def __init__(self, limit: int) -> None:
        super().__init__(f"At most {limit} saved addresses are allowed")
        self.limit = limit


class MixedRegionCartError(StorefrontError):
    def __init__(self, region_ids: list[str]) -> None:
        super().__init__(
            "Cart contains products from more than one region: " + ", ".join(sorted(region_ids))
        )
        self.region_ids = region_ids


class MissingIdempotencyKeyError(StorefrontError):
    def __init__(self) -> None:
        super().__init__("An idempotency key is required to place an order")


class InvalidQuantityError(StorefrontError):
    def __init__(self, quantity: int) -> None:
        super().__init__(f"Quantity must be at least 1, got {quantity}")
        self.quantity = quantity


class ProductTypeError(StorefrontError):
    def __init__(self, product_id: str, expected: str) -> None:
        super().__init__(f"Product {product_id} is not a {expected} product")
        self.product_id = product_id
        self.expected = expected


class DuplicateSubscriptionError(StorefrontError):
    def __init__(self, user_id: str, product_id: str) -> None:
        super().__init__(f"User {user_id} already subscribes to product {product_id}")
        self.user_id = user_id
        self.product_id = product_id


class CartChangedError(StorefrontError):
    def __init__(self, user_id: str) -> None:
        super().__init__(f"Cart for user {user_id} changed during checkout; review it and retry")
        self.user_id = user_id


class MissingShippingAddressError(StorefrontError):
    def __init__(self) -> None:
        super().__init__("No shipping address was given: send an address or a saved address id")
