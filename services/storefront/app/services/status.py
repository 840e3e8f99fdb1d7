"""Status transition rules for orders and subscriptions.

Order lifecycle:
    pending -> processing -> shipped -> delivered
    pending -> cancelled
    processing -> cancelled

Subscription lifecycle:
    active <-> paused
    active | paused -> cancelled

Validation is side-effect free; callers apply the new status only after it succeeds.
"""

from __future__ import annotations

from packages.shared.schemas.order_v1 import OrderStatusV1, SubscriptionStatusV1
from services.storefront.app.services.errors import InvalidTransitionError

_ORDER_TRANSITIONS: dict[OrderStatusV1, frozenset[OrderStatusV1]] = {
    OrderStatusV1.PENDING: frozenset({OrderStatusV1.PROCESSING, OrderStatusV1.CANCELLED}),
    OrderStatusV1.PROCESSING: frozenset({OrderStatusV1.SHIPPED, OrderStatusV1.CANCELLED}),
    OrderStatusV1.SHIPPED: frozenset({OrderStatusV1.DELIVERED}),
    OrderStatusV1.DELIVERED: frozenset(),  # Terminal
    OrderStatusV1.CANCELLED: frozenset(),  # Terminal
}

_SUBSCRIPTION_TRANSITIONS: dict[SubscriptionStatusV1, frozenset[SubscriptionStatusV1]] = {
    SubscriptionStatusV1.ACTIVE: frozenset(
        {SubscriptionStatusV1.PAUSED, SubscriptionStatusV1.CANCELLED}
    ),
    SubscriptionStatusV1.PAUSED: frozenset(
        {SubscriptionStatusV1.ACTIVE, SubscriptionStatusV1.CANCELLED}
    ),
    SubscriptionStatusV1.CANCELLED: frozenset(),  # Terminal
}


def allowed_transitions(current: OrderStatusV1) -> frozenset[OrderStatusV1]:
    return _ORDER_TRANSITIONS[OrderStatusV1(current)]


def is_terminal(current: OrderStatusV1) -> bool:
    return not allowed_transitions(current)


def validate_transition(current: OrderStatusV1, requested: OrderStatusV1) -> OrderStatusV1:
    """Return the requested status if the order may move there, else raise.

    Raises InvalidTransitionError for anything outside the lifecycle table, including
    self-transitions and every transition out of a terminal state.
    """

    current = OrderStatusV1(current)
    requested = OrderStatusV1(requested)
    if requested not in _ORDER_TRANSITIONS[current]:
        raise InvalidTransitionError(current.value, requested.value)
    return requested


def validate_subscription_transition(
    current: SubscriptionStatusV1, requested: SubscriptionStatusV1
) -> SubscriptionStatusV1:
    current = SubscriptionStatusV1(current)
    requested = SubscriptionStatusV1(requested)
    if requested not in _SUBSCRIPTION_TRANSITIONS[current]:
        raise InvalidTransitionError(current.value, requested.value)
    return requested
