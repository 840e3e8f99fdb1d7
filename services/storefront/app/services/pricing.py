from __future__ import annotations

from dataclasses import dataclass

from services.storefront.app.services.money import Money


@dataclass(frozen=True, slots=True)
class OrderTotals:
    subtotal: Money
    shipping: Money
    total: Money


def shipping_for(subtotal: Money, free_shipping_threshold: Money, shipping_fee: Money) -> Money:
    """Flat fee below the region's free-shipping threshold, free at or above it."""

    if subtotal >= free_shipping_threshold:
        return Money.zero()
    return shipping_fee


def price_order(
    subtotal: Money, free_shipping_threshold: Money, shipping_fee: Money
) -> OrderTotals:
    shipping = shipping_for(subtotal, free_shipping_threshold, shipping_fee)
    return OrderTotals(subtotal=subtotal, shipping=shipping, total=subtotal + shipping)
