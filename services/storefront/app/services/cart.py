"""Cart aggregation: merge cart rows by product and price them against a catalogue snapshot."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from services.storefront.app.services.catalog import CatalogSnapshot, ProductSnapshot
from services.storefront.app.services.errors import EmptyCartError, InvalidQuantityError
from services.storefront.app.services.money import Money


@dataclass(frozen=True, slots=True)
class CartLine:
    product_id: str
    quantity: int


@dataclass(frozen=True, slots=True)
class PricedLine:
    product: ProductSnapshot
    quantity: int
    line_total: Money


@dataclass(frozen=True, slots=True)
class AggregatedCart:
    lines: tuple[PricedLine, ...]
    subtotal: Money
    # Products that vanished between reading the cart and reading the catalogue.
    dropped: tuple[str, ...] = ()

    @property
    def region_ids(self) -> set[str]:
        return {line.product.region_id for line in self.lines}

    def out_of_stock(self) -> list[ProductSnapshot]:
        return [line.product for line in self.lines if not line.product.in_stock]


def merge_lines(user_id: str, rows: Iterable[CartLine]) -> list[CartLine]:
    """Merge rows by product, keeping the position of each product's first row.

    Raises EmptyCartError when there are no rows at all.
    """

    merged: dict[str, int] = {}
    for row in rows:
        if row.quantity < 1:
            raise InvalidQuantityError(row.quantity)
        merged[row.product_id] = merged.get(row.product_id, 0) + row.quantity

    if not merged:
        raise EmptyCartError(user_id)

    return [CartLine(product_id=pid, quantity=qty) for pid, qty in merged.items()]


def aggregate(lines: list[CartLine], snapshot: CatalogSnapshot) -> AggregatedCart:
    """Price merged lines; lines whose product is missing from the snapshot are dropped."""

    priced: list[PricedLine] = []
    dropped: list[str] = []
    for line in lines:
        product = snapshot.products.get(line.product_id)
        if product is None:
            dropped.append(line.product_id)
            continue
        priced.append(
            PricedLine(
                product=product,
                quantity=line.quantity,
                line_total=product.price.times(line.quantity),
            )
        )

    return AggregatedCart(
        lines=tuple(priced),
        subtotal=Money.sum(p.line_total for p in priced),
        dropped=tuple(dropped),
    )
