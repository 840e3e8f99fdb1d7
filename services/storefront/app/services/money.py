"""Integer-cent money arithmetic.

All financial totals are computed in minor units. Floats never enter the computation, and
every result is kept inside the range of the 32-bit INTEGER columns it is stored in.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from services.storefront.app.services.errors import MoneyError

MAX_CENTS = 2**31 - 1


def _checked(cents: int) -> int:
    if cents < 0:
        raise MoneyError(f"Amount cannot be negative: {cents}")
    if cents > MAX_CENTS:
        raise MoneyError(f"Amount overflows {MAX_CENTS} cents: {cents}")
    return cents


@dataclass(frozen=True, slots=True, order=True)
class Money:
    cents: int

    def __post_init__(self) -> None:
        # bool is an int subclass; reject it along with floats and strings.
        if isinstance(self.cents, bool) or not isinstance(self.cents, int):
            raise MoneyError(f"Amount must be integer cents, got {self.cents!r}")
        _checked(self.cents)

    @classmethod
    def zero(cls) -> Money:
        return cls(0)

    @classmethod
    def sum(cls, amounts: Iterable[Money]) -> Money:
        total = cls.zero()
        for amount in amounts:
            total = total + amount
        return total

    def __add__(self, other: Money) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        return Money(_checked(self.cents + other.cents))

    def __sub__(self, other: Money) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        return Money(_checked(self.cents - other.cents))

    def times(self, quantity: int) -> Money:
        if isinstance(quantity, bool) or not isinstance(quantity, int):
            raise MoneyError(f"Quantity must be an integer, got {quantity!r}")
        return Money(_checked(self.cents * quantity))

    def is_zero(self) -> bool:
        return self.cents == 0

    def display(self) -> str:
        return f"${self.cents // 100}.{self.cents % 100:02d}"
