"""Authorization checks run at the top of every mutation and owner-scoped read.

These mirror the storefront's row-level security policies:

- regions and products are publicly readable;
- users manage their own cart and saved addresses;
- users create and read their own orders, subscriptions and order items;
- only staff move orders through fulfilment.

Staff act with the service role and pass every owner check.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from services.storefront.app.services.errors import NotAuthorizedError


class Role(str, Enum):
    CUSTOMER = "customer"
    STAFF = "staff"


@dataclass(frozen=True, slots=True)
class Principal:
    user_id: str
    role: Role = Role.CUSTOMER

    @property
    def is_staff(self) -> bool:
        return self.role is Role.STAFF


def require_owner(principal: Principal, owner_id: str | None, *, action: str) -> None:
    if principal.is_staff:
        return
    if owner_id is None or principal.user_id != owner_id:
        raise NotAuthorizedError(principal.user_id, action)


def require_staff(principal: Principal, *, action: str) -> None:
    if not principal.is_staff:
        raise NotAuthorizedError(principal.user_id, action)
