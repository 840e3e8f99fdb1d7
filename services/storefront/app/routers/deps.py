from __future__ import annotations

from fastapi import Header, HTTPException
from services.storefront.app.services.authz import Principal, Role


def get_principal(
    x_user_id: str = Header(..., min_length=1),
    x_user_role: str = Header("customer"),
) -> Principal:
    """Identity is resolved upstream; the gateway forwards it in these headers."""

    try:
        role = Role(x_user_role.strip().lower())
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Unknown role: {x_user_role}") from e

    return Principal(user_id=x_user_id, role=role)
