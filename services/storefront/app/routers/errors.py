from __future__ import annotations

from typing import NoReturn

from fastapi import HTTPException
from services.storefront.app.services.errors import (
    AddressLimitError,
    CartChangedError,
    DuplicateSubscriptionError,
    EmptyCartError,
    InvalidAddressError,
    InvalidQuantityError,
    InvalidTransitionError,
    MissingIdempotencyKeyError,
    MissingShippingAddressError,
    MixedRegionCartError,
    MoneyError,
    NotAuthorizedError,
    NotFoundError,
    OutOfStockError,
    ProductTypeError,
)

_STATUS_BY_ERROR: tuple[tuple[type[Exception], int], ...] = (
    (NotAuthorizedError, 403),
    (NotFoundError, 404),
    (EmptyCartError, 409),
    (CartChangedError, 409),
    (OutOfStockError, 409),
    (InvalidTransitionError, 409),
    (MixedRegionCartError, 409),
    (DuplicateSubscriptionError, 409),
    (AddressLimitError, 409),
    (InvalidAddressError, 422),
    (InvalidQuantityError, 422),
    (ProductTypeError, 422),
    (MissingIdempotencyKeyError, 422),
    (MissingShippingAddressError, 422),
    (MoneyError, 422),
)


def raise_http_error(e: Exception) -> NoReturn:
    for error_type, status in _STATUS_BY_ERROR:
        if isinstance(e, error_type):
            raise HTTPException(status_code=status, detail=str(e)) from e

    if isinstance(e, ValueError):
        # Misconfiguration, e.g. a missing STOREFRONT_SHIPPING_FEE_CENTS.
        raise HTTPException(status_code=500, detail=str(e)) from e

    raise HTTPException(status_code=500, detail="Internal Server Error") from e
