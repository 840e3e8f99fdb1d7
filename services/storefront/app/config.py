from __future__ import annotations

import os


def _int_env(name: str, default: int | None = None, *, minimum: int = 0) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        if default is None:
            raise ValueError(f"{name} is required")
        return default

    try:
        value = int(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from e

    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}, got {value}")
    return value


def shipping_fee_cents() -> int:
    """Flat fee charged below a region's free-shipping threshold.

    Deliberately has no default; set STOREFRONT_SHIPPING_FEE_CENTS.
    """

    return _int_env("STOREFRONT_SHIPPING_FEE_CENTS")


def subscription_interval_days() -> int:
    return _int_env("STOREFRONT_SUBSCRIPTION_INTERVAL_DAYS", 30, minimum=1)
