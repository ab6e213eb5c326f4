"""Subscription tiers and billing-provider product mapping."""

from __future__ import annotations

from datetime import datetime

from certprep.db.base import as_utc, utcnow

FREE = "free"

# Paid tiers in product-matching priority order.
PAID_TIERS = ("premium_monthly", "premium_semi_annual", "premium_annual", "cram_time")

TIERS = (FREE, *PAID_TIERS)

# Estimated monthly revenue per active subscriber, in USD.
MONTHLY_PRICE = {
    "premium_monthly": 12.49,
    "premium_semi_annual": round(49.99 / 6, 2),
    "premium_annual": round(79.99 / 12, 2),
    "cram_time": 9.99,
}


def tier_for_product(product_id: str | None) -> str:
    """Map a store product id onto a tier.

    Exact (case-insensitive) tier names win; otherwise the first tier whose
    name, or name with its first underscore dropped, occurs in the id.
    Unknown products map to ``free``.
    """
    if not product_id:
        return FREE
    lowered = product_id.lower()
    if lowered in PAID_TIERS:
        return lowered
    for tier in PAID_TIERS:
        if tier.replace("_", "", 1) in lowered or tier in lowered:
            return tier
    return FREE


def is_active(expires_at: datetime | None, now: datetime | None = None) -> bool:
    """A subscription with no expiry never lapses."""
    if expires_at is None:
        return True
    return as_utc(expires_at) > (now or utcnow())
