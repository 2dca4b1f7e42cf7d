"""
Discount — offer codes, applied amounts, self-invalidation.

    from cartflow import discount as D

    engine = D.DiscountEngine(catalog.offer_by_code)
    result = await engine.apply(cart, "save50")

    D.describe(offer)   # "40% off up to ₹200 on orders above ₹599"

The cart drops an applied discount by itself once its subtotal falls
below the discount's minimum; see CartStore.
"""

from cartflow.discount._types import (
    DiscountType,
    Offer,
    Discount,
    DiscountErrorKind,
    DiscountError,
)
from cartflow.discount._amount import (
    compute_amount,
    recompute,
    minimum_not_met,
    describe,
)
from cartflow.discount._engine import (
    OfferLookup,
    Clock,
    DiscountEngine,
    normalize_code,
    applied_message,
)

__all__ = (
    # Types
    "DiscountType",
    "Offer",
    "Discount",
    "DiscountErrorKind",
    "DiscountError",
    # Arithmetic
    "compute_amount",
    "recompute",
    "minimum_not_met",
    "describe",
    # Engine
    "OfferLookup",
    "Clock",
    "DiscountEngine",
    "normalize_code",
    "applied_message",
)
