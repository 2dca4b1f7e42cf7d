"""
Discount types — offers, applied discounts, validation errors.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum, auto

from cartflow._types import Money, ZERO

# ═══════════════════════════════════════════════════════════════════════════════
# Offer — what the catalog service knows about a code
# ═══════════════════════════════════════════════════════════════════════════════


class DiscountType(Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


@dataclass(frozen=True, slots=True)
class Offer:
    """
    Promotional offer metadata.

    Validity fields are optional; a missing bound or limit never rejects.
    """

    code: str
    title: str
    discount_type: DiscountType
    discount_value: Money
    min_order_value: Money = ZERO
    max_discount_amount: Money | None = None
    description: str = ""
    active: bool = True
    valid_from: datetime | None = None
    valid_until: datetime | None = None
    usage_limit: int | None = None
    usage_count: int = 0


# ═══════════════════════════════════════════════════════════════════════════════
# Discount — an offer applied to a cart
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Discount:
    """
    Applied discount.

    Keeps the offer's terms so the amount can be recomputed against a new
    subtotal; amount is always the value for the current cart.
    """

    code: str
    title: str
    discount_type: DiscountType
    value: Money
    min_order_value: Money = ZERO
    max_discount_amount: Money | None = None
    amount: Money = ZERO

    @classmethod
    def from_offer(cls, offer: Offer, amount: Money) -> Discount:
        return cls(
            code=offer.code,
            title=offer.title,
            discount_type=offer.discount_type,
            value=offer.discount_value,
            min_order_value=offer.min_order_value,
            max_discount_amount=offer.max_discount_amount,
            amount=amount,
        )

    def with_amount(self, amount: Money) -> Discount:
        return replace(self, amount=amount)

    @property
    def has_minimum(self) -> bool:
        return self.min_order_value > ZERO


# ═══════════════════════════════════════════════════════════════════════════════
# Errors
# ═══════════════════════════════════════════════════════════════════════════════


class DiscountErrorKind(Enum):
    """Why a code could not be applied."""

    EMPTY_CODE = auto()
    EMPTY_CART = auto()
    INVALID_CODE = auto()
    NO_EFFECT = auto()
    MINIMUM_ORDER_NOT_MET = auto()
    EXPIRED = auto()
    INACTIVE = auto()
    USAGE_LIMIT = auto()
    TRANSPORT = auto()


@dataclass(frozen=True, slots=True)
class DiscountError:
    """
    Discount refusal.

    min_order_value and shortfall are set only for MINIMUM_ORDER_NOT_MET.
    """

    kind: DiscountErrorKind
    message: str
    min_order_value: Money | None = None
    shortfall: Money | None = None


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "DiscountType",
    "Offer",
    "Discount",
    "DiscountErrorKind",
    "DiscountError",
)
