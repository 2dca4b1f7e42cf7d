"""
Discount arithmetic — pure, shared by the engine and the cart.
"""

from __future__ import annotations

from decimal import Decimal

from cartflow._types import Money, ZERO, clamp, format_money, round_money
from cartflow.discount._types import (
    Discount,
    DiscountError,
    DiscountErrorKind,
    DiscountType,
    Offer,
)

_HUNDRED = Decimal(100)


def compute_amount(
    discount_type: DiscountType,
    value: Money,
    subtotal: Money,
    *,
    cap: Money | None = None,
) -> Money:
    """
    Applied amount for a subtotal.

    Percentage amounts are capped at `cap` when one is set (a zero cap
    means no cap). The result is clamped to [0, subtotal] and rounded to
    the minor unit.

        compute_amount(DiscountType.PERCENTAGE, Decimal(40), Decimal(1000), cap=Decimal(200))
        # Decimal("200.00")
    """
    match discount_type:
        case DiscountType.PERCENTAGE:
            amount = subtotal * value / _HUNDRED
            if cap and amount > cap:
                amount = cap
        case DiscountType.FIXED:
            amount = value
    return round_money(clamp(amount, ZERO, max(subtotal, ZERO)))


def recompute(discount: Discount, subtotal: Money) -> Discount:
    """Same terms, amount for the new subtotal."""
    return discount.with_amount(
        compute_amount(
            discount.discount_type,
            discount.value,
            subtotal,
            cap=discount.max_discount_amount,
        )
    )


def minimum_not_met(min_order_value: Money, subtotal: Money) -> DiscountError:
    return DiscountError(
        kind=DiscountErrorKind.MINIMUM_ORDER_NOT_MET,
        message=f"Minimum order amount of {format_money(min_order_value)} required",
        min_order_value=min_order_value,
        shortfall=round_money(min_order_value - subtotal),
    )


def describe(offer: Offer) -> str:
    """
    Human summary of an offer's terms.

        "40% off up to ₹200 on orders above ₹599"
        "₹50 off on orders above ₹300"
    """
    match offer.discount_type:
        case DiscountType.PERCENTAGE:
            text = f"{format_money(offer.discount_value, symbol='')}% off"
            if offer.max_discount_amount:
                text += f" up to {format_money(offer.max_discount_amount)}"
        case DiscountType.FIXED:
            text = f"{format_money(offer.discount_value)} off"
    if offer.min_order_value > ZERO:
        text += f" on orders above {format_money(offer.min_order_value)}"
    return text


__all__ = ("compute_amount", "recompute", "minimum_not_met", "describe")
