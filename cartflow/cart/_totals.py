"""
Cart arithmetic — pure selectors, recomputed from scratch on every commit.

    subtotal     = Σ (unit + customizations + add-ons) × quantity
    delivery_fee = 0 if empty
                   0 if not all-orders and subtotal >= free threshold
                   fixed charge otherwise
    tax_amount   = subtotal × gst / 100 if GST applies, else 0
    total        = max(0, subtotal + delivery_fee + tax_amount − discount)
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from decimal import Decimal

from cartflow._types import Money, ZERO, round_money
from cartflow.rules._types import BusinessRules
from cartflow.cart._types import CartLineItem, CartTotals

_HUNDRED = Decimal(100)


def unit_total(line: CartLineItem) -> Money:
    """Price of one unit with everything chosen on it."""
    extras = sum((c.price for c in line.customizations), ZERO)
    extras += sum((a.price for a in line.add_ons), ZERO)
    return line.unit_price + extras


def line_total(line: CartLineItem) -> Money:
    return unit_total(line) * line.quantity


def subtotal(lines: Iterable[CartLineItem]) -> Money:
    return sum((line_total(line) for line in lines), ZERO)


def item_count(lines: Iterable[CartLineItem]) -> int:
    return sum(line.quantity for line in lines)


def delivery_fee(amount: Money, *, empty: bool, rules: BusinessRules) -> Money:
    if empty:
        return ZERO
    charges = rules.delivery
    if not charges.apply_to_all_orders and amount >= charges.free_delivery_threshold:
        return ZERO
    return charges.fixed_charge


def tax_amount(amount: Money, rules: BusinessRules) -> Money:
    if not rules.tax.apply_gst:
        return ZERO
    return round_money(amount * rules.tax.gst_percentage / _HUNDRED)


def grand_total(
    amount: Money,
    fee: Money,
    tax: Money,
    discount: Money,
) -> Money:
    return max(ZERO, amount + fee + tax - discount)


def compute_totals(
    lines: Sequence[CartLineItem],
    rules: BusinessRules,
    discount_amount: Money = ZERO,
) -> CartTotals:
    """Every derived field in one pass. The only way totals are built."""
    amount = subtotal(lines)
    fee = delivery_fee(amount, empty=not lines, rules=rules)
    tax = tax_amount(amount, rules)
    return CartTotals(
        subtotal=amount,
        delivery_fee=fee,
        tax_amount=tax,
        discount_amount=discount_amount,
        total=grand_total(amount, fee, tax, discount_amount),
        item_count=item_count(lines),
    )


__all__ = (
    "unit_total",
    "line_total",
    "subtotal",
    "item_count",
    "delivery_fee",
    "tax_amount",
    "grand_total",
    "compute_totals",
)
