"""
Cart types — line items, totals and the immutable cart snapshot.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum, auto

from cartflow._types import Money, ZERO
from cartflow.pricing import DEFAULT_SIZE, NOT_APPLICABLE, SelectedAddOn
from cartflow.discount._types import Discount
from cartflow.rules._types import BusinessRules, DEFAULT_RULES

# ═══════════════════════════════════════════════════════════════════════════════
# Line Items
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CustomizationChoice:
    """Chosen option of a legacy customization category."""

    category: str
    option: str
    price: Money = ZERO


@dataclass(frozen=True, slots=True)
class CartLineItem:
    """
    One row of the cart.

    unit_price is already size-adjusted. line_id is assigned by the
    store when the line is added; callers leave it empty.
    """

    item_id: str
    name: str
    unit_price: Money
    quantity: int = 1
    size: str = DEFAULT_SIZE
    food_type: str = NOT_APPLICABLE
    image: str = ""
    customizations: tuple[CustomizationChoice, ...] = ()
    add_ons: tuple[SelectedAddOn, ...] = ()
    line_id: str = ""

    def with_quantity(self, quantity: int) -> CartLineItem:
        return replace(self, quantity=quantity)

    def with_line_id(self, line_id: str) -> CartLineItem:
        return replace(self, line_id=line_id)


# ═══════════════════════════════════════════════════════════════════════════════
# Totals
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CartTotals:
    """Derived amounts. Always computed together, never patched."""

    subtotal: Money = ZERO
    delivery_fee: Money = ZERO
    tax_amount: Money = ZERO
    discount_amount: Money = ZERO
    total: Money = ZERO
    item_count: int = 0


EMPTY_TOTALS = CartTotals()


@dataclass(frozen=True, slots=True)
class CartSnapshot:
    """Cart state after a committed mutation."""

    lines: tuple[CartLineItem, ...] = ()
    discount: Discount | None = None
    rules: BusinessRules = DEFAULT_RULES
    totals: CartTotals = EMPTY_TOTALS

    @property
    def is_empty(self) -> bool:
        return not self.lines

    def line(self, line_id: str) -> CartLineItem | None:
        for line in self.lines:
            if line.line_id == line_id:
                return line
        return None


# ═══════════════════════════════════════════════════════════════════════════════
# Errors
# ═══════════════════════════════════════════════════════════════════════════════


class CartErrorKind(Enum):
    LIMIT_EXCEEDED = auto()
    INVALID_QUANTITY = auto()


@dataclass(frozen=True, slots=True)
class CartLimitExceeded:
    """Adding would push the cart past its item cap (or quantity was < 1)."""

    kind: CartErrorKind
    message: str
    max_items: int
    requested: int


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "CustomizationChoice",
    "CartLineItem",
    "CartTotals",
    "EMPTY_TOTALS",
    "CartSnapshot",
    "CartErrorKind",
    "CartLimitExceeded",
)
