"""
Cart — line items, derived totals, discount feedback.

    from cartflow import cart as C

    store = C.CartStore(rules)
    store.add_item(C.CartLineItem(item_id="m1", name="Margherita", unit_price=Decimal(199), quantity=2))
    store.totals.total

Totals are rebuilt from scratch after every mutation; the pure selectors
(C.subtotal, C.compute_totals, ...) are the same functions the store uses.
"""

from cartflow.cart._types import (
    CustomizationChoice,
    CartLineItem,
    CartTotals,
    EMPTY_TOTALS,
    CartSnapshot,
    CartErrorKind,
    CartLimitExceeded,
)
from cartflow.cart._line import (
    LineSignature,
    line_signature,
    same_line,
)
from cartflow.cart._totals import (
    unit_total,
    line_total,
    subtotal,
    item_count,
    delivery_fee,
    tax_amount,
    grand_total,
    compute_totals,
)
from cartflow.cart._store import (
    CartStore,
    CartListener,
    DEFAULT_MAX_ITEMS,
    NOTHING_TO_DISCOUNT,
    NO_EFFECT,
)

__all__ = (
    # Types
    "CustomizationChoice",
    "CartLineItem",
    "CartTotals",
    "EMPTY_TOTALS",
    "CartSnapshot",
    "CartErrorKind",
    "CartLimitExceeded",
    # Identity
    "LineSignature",
    "line_signature",
    "same_line",
    # Selectors
    "unit_total",
    "line_total",
    "subtotal",
    "item_count",
    "delivery_fee",
    "tax_amount",
    "grand_total",
    "compute_totals",
    # Store
    "CartStore",
    "CartListener",
    "DEFAULT_MAX_ITEMS",
    "NOTHING_TO_DISCOUNT",
    "NO_EFFECT",
)
