"""
Line identity — when two lines are the same line.

Two lines merge iff item id, size, customizations and the add-on multiset
(id + price) are equal. Order of customizations or add-ons never matters.
"""

from __future__ import annotations

from collections import Counter

from cartflow._types import Money
from cartflow.cart._types import CartLineItem

type LineSignature = tuple[
    str,
    str,
    tuple[tuple[str, str, Money], ...],
    tuple[tuple[tuple[str, Money], int], ...],
]


def line_signature(line: CartLineItem) -> LineSignature:
    """Canonical structural key of a line, ignoring quantity and line id."""
    customizations = tuple(
        sorted((c.category, c.option, c.price) for c in line.customizations)
    )
    add_ons = tuple(sorted(Counter((a.id, a.price) for a in line.add_ons).items()))
    return (line.item_id, line.size, customizations, add_ons)


def same_line(a: CartLineItem, b: CartLineItem) -> bool:
    return line_signature(a) == line_signature(b)


__all__ = ("LineSignature", "line_signature", "same_line")
