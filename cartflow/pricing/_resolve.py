"""
Price resolution — pure functions, no state.

A size that matches nothing falls back to the flat/base price. The
fallback is deliberate but observable through PriceResolution.matched.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from collections.abc import Iterable

from cartflow.pricing._types import (
    DEFAULT_SIZE,
    AddOn,
    CatalogItem,
    PriceResolution,
    SelectedAddOn,
    SizePrice,
)

logger = logging.getLogger(__name__)


def _lookup(table: Iterable[SizePrice], size: str) -> SizePrice | None:
    for entry in table:
        if entry.size == size:
            return entry
    return None


def resolve_item_price(item: CatalogItem, size: str) -> PriceResolution:
    """Effective unit price of a catalog item in the given size."""
    if not item.size_variations:
        return PriceResolution(item.price)

    for variation in item.size_variations:
        if variation.size == size:
            return PriceResolution(variation.price)

    logger.debug("No %r variation for item %s, using flat price", size, item.id)
    return PriceResolution(item.price, matched=False)


def resolve_add_on_price(add_on: AddOn, size: str) -> PriceResolution:
    """Price of an add-on for the given size."""
    if not add_on.size_pricing:
        return PriceResolution(add_on.price)

    entry = _lookup(add_on.size_pricing, size)
    if entry is None:
        logger.debug("No %r price for add-on %s, using base price", size, add_on.id)
        return PriceResolution(add_on.price, matched=False)
    return PriceResolution(entry.price)


def select_add_on(add_on: AddOn, size: str) -> SelectedAddOn:
    """Snapshot an add-on into a selection priced for `size`."""
    return SelectedAddOn(
        id=add_on.id,
        name=add_on.name,
        price=resolve_add_on_price(add_on, size).price,
        size_pricing=add_on.size_pricing,
        base_price=add_on.price,
    )


def reprice_add_ons(
    selected: Iterable[SelectedAddOn],
    size: str,
) -> tuple[SelectedAddOn, ...]:
    """
    Re-resolve selected add-on prices after a size change.

    Only add-ons that carry a size table are touched; the others keep
    their snapshot price. A size missing from a table falls back to the
    base price when it is known, else keeps the current snapshot.
    """
    repriced: list[SelectedAddOn] = []
    for add_on in selected:
        if not add_on.size_pricing:
            repriced.append(add_on)
            continue
        entry = _lookup(add_on.size_pricing, size)
        if entry is not None:
            price = entry.price
        else:
            logger.debug("No %r price for selected add-on %s", size, add_on.id)
            price = add_on.base_price if add_on.base_price is not None else add_on.price
        repriced.append(replace(add_on, price=price))
    return tuple(repriced)


def initial_size(item: CatalogItem) -> str:
    """Size pre-selected when an item is opened: first available variation."""
    if item.size_variations:
        for variation in item.size_variations:
            if variation.available:
                return variation.size
        return item.size_variations[0].size
    return item.size or DEFAULT_SIZE


__all__ = (
    "resolve_item_price",
    "resolve_add_on_price",
    "select_add_on",
    "reprice_add_ons",
    "initial_size",
)
