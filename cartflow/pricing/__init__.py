"""
Pricing — effective prices for sizes and add-ons.

    from cartflow import pricing as P

    P.resolve_item_price(pizza, "Large").price        # Decimal("399")
    P.reprice_add_ons(line.add_ons, "Small")          # only size-priced add-ons move

Resolution never fails: a size missing from a table falls back to the
flat/base price and reports matched=False.
"""

from cartflow.pricing._types import (
    DEFAULT_SIZE,
    NOT_APPLICABLE,
    SizeVariation,
    SizePrice,
    AddOn,
    AddOnGroup,
    SelectedAddOn,
    CustomizationOption,
    CustomizationCategory,
    CatalogItem,
    PriceResolution,
)
from cartflow.pricing._resolve import (
    resolve_item_price,
    resolve_add_on_price,
    select_add_on,
    reprice_add_ons,
    initial_size,
)

__all__ = (
    # Types
    "DEFAULT_SIZE",
    "NOT_APPLICABLE",
    "SizeVariation",
    "SizePrice",
    "AddOn",
    "AddOnGroup",
    "SelectedAddOn",
    "CustomizationOption",
    "CustomizationCategory",
    "CatalogItem",
    "PriceResolution",
    # Resolution
    "resolve_item_price",
    "resolve_add_on_price",
    "select_add_on",
    "reprice_add_ons",
    "initial_size",
)
