"""
Pricing types — catalog reference data and price resolutions.

Catalog types are immutable snapshots of what the catalog service
returned; the engine never mutates them.
"""

from __future__ import annotations

from dataclasses import dataclass

from cartflow._types import Money, ZERO

# ═══════════════════════════════════════════════════════════════════════════════
# Sizes
# ═══════════════════════════════════════════════════════════════════════════════

DEFAULT_SIZE = "Medium"
NOT_APPLICABLE = "Not Applicable"


@dataclass(frozen=True, slots=True)
class SizeVariation:
    """Price of an item in one size."""

    size: str
    price: Money
    available: bool = True


@dataclass(frozen=True, slots=True)
class SizePrice:
    """One row of an add-on's per-size price table."""

    size: str
    price: Money


# ═══════════════════════════════════════════════════════════════════════════════
# Add-ons
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class AddOn:
    """
    An optional extra inside an add-on group.

    size_pricing is empty when the add-on costs the same in every size.
    """

    id: str
    name: str
    price: Money = ZERO
    available: bool = True
    is_default: bool = False
    size_pricing: tuple[SizePrice, ...] = ()

    @property
    def has_size_pricing(self) -> bool:
        return bool(self.size_pricing)


@dataclass(frozen=True, slots=True)
class AddOnGroup:
    """
    Named set of add-ons with selection-count constraints.

    Invariant: 1 <= min_selection <= max_selection. A required group needs
    at least min_selection choices; no group accepts more than
    max_selection.
    """

    id: str
    name: str
    min_selection: int = 1
    max_selection: int = 1
    required: bool = False
    add_ons: tuple[AddOn, ...] = ()

    def __post_init__(self) -> None:
        if self.min_selection < 1 or self.min_selection > self.max_selection:
            raise ValueError(
                f"Add-on group {self.id!r}: need 1 <= min_selection "
                f"({self.min_selection}) <= max_selection ({self.max_selection})"
            )

    def find(self, add_on_id: str) -> AddOn | None:
        for add_on in self.add_ons:
            if add_on.id == add_on_id:
                return add_on
        return None


@dataclass(frozen=True, slots=True)
class SelectedAddOn:
    """
    An add-on as chosen for a line item.

    price is a snapshot taken at selection time and re-resolved whenever
    the line's size changes; size_pricing and base_price are kept for that
    re-resolution.
    """

    id: str
    name: str
    price: Money
    size_pricing: tuple[SizePrice, ...] = ()
    base_price: Money | None = None


# ═══════════════════════════════════════════════════════════════════════════════
# Legacy Customizations
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CustomizationOption:
    name: str
    price: Money = ZERO


@dataclass(frozen=True, slots=True)
class CustomizationCategory:
    """Older single-choice customization (e.g. "Crust": thin / pan)."""

    name: str
    options: tuple[CustomizationOption, ...] = ()
    required: bool = False


# ═══════════════════════════════════════════════════════════════════════════════
# Catalog Item
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CatalogItem:
    """A menu item as returned by the catalog service."""

    id: str
    name: str
    price: Money
    category: str = ""
    description: str = ""
    image: str = ""
    food_type: str = NOT_APPLICABLE
    size: str = DEFAULT_SIZE
    available: bool = True
    popular: bool = False
    rating: float = 0.0
    size_variations: tuple[SizeVariation, ...] = ()
    add_on_groups: tuple[AddOnGroup, ...] = ()
    customizations: tuple[CustomizationCategory, ...] = ()

    @property
    def has_multiple_sizes(self) -> bool:
        return bool(self.size_variations)

    def group(self, group_id: str) -> AddOnGroup | None:
        for group in self.add_on_groups:
            if group.id == group_id:
                return group
        return None


# ═══════════════════════════════════════════════════════════════════════════════
# Resolution
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class PriceResolution:
    """
    Resolved price plus whether a size-specific entry was found.

    matched is False only when a size table exists and the size is not in
    it; the price then silently falls back to the flat/base price.
    """

    price: Money
    matched: bool = True


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
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
)
