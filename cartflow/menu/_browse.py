"""
Menu browsing — search, filter and sort over catalog items.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, replace
from enum import Enum

from cartflow.pricing import CatalogItem

VEG = "Veg"


class SortOrder(Enum):
    POPULAR = "popular"
    PRICE_ASC = "priceAsc"
    PRICE_DESC = "priceDesc"
    RATING = "rating"


@dataclass(frozen=True, slots=True)
class MenuQuery:
    """
    What the menu screen is showing.

    Example:
        query = MenuQuery().with_search("paneer").veg().sorted_by(SortOrder.PRICE_ASC)
    """

    search: str = ""
    category: str | None = None
    veg_only: bool = False
    sort: SortOrder = SortOrder.POPULAR

    def with_search(self, text: str) -> MenuQuery:
        return replace(self, search=text.strip())

    def in_category(self, category: str | None) -> MenuQuery:
        return replace(self, category=category)

    def veg(self, only: bool = True) -> MenuQuery:
        return replace(self, veg_only=only)

    def sorted_by(self, order: SortOrder) -> MenuQuery:
        return replace(self, sort=order)


class Menu:
    """Read-only view over the catalog. Unavailable items are never listed."""

    def __init__(self, items: Iterable[CatalogItem]) -> None:
        self._items = tuple(items)

    def __len__(self) -> int:
        return len(self._items)

    def find(self, item_id: str) -> CatalogItem | None:
        for item in self._items:
            if item.id == item_id:
                return item
        return None

    def categories(self) -> tuple[str, ...]:
        seen: dict[str, None] = {}
        for item in self._items:
            if item.category:
                seen.setdefault(item.category, None)
        return tuple(seen)

    def browse(self, query: MenuQuery = MenuQuery()) -> list[CatalogItem]:
        items = [item for item in self._items if item.available]

        if query.search:
            needle = query.search.lower()
            items = [
                item
                for item in items
                if needle in item.name.lower() or needle in item.description.lower()
            ]
        if query.category is not None:
            items = [item for item in items if item.category == query.category]
        if query.veg_only:
            items = [item for item in items if item.food_type == VEG]

        match query.sort:
            case SortOrder.PRICE_ASC:
                items.sort(key=lambda item: item.price)
            case SortOrder.PRICE_DESC:
                items.sort(key=lambda item: item.price, reverse=True)
            case SortOrder.RATING:
                items.sort(key=lambda item: item.rating, reverse=True)
            case SortOrder.POPULAR:
                items.sort(key=lambda item: (item.popular, item.rating), reverse=True)
        return items


__all__ = ("VEG", "SortOrder", "MenuQuery", "Menu")
