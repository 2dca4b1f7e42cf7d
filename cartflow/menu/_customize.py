"""
ItemCustomizer — one catalog item being configured before it enters the cart.

Holds the chosen size, legacy customization options, add-on selections
and quantity; builds a CartLineItem only once every group validates.

    customizer = ItemCustomizer(pizza)
    customizer.choose_size("Large")
    customizer.toggle_add_on("toppings", "olives")

    match customizer.build():
        case Ok(line):
            cart.add_item(line)
        case Error(check):
            check.errors_by_group
"""

from __future__ import annotations

import logging

from kungfu import Result, Ok, Error

from cartflow._types import Money, ZERO
from cartflow.pricing import (
    CatalogItem,
    CustomizationOption,
    PriceResolution,
    SelectedAddOn,
    initial_size,
    reprice_add_ons,
    resolve_item_price,
    select_add_on,
)
from cartflow.addons import (
    GroupValidation,
    Selection,
    SelectionError,
    SelectionErrorKind,
    default_selection,
    toggle,
    validate_all,
)
from cartflow.cart import CartLineItem, CustomizationChoice

logger = logging.getLogger(__name__)


class ItemCustomizer:
    """
    Mutable working state for one item's customization sheet.

    Starts at the initial size with each group's default add-ons and the
    first option of every legacy category. Prices follow the size.

    Example:
        customizer = ItemCustomizer(pizza)
        customizer.choose_size("Large")
        customizer.set_quantity(2)

        match customizer.toggle_add_on("crust", "pan"):
            case Ok(selection):
                customizer.unit_price()     # one unit, extras included
            case Error(err):
                err.kind, err.message

    build() returns Error(GroupValidation) while any group is short of
    its minimum; nothing reaches the cart until then.
    """

    def __init__(self, item: CatalogItem) -> None:
        self._item = item
        self._size = initial_size(item)
        self._quantity = 1
        self._options: dict[str, CustomizationOption] = {
            category.name: category.options[0]
            for category in item.customizations
            if category.options
        }
        self._selections: dict[str, Selection] = {}
        self._priced: dict[str, tuple[SelectedAddOn, ...]] = {}
        for group in item.add_on_groups:
            chosen = default_selection(group)
            self._selections[group.id] = chosen
            self._priced[group.id] = tuple(select_add_on(a, self._size) for a in chosen)

    # Read

    @property
    def item(self) -> CatalogItem:
        return self._item

    @property
    def size(self) -> str:
        return self._size

    @property
    def quantity(self) -> int:
        return self._quantity

    def selection(self, group_id: str) -> Selection:
        return self._selections.get(group_id, ())

    def selected_add_ons(self) -> tuple[SelectedAddOn, ...]:
        return tuple(a for group in self._item.add_on_groups for a in self._priced[group.id])

    # Changes

    def choose_size(self, size: str) -> PriceResolution:
        """Switch size and re-resolve every size-priced add-on already chosen."""
        self._size = size
        for group_id, priced in self._priced.items():
            self._priced[group_id] = reprice_add_ons(priced, size)
        resolution = resolve_item_price(self._item, size)
        if not resolution.matched:
            logger.debug("Item %s has no %r size, flat price used", self._item.id, size)
        return resolution

    def choose_customization(self, category: str, option: str) -> bool:
        """Pick an option of a legacy category. False when either is unknown."""
        for candidate in self._item.customizations:
            if candidate.name != category:
                continue
            for choice in candidate.options:
                if choice.name == option:
                    self._options[category] = choice
                    return True
        logger.debug("Unknown customization %r / %r on %s", category, option, self._item.id)
        return False

    def toggle_add_on(
        self,
        group_id: str,
        add_on_id: str,
    ) -> Result[Selection, SelectionError]:
        group = self._item.group(group_id)
        add_on = group.find(add_on_id) if group is not None else None
        if group is None or add_on is None:
            return Error(
                SelectionError(
                    group_id,
                    SelectionErrorKind.UNKNOWN,
                    f"Unknown add-on {add_on_id!r} in group {group_id!r}",
                )
            )

        outcome = toggle(group, self.selection(group_id), add_on)
        if outcome.error is not None:
            return Error(outcome.error)

        previous = {a.id: a for a in self._priced.get(group_id, ())}
        self._selections[group_id] = outcome.selection
        self._priced[group_id] = tuple(
            previous.get(a.id) or select_add_on(a, self._size) for a in outcome.selection
        )
        return Ok(outcome.selection)

    def set_quantity(self, quantity: int) -> None:
        if quantity < 1:
            raise ValueError(f"quantity must be >= 1, got {quantity}")
        self._quantity = quantity

    # Preview

    def unit_price(self) -> Money:
        """Size price plus customizations and add-ons, for one unit."""
        base = resolve_item_price(self._item, self._size).price
        extras = sum((o.price for o in self._options.values()), ZERO)
        extras += sum((a.price for a in self.selected_add_ons()), ZERO)
        return base + extras

    def line_total(self) -> Money:
        return self.unit_price() * self._quantity

    def validate(self) -> GroupValidation:
        return validate_all(self._item.add_on_groups, self._selections)

    # Build

    def build(self) -> Result[CartLineItem, GroupValidation]:
        """Cart line for the current configuration, or every failing group."""
        check = self.validate()
        if not check.valid:
            return Error(check)

        item = self._item
        return Ok(
            CartLineItem(
                item_id=item.id,
                name=item.name,
                unit_price=resolve_item_price(item, self._size).price,
                quantity=self._quantity,
                size=self._size,
                food_type=item.food_type,
                image=item.image,
                customizations=tuple(
                    CustomizationChoice(category, option.name, option.price)
                    for category, option in self._options.items()
                ),
                add_ons=self.selected_add_ons(),
            )
        )


__all__ = ("ItemCustomizer",)
