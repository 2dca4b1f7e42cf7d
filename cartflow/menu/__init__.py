"""
Menu — browsing the catalog and configuring an item for the cart.

    from cartflow import menu as M

    menu = M.Menu(items)
    menu.browse(M.MenuQuery().veg().sorted_by(M.SortOrder.RATING))

    customizer = M.ItemCustomizer(menu.find("m1"))
"""

from cartflow.menu._browse import (
    VEG,
    SortOrder,
    MenuQuery,
    Menu,
)
from cartflow.menu._customize import ItemCustomizer

__all__ = (
    "VEG",
    "SortOrder",
    "MenuQuery",
    "Menu",
    "ItemCustomizer",
)
