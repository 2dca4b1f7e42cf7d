"""
cartflow — cart pricing and checkout sessions for a food-ordering client.

    from cartflow import pricing as P    # Size and add-on prices
    from cartflow import addons as A     # Add-on group constraints
    from cartflow import menu as M       # Browsing and item customization
    from cartflow import cart as C       # Cart lines and totals
    from cartflow import discount as D   # Offer codes
    from cartflow import rules as R      # Tax, delivery, minimum order
    from cartflow import checkout as K   # Checkout session and order placement
    from cartflow import services as S   # Collaborator contracts and payloads
    from cartflow import storage as St   # Local persistence
"""

from cartflow import pricing
from cartflow import addons
from cartflow import menu
from cartflow import cart
from cartflow import discount
from cartflow import rules
from cartflow import checkout
from cartflow import services
from cartflow import storage
from cartflow import graph
from cartflow import lift
from cartflow._config import CheckoutConfig, DEFAULT_CONFIG
from cartflow._types import (
    Lazy,
    Pure,
    Money,
    ZERO,
    money,
    round_money,
    format_money,
)

__version__ = "0.1.0"

__all__ = (
    "pricing",
    "addons",
    "menu",
    "cart",
    "discount",
    "rules",
    "checkout",
    "services",
    "storage",
    "graph",
    "lift",
    "CheckoutConfig",
    "DEFAULT_CONFIG",
    "Lazy",
    "Pure",
    "Money",
    "ZERO",
    "money",
    "round_money",
    "format_money",
)
