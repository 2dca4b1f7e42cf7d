"""
Core types for cartflow.

Re-exports from kungfu/combinators + money helpers shared by every module.
"""

from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Never

# Re-export from kungfu
from kungfu import Result, Ok, Error, Option, Some, Nothing, LazyCoroResult

# Re-export from combinators
from combinators import LCR, NoError

# ═══════════════════════════════════════════════════════════════════════════════
# Lazy Computation Aliases
# ═══════════════════════════════════════════════════════════════════════════════

type Lazy[T, E] = LazyCoroResult[T, E]
"""Lazy async computation that may fail (remote calls)."""

type Pure[T] = Lazy[T, Never]
"""Lazy computation that cannot fail."""

# ═══════════════════════════════════════════════════════════════════════════════
# Money
# ═══════════════════════════════════════════════════════════════════════════════

type Money = Decimal
"""Every amount in the engine. Never a float."""

type MoneyLike = Decimal | int | float | str

ZERO: Money = Decimal("0")
CENT = Decimal("0.01")
CURRENCY = "₹"


def money(value: MoneyLike | None) -> Money:
    """
    Convert payload numbers to Decimal.

    Floats go through str() so 19.9 stays 19.9 and not 19.899999...
    Garbage and None become zero, the same way the payload formatter
    treats a missing price.
    """
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except InvalidOperation:
        return ZERO


def round_money(value: Money) -> Money:
    """Round to the currency minor unit (2 dp, half-up)."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def clamp(value: Money, low: Money, high: Money) -> Money:
    return max(low, min(value, high))


def format_money(value: Money, *, symbol: str = CURRENCY, fixed: bool = False) -> str:
    """
    Amount as shown in messages.

        format_money(Decimal("300"))               # "₹300"
        format_money(Decimal("19.9"))              # "₹19.90"
        format_money(Decimal("300"), fixed=True)   # "₹300.00"
    """
    if not fixed and value == value.to_integral_value():
        return f"{symbol}{value.to_integral_value()}"
    return f"{symbol}{round_money(value)}"


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    # Re-exports from kungfu
    "Result",
    "Ok",
    "Error",
    "Option",
    "Some",
    "Nothing",
    "LazyCoroResult",
    # Re-exports from combinators
    "LCR",
    "NoError",
    # Type aliases
    "Lazy",
    "Pure",
    # Money
    "Money",
    "MoneyLike",
    "ZERO",
    "CENT",
    "CURRENCY",
    "money",
    "round_money",
    "clamp",
    "format_money",
)
