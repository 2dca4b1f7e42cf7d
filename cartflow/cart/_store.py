"""
CartStore — single owner of the line collection and its derived totals.

Every mutator funnels into one private commit that rebuilds the snapshot
from scratch (lines → discount revalidation → totals) and then notifies
listeners. Nothing is patched incrementally.

    cart = CartStore(rules)
    match cart.add_item(line):
        case Ok(totals):
            ...
        case Error(err):
            show(err.message)
"""

from __future__ import annotations

import itertools
import logging
from collections.abc import Callable, Iterable

from kungfu import Result, Ok, Error

from cartflow._config import CheckoutConfig
from cartflow._types import Money, ZERO
from cartflow.discount._types import Discount, DiscountError, DiscountErrorKind
from cartflow.discount._amount import minimum_not_met, recompute
from cartflow.rules._types import BusinessRules, DEFAULT_RULES
from cartflow.cart._types import (
    CartErrorKind,
    CartLimitExceeded,
    CartLineItem,
    CartSnapshot,
    CartTotals,
)
from cartflow.cart._line import LineSignature, line_signature
from cartflow.cart._totals import compute_totals, item_count, subtotal

logger = logging.getLogger(__name__)

type CartListener = Callable[[CartSnapshot], None]

DEFAULT_MAX_ITEMS = 20
NOTHING_TO_DISCOUNT = "Add items to your cart before applying an offer"
NO_EFFECT = "This offer does not reduce your order total"


class CartStore:
    """
    In-memory cart.

    Single-threaded: operations run to completion one at a time, so there
    is no locking. max_items caps the total quantity (None disables it).
    """

    def __init__(
        self,
        rules: BusinessRules = DEFAULT_RULES,
        *,
        max_items: int | None = DEFAULT_MAX_ITEMS,
    ) -> None:
        self._snapshot = CartSnapshot(rules=rules, totals=compute_totals((), rules))
        self._listeners: list[CartListener] = []
        self._ids = itertools.count(1)
        self._max_items = max_items

    @classmethod
    def from_config(
        cls,
        config: CheckoutConfig,
        rules: BusinessRules = DEFAULT_RULES,
    ) -> CartStore:
        return cls(rules, max_items=config.max_cart_items)

    # Read

    @property
    def snapshot(self) -> CartSnapshot:
        return self._snapshot

    @property
    def totals(self) -> CartTotals:
        return self._snapshot.totals

    @property
    def lines(self) -> tuple[CartLineItem, ...]:
        return self._snapshot.lines

    @property
    def discount(self) -> Discount | None:
        return self._snapshot.discount

    @property
    def rules(self) -> BusinessRules:
        return self._snapshot.rules

    @property
    def max_items(self) -> int | None:
        return self._max_items

    def subscribe(self, listener: CartListener) -> Callable[[], None]:
        """Call `listener` after every commit. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # Lines

    def add_item(self, line: CartLineItem) -> Result[CartTotals, CartLimitExceeded]:
        """Merge into an identical line or append a new one."""
        if line.quantity < 1:
            return Error(
                CartLimitExceeded(
                    kind=CartErrorKind.INVALID_QUANTITY,
                    message=f"Quantity must be at least 1, got {line.quantity}",
                    max_items=self._max_items or 0,
                    requested=line.quantity,
                )
            )

        current = self._snapshot.lines
        requested = item_count(current) + line.quantity
        if self._max_items is not None and requested > self._max_items:
            logger.info("Cart cap %d reached (%d requested)", self._max_items, requested)
            return Error(
                CartLimitExceeded(
                    kind=CartErrorKind.LIMIT_EXCEEDED,
                    message=f"Maximum {self._max_items} items allowed in cart.",
                    max_items=self._max_items,
                    requested=requested,
                )
            )

        signature = line_signature(line)
        for index, existing in enumerate(current):
            if line_signature(existing) == signature:
                merged = existing.with_quantity(existing.quantity + line.quantity)
                lines = (*current[:index], merged, *current[index + 1 :])
                return Ok(self._commit(lines, self._snapshot.discount))

        added = line.with_line_id(self._next_line_id())
        return Ok(self._commit((*current, added), self._snapshot.discount))

    def update_quantity(self, line_id: str, quantity: int) -> CartTotals:
        """Set a line's quantity; zero or less removes the line."""
        if quantity <= 0:
            return self.remove_item(line_id)

        current = self._snapshot.lines
        existing = self._snapshot.line(line_id)
        if existing is None:
            logger.warning("update_quantity: unknown line %s", line_id)
            return self._snapshot.totals

        if self._max_items is not None:
            requested = item_count(current) - existing.quantity + quantity
            if requested > self._max_items:
                logger.warning(
                    "update_quantity: %s x%d exceeds cap %d",
                    line_id,
                    quantity,
                    self._max_items,
                )
                return self._snapshot.totals

        lines = tuple(
            line.with_quantity(quantity) if line.line_id == line_id else line
            for line in current
        )
        return self._commit(lines, self._snapshot.discount)

    def remove_item(self, line_id: str) -> CartTotals:
        current = self._snapshot.lines
        lines = tuple(line for line in current if line.line_id != line_id)
        if len(lines) == len(current):
            logger.warning("remove_item: unknown line %s", line_id)
            return self._snapshot.totals
        return self._commit(lines, self._snapshot.discount)

    def clear(self) -> CartTotals:
        """Empty the cart and drop the discount."""
        return self._commit((), None)

    def settle(self, ordered: CartSnapshot) -> CartTotals:
        """
        Take an ordered snapshot's lines out of the cart.

        Lines are matched by signature and only the ordered quantity is
        subtracted, so anything added while the order was in flight stays.
        The ordered discount goes with them.
        """
        remaining: dict[LineSignature, int] = {}
        for line in ordered.lines:
            signature = line_signature(line)
            remaining[signature] = remaining.get(signature, 0) + line.quantity

        kept: list[CartLineItem] = []
        for line in self._snapshot.lines:
            signature = line_signature(line)
            taken = min(remaining.get(signature, 0), line.quantity)
            if taken:
                remaining[signature] -= taken
            if line.quantity > taken:
                kept.append(line.with_quantity(line.quantity - taken))

        discount = self._snapshot.discount
        if ordered.discount is not None and discount is not None:
            if discount.code == ordered.discount.code:
                discount = None
        if kept:
            logger.warning("%d item(s) added during checkout kept in cart", item_count(kept))
        return self._commit(tuple(kept), discount)

    def restore(
        self,
        lines: Iterable[CartLineItem],
        discount: Discount | None = None,
    ) -> CartTotals:
        """
        Replace the whole cart, e.g. from a persisted snapshot at startup.

        Line ids are reassigned; the discount is revalidated like after any
        other mutation.
        """
        fresh = tuple(line.with_line_id(self._next_line_id()) for line in lines)
        return self._commit(fresh, discount)

    # Discount

    def apply_discount(self, discount: Discount) -> Result[CartTotals, DiscountError]:
        """
        Store a discount, recomputing its amount against the live subtotal.

        The amount is clamped to [0, subtotal] here, at commit time, not
        when the code was validated.
        """
        lines = self._snapshot.lines
        if not lines:
            return Error(DiscountError(DiscountErrorKind.EMPTY_CART, NOTHING_TO_DISCOUNT))
        amount = subtotal(lines)
        if amount < discount.min_order_value:
            return Error(minimum_not_met(discount.min_order_value, amount))
        if self._revalidate(discount, lines) is None:
            return Error(DiscountError(DiscountErrorKind.NO_EFFECT, NO_EFFECT))
        return Ok(self._commit(lines, recompute(discount, amount)))

    def remove_discount(self) -> CartTotals:
        return self._commit(self._snapshot.lines, None)

    # Rules

    def update_business_rules(self, rules: BusinessRules) -> CartTotals:
        """New tax/delivery inputs. The discount is keyed to subtotal only."""
        return self._commit(
            self._snapshot.lines,
            self._snapshot.discount,
            rules=rules,
            revalidate=False,
        )

    # Commit

    def _commit(
        self,
        lines: tuple[CartLineItem, ...],
        discount: Discount | None,
        *,
        rules: BusinessRules | None = None,
        revalidate: bool = True,
    ) -> CartTotals:
        previous = self._snapshot
        next_rules = rules if rules is not None else previous.rules
        next_discount = discount
        if next_discount is not None and revalidate:
            next_discount = self._revalidate(next_discount, lines)

        totals = compute_totals(
            lines,
            next_rules,
            next_discount.amount if next_discount is not None else ZERO,
        )
        self._snapshot = CartSnapshot(
            lines=lines,
            discount=next_discount,
            rules=next_rules,
            totals=totals,
        )
        self._notify()
        return totals

    @staticmethod
    def _revalidate(
        discount: Discount,
        lines: tuple[CartLineItem, ...],
    ) -> Discount | None:
        if not lines:
            logger.info("Cart empty, dropping discount %s", discount.code)
            return None
        amount: Money = subtotal(lines)
        if amount < discount.min_order_value:
            logger.info(
                "Dropping discount %s: subtotal %s below minimum %s",
                discount.code,
                amount,
                discount.min_order_value,
            )
            return None
        updated = recompute(discount, amount)
        if updated.amount == ZERO and discount.has_minimum:
            logger.info("Dropping discount %s: no effect left", discount.code)
            return None
        return updated

    def _notify(self) -> None:
        snapshot = self._snapshot
        for listener in tuple(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Cart listener %r failed", listener)

    def _next_line_id(self) -> str:
        return f"line-{next(self._ids)}"


__all__ = (
    "CartStore",
    "CartListener",
    "DEFAULT_MAX_ITEMS",
    "NOTHING_TO_DISCOUNT",
    "NO_EFFECT",
)
