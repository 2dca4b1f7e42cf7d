"""
DiscountEngine — offer lookup, validation, applied amount.

The lookup is the only network edge. Everything after it is local:

    code ──normalize──► lookup ──► active? in window? usage left? minimum met?
                                                                    │
                                          compute_amount(subtotal) ◄┘
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from kungfu import Result, Ok, Error

from cartflow._types import Money, format_money
from cartflow.lift import RemoteFailure, TransportError, extract_message, remote
from cartflow.discount._types import (
    Discount,
    DiscountError,
    DiscountErrorKind,
    Offer,
)
from cartflow.discount._amount import compute_amount, minimum_not_met

if TYPE_CHECKING:
    from cartflow.cart import CartStore, CartTotals

logger = logging.getLogger(__name__)

type OfferLookup = Callable[[str], Awaitable[Offer | None]]
type Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def normalize_code(code: str) -> str:
    return code.strip().upper()


def applied_message(discount: Discount) -> str:
    """`"Welcome Offer applied: ₹50.00 off"`"""
    return f"{discount.title} applied: {format_money(discount.amount, fixed=True)} off"


# ═══════════════════════════════════════════════════════════════════════════════
# Engine
# ═══════════════════════════════════════════════════════════════════════════════


class DiscountEngine:
    """
    Validates offer codes against a subtotal.

    Example:
        engine = DiscountEngine(catalog.offer_by_code)

        match await engine.validate_code(" save50 ", Decimal(398)):
            case Ok(discount):
                discount.amount          # Decimal("50.00")
            case Error(err):
                err.kind, err.message

    Idempotent: the same code against an unchanged subtotal yields the
    same amount.
    """

    def __init__(self, lookup: OfferLookup, *, clock: Clock = _utcnow) -> None:
        self._lookup = lookup
        self._clock = clock

    async def validate_code(
        self,
        code: str,
        subtotal: Money,
    ) -> Result[Discount, DiscountError]:
        normalized = normalize_code(code)
        if not normalized:
            return Error(
                DiscountError(DiscountErrorKind.EMPTY_CODE, "Please enter an offer code")
            )

        fetched = await remote("offer lookup", lambda: self._lookup(normalized))
        match fetched:
            case Error(transport):
                return Error(self._from_transport(transport))
            case Ok(None):
                return Error(
                    DiscountError(DiscountErrorKind.INVALID_CODE, "Invalid offer code")
                )
            case Ok(offer):
                return self.evaluate(offer, subtotal)

    def evaluate(self, offer: Offer, subtotal: Money) -> Result[Discount, DiscountError]:
        """Local checks on an already fetched offer."""
        now = self._clock()

        if not offer.active:
            return Error(
                DiscountError(DiscountErrorKind.INACTIVE, "This offer is no longer active")
            )
        if (offer.valid_from is not None and now < offer.valid_from) or (
            offer.valid_until is not None and now > offer.valid_until
        ):
            return Error(DiscountError(DiscountErrorKind.EXPIRED, "This offer has expired"))
        if offer.usage_limit is not None and offer.usage_count >= offer.usage_limit:
            return Error(
                DiscountError(
                    DiscountErrorKind.USAGE_LIMIT, "This offer is no longer available"
                )
            )
        if subtotal < offer.min_order_value:
            return Error(minimum_not_met(offer.min_order_value, subtotal))

        amount = compute_amount(
            offer.discount_type,
            offer.discount_value,
            subtotal,
            cap=offer.max_discount_amount,
        )
        logger.debug("Offer %s on %s → %s", offer.code, subtotal, amount)
        return Ok(Discount.from_offer(offer, amount))

    async def apply(
        self,
        cart: CartStore,
        code: str,
    ) -> Result[CartTotals, DiscountError]:
        """
        Validate against the subtotal now, commit against the subtotal then.

        The cart may change while the lookup is in flight; apply_discount
        re-checks the minimum and re-clamps the amount at commit.
        """
        validated = await self.validate_code(code, cart.totals.subtotal)
        match validated:
            case Error(err):
                logger.info("Offer %s refused: %s", normalize_code(code), err.message)
                return Error(err)
            case Ok(discount):
                committed = cart.apply_discount(discount)
                if isinstance(committed, Ok):
                    logger.info("Offer %s applied", discount.code)
                return committed

    @staticmethod
    def _from_transport(error: TransportError) -> DiscountError:
        cause = error.cause
        if isinstance(cause, RemoteFailure) and 400 <= cause.status < 500:
            return DiscountError(
                DiscountErrorKind.INVALID_CODE,
                extract_message(cause.body, "Invalid offer code"),
            )
        return DiscountError(DiscountErrorKind.TRANSPORT, error.message)


__all__ = (
    "OfferLookup",
    "Clock",
    "DiscountEngine",
    "normalize_code",
    "applied_message",
)
