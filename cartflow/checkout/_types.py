"""
Checkout types — session state, refusals, payment outcomes and receipts.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum, auto
from typing import Any

from cartflow._types import Money
from cartflow.cart import CartTotals
from cartflow.services import DeliveryAddress

# ═══════════════════════════════════════════════════════════════════════════════
# Steps & Methods
# ═══════════════════════════════════════════════════════════════════════════════


class CheckoutStep(Enum):
    """
    Linear checkout flow.

        CART → ADDRESS → PAYMENT → CONFIRMATION
                 ↑_________|  back()
    """

    CART = auto()
    ADDRESS = auto()
    PAYMENT = auto()
    CONFIRMATION = auto()


class PaymentMethod(Enum):
    ONLINE = "Online"
    CASH_ON_DELIVERY = "Cash on Delivery"


@dataclass(frozen=True, slots=True)
class GuestContact:
    name: str
    phone: str


# ═══════════════════════════════════════════════════════════════════════════════
# Receipt
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class OrderReceipt:
    """
    A created order.

    from_cache is True when a retry was answered from the submission
    ledger instead of creating the order again.
    """

    order_id: str
    order_number: str
    payment_method: PaymentMethod
    totals: CartTotals
    payload: dict[str, Any] = field(default_factory=dict, compare=False)
    from_cache: bool = False


# ═══════════════════════════════════════════════════════════════════════════════
# Session
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CheckoutSession:
    """One pass through the checkout flow. Replaced on every transition."""

    session_id: str
    step: CheckoutStep = CheckoutStep.CART
    address: DeliveryAddress | None = None
    payment_method: PaymentMethod = PaymentMethod.ONLINE
    guest_contact: GuestContact | None = None
    receipt: OrderReceipt | None = None

    def at(self, step: CheckoutStep) -> CheckoutSession:
        return replace(self, step=step)

    def with_address(self, address: DeliveryAddress) -> CheckoutSession:
        return replace(self, address=address)

    def with_payment_method(self, method: PaymentMethod) -> CheckoutSession:
        return replace(self, payment_method=method)

    def with_guest_contact(self, contact: GuestContact) -> CheckoutSession:
        return replace(self, guest_contact=contact)

    def confirmed(self, receipt: OrderReceipt) -> CheckoutSession:
        return replace(self, step=CheckoutStep.CONFIRMATION, receipt=receipt)


# ═══════════════════════════════════════════════════════════════════════════════
# Refusals — guard failures, session unchanged
# ═══════════════════════════════════════════════════════════════════════════════


class RefusalKind(Enum):
    EMPTY_CART = auto()
    BUSINESS_CLOSED = auto()
    MINIMUM_ORDER_NOT_MET = auto()
    ADDRESS_REQUIRED = auto()
    WRONG_STEP = auto()
    INVALID_CONTACT = auto()


@dataclass(frozen=True, slots=True)
class Refusal:
    """
    A transition the session would not make.

    shortfall is set for MINIMUM_ORDER_NOT_MET, reason for BUSINESS_CLOSED.
    """

    kind: RefusalKind
    message: str
    shortfall: Money | None = None
    reason: str | None = None


# ═══════════════════════════════════════════════════════════════════════════════
# Payment
# ═══════════════════════════════════════════════════════════════════════════════


class PaymentStatus(Enum):
    CONFIRMED = auto()  # Order created, session in CONFIRMATION
    AWAITING_CONTACT = auto()  # Guest must provide name and phone first
    IN_FLIGHT = auto()  # Another pay() is still running
    DISCARDED = auto()  # Session left PAYMENT before the result arrived


@dataclass(frozen=True, slots=True)
class PaymentOutcome:
    status: PaymentStatus
    receipt: OrderReceipt | None = None
    warning: str | None = None


class CheckoutFailureKind(Enum):
    PAYMENT_DECLINED = auto()
    ORDER_FAILED = auto()
    REFUSED = auto()


@dataclass(frozen=True, slots=True)
class CheckoutFailure:
    """
    pay() did not produce an order; the session stays in PAYMENT.

    refunded is True when an online capture was rolled back.
    """

    kind: CheckoutFailureKind
    message: str
    refusal: Refusal | None = None
    refunded: bool = False


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "CheckoutStep",
    "PaymentMethod",
    "GuestContact",
    "OrderReceipt",
    "CheckoutSession",
    "RefusalKind",
    "Refusal",
    "PaymentStatus",
    "PaymentOutcome",
    "CheckoutFailureKind",
    "CheckoutFailure",
)
