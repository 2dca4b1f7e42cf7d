"""
Order placement — capture, then create, refunding the capture if creation fails.

Two steps with one compensator:

    capture (online only) ──► create order
         │                        │ fails
         └──────── refund ◄───────┘
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from kungfu import Result, Ok, Error

from cartflow._types import Money
from cartflow.lift import TransportError, remote
from cartflow.services import (
    OrderCreated,
    OrderPayload,
    OrderService,
    PaymentCapture,
    PaymentDeclined,
    PaymentGateway,
)
from cartflow.checkout._types import CheckoutFailure, CheckoutFailureKind, PaymentMethod
from cartflow.checkout._payload import with_payment_details

logger = logging.getLogger(__name__)

type Compensator[T] = Callable[[T], Awaitable[None]]
type RecordedCompensator[T] = tuple[T, Compensator[T]]

PAYMENT_FAILED = "Payment failed"
ORDER_FAILED = "Failed to create order. Please try again."


@dataclass(frozen=True, slots=True)
class Placement:
    """A created order and, for online payment, the capture behind it."""

    created: OrderCreated
    payload: OrderPayload
    capture: PaymentCapture | None = None


async def run_compensators[T](compensators: list[RecordedCompensator[T]]) -> tuple[int, int]:
    """Run compensators in reverse. Returns (run, failed)."""
    comp_run = 0
    comp_failed = 0

    for value, comp in reversed(compensators):
        try:
            await comp(value)
            comp_run += 1
        except Exception:
            logger.exception("Compensation for %r failed", value)
            comp_failed += 1

    return comp_run, comp_failed


def _declined(err: TransportError) -> CheckoutFailure:
    match err.cause:
        case PaymentDeclined(message=message):
            text = message
        case _:
            text = err.message or PAYMENT_FAILED
    return CheckoutFailure(CheckoutFailureKind.PAYMENT_DECLINED, text)


async def place_order(
    payload: OrderPayload,
    *,
    amount: Money,
    method: PaymentMethod,
    orders: OrderService,
    gateway: PaymentGateway | None,
    reference: str,
) -> Result[Placement, CheckoutFailure]:
    """
    Capture (online only) and create the order.

    Cash on delivery skips the gateway entirely. If creation fails after a
    capture, the capture is refunded before the failure is returned.
    """
    compensators: list[RecordedCompensator[PaymentCapture]] = []
    capture: PaymentCapture | None = None

    if method is PaymentMethod.ONLINE:
        if gateway is None:
            return Error(
                CheckoutFailure(
                    CheckoutFailureKind.PAYMENT_DECLINED,
                    "Online payment is not available",
                )
            )
        captured = await remote("payment capture", lambda: gateway.capture(amount, reference))
        match captured:
            case Ok(value):
                capture = value
                compensators.append((value, gateway.refund))
                payload = with_payment_details(payload, value.details)
            case Error(err):
                return Error(_declined(err))

    body = payload
    created = await remote("order submission", lambda: orders.place(body))
    match created:
        case Ok(order):
            logger.info("Order %s created (%s)", order.order_number, method.value)
            return Ok(Placement(created=order, payload=body, capture=capture))
        case Error(err):
            comp_run, comp_failed = await run_compensators(compensators)
            if comp_run:
                logger.warning("Order creation failed, capture refunded: %s", err.message)
            return Error(
                CheckoutFailure(
                    CheckoutFailureKind.ORDER_FAILED,
                    err.message or ORDER_FAILED,
                    refunded=comp_run > 0 and comp_failed == 0,
                )
            )


__all__ = (
    "PAYMENT_FAILED",
    "ORDER_FAILED",
    "Placement",
    "run_compensators",
    "place_order",
)
