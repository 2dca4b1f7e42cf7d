"""
CheckoutSessionMachine — cart → address → payment → confirmation.

Transitions return Result[CheckoutSession, Refusal]; a refusal leaves the
session untouched. pay() is the only async transition: it builds the
order from the live cart, places it at most once per cart content, and
only then moves to CONFIRMATION.

    machine = CheckoutSessionMachine(cart, provider, orders, gateway=gateway)
    machine.proceed_to_address()
    machine.select_address(address)
    machine.proceed_to_payment()
    match await machine.pay():
        case Ok(PaymentOutcome(status=PaymentStatus.CONFIRMED, receipt=receipt)):
            ...
"""

from __future__ import annotations

import asyncio
import logging
import re
import uuid
from collections.abc import Callable

from kungfu import Result, Ok, Error

from cartflow._config import CheckoutConfig, DEFAULT_CONFIG
from cartflow._types import format_money
from cartflow.lift import remote
from cartflow.cart import CartStore
from cartflow.rules import BusinessRulesProvider
from cartflow.services import (
    DeliveryAddress,
    Notifier,
    OrderService,
    OrderSummary,
    PaymentGateway,
)
from cartflow.checkout._types import (
    CheckoutFailure,
    CheckoutFailureKind,
    CheckoutSession,
    CheckoutStep,
    GuestContact,
    OrderReceipt,
    PaymentMethod,
    PaymentOutcome,
    PaymentStatus,
    Refusal,
    RefusalKind,
)
from cartflow.checkout._payload import Customer, build_order_payload, submission_key
from cartflow.checkout._placement import place_order
from cartflow.checkout._ledger import MemoryLedger, SubmissionLedger
from cartflow.checkout._submit import Submission, submit_once

logger = logging.getLogger(__name__)

EMPTY_CART = "Your cart is empty. Add some items before checking out."
CLOSED_FALLBACK = "Please check our operating hours."
ADDRESS_REQUIRED = "Please select a delivery address to continue"
DISCARDED = "Checkout moved on while the order was being placed; result ignored"


def _new_session_id() -> str:
    return uuid.uuid4().hex


def closed_message(reason: str) -> str:
    return f"Sorry, we're currently closed. {reason or CLOSED_FALLBACK}"


class CheckoutSessionMachine:
    """
    One checkout at a time over a shared cart.

    Guests must provide a contact before pay() goes through; everyone
    else is identified by `customer`. `orders` is whichever order service
    fits the user (remote, or the device-local guest order book).
    """

    def __init__(
        self,
        cart: CartStore,
        rules: BusinessRulesProvider,
        orders: OrderService,
        *,
        gateway: PaymentGateway | None = None,
        notifier: Notifier | None = None,
        ledger: SubmissionLedger | None = None,
        customer: Customer | None = None,
        guest: bool = False,
        config: CheckoutConfig = DEFAULT_CONFIG,
        session_ids: Callable[[], str] = _new_session_id,
    ) -> None:
        if not guest and customer is None:
            raise ValueError("customer is required unless checking out as a guest")
        self._cart = cart
        self._rules = rules
        self._orders = orders
        self._gateway = gateway
        self._notifier = notifier
        self._ledger: SubmissionLedger = ledger if ledger is not None else MemoryLedger()
        self._customer = customer
        self._guest = guest
        self._config = config
        self._session_ids = session_ids
        self._phone = re.compile(rf"\d{{{config.phone_digits}}}")
        self._session = CheckoutSession(session_id=session_ids())
        self._in_flight = False
        self._notifications: set[asyncio.Task[None]] = set()

    @property
    def session(self) -> CheckoutSession:
        return self._session

    @property
    def step(self) -> CheckoutStep:
        return self._session.step

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    @property
    def is_guest(self) -> bool:
        return self._guest

    async def drain_notifications(self) -> None:
        """Wait for order notifications still running in the background."""
        if self._notifications:
            await asyncio.gather(*self._notifications)

    # Navigation

    def proceed_to_address(self) -> Result[CheckoutSession, Refusal]:
        """CART → ADDRESS, if the cart can be checked out right now."""
        if self._session.step is not CheckoutStep.CART:
            return Error(self._wrong_step("proceed to address"))
        match self._checkout_guards():
            case Error(refusal):
                logger.info("Checkout refused: %s", refusal.kind.name)
                return Error(refusal)
            case Ok(_):
                return self._move(self._session.at(CheckoutStep.ADDRESS))

    def select_address(self, address: DeliveryAddress) -> Result[CheckoutSession, Refusal]:
        if self._session.step not in (CheckoutStep.ADDRESS, CheckoutStep.PAYMENT):
            return Error(self._wrong_step("select an address"))
        return self._move(self._session.with_address(address))

    def proceed_to_payment(self) -> Result[CheckoutSession, Refusal]:
        if self._session.step is not CheckoutStep.ADDRESS:
            return Error(self._wrong_step("proceed to payment"))
        if self._session.address is None:
            return Error(Refusal(RefusalKind.ADDRESS_REQUIRED, ADDRESS_REQUIRED))
        return self._move(self._session.at(CheckoutStep.PAYMENT))

    def back(self) -> Result[CheckoutSession, Refusal]:
        match self._session.step:
            case CheckoutStep.CART:
                return Ok(self._session)
            case CheckoutStep.ADDRESS:
                return self._move(self._session.at(CheckoutStep.CART))
            case CheckoutStep.PAYMENT:
                return self._move(self._session.at(CheckoutStep.ADDRESS))
            case CheckoutStep.CONFIRMATION:
                return Error(self._wrong_step("go back"))

    def select_payment_method(self, method: PaymentMethod) -> Result[CheckoutSession, Refusal]:
        if self._session.step is CheckoutStep.CONFIRMATION:
            return Error(self._wrong_step("change the payment method"))
        return self._move(self._session.with_payment_method(method))

    def provide_guest_contact(self, name: str, phone: str) -> Result[CheckoutSession, Refusal]:
        if self._session.step is CheckoutStep.CONFIRMATION:
            return Error(self._wrong_step("change the contact"))
        digits = phone.strip()
        if self._phone.fullmatch(digits) is None:
            return Error(
                Refusal(
                    RefusalKind.INVALID_CONTACT,
                    f"Please enter a valid {self._config.phone_digits}-digit phone number",
                )
            )
        contact = GuestContact(name=name.strip() or self._config.guest_name, phone=digits)
        return self._move(self._session.with_guest_contact(contact))

    def complete(self) -> Result[CheckoutSession, Refusal]:
        """CONFIRMATION → fresh session at CART; the cart ends up empty."""
        if self._session.step is not CheckoutStep.CONFIRMATION:
            return Error(self._wrong_step("complete"))
        self._cart.clear()
        return self._move(CheckoutSession(session_id=self._session_ids()))

    def cancel(self) -> Result[CheckoutSession, Refusal]:
        """Abandon this checkout; the cart is kept."""
        if self._session.step is CheckoutStep.CONFIRMATION:
            return Error(self._wrong_step("cancel"))
        return self._move(CheckoutSession(session_id=self._session_ids()))

    # Payment

    async def pay(self) -> Result[PaymentOutcome, CheckoutFailure]:
        """
        Place the order for the current cart.

        Ok(IN_FLIGHT) while a previous pay() is outstanding and
        Ok(AWAITING_CONTACT) for a guest without a contact; neither is a
        failure. Error means no order was created and the session is
        still in PAYMENT. The notifier runs in the background after the
        session is confirmed; see drain_notifications().
        """
        if self._in_flight:
            return Ok(PaymentOutcome(PaymentStatus.IN_FLIGHT))

        session = self._session
        if session.step is not CheckoutStep.PAYMENT or session.address is None:
            return Error(self._refused(self._wrong_step("pay")))

        match self._checkout_guards():
            case Error(refusal):
                return Error(self._refused(refusal))
            case Ok(_):
                pass

        if self._guest and session.guest_contact is None:
            return Ok(PaymentOutcome(PaymentStatus.AWAITING_CONTACT))

        snapshot = self._cart.snapshot
        payload = build_order_payload(
            snapshot,
            address=session.address,
            method=session.payment_method,
            customer=self._customer_for(session),
        )
        key = submission_key(session.session_id, payload)

        submission = Submission(
            key=key,
            place=lambda: place_order(
                payload,
                amount=snapshot.totals.total,
                method=session.payment_method,
                orders=self._orders,
                gateway=self._gateway,
                reference=key,
            ),
            ledger=self._ledger,
            ttl=self._config.submission_ttl,
        )

        self._in_flight = True
        try:
            result = await submit_once(submission)
        finally:
            self._in_flight = False

        current = self._session
        left = current.session_id != session.session_id or current.step is not CheckoutStep.PAYMENT

        match result:
            case Error(failure):
                logger.warning("Payment failed (%s): %s", failure.kind.name, failure.message)
                return Error(failure)
            case Ok(submitted):
                created = submitted.placement.created
                receipt = OrderReceipt(
                    order_id=created.order_id,
                    order_number=created.order_number,
                    payment_method=session.payment_method,
                    totals=snapshot.totals,
                    payload=submitted.placement.payload,
                    from_cache=submitted.from_cache,
                )

        if left:
            logger.warning("%s (order %s)", DISCARDED, receipt.order_number)
            return Ok(PaymentOutcome(PaymentStatus.DISCARDED, receipt=receipt, warning=DISCARDED))

        self._session = session.confirmed(receipt)
        self._cart.settle(snapshot)
        logger.info("Checkout %s confirmed as %s", session.session_id, receipt.order_number)
        if not submitted.from_cache:
            self._spawn_notification(receipt, payload["customerName"])
        return Ok(PaymentOutcome(PaymentStatus.CONFIRMED, receipt=receipt))

    # Internals

    def _checkout_guards(self) -> Result[None, Refusal]:
        """Empty cart, then business hours, then minimum order."""
        snapshot = self._cart.snapshot
        if snapshot.is_empty:
            return Error(Refusal(RefusalKind.EMPTY_CART, EMPTY_CART))

        status = self._rules.status
        if not status.is_open:
            return Error(
                Refusal(
                    RefusalKind.BUSINESS_CLOSED,
                    closed_message(status.reason),
                    reason=status.reason or None,
                )
            )

        minimum = snapshot.rules.minimum_order_value
        subtotal = snapshot.totals.subtotal
        if subtotal < minimum:
            shortfall = minimum - subtotal
            symbol = self._config.currency
            return Error(
                Refusal(
                    RefusalKind.MINIMUM_ORDER_NOT_MET,
                    f"Your order must be at least {format_money(minimum, symbol=symbol, fixed=True)}"
                    f" to check out. You need to add {format_money(shortfall, symbol=symbol, fixed=True)}"
                    " more to proceed.",
                    shortfall=shortfall,
                )
            )
        return Ok(None)

    def _customer_for(self, session: CheckoutSession) -> Customer:
        if not self._guest and self._customer is not None:
            return self._customer
        contact = session.guest_contact
        return Customer(
            name=contact.name if contact is not None else self._config.guest_name,
            phone=contact.phone if contact is not None else "",
            email=self._config.guest_email,
        )

    def _spawn_notification(self, receipt: OrderReceipt, customer_name: str) -> None:
        if self._notifier is None:
            return
        task = asyncio.create_task(self._notify(self._notifier, receipt, customer_name))
        self._notifications.add(task)
        task.add_done_callback(self._notifications.discard)

    async def _notify(self, notifier: Notifier, receipt: OrderReceipt, customer_name: str) -> None:
        summary = OrderSummary(
            order_id=receipt.order_id,
            order_number=receipt.order_number,
            customer_name=customer_name,
            amount=receipt.totals.total,
        )
        match await remote("order notification", lambda: notifier.notify(summary)):
            case Ok(Error(message)):
                logger.warning("Order %s notification failed: %s", receipt.order_number, message)
            case Error(err):
                logger.warning("Order %s notification failed: %s", receipt.order_number, err.message)
            case Ok(_):
                pass

    def _move(self, session: CheckoutSession) -> Result[CheckoutSession, Refusal]:
        if session.step is not self._session.step:
            logger.debug("Checkout %s: %s → %s", session.session_id, self._session.step.name, session.step.name)
        self._session = session
        return Ok(session)

    def _wrong_step(self, action: str) -> Refusal:
        return Refusal(
            RefusalKind.WRONG_STEP,
            f"Cannot {action} at the {self._session.step.name.lower()} step",
        )

    @staticmethod
    def _refused(refusal: Refusal) -> CheckoutFailure:
        return CheckoutFailure(CheckoutFailureKind.REFUSED, refusal.message, refusal=refusal)


__all__ = (
    "EMPTY_CART",
    "CLOSED_FALLBACK",
    "ADDRESS_REQUIRED",
    "DISCARDED",
    "closed_message",
    "CheckoutSessionMachine",
)
