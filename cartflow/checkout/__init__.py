"""
Checkout — session state machine and at-most-once order placement.

    from cartflow import checkout as K

    machine = K.CheckoutSessionMachine(
        cart,
        provider,
        orders,
        gateway=gateway,
        customer=K.Customer("Asha", "9876543210", "asha@example.com"),
    )
    machine.proceed_to_address()
    machine.select_address(address)
    machine.proceed_to_payment()

    match await machine.pay():
        case Ok(K.PaymentOutcome(status=K.PaymentStatus.CONFIRMED, receipt=receipt)):
            show(receipt.order_number)
        case Error(failure):
            show(failure.message)
"""

from cartflow.checkout._types import (
    CheckoutStep,
    PaymentMethod,
    GuestContact,
    OrderReceipt,
    CheckoutSession,
    RefusalKind,
    Refusal,
    PaymentStatus,
    PaymentOutcome,
    CheckoutFailureKind,
    CheckoutFailure,
)
from cartflow.checkout._payload import (
    Customer,
    build_order_payload,
    with_payment_details,
    fingerprint,
    submission_key,
)
from cartflow.checkout._placement import (
    PAYMENT_FAILED,
    ORDER_FAILED,
    Placement,
    place_order,
)
from cartflow.checkout._ledger import (
    EntryState,
    LedgerEntry,
    LedgerError,
    SubmissionLedger,
    MemoryLedger,
)
from cartflow.checkout._submit import (
    IN_PROGRESS,
    Submission,
    Submitted,
    submit_once,
)
from cartflow.checkout._machine import (
    EMPTY_CART,
    ADDRESS_REQUIRED,
    DISCARDED,
    closed_message,
    CheckoutSessionMachine,
)

__all__ = (
    # Types
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
    # Payload
    "Customer",
    "build_order_payload",
    "with_payment_details",
    "fingerprint",
    "submission_key",
    # Placement
    "PAYMENT_FAILED",
    "ORDER_FAILED",
    "Placement",
    "place_order",
    # Ledger
    "EntryState",
    "LedgerEntry",
    "LedgerError",
    "SubmissionLedger",
    "MemoryLedger",
    # Submission
    "IN_PROGRESS",
    "Submission",
    "Submitted",
    "submit_once",
    # Machine
    "EMPTY_CART",
    "ADDRESS_REQUIRED",
    "DISCARDED",
    "closed_message",
    "CheckoutSessionMachine",
)
