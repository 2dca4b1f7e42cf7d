"""
Services — contracts for the collaborators around the core.

Catalog, addresses, orders, payment and notification are Protocols; their
payloads are validated by pydantic schemas before anything reaches the
core. Guest mode swaps the remote address and order services for the
device-local ones.

    from cartflow import services as S

    match S.decode(S.OfferPayload, body, operation="offer lookup"):
        case Ok(payload):
            offer = payload.to_domain()

    addresses = S.GuestAddressBook(store)
    orders = S.GuestOrderBook(store)
"""

from cartflow.services._types import (
    AddressDraft,
    DeliveryAddress,
    preferred_address,
    OrderCreated,
    OrderSummary,
    PaymentCapture,
)
from cartflow.services._protocols import (
    OrderPayload,
    PaymentDeclined,
    CatalogService,
    AddressService,
    OrderService,
    PaymentGateway,
    Notifier,
)
from cartflow.services._schemas import (
    CatalogItemPayload,
    BusinessSettingsPayload,
    BusinessStatusPayload,
    OfferPayload,
    OrderCreatedPayload,
    AddressPayload,
    decode,
    decode_list,
)
from cartflow.services._local import (
    ORDER_SAVE_FAILED,
    LocalStorageFailure,
    GuestAddressBook,
    guest_order_number,
    GuestOrderBook,
)

__all__ = (
    # Types
    "AddressDraft",
    "DeliveryAddress",
    "preferred_address",
    "OrderCreated",
    "OrderSummary",
    "PaymentCapture",
    # Protocols
    "OrderPayload",
    "PaymentDeclined",
    "CatalogService",
    "AddressService",
    "OrderService",
    "PaymentGateway",
    "Notifier",
    # Schemas
    "CatalogItemPayload",
    "BusinessSettingsPayload",
    "BusinessStatusPayload",
    "OfferPayload",
    "OrderCreatedPayload",
    "AddressPayload",
    "decode",
    "decode_list",
    # Guest mode
    "ORDER_SAVE_FAILED",
    "LocalStorageFailure",
    "GuestAddressBook",
    "guest_order_number",
    "GuestOrderBook",
)
