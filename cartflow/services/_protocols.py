"""
Collaborator contracts.

Implementations do raw I/O and may raise (RemoteFailure for a non-2xx
response, PaymentDeclined for a refused capture); cartflow lifts every
call through `cartflow.lift.remote` so failures arrive as values.
"""

from __future__ import annotations

from typing import Any, Protocol

from kungfu import Result

from cartflow._types import Money
from cartflow.pricing import CatalogItem
from cartflow.discount import Offer
from cartflow.rules import BusinessRules, BusinessStatus
from cartflow.services._types import (
    AddressDraft,
    DeliveryAddress,
    OrderCreated,
    OrderSummary,
    PaymentCapture,
)

type OrderPayload = dict[str, Any]
"""JSON body of an order submission."""


class PaymentDeclined(Exception):
    """Raised by a gateway when the capture is refused."""

    def __init__(self, message: str = "Payment failed") -> None:
        super().__init__(message)
        self.message = message


class CatalogService(Protocol):
    async def list_items(self) -> list[CatalogItem]: ...

    async def business_settings(self) -> BusinessRules: ...

    async def business_status(self) -> BusinessStatus: ...

    async def offer_by_code(self, code: str) -> Offer | None:
        """None (or RemoteFailure 404) for an unknown code."""
        ...


class AddressService(Protocol):
    """
    Saved addresses of the acting user.

    Every mutation returns the full, updated list.
    """

    async def list(self) -> list[DeliveryAddress]: ...

    async def add(
        self, draft: AddressDraft, *, make_default: bool = False
    ) -> list[DeliveryAddress]: ...

    async def update(
        self, address_id: str, draft: AddressDraft, *, make_default: bool = False
    ) -> list[DeliveryAddress]: ...

    async def delete(self, address_id: str) -> list[DeliveryAddress]: ...

    async def set_default(self, address_id: str) -> list[DeliveryAddress]: ...


class OrderService(Protocol):
    async def place(self, payload: OrderPayload) -> OrderCreated: ...


class PaymentGateway(Protocol):
    async def capture(self, amount: Money, reference: str) -> PaymentCapture:
        """Charge `amount`. Raises PaymentDeclined when refused."""
        ...

    async def refund(self, capture: PaymentCapture) -> None: ...


class Notifier(Protocol):
    """Fire-and-forget order notification; retries are its own business."""

    async def notify(self, summary: OrderSummary) -> Result[None, str]: ...


__all__ = (
    "OrderPayload",
    "PaymentDeclined",
    "CatalogService",
    "AddressService",
    "OrderService",
    "PaymentGateway",
    "Notifier",
)
