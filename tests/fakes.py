"""In-memory collaborators for tests."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from kungfu import Result, Ok, Error

from cartflow.cart import CartLineItem, CustomizationChoice
from cartflow.discount import Offer
from cartflow.pricing import SelectedAddOn
from cartflow.lift import RemoteFailure
from cartflow.rules import BusinessRules, BusinessStatus, DEFAULT_RULES, OPEN
from cartflow.services import (
    OrderCreated,
    OrderSummary,
    PaymentCapture,
    PaymentDeclined,
)
from cartflow.storage import JsonValue, StorageError


@dataclass
class FakeCatalog:
    rules: BusinessRules = DEFAULT_RULES
    business: BusinessStatus = OPEN
    offers: dict[str, Offer] = field(default_factory=dict)
    settings_failure: Exception | None = None
    offer_failure: Exception | None = None
    settings_calls: int = 0
    offer_calls: list[str] = field(default_factory=list)

    async def business_settings(self) -> BusinessRules:
        self.settings_calls += 1
        if self.settings_failure is not None:
            raise self.settings_failure
        return self.rules

    async def business_status(self) -> BusinessStatus:
        return self.business

    async def offer_by_code(self, code: str) -> Offer | None:
        self.offer_calls.append(code)
        if self.offer_failure is not None:
            raise self.offer_failure
        return self.offers.get(code)


@dataclass
class FakeOrders:
    failure: Exception | None = None
    placed: list[dict[str, Any]] = field(default_factory=list)

    async def place(self, payload: dict[str, Any]) -> OrderCreated:
        if self.failure is not None:
            raise self.failure
        self.placed.append(payload)
        n = len(self.placed)
        return OrderCreated(order_id=f"ord_{n}", order_number=f"ORD-{1000 + n}")


@dataclass
class FakeGateway:
    decline: str | None = None
    refund_failure: Exception | None = None
    captures: list[PaymentCapture] = field(default_factory=list)
    refunds: list[PaymentCapture] = field(default_factory=list)

    async def capture(self, amount: Decimal, reference: str) -> PaymentCapture:
        if self.decline is not None:
            raise PaymentDeclined(self.decline)
        capture = PaymentCapture(
            payment_id=f"pay_{len(self.captures) + 1}",
            amount=amount,
            details={"method": "razorpay", "reference": reference},
        )
        self.captures.append(capture)
        return capture

    async def refund(self, capture: PaymentCapture) -> None:
        if self.refund_failure is not None:
            raise self.refund_failure
        self.refunds.append(capture)


@dataclass
class FakeNotifier:
    error: str | None = None
    explode: bool = False
    sent: list[OrderSummary] = field(default_factory=list)

    async def notify(self, summary: OrderSummary) -> Result[None, str]:
        if self.explode:
            raise RuntimeError("socket closed")
        self.sent.append(summary)
        if self.error is not None:
            return Error(self.error)
        return Ok(None)


class BrokenStore:
    """Key-value store whose writes always fail."""

    def __init__(self, stored: dict[str, JsonValue] | None = None) -> None:
        self._stored = dict(stored or {})

    async def get(self, key: str) -> Result[JsonValue | None, StorageError]:
        return Ok(self._stored.get(key))

    async def set(self, key: str, value: JsonValue) -> Result[None, StorageError]:
        return Error(StorageError("disk full"))

    async def delete(self, key: str) -> Result[bool, StorageError]:
        return Error(StorageError("disk full"))


def line(
    item_id: str = "m1",
    price: str = "199",
    quantity: int = 1,
    *,
    size: str = "Medium",
    name: str = "Margherita",
    add_ons: tuple[SelectedAddOn, ...] = (),
    customizations: tuple[CustomizationChoice, ...] = (),
) -> CartLineItem:
    return CartLineItem(
        item_id=item_id,
        name=name,
        unit_price=Decimal(price),
        quantity=quantity,
        size=size,
        food_type="Veg",
        add_ons=add_ons,
        customizations=customizations,
    )


def server_error(message: str = "Internal error", status: int = 500) -> RemoteFailure:
    return RemoteFailure(status, {"message": message})
