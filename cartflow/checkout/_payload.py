"""
Order payload — the JSON body an order is created from.

Built from a cart snapshot at the moment pay() runs, never from a cached
view. The fingerprint covers everything except paymentDetails, which
changes on every capture attempt.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass
from typing import Any

from cartflow._types import Money, round_money
from cartflow.cart import CartLineItem, CartSnapshot
from cartflow.pricing import NOT_APPLICABLE
from cartflow.services import DeliveryAddress, OrderPayload
from cartflow.checkout._types import PaymentMethod


@dataclass(frozen=True, slots=True)
class Customer:
    """Who the order is for, as it goes on the order."""

    name: str
    phone: str
    email: str


def _amount(value: Money) -> float:
    return float(round_money(value))


def _line_payload(line: CartLineItem) -> dict[str, Any]:
    return {
        "menuItemId": line.item_id,
        "name": line.name,
        "quantity": line.quantity,
        "price": _amount(line.unit_price),
        "size": line.size or NOT_APPLICABLE,
        "foodType": line.food_type or NOT_APPLICABLE,
        "customizations": [
            {"name": c.category, "option": c.option, "price": _amount(c.price)}
            for c in line.customizations
        ],
        "addOns": [
            {"name": a.name, "option": a.name, "price": _amount(a.price)}
            for a in line.add_ons
        ],
    }


def _address_payload(address: DeliveryAddress) -> dict[str, str]:
    return {
        "street": address.address_line1,
        "city": address.city,
        "state": address.state,
        "zipCode": address.zip_code,
        "landmark": address.landmark,
    }


def build_order_payload(
    snapshot: CartSnapshot,
    *,
    address: DeliveryAddress,
    method: PaymentMethod,
    customer: Customer,
    notes: str = "",
) -> OrderPayload:
    """
    Order body without payment details.

    Example:
        payload = build_order_payload(cart.snapshot, address=addr,
                                      method=PaymentMethod.ONLINE, customer=me)
        payload["amount"]  # 407.9
    """
    totals = snapshot.totals
    discount = snapshot.discount
    return {
        "items": [_line_payload(line) for line in snapshot.lines],
        "amount": _amount(totals.total),
        "subtotal": _amount(totals.subtotal),
        "discount": _amount(totals.discount_amount),
        "discountCode": discount.code if discount is not None else "",
        "deliveryFee": _amount(totals.delivery_fee),
        "tax": _amount(totals.tax_amount),
        "address": _address_payload(address),
        "paymentMethod": method.value,
        "paymentDetails": {},
        "customerName": customer.name,
        "customerPhone": customer.phone,
        "customerEmail": customer.email,
        "notes": notes,
    }


def with_payment_details(payload: OrderPayload, details: dict[str, str]) -> OrderPayload:
    return {**payload, "paymentDetails": dict(details)}


def fingerprint(payload: OrderPayload) -> str:
    """sha256 over canonical JSON of the payload minus paymentDetails."""
    content = {k: v for k, v in payload.items() if k != "paymentDetails"}
    canonical = json.dumps(content, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def submission_key(session_id: str, payload: OrderPayload) -> str:
    return f"order:{session_id}:{fingerprint(payload)}"


__all__ = (
    "Customer",
    "build_order_payload",
    "with_payment_details",
    "fingerprint",
    "submission_key",
)
