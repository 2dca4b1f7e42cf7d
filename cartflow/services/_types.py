"""
Service-facing domain types — addresses and order records.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, replace

from cartflow._types import Money

# ═══════════════════════════════════════════════════════════════════════════════
# Addresses
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class AddressDraft:
    """Address fields as entered, before a service assigns an id."""

    address_line1: str
    city: str
    state: str
    zip_code: str
    landmark: str = ""
    phone: str = ""
    name: str = ""


@dataclass(frozen=True, slots=True)
class DeliveryAddress:
    """A saved address. Opaque to checkout apart from what goes into the order."""

    id: str
    address_line1: str
    city: str
    state: str
    zip_code: str
    landmark: str = ""
    phone: str = ""
    name: str = ""
    is_default: bool = False

    @classmethod
    def from_draft(cls, address_id: str, draft: AddressDraft, *, is_default: bool) -> DeliveryAddress:
        return cls(
            id=address_id,
            address_line1=draft.address_line1,
            city=draft.city,
            state=draft.state,
            zip_code=draft.zip_code,
            landmark=draft.landmark,
            phone=draft.phone,
            name=draft.name,
            is_default=is_default,
        )

    def as_default(self, is_default: bool = True) -> DeliveryAddress:
        return replace(self, is_default=is_default)


def preferred_address(addresses: Sequence[DeliveryAddress]) -> DeliveryAddress | None:
    """The default address, else the first one."""
    for address in addresses:
        if address.is_default:
            return address
    return addresses[0] if addresses else None


# ═══════════════════════════════════════════════════════════════════════════════
# Orders
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class OrderCreated:
    """What the order service hands back."""

    order_id: str
    order_number: str
    status: str = "Pending"


@dataclass(frozen=True, slots=True)
class OrderSummary:
    """Metadata sent to the notifier after an order is created."""

    order_id: str
    order_number: str
    customer_name: str
    amount: Money


@dataclass(frozen=True, slots=True)
class PaymentCapture:
    """A successful online capture; refunded if the order cannot be created."""

    payment_id: str
    amount: Money
    details: dict[str, str]


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "AddressDraft",
    "DeliveryAddress",
    "preferred_address",
    "OrderCreated",
    "OrderSummary",
    "PaymentCapture",
)
