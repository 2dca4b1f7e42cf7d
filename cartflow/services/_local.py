"""
Guest-local services — address book and order book over the key-value store.

Guests have no account, so their addresses and orders live on the device.
Both classes satisfy the same protocols as the remote services and raise
the way a transport adapter would; callers lift them through `remote()`.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

from kungfu import Ok, Error

from cartflow.services._protocols import OrderPayload
from cartflow.services._schemas import AddressPayload, decode_list
from cartflow.services._types import AddressDraft, DeliveryAddress, OrderCreated
from cartflow.storage import (
    GUEST_ADDRESSES_KEY,
    GUEST_ORDERS_KEY,
    KeyValueStore,
    StorageError,
)

logger = logging.getLogger(__name__)

ORDER_NUMBER_PREFIX = "GO-"
ORDER_SAVE_FAILED = "Failed to save your order. Please try again."


class LocalStorageFailure(Exception):
    """The device store refused a read or write."""

    def __init__(self, message: str, error: StorageError | None = None) -> None:
        super().__init__(message)
        self.error = error


def _new_id() -> str:
    return uuid.uuid4().hex


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ═══════════════════════════════════════════════════════════════════════════════
# Address Book
# ═══════════════════════════════════════════════════════════════════════════════


class GuestAddressBook:
    """
    Addresses saved on the device.

    The first address saved becomes the default; making one address the
    default clears the flag on every other. Deleting the default promotes
    the first remaining address.
    """

    def __init__(
        self,
        store: KeyValueStore,
        *,
        key: str = GUEST_ADDRESSES_KEY,
        id_factory: Callable[[], str] = _new_id,
    ) -> None:
        self._store = store
        self._key = key
        self._id_factory = id_factory

    async def list(self) -> list[DeliveryAddress]:
        match await self._store.get(self._key):
            case Error(err):
                raise LocalStorageFailure(err.message, err)
            case Ok(None):
                return []
            case Ok(raw):
                pass

        match decode_list(AddressPayload, raw, operation="guest address load"):
            case Ok(payloads):
                return [p.to_domain() for p in payloads]
            case Error(err):
                logger.warning("Discarding unreadable guest addresses: %s", err.message)
                return []

    async def add(
        self, draft: AddressDraft, *, make_default: bool = False
    ) -> list[DeliveryAddress]:
        addresses = await self.list()
        is_default = make_default or not addresses
        address = DeliveryAddress.from_draft(self._id_factory(), draft, is_default=is_default)
        if is_default:
            addresses = [a.as_default(False) for a in addresses]
        return await self._save([*addresses, address])

    async def update(
        self, address_id: str, draft: AddressDraft, *, make_default: bool = False
    ) -> list[DeliveryAddress]:
        addresses = await self.list()
        current = self._find(addresses, address_id)
        updated = DeliveryAddress.from_draft(
            address_id, draft, is_default=make_default or current.is_default
        )
        return await self._save(
            [
                updated if a.id == address_id
                else a.as_default(False) if make_default
                else a
                for a in addresses
            ]
        )

    async def delete(self, address_id: str) -> list[DeliveryAddress]:
        addresses = await self.list()
        removed = self._find(addresses, address_id)
        remaining = [a for a in addresses if a.id != address_id]
        if removed.is_default and remaining:
            remaining[0] = remaining[0].as_default()
        return await self._save(remaining)

    async def set_default(self, address_id: str) -> list[DeliveryAddress]:
        addresses = await self.list()
        self._find(addresses, address_id)
        return await self._save([a.as_default(a.id == address_id) for a in addresses])

    @staticmethod
    def _find(addresses: list[DeliveryAddress], address_id: str) -> DeliveryAddress:
        for address in addresses:
            if address.id == address_id:
                return address
        raise LookupError(f"Address {address_id!r} not found")

    async def _save(self, addresses: list[DeliveryAddress]) -> list[DeliveryAddress]:
        dumped = [AddressPayload.from_domain(a).dump() for a in addresses]
        match await self._store.set(self._key, dumped):
            case Ok(_):
                return addresses
            case Error(err):
                raise LocalStorageFailure(err.message, err)


# ═══════════════════════════════════════════════════════════════════════════════
# Order Book
# ═══════════════════════════════════════════════════════════════════════════════


def guest_order_number(now: datetime) -> str:
    """GO- plus the last six digits of the millisecond timestamp."""
    millis = int(now.timestamp() * 1000)
    return f"{ORDER_NUMBER_PREFIX}{str(millis)[-6:]}"


class GuestOrderBook:
    """
    Orders placed in guest mode, kept on the device with status "Pending".

    Example:
        book = GuestOrderBook(store)
        created = await book.place(payload)
        created.order_number  # "GO-482913"
    """

    def __init__(
        self,
        store: KeyValueStore,
        *,
        key: str = GUEST_ORDERS_KEY,
        clock: Callable[[], datetime] = _utcnow,
        id_factory: Callable[[], str] = _new_id,
    ) -> None:
        self._store = store
        self._key = key
        self._clock = clock
        self._id_factory = id_factory

    async def history(self) -> list[dict[str, Any]]:
        """Stored order records, newest last."""
        match await self._store.get(self._key):
            case Error(err):
                raise LocalStorageFailure(err.message, err)
            case Ok(list() as records):
                return [r for r in records if isinstance(r, dict)]
            case Ok(None):
                return []
            case Ok(_):
                logger.warning("Discarding unreadable guest order history")
                return []

    async def place(self, payload: OrderPayload) -> OrderCreated:
        now = self._clock()
        stamp = now.isoformat()
        record = {
            **payload,
            "_id": self._id_factory(),
            "orderNumber": guest_order_number(now),
            "status": "Pending",
            "createdAt": stamp,
            "updatedAt": stamp,
        }

        try:
            records = await self.history()
        except LocalStorageFailure as e:
            raise LocalStorageFailure(ORDER_SAVE_FAILED, e.error) from e

        match await self._store.set(self._key, [*records, record]):
            case Ok(_):
                logger.info("Guest order %s saved", record["orderNumber"])
                return OrderCreated(
                    order_id=record["_id"],
                    order_number=record["orderNumber"],
                    status=record["status"],
                )
            case Error(err):
                raise LocalStorageFailure(ORDER_SAVE_FAILED, err)


__all__ = (
    "ORDER_NUMBER_PREFIX",
    "ORDER_SAVE_FAILED",
    "LocalStorageFailure",
    "GuestAddressBook",
    "guest_order_number",
    "GuestOrderBook",
)
