"""
Write-behind cart persistence and the pending offer-code hint.

The store is a mirror, never a source of truth: the writer keeps only the
latest snapshot and writes it when flushed; the cart is read back from it
once, at startup.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pydantic import ValidationError

from kungfu import Result, Ok, Error

from cartflow.cart import CartSnapshot
from cartflow.storage._kv import (
    CART_KEY,
    OFFER_CODE_KEY,
    KeyValueStore,
    StorageError,
)
from cartflow.storage._records import CartRecord

if TYPE_CHECKING:
    from collections.abc import Callable

    from cartflow.cart import CartStore

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════════
# Snapshot Writer
# ═══════════════════════════════════════════════════════════════════════════════


class CartSnapshotWriter:
    """
    Mirrors committed cart snapshots into a key-value store.

    Example:
        writer = CartSnapshotWriter(store)
        writer.attach(cart)
        cart.add_item(line)
        await writer.flush()
    """

    def __init__(self, store: KeyValueStore, *, key: str = CART_KEY) -> None:
        self._store = store
        self._key = key
        self._pending: CartSnapshot | None = None

    @property
    def pending(self) -> CartSnapshot | None:
        return self._pending

    def attach(self, cart: CartStore) -> Callable[[], None]:
        return cart.subscribe(self.capture)

    def capture(self, snapshot: CartSnapshot) -> None:
        """Cart listener: remember the latest snapshot, older ones are dropped."""
        self._pending = snapshot

    async def flush(self) -> Result[bool, StorageError]:
        """
        Write the latest snapshot. Ok(False) when there was nothing to write.

        On failure the snapshot stays pending for the next flush.
        """
        snapshot = self._pending
        if snapshot is None:
            return Ok(False)

        written = await self._store.set(self._key, CartRecord.from_snapshot(snapshot).dump())
        match written:
            case Ok(_):
                if self._pending is snapshot:
                    self._pending = None
                return Ok(True)
            case Error(err):
                logger.warning("Cart snapshot not saved: %s", err.message)
                return Error(err)


async def load_cart(
    store: KeyValueStore,
    cart: CartStore,
    *,
    key: str = CART_KEY,
) -> Result[bool, StorageError]:
    """
    Restore a persisted cart into `cart`.

    Ok(False) when nothing usable is stored; a malformed record is logged
    and ignored rather than half-loaded.
    """
    stored = await store.get(key)
    match stored:
        case Error(err):
            logger.warning("Cart snapshot not loaded: %s", err.message)
            return Error(err)
        case Ok(None):
            return Ok(False)
        case Ok(raw):
            try:
                record = CartRecord.model_validate(raw)
            except ValidationError as e:
                logger.warning("Ignoring malformed cart snapshot: %d errors", e.error_count())
                return Ok(False)

    cart.restore(
        (item.to_line() for item in record.items),
        record.discount.to_discount() if record.discount is not None else None,
    )
    return Ok(True)


# ═══════════════════════════════════════════════════════════════════════════════
# Offer Code Hint
# ═══════════════════════════════════════════════════════════════════════════════


class OfferCodeHint:
    """
    An offer code picked on the offers screen, waiting to be applied at the cart.

    take() reads and forgets it.
    """

    def __init__(self, store: KeyValueStore, *, key: str = OFFER_CODE_KEY) -> None:
        self._store = store
        self._key = key

    async def remember(self, code: str) -> Result[None, StorageError]:
        return await self._store.set(self._key, code.strip().upper())

    async def peek(self) -> Result[str | None, StorageError]:
        stored = await self._store.get(self._key)
        match stored:
            case Ok(str() as code) if code:
                return Ok(code)
            case Ok(_):
                return Ok(None)
            case Error(err):
                return Error(err)

    async def take(self) -> Result[str | None, StorageError]:
        peeked = await self.peek()
        match peeked:
            case Ok(None) | Error(_):
                return peeked
            case Ok(code):
                match await self._store.delete(self._key):
                    case Error(err):
                        return Error(err)
                    case Ok(_):
                        return Ok(code)

    async def forget(self) -> Result[bool, StorageError]:
        return await self._store.delete(self._key)


__all__ = ("CartSnapshotWriter", "load_cart", "OfferCodeHint")
