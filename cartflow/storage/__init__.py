"""
Storage — local key-value persistence for the cart and guest data.

    from cartflow import storage as St

    store, engine = await St.create_kv_store("sqlite+aiosqlite:///cartflow.db")

    writer = St.CartSnapshotWriter(store)
    writer.attach(cart)
    await St.load_cart(store, cart)
    ...
    await writer.flush()
"""

from cartflow.storage._kv import (
    JsonValue,
    CART_KEY,
    GUEST_ORDERS_KEY,
    GUEST_ADDRESSES_KEY,
    OFFER_CODE_KEY,
    StorageError,
    KeyValueStore,
    MemoryKeyValueStore,
    KeyValueEntry,
    SQLAlchemyKeyValueStore,
    create_kv_store,
)
from cartflow.storage._records import (
    LineRecord,
    DiscountRecord,
    CartRecord,
)
from cartflow.storage._snapshot import (
    CartSnapshotWriter,
    load_cart,
    OfferCodeHint,
)

__all__ = (
    "JsonValue",
    "CART_KEY",
    "GUEST_ORDERS_KEY",
    "GUEST_ADDRESSES_KEY",
    "OFFER_CODE_KEY",
    "StorageError",
    "KeyValueStore",
    "MemoryKeyValueStore",
    "KeyValueEntry",
    "SQLAlchemyKeyValueStore",
    "create_kv_store",
    "LineRecord",
    "DiscountRecord",
    "CartRecord",
    "CartSnapshotWriter",
    "load_cart",
    "OfferCodeHint",
)
