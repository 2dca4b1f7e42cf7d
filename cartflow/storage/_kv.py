"""
Key-value store — durable local state for guest mode.

KeyValueStore — Result-returning protocol over JSON-serialisable values.
Two implementations: MemoryKeyValueStore (tests, single process) and
SQLAlchemyKeyValueStore (one `kv_entries` table, async engine).
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Protocol

from sqlalchemy import DateTime, String, Text, select
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from kungfu import Result, Ok, Error

logger = logging.getLogger(__name__)

type JsonValue = Any
"""Anything json.dumps accepts."""

# ═══════════════════════════════════════════════════════════════════════════════
# Fixed Keys
# ═══════════════════════════════════════════════════════════════════════════════

CART_KEY = "cart_data"
GUEST_ORDERS_KEY = "guestOrders"
GUEST_ADDRESSES_KEY = "guestAddresses"
OFFER_CODE_KEY = "selectedOfferCode"


# ═══════════════════════════════════════════════════════════════════════════════
# Storage Error
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class StorageError:
    """Storage operation error."""

    message: str
    cause: Exception | None = None


# ═══════════════════════════════════════════════════════════════════════════════
# Protocol
# ═══════════════════════════════════════════════════════════════════════════════


class KeyValueStore(Protocol):
    """
    Opaque key-value persistence.

    Values go in and come out as plain JSON data; a value that cannot be
    serialised is an Error, not an exception.
    """

    async def get(self, key: str) -> Result[JsonValue | None, StorageError]:
        """Stored value, or Ok(None) when the key is absent."""
        ...

    async def set(self, key: str, value: JsonValue) -> Result[None, StorageError]:
        ...

    async def delete(self, key: str) -> Result[bool, StorageError]:
        """Returns Ok(True) if the key existed."""
        ...


def _encode(key: str, value: JsonValue) -> Result[str, StorageError]:
    try:
        return Ok(json.dumps(value, separators=(",", ":")))
    except (TypeError, ValueError) as e:
        return Error(StorageError(f"Value for {key!r} is not JSON-serialisable: {e}", e))


def _decode(key: str, raw: str) -> Result[JsonValue, StorageError]:
    try:
        return Ok(json.loads(raw))
    except ValueError as e:
        return Error(StorageError(f"Corrupt value under {key!r}: {e}", e))


# ═══════════════════════════════════════════════════════════════════════════════
# Memory Store — For Testing
# ═══════════════════════════════════════════════════════════════════════════════


class MemoryKeyValueStore:
    """
    In-memory store.

    Values are kept serialised so callers never share mutable state with
    the store, the same as with a real backend.
    """

    def __init__(self) -> None:
        self._data: dict[str, str] = {}
        self._lock = asyncio.Lock()

    async def get(self, key: str) -> Result[JsonValue | None, StorageError]:
        async with self._lock:
            raw = self._data.get(key)
        if raw is None:
            return Ok(None)
        return _decode(key, raw)

    async def set(self, key: str, value: JsonValue) -> Result[None, StorageError]:
        match _encode(key, value):
            case Ok(raw):
                async with self._lock:
                    self._data[key] = raw
                return Ok(None)
            case Error(err):
                return Error(err)

    async def delete(self, key: str) -> Result[bool, StorageError]:
        async with self._lock:
            return Ok(self._data.pop(key, None) is not None)

    def keys(self) -> tuple[str, ...]:
        return tuple(self._data)


# ═══════════════════════════════════════════════════════════════════════════════
# SQLAlchemy Store
# ═══════════════════════════════════════════════════════════════════════════════


class Base(DeclarativeBase):
    pass


class KeyValueEntry(Base):
    __tablename__ = "kv_entries"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class SQLAlchemyKeyValueStore:
    """
    Key-value store over a single SQLAlchemy table.

    Example:
        store, engine = await create_kv_store("sqlite+aiosqlite:///cartflow.db")
        await store.set(CART_KEY, record)
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get(self, key: str) -> Result[JsonValue | None, StorageError]:
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(KeyValueEntry.value).where(KeyValueEntry.key == key)
                )
                raw = result.scalar_one_or_none()
        except Exception as e:
            return Error(StorageError(f"Failed to get {key!r}: {e}", e))

        if raw is None:
            return Ok(None)
        return _decode(key, raw)

    async def set(self, key: str, value: JsonValue) -> Result[None, StorageError]:
        match _encode(key, value):
            case Error(err):
                return Error(err)
            case Ok(raw):
                pass

        try:
            async with self._session_factory() as session:
                await session.merge(
                    KeyValueEntry(
                        key=key,
                        value=raw,
                        updated_at=datetime.now(timezone.utc),
                    )
                )
                await session.commit()
                return Ok(None)
        except Exception as e:
            return Error(StorageError(f"Failed to set {key!r}: {e}", e))

    async def delete(self, key: str) -> Result[bool, StorageError]:
        try:
            async with self._session_factory() as session:
                entry = await session.get(KeyValueEntry, key)
                if entry is None:
                    return Ok(False)
                await session.delete(entry)
                await session.commit()
                return Ok(True)
        except Exception as e:
            return Error(StorageError(f"Failed to delete {key!r}: {e}", e))


async def create_kv_store(
    url: str = "sqlite+aiosqlite:///:memory:",
) -> tuple[SQLAlchemyKeyValueStore, AsyncEngine]:
    """Create the table and return (store, engine)."""
    engine = create_async_engine(url, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    logger.debug("Key-value store ready at %s", engine.url.render_as_string(hide_password=True))
    return SQLAlchemyKeyValueStore(async_sessionmaker(engine, expire_on_commit=False)), engine


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "JsonValue",
    "CART_KEY",
    "GUEST_ORDERS_KEY",
    "GUEST_ADDRESSES_KEY",
    "OFFER_CODE_KEY",
    "StorageError",
    "KeyValueStore",
    "MemoryKeyValueStore",
    "Base",
    "KeyValueEntry",
    "SQLAlchemyKeyValueStore",
    "create_kv_store",
)
