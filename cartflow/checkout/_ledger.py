"""
Submission ledger — remembers which order submissions already went through.

Keyed by `order:{session_id}:{fingerprint}`. A completed entry answers a
retry with the order that was already created; a pending entry means a
submission with that key is still running.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum, auto
from typing import Protocol

from kungfu import Result, Ok, Error

from cartflow.checkout._placement import Placement


class EntryState(Enum):
    """
    Lifecycle:
        PENDING → COMPLETED
                → (deleted on failure, so the next attempt runs again)
    """

    PENDING = auto()
    COMPLETED = auto()


@dataclass(frozen=True, slots=True)
class LedgerEntry:
    key: str
    state: EntryState
    placement: Placement | None
    created_at: datetime
    expires_at: datetime | None

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at is not None and now > self.expires_at


@dataclass(frozen=True, slots=True)
class LedgerError:
    message: str
    cause: Exception | None = None


class SubmissionLedger(Protocol):
    async def get(self, key: str) -> Result[LedgerEntry | None, LedgerError]:
        """Entry for key, Ok(None) if absent or expired."""
        ...

    async def set_pending(self, key: str, ttl: timedelta | None) -> Result[bool, LedgerError]:
        """Claim the key. Ok(False) if a live entry already holds it."""
        ...

    async def set_completed(
        self,
        key: str,
        placement: Placement,
        ttl: timedelta | None,
    ) -> Result[None, LedgerError]: ...

    async def delete(self, key: str) -> Result[bool, LedgerError]: ...


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MemoryLedger:
    """In-process ledger. Entries do not survive a restart."""

    def __init__(self, *, clock: Callable[[], datetime] = _utcnow) -> None:
        self._entries: dict[str, LedgerEntry] = {}
        self._lock = asyncio.Lock()
        self._clock = clock

    async def get(self, key: str) -> Result[LedgerEntry | None, LedgerError]:
        async with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return Ok(None)
            if entry.is_expired(self._clock()):
                del self._entries[key]
                return Ok(None)
            return Ok(entry)

    async def set_pending(self, key: str, ttl: timedelta | None) -> Result[bool, LedgerError]:
        async with self._lock:
            now = self._clock()
            existing = self._entries.get(key)
            if existing is not None and not existing.is_expired(now):
                return Ok(False)

            self._entries[key] = LedgerEntry(
                key=key,
                state=EntryState.PENDING,
                placement=None,
                created_at=now,
                expires_at=now + ttl if ttl else None,
            )
            return Ok(True)

    async def set_completed(
        self,
        key: str,
        placement: Placement,
        ttl: timedelta | None,
    ) -> Result[None, LedgerError]:
        async with self._lock:
            existing = self._entries.get(key)
            if existing is None:
                return Error(LedgerError(f"No pending entry for key: {key}"))

            now = self._clock()
            self._entries[key] = LedgerEntry(
                key=key,
                state=EntryState.COMPLETED,
                placement=placement,
                created_at=existing.created_at,
                expires_at=now + ttl if ttl else None,
            )
            return Ok(None)

    async def delete(self, key: str) -> Result[bool, LedgerError]:
        async with self._lock:
            return Ok(self._entries.pop(key, None) is not None)

    def __len__(self) -> int:
        return len(self._entries)


__all__ = (
    "EntryState",
    "LedgerEntry",
    "LedgerError",
    "SubmissionLedger",
    "MemoryLedger",
)
