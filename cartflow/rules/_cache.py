"""
TTL tier — in-memory cache with per-entry expiry.

Expired entries are invisible to get() but stay readable through
last_known() so a failed refresh can fall back to them.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import timedelta


@dataclass(slots=True)
class _Entry[T]:
    value: T
    expires_at: float


class TtlTier[T]:
    """
    Example:
        tier = TtlTier[BusinessRules](timedelta(minutes=5))
        await tier.set("settings", rules)
        await tier.get("settings")   # None once five minutes have passed
    """

    def __init__(
        self,
        ttl: timedelta,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = ttl.total_seconds()
        self._clock = clock
        self._cache: dict[str, _Entry[T]] = {}

    async def get(self, key: str) -> T | None:
        entry = self._cache.get(key)
        if entry is None or self._clock() >= entry.expires_at:
            return None
        return entry.value

    async def set(self, key: str, value: T) -> None:
        self._cache[key] = _Entry(value, self._clock() + self._ttl)

    async def delete(self, key: str) -> bool:
        return self._cache.pop(key, None) is not None

    def last_known(self, key: str) -> T | None:
        """Value regardless of expiry."""
        entry = self._cache.get(key)
        return entry.value if entry is not None else None


__all__ = ("TtlTier",)
