"""
BusinessRulesProvider — refreshes business settings and feeds bound carts.

A refresh never raises. On transport failure the provider keeps serving
the last known rules (or the fallback defaults) and says so in the
returned RulesRefresh.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable
from datetime import timedelta
from typing import TYPE_CHECKING

from kungfu import Ok, Error

from cartflow._config import CheckoutConfig
from cartflow.lift import remote
from cartflow.rules._types import (
    BusinessRules,
    BusinessStatus,
    DEFAULT_RULES,
    OPEN,
    RulesRefresh,
)
from cartflow.rules._cache import TtlTier

if TYPE_CHECKING:
    from cartflow.cart import CartStore

logger = logging.getLogger(__name__)

type RulesSource = Callable[[], Awaitable[BusinessRules]]
type StatusSource = Callable[[], Awaitable[BusinessStatus]]

_SETTINGS_KEY = "business-settings"
DEFAULT_RULES_TTL = timedelta(minutes=5)


class BusinessRulesProvider:
    """
    Example:
        provider = BusinessRulesProvider(catalog.business_settings, ttl=timedelta(minutes=5))
        provider.bind(cart)

        refreshed = await provider.refresh()
        if refreshed.stale:
            log(refreshed.error)
    """

    def __init__(
        self,
        source: RulesSource,
        *,
        ttl: timedelta = DEFAULT_RULES_TTL,
        fallback: BusinessRules = DEFAULT_RULES,
        status_source: StatusSource | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._source = source
        self._status_source = status_source
        self._tier: TtlTier[BusinessRules] = TtlTier(ttl, clock=clock)
        self._current = fallback
        self._status = OPEN
        self._carts: list[CartStore] = []

    @classmethod
    def from_config(
        cls,
        config: CheckoutConfig,
        source: RulesSource,
        *,
        status_source: StatusSource | None = None,
    ) -> BusinessRulesProvider:
        return cls(source, ttl=config.rules_ttl, status_source=status_source)

    @property
    def current(self) -> BusinessRules:
        return self._current

    @property
    def status(self) -> BusinessStatus:
        return self._status

    def update_status(self, status: BusinessStatus) -> None:
        if status != self._status:
            logger.info(
                "Business is now %s%s",
                "open" if status.is_open else "closed",
                f" ({status.reason})" if status.reason else "",
            )
        self._status = status

    # Carts

    def bind(self, cart: CartStore) -> Callable[[], None]:
        """Push current and future rules into `cart`. Returns an unbind function."""
        self._carts.append(cart)
        if cart.rules != self._current:
            cart.update_business_rules(self._current)

        def unbind() -> None:
            if cart in self._carts:
                self._carts.remove(cart)

        return unbind

    # Refresh

    async def refresh(self, *, force: bool = False) -> RulesRefresh:
        """
        Fetch settings unless a fresh copy is cached.

        force bypasses the cache; used when the settings screen saves.
        """
        if not force:
            cached = await self._tier.get(_SETTINGS_KEY)
            if cached is not None:
                return RulesRefresh(cached)

        fetched = await remote("business settings refresh", self._source)
        match fetched:
            case Ok(rules):
                await self._tier.set(_SETTINGS_KEY, rules)
                self._publish(rules)
                return RulesRefresh(rules)
            case Error(err):
                last = self._tier.last_known(_SETTINGS_KEY) or self._current
                logger.warning("Keeping previous business rules: %s", err.message)
                return RulesRefresh(last, stale=True, error=err.message)

    async def refresh_status(self) -> BusinessStatus:
        """Poll open/closed status; a failed poll keeps the last status."""
        if self._status_source is None:
            return self._status
        fetched = await remote("business status refresh", self._status_source)
        match fetched:
            case Ok(status):
                self.update_status(status)
            case Error(err):
                logger.warning("Keeping previous business status: %s", err.message)
        return self._status

    async def invalidate(self) -> bool:
        return await self._tier.delete(_SETTINGS_KEY)

    def _publish(self, rules: BusinessRules) -> None:
        changed = rules != self._current
        self._current = rules
        if not changed:
            return
        logger.info("Business rules updated")
        for cart in tuple(self._carts):
            cart.update_business_rules(rules)


__all__ = (
    "RulesSource",
    "StatusSource",
    "DEFAULT_RULES_TTL",
    "BusinessRulesProvider",
)
