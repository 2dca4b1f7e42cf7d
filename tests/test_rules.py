from datetime import timedelta
from decimal import Decimal

import pytest

from cartflow.cart import CartStore
from cartflow.rules import (
    BusinessRules,
    BusinessRulesProvider,
    BusinessStatus,
    DEFAULT_RULES,
    TtlTier,
)

from tests.fakes import FakeCatalog, line, server_error


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cheaper() -> BusinessRules:
    return DEFAULT_RULES.with_delivery(fixed=Decimal(25)).with_gst(Decimal(12))


class TestTtlTier:
    async def test_expiry(self, clock: FakeClock) -> None:
        tier: TtlTier[str] = TtlTier(timedelta(seconds=10), clock=clock)
        await tier.set("k", "v")

        clock.advance(9)
        assert await tier.get("k") == "v"
        clock.advance(1)
        assert await tier.get("k") is None
        assert tier.last_known("k") == "v"

    async def test_set_restarts_expiry(self, clock: FakeClock) -> None:
        tier: TtlTier[int] = TtlTier(timedelta(minutes=1), clock=clock)
        await tier.set("a", 1)
        clock.advance(50)
        await tier.set("a", 2)
        clock.advance(50)

        assert await tier.get("a") == 2
        assert await tier.delete("a")
        assert not await tier.delete("a")
        assert tier.last_known("a") is None


class TestProvider:
    async def test_refresh_is_cached(
        self, catalog: FakeCatalog, clock: FakeClock, cheaper: BusinessRules
    ) -> None:
        catalog.rules = cheaper
        provider = BusinessRulesProvider(
            catalog.business_settings, ttl=timedelta(minutes=5), clock=clock
        )

        first = await provider.refresh()
        second = await provider.refresh()
        clock.advance(301)
        third = await provider.refresh()

        assert first.rules == second.rules == third.rules == cheaper
        assert not first.stale
        assert catalog.settings_calls == 2
        assert provider.current == cheaper

    async def test_force_bypasses_cache(self, catalog: FakeCatalog, clock: FakeClock) -> None:
        provider = BusinessRulesProvider(catalog.business_settings, clock=clock)
        await provider.refresh()
        await provider.refresh(force=True)
        assert catalog.settings_calls == 2

    async def test_failure_falls_back_to_defaults(self, catalog: FakeCatalog) -> None:
        catalog.settings_failure = server_error("Settings unavailable")
        provider = BusinessRulesProvider(catalog.business_settings)

        refreshed = await provider.refresh()

        assert refreshed.stale
        assert refreshed.error == "Settings unavailable"
        assert refreshed.rules == DEFAULT_RULES
        assert provider.current == DEFAULT_RULES

    async def test_failure_keeps_last_known(
        self, catalog: FakeCatalog, clock: FakeClock, cheaper: BusinessRules
    ) -> None:
        catalog.rules = cheaper
        provider = BusinessRulesProvider(catalog.business_settings, clock=clock)
        await provider.refresh()

        clock.advance(600)
        catalog.settings_failure = TimeoutError("timed out")
        refreshed = await provider.refresh()

        assert refreshed.stale
        assert refreshed.rules == cheaper
        assert provider.current == cheaper

    async def test_bound_carts_follow_rules(
        self, catalog: FakeCatalog, cheaper: BusinessRules
    ) -> None:
        cart = CartStore()
        cart.add_item(line(price="300"))
        provider = BusinessRulesProvider(catalog.business_settings)
        unbind = provider.bind(cart)

        catalog.rules = cheaper
        await provider.refresh()

        assert cart.rules == cheaper
        assert cart.totals.delivery_fee == Decimal(25)
        assert cart.totals.tax_amount == Decimal("36.00")

        unbind()
        catalog.rules = DEFAULT_RULES
        await provider.refresh(force=True)
        assert cart.rules == cheaper

    async def test_bind_pushes_current_rules(self, cheaper: BusinessRules) -> None:
        provider = BusinessRulesProvider(FakeCatalog().business_settings, fallback=cheaper)
        cart = CartStore()
        provider.bind(cart)
        assert cart.rules == cheaper

    async def test_invalidate(self, catalog: FakeCatalog) -> None:
        provider = BusinessRulesProvider(catalog.business_settings)
        await provider.refresh()
        assert await provider.invalidate()
        await provider.refresh()
        assert catalog.settings_calls == 2


class TestStatus:
    async def test_refresh_status(self, catalog: FakeCatalog) -> None:
        provider = BusinessRulesProvider(
            catalog.business_settings, status_source=catalog.business_status
        )
        catalog.business = BusinessStatus.closed("Closed for Diwali", manual=True)

        status = await provider.refresh_status()

        assert not status.is_open
        assert status.reason == "Closed for Diwali"
        assert provider.status is status

    async def test_without_source_keeps_status(self, catalog: FakeCatalog) -> None:
        provider = BusinessRulesProvider(catalog.business_settings)
        provider.update_status(BusinessStatus.closed("Kitchen maintenance"))
        assert not (await provider.refresh_status()).is_open
