from collections.abc import AsyncIterator
from decimal import Decimal

import pytest
from kungfu import Ok, Error

from cartflow.cart import CartStore, CustomizationChoice
from cartflow.discount import Discount, Offer
from cartflow.pricing import SelectedAddOn, SizePrice
from cartflow.storage import (
    CART_KEY,
    OFFER_CODE_KEY,
    CartRecord,
    CartSnapshotWriter,
    KeyValueStore,
    MemoryKeyValueStore,
    OfferCodeHint,
    SQLAlchemyKeyValueStore,
    create_kv_store,
    load_cart,
)

from tests.fakes import BrokenStore, line


@pytest.fixture
async def sql_store() -> AsyncIterator[SQLAlchemyKeyValueStore]:
    store, engine = await create_kv_store()
    yield store
    await engine.dispose()


@pytest.fixture(params=["memory", "sqlalchemy"])
async def store(request: pytest.FixtureRequest) -> AsyncIterator[KeyValueStore]:
    if request.param == "memory":
        yield MemoryKeyValueStore()
        return
    sql, engine = await create_kv_store()
    yield sql
    await engine.dispose()


class TestKeyValueStore:
    async def test_set_get_delete(self, store: KeyValueStore) -> None:
        assert isinstance(await store.set("k", {"a": [1, 2]}), Ok)

        match await store.get("k"):
            case Ok(value):
                assert value == {"a": [1, 2]}
            case Error(err):
                pytest.fail(err.message)

        match await store.delete("k"):
            case Ok(existed):
                assert existed
            case Error(err):
                pytest.fail(err.message)

        match await store.get("k"):
            case Ok(value):
                assert value is None
            case Error(err):
                pytest.fail(err.message)

    async def test_overwrite(self, store: KeyValueStore) -> None:
        await store.set("k", 1)
        await store.set("k", 2)
        match await store.get("k"):
            case Ok(value):
                assert value == 2
            case Error(err):
                pytest.fail(err.message)

    async def test_unserialisable_value(self, store: KeyValueStore) -> None:
        match await store.set("k", {"when": object()}):
            case Error(err):
                assert "not JSON-serialisable" in err.message
            case Ok(_):
                pytest.fail("object() was stored")

    async def test_missing_delete(self, store: KeyValueStore) -> None:
        match await store.delete("absent"):
            case Ok(existed):
                assert not existed
            case Error(err):
                pytest.fail(err.message)


class TestSnapshotWriter:
    async def test_flush_writes_latest_snapshot(
        self, sql_store: SQLAlchemyKeyValueStore, cart: CartStore
    ) -> None:
        writer = CartSnapshotWriter(sql_store)
        writer.attach(cart)
        cart.add_item(line())
        cart.add_item(line(item_id="m2", price="349"))

        match await writer.flush():
            case Ok(written):
                assert written
            case Error(err):
                pytest.fail(err.message)

        assert writer.pending is None
        match await sql_store.get(CART_KEY):
            case Ok(raw):
                assert [i["itemId"] for i in raw["items"]] == ["m1", "m2"]
                assert raw["items"][1]["price"] == "349"
            case Error(err):
                pytest.fail(err.message)

    async def test_nothing_pending(self) -> None:
        match await CartSnapshotWriter(MemoryKeyValueStore()).flush():
            case Ok(written):
                assert not written
            case Error(err):
                pytest.fail(err.message)

    async def test_failed_flush_stays_pending(self, cart: CartStore) -> None:
        writer = CartSnapshotWriter(BrokenStore())
        writer.attach(cart)
        cart.add_item(line())

        assert isinstance(await writer.flush(), Error)
        assert writer.pending is cart.snapshot


class TestLoadCart:
    async def test_round_trip(self, cart: CartStore, save50: Offer) -> None:
        store = MemoryKeyValueStore()
        cheese = SelectedAddOn(
            id="cheese",
            name="Extra Cheese",
            price=Decimal(60),
            size_pricing=(SizePrice("Large", Decimal(60)),),
            base_price=Decimal(40),
        )
        cart.add_item(
            line(
                quantity=2,
                size="Large",
                add_ons=(cheese,),
                customizations=(CustomizationChoice("Spice", "Hot", Decimal(10)),),
            )
        )
        cart.apply_discount(Discount.from_offer(save50, Decimal(0)))
        writer = CartSnapshotWriter(store)
        writer.capture(cart.snapshot)
        await writer.flush()

        restored = CartStore()
        match await load_cart(store, restored):
            case Ok(loaded):
                assert loaded
            case Error(err):
                pytest.fail(err.message)

        assert restored.totals == cart.totals
        (restored_line,) = restored.lines
        assert restored_line.add_ons == (cheese,)
        assert restored.discount == cart.discount

    async def test_nothing_stored(self) -> None:
        match await load_cart(MemoryKeyValueStore(), CartStore()):
            case Ok(loaded):
                assert not loaded
            case Error(err):
                pytest.fail(err.message)

    async def test_malformed_record_is_ignored(self, cart: CartStore) -> None:
        store = MemoryKeyValueStore()
        await store.set(CART_KEY, {"items": [{"itemId": "m1", "quantity": 0}]})

        match await load_cart(store, cart):
            case Ok(loaded):
                assert not loaded
            case Error(err):
                pytest.fail(err.message)
        assert cart.snapshot.is_empty


def test_record_uses_camel_case_keys(cart: CartStore, save50: Offer) -> None:
    cart.add_item(line(quantity=2))
    cart.apply_discount(Discount.from_offer(save50, Decimal(0)))

    dumped = CartRecord.from_snapshot(cart.snapshot).dump()

    assert set(dumped["items"][0]) >= {"itemId", "foodType", "addOns", "customizations"}
    assert dumped["discount"]["minOrderValue"] == "300"
    assert dumped["discount"]["type"] == "fixed"


class TestOfferCodeHint:
    async def test_take_reads_once(self) -> None:
        store = MemoryKeyValueStore()
        hint = OfferCodeHint(store)
        await hint.remember(" save50 ")

        match await hint.take():
            case Ok(code):
                assert code == "SAVE50"
            case Error(err):
                pytest.fail(err.message)

        assert OFFER_CODE_KEY not in store.keys()
        match await hint.take():
            case Ok(code):
                assert code is None
            case Error(err):
                pytest.fail(err.message)

    async def test_take_fails_when_store_cannot_forget(self) -> None:
        hint = OfferCodeHint(BrokenStore({OFFER_CODE_KEY: "SAVE50"}))
        assert isinstance(await hint.take(), Error)

        match await hint.peek():
            case Ok(code):
                assert code == "SAVE50"
            case Error(err):
                pytest.fail(err.message)
