from decimal import Decimal

import pytest
from kungfu import Ok, Error

from cartflow.cart import (
    NO_EFFECT,
    NOTHING_TO_DISCOUNT,
    CartErrorKind,
    CartSnapshot,
    CartStore,
    CustomizationChoice,
    compute_totals,
    line_signature,
    line_total,
    subtotal,
)
from cartflow.discount import Discount, DiscountErrorKind, DiscountType, Offer
from cartflow.pricing import SelectedAddOn
from cartflow.rules import DEFAULT_RULES

from tests.fakes import line


def _discount(offer: Offer, amount: str = "0") -> Discount:
    return Discount.from_offer(offer, Decimal(amount))


def _ok[T](result: object) -> T:
    match result:
        case Ok(value):
            return value
        case Error(err):
            pytest.fail(f"unexpected error: {err}")
    raise AssertionError("not a Result")


class TestScenarios:
    def test_fixed_discount_on_two_margheritas(self, cart: CartStore, save50: Offer) -> None:
        _ok(cart.add_item(line(price="199", quantity=2)))

        totals = _ok(cart.apply_discount(_discount(save50)))

        assert totals.subtotal == Decimal("398")
        assert totals.discount_amount == Decimal("50.00")
        assert totals.tax_amount == Decimal("19.90")
        assert totals.delivery_fee == Decimal("40")
        assert totals.total == Decimal("407.90")

    def test_discount_dropped_when_quantity_falls_below_minimum(
        self, cart: CartStore, save50: Offer
    ) -> None:
        _ok(cart.add_item(line(price="199", quantity=2)))
        _ok(cart.apply_discount(_discount(save50)))
        (only,) = cart.lines

        totals = cart.update_quantity(only.line_id, 1)

        assert cart.discount is None
        assert totals.discount_amount == 0
        assert totals.subtotal == Decimal(199)
        assert totals.total == Decimal("199") + Decimal("40") + Decimal("9.95")


class TestAddItem:
    def test_identical_lines_merge(self, cart: CartStore) -> None:
        _ok(cart.add_item(line(quantity=1)))
        totals = _ok(cart.add_item(line(quantity=2)))
        assert len(cart.lines) == 1
        assert cart.lines[0].quantity == 3
        assert totals.item_count == 3

    def test_different_size_is_a_new_line(self, cart: CartStore) -> None:
        _ok(cart.add_item(line(size="Medium")))
        _ok(cart.add_item(line(size="Large", price="299")))
        assert [l.line_id for l in cart.lines] == ["line-1", "line-2"]

    def test_merge_ignores_add_on_order(self, cart: CartStore) -> None:
        cheese = SelectedAddOn(id="cheese", name="Cheese", price=Decimal(40))
        olives = SelectedAddOn(id="olives", name="Olives", price=Decimal(25))
        spicy = CustomizationChoice("Spice", "Hot", Decimal(10))
        crust = CustomizationChoice("Crust", "Thin")

        _ok(cart.add_item(line(add_ons=(cheese, olives), customizations=(spicy, crust))))
        _ok(cart.add_item(line(add_ons=(olives, cheese), customizations=(crust, spicy))))

        assert len(cart.lines) == 1
        assert cart.lines[0].quantity == 2

    def test_same_add_on_at_another_price_does_not_merge(self) -> None:
        a = line(add_ons=(SelectedAddOn(id="cheese", name="Cheese", price=Decimal(40)),))
        b = line(add_ons=(SelectedAddOn(id="cheese", name="Cheese", price=Decimal(60)),))
        assert line_signature(a) != line_signature(b)

    def test_cap_on_total_quantity(self) -> None:
        cart = CartStore(max_items=20)
        _ok(cart.add_item(line(quantity=19)))

        match cart.add_item(line(item_id="m2", quantity=2)):
            case Error(err):
                assert err.kind is CartErrorKind.LIMIT_EXCEEDED
                assert err.message == "Maximum 20 items allowed in cart."
                assert err.requested == 21
            case Ok(_):
                pytest.fail("cap not enforced")

        assert cart.totals.item_count == 19

    def test_non_positive_quantity_rejected(self, cart: CartStore) -> None:
        match cart.add_item(line(quantity=0)):
            case Error(err):
                assert err.kind is CartErrorKind.INVALID_QUANTITY
            case Ok(_):
                pytest.fail("zero quantity accepted")
        assert cart.snapshot.is_empty


class TestMutations:
    def test_zero_quantity_removes(self, cart: CartStore) -> None:
        _ok(cart.add_item(line()))
        totals = cart.update_quantity("line-1", 0)
        assert cart.lines == ()
        assert totals.delivery_fee == 0
        assert totals.total == 0

    def test_unknown_line_is_a_no_op(self, cart: CartStore) -> None:
        _ok(cart.add_item(line()))
        before = cart.snapshot
        assert cart.update_quantity("line-99", 4) == before.totals
        assert cart.remove_item("line-99") == before.totals
        assert cart.snapshot is before

    def test_update_past_cap_is_a_no_op(self) -> None:
        cart = CartStore(max_items=5)
        _ok(cart.add_item(line(quantity=2)))
        cart.update_quantity("line-1", 6)
        assert cart.lines[0].quantity == 2

    def test_clear_drops_discount(self, cart: CartStore, save50: Offer) -> None:
        _ok(cart.add_item(line(quantity=2)))
        _ok(cart.apply_discount(_discount(save50)))
        totals = cart.clear()
        assert cart.discount is None
        assert totals == compute_totals((), DEFAULT_RULES)

    def test_subtotal_agrees_with_recomputation(self, cart: CartStore) -> None:
        cheese = SelectedAddOn(id="cheese", name="Cheese", price=Decimal(40))
        _ok(cart.add_item(line(quantity=2, add_ons=(cheese,))))
        _ok(cart.add_item(line(item_id="m2", price="349.50")))
        _ok(cart.add_item(line(item_id="s1", price="99", quantity=3)))
        cart.update_quantity("line-2", 4)
        cart.remove_item("line-3")
        _ok(cart.add_item(line(quantity=1, add_ons=(cheese,))))

        expected = sum(
            ((l.unit_price + sum((a.price for a in l.add_ons), Decimal(0))) * l.quantity
             for l in cart.lines),
            Decimal(0),
        )
        assert cart.totals.subtotal == expected == subtotal(cart.lines)
        assert cart.totals.subtotal == sum((line_total(l) for l in cart.lines), Decimal(0))


class TestDiscount:
    def test_below_minimum_is_refused(self, cart: CartStore, save50: Offer) -> None:
        _ok(cart.add_item(line(price="250")))

        match cart.apply_discount(_discount(save50)):
            case Error(err):
                assert err.kind is DiscountErrorKind.MINIMUM_ORDER_NOT_MET
                assert err.shortfall == Decimal("50.00")
            case Ok(_):
                pytest.fail("minimum not enforced")
        assert cart.discount is None

    def test_amount_clamped_and_total_never_negative(self, cart: CartStore) -> None:
        huge = Offer(
            code="FREE",
            title="Everything free",
            discount_type=DiscountType.FIXED,
            discount_value=Decimal(10_000),
        )
        _ok(cart.add_item(line(price="120")))

        totals = _ok(cart.apply_discount(_discount(huge, "10000")))

        assert totals.discount_amount == Decimal("120.00")
        assert totals.total >= 0
        assert totals.total == Decimal(40) + Decimal("6.00")

    def test_percentage_follows_live_subtotal(self, cart: CartStore) -> None:
        forty = Offer(
            code="FORTY",
            title="40% off",
            discount_type=DiscountType.PERCENTAGE,
            discount_value=Decimal(40),
            max_discount_amount=Decimal(200),
        )
        _ok(cart.add_item(line(price="200")))
        assert _ok(cart.apply_discount(_discount(forty))).discount_amount == Decimal("80.00")

        cart.update_quantity("line-1", 4)

        assert cart.totals.discount_amount == Decimal("200")

    def test_rules_change_keeps_discount(self, cart: CartStore, save50: Offer) -> None:
        _ok(cart.add_item(line(quantity=2)))
        _ok(cart.apply_discount(_discount(save50)))

        totals = cart.update_business_rules(DEFAULT_RULES.without_gst().with_delivery(fixed=Decimal(0)))

        assert cart.discount is not None
        assert totals.tax_amount == 0
        assert totals.total == Decimal(398) - Decimal(50)

    def test_remove_discount(self, cart: CartStore, save50: Offer) -> None:
        _ok(cart.add_item(line(quantity=2)))
        _ok(cart.apply_discount(_discount(save50)))
        assert cart.remove_discount().discount_amount == 0

    def test_empty_cart_is_refused(self, cart: CartStore) -> None:
        anything = Offer(
            code="HELLO",
            title="Hello",
            discount_type=DiscountType.FIXED,
            discount_value=Decimal(50),
        )

        match cart.apply_discount(_discount(anything)):
            case Error(err):
                assert err.kind is DiscountErrorKind.EMPTY_CART
                assert err.message == NOTHING_TO_DISCOUNT
            case Ok(_):
                pytest.fail("discount stored on an empty cart")
        assert cart.discount is None

    def test_zero_amount_with_minimum_is_refused(self, cart: CartStore) -> None:
        nothing = Offer(
            code="ZERO",
            title="Nothing off",
            discount_type=DiscountType.PERCENTAGE,
            discount_value=Decimal(0),
            min_order_value=Decimal(100),
        )
        _ok(cart.add_item(line(quantity=2)))

        match cart.apply_discount(_discount(nothing)):
            case Error(err):
                assert err.kind is DiscountErrorKind.NO_EFFECT
                assert err.message == NO_EFFECT
            case Ok(_):
                pytest.fail("zero discount stored")
        assert cart.discount is None

    def test_zero_amount_with_minimum_is_dropped_on_commit(self, cart: CartStore) -> None:
        nothing = Offer(
            code="ZERO",
            title="Nothing off",
            discount_type=DiscountType.FIXED,
            discount_value=Decimal(0),
            min_order_value=Decimal(100),
        )

        totals = cart.restore([line(quantity=2)], _discount(nothing))

        assert cart.discount is None
        assert totals.discount_amount == 0
        assert totals.subtotal == Decimal(398)

    def test_zero_amount_without_minimum_is_kept(self, cart: CartStore) -> None:
        nothing = Offer(
            code="ZERO",
            title="Nothing off",
            discount_type=DiscountType.FIXED,
            discount_value=Decimal(0),
        )

        cart.restore([line()], _discount(nothing))

        assert cart.discount is not None
        assert cart.totals.discount_amount == 0


class TestSettle:
    def test_ordered_lines_leave_the_cart(self, cart: CartStore, save50: Offer) -> None:
        _ok(cart.add_item(line(quantity=2)))
        _ok(cart.apply_discount(_discount(save50)))
        ordered = cart.snapshot

        totals = cart.settle(ordered)

        assert cart.snapshot.is_empty
        assert cart.discount is None
        assert totals.total == 0

    def test_later_additions_survive(self, cart: CartStore, save50: Offer) -> None:
        _ok(cart.add_item(line(quantity=2)))
        _ok(cart.apply_discount(_discount(save50)))
        ordered = cart.snapshot
        _ok(cart.add_item(line()))
        _ok(cart.add_item(line(item_id="m2", name="Farmhouse", price="249")))

        cart.settle(ordered)

        assert [(kept.item_id, kept.quantity) for kept in cart.lines] == [("m1", 1), ("m2", 1)]
        assert cart.discount is None
        assert cart.totals.subtotal == Decimal(199) + Decimal(249)

    def test_quantity_lowered_mid_flight(self, cart: CartStore) -> None:
        _ok(cart.add_item(line(quantity=3)))
        ordered = cart.snapshot
        cart.update_quantity("line-1", 1)

        cart.settle(ordered)

        assert cart.snapshot.is_empty


class TestTotals:
    def test_free_delivery_threshold(self, cart: CartStore) -> None:
        totals = _ok(cart.add_item(line(price="500")))
        assert totals.delivery_fee == 0

    def test_gst_not_applied(self) -> None:
        cart = CartStore(DEFAULT_RULES.without_gst())

        totals = _ok(cart.add_item(line(price="199", quantity=2)))

        assert totals.tax_amount == 0
        assert totals.total == Decimal(398) + Decimal(40)

    def test_apply_to_all_orders(self) -> None:
        cart = CartStore(DEFAULT_RULES.with_delivery(all_orders=True))
        totals = _ok(cart.add_item(line(price="900")))
        assert totals.delivery_fee == Decimal(40)

    def test_empty_cart_is_all_zero(self, cart: CartStore) -> None:
        totals = cart.totals
        assert (totals.subtotal, totals.delivery_fee, totals.tax_amount, totals.total) == (0, 0, 0, 0)


class TestListeners:
    def test_notified_after_each_commit(self, cart: CartStore) -> None:
        seen: list[CartSnapshot] = []
        unsubscribe = cart.subscribe(seen.append)

        _ok(cart.add_item(line()))
        cart.update_quantity("line-1", 2)
        unsubscribe()
        cart.clear()

        assert [s.totals.item_count for s in seen] == [1, 2]

    def test_failing_listener_does_not_break_the_cart(self, cart: CartStore) -> None:
        def explode(snapshot: CartSnapshot) -> None:
            raise RuntimeError("boom")

        cart.subscribe(explode)
        _ok(cart.add_item(line()))
        assert cart.totals.item_count == 1

    def test_restore_reassigns_line_ids(self, cart: CartStore, save50: Offer) -> None:
        cart.restore([line(quantity=2, price="200"), line(item_id="m2")], _discount(save50, "50"))
        assert [l.line_id for l in cart.lines] == ["line-1", "line-2"]
        assert cart.discount is not None
        assert cart.totals.discount_amount == Decimal("50.00")
