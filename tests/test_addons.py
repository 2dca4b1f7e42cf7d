from decimal import Decimal

import pytest

from cartflow.addons import (
    SelectionErrorKind,
    default_selection,
    toggle,
    validate_all,
)
from cartflow.pricing import AddOn, AddOnGroup


def _pick(group: AddOnGroup, *ids: str) -> tuple[AddOn, ...]:
    return tuple(a for i in ids for a in group.add_ons if a.id == i)


class TestToggle:
    def test_append(self, toppings: AddOnGroup) -> None:
        (olives,) = _pick(toppings, "olives")
        outcome = toggle(toppings, (), olives)
        assert outcome.ok
        assert outcome.selection == (olives,)

    def test_remove(self, toppings: AddOnGroup) -> None:
        cheese, olives = _pick(toppings, "cheese", "olives")
        outcome = toggle(toppings, (cheese, olives), cheese)
        assert outcome.selection == (olives,)

    def test_radio_group_replaces(self, crust: AddOnGroup) -> None:
        thin, pan = _pick(crust, "thin", "pan")
        outcome = toggle(crust, (thin,), pan)
        assert outcome.ok
        assert outcome.selection == (pan,)

    def test_full_group_rejects(self, toppings: AddOnGroup) -> None:
        cheese, olives, jalapeno = _pick(toppings, "cheese", "olives", "jalapeno")
        outcome = toggle(toppings, (cheese, olives), jalapeno)
        assert outcome.error is not None
        assert outcome.error.kind is SelectionErrorKind.ABOVE_MAXIMUM
        assert outcome.error.message == "Toppings: can only select up to 2"
        assert outcome.selection == (cheese, olives)

    def test_required_removal_below_minimum(self, crust: AddOnGroup) -> None:
        (thin,) = _pick(crust, "thin")
        outcome = toggle(crust, (thin,), thin)
        assert outcome.error is not None
        assert outcome.error.kind is SelectionErrorKind.BELOW_MINIMUM
        assert outcome.error.message == "Crust: must select at least 1"
        assert outcome.selection == (thin,)

    def test_optional_group_can_be_emptied(self, toppings: AddOnGroup) -> None:
        (olives,) = _pick(toppings, "olives")
        assert toggle(toppings, (olives,), olives).selection == ()

    def test_unavailable_add_on(self, toppings: AddOnGroup) -> None:
        (truffle,) = _pick(toppings, "truffle")
        outcome = toggle(toppings, (), truffle)
        assert outcome.error is not None
        assert outcome.error.kind is SelectionErrorKind.UNAVAILABLE

    def test_foreign_add_on(self, toppings: AddOnGroup, crust: AddOnGroup) -> None:
        (pan,) = _pick(crust, "pan")
        outcome = toggle(toppings, (), pan)
        assert outcome.error is not None
        assert outcome.error.kind is SelectionErrorKind.UNKNOWN


class TestValidateAll:
    def test_every_required_group_reported(self) -> None:
        sauce = AddOnGroup(
            id="sauce",
            name="Sauce",
            required=True,
            add_ons=(AddOn(id="bbq", name="BBQ"),),
        )
        sides = AddOnGroup(
            id="sides",
            name="Sides",
            min_selection=2,
            max_selection=3,
            required=True,
            add_ons=(AddOn(id="fries", name="Fries"), AddOn(id="dip", name="Dip")),
        )
        (fries,) = _pick(sides, "fries")

        check = validate_all((sauce, sides), {"sides": (fries,)})

        assert not check.valid
        assert set(check.errors_by_group) == {"sauce", "sides"}
        assert check.errors_by_group["sides"].message == "Sides: must select at least 2"

    def test_valid(self, crust: AddOnGroup, toppings: AddOnGroup) -> None:
        check = validate_all((crust, toppings), {"crust": _pick(crust, "thin")})
        assert check.valid
        assert check.errors_by_group == {}


def test_default_selection(crust: AddOnGroup) -> None:
    assert default_selection(crust) == _pick(crust, "thin")


def test_group_bounds_are_enforced() -> None:
    with pytest.raises(ValueError):
        AddOnGroup(id="g", name="Bad", min_selection=3, max_selection=2)
    with pytest.raises(ValueError):
        AddOnGroup(id="g", name="Bad", min_selection=0, max_selection=2)


def test_add_on_defaults() -> None:
    assert AddOn(id="x", name="X").price == Decimal(0)
