from __future__ import annotations

from decimal import Decimal

import pytest

from cartflow.cart import CartStore
from cartflow.discount import DiscountType, Offer
from cartflow.pricing import (
    AddOn,
    AddOnGroup,
    CatalogItem,
    CustomizationCategory,
    CustomizationOption,
    SizePrice,
    SizeVariation,
)
from cartflow.rules import DEFAULT_RULES, BusinessRules
from cartflow.services import DeliveryAddress

from tests.fakes import FakeCatalog


@pytest.fixture
def rules() -> BusinessRules:
    return DEFAULT_RULES


@pytest.fixture
def cart(rules: BusinessRules) -> CartStore:
    return CartStore(rules)


@pytest.fixture
def save50() -> Offer:
    return Offer(
        code="SAVE50",
        title="Flat 50",
        discount_type=DiscountType.FIXED,
        discount_value=Decimal(50),
        min_order_value=Decimal(300),
    )


@pytest.fixture
def catalog(save50: Offer) -> FakeCatalog:
    return FakeCatalog(offers={"SAVE50": save50})


@pytest.fixture
def address() -> DeliveryAddress:
    return DeliveryAddress(
        id="addr1",
        address_line1="12 MG Road",
        city="Bengaluru",
        state="Karnataka",
        zip_code="560001",
        landmark="Near metro",
        phone="9876543210",
        is_default=True,
    )


@pytest.fixture
def toppings() -> AddOnGroup:
    return AddOnGroup(
        id="toppings",
        name="Toppings",
        min_selection=1,
        max_selection=2,
        add_ons=(
            AddOn(
                id="cheese",
                name="Extra Cheese",
                price=Decimal(40),
                size_pricing=(
                    SizePrice("Small", Decimal(30)),
                    SizePrice("Medium", Decimal(40)),
                    SizePrice("Large", Decimal(60)),
                ),
            ),
            AddOn(id="olives", name="Olives", price=Decimal(25)),
            AddOn(id="jalapeno", name="Jalapeno", price=Decimal(20)),
            AddOn(id="truffle", name="Truffle", price=Decimal(150), available=False),
        ),
    )


@pytest.fixture
def crust() -> AddOnGroup:
    return AddOnGroup(
        id="crust",
        name="Crust",
        min_selection=1,
        max_selection=1,
        required=True,
        add_ons=(
            AddOn(id="thin", name="Thin", is_default=True),
            AddOn(id="pan", name="Pan", price=Decimal(30)),
        ),
    )


@pytest.fixture
def pizza(toppings: AddOnGroup, crust: AddOnGroup) -> CatalogItem:
    return CatalogItem(
        id="m1",
        name="Margherita",
        price=Decimal(199),
        category="Pizza",
        description="Tomato, mozzarella, basil",
        food_type="Veg",
        popular=True,
        rating=4.5,
        size_variations=(
            SizeVariation("Small", Decimal(149)),
            SizeVariation("Medium", Decimal(199)),
            SizeVariation("Large", Decimal(299)),
        ),
        add_on_groups=(crust, toppings),
        customizations=(
            CustomizationCategory(
                name="Spice",
                options=(
                    CustomizationOption("Mild"),
                    CustomizationOption("Hot", Decimal(10)),
                ),
            ),
        ),
    )
