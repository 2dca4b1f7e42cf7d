"""
Persisted cart record — the JSON shape stored under `cart_data`.

Validated on the way back in; a record that does not parse is treated as
no record at all.
"""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from cartflow.pricing import SelectedAddOn, SizePrice
from cartflow.discount import Discount, DiscountType
from cartflow.cart import CartLineItem, CartSnapshot, CustomizationChoice


class _Record(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class SizePriceRecord(_Record):
    size: str
    price: Decimal


class AddOnRecord(_Record):
    id: str
    name: str
    price: Decimal
    size_pricing: list[SizePriceRecord] = Field(default_factory=list)
    base_price: Decimal | None = None


class CustomizationRecord(_Record):
    category: str
    option: str
    price: Decimal = Decimal(0)


class LineRecord(_Record):
    item_id: str
    name: str
    price: Decimal
    quantity: int = Field(ge=1)
    size: str
    food_type: str
    image: str = ""
    customizations: list[CustomizationRecord] = Field(default_factory=list)
    add_ons: list[AddOnRecord] = Field(default_factory=list)

    @classmethod
    def from_line(cls, line: CartLineItem) -> LineRecord:
        return cls(
            item_id=line.item_id,
            name=line.name,
            price=line.unit_price,
            quantity=line.quantity,
            size=line.size,
            food_type=line.food_type,
            image=line.image,
            customizations=[
                CustomizationRecord(category=c.category, option=c.option, price=c.price)
                for c in line.customizations
            ],
            add_ons=[
                AddOnRecord(
                    id=a.id,
                    name=a.name,
                    price=a.price,
                    size_pricing=[
                        SizePriceRecord(size=s.size, price=s.price) for s in a.size_pricing
                    ],
                    base_price=a.base_price,
                )
                for a in line.add_ons
            ],
        )

    def to_line(self) -> CartLineItem:
        return CartLineItem(
            item_id=self.item_id,
            name=self.name,
            unit_price=self.price,
            quantity=self.quantity,
            size=self.size,
            food_type=self.food_type,
            image=self.image,
            customizations=tuple(
                CustomizationChoice(c.category, c.option, c.price) for c in self.customizations
            ),
            add_ons=tuple(
                SelectedAddOn(
                    id=a.id,
                    name=a.name,
                    price=a.price,
                    size_pricing=tuple(SizePrice(s.size, s.price) for s in a.size_pricing),
                    base_price=a.base_price,
                )
                for a in self.add_ons
            ),
        )


class DiscountRecord(_Record):
    code: str
    title: str = ""
    type: DiscountType
    value: Decimal
    min_order_value: Decimal = Decimal(0)
    max_discount_amount: Decimal | None = None
    amount: Decimal = Decimal(0)

    @classmethod
    def from_discount(cls, discount: Discount) -> DiscountRecord:
        return cls(
            code=discount.code,
            title=discount.title,
            type=discount.discount_type,
            value=discount.value,
            min_order_value=discount.min_order_value,
            max_discount_amount=discount.max_discount_amount,
            amount=discount.amount,
        )

    def to_discount(self) -> Discount:
        return Discount(
            code=self.code,
            title=self.title,
            discount_type=self.type,
            value=self.value,
            min_order_value=self.min_order_value,
            max_discount_amount=self.max_discount_amount,
            amount=self.amount,
        )


class CartRecord(_Record):
    items: list[LineRecord] = Field(default_factory=list)
    discount: DiscountRecord | None = None

    @classmethod
    def from_snapshot(cls, snapshot: CartSnapshot) -> CartRecord:
        return cls(
            items=[LineRecord.from_line(line) for line in snapshot.lines],
            discount=(
                DiscountRecord.from_discount(snapshot.discount)
                if snapshot.discount is not None
                else None
            ),
        )

    def dump(self) -> dict[str, object]:
        return self.model_dump(mode="json", by_alias=True)


__all__ = (
    "SizePriceRecord",
    "AddOnRecord",
    "CustomizationRecord",
    "LineRecord",
    "DiscountRecord",
    "CartRecord",
)
