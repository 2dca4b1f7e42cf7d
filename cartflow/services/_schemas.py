"""
Boundary schemas — every payload from the network is validated here.

Nothing untyped gets past this module: a payload either becomes a domain
value through `to_domain()` or is rejected as a TransportError.

    match decode(OfferPayload, body, operation="offer lookup"):
        case Ok(payload):
            offer = payload.to_domain()
        case Error(err):
            ...
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Literal

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from kungfu import Result, Ok, Error

from cartflow.lift import TransportError
from cartflow.pricing import (
    DEFAULT_SIZE,
    NOT_APPLICABLE,
    AddOn,
    AddOnGroup,
    CatalogItem,
    CustomizationCategory,
    CustomizationOption,
    SizePrice,
    SizeVariation,
)
from cartflow.discount import DiscountType, Offer
from cartflow.rules import BusinessRules, BusinessStatus, DeliveryCharges, TaxSettings
from cartflow.services._types import DeliveryAddress, OrderCreated

logger = logging.getLogger(__name__)

_ID = AliasChoices("_id", "id")


class Payload(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )


# ═══════════════════════════════════════════════════════════════════════════════
# Catalog
# ═══════════════════════════════════════════════════════════════════════════════


class SizeVariationPayload(Payload):
    size: str
    price: Decimal = Field(ge=0)
    available: bool = True


class SizePricePayload(Payload):
    size: str
    price: Decimal = Field(ge=0)


class AddOnPayload(Payload):
    id: str = Field(validation_alias=_ID)
    name: str
    price: Decimal = Field(default=Decimal(0), ge=0)
    available: bool = True
    is_default: bool = False
    size_pricing: list[SizePricePayload] = Field(default_factory=list)

    def to_domain(self) -> AddOn:
        return AddOn(
            id=self.id,
            name=self.name,
            price=self.price,
            available=self.available,
            is_default=self.is_default,
            size_pricing=tuple(SizePrice(s.size, s.price) for s in self.size_pricing),
        )


class AddOnGroupPayload(Payload):
    id: str = Field(validation_alias=_ID)
    name: str
    min_selection: int = Field(default=1, ge=0)
    max_selection: int = Field(default=1, ge=1)
    required: bool = False
    add_ons: list[AddOnPayload] = Field(default_factory=list)

    @field_validator("min_selection")
    @classmethod
    def _at_least_one(cls, value: int) -> int:
        # Admin screens allow 0; it means the same as 1 for an optional group.
        return max(1, value)

    @model_validator(mode="after")
    def _bounds(self) -> AddOnGroupPayload:
        if self.min_selection > self.max_selection:
            raise ValueError(
                f"minSelection {self.min_selection} exceeds maxSelection {self.max_selection}"
            )
        return self

    def to_domain(self) -> AddOnGroup:
        return AddOnGroup(
            id=self.id,
            name=self.name,
            min_selection=self.min_selection,
            max_selection=self.max_selection,
            required=self.required,
            add_ons=tuple(a.to_domain() for a in self.add_ons),
        )


class CustomizationOptionPayload(Payload):
    name: str
    price: Decimal = Field(default=Decimal(0), ge=0)


class CustomizationCategoryPayload(Payload):
    name: str
    options: list[CustomizationOptionPayload] = Field(default_factory=list)
    required: bool = False


class CatalogItemPayload(Payload):
    id: str = Field(validation_alias=_ID)
    name: str
    price: Decimal = Field(ge=0)
    description: str = ""
    category: str = ""
    image: str = ""
    available: bool = True
    popular: bool = False
    food_type: str = NOT_APPLICABLE
    rating: float = Field(default=0.0, ge=0, le=5)
    size: str = DEFAULT_SIZE
    size_variations: list[SizeVariationPayload] = Field(default_factory=list)
    add_on_groups: list[AddOnGroupPayload] = Field(default_factory=list)
    customizations: list[CustomizationCategoryPayload] = Field(default_factory=list)

    def to_domain(self) -> CatalogItem:
        return CatalogItem(
            id=self.id,
            name=self.name,
            price=self.price,
            category=self.category,
            description=self.description,
            image=self.image,
            food_type=self.food_type,
            size=self.size,
            available=self.available,
            popular=self.popular,
            rating=self.rating,
            size_variations=tuple(
                SizeVariation(v.size, v.price, v.available) for v in self.size_variations
            ),
            add_on_groups=tuple(g.to_domain() for g in self.add_on_groups),
            customizations=tuple(
                CustomizationCategory(
                    name=c.name,
                    options=tuple(CustomizationOption(o.name, o.price) for o in c.options),
                    required=c.required,
                )
                for c in self.customizations
            ),
        )


# ═══════════════════════════════════════════════════════════════════════════════
# Business Settings
# ═══════════════════════════════════════════════════════════════════════════════


class DeliveryChargesPayload(Payload):
    fixed_charge: Decimal = Field(default=Decimal(40), ge=0)
    free_delivery_threshold: Decimal = Field(default=Decimal(500), ge=0)
    apply_to_all_orders: bool = False


class TaxSettingsPayload(Payload):
    gst_percentage: Decimal = Field(default=Decimal(5), ge=0, le=100)
    apply_gst: bool = Field(default=True, alias="applyGST")


class BusinessSettingsPayload(Payload):
    delivery_charges: DeliveryChargesPayload = Field(default_factory=DeliveryChargesPayload)
    tax_settings: TaxSettingsPayload = Field(default_factory=TaxSettingsPayload)
    minimum_order_value: Decimal = Field(default=Decimal(200), ge=0)

    def to_domain(self) -> BusinessRules:
        return BusinessRules(
            tax=TaxSettings(
                gst_percentage=self.tax_settings.gst_percentage,
                apply_gst=self.tax_settings.apply_gst,
            ),
            delivery=DeliveryCharges(
                fixed_charge=self.delivery_charges.fixed_charge,
                free_delivery_threshold=self.delivery_charges.free_delivery_threshold,
                apply_to_all_orders=self.delivery_charges.apply_to_all_orders,
            ),
            minimum_order_value=self.minimum_order_value,
        )


class BusinessStatusPayload(Payload):
    is_open: bool
    reason: str = ""
    manual_override: bool = False

    def to_domain(self) -> BusinessStatus:
        return BusinessStatus(
            is_open=self.is_open,
            reason=self.reason,
            manual_override=self.manual_override,
        )


# ═══════════════════════════════════════════════════════════════════════════════
# Offers
# ═══════════════════════════════════════════════════════════════════════════════


class OfferPayload(Payload):
    code: str
    title: str = ""
    description: str = ""
    discount_type: Literal["percentage", "fixed"]
    discount_value: Decimal = Field(ge=0)
    min_order_value: Decimal = Field(default=Decimal(0), ge=0)
    max_discount_amount: Decimal | None = Field(default=None, ge=0)
    is_active: bool = True
    valid_from: datetime | None = None
    valid_until: datetime | None = None
    usage_limit: int | None = Field(default=None, ge=0)
    usage_count: int = Field(default=0, ge=0)

    @field_validator("valid_from", "valid_until")
    @classmethod
    def _aware(cls, value: datetime | None) -> datetime | None:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    def to_domain(self) -> Offer:
        return Offer(
            code=self.code.strip().upper(),
            title=self.title,
            discount_type=DiscountType(self.discount_type),
            discount_value=self.discount_value,
            min_order_value=self.min_order_value,
            max_discount_amount=self.max_discount_amount,
            description=self.description,
            active=self.is_active,
            valid_from=self.valid_from,
            valid_until=self.valid_until,
            usage_limit=self.usage_limit,
            usage_count=self.usage_count,
        )


# ═══════════════════════════════════════════════════════════════════════════════
# Orders & Addresses
# ═══════════════════════════════════════════════════════════════════════════════


class OrderCreatedPayload(Payload):
    id: str = Field(validation_alias=_ID)
    order_number: str
    status: str = "Pending"

    def to_domain(self) -> OrderCreated:
        return OrderCreated(
            order_id=self.id,
            order_number=self.order_number,
            status=self.status,
        )


class AddressPayload(Payload):
    id: str = Field(validation_alias=_ID, serialization_alias="_id")
    address_line1: str = Field(min_length=1)
    city: str
    state: str
    zip_code: str
    landmark: str = ""
    phone: str = ""
    name: str = ""
    is_default: bool = False

    def to_domain(self) -> DeliveryAddress:
        return DeliveryAddress(
            id=self.id,
            address_line1=self.address_line1,
            city=self.city,
            state=self.state,
            zip_code=self.zip_code,
            landmark=self.landmark,
            phone=self.phone,
            name=self.name,
            is_default=self.is_default,
        )

    @classmethod
    def from_domain(cls, address: DeliveryAddress) -> AddressPayload:
        return cls(
            id=address.id,
            address_line1=address.address_line1,
            city=address.city,
            state=address.state,
            zip_code=address.zip_code,
            landmark=address.landmark,
            phone=address.phone,
            name=address.name,
            is_default=address.is_default,
        )

    def dump(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


# ═══════════════════════════════════════════════════════════════════════════════
# Decoding
# ═══════════════════════════════════════════════════════════════════════════════


def _rejected(operation: str, error: ValidationError) -> TransportError:
    logger.warning("Rejected %s payload: %d errors", operation, error.error_count())
    return TransportError(operation, f"Malformed {operation} response", cause=error)


def decode[M: BaseModel](
    model: type[M],
    raw: Any,
    *,
    operation: str,
) -> Result[M, TransportError]:
    """Validate one payload."""
    try:
        return Ok(model.model_validate(raw))
    except ValidationError as e:
        return Error(_rejected(operation, e))


def decode_list[M: BaseModel](
    model: type[M],
    raw: Any,
    *,
    operation: str,
) -> Result[list[M], TransportError]:
    """Validate a JSON array of payloads; one bad element rejects the lot."""
    try:
        return Ok(TypeAdapter(list[model]).validate_python(raw))  # type: ignore[valid-type]
    except ValidationError as e:
        return Error(_rejected(operation, e))


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "Payload",
    "SizeVariationPayload",
    "SizePricePayload",
    "AddOnPayload",
    "AddOnGroupPayload",
    "CustomizationOptionPayload",
    "CustomizationCategoryPayload",
    "CatalogItemPayload",
    "DeliveryChargesPayload",
    "TaxSettingsPayload",
    "BusinessSettingsPayload",
    "BusinessStatusPayload",
    "OfferPayload",
    "OrderCreatedPayload",
    "AddressPayload",
    "decode",
    "decode_list",
)
