"""
Business rules — tax, delivery and minimum-order settings.

Value objects replaced wholesale on every refresh.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal

from cartflow._types import Money, ZERO

# ═══════════════════════════════════════════════════════════════════════════════
# Settings
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class TaxSettings:
    gst_percentage: Decimal = Decimal(5)
    apply_gst: bool = True


@dataclass(frozen=True, slots=True)
class DeliveryCharges:
    """
    Delivery fee policy.

    Orders at or above free_delivery_threshold ship free unless
    apply_to_all_orders is set.
    """

    fixed_charge: Money = Decimal(40)
    free_delivery_threshold: Money = Decimal(500)
    apply_to_all_orders: bool = False


# ═══════════════════════════════════════════════════════════════════════════════
# Business Rules — Fluent, immutable
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class BusinessRules:
    """
    Everything the cart needs from business settings.

    Example:
        rules = (
            BusinessRules()
            .with_gst(Decimal(5))
            .with_delivery(fixed=Decimal(40), free_above=Decimal(500))
            .with_minimum_order(Decimal(200))
        )

    Note: Immutable — each method returns new BusinessRules.
    """

    tax: TaxSettings = TaxSettings()
    delivery: DeliveryCharges = DeliveryCharges()
    minimum_order_value: Money = Decimal(200)

    def with_gst(self, percentage: Decimal, *, apply: bool = True) -> BusinessRules:
        return replace(self, tax=TaxSettings(gst_percentage=percentage, apply_gst=apply))

    def without_gst(self) -> BusinessRules:
        return replace(self, tax=replace(self.tax, apply_gst=False))

    def with_delivery(
        self,
        *,
        fixed: Money | None = None,
        free_above: Money | None = None,
        all_orders: bool | None = None,
    ) -> BusinessRules:
        """
        Change any part of the delivery policy; omitted parts are kept.

            .with_delivery(fixed=Decimal(30))
            .with_delivery(all_orders=True)   # always charge
        """
        current = self.delivery
        return replace(
            self,
            delivery=DeliveryCharges(
                fixed_charge=current.fixed_charge if fixed is None else fixed,
                free_delivery_threshold=(
                    current.free_delivery_threshold if free_above is None else free_above
                ),
                apply_to_all_orders=(
                    current.apply_to_all_orders if all_orders is None else all_orders
                ),
            ),
        )

    def with_minimum_order(self, value: Money) -> BusinessRules:
        if value < ZERO:
            raise ValueError(f"minimum_order_value must be >= 0, got {value}")
        return replace(self, minimum_order_value=value)


DEFAULT_RULES = BusinessRules()
"""GST 5% applied, ₹40 delivery, free above ₹500, ₹200 minimum order."""


# ═══════════════════════════════════════════════════════════════════════════════
# Open / Closed
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class BusinessStatus:
    """Whether the business takes orders right now."""

    is_open: bool = True
    reason: str = ""
    manual_override: bool = False

    @classmethod
    def closed(cls, reason: str = "", *, manual: bool = False) -> BusinessStatus:
        return cls(is_open=False, reason=reason, manual_override=manual)


OPEN = BusinessStatus()


# ═══════════════════════════════════════════════════════════════════════════════
# Refresh Result
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class RulesRefresh:
    """
    Outcome of a settings refresh.

    A failed refresh still carries usable rules (last known, or defaults);
    stale is True and error holds the transport message.
    """

    rules: BusinessRules
    stale: bool = False
    error: str | None = None


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "TaxSettings",
    "DeliveryCharges",
    "BusinessRules",
    "DEFAULT_RULES",
    "BusinessStatus",
    "OPEN",
    "RulesRefresh",
)
