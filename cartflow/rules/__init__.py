"""
Rules — business settings consumed by the cart and checkout.

    from cartflow import rules as R

    provider = R.BusinessRulesProvider(catalog.business_settings)
    provider.bind(cart)
    await provider.refresh()

    R.DEFAULT_RULES.with_minimum_order(Decimal(300))
"""

from cartflow.rules._types import (
    TaxSettings,
    DeliveryCharges,
    BusinessRules,
    DEFAULT_RULES,
    BusinessStatus,
    OPEN,
    RulesRefresh,
)
from cartflow.rules._cache import TtlTier
from cartflow.rules._provider import (
    RulesSource,
    StatusSource,
    DEFAULT_RULES_TTL,
    BusinessRulesProvider,
)

__all__ = (
    "TaxSettings",
    "DeliveryCharges",
    "BusinessRules",
    "DEFAULT_RULES",
    "BusinessStatus",
    "OPEN",
    "RulesRefresh",
    "TtlTier",
    "RulesSource",
    "StatusSource",
    "DEFAULT_RULES_TTL",
    "BusinessRulesProvider",
)
