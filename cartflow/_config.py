"""
Checkout configuration — immutable, built fluently.

    config = (
        DEFAULT_CONFIG
        .with_max_cart_items(30)
        .with_guest_defaults(name="Guest", email="guest@pizza.local")
    )

Business-driven values (tax, delivery, minimum order) are not here; they
come from BusinessRules and can change at runtime.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import timedelta

from cartflow._types import CURRENCY


@dataclass(frozen=True, slots=True)
class CheckoutConfig:
    """
    Client-side knobs.

    max_cart_items caps the total quantity in the cart (None disables it).
    submission_ttl is how long a created order is remembered for retries.
    """

    max_cart_items: int | None = 20
    phone_digits: int = 10
    guest_name: str = "Guest User"
    guest_email: str = "guest@example.com"
    submission_ttl: timedelta | None = timedelta(hours=1)
    rules_ttl: timedelta = timedelta(minutes=5)
    currency: str = CURRENCY

    def with_max_cart_items(self, limit: int | None) -> CheckoutConfig:
        if limit is not None and limit < 1:
            raise ValueError(f"max_cart_items must be positive, got {limit}")
        return replace(self, max_cart_items=limit)

    def with_phone_digits(self, digits: int) -> CheckoutConfig:
        if digits < 1:
            raise ValueError(f"phone_digits must be positive, got {digits}")
        return replace(self, phone_digits=digits)

    def with_guest_defaults(
        self,
        *,
        name: str | None = None,
        email: str | None = None,
    ) -> CheckoutConfig:
        return replace(
            self,
            guest_name=name if name is not None else self.guest_name,
            guest_email=email if email is not None else self.guest_email,
        )

    def with_submission_ttl(self, ttl: timedelta | None) -> CheckoutConfig:
        return replace(self, submission_ttl=ttl)

    def with_rules_ttl(self, ttl: timedelta) -> CheckoutConfig:
        if ttl <= timedelta(0):
            raise ValueError("rules_ttl must be positive")
        return replace(self, rules_ttl=ttl)

    def with_currency(self, symbol: str) -> CheckoutConfig:
        return replace(self, currency=symbol)


DEFAULT_CONFIG = CheckoutConfig()


__all__ = ("CheckoutConfig", "DEFAULT_CONFIG")
