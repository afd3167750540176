"""Core exceptions and middleware."""

from app.core.exceptions import (
    AppException,
    InvalidBookingStatus,
    MixedCurrencyError,
    NotFoundError,
    PricingRuleLookupError,
    ValidationError,
)

__all__ = [
    "AppException",
    "InvalidBookingStatus",
    "MixedCurrencyError",
    "NotFoundError",
    "PricingRuleLookupError",
    "ValidationError",
]
