"""Database models."""

from app.models.availability import ProfessionalAvailability
from app.models.booking import Booking
from app.models.pricing import PricingRule

__all__ = [
    "Booking",
    "ProfessionalAvailability",
    "PricingRule",
]
