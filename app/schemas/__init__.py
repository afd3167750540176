"""Pydantic schemas for API validation."""

from app.schemas.availability import (
    AvailabilitySettings,
    BookingWindow,
    DayAvailability,
    InstantBookingSettings,
    TimeSlot,
)
from app.schemas.booking import (
    BookingCancelRequest,
    BookingResponse,
    CancellationPolicyResponse,
)
from app.schemas.payout import (
    BookingForPayout,
    PayoutCalculateRequest,
    PayoutCalculation,
    PayoutPeriodResponse,
)

__all__ = [
    # Availability
    "AvailabilitySettings",
    "BookingWindow",
    "DayAvailability",
    "InstantBookingSettings",
    "TimeSlot",
    # Booking
    "BookingCancelRequest",
    "BookingResponse",
    "CancellationPolicyResponse",
    # Payout
    "BookingForPayout",
    "PayoutCalculateRequest",
    "PayoutCalculation",
    "PayoutPeriodResponse",
]
