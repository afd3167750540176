"""Booking-related Pydantic schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class CancellationPolicyResponse(BaseModel):
    """Schema for a booking's cancellation terms right now."""

    model_config = ConfigDict(from_attributes=True)

    booking_id: UUID | None = None
    can_cancel: bool
    refund_percentage: int
    refund_amount: int = 0
    currency: str | None = None
    reason: str
    hours_until_service: float


class CancellationPolicyDescriptionResponse(BaseModel):
    """Schema for the human-readable policy text."""

    description: str


class BookingCancelRequest(BaseModel):
    """Schema for canceling a booking."""

    reason: str = Field(..., min_length=10, max_length=1000)


class BookingResponse(BaseModel):
    """Schema for booking response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    professional_id: UUID
    customer_id: UUID
    status: str

    # Schedule
    scheduled_start: datetime
    scheduled_end: datetime

    # Money
    amount_authorized: int
    amount_captured: int
    currency: str

    service_category: str | None
    city: str | None
    country_code: str | None

    # Cancellation
    cancellation_reason: str | None
    refund_amount: int

    # Timestamps
    completed_at: datetime | None
    checked_out_at: datetime | None
    canceled_at: datetime | None
    created_at: datetime
    updated_at: datetime
