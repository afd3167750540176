"""Availability-related Pydantic schemas."""

import datetime as dt
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

Weekday = Literal["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]

DayStatus = Literal["available", "limited", "booked", "blocked"]

_HHMM_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$|^24:00$"


class TimeSlot(BaseModel):
    """Working interval within one day, ``HH:MM`` to ``HH:MM``."""

    start: str = Field(..., pattern=_HHMM_PATTERN)
    end: str = Field(..., pattern=_HHMM_PATTERN)

    @model_validator(mode="after")
    def validate_order(self) -> "TimeSlot":
        if self.end <= self.start:
            raise ValueError("end must be after start")
        return self


class InstantBookingSettings(BaseModel):
    """Rules for accepting bookings without professional approval."""

    model_config = ConfigDict(from_attributes=True)

    min_notice_hours: float = Field(default=24, ge=0)
    max_booking_duration_hours: float = Field(default=8, gt=0)
    auto_accept_recurring: bool = False
    only_verified_customers: bool = False


class AvailabilitySettings(BaseModel):
    """Weekly working-hours template plus booking limits."""

    model_config = ConfigDict(from_attributes=True)

    working_hours: dict[Weekday, list[TimeSlot]] = Field(default_factory=dict)
    buffer_time_minutes: int = Field(default=0, ge=0, le=240)
    max_bookings_per_day: int | None = Field(default=None, ge=1)
    advance_booking_days: int = Field(default=30, ge=1)


class BookingWindow(BaseModel):
    """Existing booking occupying a professional's time."""

    model_config = ConfigDict(from_attributes=True)

    scheduled_start: dt.datetime
    scheduled_end: dt.datetime

    @field_validator("scheduled_end")
    @classmethod
    def validate_end(cls, v: dt.datetime, info) -> dt.datetime:
        start = info.data.get("scheduled_start")
        if start and v < start:
            raise ValueError("scheduled_end must not be before scheduled_start")
        return v


class DayAvailability(BaseModel):
    """Availability summary for one calendar date."""

    date: dt.date
    status: DayStatus
    available_slots: list[str]
    booking_count: int
    max_bookings: int


class AvailabilityRangeResponse(BaseModel):
    """Schema for availability across a date range."""

    professional_id: str
    timezone: str
    days: list[DayAvailability]


class SlotListResponse(BaseModel):
    """Schema for open slots on one date."""

    date: dt.date
    slot_duration_minutes: int
    slots: list[str]


class SlotCheckRequest(BaseModel):
    """Schema for checking a single candidate slot."""

    date: dt.date
    start_time: str = Field(..., pattern=_HHMM_PATTERN)
    duration_minutes: int = Field(default=60, ge=15, le=720)


class SlotCheckResponse(BaseModel):
    """Schema for slot check result."""

    available: bool


class NextAvailableDateResponse(BaseModel):
    """Schema for the next date with at least one open slot."""

    date: dt.date | None


class InstantBookingCheckRequest(BaseModel):
    """Schema for checking instant booking eligibility."""

    scheduled_start: dt.datetime
    duration_hours: float = Field(..., gt=0, le=24)
    is_recurring: bool = False


class InstantBookingCheckResponse(BaseModel):
    """Schema for instant booking eligibility result."""

    allowed: bool
    reason: str | None = None
