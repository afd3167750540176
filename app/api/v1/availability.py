"""Professional availability endpoints."""

from datetime import date
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_db
from app.config import settings
from app.core.exceptions import ValidationError
from app.domain.availability import (
    DEFAULT_SLOT_DURATION_MINUTES,
    can_instant_book,
    generate_time_slots,
    get_availability_for_range,
    get_next_available_date,
    is_slot_available,
)
from app.schemas.availability import (
    AvailabilityRangeResponse,
    InstantBookingCheckRequest,
    InstantBookingCheckResponse,
    NextAvailableDateResponse,
    SlotCheckRequest,
    SlotCheckResponse,
    SlotListResponse,
)
from app.services.availability_service import availability_service

router = APIRouter()

# Longest range a calendar view may request at once
MAX_RANGE_DAYS = 92


@router.get("/{professional_id}/availability", response_model=AvailabilityRangeResponse)
async def get_availability(
    professional_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    start_date: date = Query(...),
    end_date: date = Query(...),
) -> AvailabilityRangeResponse:
    """Get per-day availability for a date range (inclusive)."""
    if end_date < start_date:
        raise ValidationError("end_date must not be before start_date")
    if (end_date - start_date).days >= MAX_RANGE_DAYS:
        raise ValidationError(f"Date range cannot exceed {MAX_RANGE_DAYS} days")

    schedule = await availability_service.get_schedule(db, professional_id, start_date, end_date)
    days = get_availability_for_range(
        start_date,
        end_date,
        schedule.settings,
        schedule.bookings,
        schedule.blocked_dates,
        tz=schedule.timezone,
    )

    return AvailabilityRangeResponse(
        professional_id=str(professional_id),
        timezone=schedule.timezone.key,
        days=days,
    )


@router.get("/{professional_id}/availability/slots", response_model=SlotListResponse)
async def get_slots(
    professional_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    day: date = Query(..., alias="date"),
    duration_minutes: int = Query(default=DEFAULT_SLOT_DURATION_MINUTES, ge=15, le=720),
) -> SlotListResponse:
    """Get open slot start times for one date."""
    schedule = await availability_service.get_schedule(db, professional_id, day, day)
    slots = generate_time_slots(
        day,
        schedule.settings,
        schedule.bookings,
        schedule.blocked_dates,
        slot_duration_minutes=duration_minutes,
        tz=schedule.timezone,
    )
    return SlotListResponse(date=day, slot_duration_minutes=duration_minutes, slots=slots)


@router.post("/{professional_id}/availability/check", response_model=SlotCheckResponse)
async def check_slot(
    professional_id: UUID,
    request: SlotCheckRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> SlotCheckResponse:
    """Check whether one specific start time can be booked."""
    schedule = await availability_service.get_schedule(db, professional_id, request.date, request.date)
    available = is_slot_available(
        request.date,
        request.start_time,
        request.duration_minutes,
        schedule.settings,
        schedule.bookings,
        schedule.blocked_dates,
        tz=schedule.timezone,
    )
    return SlotCheckResponse(available=available)


@router.get("/{professional_id}/availability/next", response_model=NextAvailableDateResponse)
async def get_next_available(
    professional_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    max_days_ahead: int | None = Query(default=None, ge=1, le=365),
) -> NextAvailableDateResponse:
    """Get the first date after today with an open slot."""
    days_ahead = max_days_ahead or settings.next_available_max_days

    schedule, today = await availability_service.get_upcoming_schedule(
        db, professional_id, days_ahead
    )

    next_date = get_next_available_date(
        schedule.settings,
        schedule.bookings,
        schedule.blocked_dates,
        max_days_ahead=days_ahead,
        today=today,
        tz=schedule.timezone,
    )
    return NextAvailableDateResponse(date=next_date)


@router.post(
    "/{professional_id}/instant-booking/check",
    response_model=InstantBookingCheckResponse,
)
async def check_instant_booking(
    professional_id: UUID,
    request: InstantBookingCheckRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> InstantBookingCheckResponse:
    """Check whether a booking request would be accepted without approval."""
    day = request.scheduled_start.date()
    schedule = await availability_service.get_schedule(db, professional_id, day, day)

    if not schedule.instant_booking_enabled:
        return InstantBookingCheckResponse(allowed=False, reason="Instant booking is not enabled")

    allowed, reason = can_instant_book(
        request.scheduled_start,
        request.duration_hours,
        schedule.instant_booking,
        is_recurring=request.is_recurring,
    )
    return InstantBookingCheckResponse(allowed=allowed, reason=reason)
