"""Load professional schedules and bookings for availability calculations."""

from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta
from uuid import UUID
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.exceptions import NotFoundError, ValidationError
from app.domain.booking_state import BookingStatus
from app.models.availability import ProfessionalAvailability
from app.models.booking import Booking
from app.schemas.availability import AvailabilitySettings, BookingWindow, InstantBookingSettings

# Bookings in these states hold the professional's time
OCCUPYING_STATUSES = (
    BookingStatus.PENDING_PAYMENT.value,
    BookingStatus.AUTHORIZED.value,
    BookingStatus.CONFIRMED.value,
    BookingStatus.IN_PROGRESS.value,
)


@dataclass
class ProfessionalSchedule:
    """Everything the availability calculators need for one professional."""

    settings: AvailabilitySettings
    instant_booking: InstantBookingSettings
    instant_booking_enabled: bool
    blocked_dates: list[date]
    timezone: ZoneInfo
    bookings: list[BookingWindow]


def _zone(name: str | None) -> ZoneInfo:
    try:
        return ZoneInfo(name or "UTC")
    except ZoneInfoNotFoundError:
        raise ValidationError(f"Unknown timezone: {name}")


def _describe_errors(exc: PydanticValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in exc.errors()
    )


class AvailabilityService:
    """Service for reading availability rows and occupying bookings."""

    async def get_availability_row(
        self,
        db: AsyncSession,
        professional_id: UUID,
    ) -> ProfessionalAvailability:
        """Fetch a professional's availability row.

        Raises:
            NotFoundError: If the professional has no availability settings
        """
        result = await db.execute(
            select(ProfessionalAvailability).where(
                ProfessionalAvailability.professional_id == professional_id
            )
        )
        row = result.scalar_one_or_none()
        if row is None:
            raise NotFoundError("Availability settings", str(professional_id))
        return row

    async def get_bookings(
        self,
        db: AsyncSession,
        professional_id: UUID,
        tz: ZoneInfo,
        start_date: date,
        end_date: date,
    ) -> list[BookingWindow]:
        """Occupying bookings starting between two local dates (inclusive)."""
        # Pad by a day each side so bookings near local midnight are included
        window_start = datetime.combine(start_date - timedelta(days=1), time.min, tzinfo=tz)
        window_end = datetime.combine(end_date + timedelta(days=2), time.min, tzinfo=tz)

        result = await db.execute(
            select(Booking)
            .where(
                Booking.professional_id == professional_id,
                Booking.status.in_(OCCUPYING_STATUSES),
                Booking.scheduled_start >= window_start.astimezone(UTC),
                Booking.scheduled_start < window_end.astimezone(UTC),
            )
            .order_by(Booking.scheduled_start)
        )
        return [BookingWindow.model_validate(b) for b in result.scalars().all()]

    def build_schedule(
        self,
        row: ProfessionalAvailability,
        bookings: list[BookingWindow],
    ) -> ProfessionalSchedule:
        """Parse a stored availability row into calculator inputs.

        Weekday keys are matched case-insensitively.

        Raises:
            ValidationError: If the stored settings cannot be parsed
        """
        working_hours = {
            str(day).strip().lower(): periods for day, periods in (row.working_hours or {}).items()
        }

        try:
            availability_settings = AvailabilitySettings(
                working_hours=working_hours,
                buffer_time_minutes=row.buffer_time_minutes or 0,
                max_bookings_per_day=row.max_bookings_per_day or settings.default_max_bookings_per_day,
                advance_booking_days=row.advance_booking_days or 30,
            )
            instant_booking = InstantBookingSettings(
                min_notice_hours=float(row.min_notice_hours),
                max_booking_duration_hours=float(row.max_booking_duration_hours),
                auto_accept_recurring=row.auto_accept_recurring,
                only_verified_customers=row.only_verified_customers,
            )
        except PydanticValidationError as e:
            raise ValidationError(
                f"Invalid availability settings for professional {row.professional_id}: "
                f"{_describe_errors(e)}",
                errors=e.errors(include_url=False, include_context=False),
            )

        return ProfessionalSchedule(
            settings=availability_settings,
            instant_booking=instant_booking,
            instant_booking_enabled=row.instant_booking_enabled,
            blocked_dates=list(row.blocked_dates or []),
            timezone=_zone(row.timezone),
            bookings=bookings,
        )

    async def get_schedule(
        self,
        db: AsyncSession,
        professional_id: UUID,
        start_date: date,
        end_date: date,
    ) -> ProfessionalSchedule:
        """Load settings plus bookings touching ``start_date``..``end_date``.

        Args:
            db: Database session
            professional_id: Professional to load
            start_date: First local date of interest
            end_date: Last local date of interest (inclusive)

        Returns:
            ProfessionalSchedule: Parsed settings and booking windows

        Raises:
            NotFoundError: If the professional has no availability settings
            ValidationError: If the stored settings cannot be parsed
        """
        row = await self.get_availability_row(db, professional_id)
        tz = _zone(row.timezone)
        bookings = await self.get_bookings(db, professional_id, tz, start_date, end_date)
        return self.build_schedule(row, bookings)

    async def get_upcoming_schedule(
        self,
        db: AsyncSession,
        professional_id: UUID,
        days_ahead: int,
        now: datetime | None = None,
    ) -> tuple[ProfessionalSchedule, date]:
        """Load the schedule for the days after today in the professional's timezone.

        Returns:
            Tuple of (schedule, today's local date)
        """
        row = await self.get_availability_row(db, professional_id)
        tz = _zone(row.timezone)
        today = (now or datetime.now(UTC)).astimezone(tz).date()

        bookings = await self.get_bookings(
            db, professional_id, tz, today + timedelta(days=1), today + timedelta(days=days_ahead)
        )
        return self.build_schedule(row, bookings), today


availability_service = AvailabilityService()
