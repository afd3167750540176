"""Professional availability and slot generation.

Handles:
- Weekly working hours (possibly split shifts)
- Blocked dates (vacations, holidays)
- Existing bookings widened by a buffer on both sides
- Per-day status for calendars
- Instant booking eligibility

Candidate slots start every 30 minutes whatever the slot length, so a
60-minute slot list can contain 09:00 and 09:30. Candidates are only
checked against real bookings, never against each other.
"""

from collections.abc import Iterable, Sequence
from datetime import UTC, date, datetime, timedelta, tzinfo

from app.schemas.availability import (
    AvailabilitySettings,
    BookingWindow,
    DayAvailability,
    DayStatus,
    InstantBookingSettings,
    TimeSlot,
)
from app.utils.time_utils import (
    hours_between,
    local_datetime,
    minutes_to_time,
    time_to_minutes,
    to_date,
    to_utc_datetime,
)

SLOT_STRIDE_MINUTES = 30
DEFAULT_SLOT_DURATION_MINUTES = 60
DEFAULT_MAX_BOOKINGS_PER_DAY = 5

# "limited" once this few slots remain or this share of the daily max is booked
LIMITED_SLOT_THRESHOLD = 2
LIMITED_BOOKING_RATIO = 0.7

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")

DateLike = date | str


def _normalize_blocked(blocked_dates: Iterable[DateLike]) -> set[date]:
    return {to_date(d) for d in blocked_dates}


def is_date_blocked(day: DateLike, blocked_dates: Iterable[DateLike]) -> bool:
    """Check if a date is blocked."""
    return to_date(day) in _normalize_blocked(blocked_dates)


def get_working_hours_for_date(day: DateLike, settings: AvailabilitySettings | None) -> list[TimeSlot]:
    """Get the working intervals configured for the weekday of ``day``."""
    if settings is None or not settings.working_hours:
        return []
    weekday = WEEKDAYS[to_date(day).weekday()]
    return list(settings.working_hours.get(weekday, []))


def intervals_overlap(
    start: int,
    end: int,
    other_start: int,
    other_end: int,
    buffer: int = 0,
) -> bool:
    """Check whether ``[start, end)`` overlaps ``[other_start, other_end)``.

    The second interval is widened by ``buffer`` on both sides. Intervals
    that only touch do not overlap. All values are minutes since midnight.
    """
    return not (end <= other_start - buffer or start >= other_end + buffer)


def _bookings_on_date(
    day: date,
    existing_bookings: Iterable[BookingWindow],
    tz: tzinfo,
) -> list[tuple[int, int]]:
    """Booked intervals on ``day`` as (start, end) minutes in local time.

    A booking belongs to the local date it starts on. One that runs past
    midnight is clipped to the end of that day.
    """
    intervals = []
    for booking in existing_bookings:
        start = local_datetime(booking.scheduled_start, tz)
        if start.date() != day:
            continue
        end = local_datetime(booking.scheduled_end, tz)
        start_minutes = start.hour * 60 + start.minute
        if end.date() == day:
            end_minutes = end.hour * 60 + end.minute
        else:
            end_minutes = 24 * 60
        intervals.append((start_minutes, end_minutes))
    return intervals


def _has_conflict(
    slot_start: int,
    slot_end: int,
    booked: Iterable[tuple[int, int]],
    buffer: int,
) -> bool:
    return any(
        intervals_overlap(slot_start, slot_end, booked_start, booked_end, buffer)
        for booked_start, booked_end in booked
    )


def generate_time_slots(
    day: DateLike,
    settings: AvailabilitySettings,
    existing_bookings: Sequence[BookingWindow],
    blocked_dates: Iterable[DateLike],
    slot_duration_minutes: int = DEFAULT_SLOT_DURATION_MINUTES,
    tz: tzinfo = UTC,
) -> list[str]:
    """Generate open slot start times for a date.

    Args:
        day: Calendar date in the professional's timezone
        settings: Working hours, buffer and limits
        existing_bookings: Bookings that occupy the professional
        blocked_dates: Dates with no availability at all
        slot_duration_minutes: Length of each slot
        tz: Professional's timezone; booking timestamps are converted to it

    Returns:
        list[str]: Ordered ``HH:MM`` start times
    """
    target = to_date(day)
    if is_date_blocked(target, blocked_dates):
        return []

    working_hours = get_working_hours_for_date(target, settings)
    if not working_hours:
        return []

    buffer = settings.buffer_time_minutes or 0
    booked = _bookings_on_date(target, existing_bookings, tz)
    slots: list[str] = []

    for period in working_hours:
        period_start = time_to_minutes(period.start)
        period_end = time_to_minutes(period.end)

        minute = period_start
        while minute + slot_duration_minutes <= period_end:
            if not _has_conflict(minute, minute + slot_duration_minutes, booked, buffer):
                slots.append(minutes_to_time(minute))
            minute += SLOT_STRIDE_MINUTES

    return slots


def calculate_day_status(
    day: DateLike,
    available_slots: Sequence[str],
    booking_count: int,
    max_bookings: int,
    blocked_dates: Iterable[DateLike],
) -> DayStatus:
    """Classify a date as available, limited, booked or blocked."""
    if is_date_blocked(day, blocked_dates):
        return "blocked"

    if booking_count >= max_bookings or not available_slots:
        return "booked"

    if (
        len(available_slots) <= LIMITED_SLOT_THRESHOLD
        or booking_count >= max_bookings * LIMITED_BOOKING_RATIO
    ):
        return "limited"

    return "available"


def get_availability_for_range(
    start_date: DateLike,
    end_date: DateLike,
    settings: AvailabilitySettings,
    existing_bookings: Sequence[BookingWindow],
    blocked_dates: Iterable[DateLike],
    tz: tzinfo = UTC,
) -> list[DayAvailability]:
    """Get availability for every date from ``start_date`` to ``end_date`` inclusive."""
    blocked = _normalize_blocked(blocked_dates)
    max_bookings = settings.max_bookings_per_day or DEFAULT_MAX_BOOKINGS_PER_DAY

    bookings_per_day: dict[date, int] = {}
    for booking in existing_bookings:
        booking_day = local_datetime(booking.scheduled_start, tz).date()
        bookings_per_day[booking_day] = bookings_per_day.get(booking_day, 0) + 1

    availability = []
    current = to_date(start_date)
    last = to_date(end_date)
    while current <= last:
        slots = generate_time_slots(current, settings, existing_bookings, blocked, tz=tz)
        booking_count = bookings_per_day.get(current, 0)
        availability.append(
            DayAvailability(
                date=current,
                status=calculate_day_status(current, slots, booking_count, max_bookings, blocked),
                available_slots=slots,
                booking_count=booking_count,
                max_bookings=max_bookings,
            )
        )
        current += timedelta(days=1)

    return availability


def is_slot_available(
    day: DateLike,
    start_time: str,
    duration_minutes: int,
    settings: AvailabilitySettings,
    existing_bookings: Sequence[BookingWindow],
    blocked_dates: Iterable[DateLike],
    tz: tzinfo = UTC,
) -> bool:
    """Check if one specific start time is bookable.

    The slot must fit entirely inside a single working interval and must
    not overlap any buffered booking. Unlike ``generate_time_slots`` the
    start time need not sit on the 30-minute grid.
    """
    target = to_date(day)
    if is_date_blocked(target, blocked_dates):
        return False

    working_hours = get_working_hours_for_date(target, settings)
    if not working_hours:
        return False

    slot_start = time_to_minutes(start_time)
    slot_end = slot_start + duration_minutes

    within_working_hours = any(
        slot_start >= time_to_minutes(period.start) and slot_end <= time_to_minutes(period.end)
        for period in working_hours
    )
    if not within_working_hours:
        return False

    buffer = settings.buffer_time_minutes or 0
    booked = _bookings_on_date(target, existing_bookings, tz)
    return not _has_conflict(slot_start, slot_end, booked, buffer)


def get_next_available_date(
    settings: AvailabilitySettings,
    existing_bookings: Sequence[BookingWindow],
    blocked_dates: Iterable[DateLike],
    max_days_ahead: int = 30,
    today: DateLike | None = None,
    tz: tzinfo = UTC,
) -> date | None:
    """Find the first date after ``today`` with at least one open slot."""
    start = to_date(today) if today is not None else datetime.now(tz).date()
    blocked = _normalize_blocked(blocked_dates)

    for offset in range(1, max_days_ahead + 1):
        candidate = start + timedelta(days=offset)
        if generate_time_slots(candidate, settings, existing_bookings, blocked, tz=tz):
            return candidate

    return None


def _format_hours(value: float) -> str:
    return f"{value:g}"


def can_instant_book(
    scheduled_start: datetime | str,
    duration_hours: float,
    settings: InstantBookingSettings,
    is_recurring: bool = False,
    now: datetime | None = None,
) -> tuple[bool, str | None]:
    """Check if a booking can skip professional approval.

    Args:
        scheduled_start: Requested start time
        duration_hours: Requested duration
        settings: Professional's instant booking rules
        is_recurring: Whether the booking is part of a recurring plan
        now: Reference time, defaults to the current UTC time

    Returns:
        Tuple of (allowed, reason)
    """
    reference = to_utc_datetime(now) if now is not None else datetime.now(UTC)
    hours_until = hours_between(reference, to_utc_datetime(scheduled_start))

    if hours_until < settings.min_notice_hours:
        return False, f"Requires {_format_hours(settings.min_notice_hours)} hours notice"

    if duration_hours > settings.max_booking_duration_hours:
        return False, f"Maximum duration is {_format_hours(settings.max_booking_duration_hours)} hours"

    if is_recurring and not settings.auto_accept_recurring:
        return False, "Recurring bookings require approval"

    return True, None
