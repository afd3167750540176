"""Twice-weekly payout schedule.

Payouts run every Tuesday and Friday at the configured hour:
- Tuesday payout covers bookings completed Friday through Monday
- Friday payout covers bookings completed Tuesday through Thursday

Period boundaries are local midnight in the payout timezone.
"""

from dataclasses import dataclass
from datetime import datetime, time, timedelta
from decimal import Decimal
from typing import Protocol
from zoneinfo import ZoneInfo

from app.config import settings
from app.utils.time_utils import TimestampLike, to_utc_datetime

# datetime.weekday() numbering
TUESDAY = 1
FRIDAY = 4


class CompletedBooking(Protocol):
    """Anything carrying the two completion timestamps (ORM row or schema)."""

    completed_at: TimestampLike | None
    checked_out_at: TimestampLike | None


@dataclass(frozen=True)
class PayoutPeriod:
    """Accrual window for the next payout run."""

    period_start: datetime
    period_end: datetime
    next_payout_date: datetime


def _start_of_day(moment: datetime) -> datetime:
    return datetime.combine(moment.date(), time.min, tzinfo=moment.tzinfo)


def _last_weekday(moment: datetime, weekday: int) -> datetime:
    """Most recent ``weekday`` at midnight, today included."""
    days_since = (moment.weekday() - weekday) % 7
    return _start_of_day(moment - timedelta(days=days_since))


def _next_weekday(moment: datetime, weekday: int) -> datetime:
    """Upcoming ``weekday`` at midnight, today included."""
    days_until = (weekday - moment.weekday()) % 7
    return _start_of_day(moment + timedelta(days=days_until))


def get_current_payout_period(
    now: datetime | None = None,
    tz: str | None = None,
    payout_hour: int | None = None,
) -> PayoutPeriod:
    """Get the pending payout window and the next payout timestamp.

    Sunday to Tuesday accrue towards the Tuesday run (window opens the
    previous Friday); Wednesday to Saturday accrue towards the Friday run
    (window opens the previous Tuesday). On a payout day the window ends at
    that day's midnight.

    Args:
        now: Reference time, defaults to the current time
        tz: IANA timezone name, defaults to ``settings.payout_timezone``
        payout_hour: Hour of the payout run, defaults to ``settings.payout_time_hour``

    Returns:
        PayoutPeriod: Window start/end and next payout date, all in ``tz``
    """
    zone = ZoneInfo(tz or settings.payout_timezone)
    hour = settings.payout_time_hour if payout_hour is None else payout_hour
    local_now = (to_utc_datetime(now) if now is not None else datetime.now(zone)).astimezone(zone)

    if local_now.weekday() in (6, 0, TUESDAY):  # Sunday, Monday, Tuesday
        period_start = _last_weekday(local_now, FRIDAY)
        period_end = _next_weekday(local_now, TUESDAY)
    else:
        period_start = _last_weekday(local_now, TUESDAY)
        period_end = _next_weekday(local_now, FRIDAY)

    next_payout_date = period_end.replace(hour=hour)

    return PayoutPeriod(
        period_start=period_start,
        period_end=period_end,
        next_payout_date=next_payout_date,
    )


def is_booking_in_payout_period(
    booking: CompletedBooking,
    period_start: datetime,
    period_end: datetime,
) -> bool:
    """Check whether a booking's completion falls in ``[period_start, period_end)``.

    Check-out time wins over the completion timestamp when both are set.
    Bookings with neither are never included.
    """
    completed_at = booking.checked_out_at or booking.completed_at
    if not completed_at:
        return False

    completed = to_utc_datetime(completed_at)
    return to_utc_datetime(period_start) <= completed < to_utc_datetime(period_end)


def get_payout_schedule_description(commission_rate: Decimal | float | None = None) -> str:
    """Get description of payout schedule."""
    if commission_rate:
        rate_display = f"{Decimal(str(commission_rate)) * 100:.1f}%"
    else:
        rate_display = "15-20% (varies by service and location)"

    hour = settings.payout_time_hour
    hour_label = f"{hour % 12 or 12} {'AM' if hour < 12 else 'PM'}"

    return (
        "Payouts are processed twice weekly:\n"
        f"• Tuesday at {hour_label} - covers bookings completed Friday through Monday\n"
        f"• Friday at {hour_label} - covers bookings completed Tuesday through Thursday\n"
        "\n"
        f"The platform commission is {rate_display}.\n"
        "Funds typically arrive in your bank account within 2-3 business days."
    )
