"""Date, time and timestamp helpers shared by the policy calculators."""

from datetime import UTC, date, datetime, time, tzinfo

TimestampLike = datetime | date | str


def to_utc_datetime(value: TimestampLike) -> datetime:
    """Normalize a timestamp to an aware UTC datetime.

    Accepts datetimes, dates and ISO 8601 strings (``2025-03-15``,
    ``2025-03-15T14:30:00Z``, ``2025-03-15T14:30:00-05:00``). Naive values
    are taken as UTC; bare dates become midnight UTC.

    Args:
        value: Timestamp in any accepted form

    Returns:
        datetime: Timezone-aware datetime in UTC

    Raises:
        ValueError: If a string is not valid ISO 8601
    """
    if isinstance(value, str):
        value = datetime.fromisoformat(value.strip())
    elif not isinstance(value, datetime):
        value = datetime.combine(value, time.min)

    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def to_date(value: date | str) -> date:
    """Coerce a ``YYYY-MM-DD`` string (or a datetime) to a ``date``."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value.strip()[:10])


def local_datetime(value: TimestampLike, tz: tzinfo) -> datetime:
    """Express a timestamp as wall-clock time in ``tz``."""
    return to_utc_datetime(value).astimezone(tz)


def time_to_minutes(value: str) -> int:
    """Parse ``HH:MM`` into minutes since midnight."""
    hours, minutes = value.split(":")[:2]
    return int(hours) * 60 + int(minutes)


def minutes_to_time(minutes: int) -> str:
    """Format minutes since midnight as zero-padded ``HH:MM``."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def hours_between(start: datetime, end: datetime) -> float:
    """Signed number of hours from ``start`` to ``end``."""
    return (end - start).total_seconds() / 3600
