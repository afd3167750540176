"""Booking status values and state machine."""

from enum import Enum

from app.core.exceptions import InvalidBookingStatus, ValidationError


class BookingStatus(str, Enum):
    """Booking lifecycle status."""

    PENDING_PAYMENT = "pending_payment"
    AUTHORIZED = "authorized"
    CONFIRMED = "confirmed"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    DECLINED = "declined"
    CANCELED = "canceled"


# Older rows and clients spell it with two l's
_STATUS_ALIASES = {"cancelled": BookingStatus.CANCELED}

BOOKING_TRANSITIONS = {
    BookingStatus.PENDING_PAYMENT: {BookingStatus.AUTHORIZED, BookingStatus.CANCELED},
    BookingStatus.AUTHORIZED: {
        BookingStatus.CONFIRMED,
        BookingStatus.DECLINED,
        BookingStatus.CANCELED,
    },
    BookingStatus.CONFIRMED: {BookingStatus.IN_PROGRESS, BookingStatus.CANCELED},
    BookingStatus.IN_PROGRESS: {BookingStatus.COMPLETED},
    BookingStatus.COMPLETED: set(),
    BookingStatus.DECLINED: set(),
    BookingStatus.CANCELED: set(),
}

CANCELLABLE_STATUSES = frozenset(
    {BookingStatus.PENDING_PAYMENT, BookingStatus.AUTHORIZED, BookingStatus.CONFIRMED}
)

# Service has started or finished; never cancellable regardless of timing
ACTIVE_OR_DONE_STATUSES = frozenset({BookingStatus.IN_PROGRESS, BookingStatus.COMPLETED})


def parse_booking_status(value: str | BookingStatus) -> BookingStatus:
    """Convert a raw status string to ``BookingStatus``.

    Raises:
        ValidationError: If the value is not a known status
    """
    if isinstance(value, BookingStatus):
        return value
    normalized = value.strip().lower()
    if normalized in _STATUS_ALIASES:
        return _STATUS_ALIASES[normalized]
    try:
        return BookingStatus(normalized)
    except ValueError:
        raise ValidationError(f"Unknown booking status: {value}")


def assert_booking_transition(current: str | BookingStatus, target: str | BookingStatus) -> None:
    current_status = parse_booking_status(current)
    target_status = parse_booking_status(target)
    allowed = BOOKING_TRANSITIONS.get(current_status, set())
    if target_status not in allowed:
        raise ValidationError(
            f"Invalid booking transition: {current_status.value} → {target_status.value}"
        )


def assert_cancellable(status: str | BookingStatus) -> None:
    """Check that a booking in ``status`` may be cancelled at all.

    Timing rules live in the cancellation policy; this only gates on status.

    Raises:
        InvalidBookingStatus: If the status does not allow cancellation
    """
    booking_status = parse_booking_status(status)
    if booking_status not in CANCELLABLE_STATUSES:
        raise InvalidBookingStatus(f"Cannot cancel booking with status: {booking_status.value}")
