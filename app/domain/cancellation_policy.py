"""Cancellation policy domain logic.

Refund tiers by notice given before the scheduled start:
- 24h or more: 100% refund
- 12-24h: 50% refund
- 4-12h: 25% refund
- under 4h: no refund (cancellation still allowed)

Bookings that have started, finished, or whose start time has passed
cannot be cancelled. Lower bounds are inclusive: exactly 24h gets 100%.
"""

from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import ROUND_HALF_UP, Decimal

from app.domain.booking_state import ACTIVE_OR_DONE_STATUSES, BookingStatus, parse_booking_status
from app.utils.time_utils import TimestampLike, hours_between, to_utc_datetime


@dataclass(frozen=True)
class CancellationPolicyResult:
    """Outcome of evaluating the policy for one booking."""

    can_cancel: bool
    refund_percentage: int
    reason: str
    hours_until_service: float


# (min_hours_before_start, refund_percentage, reason)
# Evaluated in order - first match wins
REFUND_TIERS: list[tuple[int, int, str]] = [
    (24, 100, "Full refund: cancelled at least 24 hours before the service"),
    (12, 50, "50% refund: cancelled 12-24 hours before the service"),
    (4, 25, "25% refund: cancelled 4-12 hours before the service"),
]

NO_REFUND_REASON = "No refund: cancelled less than 4 hours before the service"

_STATUS_BLOCK_REASONS = {
    BookingStatus.COMPLETED: "Cannot cancel completed services",
    BookingStatus.IN_PROGRESS: "Cannot cancel services that are in progress",
}


def evaluate_cancellation_policy(
    scheduled_start: TimestampLike,
    status: str | BookingStatus,
    now: datetime | None = None,
) -> CancellationPolicyResult:
    """Work out whether a booking can be cancelled and how much is refunded.

    Args:
        scheduled_start: When the service starts (datetime, date or ISO string)
        status: Current booking status
        now: Reference time, defaults to the current UTC time

    Returns:
        CancellationPolicyResult: Cancel flag, refund tier and reason
    """
    booking_status = parse_booking_status(status)
    if booking_status in ACTIVE_OR_DONE_STATUSES:
        return CancellationPolicyResult(
            can_cancel=False,
            refund_percentage=0,
            reason=_STATUS_BLOCK_REASONS[booking_status],
            hours_until_service=0,
        )

    reference = to_utc_datetime(now) if now is not None else datetime.now(UTC)
    hours_until = hours_between(reference, to_utc_datetime(scheduled_start))

    if hours_until <= 0:
        return CancellationPolicyResult(
            can_cancel=False,
            refund_percentage=0,
            reason="Cannot cancel past services",
            hours_until_service=hours_until,
        )

    for min_hours, refund_pct, reason in REFUND_TIERS:
        if hours_until >= min_hours:
            return CancellationPolicyResult(
                can_cancel=True,
                refund_percentage=refund_pct,
                reason=reason,
                hours_until_service=hours_until,
            )

    return CancellationPolicyResult(
        can_cancel=True,
        refund_percentage=0,
        reason=NO_REFUND_REASON,
        hours_until_service=hours_until,
    )


def calculate_refund_amount(amount: int, refund_percentage: int | Decimal) -> int:
    """Calculate refund amount in minor currency units.

    Half units round up, so 50% of 99 refunds 50.

    Args:
        amount: Authorized or captured amount
        refund_percentage: Percentage to refund (0-100)

    Returns:
        int: Refund amount
    """
    refund = Decimal(amount) * Decimal(refund_percentage) / Decimal("100")
    return int(refund.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def get_cancellation_policy_description() -> str:
    """Get human-readable policy description."""
    return (
        "Cancellation Policy:\n"
        "• 24 hours or more before the service: 100% refund\n"
        "• 12-24 hours before the service: 50% refund\n"
        "• 4-12 hours before the service: 25% refund\n"
        "• Under 4 hours before the service: No refund\n"
        "• Once the service has started it can no longer be cancelled"
    )
