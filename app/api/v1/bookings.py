"""Booking cancellation endpoints."""

import logging
from datetime import UTC, datetime
from typing import Annotated

from fastapi import APIRouter, Depends

from app.api.deps import get_booking_or_404
from app.core.exceptions import InvalidBookingStatus
from app.domain.booking_state import BookingStatus, assert_booking_transition, assert_cancellable
from app.domain.cancellation_policy import (
    calculate_refund_amount,
    evaluate_cancellation_policy,
    get_cancellation_policy_description,
)
from app.models.booking import Booking
from app.schemas.booking import (
    BookingCancelRequest,
    BookingResponse,
    CancellationPolicyDescriptionResponse,
    CancellationPolicyResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _refundable_amount(booking: Booking) -> int:
    """Captured amount once charged, otherwise the authorized hold."""
    return booking.amount_captured or booking.amount_authorized or 0


@router.get("/cancellation-policy", response_model=CancellationPolicyDescriptionResponse)
async def get_cancellation_policy() -> CancellationPolicyDescriptionResponse:
    """Get the cancellation policy text shown to customers."""
    return CancellationPolicyDescriptionResponse(description=get_cancellation_policy_description())


@router.get("/{booking_id}/cancellation-policy", response_model=CancellationPolicyResponse)
async def get_booking_cancellation_policy(
    booking: Annotated[Booking, Depends(get_booking_or_404)],
) -> CancellationPolicyResponse:
    """Quote the refund a customer would get by cancelling now."""
    result = evaluate_cancellation_policy(booking.scheduled_start, booking.status)

    refund_amount = 0
    if result.can_cancel:
        refund_amount = calculate_refund_amount(_refundable_amount(booking), result.refund_percentage)

    return CancellationPolicyResponse(
        booking_id=booking.id,
        can_cancel=result.can_cancel,
        refund_percentage=result.refund_percentage,
        refund_amount=refund_amount,
        currency=booking.currency,
        reason=result.reason,
        hours_until_service=result.hours_until_service,
    )


@router.post("/{booking_id}/cancel", response_model=BookingResponse)
async def cancel_booking(
    request: BookingCancelRequest,
    booking: Annotated[Booking, Depends(get_booking_or_404)],
) -> Booking:
    """Cancel a booking and record the refund owed under the policy."""
    assert_cancellable(booking.status)

    result = evaluate_cancellation_policy(booking.scheduled_start, booking.status)
    if not result.can_cancel:
        raise InvalidBookingStatus(result.reason)

    assert_booking_transition(booking.status, BookingStatus.CANCELED)

    booking.refund_amount = calculate_refund_amount(
        _refundable_amount(booking), result.refund_percentage
    )
    booking.status = BookingStatus.CANCELED.value
    booking.cancellation_reason = request.reason
    booking.canceled_at = datetime.now(UTC)

    logger.info(
        f"Booking {booking.id} canceled {result.hours_until_service:.1f}h before start, "
        f"refund {result.refund_percentage}% = {booking.refund_amount} {booking.currency}"
    )

    return booking
