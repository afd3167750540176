"""Payout endpoints for professionals."""

import logging
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_commission_service, get_db, get_rate_lookup
from app.domain.booking_state import BookingStatus
from app.domain.payout_schedule import (
    PayoutPeriod,
    get_current_payout_period,
    get_payout_schedule_description,
    is_booking_in_payout_period,
)
from app.models.booking import Booking
from app.schemas.payout import (
    BookingForPayout,
    PayoutCalculateRequest,
    PayoutCalculation,
    PayoutPeriodResponse,
    PendingPayoutResponse,
)
from app.services.commission_service import CommissionService, RateLookup

logger = logging.getLogger(__name__)

router = APIRouter()


def _period_response(period: PayoutPeriod) -> PayoutPeriodResponse:
    return PayoutPeriodResponse(
        period_start=period.period_start,
        period_end=period.period_end,
        next_payout_date=period.next_payout_date,
        schedule_description=get_payout_schedule_description(),
    )


@router.post("/calculate", response_model=PayoutCalculation)
async def calculate_payout(
    request: PayoutCalculateRequest,
    service: Annotated[CommissionService, Depends(get_commission_service)],
    lookup: Annotated[RateLookup, Depends(get_rate_lookup)],
) -> PayoutCalculation:
    """Calculate payout totals for a batch of completed bookings.

    With ``dynamic_rates`` each booking is priced by its pricing rule;
    otherwise the flat country rate applies to the whole batch.
    """
    if request.dynamic_rates:
        return await service.calculate_payout_from_bookings_with_dynamic_rates(
            request.bookings, lookup
        )
    return service.calculate_payout_from_bookings(request.bookings)


@router.get("/period", response_model=PayoutPeriodResponse)
async def get_payout_period() -> PayoutPeriodResponse:
    """Get the current payout window and next payout date."""
    return _period_response(get_current_payout_period())


@router.get("/professionals/{professional_id}/pending", response_model=PendingPayoutResponse)
async def get_pending_payout(
    professional_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    service: Annotated[CommissionService, Depends(get_commission_service)],
    lookup: Annotated[RateLookup, Depends(get_rate_lookup)],
) -> PendingPayoutResponse:
    """Get what a professional has accrued in the current payout window."""
    period = get_current_payout_period()

    completed_moment = func.coalesce(Booking.checked_out_at, Booking.completed_at)
    result = await db.execute(
        select(Booking)
        .where(
            Booking.professional_id == professional_id,
            Booking.status == BookingStatus.COMPLETED.value,
            completed_moment >= period.period_start,
            completed_moment < period.period_end,
        )
        .order_by(completed_moment)
    )
    bookings = [
        BookingForPayout.model_validate(booking)
        for booking in result.scalars().all()
        if is_booking_in_payout_period(booking, period.period_start, period.period_end)
    ]

    payout = await service.calculate_payout_from_bookings_with_dynamic_rates(bookings, lookup)
    logger.debug(
        f"Pending payout for professional {professional_id}: "
        f"{payout.booking_count} bookings, net {payout.net_amount} {payout.currency}"
    )

    return PendingPayoutResponse(
        professional_id=str(professional_id),
        period=_period_response(period),
        payout=payout,
    )
