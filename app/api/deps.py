"""API dependencies shared by the route modules."""

from typing import Annotated
from uuid import UUID

from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundError
from app.database import get_db
from app.models.booking import Booking
from app.services.commission_service import CommissionService, RateLookup, commission_service
from app.services.pricing_rule_service import PricingRuleService

__all__ = [
    "get_booking_or_404",
    "get_commission_service",
    "get_db",
    "get_rate_lookup",
]


async def get_booking_or_404(
    booking_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Booking:
    """Fetch the booking named in the path or fail with 404."""
    result = await db.execute(select(Booking).where(Booking.id == booking_id))
    booking = result.scalar_one_or_none()
    if not booking:
        raise NotFoundError("Booking", str(booking_id))
    return booking


def get_commission_service() -> CommissionService:
    """Commission service configured from settings."""
    return commission_service


async def get_rate_lookup(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> RateLookup:
    """Pricing rule lookup bound to the request's session."""
    return PricingRuleService(db).lookup
