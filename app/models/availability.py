"""Professional availability database model."""

from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import ARRAY, Boolean, Date, DateTime, Integer, Numeric, String
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from app.database import Base


class ProfessionalAvailability(Base):
    """Weekly schedule, limits and instant booking rules for a professional."""

    __tablename__ = "professional_availability"

    professional_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True)

    # {"monday": [{"start": "09:00", "end": "17:00"}], ...}
    working_hours: Mapped[dict] = mapped_column(JSONB, nullable=False, default=dict)
    buffer_time_minutes: Mapped[int] = mapped_column(Integer, default=0)
    max_bookings_per_day: Mapped[int | None] = mapped_column(Integer)
    advance_booking_days: Mapped[int] = mapped_column(Integer, default=30)
    blocked_dates: Mapped[list[date]] = mapped_column(ARRAY(Date), default=list)
    timezone: Mapped[str] = mapped_column(String(64), default="America/Bogota")

    # Instant booking
    instant_booking_enabled: Mapped[bool] = mapped_column(Boolean, default=False)
    min_notice_hours: Mapped[Decimal] = mapped_column(Numeric(5, 2), default=Decimal("24"))
    max_booking_duration_hours: Mapped[Decimal] = mapped_column(Numeric(5, 2), default=Decimal("8"))
    auto_accept_recurring: Mapped[bool] = mapped_column(Boolean, default=False)
    only_verified_customers: Mapped[bool] = mapped_column(Boolean, default=False)

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
