"""Commission pricing rule database model."""

from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import Boolean, Date, DateTime, Numeric, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from app.database import Base


class PricingRule(Base):
    """Commission rate override for a service category and/or city.

    Rows are resolved by the ``get_pricing_rule`` SQL function, most
    specific match first.
    """

    __tablename__ = "pricing_rules"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    service_category: Mapped[str | None] = mapped_column(String(50), index=True)  # NULL = any
    city: Mapped[str | None] = mapped_column(String(100), index=True)  # NULL = any
    commission_rate: Mapped[Decimal] = mapped_column(
        Numeric(5, 4), nullable=False
    )  # 0.1500 = 15%
    effective_from: Mapped[date] = mapped_column(Date, nullable=False)
    effective_until: Mapped[date | None] = mapped_column(Date)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    notes: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
