"""Payout and commission Pydantic schemas."""

from datetime import datetime
from decimal import Decimal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_serializer, field_validator


class BookingForPayout(BaseModel):
    """Completed booking as seen by the payout calculator."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: str
    amount_captured: int = Field(
        default=0,
        ge=0,
        validation_alias=AliasChoices("amount_captured", "final_amount_captured"),
    )
    currency: str = Field(default="COP", min_length=3, max_length=3)
    completed_at: datetime | None = None
    checked_out_at: datetime | None = None
    service_category: str | None = None
    city: str | None = None
    country: str | None = Field(
        default=None,
        max_length=2,
        validation_alias=AliasChoices("country", "country_code"),
    )

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v):
        # ORM rows carry UUIDs
        return str(v) if v is not None else v


class PayoutCalculation(BaseModel):
    """Totals for a batch of bookings paid out together."""

    gross_amount: int
    commission_amount: int
    net_amount: int
    currency: str
    booking_ids: list[str]
    booking_count: int
    applied_commission_rate: Decimal | None = None

    @field_serializer("applied_commission_rate", when_used="json")
    def serialize_rate(self, v: Decimal | None) -> float | None:
        # Clients read the rate as a JSON number
        return float(v) if v is not None else None


class PayoutCalculateRequest(BaseModel):
    """Schema for calculating a payout from a posted batch."""

    bookings: list[BookingForPayout] = Field(default_factory=list, max_length=1000)
    dynamic_rates: bool = False


class PayoutPeriodResponse(BaseModel):
    """Schema for the current payout window."""

    period_start: datetime
    period_end: datetime
    next_payout_date: datetime
    schedule_description: str


class PendingPayoutResponse(BaseModel):
    """Schema for a professional's payout accrued in the current period."""

    professional_id: str
    period: PayoutPeriodResponse
    payout: PayoutCalculation
