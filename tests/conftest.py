"""Shared test fixtures and helpers."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from app.core.exceptions import PricingRuleLookupError
from app.schemas.availability import AvailabilitySettings, BookingWindow, InstantBookingSettings
from app.schemas.payout import BookingForPayout
from app.services.commission_service import CommissionConfig, CommissionService

WEEKDAY_HOURS = [{"start": "09:00", "end": "17:00"}]


@pytest.fixture
def standard_settings():
    """Monday to Friday 09:00-17:00, 15 minute buffer, five bookings a day."""
    return AvailabilitySettings(
        working_hours={
            day: WEEKDAY_HOURS
            for day in ("monday", "tuesday", "wednesday", "thursday", "friday")
        },
        buffer_time_minutes=15,
        max_bookings_per_day=5,
    )


@pytest.fixture
def instant_settings():
    return InstantBookingSettings(min_notice_hours=24, max_booking_duration_hours=8)


@pytest.fixture
def commission_config():
    return CommissionConfig()


@pytest.fixture
def service(commission_config):
    return CommissionService(commission_config)


def make_window(start: str, end: str) -> BookingWindow:
    """Helper to create a BookingWindow from ISO strings."""
    return BookingWindow(scheduled_start=start, scheduled_end=end)


def make_payout_booking(
    booking_id: str,
    amount: int,
    currency: str = "COP",
    country: str | None = "CO",
    service_category: str | None = "cleaning",
    city: str | None = "Bogota",
    completed_at: datetime | None = None,
) -> BookingForPayout:
    """Helper to create a BookingForPayout."""
    return BookingForPayout(
        id=booking_id,
        amount_captured=amount,
        currency=currency,
        country=country,
        service_category=service_category,
        city=city,
        completed_at=completed_at or datetime(2025, 1, 15, 18, 0),
    )


class FakeRateLookup:
    """Stands in for the pricing rule lookup.

    Returns the rate configured for a service category, or (None, error)
    for categories listed in ``failing``.
    """

    def __init__(
        self,
        rates: dict[str | None, Decimal] | None = None,
        failing: set[str | None] | None = None,
    ):
        self.rates = rates or {}
        self.failing = failing or set()
        self.calls: list[tuple[str | None, str | None, date]] = []

    async def __call__(self, service_category, city, effective_date):
        self.calls.append((service_category, city, effective_date))
        if service_category in self.failing:
            return None, PricingRuleLookupError(service_category, city, RuntimeError("connection reset"))
        return self.rates.get(service_category), None


@pytest.fixture
def no_rules_lookup():
    return FakeRateLookup()
