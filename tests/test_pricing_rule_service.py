"""Tests for the pricing rule lookup."""

import asyncio
from contextlib import nullcontext
from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from app.core.exceptions import PricingRuleLookupError
from app.services.commission_service import CommissionConfig, CommissionService
from app.services.pricing_rule_service import PricingRuleService
from tests.conftest import make_payout_booking


def _session(row=None, error: Exception | None = None) -> MagicMock:
    """Mock AsyncSession whose execute returns ``row`` or raises ``error``."""
    db = MagicMock()
    db.begin_nested = MagicMock(side_effect=lambda: nullcontext())
    result = MagicMock()
    result.first.return_value = row
    db.execute = AsyncMock(return_value=result, side_effect=error)
    return db


class TestPricingRuleLookup:
    @pytest.mark.asyncio
    async def test_rule_found(self):
        db = _session(row=(Decimal("0.1200"),))
        rate, error = await PricingRuleService(db).lookup("cleaning", "Bogota", date(2025, 1, 15))

        assert rate == Decimal("0.12")
        assert error is None

    @pytest.mark.asyncio
    async def test_float_rate_converted_exactly(self):
        db = _session(row=(0.1,))
        rate, _ = await PricingRuleService(db).lookup("cleaning", "Bogota", date(2025, 1, 15))
        assert rate == Decimal("0.1")

    @pytest.mark.asyncio
    async def test_no_rule(self):
        db = _session(row=None)
        assert await PricingRuleService(db).lookup("cleaning", "Bogota", date(2025, 1, 15)) == (None, None)

    @pytest.mark.asyncio
    async def test_null_rate(self):
        db = _session(row=(None,))
        assert await PricingRuleService(db).lookup("cleaning", None, date(2025, 1, 15)) == (None, None)

    @pytest.mark.asyncio
    async def test_database_error_returned(self):
        db = _session(error=OperationalError("SELECT", {}, Exception("connection refused")))
        rate, error = await PricingRuleService(db).lookup("cleaning", "Bogota", date(2025, 1, 15))

        assert rate is None
        assert isinstance(error, PricingRuleLookupError)
        assert error.service_category == "cleaning"
        assert error.city == "Bogota"
        assert isinstance(error.cause, OperationalError)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "failure",
        [ConnectionRefusedError("connect failed"), asyncio.TimeoutError()],
    )
    async def test_connection_error_returned(self, failure):
        db = _session(error=failure)
        rate, error = await PricingRuleService(db).lookup("cleaning", "Bogota", date(2025, 1, 15))

        assert rate is None
        assert isinstance(error, PricingRuleLookupError)
        assert error.cause is failure

    @pytest.mark.asyncio
    async def test_unreachable_database_falls_back_to_baseline(self):
        db = _session(error=ConnectionRefusedError("connect failed"))
        service = CommissionService(CommissionConfig())

        payout = await service.calculate_payout_from_bookings_with_dynamic_rates(
            [make_payout_booking("b1", 100000)], PricingRuleService(db).lookup
        )

        assert payout.commission_amount == 15000
        assert payout.net_amount == 85000
        assert payout.applied_commission_rate == Decimal("0.15")

    @pytest.mark.asyncio
    async def test_parameters(self):
        db = _session(row=None)
        await PricingRuleService(db).lookup("", "Cali", date(2025, 1, 15))

        params = db.execute.await_args.args[1]
        assert params == {
            "p_service_category": None,
            "p_city": "Cali",
            "p_effective_date": date(2025, 1, 15),
        }
        db.begin_nested.assert_called_once()
