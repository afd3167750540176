"""Tests for commission and payout calculation."""

import logging
from datetime import date, datetime
from decimal import Decimal

import pytest

from app.core.exceptions import MixedCurrencyError, ValidationError
from app.services.commission_service import (
    CommissionConfig,
    CommissionService,
    CommissionType,
    CountryPricing,
)
from tests.conftest import FakeRateLookup, make_payout_booking

SCENARIO_AMOUNTS = [150000, 200000, 120000, 180000]


def _scenario_bookings(**kwargs):
    return [
        make_payout_booking(f"booking-{i}", amount, **kwargs)
        for i, amount in enumerate(SCENARIO_AMOUNTS, start=1)
    ]


class TestCountryRates:
    def test_marketplace_rate(self, service):
        assert service.get_country_rate("CO") == Decimal("0.15")

    def test_direct_hire_rate(self, service):
        assert service.get_country_rate("py", CommissionType.DIRECT_HIRE) == Decimal("0.20")

    def test_unknown_country(self, service):
        with pytest.raises(ValidationError, match="No pricing configuration found for country: XX"):
            service.get_country_rate("XX")

    def test_country_wins_over_currency(self, service):
        booking = make_payout_booking("b1", 1000, currency="COP", country="uy")
        assert service.resolve_country(booking) == "UY"

    @pytest.mark.parametrize(
        "currency,country",
        [("ARS", "AR"), ("PYG", "PY"), ("USD", "CO"), ("EUR", "CO"), ("GBP", "CO")],
    )
    def test_country_from_currency(self, service, currency, country):
        booking = make_payout_booking("b1", 1000, currency=currency, country=None)
        assert service.resolve_country(booking) == country


class TestCalculateCommission:
    def test_country_rate(self, service):
        assert service.calculate_commission(100000, country="CO") == (15000, 85000)

    def test_explicit_rate_wins(self, service):
        assert service.calculate_commission(100000, country="CO", commission_rate=Decimal("0.20")) == (
            20000,
            80000,
        )

    def test_default_rate(self, service):
        assert service.calculate_commission(100000) == (15000, 85000)

    def test_commission_rounds_half_up(self, service):
        # 10 * 0.15 = 1.5
        assert service.calculate_commission(10) == (2, 8)

    def test_net_is_exact_remainder(self, service):
        commission, net = service.calculate_commission(333)
        assert commission == 50
        assert commission + net == 333


class TestFlatPayout:
    def test_concrete_scenario(self, service):
        payout = service.calculate_payout_from_bookings(_scenario_bookings())

        assert payout.gross_amount == 650000
        assert payout.commission_amount == 97500
        assert payout.net_amount == 552500
        assert payout.currency == "COP"
        assert payout.booking_count == 4
        assert payout.booking_ids == ["booking-1", "booking-2", "booking-3", "booking-4"]
        assert payout.applied_commission_rate == Decimal("0.15")

    def test_rate_dumped_as_number_in_json(self, service):
        payout = service.calculate_payout_from_bookings(_scenario_bookings())

        assert payout.model_dump()["applied_commission_rate"] == Decimal("0.15")
        assert payout.model_dump(mode="json")["applied_commission_rate"] == 0.15
        assert '"applied_commission_rate":0.15' in payout.model_dump_json()

    def test_net_plus_commission_equals_gross(self, service):
        bookings = [make_payout_booking(f"b{i}", amount) for i, amount in enumerate([1, 7, 333, 99999])]
        payout = service.calculate_payout_from_bookings(bookings)
        assert payout.net_amount + payout.commission_amount == payout.gross_amount

    def test_empty_batch(self, service):
        payout = service.calculate_payout_from_bookings([])

        assert payout.gross_amount == 0
        assert payout.commission_amount == 0
        assert payout.net_amount == 0
        assert payout.currency == "COP"
        assert payout.booking_ids == []
        assert payout.booking_count == 0

    def test_empty_batch_uses_configured_currency(self):
        service = CommissionService(CommissionConfig(default_currency="PYG", default_country="PY"))
        assert service.calculate_payout_from_bookings([]).currency == "PYG"

    def test_country_from_currency(self, service):
        bookings = [make_payout_booking("b1", 100000, currency="ARS", country=None)]
        payout = service.calculate_payout_from_bookings(bookings)
        assert payout.currency == "ARS"
        assert payout.commission_amount == 15000

    def test_mixed_currency_rejected(self, service):
        bookings = [
            make_payout_booking("b1", 1000, currency="COP"),
            make_payout_booking("b2", 1000, currency="USD"),
        ]
        with pytest.raises(MixedCurrencyError) as exc_info:
            service.calculate_payout_from_bookings(bookings)
        assert exc_info.value.status_code == 422
        assert exc_info.value.detail == "Payout batch mixes currencies: COP, USD"

    def test_injected_rate_table(self):
        config = CommissionConfig(
            country_pricing={"CO": CountryPricing("COP", Decimal("0.10"), Decimal("0.20"))}
        )
        payout = CommissionService(config).calculate_payout_from_bookings(_scenario_bookings())
        assert payout.commission_amount == 65000
        assert payout.net_amount == 585000


class TestDynamicPayout:
    @pytest.mark.asyncio
    async def test_no_rules_matches_flat_rate(self, service, no_rules_lookup):
        payout = await service.calculate_payout_from_bookings_with_dynamic_rates(
            _scenario_bookings(), no_rules_lookup
        )

        assert payout.gross_amount == 650000
        assert payout.commission_amount == 97500
        assert payout.net_amount == 552500
        assert payout.applied_commission_rate == Decimal("0.15")
        assert len(no_rules_lookup.calls) == 4

    @pytest.mark.asyncio
    async def test_rule_overrides_baseline(self, service):
        lookup = FakeRateLookup(rates={"cleaning": Decimal("0.10")})
        payout = await service.calculate_payout_from_bookings_with_dynamic_rates(
            _scenario_bookings(), lookup
        )

        assert payout.commission_amount == 65000
        assert payout.net_amount == 585000
        assert payout.applied_commission_rate == Decimal("0.10")

    @pytest.mark.asyncio
    async def test_zero_rate_is_honored(self, service):
        lookup = FakeRateLookup(rates={"cleaning": Decimal("0")})
        payout = await service.calculate_payout_from_bookings_with_dynamic_rates(
            _scenario_bookings(), lookup
        )

        assert payout.commission_amount == 0
        assert payout.net_amount == payout.gross_amount
        assert payout.applied_commission_rate == Decimal("0")

    @pytest.mark.asyncio
    async def test_mixed_rates_report_no_single_rate(self, service):
        lookup = FakeRateLookup(rates={"plumbing": Decimal("0.20")})
        bookings = [
            make_payout_booking("b1", 100000, service_category="cleaning"),
            make_payout_booking("b2", 100000, service_category="plumbing"),
        ]
        payout = await service.calculate_payout_from_bookings_with_dynamic_rates(bookings, lookup)

        assert payout.commission_amount == 15000 + 20000
        assert payout.net_amount == 165000
        assert payout.applied_commission_rate is None

    @pytest.mark.asyncio
    async def test_commission_rounded_per_booking(self, service):
        lookup = FakeRateLookup(rates={"cleaning": Decimal("0.10")})
        bookings = [make_payout_booking("b1", 5), make_payout_booking("b2", 5)]
        payout = await service.calculate_payout_from_bookings_with_dynamic_rates(bookings, lookup)

        # 0.5 rounds up on each booking
        assert payout.commission_amount == 2
        assert payout.net_amount == 8

    @pytest.mark.asyncio
    async def test_lookup_error_falls_back_and_logs(self, service, caplog):
        lookup = FakeRateLookup(rates={"plumbing": Decimal("0.20")}, failing={"cleaning"})
        bookings = [
            make_payout_booking("b1", 100000, service_category="cleaning"),
            make_payout_booking("b2", 100000, service_category="plumbing"),
        ]

        with caplog.at_level(logging.WARNING, logger="app.services.commission_service"):
            payout = await service.calculate_payout_from_bookings_with_dynamic_rates(bookings, lookup)

        assert payout.commission_amount == 15000 + 20000
        assert "Pricing rule lookup failed" in caplog.text
        assert "b1" in caplog.text

    @pytest.mark.asyncio
    async def test_lookup_keys(self, service, no_rules_lookup):
        booking = make_payout_booking(
            "b1",
            1000,
            service_category="gardening",
            city="Medellin",
            completed_at=datetime(2025, 2, 3, 22, 30),
        )
        await service.calculate_payout_from_bookings_with_dynamic_rates([booking], no_rules_lookup)

        assert no_rules_lookup.calls == [("gardening", "Medellin", date(2025, 2, 3))]

    @pytest.mark.asyncio
    async def test_empty_batch(self, service, no_rules_lookup):
        payout = await service.calculate_payout_from_bookings_with_dynamic_rates([], no_rules_lookup)

        assert payout.gross_amount == 0
        assert payout.currency == "COP"
        assert payout.applied_commission_rate is None
        assert no_rules_lookup.calls == []

    @pytest.mark.asyncio
    async def test_mixed_currency_rejected_before_lookup(self, service, no_rules_lookup):
        bookings = [
            make_payout_booking("b1", 1000, currency="COP"),
            make_payout_booking("b2", 1000, currency="ARS", country="AR"),
        ]
        with pytest.raises(MixedCurrencyError):
            await service.calculate_payout_from_bookings_with_dynamic_rates(bookings, no_rules_lookup)
        assert no_rules_lookup.calls == []
