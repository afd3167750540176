"""Commission and payout calculation service.

CRITICAL BUSINESS LOGIC:
- The platform keeps a percentage of every captured booking amount
- Rates are set per country (15% marketplace in every current market)
- Admins can override the rate per service category and city with
  pricing rules that take effect on a given date
- All amounts are integers in minor currency units; only the commission
  is rounded (half up), and net = gross - commission exactly
- A payout batch must be in a single currency
"""

import logging
from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from types import MappingProxyType

from app.config import settings
from app.core.exceptions import MixedCurrencyError, PricingRuleLookupError, ValidationError
from app.schemas.payout import BookingForPayout, PayoutCalculation
from app.utils.time_utils import to_utc_datetime

logger = logging.getLogger(__name__)


class CommissionType(str, Enum):
    """Kinds of engagement the platform takes a commission on."""

    MARKETPLACE = "marketplace"
    DIRECT_HIRE = "direct_hire"


@dataclass(frozen=True)
class CountryPricing:
    """Commission rates for one market."""

    currency: str
    marketplace_rate: Decimal
    direct_hire_rate: Decimal


COUNTRY_PRICING: Mapping[str, CountryPricing] = MappingProxyType(
    {
        "CO": CountryPricing("COP", Decimal("0.15"), Decimal("0.20")),  # Launch market
        "PY": CountryPricing("PYG", Decimal("0.15"), Decimal("0.20")),
        "UY": CountryPricing("UYU", Decimal("0.15"), Decimal("0.20")),
        "AR": CountryPricing("ARS", Decimal("0.15"), Decimal("0.20")),
    }
)

# Legacy USD/EUR bookings were all Colombian
CURRENCY_COUNTRY: Mapping[str, str] = MappingProxyType(
    {
        "COP": "CO",
        "PYG": "PY",
        "UYU": "UY",
        "ARS": "AR",
        "USD": "CO",
        "EUR": "CO",
    }
)

# (rate, error) - rate is None when no rule applies or the lookup failed
RateLookupResult = tuple[Decimal | None, PricingRuleLookupError | None]
RateLookup = Callable[[str | None, str | None, date], Awaitable[RateLookupResult]]


@dataclass(frozen=True)
class CommissionConfig:
    """Fallback values and rate tables for the calculators.

    Passed explicitly so callers and tests can swap tables without touching
    module state.
    """

    default_currency: str = "COP"
    default_country: str = "CO"
    default_rate: Decimal = Decimal("0.15")
    country_pricing: Mapping[str, CountryPricing] = field(default_factory=lambda: COUNTRY_PRICING)
    currency_country: Mapping[str, str] = field(default_factory=lambda: CURRENCY_COUNTRY)

    @classmethod
    def from_settings(cls) -> "CommissionConfig":
        return cls(
            default_currency=settings.default_currency,
            default_country=settings.default_country,
            default_rate=Decimal(str(settings.default_commission_rate)),
        )


def round_amount(value: Decimal) -> int:
    """Round to whole minor units, half up."""
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class CommissionService:
    """Service for calculating commissions and professional payouts."""

    def __init__(self, config: CommissionConfig | None = None) -> None:
        self.config = config or CommissionConfig.from_settings()

    def get_country_rate(
        self,
        country: str,
        commission_type: CommissionType = CommissionType.MARKETPLACE,
    ) -> Decimal:
        """Get the baseline commission rate for a country.

        Raises:
            ValidationError: If the country has no pricing configuration
        """
        pricing = self.config.country_pricing.get(country.upper())
        if pricing is None:
            raise ValidationError(f"No pricing configuration found for country: {country}")
        if commission_type == CommissionType.DIRECT_HIRE:
            return pricing.direct_hire_rate
        return pricing.marketplace_rate

    def resolve_country(self, booking: BookingForPayout) -> str:
        """Country for a booking: explicit country, else derived from currency."""
        if booking.country:
            return booking.country.upper()
        return self.config.currency_country.get(booking.currency.upper(), self.config.default_country)

    def calculate_commission(
        self,
        gross_amount: int,
        country: str | None = None,
        commission_rate: Decimal | None = None,
    ) -> tuple[int, int]:
        """Calculate commission and net payout from a gross amount.

        An explicit rate wins, then the country rate, then the default rate.

        Args:
            gross_amount: Amount before commission
            country: Optional ISO country code
            commission_rate: Optional rate override

        Returns:
            Tuple of (commission_amount, net_amount)
        """
        if commission_rate is not None:
            rate = Decimal(commission_rate)
        elif country:
            rate = self.get_country_rate(country)
        else:
            rate = self.config.default_rate

        commission_amount = round_amount(Decimal(gross_amount) * rate)
        return commission_amount, gross_amount - commission_amount

    def _batch_currency(self, bookings: Sequence[BookingForPayout]) -> str:
        """Single currency shared by every booking in the batch.

        Raises:
            MixedCurrencyError: If bookings disagree on currency
        """
        currencies = {booking.currency.upper() for booking in bookings}
        if len(currencies) > 1:
            raise MixedCurrencyError(currencies)
        return currencies.pop()

    def _empty_payout(self, applied_rate: Decimal | None) -> PayoutCalculation:
        return PayoutCalculation(
            gross_amount=0,
            commission_amount=0,
            net_amount=0,
            currency=self.config.default_currency,
            booking_ids=[],
            booking_count=0,
            applied_commission_rate=applied_rate,
        )

    def calculate_payout_from_bookings(
        self,
        bookings: Sequence[BookingForPayout],
    ) -> PayoutCalculation:
        """Calculate payout totals at the flat country rate.

        The country comes from the first booking (its country, else its
        currency). Commission is taken once on the summed gross amount.
        """
        if not bookings:
            return self._empty_payout(self.config.default_rate)

        currency = self._batch_currency(bookings)
        country = self.resolve_country(bookings[0])
        rate = self.get_country_rate(country)

        gross_amount = sum(booking.amount_captured for booking in bookings)
        commission_amount, net_amount = self.calculate_commission(gross_amount, commission_rate=rate)

        return PayoutCalculation(
            gross_amount=gross_amount,
            commission_amount=commission_amount,
            net_amount=net_amount,
            currency=currency,
            booking_ids=[booking.id for booking in bookings],
            booking_count=len(bookings),
            applied_commission_rate=rate,
        )

    async def calculate_payout_from_bookings_with_dynamic_rates(
        self,
        bookings: Sequence[BookingForPayout],
        lookup: RateLookup,
    ) -> PayoutCalculation:
        """Calculate payout totals with a pricing-rule rate per booking.

        Each booking is looked up in turn by (service category, city,
        completion date). Without a rule, or when the lookup fails, the
        batch country's baseline rate applies. Commission is rounded per
        booking and then summed.

        Args:
            bookings: Completed bookings in one currency
            lookup: Async pricing-rule lookup returning (rate, error)

        Returns:
            PayoutCalculation: Totals; ``applied_commission_rate`` is set only
            when every booking used the same rate
        """
        if not bookings:
            return self._empty_payout(None)

        currency = self._batch_currency(bookings)
        baseline_rate = self.get_country_rate(self.resolve_country(bookings[0]))

        gross_amount = 0
        total_commission = 0
        rates_used: set[Decimal] = set()

        for booking in bookings:
            effective_date = (
                to_utc_datetime(booking.completed_at).date()
                if booking.completed_at
                else datetime.now(UTC).date()
            )
            rate, error = await lookup(booking.service_category, booking.city, effective_date)

            if error is not None:
                logger.warning(f"{error}; using baseline rate {baseline_rate} for booking {booking.id}")
            elif rate is None:
                logger.debug(f"No pricing rule for booking {booking.id}, using baseline rate")

            applied = rate if rate is not None else baseline_rate
            commission_amount, _ = self.calculate_commission(
                booking.amount_captured, commission_rate=applied
            )

            gross_amount += booking.amount_captured
            total_commission += commission_amount
            rates_used.add(applied)

        return PayoutCalculation(
            gross_amount=gross_amount,
            commission_amount=total_commission,
            net_amount=gross_amount - total_commission,
            currency=currency,
            booking_ids=[booking.id for booking in bookings],
            booking_count=len(bookings),
            applied_commission_rate=rates_used.pop() if len(rates_used) == 1 else None,
        )


commission_service = CommissionService()
