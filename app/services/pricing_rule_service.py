"""Pricing rule lookup backed by the ``get_pricing_rule`` SQL function."""

import asyncio
from datetime import date
from decimal import Decimal

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import PricingRuleLookupError
from app.services.commission_service import RateLookupResult

GET_PRICING_RULE_SQL = text(
    "SELECT commission_rate FROM get_pricing_rule(:p_service_category, :p_city, :p_effective_date)"
)


class PricingRuleService:
    """Fetch commission rate overrides for a service category and city."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def lookup(
        self,
        service_category: str | None,
        city: str | None,
        effective_date: date,
    ) -> RateLookupResult:
        """Look up the commission rate in force on ``effective_date``.

        Database errors, dropped connections and timeouts are returned, not
        raised, so the payout calculator decides which rate to fall back to.

        Args:
            service_category: Booking's service category, if any
            city: Booking's city, if any
            effective_date: Date the rate must be in force on

        Returns:
            Tuple of (rate, error); both None when no rule matches
        """
        try:
            # Savepoint keeps the outer transaction usable after a failed call
            async with self.db.begin_nested():
                result = await self.db.execute(
                    GET_PRICING_RULE_SQL,
                    {
                        "p_service_category": service_category or None,
                        "p_city": city or None,
                        "p_effective_date": effective_date,
                    },
                )
                row = result.first()
        except (SQLAlchemyError, OSError, asyncio.TimeoutError) as e:
            return None, PricingRuleLookupError(service_category, city, e)

        if row is None or row[0] is None:
            return None, None

        return Decimal(str(row[0])), None
