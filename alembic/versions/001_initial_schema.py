"""Initial database schema.

Revision ID: 001_initial
Revises: None
Create Date: 2025-01-14

Creates the tables behind the booking policy calculators:
- Bookings
- Professional availability
- Commission pricing rules (plus the get_pricing_rule lookup function)
"""

from typing import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers
revision: str = "001_initial"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


GET_PRICING_RULE_FUNCTION = """
CREATE OR REPLACE FUNCTION get_pricing_rule(
    p_service_category VARCHAR,
    p_city VARCHAR,
    p_effective_date DATE
)
RETURNS TABLE (id UUID, commission_rate NUMERIC)
LANGUAGE sql STABLE AS $$
    SELECT pr.id, pr.commission_rate
    FROM pricing_rules pr
    WHERE pr.is_active
      AND pr.effective_from <= p_effective_date
      AND (pr.effective_until IS NULL OR pr.effective_until >= p_effective_date)
      AND (pr.service_category IS NULL OR pr.service_category = p_service_category)
      AND (pr.city IS NULL OR pr.city = p_city)
    ORDER BY
        (pr.service_category IS NOT NULL) DESC,
        (pr.city IS NOT NULL) DESC,
        pr.effective_from DESC
    LIMIT 1
$$;
"""


def upgrade() -> None:
    """Create all database tables."""

    # ==================== BOOKINGS ====================
    op.create_table(
        "bookings",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("professional_id", postgresql.UUID(as_uuid=True), nullable=False, index=True),
        sa.Column("customer_id", postgresql.UUID(as_uuid=True), nullable=False, index=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending_payment", index=True),
        sa.Column("scheduled_start", sa.DateTime(timezone=True), nullable=False, index=True),
        sa.Column("scheduled_end", sa.DateTime(timezone=True), nullable=False),
        sa.Column("amount_authorized", sa.Integer, nullable=False, server_default="0"),
        sa.Column("amount_captured", sa.Integer, nullable=False, server_default="0"),
        sa.Column("currency", sa.String(3), nullable=False, server_default="COP"),
        sa.Column("service_category", sa.String(50)),
        sa.Column("city", sa.String(100)),
        sa.Column("country_code", sa.String(2)),
        sa.Column("cancellation_reason", sa.Text),
        sa.Column("refund_amount", sa.Integer, nullable=False, server_default="0"),
        sa.Column("completed_at", sa.DateTime(timezone=True)),
        sa.Column("checked_out_at", sa.DateTime(timezone=True)),
        sa.Column("canceled_at", sa.DateTime(timezone=True)),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), onupdate=sa.func.now()),
        sa.CheckConstraint("scheduled_end >= scheduled_start", name="ck_bookings_schedule_order"),
    )

    # ==================== AVAILABILITY ====================
    op.create_table(
        "professional_availability",
        sa.Column("professional_id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("working_hours", postgresql.JSONB, nullable=False, server_default="{}"),
        sa.Column("buffer_time_minutes", sa.Integer, nullable=False, server_default="0"),
        sa.Column("max_bookings_per_day", sa.Integer),
        sa.Column("advance_booking_days", sa.Integer, nullable=False, server_default="30"),
        sa.Column("blocked_dates", postgresql.ARRAY(sa.Date), nullable=False, server_default="{}"),
        sa.Column("timezone", sa.String(64), nullable=False, server_default="America/Bogota"),
        sa.Column("instant_booking_enabled", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("min_notice_hours", sa.Numeric(5, 2), nullable=False, server_default="24"),
        sa.Column("max_booking_duration_hours", sa.Numeric(5, 2), nullable=False, server_default="8"),
        sa.Column("auto_accept_recurring", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("only_verified_customers", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), onupdate=sa.func.now()),
    )

    # ==================== PRICING RULES ====================
    op.create_table(
        "pricing_rules",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("service_category", sa.String(50), index=True),
        sa.Column("city", sa.String(100), index=True),
        sa.Column("commission_rate", sa.Numeric(5, 4), nullable=False),
        sa.Column("effective_from", sa.Date, nullable=False),
        sa.Column("effective_until", sa.Date),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("notes", sa.Text),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint(
            "commission_rate >= 0 AND commission_rate <= 1",
            name="ck_pricing_rules_rate_range",
        ),
    )

    op.execute(GET_PRICING_RULE_FUNCTION)


def downgrade() -> None:
    """Drop all database objects in reverse order."""
    op.execute("DROP FUNCTION IF EXISTS get_pricing_rule(VARCHAR, VARCHAR, DATE)")
    op.drop_table("pricing_rules")
    op.drop_table("professional_availability")
    op.drop_table("bookings")
