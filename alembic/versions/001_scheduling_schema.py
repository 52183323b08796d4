"""scheduling_schema

Revision ID: 001_scheduling_schema
Revises: None
Create Date: 2026-03-01

Initial schema for the scheduling service:
- tenants (with JSON settings overrides)
- customers, services, staff, working_hours, time_off
- bookings, reminders
- waitlist_entries, self_serve_tokens
"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001_scheduling_schema"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

BOOKING_STATUS = sa.Enum(
    "PENDING",
    "PENDING_DEPOSIT",
    "CONFIRMED",
    "IN_PROGRESS",
    "COMPLETED",
    "CANCELLED",
    "NO_SHOW",
    name="bookingstatus",
)
SERVICE_KIND = sa.Enum("CONSULT", "TREATMENT", "OTHER", name="servicekind")
STAFF_ROLE = sa.Enum("ADMIN", "SERVICE_PROVIDER", "STAFF", name="staffrole")
REMINDER_TYPE = sa.Enum(
    "REMINDER",
    "FOLLOW_UP",
    "CONSULT_FOLLOW_UP",
    "AFTERCARE",
    "TREATMENT_CHECK_IN",
    name="remindertype",
)
REMINDER_STATUS = sa.Enum("PENDING", "SENT", "CANCELLED", "FAILED", name="reminderstatus")
WAITLIST_STATUS = sa.Enum("ACTIVE", "OFFERED", "BOOKED", "CANCELLED", "EXPIRED", name="waitliststatus")
TOKEN_TYPE = sa.Enum("RESCHEDULE_LINK", "CANCEL_LINK", "WAITLIST_CLAIM", name="tokentype")


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
    ]


def upgrade() -> None:
    """Create all scheduling tables."""

    # ==========================================================================
    # 1. Tenants and catalog
    # ==========================================================================
    op.create_table(
        "tenants",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("slug", sa.String(100), nullable=False),
        sa.Column("timezone", sa.String(64), nullable=False, server_default="UTC"),
        sa.Column("policy_settings", sa.JSON(), nullable=True),
        sa.Column("notification_settings", sa.JSON(), nullable=True),
        sa.Column("waitlist_settings", sa.JSON(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_tenants_slug", "tenants", ["slug"], unique=True)

    op.create_table(
        "customers",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("tenant_id", sa.String(36), sa.ForeignKey("tenants.id"), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("phone", sa.String(32), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_customers_tenant_id", "customers", ["tenant_id"])
    op.create_index("ix_customers_phone", "customers", ["phone"])

    op.create_table(
        "services",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("tenant_id", sa.String(36), sa.ForeignKey("tenants.id"), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("duration_minutes", sa.Integer(), nullable=False, server_default=sa.text("30")),
        sa.Column("price", sa.Numeric(10, 2), nullable=False, server_default=sa.text("0")),
        sa.Column("deposit_required", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("deposit_amount", sa.Numeric(10, 2), nullable=True),
        sa.Column("kind", SERVICE_KIND, nullable=False, server_default="OTHER"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        *_timestamps(),
    )
    op.create_index("ix_services_tenant_id", "services", ["tenant_id"])

    op.create_table(
        "staff",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("tenant_id", sa.String(36), sa.ForeignKey("tenants.id"), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("role", STAFF_ROLE, nullable=False, server_default="SERVICE_PROVIDER"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        *_timestamps(),
    )
    op.create_index("ix_staff_tenant_id", "staff", ["tenant_id"])

    op.create_table(
        "working_hours",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("staff_id", sa.String(36), sa.ForeignKey("staff.id", ondelete="CASCADE"), nullable=False),
        sa.Column("day_of_week", sa.Integer(), nullable=False),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=False),
        sa.Column("is_off", sa.Boolean(), nullable=False, server_default=sa.text("false")),
    )
    op.create_index("ix_working_hours_staff_id", "working_hours", ["staff_id"])

    op.create_table(
        "time_off",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("staff_id", sa.String(36), sa.ForeignKey("staff.id", ondelete="CASCADE"), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("reason", sa.String(255), nullable=True),
    )
    op.create_index("ix_time_off_staff_id", "time_off", ["staff_id"])

    # ==========================================================================
    # 2. Bookings and reminders
    # ==========================================================================
    op.create_table(
        "bookings",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("tenant_id", sa.String(36), sa.ForeignKey("tenants.id"), nullable=False),
        sa.Column("customer_id", sa.String(36), sa.ForeignKey("customers.id"), nullable=False),
        sa.Column("service_id", sa.String(36), sa.ForeignKey("services.id"), nullable=False),
        sa.Column("staff_id", sa.String(36), sa.ForeignKey("staff.id"), nullable=True),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("status", BOOKING_STATUS, nullable=False, server_default="CONFIRMED"),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("custom_fields", sa.JSON(), nullable=False, server_default=sa.text("'{}'")),
        *_timestamps(),
    )
    op.create_index("ix_bookings_customer_id", "bookings", ["customer_id"])
    op.create_index("ix_bookings_tenant_staff_start", "bookings", ["tenant_id", "staff_id", "start_time"])
    op.create_index("ix_bookings_tenant_start", "bookings", ["tenant_id", "start_time"])

    op.create_table(
        "reminders",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("tenant_id", sa.String(36), sa.ForeignKey("tenants.id"), nullable=False),
        sa.Column("booking_id", sa.String(36), sa.ForeignKey("bookings.id"), nullable=False),
        sa.Column("type", REMINDER_TYPE, nullable=False, server_default="REMINDER"),
        sa.Column("scheduled_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("status", REMINDER_STATUS, nullable=False, server_default="PENDING"),
        sa.Column("sent_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_reminders_booking_id", "reminders", ["booking_id"])
    op.create_index("ix_reminders_status_scheduled", "reminders", ["status", "scheduled_at"])

    # ==========================================================================
    # 3. Waitlist and self-serve tokens
    # ==========================================================================
    op.create_table(
        "waitlist_entries",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("tenant_id", sa.String(36), sa.ForeignKey("tenants.id"), nullable=False),
        sa.Column("customer_id", sa.String(36), sa.ForeignKey("customers.id"), nullable=False),
        sa.Column("service_id", sa.String(36), sa.ForeignKey("services.id"), nullable=False),
        sa.Column("staff_id", sa.String(36), sa.ForeignKey("staff.id"), nullable=True),
        sa.Column("status", WAITLIST_STATUS, nullable=False, server_default="ACTIVE"),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("offered_slot", sa.JSON(), nullable=True),
        sa.Column("offered_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("offer_expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("booking_id", sa.String(36), sa.ForeignKey("bookings.id"), nullable=True),
        sa.Column("claimed_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_waitlist_entries_customer_id", "waitlist_entries", ["customer_id"])
    op.create_index("ix_waitlist_tenant_service_status", "waitlist_entries", ["tenant_id", "service_id", "status"])
    op.create_index("ix_waitlist_status_expires", "waitlist_entries", ["status", "offer_expires_at"])

    op.create_table(
        "self_serve_tokens",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("token", sa.String(128), nullable=False),
        sa.Column("type", TOKEN_TYPE, nullable=False),
        sa.Column("contact", sa.String(255), nullable=False),
        sa.Column("tenant_id", sa.String(36), sa.ForeignKey("tenants.id"), nullable=False),
        sa.Column("staff_id", sa.String(36), nullable=True),
        sa.Column("related_id", sa.String(36), nullable=True),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("used_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_self_serve_tokens_token", "self_serve_tokens", ["token"], unique=True)
    op.create_index("ix_self_serve_tokens_related_id", "self_serve_tokens", ["related_id"])


def downgrade() -> None:
    """Drop all scheduling tables and enum types."""
    for table in (
        "self_serve_tokens",
        "waitlist_entries",
        "reminders",
        "bookings",
        "time_off",
        "working_hours",
        "staff",
        "services",
        "customers",
        "tenants",
    ):
        op.drop_table(table)

    bind = op.get_bind()
    for enum in (TOKEN_TYPE, WAITLIST_STATUS, REMINDER_STATUS, REMINDER_TYPE, STAFF_ROLE, SERVICE_KIND, BOOKING_STATUS):
        enum.drop(bind, checkfirst=True)
