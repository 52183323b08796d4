"""staff_schedules_and_series

Revision ID: 002_staff_schedules_and_series
Revises: 001_scheduling_schema
Create Date: 2026-03-15

- One working_hours row per staff member and weekday (upsert target)
- recurring_series table and bookings.recurring_series_id
"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "002_staff_schedules_and_series"
down_revision: Union[str, Sequence[str], None] = "001_scheduling_schema"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_unique_constraint("uq_working_hours_staff_day", "working_hours", ["staff_id", "day_of_week"])

    op.create_table(
        "recurring_series",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("tenant_id", sa.String(36), sa.ForeignKey("tenants.id"), nullable=False),
        sa.Column("customer_id", sa.String(36), sa.ForeignKey("customers.id"), nullable=False),
        sa.Column("service_id", sa.String(36), sa.ForeignKey("services.id"), nullable=False),
        sa.Column("staff_id", sa.String(36), sa.ForeignKey("staff.id"), nullable=True),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("time_of_day", sa.Time(), nullable=False),
        sa.Column("days_of_week", sa.JSON(), nullable=False),
        sa.Column("interval_weeks", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("total_count", sa.Integer(), nullable=False),
        sa.Column("ends_on", sa.Date(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
    )
    op.create_index("ix_recurring_series_tenant_id", "recurring_series", ["tenant_id"])

    op.add_column(
        "bookings",
        sa.Column("recurring_series_id", sa.String(36), sa.ForeignKey("recurring_series.id"), nullable=True),
    )
    op.create_index("ix_bookings_recurring_series_id", "bookings", ["recurring_series_id"])


def downgrade() -> None:
    op.drop_index("ix_bookings_recurring_series_id", table_name="bookings")
    op.drop_column("bookings", "recurring_series_id")
    op.drop_index("ix_recurring_series_tenant_id", table_name="recurring_series")
    op.drop_table("recurring_series")
    op.drop_constraint("uq_working_hours_staff_day", "working_hours", type_="unique")
