"""
Scheduling SQLAlchemy Models

Database models for scheduling domain persistence. Every table carries the
owning tenant's id; ids are UUID strings.
"""

from typing import Any

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Enum as SQLEnum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    Time,
    UniqueConstraint,
    JSON,
)
from sqlalchemy.orm import relationship

from bookwise.core.domain import generate_uuid_str
from bookwise.database.base import Base, TimestampMixin
from bookwise.domains.scheduling.domain.value_objects import (
    BookingStatus,
    ReminderStatus,
    ReminderType,
    ServiceKind,
    StaffRole,
    TokenType,
    WaitlistStatus,
)


class TenantModel(Base, TimestampMixin):
    """A business using the scheduler. Settings columns hold per-tenant overrides."""

    __tablename__ = "tenants"

    id = Column(String(36), primary_key=True, default=generate_uuid_str)
    name = Column(String(255), nullable=False)
    slug = Column(String(100), unique=True, nullable=False, index=True)
    timezone = Column(String(64), nullable=False, default="UTC")

    policy_settings = Column(JSON, nullable=True)
    notification_settings = Column(JSON, nullable=True)
    waitlist_settings = Column(JSON, nullable=True)


class CustomerModel(Base, TimestampMixin):
    __tablename__ = "customers"

    id = Column(String(36), primary_key=True, default=generate_uuid_str)
    tenant_id = Column(String(36), ForeignKey("tenants.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)
    phone = Column(String(32), nullable=True, index=True)

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "email": self.email, "phone": self.phone}


class ServiceModel(Base, TimestampMixin):
    __tablename__ = "services"

    id = Column(String(36), primary_key=True, default=generate_uuid_str)
    tenant_id = Column(String(36), ForeignKey("tenants.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    duration_minutes = Column(Integer, nullable=False, default=30)
    price = Column(Numeric(10, 2), nullable=False, default=0)
    deposit_required = Column(Boolean, nullable=False, default=False)
    deposit_amount = Column(Numeric(10, 2), nullable=True)
    kind = Column(SQLEnum(ServiceKind), nullable=False, default=ServiceKind.OTHER)
    is_active = Column(Boolean, nullable=False, default=True)


class StaffModel(Base, TimestampMixin):
    __tablename__ = "staff"

    id = Column(String(36), primary_key=True, default=generate_uuid_str)
    tenant_id = Column(String(36), ForeignKey("tenants.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)
    role = Column(SQLEnum(StaffRole), nullable=False, default=StaffRole.SERVICE_PROVIDER)
    is_active = Column(Boolean, nullable=False, default=True)

    # Relationships
    working_hours = relationship(
        "WorkingHoursModel",
        back_populates="staff",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    time_off = relationship(
        "TimeOffModel",
        back_populates="staff",
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class WorkingHoursModel(Base):
    """One row per staff member and weekday (0=Monday .. 6=Sunday)."""

    __tablename__ = "working_hours"
    __table_args__ = (UniqueConstraint("staff_id", "day_of_week", name="uq_working_hours_staff_day"),)

    id = Column(String(36), primary_key=True, default=generate_uuid_str)
    staff_id = Column(String(36), ForeignKey("staff.id", ondelete="CASCADE"), nullable=False, index=True)
    day_of_week = Column(Integer, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    is_off = Column(Boolean, nullable=False, default=False)

    staff = relationship("StaffModel", back_populates="working_hours")


class TimeOffModel(Base):
    __tablename__ = "time_off"

    id = Column(String(36), primary_key=True, default=generate_uuid_str)
    staff_id = Column(String(36), ForeignKey("staff.id", ondelete="CASCADE"), nullable=False, index=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    reason = Column(String(255), nullable=True)

    staff = relationship("StaffModel", back_populates="time_off")


class RecurringSeriesModel(Base, TimestampMixin):
    """Rule a set of bookings was generated from. days_of_week: 0=Monday .. 6=Sunday."""

    __tablename__ = "recurring_series"

    id = Column(String(36), primary_key=True, default=generate_uuid_str)
    tenant_id = Column(String(36), ForeignKey("tenants.id"), nullable=False, index=True)
    customer_id = Column(String(36), ForeignKey("customers.id"), nullable=False)
    service_id = Column(String(36), ForeignKey("services.id"), nullable=False)
    staff_id = Column(String(36), ForeignKey("staff.id"), nullable=True)

    start_date = Column(Date, nullable=False)
    time_of_day = Column(Time, nullable=False)
    days_of_week = Column(JSON, nullable=False, default=list)
    interval_weeks = Column(Integer, nullable=False, default=1)
    total_count = Column(Integer, nullable=False)
    ends_on = Column(Date, nullable=True)
    notes = Column(Text, nullable=True)


class BookingModel(Base, TimestampMixin):
    """Canonical booking record. Never deleted; cancellation is a status."""

    __tablename__ = "bookings"
    __table_args__ = (
        Index("ix_bookings_tenant_staff_start", "tenant_id", "staff_id", "start_time"),
        Index("ix_bookings_tenant_start", "tenant_id", "start_time"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid_str)
    tenant_id = Column(String(36), ForeignKey("tenants.id"), nullable=False)
    customer_id = Column(String(36), ForeignKey("customers.id"), nullable=False, index=True)
    service_id = Column(String(36), ForeignKey("services.id"), nullable=False)
    staff_id = Column(String(36), ForeignKey("staff.id"), nullable=True)
    recurring_series_id = Column(String(36), ForeignKey("recurring_series.id"), nullable=True, index=True)

    start_time = Column(DateTime(timezone=True), nullable=False)
    end_time = Column(DateTime(timezone=True), nullable=False)
    status = Column(SQLEnum(BookingStatus), nullable=False, default=BookingStatus.CONFIRMED)

    notes = Column(Text, nullable=True)
    # Audit logs (overrideLog, depositRequestLog, selfServeLog) live here
    custom_fields = Column(JSON, nullable=False, default=dict)

    # Relationships
    customer = relationship("CustomerModel", lazy="selectin")
    service = relationship("ServiceModel", lazy="selectin")
    staff = relationship("StaffModel", lazy="selectin")


class ReminderModel(Base, TimestampMixin):
    __tablename__ = "reminders"
    __table_args__ = (Index("ix_reminders_status_scheduled", "status", "scheduled_at"),)

    id = Column(String(36), primary_key=True, default=generate_uuid_str)
    tenant_id = Column(String(36), ForeignKey("tenants.id"), nullable=False)
    booking_id = Column(String(36), ForeignKey("bookings.id"), nullable=False, index=True)
    type = Column(SQLEnum(ReminderType), nullable=False, default=ReminderType.REMINDER)
    scheduled_at = Column(DateTime(timezone=True), nullable=False)
    status = Column(SQLEnum(ReminderStatus), nullable=False, default=ReminderStatus.PENDING)
    sent_at = Column(DateTime(timezone=True), nullable=True)


class WaitlistEntryModel(Base, TimestampMixin):
    __tablename__ = "waitlist_entries"
    __table_args__ = (
        Index("ix_waitlist_tenant_service_status", "tenant_id", "service_id", "status"),
        Index("ix_waitlist_status_expires", "status", "offer_expires_at"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid_str)
    tenant_id = Column(String(36), ForeignKey("tenants.id"), nullable=False)
    customer_id = Column(String(36), ForeignKey("customers.id"), nullable=False, index=True)
    service_id = Column(String(36), ForeignKey("services.id"), nullable=False)
    staff_id = Column(String(36), ForeignKey("staff.id"), nullable=True)
    status = Column(SQLEnum(WaitlistStatus), nullable=False, default=WaitlistStatus.ACTIVE)
    notes = Column(Text, nullable=True)

    # Immutable snapshot of the offered slot (startTime, serviceName, staffName, staffId)
    offered_slot = Column(JSON, nullable=True)
    offered_at = Column(DateTime(timezone=True), nullable=True)
    offer_expires_at = Column(DateTime(timezone=True), nullable=True)

    booking_id = Column(String(36), ForeignKey("bookings.id"), nullable=True)
    claimed_at = Column(DateTime(timezone=True), nullable=True)


class SelfServeTokenModel(Base, TimestampMixin):
    __tablename__ = "self_serve_tokens"

    id = Column(String(36), primary_key=True, default=generate_uuid_str)
    token = Column(String(128), unique=True, nullable=False, index=True)
    type = Column(SQLEnum(TokenType), nullable=False)
    contact = Column(String(255), nullable=False)
    tenant_id = Column(String(36), ForeignKey("tenants.id"), nullable=False)
    staff_id = Column(String(36), nullable=True)
    # Booking id for reschedule/cancel links, waitlist entry id for claims
    related_id = Column(String(36), nullable=True, index=True)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    used_at = Column(DateTime(timezone=True), nullable=True)
