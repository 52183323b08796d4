"""
Request DTOs for the scheduling application services.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Any

from bookwise.domains.scheduling.domain.value_objects import BookingStatus, StaffRole


@dataclass
class Actor:
    """
    Staff member behind a status change.

    Absent (None) for customer self-serve and system-initiated changes.
    """

    role: StaffRole | None = None
    reason: str | None = None
    staff_id: str | None = None
    staff_name: str | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == StaffRole.ADMIN

    @property
    def has_reason(self) -> bool:
        return bool(self.reason and self.reason.strip())


@dataclass
class CreateBookingRequest:
    customer_id: str
    service_id: str
    start_time: datetime
    staff_id: str | None = None
    notes: str | None = None
    custom_fields: dict[str, Any] = field(default_factory=dict)


@dataclass
class UpdateBookingRequest:
    """Partial update; None means unchanged."""

    start_time: datetime | None = None
    staff_id: str | None = None
    notes: str | None = None
    custom_fields: dict[str, Any] | None = None


@dataclass
class BulkUpdatePayload:
    status: BookingStatus | None = None
    staff_id: str | None = None


@dataclass
class JoinWaitlistRequest:
    customer_id: str
    service_id: str
    staff_id: str | None = None
    notes: str | None = None


@dataclass
class CreateSeriesRequest:
    """
    Weekly recurring booking.

    ``time_of_day`` is wall-clock time in the tenant's timezone and
    ``days_of_week`` uses 0=Monday .. 6=Sunday, as working hours do.
    """

    customer_id: str
    service_id: str
    start_date: date
    time_of_day: time
    days_of_week: list[int]
    interval_weeks: int = 1
    total_count: int | None = None
    ends_on: date | None = None
    staff_id: str | None = None
    notes: str | None = None
