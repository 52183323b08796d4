"""
Booking Entity

The canonical booking record. Bookings are never deleted: cancellation is a
status. Audit trails are kept in ``custom_fields`` (see value_objects.audit_log).
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any

from bookwise.core.domain import AggregateRoot, InvalidOperationException, ValidationException

from ..value_objects import AuditEntry, BookingStatus, TimeRange, append_log_entry
from .catalog import Customer, Service, Staff


@dataclass
class Booking(AggregateRoot[str]):
    """
    Booking aggregate root.

    Example:
        ```python
        booking = Booking.schedule(
            tenant_id="t1",
            customer_id="c1",
            service=service,
            staff_id="s1",
            start_time=datetime(2026, 3, 2, 10, 0, tzinfo=UTC),
        )
        booking.change_status(BookingStatus.COMPLETED)
        ```
    """

    tenant_id: str = ""
    customer_id: str = ""
    service_id: str = ""
    staff_id: str | None = None
    recurring_series_id: str | None = None

    start_time: datetime | None = None
    end_time: datetime | None = None
    status: BookingStatus = BookingStatus.CONFIRMED

    notes: str | None = None
    custom_fields: dict[str, Any] = field(default_factory=dict)

    # Resolved references, loaded by the repository for notifications
    customer: Customer | None = field(default=None, compare=False, repr=False)
    service: Service | None = field(default=None, compare=False, repr=False)
    staff: Staff | None = field(default=None, compare=False, repr=False)

    @classmethod
    def schedule(
        cls,
        tenant_id: str,
        customer_id: str,
        service: Service,
        start_time: datetime,
        staff_id: str | None = None,
        notes: str | None = None,
        custom_fields: dict[str, Any] | None = None,
    ) -> "Booking":
        """New booking; initial status depends on whether the service takes a deposit."""
        return cls(
            tenant_id=tenant_id,
            customer_id=customer_id,
            service_id=service.id or "",
            staff_id=staff_id,
            start_time=start_time,
            end_time=start_time + timedelta(minutes=service.duration_minutes),
            status=BookingStatus.PENDING_DEPOSIT if service.deposit_required else BookingStatus.CONFIRMED,
            notes=notes,
            custom_fields=dict(custom_fields or {}),
            service=service,
        )

    @property
    def time_range(self) -> TimeRange | None:
        if self.start_time is None or self.end_time is None:
            return None
        return TimeRange(self.start_time, self.end_time)

    @property
    def is_blocking(self) -> bool:
        return self.status.is_blocking()

    def hours_until_start(self, now: datetime) -> float | None:
        if self.start_time is None:
            return None
        return (self.start_time - now).total_seconds() / 3600

    def ensure_can_change_to(self, new_status: BookingStatus) -> None:
        """Terminal bookings are frozen, including a repeat of their own status."""
        if self.status.is_terminal():
            raise InvalidOperationException(
                operation=f"change status to {new_status.value}",
                current_state=self.status.value,
            )

    def change_status(self, new_status: BookingStatus) -> BookingStatus:
        """Move to ``new_status`` and return the previous one."""
        self.ensure_can_change_to(new_status)
        previous = self.status
        self.status = new_status
        self.touch()
        return previous

    def reschedule(self, start_time: datetime, duration_minutes: int) -> None:
        if self.status.is_terminal():
            raise InvalidOperationException(operation="reschedule", current_state=self.status.value)
        if duration_minutes <= 0:
            raise ValidationException("Service duration must be positive", field="duration_minutes")
        self.start_time = start_time
        self.end_time = start_time + timedelta(minutes=duration_minutes)
        self.touch()

    def record(self, entry: AuditEntry) -> None:
        """Append an audit entry to the log it belongs to."""
        self.custom_fields = append_log_entry(self.custom_fields, entry)
        self.touch()

    def to_summary_dict(self) -> dict[str, Any]:
        """Customer-facing summary (self-serve pages)."""
        return {
            "id": self.id,
            "status": self.status.value,
            "start_time": self.start_time.isoformat() if self.start_time else None,
            "end_time": self.end_time.isoformat() if self.end_time else None,
            "service_name": self.service.name if self.service else None,
            "staff_name": self.staff.name if self.staff else None,
            "customer_name": self.customer.name if self.customer else None,
        }
