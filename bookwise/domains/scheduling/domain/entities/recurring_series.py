"""
Recurring Series Entity

A weekly repeating appointment. The series owns the rule it was created
with; each occurrence is an ordinary booking carrying the series id.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, time

from bookwise.core.domain import AggregateRoot

from ..value_objects import BookingStatus, RecurrenceRule, SeriesCancelScope
from .booking import Booking


@dataclass
class RecurringSeries(AggregateRoot[str]):
    tenant_id: str = ""
    customer_id: str = ""
    service_id: str = ""
    staff_id: str | None = None

    start_date: date | None = None
    time_of_day: time = time(9, 0)
    days_of_week: list[int] = field(default_factory=list)
    interval_weeks: int = 1
    total_count: int = 0
    ends_on: date | None = None
    notes: str | None = None

    # Occurrences, loaded by the service for responses and cancellation
    bookings: list[Booking] = field(default_factory=list, compare=False, repr=False)

    @classmethod
    def from_rule(
        cls,
        tenant_id: str,
        customer_id: str,
        service_id: str,
        start_date: date,
        rule: RecurrenceRule,
        occurrences: int,
        staff_id: str | None = None,
        notes: str | None = None,
    ) -> "RecurringSeries":
        return cls(
            tenant_id=tenant_id,
            customer_id=customer_id,
            service_id=service_id,
            staff_id=staff_id,
            start_date=start_date,
            time_of_day=rule.time_of_day,
            days_of_week=sorted(set(rule.days_of_week)),
            interval_weeks=rule.interval_weeks,
            total_count=occurrences,
            ends_on=rule.ends_on,
            notes=notes,
        )

    def bookings_to_cancel(self, scope: SeriesCancelScope, anchor: Booking | None = None) -> list[Booking]:
        """
        Occurrences a cancellation with ``scope`` reaches, skipping ones that
        no longer block the calendar.

        ``anchor`` is the chosen occurrence for SINGLE and FUTURE.
        """
        if scope == SeriesCancelScope.ALL:
            selected = self.bookings
        elif anchor is None:
            selected = []
        elif scope == SeriesCancelScope.SINGLE:
            selected = [b for b in self.bookings if b.id == anchor.id]
        else:
            anchor_start = anchor.start_time or datetime.min
            selected = [b for b in self.bookings if b.start_time is not None and b.start_time >= anchor_start]
        return [b for b in selected if b.status in BookingStatus.blocking()]

    def find_booking(self, booking_id: str) -> Booking | None:
        return next((b for b in self.bookings if b.id == booking_id), None)
