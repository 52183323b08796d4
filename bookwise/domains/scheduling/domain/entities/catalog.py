"""
Catalog entities: services, staff (with working hours and time off) and customers.

Services and customers are read-only inputs to the scheduling core; staff
schedules (working hours, time off) are maintained by StaffScheduleService.
"""

from dataclasses import dataclass, field
from datetime import date, time
from decimal import Decimal

from bookwise.core.domain import Entity, ValueObject

from ..value_objects import ServiceKind, StaffRole, WallClockWindow


@dataclass
class Service(Entity[str]):
    tenant_id: str = ""
    name: str = ""
    duration_minutes: int = 30
    price: Decimal = Decimal("0")
    deposit_required: bool = False
    deposit_amount: Decimal | None = None
    kind: ServiceKind = ServiceKind.OTHER
    is_active: bool = True


@dataclass(frozen=True)
class WorkingHours(ValueObject):
    """One weekday of a staff member's schedule. day_of_week: 0=Monday .. 6=Sunday."""

    day_of_week: int
    start_time: time
    end_time: time
    is_off: bool = False

    def _validate(self) -> None:
        if not 0 <= self.day_of_week <= 6:
            raise ValueError("day_of_week must be between 0 (Monday) and 6 (Sunday)")

    def window(self) -> WallClockWindow | None:
        """The bookable window, or None when off (or the row is empty)."""
        if self.is_off or self.end_time <= self.start_time:
            return None
        return WallClockWindow(start_time=self.start_time, end_time=self.end_time)


@dataclass(frozen=True)
class TimeOff(ValueObject):
    """Whole days off, both ends inclusive. ``id`` is set once stored."""

    start_date: date
    end_date: date
    reason: str | None = None
    id: str | None = field(default=None, compare=False)

    def _validate(self) -> None:
        if self.end_date < self.start_date:
            raise ValueError("Time off cannot end before it starts")

    def covers(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date

    def overlaps(self, date_from: date, date_to: date) -> bool:
        return self.start_date <= date_to and self.end_date >= date_from


@dataclass
class Staff(Entity[str]):
    tenant_id: str = ""
    name: str = ""
    email: str | None = None
    role: StaffRole = StaffRole.SERVICE_PROVIDER
    is_active: bool = True
    working_hours: list[WorkingHours] = field(default_factory=list)
    time_off: list[TimeOff] = field(default_factory=list)

    def hours_for(self, day: date) -> WorkingHours | None:
        weekday = day.weekday()
        for row in self.working_hours:
            if row.day_of_week == weekday:
                return row
        return None

    def is_on_time_off(self, day: date) -> bool:
        return any(period.covers(day) for period in self.time_off)

    def weekly_hours(self) -> list[WorkingHours]:
        return sorted(self.working_hours, key=lambda row: row.day_of_week)

    def time_off_between(self, date_from: date, date_to: date) -> list[TimeOff]:
        """Time off overlapping [date_from, date_to], earliest first."""
        periods = [period for period in self.time_off if period.overlaps(date_from, date_to)]
        return sorted(periods, key=lambda period: period.start_date)

    def window_for(self, day: date) -> WallClockWindow | None:
        """Working window on ``day``; None when off, unscheduled or on time off."""
        if self.is_on_time_off(day):
            return None
        hours = self.hours_for(day)
        return hours.window() if hours else None


@dataclass
class Customer(Entity[str]):
    tenant_id: str = ""
    name: str = ""
    email: str | None = None
    phone: str | None = None

    @property
    def contact(self) -> str | None:
        """Address used to scope self-serve tokens."""
        return self.email or self.phone
