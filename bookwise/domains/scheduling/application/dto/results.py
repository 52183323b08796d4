"""
Result DTOs returned by the scheduling application services.
"""

from dataclasses import dataclass, field
from typing import Any

from bookwise.domains.scheduling.domain.entities import Booking, TimeOff, WorkingHours


@dataclass
class BookingPage:
    items: list[Booking] = field(default_factory=list)
    total: int = 0
    page: int = 1
    page_size: int = 20

    @property
    def total_pages(self) -> int:
        if self.page_size <= 0:
            return 0
        return (self.total + self.page_size - 1) // self.page_size


@dataclass
class BulkUpdateResult:
    updated: int


@dataclass
class SelfServeLink:
    token: str
    link: str


@dataclass
class WaitlistMetrics:
    """Waitlist activity over a rolling window."""

    window_days: int
    total_joined: int = 0
    offered: int = 0
    claimed: int = 0
    avg_time_to_fill_minutes: float | None = None
    fill_rate: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "window_days": self.window_days,
            "total_joined": self.total_joined,
            "offered": self.offered,
            "claimed": self.claimed,
            "avg_time_to_fill_minutes": self.avg_time_to_fill_minutes,
            "fill_rate": self.fill_rate,
        }


@dataclass
class StaffCalendarContext:
    """Weekly hours and time off of one staff member for a calendar view."""

    working_hours: list[WorkingHours] = field(default_factory=list)
    time_off: list[TimeOff] = field(default_factory=list)


@dataclass
class SeriesCancelResult:
    cancelled: int
