"""
Time value objects for the scheduling domain.
"""

from dataclasses import dataclass
from datetime import datetime, time, timedelta

from bookwise.core.domain import ValueObject


@dataclass(frozen=True)
class TimeRange(ValueObject):
    """
    Half-open interval [start, end) on the absolute timeline.

    Bookings, external calendar events and candidate slots are all compared
    through this type.
    """

    start: datetime
    end: datetime

    def _validate(self) -> None:
        if self.end <= self.start:
            raise ValueError("TimeRange end must be after start")

    @classmethod
    def from_duration(cls, start: datetime, minutes: int) -> "TimeRange":
        return cls(start=start, end=start + timedelta(minutes=minutes))

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def overlaps(self, other: "TimeRange") -> bool:
        """Two ranges touching at an edge do not overlap."""
        return self.start < other.end and self.end > other.start

    def overlaps_any(self, others: "list[TimeRange]") -> bool:
        return any(self.overlaps(other) for other in others)

    def __str__(self) -> str:
        return f"{self.start.isoformat()} - {self.end.isoformat()}"


@dataclass(frozen=True)
class WallClockWindow(ValueObject):
    """Working-hours window on one day, in the tenant's local wall clock."""

    start_time: time
    end_time: time

    def _validate(self) -> None:
        if self.end_time <= self.start_time:
            raise ValueError("Working window end must be after start")


@dataclass(frozen=True)
class QuietHours(ValueObject):
    """
    Daily window during which no waitlist offers are sent.

    The window may wrap midnight (21:00 -> 09:00). Equal start and end
    means no quiet hours at all.
    """

    start: time = time(21, 0)
    end: time = time(9, 0)

    @classmethod
    def parse(cls, start: str, end: str) -> "QuietHours":
        """Build from "HH:MM" strings."""
        return cls(start=time.fromisoformat(start), end=time.fromisoformat(end))

    def contains(self, moment: time) -> bool:
        moment = moment.replace(second=0, microsecond=0, tzinfo=None)
        if self.start == self.end:
            return False
        if self.start < self.end:
            return self.start <= moment < self.end
        # Wraps midnight
        return moment >= self.start or moment < self.end

    def __str__(self) -> str:
        return f"{self.start.strftime('%H:%M')}-{self.end.strftime('%H:%M')}"
