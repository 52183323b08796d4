"""
Slot Generator

Domain service that turns one staff member's working window for a day into
fixed-increment candidate slots, marking those that collide with busy time.
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta, tzinfo
from typing import Any

import pytz

from bookwise.core.shared.clock import localize

from ..value_objects import TimeRange, WallClockWindow


@dataclass
class CandidateSlot:
    """A (staff, start) pair of fixed duration."""

    start: datetime
    end: datetime
    display: str
    staff_id: str
    staff_name: str
    available: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "time": self.start.isoformat(),
            "display": self.display,
            "staff_id": self.staff_id,
            "staff_name": self.staff_name,
            "available": self.available,
        }


class SlotGenerator:
    """
    Walks a working window in fixed steps.

    A slot is emitted while ``slot_start + duration <= window_end``; slots that
    start before ``now`` are dropped; a slot overlapping any busy range is kept
    but marked unavailable.

    Example:
        ```python
        generator = SlotGenerator(increment_minutes=30)
        slots = generator.generate(
            day=date(2026, 3, 2),
            window=WallClockWindow(time(9), time(17)),
            duration_minutes=60,
            busy=[TimeRange(start, end)],
            staff_id="s1",
            staff_name="Alex",
            now=utc_now(),
            timezone=pytz.timezone("Europe/London"),
        )
        ```
    """

    def __init__(self, increment_minutes: int = 30):
        if increment_minutes <= 0:
            raise ValueError("Slot increment must be positive")
        self.increment = timedelta(minutes=increment_minutes)

    def generate(
        self,
        day: date,
        window: WallClockWindow,
        duration_minutes: int,
        busy: list[TimeRange],
        staff_id: str,
        staff_name: str,
        now: datetime,
        timezone: tzinfo = pytz.UTC,
    ) -> list[CandidateSlot]:
        if duration_minutes <= 0:
            return []

        duration = timedelta(minutes=duration_minutes)
        # Walk on the local wall clock; each slot start is localized on its own
        # so a DST change inside the window keeps displayed times on the grid.
        local_cursor = datetime.combine(day, window.start_time)
        local_end = datetime.combine(day, window.end_time)

        slots: list[CandidateSlot] = []
        while local_cursor + duration <= local_end:
            start = localize(timezone, local_cursor).astimezone(pytz.UTC)
            end = start + duration
            if start >= now:
                candidate = TimeRange(start, end)
                slots.append(
                    CandidateSlot(
                        start=start,
                        end=end,
                        display=local_cursor.strftime("%H:%M"),
                        staff_id=staff_id,
                        staff_name=staff_name,
                        available=not candidate.overlaps_any(busy),
                    )
                )
            local_cursor += self.increment
        return slots

    @staticmethod
    def sort(slots: list[CandidateSlot]) -> list[CandidateSlot]:
        """Order by start time, then staff name."""
        return sorted(slots, key=lambda slot: (slot.start, slot.staff_name))
