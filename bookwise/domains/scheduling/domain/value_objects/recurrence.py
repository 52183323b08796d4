"""
Weekly recurrence rule for booking series.
"""

from dataclasses import dataclass
from datetime import date, time, timedelta

from bookwise.core.domain import ValueObject

MAX_OCCURRENCES = 52


@dataclass(frozen=True)
class RecurrenceRule(ValueObject):
    """
    "Every ``interval_weeks`` weeks on ``days_of_week`` at ``time_of_day``".

    Days use 0=Monday .. 6=Sunday. A series stops at ``count`` occurrences,
    after ``ends_on`` (inclusive), or at 52 occurrences, whichever comes first.
    ``time_of_day`` is wall-clock time in the tenant's timezone.
    """

    time_of_day: time
    days_of_week: tuple[int, ...]
    interval_weeks: int = 1
    count: int | None = None
    ends_on: date | None = None

    def _validate(self) -> None:
        if not self.days_of_week:
            raise ValueError("At least one day of the week is required")
        if any(not 0 <= day <= 6 for day in self.days_of_week):
            raise ValueError("days_of_week must be between 0 (Monday) and 6 (Sunday)")
        if self.interval_weeks < 1:
            raise ValueError("interval_weeks must be at least 1")
        if self.count is not None and self.count < 1:
            raise ValueError("count must be at least 1")

    @property
    def max_occurrences(self) -> int:
        return min(self.count or MAX_OCCURRENCES, MAX_OCCURRENCES)

    def occurrence_dates(self, start_date: date) -> list[date]:
        """
        Dates of the series starting on ``start_date``.

        Weeks are counted from the Monday of ``start_date``'s week; days of
        that first week before ``start_date`` are skipped.
        """
        limit = self.max_occurrences
        days = sorted(set(self.days_of_week))
        week_start = start_date - timedelta(days=start_date.weekday())
        dates: list[date] = []

        while len(dates) < limit:
            for day in days:
                occurrence = week_start + timedelta(days=day)
                if occurrence < start_date:
                    continue
                if self.ends_on is not None and occurrence > self.ends_on:
                    return dates
                dates.append(occurrence)
                if len(dates) >= limit:
                    return dates
            week_start += timedelta(weeks=self.interval_weeks)

        return dates
