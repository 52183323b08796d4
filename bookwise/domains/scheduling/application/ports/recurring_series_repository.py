"""
Recurring Series Repository Port
"""

from typing import Protocol, runtime_checkable

from bookwise.domains.scheduling.domain.entities import RecurringSeries


@runtime_checkable
class IRecurringSeriesRepository(Protocol):
    async def add(self, series: RecurringSeries) -> RecurringSeries:
        """Stage a new series; assigns its id."""
        ...

    async def find_by_id(self, tenant_id: str, series_id: str) -> RecurringSeries | None:
        """Series without its bookings; load those through IBookingRepository.find_by_series."""
        ...
