"""
Reminder Repository Port
"""

from datetime import datetime
from typing import Protocol, runtime_checkable

from bookwise.domains.scheduling.domain.entities import Reminder


@runtime_checkable
class IReminderRepository(Protocol):
    async def add_many(self, reminders: list[Reminder]) -> list[Reminder]:
        """Stage new reminders in the current unit of work."""
        ...

    async def cancel_pending_for_booking(self, booking_id: str) -> int:
        """Flip every PENDING reminder of the booking to CANCELLED. Returns rows affected."""
        ...

    async def find_by_booking(self, booking_id: str) -> list[Reminder]:
        ...

    async def find_due(self, now: datetime, limit: int = 100) -> list[Reminder]:
        """PENDING reminders scheduled at or before ``now``, oldest first."""
        ...

    async def update(self, reminder: Reminder) -> Reminder:
        ...
