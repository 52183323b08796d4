"""
Booking Repository Port

Interface for booking data access following Clean Architecture.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol, runtime_checkable

from bookwise.domains.scheduling.domain.entities import Booking
from bookwise.domains.scheduling.domain.value_objects import BookingStatus


@dataclass
class BookingFilters:
    """Optional filters for listing bookings."""

    status: BookingStatus | None = None
    staff_id: str | None = None
    customer_id: str | None = None
    service_id: str | None = None
    date_from: datetime | None = None
    date_to: datetime | None = None


@runtime_checkable
class IBookingRepository(Protocol):
    """
    Booking repository interface.

    Every read is scoped to a tenant. Writes are staged in the current unit of
    work and made durable by ``IUnitOfWork.commit``.

    Example:
        ```python
        class SQLAlchemyBookingRepository(IBookingRepository):
            async def find_by_id(self, tenant_id: str, booking_id: str) -> Booking | None:
                # SQLAlchemy implementation
                pass
        ```
    """

    async def find_by_id(self, tenant_id: str, booking_id: str) -> Booking | None:
        """
        Find a booking with customer, service and staff resolved.

        Args:
            tenant_id: Owning tenant
            booking_id: Booking identifier

        Returns:
            Booking if found, None otherwise
        """
        ...

    async def find_by_id_for_update(self, tenant_id: str, booking_id: str) -> Booking | None:
        """
        Like find_by_id but takes an exclusive row lock held until the unit
        of work ends.
        """
        ...

    async def find_all(
        self,
        tenant_id: str,
        filters: BookingFilters,
        page: int = 1,
        page_size: int = 20,
    ) -> tuple[list[Booking], int]:
        """
        List bookings ordered by start time.

        Returns:
            Tuple of (page of bookings, total matching count)
        """
        ...

    async def find_blocking_for_staff(
        self,
        tenant_id: str,
        staff_id: str,
        range_start: datetime,
        range_end: datetime,
    ) -> list[Booking]:
        """Bookings in blocking statuses for a staff member that overlap the range."""
        ...

    async def has_conflict(
        self,
        tenant_id: str,
        staff_id: str,
        start_time: datetime,
        end_time: datetime,
        exclude_booking_id: str | None = None,
    ) -> bool:
        """
        Check whether [start_time, end_time) overlaps a blocking booking of the staff.

        Args:
            tenant_id: Owning tenant
            staff_id: Staff member to check
            start_time: Interval start (inclusive)
            end_time: Interval end (exclusive)
            exclude_booking_id: Booking to ignore (the one being rescheduled)

        Returns:
            True if the interval is taken
        """
        ...

    async def lock_staff(self, tenant_id: str, staff_id: str) -> bool:
        """
        Take an exclusive lock on the staff row for the rest of the unit of work.

        Serializes conflict-check-then-insert for one staff member.

        Returns:
            False if the staff member does not exist for the tenant
        """
        ...

    async def count_blocking_by_staff(
        self,
        tenant_id: str,
        range_start: datetime,
        range_end: datetime,
        exclude_booking_id: str | None = None,
    ) -> dict[str, int]:
        """Number of blocking bookings per staff id inside the range."""
        ...

    async def find_calendar(
        self,
        tenant_id: str,
        range_start: datetime,
        range_end: datetime,
        staff_id: str | None = None,
    ) -> list[Booking]:
        """
        Blocking bookings lying entirely inside [range_start, range_end],
        ordered by start time, with references resolved.
        """
        ...

    async def find_by_series(self, tenant_id: str, series_id: str) -> list[Booking]:
        """Every occurrence of a recurring series, ordered by start time."""
        ...

    async def add(self, booking: Booking) -> Booking:
        """Stage a new booking; assigns its id."""
        ...

    async def update(self, booking: Booking) -> Booking:
        """Stage changes to an existing booking."""
        ...

    async def bulk_update_status(self, tenant_id: str, booking_ids: list[str], status: BookingStatus) -> int:
        """Single batched status update. Returns rows affected."""
        ...

    async def bulk_assign_staff(self, tenant_id: str, booking_ids: list[str], staff_id: str) -> int:
        """Single batched staff assignment. Returns rows affected."""
        ...
