"""
Catalog Repository Port

Access to services, staff schedules and customers. Services and customers
are read-only here; working hours and time off are writable.
"""

from typing import Protocol, runtime_checkable

from bookwise.domains.scheduling.domain.entities import Customer, Service, Staff, TimeOff, WorkingHours


@runtime_checkable
class ICatalogRepository(Protocol):
    async def get_service(self, tenant_id: str, service_id: str) -> Service | None:
        """Service of the tenant, active or not."""
        ...

    async def get_staff(self, tenant_id: str, staff_id: str) -> Staff | None:
        ...

    async def get_staff_members(self, tenant_id: str, staff_ids: list[str]) -> list[Staff]:
        """Staff of the tenant among ``staff_ids``; unknown ids are skipped."""
        ...

    async def get_active_staff(self, tenant_id: str, staff_id: str | None = None) -> list[Staff]:
        """
        Active staff of the tenant with working hours and time off loaded.

        Args:
            tenant_id: Owning tenant
            staff_id: Restrict to this staff member when given

        Returns:
            Staff ordered by name
        """
        ...

    async def get_customer(self, tenant_id: str, customer_id: str) -> Customer | None:
        ...

    async def upsert_working_hours(self, staff_id: str, hours: list[WorkingHours]) -> None:
        """
        Replace the rows for the given weekdays; other weekdays are kept.

        Args:
            staff_id: Staff member (already checked to belong to the tenant)
            hours: At most one row per day_of_week
        """
        ...

    async def add_time_off(self, staff_id: str, time_off: TimeOff) -> TimeOff:
        """Stage a time-off period; returns it with its id."""
        ...

    async def find_time_off(self, tenant_id: str, time_off_id: str) -> TimeOff | None:
        """Time-off period whose staff member belongs to the tenant."""
        ...

    async def delete_time_off(self, time_off_id: str) -> None:
        ...
