"""
Staff Schedule Service

Working hours and time off of staff members, plus the per-staff context
calendar views render next to bookings.
"""

import logging
from datetime import date

from bookwise.core.domain import EntityNotFoundException, ValidationException
from bookwise.core.shared import Clock, utc_now
from bookwise.domains.scheduling.application.dto import StaffCalendarContext
from bookwise.domains.scheduling.application.ports import ICatalogRepository, IUnitOfWork
from bookwise.domains.scheduling.domain.entities import TimeOff, WorkingHours

logger = logging.getLogger(__name__)


class StaffScheduleService:
    def __init__(
        self,
        catalog_repository: ICatalogRepository,
        unit_of_work: IUnitOfWork,
        clock: Clock = utc_now,
    ):
        self.catalog_repo = catalog_repository
        self.uow = unit_of_work
        self.clock = clock

    async def get_working_hours(self, tenant_id: str, staff_id: str) -> list[WorkingHours]:
        """Weekly rows ordered by day; empty for staff outside the tenant."""
        staff = await self.catalog_repo.get_staff(tenant_id, staff_id)
        if staff is None:
            return []
        return staff.weekly_hours()

    async def set_working_hours(self, tenant_id: str, staff_id: str, hours: list[WorkingHours]) -> list[WorkingHours]:
        """
        Upsert one row per given weekday. Weekdays not in ``hours`` keep
        their current row.

        Raises:
            EntityNotFoundException: Staff not in the tenant
            ValidationException: The same weekday given twice
        """
        days = [row.day_of_week for row in hours]
        if len(days) != len(set(days)):
            raise ValidationException("Each day of the week can only appear once", field="day_of_week")

        staff = await self.catalog_repo.get_staff(tenant_id, staff_id)
        if staff is None:
            raise EntityNotFoundException("Staff", staff_id)

        try:
            await self.catalog_repo.upsert_working_hours(staff_id, hours)
            await self.uow.commit()
        except Exception:
            await self.uow.rollback()
            raise

        logger.info(f"Working hours updated for staff {staff_id} (days={sorted(days)})")
        return await self.get_working_hours(tenant_id, staff_id)

    async def get_time_off(self, tenant_id: str, staff_id: str) -> list[TimeOff]:
        """Time off that has not ended yet, earliest first."""
        staff = await self.catalog_repo.get_staff(tenant_id, staff_id)
        if staff is None:
            return []
        today = self.clock().date()
        return sorted(
            (period for period in staff.time_off if period.end_date >= today),
            key=lambda period: period.start_date,
        )

    async def add_time_off(
        self,
        tenant_id: str,
        staff_id: str,
        start_date: date,
        end_date: date,
        reason: str | None = None,
    ) -> TimeOff:
        try:
            time_off = TimeOff(start_date=start_date, end_date=end_date, reason=reason)
        except ValueError as e:
            raise ValidationException(str(e), field="end_date") from e

        staff = await self.catalog_repo.get_staff(tenant_id, staff_id)
        if staff is None:
            raise EntityNotFoundException("Staff", staff_id)

        try:
            time_off = await self.catalog_repo.add_time_off(staff_id, time_off)
            await self.uow.commit()
        except Exception:
            await self.uow.rollback()
            raise

        logger.info(f"Time off {time_off.id} added for staff {staff_id} ({start_date} - {end_date})")
        return time_off

    async def remove_time_off(self, tenant_id: str, time_off_id: str) -> None:
        """
        Raises:
            EntityNotFoundException: Unknown id, or the period belongs to
                another tenant's staff member
        """
        time_off = await self.catalog_repo.find_time_off(tenant_id, time_off_id)
        if time_off is None:
            raise EntityNotFoundException("TimeOff", time_off_id, message="Time off entry not found")

        try:
            await self.catalog_repo.delete_time_off(time_off_id)
            await self.uow.commit()
        except Exception:
            await self.uow.rollback()
            raise

    async def get_calendar_context(
        self,
        tenant_id: str,
        staff_ids: list[str],
        date_from: date,
        date_to: date,
    ) -> dict[str, StaffCalendarContext]:
        """
        Working hours and the time off overlapping [date_from, date_to] for
        each requested staff member. Ids outside the tenant are left out.
        """
        if date_to < date_from:
            raise ValidationException("dateTo cannot be before dateFrom", field="date_to")
        if not staff_ids:
            return {}

        staff_members = await self.catalog_repo.get_staff_members(tenant_id, list(dict.fromkeys(staff_ids)))
        return {
            staff.id: StaffCalendarContext(
                working_hours=staff.weekly_hours(),
                time_off=staff.time_off_between(date_from, date_to),
            )
            for staff in staff_members
            if staff.id
        }
