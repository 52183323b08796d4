"""
Availability Service

Computes per-staff open slots for a service on a date from working hours,
time off, existing bookings and externally synced calendar events.
"""

import logging
from datetime import date, datetime, time, timedelta, tzinfo

import pytz

from bookwise.core.shared import Clock, get_timezone, localize, utc_now
from bookwise.domains.scheduling.application.ports import (
    IBookingRepository,
    ICalendarSync,
    ICatalogRepository,
    ITenantSettingsProvider,
)
from bookwise.domains.scheduling.domain.entities import Staff
from bookwise.domains.scheduling.domain.services import CandidateSlot, SlotGenerator
from bookwise.domains.scheduling.domain.value_objects import TimeRange

logger = logging.getLogger(__name__)

MIDDAY_HOUR = 12
PROXIMITY_WEIGHT = 2
LOAD_WEIGHT = 3


class AvailabilityService:
    """
    Availability engine.

    One staff member's external-calendar outage never fails the whole
    computation: pulled events are best-effort and a failure counts as
    "no external conflicts".
    """

    def __init__(
        self,
        catalog_repository: ICatalogRepository,
        booking_repository: IBookingRepository,
        calendar_sync: ICalendarSync,
        tenant_settings: ITenantSettingsProvider,
        slot_increment_minutes: int = 30,
        clock: Clock = utc_now,
    ):
        self.catalog_repo = catalog_repository
        self.booking_repo = booking_repository
        self.calendar_sync = calendar_sync
        self.tenant_settings = tenant_settings
        self.generator = SlotGenerator(increment_minutes=slot_increment_minutes)
        self.clock = clock

    async def get_available_slots(
        self,
        tenant_id: str,
        day: date,
        service_id: str,
        staff_id: str | None = None,
    ) -> list[CandidateSlot]:
        """
        Candidate slots for every eligible staff member on ``day``.

        Args:
            tenant_id: Owning tenant
            day: Calendar date in the tenant's timezone
            service_id: Service to book (its duration sizes the slots)
            staff_id: Restrict to one staff member

        Returns:
            Slots sorted by start time then staff name; empty when the service
            is unknown or nobody works that day
        """
        service = await self.catalog_repo.get_service(tenant_id, service_id)
        if service is None:
            logger.debug(f"Service {service_id} not found for tenant {tenant_id}; no slots")
            return []

        staff_list = await self.catalog_repo.get_active_staff(tenant_id, staff_id)
        if not staff_list:
            return []

        timezone = get_timezone(await self.tenant_settings.get_timezone(tenant_id))
        day_start, day_end = _day_bounds(day, timezone)
        now = self.clock()

        slots: list[CandidateSlot] = []
        for staff in staff_list:
            window = staff.window_for(day)
            if window is None:
                continue

            busy = await self._busy_ranges(tenant_id, staff, day, day_start, day_end)
            slots.extend(
                self.generator.generate(
                    day=day,
                    window=window,
                    duration_minutes=service.duration_minutes,
                    busy=busy,
                    staff_id=staff.id or "",
                    staff_name=staff.name,
                    now=now,
                    timezone=timezone,
                )
            )

        return SlotGenerator.sort(slots)

    async def get_recommended_slots(
        self,
        tenant_id: str,
        day: date,
        service_id: str,
        exclude_booking_id: str | None = None,
        limit: int = 5,
    ) -> list[CandidateSlot]:
        """
        Best available slots, preferring times near midday and less loaded staff.

        ``exclude_booking_id`` leaves the booking being rescheduled out of the
        staff load count.
        """
        available = [
            slot for slot in await self.get_available_slots(tenant_id, day, service_id) if slot.available
        ]
        if not available:
            return []

        timezone = get_timezone(await self.tenant_settings.get_timezone(tenant_id))
        day_start, day_end = _day_bounds(day, timezone)
        load = await self.booking_repo.count_blocking_by_staff(tenant_id, day_start, day_end, exclude_booking_id)

        def score(slot: CandidateSlot) -> float:
            local = slot.start.astimezone(timezone)
            hour = local.hour + local.minute / 60
            return abs(hour - MIDDAY_HOUR) * PROXIMITY_WEIGHT + load.get(slot.staff_id, 0) * LOAD_WEIGHT

        return sorted(available, key=score)[:limit]

    async def _busy_ranges(
        self,
        tenant_id: str,
        staff: Staff,
        day: date,
        day_start: datetime,
        day_end: datetime,
    ) -> list[TimeRange]:
        bookings = await self.booking_repo.find_blocking_for_staff(tenant_id, staff.id or "", day_start, day_end)
        busy = [booking.time_range for booking in bookings if booking.time_range is not None]
        busy.extend(await self._pull_external_events(staff, day))
        return busy

    async def _pull_external_events(self, staff: Staff, day: date) -> list[TimeRange]:
        try:
            return await self.calendar_sync.pull_external_events(staff.id or "", day)
        except Exception as e:
            logger.warning(f"Failed to pull external events for staff {staff.id}: {e}")
            return []


def _day_bounds(day: date, timezone: tzinfo) -> tuple[datetime, datetime]:
    """UTC instants of local midnight at the start and end of ``day``."""
    start = localize(timezone, datetime.combine(day, time.min))
    end = localize(timezone, datetime.combine(day + timedelta(days=1), time.min))
    return start.astimezone(pytz.UTC), end.astimezone(pytz.UTC)
