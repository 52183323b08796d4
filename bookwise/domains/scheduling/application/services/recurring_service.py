"""
Recurring Booking Service

Weekly booking series: every occurrence is created up front as an ordinary
booking linked to the series, and can later be cancelled one at a time,
from a given occurrence onwards, or all together.
"""

import logging
from collections.abc import Awaitable
from datetime import date, datetime, tzinfo
from typing import Any

from bookwise.core.domain import BookingConflictException, EntityNotFoundException, ValidationException
from bookwise.core.shared import Clock, SideEffectRunner, ensure_utc, get_timezone, localize, utc_now
from bookwise.domains.scheduling.application.dto import CreateSeriesRequest, SeriesCancelResult
from bookwise.domains.scheduling.application.ports import (
    IBookingRepository,
    ICalendarSync,
    ICatalogRepository,
    INotificationDispatcher,
    IRecurringSeriesRepository,
    IReminderRepository,
    ITenantSettingsProvider,
    IUnitOfWork,
)
from bookwise.domains.scheduling.domain.entities import Booking, RecurringSeries, Reminder, Service
from bookwise.domains.scheduling.domain.services import plan_booking_reminder
from bookwise.domains.scheduling.domain.value_objects import (
    BookingStatus,
    CalendarAction,
    RecurrenceRule,
    SeriesCancelScope,
)

logger = logging.getLogger(__name__)


class RecurringBookingService:
    """
    Creates and cancels recurring series.

    Example:
        ```python
        series = await service.create_series("tenant-1", CreateSeriesRequest(...))
        await service.cancel_series("tenant-1", series.id, SeriesCancelScope.FUTURE, booking_id=...)
        ```
    """

    def __init__(
        self,
        series_repository: IRecurringSeriesRepository,
        booking_repository: IBookingRepository,
        catalog_repository: ICatalogRepository,
        reminder_repository: IReminderRepository,
        unit_of_work: IUnitOfWork,
        notifications: INotificationDispatcher,
        calendar_sync: ICalendarSync,
        tenant_settings: ITenantSettingsProvider,
        side_effects: SideEffectRunner,
        reminder_lead_hours: int = 24,
        clock: Clock = utc_now,
    ):
        self.series_repo = series_repository
        self.booking_repo = booking_repository
        self.catalog_repo = catalog_repository
        self.reminder_repo = reminder_repository
        self.uow = unit_of_work
        self.notifications = notifications
        self.calendar_sync = calendar_sync
        self.tenant_settings = tenant_settings
        self.side_effects = side_effects
        self.reminder_lead_hours = reminder_lead_hours
        self.clock = clock

    async def create_series(self, tenant_id: str, request: CreateSeriesRequest) -> RecurringSeries:
        """
        Create the series and all of its occurrences in one transaction.

        Occurrences are CONFIRMED regardless of the service's deposit
        setting. A 24h reminder is planned for each occurrence far enough
        ahead.

        Raises:
            ValidationException: Unknown service or staff, start date not in
                the future, invalid rule, or no occurrences generated
            BookingConflictException: The staff member is busy at one of the
                occurrences; nothing is created
        """
        service = await self.catalog_repo.get_service(tenant_id, request.service_id)
        if service is None:
            raise ValidationException("Service not found", field="service_id")

        now = self.clock()
        timezone = get_timezone(await self.tenant_settings.get_timezone(tenant_id))
        if request.start_date <= now.astimezone(timezone).date():
            raise ValidationException("Start date must be in the future", field="start_date")

        try:
            rule = RecurrenceRule(
                time_of_day=request.time_of_day,
                days_of_week=tuple(request.days_of_week),
                interval_weeks=request.interval_weeks,
                count=request.total_count,
                ends_on=request.ends_on,
            )
        except ValueError as e:
            raise ValidationException(str(e), field="days_of_week") from e

        dates = rule.occurrence_dates(request.start_date)
        if not dates:
            raise ValidationException(
                "No occurrences could be generated with the given parameters", field="ends_on"
            )

        occurrences = [
            self._occurrence(tenant_id, request, service, localize(timezone, datetime.combine(day, rule.time_of_day)))
            for day in dates
        ]

        try:
            if request.staff_id:
                await self._check_staff_is_free(tenant_id, request.staff_id, occurrences, timezone)

            series = await self.series_repo.add(
                RecurringSeries.from_rule(
                    tenant_id=tenant_id,
                    customer_id=request.customer_id,
                    service_id=request.service_id,
                    start_date=request.start_date,
                    rule=rule,
                    occurrences=len(occurrences),
                    staff_id=request.staff_id,
                    notes=request.notes,
                )
            )

            created: list[Booking] = []
            reminders: list[Reminder] = []
            for booking in occurrences:
                booking.recurring_series_id = series.id
                booking = await self.booking_repo.add(booking)
                created.append(booking)

                planned = plan_booking_reminder(
                    booking.start_time, now, self.reminder_lead_hours  # type: ignore[arg-type]
                )
                if planned is not None:
                    reminders.append(
                        Reminder(
                            tenant_id=tenant_id,
                            booking_id=booking.id or "",
                            type=planned.type,
                            scheduled_at=planned.scheduled_at,
                        )
                    )
            if reminders:
                await self.reminder_repo.add_many(reminders)

            await self.uow.commit()
        except Exception:
            await self.uow.rollback()
            raise

        logger.info(f"Recurring series {series.id} created for tenant {tenant_id} with {len(created)} bookings")

        series.bookings = await self.booking_repo.find_by_series(tenant_id, series.id or "") or created
        for booking in series.bookings:
            self._dispatch(
                "notify.booking_confirmation",
                self.notifications.send_booking_confirmation(booking),
                booking,
            )
            self._dispatch(
                f"calendar.{CalendarAction.CREATE.value}",
                self.calendar_sync.sync_booking_to_calendar(booking, CalendarAction.CREATE),
                booking,
            )
        return series

    async def get_series(self, tenant_id: str, series_id: str) -> RecurringSeries:
        """Series with its bookings ordered by start time."""
        series = await self.series_repo.find_by_id(tenant_id, series_id)
        if series is None:
            raise EntityNotFoundException("RecurringSeries", series_id, message="Recurring series not found")
        series.bookings = await self.booking_repo.find_by_series(tenant_id, series_id)
        return series

    async def cancel_series(
        self,
        tenant_id: str,
        series_id: str,
        scope: SeriesCancelScope | str,
        booking_id: str | None = None,
    ) -> SeriesCancelResult:
        """
        Cancel occurrences of a series.

        SINGLE cancels ``booking_id`` only, FUTURE cancels ``booking_id`` and
        every later occurrence, ALL cancels the whole series. Occurrences that
        are already terminal are skipped. The cancellation policy is not
        applied and freed slots are not offered to the waitlist.

        Raises:
            EntityNotFoundException: Unknown series
            ValidationException: Unknown scope, missing ``booking_id``, or a
                FUTURE anchor that is not part of the series
        """
        try:
            scope = SeriesCancelScope(scope)
        except ValueError:
            raise ValidationException(f"Unknown cancel scope: {scope}", field="scope") from None

        series = await self.get_series(tenant_id, series_id)

        anchor = None
        if scope != SeriesCancelScope.ALL:
            if not booking_id:
                raise ValidationException(f"bookingId is required for {scope.value} cancel", field="booking_id")
            anchor = series.find_booking(booking_id)
            if anchor is None and scope == SeriesCancelScope.FUTURE:
                raise ValidationException("Booking not found in series", field="booking_id")

        to_cancel = series.bookings_to_cancel(scope, anchor)

        try:
            for booking in to_cancel:
                booking.change_status(BookingStatus.CANCELLED)
                await self.booking_repo.update(booking)
                await self.reminder_repo.cancel_pending_for_booking(booking.id or "")
            await self.uow.commit()
        except Exception:
            await self.uow.rollback()
            raise

        logger.info(f"Cancelled {len(to_cancel)} bookings of recurring series {series_id} (scope={scope.value})")

        for booking in to_cancel:
            self._dispatch(
                f"calendar.{CalendarAction.CANCEL.value}",
                self.calendar_sync.sync_booking_to_calendar(booking, CalendarAction.CANCEL),
                booking,
            )
        return SeriesCancelResult(cancelled=len(to_cancel))

    def _occurrence(
        self,
        tenant_id: str,
        request: CreateSeriesRequest,
        service: Service,
        start_time: datetime,
    ) -> Booking:
        booking = Booking.schedule(
            tenant_id=tenant_id,
            customer_id=request.customer_id,
            service=service,
            start_time=ensure_utc(start_time),
            staff_id=request.staff_id,
            notes=request.notes,
        )
        booking.status = BookingStatus.CONFIRMED
        return booking

    async def _check_staff_is_free(
        self,
        tenant_id: str,
        staff_id: str,
        occurrences: list[Booking],
        timezone: tzinfo,
    ) -> None:
        if not await self.booking_repo.lock_staff(tenant_id, staff_id):
            raise ValidationException("Staff not found", field="staff_id")
        for booking in occurrences:
            time_range = booking.time_range
            if time_range is None:
                continue
            if await self.booking_repo.has_conflict(tenant_id, staff_id, time_range.start, time_range.end):
                local_start = time_range.start.astimezone(timezone)
                raise BookingConflictException(
                    staff_id=staff_id,
                    time_slot=str(time_range),
                    message=(
                        f"Staff has a conflicting booking on {_format_day(local_start.date())} "
                        f"at {local_start.strftime('%H:%M')}"
                    ),
                )

    def _dispatch(self, name: str, awaitable: Awaitable[Any], booking: Booking) -> None:
        self.side_effects.dispatch(
            name,
            awaitable,
            booking_id=booking.id,
            tenant_id=booking.tenant_id,
            series_id=booking.recurring_series_id,
        )


def _format_day(day: date) -> str:
    """e.g. "Thu Mar 5"."""
    return f"{day.strftime('%a %b')} {day.day}"
