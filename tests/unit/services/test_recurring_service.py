"""
Unit tests for RecurringBookingService.
"""

from datetime import UTC, date, datetime, time

import pytest

from bookwise.core.domain import BookingConflictException, EntityNotFoundException, ValidationException
from bookwise.domains.scheduling.application.dto import CreateSeriesRequest
from bookwise.domains.scheduling.domain.entities import WaitlistEntry
from bookwise.domains.scheduling.domain.value_objects import (
    BookingStatus,
    CalendarAction,
    PolicySettings,
    ReminderStatus,
    SeriesCancelScope,
    WaitlistStatus,
)
from tests.conftest import TENANT_ID

TUESDAY = date(2026, 3, 3)


def series_request(
    start_date: date = TUESDAY,
    days: list[int] | None = None,
    count: int | None = 4,
    staff_id: str | None = "staff-alex",
    service_id: str = "svc-cut",
    **kwargs,
) -> CreateSeriesRequest:
    return CreateSeriesRequest(
        customer_id="cust-1",
        service_id=service_id,
        staff_id=staff_id,
        start_date=start_date,
        time_of_day=time(10, 0),
        days_of_week=days if days is not None else [1, 3],
        total_count=count,
        **kwargs,
    )


def at_ten(day: int) -> datetime:
    return datetime(2026, 3, day, 10, 0, tzinfo=UTC)


@pytest.fixture
def series_ready(service, staff, customer):
    """Catalog needed to create a series: Haircut with Alex for Casey."""


class TestCreateSeries:
    @pytest.mark.asyncio
    async def test_creates_confirmed_bookings_for_every_occurrence(
        self, harness, store, side_effects, notifications, calendar, series_ready
    ):
        series = await harness.recurring.create_series(TENANT_ID, series_request())
        await side_effects.drain()

        assert [b.start_time for b in series.bookings] == [at_ten(3), at_ten(5), at_ten(10), at_ten(12)]
        assert all(b.status == BookingStatus.CONFIRMED for b in series.bookings)
        assert all(b.recurring_series_id == series.id for b in series.bookings)
        assert series.total_count == 4
        assert store.series[series.id].days_of_week == [1, 3]
        assert harness.uow.commits == 1
        assert notifications.kinds() == ["booking_confirmation"] * 4
        assert [action for _, action in calendar.pushed] == [CalendarAction.CREATE] * 4

    @pytest.mark.asyncio
    async def test_each_occurrence_gets_a_reminder_a_day_ahead(self, harness, store, series_ready):
        series = await harness.recurring.create_series(TENANT_ID, series_request(count=2))

        reminders = sorted(store.reminders.values(), key=lambda r: r.scheduled_at)
        assert [r.booking_id for r in reminders] == [b.id for b in series.bookings]
        assert reminders[0].scheduled_at == datetime(2026, 3, 2, 10, 0, tzinfo=UTC)

    @pytest.mark.asyncio
    async def test_deposit_services_are_still_confirmed(self, harness, deposit_service, staff, customer):
        series = await harness.recurring.create_series(TENANT_ID, series_request(service_id="svc-color", count=1))

        assert series.bookings[0].status == BookingStatus.CONFIRMED

    @pytest.mark.asyncio
    async def test_time_of_day_is_tenant_local(self, harness, tenant_settings, series_ready):
        tenant_settings.timezone = "America/New_York"

        series = await harness.recurring.create_series(
            TENANT_ID, series_request(start_date=date(2026, 3, 10), days=[1], count=1)
        )

        # Daylight saving time started on 8 March
        assert series.bookings[0].start_time == datetime(2026, 3, 10, 14, 0, tzinfo=UTC)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("start_date", [date(2026, 3, 2), date(2026, 2, 20)])
    async def test_start_date_must_be_in_the_future(self, harness, store, series_ready, start_date):
        with pytest.raises(ValidationException, match="Start date must be in the future"):
            await harness.recurring.create_series(TENANT_ID, series_request(start_date=start_date))
        assert store.bookings == {}

    @pytest.mark.asyncio
    async def test_unknown_service(self, harness, staff, customer):
        with pytest.raises(ValidationException, match="Service not found"):
            await harness.recurring.create_series(TENANT_ID, series_request())

    @pytest.mark.asyncio
    async def test_unknown_staff(self, harness, service, customer):
        with pytest.raises(ValidationException, match="Staff not found"):
            await harness.recurring.create_series(TENANT_ID, series_request(staff_id="ghost"))
        assert harness.uow.rollbacks == 1

    @pytest.mark.asyncio
    async def test_invalid_rule(self, harness, series_ready):
        with pytest.raises(ValidationException):
            await harness.recurring.create_series(TENANT_ID, series_request(days=[]))

    @pytest.mark.asyncio
    async def test_no_occurrences(self, harness, series_ready):
        with pytest.raises(ValidationException, match="No occurrences"):
            await harness.recurring.create_series(TENANT_ID, series_request(ends_on=date(2026, 3, 1)))

    @pytest.mark.asyncio
    async def test_any_conflict_rejects_the_whole_series(
        self, harness, store, side_effects, notifications, make_booking
    ):
        existing = make_booking(datetime(2026, 3, 12, 10, 30, tzinfo=UTC))

        with pytest.raises(BookingConflictException, match="Thu Mar 12 at 10:00"):
            await harness.recurring.create_series(TENANT_ID, series_request())
        await side_effects.drain()

        assert list(store.bookings) == [existing.id]
        assert store.series == {}
        assert notifications.sent == []

    @pytest.mark.asyncio
    async def test_without_staff_there_is_no_conflict_check(self, harness, make_booking):
        make_booking(at_ten(3))

        series = await harness.recurring.create_series(TENANT_ID, series_request(staff_id=None, count=1))

        assert series.bookings[0].staff_id is None


class TestGetSeries:
    @pytest.mark.asyncio
    async def test_bookings_in_start_order(self, harness, series_ready):
        created = await harness.recurring.create_series(TENANT_ID, series_request())

        series = await harness.recurring.get_series(TENANT_ID, created.id)

        assert [b.start_time for b in series.bookings] == [at_ten(3), at_ten(5), at_ten(10), at_ten(12)]
        assert series.bookings[0].service.name == "Haircut"

    @pytest.mark.asyncio
    async def test_other_tenant_cannot_see_series(self, harness, series_ready):
        created = await harness.recurring.create_series(TENANT_ID, series_request())

        with pytest.raises(EntityNotFoundException, match="Recurring series not found"):
            await harness.recurring.get_series("tenant-2", created.id)


class TestCancelSeries:
    @pytest.fixture
    async def series(self, harness, series_ready):
        return await harness.recurring.create_series(TENANT_ID, series_request())

    def statuses(self, store, series) -> list[BookingStatus]:
        return [store.bookings[b.id].status for b in series.bookings]

    @pytest.mark.asyncio
    async def test_cancel_all_skips_finished_occurrences(self, harness, store, side_effects, calendar, series):
        store.bookings[series.bookings[0].id].status = BookingStatus.COMPLETED
        calendar.pushed.clear()

        result = await harness.recurring.cancel_series(TENANT_ID, series.id, SeriesCancelScope.ALL)
        await side_effects.drain()

        assert result.cancelled == 3
        assert self.statuses(store, series) == [BookingStatus.COMPLETED] + [BookingStatus.CANCELLED] * 3
        assert [action for _, action in calendar.pushed if action == CalendarAction.CANCEL] == [
            CalendarAction.CANCEL
        ] * 3

    @pytest.mark.asyncio
    async def test_cancel_future_from_an_occurrence(self, harness, store, series):
        result = await harness.recurring.cancel_series(
            TENANT_ID, series.id, SeriesCancelScope.FUTURE, booking_id=series.bookings[2].id
        )

        assert result.cancelled == 2
        assert self.statuses(store, series) == [BookingStatus.CONFIRMED] * 2 + [BookingStatus.CANCELLED] * 2

    @pytest.mark.asyncio
    async def test_cancel_single(self, harness, store, series):
        result = await harness.recurring.cancel_series(
            TENANT_ID, series.id, "single", booking_id=series.bookings[1].id
        )

        assert result.cancelled == 1
        assert self.statuses(store, series)[1] == BookingStatus.CANCELLED
        assert self.statuses(store, series).count(BookingStatus.CONFIRMED) == 3

    @pytest.mark.asyncio
    async def test_cancelled_occurrences_lose_pending_reminders(self, harness, store, series):
        await harness.recurring.cancel_series(TENANT_ID, series.id, SeriesCancelScope.ALL)

        assert {r.status for r in store.reminders.values()} == {ReminderStatus.CANCELLED}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("scope", [SeriesCancelScope.SINGLE, SeriesCancelScope.FUTURE])
    async def test_anchor_booking_required(self, harness, series, scope):
        with pytest.raises(ValidationException, match=f"bookingId is required for {scope.value} cancel"):
            await harness.recurring.cancel_series(TENANT_ID, series.id, scope)

    @pytest.mark.asyncio
    async def test_future_anchor_must_belong_to_the_series(self, harness, series, make_booking):
        outsider = make_booking(at_ten(20))

        with pytest.raises(ValidationException, match="Booking not found in series"):
            await harness.recurring.cancel_series(
                TENANT_ID, series.id, SeriesCancelScope.FUTURE, booking_id=outsider.id
            )

    @pytest.mark.asyncio
    async def test_single_with_foreign_booking_cancels_nothing(self, harness, series, make_booking):
        outsider = make_booking(at_ten(20))

        result = await harness.recurring.cancel_series(
            TENANT_ID, series.id, SeriesCancelScope.SINGLE, booking_id=outsider.id
        )

        assert result.cancelled == 0

    @pytest.mark.asyncio
    async def test_unknown_scope(self, harness, series):
        with pytest.raises(ValidationException):
            await harness.recurring.cancel_series(TENANT_ID, series.id, "weekly")

    @pytest.mark.asyncio
    async def test_unknown_series(self, harness):
        with pytest.raises(EntityNotFoundException):
            await harness.recurring.cancel_series(TENANT_ID, "missing", SeriesCancelScope.ALL)

    @pytest.mark.asyncio
    async def test_cancelling_again_is_a_no_op(self, harness, series):
        await harness.recurring.cancel_series(TENANT_ID, series.id, SeriesCancelScope.ALL)

        again = await harness.recurring.cancel_series(TENANT_ID, series.id, SeriesCancelScope.ALL)

        assert again.cancelled == 0

    @pytest.mark.asyncio
    async def test_ignores_cancellation_policy_and_waitlist(
        self, harness, store, tenant_settings, side_effects, notifications, series
    ):
        tenant_settings.policy = PolicySettings(policy_enabled=True, cancellation_window_hours=72)
        entry = store.add_waitlist_entry(WaitlistEntry(tenant_id=TENANT_ID, customer_id="cust-1", service_id="svc-cut"))

        result = await harness.recurring.cancel_series(TENANT_ID, series.id, SeriesCancelScope.ALL)
        await side_effects.drain()

        assert result.cancelled == 4
        assert store.waitlist[entry.id].status == WaitlistStatus.ACTIVE
        assert "cancellation" not in notifications.kinds()
