from datetime import UTC, date, datetime, time, timedelta

import pytest

from bookwise.core.domain import InvalidOperationException
from bookwise.domains.scheduling.domain.entities import (
    Booking,
    Customer,
    OfferedSlot,
    Service,
    Staff,
    TimeOff,
    WaitlistEntry,
    WorkingHours,
)
from bookwise.domains.scheduling.domain.value_objects import BookingStatus, WaitlistStatus

NOW = datetime(2026, 3, 2, 8, 0, tzinfo=UTC)
START = datetime(2026, 3, 3, 10, 0, tzinfo=UTC)


def service(**kwargs) -> Service:
    return Service(id="svc", tenant_id="t1", name="Haircut", duration_minutes=45, **kwargs)


class TestBooking:
    def test_schedule_computes_end_and_initial_status(self):
        booking = Booking.schedule(tenant_id="t1", customer_id="c1", service=service(), start_time=START)

        assert booking.end_time == START + timedelta(minutes=45)
        assert booking.status == BookingStatus.CONFIRMED
        assert booking.service_id == "svc"

    def test_deposit_service_starts_pending_deposit(self):
        booking = Booking.schedule(
            tenant_id="t1", customer_id="c1", service=service(deposit_required=True), start_time=START
        )

        assert booking.status == BookingStatus.PENDING_DEPOSIT

    @pytest.mark.parametrize("terminal", [BookingStatus.COMPLETED, BookingStatus.CANCELLED, BookingStatus.NO_SHOW])
    def test_terminal_bookings_are_frozen(self, terminal):
        booking = Booking(status=terminal, start_time=START, end_time=START + timedelta(hours=1))

        with pytest.raises(InvalidOperationException):
            booking.change_status(BookingStatus.CONFIRMED)
        with pytest.raises(InvalidOperationException):
            booking.reschedule(START + timedelta(days=1), 60)

    @pytest.mark.parametrize("terminal", [BookingStatus.COMPLETED, BookingStatus.CANCELLED, BookingStatus.NO_SHOW])
    def test_terminal_status_cannot_be_repeated(self, terminal):
        booking = Booking(status=terminal)

        with pytest.raises(InvalidOperationException):
            booking.change_status(terminal)
        assert booking.status == terminal

    def test_change_status_returns_previous(self):
        booking = Booking(status=BookingStatus.CONFIRMED)

        assert booking.change_status(BookingStatus.IN_PROGRESS) == BookingStatus.CONFIRMED
        assert booking.status == BookingStatus.IN_PROGRESS

    def test_hours_until_start(self):
        booking = Booking(start_time=NOW + timedelta(hours=5, minutes=30))

        assert booking.hours_until_start(NOW) == 5.5
        assert Booking().hours_until_start(NOW) is None

    def test_blocking_statuses(self):
        assert BookingStatus.blocking() == {
            BookingStatus.PENDING,
            BookingStatus.PENDING_DEPOSIT,
            BookingStatus.CONFIRMED,
            BookingStatus.IN_PROGRESS,
        }


class TestStaff:
    def test_window_uses_monday_as_day_zero(self):
        staff = Staff(working_hours=[WorkingHours(day_of_week=0, start_time=time(9), end_time=time(12))])

        assert staff.window_for(date(2026, 3, 2)) is not None  # Monday
        assert staff.window_for(date(2026, 3, 3)) is None  # Tuesday, no row

    def test_day_off_and_time_off_have_no_window(self):
        staff = Staff(
            working_hours=[
                WorkingHours(day_of_week=0, start_time=time(9), end_time=time(17)),
                WorkingHours(day_of_week=1, start_time=time(9), end_time=time(17), is_off=True),
            ],
            time_off=[TimeOff(start_date=date(2026, 3, 9), end_date=date(2026, 3, 13))],
        )

        assert staff.window_for(date(2026, 3, 3)) is None
        assert staff.window_for(date(2026, 3, 9)) is None
        assert staff.window_for(date(2026, 3, 16)) is not None

    def test_invalid_weekday_rejected(self):
        with pytest.raises(ValueError):
            WorkingHours(day_of_week=7, start_time=time(9), end_time=time(17))


class TestCustomer:
    def test_contact_prefers_email(self):
        assert Customer(email="a@example.com", phone="+1555").contact == "a@example.com"
        assert Customer(phone="+1555").contact == "+1555"
        assert Customer().contact is None


class TestWaitlistEntry:
    def slot(self) -> OfferedSlot:
        return OfferedSlot(start_time=START, service_name="Haircut", staff_name="Alex", staff_id="s1")

    def test_offer_sets_expiry(self):
        entry = WaitlistEntry()

        entry.offer(self.slot(), NOW, expiry_minutes=15)

        assert entry.status == WaitlistStatus.OFFERED
        assert entry.offer_expires_at == NOW + timedelta(minutes=15)

    def test_only_active_entries_can_be_offered(self):
        entry = WaitlistEntry(status=WaitlistStatus.CANCELLED)

        with pytest.raises(InvalidOperationException):
            entry.offer(self.slot(), NOW, 15)

    def test_reserve_open_offer(self):
        entry = WaitlistEntry()
        entry.offer(self.slot(), NOW, 15)

        assert entry.reserve(NOW + timedelta(minutes=5)) == self.slot()
        assert entry.status == WaitlistStatus.BOOKED

    def test_reserve_expired_offer_fails(self):
        entry = WaitlistEntry()
        entry.offer(self.slot(), NOW, 15)

        with pytest.raises(InvalidOperationException, match="This offer has expired"):
            entry.reserve(NOW + timedelta(minutes=16))

    def test_reserve_twice_fails(self):
        entry = WaitlistEntry()
        entry.offer(self.slot(), NOW, 15)
        entry.reserve(NOW)

        with pytest.raises(InvalidOperationException, match="no longer available"):
            entry.reserve(NOW)

    def test_reserve_without_slot_fails(self):
        entry = WaitlistEntry(status=WaitlistStatus.OFFERED, offer_expires_at=NOW + timedelta(minutes=5))

        with pytest.raises(InvalidOperationException, match="Invalid offered slot data"):
            entry.reserve(NOW)

    def test_booked_entry_cannot_be_cancelled(self):
        entry = WaitlistEntry(status=WaitlistStatus.BOOKED)

        with pytest.raises(InvalidOperationException):
            entry.cancel()

    def test_offered_slot_round_trips_through_storage_format(self):
        data = self.slot().to_dict()

        assert data["startTime"] == "2026-03-03T10:00:00+00:00"
        assert OfferedSlot.from_dict(data) == self.slot()
        assert OfferedSlot.from_dict({"serviceName": "Haircut"}) is None
