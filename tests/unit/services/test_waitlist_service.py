"""
Unit tests for WaitlistService.
"""

from datetime import UTC, datetime, timedelta

import pytest

from bookwise.core.domain import DuplicateEntityException, EntityNotFoundException, InvalidOperationException
from bookwise.domains.scheduling.application.dto import JoinWaitlistRequest
from bookwise.domains.scheduling.domain.entities import Customer, OfferedSlot, Service, WaitlistEntry
from bookwise.domains.scheduling.domain.value_objects import (
    BookingStatus,
    QuietHours,
    TokenType,
    WaitlistSettings,
    WaitlistStatus,
)
from tests.conftest import NOW, TENANT_ID

THURSDAY_10 = datetime(2026, 3, 5, 10, 0, tzinfo=UTC)


@pytest.fixture
def daytime(clock):
    """Monday 10:00 UTC, outside the default 21:00-09:00 quiet hours."""
    clock.now = NOW.replace(hour=10)
    return clock.now


@pytest.fixture
def waiting_customers(store, customer, other_customer):
    store.add_customer(Customer(id="cust-3", tenant_id=TENANT_ID, name="Emery", email="emery@example.com"))
    store.add_customer(Customer(id="cust-4", tenant_id=TENANT_ID, name="Frankie", email="frankie@example.com"))
    store.add_customer(Customer(id="cust-mute", tenant_id=TENANT_ID, name="Gray"))


@pytest.fixture
def seed_entry(store, service):
    def _seed(
        customer_id: str,
        staff_id: str | None = None,
        age_hours: float = 1,
        service_id: str = "svc-cut",
        status: WaitlistStatus = WaitlistStatus.ACTIVE,
        **fields,
    ) -> WaitlistEntry:
        return store.add_waitlist_entry(
            WaitlistEntry(
                tenant_id=TENANT_ID,
                customer_id=customer_id,
                service_id=service_id,
                staff_id=staff_id,
                status=status,
                created_at=NOW - timedelta(hours=age_hours),
                **fields,
            )
        )

    return _seed


async def cancelled_booking(harness, make_booking, staff_id="staff-alex"):
    booking = make_booking(THURSDAY_10, staff_id=staff_id, status=BookingStatus.CANCELLED)
    return await harness.bookings.get(TENANT_ID, booking.id)


class TestJoinWaitlist:
    @pytest.mark.asyncio
    async def test_join(self, harness, service, customer):
        entry = await harness.waitlist.join_waitlist(
            TENANT_ID, JoinWaitlistRequest(customer_id=customer.id, service_id=service.id, notes="Mornings")
        )

        assert entry.id is not None
        assert entry.status == WaitlistStatus.ACTIVE
        assert harness.uow.commits == 1

    @pytest.mark.asyncio
    async def test_unknown_or_inactive_service(self, harness, store, customer):
        store.add_service(Service(id="svc-old", tenant_id=TENANT_ID, name="Retired", is_active=False))

        with pytest.raises(EntityNotFoundException):
            await harness.waitlist.join_waitlist(TENANT_ID, JoinWaitlistRequest(customer.id, "missing"))
        with pytest.raises(EntityNotFoundException):
            await harness.waitlist.join_waitlist(TENANT_ID, JoinWaitlistRequest(customer.id, "svc-old"))

    @pytest.mark.asyncio
    async def test_duplicate_active_entry(self, harness, service, customer):
        request = JoinWaitlistRequest(customer_id=customer.id, service_id=service.id)
        await harness.waitlist.join_waitlist(TENANT_ID, request)

        with pytest.raises(DuplicateEntityException):
            await harness.waitlist.join_waitlist(TENANT_ID, request)

    @pytest.mark.asyncio
    async def test_can_rejoin_after_cancelling(self, harness, service, customer):
        request = JoinWaitlistRequest(customer_id=customer.id, service_id=service.id)
        first = await harness.waitlist.join_waitlist(TENANT_ID, request)
        await harness.waitlist.cancel_entry(TENANT_ID, first.id)

        second = await harness.waitlist.join_waitlist(TENANT_ID, request)

        assert second.id != first.id


class TestEntryManagement:
    @pytest.mark.asyncio
    async def test_get_missing_entry(self, harness):
        with pytest.raises(EntityNotFoundException, match="Waitlist entry not found"):
            await harness.waitlist.get_entry(TENANT_ID, "missing")

    @pytest.mark.asyncio
    async def test_update_entry(self, harness, staff, seed_entry, customer):
        entry = seed_entry(customer.id)

        updated = await harness.waitlist.update_entry(TENANT_ID, entry.id, notes="Any weekday", staff_id=staff.id)

        assert (updated.notes, updated.staff_id) == ("Any weekday", staff.id)

    @pytest.mark.asyncio
    async def test_booked_entry_cannot_be_cancelled(self, harness, seed_entry, customer):
        entry = seed_entry(customer.id, status=WaitlistStatus.BOOKED)

        with pytest.raises(InvalidOperationException, match="Cannot cancel a booked waitlist entry"):
            await harness.waitlist.cancel_entry(TENANT_ID, entry.id)

    @pytest.mark.asyncio
    async def test_resolve_links_booking(self, harness, clock, seed_entry, customer):
        entry = seed_entry(customer.id)

        resolved = await harness.waitlist.resolve_entry(TENANT_ID, entry.id, "booking-9")

        assert resolved.status == WaitlistStatus.BOOKED
        assert (resolved.booking_id, resolved.claimed_at) == ("booking-9", clock.now)

    @pytest.mark.asyncio
    async def test_filters(self, harness, staff, seed_entry, customer, other_customer):
        seed_entry(customer.id, staff_id=staff.id)
        seed_entry(other_customer.id, status=WaitlistStatus.CANCELLED)

        active = await harness.waitlist.get_entries(TENANT_ID, status=WaitlistStatus.ACTIVE)
        for_staff = await harness.waitlist.get_entries(TENANT_ID, staff_id=staff.id)

        assert [e.customer_id for e in active] == [customer.id]
        assert [e.customer_id for e in for_staff] == [customer.id]


class TestOfferOpenSlot:
    @pytest.mark.asyncio
    async def test_cancellation_offers_slot_to_oldest_eligible_entries(
        self, harness, store, daytime, side_effects, notifications, staff, other_staff,
        waiting_customers, seed_entry, make_booking,
    ):
        oldest = seed_entry("cust-1", age_hours=5)
        for_alex = seed_entry("cust-2", staff_id="staff-alex", age_hours=4)
        for_blake = seed_entry("cust-3", staff_id="staff-blake", age_hours=3)
        newest = seed_entry("cust-4", age_hours=2)
        latest = seed_entry("cust-3", age_hours=1)
        booking = make_booking(THURSDAY_10)

        await harness.bookings.update_status(TENANT_ID, booking.id, BookingStatus.CANCELLED)
        await side_effects.drain()

        offered = {e.id for e in store.waitlist.values() if e.status == WaitlistStatus.OFFERED}
        assert offered == {oldest.id, for_alex.id, newest.id}
        assert store.waitlist[for_blake.id].status == WaitlistStatus.ACTIVE
        assert store.waitlist[latest.id].status == WaitlistStatus.ACTIVE

        entry = store.waitlist[oldest.id]
        assert entry.offered_slot == OfferedSlot(
            start_time=THURSDAY_10, service_name="Haircut", staff_name="Alex", staff_id="staff-alex"
        )
        assert entry.offer_expires_at == daytime + timedelta(minutes=15)

        offers = [(subject, link) for kind, subject, link in notifications.sent if kind == "waitlist_offer"]
        assert {subject for subject, _ in offers} == offered
        assert all(link.startswith("https://book.example.com/manage/waitlist/") for _, link in offers)

        [token] = harness.tokens.tokens_for(oldest.id, TokenType.WAITLIST_CLAIM)
        assert token.expires_at == daytime + timedelta(minutes=15)
        assert token.contact == "casey@example.com"

    @pytest.mark.asyncio
    async def test_repeated_cancellation_does_not_offer_the_slot_again(
        self, harness, store, daytime, side_effects, staff, waiting_customers, seed_entry, make_booking
    ):
        for age, customer_id in enumerate(["cust-1", "cust-2", "cust-3", "cust-4"]):
            seed_entry(customer_id, age_hours=5 - age)
        booking = make_booking(THURSDAY_10)

        await harness.bookings.update_status(TENANT_ID, booking.id, BookingStatus.CANCELLED)
        with pytest.raises(InvalidOperationException):
            await harness.bookings.update_status(TENANT_ID, booking.id, BookingStatus.CANCELLED)
        await side_effects.drain()

        offered = [e for e in store.waitlist.values() if e.status == WaitlistStatus.OFFERED]
        assert len(offered) == 3

    @pytest.mark.asyncio
    async def test_unassigned_booking_only_reaches_entries_without_preference(
        self, harness, daytime, waiting_customers, seed_entry, make_booking
    ):
        anyone = seed_entry("cust-1", age_hours=3)
        seed_entry("cust-2", staff_id="staff-alex", age_hours=4)
        booking = await cancelled_booking(harness, make_booking, staff_id=None)

        offered = await harness.waitlist.offer_open_slot(booking)

        assert offered == 1
        assert (await harness.waitlist.get_entry(TENANT_ID, anyone.id)).status == WaitlistStatus.OFFERED

    @pytest.mark.asyncio
    async def test_offer_count_limits_offers(
        self, harness, daytime, tenant_settings, waiting_customers, seed_entry, make_booking
    ):
        tenant_settings.waitlist = WaitlistSettings(offer_count=1)
        first = seed_entry("cust-1", age_hours=3)
        seed_entry("cust-2", age_hours=2)
        booking = await cancelled_booking(harness, make_booking)

        assert await harness.waitlist.offer_open_slot(booking) == 1
        assert (await harness.waitlist.get_entry(TENANT_ID, first.id)).status == WaitlistStatus.OFFERED

    @pytest.mark.asyncio
    async def test_nothing_offered_during_quiet_hours(self, harness, store, seed_entry, customer, make_booking):
        entry = seed_entry(customer.id)
        booking = await cancelled_booking(harness, make_booking)

        # NOW is 08:00, inside 21:00-09:00
        assert await harness.waitlist.offer_open_slot(booking) == 0
        assert store.waitlist[entry.id].status == WaitlistStatus.ACTIVE

    @pytest.mark.asyncio
    async def test_quiet_hours_use_tenant_timezone(
        self, harness, tenant_settings, daytime, seed_entry, customer, make_booking
    ):
        tenant_settings.timezone = "Asia/Tokyo"  # 10:00 UTC is 19:00 in Tokyo
        tenant_settings.waitlist = WaitlistSettings(quiet_hours=QuietHours.parse("18:00", "08:00"))
        seed_entry(customer.id)
        booking = await cancelled_booking(harness, make_booking)

        assert await harness.waitlist.offer_open_slot(booking) == 0

    @pytest.mark.asyncio
    async def test_entry_without_contact_is_skipped(
        self, harness, store, daytime, waiting_customers, seed_entry, make_booking
    ):
        mute = seed_entry("cust-mute", age_hours=5)
        reachable = seed_entry("cust-1", age_hours=4)
        booking = await cancelled_booking(harness, make_booking)

        assert await harness.waitlist.offer_open_slot(booking) == 1
        assert store.waitlist[mute.id].status == WaitlistStatus.ACTIVE
        assert store.waitlist[reachable.id].status == WaitlistStatus.OFFERED

    @pytest.mark.asyncio
    async def test_offer_notification_failure_is_contained(
        self, harness, daytime, side_effects, notifications, seed_entry, customer, make_booking
    ):
        notifications.fail_on.add("waitlist_offer")
        entry = seed_entry(customer.id)
        booking = await cancelled_booking(harness, make_booking)

        assert await harness.waitlist.offer_open_slot(booking) == 1
        await side_effects.drain()

        assert side_effects.failures == 1
        assert (await harness.waitlist.get_entry(TENANT_ID, entry.id)).status == WaitlistStatus.OFFERED


class TestOfferLifecycle:
    @pytest.mark.asyncio
    async def test_expire_stale_offers(self, harness, clock, daytime, seed_entry, customer, make_booking):
        entry = seed_entry(customer.id)
        await harness.waitlist.offer_open_slot(await cancelled_booking(harness, make_booking))

        clock.advance(minutes=15)
        assert await harness.waitlist.expire_stale_offers() == 0

        clock.advance(minutes=1)
        assert await harness.waitlist.expire_stale_offers() == 1
        assert (await harness.waitlist.get_entry(TENANT_ID, entry.id)).status == WaitlistStatus.EXPIRED

    @pytest.mark.asyncio
    async def test_reserve_then_reserve_again_fails(self, harness, daytime, seed_entry, customer, make_booking):
        entry = seed_entry(customer.id)
        await harness.waitlist.offer_open_slot(await cancelled_booking(harness, make_booking))

        reserved, slot = await harness.waitlist.reserve_offer(entry.id)

        assert reserved.status == WaitlistStatus.BOOKED
        assert slot.start_time == THURSDAY_10
        with pytest.raises(InvalidOperationException, match="no longer available"):
            await harness.waitlist.reserve_offer(entry.id)

    @pytest.mark.asyncio
    async def test_reserve_unknown_entry(self, harness):
        with pytest.raises(EntityNotFoundException):
            await harness.waitlist.reserve_offer("missing")

    @pytest.mark.asyncio
    async def test_release_returns_entry_to_queue(self, harness, daytime, seed_entry, customer, make_booking):
        entry = seed_entry(customer.id)
        await harness.waitlist.offer_open_slot(await cancelled_booking(harness, make_booking))
        await harness.waitlist.reserve_offer(entry.id)

        await harness.waitlist.release_offer(entry.id)

        released = await harness.waitlist.get_entry(TENANT_ID, entry.id)
        assert released.status == WaitlistStatus.ACTIVE
        assert released.offered_slot is None

    @pytest.mark.asyncio
    async def test_release_leaves_resolved_entries_alone(self, harness, seed_entry, customer):
        entry = seed_entry(customer.id, status=WaitlistStatus.BOOKED, booking_id="booking-1")

        await harness.waitlist.release_offer(entry.id)

        assert (await harness.waitlist.get_entry(TENANT_ID, entry.id)).status == WaitlistStatus.BOOKED


class TestMetrics:
    @pytest.mark.asyncio
    async def test_metrics_over_window(self, harness, seed_entry, customer):
        offered_at = NOW - timedelta(hours=6)
        seed_entry(
            customer.id,
            age_hours=72,
            status=WaitlistStatus.BOOKED,
            offered_at=offered_at,
            claimed_at=offered_at + timedelta(minutes=10),
            booking_id="b1",
        )
        seed_entry(
            customer.id,
            age_hours=48,
            status=WaitlistStatus.BOOKED,
            offered_at=offered_at,
            claimed_at=offered_at + timedelta(minutes=20),
            booking_id="b2",
        )
        seed_entry(customer.id, age_hours=24, status=WaitlistStatus.EXPIRED, offered_at=offered_at)
        seed_entry(customer.id, age_hours=2)
        seed_entry(
            customer.id,
            age_hours=24 * 40,
            status=WaitlistStatus.BOOKED,
            offered_at=offered_at,
            claimed_at=offered_at + timedelta(minutes=90),
        )

        metrics = await harness.waitlist.get_metrics(TENANT_ID, window_days=30)

        assert metrics.to_dict() == {
            "window_days": 30,
            "total_joined": 4,
            "offered": 3,
            "claimed": 2,
            "avg_time_to_fill_minutes": 15.0,
            "fill_rate": 0.67,
        }

    @pytest.mark.asyncio
    async def test_empty_window(self, harness):
        metrics = await harness.waitlist.get_metrics(TENANT_ID, window_days=7)

        assert (metrics.total_joined, metrics.avg_time_to_fill_minutes, metrics.fill_rate) == (0, None, 0.0)
