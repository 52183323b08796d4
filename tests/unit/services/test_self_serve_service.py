"""
Unit tests for SelfServeService: booking links and waitlist claims.
"""

import asyncio
from datetime import UTC, date, datetime, timedelta

import pytest

from bookwise.core.domain import (
    BookingConflictException,
    EntityNotFoundException,
    InvalidOperationException,
    PolicyViolationException,
    TokenInvalidException,
)
from bookwise.domains.scheduling.application.dto import Actor
from bookwise.domains.scheduling.domain.entities import WaitlistEntry
from bookwise.domains.scheduling.domain.value_objects import (
    AuditLogName,
    BookingStatus,
    CalendarAction,
    PolicySettings,
    SelfServeKind,
    StaffRole,
    TokenType,
    WaitlistStatus,
    read_log,
)
from tests.conftest import NOW, TENANT_ID

ADMIN = Actor(role=StaffRole.ADMIN, staff_id="staff-admin", staff_name="Admin")
FRIDAY = date(2026, 3, 6)


def thursday(hour: int, minute: int = 0) -> datetime:
    return datetime(2026, 3, 5, hour, minute, tzinfo=UTC)


def friday(hour: int, minute: int = 0) -> datetime:
    return datetime(2026, 3, 6, hour, minute, tzinfo=UTC)


@pytest.fixture
def booking(make_booking):
    return make_booking(thursday(10))


@pytest.fixture
async def reschedule_token(harness, booking):
    return (await harness.bookings.send_reschedule_link(TENANT_ID, booking.id, ADMIN)).token


@pytest.fixture
async def cancel_token(harness, booking):
    return (await harness.bookings.send_cancel_link(TENANT_ID, booking.id, ADMIN)).token


class TestTokenValidation:
    @pytest.mark.asyncio
    async def test_unknown_token(self, harness):
        with pytest.raises(TokenInvalidException):
            await harness.self_serve.validate_token("nope", TokenType.RESCHEDULE_LINK)

    @pytest.mark.asyncio
    async def test_wrong_token_type(self, harness, cancel_token):
        with pytest.raises(TokenInvalidException):
            await harness.self_serve.validate_token(cancel_token, TokenType.RESCHEDULE_LINK)

    @pytest.mark.asyncio
    async def test_expired_token(self, harness, clock, reschedule_token):
        clock.advance(hours=49)

        with pytest.raises(TokenInvalidException, match="expired"):
            await harness.self_serve.validate_token(reschedule_token, TokenType.RESCHEDULE_LINK)

    @pytest.mark.asyncio
    async def test_token_for_deleted_booking(self, harness, store, booking, reschedule_token):
        del store.bookings[booking.id]

        with pytest.raises(EntityNotFoundException):
            await harness.self_serve.validate_token(reschedule_token, TokenType.RESCHEDULE_LINK)

    @pytest.mark.asyncio
    async def test_booking_summary(self, harness, tenant_settings, booking, cancel_token):
        tenant_settings.policy = PolicySettings(cancellation_policy_text="Please give a day's notice")

        summary = await harness.self_serve.get_booking_summary(cancel_token, TokenType.CANCEL_LINK)

        assert summary["booking"]["id"] == booking.id
        assert summary["booking"]["service_name"] == "Haircut"
        assert summary["booking"]["staff_name"] == "Alex"
        assert summary["policy_text"] == "Please give a day's notice"


class TestReschedule:
    @pytest.mark.asyncio
    async def test_availability_is_limited_to_booked_staff(self, harness, other_staff, reschedule_token):
        slots = await harness.self_serve.get_availability(reschedule_token, FRIDAY)

        assert slots
        assert {s.staff_id for s in slots} == {"staff-alex"}
        assert all(s.available for s in slots)

    @pytest.mark.asyncio
    async def test_execute_reschedule(self, harness, side_effects, calendar, booking, reschedule_token):
        moved = await harness.self_serve.execute_reschedule(reschedule_token, friday(11))
        await side_effects.drain()

        assert (moved.start_time, moved.end_time) == (friday(11), friday(12))
        entries = read_log(moved.custom_fields, AuditLogName.SELF_SERVE)
        assert [e.kind for e in entries] == [
            SelfServeKind.RESCHEDULE_LINK_SENT,
            SelfServeKind.RESCHEDULED_BY_CUSTOMER,
        ]
        assert entries[-1].new_start_time == friday(11)
        assert (booking.id, CalendarAction.UPDATE) in calendar.pushed

    @pytest.mark.asyncio
    async def test_token_cannot_be_reused(self, harness, reschedule_token):
        await harness.self_serve.execute_reschedule(reschedule_token, friday(11))

        with pytest.raises(TokenInvalidException, match="already been used"):
            await harness.self_serve.execute_reschedule(reschedule_token, friday(14))

    @pytest.mark.asyncio
    async def test_conflict_still_consumes_token(self, harness, store, booking, make_booking, reschedule_token):
        make_booking(friday(11))

        with pytest.raises(BookingConflictException):
            await harness.self_serve.execute_reschedule(reschedule_token, friday(11, 30))

        assert store.bookings[booking.id].start_time == thursday(10)
        with pytest.raises(TokenInvalidException):
            await harness.self_serve.execute_reschedule(reschedule_token, friday(14))

    @pytest.mark.asyncio
    async def test_policy_window_blocks_without_override(self, harness, tenant_settings, booking, reschedule_token):
        tenant_settings.policy = PolicySettings(policy_enabled=True, reschedule_window_hours=96)

        with pytest.raises(PolicyViolationException) as exc_info:
            await harness.self_serve.execute_reschedule(reschedule_token, friday(11))

        assert exc_info.value.admin_can_override is False
        # Rejected before consuming the token
        [record] = harness.tokens.tokens_for(booking.id, TokenType.RESCHEDULE_LINK)
        assert record.used_at is None

    @pytest.mark.asyncio
    async def test_completed_booking_cannot_be_rescheduled(self, harness, store, booking, reschedule_token):
        store.bookings[booking.id].status = BookingStatus.COMPLETED

        with pytest.raises(InvalidOperationException, match="This booking cannot be rescheduled"):
            await harness.self_serve.execute_reschedule(reschedule_token, friday(11))


class TestCancel:
    @pytest.mark.asyncio
    async def test_execute_cancel(self, harness, side_effects, notifications, calendar, booking, cancel_token):
        cancelled = await harness.self_serve.execute_cancel(cancel_token, reason="Feeling unwell")
        await side_effects.drain()

        assert cancelled.status == BookingStatus.CANCELLED
        entry = read_log(cancelled.custom_fields, AuditLogName.SELF_SERVE)[-1]
        assert entry.kind == SelfServeKind.CANCELLED_BY_CUSTOMER
        assert entry.reason == "Feeling unwell"
        assert (booking.id, CalendarAction.CANCEL) in calendar.pushed
        assert "cancellation" in notifications.kinds()

    @pytest.mark.asyncio
    async def test_already_cancelled_booking(self, harness, booking, cancel_token):
        await harness.bookings.update_status(TENANT_ID, booking.id, BookingStatus.CANCELLED, ADMIN)

        with pytest.raises(InvalidOperationException, match="This booking cannot be cancelled"):
            await harness.self_serve.execute_cancel(cancel_token)

    @pytest.mark.asyncio
    async def test_cancel_inside_policy_window(self, harness, tenant_settings, cancel_token):
        tenant_settings.policy = PolicySettings(
            policy_enabled=True,
            cancellation_window_hours=96,
            cancellation_policy_text="Four days notice please",
        )

        with pytest.raises(PolicyViolationException, match="Four days notice please"):
            await harness.self_serve.execute_cancel(cancel_token)


@pytest.fixture
def daytime(clock):
    clock.now = NOW.replace(hour=10)
    return clock.now


@pytest.fixture
def offered_entries(store, daytime, customer, other_customer, service, staff):
    """Two waiting customers, both offered the same freed Thursday 10:00 slot with Alex."""
    entries = [
        store.add_waitlist_entry(
            WaitlistEntry(
                tenant_id=TENANT_ID,
                customer_id=customer_id,
                service_id="svc-cut",
                created_at=NOW - timedelta(hours=hours),
            )
        )
        for customer_id, hours in (("cust-1", 3), ("cust-2", 2))
    ]
    return entries


async def offer_freed_slot(harness, make_booking):
    booking = make_booking(thursday(10), customer_id="cust-2")
    await harness.bookings.update_status(TENANT_ID, booking.id, BookingStatus.CANCELLED)


def claim_token(harness, entry) -> str:
    [record] = harness.tokens.tokens_for(entry.id, TokenType.WAITLIST_CLAIM)
    return record.token


class TestWaitlistClaim:
    @pytest.mark.asyncio
    async def test_claim_summary(self, harness, offered_entries, make_booking):
        await offer_freed_slot(harness, make_booking)

        summary = await harness.self_serve.get_waitlist_claim_summary(claim_token(harness, offered_entries[0]))

        assert summary["entry"]["status"] == "OFFERED"
        assert summary["entry"]["offered_slot"]["startTime"] == thursday(10).isoformat()
        assert summary["entry"]["offered_slot"]["staffName"] == "Alex"

    @pytest.mark.asyncio
    async def test_claim_books_the_offered_slot(self, harness, store, offered_entries, make_booking):
        await offer_freed_slot(harness, make_booking)
        entry = offered_entries[0]

        booking = await harness.self_serve.claim_waitlist_slot(claim_token(harness, entry))

        assert (booking.customer_id, booking.staff_id, booking.start_time) == ("cust-1", "staff-alex", thursday(10))
        assert booking.status == BookingStatus.CONFIRMED
        stored = store.waitlist[entry.id]
        assert stored.status == WaitlistStatus.BOOKED
        assert stored.booking_id == booking.id
        assert stored.claimed_at is not None

    @pytest.mark.asyncio
    async def test_concurrent_claims_with_one_token_book_once(
        self, make_harness, harness, store, offered_entries, make_booking
    ):
        await offer_freed_slot(harness, make_booking)
        token = claim_token(harness, offered_entries[0])
        first, second = make_harness(), make_harness()

        results = await asyncio.gather(
            first.self_serve.claim_waitlist_slot(token),
            second.self_serve.claim_waitlist_slot(token),
            return_exceptions=True,
        )

        assert len([r for r in results if isinstance(r, TokenInvalidException)]) == 1
        new_bookings = [b for b in store.bookings.values() if b.customer_id == "cust-1"]
        assert len(new_bookings) == 1

    @pytest.mark.asyncio
    async def test_two_entries_racing_for_one_slot(self, make_harness, harness, store, offered_entries, make_booking):
        await offer_freed_slot(harness, make_booking)
        tokens = [claim_token(harness, entry) for entry in offered_entries]
        first, second = make_harness(), make_harness()

        results = await asyncio.gather(
            first.self_serve.claim_waitlist_slot(tokens[0]),
            second.self_serve.claim_waitlist_slot(tokens[1]),
            return_exceptions=True,
        )

        winners = [i for i, r in enumerate(results) if not isinstance(r, Exception)]
        losers = [i for i, r in enumerate(results) if isinstance(r, BookingConflictException)]
        assert len(winners) == 1 and len(losers) == 1

        blocking = [b for b in store.bookings.values() if b.status.is_blocking()]
        assert len(blocking) == 1

        loser = store.waitlist[offered_entries[losers[0]].id]
        assert loser.status == WaitlistStatus.ACTIVE
        assert loser.offered_slot is None
        assert store.waitlist[offered_entries[winners[0]].id].status == WaitlistStatus.BOOKED

    @pytest.mark.asyncio
    async def test_expired_offer_cannot_be_claimed(self, harness, clock, offered_entries, make_booking):
        await offer_freed_slot(harness, make_booking)
        token = claim_token(harness, offered_entries[0])
        clock.advance(minutes=16)

        with pytest.raises(TokenInvalidException, match="expired"):
            await harness.self_serve.claim_waitlist_slot(token)

    @pytest.mark.asyncio
    async def test_withdrawn_entry_summary(self, harness, offered_entries, make_booking):
        await offer_freed_slot(harness, make_booking)
        entry = offered_entries[0]
        await harness.waitlist.cancel_entry(TENANT_ID, entry.id)

        with pytest.raises(InvalidOperationException, match="no longer available"):
            await harness.self_serve.get_waitlist_claim_summary(claim_token(harness, entry))

    @pytest.mark.asyncio
    async def test_withdrawn_entry_cannot_be_claimed(self, harness, offered_entries, make_booking):
        await offer_freed_slot(harness, make_booking)
        entry = offered_entries[0]
        token = claim_token(harness, entry)
        await harness.waitlist.cancel_entry(TENANT_ID, entry.id)

        with pytest.raises(InvalidOperationException, match="no longer available"):
            await harness.self_serve.claim_waitlist_slot(token)
