"""
SQLAlchemy repository tests against a mocked AsyncSession.

Statements are compiled with the PostgreSQL dialect to check the locking
and overlap clauses the services rely on.
"""

from datetime import UTC, date, datetime, time
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.dialects import postgresql

from bookwise.domains.scheduling.domain.entities import RecurringSeries, TimeOff, WorkingHours
from bookwise.domains.scheduling.domain.value_objects import QuietHours, WaitlistSettings
from bookwise.domains.scheduling.infrastructure.persistence.sqlalchemy.models import (
    RecurringSeriesModel,
    TenantModel,
    TimeOffModel,
    WorkingHoursModel,
)
from bookwise.domains.scheduling.infrastructure.repositories import (
    SQLAlchemyBookingRepository,
    SQLAlchemyCatalogRepository,
    SQLAlchemyRecurringSeriesRepository,
    SQLAlchemyTenantSettingsRepository,
    SQLAlchemyWaitlistRepository,
)

START = datetime(2026, 3, 5, 10, 0, tzinfo=UTC)
END = datetime(2026, 3, 5, 11, 0, tzinfo=UTC)


def make_session(scalar=None):
    result = MagicMock()
    result.scalar_one_or_none.return_value = scalar
    session = MagicMock()
    session.execute = AsyncMock(return_value=result)
    session.flush = AsyncMock()
    return session


def executed_sql(session) -> str:
    statement = session.execute.call_args.args[0]
    return str(statement.compile(dialect=postgresql.dialect()))


class TestBookingRepositoryQueries:
    @pytest.mark.asyncio
    async def test_find_for_update_locks_the_row(self):
        session = make_session()
        repo = SQLAlchemyBookingRepository(session)

        assert await repo.find_by_id_for_update("t1", "b1") is None

        sql = executed_sql(session)
        assert "FROM bookings" in sql
        assert sql.rstrip().endswith("FOR UPDATE")

    @pytest.mark.asyncio
    async def test_lock_staff(self):
        session = make_session(scalar="staff-1")
        repo = SQLAlchemyBookingRepository(session)

        assert await repo.lock_staff("t1", "staff-1") is True

        sql = executed_sql(session)
        assert "FROM staff" in sql
        assert "FOR UPDATE" in sql

    @pytest.mark.asyncio
    async def test_lock_unknown_staff(self):
        repo = SQLAlchemyBookingRepository(make_session(scalar=None))

        assert await repo.lock_staff("t1", "ghost") is False

    @pytest.mark.asyncio
    async def test_conflict_query_uses_half_open_overlap(self):
        session = make_session(scalar=None)
        repo = SQLAlchemyBookingRepository(session)

        assert await repo.has_conflict("t1", "staff-1", START, END, exclude_booking_id="b1") is False

        sql = executed_sql(session)
        assert "bookings.start_time < %(start_time_1)s" in sql
        assert "bookings.end_time > %(end_time_1)s" in sql
        assert "bookings.id != %(id_1)s" in sql
        assert "bookings.status IN" in sql

    @pytest.mark.asyncio
    async def test_conflict_found(self):
        repo = SQLAlchemyBookingRepository(make_session(scalar="b2"))

        assert await repo.has_conflict("t1", "staff-1", START, END) is True

    @pytest.mark.asyncio
    async def test_calendar_query_keeps_bookings_inside_the_range(self):
        session = make_session()
        repo = SQLAlchemyBookingRepository(session)

        assert await repo.find_calendar("t1", START, END, staff_id="staff-1") == []

        sql = executed_sql(session)
        assert "bookings.start_time >=" in sql
        assert "bookings.end_time <=" in sql
        assert "bookings.staff_id =" in sql
        assert "bookings.status IN" in sql
        assert "ORDER BY bookings.start_time" in sql

    @pytest.mark.asyncio
    async def test_series_query(self):
        session = make_session()
        repo = SQLAlchemyBookingRepository(session)

        assert await repo.find_by_series("t1", "series-1") == []

        sql = executed_sql(session)
        assert "bookings.recurring_series_id =" in sql
        assert "bookings.tenant_id =" in sql


class TestCatalogRepositoryWrites:
    @pytest.mark.asyncio
    async def test_upsert_updates_existing_days_and_adds_new_ones(self):
        monday = WorkingHoursModel(staff_id="s1", day_of_week=0, start_time=time(9), end_time=time(17), is_off=False)
        session = make_session()
        session.execute.return_value.scalars.return_value.all.return_value = [monday]
        session.add = MagicMock()
        repo = SQLAlchemyCatalogRepository(session)

        await repo.upsert_working_hours(
            "s1",
            [
                WorkingHours(day_of_week=0, start_time=time(12), end_time=time(20)),
                WorkingHours(day_of_week=3, start_time=time(8), end_time=time(12)),
            ],
        )

        assert (monday.start_time, monday.end_time) == (time(12), time(20))
        added = session.add.call_args.args[0]
        assert (added.staff_id, added.day_of_week, added.start_time) == ("s1", 3, time(8))
        assert session.add.call_count == 1
        session.flush.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_add_time_off_assigns_an_id(self):
        session = make_session()
        session.add = MagicMock()
        repo = SQLAlchemyCatalogRepository(session)

        stored = await repo.add_time_off("s1", TimeOff(start_date=date(2026, 3, 9), end_date=date(2026, 3, 13)))

        assert stored.id
        assert session.add.call_args.args[0].staff_id == "s1"

    @pytest.mark.asyncio
    async def test_time_off_lookup_is_scoped_through_staff(self):
        model = TimeOffModel(id="off-1", staff_id="s1", start_date=date(2026, 3, 9), end_date=date(2026, 3, 9))
        session = make_session(scalar=model)
        repo = SQLAlchemyCatalogRepository(session)

        found = await repo.find_time_off("t1", "off-1")

        assert found == TimeOff(start_date=date(2026, 3, 9), end_date=date(2026, 3, 9))
        assert found.id == "off-1"
        sql = executed_sql(session)
        assert "JOIN staff ON staff.id = time_off.staff_id" in sql
        assert "staff.tenant_id =" in sql

    @pytest.mark.asyncio
    async def test_delete_time_off(self):
        session = make_session()
        repo = SQLAlchemyCatalogRepository(session)

        await repo.delete_time_off("off-1")

        assert executed_sql(session).startswith("DELETE FROM time_off")


class TestRecurringSeriesRepository:
    @pytest.mark.asyncio
    async def test_add_assigns_an_id(self):
        session = make_session()
        session.add = MagicMock()
        repo = SQLAlchemyRecurringSeriesRepository(session)

        series = await repo.add(
            RecurringSeries(
                tenant_id="t1",
                customer_id="c1",
                service_id="svc",
                start_date=date(2026, 3, 3),
                days_of_week=[1, 3],
                total_count=4,
            )
        )

        assert series.id
        assert session.add.call_args.args[0].days_of_week == [1, 3]

    @pytest.mark.asyncio
    async def test_find_maps_the_rule(self):
        model = RecurringSeriesModel(
            id="series-1",
            tenant_id="t1",
            customer_id="c1",
            service_id="svc",
            start_date=date(2026, 3, 3),
            time_of_day=time(10),
            days_of_week=[1, 3],
            interval_weeks=2,
            total_count=8,
        )
        repo = SQLAlchemyRecurringSeriesRepository(make_session(scalar=model))

        series = await repo.find_by_id("t1", "series-1")

        assert (series.id, series.days_of_week, series.interval_weeks, series.total_count) == ("series-1", [1, 3], 2, 8)
        assert series.bookings == []


class TestWaitlistRepositoryQueries:
    @pytest.mark.asyncio
    async def test_find_for_update_locks_the_row(self):
        session = make_session()
        repo = SQLAlchemyWaitlistRepository(session)

        assert await repo.find_by_id_for_update("w1") is None
        assert "FOR UPDATE" in executed_sql(session)


class TestTenantSettingsRepository:
    @pytest.fixture
    def tenant(self):
        return TenantModel(
            id="t1",
            name="Salon",
            slug="salon",
            timezone="Europe/Berlin",
            policy_settings={"policyEnabled": True, "cancellationWindowHours": 12},
            notification_settings=None,
            waitlist_settings={"offerCount": 2, "quietStart": "22:00", "quietEnd": "06:00"},
        )

    @pytest.mark.asyncio
    async def test_overrides_are_merged_with_defaults(self, tenant):
        repo = SQLAlchemyTenantSettingsRepository(make_session(scalar=tenant))

        policy = await repo.get_policy_settings("t1")
        waitlist = await repo.get_waitlist_settings("t1")
        notifications = await repo.get_notification_settings("t1")

        assert (policy.policy_enabled, policy.cancellation_window_hours, policy.reschedule_window_hours) == (
            True,
            12,
            24,
        )
        assert waitlist == WaitlistSettings(offer_count=2, quiet_hours=QuietHours.parse("22:00", "06:00"))
        assert notifications.follow_up_delay_hours == 2
        assert await repo.get_timezone("t1") == "Europe/Berlin"

    @pytest.mark.asyncio
    async def test_invalid_waitlist_settings_fall_back_to_defaults(self, tenant):
        tenant.waitlist_settings = {"expiryMinutes": 0}
        repo = SQLAlchemyTenantSettingsRepository(make_session(scalar=tenant))

        assert await repo.get_waitlist_settings("t1") == WaitlistSettings()

    @pytest.mark.asyncio
    async def test_unknown_tenant(self):
        repo = SQLAlchemyTenantSettingsRepository(make_session(scalar=None), default_timezone="America/Chicago")

        assert await repo.get_policy_settings("nope") is None
        assert await repo.get_waitlist_settings("nope") is None
        assert await repo.get_timezone("nope") == "America/Chicago"
