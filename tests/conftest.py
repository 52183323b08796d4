"""
Shared pytest fixtures for all tests.

Provides a fixed clock, an in-memory store seeded with one tenant's catalog,
and a factory for per-session service harnesses.
"""

import os
from datetime import UTC, datetime, time, timedelta

import pytest

# Ensure test environment before any settings are read
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("SCHEDULER_ENABLED", "false")
os.environ.setdefault("WEB_URL", "https://book.example.com")

from bookwise.core.shared import SideEffectRunner  # noqa: E402
from bookwise.domains.scheduling.domain.entities import (  # noqa: E402
    Booking,
    Customer,
    Service,
    Staff,
    WorkingHours,
)
from bookwise.domains.scheduling.domain.value_objects import BookingStatus, ServiceKind  # noqa: E402

from tests.fakes import (  # noqa: E402
    FakeCalendarSync,
    FixedClock,
    InMemoryStore,
    RecordingNotificationDispatcher,
    SchedulingHarness,
    StaticTenantSettings,
)

TENANT_ID = "tenant-1"

# Monday 2 March 2026, 08:00 UTC
NOW = datetime(2026, 3, 2, 8, 0, tzinfo=UTC)


def weekday_hours(start: time = time(9, 0), end: time = time(17, 0)) -> list[WorkingHours]:
    """Monday to Friday working hours, weekends off."""
    return [WorkingHours(day_of_week=day, start_time=start, end_time=end) for day in range(5)] + [
        WorkingHours(day_of_week=day, start_time=time(0, 0), end_time=time(0, 0), is_off=True) for day in (5, 6)
    ]


# ============================================================================
# CORE FIXTURES
# ============================================================================


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(NOW)


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def tenant_settings() -> StaticTenantSettings:
    return StaticTenantSettings()


@pytest.fixture
def notifications() -> RecordingNotificationDispatcher:
    return RecordingNotificationDispatcher()


@pytest.fixture
def calendar() -> FakeCalendarSync:
    return FakeCalendarSync()


@pytest.fixture
async def side_effects():
    runner = SideEffectRunner()
    yield runner
    await runner.drain(timeout=1.0)


# ============================================================================
# CATALOG FIXTURES
# ============================================================================


@pytest.fixture
def service(store: InMemoryStore) -> Service:
    return store.add_service(
        Service(id="svc-cut", tenant_id=TENANT_ID, name="Haircut", duration_minutes=60, kind=ServiceKind.OTHER)
    )


@pytest.fixture
def deposit_service(store: InMemoryStore) -> Service:
    return store.add_service(
        Service(
            id="svc-color",
            tenant_id=TENANT_ID,
            name="Color",
            duration_minutes=90,
            deposit_required=True,
            kind=ServiceKind.TREATMENT,
        )
    )


@pytest.fixture
def staff(store: InMemoryStore) -> Staff:
    return store.add_staff(Staff(id="staff-alex", tenant_id=TENANT_ID, name="Alex", working_hours=weekday_hours()))


@pytest.fixture
def other_staff(store: InMemoryStore) -> Staff:
    return store.add_staff(Staff(id="staff-blake", tenant_id=TENANT_ID, name="Blake", working_hours=weekday_hours()))


@pytest.fixture
def customer(store: InMemoryStore) -> Customer:
    return store.add_customer(
        Customer(id="cust-1", tenant_id=TENANT_ID, name="Casey", email="casey@example.com")
    )


@pytest.fixture
def other_customer(store: InMemoryStore) -> Customer:
    return store.add_customer(Customer(id="cust-2", tenant_id=TENANT_ID, name="Devon", phone="+15550100"))


# ============================================================================
# SERVICE HARNESS
# ============================================================================


@pytest.fixture
def make_harness(store, clock, tenant_settings, notifications, calendar, side_effects):
    """Build the services of one session; call twice for two concurrent sessions."""

    def _make() -> SchedulingHarness:
        return SchedulingHarness(
            store=store,
            clock=clock,
            tenant_settings=tenant_settings,
            notifications=notifications,
            calendar=calendar,
            side_effects=side_effects,
        )

    return _make


@pytest.fixture
def harness(make_harness) -> SchedulingHarness:
    return make_harness()


@pytest.fixture
def make_booking(store, service, staff, customer):
    """Seed a booking directly in the store (defaults: Haircut with Alex for Casey)."""

    def _make(
        start: datetime,
        staff_id: str | None = "staff-alex",
        status: BookingStatus = BookingStatus.CONFIRMED,
        service_id: str = "svc-cut",
        customer_id: str = "cust-1",
        duration_minutes: int = 60,
    ) -> Booking:
        return store.add_booking(
            Booking(
                tenant_id=TENANT_ID,
                customer_id=customer_id,
                service_id=service_id,
                staff_id=staff_id,
                start_time=start,
                end_time=start + timedelta(minutes=duration_minutes),
                status=status,
            )
        )

    return _make
