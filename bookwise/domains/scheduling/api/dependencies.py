"""
Scheduling API Dependencies

FastAPI dependencies for the scheduling domain.
"""

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from bookwise.config.settings import get_settings
from bookwise.core.container import SchedulingServices, get_container
from bookwise.core.domain import ValidationException
from bookwise.database.async_db import get_async_db
from bookwise.domains.scheduling.application.services import (
    AvailabilityService,
    BookingService,
    RecurringBookingService,
    SelfServeService,
    StaffScheduleService,
    WaitlistService,
)

# Type alias for database session dependency
DbSession = Annotated[AsyncSession, Depends(get_async_db)]


def get_tenant_id(request: Request) -> str:
    """Tenant of the request, taken from the configured tenant header."""
    header = get_settings().TENANT_HEADER
    tenant_id = request.headers.get(header)
    if not tenant_id:
        raise ValidationException(f"Missing {header} header", field=header)
    return tenant_id


def get_scheduling_services(db: DbSession) -> SchedulingServices:
    """Scheduling services bound to the request's database session."""
    return get_container().scheduling.for_session(db)


ServicesDep = Annotated[SchedulingServices, Depends(get_scheduling_services)]


def get_availability_service(services: ServicesDep) -> AvailabilityService:
    return services.availability_service()


def get_booking_service(services: ServicesDep) -> BookingService:
    return services.booking_service()


def get_waitlist_service(services: ServicesDep) -> WaitlistService:
    return services.waitlist_service()


def get_self_serve_service(services: ServicesDep) -> SelfServeService:
    return services.self_serve_service()


def get_staff_schedule_service(services: ServicesDep) -> StaffScheduleService:
    return services.staff_schedule_service()


def get_recurring_booking_service(services: ServicesDep) -> RecurringBookingService:
    return services.recurring_booking_service()


__all__ = [
    "get_tenant_id",
    "get_scheduling_services",
    "get_availability_service",
    "get_booking_service",
    "get_waitlist_service",
    "get_self_serve_service",
    "get_staff_schedule_service",
    "get_recurring_booking_service",
]
