"""
Scheduling API Routes

FastAPI routers for availability, bookings, recurring series, staff schedules,
the waitlist and the public self-serve (token authorized) pages.
"""

from datetime import date, datetime
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query, status

from bookwise.domains.scheduling.api.dependencies import (
    get_availability_service,
    get_booking_service,
    get_recurring_booking_service,
    get_self_serve_service,
    get_staff_schedule_service,
    get_tenant_id,
    get_waitlist_service,
)
from bookwise.domains.scheduling.api.schemas import (
    BookingCreateRequest,
    BookingListResponse,
    BookingResponse,
    BookingUpdateRequest,
    BulkUpdateRequest,
    BulkUpdateResponse,
    PolicyCheckResponse,
    SeriesCancelRequest,
    SeriesCancelResponse,
    SeriesCreateRequest,
    SeriesResponse,
    SelfServeCancelRequest,
    SelfServeLinkRequest,
    SelfServeLinkResponse,
    SelfServeRescheduleRequest,
    SlotResponse,
    StaffCalendarContextResponse,
    StatusUpdateRequest,
    TimeOffCreateRequest,
    TimeOffResponse,
    WaitlistEntryResponse,
    WaitlistJoinRequest,
    WaitlistMetricsResponse,
    WaitlistResolveRequest,
    WaitlistUpdateRequest,
    WorkingHoursSchema,
    WorkingHoursUpdateRequest,
)
from bookwise.domains.scheduling.application.dto import (
    BulkUpdatePayload,
    CreateBookingRequest,
    CreateSeriesRequest,
    JoinWaitlistRequest,
    UpdateBookingRequest,
)
from bookwise.domains.scheduling.application.ports import BookingFilters
from bookwise.domains.scheduling.application.services import (
    AvailabilityService,
    BookingService,
    RecurringBookingService,
    SelfServeService,
    StaffScheduleService,
    WaitlistService,
)
from bookwise.domains.scheduling.domain.value_objects import (
    BookingStatus,
    PolicyAction,
    TokenType,
    WaitlistStatus,
)

availability_router = APIRouter(prefix="/availability", tags=["Availability"])
bookings_router = APIRouter(prefix="/bookings", tags=["Bookings"])
waitlist_router = APIRouter(prefix="/waitlist", tags=["Waitlist"])
staff_router = APIRouter(prefix="/staff", tags=["Staff Schedules"])
recurring_router = APIRouter(prefix="/recurring-series", tags=["Recurring Series"])
manage_router = APIRouter(prefix="/manage", tags=["Self-Serve"])

# Type aliases for service dependencies
TenantId = Annotated[str, Depends(get_tenant_id)]
AvailabilityServiceDep = Annotated[AvailabilityService, Depends(get_availability_service)]
BookingServiceDep = Annotated[BookingService, Depends(get_booking_service)]
WaitlistServiceDep = Annotated[WaitlistService, Depends(get_waitlist_service)]
SelfServeServiceDep = Annotated[SelfServeService, Depends(get_self_serve_service)]
StaffScheduleServiceDep = Annotated[StaffScheduleService, Depends(get_staff_schedule_service)]
RecurringServiceDep = Annotated[RecurringBookingService, Depends(get_recurring_booking_service)]


# ============================================================
# AVAILABILITY
# ============================================================


@availability_router.get("", response_model=list[SlotResponse])
async def get_availability(
    tenant_id: TenantId,
    service: AvailabilityServiceDep,
    service_id: str = Query(..., alias="serviceId"),
    day: date = Query(..., alias="date"),
    staff_id: str | None = Query(None, alias="staffId"),
):
    """Candidate slots for every eligible staff member on a day."""
    slots = await service.get_available_slots(tenant_id, day, service_id, staff_id)
    return [SlotResponse.from_slot(slot) for slot in slots]


@availability_router.get("/recommended", response_model=list[SlotResponse])
async def get_recommended_slots(
    tenant_id: TenantId,
    service: AvailabilityServiceDep,
    service_id: str = Query(..., alias="serviceId"),
    day: date = Query(..., alias="date"),
    exclude_booking_id: str | None = Query(None, alias="excludeBookingId"),
    limit: int = Query(5, ge=1, le=20),
):
    """Best open slots, near midday and on less loaded staff first."""
    slots = await service.get_recommended_slots(tenant_id, day, service_id, exclude_booking_id, limit)
    return [SlotResponse.from_slot(slot) for slot in slots]


# ============================================================
# BOOKINGS
# ============================================================


@bookings_router.post("", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def create_booking(
    request: BookingCreateRequest,
    tenant_id: TenantId,
    service: BookingServiceDep,
):
    """Create a booking. 409 when the staff member is already busy."""
    booking = await service.create(
        tenant_id,
        CreateBookingRequest(
            customer_id=request.customer_id,
            service_id=request.service_id,
            start_time=request.start_time,
            staff_id=request.staff_id,
            notes=request.notes,
            custom_fields=request.custom_fields,
        ),
    )
    return BookingResponse.from_entity(booking)


@bookings_router.get("", response_model=BookingListResponse)
async def list_bookings(
    tenant_id: TenantId,
    service: BookingServiceDep,
    booking_status: BookingStatus | None = Query(None, alias="status"),
    staff_id: str | None = Query(None, alias="staffId"),
    customer_id: str | None = Query(None, alias="customerId"),
    service_id: str | None = Query(None, alias="serviceId"),
    date_from: datetime | None = Query(None, alias="dateFrom"),
    date_to: datetime | None = Query(None, alias="dateTo"),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100, alias="pageSize"),
):
    """List bookings, earliest first."""
    result = await service.find_all(
        tenant_id,
        BookingFilters(
            status=booking_status,
            staff_id=staff_id,
            customer_id=customer_id,
            service_id=service_id,
            date_from=date_from,
            date_to=date_to,
        ),
        page=page,
        page_size=page_size,
    )
    return BookingListResponse(
        items=[BookingResponse.from_entity(b) for b in result.items],
        total=result.total,
        page=result.page,
        page_size=result.page_size,
        total_pages=result.total_pages,
    )


@bookings_router.post("/bulk", response_model=BulkUpdateResponse)
async def bulk_update_bookings(
    request: BulkUpdateRequest,
    tenant_id: TenantId,
    service: BookingServiceDep,
):
    """Change status or staff of many bookings at once."""
    result = await service.bulk_update(
        tenant_id,
        request.ids,
        request.action,
        BulkUpdatePayload(status=request.payload.status, staff_id=request.payload.staff_id),
        actor_role=request.actor_role,
    )
    return BulkUpdateResponse(updated=result.updated)


@bookings_router.get("/calendar", response_model=list[BookingResponse])
async def get_booking_calendar(
    tenant_id: TenantId,
    service: BookingServiceDep,
    date_from: datetime = Query(..., alias="dateFrom"),
    date_to: datetime = Query(..., alias="dateTo"),
    staff_id: str | None = Query(None, alias="staffId"),
):
    """Active bookings lying entirely inside the range, earliest first."""
    bookings = await service.get_calendar(tenant_id, date_from, date_to, staff_id)
    return [BookingResponse.from_entity(b) for b in bookings]


@bookings_router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking(
    booking_id: str,
    tenant_id: TenantId,
    service: BookingServiceDep,
):
    booking = await service.get(tenant_id, booking_id)
    return BookingResponse.from_entity(booking)


@bookings_router.patch("/{booking_id}", response_model=BookingResponse)
async def update_booking(
    booking_id: str,
    request: BookingUpdateRequest,
    tenant_id: TenantId,
    service: BookingServiceDep,
):
    """Edit time, staff, notes or custom fields."""
    booking = await service.update(
        tenant_id,
        booking_id,
        UpdateBookingRequest(
            start_time=request.start_time,
            staff_id=request.staff_id,
            notes=request.notes,
            custom_fields=request.custom_fields,
        ),
    )
    return BookingResponse.from_entity(booking)


@bookings_router.patch("/{booking_id}/status", response_model=BookingResponse)
async def update_booking_status(
    booking_id: str,
    request: StatusUpdateRequest,
    tenant_id: TenantId,
    service: BookingServiceDep,
):
    """Move a booking through its lifecycle."""
    actor = request.actor.to_actor() if request.actor else None
    booking = await service.update_status(tenant_id, booking_id, request.status, actor)
    return BookingResponse.from_entity(booking)


@bookings_router.get("/{booking_id}/policy-check", response_model=PolicyCheckResponse)
async def check_booking_policy(
    booking_id: str,
    tenant_id: TenantId,
    service: BookingServiceDep,
    action: PolicyAction = Query(PolicyAction.CANCEL),
):
    decision = await service.check_policy_allowed(tenant_id, booking_id, action)
    return PolicyCheckResponse(**decision.to_dict())


@bookings_router.post("/{booking_id}/deposit-request", response_model=BookingResponse)
async def send_deposit_request(
    booking_id: str,
    tenant_id: TenantId,
    service: BookingServiceDep,
):
    booking = await service.send_deposit_request(tenant_id, booking_id)
    return BookingResponse.from_entity(booking)


@bookings_router.post("/{booking_id}/reschedule-link", response_model=SelfServeLinkResponse)
async def send_reschedule_link(
    booking_id: str,
    request: SelfServeLinkRequest,
    tenant_id: TenantId,
    service: BookingServiceDep,
):
    link = await service.send_reschedule_link(tenant_id, booking_id, request.actor.to_actor())
    return SelfServeLinkResponse(token=link.token, link=link.link)


@bookings_router.post("/{booking_id}/cancel-link", response_model=SelfServeLinkResponse)
async def send_cancel_link(
    booking_id: str,
    request: SelfServeLinkRequest,
    tenant_id: TenantId,
    service: BookingServiceDep,
):
    link = await service.send_cancel_link(tenant_id, booking_id, request.actor.to_actor())
    return SelfServeLinkResponse(token=link.token, link=link.link)


# ============================================================
# RECURRING SERIES
# ============================================================


@recurring_router.post("", response_model=SeriesResponse, status_code=status.HTTP_201_CREATED)
async def create_recurring_series(
    request: SeriesCreateRequest,
    tenant_id: TenantId,
    service: RecurringServiceDep,
):
    """Create a weekly series and all of its bookings. 409 on any staff conflict."""
    series = await service.create_series(
        tenant_id,
        CreateSeriesRequest(
            customer_id=request.customer_id,
            service_id=request.service_id,
            staff_id=request.staff_id,
            start_date=request.start_date,
            time_of_day=request.time_of_day,
            days_of_week=request.days_of_week,
            interval_weeks=request.interval_weeks,
            total_count=request.total_count,
            ends_on=request.ends_on,
            notes=request.notes,
        ),
    )
    return SeriesResponse.from_entity(series)


@recurring_router.get("/{series_id}", response_model=SeriesResponse)
async def get_recurring_series(
    series_id: str,
    tenant_id: TenantId,
    service: RecurringServiceDep,
):
    series = await service.get_series(tenant_id, series_id)
    return SeriesResponse.from_entity(series)


@recurring_router.post("/{series_id}/cancel", response_model=SeriesCancelResponse)
async def cancel_recurring_series(
    series_id: str,
    request: SeriesCancelRequest,
    tenant_id: TenantId,
    service: RecurringServiceDep,
):
    """Cancel one occurrence, this and later occurrences, or the whole series."""
    result = await service.cancel_series(tenant_id, series_id, request.scope, request.booking_id)
    return SeriesCancelResponse(cancelled=result.cancelled)


# ============================================================
# STAFF SCHEDULES
# ============================================================


@staff_router.get("/calendar-context", response_model=dict[str, StaffCalendarContextResponse])
async def get_calendar_context(
    tenant_id: TenantId,
    service: StaffScheduleServiceDep,
    staff_ids: list[str] = Query(..., alias="staffIds"),
    date_from: date = Query(..., alias="dateFrom"),
    date_to: date = Query(..., alias="dateTo"),
):
    """Working hours and overlapping time off per staff member."""
    context = await service.get_calendar_context(tenant_id, staff_ids, date_from, date_to)
    return {
        staff_id: StaffCalendarContextResponse(
            working_hours=[WorkingHoursSchema.from_entity(row) for row in item.working_hours],
            time_off=[TimeOffResponse.from_entity(period) for period in item.time_off],
        )
        for staff_id, item in context.items()
    }


@staff_router.delete("/time-off/{time_off_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_time_off(
    time_off_id: str,
    tenant_id: TenantId,
    service: StaffScheduleServiceDep,
):
    await service.remove_time_off(tenant_id, time_off_id)


@staff_router.get("/{staff_id}/working-hours", response_model=list[WorkingHoursSchema])
async def get_working_hours(
    staff_id: str,
    tenant_id: TenantId,
    service: StaffScheduleServiceDep,
):
    hours = await service.get_working_hours(tenant_id, staff_id)
    return [WorkingHoursSchema.from_entity(row) for row in hours]


@staff_router.put("/{staff_id}/working-hours", response_model=list[WorkingHoursSchema])
async def set_working_hours(
    staff_id: str,
    request: WorkingHoursUpdateRequest,
    tenant_id: TenantId,
    service: StaffScheduleServiceDep,
):
    """Upsert the given weekdays; weekdays left out keep their hours."""
    hours = await service.set_working_hours(tenant_id, staff_id, [row.to_entity() for row in request.hours])
    return [WorkingHoursSchema.from_entity(row) for row in hours]


@staff_router.get("/{staff_id}/time-off", response_model=list[TimeOffResponse])
async def get_time_off(
    staff_id: str,
    tenant_id: TenantId,
    service: StaffScheduleServiceDep,
):
    """Time off that has not ended yet."""
    periods = await service.get_time_off(tenant_id, staff_id)
    return [TimeOffResponse.from_entity(period) for period in periods]


@staff_router.post("/{staff_id}/time-off", response_model=TimeOffResponse, status_code=status.HTTP_201_CREATED)
async def add_time_off(
    staff_id: str,
    request: TimeOffCreateRequest,
    tenant_id: TenantId,
    service: StaffScheduleServiceDep,
):
    time_off = await service.add_time_off(tenant_id, staff_id, request.start_date, request.end_date, request.reason)
    return TimeOffResponse.from_entity(time_off)


# ============================================================
# WAITLIST
# ============================================================


@waitlist_router.post("", response_model=WaitlistEntryResponse, status_code=status.HTTP_201_CREATED)
async def join_waitlist(
    request: WaitlistJoinRequest,
    tenant_id: TenantId,
    service: WaitlistServiceDep,
):
    entry = await service.join_waitlist(
        tenant_id,
        JoinWaitlistRequest(
            customer_id=request.customer_id,
            service_id=request.service_id,
            staff_id=request.staff_id,
            notes=request.notes,
        ),
    )
    return WaitlistEntryResponse.from_entity(entry)


@waitlist_router.get("", response_model=list[WaitlistEntryResponse])
async def list_waitlist_entries(
    tenant_id: TenantId,
    service: WaitlistServiceDep,
    entry_status: WaitlistStatus | None = Query(None, alias="status"),
    service_id: str | None = Query(None, alias="serviceId"),
    staff_id: str | None = Query(None, alias="staffId"),
):
    entries = await service.get_entries(tenant_id, status=entry_status, service_id=service_id, staff_id=staff_id)
    return [WaitlistEntryResponse.from_entity(e) for e in entries]


@waitlist_router.get("/metrics", response_model=WaitlistMetricsResponse)
async def get_waitlist_metrics(
    tenant_id: TenantId,
    service: WaitlistServiceDep,
    window_days: int = Query(30, ge=1, le=365, alias="windowDays"),
):
    """Join, offer and claim counts over a rolling window."""
    metrics = await service.get_metrics(tenant_id, window_days)
    return WaitlistMetricsResponse(**metrics.to_dict())


@waitlist_router.get("/{entry_id}", response_model=WaitlistEntryResponse)
async def get_waitlist_entry(
    entry_id: str,
    tenant_id: TenantId,
    service: WaitlistServiceDep,
):
    entry = await service.get_entry(tenant_id, entry_id)
    return WaitlistEntryResponse.from_entity(entry)


@waitlist_router.patch("/{entry_id}", response_model=WaitlistEntryResponse)
async def update_waitlist_entry(
    entry_id: str,
    request: WaitlistUpdateRequest,
    tenant_id: TenantId,
    service: WaitlistServiceDep,
):
    entry = await service.update_entry(
        tenant_id,
        entry_id,
        status=request.status,
        notes=request.notes,
        staff_id=request.staff_id,
    )
    return WaitlistEntryResponse.from_entity(entry)


@waitlist_router.delete("/{entry_id}", response_model=WaitlistEntryResponse)
async def cancel_waitlist_entry(
    entry_id: str,
    tenant_id: TenantId,
    service: WaitlistServiceDep,
):
    """Withdraw a customer from the waitlist."""
    entry = await service.cancel_entry(tenant_id, entry_id)
    return WaitlistEntryResponse.from_entity(entry)


@waitlist_router.post("/{entry_id}/resolve", response_model=WaitlistEntryResponse)
async def resolve_waitlist_entry(
    entry_id: str,
    request: WaitlistResolveRequest,
    tenant_id: TenantId,
    service: WaitlistServiceDep,
):
    """Mark the entry as fulfilled by a booking made by staff."""
    entry = await service.resolve_entry(tenant_id, entry_id, request.booking_id)
    return WaitlistEntryResponse.from_entity(entry)


# ============================================================
# SELF-SERVE (public, authorized by the token in the path)
# ============================================================


@manage_router.get("/reschedule/{token}")
async def get_reschedule_summary(token: str, service: SelfServeServiceDep) -> dict[str, Any]:
    return await service.get_booking_summary(token, TokenType.RESCHEDULE_LINK)


@manage_router.get("/reschedule/{token}/availability", response_model=list[SlotResponse])
async def get_reschedule_availability(
    token: str,
    service: SelfServeServiceDep,
    day: date = Query(..., alias="date"),
):
    slots = await service.get_availability(token, day)
    return [SlotResponse.from_slot(slot) for slot in slots]


@manage_router.post("/reschedule/{token}", response_model=BookingResponse)
async def execute_reschedule(
    token: str,
    request: SelfServeRescheduleRequest,
    service: SelfServeServiceDep,
):
    booking = await service.execute_reschedule(token, request.start_time, request.staff_id)
    return BookingResponse.from_entity(booking)


@manage_router.get("/cancel/{token}")
async def get_cancel_summary(token: str, service: SelfServeServiceDep) -> dict[str, Any]:
    return await service.get_booking_summary(token, TokenType.CANCEL_LINK)


@manage_router.post("/cancel/{token}", response_model=BookingResponse)
async def execute_cancel(
    token: str,
    request: SelfServeCancelRequest,
    service: SelfServeServiceDep,
):
    booking = await service.execute_cancel(token, request.reason)
    return BookingResponse.from_entity(booking)


@manage_router.get("/waitlist/{token}")
async def get_waitlist_claim_summary(token: str, service: SelfServeServiceDep) -> dict[str, Any]:
    return await service.get_waitlist_claim_summary(token)


@manage_router.post("/waitlist/{token}", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def claim_waitlist_slot(token: str, service: SelfServeServiceDep):
    """Book the offered slot. Only the first claim of an offer succeeds."""
    booking = await service.claim_waitlist_slot(token)
    return BookingResponse.from_entity(booking)


routers = [
    availability_router,
    bookings_router,
    recurring_router,
    staff_router,
    waitlist_router,
    manage_router,
]
