"""
Scheduling API Schemas

Pydantic schemas for API request/response validation.
"""

from datetime import date, datetime, time
from typing import Any

from pydantic import BaseModel, Field

from bookwise.domains.scheduling.application.dto import Actor
from bookwise.domains.scheduling.domain.entities import Booking, RecurringSeries, TimeOff, WaitlistEntry, WorkingHours
from bookwise.domains.scheduling.domain.services import CandidateSlot
from bookwise.domains.scheduling.domain.value_objects import (
    BookingStatus,
    BulkAction,
    SeriesCancelScope,
    StaffRole,
    WaitlistStatus,
)

# ==================== SHARED ====================


class ActorSchema(BaseModel):
    """Staff member performing the action."""

    role: StaffRole | None = None
    reason: str | None = Field(default=None, max_length=1000)
    staff_id: str | None = None
    staff_name: str | None = None

    def to_actor(self) -> Actor:
        return Actor(role=self.role, reason=self.reason, staff_id=self.staff_id, staff_name=self.staff_name)


# ==================== AVAILABILITY ====================


class SlotResponse(BaseModel):
    time: datetime
    display: str
    staff_id: str
    staff_name: str
    available: bool

    @classmethod
    def from_slot(cls, slot: CandidateSlot) -> "SlotResponse":
        return cls(
            time=slot.start,
            display=slot.display,
            staff_id=slot.staff_id,
            staff_name=slot.staff_name,
            available=slot.available,
        )


# ==================== BOOKINGS ====================


class BookingCreateRequest(BaseModel):
    customer_id: str
    service_id: str
    start_time: datetime
    staff_id: str | None = None
    notes: str | None = None
    custom_fields: dict[str, Any] = Field(default_factory=dict)


class BookingUpdateRequest(BaseModel):
    start_time: datetime | None = None
    staff_id: str | None = None
    notes: str | None = None
    custom_fields: dict[str, Any] | None = None


class StatusUpdateRequest(BaseModel):
    status: BookingStatus
    actor: ActorSchema | None = None


class BulkPayloadSchema(BaseModel):
    status: BookingStatus | None = None
    staff_id: str | None = None


class BulkUpdateRequest(BaseModel):
    ids: list[str]
    action: BulkAction
    payload: BulkPayloadSchema = Field(default_factory=BulkPayloadSchema)
    actor_role: StaffRole | None = None


class BulkUpdateResponse(BaseModel):
    updated: int


class SelfServeLinkRequest(BaseModel):
    actor: ActorSchema = Field(default_factory=ActorSchema)


class SelfServeLinkResponse(BaseModel):
    token: str
    link: str


class BookingResponse(BaseModel):
    """Booking response schema."""

    id: str
    tenant_id: str
    customer_id: str
    service_id: str
    staff_id: str | None = None
    recurring_series_id: str | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    status: str
    notes: str | None = None
    custom_fields: dict[str, Any] = Field(default_factory=dict)
    customer_name: str | None = None
    service_name: str | None = None
    staff_name: str | None = None

    @classmethod
    def from_entity(cls, booking: Booking) -> "BookingResponse":
        return cls(
            id=booking.id or "",
            tenant_id=booking.tenant_id,
            customer_id=booking.customer_id,
            service_id=booking.service_id,
            staff_id=booking.staff_id,
            recurring_series_id=booking.recurring_series_id,
            start_time=booking.start_time,
            end_time=booking.end_time,
            status=booking.status.value,
            notes=booking.notes,
            custom_fields=booking.custom_fields,
            customer_name=booking.customer.name if booking.customer else None,
            service_name=booking.service.name if booking.service else None,
            staff_name=booking.staff.name if booking.staff else None,
        )


class BookingListResponse(BaseModel):
    items: list[BookingResponse]
    total: int
    page: int
    page_size: int
    total_pages: int


class PolicyCheckResponse(BaseModel):
    allowed: bool
    reason: str | None = None
    policy_text: str | None = None
    hours_remaining: float | None = None
    admin_can_override: bool | None = None


# ==================== STAFF SCHEDULES ====================


class WorkingHoursSchema(BaseModel):
    """One weekday; day_of_week: 0=Monday .. 6=Sunday."""

    day_of_week: int = Field(ge=0, le=6)
    start_time: time
    end_time: time
    is_off: bool = False

    def to_entity(self) -> WorkingHours:
        return WorkingHours(
            day_of_week=self.day_of_week,
            start_time=self.start_time,
            end_time=self.end_time,
            is_off=self.is_off,
        )

    @classmethod
    def from_entity(cls, row: WorkingHours) -> "WorkingHoursSchema":
        return cls(day_of_week=row.day_of_week, start_time=row.start_time, end_time=row.end_time, is_off=row.is_off)


class WorkingHoursUpdateRequest(BaseModel):
    hours: list[WorkingHoursSchema] = Field(min_length=1, max_length=7)


class TimeOffCreateRequest(BaseModel):
    start_date: date
    end_date: date
    reason: str | None = Field(default=None, max_length=255)


class TimeOffResponse(BaseModel):
    id: str | None = None
    start_date: date
    end_date: date
    reason: str | None = None

    @classmethod
    def from_entity(cls, time_off: TimeOff) -> "TimeOffResponse":
        return cls(id=time_off.id, start_date=time_off.start_date, end_date=time_off.end_date, reason=time_off.reason)


class StaffCalendarContextResponse(BaseModel):
    working_hours: list[WorkingHoursSchema]
    time_off: list[TimeOffResponse]


# ==================== RECURRING SERIES ====================


class SeriesCreateRequest(BaseModel):
    customer_id: str
    service_id: str
    staff_id: str | None = None
    start_date: date
    time_of_day: time
    days_of_week: list[int] = Field(min_length=1, max_length=7)
    interval_weeks: int = Field(default=1, ge=1, le=52)
    total_count: int | None = Field(default=None, ge=1, le=52)
    ends_on: date | None = None
    notes: str | None = None


class SeriesResponse(BaseModel):
    id: str
    customer_id: str
    service_id: str
    staff_id: str | None = None
    start_date: date | None = None
    time_of_day: time
    days_of_week: list[int]
    interval_weeks: int
    total_count: int
    ends_on: date | None = None
    notes: str | None = None
    bookings: list[BookingResponse] = Field(default_factory=list)

    @classmethod
    def from_entity(cls, series: RecurringSeries) -> "SeriesResponse":
        return cls(
            id=series.id or "",
            customer_id=series.customer_id,
            service_id=series.service_id,
            staff_id=series.staff_id,
            start_date=series.start_date,
            time_of_day=series.time_of_day,
            days_of_week=series.days_of_week,
            interval_weeks=series.interval_weeks,
            total_count=series.total_count,
            ends_on=series.ends_on,
            notes=series.notes,
            bookings=[BookingResponse.from_entity(b) for b in series.bookings],
        )


class SeriesCancelRequest(BaseModel):
    scope: SeriesCancelScope
    booking_id: str | None = None


class SeriesCancelResponse(BaseModel):
    cancelled: int


# ==================== WAITLIST ====================


class WaitlistJoinRequest(BaseModel):
    customer_id: str
    service_id: str
    staff_id: str | None = None
    notes: str | None = None


class WaitlistUpdateRequest(BaseModel):
    status: WaitlistStatus | None = None
    notes: str | None = None
    staff_id: str | None = None


class WaitlistResolveRequest(BaseModel):
    booking_id: str


class WaitlistEntryResponse(BaseModel):
    id: str
    customer_id: str
    service_id: str
    staff_id: str | None = None
    status: str
    notes: str | None = None
    offered_slot: dict[str, Any] | None = None
    offered_at: datetime | None = None
    offer_expires_at: datetime | None = None
    booking_id: str | None = None
    claimed_at: datetime | None = None
    created_at: datetime

    @classmethod
    def from_entity(cls, entry: WaitlistEntry) -> "WaitlistEntryResponse":
        return cls(
            id=entry.id or "",
            customer_id=entry.customer_id,
            service_id=entry.service_id,
            staff_id=entry.staff_id,
            status=entry.status.value,
            notes=entry.notes,
            offered_slot=entry.offered_slot.to_dict() if entry.offered_slot else None,
            offered_at=entry.offered_at,
            offer_expires_at=entry.offer_expires_at,
            booking_id=entry.booking_id,
            claimed_at=entry.claimed_at,
            created_at=entry.created_at,
        )


class WaitlistMetricsResponse(BaseModel):
    window_days: int
    total_joined: int
    offered: int
    claimed: int
    avg_time_to_fill_minutes: float | None = None
    fill_rate: float


# ==================== SELF-SERVE ====================


class SelfServeRescheduleRequest(BaseModel):
    start_time: datetime
    staff_id: str | None = None


class SelfServeCancelRequest(BaseModel):
    reason: str | None = Field(default=None, max_length=1000)
