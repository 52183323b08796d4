"""
Scheduling Application DTOs
"""

from .requests import (
    Actor,
    BulkUpdatePayload,
    CreateBookingRequest,
    CreateSeriesRequest,
    JoinWaitlistRequest,
    UpdateBookingRequest,
)
from .results import (
    BookingPage,
    BulkUpdateResult,
    SelfServeLink,
    SeriesCancelResult,
    StaffCalendarContext,
    WaitlistMetrics,
)

__all__ = [
    "Actor",
    "BulkUpdatePayload",
    "CreateBookingRequest",
    "CreateSeriesRequest",
    "JoinWaitlistRequest",
    "UpdateBookingRequest",
    "BookingPage",
    "BulkUpdateResult",
    "SelfServeLink",
    "SeriesCancelResult",
    "StaffCalendarContext",
    "WaitlistMetrics",
]
