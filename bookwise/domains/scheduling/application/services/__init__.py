"""
Scheduling Application Services
"""

from bookwise.domains.scheduling.application.services.availability_service import AvailabilityService
from bookwise.domains.scheduling.application.services.booking_service import BookingService
from bookwise.domains.scheduling.application.services.recurring_service import RecurringBookingService
from bookwise.domains.scheduling.application.services.reminder_dispatch_service import ReminderDispatchService
from bookwise.domains.scheduling.application.services.self_serve_service import SelfServeService
from bookwise.domains.scheduling.application.services.staff_schedule_service import StaffScheduleService
from bookwise.domains.scheduling.application.services.waitlist_service import WaitlistService

__all__ = [
    "AvailabilityService",
    "BookingService",
    "RecurringBookingService",
    "ReminderDispatchService",
    "SelfServeService",
    "StaffScheduleService",
    "WaitlistService",
]
