"""
Scheduling Domain Entities
"""

from .booking import Booking
from .catalog import Customer, Service, Staff, TimeOff, WorkingHours
from .recurring_series import RecurringSeries
from .reminder import Reminder, SelfServeToken
from .waitlist_entry import OfferedSlot, WaitlistEntry

__all__ = [
    "Booking",
    "Customer",
    "Service",
    "Staff",
    "TimeOff",
    "WorkingHours",
    "RecurringSeries",
    "Reminder",
    "SelfServeToken",
    "OfferedSlot",
    "WaitlistEntry",
]
