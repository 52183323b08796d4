"""
Scheduling Domain Services
"""

from .booking_policy import (
    BookingPolicy,
    PlannedReminder,
    PolicyDecision,
    plan_booking_reminder,
    plan_completion_reminders,
)
from .slot_generator import CandidateSlot, SlotGenerator

__all__ = [
    "BookingPolicy",
    "PolicyDecision",
    "PlannedReminder",
    "plan_booking_reminder",
    "plan_completion_reminders",
    "CandidateSlot",
    "SlotGenerator",
]
