"""
Scheduling SQLAlchemy Persistence
"""

from bookwise.domains.scheduling.infrastructure.persistence.sqlalchemy.models import (
    BookingModel,
    CustomerModel,
    RecurringSeriesModel,
    ReminderModel,
    SelfServeTokenModel,
    ServiceModel,
    StaffModel,
    TenantModel,
    TimeOffModel,
    WaitlistEntryModel,
    WorkingHoursModel,
)

__all__ = [
    "BookingModel",
    "CustomerModel",
    "RecurringSeriesModel",
    "ReminderModel",
    "SelfServeTokenModel",
    "ServiceModel",
    "StaffModel",
    "TenantModel",
    "TimeOffModel",
    "WaitlistEntryModel",
    "WorkingHoursModel",
]
