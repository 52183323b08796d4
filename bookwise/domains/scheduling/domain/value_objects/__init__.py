"""
Scheduling Domain Value Objects
"""

from .audit_log import (
    AuditEntry,
    AuditLogName,
    DepositRequestEntry,
    OverrideEntry,
    OverrideKind,
    SelfServeEntry,
    SelfServeKind,
    append_log_entry,
    read_log,
)
from .recurrence import MAX_OCCURRENCES, RecurrenceRule
from .statuses import (
    BookingStatus,
    BulkAction,
    CalendarAction,
    PolicyAction,
    ReminderStatus,
    ReminderType,
    SeriesCancelScope,
    ServiceKind,
    StaffRole,
    TokenType,
    WaitlistStatus,
)
from .tenant_settings import NotificationSettings, PolicySettings, WaitlistSettings
from .time_range import QuietHours, TimeRange, WallClockWindow

__all__ = [
    # Statuses
    "BookingStatus",
    "BulkAction",
    "CalendarAction",
    "PolicyAction",
    "ReminderStatus",
    "ReminderType",
    "SeriesCancelScope",
    "ServiceKind",
    "StaffRole",
    "TokenType",
    "WaitlistStatus",
    # Time
    "TimeRange",
    "WallClockWindow",
    "QuietHours",
    # Recurrence
    "RecurrenceRule",
    "MAX_OCCURRENCES",
    # Tenant settings
    "PolicySettings",
    "NotificationSettings",
    "WaitlistSettings",
    # Audit logs
    "AuditEntry",
    "AuditLogName",
    "OverrideEntry",
    "OverrideKind",
    "DepositRequestEntry",
    "SelfServeEntry",
    "SelfServeKind",
    "append_log_entry",
    "read_log",
]
