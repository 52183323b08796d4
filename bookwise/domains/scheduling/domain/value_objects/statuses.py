"""
Scheduling Domain Status Enums
"""

from bookwise.core.domain import StatusEnum


class BookingStatus(StatusEnum):
    """
    Booking lifecycle states.

    Terminal: COMPLETED, CANCELLED, NO_SHOW.
    Blocking (count toward staff conflicts): PENDING, PENDING_DEPOSIT, CONFIRMED, IN_PROGRESS.
    """

    PENDING = "PENDING"
    PENDING_DEPOSIT = "PENDING_DEPOSIT"
    CONFIRMED = "CONFIRMED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    NO_SHOW = "NO_SHOW"

    @classmethod
    def blocking(cls) -> frozenset["BookingStatus"]:
        """Statuses whose bookings occupy the staff calendar."""
        return frozenset({cls.PENDING, cls.PENDING_DEPOSIT, cls.CONFIRMED, cls.IN_PROGRESS})

    @classmethod
    def terminal(cls) -> frozenset["BookingStatus"]:
        return frozenset({cls.COMPLETED, cls.CANCELLED, cls.NO_SHOW})

    def is_blocking(self) -> bool:
        return self in BookingStatus.blocking()

    def is_terminal(self) -> bool:
        return self in BookingStatus.terminal()

    def is_self_serve_manageable(self) -> bool:
        """Only upcoming, not yet started bookings can be rescheduled or cancelled by link."""
        return self in (BookingStatus.CONFIRMED, BookingStatus.PENDING_DEPOSIT)


class ServiceKind(StatusEnum):
    """Drives which follow-up reminders are scheduled when a booking completes."""

    CONSULT = "CONSULT"
    TREATMENT = "TREATMENT"
    OTHER = "OTHER"


class StaffRole(StatusEnum):
    ADMIN = "ADMIN"
    SERVICE_PROVIDER = "SERVICE_PROVIDER"
    STAFF = "STAFF"


class ReminderType(StatusEnum):
    REMINDER = "REMINDER"
    FOLLOW_UP = "FOLLOW_UP"
    CONSULT_FOLLOW_UP = "CONSULT_FOLLOW_UP"
    AFTERCARE = "AFTERCARE"
    TREATMENT_CHECK_IN = "TREATMENT_CHECK_IN"


class ReminderStatus(StatusEnum):
    PENDING = "PENDING"
    SENT = "SENT"
    CANCELLED = "CANCELLED"
    FAILED = "FAILED"


class WaitlistStatus(StatusEnum):
    """
    Waitlist entry lifecycle.

    ACTIVE -> OFFERED (slot proposed) -> BOOKED (claimed)
    OFFERED -> EXPIRED (sweep)
    ACTIVE/OFFERED -> CANCELLED (withdrawn)
    """

    ACTIVE = "ACTIVE"
    OFFERED = "OFFERED"
    BOOKED = "BOOKED"
    CANCELLED = "CANCELLED"
    EXPIRED = "EXPIRED"


class TokenType(StatusEnum):
    RESCHEDULE_LINK = "RESCHEDULE_LINK"
    CANCEL_LINK = "CANCEL_LINK"
    WAITLIST_CLAIM = "WAITLIST_CLAIM"


class CalendarAction(StatusEnum):
    CREATE = "create"
    UPDATE = "update"
    CANCEL = "cancel"


class PolicyAction(StatusEnum):
    CANCEL = "cancel"
    RESCHEDULE = "reschedule"


class BulkAction(StatusEnum):
    STATUS = "status"
    ASSIGN = "assign"


class SeriesCancelScope(StatusEnum):
    """Which bookings of a recurring series a cancellation reaches."""

    SINGLE = "single"
    FUTURE = "future"
    ALL = "all"
