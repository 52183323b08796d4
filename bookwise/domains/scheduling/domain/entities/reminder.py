"""
Reminder and self-serve token entities.
"""

from dataclasses import dataclass
from datetime import datetime

from bookwise.core.domain import Entity

from ..value_objects import ReminderStatus, ReminderType, TokenType


@dataclass
class Reminder(Entity[str]):
    tenant_id: str = ""
    booking_id: str = ""
    type: ReminderType = ReminderType.REMINDER
    scheduled_at: datetime | None = None
    status: ReminderStatus = ReminderStatus.PENDING
    sent_at: datetime | None = None

    def is_due(self, now: datetime) -> bool:
        return (
            self.status == ReminderStatus.PENDING
            and self.scheduled_at is not None
            and self.scheduled_at <= now
        )

    def mark_sent(self, now: datetime) -> None:
        self.status = ReminderStatus.SENT
        self.sent_at = now
        self.touch(now)

    def mark_failed(self) -> None:
        self.status = ReminderStatus.FAILED
        self.touch()


@dataclass
class SelfServeToken(Entity[str]):
    """Single-use, time-limited token scoped to one booking or waitlist entry."""

    token: str = ""
    type: TokenType = TokenType.RESCHEDULE_LINK
    contact: str = ""
    tenant_id: str = ""
    staff_id: str | None = None
    related_id: str | None = None
    expires_at: datetime | None = None
    used_at: datetime | None = None

    @property
    def is_used(self) -> bool:
        return self.used_at is not None

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at is not None and self.expires_at < now
