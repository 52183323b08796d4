"""
Entity base classes

Scheduling records (bookings, waitlist entries, reminders, catalog items) are
identified by a UUID string assigned at persistence time. Timestamps are UTC.
"""

from abc import ABC
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Generic, TypeVar
from uuid import uuid4

TId = TypeVar("TId")


def _utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass
class Entity(ABC, Generic[TId]):
    """
    Identified domain record.

    ``id`` stays None until a repository stores the record.
    """

    id: TId | None = field(default=None)
    created_at: datetime = field(default_factory=_utc_now)
    updated_at: datetime = field(default_factory=_utc_now)

    def touch(self, at: datetime | None = None) -> None:
        self.updated_at = at or _utc_now()


@dataclass
class AggregateRoot(Entity[TId], Generic[TId]):
    """Entity that guards the invariants of the records it owns (e.g. a booking and its audit logs)."""


def generate_uuid_str() -> str:
    return str(uuid4())
