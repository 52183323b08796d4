"""
Waitlist Entry Entity

A customer queued for a service (optionally a specific staff member). When a
booking is cancelled the freed slot is offered to entries as an immutable
snapshot; the first valid claim books it.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from bookwise.core.domain import AggregateRoot, InvalidOperationException, ValueObject

from ..value_objects import WaitlistStatus


@dataclass(frozen=True)
class OfferedSlot(ValueObject):
    """Snapshot of the freed slot taken at offer time. Never re-queried."""

    start_time: datetime
    service_name: str
    staff_name: str | None = None
    staff_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "startTime": self.start_time.isoformat(),
            "serviceName": self.service_name,
            "staffName": self.staff_name,
            "staffId": self.staff_id,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "OfferedSlot | None":
        """Parse a stored snapshot; None when it has no start time."""
        start = data.get("startTime")
        if not start:
            return None
        return cls(
            start_time=datetime.fromisoformat(start),
            service_name=data.get("serviceName") or "",
            staff_name=data.get("staffName"),
            staff_id=data.get("staffId"),
        )


@dataclass
class WaitlistEntry(AggregateRoot[str]):
    tenant_id: str = ""
    customer_id: str = ""
    service_id: str = ""
    staff_id: str | None = None
    status: WaitlistStatus = WaitlistStatus.ACTIVE
    notes: str | None = None

    offered_slot: OfferedSlot | None = None
    offered_at: datetime | None = None
    offer_expires_at: datetime | None = None

    booking_id: str | None = None
    claimed_at: datetime | None = None

    def is_offer_expired(self, now: datetime) -> bool:
        return self.offer_expires_at is not None and self.offer_expires_at < now

    def offer(self, slot: OfferedSlot, now: datetime, expiry_minutes: int) -> None:
        if self.status != WaitlistStatus.ACTIVE:
            raise InvalidOperationException(operation="offer", current_state=self.status.value)
        self.status = WaitlistStatus.OFFERED
        self.offered_slot = slot
        self.offered_at = now
        self.offer_expires_at = now + timedelta(minutes=expiry_minutes)
        self.touch(now)

    def reserve(self, now: datetime) -> OfferedSlot:
        """
        Flip an open offer to BOOKED and return its slot.

        Must run while holding the entry's row lock.
        """
        if self.status != WaitlistStatus.OFFERED:
            raise InvalidOperationException(
                operation="claim",
                current_state=self.status.value,
                message="This offer is no longer available",
            )
        if self.is_offer_expired(now):
            raise InvalidOperationException(
                operation="claim",
                current_state=self.status.value,
                message="This offer has expired",
            )
        if self.offered_slot is None:
            raise InvalidOperationException(
                operation="claim",
                current_state=self.status.value,
                message="Invalid offered slot data",
            )
        self.status = WaitlistStatus.BOOKED
        self.touch(now)
        return self.offered_slot

    def release(self) -> None:
        """Undo a reservation whose booking could not be created."""
        self.status = WaitlistStatus.ACTIVE
        self.offered_slot = None
        self.offered_at = None
        self.offer_expires_at = None
        self.touch()

    def resolve(self, booking_id: str, now: datetime) -> None:
        self.status = WaitlistStatus.BOOKED
        self.booking_id = booking_id
        self.claimed_at = now
        self.touch()

    def cancel(self) -> None:
        if self.status == WaitlistStatus.BOOKED:
            raise InvalidOperationException(
                operation="cancel",
                current_state=self.status.value,
                message="Cannot cancel a booked waitlist entry",
            )
        self.status = WaitlistStatus.CANCELLED
        self.touch()
