"""
Typed audit log entries stored in a booking's custom_fields.

Three append-only logs live under fixed keys:

- overrideLog: admin overrides of deposit and cancellation-policy rules
- depositRequestLog: every deposit request sent to the customer
- selfServeLog: self-serve links sent by staff and actions taken by customers

Each log holds one entry type, tagged by ``type`` where more than one kind
shares a log. Entries are serialized to plain JSON dicts for storage.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, ClassVar

from bookwise.core.domain import StatusEnum, ValueObject


class AuditLogName(str, Enum):
    OVERRIDE = "overrideLog"
    DEPOSIT_REQUEST = "depositRequestLog"
    SELF_SERVE = "selfServeLog"


class OverrideKind(StatusEnum):
    DEPOSIT_OVERRIDE = "DEPOSIT_OVERRIDE"
    POLICY_OVERRIDE = "POLICY_OVERRIDE"


class SelfServeKind(StatusEnum):
    RESCHEDULE_LINK_SENT = "RESCHEDULE_LINK_SENT"
    CANCEL_LINK_SENT = "CANCEL_LINK_SENT"
    RESCHEDULED_BY_CUSTOMER = "RESCHEDULED_BY_CUSTOMER"
    CANCELLED_BY_CUSTOMER = "CANCELLED_BY_CUSTOMER"


@dataclass(frozen=True)
class OverrideEntry(ValueObject):
    log_name: ClassVar[AuditLogName] = AuditLogName.OVERRIDE

    kind: OverrideKind
    action: str
    reason: str
    timestamp: datetime
    staff_id: str | None = None
    staff_name: str | None = None

    def _validate(self) -> None:
        if not self.reason or not self.reason.strip():
            raise ValueError("Override entries require a reason")

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.kind.value,
            "action": self.action,
            "reason": self.reason,
            "staffId": self.staff_id,
            "staffName": self.staff_name,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "OverrideEntry":
        return cls(
            kind=OverrideKind(data["type"]),
            action=data.get("action", ""),
            reason=data.get("reason", ""),
            timestamp=datetime.fromisoformat(data["timestamp"]),
            staff_id=data.get("staffId"),
            staff_name=data.get("staffName"),
        )


@dataclass(frozen=True)
class DepositRequestEntry(ValueObject):
    log_name: ClassVar[AuditLogName] = AuditLogName.DEPOSIT_REQUEST

    sent_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {"sentAt": self.sent_at.isoformat()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DepositRequestEntry":
        return cls(sent_at=datetime.fromisoformat(data["sentAt"]))


@dataclass(frozen=True)
class SelfServeEntry(ValueObject):
    log_name: ClassVar[AuditLogName] = AuditLogName.SELF_SERVE

    kind: SelfServeKind
    at: datetime
    staff_id: str | None = None
    staff_name: str | None = None
    new_start_time: datetime | None = None
    reason: str | None = None

    @property
    def is_customer_initiated(self) -> bool:
        return self.kind in (SelfServeKind.RESCHEDULED_BY_CUSTOMER, SelfServeKind.CANCELLED_BY_CUSTOMER)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"type": self.kind.value, "at": self.at.isoformat()}
        if self.staff_id is not None:
            data["staffId"] = self.staff_id
        if self.staff_name is not None:
            data["staffName"] = self.staff_name
        if self.new_start_time is not None:
            data["newStartTime"] = self.new_start_time.isoformat()
        if self.reason is not None:
            data["reason"] = self.reason
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SelfServeEntry":
        new_start = data.get("newStartTime")
        return cls(
            kind=SelfServeKind(data["type"]),
            at=datetime.fromisoformat(data["at"]),
            staff_id=data.get("staffId"),
            staff_name=data.get("staffName"),
            new_start_time=datetime.fromisoformat(new_start) if new_start else None,
            reason=data.get("reason"),
        )


AuditEntry = OverrideEntry | DepositRequestEntry | SelfServeEntry

_ENTRY_TYPES: dict[AuditLogName, type[OverrideEntry] | type[DepositRequestEntry] | type[SelfServeEntry]] = {
    AuditLogName.OVERRIDE: OverrideEntry,
    AuditLogName.DEPOSIT_REQUEST: DepositRequestEntry,
    AuditLogName.SELF_SERVE: SelfServeEntry,
}


def append_log_entry(custom_fields: dict[str, Any] | None, entry: AuditEntry) -> dict[str, Any]:
    """
    Append an entry to its log and return a new custom_fields dict.

    A missing, null or malformed (non-list) log is treated as empty.
    Existing entries are kept as they are.
    """
    fields = dict(custom_fields or {})
    current = fields.get(entry.log_name.value)
    entries = list(current) if isinstance(current, list) else []
    entries.append(entry.to_dict())
    fields[entry.log_name.value] = entries
    return fields


def read_log(custom_fields: dict[str, Any] | None, log_name: AuditLogName) -> list[AuditEntry]:
    """Parse one log back into typed entries, skipping rows that do not parse."""
    raw = (custom_fields or {}).get(log_name.value)
    if not isinstance(raw, list):
        return []
    entry_type = _ENTRY_TYPES[log_name]
    entries: list[AuditEntry] = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        try:
            entries.append(entry_type.from_dict(item))
        except (KeyError, ValueError):
            continue
    return entries
