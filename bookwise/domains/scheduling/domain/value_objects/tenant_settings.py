"""
Per-tenant configuration read by the scheduling core.

Values are defaults merged with tenant overrides by the settings provider.
"""

from dataclasses import dataclass, field
from typing import Any

from bookwise.core.domain import ValueObject

from .statuses import PolicyAction
from .time_range import QuietHours


@dataclass(frozen=True)
class PolicySettings(ValueObject):
    policy_enabled: bool = False
    cancellation_window_hours: int = 24
    reschedule_window_hours: int = 24
    cancellation_policy_text: str = ""
    reschedule_policy_text: str = ""

    def window_for(self, action: PolicyAction) -> int:
        if action == PolicyAction.CANCEL:
            return self.cancellation_window_hours
        return self.reschedule_window_hours

    def text_for(self, action: PolicyAction) -> str:
        if action == PolicyAction.CANCEL:
            return self.cancellation_policy_text
        return self.reschedule_policy_text

    @classmethod
    def from_overrides(cls, overrides: dict[str, Any] | None) -> "PolicySettings":
        data = overrides or {}
        defaults = cls()
        return cls(
            policy_enabled=bool(data.get("policyEnabled", defaults.policy_enabled)),
            cancellation_window_hours=int(data.get("cancellationWindowHours", defaults.cancellation_window_hours)),
            reschedule_window_hours=int(data.get("rescheduleWindowHours", defaults.reschedule_window_hours)),
            cancellation_policy_text=data.get("cancellationPolicyText") or defaults.cancellation_policy_text,
            reschedule_policy_text=data.get("reschedulePolicyText") or defaults.reschedule_policy_text,
        )


@dataclass(frozen=True)
class NotificationSettings(ValueObject):
    channels: str = "both"
    follow_up_delay_hours: int = 2
    consult_follow_up_days: int = 3
    treatment_check_in_hours: int = 24

    @classmethod
    def from_overrides(cls, overrides: dict[str, Any] | None) -> "NotificationSettings":
        data = overrides or {}
        defaults = cls()
        return cls(
            channels=data.get("channels") or defaults.channels,
            follow_up_delay_hours=int(data.get("followUpDelayHours", defaults.follow_up_delay_hours)),
            consult_follow_up_days=int(data.get("consultFollowUpDays", defaults.consult_follow_up_days)),
            treatment_check_in_hours=int(data.get("treatmentCheckInHours", defaults.treatment_check_in_hours)),
        )


@dataclass(frozen=True)
class WaitlistSettings(ValueObject):
    offer_count: int = 3
    expiry_minutes: int = 15
    quiet_hours: QuietHours = field(default_factory=QuietHours)

    def _validate(self) -> None:
        if self.offer_count < 0:
            raise ValueError("offer_count cannot be negative")
        if self.expiry_minutes <= 0:
            raise ValueError("expiry_minutes must be positive")

    @classmethod
    def from_overrides(cls, overrides: dict[str, Any] | None) -> "WaitlistSettings":
        data = overrides or {}
        defaults = cls()
        quiet_start = data.get("quietStart")
        quiet_end = data.get("quietEnd")
        quiet_hours = (
            QuietHours.parse(quiet_start, quiet_end) if quiet_start and quiet_end else defaults.quiet_hours
        )
        return cls(
            offer_count=int(data.get("offerCount", defaults.offer_count)),
            expiry_minutes=int(data.get("expiryMinutes", defaults.expiry_minutes)),
            quiet_hours=quiet_hours,
        )
