"""
Booking Policy

Time-window rules for cancelling and rescheduling, and the follow-up
reminders planned when a booking completes.
"""

import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from ..value_objects import (
    NotificationSettings,
    PolicyAction,
    PolicySettings,
    ReminderType,
    ServiceKind,
)


@dataclass
class PolicyDecision:
    """Outcome of a cancellation/reschedule window check."""

    allowed: bool
    reason: str | None = None
    policy_text: str | None = None
    hours_remaining: float | None = None
    admin_can_override: bool | None = None

    @classmethod
    def allow(cls) -> "PolicyDecision":
        return cls(allowed=True)

    def to_dict(self) -> dict[str, Any]:
        return {
            "allowed": self.allowed,
            "reason": self.reason,
            "policy_text": self.policy_text,
            "hours_remaining": self.hours_remaining,
            "admin_can_override": self.admin_can_override,
        }


class BookingPolicy:
    """
    Evaluates tenant policy windows.

    Example:
        ```python
        policy = BookingPolicy()
        decision = policy.evaluate(settings, PolicyAction.CANCEL, hours_until_start=12)
        decision.allowed  # False with a 24h window
        ```
    """

    def evaluate(
        self,
        settings: PolicySettings | None,
        action: PolicyAction,
        hours_until_start: float | None,
    ) -> PolicyDecision:
        """
        Args:
            settings: Tenant policy settings (None when the tenant is unknown)
            action: cancel or reschedule
            hours_until_start: Hours from now to the booking start (None if unscheduled)

        Returns:
            PolicyDecision; blocked decisions always allow an admin override
        """
        if settings is None or not settings.policy_enabled or hours_until_start is None:
            return PolicyDecision.allow()

        window = settings.window_for(action)
        if hours_until_start >= window:
            return PolicyDecision.allow()

        return PolicyDecision(
            allowed=False,
            reason=f"Cannot {action.value} within {window} hours of the appointment",
            policy_text=settings.text_for(action) or None,
            hours_remaining=_round_hours(hours_until_start),
            admin_can_override=True,
        )


def _round_hours(hours: float) -> float:
    """Clamp at zero and round half up to one decimal."""
    return max(0.0, math.floor(hours * 10 + 0.5) / 10)


@dataclass(frozen=True)
class PlannedReminder:
    type: ReminderType
    scheduled_at: datetime


def plan_booking_reminder(start_time: datetime, now: datetime, lead_hours: int = 24) -> PlannedReminder | None:
    """Reminder ``lead_hours`` before start, or None when that moment has already passed."""
    remind_at = start_time - timedelta(hours=lead_hours)
    if remind_at <= now:
        return None
    return PlannedReminder(type=ReminderType.REMINDER, scheduled_at=remind_at)


def plan_completion_reminders(
    kind: ServiceKind | None,
    now: datetime,
    settings: NotificationSettings,
) -> list[PlannedReminder]:
    """
    Follow-ups scheduled when a booking completes.

    Every booking gets a generic FOLLOW_UP. Consults add a CONSULT_FOLLOW_UP;
    treatments add an immediate AFTERCARE and a TREATMENT_CHECK_IN.
    """
    planned = [
        PlannedReminder(
            type=ReminderType.FOLLOW_UP,
            scheduled_at=now + timedelta(hours=settings.follow_up_delay_hours),
        )
    ]
    if kind == ServiceKind.CONSULT:
        planned.append(
            PlannedReminder(
                type=ReminderType.CONSULT_FOLLOW_UP,
                scheduled_at=now + timedelta(days=settings.consult_follow_up_days),
            )
        )
    elif kind == ServiceKind.TREATMENT:
        planned.append(PlannedReminder(type=ReminderType.AFTERCARE, scheduled_at=now))
        planned.append(
            PlannedReminder(
                type=ReminderType.TREATMENT_CHECK_IN,
                scheduled_at=now + timedelta(hours=settings.treatment_check_in_hours),
            )
        )
    return planned
