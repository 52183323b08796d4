from datetime import UTC, datetime, timedelta

import pytest

from bookwise.domains.scheduling.domain.services import (
    BookingPolicy,
    plan_booking_reminder,
    plan_completion_reminders,
)
from bookwise.domains.scheduling.domain.value_objects import (
    NotificationSettings,
    PolicyAction,
    PolicySettings,
    ReminderType,
    ServiceKind,
)

NOW = datetime(2026, 3, 2, 8, 0, tzinfo=UTC)

ENABLED = PolicySettings(
    policy_enabled=True,
    cancellation_window_hours=24,
    reschedule_window_hours=12,
    cancellation_policy_text="Cancellations need 24 hours notice",
)


@pytest.fixture
def policy() -> BookingPolicy:
    return BookingPolicy()


class TestBookingPolicy:
    def test_disabled_policy_always_allows(self, policy):
        decision = policy.evaluate(PolicySettings(policy_enabled=False), PolicyAction.CANCEL, 1)

        assert decision.allowed is True
        assert decision.reason is None

    def test_unknown_tenant_allows(self, policy):
        assert policy.evaluate(None, PolicyAction.CANCEL, 1).allowed is True

    def test_unscheduled_booking_allows(self, policy):
        assert policy.evaluate(ENABLED, PolicyAction.CANCEL, None).allowed is True

    def test_inside_window_is_blocked_with_details(self, policy):
        decision = policy.evaluate(ENABLED, PolicyAction.CANCEL, 12.345)

        assert decision.allowed is False
        assert decision.reason == "Cannot cancel within 24 hours of the appointment"
        assert decision.policy_text == "Cancellations need 24 hours notice"
        assert decision.hours_remaining == 12.3
        assert decision.admin_can_override is True

    def test_exactly_at_window_is_allowed(self, policy):
        assert policy.evaluate(ENABLED, PolicyAction.CANCEL, 24).allowed is True

    def test_reschedule_uses_its_own_window(self, policy):
        assert policy.evaluate(ENABLED, PolicyAction.RESCHEDULE, 13).allowed is True

        decision = policy.evaluate(ENABLED, PolicyAction.RESCHEDULE, 11)
        assert decision.allowed is False
        # No reschedule text configured
        assert decision.policy_text is None

    @pytest.mark.parametrize(
        ("hours", "expected"),
        [(12.25, 12.3), (12.24, 12.2), (0.05, 0.1), (-3.0, 0.0)],
    )
    def test_hours_remaining_rounds_half_up_and_clamps(self, policy, hours, expected):
        assert policy.evaluate(ENABLED, PolicyAction.CANCEL, hours).hours_remaining == expected


class TestReminderPlanning:
    def test_reminder_is_lead_hours_before_start(self):
        start = NOW + timedelta(hours=48)

        planned = plan_booking_reminder(start, NOW, lead_hours=24)

        assert planned is not None
        assert planned.type == ReminderType.REMINDER
        assert planned.scheduled_at == NOW + timedelta(hours=24)

    def test_no_reminder_when_lead_time_already_passed(self):
        assert plan_booking_reminder(NOW + timedelta(hours=10), NOW, lead_hours=24) is None

    def test_every_completion_gets_a_follow_up(self):
        planned = plan_completion_reminders(ServiceKind.OTHER, NOW, NotificationSettings())

        assert [(p.type, p.scheduled_at) for p in planned] == [
            (ReminderType.FOLLOW_UP, NOW + timedelta(hours=2)),
        ]

    def test_consult_adds_consult_follow_up(self):
        settings = NotificationSettings(consult_follow_up_days=5)

        planned = plan_completion_reminders(ServiceKind.CONSULT, NOW, settings)

        assert [p.type for p in planned] == [ReminderType.FOLLOW_UP, ReminderType.CONSULT_FOLLOW_UP]
        assert planned[1].scheduled_at == NOW + timedelta(days=5)

    def test_treatment_adds_aftercare_and_check_in(self):
        planned = plan_completion_reminders(ServiceKind.TREATMENT, NOW, NotificationSettings())

        assert [(p.type, p.scheduled_at) for p in planned] == [
            (ReminderType.FOLLOW_UP, NOW + timedelta(hours=2)),
            (ReminderType.AFTERCARE, NOW),
            (ReminderType.TREATMENT_CHECK_IN, NOW + timedelta(hours=24)),
        ]
