from datetime import UTC, datetime, time

import pytest

from bookwise.domains.scheduling.domain.value_objects import (
    PolicySettings,
    QuietHours,
    TimeRange,
    WaitlistSettings,
)


def at(hour: int, minute: int = 0) -> datetime:
    return datetime(2026, 3, 2, hour, minute, tzinfo=UTC)


class TestTimeRange:
    def test_touching_ranges_do_not_overlap(self):
        assert not TimeRange(at(9), at(10)).overlaps(TimeRange(at(10), at(11)))

    def test_partial_overlap(self):
        assert TimeRange(at(9), at(10, 30)).overlaps(TimeRange(at(10), at(11)))

    def test_containment_overlaps(self):
        assert TimeRange(at(9), at(12)).overlaps(TimeRange(at(10), at(11)))

    def test_end_must_be_after_start(self):
        with pytest.raises(ValueError):
            TimeRange(at(10), at(10))

    def test_from_duration(self):
        assert TimeRange.from_duration(at(9), 45) == TimeRange(at(9), at(9, 45))


class TestQuietHours:
    @pytest.mark.parametrize(
        ("moment", "quiet"),
        [
            (time(21, 0), True),
            (time(23, 30), True),
            (time(0, 0), True),
            (time(8, 59), True),
            (time(9, 0), False),
            (time(12, 0), False),
            (time(20, 59), False),
        ],
    )
    def test_default_window_wraps_midnight(self, moment, quiet):
        assert QuietHours().contains(moment) is quiet

    def test_same_day_window(self):
        lunch = QuietHours.parse("12:00", "13:30")

        assert lunch.contains(time(12, 45))
        assert not lunch.contains(time(13, 30))
        assert not lunch.contains(time(11, 59))

    def test_equal_bounds_mean_never_quiet(self):
        assert not QuietHours(start=time(9), end=time(9)).contains(time(9))

    def test_seconds_are_ignored(self):
        assert not QuietHours().contains(time(20, 59, 59))


class TestTenantSettings:
    def test_policy_overrides_merge_with_defaults(self):
        settings = PolicySettings.from_overrides({"policyEnabled": True, "cancellationWindowHours": 48})

        assert settings.policy_enabled is True
        assert settings.cancellation_window_hours == 48
        assert settings.reschedule_window_hours == 24

    def test_waitlist_overrides(self):
        settings = WaitlistSettings.from_overrides(
            {"offerCount": 5, "expiryMinutes": 30, "quietStart": "22:00", "quietEnd": "07:00"}
        )

        assert settings.offer_count == 5
        assert settings.expiry_minutes == 30
        assert settings.quiet_hours == QuietHours(start=time(22), end=time(7))

    def test_waitlist_defaults(self):
        settings = WaitlistSettings.from_overrides(None)

        assert (settings.offer_count, settings.expiry_minutes) == (3, 15)
        assert str(settings.quiet_hours) == "21:00-09:00"

    def test_invalid_waitlist_expiry_is_rejected(self):
        with pytest.raises(ValueError):
            WaitlistSettings(expiry_minutes=0)
