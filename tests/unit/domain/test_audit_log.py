from datetime import UTC, datetime

import pytest

from bookwise.domains.scheduling.domain.value_objects import (
    AuditLogName,
    DepositRequestEntry,
    OverrideEntry,
    OverrideKind,
    SelfServeEntry,
    SelfServeKind,
    append_log_entry,
    read_log,
)

AT = datetime(2026, 3, 2, 8, 0, tzinfo=UTC)


def override(reason: str = "Paid in cash") -> OverrideEntry:
    return OverrideEntry(
        kind=OverrideKind.DEPOSIT_OVERRIDE,
        action="CONFIRMED",
        reason=reason,
        timestamp=AT,
        staff_id="staff-1",
        staff_name="Admin",
    )


class TestAppendLogEntry:
    def test_missing_log_is_created(self):
        fields = append_log_entry({"intake": "yes"}, override())

        assert fields["intake"] == "yes"
        assert fields["overrideLog"] == [
            {
                "type": "DEPOSIT_OVERRIDE",
                "action": "CONFIRMED",
                "reason": "Paid in cash",
                "staffId": "staff-1",
                "staffName": "Admin",
                "timestamp": "2026-03-02T08:00:00+00:00",
            }
        ]

    @pytest.mark.parametrize("malformed", [None, "oops", {"a": 1}, 42])
    def test_malformed_log_is_treated_as_empty(self, malformed):
        fields = append_log_entry({"depositRequestLog": malformed}, DepositRequestEntry(sent_at=AT))

        assert fields["depositRequestLog"] == [{"sentAt": "2026-03-02T08:00:00+00:00"}]

    def test_existing_entries_are_kept_and_input_not_mutated(self):
        original = {"depositRequestLog": [{"sentAt": "2026-03-01T08:00:00+00:00"}]}

        fields = append_log_entry(original, DepositRequestEntry(sent_at=AT))

        assert len(fields["depositRequestLog"]) == 2
        assert len(original["depositRequestLog"]) == 1

    def test_none_custom_fields(self):
        fields = append_log_entry(None, SelfServeEntry(kind=SelfServeKind.CANCEL_LINK_SENT, at=AT))

        assert fields == {"selfServeLog": [{"type": "CANCEL_LINK_SENT", "at": "2026-03-02T08:00:00+00:00"}]}


class TestEntries:
    def test_override_requires_reason(self):
        with pytest.raises(ValueError):
            override(reason="   ")

    def test_self_serve_entry_omits_unset_fields(self):
        entry = SelfServeEntry(kind=SelfServeKind.RESCHEDULED_BY_CUSTOMER, at=AT, new_start_time=AT)

        assert entry.to_dict() == {
            "type": "RESCHEDULED_BY_CUSTOMER",
            "at": "2026-03-02T08:00:00+00:00",
            "newStartTime": "2026-03-02T08:00:00+00:00",
        }
        assert entry.is_customer_initiated is True

    def test_read_log_parses_entries_and_skips_bad_rows(self):
        fields = append_log_entry({}, override())
        fields["overrideLog"].append({"type": "NOT_A_KIND"})
        fields["overrideLog"].append("garbage")

        entries = read_log(fields, AuditLogName.OVERRIDE)

        assert entries == [override()]

    def test_read_log_of_missing_log_is_empty(self):
        assert read_log({}, AuditLogName.SELF_SERVE) == []
