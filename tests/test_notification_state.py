"""Tests for src.core.notification_state — flag transitions."""

from datetime import datetime

from src.core.notification_state import (
    initialize_occurrence_key,
    mark_handled,
    mark_lead,
    mark_start,
    rearm,
    repair_legacy_flags,
)
from src.data.models import RepeatRule, Schedule


def _weekly(**kwargs):
    defaults = dict(id=1, title="Standup", time="09:00", repeat=RepeatRule(days=(1,)))
    defaults.update(kwargs)
    return Schedule(**defaults)


class TestRearm:
    def test_new_key_resets_flags(self):
        s = _weekly(pre_notified=True, start_notified=True, last_occurrence_key="2026-10-12")
        assert rearm(s, "2026-10-19") is True
        assert s.last_occurrence_key == "2026-10-19"
        assert s.pre_notified is False
        assert s.start_notified is False
        assert s.notified is False

    def test_same_key_twice_is_idempotent(self):
        s = _weekly(last_occurrence_key="2026-10-12")
        assert rearm(s, "2026-10-19") is True
        mark_lead(s)
        assert rearm(s, "2026-10-19") is False
        assert s.pre_notified is True
        assert s.last_occurrence_key == "2026-10-19"

    def test_one_off_is_untouched(self):
        s = Schedule(id=2, title="x", date="2026-10-19", time="09:00",
                     pre_notified=True, last_occurrence_key="2026-10-19")
        assert rearm(s, "2026-10-26") is False
        assert s.pre_notified is True
        assert s.last_occurrence_key == "2026-10-19"

    def test_empty_key_is_noop(self):
        s = _weekly(pre_notified=True, last_occurrence_key="2026-10-12")
        assert rearm(s, "") is False
        assert rearm(s, None) is False
        assert s.pre_notified is True


class TestMarks:
    def test_notified_is_derived(self):
        s = _weekly()
        assert s.notified is False
        mark_lead(s)
        assert s.notified is True
        assert s.start_notified is False

    def test_start_closes_lead_too(self):
        s = _weekly()
        mark_start(s)
        assert s.pre_notified is True
        assert s.start_notified is True

    def test_handled_sets_both(self):
        s = _weekly()
        mark_handled(s)
        assert (s.pre_notified, s.start_notified) == (True, True)

    def test_notified_is_never_serialized(self):
        s = _weekly()
        mark_start(s)
        assert s.notified is True
        assert "notified" not in s.to_dict()


class TestRepairLegacyFlags:
    NOW = datetime(2026, 10, 19, 8, 0)

    def test_future_occurrence_sets_lead_only(self):
        s = _weekly()
        changed = repair_legacy_flags(s, True, datetime(2026, 10, 19, 9, 0), self.NOW)
        assert changed is True
        assert s.pre_notified is True
        assert s.start_notified is False

    def test_past_occurrence_sets_both(self):
        s = _weekly()
        repair_legacy_flags(s, True, datetime(2026, 10, 19, 7, 0), self.NOW)
        assert (s.pre_notified, s.start_notified) == (True, True)

    def test_consistent_record_left_alone(self):
        s = _weekly(start_notified=True)
        assert repair_legacy_flags(s, True, None, self.NOW) is False
        assert s.pre_notified is False

    def test_not_legacy_notified(self):
        s = _weekly()
        assert repair_legacy_flags(s, False, None, self.NOW) is False
        assert s.notified is False


class TestInitializeOccurrenceKey:
    def test_weekly_gets_next_occurrence_key(self):
        s = _weekly()
        assert initialize_occurrence_key(s, datetime(2026, 10, 20, 10, 0)) is True
        assert s.last_occurrence_key == "2026-10-26"

    def test_one_off_gets_its_date(self):
        s = Schedule(id=3, title="x", date="2026-11-01", time="10:00")
        assert initialize_occurrence_key(s, datetime(2026, 10, 19)) is True
        assert s.last_occurrence_key == "2026-11-01"

    def test_existing_key_kept(self):
        s = _weekly(last_occurrence_key="2026-10-12")
        assert initialize_occurrence_key(s, datetime(2026, 10, 20)) is False
        assert s.last_occurrence_key == "2026-10-12"
