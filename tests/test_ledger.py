"""Tests for the completion ledger."""

from __future__ import annotations

from datetime import date, datetime, timedelta
from unittest.mock import MagicMock

import pytest

from breathebubble.ledger import HISTORY_DAYS, CompletionLedger, date_key
from breathebubble.models import ActivityType

TODAY = date(2026, 10, 19)


class TestDateKey:
    def test_date(self) -> None:
        assert date_key(date(2026, 3, 7)) == "2026-03-07"

    def test_datetime_uses_calendar_day(self) -> None:
        assert date_key(datetime(2026, 3, 7, 0, 1)) == "2026-03-07"
        assert date_key(datetime(2026, 3, 7, 23, 59)) == "2026-03-07"


class TestCompletions:
    def test_record_twice(self) -> None:
        ledger = CompletionLedger()
        assert ledger.record_completion(ActivityType.BREATHWORK, TODAY) == 1
        assert ledger.record_completion(ActivityType.BREATHWORK, TODAY) == 2
        assert ledger.get_completions(TODAY) == {ActivityType.BREATHWORK: 2}

    def test_same_day_different_times(self) -> None:
        ledger = CompletionLedger()
        ledger.record_completion(ActivityType.SQUATS, datetime(2026, 10, 19, 8))
        ledger.record_completion(ActivityType.SQUATS, datetime(2026, 10, 19, 22))
        assert ledger.get_completions(TODAY)[ActivityType.SQUATS] == 2

    def test_unknown_day_is_empty(self) -> None:
        assert CompletionLedger().get_completions(TODAY) == {}

    def test_get_completions_returns_copy(self) -> None:
        ledger = CompletionLedger()
        ledger.record_completion(ActivityType.PUSHUPS, TODAY)
        ledger.get_completions(TODAY)[ActivityType.PUSHUPS] = 99
        assert ledger.get_completions(TODAY)[ActivityType.PUSHUPS] == 1

    def test_notifies_with_key(self) -> None:
        ledger = CompletionLedger()
        ledger.on_change = MagicMock()
        ledger.record_completion(ActivityType.PUSHUPS, TODAY)
        ledger.on_change.assert_called_once_with("2026-10-19")


class TestPercentage:
    def test_no_enabled_activities(self) -> None:
        ledger = CompletionLedger()
        ledger.record_completion(ActivityType.BREATHWORK, TODAY)
        assert ledger.get_completion_percentage(TODAY, []) == 0.0

    def test_half_done(self) -> None:
        ledger = CompletionLedger()
        ledger.record_completion(ActivityType.BREATHWORK, TODAY)
        ledger.record_completion(ActivityType.BREATHWORK, TODAY)
        pct = ledger.get_completion_percentage(
            TODAY, [ActivityType.BREATHWORK, ActivityType.PUSHUPS]
        )
        assert pct == pytest.approx(0.5)

    def test_duplicates_in_rotation_count_once(self) -> None:
        ledger = CompletionLedger()
        ledger.record_completion(ActivityType.BREATHWORK, TODAY)
        pct = ledger.get_completion_percentage(
            TODAY, [ActivityType.BREATHWORK, ActivityType.PUSHUPS, ActivityType.BREATHWORK]
        )
        assert pct == pytest.approx(0.5)

    def test_disabled_completions_ignored(self) -> None:
        ledger = CompletionLedger()
        ledger.record_completion(ActivityType.SITUPS, TODAY)
        assert ledger.get_completion_percentage(TODAY, [ActivityType.BREATHWORK]) == 0.0


class TestDayTimes:
    def test_start_then_end(self) -> None:
        ledger = CompletionLedger()
        start = datetime(2026, 10, 19, 8, 0)
        end = datetime(2026, 10, 19, 17, 0)
        ledger.record_day_start(start)
        ledger.record_day_end(end)
        times = ledger.get_day_times(TODAY)
        assert times is not None
        assert times.start_time == start
        assert times.end_time == end

    def test_end_without_start(self) -> None:
        ledger = CompletionLedger()
        ledger.record_day_end(datetime(2026, 10, 19, 17, 0))
        times = ledger.get_day_times(TODAY)
        assert times is not None
        assert times.start_time is None

    def test_missing_day(self) -> None:
        assert CompletionLedger().get_day_times(TODAY) is None


class TestHistory:
    def test_window_is_oldest_first(self) -> None:
        summaries = CompletionLedger().history([ActivityType.BREATHWORK], today=TODAY)
        assert len(summaries) == HISTORY_DAYS
        assert summaries[-1].day == TODAY
        assert summaries[0].day == TODAY - timedelta(days=HISTORY_DAYS - 1)

    def test_summary_contents(self) -> None:
        ledger = CompletionLedger()
        yesterday = TODAY - timedelta(days=1)
        ledger.record_completion(ActivityType.BREATHWORK, yesterday)
        ledger.record_day_start(datetime(2026, 10, 18, 9, 0))
        summaries = ledger.history([ActivityType.BREATHWORK], today=TODAY, days=2)
        assert [s.day for s in summaries] == [yesterday, TODAY]
        assert summaries[0].percentage == 1.0
        assert summaries[0].total == 1
        assert summaries[0].times.start_time == datetime(2026, 10, 18, 9, 0)
        assert summaries[1].percentage == 0.0

    def test_old_entries_outside_window(self) -> None:
        ledger = CompletionLedger()
        ledger.record_completion(ActivityType.BREATHWORK, TODAY - timedelta(days=200))
        summaries = ledger.history([ActivityType.BREATHWORK], today=TODAY)
        assert all(s.total == 0 for s in summaries)


class TestReset:
    def test_reset_clears_everything(self) -> None:
        ledger = CompletionLedger()
        ledger.on_change = MagicMock()
        ledger.record_completion(ActivityType.BREATHWORK, TODAY)
        ledger.record_day_start(datetime(2026, 10, 19, 8))
        ledger.reset()
        assert ledger.daily_completions == {}
        assert ledger.daily_times == {}
        ledger.on_change.assert_called_with(None)
