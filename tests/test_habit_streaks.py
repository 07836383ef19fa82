"""Tests for the statistics derived from a habit's completion log.

Covers current ("alive") streaks, longest streaks, completion rate,
completed-today and the calendar history, including edge cases like:
- Consecutive days ending today or yesterday
- Gaps in habit completion
- Runs that went stale before yesterday
- Empty habit data
"""

from __future__ import annotations

import pytest

from conftest import TODAY, make_logs
from streakbook.models.habit import HabitLog
from streakbook.services.dates import shift_day_key
from streakbook.services.stats import (
    build_history,
    calculate_completion_rate,
    calculate_longest_streak,
    calculate_streak,
    group_weeks,
    is_completed_today,
)


def days_ago(n: int) -> str:
    return shift_day_key(TODAY, -n)


class TestCurrentStreak:
    """Tests for the current consecutive-day streak."""

    def test_no_logs_returns_zero(self):
        assert calculate_streak("h1", [], today=TODAY) == 0

    def test_single_completion_today_returns_one(self):
        logs = make_logs("h1", {TODAY: True})
        assert calculate_streak("h1", logs, today=TODAY) == 1

    def test_three_consecutive_days_ending_today(self):
        logs = make_logs("h1", {TODAY: True, days_ago(1): True, days_ago(2): True})
        assert calculate_streak("h1", logs, today=TODAY) == 3

    def test_three_consecutive_days_ending_yesterday(self):
        """Today is not over yet, so a run ending yesterday is still alive."""
        logs = make_logs("h1", {days_ago(1): True, days_ago(2): True, days_ago(3): True})
        assert calculate_streak("h1", logs, today=TODAY) == 3

    def test_gap_stops_the_count(self):
        logs = make_logs("h1", {TODAY: True, days_ago(1): True, days_ago(2): True})
        before = calculate_streak("h1", logs, today=TODAY)

        # Completed D-4, skipping D-3
        logs.append(HabitLog(habit_id="h1", day=days_ago(4), completed=True))

        assert before == 3
        assert calculate_streak("h1", logs, today=TODAY) == 3

    def test_most_recent_two_days_ago_resets(self):
        logs = make_logs("h1", {days_ago(2): True})
        assert calculate_streak("h1", logs, today=TODAY) == 0

    def test_stale_consecutive_run_reports_zero(self):
        """A run ending before yesterday is broken, not a streak of 3."""
        logs = make_logs("h1", {days_ago(2): True, days_ago(3): True, days_ago(4): True})
        assert calculate_streak("h1", logs, today=TODAY) == 0

    def test_missed_day_breaks_streak(self):
        logs = make_logs("h1", {TODAY: True, days_ago(1): False, days_ago(2): True})
        assert calculate_streak("h1", logs, today=TODAY) == 1

    def test_only_missed_records_returns_zero(self):
        logs = make_logs("h1", {TODAY: False, days_ago(1): False})
        assert calculate_streak("h1", logs, today=TODAY) == 0

    def test_duplicate_days_are_counted_once(self):
        logs = make_logs("h1", {TODAY: True, days_ago(1): True})
        logs.append(HabitLog(habit_id="h1", day=TODAY, completed=True))
        assert calculate_streak("h1", logs, today=TODAY) == 2

    def test_other_habits_are_ignored(self):
        logs = make_logs("h1", {TODAY: True}) + make_logs("h2", {days_ago(1): True, days_ago(2): True})
        assert calculate_streak("h1", logs, today=TODAY) == 1
        assert calculate_streak("h2", logs, today=TODAY) == 2

    def test_unsorted_input(self):
        logs = make_logs("h1", {days_ago(2): True, TODAY: True, days_ago(1): True})
        assert calculate_streak("h1", logs, today=TODAY) == 3

    def test_streak_across_month_boundary(self):
        logs = make_logs("h1", {"2024-03-01": True, "2024-02-29": True, "2024-02-28": True})
        assert calculate_streak("h1", logs, today="2024-03-01") == 3


class TestLongestStreak:
    """Tests for the longest historical streak."""

    def test_no_logs_returns_zero(self):
        assert calculate_longest_streak("h1", []) == 0

    def test_multiple_runs_returns_longest(self):
        days = {}
        for start, length in (("2024-01-01", 3), ("2024-01-10", 7), ("2024-01-20", 4)):
            for i in range(length):
                days[shift_day_key(start, i)] = True
        assert calculate_longest_streak("h1", make_logs("h1", days)) == 7

    def test_stale_runs_still_count(self):
        logs = make_logs("h1", {days_ago(5): True, days_ago(6): True})
        assert calculate_streak("h1", logs, today=TODAY) == 0
        assert calculate_longest_streak("h1", logs) == 2

    def test_missed_entries_split_runs(self):
        days = {shift_day_key("2024-01-01", i): i != 2 for i in range(5)}
        assert calculate_longest_streak("h1", make_logs("h1", days)) == 2


class TestCompletionRate:
    def test_no_logs_returns_zero(self):
        assert calculate_completion_rate("h1", []) == 0.0

    def test_two_of_three(self):
        logs = make_logs("h1", {"2024-01-01": True, "2024-01-02": False, "2024-01-03": True})
        assert calculate_completion_rate("h1", logs) == pytest.approx(66.67, abs=0.01)

    def test_untracked_days_do_not_count(self):
        logs = make_logs("h1", {"2024-01-01": True, "2024-01-09": True})
        assert calculate_completion_rate("h1", logs) == 100.0

    def test_all_missed(self):
        logs = make_logs("h1", {"2024-01-01": False})
        assert calculate_completion_rate("h1", logs) == 0.0

    def test_scoped_to_habit(self):
        logs = make_logs("h1", {"2024-01-01": True}) + make_logs("h2", {"2024-01-01": False})
        assert calculate_completion_rate("h1", logs) == 100.0
        assert calculate_completion_rate("h2", logs) == 0.0


class TestCompletedToday:
    def test_completed_today(self):
        assert is_completed_today("h1", make_logs("h1", {TODAY: True}), today=TODAY)

    def test_missed_record_today(self):
        assert not is_completed_today("h1", make_logs("h1", {TODAY: False}), today=TODAY)

    def test_only_yesterday(self):
        assert not is_completed_today("h1", make_logs("h1", {days_ago(1): True}), today=TODAY)

    def test_no_logs(self):
        assert not is_completed_today("h1", [], today=TODAY)


class TestHistory:
    def test_window_spans_months_back_through_today(self):
        logs = make_logs("h1", {"2024-03-15": True, "2024-02-20": True, "2024-01-01": True})

        history = build_history("h1", logs, months=1, today="2024-03-15")

        assert history[0].day == "2024-02-15"
        assert history[-1].day == "2024-03-15"
        assert len(history) == 30
        completed = [cell.day for cell in history if cell.completed]
        assert completed == ["2024-02-20", "2024-03-15"]

    def test_missed_records_show_as_not_completed(self):
        logs = make_logs("h1", {"2024-03-15": False})
        history = build_history("h1", logs, months=1, today="2024-03-15")
        assert not history[-1].completed

    def test_group_weeks(self):
        history = build_history("h1", [], months=1, today="2024-03-15")
        weeks = group_weeks(history)
        assert [len(week) for week in weeks] == [7, 7, 7, 7, 2]
        assert weeks[1][0].day == "2024-02-22"
