"""
Тесты привычек (core/habits.py).
"""

from datetime import date

import pytest

from core.habits import (
    HabitForm, last_n_days, calculate_streak, completed_count, has_streak_badge, is_done,
)

TODAY = date(2026, 3, 7)
DAYS = last_n_days(TODAY)


def _log(day, completed=True):
    return {"date": f"{day}T00:00:00.000Z", "completed": completed}


class TestWindow:

    def test_seven_days_oldest_first(self):
        assert DAYS[0] == "2026-03-01"
        assert DAYS[-1] == "2026-03-07"
        assert len(DAYS) == 7

    def test_is_done_matches_date_prefix(self):
        logs = [_log("2026-03-05"), _log("2026-03-06", completed=False)]
        assert is_done(logs, "2026-03-05")
        assert not is_done(logs, "2026-03-06")


class TestStreak:

    def test_streak_counts_back_from_today(self):
        logs = [_log(day) for day in DAYS[-3:]]
        assert calculate_streak(logs, DAYS) == 3
        assert has_streak_badge(3)

    def test_missed_today_breaks_streak(self):
        logs = [_log(day) for day in DAYS[:-1]]
        assert calculate_streak(logs, DAYS) == 0
        assert completed_count(logs, DAYS) == 6

    def test_no_logs(self):
        assert calculate_streak([], DAYS) == 0
        assert not has_streak_badge(2)


class TestHabitForm:

    def test_weekly_target(self):
        form = HabitForm()
        form.set_frequency("weekly")
        form.set_target(3)
        assert form.target_per_week == 3

    def test_daily_resets_target(self):
        form = HabitForm(frequency="weekly", target_per_week=2)
        form.set_frequency("daily")
        assert form.target_per_week == 7

    @pytest.mark.parametrize("target", [0, 8])
    def test_target_out_of_range(self, target):
        form = HabitForm(frequency="weekly")
        with pytest.raises(ValueError):
            form.set_target(target)

    def test_target_only_for_weekly(self):
        with pytest.raises(ValueError):
            HabitForm().set_target(3)

    def test_title_is_required_and_trimmed(self):
        form = HabitForm()
        assert not form.is_valid
        form.set_title("  Read scripture  ")
        assert form.title == "Read scripture"
        assert form.is_valid
