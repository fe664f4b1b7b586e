"""
Привычки vision-сессии: окно последних дней, серия (streak), форма создания.
"""

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional

from config import HABIT_WINDOW_DAYS, HABIT_STREAK_BADGE

FREQUENCY_DAILY = "daily"
FREQUENCY_WEEKLY = "weekly"
FREQUENCIES = (FREQUENCY_DAILY, FREQUENCY_WEEKLY)

TITLE_MAX_LENGTH = 100


def last_n_days(today: date, n: int = HABIT_WINDOW_DAYS) -> list[str]:
    """Последние n дней от старого к новому, включая today (YYYY-MM-DD)."""
    return [(today - timedelta(days=offset)).isoformat() for offset in range(n - 1, -1, -1)]


def log_for(logs: list[dict], day: str) -> Optional[dict]:
    """Запись лога за день."""
    for entry in logs:
        if str(entry.get('date', ''))[:10] == day:
            return entry
    return None


def is_done(logs: list[dict], day: str) -> bool:
    entry = log_for(logs, day)
    return bool(entry and entry.get('completed'))


def calculate_streak(logs: list[dict], days: list[str]) -> int:
    """Серия подряд выполненных дней, от последнего дня окна назад.

    Первый невыполненный день обрывает серию.
    """
    if not logs:
        return 0
    streak = 0
    for day in reversed(days):
        if not is_done(logs, day):
            break
        streak += 1
    return streak


def completed_count(logs: list[dict], days: list[str]) -> int:
    """Сколько дней окна выполнено."""
    return sum(1 for day in days if is_done(logs, day))


def has_streak_badge(streak: int) -> bool:
    return streak >= HABIT_STREAK_BADGE


@dataclass
class HabitForm:
    """Черновик новой привычки."""
    title: str = ""
    frequency: str = FREQUENCY_DAILY
    target_per_week: int = 7

    def set_frequency(self, frequency: str) -> None:
        if frequency not in FREQUENCIES:
            raise ValueError(f"Неизвестная частота: {frequency}")
        self.frequency = frequency
        if frequency == FREQUENCY_DAILY:
            self.target_per_week = 7

    def set_target(self, target: int) -> None:
        """Цель в неделю (только для weekly, 1–7)."""
        if self.frequency != FREQUENCY_WEEKLY:
            raise ValueError("Цель в неделю задаётся только для еженедельных привычек")
        if not 1 <= target <= 7:
            raise ValueError(f"Цель вне диапазона 1–7: {target}")
        self.target_per_week = target

    def set_title(self, title: str) -> None:
        self.title = title.strip()[:TITLE_MAX_LENGTH]

    @property
    def is_valid(self) -> bool:
        return bool(self.title)
