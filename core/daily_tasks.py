"""
Задачи дня: библиотека задач, прогресс за день и выполнение.

Библиотека задач: статический YAML (config/daily_tasks.yaml).
Прогресс: серверные данные (GET /api/daily-tasks/progress?date=...),
у клиента нет своей копии выполненных задач: после выполнения прогресс
перечитывается через сброс кеша.

Использование:
    library = load_task_library()
    board = TaskBoard(backend, library)
    result = await board.complete(user, "morning-prayer", today)
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from functools import lru_cache
from typing import Optional

from config import APP_TZ, DAILY_TASKS_PATH, DAILY_POINTS_GOAL, DEFAULT_EXPANDED_TIERS, AudienceSegment, Tier
from core.tools import load_yaml, localized

logger = logging.getLogger(__name__)

# Результаты complete()
ALREADY_COMPLETED = "already_completed"
COMPLETED = "completed"
UNKNOWN_TASK = "unknown_task"

# Вехи дня
MILESTONE_ESSENTIALS = "essentials_complete"
MILESTONE_DAILY_GOAL = "daily_goal"


@dataclass
class DailyTask:
    """Задача из библиотеки."""
    id: str
    tier: str
    points: int
    minutes: int
    icon: str
    audience: list[str]
    title: dict
    description: dict

    def title_for(self, lang: str) -> str:
        return localized(self.title, lang, self.id)

    def description_for(self, lang: str) -> str:
        return localized(self.description, lang)


@dataclass
class TaskCompletion:
    task_id: str
    completed_at: Optional[str]
    points: int


@dataclass
class DailyProgress:
    """Прогресс за день (серверные данные)."""
    date: str
    completions: list[TaskCompletion] = field(default_factory=list)

    @classmethod
    def from_payload(cls, payload: Optional[dict], day: str) -> "DailyProgress":
        """Разобрать ответ API.

        Сервер отдаёт completedTasks; поле completions тоже принимается.
        """
        if not payload:
            return cls(date=day)
        raw = payload.get('completedTasks')
        if raw is None:
            raw = payload.get('completions') or []
        completions = [
            TaskCompletion(
                task_id=item.get('taskId'),
                completed_at=item.get('completedAt'),
                points=int(item.get('points') or 0),
            )
            for item in raw
            if item.get('taskId')
        ]
        return cls(date=payload.get('date') or day, completions=completions)

    @property
    def total_points(self) -> int:
        """Сумма очков всех выполнений."""
        return sum(c.points for c in self.completions)

    @property
    def completed_ids(self) -> set[str]:
        return {c.task_id for c in self.completions}

    def is_completed(self, task_id: str) -> bool:
        return task_id in self.completed_ids


# ═══════════════════════════════════════════════════════════
# LIBRARY
# ═══════════════════════════════════════════════════════════

@lru_cache(maxsize=None)
def _load_raw() -> dict:
    return load_yaml(DAILY_TASKS_PATH)


def load_task_library() -> list[DailyTask]:
    """Все задачи из config/daily_tasks.yaml."""
    return [
        DailyTask(
            id=item['id'],
            tier=item['tier'],
            points=int(item['points']),
            minutes=int(item.get('minutes', 0)),
            icon=item.get('icon', ''),
            audience=list(item.get('audience', [AudienceSegment.GENERAL])),
            title=item.get('title', {}),
            description=item.get('description', {}),
        )
        for item in _load_raw().get('tasks', [])
    ]


def tier_info(tier: str) -> dict:
    """Иконка и подпись уровня."""
    return _load_raw().get('tiers', {}).get(tier, {})


def available_tasks(library: list[DailyTask], segment: str) -> list[DailyTask]:
    """Задачи, доступные сегменту: его собственные и общие (general)."""
    return [
        task for task in library
        if segment in task.audience or AudienceSegment.GENERAL in task.audience
    ]


def tasks_by_tier(tasks: list[DailyTask]) -> dict[str, list[DailyTask]]:
    grouped = {tier: [] for tier in Tier.ALL}
    for task in tasks:
        grouped.setdefault(task.tier, []).append(task)
    return grouped


def completion_by_tier(tasks: list[DailyTask], progress: DailyProgress) -> dict[str, tuple[int, int]]:
    """tier → (выполнено, всего)."""
    result = {}
    for tier, items in tasks_by_tier(tasks).items():
        done = sum(1 for task in items if progress.is_completed(task.id))
        result[tier] = (done, len(items))
    return result


def next_essential(tasks: list[DailyTask], progress: DailyProgress) -> Optional[DailyTask]:
    """Первая невыполненная главная задача."""
    for task in tasks:
        if task.tier == Tier.ESSENTIAL and not progress.is_completed(task.id):
            return task
    return None


def essentials_complete(tasks: list[DailyTask], progress: DailyProgress) -> bool:
    essentials = [task for task in tasks if task.tier == Tier.ESSENTIAL]
    return bool(essentials) and all(progress.is_completed(task.id) for task in essentials)


def today_iso(now: Optional[datetime] = None) -> str:
    """Дата в формате YYYY-MM-DD (по часовому поясу приложения)."""
    return (now or datetime.now(APP_TZ)).date().isoformat()


# ═══════════════════════════════════════════════════════════
# BOARD
# ═══════════════════════════════════════════════════════════

@dataclass
class CompletionResult:
    status: str
    task: Optional[DailyTask] = None
    points: int = 0
    milestones: list[str] = field(default_factory=list)


class TaskBoard:
    """Доска задач дня: прогресс, выполнение, раскрытие уровней."""

    def __init__(self, backend, library: Optional[list[DailyTask]] = None):
        self.backend = backend
        self.library = library if library is not None else load_task_library()
        self._expanded: dict[int, set[str]] = {}

    def tasks_for(self, user) -> list[DailyTask]:
        return available_tasks(self.library, user.audience_segment)

    def find(self, task_id: str) -> Optional[DailyTask]:
        for task in self.library:
            if task.id == task_id:
                return task
        return None

    async def progress(self, user, day: str, force: bool = False) -> DailyProgress:
        payload = await self.backend.daily_progress(user.chat_id, day, force=force)
        return DailyProgress.from_payload(payload, day)

    async def complete(self, user, task_id: str, day: str) -> CompletionResult:
        """Выполнить задачу.

        Повторное выполнение: no-op с результатом ALREADY_COMPLETED,
        запрос не отправляется. Ошибка API пробрасывается.
        """
        task = self.find(task_id)
        if task is None:
            return CompletionResult(status=UNKNOWN_TASK)

        before = await self.progress(user, day)
        if before.is_completed(task_id):
            return CompletionResult(status=ALREADY_COMPLETED, task=task)

        await self.backend.complete_task(user.chat_id, task.id, task.points, day)
        logger.info(f"[Daily] chat_id={user.chat_id} выполнил {task.id} (+{task.points})")

        after = await self.progress(user, day)
        return CompletionResult(
            status=COMPLETED,
            task=task,
            points=task.points,
            milestones=self._milestones(self.tasks_for(user), before, after),
        )

    @staticmethod
    def _milestones(tasks: list[DailyTask], before: DailyProgress, after: DailyProgress) -> list[str]:
        """Вехи, достигнутые именно этим выполнением."""
        reached = []
        if essentials_complete(tasks, after) and not essentials_complete(tasks, before):
            reached.append(MILESTONE_ESSENTIALS)
        if before.total_points < DAILY_POINTS_GOAL <= after.total_points:
            reached.append(MILESTONE_DAILY_GOAL)
        return reached

    # --- раскрытие уровней ---

    def expanded(self, chat_id: int) -> set[str]:
        if chat_id not in self._expanded:
            self._expanded[chat_id] = set(DEFAULT_EXPANDED_TIERS)
        return self._expanded[chat_id]

    def toggle_tier(self, chat_id: int, tier: str) -> bool:
        """Раскрыть/свернуть уровень. Возвращает новое состояние (True = раскрыт)."""
        expanded = self.expanded(chat_id)
        if tier in expanded:
            expanded.discard(tier)
            return False
        expanded.add(tier)
        return True


def goal_reached(progress: DailyProgress) -> bool:
    return progress.total_points >= DAILY_POINTS_GOAL
