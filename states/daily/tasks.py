"""
Стейт: Задачи дня.

Экран показывает очки за день против цели (50), уровни задач
(главные / бонусные / вызов) со сворачиванием и кнопками «выполнить».
Текст "c" выполняет следующую невыполненную главную задачу.

После выполнения прогресс перечитывается с сервера; вехи «все главные
выполнены» и «цель дня» показываются, только когда их достигло именно
это выполнение.
"""

import logging
from typing import Optional

from aiogram.types import Message, CallbackQuery, InlineKeyboardMarkup

from clients.api import ApiError
from config import DAILY_POINTS_GOAL, Tier
from core import callback_protocol
from core.error_classifier import REQUEST_ERRORS
from core.daily_tasks import (
    TaskBoard, DailyProgress, ALREADY_COMPLETED, COMPLETED,
    MILESTONE_ESSENTIALS, MILESTONE_DAILY_GOAL,
    tasks_by_tier, completion_by_tier, next_essential, tier_info, today_iso, goal_reached,
)
from core.tools import localized, format_progress_bar
from integrations.telegram.keyboards import btn, btn_menu
from states.base import BaseState

logger = logging.getLogger(__name__)

SCOPE = "day"

# Текстовая команда «выполнить следующую главную задачу»
COMPLETE_SHORTCUT = "c"


class DailyTasksState(BaseState):
    """Задачи дня."""

    name = "daily.tasks"
    display_name = {"ru": "Задачи дня", "en": "Daily Tasks"}

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.board = TaskBoard(self.backend)

    async def enter(self, user, context: dict = None) -> Optional[str]:
        await self._show(user)
        return None

    async def handle(self, user, message: Message) -> Optional[str]:
        text = (message.text or "").strip().lower()
        if text != COMPLETE_SHORTCUT:
            await self.send(user, self.t('daily.shortcut_hint', user, key=COMPLETE_SHORTCUT))
            return None

        day = today_iso()
        progress = await self.board.progress(user, day)
        task = next_essential(self.board.tasks_for(user), progress)
        if task is None:
            await self.send(user, self.t('daily.all_essentials', user))
            return None
        await self._complete(user, task.id, day)
        await self._show(user)
        return None

    async def handle_callback(self, user, callback: CallbackQuery) -> Optional[str]:
        scope, action, payload = callback_protocol.decode(callback.data or "")
        if scope != SCOPE:
            await callback.answer()
            return None

        if action == "done":
            await self._complete(user, payload, today_iso(), callback)
            await self._show(user, callback)
            return None
        if action == "tier" and payload in Tier.ALL:
            self.board.toggle_tier(user.chat_id, payload)
        elif action == "refresh":
            await callback.answer()
            await self._show(user, callback, force=True)
            return None
        elif action == "sparks":
            await callback.answer()
            return "sparks"

        await callback.answer()
        await self._show(user, callback)
        return None

    # =========================================
    # Выполнение
    # =========================================

    async def _complete(self, user, task_id: str, day: str,
                        callback: Optional[CallbackQuery] = None) -> None:
        try:
            result = await self.board.complete(user, task_id, day)
        except REQUEST_ERRORS as e:
            await self.notify.report_error(user, e, callback, action_key='daily.complete_failed')
            return

        if result.status == ALREADY_COMPLETED:
            await self.notify.info(user.chat_id, self.t('daily.already_completed', user), callback)
            return
        if result.status != COMPLETED:
            await self.notify.error(user.chat_id, self.t('daily.unknown_task', user), callback)
            return

        await self.notify.success(
            user.chat_id,
            self.t('daily.completed', user, task=result.task.title_for(user.language), points=result.points),
            callback,
        )
        # Вехи: отдельными сообщениями, callback уже отвечен
        if MILESTONE_ESSENTIALS in result.milestones:
            await self.notify.success(user.chat_id, self.t('daily.all_essentials', user))
        if MILESTONE_DAILY_GOAL in result.milestones:
            await self.notify.success(user.chat_id, self.t('daily.goal_reached', user, goal=DAILY_POINTS_GOAL))

    # =========================================
    # Экран
    # =========================================

    async def _show(self, user, callback: Optional[CallbackQuery] = None, force: bool = False) -> None:
        day = today_iso()
        progress = await self.board.progress(user, day, force=force)
        stats = await self._stats(user)
        text, markup = self._render_board(user, progress, stats)
        await self.render(user, text, markup, callback, parse_mode="Markdown")

    async def _stats(self, user) -> Optional[dict]:
        """Серия и уровень (GET /api/me/progress); без них экран всё равно показывается."""
        try:
            return await self.backend.me_progress(user.chat_id)
        except ApiError as e:
            if e.is_unauthorized:
                raise
            logger.warning(f"[Daily] me/progress недоступен для {user.chat_id}: {e}")
            return None

    def _render_board(self, user, progress: DailyProgress, stats: Optional[dict]) -> tuple[str, InlineKeyboardMarkup]:
        lang = user.language
        tasks = self.board.tasks_for(user)
        total = progress.total_points
        lines = [
            f"📅 *{self.t('daily.title', user)}*", "",
            self.t('daily.points', user, points=total, goal=DAILY_POINTS_GOAL),
            f"`{format_progress_bar(min(total, DAILY_POINTS_GOAL), DAILY_POINTS_GOAL)}`",
        ]
        if goal_reached(progress):
            lines.append(f"🎉 {self.t('daily.goal_done', user)}")
        if stats:
            streak = (stats.get('streak') or {}).get('currentStreak') or 0
            level = (stats.get('progression') or {}).get('level')
            lines.append(self.t('daily.stats', user, streak=streak, level=level if level is not None else 1))
        lines.append("")

        rows = []
        expanded = self.board.expanded(user.chat_id)
        done_by_tier = completion_by_tier(tasks, progress)
        for tier, items in tasks_by_tier(tasks).items():
            if not items:
                continue
            info = tier_info(tier)
            done, count = done_by_tier[tier]
            arrow = "▾" if tier in expanded else "▸"
            header = f"{info.get('icon', '')} {localized(info.get('label'), lang, tier)} ({done}/{count})"
            lines.append(f"*{header}*")
            rows.append([btn(f"{arrow} {header}", SCOPE, "tier", tier)])
            if tier not in expanded:
                continue
            for task in items:
                completed = progress.is_completed(task.id)
                mark = "✅" if completed else "⬜"
                lines.append(f"{mark} {task.icon} {task.title_for(lang)} · +{task.points} · {task.minutes} min")
                if not completed:
                    lines.append(f"   _{task.description_for(lang)}_")
                    rows.append([btn(f"{task.icon} {task.title_for(lang)} +{task.points}", SCOPE, "done", task.id)])
            lines.append("")

        lines.append(self.t('daily.shortcut_hint', user, key=COMPLETE_SHORTCUT))
        rows.append([
            btn(f"🔄 {self.t('buttons.refresh', user)}", SCOPE, "refresh"),
            btn(f"✨ {self.t('service.sparks', user)}", SCOPE, "sparks"),
        ])
        rows.append([btn_menu(lang)])
        return "\n".join(lines), InlineKeyboardMarkup(inline_keyboard=rows)
