"""
Стейт: Vision Habits.

Экран list: привычки vision-сессии с окном последних 7 дней, серией
и счётчиком выполненных дней. Нажатие на день переключает отметку.
Экран create: форма новой привычки: название текстом, частота,
цель в неделю для еженедельных.
"""

import asyncio
import logging
from datetime import date
from typing import Optional

from aiogram.types import Message, CallbackQuery, InlineKeyboardMarkup

from config import HABIT_WINDOW_DAYS
from core.daily_tasks import today_iso
from core.error_classifier import REQUEST_ERRORS
from core.habits import (
    HabitForm, FREQUENCY_DAILY, FREQUENCY_WEEKLY,
    last_n_days, is_done, calculate_streak, completed_count, has_streak_badge,
)
from integrations.telegram.formatting import escape_md
from integrations.telegram.keyboards import btn, btn_menu
from states.tools.base import ToolState

logger = logging.getLogger(__name__)

VIEW_LIST = "list"
VIEW_CREATE = "create"


class HabitsData:
    def __init__(self):
        self.view = VIEW_LIST
        self.form = HabitForm()
        self.session_id: Optional[int] = None


class HabitsState(ToolState):
    """Привычки vision-сессии."""

    name = "tools.habits"
    display_name = {"ru": "Привычки", "en": "Vision Habits"}
    scope = "hab"

    async def enter(self, user, context: dict = None) -> Optional[str]:
        data = HabitsData()
        session = await self.backend.current_session(user.chat_id)
        data.session_id = session['id'] if session else None
        self._user_data[user.chat_id] = data
        await self._show(user)
        return None

    async def handle(self, user, message: Message) -> Optional[str]:
        """Текст в форме создания: название привычки."""
        data: Optional[HabitsData] = self._get_data(user)
        if data is None or data.view != VIEW_CREATE:
            return await super().handle(user, message)
        data.form.set_title(message.text or "")
        await self._show(user)
        return None

    async def handle_callback(self, user, callback: CallbackQuery) -> Optional[str]:
        data: Optional[HabitsData] = self._get_data(user)
        if data is None:
            data = self._user_data[user.chat_id] = HabitsData()
        action, payload = self._decode(callback)

        creating = data.view == VIEW_CREATE

        if action == "new":
            data.view = VIEW_CREATE
            data.form = HabitForm()
        elif action == "cancel":
            data.view = VIEW_LIST
        elif action == "freq" and creating:
            data.form.set_frequency(payload)
        elif action == "target" and creating:
            data.form.set_target(int(payload))
        elif action == "create" and creating:
            if not data.form.is_valid:
                await callback.answer(self.t('habits.title_required', user))
                return None
            if await self._create(user, callback, data):
                data.view = VIEW_LIST
                data.form = HabitForm()
                await self._show(user, callback)
            return None
        elif action == "log":
            habit_id, day = payload.split(":", 1)
            await self._toggle_log(user, callback, int(habit_id), day)
            await self._show(user, callback)
            return None
        elif action == "del":
            await self._delete(user, callback, data, int(payload))
            await self._show(user, callback)
            return None
        elif action == "back":
            await callback.answer()
            if data.view == VIEW_CREATE:
                data.view = VIEW_LIST
            else:
                return "exit"
        else:
            await callback.answer()
            return None

        await callback.answer()
        await self._show(user, callback)
        return None

    # =========================================
    # Экраны
    # =========================================

    async def _show(self, user, callback: Optional[CallbackQuery] = None) -> None:
        data: HabitsData = self._get_data(user)
        if data.view == VIEW_CREATE:
            text, markup = self._create_form(user, data.form)
        else:
            text, markup = await self._list(user, data)
        await self.render(user, text, markup, callback, parse_mode="Markdown")

    async def _list(self, user, data: HabitsData) -> tuple[str, InlineKeyboardMarkup]:
        lines = [f"✅ *{self.t('habits.title', user)}*", ""]
        rows = []
        habits = []
        if data.session_id is not None:
            habits = await self.backend.list_habits(user.chat_id, data.session_id)

        if not habits:
            lines.append(self.t('habits.empty', user))

        days = last_n_days(date.fromisoformat(today_iso()), HABIT_WINDOW_DAYS)
        all_logs = await asyncio.gather(*(self.backend.habit_logs(user.chat_id, h['id']) for h in habits))
        for habit, logs in zip(habits, all_logs):
            streak = calculate_streak(logs, days)
            header = f"📌 {escape_md(habit['title'])}"
            if has_streak_badge(streak):
                header += f" 🔥 {self.t('habits.streak', user, days=streak)}"
            lines.append(header)
            lines.append(self.t('habits.completed', user, count=completed_count(logs, days), total=len(days)))
            lines.append("")

            rows.append([btn(f"📌 {habit['title'][:40]}", self.scope, "noop")])
            rows.append([
                btn(("✅" if is_done(logs, day) else "▫️") + day[8:], self.scope, "log", f"{habit['id']}:{day}")
                for day in days
            ])
            rows.append([btn(f"🗑 {self.t('habits.delete', user)}", self.scope, "del", habit['id'])])

        rows.append([btn(f"➕ {self.t('habits.add', user)}", self.scope, "new")])
        rows.append([btn(self.t('buttons.back', user), self.scope, "back"), btn_menu(user.language)])
        return "\n".join(lines).strip(), InlineKeyboardMarkup(inline_keyboard=rows)

    def _create_form(self, user, form: HabitForm) -> tuple[str, InlineKeyboardMarkup]:
        title = escape_md(form.title) if form.title else f"_{self.t('habits.title_prompt', user)}_"
        lines = [
            f"➕ *{self.t('habits.new_title', user)}*", "",
            f"{self.t('habits.name', user)}: {title}",
            f"{self.t('habits.frequency', user)}: {self.t(f'habits.{form.frequency}', user)}",
        ]
        rows = [[
            btn(("🔘 " if form.frequency == freq else "⚪ ") + self.t(f'habits.{freq}', user), self.scope, "freq", freq)
            for freq in (FREQUENCY_DAILY, FREQUENCY_WEEKLY)
        ]]
        if form.frequency == FREQUENCY_WEEKLY:
            lines.append(self.t('habits.target', user, count=form.target_per_week))
            rows.append([
                btn(f"•{n}•" if n == form.target_per_week else str(n), self.scope, "target", n)
                for n in range(1, 8)
            ])
        create_text = self.t('habits.create', user)
        if not form.is_valid:
            create_text = f"🔒 {create_text}"
        rows.append([btn(create_text, self.scope, "create")])
        rows.append([btn(self.t('buttons.cancel', user), self.scope, "cancel")])
        return "\n".join(lines), InlineKeyboardMarkup(inline_keyboard=rows)

    # =========================================
    # Мутации
    # =========================================

    async def _create(self, user, callback: CallbackQuery, data: HabitsData) -> bool:
        form = data.form

        async def request():
            if data.session_id is None:
                data.session_id = await self._session_id(user)
            return await self.backend.create_habit(
                user.chat_id, data.session_id, form.title, form.frequency, form.target_per_week
            )

        created = await self._persist(user, callback, request, success_key='habits.created',
                                      failure_key='habits.create_failed')
        if created:
            logger.info(f"[Habits] Создана привычка для {user.chat_id}: {form.title}")
        return created

    async def _delete(self, user, callback: CallbackQuery, data: HabitsData, habit_id: int) -> None:
        async def request():
            return await self.backend.delete_habit(user.chat_id, data.session_id, habit_id)

        await self._persist(user, callback, request, success_key='habits.deleted',
                            failure_key='habits.delete_failed')

    async def _toggle_log(self, user, callback: CallbackQuery, habit_id: int, day: str) -> None:
        try:
            logs = await self.backend.habit_logs(user.chat_id, habit_id)
            await self.backend.log_habit(user.chat_id, habit_id, day, not is_done(logs, day))
        except REQUEST_ERRORS as e:
            await self.notify.report_error(user, e, callback, action_key='habits.log_failed')
            return
        await callback.answer()
