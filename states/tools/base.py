"""
Общая основа стейтов-инструментов.

Прогресс прохождения хранится в памяти (_user_data по chat_id) и
сбрасывается при каждом входе в инструмент. Сохранение: один запрос
к API; ошибка показывается toast'ом, пользователь повторяет сам.
"""

from typing import Any, Awaitable, Callable, Optional

from aiogram.types import Message, CallbackQuery

from core import callback_protocol
from core.error_classifier import REQUEST_ERRORS
from integrations.telegram.formatting import escape_md
from integrations.telegram.keyboards import kb_back_to_menu
from states.base import BaseState


class ToolState(BaseState):
    """Базовый стейт инструмента (scope = префикс callback_data)."""

    scope: str = "tool"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        # In-memory прогресс (chat_id → данные инструмента)
        self._user_data: dict[int, Any] = {}

    def _get_data(self, user) -> Any:
        return self._user_data.get(user.chat_id)

    def _cleanup(self, user) -> None:
        self._user_data.pop(user.chat_id, None)

    async def exit(self, user) -> dict:
        self._cleanup(user)
        return {}

    async def handle(self, user, message: Message) -> Optional[str]:
        """Текст не ожидается: подсказка про кнопки."""
        await self.send(user, self.t('tools.use_buttons', user))
        return None

    def _decode(self, callback: CallbackQuery) -> tuple[str, str]:
        scope, action, payload = callback_protocol.decode(callback.data or "")
        if scope != self.scope:
            return "", ""
        return action, payload

    async def _session_id(self, user) -> int:
        """ID текущей vision-сессии (создаётся при необходимости)."""
        session = await self.backend.ensure_session(user.chat_id)
        return session['id']

    async def _persist(self, user, callback: Optional[CallbackQuery],
                       request: Callable[[], Awaitable[Any]], success_key: str = 'tools.saved',
                       failure_key: str = 'errors.save_failed') -> bool:
        """Выполнить сохранение и показать toast.

        Returns:
            True при успехе.
        """
        try:
            await request()
        except REQUEST_ERRORS as e:
            await self.notify.report_error(user, e, callback, action_key=failure_key)
            return False
        await self.notify.success(user.chat_id, self.t(success_key, user), callback)
        return True

    async def _coach(self, user, callback: CallbackQuery, tool: str, data: dict) -> None:
        """Рекомендации коуча по итогам инструмента."""
        await callback.answer(self.t('coach.thinking', user))
        try:
            session_id = await self._session_id(user)
            insights = await self.backend.analyze(user.chat_id, session_id, tool, data)
        except REQUEST_ERRORS as e:
            await self.notify.report_error(user, e, action_key='coach.failed')
            return
        await self.send(user, format_insights(insights, lambda key: self.t(key, user)),
                        reply_markup=kb_back_to_menu(user.language), parse_mode="Markdown")


def format_insights(insights: dict, tr: Callable[[str], str]) -> str:
    """Текст рекомендаций коуча."""
    lines = [f"🤖 {tr('coach.title')}", ""]

    def section(title_key: str, items) -> None:
        if not items:
            return
        lines.append(f"*{tr(title_key)}*")
        for item in items:
            lines.append(f"• {escape_md(item)}")
        lines.append("")

    section('coach.insights', insights.get('insights'))
    section('coach.patterns', insights.get('patterns'))
    section('coach.recommendations', insights.get('recommendations'))
    section('coach.next_steps', insights.get('nextSteps'))
    if insights.get('encouragement'):
        lines.append(f"💛 {escape_md(insights['encouragement'])}")
    return "\n".join(lines).strip()
