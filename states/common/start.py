"""
Стейт: Старт.

Приветствие после /start. Если чат ещё не привязан к аккаунту
веб-приложения, показывается ссылка на вход и подсказка про /start <token>.

Вход: /start или первое сообщение
Выход: common.menu (событие "done", сразу из enter)
"""

from typing import Optional

from aiogram.types import Message

from config import WEB_APP_URL
from integrations.telegram.keyboards import kb_login
from states.base import BaseState


class StartState(BaseState):
    """Приветствие и привязка аккаунта."""

    name = "common.start"
    display_name = {"ru": "Старт", "en": "Start"}

    async def enter(self, user, context: dict = None) -> Optional[str]:
        context = context or {}
        if user.first_name:
            await self.send(user, self.t('start.welcome_named', user, name=user.first_name))
        else:
            await self.send(user, self.t('start.welcome', user))

        if context.get('linked'):
            await self.send(user, self.t('start.linked', user))
        elif not self.backend.api.has_session(user.chat_id):
            await self.send(
                user,
                self.t('start.not_linked', user),
                reply_markup=kb_login(user.language, f"{WEB_APP_URL}/login"),
            )
        return "done"

    async def handle(self, user, message: Message) -> Optional[str]:
        return "done"
