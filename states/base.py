"""
Базовый класс для всех стейтов State Machine.

Каждый стейт лежит в отдельном файле в соответствующей папке:
- states/common/: общие стейты (start, menu, error)
- states/tools/: инструменты самооценки (eq, strengths, styles, wheel, habits, swot)
- states/daily/: задачи дня
- states/community/: искры, молитвенные группы, подкаст

Пример создания нового стейта:

    from states.base import BaseState

    class MyState(BaseState):
        name = "category.my_state"
        display_name = {"ru": "Мой стейт", "en": "My State"}

        async def enter(self, user, context=None):
            await self.send(user, self.t("my_state.welcome", user))

        async def handle(self, user, message):
            return "next_event"  # или None чтобы остаться

Экран перерисовывается так: на нажатие кнопки редактируется сообщение
с кнопкой (render с callback), иначе отправляется новое.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

from aiogram import Bot
from aiogram.exceptions import TelegramBadRequest
from aiogram.types import Message, CallbackQuery, InlineKeyboardMarkup

from core.notifications import Notifier

logger = logging.getLogger(__name__)


class BaseState(ABC):
    """
    Базовый класс для всех стейтов.

    Один стейт = один файл.

    Атрибуты класса:
        name: Уникальный идентификатор стейта (формат: "category.name")
        display_name: Человекочитаемое название для логов {lang: название}
    """

    name: str = "base"

    display_name: dict[str, str] = {"ru": "Базовый стейт", "en": "Base State"}

    def __init__(self, bot: Bot, backend, i18n):
        """
        Args:
            bot: Telegram bot instance
            backend: clients.backend.BackendAPI
            i18n: Localization service
        """
        self.bot = bot
        self.backend = backend
        self.i18n = i18n
        self.notify = Notifier(bot)

    async def enter(self, user, context: dict = None) -> Optional[str]:
        """
        Вызывается при ВХОДЕ в стейт.

        Returns:
            Событие для авто-перехода или None.
        """
        return None

    @abstractmethod
    async def handle(self, user, message: Message) -> Optional[str]:
        """
        Обрабатывает входящее текстовое сообщение.

        Returns:
            Событие для перехода (str) или None если остаёмся в стейте.
        """

    async def handle_callback(self, user, callback: CallbackQuery) -> Optional[str]:
        """Обрабатывает нажатие inline-кнопки. По умолчанию: ничего."""
        await callback.answer()
        return None

    async def exit(self, user) -> dict:
        """
        Вызывается при ВЫХОДЕ из стейта.

        Returns:
            Контекст для передачи следующему стейту
        """
        return {}

    # =========================================
    # Вспомогательные методы
    # =========================================

    def t(self, key: str, user, **kwargs) -> str:
        """Shortcut для локализации."""
        lang = getattr(user, 'language', 'en') or 'en'
        return self.i18n.t(key, lang, **kwargs)

    async def send(self, user, text: str, **kwargs) -> Message:
        """Отправить новое сообщение пользователю."""
        return await self.bot.send_message(user.chat_id, text, **kwargs)

    async def render(self, user, text: str, reply_markup: Optional[InlineKeyboardMarkup] = None,
                     callback: Optional[CallbackQuery] = None, **kwargs) -> None:
        """Показать экран: отредактировать сообщение с кнопкой или отправить новое."""
        if callback is not None and callback.message is not None:
            try:
                await callback.message.edit_text(text, reply_markup=reply_markup, **kwargs)
                return
            except TelegramBadRequest as e:
                if "message is not modified" in str(e):
                    return
                logger.warning(f"[{self.name}] edit_text failed, sending new message: {e}")
        await self.send(user, text, reply_markup=reply_markup, **kwargs)

    def get_display_name(self, lang: str = "en") -> str:
        return self.display_name.get(lang, self.display_name.get("en", self.name))

    def __repr__(self) -> str:
        return f"<State: {self.name}>"
