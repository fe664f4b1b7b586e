"""
Стейт: Ошибка.

Сюда SM переводит пользователя, если стейт упал с исключением.
401 → ссылка на вход; остальное → короткое сообщение и кнопки
«Повторить» / «В меню».
"""

from typing import Optional

from aiogram.types import Message, CallbackQuery, InlineKeyboardMarkup

from core import callback_protocol
from core.error_classifier import classify_error
from integrations.telegram.keyboards import btn
from states.base import BaseState

SCOPE = "error"


class ErrorState(BaseState):
    """Экран ошибки."""

    name = "common.error"
    display_name = {"ru": "Ошибка", "en": "Error"}

    async def enter(self, user, context: dict = None) -> Optional[str]:
        error = (context or {}).get('error')
        if error is not None and classify_error(error)['redirect_login']:
            await self.notify.report_error(user, error)
            return None

        info = classify_error(error) if error is not None else {'i18n_key': 'errors.generic'}
        keyboard = InlineKeyboardMarkup(inline_keyboard=[[
            btn(self.t('buttons.retry', user), SCOPE, "retry"),
            btn(self.t('buttons.menu', user), SCOPE, "menu"),
        ]])
        await self.send(user, f"⚠️ {self.t(info['i18n_key'], user)}", reply_markup=keyboard)
        return None

    async def handle(self, user, message: Message) -> Optional[str]:
        return "menu"

    async def handle_callback(self, user, callback: CallbackQuery) -> Optional[str]:
        await callback.answer()
        _, action, _ = callback_protocol.decode(callback.data or "")
        if action in ("retry", "menu"):
            return action
        return None
