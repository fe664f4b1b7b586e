"""
Уведомления (toast) пользователю.

На нажатие кнопки: всплывающее callback.answer(), иначе: короткое
сообщение в чат. Ошибки API классифицируются: при 401 пользователь
получает ссылку на вход, в остальных случаях: короткий текст ошибки.
"""

import logging
from typing import Optional

from aiogram import Bot
from aiogram.types import CallbackQuery

from config import WEB_APP_URL
from core.error_classifier import classify_error
from i18n import t
from integrations.telegram.keyboards import kb_login

logger = logging.getLogger(__name__)


class Notifier:
    """Toast-уведомления через Telegram."""

    def __init__(self, bot: Bot):
        self.bot = bot

    async def _toast(self, chat_id: int, text: str, callback: Optional[CallbackQuery], alert: bool = False) -> None:
        if callback is not None:
            await callback.answer(text, show_alert=alert)
        else:
            await self.bot.send_message(chat_id, text)

    async def success(self, chat_id: int, text: str, callback: Optional[CallbackQuery] = None) -> None:
        await self._toast(chat_id, f"✅ {text}", callback)

    async def info(self, chat_id: int, text: str, callback: Optional[CallbackQuery] = None) -> None:
        await self._toast(chat_id, f"ℹ️ {text}", callback)

    async def error(self, chat_id: int, text: str, callback: Optional[CallbackQuery] = None) -> None:
        await self._toast(chat_id, f"⚠️ {text}", callback, alert=True)

    async def report_error(self, user, exc: BaseException, callback: Optional[CallbackQuery] = None,
                           action_key: Optional[str] = None) -> dict:
        """Показать пользователю ошибку запроса.

        Args:
            user: ChatUser
            exc: исключение из клиента API
            callback: нажатие кнопки, если ошибка возникла в нём
            action_key: i18n-ключ текста «что не получилось» (например 'errors.save_failed')

        Returns:
            Результат classify_error()
        """
        info = classify_error(exc)
        lang = user.language
        logger.warning(f"[Notify] chat_id={user.chat_id} {info['category']}: {exc}")

        if info['redirect_login']:
            if callback is not None:
                await callback.answer()
            await self.bot.send_message(
                user.chat_id,
                t('errors.unauthorized', lang),
                reply_markup=kb_login(lang, f"{WEB_APP_URL}/login"),
            )
            return info

        text = t(action_key or info['i18n_key'], lang)
        await self.error(user.chat_id, text, callback)
        return info
