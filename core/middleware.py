"""
Middleware для aiogram.

UserMiddleware: находит/создаёт ChatUser и кладёт его в data['user'].
LoggingMiddleware: логирование входящих сообщений и callback'ов.
"""

import logging

from aiogram import BaseMiddleware
from aiogram.enums import ChatAction
from aiogram.exceptions import TelegramAPIError
from aiogram.types import Message, CallbackQuery, TelegramObject

from core.users import UserStore

logger = logging.getLogger(__name__)


class UserMiddleware(BaseMiddleware):
    """Подставляет пользователя бота в хендлеры (аргумент user)."""

    def __init__(self, store: UserStore):
        self.store = store

    async def __call__(self, handler, event: TelegramObject, data: dict):
        from_user = getattr(event, 'from_user', None)
        chat_id = None
        if isinstance(event, Message):
            chat_id = event.chat.id
        elif isinstance(event, CallbackQuery) and event.message:
            chat_id = event.message.chat.id

        if chat_id is not None:
            data['user'] = self.store.get_or_create(
                chat_id, from_user.language_code if from_user else None
            )
        return await handler(event, data)


class LoggingMiddleware(BaseMiddleware):
    """Middleware для логирования всех входящих сообщений"""

    async def __call__(self, handler, event: TelegramObject, data: dict):
        user = data.get('user')
        current_state = getattr(user, 'current_state', None)

        if isinstance(event, Message):
            logger.info(f"[MIDDLEWARE] Получено сообщение: chat_id={event.chat.id}, "
                        f"text={event.text[:50] if event.text else '[no text]'}, "
                        f"state={current_state}")

            # Typing indicator: мгновенная обратная связь пользователю
            try:
                await event.bot.send_chat_action(chat_id=event.chat.id, action=ChatAction.TYPING)
            except TelegramAPIError as e:
                logger.debug(f"[MIDDLEWARE] send_chat_action failed: {e}")

        elif isinstance(event, CallbackQuery):
            logger.info(f"[MIDDLEWARE] Callback: chat_id={event.message.chat.id if event.message else None}, "
                        f"data={event.data}, state={current_state}")

        return await handler(event, data)
