"""
Fallback хендлеры: всё, что не поймали команды и кнопки меню.

Сообщения и callback'и делегируются в текущий стейт SM.
"""

import logging

from aiogram import Router
from aiogram.types import Message, CallbackQuery

from core.users import ChatUser
from i18n import t

logger = logging.getLogger(__name__)

fallback_router = Router(name="fallback")


@fallback_router.callback_query()
async def on_callback(callback: CallbackQuery, user: ChatUser):
    """Callback-запросы: делегирование в State Machine."""
    from handlers import get_dispatcher

    try:
        await get_dispatcher().route_callback(user, callback)
    except Exception as e:
        logger.exception(f"[SM] Error routing callback '{callback.data}': {e}")
        await callback.answer(t('errors.try_again', user.language), show_alert=True)


@fallback_router.message()
async def on_message(message: Message, user: ChatUser):
    """Сообщения: делегирование в State Machine."""
    from handlers import get_dispatcher

    text = message.text or ''
    logger.info(f"[SM] Routing message to SM: chat_id={message.chat.id}, text={text[:50]}")
    try:
        if user.current_state is None:
            await get_dispatcher().start(user)
            return
        await get_dispatcher().route_message(user, message)
    except Exception as e:
        logger.exception(f"[SM] Error in SM: {e}")
        await message.answer(
            f"⚠️ {t('errors.processing_error', user.language)}\n\n"
            f"{t('errors.try_again_later', user.language)}"
        )
