"""
Callback хендлеры кнопок главного меню.

'service:{id}' → вход в раздел через Dispatcher.
Остальные callback'и обрабатывает текущий стейт (handlers/fallback.py).
"""

import logging

from aiogram import Router, F
from aiogram.types import CallbackQuery

from core.users import ChatUser
from i18n import t

logger = logging.getLogger(__name__)

callbacks_router = Router(name="callbacks")


@callbacks_router.callback_query(F.data.startswith("service:"))
async def on_service(callback: CallbackQuery, user: ChatUser):
    """Кнопка раздела в меню."""
    from handlers import get_dispatcher
    dispatcher = get_dispatcher()

    await callback.answer()
    try:
        handled = await dispatcher.route_service(user, callback.data)
    except Exception as e:
        logger.exception(f"[CB] Ошибка входа в сервис {callback.data}: {e}")
        await callback.message.answer(t('errors.processing_error', user.language))
        return

    if not handled:
        logger.warning(f"[CB] Неизвестный сервис: {callback.data}")
        await callback.message.answer(t('errors.button_expired', user.language))


@callbacks_router.callback_query(F.data == "nav:menu")
async def on_menu(callback: CallbackQuery, user: ChatUser):
    """Кнопка «В меню» из любого экрана."""
    from handlers import get_dispatcher

    await callback.answer()
    await get_dispatcher().go_to(user, "common.menu")
