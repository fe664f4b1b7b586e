"""
Sparks Telegram Bot: клиент веб-приложения сообщества в Telegram.

Инструменты роста (EQ, сильные стороны, стили общения, колесо баланса,
привычки, SWOT), задачи дня и сообщество (искры, молитвенные группы,
подкаст). Все данные живут на бэкенде веб-приложения; бот ходит в его
REST API от имени пользователя с cookie-сессией.
"""

import asyncio
import logging
import sys

from aiogram import Bot, Dispatcher
from aiogram.types import BotCommand

from config import (
    BOT_TOKEN, LOG_LEVEL, TRANSITIONS_PATH,
    QUERY_STALE_TIME, QUERY_GC_TIME, validate_env,
)

logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    stream=sys.stdout
)
# Шум планировщика (Running/executed на каждый job)
logging.getLogger("apscheduler.executors.default").setLevel(logging.WARNING)
logging.getLogger("apscheduler.scheduler").setLevel(logging.WARNING)
logger = logging.getLogger(__name__)

from clients.api import ApiClient
from clients.backend import BackendAPI
from core.machine import StateMachine
from core.middleware import UserMiddleware, LoggingMiddleware
from core.query_cache import QueryCache
from core.registry import registry
from core.scheduler import init_scheduler
from core.services_init import register_all_services
from core.users import users
from i18n import get_i18n, t, SUPPORTED_LANGUAGES
from states.registry import register_all_states

# Команды вне реестра сервисов (порядок в меню Telegram)
_EXTRA_COMMANDS = ["menu", "help", "reminders", "language", "logout"]


def build_commands(lang: str) -> list[BotCommand]:
    """Меню команд Telegram для языка: /start, разделы реестра, служебные."""
    commands = [BotCommand(command="start", description=t('commands.start', lang))]
    for service in registry.get_all():
        if service.command and service.description_key:
            commands.append(BotCommand(
                command=service.command.lstrip('/'),
                description=t(service.description_key, lang),
            ))
    for name in _EXTRA_COMMANDS:
        commands.append(BotCommand(command=name, description=t(f'commands.{name}', lang)))
    return commands


# ============= ЗАПУСК =============

async def main():
    validate_env()

    bot = Bot(token=BOT_TOKEN)

    # Сервисы (меню, slash-команды)
    register_all_services()
    logger.info("✅ ServiceRegistry инициализирован")

    # HTTP-клиент бэкенда + кеш запросов
    api = ApiClient()
    cache = QueryCache(stale_time=QUERY_STALE_TIME, gc_time=QUERY_GC_TIME)
    backend = BackendAPI(api, cache)

    # State Machine
    state_machine = StateMachine()
    state_machine.load_transitions(TRANSITIONS_PATH)
    register_all_states(state_machine, bot, backend, get_i18n())
    logger.info(f"✅ StateMachine инициализирован ({len(state_machine.state_names)} стейтов)")

    # Центральный диспетчер: единая точка роутинга
    from core.dispatcher import Dispatcher as BotDispatcher
    bot_dispatcher = BotDispatcher(state_machine, bot)

    dp = Dispatcher()
    dp["backend"] = backend

    # Порядок важен: User → Logging (логгеру нужен текущий стейт)
    for observer in (dp.message, dp.callback_query):
        observer.middleware(UserMiddleware(users))
        observer.middleware(LoggingMiddleware())

    from handlers import setup_handlers, setup_fallback
    setup_handlers(dp, bot_dispatcher)
    # Fallback (catch-all): ПОСЛЕДНИМ
    setup_fallback(dp)

    for lang in SUPPORTED_LANGUAGES:
        await bot.set_my_commands(build_commands(lang), language_code=lang)
    await bot.set_my_commands(build_commands('en'))

    init_scheduler(bot, backend, users)

    logger.info("🚀 Бот запущен")

    # Снимаем webhook/polling предыдущего инстанса
    await bot.delete_webhook(drop_pending_updates=False)

    try:
        await dp.start_polling(bot)
    finally:
        await api.close()
        await bot.session.close()
        logger.info("🔒 HTTP sessions закрыты")


if __name__ == "__main__":
    asyncio.run(main())
