"""
Тонкие aiogram хендлеры для команд.

Каждый хендлер: получить пользователя (UserMiddleware) → делегировать в Dispatcher.
Вся логика экранов живёт в State Machine (states/).
"""

import logging

from aiogram import Router, F
from aiogram.filters import Command, CommandObject, CommandStart
from aiogram.types import Message

from clients.api import ApiError
from clients.backend import BackendAPI
from core.registry import registry
from core.users import ChatUser, users
from i18n import t, SUPPORTED_LANGUAGES, get_language_name

logger = logging.getLogger(__name__)

commands_router = Router(name="commands")


async def _safe_route(message: Message, user: ChatUser, route_coro) -> None:
    """Обёртка: route через SM → catch ошибки."""
    try:
        await route_coro
    except Exception as e:
        logger.exception(f"[CMD] SM routing error for chat_id={message.chat.id}: {e}")
        await message.answer(t('errors.processing_error', user.language))


def _command_name(text: str) -> str:
    """'/eq@SparksBot arg' → 'eq'."""
    return text.split()[0][1:].split('@')[0].lower()


def _is_service_command(message: Message) -> bool:
    return registry.resolve_command(_command_name(message.text)) is not None


@commands_router.message(CommandStart())
async def cmd_start(message: Message, command: CommandObject, user: ChatUser, backend: BackendAPI):
    """Старт. /start <token> привязывает сессию веб-приложения к чату."""
    from handlers import get_dispatcher
    dispatcher = get_dispatcher()

    token = (command.args or '').strip()
    if token:
        backend.api.set_session_cookie(user.chat_id, token)
        backend.cache.drop_chat(user.chat_id)
        try:
            users.apply_profile(user, await backend.me(user.chat_id))
        except ApiError as e:
            logger.warning(f"[CMD] /start: профиль не получен для chat_id={user.chat_id}: {e}")

    await _safe_route(message, user, dispatcher.start(user, {'linked': bool(token)}))


@commands_router.message(Command("menu"))
async def cmd_menu(message: Message, user: ChatUser):
    """Главное меню → common.menu."""
    from handlers import get_dispatcher
    await _safe_route(message, user, get_dispatcher().route_command('menu', user))


@commands_router.message(Command("help"))
async def cmd_help(message: Message, user: ChatUser):
    """Список команд."""
    lang = user.language
    lines = [t('help.title', lang), ""]
    for service in registry.for_user(user):
        if service.command and service.description_key:
            lines.append(f"{service.command} — {t(service.description_key, lang)}")
    lines.append("")
    lines.append(f"/menu — {t('commands.menu', lang)}")
    lines.append(f"/reminders — {t('commands.reminders', lang)}")
    lines.append(f"/language — {t('commands.language', lang)}")
    lines.append(f"/logout — {t('commands.logout', lang)}")
    await message.answer("\n".join(lines))


@commands_router.message(Command("reminders"))
async def cmd_reminders(message: Message, user: ChatUser):
    """Включить/выключить ежедневное напоминание."""
    user.reminders = not user.reminders
    key = 'reminders.enabled' if user.reminders else 'reminders.disabled'
    logger.info(f"[CMD] chat_id={user.chat_id} reminders={user.reminders}")
    await message.answer(t(key, user.language))


@commands_router.message(Command("language"))
async def cmd_language(message: Message, user: ChatUser):
    """Переключить язык интерфейса."""
    index = SUPPORTED_LANGUAGES.index(user.language) if user.language in SUPPORTED_LANGUAGES else -1
    user.language = SUPPORTED_LANGUAGES[(index + 1) % len(SUPPORTED_LANGUAGES)]
    await message.answer(t('language.changed', user.language, language=get_language_name(user.language)))


@commands_router.message(Command("logout"))
async def cmd_logout(message: Message, user: ChatUser, backend: BackendAPI):
    """Выйти из веб-приложения в этом чате."""
    try:
        await backend.logout(user.chat_id)
    except ApiError as e:
        logger.warning(f"[CMD] /logout: {e}")
    await message.answer(t('auth.logged_out', user.language))


@commands_router.message(F.text.startswith('/'), _is_service_command)
async def cmd_service(message: Message, user: ChatUser):
    """Команды разделов (/eq, /today, /pods, ...) через реестр."""
    from handlers import get_dispatcher
    await _safe_route(message, user, get_dispatcher().route_command(_command_name(message.text), user))
