"""
Центральный диспетчер: единая точка роутинга всех входящих сообщений.

Все entry points (команды, callbacks, scheduler) проходят через Dispatcher.
Добавление нового раздела = добавить запись в core/services_init.py.
"""

import logging

from aiogram import Bot

from core.registry import registry

logger = logging.getLogger(__name__)


# Команды, не принадлежащие сервисам реестра
_COMMAND_MAP = {
    'menu': 'common.menu',
}


class Dispatcher:
    """
    Центральный диспетчер бота.

    Связывает реестр сервисов со State Machine.
    """

    def __init__(self, state_machine, bot: Bot):
        self.sm = state_machine
        self.bot = bot

    async def route_command(self, command: str, user) -> bool:
        """Роутинг команды → SM стейт.

        Returns:
            True если обработано через SM, False если нет маппинга.
        """
        service = registry.resolve_command(command)
        target = service.entry_state if service else _COMMAND_MAP.get(command)
        if not target:
            return False

        logger.info(f"[Dispatcher] route_command: /{command} → {target}")
        await self.sm.go_to(user, target)
        return True

    async def route_service(self, user, callback_data: str) -> bool:
        """Кнопка меню 'service:{id}' → entry_state сервиса."""
        service = registry.resolve_callback(callback_data)
        if not service:
            return False
        logger.info(f"[Dispatcher] route_service: {service.id} → {service.entry_state}")
        await self.sm.go_to(user, service.entry_state)
        return True

    async def route_message(self, user, message) -> None:
        await self.sm.handle(user, message)

    async def route_callback(self, user, callback) -> None:
        await self.sm.handle_callback(user, callback)

    async def start(self, user, context: dict = None) -> None:
        await self.sm.start(user, context)

    async def go_to(self, user, state_name: str, context: dict = None) -> None:
        """Прямой переход в указанный стейт SM."""
        await self.sm.go_to(user, state_name, context)
