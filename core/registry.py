"""
Сервисный реестр: центральная точка управления разделами бота.

menu(user) = registry.for_user(user).render()

Добавление нового раздела:
1. Создать ServiceDescriptor в core/services_init.py
2. Меню и команды обновятся автоматически
"""

import logging
from typing import Optional

from aiogram.types import InlineKeyboardMarkup, InlineKeyboardButton

from core.services import ServiceDescriptor
from core import callback_protocol
from i18n import t

logger = logging.getLogger(__name__)


class ServiceRegistry:
    """Реестр сервисов бота.

    Хранит все зарегистрированные сервисы и предоставляет:
    - Генерацию inline keyboard по разделам
    - Резолвинг команд и callback'ов в сервисы
    """

    def __init__(self):
        self._services: dict[str, ServiceDescriptor] = {}
        self._command_index: dict[str, ServiceDescriptor] = {}

    def register(self, service: ServiceDescriptor) -> None:
        """Зарегистрировать сервис."""
        if service.id in self._services:
            raise ValueError(f"Сервис уже зарегистрирован: {service.id}")
        self._services[service.id] = service
        for cmd in service.all_commands:
            if cmd in self._command_index:
                raise ValueError(f"Команда /{cmd} уже занята сервисом {self._command_index[cmd].id}")
            self._command_index[cmd] = service
        logger.debug(f"[Registry] Registered service: {service.id}")

    def get(self, service_id: str) -> Optional[ServiceDescriptor]:
        return self._services.get(service_id)

    def get_all(self) -> list[ServiceDescriptor]:
        return list(self._services.values())

    def for_user(self, user, category: str = None) -> list[ServiceDescriptor]:
        """Видимые сервисы раздела, по order."""
        result = [
            service for service in self._services.values()
            if service.visible and (category is None or service.category == category)
        ]
        return sorted(result, key=lambda s: s.order)

    def build_menu(self, user, category: str = None, columns: int = 1,
                   extra_rows: list[list[InlineKeyboardButton]] = None) -> InlineKeyboardMarkup:
        """Генерирует inline keyboard из сервисов раздела.

        Args:
            user: Пользователь (для языка)
            category: Фильтр по разделу
            columns: Количество кнопок в строке
            extra_rows: Дополнительные строки под сервисами (например «Назад»)
        """
        lang = getattr(user, 'language', 'en') or 'en'

        buttons = []
        row = []
        for service in self.for_user(user, category):
            row.append(InlineKeyboardButton(
                text=f"{service.icon} {t(service.i18n_key, lang)}",
                callback_data=callback_protocol.encode("service", service.id),
            ))
            if len(row) >= columns:
                buttons.append(row)
                row = []
        if row:
            buttons.append(row)

        buttons.extend(extra_rows or [])
        return InlineKeyboardMarkup(inline_keyboard=buttons)

    def resolve_command(self, command: str) -> Optional[ServiceDescriptor]:
        """Найти сервис по slash-команде (без "/")."""
        return self._command_index.get(command.lstrip('/'))

    def resolve_callback(self, callback_data: str) -> Optional[ServiceDescriptor]:
        """Найти сервис по callback_data формата 'service:{id}'."""
        if callback_protocol.matches(callback_data, "service"):
            _, service_id, _ = callback_protocol.decode(callback_data)
            return self._services.get(service_id)
        return None

    def commands(self) -> list[str]:
        return list(self._command_index)


# Глобальный экземпляр реестра
registry = ServiceRegistry()
