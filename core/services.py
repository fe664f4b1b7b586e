"""
Сервисный дескриптор: описание одного раздела бота в реестре.

Каждый сервис = одна запись в реестре → одна кнопка в меню.
Добавление нового раздела = добавить ServiceDescriptor в services_init.py.
"""

from dataclasses import dataclass, field
from typing import Optional


# Категории меню
CATEGORY_TOOLS = "tools"
CATEGORY_DAILY = "daily"
CATEGORY_COMMUNITY = "community"

CATEGORIES = (CATEGORY_DAILY, CATEGORY_TOOLS, CATEGORY_COMMUNITY)


@dataclass
class ServiceDescriptor:
    """Описание сервиса в реестре.

    Attributes:
        id: Уникальный идентификатор ("eq", "daily", "pods", ...)
        i18n_key: Ключ для i18n: используется с t() ("service.eq")
        icon: Эмодзи для кнопки меню
        entry_state: Стейт SM для входа в сервис
        category: Раздел меню ("daily", "tools", "community")
        order: Порядок в меню (меньше = выше)
        command: Slash-команда ("/eq"), None если нет
        commands: Дополнительные команды
        description_key: Ключ i18n для описания в /help и set_my_commands
        visible: Показывать ли в меню (False = скрыт, но команды работают)
    """
    id: str
    i18n_key: str
    icon: str
    entry_state: str
    category: str = CATEGORY_TOOLS
    order: int = 100
    command: Optional[str] = None
    commands: list[str] = field(default_factory=list)
    description_key: Optional[str] = None
    visible: bool = True

    @property
    def all_commands(self) -> list[str]:
        result = [self.command] if self.command else []
        return [cmd.lstrip('/') for cmd in result + self.commands]
