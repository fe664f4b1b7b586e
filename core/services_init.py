"""
Регистрация всех разделов бота в реестре.

Добавление нового раздела:
1. Создать ServiceDescriptor здесь
2. Меню и команды обновятся автоматически

Разделы меню:
- "daily": задачи дня
- "tools": инструменты самооценки (vision)
- "community": искры, молитвенные группы, подкаст
"""

from core.registry import registry
from core.services import (
    ServiceDescriptor,
    CATEGORY_DAILY,
    CATEGORY_TOOLS,
    CATEGORY_COMMUNITY,
)


def register_all_services() -> None:
    """Регистрирует все сервисы бота."""

    # --- DAILY ---

    registry.register(ServiceDescriptor(
        id="daily",
        i18n_key="service.daily",
        icon="✅",  # ✅
        entry_state="daily.tasks",
        category=CATEGORY_DAILY,
        order=10,
        command="/today",
        commands=["/tasks"],
        description_key="commands.today",
    ))

    # --- TOOLS ---

    registry.register(ServiceDescriptor(
        id="eq",
        i18n_key="service.eq",
        icon="\U0001f9e0",  # 🧠
        entry_state="tools.eq",
        category=CATEGORY_TOOLS,
        order=20,
        command="/eq",
        description_key="commands.eq",
    ))

    registry.register(ServiceDescriptor(
        id="strengths",
        i18n_key="service.strengths",
        icon="⭐",  # ⭐
        entry_state="tools.strengths",
        category=CATEGORY_TOOLS,
        order=30,
        command="/strengths",
        description_key="commands.strengths",
    ))

    registry.register(ServiceDescriptor(
        id="styles",
        i18n_key="service.styles",
        icon="\U0001f4ac",  # 💬
        entry_state="tools.styles",
        category=CATEGORY_TOOLS,
        order=40,
        command="/styles",
        description_key="commands.styles",
    ))

    registry.register(ServiceDescriptor(
        id="wheel",
        i18n_key="service.wheel",
        icon="\U0001f3af",  # 🎯
        entry_state="tools.wheel",
        category=CATEGORY_TOOLS,
        order=50,
        command="/wheel",
        description_key="commands.wheel",
    ))

    registry.register(ServiceDescriptor(
        id="habits",
        i18n_key="service.habits",
        icon="\U0001f501",  # 🔁
        entry_state="tools.habits",
        category=CATEGORY_TOOLS,
        order=60,
        command="/habits",
        description_key="commands.habits",
    ))

    registry.register(ServiceDescriptor(
        id="swot",
        i18n_key="service.swot",
        icon="\U0001f4cb",  # 📋
        entry_state="tools.swot",
        category=CATEGORY_TOOLS,
        order=70,
        command="/swot",
        description_key="commands.swot",
    ))

    # --- COMMUNITY ---

    registry.register(ServiceDescriptor(
        id="sparks",
        i18n_key="service.sparks",
        icon="✨",  # ✨
        entry_state="community.sparks",
        category=CATEGORY_COMMUNITY,
        order=80,
        command="/sparks",
        description_key="commands.sparks",
    ))

    registry.register(ServiceDescriptor(
        id="pods",
        i18n_key="service.pods",
        icon="\U0001f64f",  # 🙏
        entry_state="community.pods",
        category=CATEGORY_COMMUNITY,
        order=90,
        command="/pods",
        description_key="commands.pods",
    ))

    registry.register(ServiceDescriptor(
        id="podcast",
        i18n_key="service.podcast",
        icon="\U0001f3a7",  # 🎧
        entry_state="community.podcast",
        category=CATEGORY_COMMUNITY,
        order=100,
        command="/podcast",
        description_key="commands.podcast",
    ))
