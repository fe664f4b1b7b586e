"""
Реестр стейтов State Machine.

Содержит функцию регистрации всех стейтов в StateMachine.
При добавлении нового стейта нужно:
1. Импортировать его здесь
2. Добавить в список states в функции register_all_states
3. Описать переходы в config/transitions.yaml
"""

import logging

from aiogram import Bot

from core.machine import StateMachine
from i18n import I18n

from states.common import StartState, MenuState, ErrorState
from states.tools import EqState, StrengthsState, StylesState, WheelState, HabitsState, SwotState
from states.daily import DailyTasksState
from states.community import SparksState, PodsState, PodcastState

logger = logging.getLogger(__name__)


def register_all_states(
    machine: StateMachine,
    bot: Bot,
    backend,
    i18n: I18n
) -> None:
    """
    Регистрирует все стейты в StateMachine.

    Args:
        machine: Экземпляр StateMachine
        bot: Telegram Bot instance
        backend: clients.backend.BackendAPI
        i18n: Локализация
    """
    args = (bot, backend, i18n)

    states = [
        # Common
        StartState(*args),
        MenuState(*args),
        ErrorState(*args),

        # Инструменты
        EqState(*args),
        StrengthsState(*args),
        StylesState(*args),
        WheelState(*args),
        HabitsState(*args),
        SwotState(*args),

        # Задачи дня
        DailyTasksState(*args),

        # Сообщество
        SparksState(*args),
        PodsState(*args),
        PodcastState(*args),
    ]

    machine.register_all(states)
    logger.info(f"Registered {len(states)} states: {[s.name for s in states]}")
