"""
State Machine: центральный диспетчер экранов бота.

Загружает переходы из config/transitions.yaml и управляет
переходами между стейтами. Текущий стейт живёт на объекте
пользователя (ChatUser.current_state), в памяти процесса.

Использование:
    from core.machine import StateMachine

    machine = StateMachine()
    machine.load_transitions("config/transitions.yaml")
    machine.register_all(states)

    # Обработка сообщения
    await machine.handle(user, message)
"""

import logging
from pathlib import Path
from typing import Optional

import yaml

from states.base import BaseState

logger = logging.getLogger(__name__)


class StateMachine:
    """
    Центральный диспетчер состояний.

    Отвечает за:
    - Регистрацию стейтов
    - Загрузку переходов из YAML
    - Обработку событий и переходы
    """

    def __init__(self, default_state: str = "common.start", error_state: str = "common.error"):
        self._states: dict[str, BaseState] = {}
        self._transitions: dict[str, dict] = {}
        self._default_state = default_state
        self._error_state = error_state
        # История предыдущих стейтов: chat_id -> previous_state_name
        self._previous_states: dict[int, str] = {}

    def load_transitions(self, path: str | Path) -> None:
        """
        Загружает таблицу переходов из YAML.

        Args:
            path: Путь к файлу transitions.yaml
        """
        path = Path(path)
        if not path.exists():
            logger.warning(f"[SM] Файл переходов не найден: {path}")
            return

        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}

        self._transitions = data.get('states', {})
        logger.info(f"[SM] Загружено переходов для {len(self._transitions)} стейтов")

    def register(self, state: BaseState) -> None:
        self._states[state.name] = state
        logger.debug(f"[SM] Зарегистрирован стейт: {state.name}")

    def register_all(self, states: list[BaseState]) -> None:
        for state in states:
            self.register(state)
        logger.info(f"[SM] Зарегистрировано стейтов: {len(states)}")

    def get_state(self, name: str) -> Optional[BaseState]:
        return self._states.get(name)

    @property
    def state_names(self) -> list[str]:
        return list(self._states)

    def get_user_state(self, user) -> str:
        """Имя текущего стейта пользователя (или стартового)."""
        return getattr(user, 'current_state', None) or self._default_state

    def get_next_state(self, current_state: str, event: str, chat_id: int = None) -> Optional[str]:
        """
        Определить следующий стейт по событию.

        Args:
            current_state: Текущий стейт
            event: Событие (возвращаемое из handle)
            chat_id: ID чата для получения previous_state

        Returns:
            Имя следующего стейта или None если переход не определён
        """
        if event == "error":
            return self._error_state

        events = self._transitions.get(current_state, {}).get('events', {})
        next_state = events.get(event)

        if next_state == '_same':
            return current_state
        if next_state == '_previous':
            return self._previous_states.get(chat_id, 'common.menu')

        return next_state

    def _resolve_current(self, user) -> tuple[str, Optional[BaseState]]:
        name = self.get_user_state(user)
        state = self.get_state(name)
        if not state:
            logger.error(f"[SM] Стейт не найден: {name}, откат на {self._default_state}")
            name = self._default_state
            state = self.get_state(name)
        return name, state

    async def handle(self, user, message) -> None:
        """
        Обработка текстового сообщения текущим стейтом.

        Исключение внутри стейта превращается в событие "error"
        и ведёт на экран ошибки.
        """
        current_state_name, current_state = self._resolve_current(user)
        if not current_state:
            logger.error("[SM] Даже дефолтный стейт не найден!")
            return

        context = None
        try:
            event = await current_state.handle(user, message)
        except Exception as e:
            logger.exception(f"[SM] Ошибка в стейте {current_state_name}: {e}")
            event = "error"
            context = {'error': e}

        await self._follow(user, current_state, current_state_name, event, context)

    async def handle_callback(self, user, callback) -> None:
        """
        Обработка нажатия на inline-кнопку текущим стейтом.
        """
        current_state_name, current_state = self._resolve_current(user)
        if not current_state:
            logger.error("[SM] Даже дефолтный стейт не найден!")
            return

        if not hasattr(current_state, 'handle_callback'):
            logger.warning(f"[SM] Стейт {current_state_name} не имеет handle_callback")
            return

        context = None
        try:
            event = await current_state.handle_callback(user, callback)
        except Exception as e:
            logger.exception(f"[SM] Ошибка в handle_callback стейта {current_state_name}: {e}")
            event = "error"
            context = {'error': e}

        await self._follow(user, current_state, current_state_name, event, context)

    async def _follow(self, user, current_state: BaseState, current_state_name: str,
                      event: Optional[str], context: Optional[dict]) -> None:
        if not event:
            return
        next_state_name = self.get_next_state(current_state_name, event, user.chat_id)
        if next_state_name is None:
            logger.warning(f"[SM] Нет перехода из {current_state_name} по событию '{event}'")
            return
        if next_state_name != current_state_name:
            await self._transition(user, current_state, next_state_name, context)

    async def _transition(self, user, from_state: BaseState, to_state_name: str, context: dict = None) -> None:
        """
        Выполнить переход между стейтами: exit → слияние контекстов → enter.

        Если enter() вернул событие: выполняется авто-переход.
        """
        to_state = self.get_state(to_state_name)
        if not to_state:
            logger.error(f"[SM] Целевой стейт не найден: {to_state_name}")
            return

        logger.info(f"[SM] Переход: {from_state.name} -> {to_state_name} (chat_id={user.chat_id})")

        exit_context = await from_state.exit(user)
        full_context = {**(context or {}), **exit_context}

        self._previous_states[user.chat_id] = from_state.name
        user.current_state = to_state_name

        await self._enter(user, to_state, full_context)

    async def _enter(self, user, to_state: BaseState, context: dict) -> None:
        try:
            event = await to_state.enter(user, context)
        except Exception as e:
            if to_state.name == self._error_state:
                raise
            logger.exception(f"[SM] Ошибка при входе в {to_state.name}: {e}")
            await self.go_to(user, self._error_state, {'error': e})
            return

        if event:
            next_state = self.get_next_state(to_state.name, event, user.chat_id)
            if next_state and next_state != to_state.name:
                logger.info(f"[SM] Авто-переход из {to_state.name} по событию '{event}'")
                await self.go_to(user, next_state, context)

    async def start(self, user, context: dict = None) -> None:
        """
        Запустить машину для пользователя (команда /start).
        """
        start_state = self.get_state(self._default_state)
        if not start_state:
            logger.error(f"[SM] Стартовый стейт не найден: {self._default_state}")
            return
        user.current_state = self._default_state
        await self._enter(user, start_state, context or {})

    async def go_to(self, user, state_name: str, context: dict = None) -> None:
        """
        Перейти в указанный стейт (команды, кнопки меню).

        Args:
            user: Объект пользователя
            state_name: Имя целевого стейта
            context: Дополнительный контекст
        """
        to_state = self.get_state(state_name)
        if not to_state:
            logger.error(f"[SM] Целевой стейт не найден: {state_name}")
            return

        current_state_name = self.get_user_state(user)
        current_state = self.get_state(current_state_name)
        logger.info(f"[SM] go_to: {current_state_name} -> {state_name} for chat_id={user.chat_id}")

        exit_context = {}
        if current_state:
            exit_context = await current_state.exit(user)
            if current_state_name != state_name:
                self._previous_states[user.chat_id] = current_state_name

        full_context = {**(context or {}), **exit_context}
        user.current_state = state_name
        await self._enter(user, to_state, full_context)
