"""
Мастер (wizard) для инструментов самооценки.

Wizard хранит текущую фазу, индекс вопроса и накопленные ответы.
Переходы между фазами: простое присваивание, без таблицы переходов:

    intro → <фаза вопросов> → <фаза результатов> → [доп. фазы]

next() на вопросе без ответа ничего не делает (кнопка «Далее» неактивна).
На последнем вопросе next() считает итог через summarize() и переходит
в фазу результатов. back() из intro возвращает EXIT: выход в меню
инструментов. Ничего не сохраняется: стейт пересоздаёт мастер при входе.

Использование:
    wizard = Wizard(["intro", "rating", "results"], keys, summarize=top5)
    wizard.start()
    wizard.record(7)
    wizard.next()
"""

import logging
from typing import Any, Callable, Iterable, Optional, Sequence

from config import DEFAULT_RATING, RATING_MIN, RATING_MAX

logger = logging.getLogger(__name__)

# Сигнал back() из intro: выйти в родительский экран
EXIT = "exit"


class AnswerAccumulator:
    """Ответы: ключ вопроса → рейтинг (1–10) или выбор.

    Если заданы bounds, принимаются только целые в диапазоне.
    """

    def __init__(self, default: Any = DEFAULT_RATING, bounds: Optional[tuple[int, int]] = (RATING_MIN, RATING_MAX)):
        self.default = default
        self.bounds = bounds
        self._answers: dict[str, Any] = {}

    def record(self, key: str, value: Any) -> None:
        if self.bounds is not None:
            low, high = self.bounds
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"Рейтинг должен быть целым числом, получено: {value!r}")
            if not low <= value <= high:
                raise ValueError(f"Рейтинг вне диапазона {low}–{high}: {value}")
        self._answers[key] = value

    def get(self, key: str) -> Any:
        return self._answers.get(key)

    def answer_or_default(self, key: str) -> Any:
        return self._answers.get(key, self.default)

    def fill_defaults(self, keys: Iterable[str]) -> None:
        """Проставить default всем пропущенным ключам."""
        for key in keys:
            self._answers.setdefault(key, self.default)

    def as_dict(self) -> dict[str, Any]:
        return dict(self._answers)

    def clear(self) -> None:
        self._answers.clear()

    def __contains__(self, key: str) -> bool:
        return key in self._answers

    def __len__(self) -> int:
        return len(self._answers)


class Wizard:
    """Фазы + индекс вопроса + ответы.

    Args:
        phases: упорядоченные фазы; phases[0]: intro
        question_keys: ключи вопросов в порядке показа
        summarize: функция ответов → итог, вызывается при переходе в результаты
        question_phase: фаза вопросов (по умолчанию phases[1])
        results_phase: фаза результатов (по умолчанию phases[2])
        prefill: ответ, который считается данным, пока пользователь не выбрал
            другой (слайдер со значением по умолчанию). None: ответ обязателен.
        accumulator: свой накопитель (например, для выбора вместо рейтинга)
    """

    def __init__(
        self,
        phases: Sequence[str],
        question_keys: Sequence[str],
        summarize: Optional[Callable[[AnswerAccumulator], Any]] = None,
        *,
        question_phase: Optional[str] = None,
        results_phase: Optional[str] = None,
        prefill: Any = None,
        accumulator: Optional[AnswerAccumulator] = None,
    ):
        if len(phases) < 3:
            raise ValueError("Нужны минимум три фазы: intro, вопросы, результаты")
        if not question_keys:
            raise ValueError("Мастер без вопросов")
        self.phases = list(phases)
        self.question_keys = list(question_keys)
        self.summarize = summarize
        self.question_phase = question_phase or self.phases[1]
        self.results_phase = results_phase or self.phases[2]
        self.prefill = prefill
        self.answers = accumulator if accumulator is not None else AnswerAccumulator()
        self.reset()

    # --- состояние ---

    def reset(self) -> None:
        self.phase = self.phases[0]
        self.index = 0
        self.summary: Any = None
        self.answers.clear()

    @property
    def intro_phase(self) -> str:
        return self.phases[0]

    @property
    def total(self) -> int:
        return len(self.question_keys)

    @property
    def current_key(self) -> str:
        return self.question_keys[self.index]

    @property
    def is_last_question(self) -> bool:
        return self.index == self.total - 1

    def current_answer(self) -> Any:
        """Записанный ответ или prefill."""
        value = self.answers.get(self.current_key)
        return self.prefill if value is None else value

    def has_answer(self) -> bool:
        return self.current_key in self.answers or self.prefill is not None

    def answered_count(self) -> int:
        return sum(1 for key in self.question_keys if key in self.answers)

    # --- действия ---

    def start(self) -> None:
        """intro → первый вопрос."""
        self.phase = self.question_phase
        self.index = 0

    def record(self, value: Any) -> None:
        """Записать ответ на текущий вопрос."""
        self.answers.record(self.current_key, value)

    def next(self) -> bool:
        """Следующий вопрос или результаты.

        Returns:
            False если ответа нет (no-op), иначе True.
        """
        if self.phase != self.question_phase:
            return False
        if not self.has_answer():
            return False

        if self.current_key not in self.answers:
            self.answers.record(self.current_key, self.prefill)

        if not self.is_last_question:
            self.index += 1
            return True

        if self.prefill is not None:
            self.answers.fill_defaults(self.question_keys)
        self.summary = self.summarize(self.answers) if self.summarize else self.answers.as_dict()
        self.phase = self.results_phase
        logger.debug(f"[Wizard] Итог рассчитан: {self.summary!r}")
        return True

    def back(self) -> str:
        """Шаг назад.

        Returns:
            Новая фаза или EXIT (из intro).
        """
        if self.phase == self.intro_phase:
            return EXIT

        if self.phase == self.question_phase:
            if self.index > 0:
                self.index -= 1
            else:
                self.phase = self.intro_phase
            return self.phase

        if self.phase == self.results_phase:
            self.phase = self.question_phase
            self.index = self.total - 1
            return self.phase

        position = self.phases.index(self.phase)
        self.phase = self.phases[position - 1]
        return self.phase

    def go(self, phase: str) -> None:
        """Перейти в дополнительную фазу (например, practice)."""
        if phase not in self.phases:
            raise ValueError(f"Неизвестная фаза: {phase}")
        self.phase = phase
