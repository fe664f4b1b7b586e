"""
Тесты мастера самооценки (core/wizard.py).

Запуск: pytest tests/test_wizard.py -v
"""

import pytest

from core.wizard import AnswerAccumulator, Wizard, EXIT


def _wizard(**kwargs):
    return Wizard(["intro", "rating", "results"], ["a", "b", "c"], **kwargs)


class TestNavigation:
    """Переходы intro → вопросы → результаты и обратно"""

    def test_starts_in_intro(self):
        wizard = _wizard()
        assert wizard.phase == "intro"
        assert wizard.index == 0

    def test_next_without_answer_is_noop(self):
        wizard = _wizard()
        wizard.start()
        assert wizard.next() is False
        assert wizard.index == 0

    def test_last_question_moves_to_results(self):
        wizard = _wizard(summarize=lambda answers: sorted(answers.as_dict().items()))
        wizard.start()
        for value in (3, 7, 9):
            wizard.record(value)
            assert wizard.next() is True
        assert wizard.phase == "results"
        assert wizard.summary == [("a", 3), ("b", 7), ("c", 9)]

    def test_back_from_intro_exits(self):
        assert _wizard().back() == EXIT

    def test_back_from_first_question_returns_to_intro(self):
        wizard = _wizard()
        wizard.start()
        assert wizard.back() == "intro"

    def test_back_from_results_returns_to_last_question(self):
        wizard = _wizard(prefill=5)
        wizard.start()
        for _ in range(3):
            wizard.next()
        assert wizard.back() == "rating"
        assert wizard.index == 2

    def test_extra_phase(self):
        wizard = Wizard(["intro", "assessment", "results", "practice"], ["a"])
        wizard.go("practice")
        assert wizard.back() == "results"
        with pytest.raises(ValueError):
            wizard.go("unknown")


class TestPrefill:
    """Слайдер со значением по умолчанию"""

    def test_prefill_counts_as_answer(self):
        wizard = _wizard(prefill=5)
        wizard.start()
        assert wizard.has_answer()
        assert wizard.current_answer() == 5
        assert wizard.next() is True
        assert wizard.answers.get("a") == 5

    def test_missing_answers_filled_on_finish(self):
        wizard = _wizard(prefill=5)
        wizard.start()
        wizard.record(8)
        for _ in range(3):
            wizard.next()
        assert wizard.summary == {"a": 8, "b": 5, "c": 5}


class TestAnswerAccumulator:
    """Валидация рейтингов"""

    @pytest.mark.parametrize("value", [0, 11, 5.5, True, "7"])
    def test_rejects_out_of_range(self, value):
        with pytest.raises(ValueError):
            AnswerAccumulator().record("q", value)

    def test_unbounded_accepts_choices(self):
        answers = AnswerAccumulator(default=None, bounds=None)
        answers.record("q1", "driver")
        assert answers.as_dict() == {"q1": "driver"}

    def test_answer_or_default(self):
        answers = AnswerAccumulator()
        assert answers.answer_or_default("missing") == 5
