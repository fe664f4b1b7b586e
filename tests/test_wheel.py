"""
Тесты колеса баланса (core/wheel.py).
"""

import pytest

from core.wheel import WheelBoard, PHASE_ASSESS, PHASE_FOCUS

CATEGORIES = ["health", "relationships", "career", "finances"]


def _scored_board():
    board = WheelBoard(CATEGORIES, max_focus=2)
    for key, score in zip(CATEGORIES, (7, 3, 5, 2)):
        board.rate(key, score)
    return board


class TestWheelBoard:

    def test_focus_requires_all_scored(self):
        board = WheelBoard(CATEGORIES)
        board.rate("health", 6)
        assert board.to_focus() is False
        assert board.phase == PHASE_ASSESS

    def test_to_focus_and_back(self):
        board = _scored_board()
        assert board.to_focus()
        assert board.phase == PHASE_FOCUS
        assert board.back() is True
        assert board.back() is False

    def test_rate_validation(self):
        board = WheelBoard(CATEGORIES)
        with pytest.raises(ValueError):
            board.rate("health", 11)
        with pytest.raises(KeyError):
            board.rate("unknown", 5)

    def test_focus_limit(self):
        board = _scored_board()
        assert board.toggle_focus("health")
        assert board.toggle_focus("career")
        assert board.toggle_focus("finances") is False
        assert board.toggle_focus("health")
        assert board.focus == ["career"]
        assert board.can_save

    def test_lowest_and_average(self):
        board = _scored_board()
        assert board.lowest() == ["finances", "relationships"]
        assert board.average() == pytest.approx(4.25)

    def test_load_prefill(self):
        board = WheelBoard(CATEGORIES, max_focus=2)
        board.load({
            "categories": [
                {"categoryKey": "health", "score": 8, "notes": "Run"},
                {"categoryKey": "ghost", "score": 1},
            ],
            "focusAreas": ["health", "ghost", "career", "finances"],
        })
        assert board.scores == {"health": 8}
        assert board.notes == {"health": "Run"}
        assert board.focus == ["health", "career"]

    def test_notes_and_payload(self):
        board = _scored_board()
        board.set_note("career", "  New role ")
        board.set_note("health", "   ")
        payload = board.to_payload()
        career = next(c for c in payload["categories"] if c["categoryKey"] == "career")
        assert career == {"categoryKey": "career", "score": 5, "notes": "New role"}
        assert payload["focusAreas"] == []
