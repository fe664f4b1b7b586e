"""
Тесты SWOT-доски (core/swot.py).
"""

import pytest

from core.swot import SwotBoard, QUADRANTS


class FixedClock:
    def __init__(self, value=1700000000.0):
        self.value = value

    def __call__(self):
        return self.value


class TestSwotBoard:

    def test_from_payload_keeps_items(self):
        board = SwotBoard.from_payload({
            "strengths": [{"id": "strengths-1", "item": "Team"}],
            "threats": None,
            "actionItems": ["call mentor"],
        })
        assert board.total == 1
        assert board.items["threats"] == []
        assert not board.has_changes

    def test_add_marks_changes(self):
        board = SwotBoard(clock=FixedClock())
        item = board.add("strengths", "  Strong network ")
        assert item["item"] == "Strong network"
        assert item["id"].startswith("strengths-")
        assert board.has_changes

    def test_empty_text_ignored(self):
        board = SwotBoard()
        assert board.add("threats", "   ") is None
        assert not board.has_changes

    def test_ids_unique_with_same_clock(self):
        board = SwotBoard(clock=FixedClock())
        first = board.add("opportunities", "one")
        second = board.add("opportunities", "two")
        assert first["id"] != second["id"]

    def test_unknown_quadrant(self):
        with pytest.raises(KeyError):
            SwotBoard().add("dreams", "x")

    def test_remove_and_reflection(self):
        board = SwotBoard(clock=FixedClock())
        item = board.add("weaknesses", "Time")
        assert board.update_reflection("weaknesses", item["id"], " Pray for focus ")
        assert board.find("weaknesses", item["id"])["faithReflection"] == "Pray for focus"
        assert board.remove("weaknesses", item["id"])
        assert not board.remove("weaknesses", item["id"])

    def test_payload_and_mark_saved(self):
        board = SwotBoard(clock=FixedClock())
        board.add("strengths", "A")
        payload = board.to_payload()
        assert set(QUADRANTS) <= set(payload)
        assert payload["actionItems"] == [] and payload["prayerPoints"] == []
        board.mark_saved()
        assert not board.has_changes
