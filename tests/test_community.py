"""
Тесты сообщества и определений инструментов (core/community.py, core/tools.py).
"""

import pytest

from core.community import filter_by_focus, joined_ids, featured, FOCUS_ALL
from core.tools import load_tool, localized, eq_question_keys, eq_question, find_by_key

PODS = [
    {"id": 1, "name": "Campus prayer", "focus": "campus"},
    {"id": 2, "name": "Healing circle", "focus": "healing"},
    {"id": 3, "name": "Morning pod", "focus": "campus"},
]


class TestPods:

    def test_filter_all(self):
        assert filter_by_focus(PODS, FOCUS_ALL) == PODS

    def test_filter_by_focus(self):
        assert [pod["id"] for pod in filter_by_focus(PODS, "campus")] == [1, 3]

    def test_joined_ids(self):
        assert joined_ids([{"id": 2}]) == {2}


class TestSparks:

    def test_featured_limit(self):
        sparks = [{"id": i} for i in range(6)]
        assert len(featured(sparks)) == 4
        assert featured(sparks, compact=True) == [{"id": 0}]


class TestTools:

    def test_localized(self):
        assert localized({"en": "Hope", "ru": "Надежда"}, "ru") == "Надежда"
        assert localized({"en": "Hope"}, "ru") == "Hope"
        assert localized("plain", "ru") == "plain"
        assert localized(None, "en", "fallback") == "fallback"

    @pytest.mark.parametrize("tool_id", ["eq", "strengths", "styles", "wheel", "swot"])
    def test_tool_yaml_loads(self, tool_id):
        assert load_tool(tool_id)

    def test_eq_question_keys_address_questions(self):
        tool = load_tool("eq")
        keys = eq_question_keys(tool)
        assert len(keys) == sum(len(domain["questions"]) for domain in tool["domains"])
        domain, question = eq_question(tool, keys[0])
        assert domain is find_by_key(tool["domains"], keys[0].split(":")[0])
        assert question is domain["questions"][0]

    def test_unknown_eq_domain(self):
        with pytest.raises(KeyError):
            eq_question(load_tool("eq"), "nope:0")
