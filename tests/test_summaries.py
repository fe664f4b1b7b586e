"""
Тесты итогов инструментов (core/summaries.py).
"""

import pytest

from core.summaries import (
    top_n, domain_averages, score_label, is_growth_area,
    overall_score, style_profile, lowest_areas,
)


class TestTopN:

    def test_highest_first(self):
        ratings = {"hope": 9, "zest": 4, "love": 10, "humor": 7}
        assert top_n(ratings, n=2) == ["love", "hope"]

    def test_ties_keep_original_order(self):
        order = ["a", "b", "c", "d"]
        ratings = {"a": 6, "b": 8, "c": 8, "d": 8}
        assert top_n(ratings, order, n=2) == ["b", "c"]

    def test_missing_rating_counts_as_default(self):
        order = ["a", "b", "c"]
        assert top_n({"a": 4, "c": 6}, order, n=2) == ["c", "b"]


class TestEq:

    DOMAINS = [
        {"key": "self_awareness", "questions": ["q1", "q2"]},
        {"key": "empathy", "questions": ["q1", "q2"]},
        {"key": "empty", "questions": []},
    ]

    def test_domain_averages(self):
        ratings = {"self_awareness:0": 8, "self_awareness:1": 6, "empathy:0": 3}
        averages = domain_averages(ratings, self.DOMAINS)
        assert averages == {"self_awareness": 7.0, "empathy": 4.0}

    @pytest.mark.parametrize("score,label", [
        (9.5, "strong"), (8, "strong"), (6.5, "good"), (4, "developing"), (3.9, "growth_area"),
    ])
    def test_score_label(self, score, label):
        assert score_label(score) == label

    def test_growth_area_threshold(self):
        assert is_growth_area(5.9)
        assert not is_growth_area(6)

    def test_overall_score(self):
        assert overall_score({"a": 6.0, "b": 8.0}) == 7.0
        assert overall_score({}) == 0.0


class TestStyleProfile:

    def test_primary_and_secondary(self):
        choices = {"q1": "amiable", "q2": "amiable", "q3": "driver"}
        profile = style_profile(choices)
        assert profile["primary"] == "amiable"
        assert profile["secondary"] == "driver"
        assert profile["scores"] == {"driver": 1, "expressive": 0, "amiable": 2, "analytical": 0}

    def test_tie_resolved_by_canonical_order(self):
        profile = style_profile({"q1": "analytical", "q2": "expressive"})
        assert profile["primary"] == "expressive"
        assert profile["secondary"] == "analytical"


def test_lowest_areas():
    categories = ["health", "money", "fun", "faith"]
    scores = {"health": 7, "money": 2, "fun": 4, "faith": 4}
    assert lowest_areas(scores, categories) == ["money", "fun"]
