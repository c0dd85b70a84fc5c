"""Relevance scorer rule priority tests."""

from __future__ import annotations

import pytest

from app.services.relevance import score


@pytest.mark.parametrize("title", ["Batman", "the DARK knight", "x", "Amélie"])
def test_identical_strings_score_100(title: str) -> None:
    assert score(title, title.upper()) == 100
    assert score(title, title, fast=True) == 100


def test_rule_priority() -> None:
    assert score("Batman Begins", "batman") == 90
    assert score("The Batman", "batman") == 70
    assert score("Dark Knight Rises", "knight dark") == 60
    assert score("Dark Knight Rises", "knight moon") == 30
    assert score("Dark Knight Rises", "zebra") == 0


def test_fast_mode_skips_word_tier() -> None:
    assert score("Dark Knight Rises", "knight dark", fast=True) == 0
    assert score("The Batman", "batman", fast=True) == 70


@pytest.mark.parametrize(
    ("title", "query"),
    [("", "batman"), ("Batman", ""), ("Batman", "   "), ("A B C", "a b c d e f g")],
)
def test_scores_stay_in_range(title: str, query: str) -> None:
    assert 0 <= score(title, query) <= 100
