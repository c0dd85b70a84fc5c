"""Static fallback dataset tests."""

from __future__ import annotations

import random

from app.fallback import FALLBACK_TITLES, fallback_recommendations


def test_fallback_filters_type_and_genre() -> None:
    items = fallback_recommendations("series", 10, ["Horror"], rng=random.Random(1))

    assert items
    assert all(item.content_type == "series" for item in items)
    assert all("Horror" in item.genres for item in items)


def test_fallback_genre_filter_fails_open() -> None:
    """No fallback movie is tagged Horror, so any movie may be returned."""

    items = fallback_recommendations("movies", 5, ["Horror"], rng=random.Random(3))

    assert len(items) == 5
    assert all(item.content_type == "movie" for item in items)


def test_fallback_language_filter_is_strict() -> None:
    hindi = fallback_recommendations("all", 50, language="hindi", rng=random.Random(2))
    english = fallback_recommendations("all", 50, language="english", rng=random.Random(2))

    assert {item.title for item in hindi} == {entry.title for entry in FALLBACK_TITLES if entry.hindi}
    assert all(item.language == "English" for item in english)


def test_fallback_respects_limit() -> None:
    assert len(fallback_recommendations("all", 3)) == 3
    assert fallback_recommendations("all", 0) == []
