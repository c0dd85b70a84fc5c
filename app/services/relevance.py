"""Query-to-title relevance scoring for the search path."""

from __future__ import annotations

EXACT_SCORE = 100.0
PREFIX_SCORE = 90.0
SUBSTRING_SCORE = 70.0
WORD_TIER_SCORE = 60.0


def score(title: str, query: str, *, fast: bool = False) -> float:
    """Return a 0-100 match score between ``title`` and ``query``.

    The first matching rule wins: exact match, prefix, substring, then the
    share of query words found inside title words. ``fast`` skips the word
    tier and scores anything below a substring match as 0.
    """

    title_text = (title or "").lower()
    query_text = (query or "").lower()
    if not title_text or not query_text:
        return 0.0
    if title_text == query_text:
        return EXACT_SCORE
    if title_text.startswith(query_text):
        return PREFIX_SCORE
    if query_text in title_text:
        return SUBSTRING_SCORE
    if fast:
        return 0.0

    query_words = query_text.split()
    title_words = title_text.split()
    if not query_words:
        return 0.0
    matched = sum(
        1
        for word in query_words
        if any(candidate.startswith(word) or word in candidate for candidate in title_words)
    )
    return matched / len(query_words) * WORD_TIER_SCORE


__all__ = ["score"]
