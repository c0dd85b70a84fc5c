"""Collapse candidate lists gathered from several sources."""

from __future__ import annotations

from typing import Iterable

from ..models import CandidateItem


def dedupe(items: Iterable[CandidateItem]) -> list[CandidateItem]:
    """Return unique candidates in first-seen order.

    When two items share a key and both carry a score (``ai_score`` or
    ``relevance``), the higher-scored one takes the slot of the first seen.
    Otherwise the first seen wins.
    """

    slots: dict[str, int] = {}
    unique: list[CandidateItem] = []
    for item in items:
        key = item.dedupe_key()
        index = slots.get(key)
        if index is None:
            slots[key] = len(unique)
            unique.append(item)
            continue
        current = unique[index]
        current_score = current.score_value()
        challenger_score = item.score_value()
        if (
            current_score is not None
            and challenger_score is not None
            and challenger_score > current_score
        ):
            unique[index] = item
    return unique


__all__ = ["dedupe"]
