"""Genre affinity derived from a user's watch history."""

from __future__ import annotations

from typing import Iterable

from ..genres import split_genres
from ..models import UserPreferenceProfile, WatchHistoryEntry

AFFINITY_CAP = 10.0


def compute_affinity(history: Iterable[WatchHistoryEntry]) -> UserPreferenceProfile:
    """Replay ``history`` into a fresh :class:`UserPreferenceProfile`.

    Entries without genre data count toward ``total_watched`` only.
    """

    affinity: dict[str, float] = {}
    counts: dict[str, int] = {}
    total = 0
    for entry in history:
        total += 1
        for genre in split_genres(entry.genre):
            counts[genre] = counts.get(genre, 0) + 1
            affinity[genre] = min(AFFINITY_CAP, affinity.get(genre, 0.0) + 1.0)
    return UserPreferenceProfile(
        genre_affinity=affinity,
        watched_genre_counts=counts,
        total_watched=total,
    )


def top_genres(profile: UserPreferenceProfile, count: int = 2) -> list[str]:
    """Return the most watched genres, most frequent first."""

    ranked = sorted(
        profile.watched_genre_counts.items(), key=lambda pair: (-pair[1], pair[0])
    )
    return [genre for genre, _ in ranked[: max(0, count)]]


__all__ = ["AFFINITY_CAP", "compute_affinity", "top_genres"]
