"""Curated static titles used when every live recommendation source fails."""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Sequence

from .genres import normalize_genre_set, split_genres
from .models import CandidateItem, ContentTypeFilter, Language
from .utils import parse_rating


@dataclass(frozen=True)
class FallbackTitle:
    """Describes one embedded fallback recommendation."""

    title: str
    year: str
    imdb_id: str
    content_type: str
    genre: str
    rating: str
    hindi: bool = False

    def to_candidate(self) -> CandidateItem:
        return CandidateItem(
            title=self.title,
            year=self.year,
            external_id=self.imdb_id,
            content_type="series" if self.content_type == "series" else "movie",
            genres=split_genres(self.genre),
            rating=parse_rating(self.rating),
            language="Hindi" if self.hindi else "English",
            source="fallback",
        )


FALLBACK_TITLES: tuple[FallbackTitle, ...] = (
    FallbackTitle("The Shawshank Redemption", "1994", "tt0111161", "movie", "Drama", "9.3"),
    FallbackTitle("The Dark Knight", "2008", "tt0468569", "movie", "Action, Crime, Drama", "9.0"),
    FallbackTitle("Inception", "2010", "tt1375666", "movie", "Action, Sci-Fi, Thriller", "8.8"),
    FallbackTitle("Pulp Fiction", "1994", "tt0110912", "movie", "Crime, Drama", "8.9"),
    FallbackTitle("Forrest Gump", "1994", "tt0109830", "movie", "Drama, Romance", "8.8"),
    FallbackTitle("The Matrix", "1999", "tt0133093", "movie", "Action, Sci-Fi", "8.7"),
    FallbackTitle("Goodfellas", "1990", "tt0099685", "movie", "Biography, Crime, Drama", "8.7"),
    FallbackTitle("Interstellar", "2014", "tt0816692", "movie", "Adventure, Drama, Sci-Fi", "8.6"),
    FallbackTitle("Breaking Bad", "2008–2013", "tt0903747", "series", "Crime, Drama, Thriller", "9.5"),
    FallbackTitle("Game of Thrones", "2011–2019", "tt0944947", "series", "Action, Adventure, Drama", "9.2"),
    FallbackTitle("Stranger Things", "2016–", "tt4574334", "series", "Drama, Fantasy, Horror", "8.7"),
    FallbackTitle("The Office", "2005–2013", "tt0386676", "series", "Comedy", "9.0"),
    FallbackTitle("Friends", "1994–2004", "tt0108778", "series", "Comedy, Romance", "8.9"),
    FallbackTitle("The Crown", "2016–2023", "tt4786824", "series", "Biography, Drama, History", "8.6"),
    FallbackTitle("The Mandalorian", "2019–", "tt8111088", "series", "Action, Adventure, Fantasy", "8.7"),
    FallbackTitle("Wednesday", "2022–", "tt13443470", "series", "Comedy, Crime, Family", "8.1"),
    FallbackTitle("Dangal", "2016", "tt5074352", "movie", "Action, Biography, Drama", "8.4", hindi=True),
    FallbackTitle("3 Idiots", "2009", "tt1187043", "movie", "Comedy, Drama", "8.4", hindi=True),
    FallbackTitle("Lagaan", "2001", "tt0169102", "movie", "Adventure, Drama, Musical", "8.1", hindi=True),
    FallbackTitle(
        "Zindagi Na Milegi Dobara", "2011", "tt1562872", "movie", "Adventure, Comedy, Drama", "8.2", hindi=True
    ),
    FallbackTitle("Queen", "2013", "tt3322420", "movie", "Adventure, Comedy, Drama", "8.2", hindi=True),
    FallbackTitle("Sacred Games", "2018–2019", "tt6077448", "series", "Action, Crime, Drama", "8.6", hindi=True),
    FallbackTitle(
        "Scam 1992: The Harshad Mehta Story", "2020", "tt11126994", "series", "Biography, Crime, Drama", "9.5",
        hindi=True,
    ),
    FallbackTitle("The Family Man", "2019–", "tt9544034", "series", "Action, Drama, Thriller", "8.7", hindi=True),
    FallbackTitle("Mirzapur", "2018–", "tt6473300", "series", "Action, Crime, Drama", "8.4", hindi=True),
)


def fallback_recommendations(
    content_type: ContentTypeFilter,
    limit: int,
    selected_genres: Sequence[str] = (),
    language: Language = "all",
    *,
    rng: random.Random | None = None,
) -> list[CandidateItem]:
    """Return up to ``limit`` shuffled fallback titles matching the filters.

    Type and language filters are strict. The genre filter fails open: when
    no fallback title carries a selected genre, the type/language filtered
    set is used instead.
    """

    entries = list(FALLBACK_TITLES)
    if content_type == "movies":
        entries = [entry for entry in entries if entry.content_type == "movie"]
    elif content_type == "series":
        entries = [entry for entry in entries if entry.content_type == "series"]

    if language == "hindi":
        entries = [entry for entry in entries if entry.hindi]
    elif language == "english":
        entries = [entry for entry in entries if not entry.hindi]

    wanted = {genre.lower() for genre in normalize_genre_set(selected_genres)}
    if wanted:
        genre_matches = [
            entry
            for entry in entries
            if wanted & {genre.lower() for genre in split_genres(entry.genre)}
        ]
        if genre_matches:
            entries = genre_matches

    (rng or random).shuffle(entries)
    return [entry.to_candidate() for entry in entries[: max(0, limit)]]
