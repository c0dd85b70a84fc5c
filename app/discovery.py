"""Discovery source plans and the keyword catalogues they search with."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Mapping, Sequence

from .genres import normalize_genre_set


@dataclass(frozen=True)
class SourcePlan:
    """One additional recommendation source and its share of the limit."""

    id: str
    label: str
    share: float

    def budget(self, limit: int) -> int:
        """Return how many items this source should contribute for ``limit``."""

        return max(1, math.ceil(limit * self.share))


LATEST = "latest"
GENRE_KEYWORDS = "genre-keywords"
POPULAR_KEYWORDS = "popular-keywords"
SAMPLE_MOVIES = "sample-movies"
HINDI = "hindi"
ENGLISH_GENRES = "english-genres"
ENGLISH_POPULAR = "english-popular"
RANDOM_DISCOVERY = "random-discovery"


SOURCE_PLANS: Mapping[str, tuple[SourcePlan, ...]] = {
    "all": (
        SourcePlan(LATEST, "Latest releases", 0.25),
        SourcePlan(GENRE_KEYWORDS, "Genre keyword search", 0.2),
        SourcePlan(POPULAR_KEYWORDS, "Popular keyword search", 0.15),
        SourcePlan(SAMPLE_MOVIES, "Sample movies", 0.25),
        SourcePlan(HINDI, "Hindi/Bollywood", 0.2),
    ),
    "english": (
        SourcePlan(LATEST, "Latest releases", 0.25),
        SourcePlan(ENGLISH_GENRES, "English genre search", 0.6),
        SourcePlan(ENGLISH_POPULAR, "English popular search", 0.3),
    ),
    "hindi": (
        SourcePlan(LATEST, "Latest releases", 0.2),
        SourcePlan(HINDI, "Hindi/Bollywood", 0.8),
    ),
}

RANDOM_DISCOVERY_PLAN = SourcePlan(RANDOM_DISCOVERY, "Random discovery", 0.1)


def source_plans(language: str) -> list[SourcePlan]:
    """Return the ordered source plans for ``language`` plus random discovery."""

    plans = list(SOURCE_PLANS.get(language, SOURCE_PLANS["all"]))
    plans.append(RANDOM_DISCOVERY_PLAN)
    return plans


LATEST_YEAR_TERMS = 6
LATEST_MAX_AGE = 3

POPULAR_SEARCH_TERMS: tuple[str, ...] = (
    "Marvel", "Batman", "Star Wars", "Harry Potter", "Lord of the Rings",
    "Fast and Furious", "Mission Impossible", "John Wick", "Avengers",
    "Transformers", "Jurassic Park", "Indiana Jones", "Pirates Caribbean",
    "X-Men", "Spider-Man", "Iron Man", "Deadpool", "Wonder Woman",
    "Breaking Bad", "Game of Thrones", "Stranger Things", "The Office",
    "Friends", "The Crown", "Narcos", "Money Heist", "Sherlock", "Westworld",
    "Better Call Saul", "Ozark", "Peaky Blinders", "Mandalorian",
    "Godfather", "Shawshank Redemption", "Pulp Fiction", "Forrest Gump",
    "Matrix", "Inception", "Interstellar", "Dark Knight", "Goodfellas",
    "Top Gun Maverick", "Black Panther", "Dune", "Joker", "Parasite",
    "Dangal", "Baahubali", "KGF", "RRR", "3 Idiots", "Lagaan",
    "Zindagi Na Milegi Dobara", "Andhadhun", "Gully Boy", "Stree",
    "Sacred Games", "Mirzapur", "Scam 1992", "The Family Man", "Kota Factory",
    "Oldboy", "Spirited Away", "Seven Samurai", "City of God", "Amelie",
    "Toy Story", "Finding Nemo", "Shrek", "Frozen", "Coco", "Inside Out",
    "Planet Earth", "Our Planet", "Free Solo", "The Last Dance",
)
POPULAR_TERM_COUNT = 8

ENGLISH_POPULAR_TERMS: tuple[str, ...] = (
    "Marvel", "Batman", "Star Wars", "Harry Potter", "Lord of the Rings",
    "Fast and Furious", "Mission Impossible", "John Wick", "Avengers",
    "Breaking Bad", "Game of Thrones", "Stranger Things", "The Office",
    "Friends", "The Crown", "The Mandalorian", "Wednesday",
)
ENGLISH_POPULAR_TERM_COUNT = 6

HINDI_BASE_TERMS: tuple[str, ...] = (
    "Shah Rukh Khan", "Salman Khan", "Aamir Khan", "Amitabh Bachchan",
    "Akshay Kumar", "Hrithik Roshan", "Ranveer Singh", "Ranbir Kapoor",
    "Deepika Padukone", "Priyanka Chopra", "Kareena Kapoor", "Alia Bhatt",
)
HINDI_GENRE_TERMS: Mapping[str, tuple[str, ...]] = {
    "Action": ("Dangal", "Baahubali", "KGF", "War", "Uri"),
    "Comedy": ("3 Idiots", "Hera Pheri", "Golmaal", "Housefull"),
    "Romance": ("Dilwale Dulhania Le Jayenge", "Jab We Met", "Yeh Jawaani Hai Deewani"),
    "Drama": ("Taare Zameen Par", "Pink", "Queen", "Article 15"),
    "Thriller": ("Andhadhun", "Kahaani", "Drishyam", "Talaash"),
}
HINDI_TRAILING_TERMS: tuple[str, ...] = (
    "Sacred Games", "Mirzapur", "Scam 1992", "The Family Man", "Arya",
    "Delhi Crime", "Mumbai Diaries", "Rocket Boys",
    "Bollywood", "Hindi movie", "Hindi film", "Indian cinema",
)
HINDI_TERM_COUNT = 8

RANDOM_DISCOVERY_TERMS: tuple[str, ...] = (
    "2023", "2022", "2021", "2020", "2019", "2018", "2017", "2016", "2015",
    "2010", "2005", "2000", "1995", "1990", "1985", "1980",
    "adventure", "mystery", "western", "musical", "sport", "biography",
    "history", "war", "family", "short", "news", "reality",
    "french", "german", "japanese", "korean", "spanish", "italian",
    "chinese", "russian", "brazilian", "mexican", "canadian",
    "oscar", "golden globe", "cannes", "sundance", "venice", "berlin",
    "bafta", "critics choice", "screen actors guild",
    "independent", "cult", "classic", "remake", "sequel", "prequel",
    "based on", "true story", "novel", "comic", "video game",
)
RANDOM_DISCOVERY_TERM_COUNT = 3


def hindi_search_terms(selected_genres: Sequence[str]) -> list[str]:
    """Return Hindi terms: genre classics first, then star names and series."""

    selected = normalize_genre_set(selected_genres)
    terms: list[str] = []
    for genre, genre_terms in HINDI_GENRE_TERMS.items():
        if genre in selected:
            terms.extend(genre_terms)
    terms.extend(HINDI_BASE_TERMS)
    terms.extend(HINDI_TRAILING_TERMS)
    return list(dict.fromkeys(terms))


__all__ = [
    "ENGLISH_POPULAR_TERMS",
    "HINDI_GENRE_TERMS",
    "POPULAR_SEARCH_TERMS",
    "RANDOM_DISCOVERY_TERMS",
    "SOURCE_PLANS",
    "SourcePlan",
    "hindi_search_terms",
    "source_plans",
]
