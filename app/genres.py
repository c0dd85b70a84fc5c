"""Genre canonicalisation and the query vocabularies derived from genres."""

from __future__ import annotations

from typing import Iterable, Mapping, Sequence


CANONICAL_GENRES: tuple[str, ...] = (
    "Action",
    "Adventure",
    "Animation",
    "Biography",
    "Comedy",
    "Crime",
    "Documentary",
    "Drama",
    "Family",
    "Fantasy",
    "History",
    "Horror",
    "Music",
    "Mystery",
    "Romance",
    "Sci-Fi",
    "Sport",
    "Thriller",
    "War",
    "Western",
)

GENRE_SYNONYMS: Mapping[str, str] = {
    "science fiction": "Sci-Fi",
    "science-fiction": "Sci-Fi",
    "sci-fi": "Sci-Fi",
    "sci fi": "Sci-Fi",
    "scifi": "Sci-Fi",
    "tv movie": "Drama",
}

# Short keyword lists used by the primary OMDb keyword+year pass.
AUTOMATED_QUERY_TERMS: Mapping[str, tuple[str, ...]] = {
    "Action": ("action", "adventure", "mission"),
    "Adventure": ("adventure", "quest", "expedition"),
    "Animation": ("animation", "animated", "pixar"),
    "Biography": ("biography", "biopic", "true story"),
    "Comedy": ("comedy", "funny", "humor"),
    "Crime": ("crime", "detective", "mafia"),
    "Documentary": ("documentary", "docu", "real story"),
    "Drama": ("drama", "emotional", "family"),
    "Family": ("family", "kids", "children"),
    "Fantasy": ("fantasy", "magic", "mythology"),
    "History": ("history", "period", "historical"),
    "Horror": ("horror", "scary", "haunted"),
    "Music": ("music", "musical", "band"),
    "Mystery": ("mystery", "investigation", "suspense"),
    "Romance": ("romance", "love", "relationship"),
    "Sci-Fi": ("sci-fi", "science fiction", "future"),
    "Sport": ("sports", "athlete", "tournament"),
    "Thriller": ("thriller", "psychological thriller", "suspense"),
    "War": ("war", "military", "battle"),
    "Western": ("western", "cowboy", "frontier"),
}
DEFAULT_AUTOMATED_TERMS: tuple[str, ...] = ("popular", "trending", "top rated", "new release")
LANGUAGE_QUERY_TERMS: Mapping[str, tuple[str, ...]] = {
    "hindi": ("bollywood", "hindi movie", "indian cinema"),
    "english": ("hollywood", "english movie"),
}
MAX_AUTOMATED_TERMS = 12

# Wider vocabularies for the keyword search API, mixing English and Hindi terms.
GENRE_SEARCH_TERMS: Mapping[str, tuple[str, ...]] = {
    "Action": (
        "action", "adventure", "superhero", "thriller", "spy", "martial arts",
        "heist", "mission", "agent", "assassin", "fast furious",
        "mission impossible", "john wick", "james bond", "die hard", "mad max",
        "bourne", "bollywood action", "hindi action", "dangal", "uri",
    ),
    "Comedy": (
        "comedy", "funny", "humor", "romantic comedy", "parody", "satire",
        "buddy comedy", "dark comedy", "hangover", "superbad", "anchorman",
        "step brothers", "bollywood comedy", "hindi comedy", "hera pheri",
        "golmaal", "housefull", "munna bhai", "andaz apna apna",
    ),
    "Drama": (
        "drama", "emotional", "family", "biography", "historical",
        "coming of age", "courtroom", "oscar winner", "based true story",
        "inspiring", "bollywood drama", "hindi drama", "taare zameen par",
        "pink", "masaan", "newton", "article 15",
    ),
    "Horror": (
        "horror", "scary", "supernatural", "ghost", "zombie", "vampire",
        "demon", "haunted", "possession", "slasher", "conjuring", "insidious",
        "paranormal activity", "scream", "exorcist", "bollywood horror",
        "hindi horror", "bhoot", "raaz", "stree",
    ),
    "Sci-Fi": (
        "science fiction", "sci-fi", "space", "future", "alien", "robot",
        "cyberpunk", "dystopian", "time travel", "star wars", "star trek",
        "blade runner", "matrix", "interstellar", "inception", "avatar",
        "krrish", "ra.one", "brahmastra",
    ),
    "Romance": (
        "romance", "love", "romantic", "relationship", "wedding", "love story",
        "titanic", "notebook", "pretty woman", "love actually",
        "bollywood romance", "hindi romance", "dilwale dulhania le jayenge",
        "kuch kuch hota hai", "jab we met", "yeh jawaani hai deewani",
    ),
    "Thriller": (
        "thriller", "suspense", "mystery", "crime", "detective",
        "psychological thriller", "conspiracy", "espionage", "gone girl",
        "shutter island", "zodiac", "memento", "prestige", "bollywood thriller",
        "hindi thriller", "kahaani", "andhadhun", "drishyam", "talaash",
    ),
    "Fantasy": (
        "fantasy", "magic", "adventure", "supernatural", "wizard", "dragon",
        "mythology", "fairy tale", "lord rings", "harry potter", "hobbit",
        "narnia", "bollywood fantasy", "baahubali", "brahmastra", "hanuman",
    ),
    "Crime": (
        "crime", "detective", "police", "mystery", "mafia", "gangster", "heist",
        "noir", "godfather", "goodfellas", "scarface", "departed", "heat",
        "pulp fiction", "bollywood crime", "gangs of wasseypur", "satya",
    ),
    "Animation": (
        "animation", "animated", "cartoon", "family", "pixar", "disney",
        "dreamworks", "studio ghibli", "anime", "toy story", "finding nemo",
        "shrek", "frozen", "coco", "spirited away", "chhota bheem",
    ),
}

ENGLISH_GENRE_TERMS: Mapping[str, tuple[str, ...]] = {
    "Action": ("action", "adventure", "superhero", "thriller"),
    "Comedy": ("comedy", "funny", "humor", "romantic comedy"),
    "Drama": ("drama", "emotional", "family", "biography"),
    "Horror": ("horror", "scary", "thriller", "supernatural"),
    "Sci-Fi": ("science fiction", "sci-fi", "space", "future"),
    "Romance": ("romance", "love", "romantic", "relationship"),
    "Thriller": ("thriller", "suspense", "mystery", "crime"),
    "Fantasy": ("fantasy", "magic", "adventure", "supernatural"),
    "Crime": ("crime", "detective", "police", "mystery"),
    "Animation": ("animation", "animated", "cartoon", "family"),
}

DEFAULT_SEED_GENRES: tuple[str, ...] = ("Action", "Comedy", "Drama")

# Ordered title keyword rules used when a source carries no genre data.
TITLE_GENRE_RULES: tuple[tuple[tuple[str, ...], str], ...] = (
    (
        (
            "spider", "batman", "superman", "war", "battle", "fight", "dangal",
            "baahubali", "kgf", "pushpa", "rrr", "uri", "tiger", "bhaag milkha",
        ),
        "Action, Adventure",
    ),
    (("horror", "scary", "bhoot", "raaz", "stree", "pari"), "Horror"),
    (
        (
            "comedy", "funny", "hera pheri", "golmaal", "housefull", "welcome",
            "munna bhai", "3 idiots",
        ),
        "Comedy",
    ),
    (
        (
            "romance", "love", "dilwale", "kuch kuch hota hai", "jab we met",
            "zindagi na milegi", "yeh jawaani hai deewani",
        ),
        "Romance",
    ),
    (
        (
            "thriller", "crime", "kahaani", "andhadhun", "drishyam", "talaash",
            "gangs of wasseypur", "sacred games", "mirzapur", "scam",
        ),
        "Thriller, Crime",
    ),
    (
        ("sci-fi", "science", "krrish", "robot", "ra.one", "mr. india", "brahmastra"),
        "Sci-Fi, Fantasy",
    ),
)
DEFAULT_TITLE_GENRE = "Drama"


def normalize_genre(genre: str | None) -> str:
    """Return the canonical spelling of a genre name.

    Synonyms map through :data:`GENRE_SYNONYMS`; everything else is title
    cased word by word so ``"science fiction"`` and ``"Sci-Fi"`` collapse to
    the same value and normalising twice is a no-op.
    """

    if not genre:
        return ""
    text = " ".join(genre.split())
    if not text:
        return ""
    mapped = GENRE_SYNONYMS.get(text.lower())
    if mapped:
        return mapped
    titled = " ".join(word[:1].upper() + word[1:].lower() for word in text.split(" "))
    return titled.replace("Sci Fi", "Sci-Fi").replace("Sci-fi", "Sci-Fi")


def split_genres(value: str | Iterable[str] | None) -> list[str]:
    """Split a comma separated genre field into unique canonical names."""

    if not value:
        return []
    if isinstance(value, str):
        parts: Iterable[str] = value.split(",")
    else:
        parts = value
    genres: list[str] = []
    for part in parts:
        if not isinstance(part, str):
            continue
        normalized = normalize_genre(part)
        if normalized and normalized not in genres:
            genres.append(normalized)
    return genres


def normalize_genre_set(genres: Iterable[str]) -> set[str]:
    return {normalized for normalized in (normalize_genre(g) for g in genres) if normalized}


def automated_query_terms(
    selected_genres: Sequence[str], language: str = "all"
) -> list[str]:
    """Return the deduplicated keyword list for the primary retrieval pass."""

    terms: list[str] = []
    if selected_genres:
        for genre in selected_genres:
            normalized = normalize_genre(genre)
            terms.extend(AUTOMATED_QUERY_TERMS.get(normalized, (normalized.lower(),)))
    else:
        terms.extend(DEFAULT_AUTOMATED_TERMS)
    terms.extend(LANGUAGE_QUERY_TERMS.get(language, ()))
    return list(dict.fromkeys(term for term in terms if term))[:MAX_AUTOMATED_TERMS]


def genre_search_terms(genre: str) -> list[str]:
    normalized = normalize_genre(genre)
    return list(GENRE_SEARCH_TERMS.get(normalized, (normalized.lower(),)))


def english_genre_terms(genre: str) -> list[str]:
    normalized = normalize_genre(genre)
    return list(ENGLISH_GENRE_TERMS.get(normalized, (normalized.lower(),)))


def guess_genre_from_title(title: str) -> str:
    """Guess a comma separated genre string from title keywords."""

    lowered = (title or "").lower()
    for keywords, genre in TITLE_GENRE_RULES:
        if any(keyword in lowered for keyword in keywords):
            return genre
    return DEFAULT_TITLE_GENRE
