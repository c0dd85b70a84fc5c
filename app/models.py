"""Pydantic models describing candidates, upstream payloads and user state."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

from .genres import guess_genre_from_title, split_genres
from .utils import (
    clean_text,
    ensure_url,
    extract_year_from_title,
    parse_rating,
    year_from_date,
)

ContentType = Literal["movie", "series", "unknown"]
ContentTypeFilter = Literal["all", "movies", "series"]
Language = Literal["all", "english", "hindi"]

PLACEHOLDER_SEPARATOR = ":"
UNKNOWN_TITLE = "Unknown Title"
SERIES_TITLE_KEYWORDS = ("series", "season", "episode", "tv", "show")


def placeholder_id(service: str, secondary_id: object) -> str:
    """Return the synthesized identifier used when resolution fails."""

    return f"{service}{PLACEHOLDER_SEPARATOR}{secondary_id}"


def is_placeholder_id(value: str | None) -> bool:
    return bool(value) and PLACEHOLDER_SEPARATOR in str(value)


def coerce_content_type(value: Any) -> ContentType:
    text = str(value or "").strip().lower()
    if text in {"movie", "movies", "film"}:
        return "movie"
    if text in {"series", "tv", "show", "shows"}:
        return "series"
    return "unknown"


def guess_content_type(title: str, year: str | None) -> ContentType:
    """Guess whether a bare title refers to a series."""

    lowered = (title or "").lower()
    if any(keyword in lowered for keyword in SERIES_TITLE_KEYWORDS):
        return "series"
    if year and "–" in year:
        return "series"
    return "movie"


class CandidateItem(BaseModel):
    """Normalized movie or series record shared by every source."""

    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(min_length=1)
    year: str | None = None
    external_id: str = Field(default="", alias="externalId")
    content_type: ContentType = Field(default="unknown", alias="contentType")
    poster_url: str | None = Field(default=None, alias="posterUrl")
    genres: list[str] = Field(default_factory=list)
    rating: float | None = Field(default=None, ge=0.0, le=10.0)
    relevance: float | None = None
    ai_score: float | None = Field(default=None, alias="aiScore")
    language: str | None = None
    country: str | None = None
    actors: str | None = None
    plot: str | None = None
    director: str | None = None
    runtime: str | None = None
    source: str | None = None

    @property
    def has_canonical_id(self) -> bool:
        return bool(self.external_id) and not is_placeholder_id(self.external_id)

    def dedupe_key(self) -> str:
        """Return the identity used to collapse duplicates across sources."""

        if self.has_canonical_id:
            return self.external_id
        return f"{self.title.lower()}-{self.year}"

    def score_value(self) -> float | None:
        if self.ai_score is not None:
            return self.ai_score
        return self.relevance

    def matches_content_type(self, content_type: ContentTypeFilter) -> bool:
        if content_type == "movies":
            return self.content_type == "movie"
        if content_type == "series":
            return self.content_type == "series"
        return True

    def merge_enrichment(self, enrichment: "CandidateItem") -> "CandidateItem":
        """Overlay non-null enrichment fields onto this record."""

        update: dict[str, Any] = {}
        for name in (
            "title",
            "year",
            "poster_url",
            "rating",
            "language",
            "country",
            "actors",
            "plot",
            "director",
            "runtime",
        ):
            value = getattr(enrichment, name)
            if value is not None and value != "":
                update[name] = value
        if enrichment.genres:
            update["genres"] = list(enrichment.genres)
        if enrichment.content_type != "unknown":
            update["content_type"] = enrichment.content_type
        if enrichment.has_canonical_id:
            update["external_id"] = enrichment.external_id
        if not update:
            return self
        return self.model_copy(update=update)

    def to_payload(self) -> dict[str, Any]:
        """Return the camelCase JSON payload handed to the UI."""

        return self.model_dump(mode="json", by_alias=True)


class UserPreferenceProfile(BaseModel):
    """Genre affinity derived from a user's watch history."""

    genre_affinity: dict[str, float] = Field(default_factory=dict)
    watched_genre_counts: dict[str, int] = Field(default_factory=dict)
    total_watched: int = 0


class WatchHistoryEntry(BaseModel):
    """A single watched title as recorded by the player front-end."""

    model_config = ConfigDict(populate_by_name=True)

    external_id: str = Field(
        validation_alias=AliasChoices("external_id", "externalId", "imdbId"),
        serialization_alias="externalId",
    )
    content_type: str = Field(
        default="movie",
        validation_alias=AliasChoices("content_type", "contentType", "type"),
        serialization_alias="contentType",
    )
    title: str | None = None
    poster_url: str | None = Field(
        default=None,
        validation_alias=AliasChoices("poster_url", "posterUrl", "poster"),
        serialization_alias="posterUrl",
    )
    year: str | None = None
    genre: str | None = None
    watched_at: datetime = Field(
        default_factory=datetime.utcnow,
        validation_alias=AliasChoices("watched_at", "watchedAt"),
        serialization_alias="watchedAt",
    )


# -- Upstream payload variants ------------------------------------------------


class OmdbSearchHit(BaseModel):
    """Entry of an OMDb ``?s=`` search response."""

    model_config = ConfigDict(extra="ignore")

    Title: str | None = None
    Year: str | None = None
    imdbID: str | None = None
    Type: str | None = None
    Poster: str | None = None

    def to_candidate(self) -> CandidateItem | None:
        title = clean_text(self.Title)
        if not title:
            return None
        return CandidateItem(
            title=title,
            year=clean_text(self.Year),
            external_id=clean_text(self.imdbID) or "",
            content_type=coerce_content_type(self.Type),
            poster_url=ensure_url(clean_text(self.Poster)),
            source="omdb",
        )


class OmdbTitleDetail(BaseModel):
    """OMDb ``?i=`` title lookup payload."""

    model_config = ConfigDict(extra="ignore")

    Response: str | None = None
    Title: str | None = None
    Year: str | None = None
    imdbID: str | None = None
    Type: str | None = None
    Poster: str | None = None
    Genre: str | None = None
    Language: str | None = None
    Country: str | None = None
    imdbRating: str | None = None
    Plot: str | None = None
    Director: str | None = None
    Actors: str | None = None
    Runtime: str | None = None

    def to_candidate(self, fallback_id: str) -> CandidateItem | None:
        if self.Response != "True":
            return None
        title = clean_text(self.Title)
        if not title:
            return None
        return CandidateItem(
            title=title,
            year=clean_text(self.Year),
            external_id=clean_text(self.imdbID) or fallback_id,
            content_type=coerce_content_type(self.Type),
            poster_url=ensure_url(clean_text(self.Poster)),
            genres=split_genres(clean_text(self.Genre)),
            rating=parse_rating(self.imdbRating),
            language=clean_text(self.Language),
            country=clean_text(self.Country),
            actors=clean_text(self.Actors),
            plot=clean_text(self.Plot),
            director=clean_text(self.Director),
            runtime=clean_text(self.Runtime),
            source="omdb",
        )


class TmdbSearchResult(BaseModel):
    """Entry of a TMDB ``/search/movie`` or ``/search/tv`` response."""

    model_config = ConfigDict(extra="ignore")

    id: int
    title: str | None = None
    name: str | None = None
    release_date: str | None = None
    first_air_date: str | None = None
    poster_path: str | None = None
    vote_average: float | None = None

    def to_candidate(
        self,
        *,
        content_type: ContentType,
        external_id: str,
        image_base_url: str,
    ) -> CandidateItem | None:
        title = clean_text(self.title or self.name)
        if not title:
            return None
        date_value = self.release_date if content_type == "movie" else self.first_air_date
        poster = None
        if self.poster_path:
            poster = (
                self.poster_path
                if self.poster_path.startswith("http")
                else f"{image_base_url}{self.poster_path}"
            )
        rating = self.vote_average if self.vote_average and 0 < self.vote_average <= 10 else None
        return CandidateItem(
            title=title,
            year=year_from_date(date_value),
            external_id=external_id,
            content_type=content_type,
            poster_url=poster,
            rating=rating,
            source="tmdb",
        )


class TvMazeImage(BaseModel):
    medium: str | None = None
    original: str | None = None


class TvMazeExternals(BaseModel):
    imdb: str | None = None
    thetvdb: int | None = None
    tvrage: int | None = None


class TvMazeRating(BaseModel):
    average: float | None = None


class TvMazeShow(BaseModel):
    """A TVMaze show record (``/search/shows`` entry or ``/shows/{id}``)."""

    model_config = ConfigDict(extra="ignore")

    id: int
    name: str | None = None
    premiered: str | None = None
    genres: list[str] = Field(default_factory=list)
    language: str | None = None
    image: TvMazeImage | None = None
    externals: TvMazeExternals | None = None
    rating: TvMazeRating | None = None

    @property
    def imdb_id(self) -> str | None:
        if self.externals and self.externals.imdb:
            return self.externals.imdb
        return None

    def to_candidate(self, *, external_id: str) -> CandidateItem | None:
        title = clean_text(self.name)
        if not title:
            return None
        return CandidateItem(
            title=title,
            year=year_from_date(self.premiered),
            external_id=external_id,
            content_type="series",
            poster_url=ensure_url(self.image.medium) if self.image else None,
            genres=split_genres(self.genres),
            rating=parse_rating(self.rating.average) if self.rating else None,
            language=clean_text(self.language),
            source="tvmaze",
        )


class KeywordSearchHit(BaseModel):
    """Entry of the keyword search API ``description`` array."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    title: str | None = Field(default=None, alias="#TITLE")
    year: str | int | None = Field(default=None, alias="#YEAR")
    imdb_id: str | None = Field(default=None, alias="#IMDB_ID")
    poster: str | None = Field(default=None, alias="#IMG_POSTER")
    actors: str | None = Field(default=None, alias="#ACTORS")

    def to_candidate(self) -> CandidateItem | None:
        title = clean_text(self.title)
        if not title:
            return None
        year = clean_text(self.year)
        return CandidateItem(
            title=title,
            year=year,
            external_id=clean_text(self.imdb_id) or "",
            content_type=guess_content_type(title, year),
            poster_url=ensure_url(clean_text(self.poster)),
            genres=split_genres(guess_genre_from_title(title)),
            actors=clean_text(self.actors),
            source="keyword",
        )


class KeywordTitleDetail(BaseModel):
    """The ``short`` block of a keyword API ``?tt=`` lookup."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    name: str | None = None
    date_published: str | None = Field(default=None, alias="datePublished")
    image: str | None = None
    genre: str | list[str] | None = None
    description: str | None = None
    aggregate_rating: dict[str, Any] | None = Field(
        default=None, alias="aggregateRating"
    )
    director: Any = None
    actor: Any = None
    duration: str | None = None

    @staticmethod
    def _names(value: Any) -> str | None:
        if isinstance(value, dict):
            return clean_text(value.get("name"))
        if isinstance(value, list):
            names = [clean_text(entry.get("name")) for entry in value if isinstance(entry, dict)]
            joined = ", ".join(name for name in names if name)
            return joined or None
        return None

    def to_candidate(self, imdb_id: str) -> CandidateItem | None:
        title = clean_text(self.name)
        if not title:
            return None
        year = year_from_date(self.date_published)
        rating = None
        if self.aggregate_rating:
            rating = parse_rating(self.aggregate_rating.get("ratingValue"))
        return CandidateItem(
            title=title,
            year=year,
            external_id=imdb_id,
            content_type=guess_content_type(title, year),
            poster_url=ensure_url(self.image),
            genres=split_genres(self.genre),
            rating=rating,
            plot=clean_text(self.description),
            director=self._names(self.director),
            actors=self._names(self.actor),
            runtime=clean_text(self.duration),
            source="keyword",
        )


class SampleMovie(BaseModel):
    """Record of the curated-category sample movies API."""

    model_config = ConfigDict(extra="ignore")

    title: str | None = None
    imdbId: str | None = None
    posterURL: str | None = None

    def to_candidate(self) -> CandidateItem | None:
        title = clean_text(self.title)
        if not title:
            return None
        return CandidateItem(
            title=title,
            year=extract_year_from_title(title),
            external_id=clean_text(self.imdbId) or "",
            content_type="movie",
            poster_url=ensure_url(self.posterURL),
            genres=split_genres(guess_genre_from_title(title)),
            source="sample",
        )


def parse_records(model: type[BaseModel], payload: Any) -> list[Any]:
    """Validate a list of upstream records, dropping malformed entries."""

    if not isinstance(payload, list):
        return []
    records: list[Any] = []
    for entry in payload:
        if not isinstance(entry, dict):
            continue
        try:
            records.append(model.model_validate(entry))
        except ValidationError:
            continue
    return records
