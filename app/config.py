"""Application configuration models."""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated, Iterable, Literal

from pydantic import AliasChoices, Field, HttpUrl, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


SEARCH_SERVICES: tuple[str, ...] = ("omdb", "tmdb", "tvmaze")


def _split_csv(value: object, *, setting: str) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        raw_values = [part.strip() for part in value.split(",")]
    elif isinstance(value, Iterable):
        raw_values = [str(part).strip() for part in value]
    else:
        raise TypeError(f"{setting} must be a string or iterable of strings")
    cleaned: list[str] = []
    for entry in raw_values:
        if entry and entry not in cleaned:
            cleaned.append(entry)
    return cleaned


class Settings(BaseSettings):
    """Settings loaded from environment variables or a .env file."""

    app_name: str = Field(default="ReelScout", alias="APP_NAME")
    server_host: str = Field(default="0.0.0.0", alias="HOST")
    server_port: int = Field(default=3000, alias="PORT")

    omdb_api_url: HttpUrl = Field(
        default="https://www.omdbapi.com", alias="OMDB_API_URL"
    )
    omdb_api_keys: Annotated[tuple[str, ...], NoDecode] = Field(
        default=("thewdb", "trilogy", "564727fa"),
        alias="OMDB_API_KEYS",
        validation_alias=AliasChoices("OMDB_API_KEYS", "OMDB_API_KEY"),
    )
    tmdb_api_url: HttpUrl = Field(
        default="https://api.themoviedb.org/3", alias="TMDB_API_URL"
    )
    tmdb_api_keys: Annotated[tuple[str, ...], NoDecode] = Field(
        default=(),
        alias="TMDB_API_KEYS",
        validation_alias=AliasChoices("TMDB_API_KEYS", "TMDB_API_KEY"),
    )
    tmdb_image_base_url: str = Field(
        default="https://image.tmdb.org/t/p/w300", alias="TMDB_IMAGE_BASE_URL"
    )
    tvmaze_api_url: HttpUrl = Field(
        default="https://api.tvmaze.com", alias="TVMAZE_API_URL"
    )
    keyword_search_url: HttpUrl = Field(
        default="https://imdb.iamidiotareyoutoo.com/search",
        alias="KEYWORD_SEARCH_URL",
    )
    sample_movies_url: HttpUrl = Field(
        default="https://api.sampleapis.com/movies", alias="SAMPLE_MOVIES_URL"
    )

    search_services: Annotated[tuple[str, ...], NoDecode] = Field(
        default=SEARCH_SERVICES, alias="SEARCH_SERVICES"
    )
    search_min_query_length: int = Field(
        default=2, alias="SEARCH_MIN_QUERY_LENGTH", ge=1, le=10
    )
    search_timeout_seconds: float = Field(
        default=3.0, alias="SEARCH_TIMEOUT", gt=0, le=30
    )
    search_result_limit: int = Field(
        default=8, alias="SEARCH_RESULT_LIMIT", ge=1, le=50
    )
    search_fast_scoring: bool = Field(default=True, alias="SEARCH_FAST_SCORING")
    tvmaze_min_query_length: int = Field(
        default=4, alias="TVMAZE_MIN_QUERY_LENGTH", ge=1
    )

    recommendation_default_limit: int = Field(
        default=12, alias="RECOMMENDATION_LIMIT", ge=1, le=100
    )
    recommendation_enrichment_limit: int = Field(
        default=30, alias="RECOMMENDATION_ENRICHMENT_LIMIT", ge=0, le=200
    )
    recommendation_year_window: int = Field(
        default=7, alias="RECOMMENDATION_YEAR_WINDOW", ge=1, le=30
    )
    latest_content_ratio: float = Field(
        default=0.35, alias="LATEST_CONTENT_RATIO", ge=0.0, le=1.0
    )
    latest_content_years: int = Field(
        default=2, alias="LATEST_CONTENT_YEARS", ge=0, le=20
    )
    strict_genre_fail_open: bool = Field(
        default=True, alias="STRICT_GENRE_FAIL_OPEN"
    )
    source_request_spacing_seconds: float = Field(
        default=0.2, alias="SOURCE_REQUEST_SPACING", ge=0.0, le=5.0
    )

    watch_history_limit: int = Field(
        default=50, alias="WATCH_HISTORY_LIMIT", ge=1, le=1_000
    )
    database_url: str = Field(
        default="sqlite+aiosqlite:///./reelscout.db", alias="DATABASE_URL"
    )

    environment: Literal["development", "production"] = Field(
        default="development", alias="ENVIRONMENT"
    )

    @field_validator("omdb_api_keys", "tmdb_api_keys", mode="before")
    @classmethod
    def _parse_api_keys(cls, value: object) -> tuple[str, ...]:
        """Accept a single key or a comma-separated rotation list."""

        return tuple(_split_csv(value, setting="API keys"))

    @field_validator("search_services", mode="before")
    @classmethod
    def _parse_search_services(cls, value: object) -> tuple[str, ...]:
        """Normalise the configured search fan-out services."""

        cleaned = [entry.lower() for entry in _split_csv(value, setting="SEARCH_SERVICES")]
        if not cleaned:
            return SEARCH_SERVICES
        unknown = [entry for entry in cleaned if entry not in SEARCH_SERVICES]
        if unknown:
            raise ValueError("Unknown search services configured")
        return tuple(dict.fromkeys(cleaned))

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""

    return Settings()  # type: ignore[call-arg]


settings = get_settings()
