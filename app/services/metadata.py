"""Facade over every upstream metadata service."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Coroutine, TypeVar

import httpx
from pydantic import ValidationError

from ..config import Settings
from ..models import CandidateItem, ContentTypeFilter
from .deadline import Deadline
from .identifiers import IdentifierCache
from .keyword_search import KeywordSearchClient
from .omdb import OMDbClient
from .sample_movies import SampleMoviesClient
from .tmdb import TMDBClient
from .tvmaze import TVMazeClient

logger = logging.getLogger(__name__)

T = TypeVar("T")

UPSTREAM_ERRORS = (httpx.HTTPError, ValueError, ValidationError)


class MetadataClient:
    """Normalise every upstream into :class:`CandidateItem` records.

    A failing service contributes nothing and leaves a log line; nothing
    raised by an upstream escapes this class.
    """

    def __init__(
        self,
        settings: Settings,
        http_client: httpx.AsyncClient,
        *,
        id_cache: IdentifierCache | None = None,
    ):
        self._settings = settings
        self._id_cache = id_cache if id_cache is not None else IdentifierCache()
        self.omdb = OMDbClient(settings, http_client)
        self.tmdb = TMDBClient(settings, http_client, self._id_cache)
        self.tvmaze = TVMazeClient(settings, http_client, self._id_cache)
        self.keyword = KeywordSearchClient(settings, http_client)
        self.samples = SampleMoviesClient(settings, http_client)

    @property
    def id_cache(self) -> IdentifierCache:
        return self._id_cache

    async def _guard(self, service: str, call: Awaitable[T], default: T) -> T:
        try:
            return await call
        except UPSTREAM_ERRORS as exc:
            logger.warning("%s request failed: %s", service, exc)
            return default

    def search_calls(
        self,
        term: str,
        kind: ContentTypeFilter = "all",
        *,
        deadline: Deadline | None = None,
    ) -> dict[str, Coroutine[Any, Any, list[CandidateItem]]]:
        """Return one guarded coroutine per configured search service."""

        term = (term or "").strip()
        calls: dict[str, Coroutine[Any, Any, list[CandidateItem]]] = {}
        services = self._settings.search_services
        if "omdb" in services:
            calls["omdb"] = self._guard(
                "OMDb",
                self.omdb.search(term, content_type=kind, deadline=deadline),
                [],
            )
        if "tmdb" in services:
            calls["tmdb"] = self._guard(
                "TMDB",
                self.tmdb.search(term, content_type=kind, deadline=deadline),
                [],
            )
        if (
            "tvmaze" in services
            and kind != "movies"
            and len(term) >= self._settings.tvmaze_min_query_length
        ):
            calls["tvmaze"] = self._guard(
                "TVMaze", self.tvmaze.search(term, deadline=deadline), []
            )
        return calls

    async def fetch_by_query(
        self,
        term: str,
        kind: ContentTypeFilter = "all",
        *,
        deadline: Deadline | None = None,
    ) -> list[CandidateItem]:
        """Query every configured service and concatenate their results."""

        calls = self.search_calls(term, kind, deadline=deadline)
        if not calls:
            return []
        batches = await asyncio.gather(*calls.values())
        return [item for batch in batches for item in batch]

    async def fetch_by_id(
        self, external_id: str, *, deadline: Deadline | None = None
    ) -> CandidateItem | None:
        """Return full metadata for a canonical id.

        OMDb is tried first with key rotation; the keyword API detail
        lookup answers when every OMDb key fails.
        """

        item = await self._guard(
            "OMDb", self.omdb.fetch_by_id(external_id, deadline=deadline), None
        )
        if item is not None:
            return item
        return await self._guard(
            "Keyword API",
            self.keyword.fetch_details(external_id, deadline=deadline),
            None,
        )

    async def search_by_term(
        self,
        term: str,
        *,
        kind: ContentTypeFilter = "all",
        year: int | None = None,
        deadline: Deadline | None = None,
    ) -> list[CandidateItem]:
        """OMDb keyword search narrowed by content type and release year."""

        return await self._guard(
            "OMDb",
            self.omdb.search(term, content_type=kind, year=year, deadline=deadline),
            [],
        )

    async def keyword_search(
        self,
        term: str,
        *,
        limit: int | None = None,
        deadline: Deadline | None = None,
    ) -> list[CandidateItem]:
        return await self._guard(
            "Keyword API",
            self.keyword.search(term, limit=limit, deadline=deadline),
            [],
        )

    async def sample_category(
        self, category: str, *, deadline: Deadline | None = None
    ) -> list[CandidateItem]:
        return await self._guard(
            "Sample movies",
            self.samples.fetch_category(category, deadline=deadline),
            [],
        )


__all__ = ["MetadataClient", "UPSTREAM_ERRORS"]
