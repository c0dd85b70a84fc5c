"""Utilities for searching The Movie Database (TMDB)."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx

from ..config import Settings
from ..models import (
    CandidateItem,
    ContentType,
    ContentTypeFilter,
    TmdbSearchResult,
    parse_records,
)
from .credentials import CredentialRing
from .deadline import Deadline, timeout_kwargs
from .identifiers import UNRESOLVED, IdentifierCache

logger = logging.getLogger(__name__)

SERVICE_NAME = "tmdb"


class TMDBClient:
    """Client responsible for searching TMDB and resolving IMDb identifiers."""

    def __init__(
        self,
        settings: Settings,
        http_client: httpx.AsyncClient,
        id_cache: IdentifierCache | None = None,
    ):
        self._settings = settings
        self._client = http_client
        self._base_url = str(settings.tmdb_api_url).rstrip("/")
        self._credentials: CredentialRing[Any] = CredentialRing(
            "TMDB", settings.tmdb_api_keys
        )
        self._id_cache = id_cache if id_cache is not None else IdentifierCache()

    @property
    def id_cache(self) -> IdentifierCache:
        return self._id_cache

    async def search(
        self,
        query: str,
        *,
        content_type: ContentTypeFilter = "all",
        per_kind_limit: int = 5,
        deadline: Deadline | None = None,
    ) -> list[CandidateItem]:
        """Search movies and TV in parallel and resolve their IMDb ids."""

        query = (query or "").strip()
        if not query:
            return []
        if not self._credentials:
            logger.info("TMDB API key missing, skipping TMDB search for %s", query)
            return []

        kinds: list[ContentType] = []
        if content_type in ("all", "movies"):
            kinds.append("movie")
        if content_type in ("all", "series"):
            kinds.append("series")

        batches = await asyncio.gather(
            *(
                self._search_kind(query, kind, per_kind_limit, deadline)
                for kind in kinds
            )
        )
        return [candidate for batch in batches for candidate in batch]

    async def _search_kind(
        self,
        query: str,
        content_type: ContentType,
        limit: int,
        deadline: Deadline | None,
    ) -> list[CandidateItem]:
        endpoint = "/search/movie" if content_type == "movie" else "/search/tv"

        async def _search_with_key(key: str) -> tuple[str, list[TmdbSearchResult]] | None:
            response = await self._client.get(
                f"{self._base_url}{endpoint}",
                params={
                    "api_key": key,
                    "query": query,
                    "include_adult": "false",
                    "page": 1,
                },
                **timeout_kwargs(deadline),
            )
            if response.status_code >= 400:
                logger.warning(
                    "TMDB search for %s (%s) failed: %s",
                    query,
                    content_type,
                    response.status_code,
                )
                return None
            payload = response.json()
            if not isinstance(payload, dict):
                return None
            return key, parse_records(TmdbSearchResult, payload.get("results"))

        found = await self._credentials.first_success(
            _search_with_key, accept_empty=True
        )
        if not found:
            return []
        key, results = found

        async def _normalise(result: TmdbSearchResult) -> CandidateItem | None:
            external_id = await self.resolve_imdb_id(
                result.id, content_type, key=key, deadline=deadline
            )
            return result.to_candidate(
                content_type=content_type,
                external_id=external_id,
                image_base_url=self._settings.tmdb_image_base_url,
            )

        candidates = await asyncio.gather(
            *(_normalise(result) for result in results[: max(0, limit)])
        )
        return [candidate for candidate in candidates if candidate is not None]

    async def resolve_imdb_id(
        self,
        tmdb_id: int,
        content_type: ContentType,
        *,
        key: str,
        deadline: Deadline | None = None,
    ) -> str:
        """Return the IMDb id for a TMDB entity or a ``tmdb:<id>`` placeholder."""

        kind = "movie" if content_type == "movie" else "tv"

        async def _lookup() -> object:
            if deadline is not None and deadline.expired:
                return UNRESOLVED
            try:
                response = await self._client.get(
                    f"{self._base_url}/{kind}/{tmdb_id}/external_ids",
                    params={"api_key": key},
                    **timeout_kwargs(deadline),
                )
            except httpx.HTTPError as exc:
                logger.debug("TMDB external id fetch failed for %s: %s", tmdb_id, exc)
                return UNRESOLVED
            if response.status_code == 404:
                return None
            if response.status_code >= 400:
                logger.debug(
                    "TMDB external id fetch failed for %s: %s",
                    tmdb_id,
                    response.status_code,
                )
                return UNRESOLVED
            try:
                payload = response.json()
            except ValueError:
                return UNRESOLVED
            if not isinstance(payload, dict):
                return UNRESOLVED
            imdb_id = payload.get("imdb_id")
            if imdb_id:
                logger.debug("Resolved TMDB %s %s to %s", kind, tmdb_id, imdb_id)
            return imdb_id or None

        return await self._id_cache.resolve(SERVICE_NAME, tmdb_id, kind, _lookup)


__all__ = ["TMDBClient"]
