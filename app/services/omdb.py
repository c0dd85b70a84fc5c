"""Client for the OMDb title search and title lookup endpoints."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ..config import Settings
from ..models import (
    CandidateItem,
    ContentTypeFilter,
    OmdbSearchHit,
    OmdbTitleDetail,
    parse_records,
)
from .credentials import CredentialRing
from .deadline import Deadline, timeout_kwargs

logger = logging.getLogger(__name__)

OMDB_PAGE_SIZE = 10


def omdb_type(content_type: ContentTypeFilter) -> str | None:
    if content_type == "movies":
        return "movie"
    if content_type == "series":
        return "series"
    return None


class OMDbClient:
    """Thin wrapper around OMDb with ordered API key rotation."""

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient):
        self._client = http_client
        self._base_url = str(settings.omdb_api_url).rstrip("/") + "/"
        self._credentials: CredentialRing[Any] = CredentialRing(
            "OMDb", settings.omdb_api_keys
        )

    async def search(
        self,
        term: str,
        *,
        content_type: ContentTypeFilter = "all",
        year: int | None = None,
        pages: int = 1,
        deadline: Deadline | None = None,
    ) -> list[CandidateItem]:
        """Search titles by keyword, optionally narrowed by type and year."""

        term = (term or "").strip()
        if not term or not self._credentials:
            return []
        if deadline is not None and deadline.expired:
            return []

        async def _search_with_key(key: str) -> list[OmdbSearchHit]:
            collected: list[OmdbSearchHit] = []
            for page in range(1, max(1, pages) + 1):
                params: dict[str, Any] = {"s": term, "apikey": key, "page": page}
                kind = omdb_type(content_type)
                if kind:
                    params["type"] = kind
                if year:
                    params["y"] = year
                response = await self._client.get(
                    self._base_url, params=params, **timeout_kwargs(deadline)
                )
                if response.status_code >= 400:
                    logger.debug(
                        "OMDb search for %s returned %s", term, response.status_code
                    )
                    break
                payload = response.json()
                if not isinstance(payload, dict) or payload.get("Response") != "True":
                    break
                hits = parse_records(OmdbSearchHit, payload.get("Search"))
                collected.extend(hits)
                if len(hits) < OMDB_PAGE_SIZE:
                    break
            return collected

        hits = await self._credentials.first_success(_search_with_key) or []
        candidates: list[CandidateItem] = []
        for hit in hits:
            candidate = hit.to_candidate()
            if candidate is not None:
                candidates.append(candidate)
        return candidates

    async def fetch_by_id(
        self, imdb_id: str, *, deadline: Deadline | None = None
    ) -> CandidateItem | None:
        """Return full metadata (genre, rating, language) for a canonical id."""

        imdb_id = (imdb_id or "").strip()
        if not imdb_id.startswith("tt") or not self._credentials:
            return None
        if deadline is not None and deadline.expired:
            return None

        async def _lookup_with_key(key: str) -> CandidateItem | None:
            response = await self._client.get(
                self._base_url,
                params={"i": imdb_id, "apikey": key},
                **timeout_kwargs(deadline),
            )
            if response.status_code >= 400:
                logger.debug(
                    "OMDb lookup for %s returned %s", imdb_id, response.status_code
                )
                return None
            payload = response.json()
            if not isinstance(payload, dict):
                return None
            detail = OmdbTitleDetail.model_validate(payload)
            return detail.to_candidate(imdb_id)

        return await self._credentials.first_success(_lookup_with_key)
