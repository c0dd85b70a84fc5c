"""Client for the keyword indexed IMDb-style search API."""

from __future__ import annotations

import logging

import httpx
from pydantic import ValidationError

from ..config import Settings
from ..models import CandidateItem, KeywordSearchHit, KeywordTitleDetail, parse_records
from .deadline import Deadline, timeout_kwargs

logger = logging.getLogger(__name__)


class KeywordSearchClient:
    """Query the keyword API (``?q=`` search and ``?tt=`` detail lookups)."""

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient):
        self._client = http_client
        self._base_url = str(settings.keyword_search_url)

    async def search(
        self,
        term: str,
        *,
        limit: int | None = None,
        deadline: Deadline | None = None,
    ) -> list[CandidateItem]:
        """Return normalised hits for ``term``; failures yield an empty list."""

        term = (term or "").strip()
        if not term:
            return []
        if deadline is not None and deadline.expired:
            return []

        try:
            response = await self._client.get(
                self._base_url, params={"q": term}, **timeout_kwargs(deadline)
            )
            if response.status_code >= 400:
                logger.warning(
                    "Keyword search for %s failed: %s", term, response.status_code
                )
                return []
            payload = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Keyword search for %s failed: %s", term, exc)
            return []

        if not isinstance(payload, dict) or not payload.get("ok"):
            return []
        hits = parse_records(KeywordSearchHit, payload.get("description"))
        if limit is not None:
            hits = hits[: max(0, limit)]
        candidates: list[CandidateItem] = []
        for hit in hits:
            candidate = hit.to_candidate()
            if candidate is not None:
                candidates.append(candidate)
        return candidates

    async def fetch_details(
        self, imdb_id: str, *, deadline: Deadline | None = None
    ) -> CandidateItem | None:
        """Return the detail record for ``imdb_id`` or ``None``."""

        imdb_id = (imdb_id or "").strip()
        if not imdb_id.startswith("tt"):
            return None
        try:
            response = await self._client.get(
                self._base_url, params={"tt": imdb_id}, **timeout_kwargs(deadline)
            )
            if response.status_code >= 400:
                return None
            payload = response.json()
            if not isinstance(payload, dict) or not payload.get("ok"):
                return None
            short = payload.get("short")
            if not isinstance(short, dict):
                return None
            detail = KeywordTitleDetail.model_validate(short)
        except (httpx.HTTPError, ValueError, ValidationError) as exc:
            logger.warning("Keyword detail lookup for %s failed: %s", imdb_id, exc)
            return None
        return detail.to_candidate(imdb_id)


__all__ = ["KeywordSearchClient"]
