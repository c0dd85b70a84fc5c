"""Client for the TVMaze show directory."""

from __future__ import annotations

import asyncio
import logging

import httpx

from ..config import Settings
from ..models import CandidateItem, TvMazeShow
from .deadline import Deadline, timeout_kwargs
from .identifiers import UNRESOLVED, IdentifierCache

logger = logging.getLogger(__name__)

SERVICE_NAME = "tvmaze"


class TVMazeClient:
    """Search TVMaze shows and resolve their IMDb identifiers."""

    def __init__(
        self,
        settings: Settings,
        http_client: httpx.AsyncClient,
        id_cache: IdentifierCache | None = None,
    ):
        self._client = http_client
        self._base_url = str(settings.tvmaze_api_url).rstrip("/")
        self._id_cache = id_cache if id_cache is not None else IdentifierCache()

    async def search(
        self, query: str, *, limit: int = 10, deadline: Deadline | None = None
    ) -> list[CandidateItem]:
        query = (query or "").strip()
        if not query:
            return []
        if deadline is not None and deadline.expired:
            return []

        response = await self._client.get(
            f"{self._base_url}/search/shows",
            params={"q": query},
            **timeout_kwargs(deadline),
        )
        if response.status_code >= 400:
            logger.warning(
                "TVMaze search for %s failed: %s", query, response.status_code
            )
            return []
        payload = response.json()
        if not isinstance(payload, list):
            return []

        shows: list[TvMazeShow] = []
        for entry in payload:
            if not isinstance(entry, dict) or not isinstance(entry.get("show"), dict):
                continue
            try:
                shows.append(TvMazeShow.model_validate(entry["show"]))
            except ValueError:
                continue

        candidates = await asyncio.gather(
            *(self._normalise(show, deadline) for show in shows[: max(0, limit)])
        )
        return [candidate for candidate in candidates if candidate is not None]

    async def _normalise(
        self, show: TvMazeShow, deadline: Deadline | None
    ) -> CandidateItem | None:
        external_id = show.imdb_id
        if not external_id:
            external_id = await self.resolve_imdb_id(show.id, deadline=deadline)
        return show.to_candidate(external_id=external_id)

    async def resolve_imdb_id(
        self, show_id: int, *, deadline: Deadline | None = None
    ) -> str:
        """Return the IMDb id of a show or a ``tvmaze:<id>`` placeholder."""

        async def _lookup() -> object:
            if deadline is not None and deadline.expired:
                return UNRESOLVED
            try:
                response = await self._client.get(
                    f"{self._base_url}/shows/{show_id}", **timeout_kwargs(deadline)
                )
            except httpx.HTTPError as exc:
                logger.debug("TVMaze show fetch failed for %s: %s", show_id, exc)
                return UNRESOLVED
            if response.status_code == 404:
                return None
            if response.status_code >= 400:
                return UNRESOLVED
            try:
                show = TvMazeShow.model_validate(response.json())
            except ValueError:
                return UNRESOLVED
            return show.imdb_id

        return await self._id_cache.resolve(SERVICE_NAME, show_id, "tv", _lookup)


__all__ = ["TVMazeClient"]
