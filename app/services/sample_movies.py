"""Client for the curated-category sample movies API."""

from __future__ import annotations

import logging

import httpx

from ..config import Settings
from ..models import CandidateItem, SampleMovie, parse_records
from .deadline import Deadline, timeout_kwargs

logger = logging.getLogger(__name__)

SAMPLE_CATEGORIES: tuple[str, ...] = ("animation", "comedy", "drama", "horror", "family")


def sample_categories_for(selected_genres: list[str] | tuple[str, ...]) -> list[str]:
    """Map selected genres onto the categories the API serves."""

    categories: list[str] = []
    for genre in selected_genres:
        lowered = genre.lower()
        for category in SAMPLE_CATEGORIES:
            if category in lowered and category not in categories:
                categories.append(category)
    if not categories:
        categories = list(SAMPLE_CATEGORIES[:2])
    return categories


class SampleMoviesClient:
    def __init__(self, settings: Settings, http_client: httpx.AsyncClient):
        self._client = http_client
        self._base_url = str(settings.sample_movies_url).rstrip("/")

    async def fetch_category(
        self, category: str, *, deadline: Deadline | None = None
    ) -> list[CandidateItem]:
        """Return every movie listed under ``category``."""

        if deadline is not None and deadline.expired:
            return []
        try:
            response = await self._client.get(
                f"{self._base_url}/{category}", **timeout_kwargs(deadline)
            )
            if response.status_code >= 400:
                logger.warning(
                    "Sample movies category %s failed: %s",
                    category,
                    response.status_code,
                )
                return []
            payload = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Sample movies category %s failed: %s", category, exc)
            return []

        candidates: list[CandidateItem] = []
        for movie in parse_records(SampleMovie, payload):
            candidate = movie.to_candidate()
            if candidate is not None:
                candidates.append(candidate)
        return candidates


__all__ = ["SAMPLE_CATEGORIES", "SampleMoviesClient", "sample_categories_for"]
