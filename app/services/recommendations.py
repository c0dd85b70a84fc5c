"""Heuristic multi-source recommendation pipeline."""

from __future__ import annotations

import asyncio
import logging
import math
import random
from typing import Awaitable, Callable, Iterable, Literal, Protocol, Sequence

from sqlalchemy.exc import SQLAlchemyError

from ..config import Settings
from ..discovery import (
    ENGLISH_GENRES,
    ENGLISH_POPULAR,
    ENGLISH_POPULAR_TERM_COUNT,
    ENGLISH_POPULAR_TERMS,
    GENRE_KEYWORDS,
    HINDI,
    HINDI_TERM_COUNT,
    LATEST,
    LATEST_MAX_AGE,
    LATEST_YEAR_TERMS,
    POPULAR_KEYWORDS,
    POPULAR_SEARCH_TERMS,
    POPULAR_TERM_COUNT,
    RANDOM_DISCOVERY,
    RANDOM_DISCOVERY_TERM_COUNT,
    RANDOM_DISCOVERY_TERMS,
    SAMPLE_MOVIES,
    SourcePlan,
    hindi_search_terms,
    source_plans,
)
from ..fallback import fallback_recommendations
from ..genres import (
    DEFAULT_SEED_GENRES,
    automated_query_terms,
    english_genre_terms,
    genre_search_terms,
    normalize_genre_set,
)
from ..languages import is_language_match, is_likely_hindi_content
from ..models import (
    CandidateItem,
    ContentTypeFilter,
    Language,
    UserPreferenceProfile,
    WatchHistoryEntry,
)
from ..utils import current_year, extract_numeric_year
from .dedupe import dedupe
from .metadata import MetadataClient
from .preferences import compute_affinity, top_genres
from .sample_movies import sample_categories_for

logger = logging.getLogger(__name__)

RecommendationOutcome = Literal["success", "empty-fallback"]
RecommendationState = Literal["idle", "loading", "success", "empty-fallback"]

ANONYMOUS_USER = "anonymous"
MIN_PRIMARY_POOL = 36
NO_OVERLAP_PENALTY = 30.0


class HistoryProvider(Protocol):
    async def entries(self, user_id: str) -> list[WatchHistoryEntry]: ...


# -- Scoring ------------------------------------------------------------------


def genre_overlap(item: CandidateItem, selected: set[str]) -> float:
    """Share of the selected genres that ``item`` carries."""

    if not selected:
        return 0.0
    item_genres = {genre.lower() for genre in normalize_genre_set(item.genres)}
    if not item_genres:
        return 0.0
    wanted = {genre.lower() for genre in selected}
    return len(item_genres & wanted) / len(wanted)


def recency_bonus(year: int | None, now_year: int) -> float:
    if year is None:
        return 0.0
    age = now_year - year
    if age <= 1:
        return 20.0
    if age <= 3:
        return 15.0
    if age <= 5:
        return 10.0
    if age <= 10:
        return 5.0
    if age > 25:
        return -5.0
    return 0.0


def rating_bonus(rating: float | None) -> float:
    if rating is None:
        return 0.0
    return max(0.0, min(10.0, (rating - 5.5) * 2.2))


def ai_score(
    item: CandidateItem,
    profile: UserPreferenceProfile,
    selected: set[str],
    *,
    now_year: int,
) -> float:
    """Weighted heuristic score, floored at 0 and rounded to two decimals."""

    overlap = genre_overlap(item, selected)
    total = overlap * 45.0

    preference = sum(
        min(5.0, profile.genre_affinity.get(genre, 0.0))
        for genre in normalize_genre_set(item.genres)
    )
    total += min(25.0, preference * 1.2)
    total += recency_bonus(extract_numeric_year(item.year), now_year)
    total += rating_bonus(item.rating)
    if selected and overlap == 0:
        total -= NO_OVERLAP_PENALTY
    return round(max(0.0, total), 2)


def strict_genre_filter(
    items: Sequence[CandidateItem],
    selected: set[str],
    *,
    fail_open: bool = True,
) -> list[CandidateItem]:
    """Keep items sharing a selected genre; keep everything when none do."""

    if not selected:
        return list(items)
    matches = [item for item in items if genre_overlap(item, selected) > 0]
    if matches or not fail_open:
        return matches
    logger.info("No candidate matched %s; skipping the strict genre filter", sorted(selected))
    return list(items)


def latest_blend(
    ranked: Sequence[CandidateItem],
    limit: int,
    *,
    ratio: float,
    window_years: int,
    now_year: int,
) -> list[CandidateItem]:
    """Move up to ``ceil(ratio * limit)`` recent releases to the front."""

    if not ranked or limit <= 0:
        return []
    latest_positions = [
        index
        for index, item in enumerate(ranked)
        if (year := extract_numeric_year(item.year)) and year >= now_year - window_years
    ]
    quota = min(math.ceil(limit * ratio), len(latest_positions))
    chosen = latest_positions[:quota]
    chosen_set = set(chosen)
    blended = [ranked[index] for index in chosen]
    blended.extend(item for index, item in enumerate(ranked) if index not in chosen_set)
    return blended[:limit]


# -- Engine -------------------------------------------------------------------


class RecommendationEngine:
    """Gather candidates from every source, then filter, score and blend them.

    At most one computation runs per user; a call arriving while one is in
    flight returns ``[]`` without touching the network.
    """

    def __init__(
        self,
        settings: Settings,
        metadata: MetadataClient,
        history: HistoryProvider | None = None,
        *,
        rng: random.Random | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self._settings = settings
        self._metadata = metadata
        self._history = history
        self._rng = rng or random.Random()
        self._sleep = sleep
        self._loading: set[str] = set()
        self._outcomes: dict[str, RecommendationOutcome] = {}

    @staticmethod
    def _user_key(user_id: str | None) -> str:
        return user_id or ANONYMOUS_USER

    def state(self, user_id: str | None = None) -> RecommendationState:
        key = self._user_key(user_id)
        return "loading" if key in self._loading else "idle"

    def last_outcome(self, user_id: str | None = None) -> RecommendationOutcome | None:
        return self._outcomes.get(self._user_key(user_id))

    async def recommend(
        self,
        selected_genres: Iterable[str] = (),
        content_type: ContentTypeFilter = "all",
        limit: int | None = None,
        language: Language = "all",
        *,
        user_id: str | None = None,
    ) -> list[CandidateItem]:
        key = self._user_key(user_id)
        if key in self._loading:
            logger.info("Recommendations already loading for %s", key)
            return []
        if limit is None:
            limit = self._settings.recommendation_default_limit
        if limit <= 0:
            return []

        self._loading.add(key)
        try:
            genres = [genre for genre in selected_genres if genre]
            items, outcome = await self._run_pipeline(
                genres, content_type, limit, language, key
            )
            self._outcomes[key] = outcome
            return items
        except Exception as exc:
            logger.exception("Recommendation pipeline failed for %s: %s", key, exc)
            return []
        finally:
            self._loading.discard(key)

    async def _run_pipeline(
        self,
        selected_genres: list[str],
        content_type: ContentTypeFilter,
        limit: int,
        language: Language,
        user_key: str,
    ) -> tuple[list[CandidateItem], RecommendationOutcome]:
        settings = self._settings
        now_year = current_year()
        selected = normalize_genre_set(selected_genres)
        profile = compute_affinity(await self._load_history(user_key))
        enrichment_cache: dict[str, CandidateItem | None] = {}

        logger.info(
            "Generating %s recommendations for %s (genres=%s type=%s language=%s)",
            limit,
            user_key,
            sorted(selected),
            content_type,
            language,
        )

        pool = await self._primary_pass(
            selected_genres, content_type, limit, language, enrichment_cache, now_year
        )
        logger.info("Primary pass produced %s candidates", len(pool))

        for plan in source_plans(language):
            if len(pool) >= limit * 3:
                break
            try:
                items = await self._run_source(
                    plan, selected_genres, content_type, limit, language, profile, now_year
                )
            except Exception as exc:
                logger.warning("%s source failed: %s", plan.label, exc)
                continue
            logger.info("%s source returned %s items", plan.label, len(items))
            pool.extend(items)

        outcome: RecommendationOutcome = "success"
        if not pool:
            logger.warning("No recommendation source answered; using the fallback dataset")
            pool = fallback_recommendations(
                content_type, limit, selected_genres, language, rng=self._rng
            )
            outcome = "empty-fallback"

        unique = dedupe(pool)
        enriched = await self._enrich(unique, enrichment_cache)
        filtered = strict_genre_filter(
            enriched, selected, fail_open=settings.strict_genre_fail_open
        )
        scored = [
            item.model_copy(
                update={"ai_score": ai_score(item, profile, selected, now_year=now_year)}
            )
            for item in filtered
        ]
        scored.sort(key=lambda item: item.ai_score or 0.0, reverse=True)
        final = latest_blend(
            scored,
            limit,
            ratio=settings.latest_content_ratio,
            window_years=settings.latest_content_years,
            now_year=now_year,
        )
        logger.info("Returning %s recommendations for %s", len(final), user_key)
        return final, outcome

    async def _load_history(self, user_key: str) -> list[WatchHistoryEntry]:
        if self._history is None:
            return []
        try:
            return await self._history.entries(user_key)
        except SQLAlchemyError as exc:
            logger.warning("Could not read watch history for %s: %s", user_key, exc)
            return []

    async def _enrich(
        self,
        items: list[CandidateItem],
        cache: dict[str, CandidateItem | None],
    ) -> list[CandidateItem]:
        """Merge full metadata into the first N candidates; the rest pass through."""

        cap = self._settings.recommendation_enrichment_limit
        head, tail = items[:cap], items[cap:]
        missing = list(
            dict.fromkeys(
                item.external_id
                for item in head
                if item.has_canonical_id and item.external_id not in cache
            )
        )
        if missing:
            details = await asyncio.gather(
                *(self._metadata.fetch_by_id(external_id) for external_id in missing)
            )
            cache.update(zip(missing, details))

        enriched: list[CandidateItem] = []
        for item in head:
            detail = cache.get(item.external_id) if item.has_canonical_id else None
            enriched.append(item.merge_enrichment(detail) if detail else item)
        enriched.extend(tail)
        return enriched

    async def _primary_pass(
        self,
        selected_genres: list[str],
        content_type: ContentTypeFilter,
        limit: int,
        language: Language,
        cache: dict[str, CandidateItem | None],
        now_year: int,
    ) -> list[CandidateItem]:
        """Keyword and year retrieval over the last few release years."""

        terms = automated_query_terms(selected_genres, language)
        target = max(limit * 4, MIN_PRIMARY_POOL)
        raw: list[CandidateItem] = []
        for offset in range(self._settings.recommendation_year_window):
            if len(raw) >= target:
                break
            year = now_year - offset
            batches = await asyncio.gather(
                *(
                    self._metadata.search_by_term(term, kind=content_type, year=year)
                    for term in terms
                )
            )
            for batch in batches:
                raw.extend(batch)

        if not raw:
            return []
        enriched = await self._enrich(dedupe(raw), cache)
        in_language = [item for item in enriched if is_language_match(item, language)]
        filtered = strict_genre_filter(
            in_language,
            normalize_genre_set(selected_genres),
            fail_open=self._settings.strict_genre_fail_open,
        )
        filtered.sort(
            key=lambda item: (extract_numeric_year(item.year) or 0, item.rating or 0.0),
            reverse=True,
        )
        return filtered[:target]

    async def _run_source(
        self,
        plan: SourcePlan,
        selected_genres: list[str],
        content_type: ContentTypeFilter,
        limit: int,
        language: Language,
        profile: UserPreferenceProfile,
        now_year: int,
    ) -> list[CandidateItem]:
        budget = plan.budget(limit)
        if plan.id == LATEST:
            return await self._latest_releases(content_type, budget, language, now_year)
        if plan.id == GENRE_KEYWORDS:
            genres = selected_genres or top_genres(profile) or list(DEFAULT_SEED_GENRES)
            return await self._genre_keywords(genres, content_type, budget)
        if plan.id == POPULAR_KEYWORDS:
            terms = self._rng.sample(POPULAR_SEARCH_TERMS, POPULAR_TERM_COUNT)
            return await self._keyword_terms(
                terms, content_type, math.ceil(budget / 5)
            )
        if plan.id == SAMPLE_MOVIES:
            return await self._sample_movies(selected_genres, content_type, budget)
        if plan.id == HINDI:
            terms = hindi_search_terms(selected_genres)[:HINDI_TERM_COUNT]
            return await self._keyword_terms(
                terms,
                content_type,
                math.ceil(budget / HINDI_TERM_COUNT),
                keep=is_likely_hindi_content,
            )
        if plan.id == ENGLISH_GENRES:
            genres = selected_genres or list(DEFAULT_SEED_GENRES)
            return await self._english_genres(genres, content_type, budget)
        if plan.id == ENGLISH_POPULAR:
            terms = list(ENGLISH_POPULAR_TERMS[:ENGLISH_POPULAR_TERM_COUNT])
            return await self._keyword_terms(
                terms,
                content_type,
                math.ceil(budget / ENGLISH_POPULAR_TERM_COUNT),
                keep=_not_hindi,
            )
        if plan.id == RANDOM_DISCOVERY:
            terms = self._rng.sample(RANDOM_DISCOVERY_TERMS, RANDOM_DISCOVERY_TERM_COUNT)
            return await self._keyword_terms(
                terms,
                content_type,
                math.ceil(budget / RANDOM_DISCOVERY_TERM_COUNT),
            )
        raise ValueError(f"Unknown recommendation source: {plan.id}")

    async def _pause(self) -> None:
        spacing = self._settings.source_request_spacing_seconds
        if spacing > 0:
            await self._sleep(spacing)

    async def _keyword_terms(
        self,
        terms: Sequence[str],
        content_type: ContentTypeFilter,
        per_term: int,
        *,
        keep: Callable[[CandidateItem], bool] | None = None,
    ) -> list[CandidateItem]:
        """Search each term in turn, keeping matching items from its first hits."""

        collected: list[CandidateItem] = []
        for index, term in enumerate(terms):
            if index:
                await self._pause()
            hits = await self._metadata.keyword_search(term, limit=max(1, per_term))
            for item in hits:
                if not item.matches_content_type(content_type):
                    continue
                if keep is not None and not keep(item):
                    continue
                collected.append(item)
        return collected

    async def _latest_releases(
        self,
        content_type: ContentTypeFilter,
        budget: int,
        language: Language,
        now_year: int,
    ) -> list[CandidateItem]:
        terms = [str(now_year - offset) for offset in range(LATEST_YEAR_TERMS)]
        keep: Callable[[CandidateItem], bool] | None = None
        if language == "hindi":
            keep = is_likely_hindi_content
        elif language == "english":
            keep = _not_hindi
        items = await self._keyword_terms(
            terms, content_type, math.ceil(budget / 2), keep=keep
        )
        recent = [
            item
            for item in items
            if (year := extract_numeric_year(item.year)) and year >= now_year - LATEST_MAX_AGE
        ]
        return dedupe(recent)[:budget]

    async def _genre_keywords(
        self,
        genres: Sequence[str],
        content_type: ContentTypeFilter,
        budget: int,
    ) -> list[CandidateItem]:
        genres = list(genres)[:3]
        per_term = math.ceil(budget / len(genres) / 2)
        collected: list[CandidateItem] = []
        for genre in genres:
            terms = genre_search_terms(genre)
            self._rng.shuffle(terms)
            collected.extend(
                await self._keyword_terms(terms[:4], content_type, per_term)
            )
        return collected

    async def _english_genres(
        self,
        genres: Sequence[str],
        content_type: ContentTypeFilter,
        budget: int,
    ) -> list[CandidateItem]:
        genres = list(genres)[:3]
        per_term = math.ceil(budget / len(genres) / 2)
        collected: list[CandidateItem] = []
        for genre in genres:
            collected.extend(
                await self._keyword_terms(
                    english_genre_terms(genre)[:2],
                    content_type,
                    per_term,
                    keep=_not_hindi,
                )
            )
        return collected

    async def _sample_movies(
        self,
        selected_genres: Sequence[str],
        content_type: ContentTypeFilter,
        budget: int,
    ) -> list[CandidateItem]:
        categories = sample_categories_for(list(selected_genres))[:3]
        per_category = math.ceil(budget / len(categories))
        collected: list[CandidateItem] = []
        for index, category in enumerate(categories):
            if index:
                await self._pause()
            movies = await self._metadata.sample_category(category)
            self._rng.shuffle(movies)
            collected.extend(
                movie
                for movie in movies[:per_category]
                if movie.matches_content_type(content_type)
            )
        return collected


def _not_hindi(item: CandidateItem) -> bool:
    return not is_likely_hindi_content(item)


__all__ = [
    "RecommendationEngine",
    "RecommendationState",
    "ai_score",
    "genre_overlap",
    "latest_blend",
    "rating_bonus",
    "recency_bonus",
    "strict_genre_filter",
]
