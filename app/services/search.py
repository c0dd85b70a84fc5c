"""Search-as-you-type aggregation across the metadata services."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Literal

from ..config import Settings
from ..models import CandidateItem, ContentTypeFilter
from . import relevance
from .deadline import Deadline
from .dedupe import dedupe
from .metadata import MetadataClient

logger = logging.getLogger(__name__)

SearchStatus = Literal["ok", "too_short", "no_results"]


def debounce_delay(query: str) -> float:
    """Return how long a caller should wait before searching ``query``.

    Longer queries are more selective, so they start sooner.
    """

    length = len((query or "").strip())
    if length <= 2:
        return 0.3
    if length <= 4:
        return 0.15
    return 0.1


@dataclass(slots=True)
class SearchResult:
    status: SearchStatus
    query: str
    items: list[CandidateItem] = field(default_factory=list)

    def to_payload(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "query": self.query,
            "results": [item.to_payload() for item in self.items],
        }


class SearchAggregator:
    """Fan a query out to every service under one deadline and rank the merge."""

    def __init__(self, settings: Settings, metadata: MetadataClient):
        self._settings = settings
        self._metadata = metadata

    async def search(
        self, query: str, kind: ContentTypeFilter = "all"
    ) -> SearchResult:
        query = (query or "").strip()
        if len(query) < self._settings.search_min_query_length:
            return SearchResult(status="too_short", query=query)

        deadline = Deadline.after(self._settings.search_timeout_seconds)
        calls = self._metadata.search_calls(query, kind, deadline=deadline)
        if not calls:
            return SearchResult(status="no_results", query=query)

        tasks = {
            name: asyncio.create_task(call, name=f"search:{name}")
            for name, call in calls.items()
        }
        done, pending = await asyncio.wait(
            tasks.values(), timeout=deadline.remaining()
        )
        if pending:
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)
            logger.info(
                "Search for %s abandoned %s slow service(s): %s",
                query,
                len(pending),
                ", ".join(name for name, task in tasks.items() if task in pending),
            )

        merged: list[CandidateItem] = []
        for name, task in tasks.items():
            if task not in done:
                continue
            exc = task.exception()
            if exc is not None:
                logger.warning("Search service %s failed for %s: %s", name, query, exc)
                continue
            merged.extend(task.result())

        fast = self._settings.search_fast_scoring
        scored = [
            item.model_copy(
                update={"relevance": relevance.score(item.title, query, fast=fast)}
            )
            for item in merged
        ]
        ranked = sorted(
            dedupe(scored), key=lambda item: item.relevance or 0.0, reverse=True
        )
        items = ranked[: self._settings.search_result_limit]
        if not items:
            return SearchResult(status="no_results", query=query)
        return SearchResult(status="ok", query=query, items=items)


class SearchSession:
    """Holds the displayed results of one input stream, such as a search socket.

    Every submission takes the next sequence number; a result is applied
    only while its submission is still the latest one.
    """

    def __init__(self, aggregator: SearchAggregator):
        self._aggregator = aggregator
        self._sequence = 0
        self.query = ""
        self.results: list[CandidateItem] = []
        self.status: SearchStatus | None = None

    @property
    def sequence(self) -> int:
        return self._sequence

    def is_current(self, sequence: int) -> bool:
        return sequence == self._sequence

    async def submit(
        self,
        query: str,
        *,
        kind: ContentTypeFilter = "all",
        debounce: bool = False,
    ) -> SearchResult | None:
        """Run ``query`` and apply its result unless a newer call superseded it."""

        self._sequence += 1
        sequence = self._sequence
        self.query = query
        self.results = []
        self.status = None

        if debounce:
            await asyncio.sleep(debounce_delay(query))
            if not self.is_current(sequence):
                return None

        result = await self._aggregator.search(query, kind)
        if not self.is_current(sequence):
            logger.debug("Discarding stale search result for %s", query)
            return None
        self.results = list(result.items)
        self.status = result.status
        return result


__all__ = [
    "SearchAggregator",
    "SearchResult",
    "SearchSession",
    "SearchStatus",
    "debounce_delay",
]
