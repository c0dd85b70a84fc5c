"""Tests for the search-as-you-type aggregator and session."""

from __future__ import annotations

import asyncio
from typing import Any

import httpx
import pytest

from app.config import Settings
from app.models import CandidateItem
from app.services.metadata import MetadataClient
from app.services.search import (
    SearchAggregator,
    SearchResult,
    SearchSession,
    debounce_delay,
)


@pytest.fixture
def anyio_backend() -> str:
    """Force AnyIO tests to run on asyncio without requiring trio."""

    return "asyncio"


def build_settings(**overrides: Any) -> Settings:
    base: dict[str, Any] = {
        "OMDB_API_KEYS": "omdb-key",
        "TMDB_API_KEYS": "tmdb-key",
    }
    base.update(overrides)
    return Settings(_env_file=None, **base)  # type: ignore[arg-type]


def batman_handler(request: httpx.Request) -> httpx.Response:
    host = request.url.host
    path = request.url.path
    if host == "www.omdbapi.com":
        return httpx.Response(
            200,
            json={
                "Response": "True",
                "Search": [
                    {"Title": "The Batman", "Year": "2022", "imdbID": "tt1877830", "Type": "movie"},
                    {"Title": "Batman Begins", "Year": "2005", "imdbID": "tt0372784", "Type": "movie"},
                ],
            },
        )
    if host == "api.themoviedb.org":
        if path.endswith("/search/movie"):
            return httpx.Response(
                200,
                json={"results": [{"id": 272, "title": "Batman Begins", "release_date": "2005-06-10"}]},
            )
        if path.endswith("/external_ids"):
            return httpx.Response(200, json={"imdb_id": "tt0372784"})
        return httpx.Response(200, json={"results": []})
    if host == "api.tvmaze.com":
        return httpx.Response(200, json=[])
    return httpx.Response(404)


def build_aggregator(
    http_client: httpx.AsyncClient, **overrides: Any
) -> SearchAggregator:
    settings = build_settings(**overrides)
    return SearchAggregator(settings, MetadataClient(settings, http_client))


@pytest.mark.anyio("asyncio")
async def test_short_queries_issue_no_requests() -> None:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json={})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http_client:
        result = await build_aggregator(http_client).search(" b ")

    assert result.status == "too_short"
    assert result.items == []
    assert calls == []


@pytest.mark.anyio("asyncio")
async def test_prefix_match_outranks_substring_and_duplicates_merge() -> None:
    async with httpx.AsyncClient(transport=httpx.MockTransport(batman_handler)) as http_client:
        result = await build_aggregator(http_client).search("batman")

    assert result.status == "ok"
    assert [item.title for item in result.items] == ["Batman Begins", "The Batman"]
    assert [item.relevance for item in result.items] == [90, 70]
    assert len({item.external_id for item in result.items}) == 2

    payload = result.to_payload()
    assert payload["status"] == "ok"
    assert payload["query"] == "batman"
    assert payload["results"][0]["title"] == "Batman Begins"


@pytest.mark.anyio("asyncio")
async def test_results_are_truncated_to_limit() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host != "www.omdbapi.com":
            return httpx.Response(200, json=[] if request.url.host == "api.tvmaze.com" else {"results": []})
        hits = [
            {"Title": f"Batman {index}", "Year": "2000", "imdbID": f"tt{index:07d}", "Type": "movie"}
            for index in range(10)
        ]
        return httpx.Response(200, json={"Response": "True", "Search": hits})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http_client:
        result = await build_aggregator(http_client, SEARCH_RESULT_LIMIT=3).search("batman")

    assert len(result.items) == 3


@pytest.mark.anyio("asyncio")
async def test_slow_service_is_dropped_at_deadline() -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "api.themoviedb.org":
            await asyncio.sleep(5)
        return batman_handler(request)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http_client:
        aggregator = build_aggregator(http_client, SEARCH_TIMEOUT=0.2)
        started = asyncio.get_running_loop().time()
        result = await aggregator.search("batman")
        elapsed = asyncio.get_running_loop().time() - started

    assert elapsed < 2
    assert result.status == "ok"
    assert {item.source for item in result.items} == {"omdb"}


@pytest.mark.anyio("asyncio")
async def test_no_results_when_every_service_is_empty() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "www.omdbapi.com":
            return httpx.Response(200, json={"Response": "False", "Error": "Movie not found!"})
        if request.url.host == "api.tvmaze.com":
            return httpx.Response(500)
        return httpx.Response(200, json={"results": []})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http_client:
        result = await build_aggregator(http_client).search("qwertyuiop")

    assert result.status == "no_results"
    assert result.to_payload()["results"] == []


def test_debounce_delay_shrinks_with_length() -> None:
    assert debounce_delay("ab") == 0.3
    assert debounce_delay("abcd") == 0.15
    assert debounce_delay("abcdef") == 0.1


class GatedAggregator:
    """Aggregator double whose first query waits until released."""

    def __init__(self) -> None:
        self.release = asyncio.Event()

    async def search(self, query: str, kind: str = "all") -> SearchResult:
        if query == "bat":
            await self.release.wait()
        return SearchResult(status="ok", query=query, items=[CandidateItem(title=query.title())])


@pytest.mark.anyio("asyncio")
async def test_session_discards_superseded_results() -> None:
    aggregator = GatedAggregator()
    session = SearchSession(aggregator)  # type: ignore[arg-type]

    stale = asyncio.create_task(session.submit("bat"))
    await asyncio.sleep(0)
    latest = await session.submit("batman")
    aggregator.release.set()

    assert await stale is None
    assert latest is not None and latest.status == "ok"
    assert session.query == "batman"
    assert [item.title for item in session.results] == ["Batman"]
    assert session.sequence == 2
