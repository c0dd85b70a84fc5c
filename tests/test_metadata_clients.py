"""Tests for the upstream metadata clients and their facade."""

from __future__ import annotations

from typing import Any

import httpx
import pytest

from app.config import Settings
from app.services.deadline import Deadline
from app.services.identifiers import IdentifierCache
from app.services.keyword_search import KeywordSearchClient
from app.services.metadata import MetadataClient
from app.services.omdb import OMDbClient
from app.services.tmdb import TMDBClient
from app.services.tvmaze import TVMazeClient


@pytest.fixture
def anyio_backend() -> str:
    """Force AnyIO tests to run on asyncio without requiring trio."""

    return "asyncio"


def build_settings(**overrides: Any) -> Settings:
    """Return a settings object with defaults suitable for tests."""

    base: dict[str, Any] = {"OMDB_API_KEYS": "key-one,key-two"}
    base.update(overrides)
    return Settings(_env_file=None, **base)  # type: ignore[arg-type]


def omdb_hit(index: int, title: str | None = None) -> dict[str, str]:
    return {
        "Title": title or f"Movie {index}",
        "Year": "2020",
        "imdbID": f"tt{index:07d}",
        "Type": "movie",
        "Poster": "N/A",
    }


@pytest.mark.anyio("asyncio")
async def test_omdb_search_rotates_to_next_key_on_empty_response() -> None:
    """An exhausted key answering ``Response: False`` should hand over to the next."""

    seen_keys: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        key = request.url.params["apikey"]
        seen_keys.append(key)
        if key == "key-one":
            return httpx.Response(200, json={"Response": "False", "Error": "Request limit reached!"})
        return httpx.Response(200, json={"Response": "True", "Search": [omdb_hit(1, "Batman Begins")]})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http_client:
        client = OMDbClient(build_settings(), http_client)
        results = await client.search("batman", content_type="movies", year=2005)

    assert seen_keys == ["key-one", "key-two"]
    assert [item.title for item in results] == ["Batman Begins"]


@pytest.mark.anyio("asyncio")
async def test_omdb_search_sends_type_year_and_pages() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        page = int(request.url.params["page"])
        hits = [omdb_hit(page * 100 + index) for index in range(10 if page == 1 else 3)]
        return httpx.Response(200, json={"Response": "True", "Search": hits})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http_client:
        client = OMDbClient(build_settings(), http_client)
        results = await client.search("drama", content_type="series", year=2021, pages=3)

    assert len(results) == 13
    assert len(requests) == 2
    assert requests[0].url.params["type"] == "series"
    assert requests[0].url.params["y"] == "2021"


@pytest.mark.anyio("asyncio")
async def test_omdb_fetch_by_id_survives_failing_key() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.params["apikey"] == "key-one":
            return httpx.Response(401, json={"Response": "False"})
        return httpx.Response(
            200,
            json={
                "Response": "True",
                "Title": "Inception",
                "Year": "2010",
                "imdbID": "tt1375666",
                "Type": "movie",
                "Genre": "Action, Sci-Fi",
                "imdbRating": "8.8",
            },
        )

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http_client:
        client = OMDbClient(build_settings(), http_client)
        detail = await client.fetch_by_id("tt1375666")
        missing = await client.fetch_by_id("tmdb:27205")

    assert detail is not None
    assert detail.genres == ["Action", "Sci-Fi"]
    assert detail.rating == 8.8
    assert missing is None


@pytest.mark.anyio("asyncio")
async def test_expired_deadline_short_circuits_without_requests() -> None:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json={})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http_client:
        client = OMDbClient(build_settings(), http_client)
        results = await client.search("batman", deadline=Deadline(seconds=0.0))

    assert results == []
    assert calls == []


@pytest.mark.anyio("asyncio")
async def test_tmdb_without_key_skips_requests() -> None:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json={"results": []})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http_client:
        client = TMDBClient(build_settings(), http_client)
        assert await client.search("dune") == []

    assert calls == []


@pytest.mark.anyio("asyncio")
async def test_tmdb_resolves_and_caches_imdb_ids() -> None:
    """External ids are looked up once per title; 404s become cached placeholders."""

    external_calls: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path.endswith("/search/movie"):
            return httpx.Response(
                200,
                json={
                    "results": [
                        {"id": 438631, "title": "Dune", "release_date": "2021-09-15", "poster_path": "/dune.jpg"},
                        {"id": 999, "title": "Dune Drifter", "release_date": "2020-01-01"},
                    ]
                },
            )
        if path.endswith("/search/tv"):
            return httpx.Response(200, json={"results": []})
        if path.endswith("/external_ids"):
            external_calls.append(path)
            if "/438631/" in path:
                return httpx.Response(200, json={"imdb_id": "tt1160419"})
            return httpx.Response(404, json={"status_message": "not found"})
        return httpx.Response(404)

    cache = IdentifierCache()
    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http_client:
        client = TMDBClient(build_settings(TMDB_API_KEYS="tmdb-key"), http_client, cache)
        first = await client.search("dune")
        second = await client.search("dune", content_type="movies")

    ids = {item.title: item.external_id for item in first}
    assert ids == {"Dune": "tt1160419", "Dune Drifter": "tmdb:999"}
    assert [item.external_id for item in second] == ["tt1160419", "tmdb:999"]
    assert sorted(external_calls) == [
        "/3/movie/438631/external_ids",
        "/3/movie/999/external_ids",
    ]
    assert ("tmdb", "999", "movie") in cache
    assert first[0].poster_url == "https://image.tmdb.org/t/p/w300/dune.jpg"


@pytest.mark.anyio("asyncio")
async def test_tmdb_transport_failures_are_not_cached() -> None:
    attempts = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal attempts
        if request.url.path.endswith("/external_ids"):
            attempts += 1
            return httpx.Response(503)
        return httpx.Response(200, json={"results": [{"id": 7, "title": "Se7en", "release_date": "1995-09-22"}]})

    cache = IdentifierCache()
    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http_client:
        client = TMDBClient(build_settings(TMDB_API_KEYS="tmdb-key"), http_client, cache)
        await client.search("seven", content_type="movies")
        results = await client.search("seven", content_type="movies")

    assert results[0].external_id == "tmdb:7"
    assert attempts == 2
    assert len(cache) == 0


@pytest.mark.anyio("asyncio")
async def test_tvmaze_uses_externals_then_show_lookup() -> None:
    show_lookups: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/search/shows":
            return httpx.Response(
                200,
                json=[
                    {"score": 0.9, "show": {"id": 82, "name": "Game of Thrones", "externals": {"imdb": "tt0944947"}}},
                    {"score": 0.5, "show": {"id": 5, "name": "Thrones Recap", "externals": {"imdb": None}}},
                    {"score": 0.1, "show": {"id": 6, "name": "Broken Show"}},
                    {"score": 0.1},
                ],
            )
        show_lookups.append(request.url.path)
        if request.url.path == "/shows/5":
            return httpx.Response(200, json={"id": 5, "name": "Thrones Recap", "externals": {"imdb": "tt5555555"}})
        return httpx.Response(500)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http_client:
        client = TVMazeClient(build_settings(), http_client)
        results = await client.search("thrones")

    assert [item.external_id for item in results] == ["tt0944947", "tt5555555", "tvmaze:6"]
    assert sorted(show_lookups) == ["/shows/5", "/shows/6"]
    assert all(item.content_type == "series" for item in results)


@pytest.mark.anyio("asyncio")
async def test_keyword_search_handles_not_ok_and_errors() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        term = request.url.params.get("q")
        if term == "broken":
            return httpx.Response(500)
        if term == "nothing":
            return httpx.Response(200, json={"ok": False})
        return httpx.Response(
            200,
            json={
                "ok": True,
                "description": [
                    {"#TITLE": "Stree", "#YEAR": 2018, "#IMDB_ID": "tt8108202", "#ACTORS": "Rajkummar Rao"},
                    {"#YEAR": 2019},
                ],
            },
        )

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http_client:
        client = KeywordSearchClient(build_settings(), http_client)
        hits = await client.search("stree")
        assert await client.search("broken") == []
        assert await client.search("nothing") == []

    assert [item.title for item in hits] == ["Stree"]
    assert hits[0].year == "2018"
    assert hits[0].genres == ["Horror"]


@pytest.mark.anyio("asyncio")
async def test_facade_skips_tvmaze_for_short_queries_and_isolates_failures() -> None:
    hosts: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        hosts.append(request.url.host)
        if request.url.host == "www.omdbapi.com":
            raise httpx.ConnectError("boom", request=request)
        if request.url.host == "api.tvmaze.com":
            return httpx.Response(200, json=[{"show": {"id": 1, "name": "Up", "externals": {"imdb": "tt1"}}}])
        return httpx.Response(404)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http_client:
        metadata = MetadataClient(build_settings(), http_client)
        short = await metadata.fetch_by_query("up")
        long = await metadata.fetch_by_query("up in the air")

    assert short == []
    assert [item.title for item in long] == ["Up"]
    assert "api.tvmaze.com" in hosts
    assert hosts.count("api.tvmaze.com") == 1
