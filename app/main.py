"""Entry point for the FastAPI-powered ReelScout service."""

from __future__ import annotations

import asyncio
import json
import logging
from contextlib import AsyncExitStack, asynccontextmanager
from typing import Any, get_args

import httpx
from fastapi import FastAPI, HTTPException, Query, Request, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from .config import Settings, get_settings
from .database import Database
from .models import ContentTypeFilter, Language, WatchHistoryEntry
from .services.identifiers import IdentifierCache
from .services.metadata import MetadataClient
from .services.recommendations import RecommendationEngine
from .services.search import SearchAggregator, SearchSession, debounce_delay
from .services.watch_history import WatchHistoryStore

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

CONTENT_TYPE_FILTERS = frozenset(get_args(ContentTypeFilter))
LANGUAGES = frozenset(get_args(Language))
MAX_RECOMMENDATION_LIMIT = 100


@asynccontextmanager
async def lifespan(fastapi_app: FastAPI):
    settings: Settings = fastapi_app.state.settings
    exit_stack = AsyncExitStack()
    client_kwargs: dict[str, Any] = {
        "timeout": httpx.Timeout(10.0, connect=5.0),
        "follow_redirects": True,
    }
    transport = getattr(fastapi_app.state, "transport", None)
    if transport is not None:
        client_kwargs["transport"] = transport
    http_client = await exit_stack.enter_async_context(
        httpx.AsyncClient(**client_kwargs)
    )
    database = Database(settings.database_url)
    await database.create_all()

    history = WatchHistoryStore(database, limit=settings.watch_history_limit)
    metadata = MetadataClient(settings, http_client, id_cache=IdentifierCache())
    fastapi_app.state.database = database
    fastapi_app.state.watch_history = history
    fastapi_app.state.metadata = metadata
    fastapi_app.state.search = SearchAggregator(settings, metadata)
    fastapi_app.state.recommendations = RecommendationEngine(
        settings, metadata, history
    )
    logger.info(
        "%s started with search services: %s",
        settings.app_name,
        ", ".join(settings.search_services),
    )

    try:
        yield
    finally:  # pragma: no cover - teardown path exercised at runtime
        await database.dispose()
        await exit_stack.aclose()


def create_app(
    settings: Settings | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    settings = settings or get_settings()
    fastapi_app = FastAPI(
        title=settings.app_name,
        description="Movie and series search with heuristic recommendations",
        version="1.0.0",
        lifespan=lifespan,
    )
    fastapi_app.state.settings = settings
    fastapi_app.state.transport = transport

    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "DELETE"],
        allow_headers=["*"],
    )

    register_routes(fastapi_app)
    return fastapi_app


def _service(fastapi_app: FastAPI, name: str, expected: type) -> Any:
    service = getattr(fastapi_app.state, name, None)
    if not isinstance(service, expected):
        raise RuntimeError(f"{expected.__name__} not initialised")
    return service


def _parse_genres(raw: str | None) -> list[str]:
    if not raw:
        return []
    return list(dict.fromkeys(part.strip() for part in raw.split(",") if part.strip()))


def _parse_limit(raw: str | None, default: int) -> int:
    if raw is None or raw == "":
        return default
    try:
        limit = int(raw)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail="limit must be an integer") from exc
    if limit < 1 or limit > MAX_RECOMMENDATION_LIMIT:
        raise HTTPException(
            status_code=400,
            detail=f"limit must be between 1 and {MAX_RECOMMENDATION_LIMIT}",
        )
    return limit


def register_routes(fastapi_app: FastAPI) -> None:
    @fastapi_app.get("/health")
    async def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    @fastapi_app.get("/api/search")
    async def search_endpoint(
        q: str = "", kind: str = Query("all", alias="type")
    ) -> JSONResponse:
        aggregator: SearchAggregator = _service(fastapi_app, "search", SearchAggregator)
        if kind not in CONTENT_TYPE_FILTERS:
            raise HTTPException(status_code=400, detail=f"Unsupported type: {kind}")
        result = await aggregator.search(q, kind)  # type: ignore[arg-type]
        payload = result.to_payload()
        payload["debounceSeconds"] = debounce_delay(q)
        return JSONResponse(payload)

    @fastapi_app.websocket("/ws/search")
    async def search_socket(websocket: WebSocket) -> None:
        """Search-as-you-type stream: one session per connection.

        Each ``{"q": ..., "type": ...}`` message is debounced; a result is
        sent only if no newer message arrived before it completed.
        """

        aggregator: SearchAggregator = _service(fastapi_app, "search", SearchAggregator)
        session = SearchSession(aggregator)
        in_flight: set[asyncio.Task[None]] = set()
        await websocket.accept()

        async def _run(query: str, kind: str) -> None:
            result = await session.submit(query, kind=kind, debounce=True)  # type: ignore[arg-type]
            if result is None:
                return
            payload = result.to_payload()
            payload["debounceSeconds"] = debounce_delay(query)
            await websocket.send_json(payload)

        try:
            while True:
                try:
                    message = await websocket.receive_json()
                except json.JSONDecodeError:
                    await websocket.send_json({"status": "error", "detail": "Invalid JSON payload"})
                    continue
                if not isinstance(message, dict):
                    await websocket.send_json({"status": "error", "detail": "Invalid payload"})
                    continue
                kind = str(message.get("type") or "all")
                if kind not in CONTENT_TYPE_FILTERS:
                    await websocket.send_json(
                        {"status": "error", "detail": f"Unsupported type: {kind}"}
                    )
                    continue
                task = asyncio.create_task(_run(str(message.get("q") or ""), kind))
                in_flight.add(task)
                task.add_done_callback(in_flight.discard)
        except WebSocketDisconnect:
            logger.debug("Search socket closed with %s searches in flight", len(in_flight))
        finally:
            for task in list(in_flight):
                task.cancel()

    @fastapi_app.get("/api/recommendations")
    async def recommendations_endpoint(request: Request) -> JSONResponse:
        engine: RecommendationEngine = _service(
            fastapi_app, "recommendations", RecommendationEngine
        )
        settings: Settings = fastapi_app.state.settings
        params = request.query_params
        content_type = params.get("type", "all")
        if content_type not in CONTENT_TYPE_FILTERS:
            raise HTTPException(status_code=400, detail=f"Unsupported type: {content_type}")
        language = params.get("language", "all")
        if language not in LANGUAGES:
            raise HTTPException(status_code=400, detail=f"Unsupported language: {language}")
        limit = _parse_limit(params.get("limit"), settings.recommendation_default_limit)
        user_id = params.get("user") or None

        if engine.state(user_id) == "loading":
            return JSONResponse({"status": "busy", "results": []})
        items = await engine.recommend(
            _parse_genres(params.get("genres")),
            content_type,  # type: ignore[arg-type]
            limit,
            language,  # type: ignore[arg-type]
            user_id=user_id,
        )
        outcome = engine.last_outcome(user_id) or "success"
        return JSONResponse(
            {
                "status": outcome,
                "results": [item.to_payload() for item in items],
            }
        )

    @fastapi_app.get("/api/users/{user_id}/history")
    async def history_endpoint(user_id: str) -> JSONResponse:
        store: WatchHistoryStore = _service(fastapi_app, "watch_history", WatchHistoryStore)
        entries = await store.entries(user_id)
        return JSONResponse(
            {
                "userId": user_id,
                "history": [
                    entry.model_dump(mode="json", by_alias=True) for entry in entries
                ],
            }
        )

    @fastapi_app.post("/api/users/{user_id}/history")
    async def add_history_endpoint(user_id: str, request: Request) -> JSONResponse:
        store: WatchHistoryStore = _service(fastapi_app, "watch_history", WatchHistoryStore)
        try:
            payload = await request.json()
        except json.JSONDecodeError as exc:
            raise HTTPException(status_code=400, detail="Invalid JSON payload") from exc
        if not isinstance(payload, dict):
            raise HTTPException(status_code=400, detail="Invalid payload")
        try:
            entry = WatchHistoryEntry.model_validate(payload)
        except ValidationError as exc:
            raise HTTPException(
                status_code=400, detail=json.loads(exc.json())
            ) from exc
        entries = await store.add(user_id, entry)
        return JSONResponse(
            {
                "userId": user_id,
                "history": [
                    item.model_dump(mode="json", by_alias=True) for item in entries
                ],
            },
            status_code=201,
        )

    @fastapi_app.delete("/api/users/{user_id}/history")
    async def clear_history_endpoint(user_id: str) -> dict[str, Any]:
        store: WatchHistoryStore = _service(fastapi_app, "watch_history", WatchHistoryStore)
        removed = await store.clear(user_id)
        return {"userId": user_id, "removed": removed}


app = create_app()
