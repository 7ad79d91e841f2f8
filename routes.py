"""FastAPI routes for the PodInsight dashboard BFF."""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Query
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from config import settings
from data_mode import DataMode, DataModeContext
from models import DataModeUpdate, SearchRequest, ShareRequest
from proxies.dashboard import build_dashboard
from proxies.search import FAILURE_MESSAGE, TIMEOUT_MESSAGE, proxy_search
from queries import hooks
from queries.client import QueryClient, QueryResult
from render_hints import build_intelligence_cards
from search_cache import SearchCache
from upstream.base import DiscoveryError, UpstreamError, UpstreamStatusError, UpstreamTimeout
from upstream.client import IntelligenceClient

logger = logging.getLogger(__name__)
router = APIRouter()

# These get set by main.py during startup
_api: IntelligenceClient | None = None
_query_client: QueryClient | None = None
_search_cache: SearchCache | None = None
_data_mode: DataModeContext | None = None


def set_services(
    api: IntelligenceClient,
    query_client: QueryClient,
    search_cache: SearchCache,
    data_mode: DataModeContext,
):
    global _api, _query_client, _search_cache, _data_mode
    _api = api
    _query_client = query_client
    _search_cache = search_cache
    _data_mode = data_mode


def _require_services() -> tuple[IntelligenceClient, QueryClient, SearchCache, DataModeContext]:
    if _api is None or _query_client is None or _search_cache is None or _data_mode is None:
        raise HTTPException(503, "Services not started")
    return _api, _query_client, _search_cache, _data_mode


def _parse_topics(topics: Optional[str]) -> list[str] | None:
    if not topics:
        return None
    parsed = [t.strip() for t in topics.split(",") if t.strip()]
    return parsed or None


def _query_response(result: QueryResult, mode: DataMode) -> JSONResponse:
    """Serialize a hook result. A terminal error with nothing cached is a 502."""
    body = {
        "data": jsonable_encoder(result.data),
        "is_loading": result.is_loading,
        "is_error": result.is_error,
        "error": str(result.error) if result.error else None,
        "is_stale": result.is_stale,
        "mode": mode.value,
    }
    status = 502 if result.is_error and result.data is None else 200
    return JSONResponse(status_code=status, content=body)


# ── Proxies ──────────────────────────────────────────────

@router.get("/api/intelligence/dashboard-proxy")
async def dashboard_proxy():
    """Dashboard rebuilt from discovery plus per-episode briefs."""
    api, *_ = _require_services()
    try:
        dashboard = await build_dashboard(api, limit=settings.dashboard_episode_limit)
    except DiscoveryError as e:
        logger.error("Dashboard proxy error: %s", e)
        return JSONResponse(
            status_code=500,
            content={"error": "Failed to fetch dashboard data", "details": str(e)},
        )
    return jsonable_encoder(dashboard)


@router.post("/api/search")
async def search(request: SearchRequest):
    """Forward a search upstream; 504 on timeout, 500 on any other failure."""
    api, *_ = _require_services()
    try:
        return await proxy_search(api, request, timeout=settings.search_timeout_seconds)
    except UpstreamTimeout:
        return JSONResponse(status_code=504, content={"error": TIMEOUT_MESSAGE})
    except UpstreamError as e:
        logger.error("Search proxy error: %s", e)
        return JSONResponse(status_code=500, content={"error": FAILURE_MESSAGE})


@router.get("/api/debug-env")
async def debug_env():
    return {
        "USE_MOCK_DATA": settings.use_mock_data,
        "API_URL": settings.api_url,
        "ENVIRONMENT": settings.environment,
    }


# ── Data mode ────────────────────────────────────────────

@router.get("/api/data-mode")
async def get_data_mode():
    *_, data_mode = _require_services()
    return data_mode.as_dict()


@router.put("/api/data-mode")
async def set_data_mode(update: DataModeUpdate):
    _, query_client, _, data_mode = _require_services()
    data_mode.set_live(update.is_live)
    if not data_mode.is_live:
        query_client.unwatch_all()
    return data_mode.as_dict()


@router.post("/api/data-mode/toggle")
async def toggle_data_mode():
    _, query_client, _, data_mode = _require_services()
    data_mode.toggle()
    if not data_mode.is_live:
        query_client.unwatch_all()
    return data_mode.as_dict()


# ── Resource hooks ───────────────────────────────────────

@router.get("/api/data/topic-velocity")
async def topic_velocity(weeks: int = Query(default=12, ge=1, le=52), topics: Optional[str] = None):
    api, query_client, _, data_mode = _require_services()
    mode = data_mode.mode
    result = await hooks.use_topic_velocity(query_client, api, mode, weeks, _parse_topics(topics))
    return _query_response(result, mode)


@router.get("/api/data/sentiment")
async def sentiment(weeks: int = Query(default=12, ge=1, le=52), topics: Optional[str] = None):
    api, query_client, _, data_mode = _require_services()
    mode = data_mode.mode
    result = await hooks.use_sentiment_analysis(query_client, api, mode, weeks, _parse_topics(topics))
    return _query_response(result, mode)


@router.get("/api/data/dashboard")
async def dashboard():
    api, query_client, _, data_mode = _require_services()
    mode = data_mode.mode
    result = await hooks.use_temporary_dashboard_intelligence(query_client, api, mode)
    return _query_response(result, mode)


@router.get("/api/data/signals")
async def signals():
    api, query_client, _, data_mode = _require_services()
    mode = data_mode.mode
    result = await hooks.use_signals(query_client, api, mode)
    return _query_response(result, mode)


@router.get("/api/data/cards")
async def intelligence_cards():
    """Intelligence cards derived from the dashboard episodes."""
    api, query_client, _, data_mode = _require_services()
    mode = data_mode.mode
    result = await hooks.use_temporary_dashboard_intelligence(query_client, api, mode)
    if result.data is None:
        return _query_response(result, mode)
    hint = build_intelligence_cards(result.data)
    return _query_response(QueryResult(
        data=hint,
        is_error=result.is_error,
        error=result.error,
        is_stale=result.is_stale,
    ), mode)


@router.post("/api/data/search")
async def cached_search(request: SearchRequest):
    api, _, search_cache, data_mode = _require_services()
    try:
        return await hooks.use_search(
            search_cache, api, data_mode.mode, request, timeout=settings.search_timeout_seconds
        )
    except UpstreamTimeout:
        return JSONResponse(status_code=504, content={"error": TIMEOUT_MESSAGE})
    except UpstreamError as e:
        logger.error("Cached search error: %s", e)
        return JSONResponse(status_code=500, content={"error": FAILURE_MESSAGE})


# ── Episodes & sharing ───────────────────────────────────

@router.get("/api/episodes/{episode_id}/brief")
async def episode_brief(episode_id: str):
    api, _, _, data_mode = _require_services()
    try:
        brief = await hooks.fetch_episode_brief(api, data_mode.mode, episode_id)
    except KeyError:
        raise HTTPException(404, f"Episode {episode_id} not found")
    except UpstreamStatusError as e:
        if e.status_code == 404:
            raise HTTPException(404, f"Episode {episode_id} not found")
        logger.error("Brief fetch failed for %s: %s", episode_id, e)
        raise HTTPException(502, f"Failed to fetch episode brief: {e.reason or e.status_code}")
    except UpstreamError as e:
        logger.error("Brief fetch failed for %s: %s", episode_id, e)
        raise HTTPException(502, "Failed to fetch episode brief")
    return jsonable_encoder(brief)


@router.post("/api/intelligence/share")
async def share_intelligence(request: ShareRequest):
    api, _, _, data_mode = _require_services()
    try:
        return await hooks.share_episode_intelligence(api, data_mode.mode, request)
    except (UpstreamError, ValidationError) as e:
        logger.error("Share failed for %s: %s", request.episode_id, e)
        raise HTTPException(502, "Failed to share intelligence")


@router.get("/health")
async def health():
    status = {"status": "ok"}
    if _data_mode is not None:
        status.update(_data_mode.as_dict())
    return status
