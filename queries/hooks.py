"""Resource hooks: one per dashboard resource, each switching on the data mode.

Every hook takes the DataMode as an argument and folds it into its query key,
so a demo payload is never served for a live request or the other way round.
Demo mode never polls; live mode refetches on the resource's interval.
"""

import logging
from functools import partial

from config import settings
from data_mode import DataMode
from mocks import (
    generate_topic_velocity,
    mock_dashboard,
    mock_episode_brief,
    mock_search,
    mock_sentiment_analysis,
    mock_signals,
)
from models import (
    DashboardResponse,
    EpisodeBrief,
    SearchRequest,
    SentimentAnalysisResponse,
    ShareRequest,
    ShareResponse,
    TopicVelocityData,
    utc_now_iso,
)
from proxies.dashboard import build_dashboard
from proxies.search import SEARCH_TIMEOUT_SECONDS, proxy_search
from queries.client import QueryClient, QueryOptions, QueryResult
from search_cache import SearchCache
from upstream.client import IntelligenceClient

logger = logging.getLogger(__name__)

MINUTE = 60

ANALYTICS_STALE_TIME = 5 * MINUTE
ANALYTICS_GC_TIME = 10 * MINUTE
ANALYTICS_REFETCH_INTERVAL = 5 * MINUTE

DASHBOARD_STALE_TIME = 1 * MINUTE
DASHBOARD_GC_TIME = 5 * MINUTE
DASHBOARD_REFETCH_INTERVAL = 1 * MINUTE
# The aggregated dashboard costs 1 + N upstream calls, so it polls less and retries less.
TEMP_DASHBOARD_REFETCH_INTERVAL = 2 * MINUTE


def analytics_options(mode: DataMode) -> QueryOptions:
    return QueryOptions(
        stale_time=ANALYTICS_STALE_TIME,
        gc_time=ANALYTICS_GC_TIME,
        refetch_interval=ANALYTICS_REFETCH_INTERVAL if mode.is_live else None,
    )


def dashboard_options(mode: DataMode) -> QueryOptions:
    return QueryOptions(
        stale_time=DASHBOARD_STALE_TIME,
        gc_time=DASHBOARD_GC_TIME,
        refetch_interval=DASHBOARD_REFETCH_INTERVAL if mode.is_live else None,
        retry=3,
        retry_max_delay=30.0,
    )


def temporary_dashboard_options(mode: DataMode) -> QueryOptions:
    return QueryOptions(
        stale_time=DASHBOARD_STALE_TIME,
        gc_time=DASHBOARD_GC_TIME,
        refetch_interval=TEMP_DASHBOARD_REFETCH_INTERVAL if mode.is_live else None,
        retry=2,
        retry_max_delay=10.0,
    )


def _topics_key(topics: list[str] | None) -> tuple[str, ...] | None:
    return tuple(topics) if topics else None


async def _use_query(client: QueryClient, key: tuple, fn, options: QueryOptions) -> QueryResult:
    result = await client.fetch_query(key, fn, options)
    client.watch(key, fn, options)
    return result


# ── Fetchers ─────────────────────────────────────────────

async def fetch_topic_velocity(
    api: IntelligenceClient, mode: DataMode, weeks: int = 12, topics: list[str] | None = None
) -> TopicVelocityData:
    if not mode.is_live:
        return generate_topic_velocity(weeks, topics)
    return TopicVelocityData.model_validate(await api.get_topic_velocity(weeks, topics))


async def fetch_sentiment_analysis(
    api: IntelligenceClient, mode: DataMode, weeks: int = 12, topics: list[str] | None = None
) -> SentimentAnalysisResponse:
    if not mode.is_live:
        return mock_sentiment_analysis(weeks, topics)
    return SentimentAnalysisResponse.model_validate(await api.get_sentiment_analysis(weeks, topics))


async def fetch_dashboard(api: IntelligenceClient, mode: DataMode) -> DashboardResponse:
    if not mode.is_live:
        return mock_dashboard()
    return DashboardResponse.model_validate(await api.get_dashboard(limit=8))


async def fetch_aggregated_dashboard(api: IntelligenceClient, mode: DataMode) -> DashboardResponse:
    if not mode.is_live:
        return mock_dashboard()
    return await build_dashboard(api, limit=settings.dashboard_episode_limit)


async def fetch_signals(api: IntelligenceClient, mode: DataMode) -> dict:
    if not mode.is_live:
        return mock_signals()
    return await api.get_signals()


# ── Hooks ────────────────────────────────────────────────

async def use_topic_velocity(
    client: QueryClient,
    api: IntelligenceClient,
    mode: DataMode,
    weeks: int = 12,
    topics: list[str] | None = None,
) -> QueryResult:
    key = ("topic-velocity", weeks, _topics_key(topics), mode.is_live)
    fn = partial(fetch_topic_velocity, api, mode, weeks, topics)
    return await _use_query(client, key, fn, analytics_options(mode))


async def use_sentiment_analysis(
    client: QueryClient,
    api: IntelligenceClient,
    mode: DataMode,
    weeks: int = 12,
    topics: list[str] | None = None,
) -> QueryResult:
    key = ("sentiment-analysis", weeks, _topics_key(topics), mode.is_live)
    fn = partial(fetch_sentiment_analysis, api, mode, weeks, topics)
    return await _use_query(client, key, fn, analytics_options(mode))


async def use_intelligence_dashboard(
    client: QueryClient, api: IntelligenceClient, mode: DataMode
) -> QueryResult:
    """Dashboard straight from the upstream dashboard endpoint."""
    key = ("intelligence-dashboard", mode.is_live)
    fn = partial(fetch_dashboard, api, mode)
    return await _use_query(client, key, fn, dashboard_options(mode))


async def use_temporary_dashboard_intelligence(
    client: QueryClient, api: IntelligenceClient, mode: DataMode
) -> QueryResult:
    """Dashboard rebuilt by the aggregation proxy.

    Replace with use_intelligence_dashboard once the upstream dashboard
    endpoint stops returning an empty payload.
    """
    key = ("intelligence-dashboard-temp", mode.is_live)
    fn = partial(fetch_aggregated_dashboard, api, mode)
    return await _use_query(client, key, fn, temporary_dashboard_options(mode))


async def use_signals(client: QueryClient, api: IntelligenceClient, mode: DataMode) -> QueryResult:
    key = ("signals", mode.is_live)
    fn = partial(fetch_signals, api, mode)
    return await _use_query(client, key, fn, analytics_options(mode))


async def use_search(
    cache: SearchCache,
    api: IntelligenceClient,
    mode: DataMode,
    request: SearchRequest,
    timeout: float = SEARCH_TIMEOUT_SECONDS,
) -> dict:
    """Search through the proxy, reusing cached answers for repeated queries.

    Demo answers are canned and never touch the cache. Upstream errors
    (including UpstreamTimeout) propagate to the caller.
    """
    if not mode.is_live:
        return mock_search(request.query)

    cached = cache.get(request.query, request.limit, request.offset)
    if cached is not None:
        logger.debug('Search cache hit for "%s"', request.query)
        return cached

    data = await proxy_search(api, request, timeout=timeout)
    cache.set(request.query, request.limit, request.offset, data)
    return data


# ── One-shot calls ───────────────────────────────────────

async def fetch_episode_brief(api: IntelligenceClient, mode: DataMode, episode_id: str) -> EpisodeBrief | dict:
    """Raises KeyError for unknown demo ids and UpstreamError for live failures."""
    if not mode.is_live:
        return mock_episode_brief(episode_id)
    return await api.get_brief(episode_id)


async def share_episode_intelligence(
    api: IntelligenceClient, mode: DataMode, request: ShareRequest
) -> ShareResponse:
    if not mode.is_live:
        logger.info("Demo share of %s via %s", request.episode_id, request.method)
        return ShareResponse(
            success=True,
            message=f"Intelligence shared via {request.method} to {request.recipient}",
            shared_at=utc_now_iso(),
        )
    payload = request.model_dump(exclude_none=True)
    return ShareResponse.model_validate(await api.share(payload))
