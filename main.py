"""FastAPI application: entry point for the PodInsight dashboard BFF."""

import logging
from contextlib import asynccontextmanager

import httpx
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from auth import BasicAuthMiddleware
from config import settings
from data_mode import DataMode, DataModeContext
from queries.client import QueryClient
from routes import router, set_services
from search_cache import SearchCache
from upstream.client import JSON_HEADERS, IntelligenceClient

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    # Startup
    logger.info("=" * 70)
    logger.info("PodInsight dashboard BFF - Starting Up")
    logger.info("=" * 70)
    logger.info("Upstream API: %s", settings.api_url)
    logger.info("Initial data mode: %s", "DEMO" if settings.use_mock_data else "LIVE")
    logger.info("Search timeout: %gs", settings.search_timeout_seconds)

    http = httpx.AsyncClient(timeout=settings.upstream_timeout_seconds, headers=JSON_HEADERS)
    api = IntelligenceClient(settings.api_url, http=http)
    query_client = QueryClient()
    search_cache = SearchCache(
        ttl=settings.search_cache_ttl_seconds,
        max_entries=settings.search_cache_max_entries,
    )
    data_mode = DataModeContext(DataMode.from_flag(not settings.use_mock_data))
    set_services(api, query_client, search_cache, data_mode)

    logger.info("PodInsight BFF is running on http://localhost:%d", settings.port)
    yield

    # Shutdown
    logger.info("Stopping query polling...")
    await query_client.stop()
    await http.aclose()
    logger.info("Shutdown complete")


app = FastAPI(
    title="PodInsight Dashboard BFF",
    description="Proxy and aggregation layer between the dashboard and the PodInsight intelligence API",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    BasicAuthMiddleware,
    password=settings.basic_auth_password,
    environment=settings.environment,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router)

if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=settings.port, reload=True)
