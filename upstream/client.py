"""Async client for the PodInsight intelligence API."""

import logging
from typing import Any

import httpx

from upstream.base import UpstreamError, UpstreamStatusError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0

JSON_HEADERS = {"Accept": "application/json"}


class IntelligenceClient:
    """Thin wrapper over the upstream endpoints.

    Every method returns the decoded JSON body. Non-2xx responses raise
    UpstreamStatusError; transport failures raise UpstreamError. No auth
    header is sent yet; the upstream API is open.

    Usage:
        async with IntelligenceClient("https://podinsight-api.vercel.app") as api:
            matches = await api.find_episodes_with_intelligence()
    """

    def __init__(
        self,
        base_url: str,
        http: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.base_url = base_url.rstrip("/")
        self._owns_http = http is None
        self._http = http or httpx.AsyncClient(timeout=timeout, headers=JSON_HEADERS)

    async def __aenter__(self) -> "IntelligenceClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        url = f"{self.base_url}{path}"
        kwargs.setdefault("headers", JSON_HEADERS)
        try:
            response = await self._http.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise UpstreamError(f"{method} {url} failed: {e}") from e

        if response.is_error:
            raise UpstreamStatusError(url, response.status_code, response.reason_phrase)

        try:
            return response.json()
        except ValueError as e:
            raise UpstreamError(f"{method} {url} returned invalid JSON") from e

    # ── Intelligence ─────────────────────────────────────

    async def get_dashboard(self, limit: int = 8) -> dict:
        return await self._request("GET", "/api/intelligence/dashboard", params={"limit": limit})

    async def find_episodes_with_intelligence(self) -> dict:
        return await self._request("GET", "/api/intelligence/find-episodes-with-intelligence")

    async def get_brief(self, episode_id: str) -> dict:
        return await self._request("GET", f"/api/intelligence/brief/{episode_id}")

    async def share(self, payload: dict) -> dict:
        return await self._request("POST", "/api/intelligence/share", json=payload)

    # ── Analytics ────────────────────────────────────────

    async def get_topic_velocity(self, weeks: int = 12, topics: list[str] | None = None) -> dict:
        return await self._request("GET", "/api/topic-velocity", params=_analytics_params(weeks, topics))

    async def get_sentiment_analysis(self, weeks: int = 12, topics: list[str] | None = None) -> dict:
        return await self._request("GET", "/api/sentiment_analysis_v2", params=_analytics_params(weeks, topics))

    async def get_signals(self) -> dict:
        return await self._request("GET", "/api/signals")

    # ── Search ───────────────────────────────────────────

    async def search(self, query: str, limit: int = 10, offset: int = 0, timeout: float | None = None) -> dict:
        """Search can outlast the client-wide timeout, so it carries its own.

        timeout=None lifts the httpx deadline entirely; the caller must bound
        the call itself (proxy_search wraps it in asyncio.wait_for).
        """
        return await self._request(
            "POST",
            "/api/search",
            json={"query": query, "limit": limit, "offset": offset},
            timeout=timeout,
        )


def _analytics_params(weeks: int, topics: list[str] | None) -> dict:
    params: dict = {"weeks": str(weeks)}
    if topics:
        params["topics"] = ",".join(topics)
    return params
