import asyncio

import httpx
import pytest

import routes
from conftest import make_brief, make_matches
from config import settings
from data_mode import DataMode, DataModeContext
from main import app
from queries.client import QueryClient
from search_cache import SearchCache


async def _park(delay):
    await asyncio.Event().wait()


class Upstream:
    """Handler whose responses tests swap in per path."""

    def __init__(self):
        self.routes: dict[str, object] = {}
        self.requests: list[httpx.Request] = []

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        for prefix, respond in self.routes.items():
            if request.url.path.startswith(prefix):
                result = respond(request)
                if asyncio.iscoroutine(result):
                    result = await result
                return result
        return httpx.Response(404)


@pytest.fixture
def upstream() -> Upstream:
    return Upstream()


@pytest.fixture
def services(upstream, make_api, clock):
    query_client = QueryClient(clock=clock, sleep=_park)
    data_mode = DataModeContext(DataMode.DEMO)
    routes.set_services(make_api(upstream), query_client, SearchCache(clock=clock), data_mode)
    yield data_mode
    query_client.unwatch_all()
    routes._api = routes._query_client = routes._search_cache = routes._data_mode = None


@pytest.fixture
def http(services) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test")


# ---------------------------------------------------------------------------
# Dashboard proxy
# ---------------------------------------------------------------------------


class TestDashboardProxy:
    @pytest.mark.asyncio
    async def test_aggregates_first_eight_episodes(self, http, upstream):
        upstream.routes["/api/intelligence/find-episodes-with-intelligence"] = (
            lambda r: httpx.Response(200, json=make_matches(10))
        )
        upstream.routes["/api/intelligence/brief/"] = (
            lambda r: httpx.Response(200, json=make_brief(r.url.path.rsplit("/", 1)[-1]))
        )

        response = await http.get("/api/intelligence/dashboard-proxy")

        assert response.status_code == 200
        body = response.json()
        assert body["total_episodes"] == 8
        assert [e["episode_id"] for e in body["episodes"]] == [f"ep-{i}" for i in range(1, 9)]
        assert body["generated_at"]

    @pytest.mark.asyncio
    async def test_discovery_failure_is_500_with_details(self, http, upstream):
        upstream.routes["/api/intelligence/find-episodes-with-intelligence"] = lambda r: httpx.Response(503)

        response = await http.get("/api/intelligence/dashboard-proxy")

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "Failed to fetch dashboard data"
        assert "Service Unavailable" in body["details"]


# ---------------------------------------------------------------------------
# Search proxy
# ---------------------------------------------------------------------------


class TestSearchProxy:
    @pytest.mark.asyncio
    async def test_success_passes_body_through(self, http, upstream):
        upstream.routes["/api/search"] = lambda r: httpx.Response(200, json={"answer": None, "results": [1, 2]})

        response = await http.post("/api/search", json={"query": "AI agents"})

        assert response.status_code == 200
        assert response.json() == {"answer": None, "results": [1, 2]}

    @pytest.mark.asyncio
    async def test_timeout_is_504(self, http, upstream, monkeypatch):
        async def slow(request):
            await asyncio.sleep(5)
            return httpx.Response(200, json={})

        upstream.routes["/api/search"] = slow
        monkeypatch.setattr(settings, "search_timeout_seconds", 0.05)

        response = await http.post("/api/search", json={"query": "slow"})

        assert response.status_code == 504
        assert response.json() == {"error": "Search took too long. The AI might be processing. Please try again."}

    @pytest.mark.asyncio
    async def test_upstream_failure_is_500(self, http, upstream):
        upstream.routes["/api/search"] = lambda r: httpx.Response(500)

        response = await http.post("/api/search", json={"query": "broken"})

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to fetch search results"}

    @pytest.mark.asyncio
    async def test_missing_query_is_rejected(self, http):
        response = await http.post("/api/search", json={"limit": 5})

        assert response.status_code == 422


# ---------------------------------------------------------------------------
# Data mode
# ---------------------------------------------------------------------------


class TestDataMode:
    @pytest.mark.asyncio
    async def test_get_and_toggle(self, http):
        assert (await http.get("/api/data-mode")).json() == {"mode": "demo", "is_live": False}

        toggled = await http.post("/api/data-mode/toggle")
        assert toggled.json() == {"mode": "live", "is_live": True}

        again = await http.post("/api/data-mode/toggle")
        assert again.json() == {"mode": "demo", "is_live": False}

    @pytest.mark.asyncio
    async def test_put_sets_mode(self, http, services):
        response = await http.put("/api/data-mode", json={"is_live": True})

        assert response.json()["is_live"] is True
        assert services.is_live

    @pytest.mark.asyncio
    async def test_switching_to_demo_stops_polling(self, http, upstream):
        upstream.routes["/api/signals"] = lambda r: httpx.Response(200, json={"signals": []})
        await http.put("/api/data-mode", json={"is_live": True})
        await http.get("/api/data/signals")
        assert routes._query_client.active_watchers == 1

        await http.put("/api/data-mode", json={"is_live": False})

        assert routes._query_client.active_watchers == 0

    @pytest.mark.asyncio
    async def test_debug_env_reports_settings(self, http):
        body = (await http.get("/api/debug-env")).json()

        assert body["API_URL"] == settings.api_url
        assert body["USE_MOCK_DATA"] == settings.use_mock_data
        assert body["ENVIRONMENT"] == settings.environment


# ---------------------------------------------------------------------------
# Resource endpoints
# ---------------------------------------------------------------------------


class TestResources:
    @pytest.mark.asyncio
    async def test_demo_topic_velocity(self, http, upstream):
        response = await http.get("/api/data/topic-velocity", params={"weeks": 4, "topics": "AI Agents, DePIN"})

        assert response.status_code == 200
        body = response.json()
        assert body["mode"] == "demo"
        assert not body["is_error"]
        assert set(body["data"]["data"]) == {"AI Agents", "DePIN"}
        assert upstream.requests == []

    @pytest.mark.asyncio
    async def test_weeks_out_of_range_is_rejected(self, http):
        response = await http.get("/api/data/sentiment", params={"weeks": 0})

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_demo_sentiment(self, http):
        body = (await http.get("/api/data/sentiment", params={"weeks": 3})).json()

        weeks = {point["week"] for point in body["data"]["data"]}
        assert body["data"]["success"] is True
        assert len(weeks) == 3

    @pytest.mark.asyncio
    async def test_demo_dashboard_and_cards(self, http):
        dashboard = (await http.get("/api/data/dashboard")).json()
        assert dashboard["data"]["total_episodes"] == 4

        cards = (await http.get("/api/data/cards")).json()["data"]
        assert cards["type"] == "intelligence_cards"
        assert [c["key"] for c in cards["cards"]] == [
            "market_signals", "deal_intelligence", "portfolio_pulse", "executive_brief",
        ]

    @pytest.mark.asyncio
    async def test_live_failure_with_nothing_cached_is_502(self, http, upstream, services, monkeypatch):
        async def skip_backoff(delay):
            if delay >= 60:  # polling interval
                await asyncio.Event().wait()

        monkeypatch.setattr(routes._query_client, "_sleep", skip_backoff)
        upstream.routes["/api/signals"] = lambda r: httpx.Response(500)
        services.set_live(True)

        response = await http.get("/api/data/signals")

        assert response.status_code == 502
        body = response.json()
        assert body["is_error"] is True
        assert body["data"] is None
        assert body["mode"] == "live"

    @pytest.mark.asyncio
    async def test_cached_search_in_demo(self, http, upstream):
        response = await http.post("/api/data/search", json={"query": "venture capital valuations"})

        assert response.status_code == 200
        assert response.json()["processing_time_ms"] == 2133
        assert upstream.requests == []


# ---------------------------------------------------------------------------
# Episodes & sharing
# ---------------------------------------------------------------------------


class TestEpisodes:
    @pytest.mark.asyncio
    async def test_demo_brief(self, http):
        response = await http.get("/api/episodes/mock-003/brief")

        assert response.status_code == 200
        assert response.json()["podcast_name"] == "Bankless"

    @pytest.mark.asyncio
    async def test_unknown_demo_brief_is_404(self, http):
        response = await http.get("/api/episodes/missing/brief")

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_live_brief_404_passes_through(self, http, upstream, services):
        upstream.routes["/api/intelligence/brief/"] = lambda r: httpx.Response(404)
        services.set_live(True)

        response = await http.get("/api/episodes/ep-1/brief")

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_live_brief_server_error_is_502(self, http, upstream, services):
        upstream.routes["/api/intelligence/brief/"] = lambda r: httpx.Response(500)
        services.set_live(True)

        response = await http.get("/api/episodes/ep-1/brief")

        assert response.status_code == 502

    @pytest.mark.asyncio
    async def test_share_in_demo(self, http):
        response = await http.post(
            "/api/intelligence/share",
            json={"episode_id": "mock-001", "method": "email", "recipient": "partner@fund.vc"},
        )

        assert response.status_code == 200
        assert response.json()["success"] is True

    @pytest.mark.asyncio
    async def test_share_rejects_unknown_method(self, http):
        response = await http.post(
            "/api/intelligence/share",
            json={"episode_id": "mock-001", "method": "fax", "recipient": "x"},
        )

        assert response.status_code == 422


class TestHealth:
    @pytest.mark.asyncio
    async def test_health_reports_mode(self, http):
        response = await http.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok", "mode": "demo", "is_live": False}


@pytest.mark.asyncio
async def test_routes_fail_fast_before_startup():
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/api/data-mode")

    assert response.status_code == 503
