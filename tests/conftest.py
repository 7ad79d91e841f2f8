import os

import httpx
import pytest

os.environ.setdefault("USE_MOCK_DATA", "true")
os.environ.setdefault("API_URL", "http://upstream.test")
os.environ.setdefault("BASIC_AUTH_PASSWORD", "")
os.environ.setdefault("ENVIRONMENT", "test")

from upstream.client import IntelligenceClient  # noqa: E402

UPSTREAM_URL = "http://upstream.test"


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingSleep:
    """Stand-in for asyncio.sleep that returns at once and records delays."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def make_brief(episode_id: str, **overrides) -> dict:
    brief = {
        "episode_id": episode_id,
        "title": f"Episode {episode_id}",
        "podcast_name": "All-In Podcast",
        "published_at": "2025-01-15T10:00:00+00:00",
        "duration_seconds": 3600,
        "relevance_score": 0.9,
        "signals": [
            {"type": "investable", "content": f"Signal from {episode_id}", "confidence": 0.8, "timestamp": 1000},
        ],
        "summary": f"Summary of {episode_id}",
        "key_insights": ["insight"],
        "audio_url": f"https://audio.test/{episode_id}.mp3",
    }
    brief.update(overrides)
    return brief


def make_matches(count: int) -> dict:
    return {
        "matches": [
            {"episode_id_in_intelligence": f"ep-{i}", "title": f"Discovered {i}", "has_signals": True}
            for i in range(1, count + 1)
        ]
    }


@pytest.fixture
def make_api():
    """Factory for an IntelligenceClient whose transport is the given handler."""
    def _make(handler) -> IntelligenceClient:
        http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return IntelligenceClient(UPSTREAM_URL, http=http)

    return _make


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fake_sleep() -> RecordingSleep:
    return RecordingSleep()
