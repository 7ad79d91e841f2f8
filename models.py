"""Pydantic records exchanged with the upstream intelligence API and the UI."""

from datetime import datetime, timezone
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ── Intelligence ─────────────────────────────────────────

class Signal(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: str = ""
    content: str = ""
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    timestamp: Optional[float] = None


class EpisodeBrief(BaseModel):
    model_config = ConfigDict(extra="allow")

    episode_id: str
    title: str
    podcast_name: str
    published_at: str
    duration_seconds: float
    relevance_score: float = Field(ge=0.0, le=1.0)
    signals: list[Signal] = Field(default_factory=list)
    summary: str = ""
    key_insights: list[str] = Field(default_factory=list)
    audio_url: Optional[str] = None


class DashboardResponse(BaseModel):
    episodes: list[EpisodeBrief] = Field(default_factory=list)
    total_episodes: int = 0
    generated_at: str = Field(default_factory=utc_now_iso)

    @classmethod
    def from_episodes(cls, episodes: list[EpisodeBrief]) -> "DashboardResponse":
        return cls(episodes=episodes, total_episodes=len(episodes), generated_at=utc_now_iso())


class DiscoveredEpisode(BaseModel):
    """One match from the find-episodes-with-intelligence endpoint."""

    model_config = ConfigDict(extra="allow")

    episode_id_in_intelligence: str
    title: str = ""
    has_signals: bool = False


# ── Analytics ────────────────────────────────────────────

class TopicDataPoint(BaseModel):
    week: str
    mentions: int
    date: str


class TopicVelocityData(BaseModel):
    model_config = ConfigDict(extra="allow")

    data: dict[str, list[TopicDataPoint]]
    metadata: dict = Field(default_factory=dict)


class SentimentPoint(BaseModel):
    topic: str
    week: str
    sentiment: float = Field(ge=-1.0, le=1.0)
    episodeCount: int


class SentimentAnalysisResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    success: bool = True
    data: list[SentimentPoint] = Field(default_factory=list)
    metadata: dict = Field(default_factory=dict)


# ── Search & share ───────────────────────────────────────

class SearchRequest(BaseModel):
    query: str
    limit: int = 10
    offset: int = 0


class ShareRequest(BaseModel):
    episode_id: str
    method: Literal["email", "slack"]
    recipient: str
    include_summary: bool = True
    personal_note: Optional[str] = None


class ShareResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    success: bool
    message: str
    shared_at: str


class DataModeUpdate(BaseModel):
    is_live: bool
