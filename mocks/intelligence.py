"""Demo-mode dashboard episodes and briefs."""

from datetime import datetime, timedelta, timezone

from models import DashboardResponse, EpisodeBrief

DAY_SECONDS = 86400

_MOCK_EPISODES = [
    {
        "episode_id": "mock-001",
        "title": "The Future of AI Agents with Sam Altman",
        "podcast_name": "All-In Podcast",
        "age_days": 0,
        "duration_seconds": 5400,
        "relevance_score": 0.95,
        "signals": [
            {
                "type": "investable",
                "content": "OpenAI discussing potential $150B valuation round with major VCs including Thrive Capital",
                "confidence": 0.9,
                "timestamp": 1200000,
            },
            {
                "type": "competitive",
                "content": "Anthropic raised $2B from Google, intensifying AI race",
                "confidence": 0.85,
                "timestamp": 2400000,
            },
        ],
        "summary": "Deep dive into AI agent architectures and the competitive landscape",
        "key_insights": [
            "AI agents will transform enterprise workflows by 2025",
            "Infrastructure layer seeing massive investment",
            "Application layer still nascent",
        ],
    },
    {
        "episode_id": "mock-002",
        "title": "Deconstructing the Perfect Pitch Deck",
        "podcast_name": "20VC",
        "age_days": 1,
        "duration_seconds": 3600,
        "relevance_score": 0.82,
        "signals": [
            {
                "type": "portfolio",
                "content": "Portfolio company Vercel mentioned as example of great developer tools pitch",
                "confidence": 0.9,
                "timestamp": 900000,
            },
            {
                "type": "sound_bite",
                "content": "The best founders sell the problem, not the solution - they make you feel the pain",
                "confidence": 0.88,
                "timestamp": 1800000,
            },
        ],
        "summary": "Harry Stebbings breaks down what makes a compelling pitch deck",
        "key_insights": [
            "Problem slides matter more than solution slides",
            "Traction speaks louder than projections",
            "Team slide should highlight unique insights",
        ],
    },
    {
        "episode_id": "mock-003",
        "title": "DePIN: The Next Crypto Supercycle",
        "podcast_name": "Bankless",
        "age_days": 2,
        "duration_seconds": 4800,
        "relevance_score": 0.78,
        "signals": [
            {
                "type": "investable",
                "content": "Helium hitting $1B market cap signals DePIN sector heating up",
                "confidence": 0.75,
                "timestamp": 600000,
            },
            {
                "type": "sound_bite",
                "content": "DePIN will be bigger than DeFi - it bridges physical and digital worlds",
                "confidence": 0.8,
                "timestamp": 3000000,
            },
        ],
        "summary": "Exploring decentralized physical infrastructure networks",
        "key_insights": [
            "IoT meets crypto in surprising ways",
            "Token incentives solving chicken-egg problems",
            "Regulatory clarity improving in key markets",
        ],
    },
    {
        "episode_id": "mock-004",
        "title": "Inside Stripe's Engineering Culture",
        "podcast_name": "The a16z Podcast",
        "age_days": 3,
        "duration_seconds": 4200,
        "relevance_score": 0.71,
        "signals": [
            {
                "type": "competitive",
                "content": "Stripe processing $1T annually, considering IPO in 2025",
                "confidence": 0.7,
                "timestamp": 1500000,
            },
            {
                "type": "portfolio",
                "content": "Discussion of how portfolio companies can leverage Stripe's new AI tools",
                "confidence": 0.72,
                "timestamp": 2800000,
            },
        ],
        "summary": "Deep dive into how Stripe maintains velocity at scale",
        "key_insights": [
            "Writing culture creates institutional memory",
            "API-first thinking drives product decisions",
            "Developer experience as competitive moat",
        ],
    },
]


def _build_episode(raw: dict, now: datetime) -> EpisodeBrief:
    fields = {k: v for k, v in raw.items() if k != "age_days"}
    published_at = now - timedelta(seconds=raw["age_days"] * DAY_SECONDS)
    return EpisodeBrief(**fields, published_at=published_at.isoformat(), audio_url=None)


def mock_episodes(now: datetime | None = None) -> list[EpisodeBrief]:
    """Demo episodes, newest first, with publish dates relative to now."""
    now = now or datetime.now(timezone.utc)
    return [_build_episode(raw, now) for raw in _MOCK_EPISODES]


def mock_dashboard(now: datetime | None = None) -> DashboardResponse:
    return DashboardResponse.from_episodes(mock_episodes(now))


def mock_episode_brief(episode_id: str) -> EpisodeBrief:
    """Look up a demo brief. Raises KeyError for unknown ids."""
    for episode in mock_episodes():
        if episode.episode_id == episode_id:
            return episode
    raise KeyError(f"Episode not found: {episode_id}")


def mock_signals() -> dict:
    """Signals flattened across demo episodes, tagged with their episode."""
    signals = [
        {
            "episode_id": episode.episode_id,
            "podcast_name": episode.podcast_name,
            **signal.model_dump(),
        }
        for episode in mock_episodes()
        for signal in episode.signals
    ]
    return {"signals": signals, "total": len(signals)}
