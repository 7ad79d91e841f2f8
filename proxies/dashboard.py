"""Dashboard aggregation proxy.

The upstream /api/intelligence/dashboard endpoint currently returns an empty
payload, so the dashboard is rebuilt from two other endpoints:

1. discover which episodes have intelligence data
2. fetch a brief for each of the first N of them, concurrently
3. keep the briefs that came back, drop the ones that failed
"""

import asyncio
import logging

from pydantic import ValidationError

from models import DashboardResponse, DiscoveredEpisode, EpisodeBrief, Signal, utc_now_iso
from upstream.base import DiscoveryError, UpstreamError
from upstream.client import IntelligenceClient

logger = logging.getLogger(__name__)

DASHBOARD_EPISODE_LIMIT = 8

# Applied when a brief is missing the field or carries a falsy value.
BRIEF_DEFAULTS = {
    "podcast_name": "Unknown Podcast",
    "duration_seconds": 0,
    "relevance_score": 0.5,
    "summary": "",
    "audio_url": "",
}


async def discover_episodes(api: IntelligenceClient) -> list[DiscoveredEpisode]:
    """Return the episodes the upstream reports as having intelligence, in upstream order."""
    try:
        payload = await api.find_episodes_with_intelligence()
    except UpstreamError as e:
        logger.error("Episode discovery failed: %s", e)
        raise DiscoveryError(f"Failed to fetch episode list: {_status_text(e)}") from e

    matches = []
    if isinstance(payload, dict):
        matches = payload.get("matches") or []
    episodes = []
    for match in matches:
        try:
            episodes.append(DiscoveredEpisode.model_validate(match))
        except ValidationError:
            logger.warning("Skipping malformed discovery match: %r", match)
    logger.info("Found %d episodes with intelligence", len(episodes))
    return episodes


async def _fetch_brief(api: IntelligenceClient, episode_id: str) -> dict | None:
    """Fetch one brief. Any failure resolves to None so the batch keeps going."""
    try:
        brief = await api.get_brief(episode_id)
    except UpstreamError as e:
        logger.warning("Error fetching brief for %s: %s", episode_id, e)
        return None
    if not isinstance(brief, dict):
        logger.warning("Non-object brief for %s: %r", episode_id, brief)
        return None
    return brief


def normalize_brief(brief: dict, episode: DiscoveredEpisode, now: str | None = None) -> EpisodeBrief:
    """Fill gaps in an upstream brief with the documented defaults."""
    now = now or utc_now_iso()
    record = {
        **brief,
        "episode_id": brief.get("episode_id") or episode.episode_id_in_intelligence,
        "title": brief.get("title") or episode.title,
        "published_at": brief.get("published_at") or now,
        "signals": _valid_signals(brief.get("signals"), episode.episode_id_in_intelligence),
        "key_insights": brief.get("key_insights") or [],
    }
    for field, default in BRIEF_DEFAULTS.items():
        record[field] = brief.get(field) or default
    return EpisodeBrief.model_validate(record)


def _valid_signals(raw, episode_id: str) -> list[Signal]:
    """Keep the signals that validate; a bad signal never costs the whole brief."""
    if not isinstance(raw, list):
        return []
    signals = []
    for item in raw:
        try:
            signals.append(Signal.model_validate(item))
        except ValidationError:
            logger.warning("Dropping malformed signal for %s: %r", episode_id, item)
    return signals


async def build_dashboard(
    api: IntelligenceClient,
    limit: int = DASHBOARD_EPISODE_LIMIT,
) -> DashboardResponse:
    """Re-derive the dashboard payload from discovery plus per-episode briefs.

    Only a discovery failure raises (DiscoveryError). Individual brief failures
    are absorbed: the episode is dropped and the rest are returned in discovery
    order. total_episodes counts what was assembled, not what was discovered.
    """
    discovered = await discover_episodes(api)
    if not discovered:
        return DashboardResponse.from_episodes([])

    selected = discovered[:limit]
    logger.info("Fetching %d episode briefs", len(selected))

    results = await asyncio.gather(
        *[_fetch_brief(api, ep.episode_id_in_intelligence) for ep in selected],
        return_exceptions=True,
    )

    now = utc_now_iso()
    episodes: list[EpisodeBrief] = []
    for episode, result in zip(selected, results):
        if isinstance(result, BaseException):
            logger.error("Brief task for %s raised: %s", episode.episode_id_in_intelligence, result)
            continue
        if result is None:
            continue
        try:
            episodes.append(normalize_brief(result, episode, now=now))
        except ValidationError as e:
            logger.warning("Dropping malformed brief for %s: %s", episode.episode_id_in_intelligence, e)

    logger.info("Successfully loaded %d/%d episodes", len(episodes), len(selected))
    return DashboardResponse.from_episodes(episodes)


def _status_text(error: UpstreamError) -> str:
    reason = getattr(error, "reason", "")
    return reason or str(error)
