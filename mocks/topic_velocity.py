"""Generated topic velocity series for demo mode."""

import random
from datetime import datetime, timedelta, timezone

from models import TopicDataPoint, TopicVelocityData

DEFAULT_TOPICS = ["AI Agents", "Capital Efficiency", "DePIN", "B2B SaaS", "Crypto/Web3"]

# Base mentions, weekly growth rate and volatility (percent) per topic
TOPIC_PROFILES = {
    "AI Agents": {"base": 30, "growth": 0.15, "volatility": 5},  # High growth
    "Capital Efficiency": {"base": 45, "growth": -0.02, "volatility": 3},  # Declining
    "DePIN": {"base": 15, "growth": 0.25, "volatility": 8},  # Explosive growth
    "B2B SaaS": {"base": 35, "growth": 0.08, "volatility": 4},  # Steady growth
    "Crypto/Web3": {"base": 25, "growth": 0.05, "volatility": 10},  # Volatile
}

MIN_MENTIONS = 5
MAX_MENTIONS = 100
SERIES_YEAR = 2024
DEMO_SEED = 2024


def generate_topic_velocity(
    weeks: int = 12,
    topics: list[str] | None = None,
    seed: int = DEMO_SEED,
) -> TopicVelocityData:
    """Build a weeks-long mention series per topic, oldest week first.

    Seeded so the demo shows the same chart on every refresh.
    """
    rng = random.Random(seed)
    topics = [t for t in (topics or DEFAULT_TOPICS) if t in TOPIC_PROFILES]

    data: dict[str, list[TopicDataPoint]] = {}
    for topic in topics:
        profile = TOPIC_PROFILES[topic]
        series = []
        for week_num in range(1, weeks + 1):
            growth_factor = (1 + profile["growth"]) ** (week_num - 1)
            random_factor = 1 + (rng.random() - 0.5) * profile["volatility"] / 100
            value = round(profile["base"] * growth_factor * random_factor)
            week_start = datetime(SERIES_YEAR, 1, 1, tzinfo=timezone.utc) + timedelta(days=(week_num - 1) * 7)
            series.append(TopicDataPoint(
                week=f"{SERIES_YEAR}-W{week_num:02d}",
                mentions=max(MIN_MENTIONS, min(MAX_MENTIONS, value)),
                date=week_start.isoformat(),
            ))
        data[topic] = series

    return TopicVelocityData(
        data=data,
        metadata={
            "total_episodes": 0,
            "date_range": f"{SERIES_YEAR}-W01 to {SERIES_YEAR}-W{weeks:02d}" if weeks else "",
            "data_completeness": "demo",
            "weeks": weeks,
            "topics": topics,
            "generated_at": datetime.now(timezone.utc).isoformat(),
            "data_source": "podcast_transcripts",
        },
    )
