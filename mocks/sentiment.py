"""Generated sentiment heatmap data for demo mode."""

import math
import random

from mocks.topic_velocity import DEFAULT_TOPICS, DEMO_SEED
from models import SentimentAnalysisResponse, SentimentPoint, utc_now_iso

MOCK_WEEKS = 12


def _topic_sentiment(topic: str, week_num: int, weeks: int, rng: random.Random) -> float:
    noise = rng.random() - 0.5
    if topic == "AI Agents":
        # Generally positive and increasing
        return 0.3 + (week_num / weeks) * 0.3 + noise * 0.2
    if topic == "Capital Efficiency":
        # Declining
        return 0.4 - (week_num / weeks) * 0.3 + noise * 0.2
    if topic == "DePIN":
        # Volatile
        return math.sin(week_num / 2) * 0.5 + noise * 0.3
    if topic == "B2B SaaS":
        # Stable positive
        return 0.4 + noise * 0.2
    if topic == "Crypto/Web3":
        # Recovering from negative
        return -0.3 + (week_num / weeks) * 0.6 + noise * 0.3
    return noise * 0.8


def generate_sentiment_points(
    weeks: int = MOCK_WEEKS,
    topics: list[str] | None = None,
    seed: int = DEMO_SEED,
) -> list[SentimentPoint]:
    """Sentiment per topic per week, weeks labelled W1..Wn for the heatmap."""
    rng = random.Random(seed)
    topics = topics or DEFAULT_TOPICS
    points = []
    for week_num in range(1, weeks + 1):
        for topic in topics:
            sentiment = _topic_sentiment(topic, week_num, weeks, rng)
            points.append(SentimentPoint(
                topic=topic,
                week=f"W{week_num}",
                sentiment=max(-1.0, min(1.0, sentiment)),
                episodeCount=rng.randint(5, 24),
            ))
    return points


# Pre-generated so every demo request filters the same series
MOCK_SENTIMENT_POINTS = generate_sentiment_points()


def mock_sentiment_analysis(weeks: int = 12, topics: list[str] | None = None) -> SentimentAnalysisResponse:
    """Filter the pre-generated series down to the requested weeks and topics."""
    topics_to_use = topics or DEFAULT_TOPICS
    data = [
        point for point in MOCK_SENTIMENT_POINTS
        if int(point.week[1:]) <= weeks and point.topic in topics_to_use
    ]
    return SentimentAnalysisResponse(
        success=True,
        data=data,
        metadata={
            "weeks": weeks,
            "topics": topics_to_use,
            "generated_at": utc_now_iso(),
        },
    )
