"""Locally generated data served in demo mode."""

from mocks.intelligence import mock_dashboard, mock_episode_brief, mock_episodes, mock_signals
from mocks.search import mock_search
from mocks.sentiment import mock_sentiment_analysis
from mocks.topic_velocity import DEFAULT_TOPICS, generate_topic_velocity

__all__ = [
    "DEFAULT_TOPICS",
    "generate_topic_velocity",
    "mock_dashboard",
    "mock_episode_brief",
    "mock_episodes",
    "mock_search",
    "mock_sentiment_analysis",
    "mock_signals",
]
